"""
Tests for the command line interface, run against the bundled mock events.
"""

import json

import pytest
from typer.testing import CliRunner

from agreedtime import __version__
from agreedtime.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def test_results_shows_best_time():
    result = runner.invoke(app, ["results", "demo", "--mock", "--tz", "UTC"])

    assert result.exit_code == 0
    assert "MOCK MODE" in result.output
    assert "Team offsite planning" in result.output
    assert "GMT+00:00" in result.output
    assert "Best Time" in result.output
    assert "3 / 3 available" in result.output
    assert "Other Options" in result.output


def test_results_waiting_for_participants():
    result = runner.invoke(app, ["results", "solo", "--mock", "--tz", "UTC"])

    assert result.exit_code == 0
    assert "Waiting for participants" in result.output
    assert "Best Time" not in result.output


def test_results_unknown_event():
    result = runner.invoke(app, ["results", "missing", "--mock"])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_heatmap_renders_weeks():
    result = runner.invoke(app, ["heatmap", "demo", "--mock", "--tz", "UTC"])

    assert result.exit_code == 0
    assert "Week 1" in result.output


def test_encode_prints_utc_ranges():
    result = runner.invoke(app, ["encode", "2025-12-08_9", "2025-12-08_10", "--tz", "Europe/Berlin"])

    assert result.exit_code == 0
    assert json.loads(result.output) == [
        {"start_at": "2025-12-08T08:00:00Z", "end_at": "2025-12-08T10:00:00Z"}
    ]


def test_encode_rejects_bad_cell():
    result = runner.invoke(app, ["encode", "2025-12-08", "--tz", "UTC"])

    assert result.exit_code == 1


def test_decode_prints_cells(tmp_path):
    ranges_file = tmp_path / "ranges.json"
    ranges_file.write_text(
        json.dumps([{"start_at": "2025-12-08T09:00:00Z", "end_at": "2025-12-08T10:00:00Z"}]),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["decode", str(ranges_file), "--duration", "30", "--tz", "UTC"])

    assert result.exit_code == 0
    assert result.output.split() == ["2025-12-08_9", "2025-12-08_9.5"]


def test_decode_invalid_file(tmp_path):
    ranges_file = tmp_path / "ranges.json"
    ranges_file.write_text("{not json", encoding="utf-8")

    result = runner.invoke(app, ["decode", str(ranges_file), "--tz", "UTC"])

    assert result.exit_code == 1
    assert "Invalid ranges file" in result.output


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_encode_uses_config_defaults(tmp_path):
    (tmp_path / "config.yaml").write_text(
        "timezone: Europe/Berlin\ngrid:\n  slot_duration: 30\n",
        encoding="utf-8",
    )

    result = runner.invoke(app, ["encode", "2025-12-08_9"])

    assert result.exit_code == 0
    assert json.loads(result.output) == [
        {"start_at": "2025-12-08T08:00:00Z", "end_at": "2025-12-08T08:30:00Z"}
    ]


def test_decode_duration_flag_overrides_config(tmp_path):
    (tmp_path / "config.yaml").write_text("grid:\n  slot_duration: 15\n", encoding="utf-8")
    ranges_file = tmp_path / "ranges.json"
    ranges_file.write_text(
        json.dumps([{"start_at": "2025-12-08T09:00:00Z", "end_at": "2025-12-08T10:00:00Z"}]),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["decode", str(ranges_file), "--duration", "60", "--tz", "UTC"])

    assert result.exit_code == 0
    assert result.output.split() == ["2025-12-08_9"]
