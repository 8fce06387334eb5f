"""
Tests for configuration loading.
"""

import pytest

from agreedtime.config import AppConfig, GridDefaults


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        config = AppConfig()

        assert config.api_base_url == "http://localhost:3000"
        assert config.timezone == "local"
        assert config.grid.slot_duration == 60
        assert config.grid.max_weeks == 8
        assert config.gesture.long_press_ms == 500
        assert config.gesture.move_threshold_px == 10.0

    def test_load_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "api_base_url: https://example.com/api/\n"
            "timezone: Europe/Berlin\n"
            "grid:\n"
            "  slot_duration: 30\n"
            "  start_hour: 8\n"
            "  end_hour: 20\n"
            "gesture:\n"
            "  long_press_ms: 400\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(path)

        assert config.api_base_url == "https://example.com/api"
        assert config.timezone == "Europe/Berlin"
        assert config.grid.slot_duration == 30
        assert config.grid.start_hour == 8
        assert config.gesture.long_press_ms == 400
        assert config.gesture.haptic_ms == 50

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("grid: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(path)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(path)

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        assert AppConfig.load_from_yaml(path) == AppConfig()

    def test_load_or_default_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("agreedtime.config.get_default_config_path", lambda: tmp_path / "config.yaml")

        assert AppConfig.load_or_default() == AppConfig()

    def test_load_or_default_explicit_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_or_default(tmp_path / "missing.yaml")


class TestGridDefaults:
    """Tests for GridDefaults validation."""

    def test_hour_out_of_range(self):
        with pytest.raises(ValueError):
            GridDefaults(start_hour=-1)
        with pytest.raises(ValueError):
            GridDefaults(end_hour=25)

    def test_end_before_start(self):
        with pytest.raises(ValueError, match="end_hour"):
            GridDefaults(start_hour=12, end_hour=9)

    def test_slot_duration_bounds(self):
        with pytest.raises(ValueError):
            GridDefaults(slot_duration=0)
        assert GridDefaults(slot_duration=1440).slot_duration == 1440

    def test_default_weeks_cannot_exceed_max(self):
        with pytest.raises(ValueError, match="default_weeks"):
            GridDefaults(max_weeks=2, default_weeks=4)
