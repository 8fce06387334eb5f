"""
Tests for domain models.
"""

import pendulum
import pytest

from agreedtime.domain.models import AggregatedSlot, CellKey, ParticipantAvailability, TimeRange


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_valid_time_range(self):
        """Test creating a valid time range."""
        start = pendulum.parse("2025-12-08T09:00:00Z")
        end = pendulum.parse("2025-12-08T10:00:00Z")

        time_range = TimeRange(start=start, end=end)

        assert time_range.start == start
        assert time_range.end == end
        assert time_range.duration_minutes() == 60

    def test_invalid_time_range(self):
        """Test that start must be before end."""
        start = pendulum.parse("2025-12-08T10:00:00Z")
        end = pendulum.parse("2025-12-08T09:00:00Z")

        with pytest.raises(ValueError, match="must be before end time"):
            TimeRange(start=start, end=end)

    def test_empty_range_rejected(self):
        instant = pendulum.parse("2025-12-08T10:00:00Z")
        with pytest.raises(ValueError):
            TimeRange(start=instant, end=instant)

    def test_to_api_is_utc(self):
        """Wire form is always UTC with a Z suffix."""
        time_range = TimeRange(
            start=pendulum.parse("2025-12-08 09:00", tz="Europe/Berlin"),
            end=pendulum.parse("2025-12-08 11:00", tz="Europe/Berlin"),
        )

        assert time_range.to_api() == {
            "start_at": "2025-12-08T08:00:00Z",
            "end_at": "2025-12-08T10:00:00Z",
        }

    def test_from_api_normalises_offsets(self):
        """Offsets other than Z are accepted and normalised to UTC."""
        time_range = TimeRange.from_api(
            {"start_at": "2025-12-08T09:00:00+01:00", "end_at": "2025-12-08T10:30:00+01:00"}
        )

        assert time_range.start == pendulum.datetime(2025, 12, 8, 8, 0, tz="UTC")
        assert time_range.start.timezone_name == "UTC"
        assert time_range.duration_minutes() == 90

    def test_from_api_rejects_garbage(self):
        with pytest.raises(ValueError):
            TimeRange.from_api({"start_at": "not a date", "end_at": "2025-12-08T10:00:00Z"})

    def test_from_api_missing_field(self):
        with pytest.raises(KeyError):
            TimeRange.from_api({"start_at": "2025-12-08T09:00:00Z"})


class TestCellKey:
    """Tests for CellKey model."""

    def test_from_hour(self):
        assert CellKey.from_hour("2025-12-08", 9) == CellKey("2025-12-08", 540)
        assert CellKey.from_hour("2025-12-08", 9.5) == CellKey("2025-12-08", 570)

    def test_parse(self):
        assert CellKey.parse("2025-12-08_9") == CellKey("2025-12-08", 540)
        assert CellKey.parse("2025-12-08_13.25") == CellKey("2025-12-08", 795)

    def test_parse_requires_hour(self):
        with pytest.raises(ValueError):
            CellKey.parse("2025-12-08")

    def test_minute_must_fit_in_day(self):
        with pytest.raises(ValueError):
            CellKey("2025-12-08", 1440)
        with pytest.raises(ValueError):
            CellKey("2025-12-08", -30)

    def test_string_form(self):
        assert str(CellKey("2025-12-08", 540)) == "2025-12-08_9"
        assert str(CellKey("2025-12-08", 570)) == "2025-12-08_9.5"
        assert str(CellKey.parse("2025-12-08_0")) == "2025-12-08_0"

    def test_hour_property(self):
        assert CellKey("2025-12-08", 615).hour == 10.25

    def test_ordering(self):
        """Keys sort by date first, then by minute."""
        keys = [
            CellKey("2025-12-09", 540),
            CellKey("2025-12-08", 600),
            CellKey("2025-12-08", 540),
        ]
        assert sorted(keys) == [
            CellKey("2025-12-08", 540),
            CellKey("2025-12-08", 600),
            CellKey("2025-12-09", 540),
        ]

    def test_hashable(self):
        assert len({CellKey("2025-12-08", 540), CellKey.parse("2025-12-08_9")}) == 1


class TestParticipantAvailability:
    """Tests for ParticipantAvailability parsing."""

    def test_from_api(self):
        participant = ParticipantAvailability.from_api(
            {
                "id": 42,
                "name": "Alice",
                "is_organizer": False,
                "comment": "Prefer mornings",
                "availabilities": [
                    {"start_at": "2025-12-08T09:00:00Z", "end_at": "2025-12-08T11:00:00Z"}
                ],
            }
        )

        assert participant.name == "Alice"
        assert participant.participant_id == "42"
        assert participant.comment == "Prefer mornings"
        assert len(participant.availabilities) == 1
        assert participant.availabilities[0].duration_minutes() == 120

    def test_from_api_defaults(self):
        participant = ParticipantAvailability.from_api({"name": "Bob"})

        assert participant.is_organizer is False
        assert participant.availabilities == []
        assert participant.comment is None
        assert participant.participant_id is None


class TestAggregatedSlot:
    """Tests for AggregatedSlot display."""

    def test_format_display_in_local_time(self):
        slot = AggregatedSlot(
            start=pendulum.datetime(2025, 12, 8, 8, tz="UTC"),
            cell=CellKey.from_hour("2025-12-08", 9),
            count=2,
        )

        assert slot.format_display(60, "Europe/Berlin") == "Monday, Dec 8, 2025 | 09:00 - 10:00"

    def test_format_display_short_slot(self):
        slot = AggregatedSlot(
            start=pendulum.datetime(2025, 12, 9, 14, 30, tz="UTC"),
            cell=CellKey.parse("2025-12-09_14.5"),
        )

        assert slot.format_display(30) == "Tuesday, Dec 9, 2025 | 14:30 - 15:00"
