"""
Tests for the EventResultsService orchestration layer.
"""

from typing import Any, Dict, List

import pendulum
import pytest

from agreedtime.adapters.mock_api_client import MockEventClient
from agreedtime.domain.exceptions import EventAPIError, PayloadError
from agreedtime.services.event_results import EventResults, EventResultsService


class StubEventClient:
    """Minimal stub matching EventClientProtocol."""

    def __init__(self, payload: Dict[str, Any]):
        self._payload = payload
        self.calls: List[str] = []

    def get_results(self, public_token):
        self.calls.append(public_token)
        return self._payload


def _payload(**overrides) -> Dict[str, Any]:
    payload = {
        "id": "evt-1",
        "title": "Planning",
        "slot_duration": 60,
        "total_participants": 2,
        "participants": [
            {
                "id": "p1",
                "name": "Organizer",
                "is_organizer": True,
                "availabilities": [
                    {"start_at": "2025-12-08T09:00:00Z", "end_at": "2025-12-08T11:00:00Z"}
                ],
            },
            {
                "id": "p2",
                "name": "Alice",
                "availabilities": [
                    {"start_at": "2025-12-08T10:00:00Z", "end_at": "2025-12-08T11:00:00Z"}
                ],
            },
        ],
    }
    payload.update(overrides)
    return payload


def test_load_results_aggregates_participants():
    """The service fetches by token and ranks the parsed availability."""
    client = StubEventClient(_payload())
    service = EventResultsService(client=client, tz="UTC")

    view = service.load_results("abc")

    assert client.calls == ["abc"]
    assert view.event.title == "Planning"
    assert view.aggregation.total_participants == 2
    assert [slot.start for slot in view.aggregation.top_picks] == [
        pendulum.datetime(2025, 12, 8, 10, tz="UTC")
    ]
    # 09:00 only has the organizer, so it is not offered as an option.
    assert view.aggregation.other_options == []


def test_event_defaults():
    event = EventResults.from_api({"id": 7, "title": "Lunch"})

    assert event.id == "7"
    assert event.slot_duration == 60
    assert event.participants == []
    assert event.total_participants == 0
    assert event.state == "open"


def test_total_defaults_to_participant_count():
    payload = _payload()
    del payload["total_participants"]

    assert EventResults.from_api(payload).total_participants == 2


def test_slot_duration_drives_aggregation():
    client = StubEventClient(_payload(slot_duration=30))

    view = EventResultsService(client=client, tz="UTC").load_results("abc")

    assert len(view.aggregation.slots) == 4


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "Missing id"},
        {"id": "1", "title": "Bad slots", "slot_duration": "sixty"},
        {"id": "1", "title": "Bad range", "participants": [{"name": "A", "availabilities": [{"start_at": "x", "end_at": "y"}]}]},
        {"id": "1", "title": "Nameless", "participants": [{"availabilities": []}]},
    ],
)
def test_malformed_payload_raises(payload):
    service = EventResultsService(client=StubEventClient(payload), tz="UTC")

    with pytest.raises(PayloadError):
        service.load_results("abc")


def test_mock_client_demo_event():
    """The bundled demo event ranks the shared morning slot first."""
    service = EventResultsService(client=MockEventClient(), tz="UTC")

    view = service.load_results("demo")

    aggregation = view.aggregation
    assert aggregation.max_count == 3
    assert [slot.start for slot in aggregation.top_picks] == [
        pendulum.datetime(2025, 12, 8, 9, tz="UTC")
    ]
    assert [(slot.start.day, slot.start.hour, slot.count) for slot in aggregation.other_options] == [
        (8, 10, 2),
        (10, 15, 1),
    ]


def test_mock_client_solo_event():
    view = EventResultsService(client=MockEventClient(), tz="UTC").load_results("solo")

    assert view.aggregation.is_organizer_only
    assert view.event.slot_duration == 30


def test_mock_client_unknown_token():
    client = MockEventClient()

    assert set(client.tokens()) == {"demo", "solo"}
    with pytest.raises(EventAPIError, match="404"):
        client.get_results("nope")


def test_mock_client_missing_data_file(tmp_path, caplog):
    with caplog.at_level("WARNING"):
        client = MockEventClient(tmp_path / "absent.json")

    assert client.tokens() == []
    assert "not found" in caplog.text
