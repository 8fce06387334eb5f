"""
Application service for an event's results view.

The service fetches an event's results through a client adapter, parses the
payload into domain models and delegates the tallying to the domain-level
``AvailabilityAggregator``. The client dependency is a simple protocol so the
HTTP adapter and the JSON mock are interchangeable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol

from ..domain.aggregator import AggregationResult, AvailabilityAggregator
from ..domain.calendar_math import TimezoneLike
from ..domain.exceptions import PayloadError
from ..domain.models import ParticipantAvailability, TimeRange

logger = logging.getLogger(__name__)

DEFAULT_SLOT_DURATION = 60


class EventClientProtocol(Protocol):
    """Protocol describing the event client behaviour needed by the service."""

    def get_results(self, public_token: str) -> Dict[str, Any]:
        """Return the raw results payload for an event."""


@dataclass
class EventResults:
    """Parsed results payload."""
    id: str
    title: str
    slot_duration: int
    participants: List[ParticipantAvailability]
    total_participants: int
    description: str = ""
    state: str = "open"
    time_zone: Optional[str] = None
    event_slots: List[TimeRange] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "EventResults":
        """
        Parse a results payload.

        Raises:
            PayloadError: If required fields are missing or malformed
        """
        try:
            participants = [
                ParticipantAvailability.from_api(item) for item in payload.get("participants") or []
            ]
            total = payload.get("total_participants")
            return cls(
                id=str(payload["id"]),
                title=str(payload["title"]),
                description=payload.get("description") or "",
                slot_duration=int(payload.get("slot_duration") or DEFAULT_SLOT_DURATION),
                state=str(payload.get("state") or "open"),
                time_zone=payload.get("time_zone"),
                event_slots=[TimeRange.from_api(item) for item in payload.get("event_slots") or []],
                participants=participants,
                total_participants=int(total) if total is not None else len(participants),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise PayloadError(f"Malformed results payload: {exc}") from exc


@dataclass
class EventResultsView:
    event: EventResults
    aggregation: AggregationResult


class EventResultsService:
    """
    Orchestrates results retrieval and aggregation.
    """

    def __init__(self, client: EventClientProtocol, tz: TimezoneLike = None) -> None:
        self._client = client
        self._tz = tz

    def load_results(self, public_token: str) -> EventResultsView:
        """Fetch, parse and aggregate an event's results."""
        payload = self._client.get_results(public_token)
        event = EventResults.from_api(payload)
        logger.debug(
            "Loaded results for %s: %d participants, %d-minute slots",
            event.id,
            event.total_participants,
            event.slot_duration,
        )
        return EventResultsView(event=event, aggregation=self.aggregate(event))

    def aggregate(self, event: EventResults) -> AggregationResult:
        aggregator = AvailabilityAggregator(slot_duration=event.slot_duration, tz=self._tz)
        return aggregator.aggregate(event.participants, event.total_participants)
