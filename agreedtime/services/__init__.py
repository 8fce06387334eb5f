"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .event_results import EventClientProtocol, EventResults, EventResultsService, EventResultsView
from .time_slot_editor import TimeSlotEditor

__all__ = [
    "EventClientProtocol",
    "EventResults",
    "EventResultsService",
    "EventResultsView",
    "TimeSlotEditor",
]
