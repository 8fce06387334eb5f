"""
Mock event API client for trying the tool without a running backend.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..domain.exceptions import EventAPIError

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_event_data.json"


class MockEventClient:
    """
    Mock client that serves event results from a JSON file.

    The file holds a list of results payloads shaped exactly like the API's
    ``GET /events/{token}/results`` response, each with an extra
    ``public_token`` field used for lookup.
    """

    def __init__(self, data_file: Optional[Path] = None):
        """
        Initialize the mock client.

        Args:
            data_file: JSON file with event payloads (defaults to the bundled sample)
        """
        self.data_file = data_file or DEFAULT_DATA_FILE
        self._load_event_data()

    def _load_event_data(self):
        """Load mock events from the JSON file."""
        if self.data_file.exists():
            with open(self.data_file, "r", encoding="utf-8") as f:
                self.events: List[Dict[str, Any]] = json.load(f)
        else:
            logger.warning("Mock data file %s not found, serving no events", self.data_file)
            self.events = []

    def get_results(self, public_token: str) -> Dict[str, Any]:
        """
        Look up an event's results payload by public token.

        Raises:
            EventAPIError: If no event has that token
        """
        for event in self.events:
            if event.get("public_token") == public_token:
                return event
        raise EventAPIError(f"GET /events/{public_token}/results failed with 404: event not found")

    def tokens(self) -> List[str]:
        """Public tokens of all mock events."""
        return [event["public_token"] for event in self.events if "public_token" in event]
