"""
HTTP client for the remote event API.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from ..domain.exceptions import EventAPIError
from ..domain.models import TimeRange

logger = logging.getLogger(__name__)


class EventAPIClient:
    """
    Client for the event API.

    Ranges are exchanged as {"start_at", "end_at"} UTC ISO-8601 strings. The
    client performs exactly one request per call; retrying is left to the
    caller.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: API root, e.g. "https://example.com/api"
            timeout: Per-request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json"}

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        allow_not_found: bool = False,
    ) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)

        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                json=json,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise EventAPIError(f"Request to {url} failed: {e}") from e

        if allow_not_found and response.status_code == 404:
            return None

        if not response.ok:
            raise EventAPIError(
                f"{method} {path} failed with {response.status_code}: {self._error_message(response)}"
            )

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise EventAPIError(f"Invalid JSON from {url}: {e}") from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.reason or "unknown error"
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or body)
        return str(body)

    def get_event(self, public_token: str) -> Optional[Dict[str, Any]]:
        """Fetch an event by its public token. Returns None if it does not exist."""
        return self._request("GET", f"/events/{public_token}", allow_not_found=True)

    def get_results(self, public_token: str) -> Dict[str, Any]:
        """Fetch every participant's availability for an event."""
        return self._request("GET", f"/events/{public_token}/results") or {}

    def get_organizer_event(self, organizer_token: str) -> Dict[str, Any]:
        return self._request("GET", f"/events/organizer/{organizer_token}") or {}

    def create_event(
        self,
        *,
        title: str,
        organizer_name: str,
        time_slots: Iterable[TimeRange],
        slot_duration: int = 60,
        description: Optional[str] = None,
        time_zone: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create an event offering the given ranges.

        Returns:
            {"id", "public_token", "organizer_token"}
        """
        payload: Dict[str, Any] = {
            "title": title,
            "organizer_name": organizer_name,
            "slot_duration": slot_duration,
            "time_slots": [time_range.to_api() for time_range in time_slots],
        }
        if description:
            payload["description"] = description
        if time_zone:
            payload["time_zone"] = time_zone
        return self._request("POST", "/events", json=payload) or {}

    def submit_availability(
        self,
        public_token: str,
        *,
        participant_name: str,
        availabilities: Iterable[TimeRange],
        comment: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Submit one participant's availability ranges."""
        ranges: List[Dict[str, str]] = [time_range.to_api() for time_range in availabilities]
        payload: Dict[str, Any] = {
            "participant_name": participant_name,
            "availabilities": ranges,
        }
        if comment:
            payload["comment"] = comment
        return self._request("POST", f"/events/{public_token}/availability", json=payload) or {}

    def close_event(self, organizer_token: str) -> Dict[str, Any]:
        return self._request("POST", f"/events/{organizer_token}/close") or {}
