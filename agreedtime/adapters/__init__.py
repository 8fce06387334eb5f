"""
Adapters layer - External integrations (remote event API).
"""

from .api_client import EventAPIClient
from .mock_api_client import MockEventClient

__all__ = ["EventAPIClient", "MockEventClient"]
