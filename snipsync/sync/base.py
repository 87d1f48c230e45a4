"""
Remote client interface.

Every backend (GitHub Gist, GitHub Enterprise Gist, GitLab snippet) must
inherit from RemoteClient and implement fetch_snapshot() and push_snippet().
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone

from snipsync.exceptions import RemoteError


@dataclass
class Snapshot:
    """Remote copy of the primary snippet file."""
    content: str
    updated_at: datetime

    @property
    def updated_at_utc(self) -> datetime:
        """Update time normalized to UTC (naive values are taken as UTC)."""
        if self.updated_at.tzinfo is None:
            return self.updated_at.replace(tzinfo=timezone.utc)
        return self.updated_at.astimezone(timezone.utc)


class RemoteClient(ABC):
    """
    Base class for remote snippet backends.
    """

    # Override in subclasses
    name: str = "remote"

    @abstractmethod
    def fetch_snapshot(self) -> Snapshot:
        """
        Fetch the current remote content.

        Raises:
            RemoteError: If the remote copy cannot be read
        """
        pass

    @abstractmethod
    def push_snippet(self, content: str) -> None:
        """
        Replace the remote content.

        Raises:
            RemoteError: If the upload fails
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name})"


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 API timestamp (e.g. "2024-11-28T10:30:00Z") as UTC.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def decode_json(response, phase: str) -> dict:
    """
    Decode a JSON object from an API response.

    Raises:
        RemoteError: If the body is not a JSON object (e.g. a proxy login page)
    """
    try:
        data = response.json()
    except ValueError as e:
        raise RemoteError(f"API returned a non-JSON response: {e}", phase=phase) from e
    if not isinstance(data, dict):
        raise RemoteError(
            f"API returned {type(data).__name__} where an object was expected",
            phase=phase,
        )
    return data
