"""Feed state - Pure data structures and transitions.

FeedState holds the authoritative event set. Fetch results are applied
through complete_fetch() only; consumers get immutable snapshots.

Every fetch is tagged with a sequence number from begin_fetch(). A
completion older than the newest one already applied is rejected, so a
slow earlier fetch can never overwrite a newer event set.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from src.core.earthquake import Earthquake


# The feed is refreshed on this fixed interval
REFRESH_INTERVAL_SECONDS = 300


class FetchErrorKind(str, Enum):
    NETWORK = "network"
    STATUS = "status"


@dataclass(frozen=True)
class FetchError:
    """Why a feed fetch failed.

    Attributes:
        kind: NETWORK for transport failures, STATUS for non-2xx responses
        message: Human-readable cause
        status_code: HTTP status code for STATUS errors
    """
    kind: FetchErrorKind
    message: str
    status_code: int | None = None


@dataclass
class FetchResult:
    """Result of a single feed fetch.

    Attributes:
        success: Whether the feed was fetched and parsed
        earthquakes: Parsed events (empty on failure)
        error: Failure details if not successful
    """
    success: bool
    earthquakes: list[Earthquake] = field(default_factory=list)
    error: FetchError | None = None


class FeedState:
    """Single-writer owner of the ingested event set."""

    def __init__(self) -> None:
        self._earthquakes: tuple[Earthquake, ...] = ()
        self._last_error: FetchError | None = None
        self._last_success_at: datetime | None = None
        self._next_sequence = 0
        self._applied_sequence = -1

    @property
    def last_error(self) -> FetchError | None:
        """Error from the most recent applied fetch, None after a success."""
        return self._last_error

    @property
    def last_success_at(self) -> datetime | None:
        return self._last_success_at

    def snapshot(self) -> tuple[Earthquake, ...]:
        """Return the current event set."""
        return self._earthquakes

    def begin_fetch(self) -> int:
        """Reserve a sequence number for a new fetch."""
        sequence = self._next_sequence
        self._next_sequence += 1
        return sequence

    def complete_fetch(
        self,
        sequence: int,
        result: FetchResult,
        completed_at: datetime,
    ) -> bool:
        """Apply a fetch result.

        A successful result replaces the event set. A failed one records
        the error and keeps the previous set.

        Args:
            sequence: Number returned by begin_fetch() for this fetch
            result: The fetch outcome
            completed_at: When the fetch completed

        Returns:
            True if applied, False if the completion was stale
        """
        if sequence <= self._applied_sequence:
            return False

        self._applied_sequence = sequence

        if result.success:
            self._earthquakes = tuple(result.earthquakes)
            self._last_error = None
            self._last_success_at = completed_at
        else:
            self._last_error = result.error

        return True

    def is_stale(self, now: datetime) -> bool:
        """Whether the refresh interval has elapsed since the last success."""
        if self._last_success_at is None:
            return True
        return now - self._last_success_at >= timedelta(seconds=REFRESH_INTERVAL_SECONDS)
