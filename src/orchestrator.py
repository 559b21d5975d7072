"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components. It owns the process-wide
state (feed, current filters, conversation) and is the only thing that
mutates it.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from src.core.config import Config
from src.core.conversation import (
    Conversation,
    ConversationState,
    ModelCallError,
    ModelCallErrorKind,
    ModelResult,
)
from src.core.earthquake import Earthquake
from src.core.feed import FeedState, FetchError
from src.core.filters import FilterCriteria, apply_filters
from src.core.stats import (
    StatsSummary,
    get_activity_level,
    get_magnitude_class,
    get_significance_level,
    summarize,
    summary_to_dict,
)
from src.shell.gemini_client import GeminiClient
from src.shell.usgs_client import USGSClient


logger = logging.getLogger(__name__)


FEED_ERROR_NOTICE = "Error loading earthquake data"


@dataclass(frozen=True)
class Notification:
    """A one-shot notice for the UI to display.

    Attributes:
        level: 'success' or 'error'
        message: Text to display
    """
    level: str
    message: str


@dataclass
class RefreshResult:
    """Result of one feed refresh.

    Attributes:
        applied: Whether the result replaced the feed state
        earthquakes_fetched: Events in the fetched set (0 on failure)
        error: Fetch failure if any
    """
    applied: bool
    earthquakes_fetched: int = 0
    error: FetchError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class Dashboard:
    """Everything the UI renders, as of one evaluation time."""
    criteria: FilterCriteria
    earthquakes: list[Earthquake]
    stats: StatsSummary
    conversation: ConversationState
    feed_error: FetchError | None = None
    notifications: list[Notification] = field(default_factory=list)

    @property
    def activity_level(self) -> str:
        return get_activity_level(self.stats.recent_count)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def earthquake_to_dict(eq: Earthquake) -> dict[str, Any]:
    """Convert Earthquake dataclass to JSON-serializable dict."""
    return {
        "id": eq.id,
        "magnitude": eq.magnitude,
        "place": eq.place,
        "time": eq.time.isoformat(),
        "latitude": eq.latitude,
        "longitude": eq.longitude,
        "depth_km": eq.depth_km,
        "significance": eq.significance,
        "tsunami": eq.tsunami,
        "url": eq.url,
        "magnitude_class": get_magnitude_class(eq.magnitude),
        "significance_level": get_significance_level(eq.significance),
    }


def conversation_to_dict(state: ConversationState) -> dict[str, Any]:
    """Convert a conversation snapshot to a JSON-serializable dict."""
    return {
        "phase": state.phase.value,
        "pending_request_id": state.pending_request_id,
        "messages": [
            {
                "id": m.id,
                "role": m.role.value,
                "content": m.content,
                "created_at": m.created_at.isoformat(),
            }
            for m in state.messages
        ],
    }


def dashboard_to_dict(dashboard: Dashboard) -> dict[str, Any]:
    """Convert a Dashboard to a JSON-serializable dict."""
    return {
        "filters": {
            "min_magnitude": dashboard.criteria.min_magnitude,
            "time_window": dashboard.criteria.time_window.value,
        },
        "earthquakes": [earthquake_to_dict(e) for e in dashboard.earthquakes],
        "stats": summary_to_dict(dashboard.stats),
        "feed_error": (
            {
                "kind": dashboard.feed_error.kind.value,
                "message": dashboard.feed_error.message,
                "status_code": dashboard.feed_error.status_code,
            }
            if dashboard.feed_error
            else None
        ),
        "notifications": [
            {"level": n.level, "message": n.message}
            for n in dashboard.notifications
        ],
        "conversation": conversation_to_dict(dashboard.conversation),
    }


class Orchestrator:
    """Coordinates feed ingestion, filtering, statistics and insights.

    This class wires together:
    - USGS client (fetches the event feed)
    - Core functions (parsing, filtering, statistics)
    - Conversation state machine (insight history)
    - Gemini client (language-model calls)
    """

    def __init__(
        self,
        config: Config,
        usgs_client: USGSClient | None = None,
        gemini_client: GeminiClient | None = None,
        conversation: Conversation | None = None,
    ) -> None:
        """Initialize orchestrator with configuration.

        Args:
            config: Application configuration
            usgs_client: USGS client (created if not provided)
            gemini_client: Gemini client (created if not provided)
            conversation: Conversation (created if not provided)
        """
        self.config = config
        self.usgs_client = usgs_client or USGSClient(
            feed_url=config.feed_url,
            timeout=config.feed_timeout_seconds,
        )
        self.gemini_client = gemini_client or GeminiClient(
            model=config.gemini_model,
            timeout=config.gemini_timeout_seconds,
        )
        self.conversation = conversation or Conversation()
        self.feed = FeedState()
        self.criteria = FilterCriteria()
        self._notifications: deque[Notification] = deque()

    def refresh(self, now: datetime | None = None) -> RefreshResult:
        """Fetch the feed once and apply the result.

        Failures keep the previous event set. Either way a one-shot
        notification is queued.

        Args:
            now: Completion time (defaults to wall clock)

        Returns:
            RefreshResult describing what happened
        """
        sequence = self.feed.begin_fetch()
        result = self.usgs_client.fetch_events()
        applied = self.feed.complete_fetch(sequence, result, now or _utc_now())

        if not applied:
            logger.warning("Discarding stale feed completion %d", sequence)
            return RefreshResult(applied=False, error=result.error)

        if result.success:
            count = len(result.earthquakes)
            logger.info("Loaded %d earthquakes", count)
            self._notifications.append(
                Notification(level="success", message=f"Loaded {count} earthquakes")
            )
            return RefreshResult(applied=True, earthquakes_fetched=count)

        logger.error(
            "Feed refresh failed (%s): %s",
            result.error.kind.value if result.error else "unknown",
            result.error.message if result.error else "no error details",
        )
        self._notifications.append(Notification(level="error", message=FEED_ERROR_NOTICE))
        return RefreshResult(applied=True, error=result.error)

    def refresh_if_stale(self, now: datetime | None = None) -> RefreshResult | None:
        """Refresh only when the refresh interval has elapsed."""
        now = now or _utc_now()
        if not self.feed.is_stale(now):
            return None
        return self.refresh(now)

    def set_filters(self, criteria: FilterCriteria) -> None:
        """Replace the current filter criteria."""
        logger.info(
            "Filters set: min_magnitude=%.1f, time_window=%s",
            criteria.min_magnitude,
            criteria.time_window.value,
        )
        self.criteria = criteria

    def clear_filters(self) -> None:
        self.set_filters(FilterCriteria())

    def filtered_earthquakes(self, now: datetime | None = None) -> list[Earthquake]:
        """Current event set narrowed by the current filters."""
        return apply_filters(self.feed.snapshot(), self.criteria, now or _utc_now())

    def stats(self, now: datetime | None = None) -> StatsSummary:
        """Statistics over the filtered event set."""
        now = now or _utc_now()
        return summarize(self.filtered_earthquakes(now), now)

    def ask(self, question: str, now: datetime | None = None) -> ConversationState:
        """Ask the insight assistant a question about the filtered events.

        Runs the model call in between submit() and on_response(). Never
        raises for model failures; they end up as assistant messages.

        Args:
            question: The user's question
            now: Evaluation time (defaults to wall clock)

        Returns:
            Conversation snapshot after the exchange
        """
        now = now or _utc_now()

        request = self.conversation.submit(
            question,
            self.filtered_earthquakes(now),
            has_credential=self.config.has_credential,
            evaluation_time=now,
        )

        if request is None:
            return self.conversation.state()

        logger.info(
            "Submitting insight request %s over %d earthquakes",
            request.request_id,
            request.summary.total,
        )

        try:
            result = self.gemini_client.generate(request.prompt, self.config.gemini_api_key or "")
        except Exception as e:
            logger.exception("Model call for request %s raised", request.request_id)
            result = ModelResult(
                success=False,
                error=ModelCallError(kind=ModelCallErrorKind.UNKNOWN, message=str(e)),
            )

        self.conversation.on_response(request.request_id, result)

        return self.conversation.state()

    def drain_notifications(self) -> list[Notification]:
        """Return and clear queued notifications."""
        notifications = list(self._notifications)
        self._notifications.clear()
        return notifications

    def dashboard(self, now: datetime | None = None) -> Dashboard:
        """Build the view model for the current state."""
        now = now or _utc_now()
        earthquakes = self.filtered_earthquakes(now)

        return Dashboard(
            criteria=self.criteria,
            earthquakes=earthquakes,
            stats=summarize(earthquakes, now),
            conversation=self.conversation.state(),
            feed_error=self.feed.last_error,
            notifications=self.drain_notifications(),
        )
