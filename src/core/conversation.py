"""Insight conversation state machine - No I/O.

The Conversation owns the chat history and the request phase. It decides
what happens to a question (ignored, answered locally, or turned into a
model request) and folds model results back into the history. The
actual model call is made by the shell between submit() and
on_response(); the request ID ties the two together.

Clock and ID sources are injected so transitions stay deterministic
under test.
"""

import itertools
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from src.core.earthquake import Earthquake
from src.core.prompt import build_prompt
from src.core.sanitize import sanitize
from src.core.stats import StatsSummary, summarize


logger = logging.getLogger(__name__)


WELCOME_MESSAGE = (
    "Hello! I'm your Earthquake Analysis Assistant. I can help you analyze "
    "seismic data, identify patterns, and answer questions about recent "
    "earthquake activity. What would you like to know?"
)

NO_DATA_MESSAGE = (
    "No earthquake data available for analysis. "
    "Please wait for data to load or widen your filters."
)

MISSING_CREDENTIAL_MESSAGE = (
    "🔐 AI insights require an API key. "
    "Please set GEMINI_API_KEY in the environment configuration."
)

FAILURE_MESSAGE = (
    "Sorry, I encountered an error while processing your request. "
    "Please try again."
)


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Phase(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


class ModelCallErrorKind(str, Enum):
    NETWORK = "network"
    QUOTA_OR_AUTH = "quota_or_auth"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ModelCallError:
    """Why a language-model call failed.

    Attributes:
        kind: Error category
        message: Underlying cause, for logs only
        status_code: HTTP status code if one was received
    """
    kind: ModelCallErrorKind
    message: str
    status_code: int | None = None


@dataclass(frozen=True)
class ModelResult:
    """Outcome of a language-model call.

    Attributes:
        success: Whether the model produced text
        text: Raw completion text
        error: Failure details if not successful
    """
    success: bool
    text: str = ""
    error: ModelCallError | None = None


@dataclass(frozen=True)
class ChatMessage:
    """A single message in the conversation."""
    id: int
    role: Role
    content: str
    created_at: datetime


@dataclass(frozen=True)
class ConversationState:
    """Read-only snapshot of a Conversation."""
    messages: tuple[ChatMessage, ...]
    phase: Phase
    pending_request_id: str | None


@dataclass(frozen=True)
class InsightRequest:
    """A model call the shell must perform.

    Attributes:
        request_id: Token to pass back to on_response()
        prompt: Prompt text for the model
        summary: Statistics the prompt was built from
    """
    request_id: str
    prompt: str
    summary: StatsSummary


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_request_id() -> str:
    return uuid.uuid4().hex


class Conversation:
    """Conversation history plus the Idle/AwaitingResponse state machine.

    At most one request is in flight. While awaiting a response, new
    questions are ignored. Messages are only ever appended.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = _utc_now,
        request_id_factory: Callable[[], str] = _new_request_id,
    ) -> None:
        """Initialize with the welcome message already in the history.

        Args:
            clock: Source of message timestamps
            request_id_factory: Source of request ID tokens
        """
        self._clock = clock
        self._request_id_factory = request_id_factory
        self._message_ids = itertools.count(1)
        self._messages: list[ChatMessage] = []
        self._phase = Phase.IDLE
        self._pending_request_id: str | None = None

        self._append(Role.ASSISTANT, WELCOME_MESSAGE)

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def pending_request_id(self) -> str | None:
        return self._pending_request_id

    def state(self) -> ConversationState:
        """Return an immutable snapshot of the conversation."""
        return ConversationState(
            messages=tuple(self._messages),
            phase=self._phase,
            pending_request_id=self._pending_request_id,
        )

    def _append(self, role: Role, content: str) -> ChatMessage:
        message = ChatMessage(
            id=next(self._message_ids),
            role=role,
            content=content,
            created_at=self._clock(),
        )
        self._messages.append(message)
        return message

    def submit(
        self,
        question: str,
        earthquakes: list[Earthquake] | tuple[Earthquake, ...],
        has_credential: bool,
        evaluation_time: datetime,
    ) -> InsightRequest | None:
        """Handle a user question.

        Args:
            question: The user's question
            earthquakes: Current filtered event set
            has_credential: Whether a model API credential is configured
            evaluation_time: "Now" for the statistics

        Returns:
            InsightRequest to execute, or None if no model call is needed
        """
        if self._phase != Phase.IDLE or not question or not question.strip():
            return None

        if not earthquakes:
            self._append(Role.ASSISTANT, NO_DATA_MESSAGE)
            return None

        if not has_credential:
            self._append(Role.ASSISTANT, MISSING_CREDENTIAL_MESSAGE)
            return None

        self._append(Role.USER, question)

        summary = summarize(earthquakes, evaluation_time)
        request = InsightRequest(
            request_id=self._request_id_factory(),
            prompt=build_prompt(question, summary),
            summary=summary,
        )

        self._phase = Phase.AWAITING_RESPONSE
        self._pending_request_id = request.request_id

        return request

    def on_response(self, request_id: str, result: ModelResult) -> bool:
        """Fold a model result into the conversation.

        Args:
            request_id: ID of the request this result answers
            result: Model call outcome

        Returns:
            True if the result was applied, False if it was stale
        """
        if self._pending_request_id is None or request_id != self._pending_request_id:
            logger.info("Discarding response for superseded request %s", request_id)
            return False

        if result.success:
            self._append(Role.ASSISTANT, sanitize(result.text))
        else:
            error = result.error
            logger.error(
                "Insight request %s failed (%s): %s",
                request_id,
                error.kind.value if error else ModelCallErrorKind.UNKNOWN.value,
                error.message if error else "no error details",
            )
            self._append(Role.ASSISTANT, FAILURE_MESSAGE)

        self._phase = Phase.IDLE
        self._pending_request_id = None
        return True
