"""
Shared plumbing for the quiz and practice controllers.

- One ``dispatch(event)`` entry point routed through a handler table
- At most one request in flight per session
- Responses that resolve after the session was closed are dropped
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger

from eliza_quiz.core.errors import InvariantViolation, QuizEngineError, TransientNetworkError
from eliza_quiz.core.stats import SessionStats, StatsSnapshot

T = TypeVar("T")

Handler = Callable[[Any], Awaitable[None]]


class StaleResponse(QuizEngineError):
    """A request resolved after its session was closed."""


@dataclass(frozen=True)
class Notice:
    """Dismissible, user-facing message about a failed operation."""

    message: str
    operation: str
    error: QuizEngineError | None = None


class SessionController:
    """Base class for event-driven session state machines."""

    def __init__(
        self,
        client: Any,
        on_close: Callable[[], None] | None = None,
        on_change: Callable[[Any], None] | None = None,
    ):
        """
        Args:
            client: AttemptService implementation
            on_close: Called once when the session is closed or ended
            on_change: Called with the new phase payload after every transition
        """
        self._client = client
        self._on_close = on_close
        self._on_change = on_change
        self._alive = True
        self._in_flight = False
        self._notice: Notice | None = None
        self._stats = SessionStats()
        self._state: Any = None
        self._handlers: dict[type, Handler] = {}

    # =========================================================================
    # Public surface
    # =========================================================================

    @property
    def state(self) -> Any:
        """Current phase payload (immutable)."""
        return self._state

    @property
    def phase(self) -> Any:
        return self._state.phase

    @property
    def notice(self) -> Notice | None:
        return self._notice

    @property
    def stats(self) -> StatsSnapshot:
        return self._stats.snapshot()

    @property
    def is_alive(self) -> bool:
        return self._alive

    async def dispatch(self, event: Any) -> None:
        """Apply one UI event. Events that do not fit the current phase are no-ops."""
        if not self._alive:
            logger.debug("Session closed; ignoring {}", type(event).__name__)
            return

        handler = self._handlers.get(type(event))
        if handler is None:
            logger.debug("{} does not handle {}", type(self).__name__, type(event).__name__)
            return

        try:
            await handler(event)
        except InvariantViolation as e:
            logger.debug("Ignored {} in {}: {}", type(event).__name__, self._state.phase.value, e)
        except StaleResponse as e:
            logger.debug("Dropped response for closed session: {}", e)

    def close(self) -> None:
        """Abandon the session. In-flight responses will not be applied."""
        if not self._alive:
            return
        self._alive = False
        self._set_state(self._enter_closed())
        logger.debug("{} closed", type(self).__name__)
        if self._on_close is not None:
            self._on_close()

    # =========================================================================
    # Helpers for subclasses
    # =========================================================================

    def _enter_closed(self) -> Any:
        """Return the terminal payload for this controller."""
        raise NotImplementedError

    def _set_state(self, state: Any) -> None:
        self._state = state
        logger.debug("{} -> {}", type(self).__name__, state.phase.value)
        if self._on_change is not None:
            self._on_change(state)

    def _expect(self, *payload_types: type) -> Any:
        """Return the current payload if it is one of the given types."""
        if not isinstance(self._state, payload_types):
            raise InvariantViolation(f"not valid in phase {self._state.phase.value}")
        return self._state

    def _require_idle(self) -> None:
        if self._in_flight:
            raise InvariantViolation("a request is already in flight")

    def _report(self, error: TransientNetworkError, message: str) -> None:
        logger.warning("{} failed: {}", error.operation, error.message)
        self._notice = Notice(message=message, operation=error.operation, error=error)

    async def _request(self, call: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """
        Run one AttemptService call under the in-flight guard.

        Raises:
            InvariantViolation: another request is still outstanding
            StaleResponse: the session was closed while waiting
            TransientNetworkError: the call failed
        """
        self._require_idle()
        self._in_flight = True
        try:
            result = await call(*args, **kwargs)
        except TransientNetworkError as e:
            if not self._alive:
                raise StaleResponse(e.operation) from e
            raise
        finally:
            self._in_flight = False

        if not self._alive:
            raise StaleResponse(getattr(call, "__name__", "request"))
        return result

    async def _dismiss_notice(self, event: Any) -> None:
        self._notice = None
