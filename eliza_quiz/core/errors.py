"""
Error taxonomy for the quiz engine.

- TransientNetworkError: any failed AttemptClient call. Recovered locally by
  restoring the pre-call phase and surfacing a dismissible notice.
- InvariantViolation: an event that makes no sense in the current phase
  (no option selected, pointer past the end, ...). Swallowed by dispatch
  as a no-op and never sent to the network layer.
- InitializationError: a quiz could not be started or resumed. The
  surrounding UI is told to close the quiz experience.
"""

from __future__ import annotations


class QuizEngineError(Exception):
    """Base class for all engine errors."""


class TransientNetworkError(QuizEngineError):
    """A request to the platform failed; the user may re-trigger it."""

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: int | None = None,
    ):
        super().__init__(f"{operation}: {message}")
        self.operation = operation
        self.message = message
        self.status_code = status_code


class InvariantViolation(QuizEngineError):
    """An event was dispatched whose preconditions do not hold."""


class InitializationError(QuizEngineError):
    """Starting or resuming a quiz failed; not locally recoverable."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause
