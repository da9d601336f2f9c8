"""
Quiz module: event-driven session controllers.

This module provides:
- QuizSession: Graded quiz with per-concept remediation
- PracticeSessionController: Ungraded endless practice on a topic

Both are driven by ``await controller.dispatch(event)`` with the frozen
events from ``eliza_quiz.quiz.events``.
"""

from . import events
from .base import Notice, SessionController, StaleResponse
from .phases import QuizPhase
from .practice_session import PracticePhase, PracticeSession, PracticeSessionController
from .quiz_session import QuizSession

__all__ = [
    "events",
    "Notice",
    "SessionController",
    "StaleResponse",
    "QuizPhase",
    "QuizSession",
    "PracticePhase",
    "PracticeSession",
    "PracticeSessionController",
]
