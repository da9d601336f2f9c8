"""
Phases of a graded quiz session.

The session holds exactly one of the payloads below. Each payload is frozen
and carries only what its phase needs, so combinations such as "submitting
while showing feedback" cannot be represented.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from eliza_quiz.core.models import (
    Attempt,
    Difficulty,
    QuestionResult,
    QuizQuestion,
    QuizSummary,
    RemedialFeedback,
    RemedialProgress,
)


class QuizPhase(str, Enum):
    LOADING = "loading"
    QUESTION = "question"
    FEEDBACK = "feedback"
    SUMMARY = "summary"
    REMEDIATION_SELECT = "remediation_select"
    REMEDIATION_QUESTION = "remediation_question"
    REMEDIATION_FEEDBACK = "remediation_feedback"
    COMPLETED = "completed"
    CLOSED = "closed"


@dataclass(frozen=True)
class Loading:
    phase: ClassVar[QuizPhase] = QuizPhase.LOADING

    completed: int = 0
    total: int = 0


@dataclass(frozen=True)
class Answering:
    phase: ClassVar[QuizPhase] = QuizPhase.QUESTION

    question: QuizQuestion
    question_index: int
    total_questions: int
    selected_option_id: str | None = None
    submitting: bool = False


@dataclass(frozen=True)
class ShowingFeedback:
    phase: ClassVar[QuizPhase] = QuizPhase.FEEDBACK

    question: QuizQuestion
    question_index: int
    total_questions: int
    selected_option_id: str
    attempt: Attempt


@dataclass(frozen=True)
class ShowingSummary:
    phase: ClassVar[QuizPhase] = QuizPhase.SUMMARY

    summary: QuizSummary


@dataclass(frozen=True)
class ChoosingDifficulty:
    phase: ClassVar[QuizPhase] = QuizPhase.REMEDIATION_SELECT

    target: QuestionResult | None
    requested: Difficulty | None = None

    @property
    def requesting(self) -> bool:
        return self.requested is not None


@dataclass(frozen=True)
class RemedialAnswering:
    phase: ClassVar[QuizPhase] = QuizPhase.REMEDIATION_QUESTION

    target: QuestionResult
    remedial_id: str
    question: QuizQuestion
    difficulty: Difficulty
    progress: RemedialProgress
    selected_option_id: str | None = None
    submitting: bool = False


@dataclass(frozen=True)
class RemedialShowingFeedback:
    phase: ClassVar[QuizPhase] = QuizPhase.REMEDIATION_FEEDBACK

    target: QuestionResult
    remedial_id: str
    question: QuizQuestion
    difficulty: Difficulty
    selected_option_id: str
    feedback: RemedialFeedback


@dataclass(frozen=True)
class Completed:
    phase: ClassVar[QuizPhase] = QuizPhase.COMPLETED

    summary: QuizSummary | None = None


@dataclass(frozen=True)
class Closed:
    phase: ClassVar[QuizPhase] = QuizPhase.CLOSED
