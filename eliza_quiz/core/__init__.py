"""
Core Module - Shared domain models and helpers.

Components:
- models: Canonical quiz records parsed at the API boundary
- stats: SessionStats counters shared by quiz and practice flows
- completion: Weighted lesson completion scoring
- errors: Engine error taxonomy

Design Principle:
The quiz, practice and remediation modules import records and counters from
eliza_quiz.core rather than reading raw payloads themselves.
"""

from eliza_quiz.core.completion import (
    LessonProgress,
    ProgressComponent,
    completion_percentage,
    is_quiz_passed,
    is_video_watched,
    round_half_up,
)
from eliza_quiz.core.errors import (
    InitializationError,
    InvariantViolation,
    QuizEngineError,
    TransientNetworkError,
)
from eliza_quiz.core.models import (
    Attempt,
    Difficulty,
    PracticeFeedback,
    PracticeStart,
    QuestionResult,
    QuizOption,
    QuizProgress,
    QuizQuestion,
    QuizSummary,
    RemedialFeedback,
    RemedialProgress,
    RemedialQuestionResponse,
    normalize_options,
)
from eliza_quiz.core.stats import SessionStats, StatsSnapshot

__all__ = [
    # Completion
    "LessonProgress",
    "ProgressComponent",
    "completion_percentage",
    "is_quiz_passed",
    "is_video_watched",
    "round_half_up",
    # Errors
    "QuizEngineError",
    "TransientNetworkError",
    "InvariantViolation",
    "InitializationError",
    # Models
    "Attempt",
    "Difficulty",
    "PracticeFeedback",
    "PracticeStart",
    "QuestionResult",
    "QuizOption",
    "QuizProgress",
    "QuizQuestion",
    "QuizSummary",
    "RemedialFeedback",
    "RemedialProgress",
    "RemedialQuestionResponse",
    "normalize_options",
    # Stats
    "SessionStats",
    "StatsSnapshot",
]
