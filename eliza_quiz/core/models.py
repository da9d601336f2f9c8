"""
Canonical quiz records.

Every payload the platform returns is turned into one of these frozen
dataclasses by a ``from_dict`` classmethod as soon as it is received.
The rest of the engine never looks at raw JSON, and never branches on
the shape an option arrived in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from config import get_settings
from eliza_quiz.core.completion import round_half_up


class Difficulty(str, Enum):
    """Question difficulty levels."""

    EASY = "easy"
    STANDARD = "standard"
    HARD = "hard"

    @classmethod
    def from_value(cls, value: str | Difficulty | None) -> Difficulty:
        """
        Parse a wire value.

        ``medium`` is what some generators emit for the middle tier, so it
        is read as STANDARD. Missing values default to STANDARD.
        """
        if value is None or value == "":
            return cls.STANDARD
        if isinstance(value, Difficulty):
            return value
        value = str(value).strip().lower()
        if value == "medium":
            return cls.STANDARD
        return cls(value)

    @property
    def display_name(self) -> str:
        return {
            Difficulty.EASY: "Easier",
            Difficulty.STANDARD: "Same Difficulty",
            Difficulty.HARD: "Harder",
        }[self]


@dataclass(frozen=True)
class QuizOption:
    """One answer choice. ``is_correct`` is None when withheld from the client."""

    id: str
    text: str
    label: str
    is_correct: bool | None = None


def option_label(position: int) -> str:
    """A, B, C ... for a zero-based position."""
    return chr(65 + position)


def normalize_options(raw: Any) -> tuple[QuizOption, ...]:
    """
    Normalize the option list of a question payload.

    Accepts plain strings (the string doubles as id and text) or objects
    with ``id``/``text`` and optional ``label``/``is_correct``.

    Raises:
        ValueError: unknown option shape or more than one correct option
    """
    if not raw:
        return ()

    options: list[QuizOption] = []
    for position, item in enumerate(raw):
        if isinstance(item, str):
            options.append(QuizOption(id=item, text=item, label=option_label(position)))
        elif isinstance(item, dict):
            text = item.get("text") or ""
            option_id = item.get("id") or text
            if not option_id:
                raise ValueError(f"Option {position} has neither id nor text")
            is_correct = item.get("is_correct")
            options.append(QuizOption(
                id=str(option_id),
                text=text,
                label=item.get("label") or option_label(position),
                is_correct=bool(is_correct) if is_correct is not None else None,
            ))
        else:
            raise ValueError(f"Unsupported option shape: {type(item).__name__}")

    if sum(1 for o in options if o.is_correct) > 1:
        raise ValueError("More than one option is marked correct")
    return tuple(options)


@dataclass(frozen=True)
class QuizQuestion:
    """A question as issued to the client. Immutable once received."""

    id: str
    body: str
    options: tuple[QuizOption, ...] = ()
    difficulty: Difficulty = Difficulty.STANDARD
    parent_question_id: str | None = None
    explanation: str | None = None
    source_snippet: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuizQuestion:
        """Parse a question payload."""
        question_id = data.get("id")
        if not question_id:
            raise ValueError("Question payload has no id")
        return cls(
            id=str(question_id),
            body=data.get("body") or data.get("question") or "",
            options=normalize_options(data.get("options")),
            difficulty=Difficulty.from_value(data.get("difficulty")),
            parent_question_id=data.get("parent_question_id"),
            explanation=data.get("answer_explanation") or data.get("explanation"),
            source_snippet=data.get("source_snippet"),
        )

    @property
    def is_variant(self) -> bool:
        """True for alternate-difficulty versions of another question."""
        return self.parent_question_id is not None

    def option(self, option_id: str) -> QuizOption | None:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None

    def has_option(self, option_id: str) -> bool:
        return self.option(option_id) is not None


def _question_or_none(raw: Any) -> QuizQuestion | None:
    return QuizQuestion.from_dict(raw) if raw else None


@dataclass(frozen=True)
class QuizProgress:
    """Response of start-quiz / current-question. No question means the quiz is finished."""

    attempt_id: str
    question: QuizQuestion | None
    question_index: int = 0
    total_questions: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any], attempt_id: str | None = None) -> QuizProgress:
        resolved_id = data.get("attempt_id") or attempt_id
        if not resolved_id:
            raise ValueError("Quiz progress payload has no attempt_id")
        return cls(
            attempt_id=str(resolved_id),
            question=_question_or_none(data.get("question")),
            question_index=int(data.get("question_index") or 0),
            total_questions=int(data.get("total_questions") or 0),
        )


@dataclass(frozen=True)
class Attempt:
    """
    One graded answer and its outcome.

    Created exactly once per submission; a retry produces a new Attempt.
    ``all_questions_answered`` stays None when the server omitted it.
    """

    question_id: str
    selected_option_id: str
    is_correct: bool
    score: float
    explanation: str = ""
    correct_answer: str | None = None
    xp_awarded: int | None = None
    badges_awarded: tuple[Any, ...] = ()
    next_question: QuizQuestion | None = None
    all_questions_answered: bool | None = None

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        question_id: str,
        selected_option_id: str,
    ) -> Attempt:
        is_correct = bool(data.get("is_correct", False))
        raw_score = data.get("score")
        score = float(raw_score) if raw_score is not None else (1.0 if is_correct else 0.0)
        all_answered = data.get("all_questions_answered")
        return cls(
            question_id=question_id,
            selected_option_id=selected_option_id,
            is_correct=is_correct,
            score=min(1.0, max(0.0, score)),
            explanation=data.get("explanation") or "",
            correct_answer=data.get("correct_answer"),
            xp_awarded=data.get("xp_awarded"),
            badges_awarded=tuple(data.get("badges_awarded") or ()),
            next_question=_question_or_none(data.get("next_question")),
            all_questions_answered=bool(all_answered) if all_answered is not None else None,
        )


@dataclass(frozen=True)
class QuestionResult:
    """Per-question line of a quiz summary."""

    question_id: str
    question_text: str
    is_correct: bool
    your_answer: str | None = None
    correct_answer: str | None = None
    explanation: str | None = None
    recommended_difficulty: Difficulty = Difficulty.STANDARD

    @classmethod
    def from_dict(cls, data: dict[str, Any], is_correct: bool | None = None) -> QuestionResult:
        question_id = data.get("question_id") or data.get("id")
        if not question_id:
            raise ValueError("Summary entry has no question_id")
        if is_correct is None:
            is_correct = bool(data.get("is_correct", False))
        return cls(
            question_id=str(question_id),
            question_text=data.get("question_text") or data.get("body") or "",
            is_correct=is_correct,
            your_answer=data.get("your_answer"),
            correct_answer=data.get("correct_answer"),
            explanation=data.get("explanation"),
            recommended_difficulty=Difficulty.from_value(data.get("recommended_difficulty")),
        )


@dataclass(frozen=True)
class QuizSummary:
    """Results of the base quiz. Computed once by the server, read-only afterwards."""

    attempt_id: str
    score: float
    total: int
    percentage: int
    results: tuple[QuestionResult, ...] = ()
    remedial_plan: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any], attempt_id: str | None = None) -> QuizSummary:
        """
        Parse a summary payload.

        The backend sends either the full ``questions`` list or only the
        ``wrong_questions``; both end up in ``results`` in server order.
        """
        if data.get("questions") is not None:
            results = tuple(QuestionResult.from_dict(q) for q in data["questions"])
        else:
            results = tuple(
                QuestionResult.from_dict(q, is_correct=False)
                for q in data.get("wrong_questions") or ()
            )

        score = float(data.get("score") or 0)
        total = int(data.get("total") or len(results))
        percentage = data.get("percentage")
        if percentage is None:
            percentage = round_half_up(100 * score / total) if total else 0

        has_wrong = any(not r.is_correct for r in results)
        server_flag = bool(data.get("remedial_plan")) or bool(data.get("remediation_required"))

        resolved_id = data.get("attempt_id") or attempt_id
        if not resolved_id:
            raise ValueError("Summary payload has no attempt_id")
        return cls(
            attempt_id=str(resolved_id),
            score=score,
            total=total,
            percentage=int(round_half_up(float(percentage))),
            results=results,
            remedial_plan=has_wrong or server_flag,
        )

    @property
    def wrong_questions(self) -> tuple[QuestionResult, ...]:
        """Incorrect results in summary order. The client never re-sorts."""
        return tuple(r for r in self.results if not r.is_correct)

    def passed(self, threshold: int | None = None) -> bool:
        """Percentage at or above ``threshold``, the configured pass mark by default."""
        if threshold is None:
            threshold = get_settings().quiz_pass_threshold
        return self.percentage >= threshold

    @property
    def performance_message(self) -> str:
        if self.percentage >= 90:
            return "Outstanding!"
        if self.percentage >= 70:
            return "Great job!"
        if self.percentage < 50:
            return "Keep studying!"
        return "Good effort!"


@dataclass(frozen=True)
class RemedialProgress:
    """How many remedial questions of the required count are done."""

    completed: int = 0
    required: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> RemedialProgress:
        if not data:
            return cls()
        return cls(
            completed=int(data.get("completed") or 0),
            required=int(data.get("required") or 0),
        )


@dataclass(frozen=True)
class RemedialQuestionResponse:
    """A remedial sub-session for one missed concept and its first question."""

    remedial_id: str
    question: QuizQuestion
    difficulty: Difficulty = Difficulty.STANDARD
    progress: RemedialProgress = field(default_factory=RemedialProgress)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RemedialQuestionResponse:
        remedial_id = data.get("remedial_id")
        question = data.get("question")
        if not remedial_id or not question:
            raise ValueError("Remedial payload needs remedial_id and question")
        return cls(
            remedial_id=str(remedial_id),
            question=QuizQuestion.from_dict(question),
            difficulty=Difficulty.from_value(data.get("difficulty")),
            progress=RemedialProgress.from_dict(data.get("progress")),
        )


@dataclass(frozen=True)
class RemedialFeedback:
    """Outcome of one remedial answer."""

    is_correct: bool
    explanation: str = ""
    correct_answer: str | None = None
    progress: RemedialProgress = field(default_factory=RemedialProgress)
    remedial_completed: bool | None = None
    next_question: QuizQuestion | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RemedialFeedback:
        completed = data.get("remedial_completed")
        return cls(
            is_correct=bool(data.get("is_correct", False)),
            explanation=data.get("explanation") or "",
            correct_answer=data.get("correct_answer"),
            progress=RemedialProgress.from_dict(data.get("progress")),
            remedial_completed=bool(completed) if completed is not None else None,
            next_question=_question_or_none(data.get("next_question")),
        )


@dataclass(frozen=True)
class PracticeStart:
    """Initial batch of a practice session."""

    session_id: str
    questions: tuple[QuizQuestion, ...]
    quiz_context_used: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PracticeStart:
        session_id = data.get("session_id")
        if not session_id:
            raise ValueError("Practice payload has no session_id")
        raw_questions = data.get("questions")
        if raw_questions is None and data.get("first_question"):
            raw_questions = [data["first_question"]]
        return cls(
            session_id=str(session_id),
            questions=tuple(QuizQuestion.from_dict(q) for q in raw_questions or ()),
            quiz_context_used=bool(data.get("quiz_context_used", False)),
        )


@dataclass(frozen=True)
class PracticeFeedback:
    """Outcome of one practice answer, with the server's running counters."""

    is_correct: bool
    explanation: str = ""
    correct_answer: str | None = None
    questions_completed: int = 0
    total_correct: int = 0
    next_question: QuizQuestion | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PracticeFeedback:
        return cls(
            is_correct=bool(data.get("is_correct", False)),
            explanation=data.get("explanation") or "",
            correct_answer=data.get("correct_answer"),
            questions_completed=int(data.get("questions_completed") or 0),
            total_correct=int(data.get("total_correct") or 0),
            next_question=_question_or_none(data.get("next_question")),
        )
