"""
Practice Session: ungraded, endless practice on one topic.

Flow:
    DIFFICULTY_SELECT -> LOADING -> QUESTION <-> FEEDBACK -> SESSION_COMPLETE
    SESSION_COMPLETE -> LOADING -> QUESTION   (generate more)
    any -> ENDED

Answers count toward session stats only; nothing here affects quiz grades.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, ClassVar

from loguru import logger

from eliza_quiz.core.errors import InvariantViolation, TransientNetworkError
from eliza_quiz.core.models import Difficulty, PracticeFeedback, QuizQuestion
from eliza_quiz.quiz import events
from eliza_quiz.quiz.base import SessionController


class PracticePhase(str, Enum):
    DIFFICULTY_SELECT = "difficulty_select"
    LOADING = "loading"
    QUESTION = "question"
    FEEDBACK = "feedback"
    SESSION_COMPLETE = "session_complete"
    ENDED = "ended"


@dataclass(frozen=True)
class PracticeSession:
    """
    Server-side practice session as seen by the client.

    ``questions`` only ever grows at the end; ``current_index`` points into it.
    """

    session_id: str
    questions: tuple[QuizQuestion, ...] = ()
    current_index: int = 0
    quiz_context_used: bool = False

    @property
    def current_question(self) -> QuizQuestion | None:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def has_next(self) -> bool:
        return self.current_index + 1 < len(self.questions)

    def advanced(self) -> PracticeSession:
        return replace(self, current_index=self.current_index + 1)

    def with_question(self, question: QuizQuestion) -> PracticeSession:
        """Append one question and point at it."""
        questions = self.questions + (question,)
        return replace(self, questions=questions, current_index=len(questions) - 1)


# =============================================================================
# Phase payloads
# =============================================================================


@dataclass(frozen=True)
class SelectingDifficulty:
    phase: ClassVar[PracticePhase] = PracticePhase.DIFFICULTY_SELECT

    default: Difficulty = Difficulty.STANDARD


@dataclass(frozen=True)
class PracticeLoading:
    phase: ClassVar[PracticePhase] = PracticePhase.LOADING

    session: PracticeSession | None = None


@dataclass(frozen=True)
class PracticeAnswering:
    phase: ClassVar[PracticePhase] = PracticePhase.QUESTION

    session: PracticeSession
    selected_option_id: str | None = None
    submitting: bool = False

    @property
    def question(self) -> QuizQuestion:
        return self.session.current_question


@dataclass(frozen=True)
class PracticeShowingFeedback:
    phase: ClassVar[PracticePhase] = PracticePhase.FEEDBACK

    session: PracticeSession
    selected_option_id: str
    feedback: PracticeFeedback

    @property
    def question(self) -> QuizQuestion:
        return self.session.current_question


@dataclass(frozen=True)
class PracticeComplete:
    phase: ClassVar[PracticePhase] = PracticePhase.SESSION_COMPLETE

    session: PracticeSession


@dataclass(frozen=True)
class PracticeEnded:
    phase: ClassVar[PracticePhase] = PracticePhase.ENDED

    session: PracticeSession | None = None


# =============================================================================
# Controller
# =============================================================================


class PracticeSessionController(SessionController):
    """Drives one practice session for a topic."""

    def __init__(
        self,
        client: Any,
        topic_id: str,
        default_difficulty: Difficulty | str | None = None,
        on_close: Callable[[], None] | None = None,
        on_change: Callable[[Any], None] | None = None,
    ):
        super().__init__(client, on_close=on_close, on_change=on_change)
        self.topic_id = topic_id
        self.default_difficulty = Difficulty.from_value(default_difficulty)
        self._state = SelectingDifficulty(default=self.default_difficulty)

        self._handlers = {
            events.StartPractice: self._start,
            events.SelectOption: self._select_option,
            events.SubmitAnswer: self._submit_answer,
            events.Next: self._next,
            events.GenerateMore: self._generate_more,
            events.End: self._end,
            events.Close: self._end,
            events.DismissNotice: self._dismiss_notice,
        }

    @property
    def session(self) -> PracticeSession | None:
        return getattr(self._state, "session", None)

    @property
    def current_question(self) -> QuizQuestion | None:
        if isinstance(self._state, (PracticeAnswering, PracticeShowingFeedback)):
            return self._state.question
        return None

    @property
    def selected_option_id(self) -> str | None:
        return getattr(self._state, "selected_option_id", None)

    @property
    def feedback(self) -> PracticeFeedback | None:
        if isinstance(self._state, PracticeShowingFeedback):
            return self._state.feedback
        return None

    @property
    def progress(self) -> float:
        """Position within the questions fetched so far."""
        if isinstance(self._state, PracticeComplete):
            return 1.0
        session = self.session
        if session is None or not session.questions:
            return 0.0
        done = session.current_index + (1 if isinstance(self._state, PracticeShowingFeedback) else 0)
        return min(1.0, done / len(session.questions))

    # =========================================================================
    # Handlers
    # =========================================================================

    async def _start(self, event: events.StartPractice) -> None:
        state = self._expect(SelectingDifficulty)
        self._require_idle()
        difficulty = Difficulty.from_value(event.difficulty or state.default)

        self._stats.reset()
        self._set_state(PracticeLoading())
        try:
            start = await self._request(
                self._client.start_practice_session, self.topic_id, difficulty
            )
        except TransientNetworkError as e:
            self._set_state(state)
            self._report(e, "Couldn't start practice. Please try again.")
            return

        self._notice = None
        session = PracticeSession(
            session_id=start.session_id,
            questions=start.questions,
            quiz_context_used=start.quiz_context_used,
        )
        logger.info(
            "Practice session {} started with {} question(s) at {} difficulty",
            session.session_id,
            len(session.questions),
            difficulty.value,
        )
        if not session.questions:
            self._set_state(PracticeComplete(session=session))
        else:
            self._set_state(PracticeAnswering(session=session))

    async def _select_option(self, event: events.SelectOption) -> None:
        state = self._expect(PracticeAnswering)
        if state.submitting:
            raise InvariantViolation("answer is being submitted")
        if not state.question.has_option(event.option_id):
            raise InvariantViolation(f"option {event.option_id} is not on question {state.question.id}")
        self._set_state(replace(state, selected_option_id=event.option_id))

    async def _submit_answer(self, event: events.SubmitAnswer) -> None:
        state = self._expect(PracticeAnswering)
        if state.submitting:
            raise InvariantViolation("answer already submitted")
        if state.selected_option_id is None:
            raise InvariantViolation("no option selected")
        self._require_idle()

        self._set_state(replace(state, submitting=True))
        try:
            feedback = await self._request(
                self._client.answer_practice_question,
                state.session.session_id,
                state.question.id,
                state.selected_option_id,
            )
        except TransientNetworkError as e:
            self._set_state(state)
            self._report(e, "Failed to submit answer. Please try again.")
            return

        self._notice = None
        self._stats.record_answer(feedback.is_correct)
        if (
            feedback.questions_completed != self._stats.questions_completed
            or feedback.total_correct != self._stats.total_correct
        ):
            logger.debug(
                "Server practice counters {}/{} differ from local {}/{}",
                feedback.total_correct,
                feedback.questions_completed,
                self._stats.total_correct,
                self._stats.questions_completed,
            )

        self._set_state(PracticeShowingFeedback(
            session=state.session,
            selected_option_id=state.selected_option_id,
            feedback=feedback,
        ))

    async def _next(self, event: events.Next) -> None:
        state = self._expect(PracticeShowingFeedback)
        session = state.session

        if session.has_next:
            self._set_state(PracticeAnswering(session=session.advanced()))
        elif state.feedback.next_question is not None:
            self._set_state(PracticeAnswering(session=session.with_question(state.feedback.next_question)))
        else:
            logger.debug("Practice session {} ran out of questions", session.session_id)
            self._set_state(PracticeComplete(session=session))

    async def _generate_more(self, event: events.GenerateMore) -> None:
        state = self._expect(PracticeComplete)
        self._require_idle()

        self._set_state(PracticeLoading(session=state.session))
        try:
            question = await self._request(
                self._client.generate_more_practice_question, state.session.session_id
            )
        except TransientNetworkError as e:
            self._set_state(state)
            self._report(e, "Couldn't generate another question. Please try again.")
            return

        self._notice = None
        self._set_state(PracticeAnswering(session=state.session.with_question(question)))

    async def _end(self, event: Any) -> None:
        logger.info(
            "Practice ended: {}/{} correct",
            self._stats.total_correct,
            self._stats.questions_completed,
        )
        self.close()

    def _enter_closed(self) -> PracticeEnded:
        return PracticeEnded(session=self.session)
