"""
Quiz Session: state machine for one graded quiz attempt.

Flow:
    LOADING -> QUESTION -> FEEDBACK -> (QUESTION | SUMMARY)
    SUMMARY -> REMEDIATION_SELECT -> REMEDIATION_QUESTION -> REMEDIATION_FEEDBACK
    REMEDIATION_FEEDBACK -> (REMEDIATION_QUESTION | REMEDIATION_SELECT | COMPLETED)

Every network-bound transition goes through ``SessionController._request`` so
only one request is outstanding at a time, and a response arriving after
``close()`` is never applied.
"""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Any, Callable

from loguru import logger

from eliza_quiz.adaptive.remediation_sequencer import RemediationSequencer
from eliza_quiz.core.errors import InitializationError, InvariantViolation, TransientNetworkError
from eliza_quiz.core.models import (
    Attempt,
    QuizProgress,
    QuizQuestion,
    QuizSummary,
    RemedialFeedback,
)
from eliza_quiz.quiz import events
from eliza_quiz.quiz.base import Notice, SessionController
from eliza_quiz.quiz.phases import (
    Answering,
    ChoosingDifficulty,
    Closed,
    Completed,
    Loading,
    QuizPhase,
    RemedialAnswering,
    RemedialShowingFeedback,
    ShowingFeedback,
    ShowingSummary,
)


class QuizSession(SessionController):
    """
    Drives a student through one quiz and its remediation loop.

    Exposes phase, current question, feedback, progress, stats and notice.
    All changes go through ``dispatch``.
    """

    def __init__(
        self,
        client: Any,
        quiz_id: str | None = None,
        resume_attempt_id: str | None = None,
        on_close: Callable[[], None] | None = None,
        on_change: Callable[[Any], None] | None = None,
    ):
        if not quiz_id and not resume_attempt_id:
            raise ValueError("Either quiz_id or resume_attempt_id is required")

        super().__init__(client, on_close=on_close, on_change=on_change)
        self.quiz_id = quiz_id
        self._resume_attempt_id = resume_attempt_id
        self._attempt_id: str | None = None
        self._summary: QuizSummary | None = None
        self._sequencer: RemediationSequencer | None = None
        self._initialized = False
        self._question_shown_at = 0.0
        self._state = Loading()

        self._handlers = {
            events.Initialize: self._initialize,
            events.SelectOption: self._select_option,
            events.SubmitAnswer: self._submit_answer,
            events.Continue: self._continue,
            events.Finish: self._finish,
            events.StartRemediation: self._start_remediation,
            events.ChooseDifficulty: self._choose_difficulty,
            events.SubmitRemedialAnswer: self._submit_remedial_answer,
            events.ContinueRemedial: self._continue_remedial,
            events.DismissNotice: self._dismiss_notice,
            events.Close: self._close,
        }

    # =========================================================================
    # Exposed state
    # =========================================================================

    @property
    def attempt_id(self) -> str | None:
        return self._attempt_id

    @property
    def summary(self) -> QuizSummary | None:
        return self._summary

    @property
    def current_question(self) -> QuizQuestion | None:
        return getattr(self._state, "question", None)

    @property
    def selected_option_id(self) -> str | None:
        return getattr(self._state, "selected_option_id", None)

    @property
    def feedback(self) -> Attempt | RemedialFeedback | None:
        if isinstance(self._state, ShowingFeedback):
            return self._state.attempt
        if isinstance(self._state, RemedialShowingFeedback):
            return self._state.feedback
        return None

    @property
    def progress(self) -> float:
        """Progress fraction for the indicator, derived from the current phase."""
        state = self._state
        if isinstance(state, Loading):
            return state.completed / state.total if state.total else 0.0
        if isinstance(state, Answering):
            return _fraction(state.question_index, state.total_questions)
        if isinstance(state, ShowingFeedback):
            return _fraction(state.question_index + 1, state.total_questions)
        if isinstance(state, (ShowingSummary, Completed)):
            return 1.0
        if isinstance(state, (ChoosingDifficulty, RemedialAnswering, RemedialShowingFeedback)):
            return self._sequencer.progress if self._sequencer else 0.0
        return 0.0

    # =========================================================================
    # Base quiz
    # =========================================================================

    async def _initialize(self, event: events.Initialize) -> None:
        if self._initialized:
            raise InvariantViolation("session already initialized")
        self._require_idle()
        self._initialized = True
        self._stats.reset()

        try:
            if self._resume_attempt_id:
                logger.info("Resuming quiz attempt {}", self._resume_attempt_id)
                # Initialization is never retried
                progress = await self._request(
                    self._client.get_current_question, self._resume_attempt_id, retry=False
                )
            else:
                logger.info("Starting quiz {}", self.quiz_id)
                progress = await self._request(self._client.start_quiz, self.quiz_id)

            self._attempt_id = progress.attempt_id
            if progress.question is None:
                await self._load_summary(fallback=None)
            else:
                self._enter_question(progress)

        except TransientNetworkError as e:
            error = InitializationError("Could not start or resume the quiz", cause=e)
            logger.error("Quiz initialization failed: {}", e)
            self._notice = Notice(
                message="We couldn't load this quiz. Please try again later.",
                operation=e.operation,
                error=error,
            )
            self.close()

    async def _select_option(self, event: events.SelectOption) -> None:
        state = self._expect(Answering, RemedialAnswering)
        if state.submitting:
            raise InvariantViolation("answer is being submitted")
        if not state.question.has_option(event.option_id):
            raise InvariantViolation(f"option {event.option_id} is not on question {state.question.id}")
        self._set_state(replace(state, selected_option_id=event.option_id))

    async def _submit_answer(self, event: events.SubmitAnswer) -> None:
        state = self._expect(Answering)
        if state.submitting:
            raise InvariantViolation("answer already submitted")
        if state.selected_option_id is None:
            raise InvariantViolation("no option selected")
        self._require_idle()

        self._set_state(replace(state, submitting=True))
        try:
            attempt = await self._request(
                self._client.answer_question,
                self._attempt_id,
                state.question.id,
                state.selected_option_id,
                self._time_on_question(),
            )
        except TransientNetworkError as e:
            self._set_state(state)
            self._report(e, "Failed to submit answer. Please try again.")
            return

        self._notice = None
        self._stats.record_answer(attempt.is_correct)
        logger.debug(
            "Question {} answered {}", state.question.id, "correctly" if attempt.is_correct else "incorrectly"
        )
        self._set_state(ShowingFeedback(
            question=state.question,
            question_index=state.question_index,
            total_questions=state.total_questions,
            selected_option_id=state.selected_option_id,
            attempt=attempt,
        ))

    async def _continue(self, event: events.Continue) -> None:
        state = self._expect(ShowingFeedback)
        self._require_idle()
        attempt = state.attempt

        if attempt.next_question is not None:
            self._enter_question(QuizProgress(
                attempt_id=self._attempt_id,
                question=attempt.next_question,
                question_index=state.question_index + 1,
                total_questions=state.total_questions,
            ))
            return

        self._set_state(Loading(completed=state.question_index + 1, total=state.total_questions))
        try:
            if attempt.all_questions_answered:
                await self._load_summary(fallback=state)
                return

            # TODO: drop this branch once the answer endpoint always sends
            # either next_question or all_questions_answered.
            logger.warning(
                "Answer to {} carried neither next_question nor all_questions_answered; "
                "re-fetching current question",
                attempt.question_id,
            )
            progress = await self._request(self._client.get_current_question, self._attempt_id)
        except TransientNetworkError as e:
            self._set_state(state)
            self._report(e, "Failed to load the next question. Please try again.")
            return

        if progress.question is None:
            await self._load_summary(fallback=state)
        else:
            self._enter_question(progress)

    async def _finish(self, event: events.Finish) -> None:
        state = self._expect(ShowingSummary)
        if state.summary.remedial_plan:
            raise InvariantViolation("remediation is required before finishing")
        self._complete()

    # =========================================================================
    # Remediation
    # =========================================================================

    async def _start_remediation(self, event: events.StartRemediation) -> None:
        state = self._expect(ShowingSummary)
        if not state.summary.remedial_plan:
            raise InvariantViolation("summary has no remedial plan")

        self._sequencer = RemediationSequencer(state.summary)
        logger.info("Starting remediation for {} missed question(s)", self._sequencer.total)
        self._set_state(ChoosingDifficulty(target=self._sequencer.current_target()))

    async def _choose_difficulty(self, event: events.ChooseDifficulty) -> None:
        state = self._expect(ChoosingDifficulty)
        if state.requesting:
            raise InvariantViolation("difficulty request already in flight")
        self._require_idle()

        target = self._sequencer.current_target() if self._sequencer else None
        if target is None:
            self._complete()
            return

        self._set_state(replace(state, target=target, requested=event.difficulty))
        try:
            response = await self._request(
                self._client.choose_remedial_difficulty,
                self._attempt_id,
                target.question_id,
                event.difficulty,
            )
        except TransientNetworkError as e:
            self._set_state(ChoosingDifficulty(target=target))
            self._report(e, "Couldn't load a practice question. Pick a difficulty to try again.")
            return

        self._notice = None
        self._question_shown_at = time.monotonic()
        self._set_state(RemedialAnswering(
            target=target,
            remedial_id=response.remedial_id,
            question=response.question,
            difficulty=response.difficulty,
            progress=response.progress,
        ))

    async def _submit_remedial_answer(self, event: events.SubmitRemedialAnswer) -> None:
        state = self._expect(RemedialAnswering)
        if state.submitting:
            raise InvariantViolation("remedial answer already submitted")
        if state.selected_option_id is None:
            raise InvariantViolation("no option selected")
        self._require_idle()

        self._set_state(replace(state, submitting=True))
        try:
            feedback = await self._request(
                self._client.submit_remedial_answer,
                state.remedial_id,
                state.selected_option_id,
            )
        except TransientNetworkError as e:
            self._set_state(state)
            self._report(e, "Failed to submit answer. Please try again.")
            return

        self._notice = None
        self._stats.record_answer(feedback.is_correct)
        self._set_state(RemedialShowingFeedback(
            target=state.target,
            remedial_id=state.remedial_id,
            question=state.question,
            difficulty=state.difficulty,
            selected_option_id=state.selected_option_id,
            feedback=feedback,
        ))

    async def _continue_remedial(self, event: events.ContinueRemedial) -> None:
        state = self._expect(RemedialShowingFeedback)
        feedback = state.feedback

        if feedback.next_question is not None and not feedback.remedial_completed:
            self._question_shown_at = time.monotonic()
            self._set_state(RemedialAnswering(
                target=state.target,
                remedial_id=state.remedial_id,
                question=feedback.next_question,
                difficulty=feedback.next_question.difficulty,
                progress=feedback.progress,
            ))
            return

        if feedback.remedial_completed is None:
            logger.warning(
                "Remedial feedback for {} had no next question and no completion flag; "
                "treating the concept as finished",
                state.remedial_id,
            )

        if self._sequencer.advance():
            self._set_state(ChoosingDifficulty(target=self._sequencer.current_target()))
        else:
            self._complete()

    # =========================================================================
    # Closing
    # =========================================================================

    async def _close(self, event: events.Close) -> None:
        self.close()

    def _enter_closed(self) -> Closed:
        return Closed()

    # =========================================================================
    # Internals
    # =========================================================================

    def _enter_question(self, progress: QuizProgress) -> None:
        self._question_shown_at = time.monotonic()
        self._set_state(Answering(
            question=progress.question,
            question_index=progress.question_index,
            total_questions=progress.total_questions,
        ))

    async def _load_summary(self, fallback: ShowingFeedback | None) -> None:
        """
        Fetch the summary and show it.

        ``fallback`` is the phase to return to on failure; None means the
        failure propagates (initialization handles it).
        """
        if not isinstance(self._state, Loading):
            self._set_state(Loading(completed=1, total=1))
        try:
            summary = await self._request(self._client.get_quiz_summary, self._attempt_id)
        except TransientNetworkError as e:
            if fallback is None:
                raise
            self._set_state(fallback)
            self._report(e, "Failed to load your results. Please try again.")
            return

        self._notice = None
        self._summary = summary
        logger.info(
            "Quiz attempt {} finished: {}% ({} wrong)",
            summary.attempt_id,
            summary.percentage,
            len(summary.wrong_questions),
        )
        self._set_state(ShowingSummary(summary=summary))

    def _complete(self) -> None:
        logger.info("Quiz attempt {} completed", self._attempt_id)
        self._set_state(Completed(summary=self._summary))

    def _time_on_question(self) -> int:
        return int(time.monotonic() - self._question_shown_at)


def _fraction(done: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return min(1.0, max(0.0, done / total))


__all__ = ["QuizSession", "QuizPhase"]
