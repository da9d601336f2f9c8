"""
Remediation Sequencer.

Walks a student through the questions they missed, one concept at a time.

Given a QuizSummary:
1. Derives the ordered list of wrong questions (summary order, never re-sorted)
2. Points at the concept currently being remediated
3. Advances to the next concept once remediation for it is completed

The pointer only moves forward and never runs past the end of the list.
"""
from __future__ import annotations

from functools import cached_property

from loguru import logger

from eliza_quiz.core.models import QuestionResult, QuizSummary


class RemediationSequencer:
    """Ordered walk over the missed questions of a quiz summary."""

    def __init__(self, summary: QuizSummary):
        self._summary = summary
        self._index = 0

    @cached_property
    def wrong_questions(self) -> tuple[QuestionResult, ...]:
        """Memoized; the summary is immutable."""
        return self._summary.wrong_questions

    @property
    def index(self) -> int:
        return self._index

    @property
    def total(self) -> int:
        return len(self.wrong_questions)

    @property
    def progress(self) -> float:
        """Fraction of missed concepts finished, 1.0 when there was nothing to remediate."""
        if self.total == 0:
            return 1.0
        return self._index / self.total

    def current_target(self) -> QuestionResult | None:
        """The missed question being remediated, or None once exhausted."""
        if self.is_exhausted():
            return None
        return self.wrong_questions[self._index]

    def advance(self) -> bool:
        """
        Move to the next missed question.

        Returns:
            True if another question remains to be remediated
        """
        if self._index < self.total:
            self._index += 1
        else:
            logger.debug("Remediation pointer already at end ({}/{})", self._index, self.total)
        return not self.is_exhausted()

    def is_exhausted(self) -> bool:
        return self._index >= self.total
