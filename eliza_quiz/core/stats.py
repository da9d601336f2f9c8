"""
Session statistics.

Running counters shared by the normal and remedial quiz flow and by
practice mode. Owned by exactly one session and reset when that session
starts. Counters only ever grow; there is no undo.
"""

from __future__ import annotations

from dataclasses import dataclass

from eliza_quiz.core.completion import round_half_up


@dataclass(frozen=True)
class StatsSnapshot:
    """Immutable view of the counters handed to the UI."""

    questions_completed: int
    total_correct: int
    accuracy_percent: int
    current_streak: int
    best_streak: int


class SessionStats:
    """Accumulates answers for one quiz or practice session."""

    def __init__(self) -> None:
        self._questions_completed = 0
        self._total_correct = 0
        self._current_streak = 0
        self._best_streak = 0

    @property
    def questions_completed(self) -> int:
        return self._questions_completed

    @property
    def total_correct(self) -> int:
        return self._total_correct

    @property
    def current_streak(self) -> int:
        return self._current_streak

    @property
    def best_streak(self) -> int:
        return self._best_streak

    @property
    def accuracy(self) -> float:
        """Fraction correct, 0.0 before any answer."""
        if self._questions_completed == 0:
            return 0.0
        return self._total_correct / self._questions_completed

    def accuracy_percent(self) -> int:
        if self._questions_completed == 0:
            return 0
        return round_half_up(100 * self._total_correct / self._questions_completed)

    def record_answer(self, is_correct: bool) -> None:
        """
        Count one graded answer.

        Raises:
            TypeError: if is_correct is not a bool
        """
        if not isinstance(is_correct, bool):
            raise TypeError(f"is_correct must be bool, got {type(is_correct).__name__}")

        self._questions_completed += 1
        if is_correct:
            self._total_correct += 1
            self._current_streak += 1
            self._best_streak = max(self._best_streak, self._current_streak)
        else:
            self._current_streak = 0

    def reset(self) -> None:
        """Zero all counters. Called on session start."""
        self._questions_completed = 0
        self._total_correct = 0
        self._current_streak = 0
        self._best_streak = 0

    def snapshot(self) -> StatsSnapshot:
        return StatsSnapshot(
            questions_completed=self._questions_completed,
            total_correct=self._total_correct,
            accuracy_percent=self.accuracy_percent(),
            current_streak=self._current_streak,
            best_streak=self._best_streak,
        )

    def __repr__(self) -> str:
        return (
            f"SessionStats(completed={self._questions_completed}, "
            f"correct={self._total_correct}, accuracy={self.accuracy_percent()}%)"
        )
