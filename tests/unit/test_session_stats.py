"""
Unit tests for SessionStats.
"""

import pytest

from eliza_quiz.core.stats import SessionStats


class TestSessionStats:
    """Tests for the running answer counters."""

    def test_starts_empty(self):
        stats = SessionStats()

        assert stats.questions_completed == 0
        assert stats.total_correct == 0
        assert stats.accuracy_percent() == 0
        assert stats.accuracy == 0.0

    def test_record_answers(self):
        stats = SessionStats()
        for outcome in (True, False, True):
            stats.record_answer(outcome)

        assert stats.questions_completed == 3
        assert stats.total_correct == 2
        assert stats.accuracy_percent() == 67

    def test_accuracy_rounds_half_up(self):
        stats = SessionStats()
        stats.record_answer(True)
        for _ in range(7):
            stats.record_answer(False)

        assert stats.accuracy_percent() == 13  # 12.5 rounds up

    def test_non_bool_rejected(self):
        stats = SessionStats()

        with pytest.raises(TypeError):
            stats.record_answer(1)
        with pytest.raises(TypeError):
            stats.record_answer(None)

        assert stats.questions_completed == 0

    def test_streaks(self):
        stats = SessionStats()
        for outcome in (True, True, True, False, True):
            stats.record_answer(outcome)

        assert stats.current_streak == 1
        assert stats.best_streak == 3

    def test_reset(self):
        stats = SessionStats()
        stats.record_answer(True)
        stats.reset()

        snapshot = stats.snapshot()
        assert snapshot.questions_completed == 0
        assert snapshot.total_correct == 0
        assert snapshot.best_streak == 0

    def test_counters_stay_consistent(self):
        """Correct answers never exceed answered questions; accuracy stays in range."""
        stats = SessionStats()
        pattern = [True, False, False, True, True, True, False] * 5
        for outcome in pattern:
            stats.record_answer(outcome)
            assert stats.total_correct <= stats.questions_completed
            assert 0 <= stats.accuracy_percent() <= 100

    def test_snapshot_is_frozen(self):
        stats = SessionStats()
        stats.record_answer(True)
        snapshot = stats.snapshot()

        stats.record_answer(False)

        assert snapshot.questions_completed == 1
        assert snapshot.accuracy_percent == 100
        with pytest.raises(AttributeError):
            snapshot.total_correct = 5
