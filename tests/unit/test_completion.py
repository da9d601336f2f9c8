"""
Unit tests for lesson completion scoring.
"""

import pytest

from eliza_quiz.core.completion import (
    LessonProgress,
    completion_percentage,
    is_quiz_passed,
    is_video_watched,
    round_half_up,
)


class TestCompletionPercentage:
    """Tests for the weighted completion formula."""

    def test_everything_done(self):
        assert completion_percentage(True, 0, True, True, None) == 100

    def test_partial_progress(self):
        # 0.3 * 0.5 + 0 + 0.4 * 0.5 = 0.35
        assert completion_percentage(False, 50, False, False, 0.5) == 35

    def test_nothing_done(self):
        assert completion_percentage(False, 0, False, False, None) == 0

    def test_sections_all_or_nothing(self):
        assert completion_percentage(False, 0, True, False, None) == 30

    def test_passed_quiz_ignores_score(self):
        assert completion_percentage(False, 0, False, True, 0.2) == 40

    def test_inputs_are_clamped(self):
        assert completion_percentage(False, 250, False, False, 3.0) == 70
        assert completion_percentage(False, -10, False, False, -1.0) == 0

    @pytest.mark.parametrize("video_pct", [0, 17, 33, 50, 89, 100])
    @pytest.mark.parametrize("quiz_score", [None, 0.0, 0.33, 0.69, 1.0])
    def test_always_in_range(self, video_pct, quiz_score):
        value = completion_percentage(False, video_pct, False, False, quiz_score)

        assert 0 <= value <= 100


class TestHelpers:
    """Tests for thresholds and rounding."""

    def test_round_half_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2

    def test_video_threshold(self):
        assert is_video_watched(90)
        assert not is_video_watched(89.9)

    def test_quiz_threshold(self):
        assert is_quiz_passed(0.7)
        assert not is_quiz_passed(0.69)
        assert not is_quiz_passed(None)

    def test_quiz_threshold_follows_settings(self, settings_env):
        settings_env(quiz_pass_threshold=80)

        assert not is_quiz_passed(0.75)
        assert is_quiz_passed(0.8)
        assert is_quiz_passed(0.75, threshold=0.7)

    def test_video_threshold_follows_settings(self, settings_env):
        settings_env(video_watched_threshold=75)

        assert is_video_watched(75)
        assert not is_video_watched(74)


class TestLessonProgress:
    """Tests for LessonProgress display values."""

    def test_full_and_compact_agree(self):
        lesson = LessonProgress(video_progress_pct=50, quiz_score=0.5)

        assert lesson.completion_percentage == 35
        assert lesson.compact_label == "35%"

    def test_is_completed(self):
        lesson = LessonProgress(video_watched=True, all_sections_viewed=True, quiz_passed=True)

        assert lesson.is_completed
        assert lesson.completion_percentage == 100

    def test_breakdown(self):
        lesson = LessonProgress(video_progress_pct=40, all_sections_viewed=True, quiz_score=0.5)
        rows = {row.key: row for row in lesson.breakdown()}

        assert [row.weight_pct for row in lesson.breakdown()] == [30, 30, 40]
        assert rows["video"].progress_pct == 40
        assert rows["sections"].completed is True
        assert rows["quiz"].progress_pct == 50
