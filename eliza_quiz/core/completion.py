"""
Lesson Completion Scoring.

Combines the three parts of a lesson (video, content sections, quiz) into
one completion percentage. Full and compact progress displays must both go
through ``completion_percentage`` so they can never disagree.

Formula:
    completion = 100 × (0.3 × video + 0.3 × sections + 0.4 × quiz)

Sub-scores:
    video    = 1.0 if watched, else progress_pct / 100
    sections = 1.0 if every section was viewed, else 0.0 (no partial credit)
    quiz     = 1.0 if passed, else the 0-1 quiz score (0 when absent)
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from config import get_settings

# ============================================================================
# Constants
# ============================================================================

WEIGHT_VIDEO = 0.3
WEIGHT_SECTIONS = 0.3
WEIGHT_QUIZ = 0.4

# Video and quiz pass thresholds live in config.Settings


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives (12.5 -> 13)."""
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ============================================================================
# Scorer
# ============================================================================


def completion_percentage(
    video_watched: bool,
    video_progress_pct: float,
    all_sections_viewed: bool,
    quiz_passed: bool,
    quiz_score: float | None,
) -> int:
    """
    Weighted lesson completion.

    Args:
        video_watched: Video counted as fully watched
        video_progress_pct: Video progress 0-100 (clamped)
        all_sections_viewed: Every content section was opened
        quiz_passed: Lesson quiz passed
        quiz_score: Average quiz score 0-1 (clamped), None if never taken

    Returns:
        Integer percent 0-100
    """
    video = 1.0 if video_watched else _clamp(video_progress_pct, 0.0, 100.0) / 100
    sections = 1.0 if all_sections_viewed else 0.0
    if quiz_passed:
        quiz = 1.0
    else:
        quiz = _clamp(quiz_score, 0.0, 1.0) if quiz_score is not None else 0.0

    total = WEIGHT_VIDEO * video + WEIGHT_SECTIONS * sections + WEIGHT_QUIZ * quiz
    return int(_clamp(round_half_up(100 * total), 0, 100))


def is_video_watched(progress_pct: float, threshold: float | None = None) -> bool:
    """A video counts as watched once playback reaches the threshold (percent)."""
    if threshold is None:
        threshold = get_settings().video_watched_threshold
    return progress_pct >= threshold


def is_quiz_passed(score: float | None, threshold: float | None = None) -> bool:
    """
    Quiz passing check on the 0-1 average score.

    ``threshold`` is on the same 0-1 scale; it defaults to the configured
    pass percentage.
    """
    if threshold is None:
        threshold = get_settings().quiz_pass_threshold / 100
    return score is not None and score >= threshold


# ============================================================================
# Lesson Progress
# ============================================================================


@dataclass(frozen=True)
class ProgressComponent:
    """One row of the progress breakdown."""

    key: str
    label: str
    completed: bool
    progress_pct: float
    weight_pct: int


@dataclass(frozen=True)
class LessonProgress:
    """
    Progress of one lesson (subchapter).

    Both display properties call ``completion_percentage``.
    """

    video_watched: bool = False
    video_progress_pct: float = 0.0
    all_sections_viewed: bool = False
    quiz_passed: bool = False
    quiz_score: float | None = None

    @property
    def completion_percentage(self) -> int:
        return completion_percentage(
            self.video_watched,
            self.video_progress_pct,
            self.all_sections_viewed,
            self.quiz_passed,
            self.quiz_score,
        )

    @property
    def is_completed(self) -> bool:
        """All three parts complete."""
        return self.video_watched and self.all_sections_viewed and self.quiz_passed

    @property
    def compact_label(self) -> str:
        """Short form for lists and cards."""
        return f"{self.completion_percentage}%"

    def breakdown(self) -> list[ProgressComponent]:
        """Per-part rows for the detailed view."""
        return [
            ProgressComponent(
                key="video",
                label="Video",
                completed=self.video_watched,
                progress_pct=_clamp(self.video_progress_pct, 0.0, 100.0),
                weight_pct=round_half_up(WEIGHT_VIDEO * 100),
            ),
            ProgressComponent(
                key="sections",
                label="Sections",
                completed=self.all_sections_viewed,
                progress_pct=100.0 if self.all_sections_viewed else 0.0,
                weight_pct=round_half_up(WEIGHT_SECTIONS * 100),
            ),
            ProgressComponent(
                key="quiz",
                label="Quiz",
                completed=self.quiz_passed,
                progress_pct=_clamp(self.quiz_score or 0.0, 0.0, 1.0) * 100,
                weight_pct=round_half_up(WEIGHT_QUIZ * 100),
            ),
        ]
