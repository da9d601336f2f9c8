"""
Unit tests for RemediationSequencer.
"""

from eliza_quiz.adaptive.remediation_sequencer import RemediationSequencer
from eliza_quiz.core.models import QuizSummary


class TestRemediationSequencer:
    """Tests for the walk over missed questions."""

    def test_targets_follow_summary_order(self, sample_summary_payload):
        sequencer = RemediationSequencer(QuizSummary.from_dict(sample_summary_payload))

        assert sequencer.total == 2
        assert sequencer.current_target().question_id == "q2"
        assert sequencer.advance() is True
        assert sequencer.current_target().question_id == "q3"
        assert sequencer.advance() is False
        assert sequencer.current_target() is None
        assert sequencer.is_exhausted()

    def test_pointer_clamped_at_end(self, sample_summary_payload):
        sequencer = RemediationSequencer(QuizSummary.from_dict(sample_summary_payload))
        for _ in range(5):
            sequencer.advance()

        assert sequencer.index == sequencer.total == 2
        assert sequencer.progress == 1.0

    def test_progress(self, sample_summary_payload):
        sequencer = RemediationSequencer(QuizSummary.from_dict(sample_summary_payload))

        assert sequencer.progress == 0.0
        sequencer.advance()
        assert sequencer.progress == 0.5

    def test_nothing_to_remediate(self):
        summary = QuizSummary(attempt_id="a1", score=2, total=2, percentage=100)
        sequencer = RemediationSequencer(summary)

        assert sequencer.is_exhausted()
        assert sequencer.current_target() is None
        assert sequencer.progress == 1.0
        assert sequencer.advance() is False

    def test_wrong_questions_memoized(self, sample_summary_payload):
        sequencer = RemediationSequencer(QuizSummary.from_dict(sample_summary_payload))

        assert sequencer.wrong_questions is sequencer.wrong_questions
