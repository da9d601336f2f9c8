"""
Adaptive remediation.

Components:
- RemediationSequencer: Orders missed questions and walks through them
"""
from eliza_quiz.adaptive.remediation_sequencer import RemediationSequencer

__all__ = ["RemediationSequencer"]
