"""
ELIZA quiz engine.

Client-side state machines for graded quizzes with remediation and for
ungraded practice sessions, plus the progress metrics that go with them.
"""

__version__ = "1.0.0"
