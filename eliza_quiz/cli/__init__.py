"""
Command line interface.

Commands:
- quiz: Graded quiz with remediation
- practice: Endless practice on a topic
- progress: Lesson completion calculator
"""
from eliza_quiz.cli.quiz_cli import app, run

__all__ = ["app", "run"]
