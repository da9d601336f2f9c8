"""
External integrations for the quiz engine.

Modules:
- attempt_client: HTTP client for quiz attempts, remediation and practice
"""
from .attempt_client import AttemptClient, AttemptService

__all__ = ["AttemptClient", "AttemptService"]
