"""
UI events accepted by ``dispatch``.

Events carry only what the user chose; everything else comes from the
current phase.
"""

from __future__ import annotations

from dataclasses import dataclass

from eliza_quiz.core.models import Difficulty


# Shared
@dataclass(frozen=True)
class SelectOption:
    option_id: str


@dataclass(frozen=True)
class SubmitAnswer:
    pass


@dataclass(frozen=True)
class DismissNotice:
    pass


@dataclass(frozen=True)
class Close:
    pass


# Graded quiz
@dataclass(frozen=True)
class Initialize:
    pass


@dataclass(frozen=True)
class Continue:
    pass


@dataclass(frozen=True)
class Finish:
    """Leave the summary of a quiz that needs no remediation."""


@dataclass(frozen=True)
class StartRemediation:
    pass


@dataclass(frozen=True)
class ChooseDifficulty:
    difficulty: Difficulty


@dataclass(frozen=True)
class SubmitRemedialAnswer:
    pass


@dataclass(frozen=True)
class ContinueRemedial:
    pass


# Practice mode
@dataclass(frozen=True)
class StartPractice:
    difficulty: Difficulty


@dataclass(frozen=True)
class Next:
    pass


@dataclass(frozen=True)
class GenerateMore:
    pass


@dataclass(frozen=True)
class End:
    pass
