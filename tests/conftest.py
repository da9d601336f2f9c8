"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests,
including an in-memory AttemptService that plays the platform's role.
"""
import asyncio
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from eliza_quiz.core.errors import TransientNetworkError  # noqa: E402
from eliza_quiz.core.models import (  # noqa: E402
    Attempt,
    Difficulty,
    PracticeFeedback,
    PracticeStart,
    QuizOption,
    QuizProgress,
    QuizQuestion,
    QuizSummary,
    RemedialFeedback,
    RemedialProgress,
    RemedialQuestionResponse,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def make_question(question_id: str, difficulty: Difficulty = Difficulty.STANDARD, parent_id=None) -> QuizQuestion:
    """Question with options a/b/c where 'a' is the right answer."""
    return QuizQuestion(
        id=question_id,
        body=f"Question {question_id}?",
        options=(
            QuizOption(id="a", text="Right", label="A"),
            QuizOption(id="b", text="Wrong", label="B"),
            QuizOption(id="c", text="Also wrong", label="C"),
        ),
        difficulty=difficulty,
        parent_question_id=parent_id,
    )


class FakeAttemptService:
    """
    In-memory stand-in for the platform.

    Option 'a' is always correct. Individual operations can be held in
    flight with ``hold(op)`` or made to fail with ``fail(op, times)``.
    """

    def __init__(self, question_count: int = 3):
        self.attempt_id = "attempt-1"
        self.questions = [make_question(f"q{i + 1}") for i in range(question_count)]
        self.answers: dict[str, str] = {}
        self.calls: list[tuple[str, tuple]] = []

        # Server behaviour switches
        self.send_next_question = True
        self.send_all_answered_flag = True
        self.remedial_required = 1
        self.practice_batch_size = 2
        self.practice_lookahead = False

        self._gates: dict[str, asyncio.Event] = {}
        self._failures: dict[str, int] = {}
        self._remedial: dict[str, dict] = {}
        self._practice_answered = 0
        self._practice_correct = 0
        self._generated = 0

    # -- test controls ---------------------------------------------------

    def hold(self, operation: str) -> asyncio.Event:
        """Block ``operation`` until the returned event is set."""
        gate = asyncio.Event()
        self._gates[operation] = gate
        return gate

    def fail(self, operation: str, times: int = 1) -> None:
        self._failures[operation] = times

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    async def _enter(self, operation: str, *args) -> None:
        self.calls.append((operation, args))
        gate = self._gates.get(operation)
        if gate is not None:
            await gate.wait()
        if self._failures.get(operation):
            self._failures[operation] -= 1
            raise TransientNetworkError(operation, "simulated outage", 503)

    # -- graded quiz -----------------------------------------------------

    def _next_unanswered(self) -> int | None:
        for index, question in enumerate(self.questions):
            if question.id not in self.answers:
                return index
        return None

    def _progress(self) -> QuizProgress:
        index = self._next_unanswered()
        return QuizProgress(
            attempt_id=self.attempt_id,
            question=self.questions[index] if index is not None else None,
            question_index=index if index is not None else len(self.questions),
            total_questions=len(self.questions),
        )

    async def start_quiz(self, quiz_id):
        await self._enter("start_quiz", quiz_id)
        return self._progress()

    async def get_current_question(self, attempt_id, retry=True):
        await self._enter("get_current_question", attempt_id, retry)
        return self._progress()

    async def answer_question(self, attempt_id, question_id, option_id, time_spent_seconds=None):
        await self._enter("answer_question", attempt_id, question_id, option_id, time_spent_seconds)
        self.answers[question_id] = option_id
        index = self._next_unanswered()
        finished = index is None
        return Attempt(
            question_id=question_id,
            selected_option_id=option_id,
            is_correct=option_id == "a",
            score=1.0 if option_id == "a" else 0.0,
            explanation="Because A.",
            correct_answer="Right",
            next_question=self.questions[index] if (self.send_next_question and not finished) else None,
            all_questions_answered=finished if self.send_all_answered_flag else None,
        )

    async def get_quiz_summary(self, attempt_id):
        await self._enter("get_quiz_summary", attempt_id)
        questions = [
            {
                "question_id": q.id,
                "question_text": q.body,
                "is_correct": self.answers.get(q.id) == "a",
                "your_answer": self.answers.get(q.id),
                "correct_answer": "Right",
            }
            for q in self.questions
        ]
        score = sum(1 for q in questions if q["is_correct"])
        return QuizSummary.from_dict(
            {"score": score, "total": len(questions), "questions": questions},
            attempt_id,
        )

    # -- remediation -----------------------------------------------------

    async def choose_remedial_difficulty(self, attempt_id, question_id, difficulty):
        await self._enter("choose_remedial_difficulty", attempt_id, question_id, difficulty)
        remedial_id = f"rem-{question_id}"
        self._remedial[remedial_id] = {"parent": question_id, "difficulty": difficulty, "done": 0}
        return RemedialQuestionResponse(
            remedial_id=remedial_id,
            question=make_question(f"{question_id}-v1", difficulty, parent_id=question_id),
            difficulty=difficulty,
            progress=RemedialProgress(completed=0, required=self.remedial_required),
        )

    async def submit_remedial_answer(self, remedial_id, option_id):
        await self._enter("submit_remedial_answer", remedial_id, option_id)
        entry = self._remedial[remedial_id]
        entry["done"] += 1
        completed = entry["done"] >= self.remedial_required
        next_question = None
        if not completed:
            next_question = make_question(
                f"{entry['parent']}-v{entry['done'] + 1}", entry["difficulty"], parent_id=entry["parent"]
            )
        return RemedialFeedback(
            is_correct=option_id == "a",
            explanation="Because A.",
            correct_answer="Right",
            progress=RemedialProgress(completed=entry["done"], required=self.remedial_required),
            remedial_completed=completed,
            next_question=next_question,
        )

    # -- practice --------------------------------------------------------

    async def start_practice_session(self, topic_id, difficulty):
        await self._enter("start_practice_session", topic_id, difficulty)
        self._practice_answered = 0
        self._practice_correct = 0
        return PracticeStart(
            session_id="practice-1",
            questions=tuple(make_question(f"p{i + 1}", difficulty) for i in range(self.practice_batch_size)),
            quiz_context_used=True,
        )

    async def answer_practice_question(self, session_id, question_id, option_id):
        await self._enter("answer_practice_question", session_id, question_id, option_id)
        self._practice_answered += 1
        if option_id == "a":
            self._practice_correct += 1
        next_question = None
        if self.practice_lookahead:
            next_question = make_question(f"look-{self._practice_answered}")
        return PracticeFeedback(
            is_correct=option_id == "a",
            explanation="Because A.",
            correct_answer="Right",
            questions_completed=self._practice_answered,
            total_correct=self._practice_correct,
            next_question=next_question,
        )

    async def generate_more_practice_question(self, session_id):
        await self._enter("generate_more_practice_question", session_id)
        self._generated += 1
        return make_question(f"gen-{self._generated}")


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def settings_env(monkeypatch):
    """Override settings through environment variables for one test."""
    from config import get_settings

    def apply(**values):
        for key, value in values.items():
            monkeypatch.setenv(key.upper(), str(value))
        get_settings.cache_clear()

    yield apply
    get_settings.cache_clear()


@pytest.fixture
def fake_service():
    """In-memory platform with a three-question quiz."""
    return FakeAttemptService()


@pytest.fixture
def sample_question_payload():
    """Provide a question payload as the platform sends it."""
    return {
        "id": "q-001",
        "body": "Which layer of the OSI model handles routing?",
        "options": [
            {"id": "opt-1", "text": "Network"},
            {"id": "opt-2", "text": "Transport"},
            {"id": "opt-3", "text": "Data Link"},
        ],
        "difficulty": "standard",
    }


@pytest.fixture
def sample_summary_payload():
    """Provide a quiz summary payload with two missed questions."""
    return {
        "attempt_id": "attempt-1",
        "score": 1,
        "total": 3,
        "questions": [
            {"question_id": "q1", "question_text": "First?", "is_correct": True},
            {
                "question_id": "q2",
                "question_text": "Second?",
                "is_correct": False,
                "your_answer": "Transport",
                "correct_answer": "Network",
                "recommended_difficulty": "easy",
            },
            {"question_id": "q3", "question_text": "Third?", "is_correct": False},
        ],
    }
