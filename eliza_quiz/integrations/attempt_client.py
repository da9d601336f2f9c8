"""
Attempt API client for quiz, remediation and practice flows.

Handles HTTP communication with the ELIZA platform backend. Every response is
parsed into the canonical records of ``eliza_quiz.core.models`` before it is
returned, and every failure is raised as ``TransientNetworkError``.

Read-only requests are retried with exponential backoff. Submissions are
never retried: an Attempt must be created exactly once.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx
from loguru import logger

from eliza_quiz.core.errors import TransientNetworkError
from eliza_quiz.core.models import (
    Attempt,
    Difficulty,
    PracticeFeedback,
    PracticeStart,
    QuizProgress,
    QuizQuestion,
    QuizSummary,
    RemedialFeedback,
    RemedialQuestionResponse,
)


class AttemptService(Protocol):
    """Operations the quiz engine needs from the platform."""

    async def start_quiz(self, quiz_id: str) -> QuizProgress:
        ...

    async def get_current_question(self, attempt_id: str, retry: bool = True) -> QuizProgress:
        ...

    async def answer_question(
        self,
        attempt_id: str,
        question_id: str,
        option_id: str,
        time_spent_seconds: int | None = None,
    ) -> Attempt:
        ...

    async def get_quiz_summary(self, attempt_id: str) -> QuizSummary:
        ...

    async def choose_remedial_difficulty(
        self,
        attempt_id: str,
        question_id: str,
        difficulty: Difficulty,
    ) -> RemedialQuestionResponse:
        ...

    async def submit_remedial_answer(self, remedial_id: str, option_id: str) -> RemedialFeedback:
        ...

    async def start_practice_session(self, topic_id: str, difficulty: Difficulty) -> PracticeStart:
        ...

    async def answer_practice_question(
        self,
        session_id: str,
        question_id: str,
        option_id: str,
    ) -> PracticeFeedback:
        ...

    async def generate_more_practice_question(self, session_id: str) -> QuizQuestion:
        ...


class AttemptClient:
    """HTTP client for the platform's attempt endpoints."""

    def __init__(
        self,
        api_url: str,
        api_token: str | None = None,
        timeout_ms: int = 30000,
        retry_attempts: int = 3,
    ):
        """
        Initialize attempt client.

        Args:
            api_url: Base URL of the platform backend
            api_token: Optional bearer token
            timeout_ms: Request timeout in milliseconds
            retry_attempts: Attempts for read-only requests
        """
        self.api_url = api_url.rstrip("/")
        self.timeout_seconds = timeout_ms / 1000.0
        self.retry_attempts = max(1, retry_attempts)

        headers = {"Content-Type": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"

        self.client = httpx.AsyncClient(
            headers=headers,
            timeout=httpx.Timeout(self.timeout_seconds),
            follow_redirects=True,
        )

    @classmethod
    def from_settings(cls, settings: Any = None) -> AttemptClient:
        """Build a client from application settings."""
        if settings is None:
            from config import get_settings

            settings = get_settings()
        config = settings.get_attempt_client_config()
        if not settings.has_token_configured():
            logger.debug("No API token configured; requests are unauthenticated")
            config["api_token"] = None
        return cls(**config)

    async def __aenter__(self) -> AttemptClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    # =========================================================================
    # Transport
    # =========================================================================

    @staticmethod
    def _decode(operation: str, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise TransientNetworkError(operation, f"invalid JSON body: {e}") from e
        if not isinstance(data, dict):
            raise TransientNetworkError(operation, "expected a JSON object")
        return data

    async def _get(self, operation: str, path: str, retry: bool = True) -> dict[str, Any]:
        """GET with retry on timeouts, 5xx and transport errors. ``retry=False`` tries once."""
        attempts = self.retry_attempts if retry else 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                response = await self.client.get(f"{self.api_url}{path}")
                response.raise_for_status()
                return self._decode(operation, response)

            except httpx.TimeoutException as e:
                last_error = e
                wait_time = 2 ** attempt  # Exponential backoff: 1s, 2s, 4s
                logger.warning("{} timeout on attempt {}/{}.", operation, attempt + 1, attempts)
                if attempt < attempts - 1:
                    await asyncio.sleep(wait_time)

            except httpx.HTTPStatusError as e:
                last_error = e
                status = e.response.status_code
                if status < 500:
                    logger.error("{} rejected: HTTP {}", operation, status)
                    raise TransientNetworkError(operation, f"HTTP {status}", status) from e
                wait_time = 2 ** attempt
                logger.warning(
                    "{} server error {} on attempt {}/{}.",
                    operation,
                    status,
                    attempt + 1,
                    attempts,
                )
                if attempt < attempts - 1:
                    await asyncio.sleep(wait_time)

            except httpx.RequestError as e:
                last_error = e
                wait_time = 2 ** attempt
                logger.warning(
                    "{} request error on attempt {}/{}: {}",
                    operation,
                    attempt + 1,
                    attempts,
                    e,
                )
                if attempt < attempts - 1:
                    await asyncio.sleep(wait_time)

        status_code = None
        if isinstance(last_error, httpx.HTTPStatusError):
            status_code = last_error.response.status_code
        logger.error("{} failed after {} attempts: {}", operation, attempts, last_error)
        raise TransientNetworkError(
            operation,
            f"failed after {attempts} attempts: {last_error}",
            status_code,
        ) from last_error

    async def _post(self, operation: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST once. Failures surface to the caller, which decides whether the user retries."""
        try:
            response = await self.client.post(f"{self.api_url}{path}", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("{} failed: HTTP {}", operation, status)
            raise TransientNetworkError(operation, f"HTTP {status}", status) from e
        except httpx.HTTPError as e:
            logger.error("{} failed: {}", operation, e)
            raise TransientNetworkError(operation, str(e) or type(e).__name__) from e
        return self._decode(operation, response)

    @staticmethod
    def _parse(operation: str, parser, *args: Any, **kwargs: Any):
        try:
            return parser(*args, **kwargs)
        except (ValueError, KeyError, TypeError) as e:
            logger.error("{} returned a malformed payload: {}", operation, e)
            raise TransientNetworkError(operation, f"malformed response: {e}") from e

    # =========================================================================
    # Graded quiz
    # =========================================================================

    async def start_quiz(self, quiz_id: str) -> QuizProgress:
        """
        Start a fresh attempt of a quiz.

        Returns:
            Attempt id plus the first question (None if the quiz is empty)
        """
        data = await self._post("start_quiz", f"/api/v1/quizzes/{quiz_id}/attempts", {})
        return self._parse("start_quiz", QuizProgress.from_dict, data)

    async def get_current_question(self, attempt_id: str, retry: bool = True) -> QuizProgress:
        """
        Fetch the outstanding question of an attempt. No question means finished.

        Args:
            attempt_id: Quiz attempt (session) id
            retry: Retry on transient failures; False makes a single attempt
        """
        data = await self._get(
            "get_current_question",
            f"/api/v1/quiz-attempts/{attempt_id}/current-question",
            retry=retry,
        )
        return self._parse("get_current_question", QuizProgress.from_dict, data, attempt_id)

    async def answer_question(
        self,
        attempt_id: str,
        question_id: str,
        option_id: str,
        time_spent_seconds: int | None = None,
    ) -> Attempt:
        """
        Submit one answer.

        Args:
            attempt_id: Quiz attempt (session) id
            question_id: Question being answered
            option_id: Selected option id
            time_spent_seconds: Time on the question, when known

        Returns:
            The graded Attempt
        """
        payload: dict[str, Any] = {
            "question_id": question_id,
            "selected_option_id": option_id,
        }
        if time_spent_seconds is not None:
            payload["time_spent_seconds"] = time_spent_seconds

        data = await self._post(
            "answer_question",
            f"/api/v1/quiz-attempts/{attempt_id}/answer",
            payload,
        )
        return self._parse("answer_question", Attempt.from_dict, data, question_id, option_id)

    async def get_quiz_summary(self, attempt_id: str) -> QuizSummary:
        """Fetch the results of a finished attempt."""
        data = await self._get(
            "get_quiz_summary",
            f"/api/v1/quiz-attempts/{attempt_id}/summary",
        )
        return self._parse("get_quiz_summary", QuizSummary.from_dict, data, attempt_id)

    # =========================================================================
    # Remediation
    # =========================================================================

    async def choose_remedial_difficulty(
        self,
        attempt_id: str,
        question_id: str,
        difficulty: Difficulty,
    ) -> RemedialQuestionResponse:
        """Open a remedial sub-session for one missed question at the chosen difficulty."""
        data = await self._post(
            "choose_remedial_difficulty",
            f"/api/v1/quiz-attempts/{attempt_id}/remedial",
            {"question_id": question_id, "difficulty": Difficulty.from_value(difficulty).value},
        )
        return self._parse("choose_remedial_difficulty", RemedialQuestionResponse.from_dict, data)

    async def submit_remedial_answer(self, remedial_id: str, option_id: str) -> RemedialFeedback:
        data = await self._post(
            "submit_remedial_answer",
            f"/api/v1/remedial/{remedial_id}/answer",
            {"selected_option_id": option_id},
        )
        return self._parse("submit_remedial_answer", RemedialFeedback.from_dict, data)

    # =========================================================================
    # Practice mode
    # =========================================================================

    async def start_practice_session(self, topic_id: str, difficulty: Difficulty) -> PracticeStart:
        data = await self._post(
            "start_practice_session",
            "/api/v1/practice/sessions",
            {"topic_id": topic_id, "difficulty": Difficulty.from_value(difficulty).value},
        )
        return self._parse("start_practice_session", PracticeStart.from_dict, data)

    async def answer_practice_question(
        self,
        session_id: str,
        question_id: str,
        option_id: str,
    ) -> PracticeFeedback:
        data = await self._post(
            "answer_practice_question",
            f"/api/v1/practice/sessions/{session_id}/answer",
            {"question_id": question_id, "selected_option_id": option_id},
        )
        return self._parse("answer_practice_question", PracticeFeedback.from_dict, data)

    async def generate_more_practice_question(self, session_id: str) -> QuizQuestion:
        """Ask the server to generate one more practice question."""
        data = await self._post(
            "generate_more_practice_question",
            f"/api/v1/practice/sessions/{session_id}/generate",
            {},
        )
        raw = data.get("question") or data.get("next_question")
        if not raw:
            raise TransientNetworkError("generate_more_practice_question", "no question in response")
        return self._parse("generate_more_practice_question", QuizQuestion.from_dict, raw)

    # =========================================================================
    # Health
    # =========================================================================

    async def health_check(self) -> bool:
        """
        Check if the platform API is available.

        Returns:
            True if API is healthy, False otherwise
        """
        try:
            response = await self.client.get(
                f"{self.api_url}/health",
                timeout=5.0,
            )
            return response.status_code == 200

        except httpx.HTTPError:
            return False
