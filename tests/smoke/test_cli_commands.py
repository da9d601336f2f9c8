"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import subprocess
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

from eliza_quiz.cli import quiz_cli
from eliza_quiz.core.models import Difficulty

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


def run_cli_command(command: str, timeout: int = 30) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        command: The command to run (after 'python -m eliza_quiz.cli.quiz_cli')
        timeout: Maximum time to wait

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    full_command = f"{sys.executable} -m eliza_quiz.cli.quiz_cli {command}"

    result = subprocess.run(
        full_command,
        shell=True,
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        timeout=timeout,
    )

    return result.returncode, result.stdout, result.stderr


class ScriptedPrompt:
    """Stands in for rich's Prompt, answering from a list."""

    def __init__(self, answers):
        self.answers = list(answers)

    def ask(self, *args, **kwargs):
        return self.answers.pop(0)


class _ServiceContext:
    def __init__(self, service):
        self.service = service

    async def __aenter__(self):
        return self.service

    async def __aexit__(self, *args):
        return None


@pytest.fixture
def offline_cli(monkeypatch, fake_service):
    """Point the CLI at the in-memory platform."""
    monkeypatch.setattr(
        quiz_cli,
        "AttemptClient",
        SimpleNamespace(from_settings=lambda settings=None: _ServiceContext(fake_service)),
    )
    return fake_service


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        """Main help should list every command."""
        code, stdout, stderr = run_cli_command("--help")

        assert code == 0, f"Help failed: {stderr}"
        for command in ("quiz", "practice", "progress"):
            assert command in stdout

    def test_quiz_help(self):
        code, stdout, stderr = run_cli_command("quiz --help")

        assert code == 0, f"Help failed: {stderr}"
        assert "--resume" in stdout


class TestProgressCommand:
    """Test the lesson completion calculator."""

    def test_compact(self):
        code, stdout, stderr = run_cli_command("progress --video-pct 50 --quiz-score 0.5 --compact")

        assert code == 0, f"Command failed: {stderr}"
        assert stdout.strip() == "35%"

    def test_full_table(self):
        code, stdout, stderr = run_cli_command("progress --video-watched --sections --quiz-passed")

        assert code == 0, f"Command failed: {stderr}"
        assert "Lesson Progress" in stdout
        assert "Completion: 100%" in stdout

    def test_video_threshold_counts_as_watched(self):
        code, stdout, stderr = run_cli_command("progress --video-pct 95 --compact")

        assert code == 0, f"Command failed: {stderr}"
        assert stdout.strip() == "30%"


class TestInteractiveFlows:
    """Drive the interactive commands against the in-memory platform."""

    @pytest.mark.asyncio
    async def test_quiz_all_correct(self, offline_cli, monkeypatch, capsys):
        monkeypatch.setattr(quiz_cli, "Prompt", ScriptedPrompt(["a", "", "a", "", "a", ""]))

        await quiz_cli._run_quiz("quiz-1", None)

        out = capsys.readouterr().out
        assert "Quiz complete" in out
        assert offline_cli.count("answer_question") == 3

    @pytest.mark.asyncio
    async def test_quiz_with_remediation(self, offline_cli, monkeypatch, capsys):
        answers = ["b", "", "a", "", "a", "", "", "easy", "a", ""]
        monkeypatch.setattr(quiz_cli, "Prompt", ScriptedPrompt(answers))

        await quiz_cli._run_quiz("quiz-1", None)

        out = capsys.readouterr().out
        assert "Quiz complete" in out
        assert offline_cli.count("choose_remedial_difficulty") == 1

    @pytest.mark.asyncio
    async def test_quiz_start_failure_shows_notice(self, offline_cli, monkeypatch, capsys):
        offline_cli.fail("start_quiz")
        monkeypatch.setattr(quiz_cli, "Prompt", ScriptedPrompt([]))

        await quiz_cli._run_quiz("quiz-1", None)

        out = capsys.readouterr().out
        assert "couldn't load this quiz" in out
        assert "Quiz closed" in out
        assert "Quiz complete" not in out

    @pytest.mark.asyncio
    async def test_practice_until_quit(self, offline_cli, monkeypatch, capsys):
        monkeypatch.setattr(quiz_cli, "Prompt", ScriptedPrompt(["a", "", "a", "q"]))

        await quiz_cli._run_practice("topic-1", Difficulty.EASY)

        out = capsys.readouterr().out
        assert "Practice ended" in out
        assert "tailored to your recent quiz mistakes" in out
        assert offline_cli.count("answer_practice_question") == 2
