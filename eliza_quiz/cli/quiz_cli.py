"""
ELIZA Quiz CLI - take quizzes and practice from the terminal.

Usage:
    eliza-quiz quiz QUIZ_ID                  # Take a graded quiz
    eliza-quiz quiz QUIZ_ID --resume ID      # Resume an attempt
    eliza-quiz practice TOPIC_ID -d hard     # Endless practice
    eliza-quiz progress --video-pct 50       # Lesson completion calculator

The interactive commands only render the controller's phase and turn
prompts into events; all flow decisions live in the controllers.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from config import get_settings
from eliza_quiz.core.completion import LessonProgress, is_quiz_passed, is_video_watched
from eliza_quiz.core.models import Difficulty, QuizQuestion, QuizSummary
from eliza_quiz.integrations.attempt_client import AttemptClient
from eliza_quiz.quiz import events
from eliza_quiz.quiz.phases import QuizPhase
from eliza_quiz.quiz.practice_session import PracticePhase, PracticeSessionController
from eliza_quiz.quiz.quiz_session import QuizSession

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="eliza-quiz",
    help="ELIZA adaptive quiz and practice in the terminal",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()


def configure_logging(level: str | None = None) -> None:
    """Send engine logs to stderr at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level or get_settings().log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug logs")
    ] = False,
) -> None:
    configure_logging("DEBUG" if verbose else None)


# =============================================================================
# Rendering helpers
# =============================================================================


def _render_question(question: QuizQuestion, header: str) -> None:
    lines = [f"[bold]{question.body}[/]", ""]
    for opt in question.options:
        lines.append(f"  [cyan]{opt.label}[/]) {opt.text}")
    console.print(Panel("\n".join(lines), title=header, border_style="cyan"))


def _ask_option(question: QuizQuestion) -> str | None:
    """Prompt for an option label; returns its id, or None to quit."""
    labels = [opt.label for opt in question.options]
    choice = Prompt.ask(
        "[cyan]Answer[/] (q to quit)",
        choices=[*labels, *[label.lower() for label in labels], "q"],
        show_choices=False,
    )
    if choice == "q":
        return None
    for opt in question.options:
        if opt.label == choice.upper():
            return opt.id
    return None


def _render_feedback(is_correct: bool, explanation: str, correct_answer: str | None) -> None:
    if is_correct:
        console.print("[green]✓ Correct![/]")
    else:
        console.print("[red]✗ Incorrect[/]")
        if correct_answer:
            console.print(f"  Correct answer: [bold]{correct_answer}[/]")
    if explanation:
        console.print(f"[dim]{explanation}[/]")


def _render_summary(summary: QuizSummary) -> None:
    passed = summary.passed()
    status = "[green]PASSED[/]" if passed else "[yellow]NOT PASSED[/]"
    console.print(Panel(
        f"[bold]{summary.percentage}%[/] ({summary.score:g}/{summary.total}) {status}\n"
        f"{summary.performance_message}",
        title="Results",
        border_style="green" if passed else "yellow",
    ))
    if summary.wrong_questions:
        table = Table(title="Review these")
        table.add_column("Question")
        table.add_column("Your answer")
        table.add_column("Correct answer")
        for result in summary.wrong_questions:
            table.add_row(result.question_text, result.your_answer or "-", result.correct_answer or "-")
        console.print(table)


def _ask_difficulty(default: Difficulty) -> Difficulty | None:
    choice = Prompt.ask(
        "[cyan]Difficulty[/] (q to quit)",
        choices=[d.value for d in Difficulty] + ["q"],
        default=default.value,
    )
    return None if choice == "q" else Difficulty(choice)


def _show_notice(controller) -> bool:
    """Print a pending notice; True if one was shown."""
    if controller.notice is None:
        return False
    console.print(f"[yellow]⚠ {controller.notice.message}[/]")
    return True


# =============================================================================
# Quiz
# =============================================================================


@app.command()
def quiz(
    quiz_id: Annotated[str, typer.Argument(help="Quiz to attempt")],
    resume: Annotated[
        str | None, typer.Option("--resume", "-r", help="Resume an existing attempt")
    ] = None,
) -> None:
    """
    Take a graded quiz, then work through remediation for missed questions.

    Examples:
        eliza-quiz quiz lesson-7-quiz
        eliza-quiz quiz lesson-7-quiz --resume 5f2c...
    """
    asyncio.run(_run_quiz(quiz_id, resume))


async def _run_quiz(quiz_id: str, resume_attempt_id: str | None) -> None:
    settings = get_settings()
    async with AttemptClient.from_settings(settings) as client:
        session = QuizSession(
            client,
            quiz_id=quiz_id,
            resume_attempt_id=resume_attempt_id,
            on_close=lambda: console.print("[dim]Quiz closed.[/]"),
        )
        await session.dispatch(events.Initialize())
        if not session.is_alive:
            _show_notice(session)
            return

        while session.is_alive and session.phase != QuizPhase.COMPLETED:
            if _show_notice(session):
                await session.dispatch(events.DismissNotice())

            state = session.state
            phase = session.phase

            if phase in (QuizPhase.QUESTION, QuizPhase.REMEDIATION_QUESTION):
                if phase == QuizPhase.QUESTION:
                    header = f"Question {state.question_index + 1}/{state.total_questions}"
                    submit = events.SubmitAnswer()
                else:
                    header = (
                        f"Practice ({state.difficulty.display_name}) "
                        f"{state.progress.completed}/{state.progress.required}"
                    )
                    submit = events.SubmitRemedialAnswer()
                _render_question(state.question, header)
                option_id = _ask_option(state.question)
                if option_id is None:
                    await session.dispatch(events.Close())
                    break
                await session.dispatch(events.SelectOption(option_id))
                await session.dispatch(submit)

            elif phase == QuizPhase.FEEDBACK:
                attempt = state.attempt
                _render_feedback(attempt.is_correct, attempt.explanation, attempt.correct_answer)
                if attempt.xp_awarded:
                    console.print(f"[magenta]+{attempt.xp_awarded} XP[/]")
                Prompt.ask("[dim]Press Enter to continue[/]", default="")
                await session.dispatch(events.Continue())

            elif phase == QuizPhase.SUMMARY:
                _render_summary(state.summary)
                if state.summary.remedial_plan:
                    Prompt.ask("[dim]Press Enter to start remediation[/]", default="")
                    await session.dispatch(events.StartRemediation())
                else:
                    await session.dispatch(events.Finish())

            elif phase == QuizPhase.REMEDIATION_SELECT:
                target = state.target
                if target is not None:
                    console.print(Panel(
                        target.question_text,
                        title="Let's revisit",
                        border_style="magenta",
                    ))
                difficulty = _ask_difficulty(
                    target.recommended_difficulty if target else Difficulty.STANDARD
                )
                if difficulty is None:
                    await session.dispatch(events.Close())
                    break
                await session.dispatch(events.ChooseDifficulty(difficulty))

            elif phase == QuizPhase.REMEDIATION_FEEDBACK:
                feedback = state.feedback
                _render_feedback(feedback.is_correct, feedback.explanation, feedback.correct_answer)
                Prompt.ask("[dim]Press Enter to continue[/]", default="")
                await session.dispatch(events.ContinueRemedial())

            else:
                logger.debug("Nothing to render in phase {}", phase.value)
                break

        if session.phase == QuizPhase.COMPLETED:
            stats = session.stats
            console.print(Panel(
                f"Answered {stats.questions_completed}, correct {stats.total_correct} "
                f"({stats.accuracy_percent}%)\nBest streak: {stats.best_streak}",
                title="Quiz complete",
                border_style="green",
            ))


# =============================================================================
# Practice
# =============================================================================


@app.command()
def practice(
    topic_id: Annotated[str, typer.Argument(help="Topic to practice")],
    difficulty: Annotated[
        Difficulty | None, typer.Option("--difficulty", "-d", help="Skip the difficulty prompt")
    ] = None,
) -> None:
    """
    Practice a topic without affecting grades.

    Examples:
        eliza-quiz practice networking-basics
        eliza-quiz practice networking-basics -d hard
    """
    asyncio.run(_run_practice(topic_id, difficulty))


async def _run_practice(topic_id: str, difficulty: Difficulty | None) -> None:
    settings = get_settings()
    async with AttemptClient.from_settings(settings) as client:
        controller = PracticeSessionController(
            client,
            topic_id=topic_id,
            default_difficulty=settings.default_practice_difficulty,
        )

        while controller.is_alive:
            if _show_notice(controller):
                await controller.dispatch(events.DismissNotice())

            state = controller.state
            phase = controller.phase

            if phase == PracticePhase.DIFFICULTY_SELECT:
                chosen = difficulty or _ask_difficulty(state.default)
                difficulty = None
                if chosen is None:
                    await controller.dispatch(events.End())
                    break
                await controller.dispatch(events.StartPractice(chosen))

            elif phase == PracticePhase.QUESTION:
                stats = controller.stats
                _render_question(
                    state.question,
                    f"Practice · {stats.total_correct}/{stats.questions_completed} correct",
                )
                option_id = _ask_option(state.question)
                if option_id is None:
                    await controller.dispatch(events.End())
                    break
                await controller.dispatch(events.SelectOption(option_id))
                await controller.dispatch(events.SubmitAnswer())

            elif phase == PracticePhase.FEEDBACK:
                feedback = state.feedback
                _render_feedback(feedback.is_correct, feedback.explanation, feedback.correct_answer)
                choice = Prompt.ask("[dim]Enter to continue, q to end[/]", default="")
                if choice.strip().lower() == "q":
                    await controller.dispatch(events.End())
                    break
                await controller.dispatch(events.Next())

            elif phase == PracticePhase.SESSION_COMPLETE:
                if Prompt.ask("[cyan]Generate another question?[/]", choices=["y", "n"], default="y") == "y":
                    await controller.dispatch(events.GenerateMore())
                else:
                    await controller.dispatch(events.End())

            else:
                break

        stats = controller.stats
        lines = [
            f"{stats.total_correct}/{stats.questions_completed} correct "
            f"({stats.accuracy_percent}%) · best streak {stats.best_streak}"
        ]
        if controller.session is not None and controller.session.quiz_context_used:
            lines.append("[dim]Questions were tailored to your recent quiz mistakes[/]")
        console.print(Panel(
            "\n".join(lines),
            title="Practice ended",
            border_style="cyan",
        ))


# =============================================================================
# Lesson progress
# =============================================================================


@app.command()
def progress(
    video_watched: Annotated[
        bool, typer.Option("--video-watched", help="Video marked as watched")
    ] = False,
    video_pct: Annotated[
        float, typer.Option("--video-pct", help="Video progress percentage")
    ] = 0.0,
    sections: Annotated[
        bool, typer.Option("--sections", help="All text sections viewed")
    ] = False,
    quiz_passed: Annotated[
        bool, typer.Option("--quiz-passed", help="Lesson quiz passed")
    ] = False,
    quiz_score: Annotated[
        float | None, typer.Option("--quiz-score", help="Best quiz score (0-1)")
    ] = None,
    compact: Annotated[
        bool, typer.Option("--compact", "-c", help="Print only the percentage")
    ] = False,
) -> None:
    """
    Calculate lesson completion from video, sections and quiz.

    Examples:
        eliza-quiz progress --video-watched --sections --quiz-passed
        eliza-quiz progress --video-pct 50 --quiz-score 0.5
    """
    lesson = LessonProgress(
        video_watched=video_watched or is_video_watched(video_pct),
        video_progress_pct=video_pct,
        all_sections_viewed=sections,
        quiz_passed=quiz_passed or is_quiz_passed(quiz_score),
        quiz_score=quiz_score,
    )

    if compact:
        console.print(lesson.compact_label)
        return

    table = Table(title="Lesson Progress")
    table.add_column("Component")
    table.add_column("Weight", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Done", justify="center")
    for row in lesson.breakdown():
        table.add_row(
            row.label,
            f"{row.weight_pct}%",
            f"{row.progress_pct:.0f}%",
            "[green]✓[/]" if row.completed else "",
        )
    console.print(table)
    console.print(f"[bold]Completion: {lesson.completion_percentage}%[/]")


def run() -> None:
    """Entry point for the ``eliza-quiz`` script."""
    app()


if __name__ == "__main__":
    run()
