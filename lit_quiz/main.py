"""
Literature Quiz Grader CLI Application.

Provides a command-line interface for browsing the review material,
taking the quiz interactively, and grading a prepared answer sheet.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Prompt
from rich.table import Table

from lit_quiz.config import get_settings
from lit_quiz.content import ContentError, ContentValidationError, ContentValidator, load_content
from lit_quiz.grading import GradingGateway, QuizSession, QuizStateError
from lit_quiz.models import AnswerSheet, GradingStatus, QuizContent
from lit_quiz.report import ReportGenerator

# Create Typer app
app = typer.Typer(
    name="lit-quiz",
    help="Review material and LLM-graded quizzes for a language-arts unit",
    add_completion=False,
)

console = Console()

ContentOption = Annotated[
    Optional[Path],
    typer.Option("--content", "-c", help="Path to a custom content bundle (JSON)"),
]
OutputOption = Annotated[
    Optional[Path],
    typer.Option("--output", "-o", help="Save a Markdown result report to this path"),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """Configure logging for every command."""
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def review(
    content_path: ContentOption = None,
    section: Annotated[
        Optional[int],
        typer.Option("--section", "-s", help="Show only this section (1-based)"),
    ] = None,
) -> None:
    """Show the review material."""
    content = _load(content_path)
    material = content.review

    sections = list(enumerate(material.sections, start=1))
    if section is not None:
        if not 1 <= section <= len(sections):
            console.print(
                f"[red]Error:[/red] Section must be between 1 and {len(sections)}"
            )
            raise typer.Exit(1)
        sections = [sections[section - 1]]

    console.print(Panel(f"[bold]{material.title}[/bold]", title="Review"))
    for index, review_section in sections:
        console.print(f"\n[bold blue]{index}. {review_section.title}[/bold blue]")
        for subsection in review_section.subsections:
            console.print(f"\n  [bold]{subsection.subtitle}[/bold]")
            for block in subsection.content:
                if block.heading:
                    console.print(f"    [cyan]{block.heading}[/cyan]")
                for point in block.points:
                    console.print(f"      • {point}")


@app.command()
def take(
    content_path: ContentOption = None,
    output: OutputOption = None,
    show_answers: Annotated[
        bool,
        typer.Option("--show-answers/--hide-answers", help="Reveal correct answers after grading"),
    ] = True,
) -> None:
    """
    Take the quiz interactively.

    Answers are collected section by section, then every written answer is
    graded and an overall comment is requested.
    """
    content = _load(content_path)
    session = QuizSession(content, GradingGateway(get_settings()))

    if content.multiple_choice:
        console.print("\n[bold]Part 1: Multiple Choice (30%)[/bold]")
    for question in content.multiple_choice:
        console.print(f"\n{question.id}. {question.question}")
        for option in question.options:
            console.print(f"   {option.label}. {option.text}")
        label = Prompt.ask(
            "Your answer", choices=[*question.labels, "skip"], default="skip", console=console
        )
        if label != "skip":
            session.choose(question.id, label)

    if content.short_answer:
        console.print("\n[bold]Part 2: Short Answer (40%)[/bold]")
    for sa_question in content.short_answer:
        console.print(f"\n{sa_question.id}. {sa_question.question}")
        text = Prompt.ask("Your answer", default="", console=console)
        if text.strip():
            session.set_short_answer(sa_question.id, text)

    if content.essays:
        console.print("\n[bold]Part 3: Essay (30%)[/bold]")
    for essay in content.essays:
        console.print(Panel(essay.question, title=essay.title))
        console.print("[dim]Write your essay. Finish with a line containing only END.[/dim]")
        text = _read_multiline()
        if text.strip():
            session.set_essay(essay.id, text)

    _submit_and_report(session, output, show_answers)


@app.command()
def grade(
    answers_file: Annotated[Path, typer.Argument(help="Path to a JSON answer sheet")],
    content_path: ContentOption = None,
    output: OutputOption = None,
) -> None:
    """
    Grade a prepared answer sheet.

    The sheet is a JSON object with "multiple_choice", "short_answer" and
    "essay" maps from question id to answer.
    """
    if not answers_file.exists():
        console.print(f"[red]Error:[/red] Answer sheet not found: {escape(str(answers_file))}")
        raise typer.Exit(1)

    content = _load(content_path)

    try:
        sheet = AnswerSheet.model_validate_json(answers_file.read_text(encoding="utf-8-sig"))
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Answer Sheet Error:[/red] Could not read file: {escape(str(e))}")
        raise typer.Exit(1)
    except ValidationError as e:
        console.print(f"[red]Answer Sheet Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    session = QuizSession(content, GradingGateway(get_settings()))
    try:
        for question_id, label in sheet.multiple_choice.items():
            session.choose(question_id, label)
        for question_id, text in sheet.short_answer.items():
            session.set_short_answer(question_id, text)
        for essay_id, text in sheet.essay.items():
            session.set_essay(essay_id, text)
    except QuizStateError as e:
        console.print(f"[red]Answer Sheet Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    _submit_and_report(session, output, show_answers=True)


@app.command()
def health() -> None:
    """
    Check if the grading service is reachable.

    Verifies API configuration and connectivity.
    """
    settings = get_settings()
    console.print("[bold]Literature Quiz Grader Health Check[/bold]\n")

    console.print("[dim]Checking configuration...[/dim]")
    console.print(f"  API Base URL: {settings.openai_base_url}")
    console.print(f"  Model: {settings.openai_model}")
    console.print(f"  API Key: {'configured' if settings.has_credential else 'missing'}")

    if not settings.has_credential:
        console.print("\n[red]✗ OPENAI_API_KEY is not set; AI grading is disabled[/red]")
        raise typer.Exit(1)

    console.print("\n[dim]Checking API connectivity...[/dim]")
    if asyncio.run(GradingGateway(settings).health_check()):
        console.print("[green]✓ API is reachable[/green]")
    else:
        console.print("[red]✗ API is not reachable[/red]")
        raise typer.Exit(1)

    console.print("\n[green]All systems operational[/green]")


def _load(content_path: Path | None) -> QuizContent:
    """Load and validate content, exiting with a message on failure."""
    try:
        content = load_content(content_path or get_settings().content_path)
        ContentValidator().validate_or_raise(content)
    except ContentError as e:
        console.print(f"[red]Content Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except ContentValidationError as e:
        console.print(f"[red]Content Validation Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    return content


def _read_multiline() -> str:
    lines: list[str] = []
    while True:
        try:
            line = console.input()
        except EOFError:
            break
        if line.strip() == "END":
            break
        lines.append(line)
    return "\n".join(lines)


def _submit_and_report(session: QuizSession, output: Path | None, show_answers: bool) -> None:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Grading answers... (this may take a moment)", total=None)
        asyncio.run(session.submit())

    _display_results(session)

    if output:
        saved_path = ReportGenerator().save(session, output, show_answers)
        console.print(f"\n[green]Report saved to:[/green] {escape(str(saved_path))}")


def _display_results(session: QuizSession) -> None:
    """Display quiz results in formatted panels and tables."""
    if session.credential_missing:
        console.print(
            Panel(
                "Set OPENAI_API_KEY in the environment or .env file to enable AI grading.",
                title="[red]OpenAI API key not configured[/red]",
                border_style="red",
            )
        )

    breakdown = session.submitted_breakdown or session.score_breakdown()
    final = session.score_breakdown()

    score_color = "green" if final.composite >= 70 else "yellow" if final.composite >= 50 else "red"
    console.print(
        Panel(
            f"[{score_color}][bold]{final.composite:.1f}[/bold] / 100[/{score_color}]",
            title="Weighted Score",
        )
    )

    table = Table(title="Section Scores")
    table.add_column("Section", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Score", justify="right")
    table.add_row("Multiple choice", "30%", f"{final.multiple_choice:.1f}")
    table.add_row(
        "Short answer",
        "40%",
        f"{final.short_answer_mean:.1f}" if final.short_answer_scores else "-",
    )
    table.add_row("Essay", "30%", f"{final.essay:.1f}")
    console.print(table)

    for label, store in (("Short answer", session.short_answers), ("Essay", session.essays)):
        for record in store.records():
            if record.status is GradingStatus.GRADED and record.grading_result is not None:
                result = record.grading_result
                console.print(
                    Panel(
                        f"[bold]Score:[/bold] {result.score:.1f}\n\n"
                        f"[bold]Feedback:[/bold] {escape(result.feedback)}\n\n"
                        f"[bold]Suggestions:[/bold] {escape(result.suggestions)}",
                        title=f"{label} {record.id}",
                    )
                )
            elif record.status is GradingStatus.FAILED:
                console.print(
                    f"[red]{label} {record.id} grading failed:[/red] "
                    f"{escape(record.error_message or '')}"
                )

    if session.overall_feedback:
        console.print(Panel(escape(session.overall_feedback), title="Overall Feedback"))
        if breakdown.composite != final.composite:
            console.print(
                f"[dim]Overall feedback was written for the score known at submission "
                f"({breakdown.composite:.1f}).[/dim]"
            )
    elif session.overall_feedback_error:
        console.print(f"[yellow]⚠ {escape(session.overall_feedback_error)}[/yellow]")


if __name__ == "__main__":
    app()
