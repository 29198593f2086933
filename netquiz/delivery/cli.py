"""
netquiz CLI - terminal front end for the adaptive practice engine.

Usage:
    netquiz status -u alice -q bank.json     # Mastery, streak and quota
    netquiz modes -u alice                   # Practice modes and lock state
    netquiz select weak -u alice -q bank.json
    netquiz commit session.json -u alice     # Record a finished session
    netquiz history -u alice
    netquiz activate <KEY> -u alice
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from netquiz.config import get_settings
from netquiz.content.loader import load_questions
from netquiz.core.mastery import MasteryLevel
from netquiz.core.models import SessionResult
from netquiz.core.modes import MODE_CATALOG
from netquiz.delivery.state_store import SqlStateRepository
from netquiz.study.engine import PracticeEngine
from netquiz.study.recorder import average_score, best_session, worst_session

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="netquiz",
    help="netquiz - adaptive practice for networking certification exams",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

UserOption = Annotated[str, typer.Option("--user", "-u", help="Signed-in user id")]
BankOption = Annotated[
    Path | None, typer.Option("--questions", "-q", help="Question bank JSON file")
]


def _open_engine(user: str) -> PracticeEngine:
    settings = get_settings()
    return PracticeEngine.open(SqlStateRepository(settings.database_url), user, settings=settings)


def _load_bank(path: Path | None) -> list:
    if path is None:
        return []
    try:
        return load_questions(path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]✗ {e}[/]")
        raise typer.Exit(1) from e


# =============================================================================
# Commands
# =============================================================================


@app.command()
def status(user: UserOption = "default", questions: BankOption = None) -> None:
    """Show mastery counts, study streak and subscription usage."""
    engine = _open_engine(user)
    bank = _load_bank(questions)

    if bank:
        counts = engine.get_counts(bank)
        table = Table(title=f"Mastery ({counts.total} questions)")
        table.add_column("Level")
        table.add_column("Questions", justify="right")
        for level in (
            MasteryLevel.MASTERED,
            MasteryLevel.REVIEW,
            MasteryLevel.WEAK,
            MasteryLevel.UNSEEN,
        ):
            table.add_row(
                f"[{level.color}]{level.display_name}[/]", str(getattr(counts, level.value))
            )
        console.print(table)

    streaks = engine.state.streaks
    usage = engine.get_usage()
    remaining = engine.gate.remaining_questions()
    quota = (
        "unlimited"
        if remaining is None
        else f"{usage.questions_this_month}/{usage.limit} used in {usage.month}"
    )
    console.print(
        Panel(
            f"Streak: [bold]{streaks.current}[/] 🔥 (best {streaks.best})\n"
            f"Tier: [bold]{engine.gate.tier.value.upper()}[/]\n"
            f"Questions: {quota}",
            title=f"User {user}",
            border_style="cyan",
        )
    )


@app.command()
def modes(user: UserOption = "default") -> None:
    """List practice modes and whether they are unlocked."""
    engine = _open_engine(user)
    table = Table(title="Practice modes")
    table.add_column("Mode")
    table.add_column("Label")
    table.add_column("Description")
    table.add_column("Access")
    for mode, info in MODE_CATALOG.items():
        access = "[green]open[/]" if engine.is_mode_allowed(mode) else "[red]Pro[/]"
        table.add_row(mode.value, f"{info.icon} {info.label}", info.description, access)
    console.print(table)


@app.command()
def select(
    mode: Annotated[str, typer.Argument(help="Practice mode")],
    user: UserOption = "default",
    questions: BankOption = None,
    count: Annotated[
        int | None, typer.Option("--count", "-n", help="Questions in the session")
    ] = None,
) -> None:
    """Pick the questions for a session, after checking access and quota."""
    engine = _open_engine(user)
    bank = _load_bank(questions)
    size = engine.session_size(mode) if count is None else count

    decision = engine.authorize_session(mode, size)
    if not decision.allowed:
        message = f"[red]✗ Session not allowed ({decision.reason.value})[/]"
        if decision.remaining is not None:
            message += f" - {decision.remaining} questions left this month"
        console.print(message)
        raise typer.Exit(2)

    picked = engine.select_questions(mode, bank, size)
    start = 0
    if picked is None:
        start, picked = engine.next_sequential_block(bank, size)
    if not picked:
        console.print("[yellow]Not enough questions available for this mode.[/]")
        raise typer.Exit(1)

    table = Table(title=f"{mode} session ({len(picked)} questions)")
    table.add_column("#", justify="right")
    table.add_column("ID")
    table.add_column("Mastery")
    table.add_column("Question")
    for i, q in enumerate(picked, start + 1):
        level = engine.mastery.mastery_of(q.id)
        table.add_row(str(i), q.id, f"[{level.color}]{level.value}[/]", q.text[:70])
    console.print(table)


@app.command()
def commit(
    session_file: Annotated[Path, typer.Argument(help="Session result JSON")],
    user: UserOption = "default",
) -> None:
    """Record a finished session from a JSON file."""
    try:
        result = SessionResult.from_dict(json.loads(session_file.read_text(encoding="utf-8")))
    except (OSError, ValueError, KeyError, TypeError) as e:
        console.print(f"[red]✗ Could not read session: {e}[/]")
        raise typer.Exit(1) from e

    engine = _open_engine(user)
    engine.commit(result)
    console.print(
        f"[green]✓ Recorded {result.mode} session: {result.score}/{result.total} "
        f"({result.percentage:.0f}%)[/]  Streak: {engine.state.streaks.current} 🔥"
    )


@app.command()
def history(
    user: UserOption = "default",
    limit: Annotated[int, typer.Option("--limit", "-l", help="Sessions to show")] = 20,
) -> None:
    """Show recent sessions and the incorrect-answers log size."""
    engine = _open_engine(user)
    progress = engine.state.progress
    if not progress.sessions:
        console.print("[dim]No sessions recorded yet.[/]")
        return

    table = Table(title=f"Session history ({progress.total_quizzes} total)")
    table.add_column("#", justify="right")
    table.add_column("Date")
    table.add_column("Mode")
    table.add_column("Questions")
    table.add_column("Score", justify="right")
    for entry in reversed(progress.sessions[-limit:]):
        r = entry.result
        table.add_row(
            str(entry.id),
            entry.recorded_at.strftime("%Y-%m-%d %H:%M"),
            r.mode,
            f"{r.start_index + 1}-{r.end_index}",
            f"{r.score}/{r.total} ({r.percentage:.0f}%)",
        )
    console.print(table)

    best, worst = best_session(progress), worst_session(progress)
    console.print(
        f"Average: [bold]{average_score(progress)}%[/]  "
        f"Best: #{best.id}  Worst: #{worst.id}  "
        f"Incorrect log: {len(progress.incorrect_log)} questions"
    )


@app.command()
def activate(
    key: Annotated[str, typer.Argument(help="Pro activation key")],
    user: UserOption = "default",
) -> None:
    """Unlock Pro with an activation key."""
    result = _open_engine(user).activate(key)
    if not result.success:
        console.print(f"[red]✗ {result.error}[/]")
        raise typer.Exit(1)
    console.print("[green]✓ Pro activated[/]")


@app.command()
def upgrade(user: UserOption = "default") -> None:
    """Upgrade to Pro (completed checkout)."""
    _open_engine(user).upgrade_now()
    console.print("[green]✓ Upgraded to Pro[/]")


@app.command()
def deactivate(user: UserOption = "default") -> None:
    """Return a user to the free tier (administrative)."""
    _open_engine(user).gate.deactivate()
    console.print("[yellow]User moved to the free tier[/]")


@app.command()
def reset(
    user: UserOption = "default",
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Forget mastery, streaks and session history for a user."""
    if not yes:
        typer.confirm(f"Delete all progress for {user}?", abort=True)
    _open_engine(user).reset_progress()
    console.print("[green]✓ Progress reset[/]")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level.upper(),
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
