"""
Caregiver CLI for the pacing engine.

Commands:
- pacing status       - Show gate counters and whether a session may start
- pacing override     - Clear daily limit and cooldown
- pacing end-session  - Record a session end (e.g. after an unclean exit)
- pacing simulate     - Play a headless session with a simulated learner
"""
from __future__ import annotations

import random
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config import Settings, get_settings
from pacing.delivery.session_gate import GateDecision, SessionGate
from pacing.delivery.state_store import GateStore, MemoryGateStore
from pacing.engine import PacingEngine
from pacing.study.hint_ladder import HintLevel, Learner

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="pacing",
    help="Pacing engine: caregiver controls and simulation",
    no_args_is_help=True,
)
console = Console()

SIM_POOLS = {
    "color": ["red", "blue", "yellow", "green", "orange", "purple"],
    "letter": ["A", "B", "C", "D", "E", "F"],
    "number": ["1", "2", "3", "4", "5"],
    "shape": ["circle", "square", "triangle", "star"],
}

HINT_STYLES = {
    HintLevel.NONE: "green",
    HintLevel.REPEAT: "cyan",
    HintLevel.PULSE: "yellow",
    HintLevel.POINT: "magenta",
    HintLevel.AUTO_COMPLETE: "red",
}


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="1 MB")


@contextmanager
def _open_gate(settings: Settings, db: Optional[Path]) -> Iterator[SessionGate]:
    store = GateStore(db or settings.state_db_path)
    try:
        yield SessionGate(store, settings.get_gate_config())
    finally:
        store.close()


def _snapshot_store(db_path: Path) -> MemoryGateStore:
    """In-memory copy of the saved gate state; a missing database is not created."""
    if not db_path.exists():
        return MemoryGateStore()
    disk = GateStore(db_path)
    try:
        return MemoryGateStore(disk.load())
    finally:
        disk.close()


def _describe(decision: GateDecision) -> Text:
    if decision.allowed:
        return Text("allowed", style="bold green")
    text = Text(f"blocked ({decision.reason.value})", style="bold red")
    if decision.wait_until is not None:
        text.append(f" until {decision.wait_until:%H:%M}", style="yellow")
    return text


# =============================================================================
# Commands
# =============================================================================

DbOption = typer.Option(None, "--db", help="State database path (defaults to settings)")


@app.command()
def status(db: Optional[Path] = DbOption) -> None:
    """Show gate counters and whether a new session may start."""
    settings = get_settings()
    with _open_gate(settings, db) as gate:
        decision = gate.can_start_session()

        table = Table(show_header=False, box=None)
        table.add_row("Sessions today", f"{gate.sessions_today}/{gate.config.max_sessions_per_day}")
        table.add_row("Last reset", gate.state.last_reset_date or "never")
        last_end = gate.last_session_end
        table.add_row("Last session end", f"{last_end:%Y-%m-%d %H:%M}" if last_end else "never")
        table.add_row("Can start", _describe(decision))

    console.print(Panel(table, title="[bold]Session Gate[/bold]", border_style="blue"))


@app.command()
def override(db: Optional[Path] = DbOption) -> None:
    """Clear the daily limit and cooldown."""
    settings = get_settings()
    with _open_gate(settings, db) as gate:
        gate.override()
    console.print("[bold green]Gate cleared.[/bold green] A new session may start now.")


@app.command("end-session")
def end_session(db: Optional[Path] = DbOption) -> None:
    """Record that a session ended now."""
    settings = get_settings()
    with _open_gate(settings, db) as gate:
        gate.check_daily_reset()
        gate.record_session_end()
        sessions_today = gate.sessions_today
    console.print(f"Recorded session end ({sessions_today} today).")


@app.command()
def simulate(
    prompts: int = typer.Option(20, "--prompts", "-n", min=1, help="Prompts to play"),
    domain: str = typer.Option("color", "--domain", "-d", help="Concept domain"),
    accuracy: float = typer.Option(0.7, "--accuracy", "-a", min=0.0, max=1.0, help="Chance of a correct answer"),
    seed: int = typer.Option(7, "--seed", help="Random seed"),
    db: Optional[Path] = DbOption,
    persist: bool = typer.Option(False, "--persist/--no-persist", help="Count this run against the gate"),
) -> None:
    """Play a headless session with a simulated learner."""
    if domain not in SIM_POOLS:
        console.print(f"[red]Unknown domain {domain!r}[/red] (choose from {', '.join(SIM_POOLS)})")
        raise typer.Exit(code=1)

    settings = get_settings()
    db_path = Path(db or settings.state_db_path)
    if not persist:
        _play(_snapshot_store(db_path), settings, prompts, domain, accuracy, seed)
        return

    store = GateStore(db_path)
    try:
        _play(store, settings, prompts, domain, accuracy, seed)
    finally:
        store.close()


def _play(
    store: GateStore | MemoryGateStore,
    settings: Settings,
    prompts: int,
    domain: str,
    accuracy: float,
    seed: int,
) -> None:
    rng = random.Random(seed)
    engine = PacingEngine(store, settings.get_engine_config(), rng=rng)

    decision = engine.begin_session()
    if not decision.allowed:
        console.print(Text("Session ", style="bold") + _describe(decision))
        raise typer.Exit(code=1)

    table = Table(title=f"Simulated session ({domain})")
    table.add_column("#", justify="right")
    table.add_column("Learner")
    table.add_column("Concept")
    table.add_column("Misses", justify="right")
    table.add_column("Hint")
    table.add_column("Event")

    frame = settings.max_frame_dt
    learners = [Learner.LITTLE, Learner.BIG]
    for index in range(prompts):
        learner = learners[index % 2]
        concept = engine.start_prompt(domain, SIM_POOLS[domain], learner)

        misses = 0
        events: list[str] = []
        while True:
            for _ in range(int(rng.uniform(0.5, 12.0) / frame)):
                engine.tick(frame)
            outcome = engine.submit_answer(rng.random() < accuracy)
            if outcome.reward_event:
                events.append(outcome.reward_event)
            if outcome.resolved:
                break
            misses += 1

        level = engine.hint_ladder.level
        style = HINT_STYLES[level]
        table.add_row(
            str(index + 1),
            learner.value,
            concept,
            str(misses + (1 if outcome.auto_completed else 0)),
            f"[{style}]{level.name.lower()}[/{style}]",
            ", ".join(events),
        )

        if (index + 1) % 5 == 0:
            stage = engine.complete_activity()
            if stage is not None:
                table.add_row("", "", f"[bold]stage up: {stage.name.lower()}[/bold]", "", "", "")

    engine.end_session()

    console.print(table)
    summary = Text()
    summary.append(f"Difficulty: {engine.difficulty.name.lower()}\n")
    summary.append(f"Reward meter: {engine.reward_meter.percent:.0f}%\n")
    summary.append(f"Stage: {engine.stage.name.lower()}\n")
    repeats = engine.tracker.get_repeat_concepts(domain)
    summary.append(f"Due for repeat: {', '.join(repeats) or 'none'}")
    console.print(Panel(summary, title="[bold]Summary[/bold]", border_style="cyan"))


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    main()
