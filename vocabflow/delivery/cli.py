"""
vocabflow: experiment CLI for the adaptive engine.

Commands:
- vocabflow simulate   - Run a synthetic learner and show theta convergence
- vocabflow preview    - Show the first cards a fresh learner would get
- vocabflow corpus     - Summarize a corpus file
"""
from __future__ import annotations

import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import get_settings
from ..learning.ability_estimator import probability_correct
from ..models import CardKind, CorpusError, default_learner_state
from .corpus import Corpus, synthetic_corpus
from .scheduler import ItemSelector
from .session import StudySession
from .state_store import InMemoryStateStore
from .telemetry import SessionTelemetry

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="vocabflow",
    help="vocabflow: adaptive vocabulary engine tools",
    no_args_is_help=True,
)
console = Console()

KIND_STYLES = {
    CardKind.TEACHING: "blue",
    CardKind.PROBE: "magenta",
    CardKind.REVIEW: "yellow",
    CardKind.REINFORCEMENT: "green",
}


def style_kind(kind: CardKind) -> str:
    color = KIND_STYLES.get(kind, "white")
    return f"[{color}]{kind.value}[/{color}]"


def _load_corpus(words: Optional[Path], distractors: Optional[Path], synthetic: int, seed: int) -> Corpus:
    """Load the given corpus, else the configured one, else a synthetic corpus."""
    if words is None:
        settings = get_settings()
        configured = Path(settings.words_path)
        if not configured.exists():
            logger.debug(f"No corpus at {configured} - using {synthetic} synthetic items")
            return synthetic_corpus(synthetic, seed=seed)
        words = configured
        pool_path = Path(settings.distractors_path)
        distractors = distractors or (pool_path if pool_path.exists() else None)
    try:
        return Corpus.from_files(words, distractors)
    except CorpusError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=1) from e


def _build_session(
    corpus: Corpus,
    store: InMemoryStateStore,
    seed: int,
    telemetry: Optional[SessionTelemetry] = None,
) -> StudySession:
    """Study session wired with every config built from settings."""
    settings = get_settings()
    return StudySession(
        corpus,
        store,
        selector=ItemSelector(
            config=settings.get_selector_config(),
            card_config=settings.get_card_config(),
            rng=random.Random(seed),
        ),
        telemetry=telemetry,
        memory_config=settings.get_memory_config(),
        ability_config=settings.get_ability_config(),
        recent_items_tracked=settings.recent_items_tracked,
        recent_kinds_tracked=settings.recent_kinds_tracked,
    )


# =============================================================================
# Commands
# =============================================================================


@app.command()
def simulate(
    true_theta: float = typer.Option(1.0, "--true-theta", "-t", help="Ability of the simulated learner"),
    cards: int = typer.Option(60, "--cards", "-n", help="Cards to simulate"),
    seed: int = typer.Option(7, "--seed", "-s", help="Random seed"),
    seconds_per_card: int = typer.Option(8, "--seconds-per-card", help="Simulated time per card"),
    words: Optional[Path] = typer.Option(None, "--words", help="Corpus JSON (synthetic if omitted)"),
    distractors: Optional[Path] = typer.Option(None, "--distractors", help="Distractor pool JSON"),
    synthetic: int = typer.Option(300, "--synthetic-size", help="Synthetic corpus size"),
    every: int = typer.Option(5, "--every", help="Print every Nth card"),
) -> None:
    """Simulate a learner answering with IRT probabilities and show convergence."""
    settings = get_settings()
    corpus = _load_corpus(words, distractors, synthetic, seed)
    rng = random.Random(seed)
    clock_start = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)

    telemetry_dir = Path(settings.telemetry_dir) if settings.telemetry_dir else None
    session = _build_session(
        corpus,
        InMemoryStateStore(settings.get_ability_config()),
        seed + 1,
        telemetry=SessionTelemetry(telemetry_dir),
    )
    session.start(now=clock_start)

    table = Table(title=f"Simulated learner (true theta = {true_theta:+.2f})")
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Item b", justify="right")
    table.add_column("Result")
    table.add_column("Theta", justify="right")
    table.add_column("Uncertainty", justify="right")

    shown = 0
    graduated = 0
    lapsed = 0
    for step in range(cards):
        now = clock_start + timedelta(seconds=step * seconds_per_card)
        card = session.next_card(now=now)
        if card is None:
            console.print("[yellow]No more cards available[/yellow]")
            break

        if card.kind.is_quiz:
            correct = rng.random() < probability_correct(true_theta, card.item.difficulty)
            outcome = session.answer(card, correct, now=now)
            graduated += outcome.graduated
            lapsed += outcome.lapsed
            result = "[green]correct[/green]" if correct else "[red]wrong[/red]"
            if outcome.graduated:
                result += " [bold]known[/bold]"
        else:
            session.acknowledge(card, now=now)
            result = "[dim]taught[/dim]"
        shown += 1

        learner = session.learner
        if step % max(1, every) == 0 or step == cards - 1:
            table.add_row(
                str(step + 1),
                style_kind(card.kind),
                f"{card.item.difficulty:+.2f}",
                result,
                f"{learner.theta:+.2f}",
                f"{learner.uncertainty:.2f}",
            )

    learner = session.learner
    state = session.end()
    console.print(table)
    console.print(
        Panel(
            f"Cards: {shown}  Accuracy: {state.accuracy:.0%}  New items: {state.new_items_taught}\n"
            f"Graduated: {graduated}  Lapsed: {lapsed}\n"
            f"Final theta: {learner.theta:+.2f} (error {learner.theta - true_theta:+.2f})  "
            f"Uncertainty: {learner.uncertainty:.2f}",
            title="Summary",
        )
    )


@app.command()
def preview(
    limit: int = typer.Option(10, "--limit", "-l", help="Number of cards to preview"),
    theta: Optional[float] = typer.Option(None, "--theta", help="Learner theta (configured start if omitted)"),
    uncertainty: Optional[float] = typer.Option(None, "--uncertainty", help="Learner uncertainty"),
    seed: int = typer.Option(7, "--seed", "-s", help="Random seed"),
    words: Optional[Path] = typer.Option(None, "--words", help="Corpus JSON (synthetic if omitted)"),
    distractors: Optional[Path] = typer.Option(None, "--distractors", help="Distractor pool JSON"),
) -> None:
    """Preview the cards a learner at the given level would be offered."""
    settings = get_settings()
    corpus = _load_corpus(words, distractors, 300, seed)
    now = datetime.now(timezone.utc)
    ability_config = settings.get_ability_config()
    learner = default_learner_state(now, theta=theta, uncertainty=uncertainty, config=ability_config)

    store = InMemoryStateStore(ability_config)
    store.save(learner, {})
    session = _build_session(corpus, store, seed)
    session.start(now=now)

    table = Table(title="Upcoming Cards")
    table.add_column("Item")
    table.add_column("Word")
    table.add_column("Kind")
    table.add_column("Difficulty", justify="right")

    for _ in range(limit):
        card = session.next_card(now=now)
        if card is None:
            break
        table.add_row(card.item_id, card.item.word, style_kind(card.kind), f"{card.item.difficulty:+.2f}")
        # Preview assumes the learner gets every quiz right
        if card.kind.is_quiz:
            session.answer(card, True, now=now)
        else:
            session.acknowledge(card, now=now)

    console.print(table)


@app.command()
def corpus(
    words: Path = typer.Argument(..., help="Corpus JSON"),
    distractors: Optional[Path] = typer.Option(None, "--distractors", help="Distractor pool JSON"),
) -> None:
    """Summarize a corpus file."""
    loaded = _load_corpus(words, distractors, 0, 0)
    stats = loaded.get_stats()

    table = Table(title=str(words))
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for key, value in stats.items():
        table.add_row(key.replace("_", " "), "-" if value is None else str(value))
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB")

    app()


if __name__ == "__main__":
    main()
