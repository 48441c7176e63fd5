"""hsk-trainer CLI: review sessions, progress inspection, and configuration."""

import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer

from hsk_trainer.application.config import AppConfig, resolve_config
from hsk_trainer.application.factory import get_progress_store
from hsk_trainer.application.progress_codec import card_state_to_dict
from hsk_trainer.application.review_session import ReviewSession, due_items
from hsk_trainer.application.scheduler import due_skills, now_ms
from hsk_trainer.application.stats import ProgressStatsCalculator
from hsk_trainer.domain.errors import (
    InvalidGradeError,
    StorageError,
    TrainerError,
    UnknownItemError,
    VocabLoadError,
)
from hsk_trainer.domain.scheduling.models import Grade
from hsk_trainer.infrastructure.vocab_loader import load_vocab

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="hsk-trainer: spaced-repetition practice for reading and writing Chinese characters.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage hsk-trainer configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

GRADE_KEYS = {
    "a": Grade.AGAIN,
    "h": Grade.HARD,
    "g": Grade.GOOD,
    "e": Grade.EASY,
}


def humanize_error(error: Exception) -> str:
    """Turn known errors into a one-line message for the terminal."""
    if isinstance(error, InvalidGradeError):
        return f"{error} Try: again, hard, good, easy."
    if isinstance(error, UnknownItemError):
        return f"{error}. Check the id with 'hsk-trainer due' or your vocabulary file."
    if isinstance(error, VocabLoadError):
        return f"Vocabulary error: {error}"
    if isinstance(error, StorageError):
        return f"Storage error: {error}"
    return str(error)


def _fail(error: Exception) -> None:
    typer.secho(humanize_error(error), fg="red", err=True)
    raise typer.Exit(1)


def _open_session(config: AppConfig) -> ReviewSession:
    items = load_vocab(config.vocab_path)
    store = get_progress_store(config)
    return ReviewSession(items, store, requeue_offset=config.requeue_offset)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Show debug logging."),
    ] = 0,
    vocab: Annotated[
        Path | None,
        typer.Option(help="Vocabulary file (JSON or YAML). Defaults to the HSK 3 sample."),
    ] = None,
    backend: Annotated[
        str | None, typer.Option(help="Progress backend: json, sqlite, memory.")
    ] = None,
    data_dir: Annotated[Path | None, typer.Option(help="Directory for progress files.")] = None,
):
    """Global settings for hsk-trainer."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {"vocab_path": vocab, "backend": backend, "data_dir": data_dir}


def _config(ctx: typer.Context) -> AppConfig:
    overrides = (ctx.obj or {}).get("overrides", {})
    try:
        return resolve_config(overrides)
    except ValueError as e:
        typer.secho(f"Invalid configuration: {e}", fg="red", err=True)
        raise typer.Exit(2)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def review(
    ctx: typer.Context,
    no_write: Annotated[
        bool,
        typer.Option("--no-write", help="Recognition only; leave the writing schedule untouched."),
    ] = False,
    limit: Annotated[int | None, typer.Option(help="Stop after this many grades.")] = None,
):
    """[bold green]Review[/bold green] due cards interactively."""
    try:
        session = _open_session(_config(ctx))
    except TrainerError as e:
        _fail(e)

    if session.current is None:
        typer.secho("No cards loaded.", fg="yellow")
        return

    graded = 0
    while session.current is not None and (limit is None or graded < limit):
        item = session.current
        typer.echo(f"\n[{session.remaining} queued]  {item.hanzi}")
        answer = typer.prompt("Enter to reveal, q to quit", default="", show_default=False)
        if answer.strip().lower() == "q":
            break

        typer.echo(f"  {item.pinyin}  {item.meaning}")
        choice = _prompt_grade()
        if choice == "q":
            break
        if choice == "s":
            session.skip()
            continue

        try:
            state = session.grade(GRADE_KEYS[choice], practiced_writing=not no_write)
        except TrainerError as e:
            _fail(e)
        graded += 1
        if state is not None and state.interval_days:
            typer.echo(f"  next in {state.interval_days:.1f} days")

    typer.secho(f"Reviewed {graded} card(s).", fg="green")


def _prompt_grade() -> str:
    while True:
        choice = typer.prompt("(a)gain (h)ard (g)ood (e)asy (s)kip (q)uit").strip().lower()
        if choice in GRADE_KEYS or choice in ("s", "q"):
            return choice
        typer.secho("Please answer a, h, g, e, s or q.", fg="yellow")


@app.command()
def grade(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Vocabulary item id.")],
    value: Annotated[str, typer.Argument(metavar="GRADE", help="again, hard, good or easy.")],
    no_write: Annotated[
        bool, typer.Option("--no-write", help="Writing was not practiced in this review.")
    ] = False,
    now: Annotated[int | None, typer.Option(help="Review time in epoch ms (default: now).")] = None,
):
    """Apply one grade to an item and print its new state."""
    try:
        session = _open_session(_config(ctx))
        state = session.apply(item_id, value, practiced_writing=not no_write, now=now)
    except TrainerError as e:
        _fail(e)
    typer.echo(json.dumps(card_state_to_dict(state), indent=2, ensure_ascii=False))


@app.command()
def show(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Vocabulary item id.")],
):
    """Print the scheduling state of one item."""
    try:
        state = _open_session(_config(ctx)).state_for(item_id)
    except TrainerError as e:
        _fail(e)
    typer.echo(json.dumps(card_state_to_dict(state), indent=2, ensure_ascii=False))


@app.command()
def due(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List items that are due for review now."""
    try:
        session = _open_session(_config(ctx))
    except TrainerError as e:
        _fail(e)

    now = now_ms()
    rows = [
        {
            "id": item.id,
            "hanzi": item.hanzi,
            "due": state.due,
            "skills": [skill.value for skill in due_skills(state, now)],
        }
        for item, state in due_items(session.items, session.progress, now)
    ]

    if json_output:
        typer.echo(json.dumps(rows, indent=2, ensure_ascii=False))
        return

    if not rows:
        typer.secho("Nothing due.", fg="green")
        return
    typer.echo(f"Due: {len(rows)}")
    for row in rows:
        typer.echo(f"  {row['id']}  {row['hanzi']}  ({', '.join(row['skills'])})")


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Summarize learning progress."""
    try:
        config = _config(ctx)
        items = load_vocab(config.vocab_path)
        progress = get_progress_store(config).load()
    except TrainerError as e:
        _fail(e)

    summary = ProgressStatsCalculator().summarize(items, progress, now_ms())

    if json_output:
        typer.echo(json.dumps(asdict(summary), indent=2))
        return

    typer.echo(
        f"Items: {summary.total}  Reviewed: {summary.reviewed}"
        f"  New: {summary.new}  Due: {summary.due}"
    )
    for name, skill in summary.skills.items():
        stability = f"{skill.mean_stability:.1f}d" if skill.mean_stability is not None else "-"
        recall = (
            f"{skill.mean_retrievability:.0%}" if skill.mean_retrievability is not None else "-"
        )
        typer.echo(
            f"  {name}: reviewed {skill.reviewed}, due {skill.due}, lapses {skill.lapses},"
            f" stability {stability}, recall {recall}"
        )


@app.command()
def reset(
    ctx: typer.Context,
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation.")] = False,
):
    """Forget all review progress."""
    if not force:
        typer.confirm("Delete all review progress?", abort=True)
    try:
        get_progress_store(_config(ctx)).clear()
    except TrainerError as e:
        _fail(e)
    typer.secho("Progress reset.", fg="green")


@app.command()
def serve(
    port: Annotated[int, typer.Option(help="Port to bind the server to.")] = 8778,
    host: Annotated[str, typer.Option(help="Host to bind the server to.")] = "127.0.0.1",
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("hsk_trainer.server:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _config(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
