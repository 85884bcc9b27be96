"""kioku CLI — review, statistics, due list, config and server commands."""

import asyncio
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

from kioku.application.config import AppConfig, resolve_config
from kioku.domain.mastery.models import DifficultyRating, parse_item_id
from kioku.domain.mastery.ports import StoreError

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="kioku: Spaced-repetition scheduler for vocabulary flashcards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage kioku configuration.")
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

LOG_FILE_NAME = "kioku.log"


def _configure_logging(config: AppConfig) -> None:
    """Apply config.verbose to the kioku loggers and mirror them into log_dir."""
    kioku_logger = logging.getLogger("kioku")
    kioku_logger.setLevel(logging.DEBUG if config.verbose >= 2 else logging.INFO)

    log_file = config.log_dir / LOG_FILE_NAME
    for handler in list(kioku_logger.handlers):
        if isinstance(handler, logging.FileHandler):
            if Path(handler.baseFilename) == log_file:
                return
            kioku_logger.removeHandler(handler)
            handler.close()

    config.log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, encoding="utf-8", delay=True)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    kioku_logger.addHandler(file_handler)


def _format_epoch(epoch: int | None) -> str:
    if epoch is None:
        return "never"
    return datetime.fromtimestamp(epoch).strftime("%Y-%m-%d %H:%M")


def _resolve_with_overrides(ctx: typer.Context, **overrides) -> AppConfig:
    overrides.setdefault("verbose", ctx.obj.get("verbose") if ctx.obj else None)
    config = resolve_config(overrides)
    _configure_logging(config)
    return config


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for kioku."""
    ctx.ensure_object(dict)
    # Without -v the configured verbosity applies
    ctx.obj["verbose"] = 1 + verbose if verbose else None


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def review(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Vocabulary item identifier.")],
    rating: Annotated[
        DifficultyRating,
        typer.Option("--rating", "-r", case_sensitive=False, help="How hard recall was."),
    ],
    store_path: Annotated[
        Path | None, typer.Option(help="Mastery store file. Defaults to config.")
    ] = None,
    no_sync: Annotated[
        bool, typer.Option("--no-sync", help="Keep the update local only.")
    ] = False,
):
    """[bold green]Record[/bold green] an answer and schedule the next review."""
    from kioku.application.factory import get_review_service
    from kioku.application.srs.engine import format_interval

    config = _resolve_with_overrides(
        ctx, store_path=store_path, sync_enabled=False if no_sync else None
    )
    service = get_review_service(config)

    try:
        outcome = asyncio.run(service.record_answer(parse_item_id(item_id), rating))
    except StoreError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from e

    result = outcome.result
    typer.echo(f"Level: {result.new_knowledge_level}  Ease: {result.new_ease_factor:.2f}")
    typer.echo(
        f"Next review in {format_interval(result.next_interval_seconds)} "
        f"({_format_epoch(outcome.record.next_review_at)})"
    )
    if config.remote_sync_active and not outcome.synced:
        typer.secho("Saved locally; remote sync failed.", fg="yellow")


@app.command()
def stats(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Vocabulary item identifier.")],
    store_path: Annotated[
        Path | None, typer.Option(help="Mastery store file. Defaults to config.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show accuracy and mastery for one item."""
    from kioku.application.factory import get_review_service

    config = _resolve_with_overrides(ctx, store_path=store_path)
    try:
        word_stats = get_review_service(config).get_statistics(parse_item_id(item_id))
    except StoreError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from e

    if json_output:
        typer.echo(json.dumps(asdict(word_stats), indent=2))
        return

    typer.echo(f"Mastery: {word_stats.mastery_level} (level {word_stats.knowledge_level})")
    typer.echo(
        f"Accuracy: {word_stats.accuracy:.1f}% "
        f"({word_stats.correct_reviews}/{word_stats.total_reviews})"
    )
    typer.echo(f"Streak: {word_stats.consecutive_correct}")
    typer.echo(f"Last review: {_format_epoch(word_stats.last_reviewed_at)}")


@app.command()
def due(
    ctx: typer.Context,
    store_path: Annotated[
        Path | None, typer.Option(help="Mastery store file. Defaults to config.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List items whose next review time has passed."""
    from kioku.application.factory import get_review_service

    config = _resolve_with_overrides(ctx, store_path=store_path)
    try:
        records = get_review_service(config).due_items()
    except StoreError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from e

    if json_output:
        typer.echo(json.dumps([asdict(r) for r in records], indent=2))
        return

    if not records:
        typer.secho("Nothing due.", fg="green")
        return

    typer.echo(f"Due items: {len(records)}")
    for r in records:
        typer.echo(
            f"  {r.item_id}  level {r.knowledge_level}  due {_format_epoch(r.next_review_at)}"
        )


@app.command()
def logs(
    lines: Annotated[int, typer.Option("--lines", "-n", help="Number of lines to show.")] = 20,
):
    """Show the most recent entries of the log file."""
    config = resolve_config()
    log_file = config.log_dir / LOG_FILE_NAME
    if not log_file.exists():
        typer.echo(f"No log entries yet ({log_file}).")
        return

    for line in log_file.read_text(encoding="utf-8").splitlines()[-lines:]:
        typer.echo(line)


@app.command()
def serve(

    port: Annotated[int, typer.Option(help="Port to bind the server to.")] = 8777,
    host: Annotated[str, typer.Option(help="Host to bind the server to.")] = "127.0.0.1",
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API server."""
    import uvicorn

    uvicorn.run("kioku.server:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    if d.get("api_token"):
        d["api_token"] = "***"
    typer.echo(json.dumps(d, indent=2))
