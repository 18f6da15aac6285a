"""flashdeck CLI: root commands and subgroup registration."""

import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer

from flashdeck.application.config import resolve_config
from flashdeck.interface._common import (
    _repository,
    _resolve_with_overrides,
    _run,
    format_days,
    parse_rating,
)

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="flashdeck: Spaced-repetition flashcards in your terminal.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Register subgroups
# ---------------------------------------------------------------------------

from flashdeck.interface.deck_commands import deck_app  # noqa: E402

app.add_typer(deck_app, name="deck")

config_app = typer.Typer(help="Manage flashdeck configuration.")
app.add_typer(config_app, name="config")


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
    """Global settings for flashdeck."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.getLogger("flashdeck").setLevel(level)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def study(
    deck_id: Annotated[str, typer.Argument(help="Deck to study.")],
    limit: Annotated[
        int | None, typer.Option(help="Maximum number of cards in this session.")
    ] = None,
):
    """[bold green]Study[/bold green] the cards that are due in a deck.

    Press Enter to reveal the answer, then rate it hard (h), medium (m) or easy (e).
    Type q at any prompt to stop; answers already given are kept.
    """
    from flashdeck.application.session_runner import SessionState, StudySession

    config = _resolve_with_overrides(session_limit=limit)

    async def run():
        session = StudySession(deck_id, _repository(config), limit=config.session_limit)
        state = await session.start()

        if session.invalid_count:
            typer.secho(
                f"{session.invalid_count} invalid card(s) will not be shown.", fg="yellow"
            )

        if state is SessionState.ERROR:
            typer.secho(session.error_message, fg="red")
            raise typer.Exit(1)

        if state is SessionState.FINISHED:
            typer.secho("Nothing due. You're all caught up!", fg="green")
            return

        while session.state.is_active:
            card = session.current_card
            if card is None:
                break

            typer.echo(f"\n[{session.position}/{len(session.cards)}] {card.front}")
            if typer.prompt("Enter to reveal", default="", show_default=False).strip() == "q":
                return
            session.reveal()
            typer.echo(f"  -> {card.back}")

            rating = None
            while rating is None:
                choice = typer.prompt("Rate [h]ard / [m]edium / [e]asy")
                if choice.strip().lower() == "q":
                    return
                rating = parse_rating(choice)

            outcome = await session.answer(rating)
            if outcome is not None:
                typer.echo(f"  next review {format_days(outcome.schedule.interval)}")

        if session.state is SessionState.ERROR:
            typer.secho(session.error_message, fg="red")
            raise typer.Exit(1)

        typer.secho(f"\nSession complete: {len(session.outcomes)} card(s) reviewed.", fg="green")

    _run(run())


@app.command()
def due(
    deck_id: Annotated[str, typer.Argument(help="Deck to inspect.")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Preview the ordered queue a study session would use right now."""
    from flashdeck.application.session_builder import build_session
    from flashdeck.domain.ports import SystemClock

    config = _resolve_with_overrides()
    repo = _repository(config)
    deck = _run(repo.get_deck(deck_id))
    queue = build_session(deck, SystemClock().now(), limit=config.session_limit)

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "empty_reason": queue.empty_reason.value if queue.empty_reason else None,
                    "invalid": queue.invalid_count,
                    "cards": [c.to_record() for c in queue.cards],
                },
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    if queue.empty_reason is not None:
        color = "red" if queue.empty_reason.is_error else "green"
        typer.secho(queue.empty_reason.value.replace("_", " ").capitalize(), fg=color)
        if queue.empty_reason.is_error:
            raise typer.Exit(1)
        return

    typer.echo(f"{len(queue)} card(s) due ({queue.invalid_count} invalid skipped)")
    for idx, card in enumerate(queue.cards):
        typer.echo(f"  {idx + 1}. [{card.status.value if card.status else '?'}] {card.front}")


@app.command()
def stats(
    deck_id: Annotated[
        str | None, typer.Argument(help="Deck id. Omit for every deck.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show progress statistics: due cards, status breakdown and mastery."""
    from flashdeck.application.stats import DeckStatsService

    service = DeckStatsService(_repository(_resolve_with_overrides()))
    if deck_id:
        results = [_run(service.get_deck_stats(deck_id))]
    else:
        results = _run(service.get_all_stats())

    if json_output:
        typer.echo(json.dumps([asdict(s) for s in results], indent=2, ensure_ascii=False))
        return

    for s in results:
        typer.echo(
            f"{s.title}  [{s.category}]  total={s.total_cards} due={s.due_cards} "
            f"new={s.new_cards} mastery={s.mastery}%"
        )
        if s.invalid_cards:
            typer.secho(f"  {s.invalid_cards} invalid card(s)", fg="yellow")


@app.command("import")
def import_cmd(
    path: Annotated[Path, typer.Argument(help="JSON or YAML deck file.")],
):
    """Import a deck from a JSON or YAML file."""
    from flashdeck.application.deck_io import import_deck
    from flashdeck.application.deck_service import generate_id

    repo = _repository(_resolve_with_overrides())

    async def run():
        deck = import_deck(path)
        if await repo.get_deck(deck.id) is not None:
            logger.info(f"Deck id {deck.id} already exists; assigning a new id")
            deck.id = generate_id()
        await repo.save_deck(deck)
        return deck

    deck = _run(run())
    typer.secho(f"Imported '{deck.title}' ({len(deck.cards or [])} cards)", fg="green")
    typer.echo(deck.id)


@app.command("export")
def export_cmd(
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
    path: Annotated[Path, typer.Argument(help="Destination (.json, .yaml or .yml).")],
):
    """Export a deck to a JSON or YAML file."""
    from flashdeck.application.deck_io import export_deck
    from flashdeck.application.deck_service import DeckService

    service = DeckService(_repository(_resolve_with_overrides()))

    async def run():
        deck = await service.require_deck(deck_id)
        export_deck(deck, path)
        return deck

    deck = _run(run())
    typer.secho(f"Exported '{deck.title}' to {path}", fg="green")


@app.command()
def serve(
    port: Annotated[int, typer.Option(help="Port to bind the server to.")] = 8777,
    host: Annotated[str, typer.Option(help="Host to bind the server to.")] = "127.0.0.1",
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API server."""
    import uvicorn

    uvicorn.run("flashdeck.server:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
