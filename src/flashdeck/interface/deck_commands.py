"""`flashdeck deck ...` subcommands for managing decks and their cards."""

import json
from typing import Annotated

import typer

from flashdeck.application.deck_service import DeckService
from flashdeck.application.validation import check_card
from flashdeck.interface._common import _repository, _resolve_with_overrides, _run

deck_app = typer.Typer(help="Create and manage decks.", no_args_is_help=True)


def _service() -> DeckService:
    return DeckService(_repository(_resolve_with_overrides()))


@deck_app.command("create")
def create(
    title: Annotated[str, typer.Argument(help="Deck title.")],
    category: Annotated[str | None, typer.Option(help="Deck category.")] = None,
):
    """Create an empty deck."""
    config = _resolve_with_overrides()
    service = DeckService(_repository(config))
    deck = _run(service.create_deck(title, category or config.default_category))
    typer.secho(f"Created deck '{deck.title}'", fg="green")
    typer.echo(deck.id)


@deck_app.command("list")
def list_cmd(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List all decks, newest first."""
    decks = _run(_service().list_decks())

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "id": d.id,
                        "title": d.title,
                        "category": d.category,
                        "cards": len(d.cards or []),
                    }
                    for d in decks
                ],
                indent=2,
            )
        )
        return

    if not decks:
        typer.secho("No decks yet. Create one with 'flashdeck deck create'.", fg="yellow")
        return

    for d in decks:
        typer.echo(f"{d.id}  {d.title}  [{d.category}]  {len(d.cards or [])} card(s)")


@deck_app.command("show")
def show(deck_id: Annotated[str, typer.Argument(help="Deck id.")]):
    """Show a deck's cards and their review state."""
    deck = _run(_service().require_deck(deck_id))

    typer.echo(f"{deck.title}  [{deck.category}]")
    for idx, record in enumerate(deck.cards or []):
        check = check_card(record)
        if not check.valid:
            typer.secho(f"  #{idx + 1}  (invalid: {check.reason})", fg="yellow")
            continue
        typer.echo(
            f"  #{idx + 1}  {record['front']!r} -> {record['back']!r}"
            f"  status={record.get('status', 'new')} interval={record.get('interval')}"
        )


@deck_app.command("add-card")
def add_card(
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
    front: Annotated[str, typer.Argument(help="Front (prompt) text.")],
    back: Annotated[str, typer.Argument(help="Back (answer) text.")],
):
    """Add a new card to a deck. It is due immediately."""
    card = _run(_service().add_card(deck_id, front, back))
    typer.secho(f"Added card {card.id}", fg="green")


@deck_app.command("edit")
def edit(
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
    title: Annotated[str | None, typer.Option(help="New title.")] = None,
    category: Annotated[str | None, typer.Option(help="New category.")] = None,
):
    """Rename or recategorize a deck. Cards with both sides empty are dropped."""
    deck = _run(_service().update_deck(deck_id, title=title, category=category))
    typer.secho(f"Updated deck '{deck.title}' [{deck.category}]", fg="green")


@deck_app.command("edit-card")
def edit_card(
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
    card_id: Annotated[str, typer.Argument(help="Card id.")],
    front: Annotated[str | None, typer.Option(help="New front text.")] = None,
    back: Annotated[str | None, typer.Option(help="New back text.")] = None,
):
    """Fix the text of a card. Its review schedule is kept."""
    if front is None and back is None:
        typer.secho("Nothing to change: pass --front and/or --back.", fg="yellow")
        raise typer.Exit(1)
    _run(_service().edit_card(deck_id, card_id, front=front, back=back))
    typer.secho(f"Updated card {card_id}", fg="green")


@deck_app.command("remove-card")
def remove_card(
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
    card_id: Annotated[str, typer.Argument(help="Card id.")],
):
    """Remove a single card from a deck."""
    _run(_service().remove_card(deck_id, card_id))
    typer.secho(f"Removed card {card_id}", fg="green")


@deck_app.command("delete")
def delete(
    deck_id: Annotated[str, typer.Argument(help="Deck id.")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Bypass confirmation.")
    ] = False,
):
    """Delete a deck and all its cards."""
    if not force:
        typer.confirm(f"Delete deck {deck_id}?", abort=True)
    _run(_service().delete_deck(deck_id))
    typer.secho(f"Deleted deck {deck_id}", fg="green")
