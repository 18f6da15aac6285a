"""
Deck import/export.

Decks are exchanged as a single deck record in the storage shape
(camelCase keys). Files ending in .yaml/.yml go through PyYAML, anything
else is JSON. Card records are carried verbatim so scheduling state, and
therefore session ordering, survives a round trip.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml  # type: ignore

from flashdeck.application.deck_service import generate_id
from flashdeck.domain.errors import DeckFormatError
from flashdeck.domain.models import Deck

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


def _is_yaml(path: Path) -> bool:
    return path.suffix.lower() in YAML_SUFFIXES


def dumps_deck(deck: Deck, fmt: str = "json") -> str:
    record = deck.to_record()
    if fmt == "yaml":
        return yaml.safe_dump(record, sort_keys=False, allow_unicode=True)
    return json.dumps(record, ensure_ascii=False, indent=2)


def loads_deck(text: str, fmt: str = "json", fallback_title: str = "Imported deck") -> Deck:
    """
    Parse a deck from text.

    Accepts a full deck record, or a bare list of card records (an import
    feed), in which case a title is taken from ``fallback_title``.

    Raises:
        DeckFormatError: If the text cannot be parsed or has the wrong shape.
    """
    try:
        data = yaml.safe_load(text) if fmt == "yaml" else json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DeckFormatError(f"Could not parse deck: {e}") from e

    if isinstance(data, list):
        data = {"title": fallback_title, "cards": data}

    if not isinstance(data, dict):
        raise DeckFormatError("A deck file must contain an object or a list of cards.")
    if not isinstance(data.get("cards"), list):
        raise DeckFormatError("A deck file must contain a 'cards' list.")

    record: dict[str, Any] = dict(data)
    if not isinstance(record.get("id"), str) or not record["id"]:
        record["id"] = generate_id()
    if not str(record.get("title") or "").strip():
        record["title"] = fallback_title

    return Deck.from_record(record)


def export_deck(deck: Deck, path: Path) -> Path:
    path = Path(path)
    text = dumps_deck(deck, "yaml" if _is_yaml(path) else "json")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise DeckFormatError(f"Could not write {path}: {e}") from e
    logger.info(f"Exported deck {deck.id} ({len(deck.cards or [])} cards) to {path}")
    return path


def import_deck(path: Path) -> Deck:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DeckFormatError(f"Could not read {path}: {e}") from e

    deck = loads_deck(text, "yaml" if _is_yaml(path) else "json", fallback_title=path.stem)
    logger.info(f"Imported deck '{deck.title}' ({len(deck.cards or [])} cards) from {path}")
    return deck
