"""
JSON File Deck Repository: Infrastructure adapter for local storage.

Implements DeckRepository on top of a single JSON blob file holding a list
of deck records. Every mutation rewrites the whole file atomically.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from flashdeck.domain.errors import StorageError
from flashdeck.domain.models import Card, Deck
from flashdeck.domain.ports import DeckRepository
from flashdeck.infrastructure.utils.records import replace_card_record

logger = logging.getLogger(__name__)


class JsonFileDeckRepository(DeckRepository):
    """
    Stores every deck in one JSON file, newest deck first.

    Deck records that are not objects or lack an id are skipped on read and
    dropped on the next write. Card records are stored verbatim, corrupt or not.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    async def get_deck(self, deck_id: str) -> Deck | None:
        for record in self._load():
            if record["id"] == deck_id:
                return Deck.from_record(record)
        return None

    async def list_decks(self) -> list[Deck]:
        return [Deck.from_record(r) for r in self._load()]

    async def save_deck(self, deck: Deck) -> None:
        records = self._load()
        new_record = deck.to_record()

        for idx, record in enumerate(records):
            if record["id"] == deck.id:
                records[idx] = new_record
                break
        else:
            records.insert(0, new_record)

        self._dump(records)

    async def delete_deck(self, deck_id: str) -> bool:
        records = self._load()
        remaining = [r for r in records if r["id"] != deck_id]
        if len(remaining) == len(records):
            return False
        self._dump(remaining)
        return True

    async def replace_card(self, deck_id: str, card_id: str, card: Card) -> bool:
        records = self._load()
        for idx, record in enumerate(records):
            if record["id"] != deck_id:
                continue

            cards = record.get("cards")
            updated = replace_card_record(cards if isinstance(cards, list) else [], card_id, card)
            if updated is None:
                logger.debug(f"Card {card_id} not found in deck {deck_id}")
                return False

            records[idx] = {**record, "cards": updated}
            self._dump(records)
            return True
        return False

    async def touch_last_studied(self, deck_id: str, timestamp: int) -> None:
        records = self._load()
        for idx, record in enumerate(records):
            if record["id"] == deck_id:
                records[idx] = {**record, "lastStudied": timestamp}
                self._dump(records)
                return

    # ------------------------------------------------------------------

    def _load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt deck store {self.path}: {e}") from e

        if not isinstance(data, list):
            raise StorageError(f"Corrupt deck store {self.path}: expected a list of decks")

        records = []
        for idx, record in enumerate(data):
            if not isinstance(record, dict) or not isinstance(record.get("id"), str):
                logger.warning(f"Skipping malformed deck record at index {idx} in {self.path}")
                continue
            records.append(record)
        return records

    def _dump(self, records: list[dict[str, Any]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            raise StorageError(f"Could not write {self.path}: {e}") from e
