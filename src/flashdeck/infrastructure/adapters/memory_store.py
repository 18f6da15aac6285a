"""
In-memory deck repository.

Keeps deck records in a dictionary. Nothing survives the process.
"""

import copy
import logging
from typing import Any

from flashdeck.domain.models import Card, Deck
from flashdeck.domain.ports import DeckRepository
from flashdeck.infrastructure.utils.records import replace_card_record

logger = logging.getLogger(__name__)


class InMemoryDeckRepository(DeckRepository):
    def __init__(self, decks: list[Deck] | None = None):
        # Insertion order is creation order; list_decks reverses it.
        self._records: dict[str, dict[str, Any]] = {}
        for deck in decks or []:
            self._records[deck.id] = deck.to_record()

    async def get_deck(self, deck_id: str) -> Deck | None:
        record = self._records.get(deck_id)
        if record is None:
            return None
        return Deck.from_record(copy.deepcopy(record))

    async def list_decks(self) -> list[Deck]:
        return [Deck.from_record(copy.deepcopy(r)) for r in reversed(self._records.values())]

    async def save_deck(self, deck: Deck) -> None:
        self._records[deck.id] = copy.deepcopy(deck.to_record())

    async def delete_deck(self, deck_id: str) -> bool:
        return self._records.pop(deck_id, None) is not None

    async def replace_card(self, deck_id: str, card_id: str, card: Card) -> bool:
        record = self._records.get(deck_id)
        if record is None:
            return False

        updated = replace_card_record(record.get("cards") or [], card_id, card)
        if updated is None:
            logger.debug(f"Card {card_id} not found in deck {deck_id}")
            return False

        self._records[deck_id] = {**record, "cards": updated}
        return True

    async def touch_last_studied(self, deck_id: str, timestamp: int) -> None:
        record = self._records.get(deck_id)
        if record is not None:
            self._records[deck_id] = {**record, "lastStudied": timestamp}
