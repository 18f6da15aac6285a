"""Service for creating and editing decks."""

import logging

from ulid import ULID

from flashdeck.domain.constants import DEFAULT_CATEGORY, DEFAULT_EASE_FACTOR
from flashdeck.domain.errors import CardNotFoundError, DeckNotFoundError, ValidationError
from flashdeck.domain.models import Card, Deck, SrsStatus
from flashdeck.domain.ports import Clock, DeckRepository, SystemClock

logger = logging.getLogger(__name__)


def generate_id() -> str:
    """Generate a stable id using ULID."""
    return str(ULID())


def new_card(front: str, back: str, now: int, card_id: str | None = None) -> Card:
    """A never-reviewed card, due immediately."""
    front, back = front.strip(), back.strip()
    if not front or not back:
        raise ValidationError("Both sides of a card must contain text.")
    return Card(
        id=card_id or generate_id(),
        front=front,
        back=back,
        status=SrsStatus.NEW,
        next_review=now,
        interval=0,
        ease_factor=DEFAULT_EASE_FACTOR,
    )


class DeckService:
    def __init__(self, repo: DeckRepository, clock: Clock | None = None):
        self._repo = repo
        self._clock = clock or SystemClock()

    async def create_deck(
        self,
        title: str,
        category: str | None = None,
        cards: list[tuple[str, str]] | None = None,
    ) -> Deck:
        title = title.strip()
        if not title:
            raise ValidationError("Deck title must not be blank.")

        now = self._clock.now()
        deck = Deck(
            id=generate_id(),
            title=title,
            category=(category or "").strip() or DEFAULT_CATEGORY,
            cards=[new_card(f, b, now).to_record() for f, b in cards or []],
            created_at=now,
        )
        await self._repo.save_deck(deck)
        logger.info(f"Created deck {deck.id} '{deck.title}' with {len(deck.cards)} card(s)")
        return deck

    async def add_card(self, deck_id: str, front: str, back: str) -> Card:
        deck = await self.require_deck(deck_id)
        card = new_card(front, back, self._clock.now())
        deck.cards = [*(deck.cards or []), card.to_record()]
        await self._repo.save_deck(deck)
        logger.debug(f"Added card {card.id} to deck {deck_id}")
        return card

    async def update_deck(
        self,
        deck_id: str,
        title: str | None = None,
        category: str | None = None,
    ) -> Deck:
        """
        Rename or recategorize a deck.

        Card records whose front and back are both blank are dropped on save.
        Other records, corrupt or not, are kept as stored.
        """
        deck = await self.require_deck(deck_id)

        if title is not None:
            if not title.strip():
                raise ValidationError("Deck title must not be blank.")
            deck.title = title.strip()
        if category is not None:
            deck.category = category.strip() or DEFAULT_CATEGORY

        if deck.cards is not None:
            kept = [r for r in deck.cards if not _is_empty_record(r)]
            dropped = len(deck.cards) - len(kept)
            if dropped:
                logger.info(f"Dropping {dropped} empty card(s) from deck {deck_id}")
            deck.cards = kept

        await self._repo.save_deck(deck)
        logger.info(f"Updated deck {deck_id}")
        return deck

    async def edit_card(
        self,
        deck_id: str,
        card_id: str,
        front: str | None = None,
        back: str | None = None,
    ) -> dict:
        """
        Change the text of a card. Scheduling fields and unknown keys are kept.

        Returns:
            The updated card record.
        """
        deck = await self.require_deck(deck_id)
        idx = _find_record(deck, card_id)

        record = dict(deck.cards[idx])
        for side, text in (("front", front), ("back", back)):
            if text is None:
                continue
            if not text.strip():
                raise ValidationError("Both sides of a card must contain text.")
            record[side] = text.strip()

        deck.cards = [*deck.cards[:idx], record, *deck.cards[idx + 1 :]]
        await self._repo.save_deck(deck)
        logger.debug(f"Edited card {card_id} in deck {deck_id}")
        return record

    async def remove_card(self, deck_id: str, card_id: str) -> None:
        deck = await self.require_deck(deck_id)
        idx = _find_record(deck, card_id)
        deck.cards = [*deck.cards[:idx], *deck.cards[idx + 1 :]]
        await self._repo.save_deck(deck)
        logger.info(f"Removed card {card_id} from deck {deck_id}")

    async def delete_deck(self, deck_id: str) -> None:
        if not await self._repo.delete_deck(deck_id):
            raise DeckNotFoundError(deck_id)
        logger.info(f"Deleted deck {deck_id}")

    async def list_decks(self) -> list[Deck]:
        return await self._repo.list_decks()

    async def require_deck(self, deck_id: str) -> Deck:
        deck = await self._repo.get_deck(deck_id)
        if deck is None:
            raise DeckNotFoundError(deck_id)
        return deck


def _find_record(deck: Deck, card_id: str) -> int:
    for idx, record in enumerate(deck.cards or []):
        if isinstance(record, dict) and record.get("id") == card_id:
            return idx
    raise CardNotFoundError(deck.id, card_id)


def _is_empty_record(record: object) -> bool:
    if not isinstance(record, dict):
        return False
    sides = (record.get("front"), record.get("back"))
    return all(isinstance(s, str) and not s.strip() for s in sides)
