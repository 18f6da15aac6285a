"""
Session builder for study sessions.

Builds the ordered review queue for one deck by:
1. Rejecting missing decks and decks without a card collection
2. Filtering out invalid card records
3. Keeping cards that are due (new, or next review has passed)
4. Stable-sorting by next review time
"""

import logging
from dataclasses import dataclass
from enum import Enum

from flashdeck.application.validation import filter_cards
from flashdeck.domain.models import Card, Deck

logger = logging.getLogger(__name__)


class EmptyReason(str, Enum):
    DECK_NOT_FOUND = "deck_not_found"
    NO_CARDS = "no_cards"
    NOTHING_DUE = "nothing_due"

    @property
    def is_error(self) -> bool:
        return self is not EmptyReason.NOTHING_DUE


@dataclass(frozen=True)
class SessionQueue:
    """
    Result of building a session.

    ``cards`` is a snapshot: later changes to the source deck do not alter
    its membership or order. ``empty_reason`` is set iff ``cards`` is empty.
    """

    cards: tuple[Card, ...]
    invalid_count: int = 0
    total_cards: int = 0
    empty_reason: EmptyReason | None = None

    @property
    def is_empty(self) -> bool:
        return not self.cards

    def __len__(self) -> int:
        return len(self.cards)


def build_session(deck: Deck | None, now: int, limit: int | None = None) -> SessionQueue:
    """
    Build the ordered queue of due cards for a study session.

    Args:
        deck: The deck as loaded from the repository, or None if it was not found.
        now: Current time in epoch ms.
        limit: Optional cap on the number of queued cards, applied after sorting.

    Returns:
        SessionQueue with the due cards, or an empty queue tagged with the reason.
    """
    if deck is None:
        logger.warning("Session requested for a deck that does not exist")
        return SessionQueue(cards=(), empty_reason=EmptyReason.DECK_NOT_FOUND)

    if not deck.cards:
        logger.warning(f"Deck {deck.id} has no cards or a malformed card collection")
        return SessionQueue(cards=(), empty_reason=EmptyReason.NO_CARDS)

    filtered = filter_cards(deck.cards)
    due = [card for card in filtered.cards if card.is_due(now)]

    # sorted() is stable: new cards sharing a creation timestamp keep deck order.
    # A new card without a usable nextReview sorts first.
    due = sorted(due, key=lambda c: c.next_review if c.next_review is not None else 0)
    if limit is not None and limit >= 0:
        due = due[:limit]

    total = len(deck.cards)
    if not due:
        logger.info(
            f"Nothing due in deck {deck.id} ({total} cards, {filtered.invalid_count} invalid)"
        )
        return SessionQueue(
            cards=(),
            invalid_count=filtered.invalid_count,
            total_cards=total,
            empty_reason=EmptyReason.NOTHING_DUE,
        )

    logger.info(
        f"Session for deck {deck.id}: {len(due)} due of {total} "
        f"({filtered.invalid_count} invalid)"
    )
    return SessionQueue(
        cards=tuple(due),
        invalid_count=filtered.invalid_count,
        total_cards=total,
    )
