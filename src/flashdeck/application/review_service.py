"""Applies scheduling results to the authoritative deck."""

import dataclasses
import logging
from typing import Any

from flashdeck.application.scheduler import ScheduleResult, compute_next_review
from flashdeck.application.validation import is_valid_card
from flashdeck.domain.errors import DeckNotFoundError, ValidationError
from flashdeck.domain.models import Card, Deck, Rating
from flashdeck.domain.ports import DeckRepository

logger = logging.getLogger(__name__)


def find_card_record(deck: Deck | None, card_id: str) -> dict[str, Any] | None:
    if deck is None or not deck.cards:
        return None
    return next(
        (r for r in deck.cards if isinstance(r, dict) and r.get("id") == card_id),
        None,
    )


async def write_schedule(
    repo: DeckRepository,
    deck_id: str,
    card_id: str,
    schedule: ScheduleResult,
    now: int,
) -> bool:
    """
    Write one card's new schedule back and stamp the deck as studied.

    Only the scheduling fields change; the stored record's other keys (and any
    edits made to its text since the session started) are kept.

    Returns:
        False if the card is gone from the deck (nothing written for it).
    """
    deck = await repo.get_deck(deck_id)
    stored = find_card_record(deck, card_id)

    persisted = False
    if stored is None or not is_valid_card(stored):
        logger.warning(f"Card {card_id} is no longer in deck {deck_id}; schedule not saved")
    else:
        updated = dataclasses.replace(
            Card.from_record(stored),
            status=schedule.status,
            next_review=schedule.next_review,
            interval=schedule.interval,
            ease_factor=schedule.ease_factor,
        )
        persisted = await repo.replace_card(deck_id, card_id, updated)

    if deck is not None:
        await repo.touch_last_studied(deck_id, now)
    return persisted


async def review_card(
    repo: DeckRepository,
    deck_id: str,
    card_id: str,
    rating: Rating | str,
    now: int,
) -> ScheduleResult:
    """
    Rate a single card outside of a study session.

    Raises:
        DeckNotFoundError: If the deck does not exist.
        ValidationError: If the card is missing, invalid or lacks scheduling data.
    """
    deck = await repo.get_deck(deck_id)
    if deck is None:
        raise DeckNotFoundError(deck_id)

    stored = find_card_record(deck, card_id)
    if stored is None or not is_valid_card(stored):
        raise ValidationError(f"Card {card_id} not found in deck {deck_id}.")

    card = Card.from_record(stored)
    if not card.is_schedulable:
        raise ValidationError(f"Card {card_id} is corrupted or incomplete.")

    schedule = compute_next_review(rating, card.interval, card.ease_factor, now)
    await write_schedule(repo, deck_id, card_id, schedule, now)
    return schedule
