"""
Validity filter for raw card records.

Records come from storage or an import feed and may be of any shape. A
record is valid iff it is a mapping with a non-empty string ``id`` and
string ``front``/``back`` sides that are non-empty after trimming.
Invalid records are counted and excluded, never raised.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from flashdeck.domain.models import Card

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardCheck:
    """Outcome of validating one record."""

    valid: bool
    reason: str | None = None


@dataclass
class FilterResult:
    """Valid cards in original collection order, plus the invalid tally."""

    cards: list[Card] = field(default_factory=list)
    invalid_count: int = 0
    invalid_indices: list[int] = field(default_factory=list)


def check_card(raw: Any) -> CardCheck:
    if not isinstance(raw, dict):
        return CardCheck(False, "not_a_record")

    card_id = raw.get("id")
    if not isinstance(card_id, str) or not card_id:
        return CardCheck(False, "bad_id")

    for side in ("front", "back"):
        value = raw.get(side)
        if not isinstance(value, str):
            return CardCheck(False, f"{side}_not_text")
        if not value.strip():
            return CardCheck(False, f"blank_{side}")

    return CardCheck(True)


def is_valid_card(raw: Any) -> bool:
    return check_card(raw).valid


def filter_cards(records: list[Any]) -> FilterResult:
    """
    Apply the validity filter to every record.

    Returns:
        FilterResult whose ``cards`` keep the relative order of ``records``.
    """
    result = FilterResult()

    for idx, raw in enumerate(records):
        check = check_card(raw)
        if not check.valid:
            result.invalid_count += 1
            result.invalid_indices.append(idx)
            logger.debug(f"Invalid card at index {idx}: {check.reason}")
            continue
        result.cards.append(Card.from_record(raw))

    if result.invalid_count:
        logger.info(
            f"Filtered {result.invalid_count} invalid card(s) out of {len(records)}"
        )

    return result
