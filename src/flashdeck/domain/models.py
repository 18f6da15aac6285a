"""
Domain models for decks and cards.

These are pure data structures with no I/O or external dependencies.
Persisted records use the camelCase keys of the storage format
(``nextReview``, ``easeFactor``, ``createdAt``, ``lastStudied``); the
dataclasses expose snake_case attributes.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .constants import DEFAULT_CATEGORY, MIN_EASE_FACTOR


class SrsStatus(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    GRADUATED = "graduated"


class Rating(str, Enum):
    HARD = "hard"
    MEDIUM = "medium"
    EASY = "easy"


def _as_number(value: Any) -> float | None:
    # bool is an int subclass; a stored `true` is not an interval.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    # json.loads accepts NaN and Infinity.
    if not math.isfinite(value):
        return None
    return value


def _parse_status(value: Any) -> SrsStatus | None:
    try:
        return SrsStatus(value)
    except ValueError:
        return None


def _as_timestamp(value: Any) -> int | None:
    number = _as_number(value)
    return int(number) if number is not None else None


@dataclass(frozen=True)
class Card:
    """
    A single flashcard and its review state.

    Attributes:
        id: Opaque identifier, stable for the card's lifetime.
        front: Prompt side.
        back: Answer side.
        status: Derived review status, recomputed after every answer. None when
            the stored value is missing or unrecognized.
        next_review: Epoch ms before which the card is not due. None when the
            stored value is missing or not a finite number.
        interval: Days until next exposure. None when the stored record lacks it.
        ease_factor: Interval growth multiplier (>= 1.3). None when missing.
    """

    id: str
    front: str
    back: str
    status: SrsStatus | None = SrsStatus.NEW
    next_review: int | None = 0
    interval: int | None = 0
    ease_factor: float | None = 2.5

    @property
    def is_schedulable(self) -> bool:
        return self.interval is not None and self.ease_factor is not None

    def is_due(self, now: int) -> bool:
        if self.status == SrsStatus.NEW:
            return True
        return self.next_review is not None and self.next_review <= now

    @classmethod
    def from_record(cls, raw: dict[str, Any]) -> "Card":
        """
        Build a card from a stored record that already passed the validity filter.

        Missing or malformed scheduling fields are kept as None rather than
        defaulted, so the study session can detect the corruption.
        """
        next_review = _as_number(raw.get("nextReview"))

        interval = _as_number(raw.get("interval"))
        if interval is not None:
            interval = int(interval) if interval >= 0 else None

        ease = _as_number(raw.get("easeFactor"))
        if ease is not None:
            ease = max(MIN_EASE_FACTOR, float(ease))

        return cls(
            id=raw["id"],
            front=raw["front"],
            back=raw["back"],
            status=_parse_status(raw.get("status")),
            next_review=int(next_review) if next_review is not None else None,
            interval=interval,
            ease_factor=ease,
        )

    def schedule_fields(self) -> dict[str, Any]:
        return {
            "status": self.status.value if self.status else None,
            "nextReview": self.next_review,
            "interval": self.interval,
            "easeFactor": self.ease_factor,
        }

    def to_record(self) -> dict[str, Any]:
        return {"id": self.id, "front": self.front, "back": self.back, **self.schedule_fields()}


@dataclass
class Deck:
    """
    An ordered collection of card records plus metadata.

    ``cards`` holds the records exactly as persisted: their integrity is
    unknown until they go through the validity filter. It is None when the
    stored collection is absent or not a list.
    """

    id: str
    title: str
    category: str = DEFAULT_CATEGORY
    cards: list[Any] | None = field(default_factory=list)
    created_at: int = 0
    last_studied: int | None = None

    @classmethod
    def from_record(cls, raw: dict[str, Any]) -> "Deck":
        cards = raw.get("cards")
        return cls(
            id=str(raw["id"]),
            title=str(raw.get("title", "")),
            category=str(raw.get("category") or DEFAULT_CATEGORY),
            cards=list(cards) if isinstance(cards, list) else None,
            created_at=int(_as_number(raw.get("createdAt")) or 0),
            last_studied=_as_timestamp(raw.get("lastStudied")),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "cards": list(self.cards) if self.cards is not None else [],
            "createdAt": self.created_at,
            "lastStudied": self.last_studied,
        }
