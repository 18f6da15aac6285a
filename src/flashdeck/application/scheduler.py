"""
Review scheduler.

A pure computation module with no I/O: given a rating and a card's current
interval and ease factor, it produces the next interval, the new ease
factor, and the next due timestamp.

The formulas are a deliberately simplified spaced-repetition scheme (no
upper bound on ease growth, no lapse tracking) and are not SM-2 compatible.
"""

import math
from dataclasses import dataclass

from flashdeck.domain.constants import (
    EASY_EASE_BONUS,
    EASY_FIRST_INTERVAL,
    EASY_INTERVAL_BONUS,
    GRADUATION_INTERVAL_DAYS,
    HARD_EASE_PENALTY,
    MEDIUM_EASE_PENALTY,
    MEDIUM_FIRST_INTERVAL,
    MEDIUM_INTERVAL_MULTIPLIER,
    MIN_EASE_FACTOR,
    MS_PER_DAY,
)
from flashdeck.domain.models import Rating, SrsStatus


@dataclass(frozen=True)
class ScheduleResult:
    interval: int  # Days until the card is shown again
    ease_factor: float
    next_review: int  # Epoch ms
    status: SrsStatus


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from zero for the non-negative values used here."""
    return math.floor(value + 0.5)


def derive_status(interval: int) -> SrsStatus:
    """Status is a pure function of the resulting interval."""
    if interval > GRADUATION_INTERVAL_DAYS:
        return SrsStatus.GRADUATED
    if interval > 0:
        return SrsStatus.REVIEW
    return SrsStatus.LEARNING


def compute_next_review(
    rating: Rating | str,
    current_interval: int,
    current_ease: float,
    now: int,
) -> ScheduleResult:
    """
    Compute the next review for a card.

    Args:
        rating: hard, medium or easy. Callers validate the rating beforehand.
        current_interval: Current interval in days (>= 0).
        current_ease: Current ease factor (>= 1.3).
        now: Epoch ms the answer was given at.

    Returns:
        ScheduleResult with the new interval, ease, due timestamp and status.
    """
    rating = Rating(rating)

    if rating is Rating.HARD:
        interval = 0
        ease = max(MIN_EASE_FACTOR, current_ease - HARD_EASE_PENALTY)
    elif rating is Rating.MEDIUM:
        if current_interval == 0:
            interval = MEDIUM_FIRST_INTERVAL
        else:
            interval = round_half_up(current_interval * MEDIUM_INTERVAL_MULTIPLIER)
        ease = max(MIN_EASE_FACTOR, current_ease - MEDIUM_EASE_PENALTY)
    else:
        if current_interval == 0:
            interval = EASY_FIRST_INTERVAL
        else:
            interval = round_half_up(current_interval * current_ease * EASY_INTERVAL_BONUS)
        ease = current_ease + EASY_EASE_BONUS

    return ScheduleResult(
        interval=interval,
        ease_factor=ease,
        next_review=now + interval * MS_PER_DAY,
        status=derive_status(interval),
    )
