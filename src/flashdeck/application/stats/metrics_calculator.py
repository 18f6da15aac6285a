"""
Metrics calculator for deck progress.

This is a pure computation module with no I/O.
"""

from dataclasses import dataclass, field

from flashdeck.application.scheduler import round_half_up
from flashdeck.application.validation import filter_cards
from flashdeck.domain.models import Deck, SrsStatus


@dataclass
class DeckStats:
    """
    Progress summary for one deck.
    """

    deck_id: str
    title: str
    category: str
    total_cards: int
    valid_cards: int
    invalid_cards: int
    due_cards: int
    new_cards: int
    mastery: int  # Percentage of graduated cards over all cards
    by_status: dict[str, int] = field(default_factory=dict)
    last_studied: int | None = None


class MetricsCalculator:
    """
    Computes deck statistics from stored card records.

    Stateless and side-effect free.
    """

    def summarize(self, deck: Deck, now: int) -> DeckStats:
        records = deck.cards or []
        filtered = filter_cards(records)

        by_status = {status.value: 0 for status in SrsStatus}
        for card in filtered.cards:
            if card.status is not None:
                by_status[card.status.value] += 1

        return DeckStats(
            deck_id=deck.id,
            title=deck.title,
            category=deck.category,
            total_cards=len(records),
            valid_cards=len(filtered.cards),
            invalid_cards=filtered.invalid_count,
            due_cards=sum(1 for card in filtered.cards if card.is_due(now)),
            new_cards=by_status[SrsStatus.NEW.value],
            mastery=self._compute_mastery(by_status[SrsStatus.GRADUATED.value], len(records)),
            by_status=by_status,
            last_studied=deck.last_studied,
        )

    def _compute_mastery(self, graduated: int, total: int) -> int:
        if total == 0:
            return 0
        return round_half_up(graduated / total * 100)
