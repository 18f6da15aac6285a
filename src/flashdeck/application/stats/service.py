"""
Deck Stats Service: Application layer orchestrator.

Coordinates fetching decks from the repository and summarizing them.
"""

import logging

from flashdeck.domain.errors import DeckNotFoundError
from flashdeck.domain.ports import Clock, DeckRepository, SystemClock

from .metrics_calculator import DeckStats, MetricsCalculator

logger = logging.getLogger(__name__)


class DeckStatsService:
    """
    Application service for deck progress statistics.

    Depends on the DeckRepository abstraction, not concrete adapters.
    """

    def __init__(
        self,
        repo: DeckRepository,
        clock: Clock | None = None,
        calculator: MetricsCalculator | None = None,
    ):
        self._repo = repo
        self._clock = clock or SystemClock()
        self._calc = calculator or MetricsCalculator()

    async def get_deck_stats(self, deck_id: str) -> DeckStats:
        deck = await self._repo.get_deck(deck_id)
        if deck is None:
            raise DeckNotFoundError(deck_id)
        return self._calc.summarize(deck, self._clock.now())

    async def get_all_stats(self) -> list[DeckStats]:
        now = self._clock.now()
        decks = await self._repo.list_decks()
        return [self._calc.summarize(deck, now) for deck in decks]
