"""
Ports (interfaces) for persistence and time.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

import time
from abc import ABC, abstractmethod

from .models import Card, Deck


class DeckRepository(ABC):
    """
    Port for the authoritative deck collection.

    Implementations:
        - JsonFileDeckRepository: A single JSON blob file on disk.
        - InMemoryDeckRepository: Dictionary-backed, for tests and throwaway sessions.

    Card replacement is copy-on-write: the stored card list is swapped for a new
    list with one entry replaced. Implementations raise StorageError on I/O failure.
    """

    @abstractmethod
    async def get_deck(self, deck_id: str) -> Deck | None:
        """
        Fetch a deck by id.

        Returns:
            A detached copy of the deck, or None if no deck has this id.
        """
        pass

    @abstractmethod
    async def list_decks(self) -> list[Deck]:
        """Return every stored deck, most recently created first."""
        pass

    @abstractmethod
    async def save_deck(self, deck: Deck) -> None:
        """Insert a new deck or overwrite the deck with the same id."""
        pass

    @abstractmethod
    async def delete_deck(self, deck_id: str) -> bool:
        """Remove a deck. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def replace_card(self, deck_id: str, card_id: str, card: Card) -> bool:
        """
        Replace the card record with ``card_id`` in the deck's collection.

        The card's fields are merged onto the stored record, so keys unknown to
        the Card model survive. Other records are left untouched.

        Returns:
            False if either the deck or the card could not be found.
        """
        pass

    @abstractmethod
    async def touch_last_studied(self, deck_id: str, timestamp: int) -> None:
        """Record when the deck was last studied (epoch ms)."""
        pass


class Clock(ABC):
    """Source of the current instant, injectable for deterministic tests."""

    @abstractmethod
    def now(self) -> int:
        """Current time as epoch milliseconds."""
        pass


class SystemClock(Clock):
    def now(self) -> int:
        return int(time.time() * 1000)


class FixedClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, now: int):
        self._now = now

    def now(self) -> int:
        return self._now

    def advance(self, ms: int) -> None:
        self._now += ms
