"""Exception hierarchy shared by every layer."""


class FlashdeckError(Exception):
    """Base class for all flashdeck errors."""


class StorageError(FlashdeckError):
    """The persistence collaborator failed to read or write decks."""


class DeckFormatError(FlashdeckError):
    """An imported or exported deck file is not in a recognised shape."""


class ValidationError(FlashdeckError):
    """Rejected input for a deck-management operation."""


class DeckNotFoundError(FlashdeckError):
    def __init__(self, deck_id: str):
        super().__init__(f"Deck not found: {deck_id}")
        self.deck_id = deck_id


class CardNotFoundError(FlashdeckError):
    def __init__(self, deck_id: str, card_id: str):
        super().__init__(f"Card {card_id} not found in deck {deck_id}")
        self.deck_id = deck_id
        self.card_id = card_id
