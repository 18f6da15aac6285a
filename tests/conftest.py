import pytest

from flashdeck.domain.models import Deck
from flashdeck.domain.ports import FixedClock
from flashdeck.infrastructure.adapters.memory_store import InMemoryDeckRepository

NOW = 1_700_000_000_000
DAY = 86_400_000


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def make_card():
    """Factory for stored card records."""

    def _make(card_id, front="Question", back="Answer", **overrides):
        record = {
            "id": card_id,
            "front": front,
            "back": back,
            "status": "new",
            "nextReview": NOW,
            "interval": 0,
            "easeFactor": 2.5,
        }
        record.update(overrides)
        return record

    return _make


@pytest.fixture
def make_deck():
    def _make(cards, deck_id="deck-1", title="Verbs"):
        return Deck(id=deck_id, title=title, category="Languages", cards=cards, created_at=NOW)

    return _make


@pytest.fixture
def repo():
    return InMemoryDeckRepository()


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate config files and the deck store from the real home directory
    monkeypatch.setenv("HOME", str(home))
    for var in ("FLASHDECK_BACKEND", "FLASHDECK_DATA_DIR", "FLASHDECK_SESSION_LIMIT"):
        monkeypatch.delenv(var, raising=False)
    return home
