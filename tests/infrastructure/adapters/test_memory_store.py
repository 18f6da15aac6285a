import pytest

from flashdeck.domain.models import Card
from flashdeck.infrastructure.adapters.memory_store import InMemoryDeckRepository


@pytest.mark.asyncio
async def test_get_deck_returns_detached_copy(make_deck, make_card):
    repo = InMemoryDeckRepository([make_deck([make_card("c1")])])

    deck = await repo.get_deck("deck-1")
    deck.cards[0]["front"] = "mutated"
    deck.cards.append(make_card("c2"))

    fresh = await repo.get_deck("deck-1")
    assert fresh.cards == [make_card("c1")]


@pytest.mark.asyncio
async def test_replace_card_is_copy_on_write(make_deck, make_card):
    repo = InMemoryDeckRepository([make_deck([make_card("c1"), make_card("c2")])])
    before = repo._records["deck-1"]["cards"]

    await repo.replace_card("deck-1", "c1", Card(id="c1", front="Question", back="Answer", interval=3))

    after = repo._records["deck-1"]["cards"]
    assert after is not before
    assert before[0]["interval"] == 0
    assert after[0]["interval"] == 3
    assert after[1] is before[1]


@pytest.mark.asyncio
async def test_missing_deck_operations(make_card):
    repo = InMemoryDeckRepository()

    assert await repo.get_deck("nope") is None
    assert await repo.delete_deck("nope") is False
    assert await repo.replace_card("nope", "c1", Card(id="c1", front="q", back="a")) is False
    await repo.touch_last_studied("nope", 1)
