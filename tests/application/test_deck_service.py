import pytest

from flashdeck.application.deck_service import DeckService, new_card
from flashdeck.domain.errors import CardNotFoundError, DeckNotFoundError, ValidationError
from flashdeck.domain.models import SrsStatus

NOW = 1_700_000_000_000


def test_new_card_defaults():
    card = new_card("  falar ", "to speak", NOW)

    assert card.front == "falar"
    assert card.status == SrsStatus.NEW
    assert card.next_review == NOW
    assert card.interval == 0
    assert card.ease_factor == 2.5
    assert len(card.id) == 26  # ULID


@pytest.mark.parametrize("front,back", [("", "A"), ("Q", "   ")])
def test_new_card_rejects_blank_sides(front, back):
    with pytest.raises(ValidationError):
        new_card(front, back, NOW)


@pytest.mark.asyncio
async def test_create_deck(repo, clock):
    service = DeckService(repo, clock)

    deck = await service.create_deck("Verbs", cards=[("falar", "to speak")])

    stored = await repo.get_deck(deck.id)
    assert stored.title == "Verbs"
    assert stored.category == "General"
    assert stored.created_at == NOW
    assert stored.last_studied is None
    assert stored.cards[0]["front"] == "falar"
    assert stored.cards[0]["nextReview"] == NOW


@pytest.mark.asyncio
async def test_create_deck_rejects_blank_title(repo, clock):
    with pytest.raises(ValidationError):
        await DeckService(repo, clock).create_deck("  ")


@pytest.mark.asyncio
async def test_add_card_appends(repo, clock):
    service = DeckService(repo, clock)
    deck = await service.create_deck("Verbs", cards=[("a", "b")])

    card = await service.add_card(deck.id, "c", "d")

    stored = await repo.get_deck(deck.id)
    assert [c["id"] for c in stored.cards][-1] == card.id
    assert len(stored.cards) == 2


@pytest.mark.asyncio
async def test_add_card_to_missing_deck(repo, clock):
    with pytest.raises(DeckNotFoundError):
        await DeckService(repo, clock).add_card("nope", "q", "a")


@pytest.mark.asyncio
async def test_list_newest_first_and_delete(repo, clock):
    service = DeckService(repo, clock)
    first = await service.create_deck("First")
    second = await service.create_deck("Second")

    assert [d.id for d in await service.list_decks()] == [second.id, first.id]

    await service.delete_deck(first.id)
    assert [d.id for d in await service.list_decks()] == [second.id]

    with pytest.raises(DeckNotFoundError):
        await service.delete_deck(first.id)


@pytest.mark.asyncio
async def test_update_deck_title_and_category(repo, clock, make_deck, make_card):
    await repo.save_deck(make_deck([make_card("c1")]))
    service = DeckService(repo, clock)

    await service.update_deck("deck-1", title=" Nouns ", category="")

    stored = await repo.get_deck("deck-1")
    assert stored.title == "Nouns"
    assert stored.category == "General"


@pytest.mark.asyncio
async def test_update_deck_drops_empty_cards_only(repo, clock, make_deck, make_card):
    cards = [make_card("c1"), make_card("empty", front="", back="  "), make_card("half", back=""), 42]
    await repo.save_deck(make_deck(cards))

    await DeckService(repo, clock).update_deck("deck-1")

    stored = await repo.get_deck("deck-1")
    assert [c["id"] if isinstance(c, dict) else c for c in stored.cards] == ["c1", "half", 42]


@pytest.mark.asyncio
async def test_update_deck_rejects_blank_title(repo, clock, make_deck):
    await repo.save_deck(make_deck([]))
    with pytest.raises(ValidationError):
        await DeckService(repo, clock).update_deck("deck-1", title="  ")


@pytest.mark.asyncio
async def test_edit_card_keeps_schedule_and_extra_keys(repo, clock, make_deck, make_card):
    card = make_card("c1", front="flaar", status="review", interval=6, nextReview=NOW + 1, tag="x")
    await repo.save_deck(make_deck([card, make_card("c2")]))

    record = await DeckService(repo, clock).edit_card("deck-1", "c1", front="falar ")

    stored = (await repo.get_deck("deck-1")).cards
    assert record == stored[0] == {**card, "front": "falar"}
    assert stored[1]["id"] == "c2"


@pytest.mark.asyncio
async def test_edit_card_rejects_blank_text(repo, clock, make_deck, make_card):
    await repo.save_deck(make_deck([make_card("c1")]))
    with pytest.raises(ValidationError):
        await DeckService(repo, clock).edit_card("deck-1", "c1", back=" ")


@pytest.mark.asyncio
async def test_remove_card(repo, clock, make_deck, make_card):
    await repo.save_deck(make_deck([make_card("c1"), make_card("c2")]))
    service = DeckService(repo, clock)

    await service.remove_card("deck-1", "c1")

    assert [c["id"] for c in (await repo.get_deck("deck-1")).cards] == ["c2"]
    with pytest.raises(CardNotFoundError):
        await service.remove_card("deck-1", "c1")
