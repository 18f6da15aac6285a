from unittest.mock import AsyncMock

import pytest

from flashdeck.application.session_runner import (
    CORRUPT_CARD_MESSAGE,
    SessionState,
    StudySession,
)
from flashdeck.domain.errors import StorageError
from flashdeck.domain.models import Rating

NOW = 1_700_000_000_000
DAY = 86_400_000


async def _stored_card(repo, card_id, deck_id="deck-1"):
    deck = await repo.get_deck(deck_id)
    return next(c for c in deck.cards if c["id"] == card_id)


async def _answer_once(repo, clock, rating):
    session = StudySession("deck-1", repo, clock)
    await session.start()
    session.reveal()
    return session, await session.answer(rating)


@pytest.mark.asyncio
async def test_easy_on_new_card_finishes_session(repo, clock, make_deck, make_card):
    await repo.save_deck(make_deck([make_card("c1")]))
    session = StudySession("deck-1", repo, clock)

    assert await session.start() is SessionState.ACTIVE_FRONT
    assert session.current_card.id == "c1"
    assert session.reveal() is SessionState.ACTIVE_BACK

    outcome = await session.answer(Rating.EASY)

    assert outcome.persisted is True
    assert outcome.schedule.interval == 3
    assert session.state is SessionState.FINISHED
    assert session.progress == 1.0

    stored = await _stored_card(repo, "c1")
    assert stored["interval"] == 3
    assert stored["easeFactor"] == pytest.approx(2.65)
    assert stored["status"] == "review"
    assert stored["nextReview"] == NOW + 3 * DAY
    assert (await repo.get_deck("deck-1")).last_studied == NOW


@pytest.mark.asyncio
async def test_repeated_hard_floors_ease(repo, clock, make_deck, make_card):
    await repo.save_deck(make_deck([make_card("c1")]))

    eases = []
    for _ in range(7):
        session, outcome = await _answer_once(repo, clock, "hard")
        assert outcome is not None
        assert session.state is SessionState.FINISHED
        eases.append((await _stored_card(repo, "c1"))["easeFactor"])

    stored = await _stored_card(repo, "c1")
    assert all(e >= 1.3 for e in eases)
    assert eases[4] == pytest.approx(1.5)
    assert stored["easeFactor"] == 1.3
    assert stored["interval"] == 0
    assert stored["status"] == "learning"


@pytest.mark.asyncio
async def test_missing_deck_is_an_error(repo, clock):
    session = StudySession("nope", repo, clock)

    assert await session.start() is SessionState.ERROR
    assert session.error_message == "Deck not found."
    assert session.current_card is None


@pytest.mark.asyncio
async def test_deck_without_cards_is_an_error(repo, clock, make_deck):
    await repo.save_deck(make_deck([]))
    session = StudySession("deck-1", repo, clock)

    assert await session.start() is SessionState.ERROR
    assert session.error_message == "This deck has no cards to study."


@pytest.mark.asyncio
async def test_nothing_due_finishes_immediately(repo, clock, make_deck, make_card):
    await repo.save_deck(
        make_deck([make_card("c1", status="review", interval=2, nextReview=NOW + DAY)])
    )
    session = StudySession("deck-1", repo, clock)

    assert await session.start() is SessionState.FINISHED
    assert session.error_message is None
    assert session.progress == 1.0


@pytest.mark.asyncio
async def test_reveal_is_idempotent(repo, clock, make_deck, make_card):
    await repo.save_deck(make_deck([make_card("c1")]))
    session = StudySession("deck-1", repo, clock)
    await session.start()

    session.reveal()
    assert session.reveal() is SessionState.ACTIVE_BACK
    assert session.is_flipped


@pytest.mark.asyncio
async def test_answer_before_reveal_is_ignored(repo, clock, make_deck, make_card):
    await repo.save_deck(make_deck([make_card("c1")]))
    session = StudySession("deck-1", repo, clock)
    await session.start()

    assert await session.answer(Rating.EASY) is None
    assert session.state is SessionState.ACTIVE_FRONT
    assert (await _stored_card(repo, "c1"))["interval"] == 0


@pytest.mark.asyncio
async def test_answer_advances_to_next_card_front(repo, clock, make_deck, make_card):
    await repo.save_deck(
        make_deck([make_card("c1", nextReview=NOW - 2), make_card("c2", nextReview=NOW - 1)])
    )
    session = StudySession("deck-1", repo, clock)
    await session.start()
    session.reveal()

    await session.answer(Rating.MEDIUM)

    assert session.state is SessionState.ACTIVE_FRONT
    assert session.position == 2
    assert session.current_card.id == "c2"
    assert session.progress == 0.5
    # Untouched card keeps its state
    assert (await _stored_card(repo, "c2"))["interval"] == 0


@pytest.mark.asyncio
async def test_write_back_only_changes_schedule_fields(repo, clock, make_deck, make_card):
    await repo.save_deck(make_deck([make_card("c1", hint="keep me"), make_card("c2")]))
    session = StudySession("deck-1", repo, clock)
    await session.start()
    session.reveal()

    # Edited in another screen after the session started
    deck = await repo.get_deck("deck-1")
    deck.cards[0]["front"] = "Edited question"
    await repo.save_deck(deck)

    await session.answer(Rating.MEDIUM)

    stored = await _stored_card(repo, "c1")
    assert stored["front"] == "Edited question"
    assert stored["hint"] == "keep me"
    assert stored["interval"] == 1
    assert stored["status"] == "review"


@pytest.mark.asyncio
async def test_card_deleted_mid_session_still_advances(repo, clock, make_deck, make_card):
    await repo.save_deck(make_deck([make_card("c1")]))
    session = StudySession("deck-1", repo, clock)
    await session.start()
    session.reveal()

    deck = await repo.get_deck("deck-1")
    deck.cards = [make_card("other")]
    await repo.save_deck(deck)

    outcome = await session.answer(Rating.EASY)

    assert outcome.persisted is False
    assert session.state is SessionState.FINISHED
    assert (await _stored_card(repo, "other"))["interval"] == 0


@pytest.mark.asyncio
async def test_corrupt_card_moves_to_error(repo, clock, make_deck, make_card):
    good = make_card("c1", nextReview=NOW - 2)
    corrupt = make_card("c2", nextReview=NOW - 1)
    del corrupt["easeFactor"]
    await repo.save_deck(make_deck([good, corrupt]))

    session = StudySession("deck-1", repo, clock)
    await session.start()
    session.reveal()
    await session.answer(Rating.EASY)

    assert session.current_card is None
    assert session.state is SessionState.ERROR
    assert session.error_message == CORRUPT_CARD_MESSAGE
    # Progress made before the corrupt card is kept
    assert (await _stored_card(repo, "c1"))["interval"] == 3


@pytest.mark.asyncio
async def test_cursor_past_end_is_clamped(repo, clock, make_deck, make_card):
    await repo.save_deck(
        make_deck([make_card("c1", nextReview=NOW - 2), make_card("c2", nextReview=NOW - 1)])
    )
    session = StudySession("deck-1", repo, clock)
    await session.start()

    session.cursor = 9

    assert session.current_card.id == "c2"
    assert session.cursor == 1


@pytest.mark.asyncio
async def test_queue_membership_fixed_at_start(repo, clock, make_deck, make_card):
    await repo.save_deck(make_deck([make_card("c1")]))
    session = StudySession("deck-1", repo, clock)
    await session.start()

    deck = await repo.get_deck("deck-1")
    deck.cards.append(make_card("c2"))
    await repo.save_deck(deck)

    assert [c.id for c in session.cards] == ["c1"]


@pytest.mark.asyncio
async def test_storage_failure_propagates_without_advancing(clock, make_deck, make_card):
    repo = AsyncMock()
    repo.get_deck.return_value = make_deck([make_card("c1")])
    repo.replace_card.side_effect = StorageError("disk full")

    session = StudySession("deck-1", repo, clock)
    await session.start()
    session.reveal()

    with pytest.raises(StorageError):
        await session.answer(Rating.EASY)

    assert session.state is SessionState.ACTIVE_BACK
    assert session.outcomes == []


@pytest.mark.asyncio
async def test_limit_caps_session(repo, clock, make_deck, make_card):
    await repo.save_deck(make_deck([make_card(f"c{i}") for i in range(5)]))
    session = StudySession("deck-1", repo, clock, limit=2)
    await session.start()

    assert len(session.cards) == 2


@pytest.mark.asyncio
async def test_start_loads_deck_once(clock, make_deck, make_card):
    repo = AsyncMock()
    repo.get_deck.return_value = make_deck([make_card("c1")])
    session = StudySession("deck-1", repo, clock)

    await session.start()
    await session.start()

    repo.get_deck.assert_awaited_once_with("deck-1")
