"""
Study session state machine.

Drives one card at a time through reveal/answer/advance and writes each
answer's scheduling result back to the deck repository. Transitions are
immediate and synchronous; any animation delay belongs to the presentation
layer.

    LOADING -> ERROR | FINISHED | ACTIVE_FRONT
    ACTIVE_FRONT -> ACTIVE_BACK            (reveal)
    ACTIVE_BACK  -> ACTIVE_FRONT | FINISHED (answer)
    ACTIVE_*     -> ERROR                   (corrupt current card)
"""

import logging
from dataclasses import dataclass
from enum import Enum

from flashdeck.application.review_service import write_schedule
from flashdeck.application.scheduler import ScheduleResult, compute_next_review
from flashdeck.application.session_builder import EmptyReason, SessionQueue, build_session
from flashdeck.domain.models import Card, Rating
from flashdeck.domain.ports import Clock, DeckRepository, SystemClock

logger = logging.getLogger(__name__)

CORRUPT_CARD_MESSAGE = "The current card is corrupted or incomplete."

ERROR_MESSAGES = {
    EmptyReason.DECK_NOT_FOUND: "Deck not found.",
    EmptyReason.NO_CARDS: "This deck has no cards to study.",
}


class SessionState(str, Enum):
    LOADING = "loading"
    ACTIVE_FRONT = "active_front"
    ACTIVE_BACK = "active_back"
    FINISHED = "finished"
    ERROR = "error"

    @property
    def is_active(self) -> bool:
        return self in (SessionState.ACTIVE_FRONT, SessionState.ACTIVE_BACK)


@dataclass(frozen=True)
class AnswerOutcome:
    card_id: str
    rating: Rating
    schedule: ScheduleResult
    persisted: bool  # False if the card vanished from the deck mid-session


class StudySession:
    """
    One continuous study pass over the due cards of a single deck.

    The session owns its queue and cursor. Cards in the queue are snapshots;
    authoritative scheduling fields are only changed through the repository.
    """

    def __init__(
        self,
        deck_id: str,
        repo: DeckRepository,
        clock: Clock | None = None,
        limit: int | None = None,
    ):
        """
        Args:
            deck_id: The deck to study.
            repo: The repository (port) holding the authoritative deck.
            clock: Time source; defaults to the system clock.
            limit: Optional cap on the number of cards in the session.
        """
        self.deck_id = deck_id
        self._repo = repo
        self._clock = clock or SystemClock()
        self._limit = limit

        self.state = SessionState.LOADING
        self.queue: SessionQueue | None = None
        self.cursor = 0
        self.error_message: str | None = None
        self.outcomes: list[AnswerOutcome] = []

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def cards(self) -> tuple[Card, ...]:
        return self.queue.cards if self.queue else ()

    @property
    def is_flipped(self) -> bool:
        return self.state is SessionState.ACTIVE_BACK

    @property
    def invalid_count(self) -> int:
        return self.queue.invalid_count if self.queue else 0

    @property
    def empty_reason(self) -> EmptyReason | None:
        return self.queue.empty_reason if self.queue else None

    @property
    def position(self) -> int:
        """1-based index of the card on screen, 0 when none is."""
        return self.cursor + 1 if self.state.is_active else 0

    @property
    def progress(self) -> float:
        """Fraction of the queue already answered."""
        if not self.cards:
            return 1.0 if self.state is SessionState.FINISHED else 0.0
        return len(self.outcomes) / len(self.cards)

    @property
    def current_card(self) -> Card | None:
        """
        The card on screen, or None outside the active state.

        Viewing a structurally corrupt card moves the session to ERROR.
        """
        if not self.state.is_active:
            return None

        self._clamp_cursor()
        card = self.cards[self.cursor]
        if not self._is_displayable(card):
            self._fail(CORRUPT_CARD_MESSAGE)
            logger.error(f"Corrupt card at position {self.cursor} in deck {self.deck_id}")
            return None
        return card

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def start(self) -> SessionState:
        """Load the deck once and build the queue."""
        if self.state is not SessionState.LOADING:
            return self.state

        deck = await self._repo.get_deck(self.deck_id)
        self.queue = build_session(deck, self._clock.now(), limit=self._limit)

        reason = self.queue.empty_reason
        if reason is None:
            self.state = SessionState.ACTIVE_FRONT
        elif reason.is_error:
            self._fail(ERROR_MESSAGES[reason])
        else:
            self.state = SessionState.FINISHED

        logger.debug(f"Session for deck {self.deck_id} started in state {self.state.value}")
        return self.state

    def reveal(self) -> SessionState:
        """Show the back of the current card. No-op unless on the front."""
        if self.state is SessionState.ACTIVE_FRONT and self.current_card is not None:
            self.state = SessionState.ACTIVE_BACK
        return self.state

    async def answer(self, rating: Rating | str) -> AnswerOutcome | None:
        """
        Rate the revealed card, persist its new schedule and advance.

        Returns:
            The AnswerOutcome, or None if the session was not waiting for an
            answer or the current card turned out to be corrupt.

        Raises:
            StorageError: If the repository fails; the session does not advance.
        """
        if self.state is not SessionState.ACTIVE_BACK:
            logger.warning(
                f"Ignoring answer for deck {self.deck_id} in state {self.state.value}"
            )
            return None

        card = self.current_card
        if card is None:
            return None

        rating = Rating(rating)
        now = self._clock.now()
        schedule = compute_next_review(rating, card.interval, card.ease_factor, now)
        persisted = await write_schedule(self._repo, self.deck_id, card.id, schedule, now)

        outcome = AnswerOutcome(
            card_id=card.id, rating=rating, schedule=schedule, persisted=persisted
        )
        self.outcomes.append(outcome)
        self._advance()
        return outcome

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _advance(self) -> None:
        self.cursor += 1
        if self.cursor >= len(self.cards):
            self.state = SessionState.FINISHED
            logger.info(f"Session for deck {self.deck_id} finished ({len(self.outcomes)} answered)")
        else:
            self.state = SessionState.ACTIVE_FRONT

    def _clamp_cursor(self) -> None:
        if self.cards and self.cursor >= len(self.cards):
            logger.warning(
                f"Cursor {self.cursor} past end of queue ({len(self.cards)}); clamping"
            )
            self.cursor = len(self.cards) - 1

    def _fail(self, message: str) -> None:
        self.state = SessionState.ERROR
        self.error_message = message

    @staticmethod
    def _is_displayable(card: Card | None) -> bool:
        return (
            card is not None
            and isinstance(card.front, str)
            and isinstance(card.back, str)
            and card.is_schedulable
        )
