import logging
import time
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel

from flashdeck.application.config import resolve_config
from flashdeck.application.factory import get_deck_repository
from flashdeck.application.review_service import review_card
from flashdeck.application.session_builder import build_session
from flashdeck.application.stats import DeckStatsService
from flashdeck.consts import VERSION
from flashdeck.domain.errors import DeckNotFoundError, StorageError, ValidationError
from flashdeck.domain.models import Rating
from flashdeck.domain.ports import Clock, DeckRepository, SystemClock

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("flashdeck.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    config = resolve_config()
    app.state.repo = get_deck_repository(config)
    app.state.clock = SystemClock()
    app.state.session_limit = config.session_limit
    logger.info(f"flashdeck server v{VERSION} starting up (backend={config.backend})")
    yield
    # Shutdown
    logger.info("flashdeck server shutting down...")


app = FastAPI(
    title="flashdeck",
    description="HTTP API for flashdeck decks and reviews.",
    version=VERSION,
    lifespan=lifespan,
)


def get_repository(request: Request) -> DeckRepository:
    return request.app.state.repo


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class DeckSummary(BaseModel):
    id: str
    title: str
    category: str
    cards: int
    created_at: int
    last_studied: int | None


class QueueResponse(BaseModel):
    empty_reason: str | None
    invalid_count: int
    total_cards: int
    cards: list[dict]


class ReviewRequest(BaseModel):
    card_id: str
    rating: Rating


class ReviewResponse(BaseModel):
    card_id: str
    interval: int
    ease_factor: float
    next_review: int
    status: str


start_time = time.time()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/decks", response_model=list[DeckSummary])
async def list_decks(repo: DeckRepository = Depends(get_repository)):
    try:
        decks = await repo.list_decks()
    except StorageError as e:
        logger.error(f"Listing decks failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return [
        DeckSummary(
            id=d.id,
            title=d.title,
            category=d.category,
            cards=len(d.cards or []),
            created_at=d.created_at,
            last_studied=d.last_studied,
        )
        for d in decks
    ]


@app.get("/decks/{deck_id}/stats")
async def deck_stats(
    deck_id: str,
    repo: DeckRepository = Depends(get_repository),
    clock: Clock = Depends(get_clock),
):
    try:
        stats = await DeckStatsService(repo, clock).get_deck_stats(deck_id)
    except DeckNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except StorageError as e:
        logger.error(f"Stats for {deck_id} failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e
    return asdict(stats)


@app.get("/decks/{deck_id}/queue", response_model=QueueResponse)
async def deck_queue(
    deck_id: str,
    request: Request,
    repo: DeckRepository = Depends(get_repository),
    clock: Clock = Depends(get_clock),
):
    """
    The ordered due-card queue a study session would start with now.
    """
    try:
        deck = await repo.get_deck(deck_id)
    except StorageError as e:
        logger.error(f"Loading deck {deck_id} failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    limit = getattr(request.app.state, "session_limit", None)
    queue = build_session(deck, clock.now(), limit=limit)
    if queue.empty_reason is not None and queue.empty_reason.is_error:
        raise HTTPException(status_code=404, detail=queue.empty_reason.value)

    return QueueResponse(
        empty_reason=queue.empty_reason.value if queue.empty_reason else None,
        invalid_count=queue.invalid_count,
        total_cards=queue.total_cards,
        cards=[c.to_record() for c in queue.cards],
    )


@app.post("/decks/{deck_id}/review", response_model=ReviewResponse)
async def review(
    deck_id: str,
    req: ReviewRequest,
    repo: DeckRepository = Depends(get_repository),
    clock: Clock = Depends(get_clock),
):
    """
    Rate one card and persist its new schedule.
    """
    logger.info(f"Review requested via API: deck={deck_id} card={req.card_id} rating={req.rating.value}")

    try:
        schedule = await review_card(repo, deck_id, req.card_id, req.rating, clock.now())
    except DeckNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except StorageError as e:
        logger.error(f"Review failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return ReviewResponse(
        card_id=req.card_id,
        interval=schedule.interval,
        ease_factor=schedule.ease_factor,
        next_review=schedule.next_review,
        status=schedule.status.value,
    )
