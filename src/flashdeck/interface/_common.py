"""Helpers shared by CLI command modules."""

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

import typer

from flashdeck.application.config import AppConfig, resolve_config
from flashdeck.application.factory import get_deck_repository
from flashdeck.domain.errors import FlashdeckError
from flashdeck.domain.models import Rating
from flashdeck.domain.ports import DeckRepository

T = TypeVar("T")

RATING_KEYS = {
    "h": Rating.HARD,
    "hard": Rating.HARD,
    "m": Rating.MEDIUM,
    "medium": Rating.MEDIUM,
    "e": Rating.EASY,
    "easy": Rating.EASY,
}


def _resolve_with_overrides(**overrides: Any) -> AppConfig:
    return resolve_config({k: v for k, v in overrides.items() if v is not None})


def _repository(config: AppConfig) -> DeckRepository:
    return get_deck_repository(config)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning domain errors into a red message and exit code 1."""
    try:
        return asyncio.run(coro)
    except FlashdeckError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from e


def parse_rating(text: str) -> Rating | None:
    return RATING_KEYS.get(text.strip().lower())


def format_days(interval: int) -> str:
    if interval == 0:
        return "today"
    if interval == 1:
        return "in 1 day"
    return f"in {interval} days"
