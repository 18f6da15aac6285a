"""
Repository Factory
Centralizes the logic for selecting the deck storage adapter.
"""

import logging

from flashdeck.application.config import AppConfig
from flashdeck.domain.ports import DeckRepository
from flashdeck.infrastructure.adapters.json_store import JsonFileDeckRepository
from flashdeck.infrastructure.adapters.memory_store import InMemoryDeckRepository

logger = logging.getLogger(__name__)


def get_deck_repository(config: AppConfig) -> DeckRepository:
    """
    Returns the DeckRepository implementation selected by config.
    """
    if config.backend == "memory":
        logger.debug("Backend: in-memory (nothing is persisted)")
        return InMemoryDeckRepository()

    logger.debug(f"Backend: JSON file at {config.store_path}")
    return JsonFileDeckRepository(config.store_path)
