# Application Stats Package
from .metrics_calculator import DeckStats, MetricsCalculator
from .service import DeckStatsService

__all__ = ["MetricsCalculator", "DeckStats", "DeckStatsService"]
