"""Centralized constants for flashdeck.

All magic numbers and defaults live here so every layer imports from a
single source of truth.
"""

# ---------- Time ----------
MS_PER_DAY = 86_400_000

# ---------- Scheduler ----------
MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5
GRADUATION_INTERVAL_DAYS = 21

HARD_EASE_PENALTY = 0.2
MEDIUM_EASE_PENALTY = 0.15
EASY_EASE_BONUS = 0.15

MEDIUM_FIRST_INTERVAL = 1
MEDIUM_INTERVAL_MULTIPLIER = 1.5
EASY_FIRST_INTERVAL = 3
EASY_INTERVAL_BONUS = 1.3

# ---------- Decks ----------
DEFAULT_CATEGORY = "General"

# ---------- Storage ----------
DEFAULT_STORE_FILE = "decks.json"
