"""Centralized constants for the HSK trainer.

All tuning numbers and storage defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Time ----------
SECOND_MS = 1000
DAY_MS = 24 * 60 * 60 * SECOND_MS

# ---------- Failure path ----------
AGAIN_DELAY_MS = 30 * SECOND_MS  # failed items come back within the session
AGAIN_DIFFICULTY_STEP = 0.8
AGAIN_STABILITY_FACTOR = 0.5
MIN_STABILITY_DAYS = 0.25

# ---------- Success path ----------
SUCCESS_DIFFICULTY_STEP = 0.15
BOOTSTRAP_THRESHOLD_DAYS = 0.5
BOOTSTRAP_STABILITY_DAYS = 1.0
GROWTH_PER_QUALITY = 0.35
GROWTH_PER_DIFFICULTY = 0.08
MIN_GROWTH = 1.05
MIN_SUCCESS_STABILITY_DAYS = 0.5
MIN_INTERVAL_DAYS = 1.0
MAX_INTERVAL_DAYS = 365.0

# ---------- Difficulty ----------
DEFAULT_DIFFICULTY = 2.5
MIN_DIFFICULTY = 1.3
MAX_DIFFICULTY = 10.0

# ---------- Skill interval factors ----------
RECOGNIZE_INTERVAL_FACTOR = 1.0
WRITE_INTERVAL_FACTOR = 0.6  # production recall decays faster than recognition

# ---------- Statistics ----------
TARGET_RETENTION = 0.9

# ---------- Persistence ----------
DEFAULT_STORAGE_KEY = "hsk3.progress"

# ---------- Session ----------
DEFAULT_REQUEUE_OFFSET = 3
