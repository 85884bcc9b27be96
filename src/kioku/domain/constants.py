"""Centralized constants for the kioku application.

Scheduling tables and defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Knowledge level ----------
MIN_KNOWLEDGE_LEVEL = 0
MAX_KNOWLEDGE_LEVEL = 10
EASE_SCALING_LEVEL = 5  # Levels at or above this are multiplied by the ease factor

# ---------- Ease factor ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 4.0
EASY_EASE_BONUS = 0.15
HARD_EASE_PENALTY = 0.2

# ---------- Intervals (seconds), indexed by knowledge level ----------
BASE_INTERVALS = (
    0,  # review immediately
    60,  # 1 minute
    300,  # 5 minutes
    1800,  # 30 minutes
    7200,  # 2 hours
    86400,  # 1 day
    259200,  # 3 days
    604800,  # 1 week
    1209600,  # 2 weeks
    2592000,  # 1 month
    7776000,  # 3 months
)

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

# ---------- Mastery bands (upper level bound, label) ----------
MASTERY_BANDS = (
    (0, "New"),
    (3, "Learning"),
    (6, "Familiar"),
    (8, "Proficient"),
    (10, "Expert"),
)

# ---------- Remote sync / HTTP ----------
REQUEST_TIMEOUT = 30.0
DEFAULT_PROGRESS_ENDPOINT = "/user-progress.php"
