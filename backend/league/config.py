"""
League defaults read from the environment.

Every value can be overridden in a .env file next to the working directory.
"""

import os
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


def parse_points_table(raw: str) -> Tuple[int, ...]:
    """
    Parse a placement points table such as "4,3,2,1".

    - Whitespace around entries is ignored
    - Empty entries are dropped
    - Values must be non-increasing (1st place never scores below 2nd)
    """
    values = tuple(int(part.strip()) for part in raw.split(",") if part.strip())
    if not values:
        raise ValueError("placement points table is empty")
    for better, worse in zip(values, values[1:]):
        if worse > better:
            raise ValueError(f"placement points must be non-increasing, got {values}")
    return values


DEFAULT_TOTAL_WEEKS = _env_int("LEAGUE_DEFAULT_TOTAL_WEEKS", 4)
DEFAULT_ROUNDS_PER_WEEK = _env_int("LEAGUE_ROUNDS_PER_WEEK", 3)
DEFAULT_RANDOM_ACHIEVEMENTS_PER_WEEK = _env_int("LEAGUE_RANDOM_ACHIEVEMENTS_PER_WEEK", 2)
DEFAULT_PLACEMENT_POINTS = parse_points_table(os.getenv("LEAGUE_PLACEMENT_POINTS", "4,3,2,1"))

# Pod capacity is fixed by the game format
POD_SIZE = 4
WORST_PLACEMENT = 4

# Achievement inserted when a fresh league is bootstrapped
DEFAULT_ACHIEVEMENT_NAME = os.getenv("LEAGUE_DEFAULT_ACHIEVEMENT_NAME", "Showed Up")
DEFAULT_ACHIEVEMENT_POINTS = _env_int("LEAGUE_DEFAULT_ACHIEVEMENT_POINTS", 1)
DEFAULT_ACHIEVEMENT_ALWAYS_ON = os.getenv("LEAGUE_DEFAULT_ACHIEVEMENT_ALWAYS_ON", "false").lower() in (
    "true",
    "1",
    "yes",
)
