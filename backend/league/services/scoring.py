"""
Placement and achievement scoring.

Pure functions; nothing here touches the session.

Placement points come from a table indexed by placement (1-based):
  default (4, 3, 2, 1) → 1st = 4, 2nd = 3, 3rd = 2, 4th = 1
Placements past the end of the table clamp to its last value.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Set, Tuple

from league.config import DEFAULT_PLACEMENT_POINTS, WORST_PLACEMENT
from league.models.achievement import Achievement


@dataclass(frozen=True)
class PlayerScore:
    placement: int
    placement_points: int
    achievement_points: int
    total_points: int
    is_win: bool


def placement_points(placement: int, table: Optional[Sequence[int]] = None) -> int:
    """Points for a finishing placement.

    Raises:
        ValueError: placement < 1 or empty table
    """
    table = tuple(table) if table else DEFAULT_PLACEMENT_POINTS
    if placement < 1:
        raise ValueError(f"placement must be >= 1, got {placement}")
    index = min(placement, len(table)) - 1
    return table[index]


def achievement_points(
    achievements: Iterable[Achievement],
    checked_ids: Set[int],
    selectable_enabled: bool = True,
) -> int:
    """Sum achievement points for one player in one round.

    always_on achievements count regardless of check state. Checked
    selectable achievements count only while selectable_enabled.
    """
    total = 0
    for achievement in achievements:
        if achievement.always_on:
            total += achievement.points
        elif selectable_enabled and achievement.id in checked_ids:
            total += achievement.points
    return total


def score_player(
    placement: Optional[int],
    achievements: Iterable[Achievement],
    checked_ids: Set[int],
    table: Optional[Sequence[int]] = None,
    selectable_enabled: bool = True,
) -> PlayerScore:
    """Score one player for one round. A missing placement counts as last place."""
    if placement is None:
        placement = WORST_PLACEMENT
    p_points = placement_points(placement, table)
    a_points = achievement_points(achievements, checked_ids, selectable_enabled)
    return PlayerScore(
        placement=placement,
        placement_points=p_points,
        achievement_points=a_points,
        total_points=p_points + a_points,
        is_win=placement == 1,
    )


# ============================================================================
# Achievement check keys: "playerId:achievementId"
# ============================================================================


def check_key(player_id: int, achievement_id: int) -> str:
    return f"{player_id}:{achievement_id}"


def parse_check_key(key: str) -> Optional[Tuple[int, int]]:
    """Split a check key; returns None for malformed keys."""
    player_part, sep, achievement_part = key.partition(":")
    if not sep:
        return None
    try:
        return int(player_part), int(achievement_part)
    except ValueError:
        return None


def checked_achievement_ids(checks: Iterable[str], player_id: int) -> Set[int]:
    """Achievement ids checked for one player."""
    ids: Set[int] = set()
    for key in checks:
        parsed = parse_check_key(key)
        if parsed and parsed[0] == player_id:
            ids.add(parsed[1])
    return ids
