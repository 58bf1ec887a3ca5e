"""
Weekly achievement rotation.

Each week a tournament draws `random_achievements_per_week` selectable
achievements from the catalog; always-on achievements are active every week.
The draw is seeded by (tournament id, week) so re-rolling a week is
reproducible.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

from league.models.achievement import Achievement
from league.models.tournament import Tournament
from league.utils.seeding import seeded_rng

logger = logging.getLogger(__name__)


@dataclass
class WeekAchievements:
    active_ids: List[int]
    selectable_enabled: bool


def draw_week_achievements(
    tournament_id: int,
    week: int,
    catalog: Sequence[Achievement],
    per_week: int,
) -> WeekAchievements:
    always_on_ids = sorted(a.id for a in catalog if a.always_on)
    selectable_ids = sorted(a.id for a in catalog if not a.always_on)

    count = max(0, min(per_week, len(selectable_ids)))
    picked = seeded_rng("achievements", tournament_id, week).sample(selectable_ids, count)

    return WeekAchievements(
        active_ids=always_on_ids + sorted(picked),
        selectable_enabled=count > 0,
    )


def apply_week_achievements(tournament: Tournament, catalog: Sequence[Achievement]) -> None:
    """Roll the current week's active achievements onto the tournament (caller commits)."""
    drawn = draw_week_achievements(
        tournament.id, tournament.current_week, catalog, tournament.random_achievements_per_week
    )
    tournament.active_achievement_ids = drawn.active_ids
    tournament.achievements_on_this_week = drawn.selectable_enabled
    logger.info(
        f"Tournament {tournament.id} week {tournament.current_week}: "
        f"{len(drawn.active_ids)} active achievements"
    )


def active_achievements(tournament: Tournament, catalog: Sequence[Achievement]) -> List[Achievement]:
    active = set(tournament.active_achievement_ids or [])
    return [a for a in catalog if a.id in active]
