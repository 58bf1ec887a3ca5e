"""
Standings Aggregator - fold GameResults into ranked standings.

Two views:
- overall (week=None): every result of the tournament
- weekly (week=w): only results recorded in week w

Sort order: total_points DESC, player name ASC (case-insensitive), player id ASC.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from league.models.game_result import GameResult
from league.models.player import Player
from league.services.pod_generator import weekly_total

logger = logging.getLogger(__name__)


@dataclass
class StandingRow:
    player_id: int
    player_name: str
    placement_points: int = 0
    achievement_points: int = 0
    total_points: int = 0
    wins: int = 0
    games_played: int = 0


def _sort_key(row: StandingRow) -> tuple:
    return (-row.total_points, row.player_name.casefold(), row.player_id)


def aggregate_standings(
    results: Sequence[GameResult],
    players: Sequence[Player],
    week: Optional[int] = None,
) -> List[StandingRow]:
    """Sum results per player and return rows sorted by total points."""
    by_id: Dict[int, Player] = {p.id: p for p in players}
    rows: Dict[int, StandingRow] = {}

    for result in results:
        if week is not None and result.week != week:
            continue
        player = by_id.get(result.player_id)
        if player is None:
            logger.warning(
                f"Result {result.id} references player {result.player_id} missing from roster; skipped"
            )
            continue

        row = rows.get(result.player_id)
        if row is None:
            row = StandingRow(player_id=player.id, player_name=player.name)
            rows[result.player_id] = row

        row.placement_points += result.placement_points
        row.achievement_points += result.achievement_points
        row.total_points += result.total_points
        row.wins += 1 if result.is_win else 0
        row.games_played += 1

    return sorted(rows.values(), key=_sort_key)


def winner(results: Sequence[GameResult], players: Sequence[Player]) -> Optional[StandingRow]:
    """Top row of the overall standings, or None when nothing was recorded."""
    standings = aggregate_standings(results, players)
    return standings[0] if standings else None


def weekly_live_standings(
    players: Sequence[Player],
    present_player_ids: Sequence[int],
    weekly_points_by_player: Optional[Mapping[Any, Any]],
) -> List[StandingRow]:
    """Running standings for the current week: every present player, zero if unscored."""
    by_id: Dict[int, Player] = {p.id: p for p in players}
    rows: List[StandingRow] = []
    for pid in dict.fromkeys(present_player_ids):
        player = by_id.get(pid)
        if player is None:
            continue
        entry = (weekly_points_by_player or {}).get(str(pid))
        if not isinstance(entry, Mapping):
            entry = {}
        rows.append(
            StandingRow(
                player_id=player.id,
                player_name=player.name,
                placement_points=int(entry.get("placement", 0)),
                achievement_points=int(entry.get("achievement", 0)),
                total_points=weekly_total(weekly_points_by_player, pid),
            )
        )
    return sorted(rows, key=_sort_key)


def participant_count(results: Sequence[GameResult]) -> int:
    """Number of distinct players with at least one result."""
    return len({r.player_id for r in results})
