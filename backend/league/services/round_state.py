"""
Round/Week state machine for a tournament.

Phases:
  before_attendance → attendance_confirmed → round_in_progress
    → next round | next week | completed

Transitions mutate the Tournament row in memory only; the caller commits.
JSON columns are always reassigned (never mutated in place) so SQLAlchemy
sees the change.
"""

import logging
from datetime import date
from enum import Enum
from typing import List, Optional

from league.errors import TournamentStateError
from league.models.tournament import STATUS_COMPLETED, Tournament

logger = logging.getLogger(__name__)


class RoundPhase(str, Enum):
    BEFORE_ATTENDANCE = "before_attendance"
    ATTENDANCE_CONFIRMED = "attendance_confirmed"
    ROUND_IN_PROGRESS = "round_in_progress"
    COMPLETED = "completed"


class AdvanceOutcome(str, Enum):
    NEXT_ROUND = "next_round"
    NEXT_WEEK = "next_week"
    TOURNAMENT_COMPLETED = "tournament_completed"


def round_phase(tournament: Tournament) -> RoundPhase:
    if tournament.status == STATUS_COMPLETED:
        return RoundPhase.COMPLETED
    if tournament.current_pods:
        return RoundPhase.ROUND_IN_PROGRESS
    if tournament.present_player_ids:
        return RoundPhase.ATTENDANCE_CONFIRMED
    return RoundPhase.BEFORE_ATTENDANCE


def require_ongoing(tournament: Tournament, action: str) -> None:
    """Raise TournamentStateError when a completed tournament is mutated."""
    if tournament.status == STATUS_COMPLETED:
        raise TournamentStateError(f"Cannot {action}: tournament {tournament.id} is completed")


def can_generate_pods(tournament: Tournament) -> bool:
    return tournament.status != STATUS_COMPLETED and bool(tournament.present_player_ids)


def can_edit_last_round(tournament: Tournament) -> bool:
    return len(tournament.pod_history_snapshots or []) > 0


def round_participants(tournament: Tournament) -> List[int]:
    """
    Players who receive a result when the round is finalized.

    Order: seated players (pod order), then present players without a seat,
    then anyone else holding a placement.
    """
    participants: List[int] = []
    seen = set()

    def _add(pid: int) -> None:
        if pid not in seen:
            seen.add(pid)
            participants.append(pid)

    for pod in tournament.current_pods or []:
        for pid in pod:
            _add(int(pid))
    for pid in tournament.present_player_ids or []:
        _add(int(pid))
    for key in (tournament.round_placements or {}).keys():
        _add(int(key))
    return participants


def is_round_recordable(tournament: Tournament) -> bool:
    """
    True when there is someone to record.

    Missing placements default to last place, so every participant always
    has a placement once the round is finalized.
    """
    return bool(round_participants(tournament))


def clear_round_state(tournament: Tournament) -> None:
    """Discard pods, placements and achievement checks of the round in progress."""
    tournament.current_pods = []
    tournament.round_placements = {}
    tournament.round_achievement_checks = []


def _start_next_week(tournament: Tournament) -> AdvanceOutcome:
    if tournament.current_week >= tournament.total_weeks:
        tournament.status = STATUS_COMPLETED
        tournament.current_week = tournament.total_weeks
        tournament.end_date = date.today()
        clear_round_state(tournament)
        logger.info(f"Tournament {tournament.id} completed after week {tournament.total_weeks}")
        return AdvanceOutcome.TOURNAMENT_COMPLETED

    tournament.current_week += 1
    tournament.current_round = 1
    tournament.present_player_ids = []
    tournament.weekly_points_by_player = {}
    clear_round_state(tournament)
    logger.info(f"Tournament {tournament.id} advanced to week {tournament.current_week}/{tournament.total_weeks}")
    return AdvanceOutcome.NEXT_WEEK


def advance(tournament: Tournament) -> AdvanceOutcome:
    """Move past the round just recorded: next round, next week, or completion."""
    require_ongoing(tournament, "advance round")
    next_round = tournament.current_round + 1
    if next_round > tournament.rounds_per_week:
        return _start_next_week(tournament)

    tournament.current_round = next_round
    clear_round_state(tournament)
    return AdvanceOutcome.NEXT_ROUND


def advance_week(tournament: Tournament) -> AdvanceOutcome:
    """Explicit end-of-week signal regardless of rounds played."""
    require_ongoing(tournament, "advance week")
    return _start_next_week(tournament)


def last_snapshot(tournament: Tournament) -> Optional[dict]:
    snapshots = tournament.pod_history_snapshots or []
    return snapshots[-1] if snapshots else None
