"""
Tournament Lifecycle Manager.

Orchestrates attendance → pods → placements/achievement checks → round
finalization → standings against the SQLModel store.

Every call takes the session and an explicit tournament id. Commands commit
before returning; queries never mutate. Missing tournaments yield None or
empty results; store failures raise StoreUnavailableError.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from sqlmodel import Session, select

from league.config import (
    DEFAULT_ACHIEVEMENT_ALWAYS_ON,
    DEFAULT_ACHIEVEMENT_NAME,
    DEFAULT_ACHIEVEMENT_POINTS,
    WORST_PLACEMENT,
)
from league.errors import NoRoundToEditError
from league.models.achievement import Achievement
from league.models.game_result import GameResult
from league.models.league_state import LeagueState
from league.models.player import Player
from league.models.tournament import STATUS_ONGOING, Tournament
from league.schemas import AchievementCreate, TournamentCreate, TournamentUpdate
from league.services.achievement_rotation import active_achievements, apply_week_achievements
from league.services.pod_generator import default_placements, generate_pods_for_round
from league.services.round_state import (
    AdvanceOutcome,
    RoundPhase,
    advance,
    advance_week,
    can_edit_last_round,
    can_generate_pods,
    clear_round_state,
    is_round_recordable,
    last_snapshot,
    require_ongoing,
    round_participants,
    round_phase,
)
from league.services.scoring import check_key, checked_achievement_ids, parse_check_key, score_player
from league.services.standings import (
    StandingRow,
    aggregate_standings,
    participant_count,
    weekly_live_standings,
    winner,
)
from league.store import forget_tournament_lock, store_operation, tournament_lock

logger = logging.getLogger(__name__)

CheckInput = Union[str, Tuple[int, int]]


@dataclass
class RoundStatus:
    """Snapshot of a tournament's progress for callers deciding which actions to enable."""

    tournament_id: int
    phase: RoundPhase
    current_week: int
    total_weeks: int
    current_round: int
    rounds_per_week: int
    present_count: int
    can_generate_pods: bool
    can_record_round: bool
    can_edit_last_round: bool

    @property
    def week_progress(self) -> str:
        return f"Week {self.current_week} of {self.total_weeks}"

    @property
    def round_label(self) -> str:
        return f"Round {self.current_round}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Roster and achievement catalog
# ============================================================================


def create_player(session: Session, name: str) -> Player:
    if not name or not name.strip():
        raise ValueError("player name is required")
    with store_operation(session, "create player"):
        player = Player(name=name.strip())
        session.add(player)
        session.commit()
        session.refresh(player)
    return player


def fetch_player(session: Session, player_id: int) -> Optional[Player]:
    with store_operation(session, "fetch player"):
        return session.get(Player, player_id)


def list_players(session: Session) -> List[Player]:
    """All players sorted by name"""
    with store_operation(session, "list players"):
        return list(session.exec(select(Player).order_by(Player.name, Player.id)).all())


def create_achievement(session: Session, data: AchievementCreate) -> Achievement:
    with store_operation(session, "create achievement"):
        achievement = Achievement(**data.model_dump())
        session.add(achievement)
        session.commit()
        session.refresh(achievement)
    return achievement


def list_achievements(session: Session) -> List[Achievement]:
    with store_operation(session, "list achievements"):
        return list(session.exec(select(Achievement).order_by(Achievement.id)).all())


def fetch_league_state(session: Session) -> Optional[LeagueState]:
    with store_operation(session, "fetch league state"):
        return session.exec(select(LeagueState).order_by(LeagueState.id)).first()


def bootstrap_league(session: Session) -> LeagueState:
    """Insert the LeagueState singleton and the default achievement on a fresh store. Idempotent."""
    with store_operation(session, "bootstrap league"):
        state = session.exec(select(LeagueState).order_by(LeagueState.id)).first()
        if state is None:
            state = LeagueState()
            session.add(state)

        if session.exec(select(Achievement)).first() is None:
            session.add(
                Achievement(
                    name=DEFAULT_ACHIEVEMENT_NAME,
                    points=DEFAULT_ACHIEVEMENT_POINTS,
                    always_on=DEFAULT_ACHIEVEMENT_ALWAYS_ON,
                )
            )

        session.commit()
        session.refresh(state)
    return state


def set_active_tournament(session: Session, tournament_id: int) -> Optional[LeagueState]:
    """Record which tournament a front end is looking at. Routing metadata only."""
    with store_operation(session, "set active tournament"):
        state = session.exec(select(LeagueState).order_by(LeagueState.id)).first()
        if state is None:
            return None
        state.active_tournament_id = tournament_id
        session.add(state)
        session.commit()
        session.refresh(state)
    return state


# ============================================================================
# Tournament CRUD
# ============================================================================


def _roster_ids(session: Session, player_ids: Iterable[int]) -> List[int]:
    """Dedupe ids (keeping order) and drop ids that are not on the roster."""
    roster = {p.id for p in session.exec(select(Player)).all()}
    kept: List[int] = []
    for pid in dict.fromkeys(player_ids):
        if pid in roster:
            kept.append(pid)
        else:
            logger.warning(f"Ignoring unknown player id {pid}")
    return kept


def create_tournament(session: Session, data: TournamentCreate) -> Tournament:
    """Create an ongoing tournament at week 1 / round 1 and draw week 1's achievements."""
    with store_operation(session, "create tournament"):
        fields = data.model_dump(exclude={"player_ids", "start_date"})
        tournament = Tournament(**fields)
        if data.start_date is not None:
            tournament.start_date = data.start_date
        tournament.present_player_ids = _roster_ids(session, data.player_ids)

        session.add(tournament)
        session.flush()  # Get the ID for the achievement draw seed

        apply_week_achievements(tournament, session.exec(select(Achievement)).all())
        session.add(tournament)
        session.commit()
        session.refresh(tournament)

    logger.info(f"Created tournament {tournament.id} '{tournament.name}' ({tournament.total_weeks} weeks)")
    return tournament


def fetch_tournament(session: Session, tournament_id: int) -> Optional[Tournament]:
    with store_operation(session, "fetch tournament"):
        return session.get(Tournament, tournament_id)


def list_tournaments(session: Session, status: Optional[str] = None) -> List[Tournament]:
    """Tournaments newest first, optionally filtered by status"""
    with store_operation(session, "list tournaments"):
        query = select(Tournament)
        if status is not None:
            query = query.where(Tournament.status == status)
        query = query.order_by(Tournament.start_date.desc(), Tournament.id.desc())
        return list(session.exec(query).all())


def update_tournament(session: Session, tournament_id: int, data: TournamentUpdate) -> Optional[Tournament]:
    """
    Update name, total weeks and random achievements per week.

    - total_weeks may not drop below the current week
    - total_weeks of a completed tournament is frozen
    - a new random_achievements_per_week applies from the next week's draw

    Returns None if the tournament does not exist.
    """
    with tournament_lock(tournament_id), store_operation(session, "update tournament"):
        tournament = session.get(Tournament, tournament_id)
        if not tournament:
            return None

        update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

        new_weeks = update_data.get("total_weeks")
        if new_weeks is not None and new_weeks != tournament.total_weeks:
            require_ongoing(tournament, "change total weeks")
            if new_weeks < tournament.current_week:
                raise ValueError(
                    f"total_weeks ({new_weeks}) cannot be less than the current week ({tournament.current_week})"
                )

        for field, value in update_data.items():
            setattr(tournament, field, value)

        tournament.updated_at = _now()
        session.add(tournament)
        session.commit()
        session.refresh(tournament)
    return tournament


def delete_tournament(session: Session, tournament_id: int) -> bool:
    """Delete a tournament and its results; lifetime stats lose those results. False if missing."""
    with tournament_lock(tournament_id), store_operation(session, "delete tournament"):
        tournament = session.get(Tournament, tournament_id)
        if not tournament:
            return False

        results = session.exec(select(GameResult).where(GameResult.tournament_id == tournament_id)).all()
        for result in results:
            player = session.get(Player, result.player_id)
            if player is not None:
                _apply_lifetime(player, result, -1)
                session.add(player)
            session.delete(result)
        session.flush()

        state = session.exec(select(LeagueState).where(LeagueState.active_tournament_id == tournament_id)).first()
        if state is not None:
            state.active_tournament_id = None
            session.add(state)

        session.delete(tournament)
        session.commit()

    forget_tournament_lock(tournament_id)
    logger.info(f"Deleted tournament {tournament_id} with {len(results)} results")
    return True


def player_count(session: Session, tournament_id: int) -> int:
    """Present players for an ongoing tournament, distinct result players for a completed one."""
    tournament = fetch_tournament(session, tournament_id)
    if tournament is None:
        return 0
    if tournament.status == STATUS_ONGOING:
        return len(tournament.present_player_ids or [])
    return participant_count(fetch_results_for_tournament(session, tournament_id))


# ============================================================================
# Attendance and pods
# ============================================================================


def set_attendance(session: Session, tournament_id: int, player_ids: Sequence[int]) -> Optional[Tournament]:
    """Replace the current week's attendance. Pods already generated are kept until regenerated."""
    with tournament_lock(tournament_id), store_operation(session, "set attendance"):
        tournament = session.get(Tournament, tournament_id)
        if not tournament:
            return None
        require_ongoing(tournament, "change attendance")

        tournament.present_player_ids = _roster_ids(session, player_ids)
        session.add(tournament)
        session.commit()
        session.refresh(tournament)
    return tournament


def set_player_present(session: Session, tournament_id: int, player_id: int, present: bool) -> Optional[Tournament]:
    tournament = fetch_tournament(session, tournament_id)
    if tournament is None:
        return None
    present_ids = [pid for pid in tournament.present_player_ids or [] if pid != player_id]
    if present:
        present_ids.append(player_id)
    return set_attendance(session, tournament_id, present_ids)


def _previous_round_pods(tournament: Tournament) -> Optional[List[List[int]]]:
    """Pods played in the last finalized round, if it belongs to the current week."""
    snapshot = last_snapshot(tournament)
    if snapshot is None or snapshot.get("week") != tournament.current_week:
        return None
    return snapshot.get("pods") or None


def generate_pods(session: Session, tournament_id: int) -> List[List[Player]]:
    """
    Generate pods for the current round.

    Empty attendance yields [] without touching the round state. Otherwise the
    previous round-in-progress state is discarded, the pods are stored and
    every seated player gets a default placement of min(seat + 1, 4).
    """
    with tournament_lock(tournament_id), store_operation(session, "generate pods"):
        tournament = session.get(Tournament, tournament_id)
        if not tournament:
            return []
        require_ongoing(tournament, "generate pods")
        if not tournament.present_player_ids:
            return []

        players = session.exec(select(Player)).all()
        pods = generate_pods_for_round(
            players=players,
            present_player_ids=tournament.present_player_ids,
            current_round=tournament.current_round,
            weekly_points_by_player=tournament.weekly_points_by_player,
            previous_pods=_previous_round_pods(tournament),
        )

        clear_round_state(tournament)
        pod_ids = [[p.id for p in pod] for pod in pods]
        tournament.current_pods = pod_ids
        tournament.round_placements = {str(pid): place for pid, place in default_placements(pod_ids).items()}
        session.add(tournament)
        session.commit()

    logger.info(
        f"Tournament {tournament_id} week {tournament.current_week} round {tournament.current_round}: "
        f"generated pods {[len(pod) for pod in pods]}"
    )
    return pods


def current_pods(session: Session, tournament_id: int) -> List[List[Player]]:
    """Pods of the round in progress as Player objects"""
    tournament = fetch_tournament(session, tournament_id)
    if tournament is None:
        return []
    by_id = {p.id: p for p in list_players(session)}
    return [[by_id[pid] for pid in pod if pid in by_id] for pod in tournament.current_pods or []]


# ============================================================================
# Round in progress: placements and achievement checks (auto-saved)
# ============================================================================


def _validate_placement(placement: int) -> None:
    if not 1 <= placement <= WORST_PLACEMENT:
        raise ValueError(f"placement must be between 1 and {WORST_PLACEMENT}, got {placement}")


def update_placement(session: Session, tournament_id: int, player_id: int, placement: int) -> Optional[Tournament]:
    _validate_placement(placement)
    with tournament_lock(tournament_id), store_operation(session, "update placement"):
        tournament = session.get(Tournament, tournament_id)
        if not tournament:
            return None
        require_ongoing(tournament, "update placement")

        tournament.round_placements = {**(tournament.round_placements or {}), str(player_id): placement}
        session.add(tournament)
        session.commit()
    return tournament


def update_achievement_check(
    session: Session, tournament_id: int, player_id: int, achievement_id: int, checked: bool
) -> Optional[Tournament]:
    with tournament_lock(tournament_id), store_operation(session, "update achievement check"):
        tournament = session.get(Tournament, tournament_id)
        if not tournament:
            return None
        require_ongoing(tournament, "update achievement check")

        key = check_key(player_id, achievement_id)
        checks = [k for k in tournament.round_achievement_checks or [] if k != key]
        if checked:
            checks.append(key)
        tournament.round_achievement_checks = checks
        session.add(tournament)
        session.commit()
    return tournament


def placement_for(session: Session, tournament_id: int, player_id: int) -> int:
    """Current placement for a player; last place when none is recorded."""
    tournament = fetch_tournament(session, tournament_id)
    if tournament is None:
        return WORST_PLACEMENT
    return int((tournament.round_placements or {}).get(str(player_id), WORST_PLACEMENT))


def is_achievement_checked(session: Session, tournament_id: int, player_id: int, achievement_id: int) -> bool:
    tournament = fetch_tournament(session, tournament_id)
    if tournament is None:
        return False
    return check_key(player_id, achievement_id) in (tournament.round_achievement_checks or [])


def clear_round_data(session: Session, tournament_id: int) -> Optional[Tournament]:
    """Discard pods, placements and checks of the round in progress"""
    with tournament_lock(tournament_id), store_operation(session, "clear round data"):
        tournament = session.get(Tournament, tournament_id)
        if not tournament:
            return None
        require_ongoing(tournament, "clear round data")
        clear_round_state(tournament)
        session.add(tournament)
        session.commit()
    return tournament


def tournament_achievements(session: Session, tournament_id: int) -> List[Achievement]:
    """Achievements active for the tournament's current week"""
    tournament = fetch_tournament(session, tournament_id)
    if tournament is None:
        return []
    return active_achievements(tournament, list_achievements(session))


# ============================================================================
# Finalization helpers
# ============================================================================


def _apply_lifetime(player: Player, score, sign: int) -> None:
    """Add (sign=1) or remove (sign=-1) one round's score from a player's lifetime stats."""
    player.placement_points += sign * score.placement_points
    player.achievement_points += sign * score.achievement_points
    player.wins += sign * (1 if score.is_win else 0)
    player.games_played += sign


def _accumulate_weekly(weekly: Dict[str, Dict[str, int]], player_id: int, score, sign: int) -> Dict[str, Dict[str, int]]:
    key = str(player_id)
    current = weekly.get(key) or {"placement": 0, "achievement": 0, "total": 0}
    updated = dict(weekly)
    updated[key] = {
        "placement": current["placement"] + sign * score.placement_points,
        "achievement": current["achievement"] + sign * score.achievement_points,
        "total": current["total"] + sign * score.total_points,
    }
    return updated


def _normalize_checks(checks: Iterable[CheckInput]) -> List[str]:
    keys: List[str] = []
    for item in checks:
        if isinstance(item, str):
            if parse_check_key(item) is None:
                logger.warning(f"Ignoring malformed achievement check '{item}'")
                continue
            key = item
        else:
            player_id, achievement_id = item
            key = check_key(player_id, achievement_id)
        if key not in keys:
            keys.append(key)
    return keys


def _record_results(
    session: Session,
    tournament: Tournament,
    week: int,
    round_number: int,
    participants: Sequence[int],
    placements: Mapping[int, int],
    checks: Sequence[str],
    achievements: Sequence[Achievement],
    selectable_enabled: bool,
    roster: Mapping[int, Player],
) -> Tuple[List[GameResult], Dict[str, Dict[str, int]]]:
    """Score every participant, insert GameResults and update lifetime stats.

    Returns the new results and the weekly points delta keyed like
    Tournament.weekly_points_by_player.
    """
    results: List[GameResult] = []
    weekly_delta: Dict[str, Dict[str, int]] = {}

    for pid in participants:
        score = score_player(
            placement=placements.get(pid),
            achievements=achievements,
            checked_ids=checked_achievement_ids(checks, pid),
            table=tournament.placement_points_table,
            selectable_enabled=selectable_enabled,
        )
        result = GameResult(
            tournament_id=tournament.id,
            week=week,
            round=round_number,
            player_id=pid,
            placement=score.placement,
            placement_points=score.placement_points,
            achievement_points=score.achievement_points,
            total_points=score.total_points,
            is_win=score.is_win,
        )
        session.add(result)
        results.append(result)

        player = roster[pid]
        _apply_lifetime(player, score, 1)
        session.add(player)
        weekly_delta = _accumulate_weekly(weekly_delta, pid, score, 1)

    return results, weekly_delta


def _merge_weekly(weekly: Mapping[str, Dict[str, int]], delta: Mapping[str, Dict[str, int]], sign: int = 1):
    merged = {k: dict(v) for k, v in (weekly or {}).items()}
    for key, entry in delta.items():
        current = merged.get(key) or {"placement": 0, "achievement": 0, "total": 0}
        merged[key] = {field: current[field] + sign * entry[field] for field in ("placement", "achievement", "total")}
    return merged


def _finalize_round(session: Session, tournament: Tournament) -> Optional[List[GameResult]]:
    """Persist the round in progress as GameResults and snapshot it. None when nobody participated."""
    roster = {p.id: p for p in session.exec(select(Player)).all()}
    participants = [pid for pid in round_participants(tournament) if pid in roster]
    if not participants:
        logger.info(f"Tournament {tournament.id}: no participants, nothing to record")
        return None

    week, round_number = tournament.current_week, tournament.current_round
    placements = {int(k): int(v) for k, v in (tournament.round_placements or {}).items()}
    checks = list(tournament.round_achievement_checks or [])
    achievements = active_achievements(tournament, session.exec(select(Achievement)).all())

    results, weekly_delta = _record_results(
        session,
        tournament,
        week,
        round_number,
        participants,
        placements,
        checks,
        achievements,
        tournament.achievements_on_this_week,
        roster,
    )
    tournament.weekly_points_by_player = _merge_weekly(tournament.weekly_points_by_player, weekly_delta)

    snapshot = {
        "week": week,
        "round": round_number,
        "pods": [list(pod) for pod in tournament.current_pods or []],
        "participants": participants,
        "placements": {str(r.player_id): r.placement for r in results},
        "achievement_checks": checks,
        "active_achievement_ids": list(tournament.active_achievement_ids or []),
        "achievements_on_this_week": tournament.achievements_on_this_week,
    }
    tournament.pod_history_snapshots = [*(tournament.pod_history_snapshots or []), snapshot]

    logger.info(
        f"Tournament {tournament.id} week {week} round {round_number}: recorded {len(results)} results"
    )
    return results


# ============================================================================
# Round / week progression
# ============================================================================


def next_round(session: Session, tournament_id: int) -> Optional[AdvanceOutcome]:
    """
    Finalize the round in progress and advance.

    Missing placements default to last place. Returns None (and changes
    nothing) when the tournament is missing or nobody took part.
    """
    with tournament_lock(tournament_id), store_operation(session, "next round"):
        tournament = session.get(Tournament, tournament_id)
        if not tournament:
            return None
        require_ongoing(tournament, "record round")

        if _finalize_round(session, tournament) is None:
            return None

        outcome = advance(tournament)
        if outcome == AdvanceOutcome.NEXT_WEEK:
            apply_week_achievements(tournament, session.exec(select(Achievement)).all())
        tournament.updated_at = _now()
        session.add(tournament)
        session.commit()
        session.refresh(tournament)
    return outcome


def close_week(session: Session, tournament_id: int) -> Optional[AdvanceOutcome]:
    """End the current week early, recording the round in progress first if there is one."""
    with tournament_lock(tournament_id), store_operation(session, "close week"):
        tournament = session.get(Tournament, tournament_id)
        if not tournament:
            return None
        require_ongoing(tournament, "close week")

        if tournament.current_pods or tournament.round_placements:
            _finalize_round(session, tournament)

        outcome = advance_week(tournament)
        if outcome == AdvanceOutcome.NEXT_WEEK:
            apply_week_achievements(tournament, session.exec(select(Achievement)).all())
        tournament.updated_at = _now()
        session.add(tournament)
        session.commit()
        session.refresh(tournament)
    return outcome


def last_round_snapshot(session: Session, tournament_id: int) -> Optional[dict]:
    """The most recently finalized round (week, round, pods, placements, checks)."""
    tournament = fetch_tournament(session, tournament_id)
    if tournament is None:
        return None
    return last_snapshot(tournament)


def edit_last_round(
    session: Session,
    tournament_id: int,
    placements: Mapping[int, int],
    achievement_checks: Optional[Iterable[CheckInput]] = None,
) -> List[GameResult]:
    """
    Correct the most recently finalized round.

    The round's GameResults are replaced, not appended: old results are
    removed from lifetime stats (and from weekly points while that week is
    still running) before the corrected ones are written. Only the last
    round can be edited; completed tournaments may still be corrected.

    Args:
        placements: player id → placement (1..4); players left out keep the
            placement recorded for the round
        achievement_checks: "playerId:achievementId" keys or (player id, achievement id)
            pairs; replaces the round's checks. None keeps the recorded checks.

    Raises:
        NoRoundToEditError: no round has been recorded yet
        ValueError: placement outside 1..4
    """
    for placement in placements.values():
        _validate_placement(placement)

    with tournament_lock(tournament_id), store_operation(session, "edit last round"):
        tournament = session.get(Tournament, tournament_id)
        if not tournament:
            return []
        if not can_edit_last_round(tournament):
            raise NoRoundToEditError(f"Tournament {tournament_id} has no recorded round")

        snapshot = last_snapshot(tournament)
        week, round_number = snapshot["week"], snapshot["round"]
        roster = {p.id: p for p in session.exec(select(Player)).all()}
        participants = [pid for pid in snapshot["participants"] if pid in roster]

        for pid in placements:
            if pid not in participants:
                logger.warning(f"Ignoring placement for player {pid}: not part of week {week} round {round_number}")

        # Same week still running → weekly points must follow the correction
        weekly_applies = tournament.status == STATUS_ONGOING and tournament.current_week == week
        weekly = tournament.weekly_points_by_player or {}

        old_results = session.exec(
            select(GameResult).where(
                GameResult.tournament_id == tournament_id,
                GameResult.week == week,
                GameResult.round == round_number,
            )
        ).all()
        removed: Dict[str, Dict[str, int]] = {}
        for result in old_results:
            player = roster.get(result.player_id)
            if player is not None:
                _apply_lifetime(player, result, -1)
                session.add(player)
            removed = _accumulate_weekly(removed, result.player_id, result, 1)
            session.delete(result)
        session.flush()

        if achievement_checks is None:
            checks = list(snapshot.get("achievement_checks") or [])
        else:
            checks = _normalize_checks(achievement_checks)
        corrected_placements = {int(pid): int(place) for pid, place in (snapshot.get("placements") or {}).items()}
        corrected_placements.update({int(pid): int(place) for pid, place in placements.items()})
        catalog = session.exec(select(Achievement)).all()
        snapshot_active = set(snapshot.get("active_achievement_ids") or [])
        achievements = [a for a in catalog if a.id in snapshot_active]

        results, added = _record_results(
            session,
            tournament,
            week,
            round_number,
            participants,
            corrected_placements,
            checks,
            achievements,
            snapshot.get("achievements_on_this_week", True),
            roster,
        )

        if weekly_applies:
            weekly = _merge_weekly(weekly, removed, -1)
            tournament.weekly_points_by_player = _merge_weekly(weekly, added)

        corrected = {
            **snapshot,
            "placements": {str(r.player_id): r.placement for r in results},
            "achievement_checks": checks,
        }
        tournament.pod_history_snapshots = [*tournament.pod_history_snapshots[:-1], corrected]
        tournament.updated_at = _now()
        session.add(tournament)
        session.commit()
        for result in results:
            session.refresh(result)

    logger.info(f"Tournament {tournament_id}: corrected week {week} round {round_number} ({len(results)} results)")
    return results


# ============================================================================
# Queries: results, standings, status
# ============================================================================


def fetch_results_for_tournament(session: Session, tournament_id: int, week: Optional[int] = None) -> List[GameResult]:
    with store_operation(session, "fetch results"):
        query = select(GameResult).where(GameResult.tournament_id == tournament_id)
        if week is not None:
            query = query.where(GameResult.week == week)
        query = query.order_by(GameResult.week, GameResult.round, GameResult.id)
        return list(session.exec(query).all())


def standings(session: Session, tournament_id: int, week: Optional[int] = None) -> List[StandingRow]:
    """Overall standings (week=None) or the standings of one week"""
    if fetch_tournament(session, tournament_id) is None:
        return []
    results = fetch_results_for_tournament(session, tournament_id, week)
    return aggregate_standings(results, list_players(session), week)


def final_standings(session: Session, tournament_id: int) -> List[StandingRow]:
    """Overall standings of a completed tournament; empty while it is ongoing."""
    tournament = fetch_tournament(session, tournament_id)
    if tournament is None or tournament.status == STATUS_ONGOING:
        return []
    return standings(session, tournament_id)


def winner_name(session: Session, tournament_id: int) -> Optional[str]:
    """Name of the overall leader of a completed tournament; None while ongoing or without results."""
    tournament = fetch_tournament(session, tournament_id)
    if tournament is None or tournament.status == STATUS_ONGOING:
        return None
    top = winner(fetch_results_for_tournament(session, tournament_id), list_players(session))
    return top.player_name if top else None


def weekly_standings(session: Session, tournament_id: int) -> List[StandingRow]:
    """Running standings of the present players for the current week"""
    tournament = fetch_tournament(session, tournament_id)
    if tournament is None:
        return []
    return weekly_live_standings(
        list_players(session), tournament.present_player_ids or [], tournament.weekly_points_by_player
    )


def standings_week_options(tournament: Tournament) -> List[Tuple[str, Optional[int]]]:
    """Picker entries: the whole tournament first, then every week."""
    return [("Tournament", None)] + [(f"Week {w}", w) for w in range(1, tournament.total_weeks + 1)]


def round_status(session: Session, tournament_id: int) -> Optional[RoundStatus]:
    tournament = fetch_tournament(session, tournament_id)
    if tournament is None:
        return None
    ongoing = tournament.status == STATUS_ONGOING
    return RoundStatus(
        tournament_id=tournament.id,
        phase=round_phase(tournament),
        current_week=tournament.current_week,
        total_weeks=tournament.total_weeks,
        current_round=tournament.current_round,
        rounds_per_week=tournament.rounds_per_week,
        present_count=len(tournament.present_player_ids or []),
        can_generate_pods=can_generate_pods(tournament),
        can_record_round=ongoing and is_round_recordable(tournament),
        can_edit_last_round=can_edit_last_round(tournament),
    )


def active_tournament_id(session: Session) -> Optional[int]:
    state = fetch_league_state(session)
    return state.active_tournament_id if state else None
