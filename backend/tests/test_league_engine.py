"""
Lifecycle tests against a real session.

Must prove:
1. 9 players → pods [4, 4, 1] with default placements min(seat + 1, 4)
2. Placement 1 with table [10, 7, 5, 3] scores 10
3. A 2-week tournament completes after week 2 and reports its leader
4. Regenerating pods clears the previous placements and checks
5. Edit-last-round replaces the round's results instead of appending
6. Lifetime stats and weekly points always match the stored results
"""

from datetime import date

import pytest
from sqlmodel import Session

from league.errors import NoRoundToEditError, TournamentStateError
from league.models.tournament import STATUS_COMPLETED
from league.schemas import AchievementCreate
from league.services import league_engine
from league.services.round_state import AdvanceOutcome, RoundPhase


def _place(session: Session, tournament_id: int, finishing_order) -> None:
    """Record placements 1, 2, 3, ... for players in finishing order."""
    for placement, player in enumerate(finishing_order, start=1):
        league_engine.update_placement(session, tournament_id, player.id, placement)


def _lifetime(session: Session, player) -> tuple:
    session.refresh(player)
    return (player.placement_points, player.achievement_points, player.wins, player.games_played)


def _results_by_player(session: Session, tournament_id: int, week=None) -> dict:
    return {r.player_id: r for r in league_engine.fetch_results_for_tournament(session, tournament_id, week)}


# ============================================================================
# Pods
# ============================================================================


def test_nine_players_default_placements(session, make_players, make_tournament):
    players = make_players(9)
    t = make_tournament(players)

    pods = league_engine.generate_pods(session, t.id)

    assert [len(pod) for pod in pods] == [4, 4, 1]
    assert sorted(p.id for pod in pods for p in pod) == sorted(p.id for p in players)
    for pod in pods:
        for index, player in enumerate(pod):
            assert league_engine.placement_for(session, t.id, player.id) == min(index + 1, 4)

    stored = league_engine.current_pods(session, t.id)
    assert [[p.id for p in pod] for pod in stored] == [[p.id for p in pod] for pod in pods]


def test_generate_pods_without_attendance_is_empty(session, make_tournament):
    t = make_tournament([], total_weeks=4)

    assert league_engine.generate_pods(session, t.id) == []
    status = league_engine.round_status(session, t.id)
    assert status.phase == RoundPhase.BEFORE_ATTENDANCE
    assert status.can_generate_pods is False
    assert status.can_record_round is False
    assert (status.week_progress, status.round_label) == ("Week 1 of 4", "Round 1")


def test_played_rounds_never_repeat_previous_partition(session, make_players, make_tournament):
    players = make_players(8)
    t = make_tournament(players, rounds_per_week=4)

    played = []
    for _ in range(4):
        pods = league_engine.generate_pods(session, t.id)
        played.append(frozenset(frozenset(p.id for p in pod) for pod in pods))
        # Last seat wins so weekly standings shift every round
        for pod in pods:
            for placement, player in enumerate(reversed(pod), start=1):
                league_engine.update_placement(session, t.id, player.id, placement)
        league_engine.next_round(session, t.id)

    for previous, current in zip(played, played[1:]):
        assert previous != current

    snapshot = league_engine.last_round_snapshot(session, t.id)
    assert frozenset(frozenset(pod) for pod in snapshot["pods"]) == played[-1]


def test_regenerating_pods_clears_round_state(session, make_players, make_tournament, selectable_achievement):
    players = make_players(5)
    t = make_tournament(players)
    league_engine.generate_pods(session, t.id)

    league_engine.update_placement(session, t.id, players[0].id, 3)
    league_engine.update_achievement_check(session, t.id, players[0].id, selectable_achievement.id, True)
    assert league_engine.is_achievement_checked(session, t.id, players[0].id, selectable_achievement.id)

    pods = league_engine.generate_pods(session, t.id)

    for pod in pods:
        for index, player in enumerate(pod):
            assert league_engine.placement_for(session, t.id, player.id) == min(index + 1, 4)
    assert not league_engine.is_achievement_checked(session, t.id, players[0].id, selectable_achievement.id)
    assert league_engine.fetch_tournament(session, t.id).round_achievement_checks == []


def test_clear_round_data(session, make_players, make_tournament):
    players = make_players(4)
    t = make_tournament(players)
    league_engine.generate_pods(session, t.id)

    league_engine.clear_round_data(session, t.id)

    t = league_engine.fetch_tournament(session, t.id)
    assert t.current_pods == []
    assert t.round_placements == {}
    assert league_engine.placement_for(session, t.id, players[0].id) == 4


def test_attendance_ignores_unknown_players(session, make_players, make_tournament):
    players = make_players(3)
    t = make_tournament([])

    league_engine.set_attendance(session, t.id, [players[0].id, 999, players[1].id, players[0].id])
    assert league_engine.fetch_tournament(session, t.id).present_player_ids == [players[0].id, players[1].id]

    league_engine.set_player_present(session, t.id, players[2].id, True)
    league_engine.set_player_present(session, t.id, players[0].id, False)
    assert league_engine.fetch_tournament(session, t.id).present_player_ids == [players[1].id, players[2].id]


# ============================================================================
# Placement capture and scoring
# ============================================================================


def test_custom_points_table_first_place(session, make_players, make_tournament):
    players = make_players(4)
    t = make_tournament(players, placement_points_table=[10, 7, 5, 3], random_achievements_per_week=0)
    league_engine.generate_pods(session, t.id)
    _place(session, t.id, players)

    assert league_engine.next_round(session, t.id) == AdvanceOutcome.NEXT_ROUND

    results = _results_by_player(session, t.id)
    winner = results[players[0].id]
    assert (winner.placement, winner.placement_points, winner.achievement_points, winner.total_points) == (
        1,
        10,
        0,
        10,
    )
    assert winner.is_win is True
    assert [results[p.id].placement_points for p in players] == [10, 7, 5, 3]


def test_invalid_placement_rejected(session, make_players, make_tournament):
    players = make_players(2)
    t = make_tournament(players)
    with pytest.raises(ValueError):
        league_engine.update_placement(session, t.id, players[0].id, 5)
    with pytest.raises(ValueError):
        league_engine.update_placement(session, t.id, players[0].id, 0)


def test_missing_placements_default_to_last(session, make_players, make_tournament):
    players = make_players(2)
    t = make_tournament(players)

    # No pods generated: present players still get a result
    assert league_engine.next_round(session, t.id) == AdvanceOutcome.NEXT_ROUND

    results = league_engine.fetch_results_for_tournament(session, t.id)
    assert sorted(r.player_id for r in results) == sorted(p.id for p in players)
    assert all(r.placement == 4 and r.placement_points == 1 for r in results)


def test_next_round_without_participants_records_nothing(session, make_tournament):
    t = make_tournament([])

    assert league_engine.next_round(session, t.id) is None

    t = league_engine.fetch_tournament(session, t.id)
    assert (t.current_week, t.current_round) == (1, 1)
    assert t.pod_history_snapshots == []
    assert league_engine.fetch_results_for_tournament(session, t.id) == []


def test_achievements_scored(session, make_players, make_tournament, selectable_achievement):
    always_on = league_engine.create_achievement(
        session, AchievementCreate(name="Showed Up", points=1, always_on=True)
    )
    players = make_players(4)
    t = make_tournament(players)
    assert set(league_engine.fetch_tournament(session, t.id).active_achievement_ids) == {
        always_on.id,
        selectable_achievement.id,
    }
    assert {a.id for a in league_engine.tournament_achievements(session, t.id)} == {always_on.id, selectable_achievement.id}

    league_engine.generate_pods(session, t.id)
    _place(session, t.id, players)
    league_engine.update_achievement_check(session, t.id, players[1].id, selectable_achievement.id, True)
    league_engine.next_round(session, t.id)

    results = _results_by_player(session, t.id)
    assert results[players[1].id].achievement_points == 3
    assert results[players[1].id].total_points == 6
    assert results[players[0].id].achievement_points == 1
    assert results[players[3].id].total_points == 2


def test_selectable_achievements_off_this_week(session, make_players, make_tournament, selectable_achievement):
    league_engine.create_achievement(session, AchievementCreate(name="Showed Up", points=1, always_on=True))
    players = make_players(2)
    t = make_tournament(players, random_achievements_per_week=0)
    assert league_engine.fetch_tournament(session, t.id).achievements_on_this_week is False

    league_engine.generate_pods(session, t.id)
    league_engine.update_achievement_check(session, t.id, players[0].id, selectable_achievement.id, True)
    league_engine.next_round(session, t.id)

    results = _results_by_player(session, t.id)
    assert results[players[0].id].achievement_points == 1


# ============================================================================
# Progression
# ============================================================================


def test_two_week_tournament_completes_with_winner(session, make_players, make_tournament):
    players = make_players(4)
    t = make_tournament(players, total_weeks=2, rounds_per_week=1)

    league_engine.generate_pods(session, t.id)
    _place(session, t.id, players)
    assert league_engine.next_round(session, t.id) == AdvanceOutcome.NEXT_WEEK
    assert league_engine.winner_name(session, t.id) is None

    t = league_engine.fetch_tournament(session, t.id)
    assert (t.current_week, t.current_round) == (2, 1)
    assert t.present_player_ids == []

    league_engine.set_attendance(session, t.id, [p.id for p in players])
    league_engine.generate_pods(session, t.id)
    _place(session, t.id, players)
    assert league_engine.next_round(session, t.id) == AdvanceOutcome.TOURNAMENT_COMPLETED

    t = league_engine.fetch_tournament(session, t.id)
    assert t.status == STATUS_COMPLETED
    assert t.current_week == 2
    assert t.end_date == date.today()
    assert league_engine.winner_name(session, t.id) == players[0].name
    assert [row.total_points for row in league_engine.final_standings(session, t.id)] == [8, 6, 4, 2]

    with pytest.raises(TournamentStateError):
        league_engine.generate_pods(session, t.id)
    with pytest.raises(TournamentStateError):
        league_engine.update_placement(session, t.id, players[0].id, 1)
    with pytest.raises(TournamentStateError):
        league_engine.next_round(session, t.id)

    status = league_engine.round_status(session, t.id)
    assert status.phase == RoundPhase.COMPLETED
    assert status.can_edit_last_round is True


def test_weekly_points_accumulate_then_reset(session, make_players, make_tournament):
    players = make_players(4)
    t = make_tournament(players, total_weeks=2, rounds_per_week=2)

    for _ in range(2):
        league_engine.generate_pods(session, t.id)
        _place(session, t.id, players)
        if league_engine.fetch_tournament(session, t.id).current_round == 2:
            rows = league_engine.weekly_standings(session, t.id)
            assert rows[0].player_id == players[0].id
            assert rows[0].total_points == 4
        outcome = league_engine.next_round(session, t.id)

    assert outcome == AdvanceOutcome.NEXT_WEEK
    t = league_engine.fetch_tournament(session, t.id)
    assert t.weekly_points_by_player == {}
    assert league_engine.weekly_standings(session, t.id) == []

    week_one = league_engine.standings(session, t.id, week=1)
    assert [(row.player_id, row.total_points) for row in week_one] == [(p.id, pts) for p, pts in zip(players, [8, 6, 4, 2])]


def test_close_week_records_round_in_progress(session, make_players, make_tournament):
    players = make_players(4)
    t = make_tournament(players, total_weeks=3, rounds_per_week=3)
    league_engine.generate_pods(session, t.id)
    _place(session, t.id, players)

    assert league_engine.close_week(session, t.id) == AdvanceOutcome.NEXT_WEEK

    assert len(league_engine.fetch_results_for_tournament(session, t.id, week=1)) == 4
    t = league_engine.fetch_tournament(session, t.id)
    assert (t.current_week, t.current_round) == (2, 1)

    # Nothing in progress: the week just ends
    assert league_engine.close_week(session, t.id) == AdvanceOutcome.NEXT_WEEK
    assert league_engine.fetch_results_for_tournament(session, t.id, week=2) == []


def test_lifetime_stats_match_results(session, make_players, make_tournament):
    players = make_players(6)
    t = make_tournament(players, total_weeks=2, rounds_per_week=2)

    for _ in range(2):
        pods = league_engine.generate_pods(session, t.id)
        _place(session, t.id, [p for pod in pods for p in pod][:4])
        league_engine.next_round(session, t.id)

    results = league_engine.fetch_results_for_tournament(session, t.id)
    for player in players:
        own = [r for r in results if r.player_id == player.id]
        assert _lifetime(session, player) == (
            sum(r.placement_points for r in own),
            sum(r.achievement_points for r in own),
            sum(1 for r in own if r.is_win),
            len(own),
        )


def test_overall_standings_equal_sum_of_weeks(session, make_players, make_tournament):
    players = make_players(5)
    t = make_tournament(players, total_weeks=2, rounds_per_week=1)

    league_engine.generate_pods(session, t.id)
    _place(session, t.id, players[:4])
    league_engine.next_round(session, t.id)
    league_engine.set_attendance(session, t.id, [p.id for p in players])
    league_engine.generate_pods(session, t.id)
    _place(session, t.id, list(reversed(players))[:4])
    league_engine.next_round(session, t.id)

    overall = {row.player_id: row.total_points for row in league_engine.standings(session, t.id)}
    summed = {}
    for week in (1, 2):
        for row in league_engine.standings(session, t.id, week=week):
            summed[row.player_id] = summed.get(row.player_id, 0) + row.total_points
    assert overall == summed


# ============================================================================
# Edit last round
# ============================================================================


def test_edit_requires_a_recorded_round(session, make_players, make_tournament):
    players = make_players(4)
    t = make_tournament(players)
    with pytest.raises(NoRoundToEditError) as exc_info:
        league_engine.edit_last_round(session, t.id, {players[0].id: 1})
    assert str(exc_info.value).startswith("NO_ROUND_TO_EDIT:")


def test_edit_last_round_replaces_results(session, make_players, make_tournament, selectable_achievement):
    players = make_players(4)
    t = make_tournament(players)
    league_engine.generate_pods(session, t.id)
    _place(session, t.id, players)
    league_engine.next_round(session, t.id)
    assert _lifetime(session, players[0]) == (4, 0, 1, 1)

    corrected = {players[3].id: 1, players[2].id: 2, players[1].id: 3, players[0].id: 4}
    updated = league_engine.edit_last_round(
        session, t.id, corrected, achievement_checks=[(players[0].id, selectable_achievement.id)]
    )

    assert len(updated) == 4
    results = _results_by_player(session, t.id)
    assert len(league_engine.fetch_results_for_tournament(session, t.id)) == 4
    assert results[players[3].id].placement == 1
    assert results[players[3].id].total_points == 4
    assert results[players[0].id].total_points == 1 + 2

    assert _lifetime(session, players[0]) == (1, 2, 0, 1)
    assert _lifetime(session, players[3]) == (4, 0, 1, 1)

    # Still week 1: running weekly totals follow the correction
    weekly = league_engine.fetch_tournament(session, t.id).weekly_points_by_player
    assert weekly[str(players[3].id)]["total"] == 4
    assert weekly[str(players[0].id)] == {"placement": 1, "achievement": 2, "total": 3}

    snapshot = league_engine.last_round_snapshot(session, t.id)
    assert snapshot["placements"][str(players[3].id)] == 1
    assert snapshot["achievement_checks"] == [f"{players[0].id}:{selectable_achievement.id}"]


def test_partial_edit_keeps_recorded_placements_and_checks(session, make_players, make_tournament, selectable_achievement):
    players = make_players(4)
    t = make_tournament(players)
    league_engine.generate_pods(session, t.id)
    _place(session, t.id, players)
    league_engine.update_achievement_check(session, t.id, players[1].id, selectable_achievement.id, True)
    league_engine.next_round(session, t.id)

    league_engine.edit_last_round(session, t.id, {players[3].id: 1})

    results = _results_by_player(session, t.id)
    assert [results[p.id].placement for p in players] == [1, 2, 3, 1]
    assert results[players[1].id].achievement_points == 2
    assert results[players[1].id].total_points == 5
    snapshot = league_engine.last_round_snapshot(session, t.id)
    assert snapshot["achievement_checks"] == [f"{players[1].id}:{selectable_achievement.id}"]

    # An explicit empty list clears the checks
    league_engine.edit_last_round(session, t.id, {}, achievement_checks=[])

    results = _results_by_player(session, t.id)
    assert results[players[1].id].achievement_points == 0
    assert [results[p.id].placement for p in players] == [1, 2, 3, 1]
    assert _lifetime(session, players[1]) == (3, 0, 0, 1)


def test_edit_only_touches_most_recent_round(session, make_players, make_tournament):
    players = make_players(4)
    t = make_tournament(players, rounds_per_week=3)
    for _ in range(2):
        league_engine.generate_pods(session, t.id)
        _place(session, t.id, players)
        league_engine.next_round(session, t.id)

    league_engine.edit_last_round(session, t.id, {p.id: 4 - i for i, p in enumerate(players)})

    round_one = [r for r in league_engine.fetch_results_for_tournament(session, t.id) if r.round == 1]
    round_two = [r for r in league_engine.fetch_results_for_tournament(session, t.id) if r.round == 2]
    assert {r.player_id: r.placement for r in round_one} == {p.id: i + 1 for i, p in enumerate(players)}
    assert {r.player_id: r.placement for r in round_two} == {p.id: 4 - i for i, p in enumerate(players)}


def test_edit_after_completion_changes_winner(session, make_players, make_tournament):
    players = make_players(4)
    t = make_tournament(players, total_weeks=2, rounds_per_week=1)
    for _ in range(2):
        league_engine.set_attendance(session, t.id, [p.id for p in players])
        league_engine.generate_pods(session, t.id)
        _place(session, t.id, players)
        league_engine.next_round(session, t.id)
    assert league_engine.winner_name(session, t.id) == players[0].name
    weekly_before = league_engine.fetch_tournament(session, t.id).weekly_points_by_player

    league_engine.edit_last_round(
        session, t.id, {players[1].id: 1, players[2].id: 2, players[3].id: 3, players[0].id: 4}
    )

    # P01: 4 + 1, P02: 3 + 4
    assert league_engine.winner_name(session, t.id) == players[1].name
    # Completed: weekly totals are frozen
    assert league_engine.fetch_tournament(session, t.id).weekly_points_by_player == weekly_before


def test_edit_rejects_invalid_placement(session, make_players, make_tournament):
    players = make_players(2)
    t = make_tournament(players)
    league_engine.next_round(session, t.id)
    with pytest.raises(ValueError):
        league_engine.edit_last_round(session, t.id, {players[0].id: 7})


# ============================================================================
# Missing tournaments and league state
# ============================================================================


def test_missing_tournament_yields_empty_results(session):
    assert league_engine.fetch_tournament(session, 404) is None
    assert league_engine.generate_pods(session, 404) == []
    assert league_engine.next_round(session, 404) is None
    assert league_engine.standings(session, 404) == []
    assert league_engine.winner_name(session, 404) is None
    assert league_engine.edit_last_round(session, 404, {}) == []
    assert league_engine.placement_for(session, 404, 1) == 4
    assert league_engine.round_status(session, 404) is None


def test_bootstrap_league_is_idempotent(session, make_players, make_tournament):
    state = league_engine.bootstrap_league(session)
    league_engine.bootstrap_league(session)

    achievements = league_engine.list_achievements(session)
    assert [a.name for a in achievements] == ["Showed Up"]
    assert league_engine.fetch_league_state(session).id == state.id

    t = make_tournament(make_players(1))
    league_engine.set_active_tournament(session, t.id)
    assert league_engine.active_tournament_id(session) == t.id
