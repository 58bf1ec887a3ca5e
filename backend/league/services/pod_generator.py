"""
Pod Generator - partition present players into pods of at most 4.

Deterministic rules:
1. Pod sizes: as many full pods of 4 as possible, then one smaller pod
   with the remainder (9 players → [4, 4, 1])
2. Tiebreak order: attendance shuffled with a seed derived from the round
   number and the attendance set (stable across processes)
3. No weekly points yet: pods are contiguous blocks of the shuffled order
4. Weekly points exist: players ranked by weekly total (desc, ties keep the
   shuffled order) and dealt serpentine so every pod mixes strong and weak
5. With more than one pod, a round never repeats the partition actually
   played in the previous round (two players swap pods when it would)
"""

import logging
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence

from league.config import POD_SIZE, WORST_PLACEMENT
from league.models.player import Player
from league.utils.seeding import id_fingerprint, seeded_rng

logger = logging.getLogger(__name__)

PodIds = List[List[int]]


def pod_sizes(player_count: int, pod_size: int = POD_SIZE) -> List[int]:
    """
    Compute pod sizes for a player count.

    Examples:
    - 8 players → [4, 4]
    - 9 players → [4, 4, 1]
    - 11 players → [4, 4, 3]
    - 0 players → []
    """
    if player_count <= 0:
        return []
    full, remainder = divmod(player_count, pod_size)
    sizes = [pod_size] * full
    if remainder:
        sizes.append(remainder)
    return sizes


def weekly_total(weekly_points_by_player: Optional[Mapping[Any, Any]], player_id: int) -> int:
    """Read a player's weekly total; accepts str or int keys, int or {"total": n} values."""
    if not weekly_points_by_player:
        return 0
    value = weekly_points_by_player.get(str(player_id), weekly_points_by_player.get(player_id))
    if value is None:
        return 0
    if isinstance(value, Mapping):
        return int(value.get("total", 0))
    return int(value)


def _chunk(order: Sequence[int], sizes: Sequence[int]) -> PodIds:
    pods: PodIds = []
    start = 0
    for size in sizes:
        pods.append(list(order[start : start + size]))
        start += size
    return pods


def _serpentine(ranked: Sequence[int], sizes: Sequence[int]) -> PodIds:
    """Deal ranked players across pods: row 0 left→right, row 1 right→left, ..."""
    pods: PodIds = [[] for _ in sizes]
    slots: List[int] = []
    for row in range(max(sizes)):
        indices = range(len(sizes)) if row % 2 == 0 else reversed(range(len(sizes)))
        slots.extend(i for i in indices if row < sizes[i])
    for player_id, pod_index in zip(ranked, slots):
        pods[pod_index].append(player_id)
    return pods


def _raw_pods(player_ids: Sequence[int], round_number: int, points: Dict[int, int], pod_size: int) -> PodIds:
    sizes = pod_sizes(len(player_ids), pod_size)
    order = list(player_ids)
    seeded_rng("pods", round_number, id_fingerprint(player_ids)).shuffle(order)

    if not any(points.get(pid, 0) for pid in order):
        return _chunk(order, sizes)

    # sorted() is stable: equal totals keep the shuffled order
    ranked = sorted(order, key=lambda pid: -points.get(pid, 0))
    return _serpentine(ranked, sizes)


def _partition_key(pods: Sequence[Sequence[int]]) -> FrozenSet[FrozenSet[int]]:
    return frozenset(frozenset(pod) for pod in pods)


def _swap_across(pods: PodIds) -> PodIds:
    """Swap the last seat of pod 0 with the first seat of pod 1."""
    swapped = [list(pod) for pod in pods]
    swapped[0][-1], swapped[1][0] = swapped[1][0], swapped[0][-1]
    return swapped


def generate_pod_ids(
    present_player_ids: Sequence[int],
    current_round: int,
    weekly_points_by_player: Optional[Mapping[Any, Any]] = None,
    pod_size: int = POD_SIZE,
    previous_pods: Optional[Sequence[Sequence[int]]] = None,
) -> PodIds:
    """
    Partition player ids into pods. See module docstring for the rules.

    previous_pods: the pods played in the previous round of the same week;
    when given, the result never has the same partition.
    """
    # Dedupe while keeping check-in order
    player_ids = list(dict.fromkeys(present_player_ids))
    if not player_ids:
        return []

    points = {pid: weekly_total(weekly_points_by_player, pid) for pid in player_ids}
    round_number = max(1, current_round)

    pods = _raw_pods(player_ids, round_number, points, pod_size)
    if len(pods) > 1 and previous_pods and _partition_key(pods) == _partition_key(previous_pods):
        logger.info(f"Round {round_number}: pods repeat the previous round, swapping across pods")
        pods = _swap_across(pods)
    return pods


def generate_pods_for_round(
    players: Sequence[Player],
    present_player_ids: Sequence[int],
    current_round: int,
    weekly_points_by_player: Optional[Mapping[Any, Any]] = None,
    pod_size: int = POD_SIZE,
    previous_pods: Optional[Sequence[Sequence[int]]] = None,
) -> List[List[Player]]:
    """
    Generate pods of Player objects for the current round.

    Present ids that are not in `players` are skipped with a warning.
    Zero present players yields an empty list.
    """
    by_id: Dict[int, Player] = {p.id: p for p in players}

    known_ids: List[int] = []
    for pid in present_player_ids:
        if pid in by_id:
            known_ids.append(pid)
        else:
            logger.warning(f"Skipping unknown player id {pid} in attendance")

    pod_ids = generate_pod_ids(known_ids, current_round, weekly_points_by_player, pod_size, previous_pods)
    return [[by_id[pid] for pid in pod] for pod in pod_ids]


def default_placements(pods: Sequence[Sequence[int]]) -> Dict[int, int]:
    """Seat index i in a pod defaults to placement min(i + 1, 4)."""
    placements: Dict[int, int] = {}
    for pod in pods:
        for index, player_id in enumerate(pod):
            placements[player_id] = min(index + 1, WORST_PLACEMENT)
    return placements
