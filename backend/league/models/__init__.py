from league.models.achievement import Achievement
from league.models.game_result import GameResult
from league.models.league_state import LeagueState
from league.models.player import Player
from league.models.tournament import STATUS_COMPLETED, STATUS_ONGOING, Tournament

__all__ = [
    "Achievement",
    "GameResult",
    "LeagueState",
    "Player",
    "Tournament",
    "STATUS_ONGOING",
    "STATUS_COMPLETED",
]
