# Force SQLModel table registration at test discovery time
from league.models.achievement import Achievement  # noqa: F401
from league.models.game_result import GameResult  # noqa: F401
from league.models.league_state import LeagueState  # noqa: F401
from league.models.player import Player  # noqa: F401
from league.models.tournament import Tournament  # noqa: F401
