"""Exceptions raised by the league engine.

Messages follow the "CODE: detail" convention so callers can match on the
prefix without parsing the rest of the text.
"""


class LeagueError(ValueError):
    """Base exception for all league engine errors."""

    code = "LEAGUE_ERROR"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(f"{self.code}: {detail}" if detail else self.code)


class TournamentStateError(LeagueError):
    """Raised when a tournament is in the wrong state for the requested operation."""

    code = "TOURNAMENT_COMPLETED"


class NoRoundToEditError(LeagueError):
    """Raised when edit-last-round is requested before any round was recorded."""

    code = "NO_ROUND_TO_EDIT"


class StoreUnavailableError(LeagueError):
    """Raised when the backing store fails to read or write.

    Distinct from "no data": a missing tournament returns None, a broken
    database raises this.
    """

    code = "STORE_UNAVAILABLE"
