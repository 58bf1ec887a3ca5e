"""Routing metadata for whichever front end drives the engine. Not used by scoring."""

from typing import Optional

from sqlmodel import Field, SQLModel

SCREEN_TOURNAMENTS = "tournaments"


class LeagueState(SQLModel, table=True):
    __tablename__ = "league_state"

    id: Optional[int] = Field(default=None, primary_key=True)
    screen: str = Field(default=SCREEN_TOURNAMENTS)
    active_tournament_id: Optional[int] = Field(default=None)
