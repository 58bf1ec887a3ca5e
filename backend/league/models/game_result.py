from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from league.models.player import Player
    from league.models.tournament import Tournament


class GameResult(SQLModel, table=True):
    __tablename__ = "game_result"
    __table_args__ = (
        # One result per player per round within a week
        SAUniqueConstraint("tournament_id", "week", "round", "player_id", name="uq_result_round_player"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    week: int
    round: int
    player_id: int = Field(foreign_key="player.id", index=True)
    placement: int  # 1..4
    placement_points: int
    achievement_points: int
    total_points: int  # placement_points + achievement_points
    is_win: bool = Field(default=False)  # placement == 1
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="results")
    player: "Player" = Relationship(back_populates="results")
