from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from league.models.game_result import GameResult


class Player(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)

    # Lifetime stats across all tournaments (kept equal to the sum of stored results)
    placement_points: int = Field(default=0)
    achievement_points: int = Field(default=0)
    wins: int = Field(default=0)
    games_played: int = Field(default=0)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationships
    results: List["GameResult"] = Relationship(back_populates="player")

    @property
    def total_points(self) -> int:
        return self.placement_points + self.achievement_points
