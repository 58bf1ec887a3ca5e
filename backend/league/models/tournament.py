from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

from league.config import DEFAULT_RANDOM_ACHIEVEMENTS_PER_WEEK, DEFAULT_ROUNDS_PER_WEEK, DEFAULT_TOTAL_WEEKS

if TYPE_CHECKING:
    from league.models.game_result import GameResult

STATUS_ONGOING = "ongoing"
STATUS_COMPLETED = "completed"


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    status: str = Field(default=STATUS_ONGOING)  # "ongoing" | "completed"
    total_weeks: int = Field(default=DEFAULT_TOTAL_WEEKS)
    current_week: int = Field(default=1)  # 1..total_weeks
    current_round: int = Field(default=1)  # resets to 1 every week
    rounds_per_week: int = Field(default=DEFAULT_ROUNDS_PER_WEEK)
    random_achievements_per_week: int = Field(default=DEFAULT_RANDOM_ACHIEVEMENTS_PER_WEEK)
    achievements_on_this_week: bool = Field(default=True)

    # Custom placement points table (None = league default)
    placement_points_table: Optional[List[int]] = Field(default=None, sa_column=Column(JSON, nullable=True))

    # Attendance for the current week, in check-in order
    present_player_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))
    active_achievement_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))

    # Round in progress. JSON object keys are player ids as strings.
    current_pods: List[List[int]] = Field(default_factory=list, sa_column=Column(JSON))
    round_placements: Dict[str, int] = Field(default_factory=dict, sa_column=Column(JSON))
    round_achievement_checks: List[str] = Field(default_factory=list, sa_column=Column(JSON))  # "playerId:achievementId"

    # Running totals for the current week: player id -> {"placement", "achievement", "total"}
    weekly_points_by_player: Dict[str, Dict[str, int]] = Field(default_factory=dict, sa_column=Column(JSON))

    # One snapshot per finalized round; the last one is the edit-last-round target
    pod_history_snapshots: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    start_date: date = Field(default_factory=date.today)
    end_date: Optional[date] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"onupdate": lambda: datetime.now(timezone.utc)},
    )

    # Relationships
    results: List["GameResult"] = Relationship(back_populates="tournament")

    @property
    def is_ongoing(self) -> bool:
        return self.status == STATUS_ONGOING

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    @property
    def date_range_string(self) -> str:
        start = self.start_date.strftime("%b %d, %Y")
        if self.end_date is None:
            return f"{start} - present"
        return f"{start} - {self.end_date.strftime('%b %d, %Y')}"
