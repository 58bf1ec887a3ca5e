from datetime import date
from typing import List, Optional

from pydantic import BaseModel, field_validator, model_validator

from league.config import DEFAULT_RANDOM_ACHIEVEMENTS_PER_WEEK, DEFAULT_ROUNDS_PER_WEEK, DEFAULT_TOTAL_WEEKS


def _clean_name(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("name is required")
    return v.strip()


class TournamentCreate(BaseModel):
    name: str
    total_weeks: int = DEFAULT_TOTAL_WEEKS
    rounds_per_week: int = DEFAULT_ROUNDS_PER_WEEK
    random_achievements_per_week: int = DEFAULT_RANDOM_ACHIEVEMENTS_PER_WEEK
    placement_points_table: Optional[List[int]] = None
    player_ids: List[int] = []
    start_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _clean_name(v)

    @field_validator("total_weeks", "rounds_per_week")
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("random_achievements_per_week")
    @classmethod
    def validate_random_per_week(cls, v):
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_points_table(self):
        table = self.placement_points_table
        if table is not None:
            if not table:
                raise ValueError("placement_points_table must not be empty")
            if any(worse > better for better, worse in zip(table, table[1:])):
                raise ValueError("placement_points_table must be non-increasing")
        return self


class TournamentUpdate(BaseModel):
    name: Optional[str] = None
    total_weeks: Optional[int] = None
    random_achievements_per_week: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        return _clean_name(v)

    @field_validator("total_weeks")
    @classmethod
    def validate_total_weeks(cls, v):
        if v is not None and v < 1:
            raise ValueError("total_weeks must be >= 1")
        return v

    @field_validator("random_achievements_per_week")
    @classmethod
    def validate_random_per_week(cls, v):
        if v is not None and v < 0:
            raise ValueError("random_achievements_per_week must be >= 0")
        return v


class AchievementCreate(BaseModel):
    name: str
    points: int
    always_on: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _clean_name(v)
