from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Achievement(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    points: int  # May be negative (penalty achievements)
    always_on: bool = Field(default=False)  # Applied every round without a check
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
