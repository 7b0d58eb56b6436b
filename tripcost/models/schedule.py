"""Timeline scheduling models."""

from datetime import date, time
from typing import Literal

from pydantic import BaseModel, Field


class ScheduledActivity(BaseModel):
    """Activity placed on a day of the timeline."""

    id: str
    name: str = ""
    category: str | None = None
    scheduled_date: date
    start_time: time
    duration_minutes: int = Field(..., gt=0)
    total_price: float = Field(default=0, ge=0)
    currency: str = "USD"


class TimeConflict(BaseModel):
    """Two activities whose time intervals intersect.

    start_time/end_time span the widest window of the pair; end_time wraps
    past midnight.
    """

    activity_ids: list[str]
    start_time: time
    end_time: time
    conflict_type: Literal["overlap"] = "overlap"


class DaySchedule(BaseModel):
    """One day of the timeline with its conflicts and totals."""

    date: date
    activities: list[ScheduledActivity]
    conflicts: list[TimeConflict]
    total_duration_minutes: int
    total_price: float
    is_empty: bool
    accepts_drops: bool
    max_activities: int
