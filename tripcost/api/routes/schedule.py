"""Timeline scheduling endpoints - conflicts, day schedules and moves."""

from datetime import date, time

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, model_validator

from tripcost.config import get_settings
from tripcost.models.schedule import DaySchedule, ScheduledActivity, TimeConflict
from tripcost.scheduling.timeline import (
    ActivityMoveError,
    build_day_schedules,
    detect_conflicts,
    move_activity,
)

router = APIRouter(prefix="/schedule", tags=["schedule"])


class ConflictsRequest(BaseModel):
    """Request body for POST /schedule/conflicts."""

    activities: list[ScheduledActivity]


class DaySchedulesRequest(BaseModel):
    """Request body for POST /schedule/days."""

    activities: list[ScheduledActivity]
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _start_before_end(self) -> "DaySchedulesRequest":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class MoveRequest(BaseModel):
    """Request body for POST /schedule/move."""

    activities: list[ScheduledActivity]
    activity_id: str
    target_date: date


@router.post("/conflicts", response_model=list[TimeConflict])
async def conflicts(request: ConflictsRequest) -> list[TimeConflict]:
    return detect_conflicts(request.activities)


@router.post("/days", response_model=list[DaySchedule])
async def day_schedules(request: DaySchedulesRequest) -> list[DaySchedule]:
    settings = get_settings()
    return build_day_schedules(
        request.activities,
        request.start_date,
        request.end_date,
        max_activities_per_day=settings.max_activities_per_day,
    )


@router.post("/move", response_model=list[ScheduledActivity])
async def move(request: MoveRequest) -> list[ScheduledActivity]:
    """Move an activity to another day at the next free time slot."""
    settings = get_settings()
    try:
        return move_activity(
            request.activities,
            request.activity_id,
            request.target_date,
            day_limit_minutes=settings.day_duration_limit_min,
            buffer_minutes=settings.time_slot_buffer_min,
            first_slot=time.fromisoformat(settings.first_time_slot),
        )
    except ActivityMoveError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
