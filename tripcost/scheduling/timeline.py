"""Timeline scheduling helpers: conflict detection and drag-and-drop moves.

Conflict detection is a pairwise scan per day. Activities per day are few,
so no interval tree or sweep is used.
"""

import logging
from datetime import date, time, timedelta

from tripcost.models.schedule import DaySchedule, ScheduledActivity, TimeConflict

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


class ActivityMoveError(Exception):
    """Activity cannot be moved to the requested day."""

    pass


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _from_minutes(total: int) -> time:
    total %= MINUTES_PER_DAY
    return time(total // 60, total % 60)


def add_minutes_to_time(t: time, minutes: int) -> time:
    """Shift a clock time, wrapping past midnight."""
    return _from_minutes(_minutes(t) + minutes)


def activity_interval(activity: ScheduledActivity) -> tuple[int, int]:
    """Half-open [start, end) interval in minutes from midnight (not wrapped)."""
    start = _minutes(activity.start_time)
    return start, start + activity.duration_minutes


def detect_conflicts(activities: list[ScheduledActivity]) -> list[TimeConflict]:
    """Find every overlapping pair of activities on the same day.

    Args:
        activities: Activities, possibly spanning several days

    Returns:
        One overlap conflict per intersecting pair, with ids sorted and the
        window spanning the earliest start to the latest end of the pair.
        Result is independent of input order.
    """
    conflicts: list[TimeConflict] = []

    for i in range(len(activities)):
        for j in range(i + 1, len(activities)):
            a = activities[i]
            b = activities[j]
            if a.scheduled_date != b.scheduled_date:
                continue

            start_a, end_a = activity_interval(a)
            start_b, end_b = activity_interval(b)

            if start_a < end_b and start_b < end_a:
                conflicts.append(
                    TimeConflict(
                        activity_ids=sorted([a.id, b.id]),
                        start_time=_from_minutes(min(start_a, start_b)),
                        end_time=_from_minutes(max(end_a, end_b)),
                    )
                )

    conflicts.sort(key=lambda c: (_minutes(c.start_time), c.activity_ids))
    return conflicts


def can_activity_fit_in_day(
    activity: ScheduledActivity,
    target_date: date,
    existing: list[ScheduledActivity],
    *,
    day_limit_minutes: int = 720,
) -> bool:
    """Check whether an activity may be dropped onto target_date.

    Moves within the same day are always allowed (reordering). Nightlife is
    not allowed on Sundays and a day's total duration may not exceed
    day_limit_minutes.
    """
    if activity.scheduled_date == target_date:
        return True

    if activity.category == "nightlife" and target_date.weekday() == 6:
        return False

    day_activities = [
        a for a in existing if a.scheduled_date == target_date and a.id != activity.id
    ]
    total = sum(a.duration_minutes for a in day_activities) + activity.duration_minutes
    return total <= day_limit_minutes


def generate_optimal_time_slot(
    target_date: date,
    existing: list[ScheduledActivity],
    *,
    buffer_minutes: int = 30,
    first_slot: time = time(9, 0),
    exclude_id: str | None = None,
) -> time:
    """Next free slot: first_slot on an empty day, else after the latest start plus buffer."""
    day_activities = [
        a for a in existing if a.scheduled_date == target_date and a.id != exclude_id
    ]
    if not day_activities:
        return first_slot

    last = max(day_activities, key=lambda a: _minutes(a.start_time))
    return add_minutes_to_time(last.start_time, last.duration_minutes + buffer_minutes)


def build_day_schedules(
    activities: list[ScheduledActivity],
    start_date: date,
    end_date: date,
    *,
    max_activities_per_day: int = 6,
) -> list[DaySchedule]:
    """Group activities into one schedule per trip day with conflicts and totals."""
    if start_date > end_date:
        raise ValueError("start_date must be on or before end_date")

    schedules: list[DaySchedule] = []
    current = start_date
    while current <= end_date:
        day_activities = [a for a in activities if a.scheduled_date == current]
        schedules.append(
            DaySchedule(
                date=current,
                activities=day_activities,
                conflicts=detect_conflicts(day_activities),
                total_duration_minutes=sum(a.duration_minutes for a in day_activities),
                total_price=sum(a.total_price for a in day_activities),
                is_empty=not day_activities,
                accepts_drops=len(day_activities) < max_activities_per_day,
                max_activities=max_activities_per_day,
            )
        )
        current += timedelta(days=1)
    return schedules


def move_activity(
    activities: list[ScheduledActivity],
    activity_id: str,
    target_date: date,
    *,
    day_limit_minutes: int = 720,
    buffer_minutes: int = 30,
    first_slot: time = time(9, 0),
) -> list[ScheduledActivity]:
    """Move an activity to another day at the next free slot.

    Returns:
        New activity list with the moved activity replaced in place

    Raises:
        ActivityMoveError: Unknown activity or the target day cannot take it
    """
    moving = next((a for a in activities if a.id == activity_id), None)
    if moving is None:
        raise ActivityMoveError(f"Activity {activity_id} not found")

    if not can_activity_fit_in_day(
        moving, target_date, activities, day_limit_minutes=day_limit_minutes
    ):
        raise ActivityMoveError(
            f"Activity {activity_id} cannot be placed on {target_date.isoformat()}"
        )

    slot = generate_optimal_time_slot(
        target_date,
        activities,
        buffer_minutes=buffer_minutes,
        first_slot=first_slot,
        exclude_id=activity_id,
    )
    moved = moving.model_copy(update={"scheduled_date": target_date, "start_time": slot})
    logger.info("Activity %s moved to %s at %s", activity_id, target_date, slot)
    return [moved if a.id == activity_id else a for a in activities]
