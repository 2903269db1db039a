"""Business-hours time arithmetic."""

from datetime import datetime, time, timedelta

from taskplan.logger import get_logger

from .config import BusinessCalendar

logger = get_logger()


def at_hour(moment: datetime, hour: int) -> datetime:
    """Return hour:00 on the date of moment; hour 24 is the following midnight."""
    return datetime.combine(moment.date(), time()) + timedelta(hours=hour)


def day_start_of(moment: datetime, calendar: BusinessCalendar) -> datetime:
    """Return the work-day start on the same date as moment."""
    return at_hour(moment, calendar.day_start)


def next_day_start(moment: datetime, calendar: BusinessCalendar) -> datetime:
    """Return the work-day start on the date after moment."""
    return day_start_of(moment, calendar) + timedelta(days=1)


def normalize(moment: datetime, calendar: BusinessCalendar) -> datetime:
    """Move a timestamp to the nearest working instant at or after it.

    Before the day start moves to the day start, at or after the day end moves
    to the next day start, and inside the lunch hour moves to the lunch end.
    """
    if moment.hour < calendar.day_start:
        return day_start_of(moment, calendar)
    if moment.hour >= calendar.day_end:
        return next_day_start(moment, calendar)
    if moment.hour == calendar.lunch_start:
        return at_hour(moment, calendar.lunch_end)
    return moment


def minutes_until_break(moment: datetime, calendar: BusinessCalendar) -> float:
    """Minutes from a normalized moment until lunch (morning) or day end (afternoon)."""
    boundary = calendar.lunch_start if moment.hour < calendar.lunch_start else calendar.day_end
    boundary_time = at_hour(moment, boundary)
    return (boundary_time - moment).total_seconds() / 60


def advance(start: datetime, duration_minutes: float, calendar: BusinessCalendar) -> datetime:
    """Return the timestamp reached after working duration_minutes from start.

    Work only happens inside [day_start, lunch_start) and [lunch_end, day_end).
    A duration that exactly fills a segment continues to the next segment's
    start, so the result never lands on the lunch hour or the day end.

    Args:
        start: Timestamp to advance from (not modified)
        duration_minutes: Working minutes to consume
        calendar: Work window and lunch hour

    Returns:
        A new timestamp; start itself when duration_minutes <= 0
    """
    if duration_minutes <= 0:
        return start

    current = normalize(start, calendar)
    remaining = float(duration_minutes)

    while remaining > 0:
        segment = minutes_until_break(current, calendar)
        if remaining < segment:
            return current + timedelta(minutes=remaining)

        remaining -= segment
        if current.hour < calendar.lunch_start:
            current = at_hour(current, calendar.lunch_end)
        else:
            current = next_day_start(current, calendar)
        logger.debug(f"    advance: consumed {segment:g} min, {remaining:g} left, at {current}")

    return current
