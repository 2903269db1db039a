"""Resource availability tracking at hour granularity."""

from collections import defaultdict
from datetime import date, datetime, timedelta

from taskplan.logger import get_logger
from taskplan.models import ResourceProfile

from .config import BusinessCalendar
from .core import Assignment

logger = get_logger()

HourRange = tuple[int, int]


def overlaps(start: int, end: int, other_start: int, other_end: int) -> bool:
    """Half-open interval overlap: no overlap iff end <= other_start or start >= other_end."""
    return not (end <= other_start or start >= other_end)


class AvailabilityChecker:
    """Tests hour windows against occupied time and assignments made so far.

    Assignments are indexed per resource and per date. An assignment that
    spans several days is split into one hour range per date: from its start
    hour to the day end, whole work days in between, and from the day start to
    its end hour on the last date. Hours are floored, so sub-hour conflicts are
    not modeled.
    """

    def __init__(self, calendar: BusinessCalendar) -> None:
        self.calendar = calendar
        self._booked: dict[str, dict[date, list[HourRange]]] = defaultdict(
            lambda: defaultdict(list)
        )

    def record(self, assignment: Assignment) -> None:
        """Add an assignment to the conflict set of its resource."""
        for day, hours in self.split_by_day(assignment.start, assignment.end):
            self._booked[assignment.resource_id][day].append(hours)

    def split_by_day(self, start: datetime, end: datetime) -> list[tuple[date, HourRange]]:
        """Return the (date, hour range) segments that [start, end) occupies."""
        if start.date() == end.date():
            return [(start.date(), (start.hour, end.hour))]

        segments: list[tuple[date, HourRange]] = [
            (start.date(), (start.hour, self.calendar.day_end))
        ]
        day = start.date() + timedelta(days=1)
        while day < end.date():
            segments.append((day, (self.calendar.day_start, self.calendar.day_end)))
            day += timedelta(days=1)
        if end.hour > self.calendar.day_start:
            segments.append((end.date(), (self.calendar.day_start, end.hour)))
        return segments

    def booked_hours(self, resource_id: str, day: date) -> list[HourRange]:
        """Hour ranges already assigned to a resource on a date."""
        if resource_id not in self._booked:
            return []
        return list(self._booked[resource_id].get(day, []))

    def is_available(
        self, resource: ResourceProfile, day: date, start_hour: int, end_hour: int
    ) -> bool:
        """Check whether [start_hour, end_hour) on day is free for resource.

        Args:
            resource: Resource to check (its occupied intervals are consulted)
            day: Calendar date of the window
            start_hour: First hour of the window (inclusive)
            end_hour: Last hour of the window (exclusive)

        Returns:
            True if the window overlaps neither occupied time nor assignments
        """
        for interval in resource.occupied:
            if interval.day != day:
                continue
            if overlaps(start_hour, end_hour, interval.start_hour, interval.end_hour):
                logger.checks(
                    f"    {resource.resource_id} occupied {interval.start_hour}-"
                    f"{interval.end_hour} on {day}, conflicts with {start_hour}-{end_hour}"
                )
                return False

        for booked_start, booked_end in self.booked_hours(resource.resource_id, day):
            if overlaps(start_hour, end_hour, booked_start, booked_end):
                logger.checks(
                    f"    {resource.resource_id} assigned {booked_start}-{booked_end} "
                    f"on {day}, conflicts with {start_hour}-{end_hour}"
                )
                return False

        return True
