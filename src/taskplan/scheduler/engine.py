"""Greedy forward-pass assignment of work items to resources."""

import math
from datetime import datetime, time

from taskplan.exceptions import SchedulingAbortedError
from taskplan.logger import get_logger
from taskplan.models import ResourceProfile, TemplateItem, WorkItem

from .availability import AvailabilityChecker
from .business_time import advance, next_day_start
from .chain import TaskChainResolver
from .config import SchedulingConfig
from .core import (
    Assignment,
    ComputedFields,
    RunState,
    ScheduleWarning,
    SchedulingResult,
)
from .normatives import NormativeResolver
from .parameters import ParameterMatcher, parse_requirements

logger = get_logger()


class AssignmentEngine:
    """Walks the ordered task chain and assigns each item to available resources.

    This engine:
    1. Resolves missing normatives from the template
    2. Orders task groups by their predecessor chain
    3. For each item, picks the first matching resources free at the cursor
    4. Advances a single shared time cursor on the business calendar

    Items are never reordered and nothing is revisited; the result is one
    greedy pass.
    """

    def __init__(  # noqa: PLR0913 - Keyword-only parameters reduce API complexity
        self,
        work_items: list[WorkItem],
        resources: list[ResourceProfile],
        *,
        template_items: list[TemplateItem] | None = None,
        config: SchedulingConfig | None = None,
        parameter_dictionary: dict[str, str] | None = None,
        chain_resolver: TaskChainResolver | None = None,
    ):
        """Initialize the engine.

        Args:
            work_items: Working-project items (normative and start_time may be written)
            resources: Candidate resources in preference order
            template_items: Template items used to derive missing normatives
            config: Scheduling configuration (calendar, parameter ids)
            parameter_dictionary: Optional id -> name map of known parameters
            chain_resolver: Optional resolver with non-default chain policies
        """
        self.work_items = work_items
        self.resources = resources
        self.template_items = template_items or []
        self.config = config or SchedulingConfig()
        self.calendar = self.config.calendar
        self.matcher = ParameterMatcher(self.config.parameters, parameter_dictionary)
        self.chain_resolver = chain_resolver or TaskChainResolver()
        self.availability = AvailabilityChecker(self.calendar)
        self.state = RunState.IDLE

    def schedule(self) -> SchedulingResult:
        """Run the full pass.

        Returns:
            SchedulingResult with assignments, warnings and computed fields

        Raises:
            SchedulingAbortedError: If there are no working items or no start date
        """
        try:
            return self._run()
        except SchedulingAbortedError:
            self.state = RunState.FAILED
            raise

    def _run(self) -> SchedulingResult:
        if not self.work_items:
            raise SchedulingAbortedError("No working items found")

        result = SchedulingResult()

        self.state = RunState.RESOLVING_NORMATIVES
        normatives, normative_warnings = NormativeResolver(self.template_items).resolve(
            self.work_items
        )
        for item_id, normative in normatives.items():
            result.computed[item_id] = ComputedFields(normative=normative)

        self.state = RunState.ORDERING_CHAIN
        chain = self.chain_resolver.resolve(self.work_items)
        ordered = chain.ordered_groups()

        # Task rows replaced by their operations are never scheduled
        scheduled_ids = {item.item_id for group in ordered for item in group.items}
        result.warnings.extend(w for w in normative_warnings if w.subject_id in scheduled_ids)
        result.warnings.extend(issue.to_warning() for issue in chain.issues)
        if not ordered:
            raise SchedulingAbortedError("No task without a predecessor; chain has no head")

        start_date = ordered[0].start_date
        if start_date is None:
            raise SchedulingAbortedError(
                f"Project start date not found for task '{ordered[0].task_name}'"
            )
        result.ordered_task_ids = [group.task_id for group in ordered]

        self.state = RunState.SCHEDULING
        cursor = datetime.combine(start_date, time(hour=self.calendar.day_start))
        logger.changes(f"Project start: {cursor}")

        for group in ordered:
            logger.checks(f"Task group {group.task_id} ({group.task_name})")
            for item in group.items:
                cursor = self._schedule_item(item, cursor, result)

        self.state = RunState.DONE
        result.state = self.state
        logger.changes(f"Created {len(result.assignments)} assignments")
        return result

    def select_resources(
        self, item: WorkItem, cursor: datetime, end: datetime, duration_minutes: float
    ) -> list[ResourceProfile]:
        """First-fit selection of up to executors_required free, qualifying resources.

        The cursor date is checked with the window
        [cursor hour, cursor hour + ceil(duration / 60)), widened to the hours
        that will be booked when the item spans lunch. Items that run past the
        cursor date are also checked on every later date they occupy.
        """
        requirements = parse_requirements(item.parameters)
        suitable = self.matcher.filter(self.resources, requirements)
        logger.checks(f"  {len(suitable)} suitable resources for {item.item_id}")

        start_hour = cursor.hour
        segments = self.availability.split_by_day(cursor, end)
        first_end = max(start_hour + math.ceil(duration_minutes / 60), segments[0][1][1])
        windows = [(cursor.date(), (start_hour, first_end)), *segments[1:]]

        selected: list[ResourceProfile] = []
        for resource in suitable:
            if len(selected) >= item.executors_required:
                break
            if all(
                self.availability.is_available(resource, day, low, high)
                for day, (low, high) in windows
            ):
                selected.append(resource)
        return selected

    def _schedule_item(
        self, item: WorkItem, cursor: datetime, result: SchedulingResult
    ) -> datetime:
        """Schedule one item at the cursor and return the advanced cursor."""
        if not item.has_normative:
            logger.checks(f"  Skipping {item.item_id} ({item.name}): no normative")
            return cursor

        duration = float(item.normative or 0)
        end = advance(cursor, duration, self.calendar)
        selected = self.select_resources(item, cursor, end, duration)
        if len(selected) < item.executors_required:
            message = (
                f"not enough available executors: required {item.executors_required}, "
                f"found {len(selected)}"
            )
            logger.warning(f"{item.item_id} ({item.name}): {message}")
            result.warnings.append(ScheduleWarning(item.item_id, message))

        for resource in selected:
            assignment = Assignment(
                item_id=item.item_id,
                resource_id=resource.resource_id,
                start=cursor,
                end=end,
                duration_minutes=duration,
            )
            result.assignments.append(assignment)
            self.availability.record(assignment)
            logger.changes(
                f"  {item.item_id} ({item.name}) -> {resource.name}: {cursor} - {end}"
            )

        item.start_time = cursor
        result.computed.setdefault(item.item_id, ComputedFields()).start_time = cursor

        # advance() never ends on or after day_end, so with its exact-fill rule
        # this rollover does not fire; it applies to ends reported at day_end
        next_cursor = end
        if duration <= self.config.short_task_minutes and end.hour >= self.calendar.day_end:
            next_cursor = next_day_start(end, self.calendar)
        return next_cursor
