"""Core dataclasses for the scheduling system."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class RunState(str, Enum):
    """Lifecycle of one scheduling pass."""

    IDLE = "idle"
    RESOLVING_NORMATIVES = "resolving_normatives"
    ORDERING_CHAIN = "ordering_chain"
    SCHEDULING = "scheduling"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class Assignment:
    """A committed (work item, resource, interval) tuple."""

    item_id: str
    resource_id: str
    start: datetime
    end: datetime
    duration_minutes: float


@dataclass(frozen=True)
class ScheduleWarning:
    """A non-fatal condition attached to an item or task."""

    subject_id: str | None
    message: str

    def __str__(self) -> str:
        if self.subject_id is None:
            return self.message
        return f"{self.subject_id}: {self.message}"


@dataclass
class ComputedFields:
    """Values the engine computed for one item, to be handed to the persistence sink."""

    normative: float | None = None
    start_time: datetime | None = None

    def as_dict(self) -> dict[str, float | datetime]:
        values: dict[str, float | datetime] = {}
        if self.normative is not None:
            values["normative"] = self.normative
        if self.start_time is not None:
            values["start_time"] = self.start_time
        return values


def _default_assignments() -> list[Assignment]:
    return []


def _default_warnings() -> list[ScheduleWarning]:
    return []


def _default_computed() -> dict[str, ComputedFields]:
    return {}


@dataclass
class SchedulingResult:
    """Complete result of a scheduling run.

    Either ``failure`` is set and nothing was scheduled, or it is None and
    ``assignments`` holds the full schedule (possibly with warnings).
    """

    assignments: list[Assignment] = field(default_factory=_default_assignments)
    warnings: list[ScheduleWarning] = field(default_factory=_default_warnings)
    computed: dict[str, ComputedFields] = field(default_factory=_default_computed)
    ordered_task_ids: list[str] = field(default_factory=list)
    state: RunState = RunState.IDLE
    failure: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None
