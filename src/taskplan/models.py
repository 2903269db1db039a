"""Data models for taskplan."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class ItemKind(str, Enum):
    """Granularity of a work item."""

    TASK = "task"
    OPERATION = "operation"


@dataclass
class WorkItem:
    """A schedulable unit of the working project: a task or one of its operations.

    Loaded read-only except for ``normative`` and ``start_time``, which the
    engine may compute.
    """

    item_id: str
    kind: ItemKind
    name: str
    task_id: str
    task_name: str
    normative: float | None = None  # Minutes; None when unset
    quantity: float = 1.0
    executors_required: int = 1
    parameters: str = ""  # Raw constraint string, e.g. "115:Senior,2673:3(2-4)"
    previous_task: str | None = None  # Predecessor task *name*
    start_date: date | None = None  # Declared project start
    start_time: datetime | None = None  # Computed by the engine

    @property
    def is_operation(self) -> bool:
        return self.kind == ItemKind.OPERATION

    @property
    def has_normative(self) -> bool:
        return self.normative is not None and self.normative > 0

    def match_key(self) -> tuple[ItemKind, str, str]:
        """Structural identity used for template lookup."""
        return template_key(self.kind, self.name, self.task_name)


@dataclass(frozen=True)
class TemplateItem:
    """A template project item carrying a per-unit reference normative."""

    item_id: str
    kind: ItemKind
    name: str
    task_name: str
    normative: float | None = None

    def match_key(self) -> tuple[ItemKind, str, str]:
        return template_key(self.kind, self.name, self.task_name)


def template_key(kind: ItemKind, name: str, task_name: str) -> tuple[ItemKind, str, str]:
    """Operations match on (operation name, task name); tasks on task name alone."""
    if kind == ItemKind.OPERATION:
        return (kind, name, task_name)
    return (kind, task_name, task_name)


@dataclass(frozen=True)
class ConstraintRequirement:
    """A parsed eligibility rule: ``id:value`` or ``id:value(min-max)``."""

    parameter_id: str
    value: str
    minimum: int | None = None
    maximum: int | None = None
    has_range: bool = False


@dataclass(frozen=True)
class OccupiedInterval:
    """A pre-existing commitment: hours [start_hour, end_hour) on one date."""

    day: date
    start_hour: int
    end_hour: int


@dataclass(frozen=True)
class ResourceProfile:
    """An executor that can be assigned to work items."""

    resource_id: str
    name: str
    role: str | None = None
    level: int | None = None
    occupied: tuple[OccupiedInterval, ...] = ()


@dataclass
class TaskGroup:
    """The items of one task (its operations, or the task itself) plus its predecessor link."""

    task_id: str
    task_name: str
    previous_task: str | None
    items: list[WorkItem] = field(default_factory=list)
    start_date: date | None = None  # First declared start among all rows of the task
