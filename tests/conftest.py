"""Pytest configuration and fixtures for taskplan tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import date
from typing import Any

import pytest

from taskplan.formats import parse_occupied
from taskplan.logger import reset_logger
from taskplan.models import ItemKind, ResourceProfile, TemplateItem, WorkItem
from taskplan.scheduler.config import BusinessCalendar

PROJECT_START = date(2025, 11, 21)  # A Friday; the calendar has no weekends


@pytest.fixture(autouse=True)
def clean_logger() -> Iterator[None]:
    """Reset the taskplan logger after each test for isolation."""
    yield
    reset_logger()


@pytest.fixture
def calendar() -> BusinessCalendar:
    """The default 9-18 calendar with lunch at 13."""
    return BusinessCalendar(day_start=9, day_end=18, lunch_start=13)


@pytest.fixture
def make_task() -> Callable[..., WorkItem]:
    """Factory for task-level work items (task id doubles as item id)."""

    def _make(
        task_id: str,
        name: str | None = None,
        *,
        normative: float | None = None,
        previous: str | None = None,
        start: date | None = PROJECT_START,
        **kwargs: Any,
    ) -> WorkItem:
        task_name = name or f"Task {task_id}"
        return WorkItem(
            item_id=task_id,
            kind=ItemKind.TASK,
            name=task_name,
            task_id=task_id,
            task_name=task_name,
            normative=normative,
            previous_task=previous,
            start_date=start,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_operation() -> Callable[..., WorkItem]:
    """Factory for operation work items belonging to a task."""

    def _make(
        item_id: str,
        task_id: str,
        name: str | None = None,
        *,
        task_name: str | None = None,
        normative: float | None = None,
        previous: str | None = None,
        start: date | None = PROJECT_START,
        **kwargs: Any,
    ) -> WorkItem:
        return WorkItem(
            item_id=item_id,
            kind=ItemKind.OPERATION,
            name=name or f"Operation {item_id}",
            task_id=task_id,
            task_name=task_name or f"Task {task_id}",
            normative=normative,
            previous_task=previous,
            start_date=start,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_resource() -> Callable[..., ResourceProfile]:
    """Factory for resources; occupied time uses the YYYYMMDD:h-h text form."""

    def _make(
        resource_id: str,
        *,
        role: str | None = None,
        level: int | None = None,
        occupied: str = "",
    ) -> ResourceProfile:
        return ResourceProfile(
            resource_id=resource_id,
            name=resource_id.title(),
            role=role,
            level=level,
            occupied=tuple(parse_occupied(occupied)),
        )

    return _make


@pytest.fixture
def make_template() -> Callable[..., TemplateItem]:
    """Factory for template items."""

    def _make(
        item_id: str,
        task_name: str,
        normative: float | None,
        *,
        operation: str | None = None,
    ) -> TemplateItem:
        return TemplateItem(
            item_id=item_id,
            kind=ItemKind.OPERATION if operation else ItemKind.TASK,
            name=operation or task_name,
            task_name=task_name,
            normative=normative,
        )

    return _make
