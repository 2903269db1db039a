"""Item source backed by a YAML data file.

The data file holds four record lists::

    items:        # flat project rows: one per task, or one per operation of a task
      - project_status: in_progress
        task_id: "10"
        task: Assembly
        operation_id: "101"        # absent for plain tasks
        operation: Fit panels
        operation_normative: 30    # minutes per unit
        quantity: 4
        executors_required: 2
        parameters: "115:Senior,2673:3(2-4)"
        previous_task: Cutting
        start: 21.11.2025
    settings:
      - {code: day_start, value: 9}
    parameters:
      - {id: "115", name: Role}
    executors:
      - {id: u1, name: Alice, role: Senior, level: 3, occupied: "20251121:9-12"}

Record keys are not used by the engine directly. ``FieldMapping`` translates
them into the typed models:

=======================  ===================================  =====================
Record key (default)     Model field                          Notes
=======================  ===================================  =====================
project_status           working / template split             vs working_status
task_id                  WorkItem.task_id                     required
task                     WorkItem.task_name
operation_id             WorkItem.item_id (operations)        marks an operation
operation                WorkItem.name (operations)
task_normative           WorkItem.normative (tasks)           minutes
operation_normative      WorkItem.normative (operations)      minutes
quantity                 WorkItem.quantity                    default 1
executors_required       WorkItem.executors_required          default 1
parameters               WorkItem.parameters                  constraint string
previous_task            WorkItem.previous_task               predecessor task name
start                    WorkItem.start_date                  DD.MM.YYYY
executor_id              ResourceProfile.resource_id
executor_name            ResourceProfile.name
role                     ResourceProfile.role
level                    ResourceProfile.level                integer
occupied                 ResourceProfile.occupied             YYYYMMDD:h-h list
=======================  ===================================  =====================
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, Field

from .exceptions import ConfigError
from .formats import parse_occupied, parse_start_date
from .logger import get_logger
from .models import ItemKind, ResourceProfile, TemplateItem, WorkItem
from .scheduler.config import SchedulingConfig

logger = get_logger()


class FieldMapping(BaseModel):
    """Names of the record keys read from the data file."""

    project_status: str = "project_status"
    task_id: str = "task_id"
    task: str = "task"
    operation_id: str = "operation_id"
    operation: str = "operation"
    task_normative: str = "task_normative"
    operation_normative: str = "operation_normative"
    quantity: str = "quantity"
    executors_required: str = "executors_required"
    parameters: str = "parameters"
    previous_task: str = "previous_task"
    start: str = "start"

    executor_id: str = Field(default="id", description="Executor identity key")
    executor_name: str = Field(default="name", description="Executor display name key")
    role: str = "role"
    level: str = "level"
    occupied: str = "occupied"

    setting_code: str = "code"
    setting_value: str = "value"
    parameter_id: str = "id"
    parameter_name: str = "name"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _number(value: Any, default: float | None = None) -> float | None:
    """Parse a number; empty and unparseable values give default."""
    text = _text(value)
    if not text:
        return default
    try:
        return float(text.replace(",", "."))
    except ValueError:
        logger.warning(f"Ignoring non-numeric value {value!r}")
        return default


def _integer(value: Any, default: int | None = None) -> int | None:
    number = _number(value)
    if number is None:
        return default
    return int(number)


class RecordMapper:
    """Converts raw records into typed models using a FieldMapping."""

    def __init__(self, mapping: FieldMapping | None = None):
        self.mapping = mapping or FieldMapping()

    def kind_of(self, record: dict[str, Any]) -> ItemKind:
        return ItemKind.OPERATION if _text(record.get(self.mapping.operation_id)) else ItemKind.TASK

    def to_work_item(self, record: dict[str, Any]) -> WorkItem:
        """Convert one project row into a WorkItem.

        Raises:
            ConfigError: If the row has no task id
        """
        m = self.mapping
        task_id = _text(record.get(m.task_id))
        if not task_id:
            raise ConfigError(f"Project row without '{m.task_id}': {record}")

        kind = self.kind_of(record)
        task_name = _text(record.get(m.task))
        if kind == ItemKind.OPERATION:
            item_id = _text(record.get(m.operation_id))
            name = _text(record.get(m.operation))
            normative = _number(record.get(m.operation_normative))
        else:
            item_id = task_id
            name = task_name
            normative = _number(record.get(m.task_normative))

        return WorkItem(
            item_id=item_id,
            kind=kind,
            name=name,
            task_id=task_id,
            task_name=task_name,
            normative=normative if normative else None,
            quantity=_number(record.get(m.quantity), 1.0) or 1.0,
            executors_required=_integer(record.get(m.executors_required), 1) or 1,
            parameters=_text(record.get(m.parameters)),
            previous_task=_text(record.get(m.previous_task)) or None,
            start_date=parse_start_date(record.get(m.start)),
        )

    def to_template_item(self, record: dict[str, Any]) -> TemplateItem:
        item = self.to_work_item(record)
        return TemplateItem(
            item_id=item.item_id,
            kind=item.kind,
            name=item.name,
            task_name=item.task_name,
            normative=item.normative,
        )

    def to_resource(self, record: dict[str, Any]) -> ResourceProfile:
        m = self.mapping
        resource_id = _text(record.get(m.executor_id))
        return ResourceProfile(
            resource_id=resource_id,
            name=_text(record.get(m.executor_name)) or resource_id,
            role=_text(record.get(m.role)) or None,
            level=_integer(record.get(m.level)),
            occupied=tuple(parse_occupied(_text(record.get(m.occupied)))),
        )


class YamlItemSource:
    """ItemSource reading a single YAML data file.

    Rows whose project status equals the configured working status form the
    working set; all other rows form the template.
    """

    def __init__(
        self,
        path: Path | str,
        config: SchedulingConfig | None = None,
        mapping: FieldMapping | None = None,
    ):
        self.path = Path(path)
        self.config = config or SchedulingConfig()
        self.mapper = RecordMapper(mapping)
        self._data: dict[str, Any] | None = None

    @property
    def data(self) -> dict[str, Any]:
        """The parsed data file (loaded once per source)."""
        if self._data is None:
            self._data = self._load()
        return self._data

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            raise FileNotFoundError(f"Data file not found: {self.path}")

        with self.path.open(encoding="utf-8") as f:
            try:
                raw: Any = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.path}: {e}") from e

        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Data file must contain a mapping, got {type(raw).__name__}")
        return cast(dict[str, Any], raw)

    def _records(self, section: str) -> list[dict[str, Any]]:
        records = self.data.get(section) or []
        if not isinstance(records, list):
            raise ConfigError(f"'{section}' must be a list")
        result: list[dict[str, Any]] = []
        for record in cast(list[Any], records):
            if not isinstance(record, dict):
                raise ConfigError(f"Entries of '{section}' must be mappings, got {record!r}")
            result.append(cast(dict[str, Any], record))
        return result

    def _is_working(self, record: dict[str, Any]) -> bool:
        status = _text(record.get(self.mapper.mapping.project_status))
        return status == self.config.working_status

    def load_work_items(self) -> list[WorkItem]:
        items = [
            self.mapper.to_work_item(r) for r in self._records("items") if self._is_working(r)
        ]
        logger.debug(f"Loaded {len(items)} working items from {self.path}")
        return items

    def load_template_items(self) -> list[TemplateItem]:
        items = [
            self.mapper.to_template_item(r)
            for r in self._records("items")
            if not self._is_working(r)
        ]
        logger.debug(f"Loaded {len(items)} template items from {self.path}")
        return items

    def load_calendar_settings(self) -> dict[str, Any]:
        m = self.mapper.mapping
        return {
            _text(r.get(m.setting_code)): r.get(m.setting_value)
            for r in self._records("settings")
            if _text(r.get(m.setting_code))
        }

    def load_parameter_dictionary(self) -> dict[str, str]:
        m = self.mapper.mapping
        return {
            _text(r.get(m.parameter_id)): _text(r.get(m.parameter_name))
            for r in self._records("parameters")
            if _text(r.get(m.parameter_id))
        }

    def load_resources(self) -> list[ResourceProfile]:
        resources = [self.mapper.to_resource(r) for r in self._records("executors")]
        logger.debug(f"Loaded {len(resources)} executors from {self.path}")
        return resources
