"""Tests for the YAML item source and record mapping."""

from datetime import date
from pathlib import Path

import pytest
import yaml

from taskplan.exceptions import ConfigError
from taskplan.models import ItemKind
from taskplan.scheduler.config import SchedulingConfig
from taskplan.sources import FieldMapping, RecordMapper, YamlItemSource

EXAMPLE_PROJECT = Path(__file__).parent.parent / "examples" / "project.yaml"


def _write(path: Path, data: object) -> Path:
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


class TestRecordMapper:
    def test_task_row(self) -> None:
        item = RecordMapper().to_work_item(
            {
                "task_id": 7,
                "task": "Cutting",
                "task_normative": "90",
                "quantity": "2,5",
                "start": "21.11.2025",
            }
        )
        assert item.kind == ItemKind.TASK
        assert item.item_id == "7"
        assert item.name == "Cutting"
        assert item.normative == 90
        assert item.quantity == 2.5
        assert item.executors_required == 1
        assert item.previous_task is None
        assert item.start_date == date(2025, 11, 21)

    def test_operation_row(self) -> None:
        item = RecordMapper().to_work_item(
            {
                "task_id": "10",
                "task": "Assembly",
                "operation_id": "101",
                "operation": "Fit panels",
                "operation_normative": 0,
                "executors_required": 2,
                "previous_task": "Cutting",
            }
        )
        assert item.kind == ItemKind.OPERATION
        assert item.item_id == "101"
        assert item.name == "Fit panels"
        assert item.task_name == "Assembly"
        assert item.normative is None
        assert item.executors_required == 2
        assert item.previous_task == "Cutting"

    def test_missing_task_id(self) -> None:
        with pytest.raises(ConfigError, match="task_id"):
            RecordMapper().to_work_item({"task": "Cutting"})

    def test_non_numeric_normative_ignored(self) -> None:
        item = RecordMapper().to_work_item({"task_id": "1", "task_normative": "n/a"})
        assert item.normative is None

    def test_resource(self) -> None:
        resource = RecordMapper().to_resource(
            {"id": "u1", "name": "Alice", "role": "Senior", "level": "3", "occupied": "20251121:9-12"}
        )
        assert resource.resource_id == "u1"
        assert resource.role == "Senior"
        assert resource.level == 3
        assert len(resource.occupied) == 1

    def test_resource_defaults(self) -> None:
        resource = RecordMapper().to_resource({"id": "u9"})
        assert resource.name == "u9"
        assert resource.role is None
        assert resource.level is None
        assert resource.occupied == ()

    def test_custom_mapping(self) -> None:
        mapping = FieldMapping(task="task_name", executor_id="login")
        mapper = RecordMapper(mapping)
        assert mapper.to_work_item({"task_id": "1", "task_name": "Paint"}).task_name == "Paint"
        assert mapper.to_resource({"login": "bob"}).resource_id == "bob"


class TestYamlItemSource:
    def test_example_project(self) -> None:
        source = YamlItemSource(EXAMPLE_PROJECT)

        work = source.load_work_items()
        templates = source.load_template_items()

        assert [i.item_id for i in work] == ["101", "1021", "1022", "103"]
        assert [t.item_id for t in templates] == ["1", "21", "22", "3"]
        assert source.load_calendar_settings() == {"day_start": 9, "day_end": 18, "lunch_start": 13}
        assert source.load_parameter_dictionary() == {"115": "Role", "2673": "Qualification level"}
        assert [r.name for r in source.load_resources()] == ["Alice", "Boris", "Carmen", "Dmitri"]

    def test_working_status_from_config(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "data.yaml",
            {
                "items": [
                    {"project_status": "active", "task_id": "1", "task": "A"},
                    {"project_status": "in_progress", "task_id": "2", "task": "A"},
                ]
            },
        )
        source = YamlItemSource(path, SchedulingConfig(working_status="active"))
        assert [i.item_id for i in source.load_work_items()] == ["1"]
        assert [t.item_id for t in source.load_template_items()] == ["2"]

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        source = YamlItemSource(path)
        assert source.load_work_items() == []
        assert source.load_resources() == []
        assert source.load_calendar_settings() == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            YamlItemSource(tmp_path / "nope.yaml").load_work_items()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("items: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            YamlItemSource(path).load_work_items()

    def test_top_level_not_mapping(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "list.yaml", [1, 2])
        with pytest.raises(ConfigError, match="mapping"):
            YamlItemSource(path).load_resources()

    def test_section_not_list(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "data.yaml", {"executors": {"id": "u1"}})
        with pytest.raises(ConfigError, match="'executors' must be a list"):
            YamlItemSource(path).load_resources()
