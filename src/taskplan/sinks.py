"""Results file for computed normatives and start times.

The results file records what a scheduling run computed, keyed by work item,
so that a later import can write the values back to the project records.
Saving is a merge: re-saving identical values leaves the file unchanged.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, cast

import yaml

from .exceptions import ParseError
from .formats import format_timestamp, parse_timestamp
from .logger import get_logger

logger = get_logger()

RESULTS_FILE_VERSION = 1


@dataclass
class ItemResult:
    """Persisted values for a single work item."""

    normative: float | None = None
    start_time: datetime | None = None


def write_results_file(path: Path, results: dict[str, ItemResult]) -> None:
    """Write all item results to a results file."""
    items_data: dict[str, dict[str, Any]] = {}
    for item_id, item in results.items():
        entry: dict[str, Any] = {}
        if item.normative is not None:
            entry["normative"] = item.normative
        if item.start_time is not None:
            entry["start_time"] = format_timestamp(item.start_time)
        items_data[item_id] = entry

    output: dict[str, Any] = {
        "version": RESULTS_FILE_VERSION,
        "items": items_data,
    }

    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(output, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def read_results_file(path: Path) -> dict[str, ItemResult]:
    """Load a results file.

    Raises:
        ValueError: If the file format is invalid or the version is unsupported
    """
    with path.open(encoding="utf-8") as f:
        raw_data: Any = yaml.safe_load(f)

    if not isinstance(raw_data, dict):
        raise ValueError(f"Invalid results file format: expected dict, got {type(raw_data)}")

    data = cast(dict[str, Any], raw_data)

    version = data.get("version")
    if version != RESULTS_FILE_VERSION:
        raise ValueError(
            f"Unsupported results file version {version}, expected {RESULTS_FILE_VERSION}"
        )

    raw_items = data.get("items") or {}
    if not isinstance(raw_items, dict):
        raise ValueError("Results file 'items' field must be a dict")

    results: dict[str, ItemResult] = {}
    for item_id, raw_entry in cast(dict[Any, Any], raw_items).items():
        if not isinstance(raw_entry, dict):
            raise ValueError(f"Results for '{item_id}' must be a dict")
        entry = cast(dict[str, Any], raw_entry)

        normative = entry.get("normative")
        start_text = entry.get("start_time")
        start_time = None
        if start_text is not None:
            try:
                start_time = parse_timestamp(str(start_text))
            except ParseError as e:
                raise ValueError(f"Invalid start_time for '{item_id}': {e}") from e

        results[str(item_id)] = ItemResult(
            normative=float(normative) if normative is not None else None,
            start_time=start_time,
        )

    return results


class YamlResultSink:
    """PersistenceSink writing computed fields into a YAML results file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def save_computed_fields(self, item_id: str, fields: dict[str, float | datetime]) -> None:
        """Merge computed fields for one item into the results file."""
        results = read_results_file(self.path) if self.path.exists() else {}
        current = results.get(item_id, ItemResult())

        normative = fields.get("normative")
        start_time = fields.get("start_time")
        updated = ItemResult(
            normative=float(normative) if isinstance(normative, (int, float)) else current.normative,
            start_time=start_time if isinstance(start_time, datetime) else current.start_time,
        )
        if updated == current and item_id in results:
            logger.debug(f"  {item_id}: results unchanged")
            return

        results[item_id] = updated
        write_results_file(self.path, results)
        logger.debug(f"  {item_id}: results written to {self.path}")
