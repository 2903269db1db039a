"""Schedule presenters: Markdown table and CSV."""

from __future__ import annotations

import csv
import io

from .models import ResourceProfile, WorkItem
from .scheduler.core import Assignment

COLUMNS = ["Date", "Time", "Item", "Executor", "Duration (min)"]
UNKNOWN_ITEM = "Unknown item"
UNKNOWN_EXECUTOR = "Unknown executor"


def schedule_rows(
    assignments: list[Assignment],
    resources: dict[str, ResourceProfile],
    items: dict[str, WorkItem],
) -> list[list[str]]:
    """Build display rows sorted by date, then start time, keeping assignment order on ties."""
    rows: list[list[str]] = []
    for assignment in sorted(assignments, key=lambda a: (a.start.date(), a.start)):
        item = items.get(assignment.item_id)
        resource = resources.get(assignment.resource_id)
        rows.append(
            [
                assignment.start.strftime("%d.%m.%Y"),
                f"{assignment.start:%H:%M} - {assignment.end:%H:%M}",
                item.name if item else UNKNOWN_ITEM,
                resource.name if resource else UNKNOWN_EXECUTOR,
                f"{assignment.duration_minutes:g}",
            ]
        )
    return rows


class MarkdownPresenter:
    """Renders a schedule as a Markdown table."""

    def __init__(self, title: str = "Task schedule"):
        self.title = title

    def render(
        self,
        assignments: list[Assignment],
        resources: dict[str, ResourceProfile],
        items: dict[str, WorkItem],
    ) -> str:
        lines = [f"## {self.title}", ""]
        rows = schedule_rows(assignments, resources, items)
        if not rows:
            lines.append("_No assignments._")
            return "\n".join(lines) + "\n"

        lines.append("| " + " | ".join(COLUMNS) + " |")
        lines.append("|" + "|".join("-" for _ in COLUMNS) + "|")
        for row in rows:
            cells = [cell.replace("|", "\\|") for cell in row]
            lines.append("| " + " | ".join(cells) + " |")
        return "\n".join(lines) + "\n"


class CsvPresenter:
    """Renders a schedule as CSV with a header row."""

    def render(
        self,
        assignments: list[Assignment],
        resources: dict[str, ResourceProfile],
        items: dict[str, WorkItem],
    ) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(COLUMNS)
        writer.writerows(schedule_rows(assignments, resources, items))
        return buffer.getvalue()
