"""Protocol definitions for the collaborators around the scheduling engine."""

from datetime import datetime
from typing import Any, Protocol

from taskplan.models import ResourceProfile, TemplateItem, WorkItem

from .core import Assignment


class ItemSource(Protocol):
    """Supplies the snapshot a scheduling run works on."""

    def load_work_items(self) -> list[WorkItem]:
        """Return the working-project items."""
        ...

    def load_template_items(self) -> list[TemplateItem]:
        """Return the template-project items."""
        ...

    def load_calendar_settings(self) -> dict[str, Any]:
        """Return calendar settings as a code -> value map (day_start, day_end, lunch_start)."""
        ...

    def load_parameter_dictionary(self) -> dict[str, str]:
        """Return known parameters as an id -> name map."""
        ...

    def load_resources(self) -> list[ResourceProfile]:
        """Return candidate resources in preference order."""
        ...


class PersistenceSink(Protocol):
    """Receives computed fields; saving identical values again must be safe."""

    def save_computed_fields(self, item_id: str, fields: dict[str, float | datetime]) -> None:
        """Persist computed values (``normative`` and/or ``start_time``) for one item.

        Args:
            item_id: Work item identifier
            fields: Computed values keyed by field name
        """
        ...


class Presenter(Protocol):
    """Renders a finished schedule."""

    def render(
        self,
        assignments: list[Assignment],
        resources: dict[str, ResourceProfile],
        items: dict[str, WorkItem],
    ) -> str:
        """Render assignments using resource and work-item lookup tables.

        Returns:
            The rendered schedule
        """
        ...
