"""Derivation of missing normatives from a template project."""

from collections.abc import Callable, Iterable

from taskplan.logger import get_logger
from taskplan.models import TemplateItem, WorkItem

from .core import ScheduleWarning

logger = get_logger()

TemplatePolicy = Callable[[WorkItem, Iterable[TemplateItem]], TemplateItem | None]


def first_template_match(item: WorkItem, templates: Iterable[TemplateItem]) -> TemplateItem | None:
    """Return the first template item with the same structural identity.

    Several template items may match; the first one enumerated wins.
    """
    key = item.match_key()
    for template in templates:
        if template.match_key() == key:
            return template
    return None


class NormativeResolver:
    """Fills in missing per-item normatives as template normative times quantity."""

    def __init__(
        self,
        templates: list[TemplateItem],
        *,
        policy: TemplatePolicy = first_template_match,
    ):
        self.templates = templates
        self.policy = policy

    def resolve_item(self, item: WorkItem) -> float | None:
        """Compute the normative for one item without modifying it.

        Returns:
            The computed normative, or None when the item already has one or no
            template item carries a positive reference normative
        """
        if item.has_normative:
            return None

        template = self.policy(item, self.templates)
        if template is None or template.normative is None or template.normative <= 0:
            return None

        quantity = item.quantity or 1.0
        return template.normative * quantity

    def resolve(self, items: list[WorkItem]) -> tuple[dict[str, float], list[ScheduleWarning]]:
        """Write computed normatives back into items that lack one.

        Items that already carry a normative are left untouched, so resolving
        twice is a no-op.

        Returns:
            Tuple of (item_id -> computed normative, warnings for unresolved items)
        """
        computed: dict[str, float] = {}
        warnings: list[ScheduleWarning] = []

        for item in items:
            if item.has_normative:
                logger.debug(f"  {item.item_id} already has normative {item.normative:g}")
                continue

            normative = self.resolve_item(item)
            if normative is None:
                warnings.append(
                    ScheduleWarning(item.item_id, f"no template normative for '{item.name}'")
                )
                continue

            item.normative = normative
            computed[item.item_id] = normative
            logger.changes(
                f"Normative for {item.item_id} ({item.name}): "
                f"{normative / (item.quantity or 1.0):g} x {item.quantity or 1.0:g} = {normative:g}"
            )

        return computed, warnings
