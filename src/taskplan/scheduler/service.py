"""High-level scheduling service."""

from datetime import datetime

from taskplan.exceptions import SchedulingAbortedError
from taskplan.formats import format_timestamp
from taskplan.logger import get_logger

from .config import RunMode, SchedulingConfig
from .core import RunState, SchedulingResult
from .engine import AssignmentEngine
from .protocols import ItemSource, PersistenceSink

logger = get_logger()


class SchedulingService:
    """Runs one scheduling pass between an item source and a persistence sink.

    This service:
    - Loads a complete snapshot from the ItemSource
    - Runs the AssignmentEngine against it
    - Afterwards, in APPLY mode, hands computed fields to the PersistenceSink

    Fatal conditions are reported once, as SchedulingResult.failure.
    """

    def __init__(
        self,
        source: ItemSource,
        sink: PersistenceSink | None = None,
        config: SchedulingConfig | None = None,
    ):
        """Initialize scheduling service.

        Args:
            source: Where work items, templates, settings and resources come from
            sink: Where computed normatives and start times go (APPLY mode only)
            config: Optional scheduling configuration
        """
        self.source = source
        self.sink = sink
        self.config = config or SchedulingConfig()

    def build_engine(self) -> AssignmentEngine:
        """Load the snapshot and create an engine for it."""
        calendar = self.config.calendar.with_settings(self.source.load_calendar_settings())
        config = self.config.model_copy(update={"calendar": calendar})
        dictionary = self.source.load_parameter_dictionary()

        return AssignmentEngine(
            self.source.load_work_items(),
            self.source.load_resources(),
            template_items=self.source.load_template_items(),
            config=config,
            parameter_dictionary=dictionary or None,
        )

    def schedule(self, mode: RunMode = RunMode.DRY_RUN) -> SchedulingResult:
        """Schedule all items and, in APPLY mode, persist computed fields.

        Args:
            mode: DRY_RUN only logs what would be saved; APPLY calls the sink

        Returns:
            SchedulingResult; on a fatal condition it has ``failure`` set and no
            assignments
        """
        engine = self.build_engine()
        try:
            result = engine.schedule()
        except SchedulingAbortedError as e:
            logger.error(f"Scheduling failed: {e}")
            return SchedulingResult(state=RunState.FAILED, failure=str(e))

        self.persist(result, mode)
        return result

    def persist(self, result: SchedulingResult, mode: RunMode) -> None:
        """Emit one save request per item with computed values."""
        for item_id, computed in result.computed.items():
            fields = computed.as_dict()
            if not fields:
                continue
            if mode == RunMode.APPLY and self.sink is not None:
                self.sink.save_computed_fields(item_id, fields)
                logger.changes(f"Saved computed fields for {item_id}")
            else:
                shown = {
                    name: format_timestamp(value) if isinstance(value, datetime) else value
                    for name, value in fields.items()
                }
                logger.checks(f"Would save {shown} to {item_id}")
