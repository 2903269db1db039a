"""Configuration classes for the scheduling system."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, model_validator
from pydantic import ValidationError as PydanticValidationError

from taskplan.exceptions import ConfigError
from taskplan.logger import get_logger

logger = get_logger()

LUNCH_MINUTES = 60  # Lunch break length is fixed at one hour

# Setting codes understood in calendar settings records
CALENDAR_SETTING_CODES = ("day_start", "day_end", "lunch_start")


class RunMode(str, Enum):
    """Whether computed fields are written to the persistence sink."""

    DRY_RUN = "dry_run"  # Log what would be saved
    APPLY = "apply"  # Call the sink for every computed field


class BusinessCalendar(BaseModel):
    """Daily work window with a one-hour lunch break."""

    day_start: int = 9
    day_end: int = 18
    lunch_start: int = 13

    @model_validator(mode="after")
    def validate_hours(self) -> "BusinessCalendar":
        """Ensure day_start < lunch_start and lunch ends no later than day_end."""
        if not 0 <= self.day_start < self.day_end <= 24:  # noqa: PLR2004
            raise ValueError(
                f"day_start ({self.day_start}) must be before day_end ({self.day_end})"
            )
        lunch_end = self.lunch_start + LUNCH_MINUTES // 60
        if not self.day_start < self.lunch_start or lunch_end > self.day_end:
            raise ValueError(
                f"lunch_start ({self.lunch_start}) must fall inside the work day "
                f"({self.day_start}-{self.day_end})"
            )
        return self

    @property
    def lunch_end(self) -> int:
        return self.lunch_start + LUNCH_MINUTES // 60

    def with_settings(self, settings: dict[str, Any]) -> "BusinessCalendar":
        """Return a calendar with values from settings records overriding these defaults.

        Unknown codes and non-integer values are ignored.
        """
        updates: dict[str, int] = {}
        for code in CALENDAR_SETTING_CODES:
            raw = settings.get(code)
            if raw is None or raw == "":
                continue
            try:
                updates[code] = int(raw)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring calendar setting {code}={raw!r}: not an integer")
        if not updates:
            return self
        try:
            return BusinessCalendar.model_validate({**self.model_dump(), **updates})
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid calendar settings {updates}: {e}") from e


class ParameterConfig(BaseModel):
    """Well-known parameter ids and markers used in constraint strings."""

    role_parameter_id: str = "115"
    level_parameter_id: str = "2673"
    wildcard: str = "%"


class SchedulingConfig(BaseModel):
    """Configuration for a scheduling run."""

    calendar: BusinessCalendar = BusinessCalendar()
    parameters: ParameterConfig = ParameterConfig()

    # Short items ending at day end push the cursor to the next morning
    short_task_minutes: float = 240

    # Project status that marks records of the working project; others form the template
    working_status: str = "in_progress"
