"""Text formats used at the source and sink boundaries.

Supported forms:
- "20251121" - compact date key used by occupied-time records
- "21.11.2025 09:30:00" - timestamp form used for persisted start times
- "21.11.2025" - project start date (a trailing time part is ignored)
- "20251121:9-12,20251122:8-11" - occupied-time list
"""

import re
from datetime import date, datetime

from .exceptions import ParseError
from .logger import get_logger
from .models import OccupiedInterval

logger = get_logger()

DATE_KEY_FORMAT = "%Y%m%d"
TIMESTAMP_FORMAT = "%d.%m.%Y %H:%M:%S"

_DATE_KEY_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")
_TIMESTAMP_RE = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4}) (\d{2}):(\d{2}):(\d{2})$")
_START_DATE_RE = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})(?:\s.*)?$")
_OCCUPIED_RE = re.compile(r"^(\d{8}):(\d+)-(\d+)$")


def format_date_key(day: date) -> str:
    """Format a date as an 8-digit YYYYMMDD key."""
    return f"{day.year:04d}{day.month:02d}{day.day:02d}"


def parse_date_key(text: str) -> date:
    """Parse an 8-digit YYYYMMDD key.

    Raises:
        ParseError: If the text is not a valid date key
    """
    match = _DATE_KEY_RE.match(text.strip())
    if not match:
        raise ParseError(f"Invalid date key: '{text}'")
    year, month, day = (int(g) for g in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise ParseError(f"Invalid date key: '{text}': {e}") from e


def format_timestamp(moment: datetime) -> str:
    """Format a timestamp as DD.MM.YYYY HH:MM:SS."""
    return moment.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(text: str) -> datetime:
    """Parse a DD.MM.YYYY HH:MM:SS timestamp.

    Raises:
        ParseError: If the text is not a valid timestamp
    """
    match = _TIMESTAMP_RE.match(text.strip())
    if not match:
        raise ParseError(f"Invalid timestamp: '{text}'")
    day, month, year, hour, minute, second = (int(g) for g in match.groups())
    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError as e:
        raise ParseError(f"Invalid timestamp: '{text}': {e}") from e


def parse_start_date(value: str | date | None) -> date | None:
    """Parse a declared project start date in DD.MM.YYYY form.

    Returns None when the value is missing or unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    match = _START_DATE_RE.match(str(value).strip())
    if not match:
        return None
    day, month, year = (int(g) for g in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_occupied(intervals: list[OccupiedInterval] | tuple[OccupiedInterval, ...]) -> str:
    """Format occupied intervals as a comma-separated YYYYMMDD:start-end list."""
    return ",".join(
        f"{format_date_key(i.day)}:{i.start_hour}-{i.end_hour}" for i in intervals
    )


def parse_occupied_fragment(fragment: str) -> OccupiedInterval:
    """Parse a single YYYYMMDD:start-end fragment.

    Raises:
        ParseError: If the fragment is malformed
    """
    match = _OCCUPIED_RE.match(fragment.strip())
    if not match:
        raise ParseError(f"Invalid occupied-time fragment: '{fragment}'")
    date_str, start_hour, end_hour = match.groups()
    return OccupiedInterval(
        day=parse_date_key(date_str), start_hour=int(start_hour), end_hour=int(end_hour)
    )


def parse_occupied(text: str | None) -> list[OccupiedInterval]:
    """Parse an occupied-time list, skipping fragments that do not parse."""
    if not text:
        return []

    intervals: list[OccupiedInterval] = []
    for fragment in str(text).split(","):
        if not fragment.strip():
            continue
        try:
            intervals.append(parse_occupied_fragment(fragment))
        except ParseError as e:
            logger.warning(f"Skipping occupied time: {e}")
    return intervals
