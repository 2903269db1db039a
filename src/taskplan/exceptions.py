"""Custom exceptions for taskplan."""


class TaskplanError(Exception):
    """Base exception for all taskplan errors."""

    pass


class SchedulingAbortedError(TaskplanError):
    """Raised when a run cannot start scheduling (no working items, no start date)."""

    pass


class ParseError(TaskplanError):
    """Raised when a date, constraint or occupied-time fragment cannot be parsed."""

    pass


class ConfigError(TaskplanError):
    """Raised when a configuration or data file is invalid."""

    pass
