"""taskplan - calendar-aware scheduling of dependent tasks onto qualified executors."""

__version__ = "0.1.0"
