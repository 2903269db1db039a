"""Scheduler package - calendar-aware greedy assignment of dependent tasks.

This package provides:
- NormativeResolver: fills missing durations from a template project
- TaskChainResolver: orders task groups by predecessor chain
- ParameterMatcher: resource eligibility constraints
- AvailabilityChecker: hour-slot conflicts per resource and date
- advance: business-hours time arithmetic
- AssignmentEngine: the forward pass tying the above together

Main entry points:
- SchedulingService: source -> engine -> sink boundary with an explicit RunMode
- AssignmentEngine: in-memory scheduling pass

Configuration:
- SchedulingConfig: calendar, parameter ids, short-task rule
- BusinessCalendar: work window and lunch hour
"""

from .availability import AvailabilityChecker
from .business_time import advance
from .chain import ChainIssue, ChainIssueKind, TaskChain, TaskChainResolver
from .config import BusinessCalendar, ParameterConfig, RunMode, SchedulingConfig
from .core import Assignment, ComputedFields, RunState, ScheduleWarning, SchedulingResult
from .engine import AssignmentEngine
from .normatives import NormativeResolver, first_template_match
from .parameters import ParameterMatcher, parse_requirements
from .protocols import ItemSource, PersistenceSink, Presenter
from .service import SchedulingService

__all__ = [
    # Core dataclasses
    "Assignment",
    "ComputedFields",
    "RunState",
    "ScheduleWarning",
    "SchedulingResult",
    # Configuration
    "BusinessCalendar",
    "ParameterConfig",
    "RunMode",
    "SchedulingConfig",
    # Components
    "AvailabilityChecker",
    "advance",
    "ChainIssue",
    "ChainIssueKind",
    "TaskChain",
    "TaskChainResolver",
    "NormativeResolver",
    "first_template_match",
    "ParameterMatcher",
    "parse_requirements",
    "AssignmentEngine",
    # Protocols
    "ItemSource",
    "PersistenceSink",
    "Presenter",
    # High-level service
    "SchedulingService",
]
