"""Resource eligibility constraints: parsing and matching.

Constraint strings are comma-separated requirements of the form ``id:value``
or ``id:value(min-max)``, where either bound may be omitted::

    115:Senior,2673:3(2-4),900:%
"""

import re
from collections.abc import Callable

from taskplan.exceptions import ParseError
from taskplan.logger import get_logger
from taskplan.models import ConstraintRequirement, ResourceProfile

from .config import ParameterConfig

logger = get_logger()

_REQUIREMENT_RE = re.compile(r"^\s*([^:(]+?)\s*:\s*(.*?)\s*(?:\((.*)\))?\s*$")
_RANGE_RE = re.compile(r"^\s*(\d+)?\s*-\s*(\d+)?\s*$")


def parse_requirement(fragment: str) -> ConstraintRequirement:
    """Parse one ``id:value`` or ``id:value(min-max)`` fragment.

    A range text that is not ``min-max`` shaped yields an unbounded range.

    Raises:
        ParseError: If the fragment has no ``id:`` prefix
    """
    match = _REQUIREMENT_RE.match(fragment)
    if not match:
        raise ParseError(f"Invalid constraint: '{fragment}'")

    parameter_id, value, range_text = match.groups()
    if range_text is None or not range_text.strip():
        return ConstraintRequirement(parameter_id=parameter_id, value=value)

    minimum: int | None = None
    maximum: int | None = None
    range_match = _RANGE_RE.match(range_text)
    if range_match:
        low, high = range_match.groups()
        minimum = int(low) if low is not None else None
        maximum = int(high) if high is not None else None
    else:
        logger.warning(f"Constraint '{fragment}': unrecognized range '{range_text}'")

    return ConstraintRequirement(
        parameter_id=parameter_id,
        value=value,
        minimum=minimum,
        maximum=maximum,
        has_range=True,
    )


def parse_requirements(text: str | None) -> list[ConstraintRequirement]:
    """Parse a comma-separated constraint string, skipping fragments that do not parse."""
    if not text:
        return []

    requirements: list[ConstraintRequirement] = []
    for fragment in str(text).split(","):
        if not fragment.strip():
            continue
        try:
            requirements.append(parse_requirement(fragment))
        except ParseError as e:
            logger.warning(f"Skipping constraint: {e}")
    return requirements


def format_requirements(requirements: list[ConstraintRequirement]) -> str:
    """Format requirements back into a constraint string."""
    parts: list[str] = []
    for req in requirements:
        text = f"{req.parameter_id}:{req.value}"
        if req.has_range:
            low = "" if req.minimum is None else str(req.minimum)
            high = "" if req.maximum is None else str(req.maximum)
            text += f"({low}-{high})"
        parts.append(text)
    return ",".join(parts)


def _as_int(value: str) -> int | None:
    try:
        return int(value.strip())
    except ValueError:
        return None


# Policies: shortcuts kept as named functions so they can be revisited on their own.


def wildcard_always_satisfied(requirement: ConstraintRequirement, resource: ResourceProfile) -> bool:
    """A wildcard requirement passes for every resource.

    It is meant to require that the resource has some value for the
    parameter, which is not checked.
    """
    return True


def roleless_resource_satisfies(requirement: ConstraintRequirement, resource: ResourceProfile) -> bool:
    """Resources without a role satisfy any role requirement."""
    return True


def levelless_resource_satisfies(requirement: ConstraintRequirement, resource: ResourceProfile) -> bool:
    """Resources without a qualification level satisfy any level requirement."""
    return True


Policy = Callable[[ConstraintRequirement, ResourceProfile], bool]


class ParameterMatcher:
    """Evaluates constraint requirements against resource profiles."""

    def __init__(
        self,
        config: ParameterConfig | None = None,
        parameter_dictionary: dict[str, str] | None = None,
        *,
        wildcard_policy: Policy = wildcard_always_satisfied,
        missing_role_policy: Policy = roleless_resource_satisfies,
        missing_level_policy: Policy = levelless_resource_satisfies,
    ):
        """Initialize the matcher.

        Args:
            config: Well-known parameter ids and the wildcard marker
            parameter_dictionary: Optional id -> name map of known parameters.
                When non-empty, requirements with unknown ids are ignored.
            wildcard_policy: Decides wildcard requirements
            missing_role_policy: Decides role requirements for role-less resources
            missing_level_policy: Decides level requirements for level-less resources
        """
        self.config = config or ParameterConfig()
        self.parameter_dictionary = parameter_dictionary
        self.wildcard_policy = wildcard_policy
        self.missing_role_policy = missing_role_policy
        self.missing_level_policy = missing_level_policy

    def parameter_name(self, parameter_id: str) -> str:
        if self.parameter_dictionary and parameter_id in self.parameter_dictionary:
            return self.parameter_dictionary[parameter_id]
        return parameter_id

    def satisfies(self, resource: ResourceProfile, requirement: ConstraintRequirement) -> bool:
        """Check a single requirement against a resource."""
        if (
            self.parameter_dictionary
            and requirement.parameter_id not in self.parameter_dictionary
        ):
            logger.debug(f"      unknown parameter {requirement.parameter_id}, ignored")
            return True

        if requirement.value == self.config.wildcard:
            return self.wildcard_policy(requirement, resource)

        if requirement.parameter_id == self.config.role_parameter_id:
            if not resource.role:
                return self.missing_role_policy(requirement, resource)
            return resource.role == requirement.value

        if requirement.parameter_id == self.config.level_parameter_id:
            if resource.level is None:
                return self.missing_level_policy(requirement, resource)
            return self._level_matches(resource.level, requirement)

        # Other parameters are not evaluated yet
        return True

    def _level_matches(self, level: int, requirement: ConstraintRequirement) -> bool:
        if requirement.has_range:
            if requirement.minimum is not None and level < requirement.minimum:
                return False
            return not (requirement.maximum is not None and level > requirement.maximum)

        required = _as_int(requirement.value)
        if required is None:
            return True
        return level == required

    def matches(
        self, resource: ResourceProfile, requirements: list[ConstraintRequirement] | None
    ) -> bool:
        """Check that no requirement fails for resource."""
        if not requirements:
            return True

        for requirement in requirements:
            if not self.satisfies(resource, requirement):
                logger.checks(
                    f"    {resource.resource_id} rejected: "
                    f"{self.parameter_name(requirement.parameter_id)}={requirement.value}"
                )
                return False
        return True

    def filter(
        self, resources: list[ResourceProfile], requirements: list[ConstraintRequirement]
    ) -> list[ResourceProfile]:
        """Return matching resources in their given order."""
        return [r for r in resources if self.matches(r, requirements)]
