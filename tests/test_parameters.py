"""Tests for constraint parsing and resource matching."""

import pytest

from taskplan.exceptions import ParseError
from taskplan.models import ConstraintRequirement
from taskplan.scheduler.config import ParameterConfig
from taskplan.scheduler.parameters import (
    ParameterMatcher,
    format_requirements,
    parse_requirement,
    parse_requirements,
)


class TestParseRequirement:
    """Tests for single-fragment parsing."""

    def test_plain_value(self) -> None:
        req = parse_requirement("115:Senior")
        assert req == ConstraintRequirement(parameter_id="115", value="Senior")
        assert not req.has_range

    def test_closed_range(self) -> None:
        req = parse_requirement("2673:3(2-4)")
        assert req.parameter_id == "2673"
        assert req.value == "3"
        assert req.has_range
        assert req.minimum == 2
        assert req.maximum == 4

    def test_open_lower_bound(self) -> None:
        req = parse_requirement("2673:3(-4)")
        assert req.has_range
        assert req.minimum is None
        assert req.maximum == 4

    def test_open_upper_bound(self) -> None:
        req = parse_requirement("2673:3(2-)")
        assert req.minimum == 2
        assert req.maximum is None

    def test_empty_range_is_no_range(self) -> None:
        req = parse_requirement("2673:3()")
        assert not req.has_range

    def test_whitespace_tolerated(self) -> None:
        req = parse_requirement("  115 : Senior ")
        assert req.parameter_id == "115"
        assert req.value == "Senior"

    def test_missing_separator_raises(self) -> None:
        with pytest.raises(ParseError, match="Invalid constraint"):
            parse_requirement("Senior")


class TestParseRequirements:
    """Tests for comma-separated constraint strings."""

    def test_scenario_string(self) -> None:
        reqs = parse_requirements("115:Senior,2673:3(2-4)")
        assert [r.parameter_id for r in reqs] == ["115", "2673"]

    @pytest.mark.parametrize("text", [None, "", "  "])
    def test_empty(self, text: str | None) -> None:
        assert parse_requirements(text) == []

    def test_bad_fragment_skipped(self) -> None:
        reqs = parse_requirements("115:Senior,garbage,,2673:%")
        assert [(r.parameter_id, r.value) for r in reqs] == [("115", "Senior"), ("2673", "%")]

    def test_format_back(self) -> None:
        text = "115:Senior,2673:3(2-),900:%"
        assert format_requirements(parse_requirements(text)) == text


class TestParameterMatcher:
    """Tests for matching requirements against resources."""

    @pytest.fixture
    def matcher(self) -> ParameterMatcher:
        return ParameterMatcher(ParameterConfig())

    def test_role_and_level_in_range(self, matcher, make_resource) -> None:
        """Senior with level 3 satisfies 115:Senior,2673:3(2-4)."""
        resource = make_resource("u1", role="Senior", level=3)
        assert matcher.matches(resource, parse_requirements("115:Senior,2673:3(2-4)"))

    def test_level_above_range_fails(self, matcher, make_resource) -> None:
        """Senior with level 5 fails the 2-4 range."""
        resource = make_resource("u2", role="Senior", level=5)
        assert not matcher.matches(resource, parse_requirements("115:Senior,2673:3(2-4)"))

    def test_level_below_range_fails(self, matcher, make_resource) -> None:
        resource = make_resource("u3", role="Senior", level=1)
        assert not matcher.matches(resource, parse_requirements("2673:3(2-4)"))

    def test_role_mismatch(self, matcher, make_resource) -> None:
        resource = make_resource("u1", role="Junior", level=3)
        assert not matcher.matches(resource, parse_requirements("115:Senior"))

    def test_exact_level_without_range(self, matcher, make_resource) -> None:
        assert matcher.matches(make_resource("a", level=3), parse_requirements("2673:3"))
        assert not matcher.matches(make_resource("b", level=4), parse_requirements("2673:3"))

    def test_non_numeric_level_value_passes(self, matcher, make_resource) -> None:
        assert matcher.matches(make_resource("a", level=3), parse_requirements("2673:high"))

    def test_open_ranges(self, matcher, make_resource) -> None:
        high = make_resource("high", level=9)
        low = make_resource("low", level=1)
        assert matcher.matches(high, parse_requirements("2673:3(2-)"))
        assert not matcher.matches(low, parse_requirements("2673:3(2-)"))
        assert matcher.matches(low, parse_requirements("2673:3(-4)"))
        assert not matcher.matches(high, parse_requirements("2673:3(-4)"))

    def test_wildcard_always_passes(self, matcher, make_resource) -> None:
        """The wildcard marker is satisfied even by a resource without a role."""
        resource = make_resource("u1")
        assert matcher.matches(resource, parse_requirements("115:%,2673:%"))

    def test_roleless_resource_passes_role(self, matcher, make_resource) -> None:
        assert matcher.matches(make_resource("u1", level=3), parse_requirements("115:Lead"))

    def test_levelless_resource_passes_level(self, matcher, make_resource) -> None:
        resource = make_resource("u1", role="Senior")
        assert matcher.matches(resource, parse_requirements("2673:3(4-5)"))

    def test_other_parameters_pass(self, matcher, make_resource) -> None:
        assert matcher.matches(make_resource("u1", role="Junior"), parse_requirements("900:X"))

    def test_no_requirements(self, matcher, make_resource) -> None:
        assert matcher.matches(make_resource("u1"), [])
        assert matcher.matches(make_resource("u1"), None)

    def test_policies_are_replaceable(self, make_resource) -> None:
        """Named policies can be swapped without touching matching control flow."""
        strict = ParameterMatcher(
            ParameterConfig(),
            wildcard_policy=lambda req, res: res.role is not None,
            missing_role_policy=lambda req, res: False,
            missing_level_policy=lambda req, res: False,
        )
        bare = make_resource("bare")
        assert not strict.matches(bare, parse_requirements("115:%"))
        assert not strict.matches(bare, parse_requirements("115:Senior"))
        assert not strict.matches(bare, parse_requirements("2673:3"))
        assert strict.matches(make_resource("named", role="Senior"), parse_requirements("115:%"))

    def test_unknown_parameter_ignored_with_dictionary(self, make_resource) -> None:
        """Requirements whose id is not in the dictionary are ignored."""
        matcher = ParameterMatcher(ParameterConfig(), {"2673": "Qualification level"})
        resource = make_resource("u1", role="Junior", level=3)
        assert matcher.matches(resource, parse_requirements("115:Senior,2673:3"))
        assert not matcher.matches(resource, parse_requirements("2673:4"))

    def test_empty_dictionary_filters_as_usual(self, make_resource) -> None:
        """An empty dictionary does not mark every parameter as unknown."""
        matcher = ParameterMatcher(ParameterConfig(), {})
        resource = make_resource("u1", role="Junior", level=3)
        assert not matcher.matches(resource, parse_requirements("115:Senior"))
        assert not matcher.matches(resource, parse_requirements("2673:4"))

    def test_parameter_name(self) -> None:
        matcher = ParameterMatcher(ParameterConfig(), {"115": "Role"})
        assert matcher.parameter_name("115") == "Role"
        assert matcher.parameter_name("999") == "999"

    def test_custom_parameter_ids(self, make_resource) -> None:
        config = ParameterConfig(role_parameter_id="R", level_parameter_id="L", wildcard="*")
        matcher = ParameterMatcher(config)
        resource = make_resource("u1", role="Senior", level=2)
        assert matcher.matches(resource, parse_requirements("R:Senior,L:2"))
        assert not matcher.matches(resource, parse_requirements("R:Lead"))
        assert matcher.matches(resource, parse_requirements("R:*"))

    def test_filter_keeps_order(self, matcher, make_resource) -> None:
        resources = [
            make_resource("c", role="Senior", level=3),
            make_resource("a", role="Junior", level=3),
            make_resource("b", role="Senior", level=4),
        ]
        matched = matcher.filter(resources, parse_requirements("115:Senior"))
        assert [r.resource_id for r in matched] == ["c", "b"]
