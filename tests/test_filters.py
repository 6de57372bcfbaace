import pytest

from fuzzhawk.scanner.analyzers import AnalysisResult
from fuzzhawk.scanner.core.filters import ExclusionPolicy


def result(size, lines, matched=False):
    return AnalysisResult(byte_count=size, line_count=lines, matched=matched)


@pytest.mark.parametrize("lines,matched", [(0, False), (7, False), (7, True)])
def test_exact_size_excludes_regardless_of_other_fields(lines, matched):
    policy = ExclusionPolicy(exclude_size=1024)

    assert policy.excludes(result(1024, lines, matched)) is True


@pytest.mark.parametrize("size", [1023, 1025, 0])
def test_other_sizes_are_not_excluded_by_size_rule(size):
    policy = ExclusionPolicy(exclude_size=1024)

    assert policy.excludes(result(size, 3)) is False


def test_exact_line_count_excludes():
    policy = ExclusionPolicy(exclude_lines=1)

    assert policy.excludes(result(404, 1)) is True
    assert policy.excludes(result(200, 10)) is False


def test_pattern_match_excludes():
    policy = ExclusionPolicy(pattern="Not Found")

    assert policy.excludes(result(10, 1, matched=True)) is True
    assert policy.excludes(result(10, 1, matched=False)) is False


def test_filters_are_or_combined():
    policy = ExclusionPolicy(exclude_size=100, exclude_lines=5, pattern="x")

    assert policy.reasons(result(100, 5, matched=True)) == ["size=100", "lines=5", "regex"]
    assert policy.reasons(result(100, 1)) == ["size=100"]
    assert policy.reasons(result(1, 5)) == ["lines=5"]
    assert policy.reasons(result(1, 1)) == []


@pytest.mark.parametrize("kwargs", [
    {},
    {"exclude_size": -1, "exclude_lines": -1, "pattern": ""},
    {"exclude_size": None, "exclude_lines": None, "pattern": None},
])
def test_unset_filters_never_exclude(kwargs):
    policy = ExclusionPolicy(**kwargs)

    assert policy.has_pattern is False
    assert policy.excludes(result(0, 0)) is False
    assert policy.excludes(result(1024, 1)) is False


def test_zero_is_a_valid_filter_value():
    policy = ExclusionPolicy(exclude_size=0, exclude_lines=0)

    assert policy.excludes(result(0, 3)) is True
    assert policy.excludes(result(3, 0)) is True
