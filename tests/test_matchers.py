import re
from dataclasses import dataclass

import pytest

from mockwright import ConfigurationError, It, MatcherError, Range, Ref
from mockwright._matchers import AnyRef, AnyValue, Exact, as_matcher, matches


@dataclass
class Point:
    x: int
    y: int


def test_exact_uses_value_equality() -> None:
    matcher = as_matcher(Point(1, 2))

    assert isinstance(matcher, Exact)
    assert matches(matcher, Point(1, 2))
    assert not matches(matcher, Point(2, 1))
    assert not matches(matcher, "Point(1, 2)")


def test_matchers_pass_through_coercion() -> None:
    any_value = It.is_any()

    assert as_matcher(any_value) is any_value


@pytest.mark.parametrize(
    ("kind", "value", "expected"),
    [
        (Range.INCLUSIVE, 0, True),
        (Range.INCLUSIVE, 10, True),
        (Range.INCLUSIVE, 5, True),
        (Range.INCLUSIVE, -1, False),
        (Range.INCLUSIVE, 11, False),
        (Range.EXCLUSIVE, 0, False),
        (Range.EXCLUSIVE, 10, False),
        (Range.EXCLUSIVE, 1, True),
        (Range.EXCLUSIVE, 9, True),
        (Range.EXCLUSIVE, 9.5, True),
    ],
)
def test_range_bounds(kind: Range, value: float, expected: bool) -> None:
    assert matches(It.is_in_range(0, 10, kind), value) is expected


def test_range_defaults_to_inclusive() -> None:
    assert matches(It.is_in_range("a", "c"), "c")


def test_range_on_non_ordinal_argument_raises() -> None:
    with pytest.raises(MatcherError, match="cannot compare 'five'") as exc_info:
        matches(It.is_in_range(0, 10), "five")

    assert isinstance(exc_info.value.__cause__, TypeError)
    assert isinstance(exc_info.value, ConfigurationError)


def test_range_rejects_bad_bounds() -> None:
    with pytest.raises(ConfigurationError, match="not ordinal"):
        It.is_in_range(0, "10")
    with pytest.raises(ConfigurationError, match="above high"):
        It.is_in_range(10, 0)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("a", True), ("ABCD", True), ("xyz", False), ("", False)],
)
def test_regex_ignore_case(value: str, expected: bool) -> None:
    assert matches(It.is_regex("[a-d]+", re.IGNORECASE), value) is expected


def test_regex_case_sensitive_by_default() -> None:
    assert not matches(It.is_regex("^[a-d]+$"), "ABCD")


def test_regex_accepts_compiled_pattern_and_extra_flags() -> None:
    matcher = It.is_regex(re.compile("^ping$"), re.IGNORECASE)

    assert matches(matcher, "PING")


def test_regex_non_string_is_no_match() -> None:
    matcher = It.is_regex(r"\d+")

    assert not matches(matcher, 123)
    assert not matches(matcher, None)


def test_regex_invalid_pattern() -> None:
    with pytest.raises(ConfigurationError, match="invalid pattern"):
        It.is_regex("[unclosed")


def test_predicate() -> None:
    even = It.matches(lambda i: i % 2 == 0)

    assert matches(even, 4)
    assert not matches(even, 5)


def test_predicate_error_is_wrapped() -> None:
    def explode(value: object) -> bool:
        raise KeyError(value)

    with pytest.raises(MatcherError, match="explode raised") as exc_info:
        matches(It.matches(explode), "key")

    assert isinstance(exc_info.value.__cause__, KeyError)


def test_predicate_must_be_callable() -> None:
    with pytest.raises(ConfigurationError, match="must be callable"):
        It.matches("not callable")  # type: ignore[arg-type]


def test_any_value() -> None:
    assert matches(AnyValue(), None)
    assert matches(It.is_any(str), "text")
    assert not matches(It.is_any(str), 1)


def test_any_ref_matches_slots_only() -> None:
    assert matches(AnyRef(), Ref())
    assert matches(It.is_any_ref(), Ref("content"))
    assert not matches(It.is_any_ref(), "content")


def test_membership_helpers() -> None:
    assert matches(It.is_in(["a", "b"]), "a")
    assert not matches(It.is_in(["a", "b"]), "c")
    assert matches(It.is_not_in(["a", "b"]), "c")
    assert matches(It.is_not_none(), 0)
    assert not matches(It.is_not_none(), None)
