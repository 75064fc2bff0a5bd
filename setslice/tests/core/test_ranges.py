# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Range resolution: literal folding, deferred bounds, and the 0 <= start <= end <= length invariant."""

import pytest

from setslice.core.errors import RangeError
from setslice.ranges import (
	BoundBinary,
	BoundName,
	DeferredBound,
	LiteralBound,
	RangeKind,
	RangeSpec,
	make_bound,
	resolve_range,
)


def _lit(a=None, b=None, inclusive=False):
	return RangeSpec.from_bounds(
		None if a is None else LiteralBound(a),
		None if b is None else LiteralBound(b),
		inclusive=inclusive,
	)


def test_missing_range_is_full() -> None:
	assert resolve_range(None, 5) == (0, 5)
	assert resolve_range(RangeSpec.full(), 5) == (0, 5)


def test_each_kind_resolves_to_half_open_pair() -> None:
	assert resolve_range(_lit(2, None), 5) == (2, 5)
	assert resolve_range(_lit(None, 3), 5) == (0, 3)
	assert resolve_range(_lit(1, 3), 5) == (1, 3)
	assert resolve_range(_lit(1, 2, inclusive=True), 5) == (1, 3)


def test_from_bounds_picks_kind() -> None:
	assert _lit().kind is RangeKind.FULL
	assert _lit(1).kind is RangeKind.FROM
	assert _lit(None, 1).kind is RangeKind.TO
	assert _lit(0, 1).kind is RangeKind.FROM_TO
	assert _lit(0, 1, inclusive=True).kind is RangeKind.FROM_TO_INCLUSIVE
	# `..=e` starts at zero.
	assert _lit(None, 1, inclusive=True).start == LiteralBound(0)


def test_bounds_must_match_kind() -> None:
	with pytest.raises(ValueError):
		RangeSpec(RangeKind.FROM)
	with pytest.raises(ValueError):
		RangeSpec(RangeKind.FULL, LiteralBound(0))
	with pytest.raises(ValueError):
		RangeSpec.from_bounds(LiteralBound(0), None, inclusive=True)


def test_constant_bounds_fold_to_literals() -> None:
	assert make_bound(BoundBinary("+", 1, 2)) == LiteralBound(3)
	assert make_bound(BoundBinary("-", BoundBinary("+", 4, 4), 3)) == LiteralBound(5)


def test_bounds_with_names_are_deferred() -> None:
	bound = make_bound(BoundBinary("-", BoundName("n"), BoundBinary("+", 1, 1)))
	assert isinstance(bound, DeferredBound)
	assert list(bound.names()) == ["n"]
	assert str(bound) == "n - 2"


def test_deferred_bounds_evaluate_against_values() -> None:
	spec = RangeSpec.from_bounds(make_bound(BoundName("n")), make_bound(BoundBinary("+", BoundName("n"), 2)))
	assert resolve_range(spec, 10, {"n": 3}) == (3, 5)
	assert sorted(spec.names()) == ["n", "n"]
	assert not spec.is_static


def test_static_length() -> None:
	assert _lit(1, 4).static_length() == 3
	assert _lit(1, 4, inclusive=True).static_length() == 4
	assert _lit(None, 2).static_length() == 2
	assert _lit(2).static_length() is None
	assert RangeSpec.full().static_length() is None


def test_range_str() -> None:
	assert str(_lit(1, 2, inclusive=True)) == "[1..=2]"
	assert str(_lit(None, 2)) == "[..2]"
	assert str(RangeSpec.full()) == "[..]"


@pytest.mark.parametrize(
	"spec, length",
	[
		(_lit(3, 2), 5),
		(_lit(0, 6), 5),
		(_lit(6), 5),
		(_lit(4, 5, inclusive=True), 5),
	],
)
def test_invariant_violations_raise_range_error(spec, length) -> None:
	with pytest.raises(RangeError):
		resolve_range(spec, length)


def test_negative_start_from_deferred_bound() -> None:
	spec = RangeSpec.from_bounds(make_bound(BoundBinary("-", BoundName("n"), 3)), None)
	with pytest.raises(RangeError, match="below 0"):
		resolve_range(spec, 5, {"n": 1})


def test_negative_inclusive_end_is_not_an_empty_range() -> None:
	spec = RangeSpec.from_bounds(LiteralBound(0), make_bound(BoundBinary("-", BoundName("n"), 1)), inclusive=True)
	with pytest.raises(RangeError, match="inclusive end -1"):
		resolve_range(spec, 5, {"n": 0})
	assert resolve_range(spec, 5, {"n": 1}) == (0, 1)
	# `[0..n]` with n = 0 is still a legal empty region.
	assert resolve_range(_lit(0, 0), 5) == (0, 0)


def test_unknown_or_non_integer_bound_names() -> None:
	spec = RangeSpec.from_bounds(make_bound(BoundName("n")), None)
	with pytest.raises(RangeError, match="not defined"):
		resolve_range(spec, 5, {})
	with pytest.raises(RangeError, match="must be an integer"):
		resolve_range(spec, 5, {"n": True})
	with pytest.raises(RangeError, match="must be an integer"):
		resolve_range(spec, 5, {"n": "2"})
