# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from dataclasses import dataclass

import pytest

from setslice import set_slice
from setslice.core.capabilities import CapabilityRegistry
from setslice.core.errors import ElementTypeError, LengthMismatchError, RangeError, UnknownNameError, UseAfterMoveError
from setslice.expander import Expander
from setslice.host import FixedArray, Scope, SliceBuffer, Vector
from setslice.modes import AssignmentMode
from setslice.parser import parse_block


@dataclass
class Cell:
	value: int


def test_fill_whole_buffer_from_list() -> None:
	target = SliceBuffer.filled("Int", 3)
	set_slice("target = 1, 2, 3", Scope({"target": target}))
	assert target == [1, 2, 3]


def test_disjoint_list_writes() -> None:
	target = SliceBuffer.filled("Int", 5)
	set_slice("target[0..2] = 1, 2; target[3..5] = 4, 5", Scope({"target": target}))
	assert target == [1, 2, 0, 4, 5]


def test_move_fixed_arrays_into_regions() -> None:
	target = SliceBuffer.filled("Int", 5)
	src1 = FixedArray("Int", [7, 8])
	src2 = FixedArray("Int", [9, 10])
	ops = set_slice(
		"target[0..2] = move src1; target[3..5] = move src2",
		Scope({"target": target, "src1": src1, "src2": src2}),
	)
	assert target == [7, 8, 0, 9, 10]
	assert src1.consumed and src2.consumed
	assert src1.moved_by == 0
	assert src2.moved_by == 1
	assert [op.mode for op in ops] == [AssignmentMode.MOVE, AssignmentMode.MOVE]
	with pytest.raises(UseAfterMoveError):
		list(src1)


def test_copy_leaves_source_usable() -> None:
	target = SliceBuffer.filled("Int", 5)
	src = SliceBuffer("Int", [-1, -2])
	set_slice("target[0..2] = copy &src", Scope({"target": target, "src": src}))
	assert target == [-1, -2, 0, 0, 0]
	assert src == [-1, -2]


def test_length_mismatch_leaves_region_untouched() -> None:
	target = SliceBuffer.filled("Int", 5)
	with pytest.raises(LengthMismatchError) as excinfo:
		set_slice("target[0..2] = 1, 2, 3", Scope({"target": target}))
	err = excinfo.value
	assert (err.expected, err.actual) == (2, 3)
	assert err.statement_index == 0
	assert err.phase == "execute"
	assert "value length (3) is invalid, expected: 2" in str(err)
	assert target == [0, 0, 0, 0, 0]


def test_move_values_from_scalars_arrays_and_vectors() -> None:
	v = SliceBuffer.filled("Int", 6)
	scope = Scope(
		{
			"v": v,
			"value": 0,
			"array": FixedArray("Int", [2, 3]),
			"vec": FixedArray("Int", [4, 5, 6]),
		}
	)
	set_slice("v[0..1] = value; v[1..3] = move array; v[3..] = move vec", scope)
	assert v == [0, 2, 3, 4, 5, 6]


def test_copy_from_literals_buffers_and_arrays() -> None:
	v = SliceBuffer.filled("Int", 8)
	scope = Scope(
		{
			"v": v,
			"values": SliceBuffer("Int", [4, 5, 6]),
			"array": FixedArray("Int", [0, 2]),
			"deref": FixedArray("Int", [7, 8]),
		}
	)
	set_slice(
		"v[1..=2] = copy &[5, 3];\n"
		"v[3..6] = copy &values;\n"
		"v[..2] = copy &array;\n"
		"v[6..] = copy &deref;\n",
		scope,
	)
	assert v == [0, 2, 3, 4, 5, 6, 7, 8]
	assert scope["array"].to_list() == [0, 2]


def test_later_statements_overwrite_earlier_ones() -> None:
	v = SliceBuffer.filled("Int", 4)
	set_slice("v[0..3] = 1, 2, 3; v[1..2] = 9", Scope({"v": v}))
	assert v == [1, 9, 3, 0]


def test_same_block_gives_same_result_on_fresh_scopes() -> None:
	block = parse_block("v[..2] = move a; v[2..] = copy &b; v[1..=1] = x")

	def fresh():
		return Scope(
			{
				"v": SliceBuffer.filled("Int", 4),
				"a": FixedArray("Int", [1, 2]),
				"b": SliceBuffer("Int", [3, 4]),
				"x": 7,
			}
		)

	first, second = fresh(), fresh()
	set_slice(block, first)
	set_slice(block, second)
	assert first["v"] == second["v"] == [1, 7, 3, 4]


def test_clone_duplicates_deeply() -> None:
	registry = CapabilityRegistry()
	registry.register("Cell", clone=True)
	cells = FixedArray("Cell", [Cell(1), Cell(2)])
	v = SliceBuffer("Cell", [None, None, None])
	set_slice("v[1..] = clone &cells", Scope({"v": v, "cells": cells}), registry)
	assert v.to_list() == [None, Cell(1), Cell(2)]
	assert v[1] is not cells[0]
	cells[0].value = 10
	assert v[1] == Cell(1)
	assert not cells.consumed


def test_registered_cloner_is_applied() -> None:
	registry = CapabilityRegistry()
	registry.register("Cell", cloner=lambda cell: Cell(cell.value * 10))
	v = SliceBuffer("Cell", [None])
	set_slice("v = clone &cells", Scope({"v": v, "cells": FixedArray("Cell", [Cell(3)])}), registry)
	assert v[0] == Cell(30)


def test_raw_ref_aliases_the_same_objects() -> None:
	cells = FixedArray("Cell", [Cell(4), Cell(5), Cell(6)])
	v = SliceBuffer("Cell", [None] * 4)
	ops = set_slice("unsafe v[1..=2]: (2) = ref &cells[..2]", Scope({"v": v, "cells": cells}))
	assert v[1] is cells[0]
	assert v[2] is cells[1]
	cells[0].value = 40
	assert v[1].value == 40
	assert ops[0].mode is AssignmentMode.RAW_REF
	assert not cells.consumed


def test_raw_ref_checks_source_against_declared_size() -> None:
	cells = FixedArray("Cell", [Cell(1), Cell(2), Cell(3)])
	v = SliceBuffer("Cell", [None] * 2)
	scope = Scope({"v": v, "cells": cells})
	with pytest.raises(LengthMismatchError, match=r"value length \(3\) is invalid, expected: 2"):
		set_slice("unsafe v: (2) = ref &cells_view", Scope({"v": v, "cells_view": SliceBuffer("Cell", cells.to_list())}))
	with pytest.raises(LengthMismatchError, match=r"slice length \(1\) is invalid, expected: 2"):
		set_slice("unsafe v[..1]: (2) = ref &cells[..2]", scope)
	assert v == [None, None]


def test_move_of_vector_with_size() -> None:
	vec = Vector("Int", [1, 2])
	v = SliceBuffer.filled("Int", 3)
	set_slice("v[1..]: (2) = move vec", Scope({"v": v, "vec": vec}))
	assert v == [0, 1, 2]
	assert vec.consumed


def test_failed_move_does_not_consume_source() -> None:
	vec = Vector("Int", [1, 2, 3])
	arr = FixedArray("Int", [1, 2, 3])
	v = SliceBuffer.filled("Int", 3)
	scope = Scope({"v": v, "vec": vec, "arr": arr})
	with pytest.raises(LengthMismatchError):
		set_slice("v[..2]: (2) = move vec", scope)
	with pytest.raises(LengthMismatchError):
		set_slice("v[..2] = move arr", scope)
	assert not vec.consumed
	assert not arr.consumed
	assert v == [0, 0, 0]


def test_deferred_bounds_read_scope_integers() -> None:
	v = SliceBuffer.filled("Int", 5)
	scope = Scope({"v": v, "n": 3})
	set_slice("v[n..] = 7, 8; v[..n - 1] = 1, 2", scope)
	assert v == [1, 2, 0, 7, 8]


def test_range_error_keeps_completed_statements() -> None:
	v = SliceBuffer.filled("Int", 5)
	scope = Scope({"v": v})
	expanded = Expander().expand(parse_block("v[0..1] = 1; v[4..9] = 1, 2, 3, 4, 5; v[1..2] = 2"), scope)
	with pytest.raises(RangeError) as excinfo:
		expanded.execute(scope)
	err = excinfo.value
	assert err.statement_index == 1
	assert err.span.line == 1
	assert v == [1, 0, 0, 0, 0]
	assert [op.statement_index for op in expanded.trace] == [0]


def test_unbound_range_name_is_a_range_error() -> None:
	v = SliceBuffer.filled("Int", 2)
	with pytest.raises(RangeError, match="'k' is not defined"):
		set_slice("v[k..] = 1", Scope({"v": v}))


def test_operand_sub_range() -> None:
	v = SliceBuffer.filled("Int", 4)
	src = FixedArray("Int", [10, 20, 30])
	set_slice("v[..2] = copy &src[1..3]", Scope({"v": v, "src": src}))
	assert v == [20, 30, 0, 0]


def test_operand_range_out_of_bounds() -> None:
	v = SliceBuffer.filled("Int", 4)
	src = SliceBuffer("Int", [1, 2])
	with pytest.raises(RangeError) as excinfo:
		set_slice("v[0..1] = 5; v[..3] = copy &src[0..3]", Scope({"v": v, "src": src}))
	assert excinfo.value.statement_index == 1
	assert v == [5, 0, 0, 0]


def test_list_names_are_read_at_execution() -> None:
	v = SliceBuffer.filled("Int", 2)
	scope = Scope({"v": v, "x": 5})
	set_slice("v = x, 2", scope)
	assert v == [5, 2]


def test_value_removed_between_expand_and_execute() -> None:
	v = SliceBuffer.filled("Int", 2)
	values = {"v": v, "x": 5}
	scope = Scope(values)
	expanded = Expander().expand(parse_block("v = x, 2"), scope)
	execute_scope = Scope({"v": v})
	with pytest.raises(UnknownNameError) as excinfo:
		expanded.execute(execute_scope)
	assert excinfo.value.phase == "execute"
	assert v == [0, 0]


def test_trace_records_written_values() -> None:
	v = SliceBuffer.filled("Int", 3)
	ops = set_slice("v[1..] = copy &[4, 5]", Scope({"v": v}))
	assert len(ops) == 1
	op = ops[0]
	assert (op.target, op.start, op.end, op.length) == ("v", 1, 3, 2)
	assert op.values == (4, 5)
	assert op.mode is AssignmentMode.COPY


def test_scalar_names_are_type_checked_when_read() -> None:
	v = SliceBuffer.filled("Int", 3)
	scope = Scope({"v": v, "x": 1, "label": "one"})
	with pytest.raises(ElementTypeError) as excinfo:
		set_slice("v[..1] = x; v[1..3] = copy &[x, label]", scope)
	err = excinfo.value
	assert err.phase == "execute"
	assert err.statement_index == 1
	assert "'label' is String" in err.message
	assert v == [1, 0, 0]


def test_negative_inclusive_end_stops_the_block() -> None:
	v = SliceBuffer.filled("Int", 3)
	src = SliceBuffer("Int", [])
	with pytest.raises(RangeError, match="below 0"):
		set_slice("v[0..=n - 1] = copy &src", Scope({"v": v, "src": src, "n": 0}))
	assert v == [0, 0, 0]
