# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import pytest

from setslice.core.errors import SetSliceSyntaxError
from setslice.parser import parse_block, parse_file, statement_index_at


def _syntax_error(src: str) -> SetSliceSyntaxError:
	with pytest.raises(SetSliceSyntaxError) as excinfo:
		parse_block(src)
	return excinfo.value


def test_missing_terminator_reports_expected_elements() -> None:
	err = _syntax_error("v = 1 w = 2")
	assert err.statement_index == 0
	assert "';'" in err.expected
	assert "','" in err.expected
	assert err.phase == "parser"
	assert err.code == "E001"


def test_error_at_end_names_last_statement() -> None:
	err = _syntax_error("a = 1; b = 2; c = copy")
	assert err.statement_index == 2
	assert "identifier" in err.expected
	assert "unexpected end of block" in err.message


def test_unexpected_character_is_a_syntax_error() -> None:
	err = _syntax_error('v = "x;y"; w = 1 $')
	assert err.statement_index == 1
	assert "'$'" in err.message
	assert err.span.line == 1


def test_keywords_cannot_be_targets() -> None:
	err = _syntax_error("move = 1")
	assert err.statement_index == 0
	assert "identifier" in err.expected


def test_empty_value_list() -> None:
	err = _syntax_error("a = 1; v = ;")
	assert err.statement_index == 1
	assert "non-zero number of values" in err.message


def test_unsafe_only_applies_to_ref() -> None:
	err = _syntax_error("unsafe v: (2) = 1, 2")
	assert err.statement_index == 0
	assert "`unsafe` only applies to `ref`" in err.message


def test_unsafe_ref_requires_a_size() -> None:
	err = _syntax_error("v = 1; unsafe v = ref &cells")
	assert err.statement_index == 1
	assert "unknown size" in err.message


def test_inclusive_range_requires_end() -> None:
	err = _syntax_error("v[1..=] = 1")
	assert err.statement_index == 0
	assert "needs an end bound" in err.message


@pytest.mark.parametrize("src", ["v = move &arr", "v = move arr[0..1]"])
def test_move_takes_whole_owned_values(src: str) -> None:
	err = _syntax_error(src)
	assert "use `copy` or `clone`" in err.message


def test_operand_range_errors_report_statement() -> None:
	err = _syntax_error("a = 1; b = 2; v = copy &src[0..=]")
	assert err.statement_index == 2


def test_statement_index_skips_strings_and_comments() -> None:
	src = 'a = ";;"; // ; ;\nb = 1; c'
	assert statement_index_at(src, src.index("c")) == 2
	assert statement_index_at(src, None) == 2
	assert statement_index_at(src, 0) == 0


def test_parse_file_attributes_errors(tmp_path) -> None:
	path = tmp_path / "bad.ss"
	path.write_text("v = 1;\nv = ,\n")
	with pytest.raises(SetSliceSyntaxError) as excinfo:
		parse_file(path)
	err = excinfo.value
	assert err.statement_index == 1
	assert err.span.file == str(path)
	assert err.span.line == 2
	assert err.diagnostic.to_json()["file"] == str(path)
