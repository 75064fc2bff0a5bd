# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Statement parser entry points.

`parse_block` is the only function most callers need: it returns a Block or
raises SetSliceSyntaxError naming the offending statement (0-based index of
the `;`-separated statement the error falls in) and the grammar elements the
parser expected at that point.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from setslice.core.errors import SetSliceSyntaxError
from setslice.core.span import Span

from . import ast
from . import parser as _parser
from .ast import Block, Statement

logger = logging.getLogger(__name__)

# Strings and comments may contain `;`; skip them when counting terminators.
_TERMINATOR_SCAN = re.compile(r'"(?:\\.|[^"\\])*"|//[^\n]*|;')

# Friendlier spellings for lark terminal names in "expected ..." messages.
_TERMINAL_NAMES = {
	"NAME": "identifier",
	"INT": "integer",
	"FLOAT": "float",
	"ESCAPED_STRING": "string",
	"SEMICOLON": "';'",
	"EQUAL": "'='",
	"COMMA": "','",
	"COLON": "':'",
	"LSQB": "'['",
	"RSQB": "']'",
	"LPAR": "'('",
	"RPAR": "')'",
	"PLUS": "'+'",
	"MINUS": "'-'",
	"AMP": "'&'",
	"DOTDOT": "'..'",
	"DOTDOTEQ": "'..='",
	"UNSAFE": "'unsafe'",
	"MOVE": "'move'",
	"COPY": "'copy'",
	"CLONE": "'clone'",
	"REF": "'ref'",
	"TRUE": "'true'",
	"FALSE": "'false'",
	"$END": "end of block",
}


def statement_index_at(source: str, pos: Optional[int]) -> int:
	"""Index of the statement containing character offset `pos` (end of text when unknown)."""
	if pos is None or pos < 0:
		pos = len(source)
	count = 0
	for match in _TERMINATOR_SCAN.finditer(source, 0, pos):
		if match.group(0) == ";":
			count += 1
	return count


def _expected_names(err: UnexpectedInput) -> list[str]:
	raw: Iterable[str] = ()
	if isinstance(err, (UnexpectedToken, UnexpectedEOF)):
		raw = err.expected or ()
	elif isinstance(err, UnexpectedCharacters):
		raw = err.allowed or ()
	return sorted({_TERMINAL_NAMES.get(name, name) for name in raw})


def _describe(err: UnexpectedInput, expected: list[str]) -> str:
	if isinstance(err, UnexpectedToken):
		found = "end of block" if err.token.type == "$END" else repr(err.token.value)
		head = f"unexpected {found}"
	elif isinstance(err, UnexpectedCharacters):
		head = f"unexpected character {err.char!r}"
	else:
		head = "unexpected end of block"
	if expected:
		return f"{head}; expected one of: {', '.join(expected)}"
	return head


def _syntax_error_from_lark(err: UnexpectedInput, source: str, file: Optional[str]) -> SetSliceSyntaxError:
	pos = getattr(err, "pos_in_stream", None)
	if isinstance(err, UnexpectedToken) and err.token.type == "$END":
		pos = len(source)
	expected = _expected_names(err)
	line = getattr(err, "line", None)
	column = getattr(err, "column", None)
	# lark reports -1/"?" for positions it does not know.
	span = Span(
		file=file,
		line=line if isinstance(line, int) and line > 0 else None,
		column=column if isinstance(column, int) and column > 0 else None,
	)
	return SetSliceSyntaxError(
		_describe(err, expected),
		statement_index=statement_index_at(source, pos),
		span=span,
		expected=expected,
	)


def parse_block(source: str, file: Optional[str] = None) -> Block:
	"""Parse a statement block; raises SetSliceSyntaxError on malformed input."""
	try:
		block = _parser.parse_program(source, file)
	except UnexpectedInput as err:
		raise _syntax_error_from_lark(err, source, file) from err
	logger.debug("parsed %d statement(s) from %s", len(block), file or "<block>")
	return block


def parse_file(path: Path) -> Block:
	return parse_block(path.read_text(), str(path))


__all__ = ["ast", "Block", "Statement", "parse_block", "parse_file", "statement_index_at"]
