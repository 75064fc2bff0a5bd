# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
lark front-end: text -> parse tree -> Block.

`parse_tree` raises lark's own UnexpectedInput; structural rules that the
grammar cannot express (empty lists, `unsafe` on a non-`ref` source, a `ref`
without a size annotation, moving a borrowed view) are enforced while
building the AST and raise SetSliceSyntaxError directly. The package-level
`parse_block` wraps both into SetSliceSyntaxError with a statement index.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from setslice.core.errors import SetSliceSyntaxError
from setslice.core.span import Span
from setslice.ranges import BoundBinary, BoundExpr, BoundName, RangeSpec, make_bound

from .ast import (
	ArrayOperand,
	Block,
	CloneSource,
	CopySource,
	ListSource,
	LiteralValue,
	MoveSource,
	NamedOperand,
	NameValue,
	Operand,
	RawRefSource,
	SizeExpr,
	SizeLiteral,
	SizeName,
	SourceSpec,
	Statement,
	Value,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

# The basic (non-contextual) lexer keeps `move`, `copy`, ... reserved in every
# position, including as a target name.
_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)

_SOURCE_BUILDERS = {
	"move_source": MoveSource,
	"copy_source": CopySource,
	"clone_source": CloneSource,
	"ref_source": RawRefSource,
}


def parse_tree(source: str) -> Tree:
	return _PARSER.parse(source)


def parse_program(source: str, file: Optional[str] = None) -> Block:
	tree = parse_tree(source)
	return _build_block(tree, file)


def _build_block(tree: Tree, file: Optional[str]) -> Block:
	statements: List[Statement] = []
	for child in tree.children:
		if isinstance(child, Tree) and _name(child) == "stmt":
			statements.append(_build_stmt(child, len(statements), file))
	return Block(statements=tuple(statements), file=file)


def _build_stmt(tree: Tree, index: int, file: Optional[str]) -> Statement:
	span = _span(tree, file)
	unsafe = False
	target: Optional[str] = None
	range_spec: Optional[RangeSpec] = None
	size: Optional[SizeExpr] = None
	source: Optional[SourceSpec] = None
	for child in tree.children:
		if isinstance(child, Token):
			if child.type == "UNSAFE":
				unsafe = True
			elif child.type == "NAME":
				target = child.value
			continue
		kind = _name(child)
		if kind == "range":
			range_spec = _build_range(child, index, file)
		elif kind == "size_annotation":
			size = _build_size(child.children[0])
		else:
			source = _build_source(child, index, file)
	if target is None:
		raise SetSliceSyntaxError("missing target: there is no slice to assign to", statement_index=index, span=span)
	if source is None:
		raise SetSliceSyntaxError(
			"there must be a non-zero number of values in a list",
			statement_index=index,
			span=span,
			expected=["value"],
		)
	if unsafe and not isinstance(source, RawRefSource):
		raise SetSliceSyntaxError(
			"moving or duplicating values into the slice is safe; `unsafe` only applies to `ref` sources",
			statement_index=index,
			span=span,
		)
	if unsafe and size is None:
		raise SetSliceSyntaxError(
			"unknown size: an unsafe `ref` statement needs a size annotation `: (N)`",
			statement_index=index,
			span=span,
			expected=["size_annotation"],
		)
	return Statement(
		index=index,
		target=target,
		source=source,
		range=range_spec,
		explicit_size=size,
		unsafe=unsafe,
		span=span,
	)


def _build_range(tree: Tree, index: int, file: Optional[str]) -> RangeSpec:
	start: Optional[BoundExpr] = None
	end: Optional[BoundExpr] = None
	inclusive = False
	seen_op = False
	for child in tree.children:
		if isinstance(child, Token) and child.type in ("DOTDOT", "DOTDOTEQ"):
			inclusive = child.type == "DOTDOTEQ"
			seen_op = True
			continue
		if seen_op:
			end = _build_bound(child, file)
		else:
			start = _build_bound(child, file)
	if inclusive and end is None:
		raise SetSliceSyntaxError(
			"inclusive range `..=` needs an end bound",
			statement_index=index,
			span=_span(tree, file),
			expected=["bound"],
		)
	return RangeSpec.from_bounds(
		None if start is None else make_bound(start),
		None if end is None else make_bound(end),
		inclusive=inclusive,
	)


def _build_bound(node, file: Optional[str]) -> BoundExpr:
	kind = _name(node)
	if kind == "bound_int":
		return int(node.children[0].value)
	if kind == "bound_name":
		token = node.children[0]
		return BoundName(token.value, _span_from_token(token, file))
	if kind in ("bound_add", "bound_sub"):
		left = _build_bound(node.children[0], file)
		right = _build_bound(node.children[1], file)
		return BoundBinary("+" if kind == "bound_add" else "-", left, right)
	raise ValueError(f"unexpected bound node: {kind}")


def _build_size(node) -> SizeExpr:
	kind = _name(node)
	token = node.children[0]
	if kind == "size_int":
		return SizeLiteral(int(token.value))
	return SizeName(token.value)


def _build_source(tree: Tree, index: int, file: Optional[str]) -> SourceSpec:
	kind = _name(tree)
	span = _span(tree, file)
	if kind == "list_source":
		values = tuple(_build_value(child, file) for child in tree.children)
		return ListSource(values=values, span=span)
	operand_node = next(child for child in tree.children if isinstance(child, Tree))
	operand = _build_operand(operand_node, index, file)
	if kind == "move_source" and isinstance(operand, NamedOperand) and (operand.borrowed or operand.range is not None):
		raise SetSliceSyntaxError(
			"`move` takes a whole owned value, not a borrowed view; use `copy` or `clone`",
			statement_index=index,
			span=span,
		)
	return _SOURCE_BUILDERS[kind](operand=operand, span=span)


def _build_operand(tree: Tree, index: int, file: Optional[str]) -> Operand:
	span = _span(tree, file)
	borrowed = any(isinstance(child, Token) and child.type == "AMP" for child in tree.children)
	if _name(tree) == "named_operand":
		name_token = next(child for child in tree.children if isinstance(child, Token) and child.type == "NAME")
		range_node = next((child for child in tree.children if isinstance(child, Tree)), None)
		range_spec = None
		if range_node is not None:
			range_spec = _build_range(range_node, index, file)
		return NamedOperand(ident=name_token.value, range=range_spec, borrowed=borrowed, span=span)
	values = tuple(_build_value(child, file) for child in tree.children if isinstance(child, Tree))
	return ArrayOperand(values=values, borrowed=borrowed, span=span)


def _build_value(node: Tree, file: Optional[str]) -> Value:
	kind = _name(node)
	token = node.children[0]
	span = _span_from_token(token, file)
	if kind == "int_value":
		return LiteralValue(int(token.value), span)
	if kind == "neg_int_value":
		return LiteralValue(-int(token.value), span)
	if kind == "float_value":
		return LiteralValue(float(token.value), span)
	if kind == "neg_float_value":
		return LiteralValue(-float(token.value), span)
	if kind == "str_value":
		return LiteralValue(ast.literal_eval(token.value), span)
	if kind == "true_value":
		return LiteralValue(True, span)
	if kind == "false_value":
		return LiteralValue(False, span)
	if kind == "name_value":
		return NameValue(token.value, span)
	raise ValueError(f"unsupported value node: {kind}")


def _span(tree: Tree, file: Optional[str]) -> Span:
	return Span.from_meta(tree.meta, file)


def _span_from_token(token: Token, file: Optional[str]) -> Span:
	return Span(
		file=file,
		line=token.line,
		column=token.column,
		end_line=token.end_line,
		end_column=token.end_column,
	)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = ["parse_program", "parse_tree"]
