# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command-line front-end.

	setslice BLOCK [--scope SCOPE.json] [--check] [--json] [-v]

BLOCK is a statement block file. SCOPE.json describes the values the block
runs against:

	{
	  "types":     {"Point": {"copy": false, "clone": true}},
	  "constants": {"N": 2},
	  "values": {
	    "v":   {"kind": "slice", "type": "Int", "items": [0, 0, 0, 0]},
	    "arr": {"kind": "array", "type": "Int", "items": [1, 2]},
	    "vec": {"kind": "vec",   "type": "Int", "items": [3, 4]},
	    "n":   2
	  }
	}

With --check the block is parsed and expanded but not executed. With --json
the driver prints one JSON document (exit_code, diagnostics, buffers,
operations); otherwise buffers go to stdout and diagnostics to stderr.

Exit codes: 0 success, 1 the block produced a diagnostic, 2 unreadable input.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from setslice.core.capabilities import CapabilityRegistry
from setslice.core.diagnostics import Diagnostic
from setslice.core.errors import SetSliceError
from setslice.expander import Expander, Operation
from setslice.host import FixedArray, Scope, SliceBuffer, Vector
from setslice.parser import parse_block

logger = logging.getLogger(__name__)

_CONTAINER_KINDS = {
	"slice": SliceBuffer,
	"array": FixedArray,
	"vec": Vector,
}


class ScopeFileError(ValueError):
	"""The scope document is not valid JSON or does not follow the schema."""


def load_scope_json(path: Path) -> Tuple[Scope, CapabilityRegistry]:
	try:
		data = json.loads(path.read_text())
	except json.JSONDecodeError as err:
		raise ScopeFileError(f"{path}: invalid JSON: {err}") from err
	return scope_from_dict(data, origin=str(path))


def scope_from_dict(data: Any, origin: str = "<scope>") -> Tuple[Scope, CapabilityRegistry]:
	"""Build a Scope and CapabilityRegistry from a decoded scope document."""
	if not isinstance(data, dict):
		raise ScopeFileError(f"{origin}: top level must be an object")
	registry = CapabilityRegistry()
	for name, caps in (data.get("types") or {}).items():
		if not isinstance(caps, dict):
			raise ScopeFileError(f"{origin}: types.{name} must be an object")
		registry.register(name, copy=bool(caps.get("copy", False)), clone=bool(caps.get("clone", False)))

	constants: Dict[str, int] = {}
	for name, value in (data.get("constants") or {}).items():
		if isinstance(value, bool) or not isinstance(value, int):
			raise ScopeFileError(f"{origin}: constants.{name} must be an integer")
		constants[name] = value

	scope = Scope(constants=constants)
	for name, spec in (data.get("values") or {}).items():
		scope.define(name, _value_from_json(name, spec, origin))
	return scope, registry


def _value_from_json(name: str, spec: Any, origin: str) -> Any:
	if not isinstance(spec, dict):
		return spec
	kind = spec.get("kind")
	cls = _CONTAINER_KINDS.get(kind)
	if cls is None:
		raise ScopeFileError(
			f"{origin}: values.{name}.kind must be one of {', '.join(sorted(_CONTAINER_KINDS))}, got {kind!r}"
		)
	elem_type = spec.get("type")
	items = spec.get("items")
	if not isinstance(elem_type, str) or not isinstance(items, list):
		raise ScopeFileError(f"{origin}: values.{name} needs a string 'type' and a list 'items'")
	return cls(elem_type, list(items))


def _buffers_to_json(scope: Scope) -> Dict[str, List[Any]]:
	return {name: buf.to_list() for name, buf in sorted(scope.buffers().items())}


def _operation_to_json(op: Operation) -> Dict[str, Any]:
	return {
		"statement": op.statement_index,
		"target": op.target,
		"start": op.start,
		"end": op.end,
		"mode": op.mode.keyword,
	}


def run_block(
	source_text: str,
	scope: Scope,
	registry: CapabilityRegistry,
	*,
	file: Optional[str] = None,
	check_only: bool = False,
) -> Tuple[List[Diagnostic], List[Operation]]:
	"""Parse/expand/execute and collect diagnostics instead of raising."""
	operations: List[Operation] = []
	expanded = None
	try:
		block = parse_block(source_text, file)
		expanded = Expander(registry).expand(block, scope)
		if check_only:
			return [], operations
		operations = expanded.execute(scope)
	except SetSliceError as err:
		if expanded is not None:
			operations = list(expanded.trace)
		return [err.diagnostic], operations
	return [], operations


def main(argv: Optional[List[str]] = None) -> int:
	"""
	Parse a block file, expand it, and (unless --check) execute it against the
	scope document. Prints resulting buffers or diagnostics.
	"""
	parser = argparse.ArgumentParser(prog="setslice", description="Expand and run slice assignment blocks")
	parser.add_argument("block", type=Path, help="Path to the statement block")
	parser.add_argument("--scope", type=Path, help="JSON scope document (buffers, sources, constants, types)")
	parser.add_argument("--check", action="store_true", help="Parse and expand only; do not execute")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit a JSON document (exit_code/diagnostics/buffers/operations)",
	)
	parser.add_argument("-v", "--verbose", action="store_true", help="Log each expanded and executed statement")
	args = parser.parse_args(argv)

	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)

	try:
		source_text = args.block.read_text()
		if args.scope is not None:
			scope, registry = load_scope_json(args.scope)
		else:
			scope, registry = Scope(), CapabilityRegistry()
	except (OSError, ScopeFileError) as err:
		if args.json:
			print(json.dumps({"exit_code": 2, "diagnostics": [_input_diag(str(err))], "buffers": {}, "operations": []}))
		else:
			print(f"setslice: {err}", file=sys.stderr)
		return 2

	logger.info("running %s (%s)", args.block, "check" if args.check else "execute")
	diagnostics, operations = run_block(
		source_text,
		scope,
		registry,
		file=str(args.block),
		check_only=args.check,
	)
	exit_code = 1 if diagnostics else 0

	if args.json:
		payload: Mapping[str, Any] = {
			"exit_code": exit_code,
			"diagnostics": [d.to_json() for d in diagnostics],
			"buffers": _buffers_to_json(scope),
			"operations": [_operation_to_json(op) for op in operations],
		}
		print(json.dumps(payload))
		return exit_code

	for diag in diagnostics:
		print(diag.render(), file=sys.stderr)
	if not args.check:
		for name, items in _buffers_to_json(scope).items():
			print(f"{name} = {items!r}")
	return exit_code


def _input_diag(message: str) -> Dict[str, Any]:
	return {
		"phase": "input",
		"code": None,
		"message": message,
		"severity": "error",
		"file": None,
		"line": None,
		"column": None,
		"statement": None,
		"notes": [],
	}


__all__ = ["main", "run_block", "load_scope_json", "scope_from_dict", "ScopeFileError"]
