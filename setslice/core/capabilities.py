# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Element-type capability registry.

The expander asks two questions per Copy/Clone statement before anything
executes: "is this element type Copy?" and "is it Clone?". Types are plain
names (`Int`, `String`, `Point`, ...); the registry knows the builtin scalars
and whatever the host registers.

Copy implies Clone. Copy duplication is `copy.copy` (trivial, no side
effects); Clone duplication defaults to `copy.deepcopy` unless the type
registers its own cloner.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, Iterator, Optional


class Capability(Enum):
	"""Strongest duplication capability of an element type."""

	NONE = auto()   # Move-only; only List/Move/RawRef may target it.
	CLONE = auto()  # Explicit, possibly expensive duplication.
	COPY = auto()   # Trivial duplication.


Duplicator = Callable[[Any], Any]


@dataclass(frozen=True)
class TypeCaps:
	"""Capabilities registered for one element type."""

	name: str
	copy: bool = False
	clone: bool = False
	cloner: Optional[Duplicator] = None

	@property
	def capability(self) -> Capability:
		if self.copy:
			return Capability.COPY
		if self.clone:
			return Capability.CLONE
		return Capability.NONE


BUILTIN_COPY_TYPES = ("Int", "Float", "Bool")
BUILTIN_CLONE_TYPES = ("String",)


class CapabilityRegistry:
	"""
	Name -> TypeCaps table.

	Unknown types answer False to both queries, so a forgotten registration
	shows up as a CapabilityError rather than a silent shallow copy.
	"""

	def __init__(self, *, builtins: bool = True) -> None:
		self._types: Dict[str, TypeCaps] = {}
		if builtins:
			for name in BUILTIN_COPY_TYPES:
				self.register(name, copy=True)
			for name in BUILTIN_CLONE_TYPES:
				self.register(name, clone=True)

	def register(
		self,
		name: str,
		*,
		copy: bool = False,
		clone: bool = False,
		cloner: Optional[Duplicator] = None,
	) -> TypeCaps:
		"""Register (or replace) the capabilities of `name`."""
		caps = TypeCaps(name=name, copy=copy, clone=clone or copy or cloner is not None, cloner=cloner)
		self._types[name] = caps
		return caps

	def get(self, name: str) -> TypeCaps:
		return self._types.get(name) or TypeCaps(name=name)

	def is_copy(self, name: str) -> bool:
		return self.get(name).copy

	def is_clone(self, name: str) -> bool:
		return self.get(name).clone

	def capability(self, name: str) -> Capability:
		return self.get(name).capability

	def copier(self, name: str) -> Duplicator:
		"""Trivial duplication for a Copy type."""
		if not self.is_copy(name):
			raise ValueError(f"type '{name}' is not Copy")
		return copy.copy

	def cloner(self, name: str) -> Duplicator:
		"""Explicit duplication for a Clone type (registered cloner, else deepcopy)."""
		caps = self.get(name)
		if not caps.clone:
			raise ValueError(f"type '{name}' is not Clone")
		if caps.cloner is not None:
			return caps.cloner
		if caps.copy:
			return copy.copy
		return copy.deepcopy

	def __contains__(self, name: object) -> bool:
		return name in self._types

	def __iter__(self) -> Iterator[TypeCaps]:
		return iter(self._types.values())


__all__ = [
	"Capability",
	"CapabilityRegistry",
	"Duplicator",
	"TypeCaps",
	"BUILTIN_COPY_TYPES",
	"BUILTIN_CLONE_TYPES",
]
