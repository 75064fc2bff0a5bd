# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Host-side values the engine reads and writes.

* SliceBuffer: a caller-owned mutable contiguous buffer of one element type.
  It is the only thing statements write into, and it can also be borrowed as
  a Copy/Clone/RawRef source.
* FixedArray / Vector: owned containers. Both can be moved into a buffer
  (after which they are consumed); FixedArray has a length fixed at
  construction, which is what makes it legal for `move` without a size
  annotation. Both can also be borrowed.
* Scope: name table handed to the expander (static facts: kinds, element
  types, fixed lengths, constants) and to execution (actual values and
  run-time integers for range bounds).

The engine only ever talks to buffers through the Buffer protocol
(`length()` and `write_range()`).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Protocol, Tuple, runtime_checkable

from setslice.core.errors import LengthMismatchError, RangeError, UnknownNameError, UseAfterMoveError

Producer = Callable[[], Iterable[Any]]


@runtime_checkable
class Buffer(Protocol):
	"""What the engine needs from a target buffer."""

	elem_type: str

	def length(self) -> int:
		...

	def write_range(self, start: int, end: int, producer: Producer) -> None:
		...


class SliceBuffer:
	"""
	Mutable contiguous buffer over a Python list.

	The list is held by reference so the caller observes every write; the
	buffer never changes its own length.
	"""

	def __init__(self, elem_type: str, items: List[Any]) -> None:
		self.elem_type = elem_type
		self._items = items

	@classmethod
	def filled(cls, elem_type: str, length: int, value: Any = 0) -> "SliceBuffer":
		return cls(elem_type, [value] * length)

	def length(self) -> int:
		return len(self._items)

	def write_range(self, start: int, end: int, producer: Producer) -> None:
		"""
		Replace `[start, end)` with the producer's values.

		The producer is drained before the first element is written, so a
		failing producer or a length mismatch leaves the region untouched.
		"""
		if not 0 <= start <= end <= len(self._items):
			raise RangeError(f"write of [{start}, {end}) outside buffer of length {len(self._items)}")
		values = list(producer())
		if len(values) != end - start:
			raise LengthMismatchError(
				f"producer yielded {len(values)} value(s) for a region of {end - start}",
				expected=end - start,
				actual=len(values),
			)
		self._items[start:end] = values

	def view(self, start: int, end: int) -> Tuple[Any, ...]:
		return tuple(self._items[start:end])

	def to_list(self) -> List[Any]:
		return list(self._items)

	def __len__(self) -> int:
		return len(self._items)

	def __iter__(self) -> Iterator[Any]:
		return iter(self._items)

	def __getitem__(self, idx):
		return self._items[idx]

	def __eq__(self, other: object) -> bool:
		if isinstance(other, SliceBuffer):
			return self.elem_type == other.elem_type and self._items == other._items
		if isinstance(other, (list, tuple)):
			return self._items == list(other)
		return NotImplemented

	def __repr__(self) -> str:
		return f"SliceBuffer({self.elem_type!r}, {self._items!r})"


class Owned:
	"""An owned container; moving it out leaves it consumed."""

	def __init__(self, elem_type: str, items: Iterable[Any]) -> None:
		self.elem_type = elem_type
		self._items: Optional[List[Any]] = list(items)
		self.moved_by: Optional[int] = None

	@property
	def static_length(self) -> Optional[int]:
		return None

	@property
	def consumed(self) -> bool:
		return self._items is None

	def _live(self) -> List[Any]:
		if self._items is None:
			where = f" by statement {self.moved_by}" if self.moved_by is not None else ""
			raise UseAfterMoveError(f"use of a {type(self).__name__} after it was moved{where}", phase="execute")
		return self._items

	def length(self) -> int:
		return len(self._live())

	def view(self, start: int, end: int) -> Tuple[Any, ...]:
		return tuple(self._live()[start:end])

	def take(self, statement_index: Optional[int] = None) -> List[Any]:
		"""Transfer the elements out; any later access raises UseAfterMoveError."""
		items = self._live()
		self._items = None
		self.moved_by = statement_index
		return items

	def to_list(self) -> List[Any]:
		return list(self._live())

	def __len__(self) -> int:
		return self.length()

	def __iter__(self) -> Iterator[Any]:
		return iter(self._live())

	def __getitem__(self, idx):
		return self._live()[idx]

	def __repr__(self) -> str:
		if self._items is None:
			return f"{type(self).__name__}({self.elem_type!r}, <moved>)"
		return f"{type(self).__name__}({self.elem_type!r}, {self._items!r})"


class FixedArray(Owned):
	"""Owned container whose length is part of its type."""

	def __init__(self, elem_type: str, items: Iterable[Any]) -> None:
		super().__init__(elem_type, items)
		self._static_length = len(self._items or [])

	@property
	def static_length(self) -> Optional[int]:
		return self._static_length


class Vector(Owned):
	"""Owned container whose length is only known at run time."""


Borrowable = (SliceBuffer, Owned)


class Scope(Mapping):
	"""
	Name -> value table plus compile-time integer constants.

	Constants are what size annotations may name; they are visible to range
	bounds and list values as ordinary values too.
	"""

	def __init__(
		self,
		values: Optional[Mapping[str, Any]] = None,
		constants: Optional[Mapping[str, int]] = None,
	) -> None:
		self._values: Dict[str, Any] = dict(values or {})
		self._constants: Dict[str, int] = dict(constants or {})

	def define(self, name: str, value: Any) -> None:
		self._values[name] = value

	def define_constant(self, name: str, value: int) -> None:
		self._constants[name] = value

	def constant(self, name: str) -> Optional[int]:
		return self._constants.get(name)

	@property
	def constants(self) -> Mapping[str, int]:
		return dict(self._constants)

	def buffer(self, name: str) -> Buffer:
		value = self._lookup(name)
		if not isinstance(value, Buffer):
			raise UnknownNameError(f"'{name}' is not a slice buffer (got {type(value).__name__})")
		return value

	def container(self, name: str) -> SliceBuffer | Owned:
		value = self._lookup(name)
		if not isinstance(value, Borrowable):
			raise UnknownNameError(f"'{name}' is not a container (got {type(value).__name__})")
		return value

	def buffers(self) -> Dict[str, SliceBuffer]:
		return {name: value for name, value in self._values.items() if isinstance(value, SliceBuffer)}

	def _lookup(self, name: str) -> Any:
		if name in self._values:
			return self._values[name]
		if name in self._constants:
			return self._constants[name]
		raise UnknownNameError(f"'{name}' is not defined")

	def __getitem__(self, name: str) -> Any:
		try:
			return self._lookup(name)
		except UnknownNameError:
			raise KeyError(name) from None

	def __iter__(self) -> Iterator[str]:
		yield from self._values
		for name in self._constants:
			if name not in self._values:
				yield name

	def __len__(self) -> int:
		return len(set(self._values) | set(self._constants))


__all__ = [
	"Buffer",
	"Producer",
	"SliceBuffer",
	"Owned",
	"FixedArray",
	"Vector",
	"Scope",
]
