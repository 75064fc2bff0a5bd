# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Core pieces shared by every stage: spans, diagnostics, errors, capabilities."""

from .capabilities import Capability, CapabilityRegistry, TypeCaps
from .diagnostics import Diagnostic
from .errors import (
	CapabilityError,
	ElementTypeError,
	LengthMismatchError,
	RangeError,
	SetSliceError,
	SetSliceSyntaxError,
	StaticSizeError,
	UnknownNameError,
	UnsafeRequiredError,
	UseAfterMoveError,
)
from .span import Span

__all__ = [
	"Capability",
	"CapabilityRegistry",
	"TypeCaps",
	"Diagnostic",
	"Span",
	"SetSliceError",
	"SetSliceSyntaxError",
	"StaticSizeError",
	"CapabilityError",
	"UnsafeRequiredError",
	"ElementTypeError",
	"UnknownNameError",
	"UseAfterMoveError",
	"RangeError",
	"LengthMismatchError",
]
