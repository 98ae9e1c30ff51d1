# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Error kinds raised while reading IR and while tracing.

Tracing errors are all fatal: they propagate unchanged through the driver and
out of `trace()`, which only snapshots the live tracer before re-raising.
"""

from __future__ import annotations

from typing import Any, Tuple


class TraceError(Exception):
	"""Base class for fatal tracing errors."""


class AmbiguousDispatch(TraceError):
	"""Raised when a call matches zero or several lowered methods."""

	def __init__(self, fn: Any, argtypes: Tuple[type, ...], count: int) -> None:
		self.fn = fn
		self.argtypes = tuple(argtypes)
		self.count = count
		names = ", ".join(getattr(t, "__name__", repr(t)) for t in self.argtypes)
		fname = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)
		if count == 0:
			msg = f"No IR found for {fname}({names})"
		else:
			msg = f"More than one IR found for {fname}({names}): {count} candidates"
		super().__init__(msg)


class MalformedControlFlow(TraceError):
	"""
	Raised when the CFG disagrees with the interpreter's vocabulary: an unknown
	control-transfer shape reached the driver, or a phi node has no edge for
	the block control arrived from.
	"""

	def __init__(self, message: str, node: Any = None, ir: Any = None) -> None:
		self.node = node
		self.ir = ir
		super().__init__(message)


class UnsupportedInstruction(TraceError):
	"""Raised for an instruction shape outside the closed IR vocabulary."""

	def __init__(self, instr: Any, ir: Any = None) -> None:
		self.instr = instr
		self.ir = ir
		msg = f"Unexpected expression: {instr}"
		if ir is not None:
			msg += f"\nFull IRCode:\n\n{ir}"
		super().__init__(msg)


class IRSyntaxError(ValueError):
	"""Raised for well-formed IR text that does not make sense (bad labels, unknown names)."""


class IRValidationError(ValueError):
	"""Raised when an IRCode fails structural validation."""


__all__ = [
	"TraceError",
	"AmbiguousDispatch",
	"MalformedControlFlow",
	"UnsupportedInstruction",
	"IRSyntaxError",
	"IRValidationError",
]
