# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Post-mortem access to the most recent failed trace.

`trace()` stores its tracer here right before re-raising an error; each
failure overwrites the previous one. Meant for interactive inspection only:

    >>> trace(f, 1.0)
    AmbiguousDispatch: No IR found for h(float)
    >>> print_failure_stack()
    [1] mymod.g(float)  @ g #1
    [2] mymod.f(float)  @ f #2
"""

from __future__ import annotations

from typing import Any, Optional, TextIO, Tuple

from tapetrace.ir.printer import format_value
from .frame import frame_values

_LATEST_TRACER: Optional[Any] = None


def record_failure(tracer: Any) -> None:
	global _LATEST_TRACER
	_LATEST_TRACER = tracer


def latest_failed_trace() -> Any:
	"""The Tracer of the most recent failed `trace()` call."""
	if _LATEST_TRACER is None:
		raise LookupError("no failed trace has been recorded")
	return _LATEST_TRACER


def latest_failure_state() -> Tuple[Any, Any, Tuple[Any, ...]]:
	"""(tracer, ir, v_fargs) of the innermost frame active at the failure."""
	tracer = latest_failed_trace()
	if not tracer.stack:
		raise LookupError("the failed trace has no active frame")
	frame = tracer.stack[-1]
	return tracer, frame.ir, frame.v_fargs


def print_failure_stack(file: Optional[TextIO] = None) -> None:
	"""Print the frames of the latest failed trace, innermost first."""
	tracer = latest_failed_trace()
	for i, frame in enumerate(reversed(tracer.stack), start=1):
		fn, *args = frame_values(tracer.tape, frame)
		types = ", ".join(type(a).__name__ for a in args)
		print(f"[{i}] {format_value(fn)}({types})  @ {frame.ir.name} #{frame.bi}", file=file)


__all__ = [
	"record_failure",
	"latest_failed_trace",
	"latest_failure_state",
	"print_failure_stack",
]
