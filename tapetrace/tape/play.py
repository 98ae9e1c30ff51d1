# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Replay a finished tape on new input values.

The tape is straight-line, so replay is a single forward pass: inputs take the
new values, constants keep theirs, every Call is re-evaluated on the replayed
values of its operands. Control flow was resolved at trace time; replaying
with inputs that would take a different path gives the traced path's answer,
and values baked in as constants (e.g. by pi nodes) are not recomputed.
"""

from __future__ import annotations

from typing import Any, Dict

from .tape import Call, Constant, Input, Tape, V


def play(tape: Tape, *args: Any) -> Any:
	"""Re-run `tape` with `args` bound to its Input entries; returns the result value."""
	inputs = tape.input_vars
	if len(args) != len(inputs):
		raise ValueError(f"tape has {len(inputs)} inputs, got {len(args)} values")
	if tape.result is None:
		raise ValueError("tape has no result")
	bound = dict(zip((v.id for v in inputs), args))
	vals: Dict[int, Any] = {}

	def value(x: Any) -> Any:
		return vals[x.id] if isinstance(x, V) else x

	for op in tape:
		if isinstance(op, Input):
			vals[op.id] = bound[op.id]
		elif isinstance(op, Constant):
			vals[op.id] = op.val
		elif isinstance(op, Call):
			vals[op.id] = value(op.fn)(*[value(a) for a in op.args])
		else:
			raise TypeError(f"cannot replay tape entry {op!r}")
	return vals[tape.result.id]


__all__ = ["play"]
