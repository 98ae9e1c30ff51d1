# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
The tape: an append-only, SSA-numbered record of one traced execution.

Entries are frozen dataclasses addressed by a V handle equal to their 1-based
position. An entry is never mutated once pushed; a Call caches the value it
produced when it was pushed, so reading a tape never re-runs anything.

Only `result` (set once, at the end of a top-level trace), `meta` and `ctx`
are mutable.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from tapetrace.ir.nodes import GlobalRef, QuoteNode
from tapetrace.ir.parser import resolve_global
from tapetrace.ir.printer import format_value


class _Missing:
	def __repr__(self) -> str:
		return "<missing>"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class V:
	"""Handle of a tape entry."""
	id: int

	def __str__(self) -> str:
		return f"%{self.id}"


class Operation:
	"""Base class for tape entries; subclasses carry `id` and `val`."""
	id: int
	val: Any


@dataclass(frozen=True)
class Input(Operation):
	"""Placeholder for a top-level argument of the traced call."""
	val: Any
	id: int = 0


@dataclass(frozen=True)
class Constant(Operation):
	"""Embedded literal value."""
	val: Any
	id: int = 0


@dataclass(frozen=True)
class Call(Operation):
	"""fn(args...) where fn and args are V handles or literals; val is the cached result."""
	fn: Any
	args: Tuple[Any, ...] = ()
	val: Any = MISSING
	id: int = 0


def mkcall(fn: Any, *args: Any, val: Any = MISSING) -> Call:
	"""Build a Call entry; its value is computed when pushed unless `val` is given."""
	return Call(fn=fn, args=tuple(args), val=val)


def promote_const_value(x: Any) -> Any:
	"""Normalize an IR literal into the value placed on the tape."""
	if isinstance(x, QuoteNode):
		return x.value
	if isinstance(x, GlobalRef):
		return resolve_global(x)
	return x


class Tape:
	"""Append-only record store; `ctx` is the tracing context the tape was made for."""

	def __init__(self, ctx: Any = None) -> None:
		self.ops: List[Operation] = []
		self.result: Optional[V] = None
		self.meta: Dict[str, Any] = {}
		self.ctx = ctx

	def __len__(self) -> int:
		return len(self.ops)

	def __iter__(self) -> Iterator[Operation]:
		return iter(self.ops)

	def __getitem__(self, v: Union[V, int]) -> Operation:
		idx = v.id if isinstance(v, V) else v
		if not 1 <= idx <= len(self.ops):
			raise IndexError(f"tape has no entry %{idx}")
		return self.ops[idx - 1]

	def value(self, x: Any) -> Any:
		"""Concrete value of a handle; literals are returned unchanged."""
		return self[x].val if isinstance(x, V) else x

	def push(self, op: Operation) -> V:
		v = V(len(self.ops) + 1)
		if isinstance(op, Call) and op.val is MISSING:
			fn = self.value(op.fn)
			val = fn(*[self.value(a) for a in op.args])
			op = replace(op, val=val, id=v.id)
		else:
			op = replace(op, id=v.id)
		self.ops.append(op)
		return v

	def inputs(self, *vals: Any) -> List[V]:
		"""Register the top-level arguments; must run on an empty tape."""
		if self.ops:
			raise ValueError("inputs must be registered before any other entry")
		return [self.push(Input(val)) for val in vals]

	@property
	def input_vars(self) -> List[V]:
		return [V(op.id) for op in self.ops if isinstance(op, Input)]

	def last(self) -> V:
		"""Handle of the most recently pushed entry."""
		if not self.ops:
			raise IndexError("tape is empty")
		return V(len(self.ops))

	def set_result(self, v: V) -> None:
		self[v]  # IndexError for a handle that is not on this tape
		self.result = v

	def __repr__(self) -> str:
		lines = [f"Tape({self.ctx!r})"]
		for op in self.ops:
			lines.append(f"  {format_op(op)}")
		if self.result is not None:
			lines.append(f"  result {self.result}")
		return "\n".join(lines)


def _fmt(x: Any) -> str:
	return str(x) if isinstance(x, V) else format_value(x)


def format_op(op: Operation) -> str:
	typ = type(op.val).__name__
	if isinstance(op, Input):
		return f"inp %{op.id}::{typ}"
	if isinstance(op, Constant):
		return f"const %{op.id} = {_fmt(op.val)}::{typ}"
	if isinstance(op, Call):
		args = ", ".join(_fmt(a) for a in op.args)
		return f"%{op.id} = {_fmt(op.fn)}({args})::{typ}"
	return f"%{op.id} = {op!r}"


__all__ = [
	"MISSING",
	"V",
	"Operation",
	"Input",
	"Constant",
	"Call",
	"mkcall",
	"promote_const_value",
	"Tape",
	"format_op",
]
