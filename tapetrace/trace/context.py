# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Tracing contexts: the policy deciding what is recorded and how.

At every call site the tracer asks the tape's context two things:

  is_primitive(f, *args)                 -> record the call, or trace into f?
  record_primitive(tape, v_f, *v_args)   -> push the call and return its handle

Subclass TracingContext (or BaseCtx) to customize either. `record_primitive`
may push several entries instead of one, e.g. to replace f(args...) with a
call to an rrule-like function plus element accesses, as long as it returns
the single handle holding the logical result; f is not called twice.

    class RRuleCtx(BaseCtx):
        def record_primitive(self, tape, v_f, *v_args):
            v_rr = tape.push(mkcall(rrule, v_f, *v_args))
            v_val = tape.push(mkcall(operator.getitem, v_rr, 0))
            self.data.setdefault("pullbacks", {})[v_val] = tape.push(mkcall(operator.getitem, v_rr, 1))
            return v_val

Contexts must not touch the tracer's frame stack; they see only the tape and
the call operands.
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, List

from tapetrace.dispatch import declaring_scope
from tapetrace.tape import Tape, V, allocate, make_tuple, mkcall

# Modules whose callables are primitives by default.
DEFAULT_PRIMITIVE_SCOPES: FrozenSet[str] = frozenset({
	"builtins",
	"operator",
	"_operator",
	"math",
	"cmath",
	"statistics",
	"functools",
	"itertools",
})

# Always primitive, whatever their module: tuple/struct construction, the
# colon-range marker and the generator wrapper.
SPECIAL_FORMS = (make_tuple, allocate, slice, map)


def _is_namedtuple_like(f: Any) -> bool:
	cls = f if isinstance(f, type) else type(f)
	return issubclass(cls, tuple) and hasattr(cls, "_fields")


class TracingContext:
	"""Base strategy: standard-library callables are primitives, recorded as one call."""

	scopes: FrozenSet[str] = DEFAULT_PRIMITIVE_SCOPES

	def is_primitive(self, f: Any, *args: Any) -> bool:
		if any(f is form for form in SPECIAL_FORMS) or _is_namedtuple_like(f):
			return True
		return declaring_scope(f) in self.scopes

	def record_primitive(self, tape: Tape, v_f: Any, *v_args: Any) -> V:
		return tape.push(mkcall(v_f, *v_args))


class BaseCtx(TracingContext):
	"""
	Default context with optional configuration.

	With an empty `primitives` list, standard-library callables (modules in
	`scopes`) and the special forms are primitives. A non-empty `primitives`
	list replaces that rule entirely: exactly those callables are primitives.
	`data` is free-form user state, also reachable as ctx[key].
	"""

	def __init__(self, primitives: Iterable[Any] = (), scopes: Iterable[str] = DEFAULT_PRIMITIVE_SCOPES) -> None:
		self.primitives: List[Any] = list(primitives)
		self.scopes = frozenset(scopes)
		self.data: Dict[Any, Any] = {}

	def is_primitive(self, f: Any, *args: Any) -> bool:
		if self.primitives:
			return any(f is p or f == p for p in self.primitives)
		return super().is_primitive(f, *args)

	def __getitem__(self, key: Any) -> Any:
		return self.data[key]

	def __setitem__(self, key: Any, value: Any) -> None:
		self.data[key] = value

	def __repr__(self) -> str:
		return f"BaseCtx({len(self.primitives)} primitives, {len(self.data)} entries)"


_FALLBACK_CTX = BaseCtx()


def as_context(ctx: Any) -> TracingContext:
	"""Contexts that are not TracingContexts behave like BaseCtx()."""
	return ctx if isinstance(ctx, TracingContext) else _FALLBACK_CTX


def is_primitive(ctx: Any, f: Any, *args: Any) -> bool:
	return as_context(ctx).is_primitive(f, *args)


def record_primitive(tape: Tape, v_f: Any, *v_args: Any) -> V:
	return as_context(tape.ctx).record_primitive(tape, v_f, *v_args)


__all__ = [
	"DEFAULT_PRIMITIVE_SCOPES",
	"SPECIAL_FORMS",
	"TracingContext",
	"BaseCtx",
	"as_context",
	"is_primitive",
	"record_primitive",
]
