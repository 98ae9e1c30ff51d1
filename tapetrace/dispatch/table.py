# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Method table: where the tracer finds the lowered IR of a callable.

A callable may carry several lowered methods (one per signature). Resolution
picks the single most specific applicable method for the concrete argument
types and fails with AmbiguousDispatch when there is none or no unique winner.

IR reaches the table three ways:
  - `register(fn, ir)` with a hand-built or parsed IRCode,
  - `load(source)` for a whole textual IR module,
  - the `lowered(source)` decorator on a Python function, parsed on first
    lookup so names defined later in the function's module resolve.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from tapetrace.errors import AmbiguousDispatch
from tapetrace.ir.nodes import IRCode
from tapetrace.ir.parser import build_functions, function_names, parse_function, parse_tree
from tapetrace.ir.validate import validate_ir
from .signature import bind_static_params, match_signature, more_specific, signature_key

logger = logging.getLogger(__name__)


def declaring_scope(fn: Any) -> Optional[str]:
	"""Name of the module a callable is declared in."""
	mod = getattr(fn, "__module__", None)
	if isinstance(mod, str):
		return mod
	return getattr(type(fn), "__module__", None)


def _type_names(argtypes: Sequence[type]) -> str:
	return ", ".join(getattr(t, "__name__", repr(t)) for t in argtypes)


class IRFunction:
	"""
	A function that exists only as lowered IR (e.g. loaded from an IR module).

	Calling it traces it against its table and returns the value, so it can be
	recorded as a primitive like any Python callable.
	"""

	def __init__(self, name: str, scope: str = "__ir__", table: Optional["MethodTable"] = None) -> None:
		self.__name__ = name
		self.__qualname__ = name
		self.__module__ = scope
		self.table = table

	def __call__(self, *args: Any) -> Any:
		from tapetrace.trace.tracer import trace

		val, _ = trace(self, *args, methods=self.table)
		return val

	def __repr__(self) -> str:
		return f"<ir function {self.__module__}.{self.__name__}>"


@dataclass(frozen=True)
class _PendingSource:
	source: str
	namespace: Optional[Mapping[str, Any]]


class MethodTable:
	"""Lowered methods keyed by callable."""

	def __init__(self) -> None:
		self._methods: Dict[Any, List[IRCode]] = {}
		self._pending: Dict[Any, List[_PendingSource]] = {}

	def register(self, fn: Any, ir: IRCode) -> IRCode:
		"""Add `ir` as a method of `fn`, replacing a method with the same signature."""
		validate_ir(ir)
		key = signature_key(ir.signature)
		methods = [m for m in self._methods.get(fn, []) if signature_key(m.signature) != key]
		methods.append(ir)
		self._methods[fn] = methods
		logger.debug("registered %s(%s)%s", ir.name, _type_names(ir.signature.params), " [vararg]" if ir.signature.isva else "")
		return ir

	def lowered(self, source: str, namespace: Optional[Mapping[str, Any]] = None) -> Callable[[Any], Any]:
		"""Decorator attaching one textual IR function to a Python callable."""
		def decorate(fn: Any) -> Any:
			self._pending.setdefault(fn, []).append(_PendingSource(source, namespace))
			return fn
		return decorate

	def load(
		self,
		source: str,
		namespace: Optional[Mapping[str, Any]] = None,
		scope: str = "__ir__",
	) -> Dict[str, Any]:
		"""
		Register every function of a textual IR module.

		A name bound to a callable in `namespace` receives the IR as a method;
		other names become IRFunction objects. Returns name -> callable.
		"""
		tree = parse_tree(source)
		names = function_names(tree)
		ns = dict(namespace or {})
		functions: Dict[str, Any] = {}
		for name in names:
			if name in functions:
				continue
			existing = ns.get(name)
			if callable(existing) and not isinstance(existing, type):
				functions[name] = existing
			else:
				functions[name] = IRFunction(name, scope=scope, table=self)
		for name, ir in zip(names, build_functions(tree, ns, functions)):
			self.register(functions[name], ir)
		return functions

	def _materialize(self, fn: Any) -> None:
		pending = self._pending.pop(fn, None)
		for item in pending or ():
			ns: Dict[str, Any] = dict(getattr(fn, "__globals__", {}))
			ns.update(item.namespace or {})
			self.register(fn, parse_function(item.source, ns))

	def methods(self, fn: Any) -> List[IRCode]:
		try:
			hash(fn)
		except TypeError:
			# unhashable callables cannot carry methods
			return []
		self._materialize(fn)
		return list(self._methods.get(fn, ()))

	def resolve_ir(self, fn: Any, argtypes: Sequence[type]) -> IRCode:
		"""The unique most specific method of `fn` accepting `argtypes`."""
		argtypes = tuple(argtypes)
		applicable = [ir for ir in self.methods(fn) if match_signature(ir.signature, argtypes) is not None]
		n = len(argtypes)
		best = [
			ir for ir in applicable
			if not any(more_specific(other.signature, ir.signature, n) for other in applicable if other is not ir)
		]
		if len(best) != 1:
			raise AmbiguousDispatch(fn, argtypes, len(best))
		logger.debug("resolved %s(%s) -> %s", getattr(fn, "__name__", fn), _type_names(argtypes), best[0].name)
		return best[0]

	def is_variadic(self, fn: Any, argtypes: Sequence[type]) -> Tuple[bool, int]:
		"""(isva, nargs) of the method `fn(argtypes...)` resolves to; nargs counts `fn` itself."""
		sig = self.resolve_ir(fn, argtypes).signature
		return sig.isva, sig.nargs

	def static_params(self, ir: IRCode, values: Sequence[Any]) -> Tuple[Any, ...]:
		"""Static parameter bindings of `ir` for argument values grouped for its signature."""
		return bind_static_params(ir.signature, values)

	def __contains__(self, fn: Any) -> bool:
		return bool(self.methods(fn))


DEFAULT_METHOD_TABLE = MethodTable()


def lowered(
	source: str,
	namespace: Optional[Mapping[str, Any]] = None,
	table: Optional[MethodTable] = None,
) -> Callable[[Any], Any]:
	"""`MethodTable.lowered` on the default table (or `table`)."""
	return (table or DEFAULT_METHOD_TABLE).lowered(source, namespace)


__all__ = [
	"declaring_scope",
	"IRFunction",
	"MethodTable",
	"DEFAULT_METHOD_TABLE",
	"lowered",
]
