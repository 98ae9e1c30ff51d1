# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Signature matching rules used to pick a lowered method for concrete argument types.

Rules:
- A class parameter accepts any subclass of itself.
- `object` / `typing.Any` accept anything.
- A TypeVar parameter binds to the runtime type, respecting its bound or
  constraints; every occurrence of the same TypeVar must bind to the same type.
- A variadic signature accepts `nfixed` or more arguments; each trailing
  argument is matched against the last parameter.
- Among applicable methods, `a` is more specific than `b` when each of a's
  parameter upper bounds is a subclass of b's and they are not all equal; on
  an exact tie a fixed-arity method beats a variadic one.
"""

from __future__ import annotations

import typing
from typing import Any, Dict, Optional, Sequence, Tuple, TypeVar

from tapetrace.ir.nodes import Signature


def _as_class(p: Any) -> type:
	if isinstance(p, type):
		return p
	origin = typing.get_origin(p)
	return origin if isinstance(origin, type) else object


def _upper(p: Any) -> type:
	if isinstance(p, TypeVar):
		return _as_class(p.__bound__) if p.__bound__ is not None else object
	if p is Any:
		return object
	return _as_class(p)


def _subclass(t: type, p: Any) -> bool:
	try:
		return issubclass(t, _as_class(p))
	except TypeError:
		return False


def match_param(p: Any, t: type, bindings: Dict[TypeVar, type]) -> bool:
	if isinstance(p, TypeVar):
		if p in bindings:
			return bindings[p] is t
		if p.__bound__ is not None and not _subclass(t, p.__bound__):
			return False
		if p.__constraints__ and not any(_subclass(t, c) for c in p.__constraints__):
			return False
		bindings[p] = t
		return True
	if p is object or p is Any:
		return True
	return _subclass(t, p)


def expand_params(sig: Signature, n: int) -> Optional[Tuple[Any, ...]]:
	"""Parameter list `sig` presents to an n-argument call, or None if the arity is wrong."""
	if sig.isva:
		if n < sig.nfixed:
			return None
		return sig.params[:-1] + (sig.params[-1],) * (n - sig.nfixed)
	return sig.params if n == len(sig.params) else None


def match_signature(sig: Signature, argtypes: Sequence[type]) -> Optional[Dict[TypeVar, type]]:
	"""Static parameter bindings when `argtypes` are accepted by `sig`, else None."""
	params = expand_params(sig, len(argtypes))
	if params is None:
		return None
	bindings: Dict[TypeVar, type] = {}
	for p, t in zip(params, argtypes):
		if not match_param(p, t, bindings):
			return None
	return bindings


def more_specific(a: Signature, b: Signature, n: int) -> bool:
	"""True if `a` is strictly more specific than `b` for an n-argument call."""
	pa = expand_params(a, n)
	pb = expand_params(b, n)
	if pa is None or pb is None:
		return False
	ua = [_upper(p) for p in pa]
	ub = [_upper(p) for p in pb]
	if not all(issubclass(x, y) for x, y in zip(ua, ub)):
		return False
	if ua != ub:
		return True
	return b.isva and not a.isva


def signature_key(sig: Signature) -> Tuple[Any, ...]:
	"""Identity of a signature for redefinition; TypeVars compare by name and bound."""
	def norm(p: Any) -> Any:
		if isinstance(p, TypeVar):
			return ("typevar", p.__name__, p.__bound__, p.__constraints__)
		return p
	return (tuple(norm(p) for p in sig.params), sig.isva)


def bind_static_params(sig: Signature, values: Sequence[Any]) -> Tuple[Any, ...]:
	"""
	Static parameter values for a call already grouped for `sig`: when variadic,
	the last value is the tuple of trailing arguments. Unbound static parameters
	are returned as the TypeVar itself.
	"""
	if sig.isva:
		tail = values[-1] if values else ()
		types = [type(v) for v in values[:-1]] + [type(v) for v in tail]
	else:
		types = [type(v) for v in values]
	bindings = match_signature(sig, types) or {}
	return tuple(bindings.get(tv, tv) for tv in sig.sparams)


__all__ = [
	"match_param",
	"expand_params",
	"match_signature",
	"more_specific",
	"signature_key",
	"bind_static_params",
]
