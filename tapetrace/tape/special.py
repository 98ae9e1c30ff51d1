# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Helper primitives the tracer itself records.

`make_tuple` groups variadic arguments; `allocate` is what a `new` instruction
is rewritten to. Neither lives in a standard scope, so the default context
lists them as always-primitive special forms.
"""

from __future__ import annotations

import dataclasses
import inspect
from typing import Any, List, Tuple


def make_tuple(*args: Any) -> Tuple[Any, ...]:
	return tuple(args)


def _field_names(cls: type) -> List[str]:
	if dataclasses.is_dataclass(cls):
		return [f.name for f in dataclasses.fields(cls)]
	names: List[str] = []
	for klass in reversed(cls.__mro__):
		slots = vars(klass).get("__slots__", ())
		if isinstance(slots, str):
			slots = (slots,)
		names.extend(s for s in slots if s not in ("__dict__", "__weakref__") and s not in names)
	if names:
		return names
	for klass in reversed(cls.__mro__):
		for name in inspect.get_annotations(klass):
			if name not in names:
				names.append(name)
	return names


def allocate(cls: type, *fields: Any) -> Any:
	"""
	Construct `cls` from field values in declaration order without running __init__.

	Namedtuples (and other tuple subclasses) are built positionally; otherwise
	fields come from dataclass fields, then __slots__, then annotations.
	"""
	if issubclass(cls, tuple):
		return cls(*fields) if hasattr(cls, "_fields") else cls(fields)
	names = _field_names(cls)
	if len(names) != len(fields):
		raise TypeError(f"allocate: {cls.__name__} has {len(names)} fields, got {len(fields)} values")
	obj = cls.__new__(cls)
	for name, value in zip(names, fields):
		object.__setattr__(obj, name, value)
	return obj


__all__ = ["make_tuple", "allocate"]
