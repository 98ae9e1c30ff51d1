# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Dispatch package: resolving a callable plus concrete argument types to one
lowered method, its variadic shape and its static parameter bindings.

Public API:
  - MethodTable / DEFAULT_METHOD_TABLE / lowered / IRFunction (table)
  - declaring_scope: module a callable is declared in (table)
  - match_signature / more_specific / bind_static_params (signature)
"""

from .table import DEFAULT_METHOD_TABLE, IRFunction, MethodTable, declaring_scope, lowered
from .signature import bind_static_params, expand_params, match_signature, more_specific, signature_key

__all__ = [
	"DEFAULT_METHOD_TABLE",
	"IRFunction",
	"MethodTable",
	"declaring_scope",
	"lowered",
	"bind_static_params",
	"expand_params",
	"match_signature",
	"more_specific",
	"signature_key",
]
