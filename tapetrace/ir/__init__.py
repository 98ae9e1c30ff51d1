# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
IR package: the lowered CFG the tracer interprets.

Public API:
  - node classes and IRCode (nodes)
  - parse_ir / parse_function: textual IR reader (parser)
  - format_ir: textual IR writer (printer)
  - validate_ir: structural checks (validate)
"""

from .nodes import (
	IRNode,
	Argument,
	SSAValue,
	StaticParameter,
	GlobalRef,
	QuoteNode,
	Expr,
	PhiNode,
	PiNode,
	GotoNode,
	GotoIfNot,
	ReturnNode,
	CONTROL_FLOW_NODES,
	NOOP_HEADS,
	is_control_flow,
	is_expr,
	NewNodeInfo,
	NewNodes,
	Block,
	Signature,
	IRCode,
)
from .parser import parse_tree, function_names, build_functions, parse_ir, parse_function, resolve_global
from .printer import format_ir, format_stmt, format_value
from .validate import validate_ir

__all__ = [
	"IRNode",
	"Argument", "SSAValue", "StaticParameter", "GlobalRef", "QuoteNode",
	"Expr", "PhiNode", "PiNode",
	"GotoNode", "GotoIfNot", "ReturnNode",
	"CONTROL_FLOW_NODES", "NOOP_HEADS", "is_control_flow", "is_expr",
	"NewNodeInfo", "NewNodes", "Block", "Signature", "IRCode",
	"parse_tree", "function_names", "build_functions", "parse_ir", "parse_function", "resolve_global",
	"format_ir", "format_stmt", "format_value",
	"validate_ir",
]
