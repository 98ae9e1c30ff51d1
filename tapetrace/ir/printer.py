# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Textual rendering of IRCode in the syntax `tapetrace.ir.parser` reads.

Literal objects without a textual form (arbitrary instances) are rendered with
repr() and will not parse back; everything the parser produces round-trips.
"""

from __future__ import annotations

from typing import Any, List, TypeVar

from .nodes import (
	Argument,
	Expr,
	GlobalRef,
	GotoIfNot,
	GotoNode,
	IRCode,
	NOOP_HEADS,
	PhiNode,
	PiNode,
	QuoteNode,
	ReturnNode,
	SSAValue,
	StaticParameter,
	is_control_flow,
)


def format_value(x: Any) -> str:
	if isinstance(x, (Argument, SSAValue, StaticParameter, GlobalRef)):
		return str(x)
	if isinstance(x, QuoteNode):
		return format_value(x.value)
	if x is True:
		return "true"
	if x is False:
		return "false"
	if x is None:
		return "none"
	if isinstance(x, (int, float, str)):
		return repr(x)
	mod = getattr(x, "__module__", None)
	qualname = getattr(x, "__qualname__", None) or getattr(x, "__name__", None)
	if isinstance(qualname, str) and "<" not in qualname:
		if mod in (None, "builtins"):
			return qualname
		return f"{mod}.{qualname}"
	return repr(x)


def format_type(t: Any) -> str:
	if isinstance(t, TypeVar):
		return t.__name__
	return format_value(t)


def _args(args: Any) -> str:
	return ", ".join(format_value(a) for a in args)


def format_stmt(ex: Any) -> str:
	if isinstance(ex, Expr):
		if ex.head == "call":
			return f"call {format_value(ex.args[0])}({_args(ex.args[1:])})"
		if ex.head == "new":
			return f"new {format_value(ex.args[0])}({_args(ex.args[1:])})"
		if ex.head == "=":
			return format_stmt(ex.args[1])
		if ex.head in NOOP_HEADS:
			return "nop"
		return f"{ex.head}({_args(ex.args)})"
	if isinstance(ex, PhiNode):
		edges = ", ".join(f"#{e} => {format_value(v)}" for e, v in zip(ex.edges, ex.values))
		return f"phi({edges})"
	if isinstance(ex, PiNode):
		return f"pi({format_value(ex.val)}, {format_type(ex.typ)})"
	if isinstance(ex, GotoNode):
		return f"goto #{ex.label}"
	if isinstance(ex, GotoIfNot):
		return f"goto #{ex.dest} if not {format_value(ex.cond)}"
	if isinstance(ex, ReturnNode):
		return "return" if ex.val is None else f"return {format_value(ex.val)}"
	return format_value(ex)


def _labelled(pc: int, ex: Any) -> str:
	if is_control_flow(ex) or (isinstance(ex, Expr) and ex.head in NOOP_HEADS):
		return format_stmt(ex)
	return f"%{pc} = {format_stmt(ex)}"


def format_header(ir: IRCode) -> str:
	sig = ir.signature
	params: List[str] = []
	for i, typ in enumerate(sig.params):
		name = sig.names[i] if i < len(sig.names) else f"a{i + 1}"
		text = name if typ is object else f"{name}: {format_type(typ)}"
		if sig.isva and i == len(sig.params) - 1:
			text += "..."
		params.append(text)
	header = f"function {ir.name}({', '.join(params)})"
	if sig.sparams:
		header += " where " + ", ".join(tv.__name__ for tv in sig.sparams)
	return header


def format_ir(ir: IRCode) -> str:
	lines = [format_header(ir)]
	for bi, block in enumerate(ir.blocks, start=1):
		lines.append(f"#{bi}:")
		for pc in block.stmts:
			lines.append(f"  {_labelled(pc, ir.stmts[pc - 1])}")
	if len(ir.new_nodes):
		lines.append("inserted:")
		base = len(ir.stmts)
		for idx, (ex, info) in enumerate(zip(ir.new_nodes.stmts, ir.new_nodes.info), start=1):
			where = "after" if info.attach_after else "before"
			lines.append(f"  %{base + idx} = {format_stmt(ex)} {where} {info.pos}")
	lines.append("end")
	return "\n".join(lines)


__all__ = ["format_value", "format_type", "format_stmt", "format_header", "format_ir"]
