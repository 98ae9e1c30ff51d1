# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Structural checks on IRCode run before a method is registered.

These catch malformed input early (dangling jump targets, references to
undefined program counters, terminators in the middle of a block). They do not
check dynamic facts such as whether a phi covers every predecessor actually
taken at trace time; the tracer reports those as MalformedControlFlow.
"""

from __future__ import annotations

from typing import Any, Iterator

from tapetrace.errors import IRValidationError
from .nodes import (
	Argument,
	Expr,
	GotoIfNot,
	GotoNode,
	IRCode,
	PhiNode,
	PiNode,
	ReturnNode,
	SSAValue,
	StaticParameter,
	is_control_flow,
)


def _operands(ex: Any) -> Iterator[Any]:
	if isinstance(ex, Expr):
		for arg in ex.args:
			if isinstance(arg, Expr):
				yield from _operands(arg)
			else:
				yield arg
	elif isinstance(ex, PhiNode):
		yield from ex.values
	elif isinstance(ex, PiNode):
		yield ex.val
	elif isinstance(ex, GotoIfNot):
		yield ex.cond
	elif isinstance(ex, ReturnNode):
		yield ex.val
	else:
		yield ex


def validate_ir(ir: IRCode) -> None:
	"""Raise IRValidationError describing the first structural problem found in `ir`."""
	name = ir.name
	if not ir.blocks:
		raise IRValidationError(f"{name}: no basic blocks")

	expected = 1
	for bi, block in enumerate(ir.blocks, start=1):
		if len(block.stmts) == 0:
			raise IRValidationError(f"{name}: block #{bi} is empty")
		if block.stmts.start != expected:
			raise IRValidationError(f"{name}: block #{bi} starts at pc {block.stmts.start}, expected {expected}")
		expected = block.stmts.stop
		for pc in block.stmts[:-1]:
			if is_control_flow(ir.stmts[pc - 1]):
				raise IRValidationError(f"{name}: control flow at pc {pc} is not the last statement of block #{bi}")
	if expected != len(ir.stmts) + 1:
		raise IRValidationError(f"{name}: blocks cover {expected - 1} of {len(ir.stmts)} statements")

	if len(ir.new_nodes.stmts) != len(ir.new_nodes.info):
		raise IRValidationError(f"{name}: inserted statements and anchors differ in length")
	for info in ir.new_nodes.info:
		if not 1 <= info.pos <= len(ir.stmts):
			raise IRValidationError(f"{name}: inserted statement anchored at missing pc {info.pos}")

	npcs = len(ir.stmts) + len(ir.new_nodes)
	nargs = ir.signature.nargs
	nsparams = len(ir.signature.sparams)
	all_stmts = list(enumerate(ir.stmts, start=1)) + [
		(len(ir.stmts) + i, ex) for i, ex in enumerate(ir.new_nodes.stmts, start=1)
	]
	for pc, ex in all_stmts:
		if isinstance(ex, GotoNode) and not 1 <= ex.label <= ir.nblocks:
			raise IRValidationError(f"{name}: goto at pc {pc} targets missing block #{ex.label}")
		if isinstance(ex, GotoIfNot) and not 1 <= ex.dest <= ir.nblocks:
			raise IRValidationError(f"{name}: conditional goto at pc {pc} targets missing block #{ex.dest}")
		if isinstance(ex, PhiNode):
			for edge in ex.edges:
				if not 1 <= edge <= ir.nblocks:
					raise IRValidationError(f"{name}: phi at pc {pc} names missing block #{edge}")
		for op in _operands(ex):
			if isinstance(op, SSAValue) and not 1 <= op.id <= npcs:
				raise IRValidationError(f"{name}: pc {pc} uses undefined value {op}")
			if isinstance(op, Argument) and not 1 <= op.n <= nargs:
				raise IRValidationError(f"{name}: pc {pc} uses argument {op} of a {nargs - 1}-parameter method")
			if isinstance(op, StaticParameter) and not 1 <= op.n <= nsparams:
				raise IRValidationError(f"{name}: pc {pc} uses missing static parameter {op}")


__all__ = ["validate_ir"]
