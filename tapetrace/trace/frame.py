# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Per-call activation state of the tracer.

Naming used throughout the tracer:
  v_xxx  - tape handle (V) or literal standing for xxx
  sv_xxx - IR reference (SSAValue or Argument) for xxx
  pc     - program counter, i.e. the SSA id of a statement
  bi     - block index
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, DefaultDict, Dict, List, Optional, Tuple

from tapetrace.ir.nodes import Argument, IRCode, SSAValue, StaticParameter
from tapetrace.tape import Tape, V, promote_const_value


def block_expressions(ir: IRCode) -> List[List[Tuple[int, Any]]]:
	"""
	For each block, its statements as (pc, stmt) pairs in execution order,
	with inserted statements merged in.

	An inserted statement anchored before pc P runs right before P; one anchored
	after P runs right before P + 1, which keeps it in P's block unless P ends
	the block. Statements sharing an anchor keep their insertion order.
	"""
	nstmts = len(ir.stmts)
	new_node_map: DefaultDict[int, List[Tuple[int, Any]]] = defaultdict(list)
	for idx, (ex, info) in enumerate(zip(ir.new_nodes.stmts, ir.new_nodes.info), start=1):
		pos = info.pos + 1 if info.attach_after else info.pos
		new_node_map[pos].append((nstmts + idx, ex))
	block_exprs: List[List[Tuple[int, Any]]] = []
	for block in ir.blocks:
		pc_exprs: List[Tuple[int, Any]] = []
		for pos in block.stmts:
			pc_exprs.extend(new_node_map.pop(pos, ()))
			pc_exprs.append((pos, ir.stmts[pos - 1]))
		block_exprs.append(pc_exprs)
	# anchored after the very last statement
	if block_exprs:
		for pos in sorted(new_node_map):
			block_exprs[-1].extend(new_node_map[pos])
	return block_exprs


class Frame:
	"""
	Bindings and block layout for one active call.

	`ir2tape` maps every IR-local value (SSAValue / Argument) to a tape handle
	or a literal. The remaining fields are the driver's position in this call:
	current and previous block, next statement within the block, static
	parameter values, and the pc waiting for a callee's result (if any).
	"""

	def __init__(self, ir: IRCode, *v_fargs: Any) -> None:
		self.ir2tape: Dict[Any, Any] = {}
		for i, v in enumerate(v_fargs, start=1):
			# literals are bound as-is, not recorded as constants
			self.ir2tape[Argument(i)] = v
		self.block_exprs = block_expressions(ir)
		self.pc_blocks: Dict[int, int] = {
			pc: bi for bi, exprs in enumerate(self.block_exprs, start=1) for pc, _ in exprs
		}
		self.ir = ir
		self.v_fargs = v_fargs
		self.sparams: Tuple[Any, ...] = ()
		self.bi = 1
		self.prev_bi = 0
		self.ip = 0
		self.pending_pc: Optional[int] = None

	def goto(self, bi: int) -> None:
		self.prev_bi, self.bi, self.ip = self.bi, bi, 0

	def __repr__(self) -> str:
		def key(sv: Any) -> Tuple[int, int]:
			return (0, sv.n) if isinstance(sv, Argument) else (1, sv.id)

		s = "Frame(\n"
		for sv in sorted(self.ir2tape, key=key):
			s += f"  {sv} => {self.ir2tape[sv]}\n"
		s += ")"
		return s


def resolve_tape_vars(frame: Frame, *sv_fargs: Any) -> List[Any]:
	"""Map IR operands to tape handles / literals using the frame's bindings."""
	v_fargs: List[Any] = []
	for sv in sv_fargs:
		if isinstance(sv, (Argument, SSAValue)):
			v_fargs.append(frame.ir2tape[sv])
		elif isinstance(sv, StaticParameter):
			v_fargs.append(frame.sparams[sv.n - 1])
		else:
			v_fargs.append(promote_const_value(sv))
	return v_fargs


def frame_values(tape: Tape, frame: Frame) -> List[Any]:
	"""Concrete values of the frame's call arguments (callee first)."""
	return [tape[v].val if isinstance(v, V) else v for v in frame.v_fargs]


__all__ = ["block_expressions", "Frame", "resolve_tape_vars", "frame_values"]
