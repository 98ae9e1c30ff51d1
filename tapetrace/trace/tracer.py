# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
The tracer: abstract interpretation of lowered IR onto a tape.

A call is either recorded (the context says it is primitive) or inlined: its
lowered IR is walked block by block with concrete values, so every branch is
decided and only the path actually taken reaches the tape.

The walk is iterative. `trace_block` runs the current frame's block until it
hits a terminator, falls off the end, or enters a callee; entering a callee
pushes its Frame and returns it, and the driver in `Tracer.trace` continues
with that frame. When a frame returns, its result is bound to the caller's
pending pc and the caller resumes right after the call.
"""

from __future__ import annotations

import logging
import warnings
from typing import Any, List, Optional, Sequence, Tuple, Union

from tapetrace.dispatch import DEFAULT_METHOD_TABLE, IRFunction, MethodTable
from tapetrace.errors import MalformedControlFlow, UnsupportedInstruction
from tapetrace.ir.nodes import (
	Argument,
	Expr,
	GlobalRef,
	GotoIfNot,
	GotoNode,
	IRCode,
	IRNode,
	NOOP_HEADS,
	PhiNode,
	PiNode,
	QuoteNode,
	ReturnNode,
	SSAValue,
	StaticParameter,
	is_control_flow,
	is_expr,
)
from tapetrace.ir.printer import format_value
from tapetrace.tape import Constant, Tape, V, allocate, make_tuple, mkcall, promote_const_value
from .context import BaseCtx, is_primitive, record_primitive
from .diagnostics import record_failure
from .frame import Frame, resolve_tape_vars

logger = logging.getLogger(__name__)


def rewrite_special_cases(st: Any) -> Any:
	"""Turn `new T(fields...)` (standalone or under `=`) into a call to `allocate`."""
	ex = st.args[1] if is_expr(st, "=") else st
	if is_expr(ex, "new"):
		ex = Expr.call(allocate, *ex.args)
	return Expr("=", (st.args[0], ex)) if is_expr(st, "=") else ex


def _unassign(st: Any) -> Any:
	return st.args[1] if is_expr(st, "=") else st


class Tracer:
	"""Tape plus frame stack for one top-level trace."""

	def __init__(self, tape: Tape, methods: Optional[MethodTable] = None) -> None:
		self.tape = tape
		self.stack: List[Frame] = []
		self.methods = methods if methods is not None else DEFAULT_METHOD_TABLE

	def __repr__(self) -> str:
		return f"Tracer({len(self.tape)} entries, depth {len(self.stack)})"

	def values(self, vs: Sequence[Any]) -> List[Any]:
		return [self.tape.value(v) for v in vs]

	def table_for(self, f: Any) -> MethodTable:
		"""IR-only functions carry their own table; everything else uses the tracer's."""
		if isinstance(f, IRFunction) and f.table is not None:
			return f.table
		return self.methods

	def get_ir(self, f: Any, *args: Any) -> IRCode:
		return self.table_for(f).resolve_ir(f, [type(a) for a in args])

	def get_static_params(self, ir: IRCode, v_fargs: Sequence[Any]) -> Tuple[Any, ...]:
		f, *vals = self.values(v_fargs)
		return self.table_for(f).static_params(ir, vals)

	def group_varargs(self, v_fargs: Sequence[Any]) -> Tuple[Any, ...]:
		"""Collect trailing arguments of a variadic callee into one recorded tuple."""
		f, *args = self.values(v_fargs)
		isva, nargs = self.table_for(f).is_variadic(f, [type(a) for a in args])
		v_f, *v_args = v_fargs
		if isva:
			va = self.tape.push(mkcall(make_tuple, *v_args[nargs - 2:]))
			v_args = [*v_args[:nargs - 2], va]
		return (v_f, *v_args)

	def trace_call(self, *vs: Any) -> Union[V, Frame]:
		"""
		Handle one call site: record it when primitive, otherwise enter the
		callee. Returns the recorded handle, or the callee's freshly pushed Frame.
		"""
		fargs = self.values(vs)
		if is_primitive(self.tape.ctx, *fargs):
			v = record_primitive(self.tape, *vs)
			if logger.isEnabledFor(logging.DEBUG):
				logger.debug("recorded %s -> %s", format_value(fargs[0]), v)
			return v
		ir = self.get_ir(*fargs)
		return self.enter(ir, *self.group_varargs(vs))

	def enter(self, ir: IRCode, *v_fargs: Any) -> Frame:
		frame = Frame(ir, *v_fargs)
		self.stack.append(frame)
		frame.sparams = self.get_static_params(ir, v_fargs)
		logger.debug("enter %s (depth %d)", ir.name, len(self.stack))
		return frame

	def trace_block(self, frame: Frame) -> Any:
		"""
		Run the frame's current block from its cursor.

		Returns the terminator that ended the block, None on implicit
		fallthrough, or a callee Frame when a call has to be traced first.
		"""
		ir2tape = frame.ir2tape
		exprs = frame.block_exprs[frame.bi - 1]
		while frame.ip < len(exprs):
			pc, ex = exprs[frame.ip]
			ex = _unassign(rewrite_special_cases(ex))
			if is_control_flow(ex):
				return ex
			frame.ip += 1
			sv = SSAValue(pc)
			if isinstance(ex, PhiNode):
				# a block's leading phis all read the bindings from before the jump
				phis = [(pc, ex)]
				while frame.ip < len(exprs) and isinstance(_unassign(exprs[frame.ip][1]), PhiNode):
					phis.append((exprs[frame.ip][0], _unassign(exprs[frame.ip][1])))
					frame.ip += 1
				ir2tape.update([(SSAValue(p), self._phi_value(frame, p, phi)) for p, phi in phis])
			elif isinstance(ex, PiNode):
				val = self.tape.value(resolve_tape_vars(frame, ex.val)[0])
				ir2tape[sv] = self.tape.push(Constant(val))
			elif is_expr(ex, "call"):
				v = self.trace_call(*resolve_tape_vars(frame, *ex.args))
				if isinstance(v, Frame):
					frame.pending_pc = pc
					return v
				ir2tape[sv] = v
			elif isinstance(ex, (SSAValue, Argument)):
				ir2tape[sv] = ir2tape[ex]
			elif isinstance(ex, Expr) and ex.head in NOOP_HEADS:
				pass
			elif isinstance(ex, StaticParameter):
				ir2tape[sv] = self.tape.push(Constant(frame.sparams[ex.n - 1]))
			elif isinstance(ex, (GlobalRef, QuoteNode)) or not isinstance(ex, (Expr, IRNode)):
				ir2tape[sv] = self.tape.push(Constant(promote_const_value(ex)))
			else:
				raise UnsupportedInstruction(ex, frame.ir)
		return None

	def _phi_value(self, frame: Frame, pc: int, phi: PhiNode) -> Any:
		if frame.prev_bi not in phi.edges:
			raise MalformedControlFlow(
				f"phi node at %{pc} has no edge from block #{frame.prev_bi}", node=phi, ir=frame.ir
			)
		return resolve_tape_vars(frame, phi.values[phi.edges.index(frame.prev_bi)])[0]

	def _condition(self, frame: Frame, cond: Any) -> Any:
		# literal conditions (e.g. `while true`) come back unchanged
		return self.tape.value(resolve_tape_vars(frame, cond)[0])

	def _return_value(self, frame: Frame, val: Any) -> V:
		v = resolve_tape_vars(frame, val)[0]
		if isinstance(v, V):
			return v
		return self.tape.push(Constant(v))

	def trace(self, ir: IRCode, *v_fargs: Any) -> V:
		"""Trace `ir` called with `v_fargs` (callee first); returns the handle of its result."""
		depth = len(self.stack)
		self.enter(ir, *v_fargs)
		while True:
			frame = self.stack[-1]
			if frame.bi > len(frame.block_exprs):
				v = self.tape.last()
				logger.warning("%s ended without a return; using the last tape entry %s", frame.ir.name, v)
			else:
				cf = self.trace_block(frame)
				if isinstance(cf, Frame):
					continue
				if cf is None:
					frame.goto(frame.bi + 1)
					continue
				if isinstance(cf, GotoIfNot):
					frame.goto(frame.bi + 1 if self._condition(frame, cf.cond) else cf.dest)
					continue
				if isinstance(cf, GotoNode):
					frame.goto(cf.label)
					continue
				if not isinstance(cf, ReturnNode):
					raise MalformedControlFlow(f"unknown control flow statement {cf!r}", node=cf, ir=frame.ir)
				v = self._return_value(frame, cf.val)
			self.stack.pop()
			logger.debug("return %s from %s (depth %d)", v, frame.ir.name, len(self.stack) + 1)
			if len(self.stack) == depth:
				return v
			caller = self.stack[-1]
			caller.ir2tape[SSAValue(caller.pending_pc)] = v
			caller.pending_pc = None


def record_or_recurse(tracer: Tracer, *vs: Any) -> Union[V, Frame]:
	warnings.warn(
		"record_or_recurse(tracer, *vs) is deprecated, use tracer.trace_call(*vs) instead",
		DeprecationWarning,
		stacklevel=2,
	)
	return tracer.trace_call(*vs)


def trace(f: Any, *args: Any, ctx: Any = None, methods: Optional[MethodTable] = None) -> Tuple[Any, Tape]:
	"""
	Trace `f(*args)`; returns the result value and the tape.

	Primitive calls (per the context, BaseCtx() by default) are recorded;
	everything else is inlined through its lowered IR from `methods` (the
	default method table unless given). Top-level arguments, the callable
	included, become Input entries; trailing arguments of a variadic `f` are
	grouped into one tuple input.

	    val, tape = trace(bar, 2.0)
	    # Tape(BaseCtx(0 primitives, 0 entries))
	    #   inp %1::function
	    #   inp %2::float
	    #   %3 = _operator.mul(2, %2)::float
	    #   %4 = _operator.add(%3, 1)::float

	    val, tape = trace(bar, 2.0, ctx=BaseCtx([operator.add, foo]))
	    #   %3 = __main__.foo(%2)::float
	    #   %4 = _operator.add(%3, 1)::float

	On failure the tracer is kept for `latest_failed_trace()` and the error
	is re-raised unchanged.
	"""
	tracer = Tracer(Tape(BaseCtx() if ctx is None else ctx), methods)
	table = tracer.table_for(f)
	argtypes = [type(a) for a in args]
	isva, nargs = table.is_variadic(f, argtypes)
	xargs = (*args[:nargs - 2], tuple(args[nargs - 2:])) if isva else args
	tracer.tape.meta["isva"] = isva
	v_fargs = tracer.tape.inputs(f, *xargs)
	ir = table.resolve_ir(f, argtypes)
	try:
		rv = tracer.trace(ir, *v_fargs)
		tracer.tape.set_result(rv)
	except BaseException:
		record_failure(tracer)
		raise
	return tracer.tape[rv].val, tracer.tape


__all__ = [
	"rewrite_special_cases",
	"Tracer",
	"record_or_recurse",
	"trace",
]
