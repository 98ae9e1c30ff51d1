# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
tapetrace package: execution tracing of lowered IR onto an append-only tape.

Packages:
  ir:       CFG nodes, textual reader/writer, validation
  tape:     the record store and its helper primitives
  dispatch: method tables mapping callables to lowered IR
  trace:    the tracer, tracing contexts and failure diagnostics
"""

from tapetrace.errors import (
	AmbiguousDispatch,
	IRSyntaxError,
	IRValidationError,
	MalformedControlFlow,
	TraceError,
	UnsupportedInstruction,
)
from tapetrace.dispatch import DEFAULT_METHOD_TABLE, IRFunction, MethodTable, lowered
from tapetrace.tape import Call, Constant, Input, Tape, V, mkcall, play
from tapetrace.trace import (
	BaseCtx,
	Tracer,
	TracingContext,
	is_primitive,
	latest_failed_trace,
	latest_failure_state,
	print_failure_stack,
	record_primitive,
	trace,
)

__all__ = [
	"AmbiguousDispatch",
	"IRSyntaxError",
	"IRValidationError",
	"MalformedControlFlow",
	"TraceError",
	"UnsupportedInstruction",
	"DEFAULT_METHOD_TABLE",
	"IRFunction",
	"MethodTable",
	"lowered",
	"Call",
	"Constant",
	"Input",
	"Tape",
	"V",
	"mkcall",
	"play",
	"BaseCtx",
	"Tracer",
	"TracingContext",
	"is_primitive",
	"latest_failed_trace",
	"latest_failure_state",
	"print_failure_stack",
	"record_primitive",
	"trace",
]
