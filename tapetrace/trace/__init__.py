# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Trace package: the tracer walking lowered IR onto a tape.

Public API:
  - trace / Tracer / record_or_recurse (tracer)
  - TracingContext / BaseCtx / is_primitive / record_primitive (context)
  - Frame / block_expressions (frame)
  - latest_failed_trace / latest_failure_state / print_failure_stack (diagnostics)
"""

from .context import (
	DEFAULT_PRIMITIVE_SCOPES,
	SPECIAL_FORMS,
	BaseCtx,
	TracingContext,
	is_primitive,
	record_primitive,
)
from .diagnostics import latest_failed_trace, latest_failure_state, print_failure_stack
from .frame import Frame, block_expressions, resolve_tape_vars
from .tracer import Tracer, record_or_recurse, rewrite_special_cases, trace

__all__ = [
	"DEFAULT_PRIMITIVE_SCOPES",
	"SPECIAL_FORMS",
	"BaseCtx",
	"TracingContext",
	"is_primitive",
	"record_primitive",
	"latest_failed_trace",
	"latest_failure_state",
	"print_failure_stack",
	"Frame",
	"block_expressions",
	"resolve_tape_vars",
	"Tracer",
	"record_or_recurse",
	"rewrite_special_cases",
	"trace",
]
