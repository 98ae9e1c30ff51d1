# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""Failure snapshots kept for post-mortem inspection."""

import io

import pytest

from tapetrace.dispatch import MethodTable
from tapetrace.errors import AmbiguousDispatch
from tapetrace.tape import V
from tapetrace.trace import latest_failed_trace, latest_failure_state, print_failure_stack, trace

METHODS = MethodTable()


def unlowered(x):
	return x


@METHODS.lowered("""
function middle(x)
#1:
	%1 = call neg(x)
	%2 = call unlowered(%1)
	return %2
end
""")
def middle(x):
	return unlowered(-x)


@METHODS.lowered("""
function outer(x)
#1:
	%1 = call middle(x)
	%2 = call abs(%1)
	return %2
end
""")
def outer(x):
	return abs(middle(x))


@METHODS.lowered("""
function fine(x)
#1:
	%1 = call neg(x)
	return %1
end
""")
def fine(x):
	return -x


@METHODS.lowered("""
function raises(x)
#1:
	%1 = call truediv(x, 0)
	return %1
end
""")
def raises(x):
	return x / 0


def test_failure_snapshot_keeps_the_frame_stack():
	with pytest.raises(AmbiguousDispatch) as excinfo:
		trace(outer, 2.0, methods=METHODS)
	assert excinfo.value.fn is unlowered
	assert excinfo.value.count == 0

	tracer = latest_failed_trace()
	assert len(tracer.stack) == 2
	assert [frame.ir.name for frame in tracer.stack] == ["outer", "middle"]
	# nothing recorded after the failing call site
	assert tracer.tape.result is None
	assert len(tracer.tape) == 3

	t, ir, v_fargs = latest_failure_state()
	assert t is tracer
	assert ir.name == "middle"
	assert v_fargs == (middle, V(2))


def test_print_failure_stack_lists_innermost_first():
	with pytest.raises(AmbiguousDispatch):
		trace(outer, 2.0, methods=METHODS)
	out = io.StringIO()
	print_failure_stack(file=out)
	lines = out.getvalue().splitlines()
	assert len(lines) == 2
	assert lines[0].startswith("[1] ") and "middle(float)" in lines[0] and "@ middle #1" in lines[0]
	assert lines[1].startswith("[2] ") and "outer(float)" in lines[1]


def test_errors_from_primitives_propagate_unchanged():
	with pytest.raises(ZeroDivisionError):
		trace(raises, 1.0, methods=METHODS)
	tracer = latest_failed_trace()
	assert [frame.ir.name for frame in tracer.stack] == ["raises"]


def test_each_failure_overwrites_the_previous_one():
	with pytest.raises(AmbiguousDispatch):
		trace(outer, 2.0, methods=METHODS)
	first = latest_failed_trace()
	with pytest.raises(ZeroDivisionError):
		trace(raises, 1.0, methods=METHODS)
	assert latest_failed_trace() is not first
	# a successful trace leaves the slot alone
	assert trace(fine, 1.0, methods=METHODS)[0] == -1.0
	assert len(latest_failed_trace().stack) == 1
