# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""Control flow, phi/pi nodes, special forms and malformed IR during tracing."""

import logging
import operator
from dataclasses import dataclass

import pytest

from tapetrace.dispatch import IRFunction, MethodTable
from tapetrace.errors import MalformedControlFlow, UnsupportedInstruction
from tapetrace.ir import Argument, Expr, IRCode, ReturnNode, SSAValue, Signature
from tapetrace.tape import Call, Constant, V, allocate
from tapetrace.trace import rewrite_special_cases, trace

METHODS = MethodTable()


@dataclass(frozen=True)
class Point:
	x: float
	y: float


@METHODS.lowered("""
function triangle(n)
#1:
	goto #2
#2:
	%2 = phi(#1 => 0, #3 => %6)
	%3 = phi(#1 => 1, #3 => %7)
	%4 = call le(%3, n)
	goto #4 if not %4
#3:
	%6 = call add(%2, %3)
	%7 = call add(%3, 1)
	goto #2
#4:
	return %2
end
""")
def triangle(n):
	return sum(range(1, n + 1))


@METHODS.lowered("""
function refine(x)
#1:
	%1 = call mul(x, 2)
	%2 = pi(%1, float)
	%3 = %2
	nop
	%5 = call add(%3, 1)
	return %5
end
""")
def refine(x):
	return x * 2 + 1


@METHODS.lowered("""
function make_point(x)
#1:
	%1 = new Point(x, 0.0)
	return %1
end
""")
def make_point(x):
	return Point(x, 0.0)


@METHODS.lowered("""
function shifted(x)
#1:
	%1 = call mul(x, 2)
	%2 = call add(%1, 1)
	return %2
inserted:
	%4 = call sub(x, 1) before 1
	%5 = call mul(%1, 10) after 1
end
""")
def shifted(x):
	return x * 2 + 1


@METHODS.lowered("""
function convert(x: T, k) where T
#1:
	%1 = call mul(x, k)
	%2 = call $1(%1)
	%3 = $1
	return %2
end
""")
def convert(x, k):
	return type(x)(x * k)


@METHODS.lowered("""
function forever_once(x)
#1:
	goto #3 if not true
#2:
	%2 = call neg(x)
	return %2
#3:
	return x
end
""")
def forever_once(x):
	return -x


@METHODS.lowered("""
function missing_edge(x)
#1:
	goto #2
#2:
	%2 = phi(#3 => x)
	return %2
#3:
	return x
end
""")
def missing_edge(x):
	return x


@METHODS.lowered("""
function no_return(x)
#1:
	%1 = call mul(x, 3)
end
""")
def no_return(x):
	return x * 3


def _calls(tape):
	return [op for op in tape if isinstance(op, Call)]


@pytest.mark.parametrize("n", [0, 1, 4])
def test_loop_with_phi_nodes(n):
	val, tape = trace(triangle, n, methods=METHODS)
	assert val == triangle(n)
	# one comparison per iteration plus the exit test, two additions per iteration
	fns = [op.fn for op in _calls(tape)]
	assert fns.count(operator.le) == n + 1
	assert fns.count(operator.add) == 2 * n


def test_loop_returning_a_phi_literal_records_a_constant():
	val, tape = trace(triangle, 0, methods=METHODS)
	assert val == 0
	assert isinstance(tape[tape.result], Constant)


def test_pi_node_rematerializes_the_value():
	val, tape = trace(refine, 3.0, methods=METHODS)
	assert val == 7.0
	assert isinstance(tape[V(4)], Constant)
	assert tape[V(4)].val == 6.0
	assert tape[V(5)].fn is operator.add
	assert tape[V(5)].args == (V(4), 1)
	assert len(tape) == 5


def test_new_is_recorded_as_allocate():
	val, tape = trace(make_point, 1.5, methods=METHODS)
	assert val == Point(1.5, 0.0)
	(alloc,) = _calls(tape)
	assert alloc.fn is allocate
	assert alloc.args == (Point, V(2), 0.0)


def test_rewrite_special_cases():
	assert rewrite_special_cases(Expr("new", (Point, 1, 2))) == Expr("call", (allocate, Point, 1, 2))
	assign = Expr("=", (SSAValue(1), Expr("new", (Point, 1, 2))))
	assert rewrite_special_cases(assign) == Expr("=", (SSAValue(1), Expr("call", (allocate, Point, 1, 2))))
	assert rewrite_special_cases(3) == 3


def test_assignment_wrapped_new_in_hand_built_ir():
	table = MethodTable()

	def build(x):
		return Point(x, 0.0)

	table.register(build, IRCode.from_blocks(
		[[
			Expr("=", (SSAValue(1), Expr("new", (Point, Argument(2), 0.0)))),
			ReturnNode(SSAValue(1)),
		]],
		signature=Signature(params=(object,)),
		name="build",
	))
	val, _ = trace(build, 2.0, methods=table)
	assert val == Point(2.0, 0.0)


def test_inserted_statements_run_in_anchor_order():
	val, tape = trace(shifted, 3.0, methods=METHODS)
	assert val == 7.0
	calls = _calls(tape)
	assert [op.fn for op in calls] == [operator.sub, operator.mul, operator.mul, operator.add]
	assert calls[2].val == 60.0


def test_static_parameters_are_substituted():
	val, tape = trace(convert, 3, 2.5, methods=METHODS)
	assert val == 7
	assert type(val) is int
	calls = _calls(tape)
	assert calls[1].fn is int
	assert any(isinstance(op, Constant) and op.val is int for op in tape)


def test_literal_condition():
	val, tape = trace(forever_once, 4, methods=METHODS)
	assert val == -4
	assert [op.fn for op in _calls(tape)] == [operator.neg]


def test_missing_phi_edge_is_malformed_control_flow():
	with pytest.raises(MalformedControlFlow, match="no edge from block #1"):
		trace(missing_edge, 1, methods=METHODS)


def test_unknown_expression_is_unsupported():
	table = MethodTable()

	def foreign(x):
		return x

	table.register(foreign, IRCode.from_blocks(
		[[Expr("foreigncall", ("c_fn", Argument(2))), ReturnNode(SSAValue(1))]],
		signature=Signature(params=(object,)),
		name="foreign",
	))
	with pytest.raises(UnsupportedInstruction) as excinfo:
		trace(foreign, 1, methods=table)
	assert str(excinfo.value).startswith("Unexpected expression: ")
	assert "Full IRCode:" in str(excinfo.value)
	assert "function foreign(a1)" in str(excinfo.value)
	assert excinfo.value.instr.head == "foreigncall"


def test_no_return_uses_last_entry(caplog):
	with caplog.at_level(logging.WARNING, logger="tapetrace.trace.tracer"):
		val, tape = trace(no_return, 2, methods=METHODS)
	assert val == 6
	assert tape.result == V(3)
	assert "without a return" in caplog.text


PARITY = MethodTable()
PARITY_FUNCTIONS = PARITY.load("""
function is_even(n)
#1:
	%1 = call eq(n, 0)
	goto #3 if not %1
#2:
	return true
#3:
	%4 = call sub(n, 1)
	%5 = call is_odd(%4)
	return %5
end

function is_odd(n)
#1:
	%1 = call eq(n, 0)
	goto #3 if not %1
#2:
	return false
#3:
	%4 = call sub(n, 1)
	%5 = call is_even(%4)
	return %5
end
""", scope="parity")


def test_ir_functions_are_callable():
	is_even = PARITY_FUNCTIONS["is_even"]
	assert isinstance(is_even, IRFunction)
	assert is_even(4) is True
	assert is_even(7) is False


def test_mutual_recursion_deeper_than_the_python_stack():
	is_even = PARITY_FUNCTIONS["is_even"]
	val, tape = trace(is_even, 3000, methods=PARITY)
	assert val is True
	assert sum(1 for op in _calls(tape) if op.fn is operator.eq) == 3001


def test_ir_functions_carry_their_own_table():
	# traced against an unrelated table: the callee's table is used
	val, _ = trace(PARITY_FUNCTIONS["is_odd"], 3, methods=METHODS)
	assert val is True


@METHODS.lowered("""
function swaploop(a, b, n)
#1:
	goto #2
#2:
	%2 = phi(#1 => a, #3 => %3)
	%3 = phi(#1 => b, #3 => %2)
	%4 = phi(#1 => 0, #3 => %7)
	%5 = call lt(%4, n)
	goto #4 if not %5
#3:
	%7 = call add(%4, 1)
	goto #2
#4:
	return %2
end
""")
def swaploop(a, b, n):
	for _ in range(n):
		a, b = b, a
	return a


@pytest.mark.parametrize("n", [0, 1, 2, 3])
def test_leading_phis_read_the_predecessor_bindings(n):
	val, _ = trace(swaploop, 1.0, 2.0, n, methods=METHODS)
	assert val == swaploop(1.0, 2.0, n)


class _FalsyMeta(type):
	def __bool__(cls):
		return False


class Nothing(metaclass=_FalsyMeta):
	pass


@METHODS.lowered("""
function typeof(x: T) where T
#1:
	return $1
end
""")
def typeof(x):
	return type(x)


@METHODS.lowered("""
function phi_typeof(x: T) where T
#1:
	goto #2
#2:
	%2 = phi(#1 => $1)
	return %2
end
""")
def phi_typeof(x):
	return type(x)


@METHODS.lowered("""
function pi_typeof(x: T) where T
#1:
	%1 = pi($1)
	return %1
end
""")
def pi_typeof(x):
	return type(x)


@METHODS.lowered("""
function branch_on_type(x: T) where T
#1:
	goto #3 if not $1
#2:
	return 1
#3:
	return 0
end
""")
def branch_on_type(x):
	return 1 if type(x) else 0


def test_static_parameter_as_return_value():
	val, tape = trace(typeof, 3.0, methods=METHODS)
	assert val is float
	assert isinstance(tape[tape.result], Constant)


def test_static_parameter_as_phi_operand():
	val, _ = trace(phi_typeof, "s", methods=METHODS)
	assert val is str


def test_static_parameter_as_pi_operand():
	val, tape = trace(pi_typeof, 3, methods=METHODS)
	assert val is int
	assert isinstance(tape[V(3)], Constant)
	assert tape[V(3)].val is int


@pytest.mark.parametrize("x", [3.0, Nothing()])
def test_static_parameter_as_condition(x):
	val, _ = trace(branch_on_type, x, methods=METHODS)
	assert val == branch_on_type(x)
