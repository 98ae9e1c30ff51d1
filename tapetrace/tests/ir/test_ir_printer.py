# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""Printing IR back in the syntax the reader accepts."""

import operator

from tapetrace.ir import (
	Argument,
	Expr,
	GlobalRef,
	IRCode,
	QuoteNode,
	ReturnNode,
	SSAValue,
	Signature,
	format_ir,
	parse_function,
)
from tapetrace.ir.printer import format_stmt, format_value


SRC_LOOP = """
function triangle(n: int)
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
inserted:
  %10 = call neg(%2) after 3
end
"""


def test_format_value():
	assert format_value(SSAValue(3)) == "%3"
	assert format_value(Argument(2)) == "_2"
	assert format_value(True) == "true"
	assert format_value(None) == "none"
	assert format_value(2.5) == "2.5"
	assert format_value("s") == "'s'"
	assert format_value(len) == "len"
	assert format_value(operator.add) == "_operator.add"
	assert format_value(GlobalRef("math", "sqrt")) == "math.sqrt"
	assert format_value(QuoteNode(7)) == "7"


def test_format_ir_layout():
	text = format_ir(parse_function(SRC_LOOP))
	lines = text.splitlines()
	assert lines[0] == "function triangle(n: int)"
	assert lines[1] == "#1:"
	assert lines[2] == "  goto #2"
	assert "  %2 = phi(#1 => 0, #3 => %6)" in lines
	assert "  %4 = call _operator.le(%3, _2)" in lines
	assert "  goto #4 if not %4" in lines
	assert "inserted:" in lines
	assert "  %10 = call _operator.neg(%2) after 3" in lines
	assert lines[-1] == "end"


def test_printed_ir_parses_back_to_the_same_text():
	text = format_ir(parse_function(SRC_LOOP))
	assert format_ir(parse_function(text)) == text


def test_variadic_header_and_static_params():
	ir = parse_function("""
function h(x: T, ys...) where T
#1:
  %1 = $1
  return %1
end
""")
	assert format_ir(ir).splitlines()[0] == "function h(x: T, ys...) where T"
	assert format_stmt(ir.stmts[0]) == "$1"


def test_str_of_hand_built_ir():
	ir = IRCode.from_blocks(
		[[Expr.call(operator.mul, Argument(2), 2), ReturnNode(SSAValue(1))]],
		signature=Signature(params=(object,)),
		name="double",
	)
	assert str(ir) == "\n".join([
		"function double(a1)",
		"#1:",
		"  %1 = call _operator.mul(_2, 2)",
		"  return %1",
		"end",
	])
