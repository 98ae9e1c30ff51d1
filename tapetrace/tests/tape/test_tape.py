# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""Tape record store."""

import dataclasses
import operator

import pytest

from tapetrace.ir import GlobalRef, QuoteNode
from tapetrace.tape import Call, Constant, Input, Tape, V, mkcall, promote_const_value


def test_push_numbers_entries_and_caches_call_values():
	tape = Tape()
	v1, v2 = tape.inputs(2.0, 3.0)
	v3 = tape.push(mkcall(operator.mul, v1, v2))
	v4 = tape.push(Constant(10))
	v5 = tape.push(mkcall(operator.add, v3, v4))
	assert (v1, v2, v3, v4, v5) == (V(1), V(2), V(3), V(4), V(5))
	assert tape[v3].val == 6.0
	assert tape[v5].val == 16.0
	assert tape[v5].args == (v3, v4)
	assert [op.id for op in tape] == [1, 2, 3, 4, 5]
	assert len(tape) == 5


def test_callee_may_be_a_tape_handle():
	tape = Tape()
	v_f, v_x = tape.inputs(abs, -4)
	v = tape.push(mkcall(v_f, v_x))
	assert tape[v].val == 4


def test_explicit_value_skips_the_call():
	def boom(*args):
		raise AssertionError("must not be called")

	tape = Tape()
	v = tape.push(mkcall(boom, 1, val=42))
	assert tape[v].val == 42


def test_entries_are_append_only():
	tape = Tape()
	tape.inputs(1)
	tape.push(mkcall(operator.neg, V(1)))
	before = list(tape)
	tape.push(mkcall(operator.neg, V(2)))
	assert list(tape)[:2] == before
	with pytest.raises(dataclasses.FrozenInstanceError):
		tape[V(2)].val = 0


def test_inputs_must_come_first():
	tape = Tape()
	tape.push(Constant(1))
	with pytest.raises(ValueError):
		tape.inputs(1)


def test_input_vars_and_last():
	tape = Tape()
	tape.inputs("f", 1)
	tape.push(Constant(2))
	assert tape.input_vars == [V(1), V(2)]
	assert tape.last() == V(3)
	with pytest.raises(IndexError):
		Tape().last()


def test_lookup_out_of_range():
	tape = Tape()
	tape.inputs(1)
	assert isinstance(tape[1], Input)
	with pytest.raises(IndexError):
		tape[V(2)]
	with pytest.raises(IndexError):
		tape.set_result(V(0))


def test_value_passes_literals_through():
	tape = Tape()
	tape.inputs(5)
	assert tape.value(V(1)) == 5
	assert tape.value(7) == 7


def test_promote_const_value():
	assert promote_const_value(QuoteNode(V(3))) == V(3)
	assert promote_const_value(GlobalRef("operator", "add")) is operator.add
	assert promote_const_value(1.5) == 1.5


def test_repr_lists_entries():
	tape = Tape(ctx="ctx")
	tape.inputs(2.0)
	v = tape.push(mkcall(operator.mul, 2, V(1)))
	tape.push(Constant(1))
	tape.set_result(v)
	assert repr(tape).splitlines() == [
		"Tape('ctx')",
		"  inp %1::float",
		"  %2 = _operator.mul(2, %1)::float",
		"  const %3 = 1::int",
		"  result %2",
	]


def test_call_equality_includes_cached_value():
	assert mkcall(operator.add, 1, 2) == Call(fn=operator.add, args=(1, 2))
	tape = Tape()
	v = tape.push(mkcall(operator.add, 1, 2))
	assert tape[v] == Call(fn=operator.add, args=(1, 2), val=3, id=1)
