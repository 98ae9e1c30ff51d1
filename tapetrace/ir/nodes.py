# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Lowered control-flow-graph IR consumed by the tracer.

An `IRCode` is an SSA program: a flat list of statements numbered by program
counter (1-based, `%1`, `%2`, ...), partitioned into basic blocks (1-based,
`#1`, `#2`, ...). Earlier passes may have inserted extra statements; those
live in `new_nodes` and are numbered after all primary statements, each
anchored before or after a primary statement.

Statement vocabulary (closed):
  - Expr("call", fn, args...)       call; result bound to the statement's pc
  - Expr("new", T, fields...)       object construction (rewritten to a call)
  - Expr("=", lhs, rhs)             assignment wrapper around another statement
  - Expr(<no-op head>, ...)         diagnostics only (e.g. code_coverage_effect)
  - PhiNode / PiNode                SSA merge / type refinement
  - SSAValue / Argument             alias of another local value
  - GotoNode / GotoIfNot / ReturnNode   block terminators
  - anything else                   a literal constant

Like the MIR node module this is only a typed tree: no semantics live here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple, TypeVar


class IRNode:
	"""Base class for IR nodes (references, statements and terminators)."""
	pass


# References

@dataclass(frozen=True)
class Argument(IRNode):
	"""n-th formal argument; Argument(1) is the callee itself."""
	n: int

	def __str__(self) -> str:
		return f"_{self.n}"


@dataclass(frozen=True)
class SSAValue(IRNode):
	"""Value defined by the statement at program counter `id`."""
	id: int

	def __str__(self) -> str:
		return f"%{self.id}"


@dataclass(frozen=True)
class StaticParameter(IRNode):
	"""n-th static (generic) parameter of the method, bound per call."""
	n: int

	def __str__(self) -> str:
		return f"${self.n}"


@dataclass(frozen=True)
class GlobalRef(IRNode):
	"""Late-bound reference to `module.name` (name may be dotted)."""
	module: str
	name: str

	def __str__(self) -> str:
		return f"{self.module}.{self.name}"


@dataclass(frozen=True)
class QuoteNode(IRNode):
	"""Literal wrapper: the value is used as-is, never interpreted."""
	value: Any


# Statements

@dataclass(frozen=True)
class Expr(IRNode):
	"""Generic expression statement: `head` selects the meaning of `args`."""
	head: str
	args: Tuple[Any, ...] = ()

	def __post_init__(self) -> None:
		if not isinstance(self.args, tuple):
			object.__setattr__(self, "args", tuple(self.args))

	@classmethod
	def call(cls, fn: Any, *args: Any) -> "Expr":
		return cls("call", (fn, *args))


@dataclass(frozen=True)
class PhiNode(IRNode):
	"""dest = values[k] where edges[k] is the predecessor block control came from."""
	edges: Tuple[int, ...]
	values: Tuple[Any, ...]

	def __post_init__(self) -> None:
		object.__setattr__(self, "edges", tuple(self.edges))
		object.__setattr__(self, "values", tuple(self.values))
		if len(self.edges) != len(self.values):
			raise ValueError("PhiNode: edges and values must have the same length")


@dataclass(frozen=True)
class PiNode(IRNode):
	"""dest = val, re-asserted as type `typ`."""
	val: Any
	typ: Any = object


# Terminators

@dataclass(frozen=True)
class GotoNode(IRNode):
	"""Unconditional jump to block `label`."""
	label: int


@dataclass(frozen=True)
class GotoIfNot(IRNode):
	"""Jump to block `dest` when `cond` is false, else fall into the next block."""
	cond: Any
	dest: int


@dataclass(frozen=True)
class ReturnNode(IRNode):
	"""Return `val` from the current call."""
	val: Any = None


CONTROL_FLOW_NODES = (GotoNode, GotoIfNot, ReturnNode)

# Expr heads that carry no semantics and are skipped during interpretation.
NOOP_HEADS = frozenset({"code_coverage_effect", "meta", "line"})


def is_control_flow(ex: Any) -> bool:
	return isinstance(ex, CONTROL_FLOW_NODES)


def is_expr(ex: Any, head: Optional[str] = None) -> bool:
	return isinstance(ex, Expr) and (head is None or ex.head == head)


# Containers

@dataclass(frozen=True)
class NewNodeInfo:
	"""Anchor of an inserted statement: before (default) or after primary pc `pos`."""
	pos: int
	attach_after: bool = False


@dataclass
class NewNodes:
	"""Statements inserted by earlier passes; stmts[i] is anchored at info[i]."""
	stmts: List[Any] = field(default_factory=list)
	info: List[NewNodeInfo] = field(default_factory=list)

	def __len__(self) -> int:
		return len(self.stmts)


@dataclass
class Block:
	"""
	Basic block: the contiguous range of primary program counters it owns plus
	its CFG neighbours (1-based block indices).
	"""
	stmts: range
	preds: List[int] = field(default_factory=list)
	succs: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class Signature:
	"""
	Formal signature of a lowered method.

	params are classes, `object`/`typing.Any`, or TypeVars listed in `sparams`
	(the static parameters, in `$1`, `$2`, ... order). When `isva` is set the
	last parameter is the variadic tail and `params[-1]` types each element.
	"""
	params: Tuple[Any, ...] = ()
	names: Tuple[str, ...] = ()
	isva: bool = False
	sparams: Tuple[TypeVar, ...] = ()

	@property
	def nargs(self) -> int:
		"""Number of formal arguments, counting the callee itself."""
		return len(self.params) + 1

	@property
	def nfixed(self) -> int:
		"""Number of parameters preceding the variadic tail."""
		return len(self.params) - 1 if self.isva else len(self.params)


@dataclass
class IRCode:
	"""
	One lowered method body.

	`stmts[pc - 1]` is the primary statement at program counter `pc`; inserted
	statements get program counters `len(stmts) + 1 ...` in `new_nodes` order.
	"""
	stmts: List[Any]
	blocks: List[Block]
	new_nodes: NewNodes = field(default_factory=NewNodes)
	signature: Signature = field(default_factory=Signature)
	name: str = "<ir>"

	@classmethod
	def from_blocks(
		cls,
		blocks: Sequence[Sequence[Any]],
		*,
		signature: Optional[Signature] = None,
		name: str = "<ir>",
	) -> "IRCode":
		"""Build an IRCode from per-block statement lists, numbering pcs in order."""
		stmts: List[Any] = []
		bbs: List[Block] = []
		for block_stmts in blocks:
			start = len(stmts) + 1
			stmts.extend(block_stmts)
			bbs.append(Block(stmts=range(start, len(stmts) + 1)))
		ir = cls(stmts=stmts, blocks=bbs, signature=signature or Signature(), name=name)
		ir.link_blocks()
		return ir

	@property
	def nblocks(self) -> int:
		return len(self.blocks)

	def block(self, bi: int) -> Block:
		return self.blocks[bi - 1]

	def stmt(self, pc: int) -> Any:
		if pc <= len(self.stmts):
			return self.stmts[pc - 1]
		return self.new_nodes.stmts[pc - len(self.stmts) - 1]

	def insert_node(self, pos: int, stmt: Any, attach_after: bool = False) -> SSAValue:
		"""Insert `stmt` before/after primary pc `pos`; returns the new statement's value."""
		if not 1 <= pos <= len(self.stmts):
			raise IndexError(f"insert_node: anchor {pos} out of range 1..{len(self.stmts)}")
		self.new_nodes.stmts.append(stmt)
		self.new_nodes.info.append(NewNodeInfo(pos=pos, attach_after=attach_after))
		return SSAValue(len(self.stmts) + len(self.new_nodes))

	def link_blocks(self) -> None:
		"""Recompute preds/succs from each block's final statement."""
		for block in self.blocks:
			block.preds = []
			block.succs = []
		for bi, block in enumerate(self.blocks, start=1):
			last = self.stmts[block.stmts[-1] - 1] if len(block.stmts) else None
			if isinstance(last, GotoNode):
				targets = [last.label]
			elif isinstance(last, GotoIfNot):
				targets = [bi + 1, last.dest]
			elif isinstance(last, ReturnNode):
				targets = []
			else:
				targets = [bi + 1]
			for t in targets:
				if 1 <= t <= len(self.blocks) and t not in block.succs:
					block.succs.append(t)
					self.blocks[t - 1].preds.append(bi)

	def __str__(self) -> str:
		from .printer import format_ir

		return format_ir(self)


__all__ = [
	"IRNode",
	"Argument", "SSAValue", "StaticParameter", "GlobalRef", "QuoteNode",
	"Expr", "PhiNode", "PiNode",
	"GotoNode", "GotoIfNot", "ReturnNode",
	"CONTROL_FLOW_NODES", "NOOP_HEADS", "is_control_flow", "is_expr",
	"NewNodeInfo", "NewNodes", "Block", "Signature", "IRCode",
]
