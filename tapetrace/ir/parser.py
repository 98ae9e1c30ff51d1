# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Reader for the textual IR format (grammar in `ir.lark`).

Parsing is split in two so a module of mutually recursive functions can be
loaded: `parse_tree` + `function_names` let the caller create one callable per
function name first, then `build_functions` resolves call targets against
those callables.

Name resolution for a bare or dotted name, in order:
  1. parameter names (single segment) -> Argument
  2. `where` names (single segment)   -> StaticParameter (TypeVar in type position)
  3. functions of the same IR module
  4. the caller-supplied namespace
  5. builtins, then the `operator` module (single segment)
  6. otherwise a dotted name becomes a GlobalRef resolved at trace time
"""

from __future__ import annotations

import ast
import builtins
import importlib
import operator
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, TypeVar

from lark import Lark, Token, Tree

from tapetrace.errors import IRSyntaxError
from .nodes import (
	Argument,
	Expr,
	GlobalRef,
	GotoIfNot,
	GotoNode,
	IRCode,
	NewNodeInfo,
	NewNodes,
	PhiNode,
	PiNode,
	ReturnNode,
	SSAValue,
	Signature,
	StaticParameter,
	Block,
)

_GRAMMAR_PATH = Path(__file__).with_name("ir.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)

_MISSING = object()


def _name(node: Tree) -> str:
	return str(node.data)


def _line(node: Any) -> int:
	if isinstance(node, Token):
		return node.line or 0
	meta = getattr(node, "meta", None)
	return getattr(meta, "line", 0) if meta is not None and not meta.empty else 0


def _subtree(tree: Tree, kind: str) -> Optional[Tree]:
	return next((c for c in tree.children if isinstance(c, Tree) and _name(c) == kind), None)


def _tokens(tree: Tree, kind: str) -> List[Token]:
	return [c for c in tree.children if isinstance(c, Token) and c.type == kind]


def parse_tree(source: str) -> Tree:
	"""Parse IR text into a lark tree; lark's UnexpectedInput propagates on syntax errors."""
	return _PARSER.parse(source)


def function_names(tree: Tree) -> List[str]:
	"""Names of the functions defined in a parsed module, in source order."""
	return [_tokens(fn, "NAME")[0].value for fn in tree.children if isinstance(fn, Tree)]


def build_functions(
	tree: Tree,
	namespace: Optional[Mapping[str, Any]] = None,
	functions: Optional[Mapping[str, Any]] = None,
) -> List[IRCode]:
	"""Build one IRCode per `function` definition of a parsed module."""
	return [
		_FunctionBuilder(fn, namespace or {}, functions or {}).build()
		for fn in tree.children
		if isinstance(fn, Tree)
	]


def parse_ir(
	source: str,
	namespace: Optional[Mapping[str, Any]] = None,
	functions: Optional[Mapping[str, Any]] = None,
) -> List[IRCode]:
	return build_functions(parse_tree(source), namespace, functions)


def parse_function(source: str, namespace: Optional[Mapping[str, Any]] = None) -> IRCode:
	"""Parse text holding exactly one function definition."""
	irs = parse_ir(source, namespace)
	if len(irs) != 1:
		raise IRSyntaxError(f"expected exactly one function definition, found {len(irs)}")
	return irs[0]


def resolve_global(ref: GlobalRef) -> Any:
	"""Import `ref.module` and walk the (possibly dotted) attribute path `ref.name`."""
	obj: Any = importlib.import_module(ref.module)
	for part in ref.name.split("."):
		obj = getattr(obj, part)
	return obj


class _FunctionBuilder:
	"""Turns one `function` subtree into an IRCode."""

	def __init__(self, tree: Tree, namespace: Mapping[str, Any], functions: Mapping[str, Any]) -> None:
		self.tree = tree
		self.namespace = namespace
		self.functions = functions
		self.fname = _tokens(tree, "NAME")[0].value
		self.params: Dict[str, int] = {}
		self.sparams: Dict[str, int] = {}
		self.typevars: List[TypeVar] = []

	def build(self) -> IRCode:
		where = _subtree(self.tree, "where")
		if where is not None:
			for tok in _tokens(where, "NAME"):
				if tok.value in self.sparams:
					raise IRSyntaxError(f"line {tok.line}: duplicate static parameter '{tok.value}'")
				self.sparams[tok.value] = len(self.typevars) + 1
				self.typevars.append(TypeVar(tok.value))
		signature = self._build_signature(_subtree(self.tree, "params"))

		body = _subtree(self.tree, "body")
		stmts: List[Any] = []
		blocks: List[Block] = []
		for bi, block in enumerate((c for c in body.children if _name(c) == "block"), start=1):
			label = _tokens(block, "BLOCK")[0]
			if int(label.value[1:]) != bi:
				raise IRSyntaxError(f"line {label.line}: block labelled {label.value} is block #{bi}")
			start = len(stmts) + 1
			for stmt in block.children:
				if isinstance(stmt, Tree):
					stmts.append(self._build_stmt(stmt, len(stmts) + 1))
			blocks.append(Block(stmts=range(start, len(stmts) + 1)))

		new_nodes = NewNodes()
		inserted = _subtree(body, "inserted")
		if inserted is not None:
			for ins in inserted.children:
				if isinstance(ins, Tree):
					self._build_inserted(ins, len(stmts), new_nodes)

		ir = IRCode(stmts=stmts, blocks=blocks, new_nodes=new_nodes, signature=signature, name=self.fname)
		ir.link_blocks()
		return ir

	def _build_signature(self, params: Optional[Tree]) -> Signature:
		names: List[str] = []
		types: List[Any] = []
		isva = False
		plist = [p for p in params.children if isinstance(p, Tree)] if params is not None else []
		for i, param in enumerate(plist):
			tok = _tokens(param, "NAME")[0]
			if tok.value in self.params or tok.value in self.sparams:
				raise IRSyntaxError(f"line {tok.line}: duplicate parameter '{tok.value}'")
			if _tokens(param, "ELLIPSIS"):
				if i != len(plist) - 1:
					raise IRSyntaxError(f"line {tok.line}: only the last parameter may be variadic")
				isva = True
			type_node = _subtree(param, "dotted")
			types.append(self._resolve_type(type_node) if type_node is not None else object)
			names.append(tok.value)
			self.params[tok.value] = i + 2
		return Signature(params=tuple(types), names=tuple(names), isva=isva, sparams=tuple(self.typevars))

	def _build_stmt(self, tree: Tree, pc: int) -> Any:
		labels = _tokens(tree, "SSA")
		if labels and int(labels[0].value[1:]) != pc:
			raise IRSyntaxError(f"line {labels[0].line}: statement labelled {labels[0].value} is at pc {pc}")
		instr = next(c for c in tree.children if isinstance(c, Tree))
		return self._build_instr(instr)

	def _build_inserted(self, tree: Tree, nstmts: int, new_nodes: NewNodes) -> None:
		label = _tokens(tree, "SSA")[0]
		pc = nstmts + len(new_nodes) + 1
		if int(label.value[1:]) != pc:
			raise IRSyntaxError(f"line {label.line}: inserted statement labelled {label.value} is at pc {pc}")
		pos = int(_tokens(tree, "INT")[0].value)
		if not 1 <= pos <= nstmts:
			raise IRSyntaxError(f"line {label.line}: anchor {pos} is not a statement of '{self.fname}'")
		instr = next(c for c in tree.children if isinstance(c, Tree))
		new_nodes.stmts.append(self._build_instr(instr))
		new_nodes.info.append(NewNodeInfo(pos=pos, attach_after=bool(_tokens(tree, "AFTER"))))

	def _build_instr(self, tree: Tree) -> Any:
		kind = _name(tree)
		if kind in ("call", "new"):
			operands = [c for c in tree.children if isinstance(c, Tree)]
			fn = self._build_operand(operands[0])
			args = self._build_operands(operands[1]) if len(operands) > 1 else []
			return Expr(kind, (fn, *args))
		if kind == "phi":
			edges: List[int] = []
			values: List[Any] = []
			for edge in tree.children:
				label = _tokens(edge, "BLOCK")[0]
				edges.append(int(label.value[1:]))
				values.append(self._build_operand(next(c for c in edge.children if isinstance(c, Tree))))
			return PhiNode(edges=tuple(edges), values=tuple(values))
		if kind == "pi":
			subtrees = [c for c in tree.children if isinstance(c, Tree)]
			typ = self._resolve_type(subtrees[1]) if len(subtrees) > 1 else object
			return PiNode(val=self._build_operand(subtrees[0]), typ=typ)
		if kind == "goto":
			return GotoNode(label=int(_tokens(tree, "BLOCK")[0].value[1:]))
		if kind == "goto_if_not":
			cond = self._build_operand(next(c for c in tree.children if isinstance(c, Tree)))
			return GotoIfNot(cond=cond, dest=int(_tokens(tree, "BLOCK")[0].value[1:]))
		if kind == "ret":
			subtrees = [c for c in tree.children if isinstance(c, Tree)]
			return ReturnNode(val=self._build_operand(subtrees[0]) if subtrees else None)
		if kind == "nop":
			return Expr("code_coverage_effect")
		return self._build_operand(tree)

	def _build_operands(self, tree: Tree) -> List[Any]:
		return [self._build_operand(c) for c in tree.children if isinstance(c, Tree)]

	def _build_operand(self, tree: Tree) -> Any:
		kind = _name(tree)
		if kind == "true":
			return True
		if kind == "false":
			return False
		if kind == "none":
			return None
		if kind == "dotted":
			return self._resolve_name(tree)
		tok = tree.children[0]
		if kind == "ssa":
			return SSAValue(int(tok.value[1:]))
		if kind == "arg":
			return Argument(int(tok.value[1:]))
		if kind == "sparam":
			n = int(tok.value[1:])
			if not 1 <= n <= len(self.typevars):
				raise IRSyntaxError(f"line {tok.line}: no static parameter {tok.value} in '{self.fname}'")
			return StaticParameter(n)
		if kind == "int":
			return int(tok.value)
		if kind == "float":
			return float(tok.value)
		if kind == "string":
			return ast.literal_eval(tok.value)
		raise IRSyntaxError(f"line {_line(tree)}: unexpected operand '{kind}'")

	def _lookup(self, head: str) -> Any:
		for scope in (self.functions, self.namespace):
			if head in scope:
				return scope[head]
		if hasattr(builtins, head):
			return getattr(builtins, head)
		return getattr(operator, head, _MISSING)

	def _resolve_name(self, tree: Tree) -> Any:
		parts = [tok.value for tok in _tokens(tree, "NAME")]
		head = parts[0]
		if len(parts) == 1 and head in self.params:
			return Argument(self.params[head])
		if len(parts) == 1 and head in self.sparams:
			return StaticParameter(self.sparams[head])
		obj = self._lookup(head)
		if obj is _MISSING:
			if len(parts) == 1:
				raise IRSyntaxError(f"line {_line(tree)}: unknown name '{head}' in '{self.fname}'")
			return GlobalRef(module=".".join(parts[:-1]), name=parts[-1])
		for part in parts[1:]:
			try:
				obj = getattr(obj, part)
			except AttributeError as exc:
				raise IRSyntaxError(f"line {_line(tree)}: cannot resolve '{'.'.join(parts)}': {exc}") from exc
		return obj

	def _resolve_type(self, tree: Tree) -> Any:
		parts = [tok.value for tok in _tokens(tree, "NAME")]
		if len(parts) == 1 and parts[0] in self.sparams:
			return self.typevars[self.sparams[parts[0]] - 1]
		if len(parts) == 1 and parts[0] in self.params:
			raise IRSyntaxError(f"line {_line(tree)}: parameter '{parts[0]}' used as a type")
		value = self._resolve_name(tree)
		if isinstance(value, GlobalRef):
			try:
				value = resolve_global(value)
			except (ImportError, AttributeError) as exc:
				raise IRSyntaxError(f"line {_line(tree)}: cannot resolve type '{'.'.join(parts)}': {exc}") from exc
		return value


__all__ = [
	"parse_tree",
	"function_names",
	"build_functions",
	"parse_ir",
	"parse_function",
	"resolve_global",
]
