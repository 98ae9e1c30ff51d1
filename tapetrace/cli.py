# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Command line driver: trace one function of a textual IR file.

    python -m tapetrace prog.ir --entry f --arg 3.0
    python -m tapetrace prog.ir --entry f --arg 3.0 --primitive g --primitive add --json
"""
from __future__ import annotations

import argparse
import ast
import builtins
import importlib
import json
import logging
import operator
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from tapetrace.dispatch import MethodTable
from tapetrace.tape import Tape, format_op
from tapetrace.trace import DEFAULT_PRIMITIVE_SCOPES, BaseCtx, latest_failed_trace, print_failure_stack, trace


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="tapetrace", description="Trace a function of a textual IR file onto a tape")
	p.add_argument("file", type=Path, help="Path to the IR file")
	p.add_argument("--entry", type=str, default=None, help="Function to trace (default: the first one in the file)")
	p.add_argument(
		"--arg",
		dest="args",
		action="append",
		default=[],
		help="Argument value as a Python literal (repeatable, in order)",
	)
	p.add_argument(
		"--primitive",
		dest="primitives",
		action="append",
		default=[],
		help="Record calls to this function instead of tracing into it (repeatable); "
		"when given, only the listed functions are primitives",
	)
	p.add_argument(
		"--scope",
		dest="scopes",
		action="append",
		default=[],
		help="Additional module whose functions are primitives (repeatable)",
	)
	p.add_argument("--show-ir", action="store_true", help="Print the entry function's IR before tracing")
	p.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
	p.add_argument(
		"--log-level",
		choices=["debug", "info", "warning", "error"],
		default="warning",
		help="Logging level (default: warning)",
	)
	return p


def _resolve_callable(name: str, functions: Dict[str, Any]) -> Any:
	if name in functions:
		return functions[name]
	if "." in name:
		module, _, attr = name.rpartition(".")
		return getattr(importlib.import_module(module), attr)
	for scope in (builtins, operator):
		if hasattr(scope, name):
			return getattr(scope, name)
	raise ValueError(f"unknown function '{name}'")


def _tape_json(value: Any, tape: Tape) -> Dict[str, Any]:
	return {
		"result": repr(value),
		"result_var": str(tape.result),
		"isva": bool(tape.meta.get("isva", False)),
		"tape": [format_op(op) for op in tape],
	}


def _latest_failure() -> Optional[Any]:
	try:
		return latest_failed_trace()
	except LookupError:
		return None


def main(argv: Optional[List[str]] = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	logging.basicConfig(
		level=getattr(logging, args.log_level.upper()),
		format="%(levelname)s %(name)s: %(message)s",
		stream=sys.stderr,
	)

	try:
		source = args.file.read_text()
		table = MethodTable()
		functions = table.load(source, scope=args.file.stem)
		if not functions:
			raise ValueError(f"{args.file}: no functions defined")
		entry = args.entry if args.entry is not None else next(iter(functions))
		if entry not in functions:
			raise ValueError(f"{args.file}: no function named '{entry}'")
		fn = functions[entry]
		values = [ast.literal_eval(a) for a in args.args]
		ctx = BaseCtx(
			primitives=[_resolve_callable(name, functions) for name in args.primitives],
			scopes=DEFAULT_PRIMITIVE_SCOPES | set(args.scopes),
		)
		if args.show_ir:
			for ir in table.methods(fn):
				print(ir)
	except Exception as err:
		print(f"error: {err}", file=sys.stderr)
		return 1

	before = _latest_failure()
	try:
		value, tape = trace(fn, *values, ctx=ctx, methods=table)
	except Exception as err:
		print(f"error: {type(err).__name__}: {err}", file=sys.stderr)
		if _latest_failure() is not before:
			print_failure_stack(file=sys.stderr)
		return 1

	if args.json:
		print(json.dumps(_tape_json(value, tape), indent=2, sort_keys=True))
	else:
		print(repr(tape))
		print(f"result: {value!r}")
	return 0


if __name__ == "__main__":  # pragma: no cover
	sys.exit(main())
