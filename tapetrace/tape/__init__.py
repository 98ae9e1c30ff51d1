# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
"""
Tape package: the append-only execution record produced by tracing.

Public API:
  - V, Input, Constant, Call, Tape, mkcall, promote_const_value (tape)
  - make_tuple, allocate: primitives the tracer records itself (special)
  - play: replay a finished tape on new inputs (play)
"""

from .tape import (
	MISSING,
	V,
	Operation,
	Input,
	Constant,
	Call,
	mkcall,
	promote_const_value,
	Tape,
	format_op,
)
from .special import make_tuple, allocate
from .play import play

__all__ = [
	"MISSING",
	"V",
	"Operation",
	"Input",
	"Constant",
	"Call",
	"mkcall",
	"promote_const_value",
	"Tape",
	"format_op",
	"make_tuple",
	"allocate",
	"play",
]
