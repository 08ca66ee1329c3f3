from __future__ import annotations

import sys
import traceback
from pathlib import Path
from typing import List, Optional, TextIO, Tuple

from .evaluator import eval_program
from .parser import ParseError, parse_source
from .runtime import Frame, QiRuntimeError, QiValue, init_stdlib
from .token_types import COMPOUND_BASE, Category, OpKind
from .tree import Node
from .stdlib import seed_random
from .utils import debug_py_trace_enabled, env_int

# Each Qi call nests a couple of dozen Python frames.
DEFAULT_RECURSION_LIMIT = 20000

def ensure_recursion_limit(limit: Optional[int] = None) -> None:
    if limit is None:
        limit = env_int("QI_RECURSION_LIMIT")

    if limit is None:
        limit = max(sys.getrecursionlimit(), DEFAULT_RECURSION_LIMIT)

    sys.setrecursionlimit(limit)

def run(src: str, stdin: Optional[TextIO]=None, stdout: Optional[TextIO]=None, frame: Optional[Frame]=None) -> QiValue:
    """Parse and evaluate `src`; returns the value of the top-level body."""
    init_stdlib()
    program = parse_source(src)

    if frame is None:
        frame = Frame(stdin=stdin, stdout=stdout)

    try:
        return eval_program(program, frame)
    except RecursionError:
        raise QiRuntimeError("maximum recursion depth exceeded") from None

_STATEMENT_OPS = {
    OpKind.ASSIGN, OpKind.IN, OpKind.OUT, OpKind.OUTL,
    OpKind.RETURN, OpKind.BREAK, OpKind.CONTINUE, *COMPOUND_BASE,
}

def _is_statement(node: Optional[Node]) -> bool:
    if node is None:
        return True

    if node.category is Category.BUILTIN:
        return node.kind in _STATEMENT_OPS

    return node.category not in (Category.SYMBOL, Category.NUMBER, Category.STRING)

def repl_eval(src: str, frame: Frame) -> Tuple[QiValue, bool]:
    """Evaluate one REPL entry in a persistent frame.

    Returns the value and whether the entry ended in a statement (whose value
    the REPL does not echo). A missing trailing ";" is tolerated.
    """
    try:
        program = parse_source(src)
    except ParseError:
        stripped = src.rstrip()
        if stripped.endswith((";", "}")):
            raise
        program = parse_source(stripped + ";")

    children = program.body.children if program.body is not None else []
    stmt = _is_statement(children[-1] if children else None)

    try:
        return eval_program(program, frame), stmt
    except RecursionError:
        raise QiRuntimeError("maximum recursion depth exceeded") from None

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_text(encoding="utf-8")

    return arg

def _int_flag(flag: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise SystemExit(f"{flag} expects an integer, got {raw!r}") from None

def main(argv: Optional[List[str]]=None) -> int:
    seed: Optional[int] = None
    recursion_limit: Optional[int] = None
    arg = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token.startswith("--seed="):
            seed = _int_flag("--seed", token.split("=", 1)[1])
            continue

        if token == "--seed":
            try:
                seed = _int_flag("--seed", next(it))
            except StopIteration:
                raise SystemExit("--seed flag requires a value") from None
            continue

        if token.startswith("--recursion-limit="):
            recursion_limit = _int_flag("--recursion-limit", token.split("=", 1)[1])
            continue

        if token == "--recursion-limit":
            try:
                recursion_limit = _int_flag("--recursion-limit", next(it))
            except StopIteration:
                raise SystemExit("--recursion-limit flag requires a value") from None
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    try:
        ensure_recursion_limit(recursion_limit)
        if seed is not None:
            seed_random(seed)

        source = _load_source(arg or "-")
        run(source)
    except QiRuntimeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if debug_py_trace_enabled():
            traceback.print_exc()
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
