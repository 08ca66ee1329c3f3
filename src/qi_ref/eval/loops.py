from __future__ import annotations

from typing import List, Tuple

from ..runtime import (
    Breaking,
    Frame,
    Normal,
    Outcome,
    QiArityError,
    QiNameError,
    QiNone,
    QiNumber,
    QiSyntaxError,
    QiValue,
    QiValueError,
    Returning,
)
from ..token_types import RANGE, Category, OpKind
from ..tree import Node, is_bare_symbol
from .common import EvalFunc, eval_operands
from .expr import add_equal, less_than
from .helpers import is_int, to_bool

def _run_body(body: Node, frame: Frame, eval_func: EvalFunc) -> Tuple[bool, Outcome | None]:
    """Run one iteration; returns (stop, outcome to propagate)."""
    outcome = eval_func(body, frame)

    match outcome:
        case Breaking():
            return True, None
        case Returning():
            return True, outcome
        case _:
            # Normal, or Continuing cleared at the body boundary
            return False, None

def eval_while(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    if len(node.children) != 2:
        raise QiSyntaxError("malformed while: expected a condition and a body", node.line)

    cond_node, body_node = node.children

    while True:
        cond = eval_func(cond_node, frame)
        if not isinstance(cond, Normal):
            return cond

        if not to_bool(cond.value):
            break

        stop, outcome = _run_body(body_node, frame, eval_func)
        if outcome is not None:
            return outcome
        if stop:
            break

    return Normal(QiNone())

def _range_bounds(values: List[QiValue], line: int | None) -> Tuple[float, float, float]:
    for value in values:
        if not is_int(value):
            raise QiValueError(f"{RANGE} arguments must be integers, got {value!r}", line)

    nums = [float(v.value) for v in values]  # type: ignore[union-attr]

    match nums:
        case [end]:
            return 0.0, end, 1.0
        case [start, end]:
            return start, end, 1.0
        case [start, end, step]:
            return start, end, step

    raise QiArityError(f"{RANGE} expects 1 to 3 arguments, got {len(values)}", line)

def eval_for(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    """for x of range(...) { ... } with x bound in the current frame for the loop's lifetime."""
    if len(node.children) != 2:
        raise QiSyntaxError("malformed for: expected a header and a body", node.line)

    head, body_node = node.children

    if head.category is not Category.BUILTIN or head.kind is not OpKind.OF or len(head.children) != 2:
        raise QiSyntaxError("for loop header must be `<name> of range(...)`", node.line)

    var_node, range_node = head.children

    if not is_bare_symbol(var_node):
        raise QiSyntaxError("for loop variable must be a plain name", node.line)

    name = var_node.text
    if frame.has(name):
        raise QiNameError(f'for loop variable "{name}" already defined', node.line)

    if range_node.category is not Category.SYMBOL or range_node.text != RANGE:
        raise QiSyntaxError(f"for loop expects {RANGE}(...) after of", node.line)

    argc = len(range_node.children)
    if not 1 <= argc <= 3:
        raise QiArityError(f"{RANGE} expects 1 to 3 arguments, got {argc}", node.line)

    values, signal = eval_operands(range_node.children, frame, eval_func)
    if signal is not None:
        return signal

    start, end, step = _range_bounds(values, node.line)
    counter = QiNumber(start)
    limit = QiNumber(end)
    increment = QiNumber(step)

    frame.add(name, counter)
    frame.loop_vars.add(name)

    try:
        while to_bool(less_than(counter, limit)):
            stop, outcome = _run_body(body_node, frame, eval_func)
            if outcome is not None:
                return outcome
            if stop:
                break

            add_equal(counter, increment)
    finally:
        frame.loop_vars.discard(name)
        frame.remove(name)

    return Normal(QiNone())
