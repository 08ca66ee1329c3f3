from __future__ import annotations

from ..runtime import (
    Frame,
    Normal,
    Outcome,
    QiNone,
    QiNumber,
    QiString,
    QiTypeError,
    QiValueError,
    type_name,
)
from ..tree import Node
from .common import EvalFunc, eval_operands, require_number, stringify

def eval_in(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    """Read one line into the target, parsed according to the target's current type."""
    target_outcome = eval_func(node.children[0], frame)
    if not isinstance(target_outcome, Normal):
        return target_outcome

    target = target_outcome.value
    line = frame.input_stream.readline()

    if line == "":
        raise QiValueError("unexpected end of input", node.line)

    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]

    match target:
        case QiNumber():
            target.value = require_number(line, f'invalid number in input: "{line}"', node.line).value
        case QiString():
            target.value = line
        case _:
            raise QiTypeError(f"unsupported input type {type_name(target)}", node.line)

    return Normal(target)

def _write(node: Node, frame: Frame, eval_func: EvalFunc, end: str) -> Outcome:
    values, signal = eval_operands(node.children, frame, eval_func)
    if signal is not None:
        return signal

    stream = frame.output_stream
    stream.write(stringify(values[0]) + end)
    stream.flush()

    return Normal(QiNone())

def eval_out(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    return _write(node, frame, eval_func, "")

def eval_outl(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    return _write(node, frame, eval_func, "\n")
