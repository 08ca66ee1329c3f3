from __future__ import annotations

from ..runtime import (
    Breaking,
    Continuing,
    Frame,
    Normal,
    Outcome,
    QiBool,
    QiNone,
    QiSyntaxError,
    Returning,
)
from ..tree import Node
from ..utils import copy_value
from .common import EvalFunc, eval_operands
from .helpers import to_bool

def _branch(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    if len(node.children) != 2:
        raise QiSyntaxError(f"malformed {node.text}: expected a condition and a body", node.line)

    cond_node, body_node = node.children
    cond = eval_func(cond_node, frame)
    if not isinstance(cond, Normal):
        return cond

    fired = to_bool(cond.value)

    if fired:
        body = eval_func(body_node, frame)
        if not isinstance(body, Normal):
            return body

    return Normal(QiBool(fired))

def eval_if(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    return _branch(node, frame, eval_func)

def eval_elsif(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    return _branch(node, frame, eval_func)

def eval_else(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    if len(node.children) != 1:
        raise QiSyntaxError("malformed else: expected a body", node.line)

    body = eval_func(node.children[0], frame)
    if not isinstance(body, Normal):
        return body

    return Normal(QiNone())

def eval_return(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    values, signal = eval_operands(node.children, frame, eval_func)
    if signal is not None:
        return signal

    return Returning(copy_value(values[0]))

def eval_break(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    return Breaking(node.line)

def eval_continue(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    return Continuing(node.line)
