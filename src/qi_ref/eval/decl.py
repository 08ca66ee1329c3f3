from __future__ import annotations

from typing import Callable, Dict

from ..runtime import (
    Frame,
    Normal,
    Outcome,
    QiArray,
    QiBool,
    QiFn,
    QiNameError,
    QiNumber,
    QiString,
    QiSyntaxError,
    QiValue,
)
from ..token_types import ValueType
from ..tree import Node, is_bare_symbol
from .common import EvalFunc

_DEFAULTS: Dict[ValueType, Callable[[], QiValue]] = {
    ValueType.BOOL: QiBool,
    ValueType.NUM: QiNumber,
    ValueType.STR: QiString,
    ValueType.ARR: QiArray,
}

def default_value(vtype: ValueType) -> QiValue:
    factory = _DEFAULTS.get(vtype)
    if factory is None:
        raise QiSyntaxError(f"cannot declare a variable of type {vtype.value}")

    return factory()

def eval_declaration(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    """`num x` binds a default value in the current frame and yields it."""
    if len(node.children) != 1 or not is_bare_symbol(node.children[0]):
        raise QiSyntaxError("malformed declaration", node.line)

    try:
        vtype = ValueType(node.text)
    except ValueError:
        raise QiSyntaxError(f'unknown type "{node.text}"', node.line) from None

    name = node.children[0].text
    if name in frame.loop_vars or isinstance(frame.vars.get(name), QiFn):
        raise QiNameError(f'cannot redeclare "{name}"', node.line)

    value = default_value(vtype)
    # a repeated declaration (e.g. inside a loop body) rebinds a fresh default
    frame.set_local(name, value)

    return Normal(value)
