from __future__ import annotations

from ..runtime import (
    Frame,
    Normal,
    Outcome,
    QiArityError,
    QiNameError,
    QiSyntaxError,
    call_builtin_method,
)
from ..token_types import METHOD_ARITY, Category
from ..tree import Node
from .common import EvalFunc, eval_operands

def eval_method_call(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    """`target.name(args)`: the target is evaluated before the method is looked up."""
    target_node, method_node = node.children

    target = eval_func(target_node, frame)
    if not isinstance(target, Normal):
        return target

    if method_node.category is not Category.SYMBOL:
        raise QiSyntaxError(f'expected a method name after ".", got {method_node.text!r}', node.line)

    name = method_node.text
    bounds = METHOD_ARITY.get(name)
    if bounds is None:
        raise QiNameError(f'unknown method "{name}"', node.line)

    lo, hi = bounds
    argc = len(method_node.children)

    if not lo <= argc <= hi:
        expected = str(lo) if lo == hi else f"{lo} to {hi}"
        raise QiArityError(f"{name} expects {expected} argument(s), got {argc}", node.line)

    args, signal = eval_operands(method_node.children, frame, eval_func)
    if signal is not None:
        return signal

    return Normal(call_builtin_method(target.value, name, args, frame))
