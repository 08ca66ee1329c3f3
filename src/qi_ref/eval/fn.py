from __future__ import annotations

from ..runtime import (
    Builtins,
    Frame,
    Normal,
    Outcome,
    QiArityError,
    QiFn,
    QiNameError,
    call_function,
)
from ..tree import Node
from .common import EvalFunc, eval_operands

def eval_symbol(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    """Resolve a name: a bound value, a call to a bound function, or a free function."""
    name = node.text

    if frame.has(name):
        value = frame.get(name)

        if not isinstance(value, QiFn):
            return Normal(value)

        return _call(value, node, frame, eval_func)

    builtin = Builtins.stdlib_functions.get(name)
    if builtin is not None:
        if len(node.children) != builtin.arity:
            raise QiArityError(f"{name} expects {builtin.arity} argument(s), got {len(node.children)}", node.line)

        args, signal = eval_operands(node.children, frame, eval_func)
        if signal is not None:
            return signal

        return Normal(builtin.fn(frame, args))

    raise QiNameError(f'symbol "{name}" is undefined', node.line)

def _call(fn: QiFn, node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    if len(node.children) != len(fn.params):
        raise QiArityError(
            f'function "{fn.name}" expects {len(fn.params)} argument(s), got {len(node.children)}',
            node.line,
        )

    # arguments are evaluated in the caller's frame
    args, signal = eval_operands(node.children, frame, eval_func)
    if signal is not None:
        return signal

    return Normal(call_function(fn, args))
