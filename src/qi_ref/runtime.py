from __future__ import annotations

import importlib
from typing import Callable, Dict, List

from .types import (
    QiNone, QiBool, QiNumber, QiString, QiArray, QiFn,
    QiValue, Frame, Normal, Returning, Continuing, Breaking, Outcome,
    QiRuntimeError, QiSyntaxError, QiTypeError, QiArityError, QiNameError,
    QiValueError, QiControlFlowError, QiMethodNotFound,
    Method, MethodRegistry, Builtins, StdlibFn, StdlibFunction,
    type_of, type_name,
)

__all__ = [
    "QiNone", "QiBool", "QiNumber", "QiString", "QiArray", "QiFn",
    "QiValue", "Frame", "Normal", "Returning", "Continuing", "Breaking", "Outcome",
    "QiRuntimeError", "QiSyntaxError", "QiTypeError", "QiArityError", "QiNameError",
    "QiValueError", "QiControlFlowError", "QiMethodNotFound",
    "Method", "MethodRegistry", "Builtins", "StdlibFn", "StdlibFunction",
    "type_of", "type_name",
    "init_stdlib", "register_array", "register_string", "register_stdlib",
    "call_builtin_method", "call_function",
]

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load builtin method and free-function modules (idempotent) so their register hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    for module_name in ("qi_ref.methods", "qi_ref.stdlib"):
        importlib.import_module(module_name)

    _STDLIB_INITIALIZED = True

def register_method(registry: MethodRegistry, name: str):
    def dec(fn: Callable[..., QiValue]):
        registry[name] = fn
        return fn

    return dec

def register_array(name: str):
    return register_method(Builtins.array_methods, name)

def register_string(name: str):
    return register_method(Builtins.string_methods, name)

def register_stdlib(name: str, *, arity: int):
    def dec(fn: StdlibFn):
        Builtins.stdlib_functions[name] = StdlibFunction(fn=fn, arity=arity)
        return fn

    return dec

def call_builtin_method(recv: QiValue, name: str, args: List[QiValue], frame: Frame) -> QiValue:
    registry_by_type: Dict[type, MethodRegistry] = {
        QiArray: Builtins.array_methods,
        QiString: Builtins.string_methods,
    }

    registry = registry_by_type.get(type(recv))
    if registry:
        handler = registry.get(name)
        if handler is not None:
            return handler(frame, recv, args)

    raise QiMethodNotFound(recv, name)

def call_function(fn: QiFn, args: List[QiValue]) -> QiValue:
    """Bind copies of `args` in a child of the defining frame and run the body.

    Argument count must already match the parameter list.
    """
    from .evaluator import Activation  # local import to avoid cycle
    from .utils import copy_value

    if fn.frame is None:
        raise QiRuntimeError(f'function "{fn.name}" has no defining frame', fn.line)

    callee_frame = fn.frame.child()

    for param, arg in zip(fn.params, args):
        bound = copy_value(arg)

        if type_of(bound) is not param.type:
            raise QiTypeError(
                f'argument "{param.name}" of "{fn.name}" expects {param.type.value}, got {type_name(bound)}'
            )

        callee_frame.add(param.name, bound)

    return Activation(fn.body, fn).init(callee_frame)
