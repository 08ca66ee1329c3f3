from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Tuple

from ..runtime import (
    Frame,
    Normal,
    Outcome,
    QiArray,
    QiBool,
    QiFn,
    QiNone,
    QiNumber,
    QiString,
    QiSyntaxError,
    QiTypeError,
    QiValue,
    QiValueError,
    type_name,
    type_of,
)
from ..token_types import COMPOUND_BASE, OpKind
from ..tree import Node
from ..utils import check_length, copy_value, value_equals
from .common import EvalFunc, eval_operands
from .helpers import is_int, to_bool

BinaryOp = Callable[[QiValue, QiValue], QiValue]
UnaryOp = Callable[[QiValue], QiValue]

def _unsupported(op: str, lhs: QiValue, rhs: QiValue) -> QiTypeError:
    return QiTypeError(f'unsupported operand types for "{op}": {type_name(lhs)} and {type_name(rhs)}')

def _num_pair(op: str, lhs: QiValue, rhs: QiValue) -> Tuple[float, float]:
    if isinstance(lhs, QiNumber) and isinstance(rhs, QiNumber):
        return float(lhs.value), float(rhs.value)

    raise _unsupported(op, lhs, rhs)

def _int_pair(op: str, lhs: QiValue, rhs: QiValue) -> Tuple[int, int]:
    a, b = _num_pair(op, lhs, rhs)
    if not (is_int(lhs) and is_int(rhs)):
        raise QiValueError(f'operands of "{op}" must be integers')

    return int(a), int(b)

def _to_float(op: str, value: int) -> QiNumber:
    try:
        return QiNumber(float(value))
    except OverflowError:
        raise QiValueError(f'result of "{op}" is too large') from None

# ---------------- Assignment ----------------

def assign(target: QiValue, source: QiValue) -> QiValue:
    """Copy `source` into the `target` box in place; types must match."""
    if type_of(target) is not type_of(source):
        raise QiTypeError(f"cannot assign {type_name(source)} to {type_name(target)}")

    match target, source:
        case QiBool(), QiBool(value=b):
            target.value = b
        case QiNumber(), QiNumber(value=n):
            target.value = float(n)
        case QiString(), QiString(value=s):
            target.value = s
        case QiArray(), QiArray(items=items):
            target.items = [copy_value(x) for x in items]
        case QiFn(), _:
            raise QiTypeError("cannot assign to a function")
        case QiNone(), _:
            pass

    return target

# ---------------- Arithmetic ----------------

def add(lhs: QiValue, rhs: QiValue) -> QiValue:
    match lhs, rhs:
        case QiNumber(value=a), QiNumber(value=b):
            return QiNumber(float(a) + float(b))
        case QiString(value=a), QiString(value=b):
            return QiString(a + b)
        case QiArray(items=a), QiArray(items=b):
            return QiArray([copy_value(x) for x in a + b])
        case _:
            raise _unsupported("+", lhs, rhs)

def subtract(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _num_pair("-", lhs, rhs)
    return QiNumber(a - b)

def multiply(lhs: QiValue, rhs: QiValue) -> QiValue:
    if isinstance(lhs, QiString) and isinstance(rhs, QiNumber):
        if not is_int(rhs) or rhs.value < 0:
            raise QiValueError("string repeat count must be a non-negative integer")
        count = int(rhs.value)
        check_length(len(lhs.value) * count, "string repeat")
        return QiString(lhs.value * count)

    a, b = _num_pair("*", lhs, rhs)
    return QiNumber(a * b)

def power(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _num_pair("**", lhs, rhs)

    try:
        return QiNumber(math.pow(a, b))
    except (ValueError, ZeroDivisionError):
        raise QiValueError(f"math domain error in {lhs!r} ** {rhs!r}") from None
    except OverflowError:
        raise QiValueError('result of "**" is too large') from None

def divide(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _num_pair("/", lhs, rhs)
    if b == 0:
        raise QiValueError("division by zero")

    return QiNumber(a / b)

def truncate_divide(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _num_pair("//", lhs, rhs)
    if b == 0:
        raise QiValueError("division by zero")

    q = a / b
    return QiNumber(float(math.trunc(q)) if math.isfinite(q) else q)

def modulo(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _num_pair("%", lhs, rhs)
    if b == 0:
        raise QiValueError("modulo by zero")

    return QiNumber(math.fmod(a, b))

def negate(operand: QiValue) -> QiValue:
    if not isinstance(operand, QiNumber):
        raise QiTypeError(f'unsupported operand type for unary "-": {type_name(operand)}')

    return QiNumber(-float(operand.value))

# ---------------- Bitwise ----------------

def b_xor(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _int_pair("^", lhs, rhs)
    return _to_float("^", a ^ b)

def b_or(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _int_pair("|", lhs, rhs)
    return _to_float("|", a | b)

def b_and(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _int_pair("&", lhs, rhs)
    return _to_float("&", a & b)

def b_right_shift(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _int_pair(">>", lhs, rhs)
    if b < 0:
        raise QiValueError("negative shift count")

    return _to_float(">>", a >> b)

def b_left_shift(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _int_pair("<<", lhs, rhs)
    if b < 0:
        raise QiValueError("negative shift count")
    if a and a.bit_length() + b > 1024:
        raise QiValueError('result of "<<" is too large')

    return _to_float("<<", a << b)

# ---------------- Comparison ----------------

def _ordered(op: str, lhs: QiValue, rhs: QiValue) -> Tuple[float | str, float | str]:
    match lhs, rhs:
        case QiNumber(value=a), QiNumber(value=b):
            return float(a), float(b)
        case QiString(value=a), QiString(value=b):
            return a, b
        case _:
            raise _unsupported(op, lhs, rhs)

def greater_than(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _ordered(">", lhs, rhs)
    return QiBool(a > b)

def less_than(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _ordered("<", lhs, rhs)
    return QiBool(a < b)

def greater_than_equal_to(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _ordered(">=", lhs, rhs)
    return QiBool(a >= b)

def less_than_equal_to(lhs: QiValue, rhs: QiValue) -> QiValue:
    a, b = _ordered("<=", lhs, rhs)
    return QiBool(a <= b)

def equals(lhs: QiValue, rhs: QiValue) -> QiValue:
    return QiBool(value_equals(lhs, rhs))

def not_equals(lhs: QiValue, rhs: QiValue) -> QiValue:
    return QiBool(not value_equals(lhs, rhs))

# ---------------- Logical ----------------

def logical_and(lhs: QiValue, rhs: QiValue) -> QiValue:
    return QiBool(to_bool(lhs) and to_bool(rhs))

def logical_or(lhs: QiValue, rhs: QiValue) -> QiValue:
    return QiBool(to_bool(lhs) or to_bool(rhs))

def logical_not(operand: QiValue) -> QiValue:
    return QiBool(not to_bool(operand))

# ---------------- Dispatch ----------------

BINARY_OPERATORS: Dict[OpKind, BinaryOp] = {
    OpKind.ASSIGN: assign,
    OpKind.ADD: add,
    OpKind.SUBTRACT: subtract,
    OpKind.MULTIPLY: multiply,
    OpKind.POWER: power,
    OpKind.DIVIDE: divide,
    OpKind.TRUNCATE_DIVIDE: truncate_divide,
    OpKind.MODULO: modulo,
    OpKind.XOR: b_xor,
    OpKind.BIT_OR: b_or,
    OpKind.BIT_AND: b_and,
    OpKind.RIGHT_SHIFT: b_right_shift,
    OpKind.LEFT_SHIFT: b_left_shift,
    OpKind.GREATER_THAN: greater_than,
    OpKind.LESS_THAN: less_than,
    OpKind.EQUALS: equals,
    OpKind.NOT_EQUALS: not_equals,
    OpKind.GREATER_THAN_EQUAL_TO: greater_than_equal_to,
    OpKind.LESS_THAN_EQUAL_TO: less_than_equal_to,
    OpKind.AND: logical_and,
    OpKind.OR: logical_or,
}

UNARY_OPERATORS: Dict[OpKind, UnaryOp] = {
    OpKind.NEGATE: negate,
    OpKind.NOT: logical_not,
}

def _compound(base: BinaryOp) -> BinaryOp:
    def apply(lhs: QiValue, rhs: QiValue) -> QiValue:
        return assign(lhs, base(lhs, rhs))

    apply.__name__ = f"{base.__name__}_equal"
    return apply

for _kind, _base in COMPOUND_BASE.items():
    BINARY_OPERATORS[_kind] = _compound(BINARY_OPERATORS[_base])

add_equal = BINARY_OPERATORS[OpKind.ADD_EQUAL]

def apply_operator(kind: OpKind, operands: List[QiValue]) -> QiValue:
    unary = UNARY_OPERATORS.get(kind)
    if unary is not None:
        return unary(operands[0])

    binary = BINARY_OPERATORS.get(kind)
    if binary is None:
        raise QiSyntaxError(f'operator "{kind.value}" not implemented')

    return binary(operands[0], operands[1])

def eval_operator(node: Node, frame: Frame, eval_func: EvalFunc, kind: Optional[OpKind]=None) -> Outcome:
    """Evaluate every operand left to right, then apply the operator."""
    if kind is None:
        kind = node.kind  # type: ignore[assignment]

    values, signal = eval_operands(node.children, frame, eval_func)
    if signal is not None:
        return signal

    return Normal(apply_operator(kind, values))  # type: ignore[arg-type]
