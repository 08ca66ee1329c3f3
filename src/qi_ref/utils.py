from __future__ import annotations

import os as _os
from typing import List, Optional

from .types import (
    QiValue,
    QiNone,
    QiBool,
    QiNumber,
    QiString,
    QiArray,
    QiFn,
    QiValueError,
    QiTypeError,
    type_name,
)

# Longest str or arr a single operation may build.
MAX_SEQUENCE_LENGTH = 1 << 26


def value_equals(lhs: QiValue, rhs: QiValue) -> bool:
    """Structural equality; values of different types are never equal."""
    match lhs, rhs:
        case QiNone(), QiNone():
            return True
        case QiBool(value=a), QiBool(value=b):
            return a == b
        case QiNumber(value=a), QiNumber(value=b):
            return a == b
        case QiString(value=a), QiString(value=b):
            return a == b
        case QiArray(items=a), QiArray(items=b):
            return len(a) == len(b) and all(value_equals(x, y) for x, y in zip(a, b))
        case QiFn(), QiFn():
            return lhs is rhs
        case _:
            return False


def value_in_list(seq: List[QiValue], value: QiValue) -> int:
    for idx, existing in enumerate(seq):
        if value_equals(existing, value):
            return idx

    return -1


def copy_value(value: QiValue) -> QiValue:
    """Return an independently owned copy; functions are shared."""
    match value:
        case QiNone():
            return QiNone()
        case QiBool(value=b):
            return QiBool(b)
        case QiNumber(value=n):
            return QiNumber(n)
        case QiString(value=s):
            return QiString(s)
        case QiArray(items=items):
            return QiArray([copy_value(x) for x in items])
        case QiFn():
            return value
        case _:
            raise QiTypeError(f"Cannot copy {type(value).__name__}")


def expect_int(value: QiValue, context: str) -> int:
    if isinstance(value, QiNumber) and float(value.value).is_integer():
        return int(value.value)

    raise QiValueError(f"{context} must be an integer, got {type_name(value)} {value!r}")


def check_index(idx: int, size: int, context: str) -> int:
    if idx < 0 or idx >= size:
        raise QiValueError(f"{context} index {idx} out of range for length {size}")

    return idx


def check_length(size: int, context: str) -> int:
    if size > MAX_SEQUENCE_LENGTH:
        raise QiValueError(f"{context} would build {size} elements, limit is {MAX_SEQUENCE_LENGTH}")

    return size


def debug_py_trace_enabled() -> bool:
    return _os.environ.get("QI_DEBUG_PY_TRACE", "").lower() in ("1", "true", "yes", "on")


def env_int(name: str) -> Optional[int]:
    """Read an integer setting from the environment, or None if unset."""
    raw = _os.environ.get(name)
    if raw is None or not raw.strip():
        return None

    try:
        return int(raw.strip())
    except ValueError:
        raise QiValueError(f"{name} must be an integer, got {raw!r}") from None
