"""Builtin collection methods for arrays and strings, registered via qi_ref.runtime."""

from __future__ import annotations

from typing import List

from .runtime import (
    Frame,
    QiArray,
    QiBool,
    QiNumber,
    QiString,
    QiTypeError,
    QiValue,
    QiValueError,
    register_array,
    register_string,
    type_name,
)
from .utils import check_index, check_length, copy_value, expect_int, value_in_list

def _string_arg(method: str, arg: QiValue) -> str:
    if isinstance(arg, QiString):
        return arg.value

    raise QiTypeError(f"str.{method} expects a str argument, got {type_name(arg)}")

def _slice_bounds(method: str, args: List[QiValue], size: int) -> slice:
    """Bounds of `sub(start, end, step)`; start and end must lie within [0, size]."""
    start = expect_int(args[0], f"{method} start") if len(args) >= 1 else 0
    end = expect_int(args[1], f"{method} end") if len(args) >= 2 else size
    step = expect_int(args[2], f"{method} step") if len(args) >= 3 else 1

    if start < 0 or start > size:
        raise QiValueError(f"{method} start {start} out of range for length {size}")
    if end < start or end > size:
        raise QiValueError(f"{method} end {end} out of range for start {start} and length {size}")
    if step <= 0:
        raise QiValueError(f"{method} step must be positive, got {step}")

    return slice(start, end, step)

# ---------------- Arrays ----------------

@register_array("push")
def _array_push(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiArray:
    recv.items.append(copy_value(args[0]))
    return recv

@register_array("pop")
def _array_pop(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiValue:
    if not recv.items:
        raise QiValueError("pop from empty arr")

    return recv.items.pop()

@register_array("len")
def _array_len(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiNumber:
    return QiNumber(float(len(recv.items)))

@register_array("empty")
def _array_empty(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiBool:
    return QiBool(not recv.items)

@register_array("find")
def _array_find(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiNumber:
    return QiNumber(float(value_in_list(recv.items, args[0])))

@register_array("reverse")
def _array_reverse(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiArray:
    recv.items.reverse()
    return recv

@register_array("fill")
def _array_fill(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiArray:
    """Write copies of the value into [start, end), growing the array as needed."""
    start = expect_int(args[0], "fill start")
    end = expect_int(args[1], "fill end")
    value = args[2]

    if start < 0 or start > len(recv.items):
        raise QiValueError(f"fill start {start} out of range for length {len(recv.items)}")
    if end < start:
        raise QiValueError(f"fill end {end} is before start {start}")
    check_length(end, "fill")

    for idx in range(start, end):
        if idx < len(recv.items):
            recv.items[idx] = copy_value(value)
        else:
            recv.items.append(copy_value(value))

    return recv

@register_array("at")
def _array_at(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiValue:
    idx = check_index(expect_int(args[0], "at"), len(recv.items), "at")
    # the element box itself, so `a.at(0) = x` writes through
    return recv.items[idx]

@register_array("next")
def _array_next(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiValue:
    if not recv.items:
        raise QiValueError("next on empty arr")

    return recv.items[0]

@register_array("last")
def _array_last(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiValue:
    if not recv.items:
        raise QiValueError("last on empty arr")

    return recv.items[-1]

@register_array("sub")
def _array_sub(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiArray:
    bounds = _slice_bounds("sub", args, len(recv.items))
    return QiArray([copy_value(x) for x in recv.items[bounds]])

@register_array("clear")
def _array_clear(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiArray:
    recv.items.clear()
    return recv

@register_array("sort")
def _array_sort(_frame: Frame, recv: QiArray, args: List[QiValue]) -> QiArray:
    if not recv.items:
        return recv

    if all(isinstance(x, QiNumber) for x in recv.items):
        recv.items.sort(key=lambda x: float(x.value))
    elif all(isinstance(x, QiString) for x in recv.items):
        recv.items.sort(key=lambda x: x.value)
    else:
        raise QiTypeError("sort expects an arr of only num or only str")

    return recv

# ---------------- Strings ----------------

@register_string("push")
def _string_push(_frame: Frame, recv: QiString, args: List[QiValue]) -> QiString:
    recv.value += _string_arg("push", args[0])
    return recv

@register_string("pop")
def _string_pop(_frame: Frame, recv: QiString, args: List[QiValue]) -> QiString:
    if not recv.value:
        raise QiValueError("pop from empty str")

    last = recv.value[-1]
    recv.value = recv.value[:-1]
    return QiString(last)

@register_string("len")
def _string_len(_frame: Frame, recv: QiString, args: List[QiValue]) -> QiNumber:
    return QiNumber(float(len(recv.value)))

@register_string("empty")
def _string_empty(_frame: Frame, recv: QiString, args: List[QiValue]) -> QiBool:
    return QiBool(not recv.value)

@register_string("find")
def _string_find(_frame: Frame, recv: QiString, args: List[QiValue]) -> QiNumber:
    return QiNumber(float(recv.value.find(_string_arg("find", args[0]))))

@register_string("reverse")
def _string_reverse(_frame: Frame, recv: QiString, args: List[QiValue]) -> QiString:
    recv.value = recv.value[::-1]
    return recv

@register_string("at")
def _string_at(_frame: Frame, recv: QiString, args: List[QiValue]) -> QiString:
    idx = check_index(expect_int(args[0], "at"), len(recv.value), "at")
    return QiString(recv.value[idx])

@register_string("next")
def _string_next(_frame: Frame, recv: QiString, args: List[QiValue]) -> QiString:
    if not recv.value:
        raise QiValueError("next on empty str")

    return QiString(recv.value[0])

@register_string("last")
def _string_last(_frame: Frame, recv: QiString, args: List[QiValue]) -> QiString:
    if not recv.value:
        raise QiValueError("last on empty str")

    return QiString(recv.value[-1])

@register_string("sub")
def _string_sub(_frame: Frame, recv: QiString, args: List[QiValue]) -> QiString:
    return QiString(recv.value[_slice_bounds("sub", args, len(recv.value))])

@register_string("clear")
def _string_clear(_frame: Frame, recv: QiString, args: List[QiValue]) -> QiString:
    recv.value = ""
    return recv
