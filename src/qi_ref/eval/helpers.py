from __future__ import annotations

import math

from ..runtime import QiArray, QiBool, QiFn, QiNone, QiNumber, QiString, QiValue

def to_bool(val: QiValue) -> bool:
    match val:
        case QiBool(value=b):
            return b
        case QiNone():
            return False
        case QiNumber(value=num):
            return num != 0
        case QiString(value=s):
            return bool(s)
        case QiArray(items=items):
            return bool(items)
        case QiFn():
            return True

def is_int(val: QiValue) -> bool:
    if not isinstance(val, QiNumber):
        return False

    num = float(val.value)
    return math.isfinite(num) and num.is_integer()
