"""Free functions (floor, ceil, round, rand) registered via qi_ref.runtime."""

from __future__ import annotations

import math
import random
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import List, Optional

from .runtime import Frame, QiNumber, QiTypeError, QiValue, QiValueError, register_stdlib, type_name
from .utils import env_int, expect_int

_rng = random.Random(env_int("QI_RANDOM_SEED"))

def seed_random(seed: Optional[int]) -> None:
    """Reseed the generator behind rand(); None seeds from the OS."""
    _rng.seed(seed)

def _number_arg(name: str, arg: QiValue) -> float:
    if isinstance(arg, QiNumber):
        return float(arg.value)

    raise QiTypeError(f"{name} expects a num argument, got {type_name(arg)}")

def _finite(name: str, value: float) -> float:
    if not math.isfinite(value):
        raise QiValueError(f"{name} of non-finite number {value}")

    return value

@register_stdlib("floor", arity=1)
def std_floor(_frame: Frame, args: List[QiValue]) -> QiNumber:
    x = _finite("floor", _number_arg("floor", args[0]))
    return QiNumber(float(math.floor(x)))

@register_stdlib("ceil", arity=1)
def std_ceil(_frame: Frame, args: List[QiValue]) -> QiNumber:
    x = _finite("ceil", _number_arg("ceil", args[0]))
    return QiNumber(float(math.ceil(x)))

@register_stdlib("round", arity=2)
def std_round(_frame: Frame, args: List[QiValue]) -> QiNumber:
    """round(x, digits): half away from zero at `digits` decimal places."""
    x = _finite("round", _number_arg("round", args[0]))
    digits = expect_int(args[1], "round digits")

    try:
        rounded = Decimal(repr(x)).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise QiValueError(f"round digits {digits} out of range") from None

    return QiNumber(float(rounded))

@register_stdlib("rand", arity=0)
def std_rand(_frame: Frame, args: List[QiValue]) -> QiNumber:
    return QiNumber(_rng.random())
