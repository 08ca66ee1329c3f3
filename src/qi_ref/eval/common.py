from __future__ import annotations

import re
from typing import Callable, List, Optional, Tuple

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
    QiValue,
    QiValueError,
)
from ..tree import Node

EvalFunc = Callable[[Node, Frame], Outcome]

# Leading whitespace is accepted, trailing text is not.
_NUMBER_RE = re.compile(
    r"\s*[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)

def parse_number(text: str) -> Optional[float]:
    """Parse the whole of `text` as a base-10 float, or return None."""
    if _NUMBER_RE.fullmatch(text) is None:
        return None

    return float(text)

def require_number(text: str, message: str, line: Optional[int] = None) -> QiNumber:
    num = parse_number(text)
    if num is None:
        raise QiValueError(message, line)

    return QiNumber(num)

def eval_operands(nodes: List[Node], frame: Frame, eval_func: EvalFunc) -> Tuple[List[QiValue], Optional[Outcome]]:
    """Evaluate nodes left to right.

    Stops at the first outcome that is not Normal and hands it back so the
    caller can propagate it instead of continuing with partial operands.
    """
    values: List[QiValue] = []

    for node in nodes:
        outcome = eval_func(node, frame)
        if not isinstance(outcome, Normal):
            return values, outcome
        values.append(outcome.value)

    return values, None

def stringify(value: QiValue) -> str:
    match value:
        case QiString(value=s):
            return s
        case QiBool() | QiNumber() | QiNone() | QiArray() | QiFn():
            return repr(value)
