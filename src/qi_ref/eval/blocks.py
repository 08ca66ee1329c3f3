from __future__ import annotations

from typing import Optional

from ..runtime import Frame, Normal, Outcome, QiBool, QiNone, QiSyntaxError, QiValue
from ..token_types import Control
from ..tree import Node, control_kind
from .common import EvalFunc

_CHAIN_HEADS = (Control.IF, Control.ELSIF)

def eval_group(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    """Run children in order, stopping at the first signal.

    if/elsif/else chains are flat siblings: each if/elsif leaves a bool
    recording whether its branch fired, and a following elsif/else reads it.
    """
    result: QiValue = QiNone()
    prev: Optional[Node] = None

    for child in node.children:
        kind = control_kind(child)

        if kind in (Control.ELSIF, Control.ELSE):
            if control_kind(prev) not in _CHAIN_HEADS:
                raise QiSyntaxError(f"{kind.value} must follow if or elsif", child.line)

            if isinstance(result, QiBool) and result.value:
                prev = child
                if kind is Control.ELSIF:
                    result = QiBool(True)
                continue

        outcome = eval_func(child, frame)
        if not isinstance(outcome, Normal):
            return outcome

        result = outcome.value
        prev = child

    return Normal(result)
