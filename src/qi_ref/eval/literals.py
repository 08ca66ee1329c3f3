from __future__ import annotations

from ..runtime import Frame, Normal, Outcome, QiString
from ..tree import Node
from .common import EvalFunc, require_number

def eval_number(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    return Normal(require_number(node.text, f'invalid number "{node.text}"', node.line))

def eval_string(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    # fresh box per evaluation; the tree's text is never aliased
    return Normal(QiString(node.text))
