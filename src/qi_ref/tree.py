"""Program tree nodes produced by the parser and walked by the evaluator.

Every node carries a token (text, category, declared operand count, source
line and the operator/control kind resolved at parse time) plus an ordered
list of children. The evaluator only borrows these; it never mutates them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from .token_types import (
    OP_ARITY,
    Category,
    Control,
    OpKind,
    ValueType,
    resolve_control,
)

Kind = Union[OpKind, Control, None]


class Token:
    __slots__ = ('text', 'category', 'ops', 'line', 'kind')

    def __init__(self, text: str, category: Category, ops: int = 0,
                 line: Optional[int] = None, kind: Kind = None):
        self.text = text
        self.category = category
        self.ops = ops
        self.line = line
        self.kind = kind

    def __repr__(self) -> str:
        return f'Token({self.category.value}, {self.text!r})'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return False
        return (self.text, self.category, self.ops, self.kind) == (other.text, other.category, other.ops, other.kind)

    def __hash__(self) -> int:
        return hash((self.text, self.category, self.ops, self.kind))


class Node:
    __slots__ = ('token', 'children')

    def __init__(self, token: Token, children: Optional[List[Node]] = None):
        self.token = token
        self.children = children if children is not None else []

    def __repr__(self) -> str:
        return f'Node({self.token!r}, {self.children!r})'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return False
        return self.token == other.token and self.children == other.children

    def __hash__(self) -> int:
        return hash((self.token, tuple(self.children)))

    @property
    def text(self) -> str:
        return self.token.text

    @property
    def category(self) -> Category:
        return self.token.category

    @property
    def kind(self) -> Kind:
        return self.token.kind

    @property
    def line(self) -> Optional[int]:
        return self.token.line


@dataclass(frozen=True)
class Param:
    name: str
    type: ValueType


@dataclass
class FunctionDef:
    name: str
    params: List[Param]
    returns: ValueType
    body: Node
    line: Optional[int] = None


@dataclass
class Program:
    """Top-level function definitions plus the statements to run."""
    functions: List[FunctionDef] = field(default_factory=list)
    body: Optional[Node] = None


# ---------------- Builders ----------------

def group(*children: Node, line: Optional[int] = None) -> Node:
    return Node(Token('{', Category.GROUP, line=line), list(children))

def control(kind: Control, *children: Node, line: Optional[int] = None) -> Node:
    return Node(Token(kind.value, Category.CONTROL, line=line, kind=kind), list(children))

def op(kind: OpKind, *children: Node, line: Optional[int] = None, text: Optional[str] = None) -> Node:
    if text is None:
        text = '-' if kind is OpKind.NEGATE else kind.value
    tok = Token(text, Category.BUILTIN, ops=OP_ARITY[kind], line=line, kind=kind)
    return Node(tok, list(children))

def symbol(name: str, *children: Node, line: Optional[int] = None) -> Node:
    return Node(Token(name, Category.SYMBOL, line=line), list(children))

def number(text: str, line: Optional[int] = None) -> Node:
    return Node(Token(text, Category.NUMBER, line=line))

def string(text: str, line: Optional[int] = None) -> Node:
    return Node(Token(text, Category.STRING, line=line))

def declaration(type_name: str, name: str, line: Optional[int] = None) -> Node:
    tok = Token(type_name, Category.DECLARATION, ops=1, line=line)
    return Node(tok, [symbol(name, line=line)])

# ---------------- Queries ----------------

def control_kind(node: Optional[Node]) -> Optional[Control]:
    if node is None or node.category is not Category.CONTROL:
        return None

    if isinstance(node.kind, Control):
        return node.kind

    return resolve_control(node.text)

def is_bare_symbol(node: Node) -> bool:
    return node.category is Category.SYMBOL and not node.children
