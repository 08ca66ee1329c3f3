"""
Token categories and operator kinds for the Qi program tree.

Shared between the parser and the evaluator so that operator text is
resolved to a kind once, when the tree is built.
"""

from enum import Enum
from typing import Dict, Optional, Tuple


class Category(Enum):
    """What a tree node is, independent of its text."""

    GROUP = "group"
    CONTROL = "control"
    BUILTIN = "builtin"
    SYMBOL = "symbol"
    NUMBER = "number"
    STRING = "string"
    DECLARATION = "declaration"


class ValueType(Enum):
    """Runtime value types; the value is the type keyword."""

    NONE = "none"
    BOOL = "bool"
    NUM = "num"
    STR = "str"
    ARR = "arr"
    FN = "fn"


class Control(Enum):
    """Control-structure keywords"""

    IF = "if"
    ELSIF = "elsif"
    ELSE = "else"
    WHILE = "while"
    FOR = "for"


class OpKind(Enum):
    """Builtin operators; the value is the operator's source text."""

    # Special forms
    DOT = "."
    IN = "in"
    OUT = "out"
    OUTL = "outl"
    CONTINUE = "continue"
    BREAK = "break"
    RETURN = "return"
    OF = "of"

    # Assignment
    ASSIGN = "="
    ADD_EQUAL = "+="
    SUBTRACT_EQUAL = "-="
    MULTIPLY_EQUAL = "*="
    POWER_EQUAL = "**="
    DIVIDE_EQUAL = "/="
    TRUNCATE_DIVIDE_EQUAL = "//="
    MODULO_EQUAL = "%="
    XOR_EQUAL = "^="
    OR_EQUAL = "|="
    AND_EQUAL = "&="
    RIGHT_SHIFT_EQUAL = ">>="
    LEFT_SHIFT_EQUAL = "<<="

    # Arithmetic
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    POWER = "**"
    DIVIDE = "/"
    TRUNCATE_DIVIDE = "//"
    MODULO = "%"
    NEGATE = "neg"

    # Bitwise
    XOR = "^"
    BIT_OR = "|"
    BIT_AND = "&"
    RIGHT_SHIFT = ">>"
    LEFT_SHIFT = "<<"

    # Comparison
    GREATER_THAN = ">"
    LESS_THAN = "<"
    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN_EQUAL_TO = ">="
    LESS_THAN_EQUAL_TO = "<="

    # Logical
    AND = "and"
    OR = "or"
    NOT = "not"


_UNARY = {OpKind.IN, OpKind.OUT, OpKind.OUTL, OpKind.RETURN, OpKind.NEGATE, OpKind.NOT}
_NULLARY = {OpKind.CONTINUE, OpKind.BREAK}

# Declared operand count for every operator kind.
OP_ARITY: Dict[OpKind, int] = {
    kind: 0 if kind in _NULLARY else 1 if kind in _UNARY else 2
    for kind in OpKind
}

COMPOUND_BASE: Dict[OpKind, OpKind] = {
    OpKind.ADD_EQUAL: OpKind.ADD,
    OpKind.SUBTRACT_EQUAL: OpKind.SUBTRACT,
    OpKind.MULTIPLY_EQUAL: OpKind.MULTIPLY,
    OpKind.POWER_EQUAL: OpKind.POWER,
    OpKind.DIVIDE_EQUAL: OpKind.DIVIDE,
    OpKind.TRUNCATE_DIVIDE_EQUAL: OpKind.TRUNCATE_DIVIDE,
    OpKind.MODULO_EQUAL: OpKind.MODULO,
    OpKind.XOR_EQUAL: OpKind.XOR,
    OpKind.OR_EQUAL: OpKind.BIT_OR,
    OpKind.AND_EQUAL: OpKind.BIT_AND,
    OpKind.RIGHT_SHIFT_EQUAL: OpKind.RIGHT_SHIFT,
    OpKind.LEFT_SHIFT_EQUAL: OpKind.LEFT_SHIFT,
}

# Method name => (min args, max args)
METHOD_ARITY: Dict[str, Tuple[int, int]] = {
    "push": (1, 1),
    "pop": (0, 0),
    "len": (0, 0),
    "empty": (0, 0),
    "find": (1, 1),
    "reverse": (0, 0),
    "fill": (3, 3),
    "at": (1, 1),
    "next": (0, 0),
    "last": (0, 0),
    "sub": (0, 3),
    "clear": (0, 0),
    "sort": (0, 0),
}

RANGE = "range"


def resolve_op(text: str, unary: bool = False) -> OpKind:
    """Map operator text to its kind; a unary '-' is negation."""
    if unary and text == "-":
        return OpKind.NEGATE

    return OpKind(text)


def resolve_control(text: str) -> Optional[Control]:
    try:
        return Control(text)
    except ValueError:
        return None
