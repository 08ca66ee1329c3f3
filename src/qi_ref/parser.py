"""lark front end: source text -> Program of qi_ref.tree nodes."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional

from lark import Lark, Token, Transformer, UnexpectedInput
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken, VisitError

from .runtime import QiRuntimeError, QiSyntaxError
from .token_types import Control, OpKind, ValueType, resolve_op
from .tree import (
    FunctionDef,
    Node,
    Param,
    Program,
    control,
    declaration,
    group,
    number,
    op,
    string,
    symbol,
)

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

KEYWORDS = {
    "fn": "FN",
    "if": "IF",
    "elsif": "ELSIF",
    "else": "ELSE",
    "while": "WHILE",
    "for": "FOR",
    "of": "OF",
    "return": "RETURN",
    "break": "BREAK",
    "continue": "CONTINUE",
    "out": "OUT",
    "outl": "OUTL",
    "in": "IN",
    "and": "AND",
    "or": "OR",
    "not": "NOT",
    "none": "NONE",
    "bool": "BOOL",
    "num": "NUM",
    "str": "STR",
    "arr": "ARR",
}

class ParseError(QiSyntaxError):
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message, line)
        self.column = column

def _remap_ident(t: Token) -> Token:
    # Only remap exact word matches, never prefixes
    t.type = KEYWORDS.get(t.value, t.type)
    return t

@lru_cache(maxsize=1)
def build_parser() -> Lark:
    return Lark(
        GRAMMAR_PATH.read_text(encoding="utf-8"),
        parser="lalr",
        lexer="basic",
        start="start",
        maybe_placeholders=True,
        propagate_positions=True,
        lexer_callbacks={"NAME": _remap_ident},
    )

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", '"': '"', "\\": "\\"}
_ESCAPE_RE = re.compile(r"\\(.)")

def unescape(body: str, line: Optional[int] = None) -> str:
    def repl(m: re.Match[str]) -> str:
        ch = m.group(1)
        if ch not in _ESCAPES:
            raise QiSyntaxError(f'unknown escape "\\{ch}" in string', line)
        return _ESCAPES[ch]

    return _ESCAPE_RE.sub(repl, body)

def _line(tok: Any) -> Optional[int]:
    return getattr(tok, "line", None)

class QiTransformer(Transformer):
    """Build qi_ref.tree nodes, resolving operator and control kinds once."""

    # ---- program ----
    def start(self, c):
        functions: List[FunctionDef] = []
        body: List[Node] = []

        for item in c:
            if isinstance(item, FunctionDef):
                functions.append(item)
            else:
                body.append(item)

        return Program(functions=functions, body=group(*body, line=1))

    def fn_def(self, c):
        fn_tok, name, params, _arrow, returns, body = c
        return FunctionDef(
            name=str(name),
            params=params or [],
            returns=ValueType(str(returns)) if returns is not None else ValueType.NONE,
            body=body,
            line=_line(fn_tok),
        )

    def params(self, c):
        names = set()

        for p in c:
            if p.name in names:
                raise QiSyntaxError(f'duplicate parameter "{p.name}"')
            names.add(p.name)

        return list(c)

    def param(self, c):
        type_tok, name = c
        vtype = ValueType(str(type_tok))
        if vtype is ValueType.NONE:
            raise QiSyntaxError(f'parameter "{name}" cannot have type none', _line(name))

        return Param(name=str(name), type=vtype)

    # ---- statements ----
    def block(self, c):
        brace, *stmts = c
        return group(*stmts, line=_line(brace))

    def if_stmt(self, c):
        kw, cond, body = c
        return control(Control.IF, cond, body, line=_line(kw))

    def elsif_stmt(self, c):
        kw, cond, body = c
        return control(Control.ELSIF, cond, body, line=_line(kw))

    def else_stmt(self, c):
        kw, body = c
        return control(Control.ELSE, body, line=_line(kw))

    def while_stmt(self, c):
        kw, cond, body = c
        return control(Control.WHILE, cond, body, line=_line(kw))

    def for_stmt(self, c):
        kw, var, of_kw, iterable, body = c
        head = op(OpKind.OF, var, iterable, line=_line(of_kw))
        return control(Control.FOR, head, body, line=_line(kw))

    def declaration(self, c):
        type_tok, name = c
        return declaration(str(type_tok), str(name), line=_line(name))

    def declare_assign(self, c):
        decl, op_tok, value = c
        if str(op_tok) != "=":
            raise QiSyntaxError(f'cannot use "{op_tok}" in a declaration', _line(op_tok))

        return op(OpKind.ASSIGN, decl, value, line=_line(op_tok))

    def return_stmt(self, c):
        kw, value = c
        return op(OpKind.RETURN, value, line=_line(kw))

    def break_stmt(self, c):
        return op(OpKind.BREAK, line=_line(c[0]))

    def continue_stmt(self, c):
        return op(OpKind.CONTINUE, line=_line(c[0]))

    def out_stmt(self, c):
        kw, value = c
        return op(OpKind.OUT, value, line=_line(kw))

    def outl_stmt(self, c):
        kw, value = c
        return op(OpKind.OUTL, value, line=_line(kw))

    def in_stmt(self, c):
        kw, target = c
        return op(OpKind.IN, target, line=_line(kw))

    # ---- expressions ----
    def binary(self, c):
        lhs, op_tok, rhs = c
        return op(resolve_op(str(op_tok)), lhs, rhs, line=_line(op_tok), text=str(op_tok))

    def unary(self, c):
        op_tok, operand = c
        text = str(op_tok)

        if text == "+":
            return operand

        return op(resolve_op(text, unary=True), operand, line=_line(op_tok))

    def method(self, c):
        target, dot, name, args = c
        call = symbol(str(name), *(args or []), line=_line(name))
        return op(OpKind.DOT, target, call, line=_line(dot))

    def call(self, c):
        name, args = c
        return symbol(str(name), *(args or []), line=_line(name))

    def args(self, c):
        return list(c)

    def symbol(self, c):
        return symbol(str(c[0]), line=_line(c[0]))

    def number(self, c):
        return number(str(c[0]), line=_line(c[0]))

    def string(self, c):
        tok = c[0]
        return string(unescape(str(tok)[1:-1], _line(tok)), line=_line(tok))

def _describe(exc: UnexpectedInput) -> str:
    if isinstance(exc, UnexpectedCharacters):
        return f"unexpected character {exc.char!r}"

    if isinstance(exc, UnexpectedEOF):
        return "unexpected end of input"

    if isinstance(exc, UnexpectedToken):
        tok = exc.token
        if tok.type == "$END":
            return "unexpected end of input"
        return f"unexpected {tok.type} {str(tok)!r}"

    return "invalid syntax"

def parse_source(src: str) -> Program:
    parser = build_parser()

    try:
        tree = parser.parse(src)
    except UnexpectedInput as exc:
        line = getattr(exc, "line", None)
        column = getattr(exc, "column", None)
        if line is not None and line < 0:
            line = None
        raise ParseError(_describe(exc), line, column) from None

    try:
        return QiTransformer().transform(tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, QiRuntimeError):
            raise exc.orig_exc from None
        raise
