"""prompt_toolkit lexer for live Qi syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable, List

from lark import Token, UnexpectedInput
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .parser import KEYWORDS, build_parser

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "type": "bold ansiblue",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
    "error": "bold ansired",
}

_TYPE_WORDS = {"none", "bool", "num", "str", "arr"}

# Terminal name → highlight group.
_TERMINAL_GROUP = {
    "NUMBER": "number",
    "STRING": "string",
    "NAME": "identifier",
    "COMMENT": "comment",
    "ASSIGN_OP": "operator",
    "COMP_OP": "operator",
    "BOR": "operator",
    "BXOR": "operator",
    "BAND": "operator",
    "SHIFT_OP": "operator",
    "ADD_OP": "operator",
    "MUL_OP": "operator",
    "POW_OP": "operator",
    "ARROW": "operator",
}

def _group_for(tokens: List[Token], idx: int) -> str:
    tok = tokens[idx]
    text = str(tok)

    if tok.type in KEYWORDS.values() or text in KEYWORDS:
        return "type" if text in _TYPE_WORDS else "keyword"

    group = _TERMINAL_GROUP.get(tok.type)
    if group == "identifier":
        # a name directly followed by "(" is a call
        nxt = next((t for t in tokens[idx + 1:] if t.type != "WS"), None)
        if nxt is not None and str(nxt) == "(":
            return "function"

    if group is not None:
        return group

    return "punctuation"

def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    tokens: List[Token] = []

    try:
        for tok in build_parser().lex(text, dont_ignore=True):
            tokens.append(tok)
    except UnexpectedInput:
        pass

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        start = tok.start_pos if tok.start_pos is not None else pos
        end = tok.end_pos if tok.end_pos is not None else start + len(str(tok))

        # Unstyled gap before token.
        if start > pos:
            result.append(("", text[pos:start]))

        if tok.type == "WS":
            result.append(("", text[start:end]))
        else:
            result.append((GROUP_STYLE.get(_group_for(tokens, i), ""), text[start:end]))
        pos = end

    # Anything the lexer could not consume.
    if pos < len(text):
        result.append((GROUP_STYLE["error"], text[pos:]))

    return result if result else [("", text)]

class QiLexer(Lexer):
    """prompt_toolkit Lexer that highlights Qi source using the lark lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights for all lines.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
