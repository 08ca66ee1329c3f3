from __future__ import annotations

from typing import Callable, Dict, Optional

from .runtime import (
    Breaking,
    Continuing,
    Frame,
    Normal,
    Outcome,
    QiArityError,
    QiControlFlowError,
    QiFn,
    QiNameError,
    QiRuntimeError,
    QiSyntaxError,
    QiTypeError,
    QiValue,
    Returning,
    init_stdlib,
    type_name,
    type_of,
)
from .token_types import Category, Control, OpKind, ValueType, resolve_op
from .tree import Node, Program, control_kind, group

from .eval.blocks import eval_group
from .eval.chains import eval_method_call
from .eval.common import EvalFunc
from .eval.console import eval_in, eval_out, eval_outl
from .eval.control import eval_break, eval_continue, eval_else, eval_elsif, eval_if, eval_return
from .eval.decl import eval_declaration
from .eval.expr import eval_operator
from .eval.fn import eval_symbol
from .eval.literals import eval_number, eval_string
from .eval.loops import eval_for, eval_while

Handler = Callable[[Node, Frame, EvalFunc], Outcome]

def _maybe_attach_location(exc: QiRuntimeError, node: Node) -> None:
    if exc.line is not None:
        return

    if node.line is not None:
        exc.line = node.line

def _eval_of(node: Node, frame: Frame, eval_func: EvalFunc) -> Outcome:
    raise QiSyntaxError('"of" is only valid in a for loop header', node.line)

_CATEGORY_DISPATCH: Dict[Category, Handler] = {
    Category.GROUP: eval_group,
    Category.SYMBOL: eval_symbol,
    Category.NUMBER: eval_number,
    Category.STRING: eval_string,
    Category.DECLARATION: eval_declaration,
}

_CONTROL_DISPATCH: Dict[Control, Handler] = {
    Control.IF: eval_if,
    Control.ELSIF: eval_elsif,
    Control.ELSE: eval_else,
    Control.WHILE: eval_while,
    Control.FOR: eval_for,
}

# Operators whose evaluation order differs from evaluate-all-then-apply.
_SPECIAL_OPS: Dict[OpKind, Handler] = {
    OpKind.DOT: eval_method_call,
    OpKind.IN: eval_in,
    OpKind.OUT: eval_out,
    OpKind.OUTL: eval_outl,
    OpKind.CONTINUE: eval_continue,
    OpKind.BREAK: eval_break,
    OpKind.RETURN: eval_return,
    OpKind.OF: _eval_of,
}

class Activation:
    """One evaluation of a function body.

    `init` runs the body once and enforces the return contract of `fn`;
    `run` evaluates a single node and hands back its Outcome.
    """

    def __init__(self, tree: Node, fn: QiFn):
        self.tree = tree
        self.fn = fn

    def init(self, frame: Frame) -> QiValue:
        init_stdlib()

        outcome = self.run(self.tree, frame)
        fn = self.fn
        returns = fn.returns

        match outcome:
            case Continuing(line=line):
                raise QiControlFlowError("continue called outside loop", line if line is not None else fn.line)
            case Breaking(line=line):
                raise QiControlFlowError("break called outside loop", line if line is not None else fn.line)
            case Returning(value=value):
                if returns is ValueType.NONE:
                    raise QiControlFlowError(f'function "{fn.name}" returns none but a value was returned', fn.line)

                if type_of(value) is not returns:
                    raise QiTypeError(
                        f'function "{fn.name}" must return {returns.value}, got {type_name(value)}',
                        fn.line,
                    )

                return value
            case Normal(value=value):
                if returns is not ValueType.NONE:
                    raise QiControlFlowError(f'function "{fn.name}" must return a {returns.value}', fn.line)

                return value

        raise QiRuntimeError(f"Unexpected outcome {outcome!r}")

    def run(self, node: Node, frame: Frame) -> Outcome:
        try:
            return self._run_inner(node, frame)
        except QiRuntimeError as e:
            _maybe_attach_location(e, node)
            raise

    def _run_inner(self, node: Node, frame: Frame) -> Outcome:
        category = node.category

        if category is Category.BUILTIN:
            return self._run_builtin(node, frame)

        if category is Category.CONTROL:
            kind = control_kind(node)
            handler = _CONTROL_DISPATCH.get(kind) if kind is not None else None
            if handler is None:
                raise QiSyntaxError(f'unsupported control structure "{node.text}"', node.line)
            return handler(node, frame, self.run)

        handler = _CATEGORY_DISPATCH.get(category)
        if handler is None:
            raise QiSyntaxError(f"Unknown node category {category}", node.line)

        return handler(node, frame, self.run)

    def _run_builtin(self, node: Node, frame: Frame) -> Outcome:
        kind = node.kind
        if not isinstance(kind, OpKind):
            try:
                kind = resolve_op(node.text)
            except ValueError:
                raise QiSyntaxError(f'unknown operator "{node.text}"', node.line) from None

        if len(node.children) != node.token.ops:
            raise QiArityError(
                f'operator "{node.text}" expects {node.token.ops} operand(s), got {len(node.children)}',
                node.line,
            )

        handler = _SPECIAL_OPS.get(kind)
        if handler is not None:
            return handler(node, frame, self.run)

        return eval_operator(node, frame, self.run, kind)

# ---------------- Public API ----------------

def declare_functions(program: Program, frame: Frame) -> None:
    """Bind every top-level function in `frame` before any statement runs."""
    for fd in program.functions:
        if frame.has_local(fd.name):
            raise QiNameError(f'function "{fd.name}" is already declared', fd.line)

        frame.add(fd.name, QiFn(fd.name, list(fd.params), fd.returns, fd.body, frame=frame, line=fd.line))

def eval_program(program: Program, frame: Optional[Frame]=None) -> QiValue:
    init_stdlib()

    if frame is None:
        frame = Frame()

    declare_functions(program, frame)

    body = program.body if program.body is not None else group()

    main = QiFn("main", [], ValueType.NONE, body, frame=frame)
    return Activation(body, main).init(frame)
