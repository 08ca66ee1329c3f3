from __future__ import annotations

import io

import pytest

from tests.support.harness import (
    Frame,
    QiArityError,
    QiArray,
    QiBool,
    QiControlFlowError,
    QiFn,
    QiNameError,
    QiNone,
    QiNumber,
    QiString,
    QiSyntaxError,
    QiTypeError,
    QiValueError,
)
from qi_ref.eval.common import stringify
from qi_ref.eval.helpers import to_bool
from qi_ref.evaluator import Activation, eval_program
from qi_ref.runtime import Breaking, Continuing, Normal, Returning, call_function
from qi_ref.token_types import Category, Control, OpKind, ValueType
from qi_ref.tree import Node, Program, Token, control, group, number, op, string, symbol


def _activation(body: Node, returns: ValueType = ValueType.NONE, frame=None) -> Activation:
    return Activation(body, QiFn("main", [], returns, body, frame=frame))


def test_run_returns_normal_outcome(frame) -> None:
    tree = op(OpKind.ADD, number("1"), number("2"))

    outcome = _activation(tree).run(tree, frame)

    assert outcome == Normal(QiNumber(3.0))


def test_operator_operand_count_is_checked(frame) -> None:
    tree = op(OpKind.ADD, number("1"))

    with pytest.raises(QiArityError):
        _activation(tree).run(tree, frame)


def test_operator_without_kind_is_resolved_from_text(frame) -> None:
    tree = Node(Token("*", Category.BUILTIN, ops=2), [number("3"), number("4")])

    outcome = _activation(tree).run(tree, frame)

    assert outcome == Normal(QiNumber(12.0))


def test_unknown_operator_text(frame) -> None:
    tree = Node(Token("@@", Category.BUILTIN, ops=2), [number("3"), number("4")])

    with pytest.raises(QiSyntaxError):
        _activation(tree).run(tree, frame)


def test_invalid_number_literal(frame) -> None:
    tree = number("4x2", line=7)

    with pytest.raises(QiValueError) as exc_info:
        _activation(tree).run(tree, frame)

    assert exc_info.value.line == 7


def test_unsupported_control_structure(frame) -> None:
    tree = Node(Token("loop", Category.CONTROL))

    with pytest.raises(QiSyntaxError):
        _activation(tree).run(tree, frame)


def test_of_outside_for_header(frame) -> None:
    tree = op(OpKind.OF, symbol("i"), symbol("range"))

    with pytest.raises(QiSyntaxError):
        _activation(tree).run(tree, frame)


def test_malformed_declaration(frame) -> None:
    tree = Node(Token("num", Category.DECLARATION, ops=1), [number("1")])

    with pytest.raises(QiSyntaxError):
        _activation(tree).run(tree, frame)


def test_none_declaration_is_rejected(frame) -> None:
    tree = Node(Token("none", Category.DECLARATION, ops=1), [symbol("x")])

    with pytest.raises(QiSyntaxError):
        _activation(tree).run(tree, frame)


def test_signals_pass_through_run(frame) -> None:
    brk = op(OpKind.BREAK)
    cont = op(OpKind.CONTINUE)
    ret = op(OpKind.RETURN, number("5"))

    assert isinstance(_activation(brk).run(brk, frame), Breaking)
    assert isinstance(_activation(cont).run(cont, frame), Continuing)
    assert _activation(ret).run(ret, frame) == Returning(QiNumber(5.0))


def test_group_stops_at_first_signal(frame) -> None:
    tree = group(op(OpKind.BREAK), op(OpKind.OUT, string("unreached")))

    outcome = _activation(tree).run(tree, frame)

    assert isinstance(outcome, Breaking)
    assert frame.stdout.getvalue() == ""


@pytest.mark.parametrize(
    "signal, message",
    [
        pytest.param(op(OpKind.BREAK), "break", id="break"),
        pytest.param(op(OpKind.CONTINUE), "continue", id="continue"),
    ],
)
def test_init_rejects_escaping_loop_signals(frame, signal, message) -> None:
    body = group(signal)

    with pytest.raises(QiControlFlowError) as exc_info:
        _activation(body).init(frame)

    assert message in str(exc_info.value)


def test_init_checks_return_contract(frame) -> None:
    returning = group(op(OpKind.RETURN, string("s")))

    assert _activation(returning, ValueType.STR).init(frame) == QiString("s")

    with pytest.raises(QiTypeError):
        _activation(returning, ValueType.NUM).init(frame)

    with pytest.raises(QiControlFlowError):
        _activation(returning, ValueType.NONE).init(frame)

    with pytest.raises(QiControlFlowError):
        _activation(group(), ValueType.NUM).init(frame)


def test_init_yields_last_value_for_none_functions(frame) -> None:
    body = group(number("1"), number("2"))

    assert _activation(body).init(frame) == QiNumber(2.0)
    assert _activation(group()).init(frame) == QiNone()


def test_if_sentinel_from_hand_built_chain(frame) -> None:
    tree = group(
        control(Control.IF, number("0"), group(op(OpKind.OUT, string("a")))),
        control(Control.ELSIF, number("1"), group(op(OpKind.OUT, string("b")))),
        control(Control.ELSE, group(op(OpKind.OUT, string("c")))),
    )

    outcome = _activation(tree).run(tree, frame)

    assert outcome == Normal(QiBool(True))
    assert frame.stdout.getvalue() == "b"


def test_call_function_binds_copies(frame) -> None:
    from qi_ref.parser import parse_source
    from qi_ref.evaluator import declare_functions

    program = parse_source("fn f(num n) -> num { n += 1; return n; }")
    declare_functions(program, frame)

    arg = QiNumber(1.0)
    result = call_function(frame.get("f"), [arg])

    assert result == QiNumber(2.0)
    assert arg == QiNumber(1.0)


def test_call_function_checks_parameter_types(frame) -> None:
    from qi_ref.parser import parse_source
    from qi_ref.evaluator import declare_functions

    declare_functions(parse_source("fn f(str s) { }"), frame)

    with pytest.raises(QiTypeError):
        call_function(frame.get("f"), [QiNumber(1.0)])


def test_eval_program_without_body(frame) -> None:
    assert eval_program(Program(), frame) == QiNone()


def test_eval_program_reuses_frame(frame) -> None:
    from qi_ref.parser import parse_source

    eval_program(parse_source("num x = 4;"), frame)
    result = eval_program(parse_source("x + 1;"), frame)

    assert result == QiNumber(5.0)


# ---------------- Frame ----------------

def test_frame_bindings() -> None:
    frame = Frame()
    frame.add("x", QiNumber(1.0))

    assert frame.has("x")
    assert frame.has_local("x")
    assert frame.get("x") == QiNumber(1.0)

    with pytest.raises(QiNameError):
        frame.add("x", QiNumber(2.0))

    frame.set_local("x", QiString("y"))
    assert frame.get("x") == QiString("y")

    frame.remove("x")
    assert not frame.has("x")

    with pytest.raises(QiNameError):
        frame.remove("x")

    with pytest.raises(QiNameError):
        frame.get("x")


def test_child_frame_lookup_chains_to_parent() -> None:
    parent = Frame()
    parent.add("g", QiNumber(1.0))
    child = parent.child()
    child.add("l", QiNumber(2.0))

    assert child.has("g")
    assert not child.has_local("g")
    assert not parent.has("l")
    assert child.get("g") is parent.get("g")


def test_child_frame_inherits_streams() -> None:
    stdin = io.StringIO("")
    stdout = io.StringIO()
    parent = Frame(stdin=stdin, stdout=stdout)
    child = parent.child()

    assert child.input_stream is stdin
    assert child.output_stream is stdout


def test_frame_defaults_to_process_streams() -> None:
    import sys

    frame = Frame()

    assert frame.input_stream is sys.stdin
    assert frame.output_stream is sys.stdout


def _fn_value() -> QiFn:
    return QiFn("f", [], ValueType.NONE, group(line=1))


@pytest.mark.parametrize(
    "value, text, truthy",
    [
        pytest.param(QiNone(), "none", False, id="none"),
        pytest.param(QiBool(True), "true", True, id="bool"),
        pytest.param(QiNumber(0.0), "0", False, id="zero"),
        pytest.param(QiNumber(2.5), "2.5", True, id="fraction"),
        pytest.param(QiString(""), "", False, id="empty-string"),
        pytest.param(QiString("a"), "a", True, id="string"),
        pytest.param(QiArray([QiNumber(1.0), QiString("x")]), '[1, "x"]', True, id="array"),
        pytest.param(QiArray(), "[]", False, id="empty-array"),
    ],
)
def test_stringify_and_truthiness_cover_every_value(value, text, truthy) -> None:
    assert stringify(value) == text
    assert to_bool(value) is truthy


def test_functions_are_truthy() -> None:
    fn = _fn_value()

    assert to_bool(fn) is True
    assert stringify(fn) == "<fn f() -> none>"


def test_break_and_continue_carry_their_line(frame) -> None:
    brk = op(OpKind.BREAK, line=7)
    cont = op(OpKind.CONTINUE, line=9)

    assert _activation(brk).run(brk, frame) == Breaking(7)
    assert _activation(cont).run(cont, frame) == Continuing(9)


def test_escaping_break_reports_its_own_line(frame) -> None:
    body = group(op(OpKind.BREAK, line=4), line=1)

    with pytest.raises(QiControlFlowError) as exc_info:
        _activation(body).init(frame)

    assert exc_info.value.line == 4
