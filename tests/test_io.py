from __future__ import annotations

import pytest

from tests.support.harness import (
    QiNameError,
    QiTypeError,
    QiValueError,
    run_output_case,
    run_runtime_case,
)

INPUT_SCENARIOS = [
    pytest.param("num x; in x; x;", "42\n", ("number", 42), None, id="read-number"),
    pytest.param("num x; in x; x;", "-2.5e1\n", ("number", -25), None, id="read-signed-exponent"),
    pytest.param("num x; in x; x;", "7", ("number", 7), None, id="read-without-newline"),
    pytest.param("num x; in x; x;", "5\r\n", ("number", 5), None, id="read-crlf"),
    pytest.param("num x; in x; x;", "  3\n", ("number", 3), None, id="leading-whitespace-accepted"),
    pytest.param("num x; in x; x;", "3 \n", None, QiValueError, id="trailing-whitespace-rejected"),
    pytest.param("num x; in x;", "4x2\n", None, QiValueError, id="invalid-number"),
    pytest.param("num x; in x;", "\n", None, QiValueError, id="blank-number"),
    pytest.param("num x; in x;", "", None, QiValueError, id="end-of-input"),
    pytest.param(
        'str s; in s; s;',
        "hello world\n",
        ("string", "hello world"),
        None,
        id="read-string-keeps-spaces",
    ),
    pytest.param('str s; in s; s;', "\n", ("string", ""), None, id="read-empty-line"),
    pytest.param("num x; in x;", "9\n", ("number", 9), None, id="in-yields-target"),
    pytest.param(
        "num a; num b; in a; in b; a + b;",
        "1\n2\n",
        ("number", 3),
        None,
        id="reads-consume-lines",
    ),
    pytest.param(
        "arr a; a.push(0); in a.at(0); a;",
        "5\n",
        ("array", [5]),
        None,
        id="read-into-element",
    ),
    pytest.param(
        'str s = "x"; num n; in s; in n; s.len() + n;',
        "abc\n4\n",
        ("number", 7),
        None,
        id="type-follows-target",
    ),
    pytest.param("bool b; in b;", "1\n", None, QiTypeError, id="read-bool-unsupported"),
    pytest.param("arr a; in a;", "1\n", None, QiTypeError, id="read-array-unsupported"),
]


@pytest.mark.parametrize("source, stdin, expectation, expected_exc", INPUT_SCENARIOS)
def test_input(source, stdin, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc, stdin=stdin)


OUTPUT_SCENARIOS = [
    pytest.param('out "a"; out "b";', "ab", None, id="out-no-newline"),
    pytest.param('outl "a"; out "b";', "a\nb", None, id="outl-newline"),
    pytest.param("out 1 == 1;", "true", None, id="bool"),
    pytest.param("out 1 == 2;", "false", None, id="bool-false"),
    pytest.param("num x; out x;", "0", None, id="default-number"),
    pytest.param('str s; out s;', "", None, id="empty-string"),
    pytest.param('out "a\\tb\\n";', "a\tb\n", None, id="escapes"),
    pytest.param('out "say \\"hi\\"";', 'say "hi"', None, id="escaped-quote"),
    pytest.param('out "back\\\\slash";', "back\\slash", None, id="escaped-backslash"),
    pytest.param("fn f() { } out f();", "none", None, id="none-value"),
    pytest.param("out missing;", None, QiNameError, id="undefined-operand"),
]


@pytest.mark.parametrize("source, expected_output, expected_exc", OUTPUT_SCENARIOS)
def test_output(source, expected_output, expected_exc) -> None:
    run_output_case(source, expected_output, expected_exc)


def test_echo_input(frame) -> None:
    import io

    from qi_ref.runner import run

    frame.stdin = io.StringIO("Ada\n")
    run('str name; in name; outl "hi " + name;', frame=frame)

    assert frame.stdout.getvalue() == "hi Ada\n"
