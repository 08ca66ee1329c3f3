from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Optional, Tuple

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from qi_ref.parser import ParseError, parse_source
from qi_ref.runner import run
from qi_ref.runtime import (
    Frame,
    QiArityError,
    QiArray,
    QiBool,
    QiControlFlowError,
    QiFn,
    QiMethodNotFound,
    QiNameError,
    QiNone,
    QiNumber,
    QiRuntimeError,
    QiString,
    QiSyntaxError,
    QiTypeError,
    QiValue,
    QiValueError,
)

__all__ = [
    "Frame",
    "ParseError",
    "QiArityError",
    "QiArray",
    "QiBool",
    "QiControlFlowError",
    "QiFn",
    "QiMethodNotFound",
    "QiNameError",
    "QiNone",
    "QiNumber",
    "QiRuntimeError",
    "QiString",
    "QiSyntaxError",
    "QiTypeError",
    "QiValue",
    "QiValueError",
    "parse_source",
    "run_program",
    "run_with_io",
    "run_runtime_case",
    "run_output_case",
    "verify_result",
]

RuntimeExpectation = Optional[Tuple[str, object]]


def run_program(source: str, stdin: str = "") -> QiValue:
    """Run source with an in-memory stdin and a discarded stdout."""
    return run(source, stdin=io.StringIO(stdin), stdout=io.StringIO())


def run_with_io(source: str, stdin: str = "") -> Tuple[QiValue, str]:
    """Run source and return (result, everything written by out/outl)."""
    out = io.StringIO()
    result = run(source, stdin=io.StringIO(stdin), stdout=out)
    return result, out.getvalue()


def _plain(value: QiValue) -> object:
    match value:
        case QiArray(items=items):
            return [_plain(item) for item in items]
        case QiNone():
            return None
        case QiNumber(value=n):
            return float(n)
        case QiBool(value=b) | QiString(value=b):
            return b
        case _:
            return value


def verify_result(value: object, kind: str, expected: object) -> None:
    """Assert runtime result shape/value."""
    match kind:
        case "string":
            assert isinstance(
                value, QiString
            ), f"expected QiString, got {type(value).__name__}"
            assert (
                value.value == expected
            ), f"expected {expected!r}, got {value.value!r}"
            return
        case "number":
            assert isinstance(
                value, QiNumber
            ), f"expected QiNumber, got {type(value).__name__}"
            assert (
                abs(value.value - float(expected)) <= 1e-9
            ), f"expected {expected}, got {value.value}"
            return
        case "bool":
            assert isinstance(
                value, QiBool
            ), f"expected QiBool, got {type(value).__name__}"
            assert bool(value.value) == bool(
                expected
            ), f"expected {expected}, got {value.value}"
            return
        case "none":
            assert isinstance(
                value, QiNone
            ), f"expected QiNone, got {type(value).__name__}"
            return
        case "array":
            assert isinstance(
                value, QiArray
            ), f"expected QiArray, got {type(value).__name__}"
            actual_items = _plain(value)
            assert (
                actual_items == expected
            ), f"expected {expected!r}, got {actual_items!r}"
            return
        case _:
            raise AssertionError(f"unknown expectation kind {kind}")


def run_runtime_case(
    source: str,
    expectation: RuntimeExpectation,
    expected_exc: Optional[type],
    stdin: str = "",
) -> None:
    """Execute one runtime scenario with optional expected exception."""
    if expected_exc is not None:
        with pytest.raises(expected_exc):
            run_program(source, stdin)
        return

    result = run_program(source, stdin)
    if expectation is not None:
        verify_result(result, expectation[0], expectation[1])


def run_output_case(
    source: str,
    expected_output: Optional[str],
    expected_exc: Optional[type],
    stdin: str = "",
) -> None:
    """Execute one scenario and compare what it printed."""
    if expected_exc is not None:
        with pytest.raises(expected_exc):
            run_with_io(source, stdin)
        return

    _, output = run_with_io(source, stdin)
    assert output == expected_output, f"expected {expected_output!r}, got {output!r}"
