from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, TextIO
from typing_extensions import Protocol, TypeAlias

from .token_types import ValueType
from .tree import Node, Param

# ---------- Value Model ----------

@dataclass
class QiNone:
    def __repr__(self) -> str:
        return "none"

@dataclass
class QiBool:
    value: bool = False
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass
class QiNumber:
    value: float = 0.0
    def __repr__(self) -> str:
        v = float(self.value)
        return str(int(v)) if v.is_integer() else str(v)

@dataclass
class QiString:
    value: str = ""
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class QiArray:
    items: List['QiValue'] = field(default_factory=list)
    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@dataclass(eq=False)
class QiFn:
    name: str
    params: List[Param]
    returns: ValueType
    body: Node
    frame: Optional['Frame'] = None    # defining frame
    line: Optional[int] = None
    def __repr__(self) -> str:
        params = ", ".join(f"{p.type.value} {p.name}" for p in self.params)
        return f"<fn {self.name}({params}) -> {self.returns.value}>"

QiValue: TypeAlias = QiNone | QiBool | QiNumber | QiString | QiArray | QiFn

# ---------- Control outcomes ----------

@dataclass(frozen=True)
class Normal:
    value: QiValue

@dataclass(frozen=True)
class Returning:
    value: QiValue

@dataclass(frozen=True)
class Continuing:
    line: Optional[int] = None

@dataclass(frozen=True)
class Breaking:
    line: Optional[int] = None

Outcome: TypeAlias = Normal | Returning | Continuing | Breaking

# ---------- Scope ----------

class Frame:
    """One binding frame; frames chain through `parent` to form scopes."""

    def __init__(self, parent: Optional['Frame']=None, stdin: Optional[TextIO]=None, stdout: Optional[TextIO]=None):
        self.parent = parent
        self.vars: Dict[str, QiValue] = {}
        self.loop_vars: Set[str] = set()    # live for-loop variables
        self.stdin: Optional[TextIO]
        self.stdout: Optional[TextIO]

        if stdin is not None or parent is None:
            self.stdin = stdin
        else:
            self.stdin = parent.stdin

        if stdout is not None or parent is None:
            self.stdout = stdout
        else:
            self.stdout = parent.stdout

    def child(self) -> 'Frame':
        return Frame(parent=self)

    def has(self, name: str) -> bool:
        if name in self.vars:
            return True

        if self.parent is not None:
            return self.parent.has(name)

        return False

    def has_local(self, name: str) -> bool:
        return name in self.vars

    def get(self, name: str) -> QiValue:
        if name in self.vars:
            return self.vars[name]

        if self.parent is not None:
            return self.parent.get(name)

        raise QiNameError(f'symbol "{name}" is undefined')

    def add(self, name: str, val: QiValue) -> None:
        if name in self.vars:
            raise QiNameError(f'symbol "{name}" is already declared')

        self.vars[name] = val

    def set_local(self, name: str, val: QiValue) -> None:
        """Bind `name` in this frame, replacing any existing local binding."""
        self.vars[name] = val

    def remove(self, name: str) -> None:
        if name not in self.vars:
            raise QiNameError(f'symbol "{name}" is not declared in this scope')

        del self.vars[name]

    @property
    def input_stream(self) -> TextIO:
        return self.stdin if self.stdin is not None else sys.stdin

    @property
    def output_stream(self) -> TextIO:
        return self.stdout if self.stdout is not None else sys.stdout

# ---------- Exceptions ----------

class QiRuntimeError(Exception):
    """Fatal evaluation fault carrying a message and an optional source line."""

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        if self.line is None:
            return self.message

        return f"{self.message} (line {self.line})"

class QiSyntaxError(QiRuntimeError):
    pass

class QiTypeError(QiRuntimeError):
    pass

class QiArityError(QiRuntimeError):
    pass

class QiNameError(QiRuntimeError):
    pass

class QiValueError(QiRuntimeError):
    pass

class QiControlFlowError(QiRuntimeError):
    pass

class QiMethodNotFound(QiRuntimeError):
    def __init__(self, recv: QiValue, name: str):
        super().__init__(f'{type_name(recv)} has no method "{name}"')
        self.receiver = recv
        self.name = name

def type_of(value: QiValue) -> ValueType:
    match value:
        case QiNone():
            return ValueType.NONE
        case QiBool():
            return ValueType.BOOL
        case QiNumber():
            return ValueType.NUM
        case QiString():
            return ValueType.STR
        case QiArray():
            return ValueType.ARR
        case QiFn():
            return ValueType.FN
        case _:
            raise QiTypeError(f"Unexpected value type {type(value).__name__}")

def type_name(value: QiValue) -> str:
    return type_of(value).value

# ---------- Builtin registries ----------

class Method(Protocol):
    def __call__(self, frame: Frame, recv: QiValue, args: List[QiValue]) -> QiValue: ...

MethodRegistry = Dict[str, Method]

StdlibFn = Callable[[Frame, List[QiValue]], QiValue]

@dataclass(frozen=True)
class StdlibFunction:
    fn: StdlibFn
    arity: int

class Builtins:
    array_methods: MethodRegistry = {}
    string_methods: MethodRegistry = {}
    stdlib_functions: Dict[str, StdlibFunction] = {}
