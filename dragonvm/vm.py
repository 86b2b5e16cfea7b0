"""A small stack-based virtual machine operating on floating point values."""

from __future__ import annotations

import enum
import math
import sys
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterable, Mapping, TextIO

from termcolor import colored


class OpcodeKind(enum.Enum):
    """The instruction set of the machine."""

    PUSH = "push"
    JUMP = "jump"
    SET = "set"
    GET = "get"
    POP = "pop"
    DUP = "dup"
    ADD = "add"
    SUB = "sub"
    SQRT = "sqrt"
    MUL = "mul"
    PC = "pc"
    PRINT = "print"
    HALT = "halt"

    @property
    def takes_argument(self) -> bool:
        return self in _ARGUMENT_KINDS


_ARGUMENT_KINDS = frozenset(
    {OpcodeKind.PUSH, OpcodeKind.JUMP, OpcodeKind.SET, OpcodeKind.GET}
)


def _format_number(value: float) -> str:
    """Render a float the way the machine prints it: no exponent, no trailing '.0'."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass(frozen=True)
class Opcode:
    """A single instruction; ``arg`` is set only for push, jump, set and get."""

    kind: OpcodeKind
    arg: float | int | None = None

    def __post_init__(self) -> None:
        if self.kind.takes_argument:
            if self.arg is None:
                raise ValueError(f"opcode `{self.kind.value}` requires an argument")
            if self.kind is OpcodeKind.PUSH:
                object.__setattr__(self, "arg", float(self.arg))
            elif (
                isinstance(self.arg, bool)
                or not isinstance(self.arg, int)
                or self.arg < 0
            ):
                raise ValueError(
                    f"opcode `{self.kind.value}` requires a non-negative integer"
                )
        elif self.arg is not None:
            raise ValueError(f"opcode `{self.kind.value}` takes no argument")

    def __str__(self) -> str:
        if self.arg is None:
            return self.kind.value
        if self.kind is OpcodeKind.PUSH:
            return f"{self.kind.value} {_format_number(self.arg)}"
        return f"{self.kind.value} {self.arg}"


class VmError(RuntimeError):
    """Raised when a program cannot continue executing."""


class Vm:
    """Executes a list of opcodes against a value stack and a constant store."""

    def __init__(
        self,
        instructions: Iterable[Opcode],
        constants: Mapping[int, float] | None = None,
        output: TextIO | None = None,
    ) -> None:
        self.instructions: list[Opcode] = list(instructions)
        self.constants: dict[int, float] = dict(constants or {})
        self.output = output
        self.pc = 0
        self.stack: list[float] = []
        self._handlers: dict[OpcodeKind, Callable[[Opcode], None]] = {
            OpcodeKind.PUSH: lambda op: self._push(op.arg),
            OpcodeKind.JUMP: lambda op: self._jump(op.arg),
            OpcodeKind.SET: lambda op: self._set(op.arg),
            OpcodeKind.GET: lambda op: self._get(op.arg),
            OpcodeKind.POP: lambda op: self._pop(),
            OpcodeKind.DUP: lambda op: self._dup(),
            OpcodeKind.ADD: lambda op: self._add(),
            OpcodeKind.SUB: lambda op: self._sub(),
            OpcodeKind.MUL: lambda op: self._mul(),
            OpcodeKind.SQRT: lambda op: self._sqrt(),
            OpcodeKind.PC: lambda op: self._push(float(self.pc)),
            OpcodeKind.PRINT: lambda op: self._print(),
        }

    @property
    def _out(self) -> TextIO:
        return sys.stdout if self.output is None else self.output

    def execute(self) -> None:
        """Run instructions from the current program counter until `halt`."""
        if not any(op.kind is OpcodeKind.HALT for op in self.instructions):
            self._out.write(
                f"{colored('error', 'red', attrs=['bold'])}: no `halt` in program.\n"
            )
        while True:
            if self.pc >= len(self.instructions):
                raise VmError(
                    f"program counter {self.pc} is outside the program "
                    f"of {len(self.instructions)} instructions"
                )
            op = self.instructions[self.pc]
            if op.kind is OpcodeKind.HALT:
                return
            self._handlers[op.kind](op)

    def _top(self, depth: int = 1) -> float:
        if len(self.stack) < depth:
            raise VmError(
                f"stack underflow at instruction {self.pc}: "
                f"need {depth} value(s), have {len(self.stack)}"
            )
        return self.stack[-depth]

    def _jump(self, pc: int) -> None:
        self.pc = pc

    def _set(self, key: int) -> None:
        self.constants[key] = self._top()
        self.pc += 1

    def _get(self, key: int) -> None:
        try:
            value = self.constants[key]
        except KeyError:
            raise VmError(f"no constant stored under key {key}") from None
        self.stack.append(value)
        self.pc += 1

    def _push(self, value: float) -> None:
        self.stack.append(value)
        self.pc += 1

    def _print(self) -> None:
        self._out.write(f"{_format_number(self._top())}\n")
        self.pc += 1

    def _pop(self) -> None:
        if self.stack:
            self.stack.pop()
        self.pc += 1

    def _add(self) -> None:
        a, b = self._top(1), self._top(2)
        self._push(a + b)

    def _dup(self) -> None:
        self._push(self._top())

    def _mul(self) -> None:
        a, b = self._top(1), self._top(2)
        self._push(a * b)

    def _sqrt(self) -> None:
        a = self._top()
        self._push(math.sqrt(a) if a >= 0 else math.nan)

    def _sub(self) -> None:
        a, b = self._top(1), self._top(2)
        self._push(b - a)