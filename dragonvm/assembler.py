"""Turns lexed tokens into macros and opcodes for the virtual machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .tokens import Token, TokenType
from .vm import Opcode, OpcodeKind


class AssemblerError(Exception):
    """Raised when tokens do not form a valid macro or program."""


@dataclass
class Macro:
    """A named block of tokens declared with ``macro name { ... }``."""

    name: str
    body: list[Token] = field(default_factory=list)


_SIMPLE: dict[TokenType, Opcode] = {
    TokenType.POP: Opcode(OpcodeKind.POP),
    TokenType.ADD_SYMB: Opcode(OpcodeKind.ADD),
    TokenType.MUL_SYMB: Opcode(OpcodeKind.MUL),
    TokenType.SUB_SYMB: Opcode(OpcodeKind.SUB),
    TokenType.DUP: Opcode(OpcodeKind.DUP),
    TokenType.ADD: Opcode(OpcodeKind.ADD),
    TokenType.SUB: Opcode(OpcodeKind.SUB),
    TokenType.MUL: Opcode(OpcodeKind.MUL),
    TokenType.SQRT: Opcode(OpcodeKind.SQRT),
    TokenType.PC: Opcode(OpcodeKind.PC),
    TokenType.PI: Opcode(OpcodeKind.GET, 1),
    TokenType.TAU: Opcode(OpcodeKind.GET, 2),
    TokenType.E: Opcode(OpcodeKind.GET, 3),
    TokenType.PRINT: Opcode(OpcodeKind.PRINT),
    TokenType.HALT: Opcode(OpcodeKind.HALT),
}

_WITH_INDEX: dict[TokenType, OpcodeKind] = {
    TokenType.JUMP: OpcodeKind.JUMP,
    TokenType.SET: OpcodeKind.SET,
    TokenType.GET: OpcodeKind.GET,
    TokenType.GET_SYMB: OpcodeKind.GET,
}

_IGNORED = frozenset(
    {TokenType.LITERAL, TokenType.ERROR, TokenType.COMMENT, TokenType.IDENTIFIER}
)


def _parse_float(text: str) -> float:
    if "_" in text:
        raise AssemblerError(f"invalid number `{text}`")
    try:
        return float(text)
    except ValueError:
        raise AssemblerError(f"invalid number `{text}`") from None


def _parse_index(text: str) -> int:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not digits.isascii() or not digits.isdigit():
        raise AssemblerError(f"invalid non-negative integer `{text}`")
    return int(digits)


class Assembler:
    """Parses macros from a token stream and assembles tokens into opcodes."""

    def __init__(self, tokens: Iterable[Token]) -> None:
        self.tokens: list[Token] = list(tokens)
        self.cursor = 0

    def _current(self) -> Token:
        try:
            return self.tokens[self.cursor]
        except IndexError:
            raise AssemblerError("unexpected end of input") from None

    def _expect(self, expected: TokenType) -> Token:
        token = self._current()
        self.match_token(token.ttype, expected)
        return token

    def parse_macro(self) -> Macro:
        """Read one ``macro name { ... }`` block starting at the cursor."""
        self._expect(TokenType.MACRO)
        name = self._expect(TokenType.IDENTIFIER).slice
        self._expect(TokenType.OPEN_BRACE)
        body: list[Token] = []
        while (token := self._current()).ttype is not TokenType.CLOSE_BRACE:
            body.append(token)
            self.cursor += 1
        self._expect(TokenType.CLOSE_BRACE)
        return Macro(name, body)

    def match_token(self, actual: TokenType, expected: TokenType) -> None:
        """Advance the cursor if the token types agree, otherwise raise."""
        if actual is not expected:
            raise AssemblerError(
                f"expected {expected.name.lower()}, found {actual.name.lower()}"
            )
        self.cursor += 1

    def _argument(self, index: int) -> str:
        try:
            return self.tokens[index + 1].slice
        except IndexError:
            keyword = self.tokens[index].slice
            raise AssemblerError(f"`{keyword}` is missing its argument") from None

    def assemble(self) -> list[Opcode]:
        """Translate every instruction token into its opcode."""
        opcodes: list[Opcode] = []
        for index, token in enumerate(self.tokens):
            ttype = token.ttype
            if ttype is TokenType.PUSH:
                value = _parse_float(self._argument(index))
                opcodes.append(Opcode(OpcodeKind.PUSH, value))
            elif ttype in _WITH_INDEX:
                value = _parse_index(self._argument(index))
                opcodes.append(Opcode(_WITH_INDEX[ttype], value))
            elif ttype in _SIMPLE:
                opcodes.append(_SIMPLE[ttype])
            elif ttype in _IGNORED:
                continue
            else:
                raise AssemblerError(f"unexpected token `{token.slice}`")
        return opcodes