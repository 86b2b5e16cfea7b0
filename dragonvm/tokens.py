"""Lexer for the assembly language of the machine."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Iterator


class TokenType(enum.Enum):
    """Kinds of tokens produced by the lexer."""

    PUSH = enum.auto()
    JUMP = enum.auto()
    SET = enum.auto()
    GET = enum.auto()
    POP = enum.auto()
    ADD = enum.auto()
    SUB = enum.auto()
    PC = enum.auto()
    PRINT = enum.auto()
    HALT = enum.auto()
    ADD_SYMB = enum.auto()
    SUB_SYMB = enum.auto()
    GET_SYMB = enum.auto()
    MUL = enum.auto()
    DUP = enum.auto()
    MUL_SYMB = enum.auto()
    SQRT = enum.auto()
    PI = enum.auto()
    TAU = enum.auto()
    E = enum.auto()
    MACRO = enum.auto()
    CONSTANT = enum.auto()
    ASSIGN = enum.auto()
    OPEN_BRACE = enum.auto()
    CLOSE_BRACE = enum.auto()
    INVOCATION = enum.auto()
    IDENTIFIER = enum.auto()
    COMMENT = enum.auto()
    LITERAL = enum.auto()
    ERROR = enum.auto()


@dataclass(frozen=True)
class Token:
    """A token together with the source text it was read from."""

    ttype: TokenType
    slice: str


_KEYWORDS: dict[str, TokenType] = {
    "push": TokenType.PUSH,
    "jump": TokenType.JUMP,
    "set": TokenType.SET,
    "get": TokenType.GET,
    "pop": TokenType.POP,
    "add": TokenType.ADD,
    "sub": TokenType.SUB,
    "pc": TokenType.PC,
    "print": TokenType.PRINT,
    "halt": TokenType.HALT,
    "+": TokenType.ADD_SYMB,
    "-": TokenType.SUB_SYMB,
    "$": TokenType.GET_SYMB,
    "mul": TokenType.MUL,
    "dup": TokenType.DUP,
    "*": TokenType.MUL_SYMB,
    "sqrt": TokenType.SQRT,
    "pi": TokenType.PI,
    "tau": TokenType.TAU,
    "e": TokenType.E,
    "macro": TokenType.MACRO,
    "const": TokenType.CONSTANT,
    "=": TokenType.ASSIGN,
    "{": TokenType.OPEN_BRACE,
    "}": TokenType.CLOSE_BRACE,
}

# Pattern tokens; a keyword of the same length as a pattern match wins.
_PATTERNS: list[tuple[TokenType | None, re.Pattern[str]]] = [
    (TokenType.INVOCATION, re.compile(r"%[a-zA-Z_]+")),
    (TokenType.IDENTIFIER, re.compile(r"[a-zA-Z_]+")),
    (TokenType.COMMENT, re.compile(r"[/.*]+")),
    (TokenType.LITERAL, re.compile(r"[+-]?(?:[0-9]*\.)?[0-9]+")),
    (None, re.compile(r"[ \t\n\f]+")),
]

_SKIPPED = {TokenType.COMMENT, None}


def _longest_match(raw: str, pos: int) -> tuple[TokenType | None, int]:
    best_type: TokenType | None = TokenType.ERROR
    best_len = 0
    for text, ttype in _KEYWORDS.items():
        if len(text) > best_len and raw.startswith(text, pos):
            best_type, best_len = ttype, len(text)
    for ttype, pattern in _PATTERNS:
        match = pattern.match(raw, pos)
        if match and match.end() - pos > best_len:
            best_type, best_len = ttype, match.end() - pos
    if best_len == 0:
        return TokenType.ERROR, 1
    return best_type, best_len


def _scan(raw: str) -> Iterator[Token]:
    pos = 0
    while pos < len(raw):
        ttype, length = _longest_match(raw, pos)
        if ttype not in _SKIPPED:
            yield Token(ttype, raw[pos : pos + length])
        pos += length


def lex(raw: str) -> list[Token]:
    """Split source text into tokens, dropping whitespace and comment characters."""
    return list(_scan(raw))