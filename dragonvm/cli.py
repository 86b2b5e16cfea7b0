"""Command line front end: compiles a source file and runs it on the machine."""

from __future__ import annotations

import argparse
import math
import sys
import time
from typing import Iterable, Sequence

from termcolor import colored

from .assembler import Assembler, AssemblerError, Macro
from .tokens import Token, TokenType, lex
from .vm import Opcode, Vm, VmError


class CompileError(Exception):
    """Raised when a source file cannot be turned into a program."""


def collect_macros(tokens: Iterable[Token]) -> dict[str, Macro]:
    """Parse every macro declared in the token stream, keyed by name."""
    tokens = list(tokens)
    count = sum(1 for token in tokens if token.ttype is TokenType.MACRO)
    assembler = Assembler(tokens)
    macros: dict[str, Macro] = {}
    for _ in range(count):
        try:
            mac = assembler.parse_macro()
        except AssemblerError as exc:
            raise CompileError(f"malformed macro: {exc}") from exc
        if mac.name in macros:
            raise CompileError(f"macro with name `{mac.name}` already exists")
        macros[mac.name] = mac
    return macros


def expand_main(macros: dict[str, Macro]) -> list[Token]:
    """Return the body of `main` with invoked macros spliced in."""
    try:
        main_macro = macros["main"]
    except KeyError:
        raise CompileError("no main macro found") from None
    unexpanded = list(main_macro.body)
    body = list(unexpanded)
    # Each splice goes in at the invoking token's position in the unexpanded
    # body, even though earlier splices have already lengthened the list.
    for index, token in enumerate(unexpanded):
        if token.ttype is TokenType.IDENTIFIER:
            replacement = macros.get(token.slice)
            if replacement is None:
                raise CompileError(f"no macro named `{token.slice}`")
            body[index:index] = replacement.body
    return body


def compile_source(source: str) -> list[Opcode]:
    """Lex, expand and assemble source text into opcodes."""
    body = expand_main(collect_macros(lex(source)))
    try:
        return Assembler(body).assemble()
    except AssemblerError as exc:
        raise CompileError(str(exc)) from exc


def default_constants() -> dict[int, float]:
    """The constant store every program starts with."""
    return {1: math.pi, 2: math.tau, 3: math.e}


def _green(text: str) -> str:
    return colored(text, "green", attrs=["bold"])


def _error(message: str) -> None:
    print(f"{colored('error', 'red', attrs=['bold'])}: {message}")


def _format_elapsed(seconds: float) -> str:
    if seconds >= 1:
        return f"{seconds:.3f}s"
    if seconds >= 1e-3:
        return f"{seconds * 1e3:.3f}ms"
    return f"{seconds * 1e6:.3f}µs"


def _run(path: str) -> int:
    try:
        with open(path, encoding="utf-8") as handle:
            contents = handle.read()
    except OSError as exc:
        _error(f"cannot read `{path}`: {exc.strerror or exc}")
        return 1

    try:
        body = expand_main(collect_macros(lex(contents)))
    except CompileError as exc:
        _error(str(exc))
        return 1

    print(f"{_green('Compiling')} `{path}`")
    started = time.perf_counter()
    try:
        opcodes = Assembler(body).assemble()
    except AssemblerError as exc:
        _error(str(exc))
        return 1

    for opcode in opcodes:
        print(opcode)

    vm = Vm(opcodes, default_constants())
    elapsed = time.perf_counter() - started
    print(f"{_green(' Finished')} dev [unoptimized] in {_format_elapsed(elapsed)}")
    print(f"{_green('  Running')} `{path}`")
    try:
        vm.execute()
    except VmError as exc:
        _error(str(exc))
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the `dragon` command."""
    parser = argparse.ArgumentParser(
        prog="dragon", description="Assemble and run programs for a stack machine."
    )
    commands = parser.add_subparsers(dest="command", required=True)
    run = commands.add_parser("run", help="compile and run a source file")
    run.add_argument("path")
    args = parser.parse_args(argv)

    if args.command == "run":
        return _run(args.path)
    parser.error(f"unknown command {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())