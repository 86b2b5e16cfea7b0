import pytest

from dragonvm.assembler import Assembler, AssemblerError, Macro
from dragonvm.tokens import TokenType, lex
from dragonvm.vm import Opcode, OpcodeKind


def test_parse_macro_reads_name_and_body():
    tokens = lex("macro main { push 1 print halt }")
    assembler = Assembler(tokens)
    mac = assembler.parse_macro()
    assert mac.name == "main"
    assert [t.ttype for t in mac.body] == [
        TokenType.PUSH,
        TokenType.LITERAL,
        TokenType.PRINT,
        TokenType.HALT,
    ]
    assert assembler.cursor == len(tokens)


def test_parse_macro_consecutive_blocks():
    assembler = Assembler(lex("macro a { dup } macro b { pop }"))
    first = assembler.parse_macro()
    second = assembler.parse_macro()
    assert (first.name, second.name) == ("a", "b")
    assert [t.slice for t in second.body] == ["pop"]


def test_parse_macro_empty_body():
    mac = Assembler(lex("macro nothing { }")).parse_macro()
    assert mac == Macro("nothing", [])


def test_parse_macro_requires_macro_keyword():
    with pytest.raises(AssemblerError):
        Assembler(lex("push 1")).parse_macro()


def test_parse_macro_requires_name():
    with pytest.raises(AssemblerError):
        Assembler(lex("macro { halt }")).parse_macro()


def test_parse_macro_missing_close_brace():
    with pytest.raises(AssemblerError):
        Assembler(lex("macro main { push 1")).parse_macro()


def test_match_token_advances_cursor():
    assembler = Assembler([])
    assembler.match_token(TokenType.HALT, TokenType.HALT)
    assert assembler.cursor == 1


def test_match_token_mismatch_keeps_cursor():
    assembler = Assembler([])
    with pytest.raises(AssemblerError):
        assembler.match_token(TokenType.HALT, TokenType.PUSH)
    assert assembler.cursor == 0


def test_assemble_arithmetic_program():
    opcodes = Assembler(lex("push 2 push 3 add print halt")).assemble()
    assert opcodes == [
        Opcode(OpcodeKind.PUSH, 2.0),
        Opcode(OpcodeKind.PUSH, 3.0),
        Opcode(OpcodeKind.ADD),
        Opcode(OpcodeKind.PRINT),
        Opcode(OpcodeKind.HALT),
    ]


def test_assemble_constants_map_to_get():
    opcodes = Assembler(lex("pi tau e")).assemble()
    assert opcodes == [
        Opcode(OpcodeKind.GET, 1),
        Opcode(OpcodeKind.GET, 2),
        Opcode(OpcodeKind.GET, 3),
    ]


def test_assemble_symbols():
    opcodes = Assembler(lex("+ - * $ 4")).assemble()
    assert opcodes == [
        Opcode(OpcodeKind.ADD),
        Opcode(OpcodeKind.SUB),
        Opcode(OpcodeKind.MUL),
        Opcode(OpcodeKind.GET, 4),
    ]


def test_assemble_indexed_instructions():
    opcodes = Assembler(lex("set 0 get 0 jump 3")).assemble()
    assert opcodes == [
        Opcode(OpcodeKind.SET, 0),
        Opcode(OpcodeKind.GET, 0),
        Opcode(OpcodeKind.JUMP, 3),
    ]


def test_assemble_remaining_instructions():
    opcodes = Assembler(lex("pop dup sub mul sqrt pc")).assemble()
    assert [op.kind for op in opcodes] == [
        OpcodeKind.POP,
        OpcodeKind.DUP,
        OpcodeKind.SUB,
        OpcodeKind.MUL,
        OpcodeKind.SQRT,
        OpcodeKind.PC,
    ]


def test_assemble_negative_and_fractional_push():
    opcodes = Assembler(lex("push -2.5 push .5")).assemble()
    assert [op.arg for op in opcodes] == [-2.5, 0.5]


def test_assemble_skips_identifiers_and_literals():
    assert Assembler(lex("helper 7 halt")).assemble() == [Opcode(OpcodeKind.HALT)]


def test_assemble_rejects_braces():
    with pytest.raises(AssemblerError):
        Assembler(lex("{ halt }")).assemble()


def test_assemble_rejects_missing_argument():
    with pytest.raises(AssemblerError):
        Assembler(lex("push")).assemble()


@pytest.mark.parametrize("source", ["jump 1.5", "jump -1", "set x"])
def test_assemble_rejects_bad_index(source):
    with pytest.raises(AssemblerError):
        Assembler(lex(source)).assemble()


def test_assemble_rejects_bad_number():
    with pytest.raises(AssemblerError):
        Assembler(lex("push halt")).assemble()