import pytest

from dragonvm.tokens import Token, TokenType, lex

T = TokenType


def test_instruction_with_literal():
    assert lex("push 5") == [Token(T.PUSH, "push"), Token(T.LITERAL, "5")]


@pytest.mark.parametrize(
    "word, ttype",
    [
        ("push", T.PUSH),
        ("jump", T.JUMP),
        ("set", T.SET),
        ("get", T.GET),
        ("pop", T.POP),
        ("add", T.ADD),
        ("sub", T.SUB),
        ("pc", T.PC),
        ("print", T.PRINT),
        ("halt", T.HALT),
        ("+", T.ADD_SYMB),
        ("-", T.SUB_SYMB),
        ("$", T.GET_SYMB),
        ("mul", T.MUL),
        ("dup", T.DUP),
        ("*", T.MUL_SYMB),
        ("sqrt", T.SQRT),
        ("pi", T.PI),
        ("tau", T.TAU),
        ("e", T.E),
        ("macro", T.MACRO),
        ("const", T.CONSTANT),
        ("=", T.ASSIGN),
        ("{", T.OPEN_BRACE),
        ("}", T.CLOSE_BRACE),
    ],
)
def test_keywords(word, ttype):
    assert lex(word) == [Token(ttype, word)]


def test_longer_identifier_beats_keyword():
    assert lex("pushx") == [Token(T.IDENTIFIER, "pushx")]
    assert lex("ex") == [Token(T.IDENTIFIER, "ex")]


def test_invocation():
    assert lex("%my_macro") == [Token(T.INVOCATION, "%my_macro")]


def test_signed_and_decimal_literals():
    assert lex("+5") == [Token(T.LITERAL, "+5")]
    assert lex("-2.75") == [Token(T.LITERAL, "-2.75")]
    assert lex(".5") == [Token(T.LITERAL, ".5")]


def test_literal_followed_by_identifier():
    assert lex("12abc") == [Token(T.LITERAL, "12"), Token(T.IDENTIFIER, "abc")]


def test_comment_characters_are_skipped():
    assert lex("// hello") == [Token(T.IDENTIFIER, "hello")]
    assert lex("**") == []
    assert lex("1.") == [Token(T.LITERAL, "1")]


def test_whitespace_is_skipped():
    assert lex(" \t\n\f") == []


def test_unknown_characters_are_errors():
    assert lex("#") == [Token(T.ERROR, "#")]
    assert lex("a\r") == [Token(T.IDENTIFIER, "a"), Token(T.ERROR, "\r")]


def test_macro_definition():
    tokens = lex("macro main {\n  push 1\n  print\n  halt\n}")
    assert [t.ttype for t in tokens] == [
        T.MACRO,
        T.IDENTIFIER,
        T.OPEN_BRACE,
        T.PUSH,
        T.LITERAL,
        T.PRINT,
        T.HALT,
        T.CLOSE_BRACE,
    ]
    assert tokens[1].slice == "main"
    assert tokens[4].slice == "1"


def test_slices_come_from_source_in_order():
    source = "push 3 dup mul print halt"
    tokens = lex(source)
    assert " ".join(t.slice for t in tokens) == source