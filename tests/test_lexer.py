import pytest
from hypothesis import given
from hypothesis import strategies as st

from whilelang.while_ast import Position
from whilelang.while_constants import INT64_MAX, token_hashmap
from whilelang.while_lexer import (
    CharacterStream,
    LexicalError,
    Lexer,
    Token,
    extract_assumptions,
    tokenize,
)

reserved_words = set(token_hashmap) | {"true", "false", "assume"}


def types(source: str) -> list[str]:
    return [t.type for t in tokenize(source)]


def test_symbol_tokens() -> None:
    code = "{ } ( ) := ; + - * / = < & !"
    assert types(code) == [
        "LBRACE",
        "RBRACE",
        "LPAREN",
        "RPAREN",
        "ASSIGN",
        "SEMICOLON",
        "PLUS",
        "SUB",
        "MULT",
        "DIV",
        "EQ",
        "LT",
        "AND",
        "NOT",
        "EOF",
    ]


def test_keyword_tokens() -> None:
    assert types("if then else do skip") == ["IF", "THEN", "ELSE", "DO", "SKIP", "EOF"]


def test_while_token_carries_position() -> None:
    tokens = tokenize("x := 0;\n  while x < 3 do skip")
    loop = next(t for t in tokens if t.type == "WHILE")
    assert loop.value == Position(2, 3)
    assert (loop.line, loop.col) == (2, 3)


def test_boolean_literals() -> None:
    tokens = tokenize("true false")
    assert tokens[0] == Token("BOOL", True, 1, 1)
    assert tokens[1] == Token("BOOL", False, 1, 6)


def test_integer_literal_is_converted() -> None:
    tok = tokenize("12345")[0]
    assert tok.type == "INT"
    assert tok.value == 12345


def test_integer_literal_at_int64_max() -> None:
    tok = tokenize(str(INT64_MAX))[0]
    assert tok.type == "INT"
    assert tok.value == INT64_MAX


def test_integer_overflow_is_an_error_token() -> None:
    tok = tokenize(str(INT64_MAX + 1))[0]
    assert tok.type == "ERROR"
    assert isinstance(tok.value, LexicalError)
    assert tok.value.kind == LexicalError.INVALID_INTEGER
    assert tok.value.text == str(INT64_MAX + 1)


def test_unknown_character_is_an_error_token() -> None:
    tokens = tokenize("x := 1 $ 2")
    err = tokens[3]
    assert err.type == "ERROR"
    assert err.value.kind == LexicalError.INVALID_TOKEN
    assert (err.value.line, err.value.col) == (1, 8)


def test_lone_colon_is_an_error_token() -> None:
    assert types("x : 1")[1] == "ERROR"


def test_identifier_prefixed_by_keyword() -> None:
    tokens = tokenize("iffy skipper whiles")
    assert [t.type for t in tokens[:-1]] == ["IDENT", "IDENT", "IDENT"]
    assert [t.value for t in tokens[:-1]] == ["iffy", "skipper", "whiles"]


def test_comments_are_skipped() -> None:
    assert types("skip # x := 1\n; skip") == ["SKIP", "SEMICOLON", "SKIP", "EOF"]


def test_assume_header_is_skipped() -> None:
    tokens = tokenize("assume x := 1; y := 2\nx := y")
    assert [t.type for t in tokens] == ["IDENT", "ASSIGN", "IDENT", "EOF"]
    assert tokens[0].line == 2


def test_assume_only_skipped_at_line_start() -> None:
    assert types("x := assume") == ["IDENT", "ASSIGN", "IDENT", "EOF"]


def test_identifier_starting_with_assume_is_kept() -> None:
    assert types("assumed := 1") == ["IDENT", "ASSIGN", "INT", "EOF"]


def test_newlines_skipped_by_default() -> None:
    assert "NEWLINE" not in types("skip\n;\nskip\n")


def test_newlines_emitted_on_request() -> None:
    tokens = tokenize("skip\nskip", emit_newlines=True)
    assert [t.type for t in tokens] == ["SKIP", "NEWLINE", "SKIP", "EOF"]
    assert tokens[2].line == 2


def test_lexer_iterates_up_to_eof() -> None:
    tokens = list(Lexer(CharacterStream("skip")))
    assert tokens[-1].type == "EOF"
    assert len(tokens) == 2


def test_empty_source() -> None:
    assert tokenize("") == [Token("EOF", "EOF", 1, 1)]


def test_character_stream_read_past_end() -> None:
    stream = CharacterStream("a")
    stream.next()
    with pytest.raises(EOFError):
        stream.next()


def test_token_hash_and_eq() -> None:
    a = Token("INT", 1, 1, 1)
    b = Token("INT", 1, 1, 1)
    assert a == b
    assert hash(a) == hash(b)
    assert a != Token("INT", 2, 1, 1)
    assert repr(a) == "Token(INT, 1)"


def test_extract_assumptions() -> None:
    source = "assume x := 1; y := -2\nx := y"
    assert extract_assumptions(source) == {"x": "1", "y": "-2"}


@pytest.mark.parametrize(
    "source",
    ["x := 1", "", "assume x := 1 # commented", "skip\nassume x := 1"],
)  # type: ignore[misc]
def test_extract_assumptions_absent(source: str) -> None:
    assert extract_assumptions(source) == {}


@given(
    name=st.from_regex(r"[_a-zA-Z][_0-9a-zA-Z]{0,10}", fullmatch=True).filter(
        lambda x: x not in reserved_words
    )
)  # type: ignore[misc]
def test_identifiers(name: str) -> None:
    tok = tokenize(name)[0]
    assert tok.type == "IDENT"
    assert tok.value == name


@given(st.integers(min_value=0, max_value=INT64_MAX))  # type: ignore[misc]
def test_integer_values(value: int) -> None:
    tokens = tokenize(str(value))
    assert tokens[0] == Token("INT", value, 1, 1)
