"""
Lexical analyzer for the While language.

This module converts raw source text into the token stream consumed by
`while_parser.Parser`:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: A single token with type, payload value, and source location.
    LexicalError: Raised (via ERROR tokens) for malformed integers and unknown characters.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips blanks, `#` comments and the `assume ...` header line
    - Tracks newlines for positions; emits NEWLINE tokens only on request
    - Recognizes:
        * Identifiers and the keywords `if then else while do skip`
        * Boolean literals `true` / `false`
        * Integer literals, range-checked against int64
        * Operators and punctuation, longest match first (`:=`)
    - The `while` keyword carries its source Position as payload

Lexical failures never raise from `next_token`: they come back as ERROR
tokens whose value is a `LexicalError`, and the parser raises that error
as soon as it reaches the token.

Example:
    >>> [t.type for t in tokenize("x := 1")]
    ['IDENT', 'ASSIGN', 'INT', 'EOF']

Exports:
    - CharacterStream
    - Token
    - LexicalError
    - Lexer
    - tokenize
    - extract_assumptions
"""

import logging
from collections.abc import Iterator
from typing import Any

from whilelang.while_ast import Position
from whilelang.while_constants import (
    ASSUME_KEYWORD,
    BOOL,
    EOF,
    ERROR,
    IDENT,
    INT,
    INT64_MAX,
    NEWLINE,
    boolean_literals,
    token_hashmap,
)

logger = logging.getLogger(__name__)

symbol_hashmap: dict[str, str] = {
    k: v for k, v in token_hashmap.items() if not k[0].isalpha()
}


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` without advancing, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def at_line_start(self) -> bool:
        """True when only blanks precede the current position on its line."""
        start = self.source.rfind("\n", 0, self.position) + 1
        return self.source[start : self.position].strip() == ""

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class LexicalError(Exception):
    """Raised when the source contains text that is not a While token.

    Attributes:
        kind (str): "InvalidInteger" for literals outside int64, "InvalidBoolean"
            for boolean payloads other than true/false, "InvalidToken" otherwise.
        text (str): The offending source text.
        line (int): 1-based line of the offending text.
        col (int): 1-based column of the offending text.
    """

    INVALID_INTEGER = "InvalidInteger"
    INVALID_BOOLEAN = "InvalidBoolean"
    INVALID_TOKEN = "InvalidToken"

    def __init__(self, kind: str, text: str, line: int = 0, col: int = 0):
        super().__init__(f"{kind}: {text!r} at line {line}, col {col}")
        self.kind = kind
        self.text = text
        self.line = line
        self.col = col


class Token:
    """Represents a single lexical token of the While language.

    Attributes:
        type (str): The token type (e.g. 'IDENT', 'INT', 'WHILE', 'EOF').
        value (Any): The payload: identifier text, int, bool, Position for
            WHILE, LexicalError for ERROR, or the raw spelling otherwise.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: str, value: Any = None, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, repr(self.value), self.line, self.col))


class Lexer:
    """Lexical analyzer for the While language.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
        emit_newlines (bool): Produce NEWLINE tokens instead of silently skipping line breaks.
    """

    def __init__(self, stream: CharacterStream, emit_newlines: bool = False) -> None:
        self.stream = stream
        self.emit_newlines = emit_newlines

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_blanks(self) -> Token | None:
        """Skips blanks, comments and `assume` headers.

        Returns:
            Token | None: A NEWLINE token when one is reached and `emit_newlines` is set.
        """
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch in " \t\f\r":
                self.advance()
            elif ch == "\n":
                line, col = self.stream.line, self.stream.column
                self.advance()
                if self.emit_newlines:
                    return Token(NEWLINE, "\n", line, col)
            elif ch == "#":
                self.skip_line()
            elif self.at_assume_header():
                self.skip_line()
            else:
                break
        return None

    def skip_line(self) -> None:
        """Advances up to (not past) the end of the current line."""
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def at_assume_header(self) -> bool:
        n = len(ASSUME_KEYWORD)
        word = self.stream.source[self.stream.position : self.stream.position + n]
        follow = self.stream.peek(n)
        return (
            word == ASSUME_KEYWORD
            and not (follow.isalnum() or follow == "_")
            and self.stream.at_line_start()
        )

    def match_operator(self) -> Token | None:
        """Attempts to match the longest symbolic token from the current position."""
        line, col = self.stream.line, self.stream.column
        max_token = None
        candidate = ""

        for i in range(max(len(k) for k in symbol_hashmap)):
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in symbol_hashmap:
                max_token = candidate

        if max_token:
            for _ in range(len(max_token)):
                self.advance()
            return Token(symbol_hashmap[max_token], max_token, line, col)

        return None

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream."""
        newline = self.skip_blanks()
        if newline is not None:
            return newline

        if self.stream.end_of_file():
            return Token(EOF, EOF, self.stream.line, self.stream.column)

        ch = self.peek()
        line, col = self.stream.line, self.stream.column

        # 1. Identifier, keyword or boolean
        if ch.isascii() and (ch.isalpha() or ch == "_"):
            ident = ""
            while not self.stream.end_of_file() and (
                self.peek().isascii() and (self.peek().isalnum() or self.peek() == "_")
            ):
                ident += self.advance()
            if ident in boolean_literals:
                return Token(BOOL, boolean_literals[ident], line, col)
            if ident == "while":
                return Token("WHILE", Position(line, col), line, col)
            if ident in token_hashmap:
                return Token(token_hashmap[ident], ident, line, col)
            return Token(IDENT, ident, line, col)

        # 2. Integer literal
        if ch.isascii() and ch.isdigit():
            digits = ""
            while not self.stream.end_of_file() and (
                self.peek().isascii() and self.peek().isdigit()
            ):
                digits += self.advance()
            value = int(digits)
            if value > INT64_MAX:
                error = LexicalError(LexicalError.INVALID_INTEGER, digits, line, col)
                return Token(ERROR, error, line, col)
            return Token(INT, value, line, col)

        # 3. Operator or punctuation
        token = self.match_operator()
        if token:
            return token

        # 4. Unknown character
        text = self.advance()
        return Token(ERROR, LexicalError(LexicalError.INVALID_TOKEN, text, line, col), line, col)

    def __iter__(self) -> Iterator[Token]:
        """Yields tokens up to and including EOF."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == EOF:
                return


def tokenize(source: str, emit_newlines: bool = False) -> list[Token]:
    """Lexes `source` into a list of tokens terminated by EOF."""
    tokens = list(Lexer(CharacterStream(source), emit_newlines=emit_newlines))
    logger.debug("lexed %d tokens", len(tokens))
    return tokens


def extract_assumptions(source: str) -> dict[str, str]:
    """Reads the `assume x := 1; y := 2` header into {"x": "1", "y": "2"}.

    Only the first line is inspected; a first line without `assume`, or one
    carrying a comment, declares nothing.
    """
    first_line = source.splitlines()[0].strip() if source else ""
    if not first_line.startswith(ASSUME_KEYWORD) or "#" in first_line:
        return {}
    body = first_line[len(ASSUME_KEYWORD) :]
    assumptions: dict[str, str] = {}
    for assignment in body.split(";"):
        name, _, value = assignment.partition(":=")
        if name.strip():
            assumptions[name.strip()] = value.strip()
    return assumptions


__all__ = [
    "CharacterStream",
    "LexicalError",
    "Lexer",
    "Token",
    "extract_assumptions",
    "tokenize",
]
