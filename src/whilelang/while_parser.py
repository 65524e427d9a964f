"""
While Language Parser

Parses While token streams into the abstract syntax trees of `while_ast`.

This module implements a hand-written recursive-descent parser with one method
per precedence tier. Every binary tier is a loop that folds to the left, which
is what makes `;`, `&`, `+ -` and `* /` left-associative.

Grammar
-------
Statements (loosest first):
    Statement       := Control (";" Control)*
    Control         := "if" BooleanExp "then" StatementTerm "else" StatementTerm
                     | "while" BooleanExp "do" StatementTerm
                     | StatementTerm
    StatementTerm   := "skip" | IDENT ":=" ArithmeticExp | "{" Statement "}"

Boolean expressions:
    BooleanExp      := Negation ("&" Negation)*
    Negation        := "!" Negation | BooleanExpTerm
    BooleanExpTerm  := BOOL
                     | ArithmeticExp ("<" | "=") ArithmeticExp
                     | "(" BooleanExp ")"

Arithmetic expressions:
    ArithmeticExp   := Product (("+" | "-") Product)*
    Product         := Term (("*" | "/") Term)*
    Term            := INT | "-" INT | IDENT | "(" ArithmeticExp ")"

Parser Behavior
---------------
- Branches of `if` and the body of `while` are a single StatementTerm: a
  sequence used there must be wrapped in braces.
- `!` binds tighter than `&`: `!a & b` is `And(Not(a), b)`.
- `- INT` is folded into a negative Integer literal; there is no unary
  minus node.
- Comparisons go through `ArithmeticCondition.normal_form`.
- A `(` at the start of a boolean term may open either an arithmetic
  operand or a boolean group. The comparison reading is tried first; on
  failure the parser rewinds and tries the group reading.
- Fail-fast: the first unexpected token raises `ParseError`; ERROR tokens
  raise the `LexicalError` they carry. No partial tree is returned.

Entry Points
------------
`Parser.parse(start)` accepts any name in `ENTRY_POINTS` and requires the
production to consume the whole stream:
    statement, statement_term, boolean_exp, boolean_exp_term,
    arithmetic_exp, term
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from whilelang.while_ast import (
    And,
    ArithmeticCondition,
    ArithmeticExp,
    Assignment,
    BinaryOperation,
    Boolean,
    BooleanExp,
    Composition,
    ConditionOperator,
    Conditional,
    Integer,
    Node,
    Not,
    Operator,
    Position,
    Skip,
    Statement,
    Variable,
    While,
)
from whilelang.while_constants import (
    BOOL,
    EOF,
    ERROR,
    IDENT,
    INT,
    INT64_MAX,
    INT64_MIN,
    NEWLINE,
    boolean_literals,
)
from whilelang.while_lexer import LexicalError, Token, tokenize

logger = logging.getLogger(__name__)

ENTRY_POINTS: tuple[str, ...] = (
    "statement",
    "statement_term",
    "boolean_exp",
    "boolean_exp_term",
    "arithmetic_exp",
    "term",
)

ADDITIVE_OPS: dict[str, Operator] = {"PLUS": Operator.ADD, "SUB": Operator.SUB}
MULTIPLICATIVE_OPS: dict[str, Operator] = {"MULT": Operator.MUL, "DIV": Operator.DIV}
COMPARISON_OPS: dict[str, ConditionOperator] = {
    "LT": ConditionOperator.STRICTLY_LESS,
    "EQ": ConditionOperator.EQUAL,
}

TERM_START: tuple[str, ...] = (INT, "SUB", IDENT, "LPAREN")
BOOLEAN_TERM_START: tuple[str, ...] = (BOOL,) + TERM_START
STATEMENT_TERM_START: tuple[str, ...] = ("SKIP", IDENT, "LBRACE")


def integer_value(tok: Token) -> int:
    """Read the payload of an INT token as an int64 value.

    Hand-built streams may carry a decimal string instead of an int; anything
    that is not a decimal literal within int64 raises `LexicalError`.
    """
    value = tok.value
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        number = int(value)
    else:
        raise LexicalError(LexicalError.INVALID_INTEGER, str(value), tok.line, tok.col)
    if not INT64_MIN <= number <= INT64_MAX:
        raise LexicalError(LexicalError.INVALID_INTEGER, str(value), tok.line, tok.col)
    return number


def boolean_value(tok: Token) -> bool:
    """Read the payload of a BOOL token, either a bool or `true`/`false`."""
    if isinstance(tok.value, bool):
        return tok.value
    if isinstance(tok.value, str) and tok.value in boolean_literals:
        return boolean_literals[tok.value]
    raise LexicalError(
        LexicalError.INVALID_BOOLEAN, str(tok.value), tok.line, tok.col
    )


class ParseError(SyntaxError):
    """Raised on the first token that no production accepts.

    Attributes:
        token (Token): The offending token (type EOF for unexpected end of input).
        expected (tuple[str, ...]): Token types that would have been accepted.
        index (int): Offset of the token in the stream.
        line (int): 1-based line of the token.
        col (int): 1-based column of the token.
    """

    def __init__(
        self,
        token: Token,
        expected: tuple[str, ...],
        index: int = 0,
        reason: str | None = None,
    ):
        self.token = token
        self.expected = expected
        self.index = index
        self.line = token.line
        self.col = token.col
        if reason is not None:
            message = f"{reason} at line {token.line}, col {token.col}"
        else:
            found = "end of input" if token.type == EOF else f"token {token}"
            message = (
                f"Unexpected {found} at line {token.line}, col {token.col}; "
                f"expected one of {expected}"
            )
        super().__init__(message)


class Parser:
    """
    While Parser Class

    Transforms a list of lexical tokens into a `while_ast` tree.

    Attributes
    ----------
    tokens : list[Token]
        The input token stream, NEWLINE tokens removed and EOF-terminated.
    position : int
        Current index into the token stream.

    Methods
    -------
    parse(start: str = "statement") -> Node
        Parse the whole stream from the given entry production.
    parse_statement() -> Statement
        Tier 3: `;`-separated sequence, folded to the left.
    parse_control() -> Statement
        Tier 2: `if`/`while`, or a StatementTerm.
    parse_statement_term() -> Statement
        Tier 1: `skip`, assignment or a braced statement.
    parse_boolean_exp() -> BooleanExp
        Tier 3: `&`-separated conjunction, folded to the left.
    parse_negation() -> BooleanExp
        Prefix `!`.
    parse_boolean_exp_term() -> BooleanExp
        Tier 1: literal, comparison or parenthesized boolean expression.
    parse_arithmetic_exp() -> ArithmeticExp
        Tier 3: `+` and `-`.
    parse_product() -> ArithmeticExp
        Tier 2: `*` and `/`.
    parse_term() -> ArithmeticExp
        Tier 1: literal, folded negative literal, variable or parenthesized expression.

    Raises
    ------
    ParseError
        When a token does not fit the grammar.
    LexicalError
        When an ERROR token is reached.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self.tokens: list[Token] = [t for t in tokens if t.type != NEWLINE]
        if not self.tokens or self.tokens[-1].type != EOF:
            last = self.tokens[-1] if self.tokens else Token(EOF, EOF)
            self.tokens.append(Token(EOF, EOF, last.line, last.col))
        self.position: int = 0

    def current(self) -> Token:
        tok = (
            self.tokens[self.position]
            if self.position < len(self.tokens)
            else self.tokens[-1]
        )
        if tok.type == ERROR:
            if isinstance(tok.value, LexicalError):
                raise tok.value
            raise LexicalError(
                LexicalError.INVALID_TOKEN, str(tok.value), tok.line, tok.col
            )
        return tok

    def advance(self) -> Token:
        self.position += 1
        return self.current()

    def error(self, *expected: str) -> ParseError:
        return ParseError(self.current(), expected, self.position)

    def match(self, *types: str) -> Token:
        tok = self.current()
        if tok.type in types:
            self.advance()
            return tok
        raise self.error(*types)

    def parse(self, start: str = "statement") -> Node:
        """Parse the whole token stream starting from the production `start`."""
        if start not in ENTRY_POINTS:
            raise ValueError(
                f"Unknown entry point: {start!r}; expected one of {ENTRY_POINTS}"
            )
        logger.debug("parsing %d tokens from %s", len(self.tokens), start)
        try:
            node: Node = getattr(self, f"parse_{start}")()
        except RecursionError:
            index = min(self.position, len(self.tokens) - 1)
            raise ParseError(
                self.tokens[index], (), index, reason="Nesting too deep"
            ) from None
        self.match(EOF)
        return node

    # Statements

    def parse_statement(self) -> Statement:
        node = self.parse_control()
        while self.current().type == "SEMICOLON":
            self.advance()
            node = Composition(node, self.parse_control())
        return node

    def parse_control(self) -> Statement:
        tok = self.current()
        if tok.type == "IF":
            return self.parse_conditional()
        if tok.type == "WHILE":
            return self.parse_loop_while()
        return self.parse_statement_term()

    def parse_conditional(self) -> Statement:
        self.match("IF")
        guard = self.parse_boolean_exp()
        self.match("THEN")
        true_branch = self.parse_statement_term()
        self.match("ELSE")
        false_branch = self.parse_statement_term()
        return Conditional(guard, true_branch, false_branch)

    def parse_loop_while(self) -> Statement:
        loop_tok = self.match("WHILE")
        position = (
            loop_tok.value
            if isinstance(loop_tok.value, Position)
            else Position(loop_tok.line, loop_tok.col)
        )
        guard = self.parse_boolean_exp()
        self.match("DO")
        body = self.parse_statement_term()
        return While(position, guard, body)

    def parse_statement_term(self) -> Statement:
        tok = self.current()
        if tok.type == "SKIP":
            self.advance()
            return Skip()
        if tok.type == IDENT:
            self.advance()
            self.match("ASSIGN")
            return Assignment(str(tok.value), self.parse_arithmetic_exp())
        if tok.type == "LBRACE":
            self.advance()
            inner = self.parse_statement()
            self.match("RBRACE")
            return inner
        raise self.error(*STATEMENT_TERM_START)

    # Boolean expressions

    def parse_boolean_exp(self) -> BooleanExp:
        node = self.parse_negation()
        while self.current().type == "AND":
            self.advance()
            node = And(node, self.parse_negation())
        return node

    def parse_negation(self) -> BooleanExp:
        if self.current().type == "NOT":
            self.advance()
            return Not(self.parse_negation())
        return self.parse_boolean_exp_term()

    def parse_boolean_exp_term(self) -> BooleanExp:
        tok = self.current()
        if tok.type == BOOL:
            self.advance()
            return Boolean(boolean_value(tok))
        if tok.type == "LPAREN":
            return self.parse_parenthesized_boolean()
        if tok.type not in TERM_START:
            raise self.error("NOT", *BOOLEAN_TERM_START)
        return self.parse_comparison()

    def parse_parenthesized_boolean(self) -> BooleanExp:
        start = self.position
        try:
            return self.parse_comparison()
        except ParseError as comparison_error:
            logger.debug(
                "no comparison at token %d (%s), retrying as boolean group",
                start,
                comparison_error,
            )
            self.position = start
            try:
                self.match("LPAREN")
                inner = self.parse_boolean_exp()
                self.match("RPAREN")
                return inner
            except ParseError as group_error:
                furthest = max(
                    (comparison_error, group_error), key=lambda e: e.index
                )
                raise furthest from None

    def parse_comparison(self) -> BooleanExp:
        lhs = self.parse_arithmetic_exp()
        op_tok = self.match(*COMPARISON_OPS)
        rhs = self.parse_arithmetic_exp()
        return ArithmeticCondition.normal_form(lhs, COMPARISON_OPS[op_tok.type], rhs)

    # Arithmetic expressions

    def parse_arithmetic_exp(self) -> ArithmeticExp:
        node = self.parse_product()
        while self.current().type in ADDITIVE_OPS:
            op_tok = self.current()
            self.advance()
            node = BinaryOperation(node, ADDITIVE_OPS[op_tok.type], self.parse_product())
        return node

    def parse_product(self) -> ArithmeticExp:
        node = self.parse_term()
        while self.current().type in MULTIPLICATIVE_OPS:
            op_tok = self.current()
            self.advance()
            node = BinaryOperation(
                node, MULTIPLICATIVE_OPS[op_tok.type], self.parse_term()
            )
        return node

    def parse_term(self) -> ArithmeticExp:
        tok = self.current()
        if tok.type == INT:
            self.advance()
            return Integer(integer_value(tok))
        if tok.type == "SUB":
            self.advance()
            literal = self.match(INT)
            return Integer(-integer_value(literal))
        if tok.type == IDENT:
            self.advance()
            return Variable(str(tok.value))
        if tok.type == "LPAREN":
            self.advance()
            inner = self.parse_arithmetic_exp()
            self.match("RPAREN")
            return inner
        raise self.error(*TERM_START)


def parse_source(source: str, start: str = "statement") -> Node:
    """Lex and parse `source` in one step."""
    return Parser(tokenize(source)).parse(start)


__all__ = ["ENTRY_POINTS", "ParseError", "Parser", "parse_source"]
