"""
Token vocabulary shared by the While lexer and parser.

Exports:
    - token_hashmap: keyword and symbol spellings mapped to token types
    - INT64_MIN, INT64_MAX: bounds for integer literals
"""

IDENT = "IDENT"
INT = "INT"
BOOL = "BOOL"
NEWLINE = "NEWLINE"
ERROR = "ERROR"
EOF = "EOF"

token_hashmap: dict[str, str] = {
    # keywords
    "if": "IF",
    "then": "THEN",
    "else": "ELSE",
    "while": "WHILE",
    "do": "DO",
    "skip": "SKIP",
    # grouping
    "{": "LBRACE",
    "}": "RBRACE",
    "(": "LPAREN",
    ")": "RPAREN",
    # statements
    ":=": "ASSIGN",
    ";": "SEMICOLON",
    # arithmetic
    "+": "PLUS",
    "-": "SUB",
    "*": "MULT",
    "/": "DIV",
    # boolean
    "=": "EQ",
    "<": "LT",
    "&": "AND",
    "!": "NOT",
}

boolean_literals: dict[str, bool] = {"true": True, "false": False}

# lines starting with this word declare initial values and are not part of the program
ASSUME_KEYWORD = "assume"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
