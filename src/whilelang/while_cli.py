"""
While CLI Entrypoint.

This module provides the command-line interface for parsing While programs.

Features:
    - Read source from `.while` files or inline strings.
    - Lex and parse from any grammar entry point.
    - Print the AST as a Python repr or as JSON.
    - Report the variables, integer constants and `assume` header of a program.
    - Launch an interactive REPL.

Example usage:
    whilelang loop.while
    whilelang -s "x := 1; while x < 10 do x := x + 1" --json
    whilelang -s "1 + 2 * 3" --start arithmetic_exp
    whilelang --repl

Functions:
    run_while(source: str, is_string: bool = False, start: str = "statement",
              as_json: bool = False, show_vars: bool = False) -> Node:
        Executes the pipeline (lex → parse → print) and returns the tree.

    main(argv: list[str] | None = None) -> None:
        Parses CLI arguments and invokes the appropriate action (REPL or parse).
"""

import argparse
import json
import logging
import sys

from whilelang.while_ast import Node
from whilelang.while_lexer import LexicalError, extract_assumptions, tokenize
from whilelang.while_parser import ENTRY_POINTS, ParseError, Parser

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def run_while(
    source: str,
    is_string: bool = False,
    start: str = "statement",
    as_json: bool = False,
    show_vars: bool = False,
) -> Node:
    """
    Run the While front end: lex, parse, and print the resulting tree.

    Args:
        source (str): The While source code or path to a `.while` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        start (str): Grammar entry point, one of `ENTRY_POINTS`.
        as_json (bool): Print `to_dict()` as JSON instead of the repr.
        show_vars (bool): Also print variables, constants and the `assume` header.

    Returns:
        Node: The parsed tree.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.while'.
        ParseError: On the first syntax error.
        LexicalError: On the first malformed token.
    """
    if not is_string and not source.endswith(".while"):
        raise ValueError("Only .while files are supported.")
    if not is_string:
        logger.info("reading %s", source)
        with open(source, encoding="utf-8") as f:
            source = f.read()

    tokens = tokenize(source)
    ast = Parser(tokens).parse(start)

    if as_json:
        print(json.dumps(ast.to_dict(), indent=2))
    else:
        print(repr(ast))

    if show_vars:
        print(f"variables: {', '.join(sorted(ast.extract_vars()))}")
        print(f"constants: {', '.join(str(c) for c in sorted(ast.extract_constants()))}")
        assumptions = extract_assumptions(source)
        print(
            "assume: "
            + "; ".join(f"{name} := {value}" for name, value in assumptions.items())
        )

    return ast


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the While CLI.

    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise parses the given file or string and prints the tree.
    - Syntax and lexical errors are printed to stderr and exit with status 1.
    """
    args_list = sys.argv[1:] if argv is None else argv
    if not args_list:
        from whilelang.while_repl import start_repl

        start_repl()
        return

    parser = argparse.ArgumentParser(prog="whilelang")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--start",
        choices=ENTRY_POINTS,
        default="statement",
        help="Grammar entry point (default: statement)",
    )
    parser.add_argument("--json", action="store_true", help="Print the AST as JSON")
    parser.add_argument(
        "--vars",
        action="store_true",
        help="Also print variables, constants and the assume header",
    )
    parser.add_argument(
        "-l",
        "--log-level",
        choices=list(LOG_LEVELS),
        default="WARNING",
        help="set the logging level (default: WARNING)",
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing",
    )

    args = parser.parse_args(args_list)
    logging.basicConfig(stream=sys.stderr, level=LOG_LEVELS[args.log_level])

    if args.repl or args.source is None:
        from whilelang.while_repl import start_repl

        start_repl(start=args.start, as_json=args.json)
        return

    try:
        run_while(
            source=args.source,
            is_string=args.string,
            start=args.start,
            as_json=args.json,
            show_vars=args.vars,
        )
    except (ParseError, LexicalError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
