"""
Interactive read-parse-print loop for the While language.

Each entry is lexed and parsed from the current entry point and its tree is
printed. An entry spans several lines while its braces are unbalanced.

Commands:
    :start RULE   switch the grammar entry point (see `ENTRY_POINTS`)
    :json         toggle JSON output
    exit, quit    leave the REPL
"""

import json
import logging

from whilelang.while_lexer import LexicalError, tokenize
from whilelang.while_parser import ENTRY_POINTS, ParseError, Parser

logger = logging.getLogger(__name__)


def read_entry() -> str:
    """Reads one entry, continuing with `... ` prompts while braces are open."""
    src_lines: list[str] = []
    brace_count = 0
    while True:
        prompt = ">>> " if not src_lines else "... "
        line = input(prompt)
        src_lines.append(line)
        brace_count += line.count("{") - line.count("}")
        if brace_count <= 0:
            break
    return "\n".join(src_lines).strip()


def handle_command(src: str, state: dict[str, str | bool]) -> bool:
    """Applies a `:` command to the REPL state. Returns False for ordinary input."""
    if not src.startswith(":"):
        return False
    command, _, arg = src[1:].partition(" ")
    arg = arg.strip()
    if command == "json":
        state["as_json"] = not state["as_json"]
        print(f"[mode] >>> JSON output {'ON' if state['as_json'] else 'OFF'}")
    elif command == "start":
        if arg not in ENTRY_POINTS:
            print(f"[error] >>> Unknown entry point {arg!r}; expected one of {ENTRY_POINTS}")
        else:
            state["start"] = arg
            print(f"[mode] >>> Entry point: {arg}")
    else:
        print(f"[error] >>> Unknown command :{command}")
    return True


def start_repl(start: str = "statement", as_json: bool = False) -> None:
    print(f"While REPL [start={start}]. Type 'exit' or 'quit' to leave.")
    state: dict[str, str | bool] = {"start": start, "as_json": as_json}

    while True:
        try:
            src = read_entry()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting While REPL.")
            return

        if src in ("exit", "quit"):
            print("Exiting While REPL.")
            return
        if not src or src.startswith("#"):
            continue
        if handle_command(src, state):
            continue

        try:
            ast = Parser(tokenize(src)).parse(str(state["start"]))
        except (ParseError, LexicalError) as e:
            logger.debug("rejected entry %r", src)
            print("[error] >>>")
            print(e)
            continue

        if state["as_json"]:
            print(json.dumps(ast.to_dict(), indent=2))
        else:
            print(repr(ast))
