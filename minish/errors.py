"""Error reporting helpers and the exception used to end the shell."""

from __future__ import annotations

import sys


class ShellExit(Exception):
    """Raised to terminate the shell with a given exit status."""

    def __init__(self, code: int, message: str | None = None) -> None:
        super().__init__(message or "")
        self.code = code
        self.message = message


def print_error(message: str | None) -> None:
    """Write ``message`` to standard error, if there is one."""
    if message:
        sys.stderr.write(message)
        sys.stderr.flush()


def unexpected_token_message(next_text: str | None) -> str:
    """Build the syntax error text for the token that follows an operator.

    ``None`` stands for the end of the line.
    """
    shown = "newline" if next_text is None else next_text
    return f"syntax error near unexpected token '{shown}'\n"