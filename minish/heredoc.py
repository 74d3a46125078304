"""Here-document reading, quote trimming and here-document expansion."""

from __future__ import annotations

import re
import tempfile
from collections.abc import Callable
from typing import BinaryIO

from .env import Environment
from .errors import print_error

ReadLine = Callable[[str], "str | None"]

_QUOTES = "'\""
_VARIABLE = re.compile(r"\$(\?|[A-Za-z0-9_]*)")


def trim_quotes(text: str | None) -> str | None:
    """Remove quote characters that open or close a quoted span."""
    if text is None:
        return None
    kept: list[str] = []
    quote = ""
    for char in text:
        if not quote and char in _QUOTES:
            quote = char
        elif quote and char == quote:
            quote = ""
        else:
            kept.append(char)
    return "".join(kept)


def is_delimiter_quoted(word: str) -> bool:
    """True when the delimiter starts or ends with a quote character."""
    return bool(word) and (word[0] in _QUOTES or word[-1] in _QUOTES)


def expand_heredoc_line(line: str, env: Environment, exit_code: int) -> str:
    """Expand every ``$NAME`` and ``$?`` in a here-document line."""

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name == "?":
            return str(exit_code)
        return env.lookup(name) or ""

    return _VARIABLE.sub(replace, line)


def _read(read_line: ReadLine) -> str | None:
    try:
        return read_line("> ")
    except EOFError:
        return None


def collect_heredoc(
    word: str, env: Environment, exit_code: int, read_line: ReadLine
) -> str:
    """Read lines until the delimiter and return them, newline terminated.

    Lines are expanded unless the delimiter is quoted.
    """
    quoted = is_delimiter_quoted(word)
    delimiter = trim_quotes(word)
    lines: list[str] = []
    while True:
        line = _read(read_line)
        if line is None:
            print_error(
                "warning: here-document delimited by end-of-file "
                f"(wanted '{delimiter}')\n"
            )
            break
        if line == delimiter:
            break
        if not quoted:
            line = expand_heredoc_line(line, env, exit_code)
        lines.append(line + "\n")
    return "".join(lines)


def here_doc(
    word: str, env: Environment, exit_code: int, read_line: ReadLine
) -> BinaryIO:
    """Collect a here-document into an anonymous file opened for reading."""
    content = collect_heredoc(word, env, exit_code, read_line)
    handle = tempfile.TemporaryFile()
    try:
        handle.write(content.encode("utf-8", "surrogateescape"))
        handle.seek(0)
    except BaseException:
        handle.close()
        raise
    return handle