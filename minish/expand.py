"""Expansion of ``$NAME`` and ``$?`` in a command line before tokenizing."""

from __future__ import annotations

from .env import Environment
from .quoting import QuoteState

_QUOTES = "'\""


def _is_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _is_name_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


def _strip_value_quotes(value: str) -> str:
    """Drop one pair of matching quotes that wraps a whole value."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value


def _heredoc_end(line: str, pos: int) -> int:
    """Return the position just past ``<<`` and its delimiter word."""
    end = len(line)
    pos += 2
    while pos < end and line[pos] in " \t":
        pos += 1
    quote = ""
    while pos < end:
        char = line[pos]
        if not quote and char in " \t\n":
            break
        if char in _QUOTES:
            if not quote:
                quote = char
            elif char == quote:
                quote = ""
        pos += 1
    return pos


def expand_line(line: str, env: Environment, exit_code: int) -> str:
    """Replace variable references in ``line``.

    References inside single quotes and here-document delimiters are left
    alone; unknown variables expand to nothing. A value wrapped in one pair
    of matching quotes is inserted without them.
    """
    out: list[str] = []
    quotes = QuoteState()
    pos = 0
    end = len(line)
    while pos < end:
        if line.startswith("<<", pos):
            stop = _heredoc_end(line, pos)
            out.append(line[pos:stop])
            pos = stop
            continue
        char = line[pos]
        quotes.feed(char)
        following = line[pos + 1:pos + 2]
        if (
            char == "$"
            and following
            and not quotes.single
            and (following in "?_" or _is_alpha(following))
        ):
            if following == "?":
                out.append(str(exit_code))
                pos += 2
                continue
            stop = pos + 1
            while stop < end and _is_name_char(line[stop]):
                stop += 1
            value = env.lookup(line[pos + 1:stop])
            if value is not None:
                out.append(_strip_value_quotes(value))
            pos = stop
        else:
            out.append(char)
            pos += 1
    return "".join(out)