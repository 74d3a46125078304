"""Splitting of an input line into shell tokens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class TokenType(IntEnum):
    INPUT = 1
    HEREDOC = 2
    TRUNC = 3
    APPEND = 4
    PIPE = 5
    CMD = 6
    ARG = 7


@dataclass
class Token:
    text: str
    kind: TokenType


class TokenizeError(ValueError):
    """Raised when a line cannot be split into tokens."""


_SPACES = " \n\r\f\t\v"
_QUOTES = "'\""

_OPERATORS = (
    ("<<", TokenType.HEREDOC),
    (">>", TokenType.APPEND),
    ("<", TokenType.INPUT),
    (">", TokenType.TRUNC),
    ("|", TokenType.PIPE),
)
_SYMBOLS = {kind: symbol for symbol, kind in _OPERATORS}


def is_space(char: str) -> bool:
    """Return True for the whitespace characters the shell splits on."""
    return bool(char) and char in _SPACES


def special_at(text: str, pos: int) -> TokenType | None:
    """Return the operator starting at ``pos`` in ``text``, if any."""
    for symbol, kind in _OPERATORS:
        if text.startswith(symbol, pos):
            return kind
    return None


def _word_end(line: str, pos: int) -> int:
    end = len(line)
    quote = ""
    while pos < end and not is_space(line[pos]) and special_at(line, pos) is None:
        char = line[pos]
        if char in _QUOTES and not quote:
            # Only the first quoted span of a word is treated as a unit.
            quote = char
            closing = line.find(quote, pos + 1)
            pos = end if closing == -1 else closing + 1
        else:
            pos += 1
    return pos


def _delimiter_end(line: str, pos: int) -> tuple[int, int]:
    end = len(line)
    while pos < end and is_space(line[pos]):
        pos += 1
    if pos >= end or line[pos] in "<>":
        raise TokenizeError("syntax error near unexpected token `<<'")
    start = pos
    quote = ""
    while pos < end:
        char = line[pos]
        if not quote and char in _QUOTES:
            quote = char
        elif quote and char == quote:
            quote = ""
        elif not quote and (is_space(char) or special_at(line, pos) is not None):
            break
        pos += 1
    if pos == start:
        raise TokenizeError("syntax error near unexpected token `newline'")
    return start, pos


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into tokens; raise TokenizeError on a bad here-document."""
    tokens: list[Token] = []
    pos = 0
    end = len(line)
    while pos < end:
        while pos < end and is_space(line[pos]):
            pos += 1
        if pos >= end:
            break
        kind = special_at(line, pos)
        if kind is not None:
            symbol = _SYMBOLS[kind]
            tokens.append(Token(symbol, kind))
            pos += len(symbol)
            if kind is TokenType.HEREDOC:
                start, pos = _delimiter_end(line, pos)
                tokens.append(Token(line[start:pos], TokenType.ARG))
        else:
            stop = _word_end(line, pos)
            if not tokens or tokens[-1].kind is TokenType.PIPE:
                word_kind = TokenType.CMD
            else:
                word_kind = TokenType.ARG
            tokens.append(Token(line[pos:stop], word_kind))
            pos = stop
    return tokens


def format_tokens(tokens: list[Token]) -> str:
    """Render tokens one per line for debugging output."""
    if not tokens:
        return "Token list is empty\n"
    return "".join(f"Type : {int(token.kind)}, [{token.text}]\n" for token in tokens)