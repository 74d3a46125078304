"""Turning a token list into commands with their redirections opened."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import BinaryIO

from .env import ShellState
from .errors import print_error, unexpected_token_message
from .heredoc import here_doc, trim_quotes
from .tokens import Token, TokenType

ReadLine = Callable[[str], "str | None"]

_QUOTES = "'\""
_INPUTS = frozenset({TokenType.INPUT, TokenType.HEREDOC})
_OUTPUTS = frozenset({TokenType.TRUNC, TokenType.APPEND})
_REDIRECTIONS = _INPUTS | _OUTPUTS
_NEWLINE_ERROR = "minishell: syntax error near unexpected token `newline'\n"


@dataclass
class Command:
    """One pipeline stage: its arguments and any redirected files."""

    args: list[str] = field(default_factory=list)
    infile: BinaryIO | None = None
    outfile: BinaryIO | None = None
    skip: bool = False

    def close(self) -> None:
        """Close redirected files that are still open."""
        for handle in (self.infile, self.outfile):
            if handle is not None:
                handle.close()
        self.infile = None
        self.outfile = None


class CommandSyntaxError(ValueError):
    """Raised when the token list is not a valid command line.

    The diagnostic has already been written to standard error.
    """


class _Builder:
    def __init__(self, state: ShellState, tokens: list[Token], read_line: ReadLine):
        self.state = state
        self.tokens = tokens
        self.read_line = read_line
        self.failed: set[str] = set()

    def _body(self, start: int) -> Iterator[int]:
        for index in range(start + 1, len(self.tokens)):
            if self.tokens[index].kind is TokenType.PIPE:
                return
            yield index

    def _open(self, filename: str, kind: TokenType) -> BinaryIO | None:
        stripped = filename
        word = filename
        if len(filename) >= 2 and filename[0] == filename[-1] and filename[0] in _QUOTES:
            stripped = filename[1:-1]
            word = filename[:-1]
        if kind is not TokenType.HEREDOC and not stripped:
            print_error("minishell: : No such file or directory\n")
            self.state.exit_code = 1
            return None
        if not filename:
            print_error(_NEWLINE_ERROR)
            self.state.exit_code = 2
            return None
        if kind is TokenType.HEREDOC:
            try:
                return here_doc(word, self.state.env, self.state.exit_code, self.read_line)
            except OSError:
                return None
        try:
            if kind is TokenType.INPUT:
                return open(stripped, "rb")
            if kind is TokenType.TRUNC:
                flags, mode = os.O_CREAT | os.O_WRONLY | os.O_TRUNC, "wb"
            else:
                flags, mode = os.O_CREAT | os.O_WRONLY | os.O_APPEND, "ab"
            return os.fdopen(os.open(stripped, flags, 0o644), mode)
        except OSError as exc:
            print_error(f"{stripped}: {exc.strerror}\n")
            return None

    def _apply(self, command: Command, index: int, kinds: frozenset, slot: str) -> bool:
        token = self.tokens[index]
        if token.kind not in kinds:
            return True
        current = getattr(command, slot)
        if current is not None:
            current.close()
            setattr(command, slot, None)
        following = self.tokens[index + 1] if index + 1 < len(self.tokens) else None
        if following is None or following.kind <= TokenType.PIPE:
            print_error(unexpected_token_message(None if following is None else following.text))
            return False
        handle = self._open(following.text, token.kind)
        if handle is None:
            self.failed.add(slot)
            command.skip = True
        else:
            self.failed.discard(slot)
            setattr(command, slot, handle)
        return True

    def _is_param(self, index: int) -> bool:
        token = self.tokens[index]
        if token.kind is TokenType.CMD:
            return True
        return (
            token.kind is TokenType.ARG
            and index > 0
            and self.tokens[index - 1].kind > TokenType.PIPE
        )

    def fill(self, command: Command, start: int) -> bool:
        """Open the segment's redirections and collect its arguments.

        Returns False on a syntax error that aborts the whole line.
        """
        self.failed = set()
        body = list(self._body(start))
        starts_with_pipe = self.tokens[start].kind is TokenType.PIPE
        inputs = [] if starts_with_pipe else [start, *body]
        outputs = body if starts_with_pipe else [start, *body]

        inputs_ok = all(self._apply(command, i, _INPUTS, "infile") for i in inputs)
        if not inputs_ok and "infile" not in self.failed:
            return False
        if "infile" in self.failed:
            command.skip = True
            return True
        outputs_ok = all(self._apply(command, i, _OUTPUTS, "outfile") for i in outputs)
        if not outputs_ok and "outfile" not in self.failed:
            return False
        if "outfile" in self.failed:
            if command.infile is not None:
                command.infile.close()
                command.infile = None
            command.skip = True
            return True
        command.args = [self.tokens[i].text for i in outputs if self._is_param(i)]
        return True


def build_commands(
    state: ShellState, tokens: list[Token], read_line: ReadLine
) -> list[Command]:
    """Split tokens at pipes into commands, opening every redirection.

    Raises CommandSyntaxError, with ``state.exit_code`` set to 2, on a
    misplaced operator.
    """
    if not tokens:
        return []
    if tokens[-1].kind in _REDIRECTIONS:
        print_error(_NEWLINE_ERROR)
        state.exit_code = 2
        raise CommandSyntaxError("syntax error near unexpected token `newline'")
    builder = _Builder(state, tokens, read_line)
    starts = [0] + [
        index
        for index in range(1, len(tokens))
        if tokens[index - 1].kind is TokenType.PIPE
    ]
    commands: list[Command] = []
    try:
        for start in starts:
            command = Command()
            commands.append(command)
            if not builder.fill(command, start):
                state.exit_code = 2
                raise CommandSyntaxError("syntax error in command line")
    except BaseException:
        for command in commands:
            command.close()
        raise
    for command in commands:
        command.args = [trim_quotes(arg) for arg in command.args]
    return commands