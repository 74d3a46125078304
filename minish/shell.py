"""The interactive read-parse-execute loop."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping, Sequence

from .commands import Command, CommandSyntaxError, build_commands
from .env import Environment, ShellState
from .errors import ShellExit, print_error
from .executor import execute
from .expand import expand_line
from .quoting import has_open_quote
from .tokens import TokenizeError, TokenType, is_space, tokenize

ReadLine = Callable[[str], "str | None"]

PROMPT = "minishell> "


def _prompt(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


class Shell:
    """A shell session: its state and where its input lines come from."""

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        read_line: ReadLine | None = None,
    ) -> None:
        source = os.environ if environ is None else environ
        self.state = ShellState(env=Environment.from_mapping(source))
        self._read_line = read_line or _prompt

    def parse(self, line: str) -> list[Command]:
        """Turn a line into commands; report errors and return [] on failure."""
        state = self.state
        if has_open_quote(line):
            print_error("open quote\n")
            state.exit_code = 2
            return []
        expanded = expand_line(line, state.env, state.exit_code)
        try:
            tokens = tokenize(expanded)
        except TokenizeError as exc:
            print_error(f"{exc}\n")
            state.exit_code = 2
            return []
        if not tokens:
            print("Warning: No tokens created")
            return []
        if tokens[0].kind is TokenType.PIPE:
            print_error("syntax error near unexpected token '|'\n")
            return []
        if tokens[-1].kind is TokenType.PIPE:
            print_error("Error: Unclosed pipe\n")
            state.exit_code = 2
            return []
        try:
            return build_commands(state, tokens, self._read_line)
        except CommandSyntaxError:
            return []

    def run_line(self, line: str) -> int:
        """Parse and run one line; return the resulting exit status."""
        if all(is_space(char) for char in line):
            return self.state.exit_code
        commands = self.parse(line)
        if not commands:
            return self.state.exit_code
        try:
            execute(self.state, commands)
        finally:
            for command in commands:
                command.close()
        return self.state.exit_code

    def loop(self) -> int:
        """Read and run lines until end of input or ``exit``; return the status."""
        while True:
            line = self._read_line(PROMPT)
            if line is None:
                print_error("exit\n")
                return self.state.exit_code
            try:
                self.run_line(line)
            except ShellExit as exc:
                print_error(exc.message)
                return exc.code


def main(argv: Sequence[str] | None = None) -> int:
    """Start an interactive session with the process environment."""
    try:
        import readline  # noqa: F401  (enables line editing and history for input())
    except ImportError:
        pass
    return Shell().loop()