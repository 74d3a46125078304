"""The commands the shell runs itself: echo, cd, pwd, export, unset, env, exit."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Sequence
from typing import TextIO

from .env import Environment, ShellState
from .errors import ShellExit, print_error

BUILTINS = frozenset({"echo", "cd", "pwd", "export", "unset", "env", "exit"})

_WHITESPACE = " \t\n\v\f\r"
_LONG_MAX = 2**63 - 1
_ULL_MOD = 2**64


def _stream(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def _is_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _is_name_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


def is_builtin(name: str | None) -> bool:
    """True when ``name`` is one of the shell's own commands."""
    return name in BUILTINS


def _is_echo_flag(arg: str) -> bool:
    return arg.startswith("-") and all(char == "n" for char in arg[1:])


def echo(args: Sequence[str], out: TextIO | None = None) -> int:
    """Print the arguments separated by spaces; leading ``-n`` flags drop the newline."""
    words = list(args[1:])
    newline = True
    while words and _is_echo_flag(words[0]):
        words.pop(0)
        newline = False
    stream = _stream(out)
    stream.write(" ".join(words))
    if newline:
        stream.write("\n")
    stream.flush()
    return 0


def _set_entry(env: Environment, entry: str) -> None:
    index = env.export_index(entry)
    if index is None:
        env.append(entry)
    else:
        env.replace(index, entry)


def _update_oldpwd(env: Environment) -> None:
    current = None
    for entry in env:
        if entry.startswith("PWD"):
            current = entry
    _set_entry(env, "OLDPWD" if current is None else "OLD" + current)


def cd(state: ShellState, args: Sequence[str]) -> int:
    """Change directory to the single argument and record PWD and OLDPWD."""
    if len(args) != 2:
        return 1
    target = args[1]
    try:
        os.chdir(target)
    except OSError as exc:
        print_error(f"{target}: {exc.strerror}\n")
        return 1
    _update_oldpwd(state.env)
    try:
        cwd = os.getcwd()
    except OSError as exc:
        print_error(f"{target}: {exc.strerror}\n")
        return 0
    _set_entry(state.env, f"PWD={cwd}")
    return 0


def pwd(out: TextIO | None = None) -> int:
    """Print the current working directory."""
    try:
        cwd = os.getcwd()
    except OSError as exc:
        print_error(f"pwd: {exc.strerror}\n")
        return 1
    stream = _stream(out)
    stream.write(cwd + "\n")
    stream.flush()
    return 0


def _valid_export_name(text: str) -> bool:
    if not text or (text[0] != "_" and not _is_alpha(text[0])):
        return False
    name = text.partition("=")[0]
    return all(_is_name_char(char) for char in name)


def _declare_listing(env: Environment, out: TextIO) -> None:
    for entry in env.sorted_entries():
        name, sep, value = entry.partition("=")
        if sep:
            out.write(f'declare -x {name}="{value}"\n')
        else:
            out.write(f"declare -x {name}\n")
    out.flush()


def export(args: Sequence[str], env: Environment, out: TextIO | None = None) -> int:
    """Set environment entries, or list them all when no argument is given."""
    assignments = list(args[1:])
    if not assignments:
        if len(env):
            _declare_listing(env, _stream(out))
        return 0
    status = 0
    for assignment in assignments:
        if not _valid_export_name(assignment):
            print_error("export: invalid identifier\n")
            status = 1
        else:
            _set_entry(env, assignment)
    return status


def _valid_unset_name(text: str) -> bool:
    if text[0] != "_" and not _is_alpha(text[0]):
        return False
    return all(_is_name_char(char) for char in text)


def unset(args: Sequence[str], env: Environment) -> int:
    """Remove the entries named by the arguments."""
    status = 0
    for name in args:
        if not name:
            continue
        if not _valid_unset_name(name):
            print_error("unset: invalid identifier\n")
            status = 1
            continue
        index = env.unset_index(name)
        if index is not None:
            env.delete(index)
    return status


def env_command(env: Environment, out: TextIO | None = None) -> int:
    """Print every entry that has a value."""
    stream = _stream(out)
    for entry in env:
        if "=" in entry:
            stream.write(entry + "\n")
    stream.flush()
    return 0


def parse_exit_status(text: str) -> int:
    """Convert an ``exit`` argument to a status in 0..255.

    Raises ValueError when the argument is not a number that fits a long.
    """
    pos = 0
    end = len(text)
    while pos < end and text[pos] in _WHITESPACE:
        pos += 1
    sign = 1
    if pos < end and text[pos] in "+-":
        if text[pos] == "-":
            sign = -1
        pos += 1
    digits_start = pos
    value = 0
    while pos < end and "0" <= text[pos] <= "9":
        value = (value * 10 + ord(text[pos]) - ord("0")) % _ULL_MOD
        pos += 1
    while pos < end and text[pos] in _WHITESPACE:
        pos += 1
    too_long = pos - digits_start > 20
    if sign == -1:
        overflow = (value - 1) % _ULL_MOD > _LONG_MAX
    else:
        overflow = value > _LONG_MAX
    if pos < end or too_long or overflow:
        raise ValueError(f"numeric argument required: {text!r}")
    return (sign * value) % 256


def exit_command(state: ShellState, args: Sequence[str]) -> int:
    """End the shell, or return 1 when given too many arguments."""
    status = state.exit_code
    if len(args) > 1:
        try:
            status = parse_exit_status(args[1])
        except ValueError:
            print_error(f"exit: {args[1]}: numeric argument required\n")
            raise ShellExit(2) from None
        if len(args) > 2:
            print_error("exit: too many arguments\n")
            state.exit_code = 1
            return 1
    raise ShellExit(status)


def run_builtin(state: ShellState, args: Sequence[str], out: TextIO | None = None) -> int:
    """Run the builtin named by ``args[0]`` and store its status in ``state``."""
    name = args[0] if args else None
    handlers: dict[str, Callable[[], int]] = {
        "echo": lambda: echo(args, out),
        "cd": lambda: cd(state, args),
        "pwd": lambda: pwd(out),
        "export": lambda: export(args, state.env, out),
        "unset": lambda: unset(args, state.env),
        "env": lambda: env_command(state.env, out),
        "exit": lambda: exit_command(state, args),
    }
    if name not in handlers:
        raise ValueError(f"not a builtin: {name!r}")
    state.exit_code = handlers[name]()
    return state.exit_code