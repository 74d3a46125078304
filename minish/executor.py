"""Running parsed commands: builtins in the shell, everything else as processes."""

from __future__ import annotations

import errno
import io
import os
import signal
import subprocess
import sys
import threading
from collections.abc import Iterable, Sequence
from typing import BinaryIO, Union

from .builtin_cmds import is_builtin, run_builtin
from .commands import Command
from .env import Environment, ShellState
from .errors import ShellExit, print_error

PATH_MAX = 4096

_Target = Union[BinaryIO, int, None]
_Stage = Union[subprocess.Popen, int]


def _not_found(name: str) -> None:
    print_error(f"{name} : command not found\n")


def _search_path(env: Iterable[str]) -> str | None:
    for entry in env:
        if entry.startswith("PATH="):
            return entry[len("PATH="):]
    return None


def find_command(name: str, env: Iterable[str]) -> str | None:
    """Look ``name`` up in the directories of the environment's PATH.

    Prints a diagnostic and returns None when nothing is found.
    """
    paths = _search_path(env)
    if paths is None or len(name) > PATH_MAX // 2:
        _not_found(name)
        return None
    directories = paths.split(":") if paths else []
    if paths.endswith(":"):
        directories.pop()
    for directory in directories:
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.F_OK):
            return candidate
    _not_found(name)
    return None


def resolve_command(state: ShellState, name: str) -> str | None:
    """Return the path to run for ``name``, or None with ``state.exit_code`` set.

    127 means the command was not found, 126 that it cannot be executed.
    """
    if "/" not in name:
        path = find_command(name, state.env)
    elif os.access(name, os.F_OK):
        path = name
    else:
        _not_found(name)
        path = None
    if path is None:
        state.exit_code = 127
        return None
    if not os.access(path, os.X_OK):
        print_error(f"{path}: {os.strerror(errno.EACCES)}\n")
        state.exit_code = 126
        return None
    if not os.path.isfile(path):
        print_error(f"{name} : Is a directory\n")
        state.exit_code = 126
        return None
    return path


def _child_state(state: ShellState) -> ShellState:
    return ShellState(env=Environment(state.env.to_list()), exit_code=state.exit_code)


def _environ(env: Environment) -> dict[str, str]:
    result: dict[str, str] = {}
    for entry in env:
        name, sep, value = entry.partition("=")
        if sep:
            result.setdefault(name, value)
    return result


def _child_signals() -> None:
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    if hasattr(signal, "SIGQUIT"):
        signal.signal(signal.SIGQUIT, signal.SIG_DFL)


def _run_builtin_here(state: ShellState, command: Command) -> None:
    if command.outfile is None:
        run_builtin(state, command.args)
        return
    out = io.TextIOWrapper(
        command.outfile, encoding="utf-8", errors="surrogateescape", write_through=True
    )
    try:
        run_builtin(state, command.args, out)
    finally:
        out.flush()
        out.detach()


def _write_to_pipe(fd: int, data: bytes) -> None:
    try:
        with os.fdopen(fd, "wb") as stream:
            stream.write(data)
    except BrokenPipeError:
        pass


def _deliver(text: str, target: _Target, writers: list[threading.Thread]) -> None:
    if target is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    data = text.encode("utf-8", "surrogateescape")
    if isinstance(target, int):
        writer = threading.Thread(
            target=_write_to_pipe, args=(os.dup(target), data), daemon=True
        )
        writer.start()
        writers.append(writer)
        return
    target.write(data)
    target.flush()


def _run_builtin_detached(
    state: ShellState, args: Sequence[str], target: _Target, writers: list[threading.Thread]
) -> int:
    """Run a builtin in a pipeline without touching the shell's own state."""
    child = _child_state(state)
    buffer = io.StringIO()
    try:
        cwd: str | None = os.getcwd()
    except OSError:
        cwd = None
    try:
        status = run_builtin(child, args, buffer)
    except ShellExit as exc:
        status = exc.code
    finally:
        if cwd is not None:
            try:
                os.chdir(cwd)
            except OSError:
                pass
    _deliver(buffer.getvalue(), target, writers)
    return status


def _start_stage(
    state: ShellState,
    command: Command,
    stdin: BinaryIO | int | None,
    stdout: _Target,
    writers: list[threading.Thread],
) -> _Stage:
    if command.skip:
        return 1
    if not command.args:
        return 0
    name = command.args[0]
    if is_builtin(name):
        return _run_builtin_detached(state, command.args, stdout, writers)
    child = _child_state(state)
    path = resolve_command(child, name)
    if path is None:
        return child.exit_code
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        return subprocess.Popen(
            list(command.args),
            executable=path,
            stdin=stdin,
            stdout=stdout,
            env=_environ(state.env),
            preexec_fn=_child_signals if os.name == "posix" else None,
        )
    except OSError as exc:
        print_error(f"{path}: {exc.strerror}\n")
        return child.exit_code


def _close_fd(fd: int | None) -> None:
    if fd is not None:
        os.close(fd)


def execute(state: ShellState, commands: Sequence[Command]) -> int:
    """Run a pipeline and store the status of its last stage in ``state``.

    A lone builtin runs inside the shell; in a pipeline every stage is
    isolated, so builtins there do not change the shell's environment.
    """
    if not commands:
        return state.exit_code
    if len(commands) == 1:
        only = commands[0]
        if not only.skip and only.args and is_builtin(only.args[0]):
            _run_builtin_here(state, only)
            return state.exit_code

    stages: list[_Stage] = []
    writers: list[threading.Thread] = []
    pending: int | None = None
    last = len(commands) - 1
    try:
        for index, command in enumerate(commands):
            read_end = write_end = None
            if index < last:
                try:
                    read_end, write_end = os.pipe()
                except OSError:
                    raise ShellExit(1, "pipe error\n") from None
            stdin = command.infile if command.infile is not None else pending
            stdout: _Target = command.outfile if command.outfile is not None else write_end
            try:
                stages.append(_start_stage(state, command, stdin, stdout, writers))
            finally:
                _close_fd(write_end)
                _close_fd(pending)
                pending = None
            if read_end is not None:
                if commands[index + 1].infile is None:
                    pending = read_end
                else:
                    os.close(read_end)
    finally:
        _close_fd(pending)
        statuses = [stage.wait() if isinstance(stage, subprocess.Popen) else stage
                    for stage in stages]
        for writer in writers:
            writer.join()

    if len(statuses) == len(commands):
        final = statuses[-1]
        if final >= 0:
            state.exit_code = final
    return state.exit_code


def _on_interrupt(signum: int, frame: object) -> None:
    sys.stdout.write("\n")
    sys.stdout.flush()


def install_signal_handlers() -> None:
    """Make Ctrl-C print a new line and Ctrl-\\ do nothing in the shell."""
    signal.signal(signal.SIGINT, _on_interrupt)
    if hasattr(signal, "SIGQUIT"):
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)