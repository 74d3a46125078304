import pytest

from minish.commands import Command, CommandSyntaxError, build_commands
from minish.env import Environment, ShellState
from minish.tokens import tokenize


def scripted(lines):
    remaining = iter(lines)
    return lambda prompt: next(remaining, None)


def no_input(prompt):
    return None


@pytest.fixture
def state():
    return ShellState(env=Environment(["HOME=/home/user"]))


def build(state, line, lines=()):
    return build_commands(state, tokenize(line), scripted(lines))


def test_simple_command(state):
    commands = build(state, "ls -l")
    assert [c.args for c in commands] == [["ls", "-l"]]
    assert commands[0].skip is False


def test_pipeline(state):
    commands = build(state, "a | b c")
    assert [c.args for c in commands] == [["a"], ["b", "c"]]


def test_quotes_are_trimmed(state):
    commands = build(state, 'echo "hi there"')
    assert commands[0].args == ["echo", "hi there"]


def test_empty_token_list(state):
    assert build_commands(state, [], no_input) == []


def test_output_redirection(state, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    commands = build(state, "echo hi > out.txt")
    command = commands[0]
    assert command.args == ["echo", "hi"]
    command.outfile.write(b"data")
    command.close()
    assert (tmp_path / "out.txt").read_bytes() == b"data"
    assert command.outfile is None


def test_append_redirection(state, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "log").write_bytes(b"first\n")
    commands = build(state, "echo >> log")
    assert len(commands) == 1
    command = commands[0]
    assert command.args == ["echo"]
    assert command.skip is False
    command.outfile.write(b"second\n")
    command.close()
    assert command.outfile is None
    assert (tmp_path / "log").read_bytes() == b"first\nsecond\n"


def test_input_before_command(state, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "in.txt").write_bytes(b"content")
    command = build(state, "< in.txt cat")[0]
    try:
        assert command.args == ["cat"]
        assert command.infile.read() == b"content"
    finally:
        command.close()


def test_missing_input_file_skips(state, tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    command = build(state, "cat < missing.txt")[0]
    assert command.skip is True
    assert command.args == []
    assert command.infile is None
    assert "missing.txt" in capsys.readouterr().err


def test_empty_filename(state, tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    command = build(state, 'echo > ""')[0]
    assert command.skip is True
    assert state.exit_code == 1
    assert "No such file or directory" in capsys.readouterr().err


def test_trailing_redirection_is_error(state):
    with pytest.raises(CommandSyntaxError):
        build(state, "cat <")
    assert state.exit_code == 2


def test_redirection_followed_by_pipe(state, capsys):
    with pytest.raises(CommandSyntaxError):
        build(state, "cat < | wc")
    assert state.exit_code == 2
    assert "'|'" in capsys.readouterr().err


def test_heredoc_input(state):
    command = build(state, "cat << EOF", ["x $HOME", "EOF"])[0]
    try:
        assert command.args == ["cat"]
        assert command.infile.read() == b"x /home/user\n"
    finally:
        command.close()


def test_close_closes_handles(state, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "in.txt").write_bytes(b"")
    command = build(state, "cat < in.txt > out.txt")[0]
    infile, outfile = command.infile, command.outfile
    command.close()
    assert infile.closed and outfile.closed
    assert command.infile is None and command.outfile is None


def test_command_defaults():
    command = Command()
    command.close()
    assert (command.args, command.skip) == ([], False)