import pytest

from minish.env import Environment
from minish.heredoc import (
    collect_heredoc,
    expand_heredoc_line,
    here_doc,
    is_delimiter_quoted,
    trim_quotes,
)

HOME = "/home/user"


@pytest.fixture
def env():
    return Environment([f"HOME={HOME}"])


def scripted(lines):
    prompts = []
    remaining = iter(lines)

    def read_line(prompt):
        prompts.append(prompt)
        return next(remaining, None)

    read_line.prompts = prompts
    return read_line


def test_trim_quotes_removes_wrapping_quotes():
    assert trim_quotes('"EOF"') == "EOF"


def test_trim_quotes_inner_spans():
    assert trim_quotes("a'b'c") == "abc"


def test_trim_quotes_keeps_other_quote_kind():
    assert trim_quotes("'say \"hi\"'") == 'say "hi"'


def test_trim_quotes_none():
    assert trim_quotes(None) is None


@pytest.mark.parametrize("text", ["plain", "", "with space"])
def test_trim_quotes_identity_without_quotes(text):
    assert trim_quotes(text) == text


@pytest.mark.parametrize(
    "word, expected",
    [("EOF", False), ('"EOF"', True), ("'EOF", True), ("EOF'", True), ("", False)],
)
def test_is_delimiter_quoted(word, expected):
    assert is_delimiter_quoted(word) is expected


def test_expand_heredoc_line_variable(env):
    assert expand_heredoc_line("$HOME", env, 0) == HOME


def test_expand_heredoc_line_exit_code(env):
    assert expand_heredoc_line("$?", env, 7) == str(7)


def test_expand_heredoc_line_ignores_single_quotes(env):
    assert expand_heredoc_line("'$HOME'", env, 0) == f"'{HOME}'"


def test_expand_heredoc_line_unknown_is_empty(env):
    assert expand_heredoc_line("x$NOPE", env, 0) == "x"


def test_collect_expands_unquoted(env):
    reader = scripted(["hello $HOME", "EOF", "after"])
    assert collect_heredoc("EOF", env, 0, reader) == f"hello {HOME}\n"
    assert reader.prompts == ["> ", "> "]


def test_collect_quoted_delimiter_keeps_text(env):
    reader = scripted(["hello $HOME", "EOF"])
    assert collect_heredoc('"EOF"', env, 0, reader) == "hello $HOME\n"


def test_collect_end_of_input_warns(env, capsys):
    result = collect_heredoc("EOF", env, 0, scripted(["one"]))
    assert result == "one\n"
    assert "wanted 'EOF'" in capsys.readouterr().err


def test_collect_eof_error_ends_input(env):
    def read_line(prompt):
        raise EOFError

    assert collect_heredoc("EOF", env, 0, read_line) == ""


def test_here_doc_returns_readable_file(env):
    handle = here_doc("END", env, 3, scripted(["line $?", "END"]))
    try:
        assert handle.read() == f"line {3}\n".encode()
    finally:
        handle.close()