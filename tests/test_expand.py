import pytest

from minish.env import Environment
from minish.expand import expand_line

HOME = "/home/user"


@pytest.fixture
def env():
    return Environment([f"HOME={HOME}", "USER=alice"])


@pytest.mark.parametrize("line", ["echo hello", "ls -l | wc", "", "a 'b' \"c\""])
def test_lines_without_dollar_are_unchanged(line, env):
    assert expand_line(line, env, 0) == line


def test_variable_is_replaced(env):
    assert expand_line("$HOME", env, 0) == HOME


def test_variable_inside_words(env):
    assert expand_line("echo $HOME", env, 0) == f"echo {HOME}"


def test_exit_code(env):
    assert expand_line("$?", env, 42) == str(42)


def test_single_quotes_block_expansion(env):
    assert expand_line("'$HOME'", env, 0) == "'$HOME'"


def test_double_quotes_allow_expansion(env):
    assert expand_line('"$HOME"', env, 0) == f'"{HOME}"'


def test_unknown_variable_vanishes():
    assert expand_line("a$NOPE b", Environment([]), 0) == "a b"


@pytest.mark.parametrize("line", ["$1", "cost$", "$ x", "$'x'", "$\"x\""])
def test_dollar_not_followed_by_name_is_kept(line, env):
    assert expand_line(line, env, 0) == line


def test_heredoc_delimiter_is_not_expanded(env):
    line = "cat << $HOME"
    assert expand_line(line, env, 0) == line


def test_quoted_value_is_unwrapped():
    env = Environment(['VAR="x"'])
    assert expand_line("$VAR", env, 0) == "x"


def test_lookup_matches_by_prefix():
    env = Environment(["HOMEDIR=/x"])
    assert expand_line("$HOME", env, 0) == "/x"


def test_name_stops_at_non_name_character(env):
    assert expand_line("$USER.txt", env, 0) == "alice.txt"