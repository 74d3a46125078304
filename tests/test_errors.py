from minish.errors import ShellExit, print_error, unexpected_token_message


def test_shell_exit_carries_code_and_message():
    exc = ShellExit(2, "exit\n")
    assert exc.code == 2
    assert exc.message == "exit\n"
    assert str(exc) == "exit\n"


def test_shell_exit_without_message():
    exc = ShellExit(0)
    assert exc.message is None
    assert str(exc) == ""


def test_shell_exit_keeps_error_text():
    exc = ShellExit(127, "fork error\n")
    assert (exc.code, exc.message) == (127, "fork error\n")
    assert str(exc) == "fork error\n"


def test_print_error_writes_to_stderr(capsys):
    print_error("open quote\n")
    captured = capsys.readouterr()
    assert captured.err == "open quote\n"
    assert captured.out == ""


def test_print_error_ignores_none(capsys):
    print_error(None)
    assert capsys.readouterr().err == ""


def test_unexpected_token_at_end_of_line():
    assert unexpected_token_message(None) == "syntax error near unexpected token 'newline'\n"


def test_unexpected_token_names_the_token():
    assert unexpected_token_message("|") == "syntax error near unexpected token '|'\n"