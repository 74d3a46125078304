# minish

A small interactive shell for POSIX systems. It reads one line at a time and
expands variables. It then splits the line into a pipeline and runs each
command. A command is either one of the shell's builtins or a program found on
`PATH`.

## Installing

```
pip install .
```

## Running

```
minish
```

The prompt is `minishell> `. Press Ctrl-D at the prompt to leave. The shell
then prints `exit` and returns the status of the last command. Line editing
and history come from Python's `readline` module when it is available.

## What it understands

- Pipelines: `ls -l | grep py | wc -l`
- Redirections: `< file`, `> file`, `>> file`
- Here-documents: `cat << END`. The body is read with a `> ` prompt up to a
  line equal to the delimiter, with its quotes removed. If the delimiter
  starts or ends with a quote, as in `<< 'END'`, the body is not expanded.
  Otherwise `$NAME` and `$?` are expanded in it.
- Single and double quotes. Nothing is expanded inside single quotes. A line
  with an unclosed quote is rejected with exit status 2.
- Variables: `$NAME` and `$?`, which holds the status of the last command.
  An unknown variable expands to nothing.

## Builtins

| Command  | Behaviour                                                           |
|----------|---------------------------------------------------------------------|
| `echo`   | prints its arguments; leading `-n` (or `-nnn`) drops the newline    |
| `cd`     | takes exactly one directory and updates `PWD` and `OLDPWD`          |
| `pwd`    | prints the working directory                                        |
| `export` | sets `NAME=value`; with no arguments lists entries as `declare -x`  |
| `unset`  | removes variables                                                   |
| `env`    | prints every variable that has a value                              |
| `exit`   | leaves the shell, with an optional numeric status taken modulo 256  |

When a single builtin is the whole line, it runs inside the shell itself, so
`cd`, `export` and `unset` change the shell's own state. Inside a pipeline a
builtin runs on a copy of the state, so those changes do not last.

## Exit statuses

- `127`: command not found
- `126`: the file is not executable, or is a directory
- `2`: a syntax error, an unclosed quote, or a non-numeric argument to `exit`
- `1`: a failed redirection, a builtin error, or `exit` with too many arguments

## Using it from Python

```python
from minish.shell import Shell

shell = Shell({"PATH": "/usr/bin:/bin"})
status = shell.run_line("echo hello | tr a-z A-Z")
```

`Shell(environ, read_line)` takes the starting environment and the function
that reads input lines. The default environment is `os.environ`, and the
default reader is `input()`. `Shell.parse` turns a line into `Command`
objects, and `Shell.run_line` parses and runs a line and returns its status.
`Shell.loop` runs the interactive loop. The `exit` builtin raises
`minish.errors.ShellExit`, which carries the status in its `code` attribute.

The parts can also be used on their own:

- `minish.tokens.tokenize` splits a line into tokens.
- `minish.expand.expand_line` expands variables.
- `minish.commands.build_commands` builds commands and opens their
  redirections.
- `minish.executor.execute` runs a pipeline.
- `minish.builtin_cmds.run_builtin` runs one builtin.

`minish.executor.install_signal_handlers` makes SIGINT print a new line and
makes the shell ignore SIGQUIT. The interactive command does not install it.

## What it does not do

- It does not run script files and has no `-c` option. Arguments given to
  `minish` are ignored, and it only reads lines from the prompt.
- It has no `;`, `&&`, `||`, subshells, background jobs or job control.
- It does no globbing, tilde expansion or `${...}` forms.