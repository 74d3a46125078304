"""An interactive shell with pipelines, redirections, here-documents and builtins."""

__version__ = "0.1.0"
__all__ = [
    "builtin_cmds",
    "commands",
    "env",
    "errors",
    "executor",
    "expand",
    "heredoc",
    "quoting",
    "shell",
    "tokens",
]