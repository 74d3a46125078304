"""The shell's environment list and overall state."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field


class Environment:
    """Ordered list of ``NAME=value`` (or bare ``NAME``) entries."""

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries: list[str] = list(entries)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "Environment":
        """Build an environment from a name-to-value mapping."""
        return cls(f"{name}={value}" for name, value in mapping.items())

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, key: str | None) -> str | None:
        """Return the value of the first entry that starts with ``key``.

        Entries without ``=`` give an empty value; an empty key finds nothing.
        """
        if not key:
            return None
        for entry in self._entries:
            if entry.startswith(key):
                return entry.partition("=")[2]
        return None

    def append(self, entry: str) -> None:
        self._entries.append(entry)

    def to_list(self) -> list[str]:
        return list(self._entries)

    def sorted_entries(self) -> list[str]:
        return sorted(self._entries)

    def export_index(self, assignment: str) -> int | None:
        """Index of the entry that defines the name of ``assignment``."""
        name = assignment.partition("=")[0]
        if not name:
            return None
        size = len(name)
        for index, entry in enumerate(self._entries):
            if entry.startswith(name) and entry[size:size + 1] in ("", "="):
                return index
        return None

    def unset_index(self, name: str) -> int | None:
        """Index of the first entry that starts with ``name``."""
        if not name:
            return None
        for index, entry in enumerate(self._entries):
            if entry.startswith(name):
                return index
        return None

    def replace(self, index: int, entry: str) -> None:
        self._entries[index] = entry

    def delete(self, index: int) -> str:
        """Remove the entry at ``index`` and return it."""
        return self._entries.pop(index)


@dataclass
class ShellState:
    """Environment and last exit status shared by the shell's parts."""

    env: Environment = field(default_factory=Environment)
    exit_code: int = 0