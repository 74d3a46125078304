"""Tracking of single and double quote state while scanning a line."""

from __future__ import annotations

from dataclasses import dataclass

QUOTE_CHARS = "'\""


@dataclass
class QuoteState:
    """Whether the scan is currently inside single or double quotes."""

    single: bool = False
    double: bool = False

    @property
    def open(self) -> bool:
        return self.single or self.double

    def feed(self, char: str) -> bool:
        """Update the state with one character.

        Returns True when the character is a quote character.
        """
        if char not in QUOTE_CHARS or not char:
            return False
        if not self.single and not self.double:
            if char == "'":
                self.single = True
            else:
                self.double = True
        elif char == "'" and self.single and not self.double:
            self.single = False
        elif char == '"' and self.double and not self.single:
            self.double = False
        return True


def has_open_quote(line: str | None) -> bool:
    """Return True if ``line`` ends inside an unterminated quote."""
    state = QuoteState()
    for char in line or "":
        state.feed(char)
    return state.open