"""Shared utilities for backend code emitters."""

from __future__ import annotations


class BufferContractError(Exception):
    """Emission buffer contract violation (a backend bug, not bad input)."""


class Buffer:
    """Line-oriented output buffer with indentation tracking.

    The last element of `lines` is the open line: `add` appends to it and
    `newline` closes it. Closed lines never carry trailing whitespace.
    """

    def __init__(self, indent_str: str = "  ") -> None:
        self.level: int = 0
        self.lines: list[str] = [""]
        self._indent_str = indent_str

    def add(self, text: str) -> Buffer:
        """Append text to the open line."""
        self.lines[-1] += text
        return self

    def newline(self) -> Buffer:
        """Close the open line and open a new one at the current indentation."""
        self.lines[-1] = self.lines[-1].rstrip()
        self.lines.append(self._indent_str * self.level)
        return self

    def indent(self) -> Buffer:
        self.level += 1
        return self

    def dedent(self) -> Buffer:
        if self.level == 0:
            raise BufferContractError("dedent without matching indent")
        self.level -= 1
        return self

    def trim(self) -> Buffer:
        """Drop trailing whitespace and blank lines; the last text line becomes open."""
        while len(self.lines) > 1 and self.lines[-1].strip() == "":
            self.lines.pop()
        self.lines[-1] = self.lines[-1].rstrip()
        return self

    def delete_lines(self, n: int) -> Buffer:
        """Remove the n closed lines immediately before the open line."""
        if n < 0 or n > len(self.lines) - 1:
            raise BufferContractError(
                "cannot delete " + str(n) + " lines from " + str(len(self.lines) - 1)
            )
        if n > 0:
            del self.lines[-1 - n : -1]
        return self

    def get(self) -> str:
        """Return the accumulated output as a string."""
        return "\n".join(self.lines)
