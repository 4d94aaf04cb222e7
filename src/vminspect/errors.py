from __future__ import annotations


class InspectError(Exception):
    """Error generated when inspecting a process."""


class ParseError(InspectError):
    def __str__(self) -> str:
        return f"Failed to parse process information, error={self.args[0] if self.args else ''}"


class IoError(InspectError):
    def __str__(self) -> str:
        return f"I/O Error, error={self.args[0] if self.args else ''}"
