"""
Error taxonomy for the endpoint generator.

Two classes abort the whole invocation before any file is touched
(``UsageError``, ``InvalidAreaError``).  The other two are scoped to a
single file emission: the orchestrator records them and moves on to the
next file.
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Base class for every error raised by the generator."""


class UsageError(ScaffoldError):
    """Malformed invocation: missing arguments, bad names, conflicting flags."""


class InvalidAreaError(ScaffoldError):
    """The requested area is not one of the registered areas."""

    def __init__(self, area: str, allowed: list[str]) -> None:
        self.area = area
        self.allowed = allowed
        super().__init__(
            f"Invalid area: {area}. Must be one of: {', '.join(allowed)}"
        )


class FileConflictError(ScaffoldError):
    """Target file already exists and overwriting was not requested."""

    def __init__(self, path: Path | str) -> None:
        self.path = str(path)
        super().__init__(f"File already exists: {self.path}")


class EmissionError(ScaffoldError):
    """Writing a generated file (or creating its directory) failed."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot write {self.path}: {reason}")
