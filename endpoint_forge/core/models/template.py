"""
Generated file model — produced by the planner, consumed by the emission gate.
"""

from __future__ import annotations

from pydantic import BaseModel


class GeneratedFile(BaseModel):
    """A handler source file ready to be written.

    Attributes:
        path:      Path relative to the project root (POSIX separators).
        content:   Full file content.
        overwrite: Whether to replace an existing file.
        reason:    Why this file was generated.
        pattern:   Name of the pattern the content was built with.
        secondary: True for the automatically generated counterpart.
    """

    path: str
    content: str
    overwrite: bool = False
    reason: str = ""
    pattern: str = ""
    secondary: bool = False
