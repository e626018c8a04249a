"""
Generation request — the parsed, validated form of one CLI invocation.

Built once from command-line tokens and frozen afterwards.  The two
pattern-override flags are mutually exclusive; that is checked when the
options are constructed, not later in the orchestration logic.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from endpoint_forge.core.models.pattern import PatternKind

_RESOURCE_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")


class Area(str, Enum):
    """Top-level scope of a request."""

    ADMIN = "admin"        # administrative area
    GALLERY = "gallery"    # client-facing gallery area

    @classmethod
    def values(cls) -> list[str]:
        return [a.value for a in cls]


class GenerationOptions(BaseModel):
    """Named boolean flags of a generation request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    crud: bool = False
    auth: bool = False
    force_simple_pattern: bool = False
    force_orm_pattern: bool = False
    multipart: bool = False
    nested: bool = False
    dynamic: bool = False
    force: bool = False
    dry_run: bool = False

    @model_validator(mode="after")
    def _exclusive_overrides(self) -> GenerationOptions:
        if self.force_simple_pattern and self.force_orm_pattern:
            raise ValueError(
                "--forceSimplePattern and --forceORMPattern are mutually exclusive"
            )
        return self

    @property
    def pattern_override(self) -> PatternKind | None:
        """The explicitly requested pattern, or None for the area default."""
        if self.force_orm_pattern:
            return PatternKind.ORM_BACKED
        if self.force_simple_pattern:
            return PatternKind.DIRECT_CLIENT
        return None


class GenerationRequest(BaseModel):
    """Area + resource + options for one invocation."""

    model_config = ConfigDict(frozen=True)

    area: Area
    resource: str
    options: GenerationOptions = Field(default_factory=GenerationOptions)

    @field_validator("resource")
    @classmethod
    def _check_resource(cls, value: str) -> str:
        if not _RESOURCE_RE.match(value):
            raise ValueError(
                f"Invalid resource name '{value}': start with a letter, "
                "then use letters, digits, '-' or '_'"
            )
        return value
