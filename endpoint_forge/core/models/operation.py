"""
Operation model — an abstract database action.

An Operation names what to do (enumerate, read one, create, update,
delete), on which entity, filtered by what.  Filter and data values are
either plain literals or ``Ref`` expressions: host-language code such as
``gallerySlug`` or ``gallery.id`` that the generated handler evaluates
at runtime.  The SQL dialect never places either kind inside the query
text; both become positional arguments.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# JavaScript/TypeScript words that cannot name a local variable
_RESERVED_WORDS = frozenset({
    "arguments", "await", "break", "case", "catch", "class", "const", "continue",
    "debugger", "default", "delete", "do", "else", "enum", "eval", "export",
    "extends", "false", "finally", "for", "function", "if", "implements",
    "import", "in", "instanceof", "interface", "let", "new", "null", "package",
    "private", "protected", "public", "return", "static", "super", "switch",
    "this", "throw", "true", "try", "typeof", "var", "void", "while", "with",
    "yield",
    # names the generated handlers already bind
    "req", "res", "prisma", "client", "handler", "error", "session",
})


class OperationKind(str, Enum):
    FIND_MANY = "findMany"
    FIND_UNIQUE = "findUnique"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Ref(BaseModel):
    """A host-language expression evaluated by the generated handler."""

    model_config = ConfigDict(frozen=True)

    code: str


FilterValue = Union[Ref, bool, int, float, str, None]


def check_identifier(name: str, what: str = "identifier") -> str:
    """Return *name* unchanged, or raise ValueError if it is not an identifier."""
    if not _IDENT_RE.match(name):
        raise ValueError(f"Invalid {what} '{name}': must be an identifier")
    return name


def _check_keys(mapping: dict, what: str) -> dict:
    for key in mapping:
        check_identifier(key, what)
    return mapping


def lower_first(name: str) -> str:
    """``GalleryImage`` → ``galleryImage``."""
    return name[:1].lower() + name[1:]


def variable_name(name: str) -> str:
    """A local variable name for *name* that is never a reserved word.

    ``delete`` → ``deleteData``; anything else is returned unchanged.
    """
    if name in _RESERVED_WORDS:
        return f"{name}Data"
    return name


class Include(BaseModel):
    """Relation inclusion, optionally narrowed by its own filter."""

    model_config = ConfigDict(frozen=True)

    where: dict[str, FilterValue] = Field(default_factory=dict)

    @field_validator("where")
    @classmethod
    def _where_keys(cls, value: dict) -> dict:
        return _check_keys(value, "column")


class Operation(BaseModel):
    """An abstract database action rendered per query dialect."""

    model_config = ConfigDict(frozen=True)

    kind: OperationKind
    entity: str
    where: dict[str, FilterValue] = Field(default_factory=dict)
    include: dict[str, Include] = Field(default_factory=dict)
    data: dict[str, FilterValue] = Field(default_factory=dict)
    bind: str | None = None       # result variable; None = derived from entity
    returning: bool = True        # False → result is not bound to a variable

    @field_validator("entity")
    @classmethod
    def _entity_name(cls, value: str) -> str:
        return check_identifier(value, "entity")

    @field_validator("where", "data")
    @classmethod
    def _column_keys(cls, value: dict) -> dict:
        return _check_keys(value, "column")

    @field_validator("include")
    @classmethod
    def _relation_keys(cls, value: dict) -> dict:
        return _check_keys(value, "relation")

    @model_validator(mode="after")
    def _needs_filter(self) -> Operation:
        if self.kind in (
            OperationKind.FIND_UNIQUE,
            OperationKind.UPDATE,
            OperationKind.DELETE,
        ) and not self.where:
            raise ValueError(f"{self.kind.value} on {self.entity} requires a filter")
        return self

    @property
    def binding(self) -> str | None:
        """Name of the variable holding the result, if any."""
        if not self.returning or self.kind is OperationKind.DELETE:
            return None
        if self.bind:
            return self.bind
        name = lower_first(self.entity)
        return variable_name(f"{name}s" if self.kind is OperationKind.FIND_MANY else name)
