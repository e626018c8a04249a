"""
Pattern model — the bound pairing of identity check and query dialect.

There are exactly two patterns.  ``PatternKind`` is the closed set of
variants; everything else about a pattern is carried by the frozen
``Pattern`` value built by the registry.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class PatternKind(str, Enum):
    """Closed set of architecture patterns."""

    ORM_BACKED = "orm"          # session identity + Prisma
    DIRECT_CLIENT = "direct"    # credential check + pg client


class QueryDialect(str, Enum):
    """How an Operation is rendered."""

    ORM = "orm"    # declarative prisma.<model>.<method>({ where, include })
    SQL = "sql"    # parameterized SQL text + ordered argument list


class Pattern(BaseModel):
    """Everything a fragment builder needs to know about one pattern.

    Attributes:
        kind:             Which variant this is.
        name:             Short name, also used as the counterpart filename suffix.
        auth_label:       Human label for the authentication strategy.
        database_label:   Human label for the data access layer.
        identity_check:   Identity-check block emitted at the top of the try body.
        required_imports: Import lines, in order.
        connection_setup: Module-level connection bootstrap.
        handler_setup:    Lines emitted inside the handler, before ``try``.
        connect:          Lines emitted first inside ``try``.
        release:          Lines emitted before every response inside ``try``.
        cleanup:          Lines emitted in the catch block.
        query_dialect:    Query rendering strategy.
    """

    model_config = ConfigDict(frozen=True)

    kind: PatternKind
    name: str
    auth_label: str
    database_label: str
    identity_check: str
    required_imports: tuple[str, ...]
    connection_setup: str
    handler_setup: tuple[str, ...] = ()
    connect: tuple[str, ...] = ()
    release: tuple[str, ...] = ()
    cleanup: tuple[str, ...] = ()
    query_dialect: QueryDialect
