"""
Fragment IR — typed nodes that make up one generated handler file.

Composers build an ordered list of top-level nodes; the serializer in
``core.services.generators.serializer`` is the only place that turns
them into text.  Payload values and conditions are TypeScript
expressions, already quoted where they are string literals.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union

from endpoint_forge.core.models.operation import FilterValue, Operation, Ref


# ── TypeScript literal helpers ──────────────────────────────────


def quote(text: str) -> str:
    """Single-quoted TypeScript string literal."""
    escaped = text.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{escaped}'"


def ts_literal(value: FilterValue) -> str:
    """Render a filter/data value as a TypeScript expression."""
    if isinstance(value, Ref):
        return value.code
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    return quote(value)


Payload = tuple[tuple[str, str], ...]


# ── Top-level nodes ─────────────────────────────────────────────


@dataclass(frozen=True)
class Header:
    """Doc comment plus request/response interface stubs."""

    area: str
    resource: str
    archetype: str
    auth_label: str
    database_label: str


@dataclass(frozen=True)
class Imports:
    lines: tuple[str, ...]


@dataclass(frozen=True)
class ConnectionSetup:
    code: str


@dataclass(frozen=True)
class RouteConfig:
    """``export const config`` block (body parser limits)."""

    body_size_limit: str


@dataclass(frozen=True)
class Utility:
    name: str
    code: str


# ── Statement nodes ─────────────────────────────────────────────


@dataclass(frozen=True)
class Comment:
    text: str


@dataclass(frozen=True)
class Code:
    text: str


@dataclass(frozen=True)
class IdentityCheck:
    code: str


@dataclass(frozen=True)
class EarlyReturn:
    """``if (condition) { return res.status(...).json(...) }``"""

    condition: str
    status: int
    payload: Payload
    comment: str = ""


@dataclass(frozen=True)
class Respond:
    """Final response of a branch: JSON payload or raw ``send``."""

    status: int
    payload: Payload = ()
    send: str | None = None


@dataclass(frozen=True)
class OrmCall:
    """Declarative ORM call: ``[const x =] await prisma.m.method({...})``."""

    operation: Operation
    binding: str | None
    target: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SqlCall:
    """Parameterized query: SQL text with ``$n`` placeholders plus ordered args.

    ``relations`` are follow-up queries that load included relations onto
    ``binding``; each of those carries ``attach_to`` naming the property.
    """

    operation: Operation
    binding: str | None
    result_var: str
    sql: tuple[str, ...]
    args: tuple[str, ...] = ()
    single_row: bool = False
    attach_to: str | None = None
    relations: tuple[SqlCall, ...] = ()

    @property
    def sql_text(self) -> str:
        return " ".join(self.sql)


QueryCall = Union[OrmCall, SqlCall]


@dataclass(frozen=True)
class Loop:
    header: str
    body: tuple[Any, ...]


@dataclass(frozen=True)
class MethodBranch:
    method: str
    body: tuple[Any, ...]
    comment: str = ""


@dataclass(frozen=True)
class MethodSwitch:
    """``switch (req.method)``; unknown verbs answer 405."""

    branches: tuple[MethodBranch, ...]

    @property
    def methods(self) -> tuple[str, ...]:
        return tuple(b.method for b in self.branches)


Statement = Union[
    Comment, Code, IdentityCheck, EarlyReturn, Respond, OrmCall, SqlCall,
    Loop, MethodSwitch,
]


@dataclass(frozen=True)
class MethodGuard:
    methods: tuple[str, ...]


@dataclass(frozen=True)
class ErrorHandler:
    label: str
    cleanup: tuple[str, ...] = ()


@dataclass(frozen=True)
class Handler:
    """The exported default handler.

    Attributes:
        guard:         Allowed-method gate, emitted before ``try``.
        body:          Statements inside ``try``.
        error:         Catch block.
        preamble:      Statements before the guard.
        setup:         Lines between the guard and ``try``.
        connect:       Lines at the top of the ``try`` body.
        release:       Lines emitted before each response inside ``try``.
        response_type: Optional type argument for ``NextApiResponse``.
    """

    guard: MethodGuard
    body: tuple[Statement, ...]
    error: ErrorHandler
    preamble: tuple[Statement, ...] = ()
    setup: tuple[str, ...] = ()
    connect: tuple[str, ...] = ()
    release: tuple[str, ...] = ()
    response_type: str | None = None


Fragment = Union[Header, Imports, ConnectionSetup, RouteConfig, Handler, Utility]


def walk(nodes: tuple | list) -> list:
    """Flatten statements depth-first, in source order."""
    out: list = []
    for node in nodes:
        out.append(node)
        if isinstance(node, Handler):
            out.extend(walk(node.preamble))
            out.append(node.guard)
            out.extend(walk(node.body))
            out.append(node.error)
        elif isinstance(node, Loop):
            out.extend(walk(node.body))
        elif isinstance(node, MethodSwitch):
            for branch in node.branches:
                out.append(branch)
                out.extend(walk(branch.body))
        elif isinstance(node, SqlCall):
            out.extend(walk(node.relations))
    return out
