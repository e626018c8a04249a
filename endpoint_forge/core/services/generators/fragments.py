"""
Fragment builder — composable pieces of one handler file.

Every method is a pure function of the bound pattern, the request and
the archetype.  Composers in ``archetypes.py`` decide the order.
"""

from __future__ import annotations

from endpoint_forge.core.models.archetype import Archetype
from endpoint_forge.core.models.entity import EntityCatalog
from endpoint_forge.core.models.fragment import (
    ConnectionSetup,
    ErrorHandler,
    Header,
    IdentityCheck,
    Imports,
    MethodGuard,
    QueryCall,
    Utility,
)
from endpoint_forge.core.models.operation import Operation
from endpoint_forge.core.models.pattern import Pattern, QueryDialect
from endpoint_forge.core.models.request import GenerationRequest
from endpoint_forge.core.services.generators.dialects import render_orm, render_sql

_BASE_IMPORTS = ("import { NextApiRequest, NextApiResponse } from 'next'",)
_HASH_IMPORTS = ("import bcrypt from 'bcryptjs'",)
_FS_IMPORTS = ("import fs from 'fs'", "import path from 'path'")

_GENERATE_ID = """\
function generateId() {
  return `${Date.now()}-${Math.random().toString(36).slice(2, 11)}`
}"""

_GET_CLIENT_IP = """\
function getClientIP(req: NextApiRequest): string {
  const forwarded = req.headers['x-forwarded-for']
  const ip = forwarded
    ? (Array.isArray(forwarded) ? forwarded[0] : forwarded.split(',')[0])
    : req.socket.remoteAddress || 'unknown'
  return ip
}"""


class FragmentBuilder:
    """Builds fragment nodes for one (pattern, request, archetype) triple."""

    def __init__(
        self,
        pattern: Pattern,
        request: GenerationRequest,
        archetype: Archetype,
        catalog: EntityCatalog,
    ) -> None:
        self.pattern = pattern
        self.request = request
        self.archetype = archetype
        self.catalog = catalog

    @property
    def closes_connection(self) -> bool:
        return bool(self.pattern.release)

    def header(self) -> Header:
        return Header(
            area=self.request.area.value,
            resource=self.request.resource,
            archetype=self.archetype.label,
            auth_label=self.pattern.auth_label,
            database_label=self.pattern.database_label,
        )

    def imports(self) -> Imports:
        """Base imports + pattern imports + archetype-triggered imports, deduplicated."""
        lines = [*_BASE_IMPORTS, *self.pattern.required_imports]
        if self.archetype.verifies_credentials:
            lines.extend(_HASH_IMPORTS)
        if self.archetype.uses_filesystem:
            lines.extend(_FS_IMPORTS)
        return Imports(lines=tuple(dict.fromkeys(lines)))

    def connection_setup(self) -> ConnectionSetup:
        return ConnectionSetup(code=self.pattern.connection_setup)

    def identity_check(self, custom: str | None = None) -> IdentityCheck:
        return IdentityCheck(code=custom if custom is not None else self.pattern.identity_check)

    def method_guard(self, methods: str | tuple[str, ...] | list[str] = "GET") -> MethodGuard:
        if isinstance(methods, str):
            methods = (methods,)
        if not methods:
            raise ValueError("A method guard needs at least one method")
        return MethodGuard(methods=tuple(m.upper() for m in methods))

    def error_handler(self) -> ErrorHandler:
        return ErrorHandler(
            label=f"{self.request.area.value} {self.request.resource}",
            cleanup=self.pattern.cleanup,
        )

    def query_operation(self, operation: Operation) -> QueryCall:
        dialect = self.pattern.query_dialect
        if dialect is QueryDialect.ORM:
            return render_orm(operation, self.catalog)
        if dialect is QueryDialect.SQL:
            return render_sql(operation, self.catalog)
        raise ValueError(f"Unhandled query dialect: {dialect!r}")

    def utilities(self) -> tuple[Utility, ...]:
        found: list[Utility] = []
        if self.pattern.query_dialect is QueryDialect.SQL:
            found.append(Utility(name="generateId", code=_GENERATE_ID))
        if self.archetype.tracks_client:
            found.append(Utility(name="getClientIP", code=_GET_CLIENT_IP))
        return tuple(found)
