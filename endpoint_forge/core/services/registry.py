"""
Pattern registry — area defaults and the two pattern definitions.

Resolution precedence:
    explicit override flag  >  area default

A request always binds exactly one pattern.  Fragments from the two
patterns are never merged.
"""

from __future__ import annotations

import logging

from endpoint_forge.core.models.pattern import Pattern, PatternKind, QueryDialect
from endpoint_forge.core.models.request import Area, GenerationOptions
from endpoint_forge.core.models.settings import ScaffoldSettings

logger = logging.getLogger(__name__)


# ── Pattern definitions ─────────────────────────────────────────


_ORM_IDENTITY_CHECK = """\
const session = await getSession({ req })

if (!session || (session.user as any)?.type !== 'admin') {
  return res.status(401).json({ message: 'Unauthorized' })
}"""

_DIRECT_IDENTITY_CHECK = """\
// Access should be verified through session storage or password verification
// This endpoint assumes proper authentication has been established"""

_DIRECT_CONNECTION = """\
const connectionConfig = {
  connectionString: process.env.DATABASE_URL
}"""


ORM_BACKED = Pattern(
    kind=PatternKind.ORM_BACKED,
    name="nextauth",
    auth_label="nextauth",
    database_label="Prisma",
    identity_check=_ORM_IDENTITY_CHECK,
    required_imports=(
        "import { getSession } from 'next-auth/react'",
        "import { PrismaClient } from '@prisma/client'",
    ),
    connection_setup="const prisma = new PrismaClient()",
    query_dialect=QueryDialect.ORM,
)

DIRECT_CLIENT = Pattern(
    kind=PatternKind.DIRECT_CLIENT,
    name="simple",
    auth_label="simple",
    database_label="Direct PostgreSQL",
    identity_check=_DIRECT_IDENTITY_CHECK,
    required_imports=("import { Client } from 'pg'",),
    connection_setup=_DIRECT_CONNECTION,
    handler_setup=("const client = new Client(connectionConfig)",),
    connect=("await client.connect()",),
    release=("await client.end()",),
    cleanup=("await client.end().catch(() => undefined)",),
    query_dialect=QueryDialect.SQL,
)


def pattern_for(kind: PatternKind) -> Pattern:
    """Exhaustive mapping from variant to definition."""
    if kind is PatternKind.ORM_BACKED:
        return ORM_BACKED
    if kind is PatternKind.DIRECT_CLIENT:
        return DIRECT_CLIENT
    raise ValueError(f"Unhandled pattern kind: {kind!r}")


# ── Registry ────────────────────────────────────────────────────


class PatternRegistry:
    """Read-only area → pattern table built from settings."""

    def __init__(self, settings: ScaffoldSettings) -> None:
        self._defaults = dict(settings.area_patterns)
        missing = [a.value for a in Area if a not in self._defaults]
        if missing:
            raise ValueError(f"No default pattern for area(s): {', '.join(missing)}")

    def default_for(self, area: Area) -> PatternKind:
        return self._defaults[area]

    def resolve(self, area: Area, options: GenerationOptions) -> Pattern:
        """Bind the pattern for a request: override flag first, else area default."""
        override = options.pattern_override
        kind = override if override is not None else self.default_for(area)
        pattern = pattern_for(kind)
        logger.debug(
            "Resolved pattern %s for area %s (override=%s)",
            pattern.name, area.value, override.value if override else None,
        )
        return pattern

    def alternate_for(self, area: Area) -> Pattern:
        """The pattern that is *not* the area default."""
        default = self.default_for(area)
        other = (
            PatternKind.DIRECT_CLIENT
            if default is PatternKind.ORM_BACKED
            else PatternKind.ORM_BACKED
        )
        return pattern_for(other)

    def is_default(self, area: Area, pattern: Pattern) -> bool:
        return pattern.kind is self.default_for(area)

    def table(self) -> list[tuple[Area, Pattern]]:
        """Area/default-pattern pairs, in area declaration order."""
        return [(area, pattern_for(self._defaults[area])) for area in Area]
