"""
CLI command listing areas, their default patterns, and archetype rules.
"""

from __future__ import annotations

import json

import click

from endpoint_forge.core.models.archetype import Archetype

# Selection order, first match wins.
_ARCHETYPE_RULES = (
    (Archetype.CRUD, "--crud"),
    (Archetype.CREDENTIAL, "--auth"),
    (Archetype.DOWNLOAD, "resource 'download'"),
    (Archetype.UPLOAD, "resource 'upload' or --multipart"),
    (Archetype.READ, "otherwise"),
)


@click.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def patterns(ctx: click.Context, as_json: bool) -> None:
    """Show area defaults and how the handler archetype is chosen."""
    from endpoint_forge.core.services.registry import PatternRegistry
    from endpoint_forge.core.use_cases.generate import DUAL_GENERATION_AREAS
    from endpoint_forge.ui.cli.generate import _resolve_settings

    settings, _ = _resolve_settings(ctx)
    registry = PatternRegistry(settings)

    if as_json:
        click.echo(json.dumps({
            "areas": [
                {
                    "area": area.value,
                    "pattern": pattern.name,
                    "authentication": pattern.auth_label,
                    "database": pattern.database_label,
                    "dual": area in DUAL_GENERATION_AREAS,
                }
                for area, pattern in registry.table()
            ],
            "archetypes": [
                {"archetype": arch.value, "when": rule} for arch, rule in _ARCHETYPE_RULES
            ],
        }, indent=2))
        return

    click.secho("🧭 Areas", fg="cyan", bold=True)
    for area, pattern in registry.table():
        dual = "  (+ counterpart)" if area in DUAL_GENERATION_AREAS else ""
        click.echo(f"   {area.value:<8} → {pattern.name} ({pattern.database_label}){dual}")

    click.echo()
    click.secho("🧩 Archetypes (first match wins)", fg="cyan", bold=True)
    for index, (arch, rule) in enumerate(_ARCHETYPE_RULES, 1):
        click.echo(f"   {index}. {arch.label:<24} {rule}")

    click.echo()
    click.echo("   Override with --forceSimplePattern / --forceORMPattern")
