"""
CLI command for handler generation.

Thin wrapper over ``endpoint_forge.core.use_cases.generate``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from endpoint_forge.core.models.settings import ScaffoldSettings


def _resolve_settings(ctx: click.Context) -> tuple[ScaffoldSettings, Path]:
    """Load settings and project root from --config, else auto-detect."""
    from endpoint_forge.core.config.loader import (
        ConfigError,
        find_config_file,
        load_settings,
        project_root,
    )

    config_path: Path | None = ctx.obj.get("config_path")
    if config_path is None:
        config_path = find_config_file()

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    return settings, project_root(config_path)


def _echo_outcome(outcome) -> None:
    if outcome.status == "written":
        if outcome.secondary:
            click.secho(f"📄 Also generated {outcome.pattern} version: {outcome.path}", fg="green")
        else:
            click.secho(f"✅ Generated: {outcome.path}", fg="green")
    elif outcome.status == "conflict":
        click.secho(f"⚠️  File already exists: {outcome.path}", fg="yellow")
        click.echo("   Use --force to overwrite")
    elif outcome.status == "failed":
        click.secho(f"❌ {outcome.error}", fg="red", err=True)


def _echo_preview(outcome) -> None:
    label = f"{outcome.path} ({outcome.pattern})"
    click.secho(f"── {label} ──", fg="cyan", bold=True)
    click.echo(outcome.content)


@click.command()
@click.argument("area", required=False)
@click.argument("resource", required=False)
@click.option("--crud", is_flag=True, help="Full CRUD handler (GET/POST/PUT/DELETE).")
@click.option("--auth", is_flag=True, help="Credential-verification handler.")
@click.option(
    "--forceSimplePattern", "--simple", "force_simple_pattern",
    is_flag=True, help="Use the direct PostgreSQL client pattern.",
)
@click.option(
    "--forceORMPattern", "--nextauth", "force_orm_pattern",
    is_flag=True, help="Use the Prisma + session pattern.",
)
@click.option("--multipart", is_flag=True, help="Multi-file upload handler.")
@click.option("--nested", is_flag=True, help="Place under a [slug] segment.")
@click.option("--dynamic", is_flag=True, help="Add a dynamic [id] segment.")
@click.option("--force", is_flag=True, help="Overwrite existing files.")
@click.option("--dry-run", "dry_run", is_flag=True, help="Print the generated files without writing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def generate(
    ctx: click.Context,
    area: str | None,
    resource: str | None,
    as_json: bool,
    **flags: bool,
) -> None:
    """Generate an API route handler for AREA and RESOURCE.

    \b
    Examples:
      endpoint-forge generate admin galleries --crud
      endpoint-forge generate gallery verify-access --auth
      endpoint-forge generate gallery download --nested --dynamic
      endpoint-forge generate admin upload --multipart
    """
    from endpoint_forge.core.use_cases.generate import GenerationState, run_generate

    if not area or not resource:
        click.echo(ctx.get_help())
        sys.exit(2)

    settings, root = _resolve_settings(ctx)
    result = run_generate(area, resource, flags, settings=settings, project_root=root)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.state in (GenerationState.INVALID_AREA, GenerationState.GENERATION_FAILED):
        click.secho(f"❌ {result.error}", fg="red", err=True)
        sys.exit(result.exit_code)
    if result.state is GenerationState.USAGE_ERROR:
        click.secho(f"❌ {result.error}", fg="red", err=True)
        click.echo(ctx.get_help())
        sys.exit(result.exit_code)

    if flags.get("dry_run"):
        for outcome in result.files:
            _echo_preview(outcome)
        click.secho("🔍 Dry run: no files written", fg="cyan")
        return

    for outcome in result.files:
        _echo_outcome(outcome)

    primary = result.files[0]
    if primary.status != "written":
        sys.exit(result.exit_code)

    pattern = result.pattern
    assert pattern is not None and result.request is not None and result.archetype is not None
    quiet = ctx.obj.get("quiet", False)

    click.echo()
    click.secho("🎉 API endpoint generated successfully!", fg="green", bold=True)
    click.echo()
    click.echo(f"   Generated file: {primary.path}")
    click.echo(f"   Area:           {result.request.area.value}")
    click.echo(f"   Resource:       {result.request.resource}")
    click.echo(f"   Archetype:      {result.archetype.label}")
    click.echo(f"   Authentication: {pattern.auth_label}")
    click.echo(f"   Database:       {pattern.database_label}")

    if not quiet:
        click.echo()
        click.secho("📋 Next steps:", bold=True)
        click.echo("   1. Review the generated code")
        click.echo("   2. Add your specific business logic")
        click.echo("   3. Test the endpoint")
        click.echo("   4. Update the frontend to use the new endpoint")

    sys.exit(result.exit_code)
