"""
endpoint-forge — CLI entrypoint.

Usage:
    python -m endpoint_forge.main --help
    python -m endpoint_forge.main generate admin galleries --crud
    python -m endpoint_forge.main patterns
"""

from __future__ import annotations

from pathlib import Path

import click

from endpoint_forge.core.observability.logging_config import resolve_level, setup_logging

from endpoint_forge import __version__


@click.group()
@click.version_option(version=__version__, prog_name="endpoint-forge")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to scaffold.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """endpoint-forge — scaffold Next.js API route handlers."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(level=resolve_level(debug=debug, verbose=verbose, quiet=quiet))


# ── Register sub-command groups ─────────────────────────────────

from endpoint_forge.ui.cli.generate import generate  # noqa: E402
from endpoint_forge.ui.cli.patterns import patterns  # noqa: E402

cli.add_command(generate)
cli.add_command(patterns)


if __name__ == "__main__":
    cli()
