"""
Generate use case — request in, handler file(s) on disk.

    PARSED → VALIDATED → PATTERN_RESOLVED → PRIMARY_EMITTED
           → [SECONDARY_EMITTED] → REPORTED

Terminal failures: INVALID_AREA, USAGE_ERROR and GENERATION_FAILED abort
before any file is touched.  A conflict or write failure is scoped to one
file; the sibling file is still attempted.

Dual generation: for the admin area only, and only when neither
pattern-override flag is given, the counterpart under the other pattern
is produced as well.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import ValidationError

from endpoint_forge.core.errors import (
    EmissionError,
    FileConflictError,
    InvalidAreaError,
    UsageError,
)
from endpoint_forge.core.models.archetype import Archetype
from endpoint_forge.core.models.pattern import Pattern
from endpoint_forge.core.models.request import Area, GenerationOptions, GenerationRequest
from endpoint_forge.core.models.settings import ScaffoldSettings
from endpoint_forge.core.models.template import GeneratedFile
from endpoint_forge.core.services.emission import write_generated_file
from endpoint_forge.core.services.generators.archetypes import compose, select_archetype
from endpoint_forge.core.services.generators.fragments import FragmentBuilder
from endpoint_forge.core.services.generators.serializer import render_fragments
from endpoint_forge.core.services.paths import resolve_path
from endpoint_forge.core.services.registry import PatternRegistry

logger = logging.getLogger(__name__)

DUAL_GENERATION_AREAS = (Area.ADMIN,)


class GenerationState(str, Enum):
    PARSED = "parsed"
    VALIDATED = "validated"
    PATTERN_RESOLVED = "pattern_resolved"
    PRIMARY_EMITTED = "primary_emitted"
    SECONDARY_EMITTED = "secondary_emitted"
    REPORTED = "reported"
    INVALID_AREA = "invalid_area"
    USAGE_ERROR = "usage_error"
    GENERATION_FAILED = "generation_failed"


@dataclass
class EmitOutcome:
    """What happened to one generated file."""

    path: str
    pattern: str
    secondary: bool = False
    status: Literal["written", "conflict", "failed", "preview"] = "written"
    error: str | None = None
    content: str = ""

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "pattern": self.pattern,
            "secondary": self.secondary,
            "status": self.status,
            "error": self.error,
        }


@dataclass
class GenerateResult:
    """Result of one generate invocation."""

    request: GenerationRequest | None = None
    archetype: Archetype | None = None
    pattern: Pattern | None = None
    files: list[EmitOutcome] = field(default_factory=list)
    states: list[GenerationState] = field(default_factory=list)
    error: str | None = None

    @property
    def state(self) -> GenerationState | None:
        return self.states[-1] if self.states else None

    @property
    def written(self) -> list[EmitOutcome]:
        return [f for f in self.files if f.status == "written"]

    @property
    def conflicts(self) -> list[EmitOutcome]:
        return [f for f in self.files if f.status == "conflict"]

    @property
    def failures(self) -> list[EmitOutcome]:
        return [f for f in self.files if f.status == "failed"]

    @property
    def exit_code(self) -> int:
        if self.state is GenerationState.USAGE_ERROR:
            return 2
        if self.state in (GenerationState.INVALID_AREA, GenerationState.GENERATION_FAILED):
            return 1
        if self.failures:
            return 1
        return 0

    def to_dict(self) -> dict:
        return {
            "state": self.state.value if self.state else None,
            "error": self.error,
            "area": self.request.area.value if self.request else None,
            "resource": self.request.resource if self.request else None,
            "archetype": self.archetype.value if self.archetype else None,
            "pattern": self.pattern.name if self.pattern else None,
            "files": [f.to_dict() for f in self.files],
        }


# ── Request construction ────────────────────────────────────────


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    return str(first.get("msg", error)).removeprefix("Value error, ")


def build_request(
    area: str | None,
    resource: str | None,
    flags: Mapping[str, bool] | None = None,
) -> GenerationRequest:
    """Parse CLI tokens into a frozen GenerationRequest.

    Raises:
        UsageError: Missing area/resource, bad resource name, unknown or
            conflicting flags.
        InvalidAreaError: Area is not one of the registered areas.
    """
    if not area or not resource:
        raise UsageError("Both <area> and <resource> are required")

    try:
        area_value = Area(area)
    except ValueError:
        raise InvalidAreaError(area, Area.values()) from None

    try:
        options = GenerationOptions(**dict(flags or {}))
        return GenerationRequest(area=area_value, resource=resource, options=options)
    except ValidationError as e:
        raise UsageError(_validation_message(e)) from e


# ── Planning ────────────────────────────────────────────────────


def wants_counterpart(request: GenerationRequest) -> bool:
    """Dual generation applies to the admin area without an override flag."""
    return (
        request.area in DUAL_GENERATION_AREAS
        and request.options.pattern_override is None
    )


def render_file(
    request: GenerationRequest,
    pattern: Pattern,
    archetype: Archetype,
    settings: ScaffoldSettings,
    secondary: bool = False,
) -> GeneratedFile:
    """Compose, serialize and place one handler file."""
    builder = FragmentBuilder(pattern, request, archetype, settings.catalog)
    content = render_fragments(compose(builder, settings))
    return GeneratedFile(
        path=resolve_path(request, pattern, archetype, settings),
        content=content,
        overwrite=request.options.force,
        reason=(
            f"{archetype.label} handler for "
            f"{request.area.value}/{request.resource} ({pattern.name})"
        ),
        pattern=pattern.name,
        secondary=secondary,
    )


def plan_files(
    request: GenerationRequest,
    settings: ScaffoldSettings,
) -> tuple[Archetype, Pattern, list[GeneratedFile]]:
    """Bind the pattern and render the primary (and counterpart) file."""
    registry = PatternRegistry(settings)
    archetype = select_archetype(request)
    pattern = registry.resolve(request.area, request.options)

    files = [render_file(request, pattern, archetype, settings)]
    if wants_counterpart(request):
        alternate = registry.alternate_for(request.area)
        files.append(render_file(request, alternate, archetype, settings, secondary=True))

    return archetype, pattern, files


# ── Emission ────────────────────────────────────────────────────


def _emit(project_root: Path, file: GeneratedFile, dry_run: bool) -> EmitOutcome:
    outcome = EmitOutcome(
        path=file.path, pattern=file.pattern, secondary=file.secondary, content=file.content,
    )
    if dry_run:
        outcome.status = "preview"
        return outcome

    try:
        write_generated_file(project_root, file)
    except FileConflictError as e:
        outcome.status = "conflict"
        outcome.error = str(e)
        logger.warning("Skipped %s: already exists", file.path)
    except EmissionError as e:
        outcome.status = "failed"
        outcome.error = str(e)
        logger.error("Failed to write %s: %s", file.path, e.reason)
    return outcome


def run_generate(
    area: str | None,
    resource: str | None,
    flags: Mapping[str, bool] | None = None,
    *,
    settings: ScaffoldSettings,
    project_root: Path,
) -> GenerateResult:
    """Run one generate invocation end to end.

    Args:
        area: Area token from the command line.
        resource: Resource token from the command line.
        flags: Option flags by field name (``crud``, ``force_orm_pattern``, …).
        settings: Frozen settings for this invocation.
        project_root: Directory the API root is resolved against.

    Returns:
        GenerateResult with the per-file outcomes and the state trail.
    """
    result = GenerateResult()

    if not area or not resource:
        result.states.append(GenerationState.USAGE_ERROR)
        result.error = "Both <area> and <resource> are required"
        return result
    result.states.append(GenerationState.PARSED)

    try:
        request = build_request(area, resource, flags)
    except InvalidAreaError as e:
        result.states.append(GenerationState.INVALID_AREA)
        result.error = str(e)
        return result
    except UsageError as e:
        result.states.append(GenerationState.USAGE_ERROR)
        result.error = str(e)
        return result
    result.request = request
    result.states.append(GenerationState.VALIDATED)

    try:
        archetype, pattern, files = plan_files(request, settings)
    except ValueError as e:
        result.states.append(GenerationState.GENERATION_FAILED)
        result.error = f"Cannot generate {request.area.value}/{request.resource}: {e}"
        logger.error("%s", result.error)
        return result
    result.archetype = archetype
    result.pattern = pattern
    result.states.append(GenerationState.PATTERN_RESOLVED)
    logger.info(
        "Generating %s handler %s/%s with %s (%d file(s))",
        archetype.value, request.area.value, request.resource, pattern.name, len(files),
    )

    dry_run = request.options.dry_run
    primary, *secondary = files
    result.files.append(_emit(project_root, primary, dry_run))
    result.states.append(GenerationState.PRIMARY_EMITTED)

    for file in secondary:
        result.files.append(_emit(project_root, file, dry_run))
        result.states.append(GenerationState.SECONDARY_EMITTED)

    result.states.append(GenerationState.REPORTED)
    return result
