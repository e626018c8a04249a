"""
Path resolver — where a generated handler goes.

    <api_dir>/<area>[/[slug]]/<resource>[-<pattern>][/[<param>]]<extension>

- ``nested`` inserts the literal ``[slug]`` segment before the resource.
- ``dynamic`` adds a ``[<param>]`` file below the resource segment
  (``id`` by default, ``imageId`` for tracked downloads).
- The automatically generated counterpart (the area's non-default
  pattern, chosen without an override flag) suffixes the resource
  segment with the pattern name, e.g. ``galleries-simple``.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from endpoint_forge.core.models.archetype import Archetype
from endpoint_forge.core.models.pattern import Pattern
from endpoint_forge.core.models.request import GenerationRequest
from endpoint_forge.core.models.settings import ScaffoldSettings

NESTED_SEGMENT = "[slug]"


def is_counterpart(
    request: GenerationRequest,
    pattern: Pattern,
    settings: ScaffoldSettings,
) -> bool:
    """True when *pattern* is the area's alternate and no override was given."""
    default = settings.area_patterns[request.area]
    return pattern.kind is not default and request.options.pattern_override is None


def resolve_path(
    request: GenerationRequest,
    pattern: Pattern,
    archetype: Archetype,
    settings: ScaffoldSettings,
) -> str:
    """Relative POSIX path of the handler file for this request/pattern."""
    opts = request.options
    segments = [request.area.value]

    if opts.nested or archetype.forces_nested:
        segments.append(NESTED_SEGMENT)

    resource = request.resource
    if is_counterpart(request, pattern, settings):
        resource = f"{resource}-{pattern.name}"
    segments.append(resource)

    if opts.dynamic or archetype.forces_dynamic:
        segments.append(f"[{archetype.param_name}]")

    segments[-1] += settings.extension
    return str(PurePosixPath(settings.api_dir, *segments))
