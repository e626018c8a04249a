"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from endpoint_forge.core.config.loader import load_settings
from endpoint_forge.core.models.archetype import Archetype
from endpoint_forge.core.models.request import Area, GenerationOptions, GenerationRequest
from endpoint_forge.core.models.settings import ScaffoldSettings
from endpoint_forge.core.services.generators.fragments import FragmentBuilder
from endpoint_forge.core.services.registry import DIRECT_CLIENT, ORM_BACKED


@pytest.fixture
def settings() -> ScaffoldSettings:
    """Default settings with the shipped entity catalog."""
    return load_settings()


@pytest.fixture
def make_request():
    """Factory: make_request("admin", "galleries", crud=True)."""

    def _make(area: str, resource: str, **flags: bool) -> GenerationRequest:
        return GenerationRequest(
            area=Area(area), resource=resource, options=GenerationOptions(**flags),
        )

    return _make


@pytest.fixture
def make_builder(settings, make_request):
    """Factory: make_builder("orm", Archetype.CRUD, "admin", "galleries")."""

    def _make(
        pattern: str,
        archetype: Archetype,
        area: str = "admin",
        resource: str = "galleries",
        **flags: bool,
    ) -> FragmentBuilder:
        bound = ORM_BACKED if pattern == "orm" else DIRECT_CLIENT
        return FragmentBuilder(bound, make_request(area, resource, **flags), archetype, settings.catalog)

    return _make


@pytest.fixture
def scaffold_project(tmp_path: Path) -> Path:
    """A temporary project root with an empty scaffold.yml."""
    (tmp_path / "scaffold.yml").write_text("api_dir: src/pages/api\n")
    return tmp_path
