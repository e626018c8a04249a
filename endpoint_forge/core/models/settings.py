"""
Settings model — the immutable configuration of one invocation.

Built once by ``core.config.loader.load_settings`` and passed explicitly
to the orchestrator.  Nothing in the generator reads configuration from
module-level state.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from endpoint_forge.core.models.entity import EntityCatalog, EntitySchema
from endpoint_forge.core.models.pattern import PatternKind
from endpoint_forge.core.models.request import Area


def _default_area_patterns() -> dict[Area, PatternKind]:
    return {
        Area.ADMIN: PatternKind.ORM_BACKED,
        Area.GALLERY: PatternKind.DIRECT_CLIENT,
    }


class ScaffoldFile(BaseModel):
    """Schema of the optional ``scaffold.yml`` file."""

    model_config = ConfigDict(extra="forbid")

    api_dir: str = "src/pages/api"
    extension: str = ".ts"
    storage_dir: str = "public/galleries"
    body_size_limit: str = "50mb"
    entities: dict[str, dict] = Field(default_factory=dict)


class ScaffoldSettings(BaseModel):
    """Resolved, frozen settings.

    Attributes:
        api_dir:         Request-handler root, relative to the project root.
        extension:       Extension of generated files.
        storage_dir:     Public storage directory used by download/upload handlers.
        body_size_limit: Request body limit for upload handlers.
        area_patterns:   Area → default pattern table.
        catalog:         Entity metadata.
    """

    model_config = ConfigDict(frozen=True)

    api_dir: str = "src/pages/api"
    extension: str = ".ts"
    storage_dir: str = "public/galleries"
    body_size_limit: str = "50mb"
    area_patterns: dict[Area, PatternKind] = Field(default_factory=_default_area_patterns)
    catalog: EntityCatalog = Field(default_factory=EntityCatalog)

    @classmethod
    def from_file(cls, data: ScaffoldFile, base: EntityCatalog) -> ScaffoldSettings:
        """Combine a parsed ``scaffold.yml`` with the built-in catalog."""
        extra = {
            name: EntitySchema.model_validate({"name": name, **entry})
            for name, entry in data.entities.items()
        }
        return cls(
            api_dir=data.api_dir,
            extension=data.extension,
            storage_dir=data.storage_dir,
            body_size_limit=data.body_size_limit,
            catalog=base.merged(extra),
        )
