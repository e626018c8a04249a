"""
Static data registry for the generator's read-only catalogs.

Loads catalogs from ``endpoint_forge/core/data/catalogs/`` on first access
and caches them for the lifetime of the instance.  Each invocation builds
its own registry; nothing is shared at module level.

Usage::

    from endpoint_forge.core.data import DataRegistry

    registry = DataRegistry()
    catalog = registry.entity_catalog   # EntityCatalog
"""

from __future__ import annotations

import json
import logging
from functools import cached_property
from pathlib import Path

from endpoint_forge.core.models.entity import EntityCatalog, EntitySchema

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent


def _load_json(relative_path: str) -> dict:
    """Load a JSON file relative to the data directory."""
    path = _DATA_DIR / relative_path
    if not path.exists():
        logger.warning("Data file not found: %s", path)
        return {}
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class DataRegistry:
    """Registry for the static catalogs shipped with the package."""

    # ── Entities ─────────────────────────────────────────────────

    @cached_property
    def entities(self) -> dict[str, dict]:
        """Raw entity definitions (fields, relations, secret fields, …)."""
        data = _load_json("catalogs/entities.json")
        logger.debug("Loaded %d entity definitions", len(data))
        return data

    @cached_property
    def entity_catalog(self) -> EntityCatalog:
        """Entity definitions validated into an immutable catalog."""
        return EntityCatalog(
            entities={
                name: EntitySchema.model_validate({"name": name, **entry})
                for name, entry in self.entities.items()
            }
        )
