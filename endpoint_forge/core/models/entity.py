"""
Entity catalog — read-only resource/field metadata.

The generator never validates or mutates the application's schema; it
only reads this catalog to pick table names, timestamp columns, relation
foreign keys, writable fields, and which fields must never be returned.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from endpoint_forge.core.models.operation import check_identifier, lower_first


class Relation(BaseModel):
    """A one-to-many relation from an entity to a child entity."""

    model_config = ConfigDict(frozen=True)

    entity: str
    foreign_key: str

    @field_validator("entity")
    @classmethod
    def _entity_name(cls, value: str) -> str:
        return check_identifier(value, "entity")

    @field_validator("foreign_key")
    @classmethod
    def _foreign_key(cls, value: str) -> str:
        return check_identifier(value, "column")


class EntitySchema(BaseModel):
    """Metadata for one persisted entity.

    Every name here ends up in generated SQL text or TypeScript source,
    so all of them must be plain identifiers.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[str, ...] = ("id", "createdAt", "updatedAt")
    relations: dict[str, Relation] = Field(default_factory=dict)
    secret_fields: tuple[str, ...] = ()
    writable: tuple[str, ...] = ()
    required: tuple[str, ...] = ()
    created_field: str | None = "createdAt"
    updated_field: str | None = "updatedAt"
    aliases: tuple[str, ...] = ()

    @field_validator("name")
    @classmethod
    def _entity_name(cls, value: str) -> str:
        return check_identifier(value, "entity")

    @field_validator("fields", "secret_fields", "writable", "required")
    @classmethod
    def _columns(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for name in value:
            check_identifier(name, "column")
        return value

    @field_validator("created_field", "updated_field")
    @classmethod
    def _stamp(cls, value: str | None) -> str | None:
        return value if value is None else check_identifier(value, "column")

    @field_validator("relations")
    @classmethod
    def _relation_names(cls, value: dict[str, Relation]) -> dict[str, Relation]:
        for name in value:
            check_identifier(name, "relation")
        return value

    @model_validator(mode="after")
    def _required_are_writable(self) -> EntitySchema:
        missing = [f for f in self.required if f not in self.writable]
        if missing:
            raise ValueError(
                f"{self.name}: required field(s) not writable: {', '.join(missing)}"
            )
        return self

    @property
    def model(self) -> str:
        """ORM client accessor name (``prisma.<model>``)."""
        return lower_first(self.name)

    @property
    def public_fields(self) -> tuple[str, ...]:
        """Fields safe to return to a caller."""
        return tuple(f for f in self.fields if f not in self.secret_fields)


def singularize(word: str) -> str:
    """Naive English singular: ``galleries`` → ``gallery``, ``images`` → ``image``."""
    if word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if word.endswith("ss"):
        return word
    if word.endswith("s") and len(word) > 1:
        return word[:-1]
    return word


def camel_case(name: str) -> str:
    """``access-logs`` → ``accessLogs``."""
    parts = [p for p in re.split(r"[-_]+", name) if p]
    if not parts:
        return name
    head, *tail = parts
    return head[:1].lower() + head[1:] + "".join(p[:1].upper() + p[1:] for p in tail)


def pascal_case(name: str) -> str:
    """``gallery-image`` → ``GalleryImage``."""
    camel = camel_case(name)
    return camel[:1].upper() + camel[1:]


class EntityCatalog(BaseModel):
    """All known entities, keyed by entity name."""

    model_config = ConfigDict(frozen=True)

    entities: dict[str, EntitySchema] = Field(default_factory=dict)

    def get(self, name: str) -> EntitySchema:
        """Look up an entity; unknown names get default metadata."""
        found = self.entities.get(name)
        if found is not None:
            return found
        return EntitySchema(name=name)

    def for_resource(self, resource: str) -> EntitySchema:
        """Resolve the entity a resource name refers to.

        Resolution order: explicit aliases, then the singular form
        compared case-insensitively against entity names, then a
        PascalCase entity with default metadata.
        """
        key = resource.lower()
        for schema in self.entities.values():
            if key in (a.lower() for a in schema.aliases):
                return schema

        singular = pascal_case(singularize(resource))
        for name, schema in self.entities.items():
            if name.lower() == singular.lower():
                return schema

        return EntitySchema(name=singular)

    def merged(self, extra: dict[str, EntitySchema]) -> EntityCatalog:
        """Return a new catalog with *extra* entities added or replaced."""
        return EntityCatalog(entities={**self.entities, **extra})
