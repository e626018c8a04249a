"""
Tests for domain models — requests, operations, entity catalog.
"""

import pytest
from pydantic import ValidationError

from endpoint_forge.core.models import (
    EntityCatalog,
    EntitySchema,
    GenerationOptions,
    GenerationRequest,
    Operation,
    OperationKind,
    PatternKind,
    Ref,
)
from endpoint_forge.core.models.archetype import Archetype
from endpoint_forge.core.models.entity import camel_case, pascal_case, singularize
from endpoint_forge.core.models.operation import variable_name
from endpoint_forge.core.models.request import Area


# ═══════════════════════════════════════════════════════════════════
#  GenerationOptions / GenerationRequest
# ═══════════════════════════════════════════════════════════════════


class TestGenerationOptions:
    def test_defaults_all_false(self):
        opts = GenerationOptions()
        assert not any(opts.model_dump().values())
        assert opts.pattern_override is None

    def test_override_flags(self):
        assert GenerationOptions(force_orm_pattern=True).pattern_override is PatternKind.ORM_BACKED
        assert GenerationOptions(force_simple_pattern=True).pattern_override is PatternKind.DIRECT_CLIENT

    def test_both_overrides_rejected(self):
        with pytest.raises(ValidationError, match="mutually exclusive"):
            GenerationOptions(force_orm_pattern=True, force_simple_pattern=True)

    def test_unknown_flag_rejected(self):
        with pytest.raises(ValidationError):
            GenerationOptions(bogus=True)

    def test_frozen(self):
        opts = GenerationOptions()
        with pytest.raises(ValidationError):
            opts.crud = True


class TestGenerationRequest:
    def test_valid(self):
        req = GenerationRequest(area="admin", resource="galleries")
        assert req.area is Area.ADMIN
        assert req.options == GenerationOptions()

    @pytest.mark.parametrize("resource", ["", "../etc", "a b", "-leading", "x/y", "2024", "_private"])
    def test_bad_resource_names(self, resource):
        with pytest.raises(ValidationError):
            GenerationRequest(area="admin", resource=resource)

    def test_unknown_area(self):
        with pytest.raises(ValidationError):
            GenerationRequest(area="public", resource="x")

    def test_area_values(self):
        assert Area.values() == ["admin", "gallery"]


# ═══════════════════════════════════════════════════════════════════
#  Operation
# ═══════════════════════════════════════════════════════════════════


class TestOperation:
    def test_find_unique_requires_filter(self):
        with pytest.raises(ValidationError, match="requires a filter"):
            Operation(kind=OperationKind.FIND_UNIQUE, entity="Gallery")

    def test_update_and_delete_require_filter(self):
        for kind in (OperationKind.UPDATE, OperationKind.DELETE):
            with pytest.raises(ValidationError):
                Operation(kind=kind, entity="Gallery", data={"title": "x"})

    def test_rejects_non_identifier_columns(self):
        with pytest.raises(ValidationError, match="column"):
            Operation(kind=OperationKind.FIND_MANY, entity="Gallery", where={"slug; DROP": "x"})

    def test_rejects_non_identifier_entity(self):
        with pytest.raises(ValidationError, match="entity"):
            Operation(kind=OperationKind.FIND_MANY, entity="Gallery Image")

    def test_binding_defaults(self):
        many = Operation(kind=OperationKind.FIND_MANY, entity="GalleryImage")
        one = Operation(kind=OperationKind.FIND_UNIQUE, entity="Gallery", where={"id": Ref(code="id")})
        assert many.binding == "galleryImages"
        assert one.binding == "gallery"

    def test_binding_explicit_and_suppressed(self):
        named = Operation(kind=OperationKind.FIND_MANY, entity="Gallery", bind="items")
        silent = Operation(kind=OperationKind.CREATE, entity="Download", returning=False)
        delete = Operation(kind=OperationKind.DELETE, entity="Gallery", where={"id": 1})
        assert named.binding == "items"
        assert silent.binding is None
        assert delete.binding is None

    def test_binding_avoids_reserved_words(self):
        one = Operation(kind=OperationKind.FIND_UNIQUE, entity="Delete", where={"id": Ref(code="id")})
        many = Operation(kind=OperationKind.FIND_MANY, entity="Default")
        assert one.binding == "deleteData"
        assert many.binding == "defaults"

    @pytest.mark.parametrize("name, expected", [
        ("delete", "deleteData"),
        ("default", "defaultData"),
        ("new", "newData"),
        ("client", "clientData"),
        ("galleries", "galleries"),
        ("order", "order"),
    ])
    def test_variable_name(self, name, expected):
        assert variable_name(name) == expected


# ═══════════════════════════════════════════════════════════════════
#  Entity catalog
# ═══════════════════════════════════════════════════════════════════


class TestNaming:
    @pytest.mark.parametrize("word, expected", [
        ("galleries", "gallery"),
        ("images", "image"),
        ("access", "access"),
        ("user", "user"),
    ])
    def test_singularize(self, word, expected):
        assert singularize(word) == expected

    def test_camel_and_pascal(self):
        assert camel_case("access-logs") == "accessLogs"
        assert camel_case("galleries") == "galleries"
        assert pascal_case("gallery-image") == "GalleryImage"


class TestEntityCatalog:
    def test_alias_lookup(self, settings):
        assert settings.catalog.for_resource("galleries").name == "Gallery"
        assert settings.catalog.for_resource("images").name == "GalleryImage"

    def test_singular_lookup(self, settings):
        assert settings.catalog.for_resource("Users").name == "User"

    def test_unknown_resource_falls_back(self, settings):
        schema = settings.catalog.for_resource("invoices")
        assert schema.name == "Invoice"
        assert schema.writable == ()
        assert schema.created_field == "createdAt"

    def test_public_fields_drop_secrets(self, settings):
        gallery = settings.catalog.get("Gallery")
        assert "password" in gallery.fields
        assert "password" not in gallery.public_fields

    def test_merged_replaces(self):
        base = EntityCatalog(entities={"A": EntitySchema(name="A")})
        merged = base.merged({"A": EntitySchema(name="A", writable=("x",)), "B": EntitySchema(name="B")})
        assert merged.get("A").writable == ("x",)
        assert set(merged.entities) == {"A", "B"}
        assert base.get("A").writable == ()


class TestEntitySchema:
    @pytest.mark.parametrize("overrides", [
        {"fields": ("id", "title; DROP TABLE")},
        {"writable": ("bad-name",)},
        {"secret_fields": ("pass word",)},
        {"created_field": "created at"},
        {"updated_field": "x\"y"},
        {"relations": {"images": {"entity": "GalleryImage", "foreign_key": "gallery id"}}},
        {"relations": {"images": {"entity": "Gallery-Image", "foreign_key": "galleryId"}}},
        {"relations": {"bad name": {"entity": "GalleryImage", "foreign_key": "galleryId"}}},
    ])
    def test_rejects_non_identifiers(self, overrides):
        with pytest.raises(ValidationError):
            EntitySchema(name="Gallery", **overrides)

    def test_required_must_be_writable(self):
        with pytest.raises(ValidationError, match="not writable: slug"):
            EntitySchema(name="Gallery", writable=("title",), required=("title", "slug"))

    def test_stamps_may_be_disabled(self):
        schema = EntitySchema(name="Download", created_field=None, updated_field=None)
        assert schema.updated_field is None

    def test_aliases_are_resource_names(self):
        assert EntitySchema(name="GalleryAccess", aliases=("access-logs",)).aliases == ("access-logs",)


# ═══════════════════════════════════════════════════════════════════
#  Archetype
# ═══════════════════════════════════════════════════════════════════


class TestArchetype:
    def test_download_forces_nested_dynamic(self):
        assert Archetype.DOWNLOAD.forces_nested
        assert Archetype.DOWNLOAD.forces_dynamic
        assert Archetype.DOWNLOAD.param_name == "imageId"

    def test_other_defaults(self):
        for arch in (Archetype.CRUD, Archetype.READ, Archetype.UPLOAD, Archetype.CREDENTIAL):
            assert not arch.forces_nested
            assert arch.param_name == "id"
