"""
Tests for FragmentBuilder — imports, guards, identity checks, utilities.
"""

import pytest

from endpoint_forge.core.models.archetype import Archetype
from endpoint_forge.core.models.fragment import OrmCall, SqlCall
from endpoint_forge.core.models.operation import Operation, OperationKind


class TestImports:
    def test_orm_imports(self, make_builder):
        lines = make_builder("orm", Archetype.READ).imports().lines
        assert lines == (
            "import { NextApiRequest, NextApiResponse } from 'next'",
            "import { getSession } from 'next-auth/react'",
            "import { PrismaClient } from '@prisma/client'",
        )

    def test_direct_imports(self, make_builder):
        lines = make_builder("direct", Archetype.READ).imports().lines
        assert "import { Client } from 'pg'" in lines
        assert not any("prisma" in line for line in lines)

    def test_credential_adds_bcrypt(self, make_builder):
        lines = make_builder("direct", Archetype.CREDENTIAL, "gallery", "verify-access").imports().lines
        assert "import bcrypt from 'bcryptjs'" in lines

    def test_filesystem_archetypes_add_fs(self, make_builder):
        for arch in (Archetype.DOWNLOAD, Archetype.UPLOAD):
            lines = make_builder("orm", arch).imports().lines
            assert "import fs from 'fs'" in lines
            assert "import path from 'path'" in lines

    def test_no_duplicates(self, make_builder):
        lines = make_builder("orm", Archetype.UPLOAD).imports().lines
        assert len(lines) == len(set(lines))


class TestGuardsAndChecks:
    def test_method_guard_normalizes(self, make_builder):
        b = make_builder("orm", Archetype.READ)
        assert b.method_guard("post").methods == ("POST",)
        assert b.method_guard(["get", "put"]).methods == ("GET", "PUT")

    def test_method_guard_needs_a_method(self, make_builder):
        with pytest.raises(ValueError):
            make_builder("orm", Archetype.READ).method_guard(())

    def test_identity_check_per_pattern(self, make_builder):
        assert "getSession" in make_builder("orm", Archetype.READ).identity_check().code
        assert make_builder("direct", Archetype.READ).identity_check().code.startswith("//")

    def test_identity_check_custom(self, make_builder):
        assert make_builder("orm", Archetype.READ).identity_check("// custom").code == "// custom"

    def test_error_handler(self, make_builder):
        orm = make_builder("orm", Archetype.READ).error_handler()
        direct = make_builder("direct", Archetype.READ).error_handler()
        assert orm.label == "admin galleries"
        assert orm.cleanup == ()
        assert direct.cleanup == ("await client.end().catch(() => undefined)",)


class TestQueryOperation:
    def test_dialect_dispatch(self, make_builder):
        op = Operation(kind=OperationKind.FIND_MANY, entity="Gallery")
        assert isinstance(make_builder("orm", Archetype.READ).query_operation(op), OrmCall)
        assert isinstance(make_builder("direct", Archetype.READ).query_operation(op), SqlCall)


class TestUtilities:
    def test_orm_read_has_none(self, make_builder):
        assert make_builder("orm", Archetype.READ).utilities() == ()

    def test_sql_gets_generate_id(self, make_builder):
        names = [u.name for u in make_builder("direct", Archetype.CRUD).utilities()]
        assert names == ["generateId"]

    def test_download_gets_client_ip(self, make_builder):
        names = [u.name for u in make_builder("orm", Archetype.DOWNLOAD).utilities()]
        assert names == ["getClientIP"]
