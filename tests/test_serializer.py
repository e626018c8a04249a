"""
Tests for the serializer — fragment nodes in, handler source out.
"""

import re

import pytest

from endpoint_forge.core.models.archetype import Archetype
from endpoint_forge.core.models.fragment import (
    Code,
    EarlyReturn,
    ErrorHandler,
    Handler,
    MethodGuard,
    Respond,
    quote,
    ts_literal,
)
from endpoint_forge.core.models.operation import Ref
from endpoint_forge.core.services.generators.archetypes import compose
from endpoint_forge.core.services.generators.serializer import render_fragments

_QUERY_TEXT = re.compile(r"client\.query\(`(.*?)`", re.S)


def _render(make_builder, settings, pattern, arch, area="admin", resource="galleries") -> str:
    return render_fragments(compose(make_builder(pattern, arch, area, resource), settings))


# ═══════════════════════════════════════════════════════════════════
#  Literal helpers
# ═══════════════════════════════════════════════════════════════════


class TestLiterals:
    def test_quote_escapes(self):
        assert quote("it's") == "'it\\'s'"
        assert quote("a\nb") == "'a\\nb'"

    @pytest.mark.parametrize("value, expected", [
        (Ref(code="gallery.id"), "gallery.id"),
        (None, "null"),
        (True, "true"),
        (False, "false"),
        (0, "0"),
        (2.5, "2.5"),
        ("x", "'x'"),
    ])
    def test_ts_literal(self, value, expected):
        assert ts_literal(value) == expected


# ═══════════════════════════════════════════════════════════════════
#  Hand-built handlers
# ═══════════════════════════════════════════════════════════════════


class TestHandlerRendering:
    def _handler(self, **overrides) -> Handler:
        fields = dict(
            guard=MethodGuard(methods=("GET",)),
            body=(
                EarlyReturn(condition="!ok", status=400, payload=(("message", "'Bad'"),)),
                Respond(200, (("ok", "true"),)),
            ),
            error=ErrorHandler(label="admin things", cleanup=("cleanup()",)),
        )
        fields.update(overrides)
        return Handler(**fields)

    def test_single_method_guard(self):
        text = render_fragments([self._handler()])
        assert "if (req.method !== 'GET') {" in text
        assert "return res.status(405).json({ message: 'Method not allowed' })" in text

    def test_multi_method_guard(self):
        text = render_fragments([self._handler(guard=MethodGuard(methods=("GET", "POST")))])
        assert "if (!['GET', 'POST'].includes(req.method || '')) {" in text

    def test_release_before_every_response_in_try(self):
        text = render_fragments([self._handler(release=("release()",))])
        assert "      release()\n      return res.status(400).json({ message: 'Bad' })" in text
        assert "    release()\n    return res.status(200).json({ ok: true })" in text
        # The method guard sits outside try and never releases
        assert "release()\n    return res.status(405)" not in text

    def test_error_handler(self):
        text = render_fragments([self._handler()])
        assert "  } catch (error) {\n    console.error('admin things error:', error)\n    cleanup()\n" in text
        assert "return res.status(500).json({ message: 'Internal server error' })" in text

    def test_preamble_before_guard(self):
        text = render_fragments([self._handler(preamble=(Code("const { slug } = req.query"),))])
        assert text.index("const { slug } = req.query") < text.index("req.method !==")

    def test_unknown_fragment(self):
        with pytest.raises(TypeError):
            render_fragments([object()])

    def test_single_trailing_newline(self):
        text = render_fragments([self._handler()])
        assert text.endswith("}\n")
        assert not text.endswith("\n\n")


# ═══════════════════════════════════════════════════════════════════
#  Composed handlers
# ═══════════════════════════════════════════════════════════════════


class TestComposedOutput:
    def test_header(self, make_builder, settings):
        text = _render(make_builder, settings, "orm", Archetype.CRUD)
        assert text.startswith("/**\n * API Endpoint: admin/galleries\n")
        assert " * Authentication: nextauth\n * Database: Prisma\n" in text

    def test_orm_crud(self, make_builder, settings):
        text = _render(make_builder, settings, "orm", Archetype.CRUD)
        assert "const prisma = new PrismaClient()" in text
        assert "const session = await getSession({ req })" in text
        assert "switch (req.method) {" in text
        for method in ("GET", "POST", "PUT", "DELETE"):
            assert f"case '{method}': {{" in text
        assert "const galleries = await prisma.gallery.findMany({" in text
        assert "createdAt: 'desc'" in text
        assert "client.query" not in text

    def test_direct_read(self, make_builder, settings):
        text = _render(make_builder, settings, "direct", Archetype.READ, resource="images")
        assert "  const client = new Client(connectionConfig)\n\n  try {\n    await client.connect()\n" in text
        assert "const images = imagesResult.rows" in text
        assert "    await client.end()\n    return res.status(200).json({ message: 'Success', data: images })" in text
        assert "function generateId()" in text
        assert "prisma" not in text

    def test_sql_text_holds_no_interpolation(self, make_builder, settings):
        for arch, area, resource in (
            (Archetype.CRUD, "admin", "galleries"),
            (Archetype.CREDENTIAL, "gallery", "verify-access"),
            (Archetype.DOWNLOAD, "gallery", "download"),
            (Archetype.UPLOAD, "admin", "upload"),
        ):
            text = _render(make_builder, settings, "direct", arch, area, resource)
            queries = _QUERY_TEXT.findall(text)
            assert queries, arch
            for sql in queries:
                assert "${" not in sql
                assert "'" not in sql

    def test_upload_route_config(self, make_builder, settings):
        text = _render(make_builder, settings, "orm", Archetype.UPLOAD, resource="upload")
        assert "export const config = {" in text
        assert "sizeLimit: '50mb'" in text
        assert "for (const file of files) {" in text

    def test_download_sends_buffer(self, make_builder, settings):
        text = _render(make_builder, settings, "direct", Archetype.DOWNLOAD, "gallery", "download")
        assert "await client.end()\n    return res.status(200).send(fileBuffer)" in text
        assert "function getClientIP(req: NextApiRequest): string {" in text
        assert "gallery.downloads = downloadsResult.rows" in text

    def test_deterministic(self, make_builder, settings):
        first = _render(make_builder, settings, "direct", Archetype.CRUD)
        second = _render(make_builder, settings, "direct", Archetype.CRUD)
        assert first == second
