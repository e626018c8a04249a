"""
Serializer — the single place where fragment nodes become source text.

Composers never format text themselves; they hand an ordered list of
fragment nodes to ``render_fragments``.  Indentation is two spaces.
Inside the ``try`` body of a handler, the pattern's release lines
(closing a direct database connection) are written before every
response.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from endpoint_forge.core.models.fragment import (
    Code,
    Comment,
    ConnectionSetup,
    EarlyReturn,
    ErrorHandler,
    Fragment,
    Handler,
    Header,
    IdentityCheck,
    Imports,
    Loop,
    MethodGuard,
    MethodSwitch,
    OrmCall,
    Respond,
    RouteConfig,
    SqlCall,
    Utility,
    quote,
)

_INDENT = "  "
_INLINE_LIMIT = 72


class _Writer:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.level = 0
        self.release: tuple[str, ...] = ()

    def line(self, text: str = "") -> None:
        self.lines.append(_INDENT * self.level + text if text else "")

    def block(self, text: str) -> None:
        for raw in text.splitlines():
            self.line(raw)

    def blank(self) -> None:
        if self.lines and self.lines[-1] != "":
            self.lines.append("")

    @contextmanager
    def indent(self) -> Iterator[None]:
        self.level += 1
        try:
            yield
        finally:
            self.level -= 1

    @contextmanager
    def releasing(self, lines: tuple[str, ...]) -> Iterator[None]:
        saved, self.release = self.release, lines
        try:
            yield
        finally:
            self.release = saved

    def text(self) -> str:
        while self.lines and self.lines[-1] == "":
            self.lines.pop()
        return "\n".join(self.lines) + "\n"


# ── Object literals ─────────────────────────────────────────────


def _entry(key: str, value: str) -> str:
    return key if key == value else f"{key}: {value}"


def _is_flat(pairs: Sequence) -> bool:
    return all(isinstance(v, str) for _, v in pairs)


def _inline_object(pairs: Sequence) -> str:
    if not pairs:
        return "{}"
    return "{ " + ", ".join(_entry(k, v) for k, v in pairs) + " }"


def _object_lines(pairs: Sequence) -> list[str]:
    """Multi-line object literal; nested tuples/dicts become nested objects."""
    if not pairs:
        return ["{}"]
    out = ["{"]
    for index, (key, value) in enumerate(pairs):
        comma = "," if index < len(pairs) - 1 else ""
        if isinstance(value, dict):
            value = tuple(value.items())
        if isinstance(value, tuple):
            nested = _object_lines(value)
            out.append(f"{_INDENT}{key}: {nested[0]}")
            out.extend(_INDENT + n for n in nested[1:-1])
            out.append(f"{_INDENT}{nested[-1]}{comma}")
        else:
            out.append(f"{_INDENT}{_entry(key, value)}{comma}")
    out.append("}")
    return out


def _object(pairs: Sequence, prefix: str, suffix: str, w: _Writer) -> None:
    """Write ``prefix{...}suffix``, inline when short and flat."""
    if _is_flat(pairs):
        inline = f"{prefix}{_inline_object(pairs)}{suffix}"
        if len(inline) + len(_INDENT) * w.level <= _INLINE_LIMIT or len(pairs) <= 1:
            w.line(inline)
            return
    lines = _object_lines(pairs)
    if len(lines) == 1:
        w.line(f"{prefix}{lines[0]}{suffix}")
        return
    w.line(f"{prefix}{lines[0]}")
    for mid in lines[1:-1]:
        w.line(mid)
    w.line(f"{lines[-1]}{suffix}")


# ── Statements ──────────────────────────────────────────────────


def _write_response(w: _Writer, status: int, payload: Sequence, send: str | None = None) -> None:
    for line in w.release:
        w.line(line)
    if send is not None:
        w.line(f"return res.status({status}).send({send})")
        return
    _object(payload, f"return res.status({status}).json(", ")", w)


def _write_early_return(node: EarlyReturn, w: _Writer) -> None:
    if node.comment:
        w.line(f"// {node.comment}")
    w.line(f"if ({node.condition}) {{")
    with w.indent():
        _write_response(w, node.status, node.payload)
    w.line("}")


def _write_orm_call(node: OrmCall, w: _Writer) -> None:
    prefix = f"const {node.binding} = " if node.binding else ""
    call = f"{prefix}await {node.target}("
    if not node.arguments:
        w.line(f"{call})")
        return
    _object(tuple(node.arguments.items()), call, ")", w)


def _write_args(node: SqlCall, w: _Writer) -> None:
    """Close the template literal and write the ordered argument list."""
    if not node.args:
        w.line("`)")
        return
    inline = "`, [" + ", ".join(node.args) + "])"
    if len(node.args) <= 3 and len(inline) <= _INLINE_LIMIT:
        w.line(inline)
        return
    w.line("`, [")
    with w.indent():
        for index, arg in enumerate(node.args):
            w.line(arg + ("," if index < len(node.args) - 1 else ""))
    w.line("])")


def _write_sql_call(node: SqlCall, w: _Writer) -> None:
    needs_result = node.binding is not None or node.attach_to is not None
    prefix = f"const {node.result_var} = " if needs_result else ""
    w.line(f"{prefix}await client.query(`")
    with w.indent():
        for sql_line in node.sql:
            w.line(sql_line)
    _write_args(node, w)

    if node.binding:
        rows = f"{node.result_var}.rows[0]" if node.single_row else f"{node.result_var}.rows"
        w.line(f"const {node.binding} = {rows}")

    if node.relations:
        w.blank()
        w.line(f"if ({node.binding}) {{")
        with w.indent():
            for index, rel in enumerate(node.relations):
                if index:
                    w.blank()
                _write_sql_call(rel, w)
                w.line(f"{node.binding}.{rel.attach_to} = {rel.result_var}.rows")
        w.line("}")


def _write_switch(node: MethodSwitch, w: _Writer) -> None:
    w.line("switch (req.method) {")
    with w.indent():
        for branch in node.branches:
            w.line(f"case {quote(branch.method)}: {{")
            with w.indent():
                if branch.comment:
                    w.line(f"// {branch.comment}")
                _write_statements(branch.body, w)
            w.line("}")
        w.line("default:")
        with w.indent():
            _write_response(w, 405, (("message", quote("Method not allowed")),))
    w.line("}")


def _write_statement(node, w: _Writer) -> None:
    if isinstance(node, Comment):
        for text in node.text.splitlines():
            w.line(f"// {text}")
    elif isinstance(node, (Code, IdentityCheck)):
        w.block(node.code if isinstance(node, IdentityCheck) else node.text)
    elif isinstance(node, EarlyReturn):
        _write_early_return(node, w)
    elif isinstance(node, Respond):
        _write_response(w, node.status, node.payload, node.send)
    elif isinstance(node, OrmCall):
        _write_orm_call(node, w)
    elif isinstance(node, SqlCall):
        _write_sql_call(node, w)
    elif isinstance(node, Loop):
        w.line(f"{node.header} {{")
        with w.indent():
            _write_statements(node.body, w)
        w.line("}")
    elif isinstance(node, MethodSwitch):
        _write_switch(node, w)
    else:
        raise TypeError(f"Cannot serialize statement {type(node).__name__}")


def _write_statements(nodes: Sequence, w: _Writer) -> None:
    """Statements separated by blank lines; a comment sticks to the next one."""
    for index, node in enumerate(nodes):
        if index and not isinstance(nodes[index - 1], Comment):
            w.blank()
        _write_statement(node, w)


# ── Top-level nodes ─────────────────────────────────────────────


def _write_header(node: Header, w: _Writer) -> None:
    w.block(f"""\
/**
 * API Endpoint: {node.area}/{node.resource}
 * Generated by endpoint-forge
 *
 * Archetype: {node.archetype}
 * Authentication: {node.auth_label}
 * Database: {node.database_label}
 */

interface RequestBody {{
  // Define your request body interface here
}}

interface ResponseData {{
  // Define your response data interface here
}}""")


def _write_guard(node: MethodGuard, w: _Writer) -> None:
    if len(node.methods) == 1:
        w.line(f"if (req.method !== {quote(node.methods[0])}) {{")
    else:
        allowed = ", ".join(quote(m) for m in node.methods)
        w.line(f"if (![{allowed}].includes(req.method || '')) {{")
    with w.indent():
        _write_response(w, 405, (("message", quote("Method not allowed")),))
    w.line("}")


def _write_error_handler(node: ErrorHandler, w: _Writer) -> None:
    w.line("} catch (error) {")
    with w.indent():
        w.line(f"console.error({quote(node.label + ' error:')}, error)")
        for line in node.cleanup:
            w.line(line)
        w.line("return res.status(500).json({ message: 'Internal server error' })")
    w.line("}")


def _write_handler(node: Handler, w: _Writer) -> None:
    response = f"NextApiResponse<{node.response_type}>" if node.response_type else "NextApiResponse"
    w.line(f"export default async function handler(req: NextApiRequest, res: {response}) {{")
    with w.indent():
        if node.preamble:
            _write_statements(node.preamble, w)
            w.blank()
        _write_guard(node.guard, w)
        w.blank()
        for line in node.setup:
            w.line(line)
        if node.setup:
            w.blank()
        w.line("try {")
        with w.indent(), w.releasing(node.release):
            for line in node.connect:
                w.line(line)
            if node.connect:
                w.blank()
            _write_statements(node.body, w)
        _write_error_handler(node.error, w)
    w.line("}")


def _write_route_config(node: RouteConfig, w: _Writer) -> None:
    w.block(f"""\
export const config = {{
  api: {{
    bodyParser: {{
      sizeLimit: {quote(node.body_size_limit)}
    }}
  }}
}}""")


def render_fragments(nodes: Sequence[Fragment]) -> str:
    """Serialize an ordered fragment list into one source file."""
    w = _Writer()
    for node in nodes:
        w.blank()
        if isinstance(node, Header):
            _write_header(node, w)
        elif isinstance(node, Imports):
            for line in node.lines:
                w.line(line)
        elif isinstance(node, ConnectionSetup):
            w.block(node.code)
        elif isinstance(node, RouteConfig):
            _write_route_config(node, w)
        elif isinstance(node, Handler):
            _write_handler(node, w)
        elif isinstance(node, Utility):
            w.block(node.code)
        else:
            raise TypeError(f"Cannot serialize fragment {type(node).__name__}")
    return w.text()
