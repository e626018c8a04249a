"""
Query dialects — render an Operation as an ORM call or a parameterized query.

The SQL dialect builds its text only from catalog identifiers (table and
column names, already validated as identifiers) and ``$n`` placeholders.
Every value from a filter or data map goes into the ordered argument
list; the text never contains one.  The number of placeholders always
equals the number of arguments.
"""

from __future__ import annotations

import logging

from endpoint_forge.core.models.entity import EntityCatalog, EntitySchema
from endpoint_forge.core.models.fragment import OrmCall, SqlCall, ts_literal
from endpoint_forge.core.models.operation import (
    FilterValue,
    Operation,
    OperationKind,
    Ref,
    lower_first,
)

logger = logging.getLogger(__name__)


# ── ORM ─────────────────────────────────────────────────────────


_ORM_METHODS: dict[OperationKind, str] = {
    OperationKind.FIND_MANY: "findMany",
    OperationKind.FIND_UNIQUE: "findFirst",
    OperationKind.CREATE: "create",
    OperationKind.UPDATE: "update",
    OperationKind.DELETE: "delete",
}


def _ts_map(values: dict[str, FilterValue]) -> dict[str, str]:
    return {key: ts_literal(value) for key, value in values.items()}


def render_orm(op: Operation, catalog: EntityCatalog) -> OrmCall:
    """Render *op* as ``prisma.<model>.<method>({ where, include, data, orderBy })``."""
    schema = catalog.get(op.entity)
    arguments: dict = {}

    if op.where:
        arguments["where"] = _ts_map(op.where)
    if op.include:
        arguments["include"] = {
            relation: {"where": _ts_map(inc.where)} if inc.where else "true"
            for relation, inc in op.include.items()
        }
    if op.kind in (OperationKind.CREATE, OperationKind.UPDATE):
        arguments["data"] = _ts_map(op.data)
    if op.kind is OperationKind.FIND_MANY and schema.created_field:
        arguments["orderBy"] = {schema.created_field: "'desc'"}

    return OrmCall(
        operation=op,
        binding=op.binding,
        target=f"prisma.{schema.model}.{_ORM_METHODS[op.kind]}",
        arguments=arguments,
    )


# ── SQL ─────────────────────────────────────────────────────────


class _Params:
    """Ordered positional arguments; ``add`` returns the placeholder."""

    def __init__(self) -> None:
        self.args: list[str] = []

    def add(self, value: FilterValue) -> str:
        self.args.append(ts_literal(value))
        return f"${len(self.args)}"


def _col(name: str) -> str:
    return f'"{name}"'


def _where(filters: dict[str, FilterValue], params: _Params) -> str:
    return " AND ".join(f"{_col(k)} = {params.add(v)}" for k, v in filters.items())


def render_sql(op: Operation, catalog: EntityCatalog) -> SqlCall:
    """Render *op* as parameterized SQL plus its argument list."""
    schema = catalog.get(op.entity)
    params = _Params()
    table = _col(schema.name)
    binding = op.binding

    if op.kind is OperationKind.FIND_MANY:
        sql = [f"SELECT * FROM {table}"]
        if op.where:
            sql.append(f"WHERE {_where(op.where, params)}")
        if schema.created_field:
            sql.append(f"ORDER BY {_col(schema.created_field)} DESC")
    elif op.kind is OperationKind.FIND_UNIQUE:
        sql = [f"SELECT * FROM {table}", f"WHERE {_where(op.where, params)}", "LIMIT 1"]
    elif op.kind is OperationKind.CREATE:
        sql = _insert(schema, op, params)
    elif op.kind is OperationKind.UPDATE:
        sql = _update(schema, op, params)
    elif op.kind is OperationKind.DELETE:
        sql = [f"DELETE FROM {table}", f"WHERE {_where(op.where, params)}"]
    else:
        raise ValueError(f"Unhandled operation kind: {op.kind!r}")

    relations: tuple[SqlCall, ...] = ()
    if op.include:
        if binding is None:
            raise ValueError(f"Cannot include relations on unbound {op.entity} query")
        relations = tuple(
            _relation_query(schema, binding, name, inc.where, catalog)
            for name, inc in op.include.items()
        )

    call = SqlCall(
        operation=op,
        binding=binding,
        result_var=f"{binding or lower_first(schema.name)}Result",
        sql=tuple(sql),
        args=tuple(params.args),
        single_row=op.kind is not OperationKind.FIND_MANY,
        relations=relations,
    )
    logger.debug("Rendered SQL for %s %s: %s", op.kind.value, op.entity, call.sql_text)
    return call


def _insert(schema: EntitySchema, op: Operation, params: _Params) -> list[str]:
    columns: list[str] = []
    values: list[str] = []

    if "id" not in op.data:
        columns.append(_col("id"))
        values.append(params.add(Ref(code="generateId()")))
    for key, value in op.data.items():
        columns.append(_col(key))
        values.append(params.add(value))
    for stamp in (schema.created_field, schema.updated_field):
        if stamp and stamp not in op.data:
            columns.append(_col(stamp))
            values.append("NOW()")

    sql = [
        f"INSERT INTO {_col(schema.name)} ({', '.join(columns)})",
        f"VALUES ({', '.join(values)})",
    ]
    if op.binding:
        sql.append("RETURNING *")
    return sql


def _update(schema: EntitySchema, op: Operation, params: _Params) -> list[str]:
    # COALESCE keeps the stored value when the caller leaves a field out
    sets = [
        f"{_col(key)} = COALESCE({params.add(value)}, {_col(key)})"
        for key, value in op.data.items()
    ]
    if schema.updated_field and schema.updated_field not in op.data:
        sets.append(f"{_col(schema.updated_field)} = NOW()")
    if not sets:
        raise ValueError(f"Update on {schema.name} has nothing to set")

    sql = [
        f"UPDATE {_col(schema.name)}",
        f"SET {', '.join(sets)}",
        f"WHERE {_where(op.where, params)}",
    ]
    if op.binding:
        sql.append("RETURNING *")
    return sql


def _relation_query(
    parent: EntitySchema,
    binding: str,
    name: str,
    extra: dict[str, FilterValue],
    catalog: EntityCatalog,
) -> SqlCall:
    relation = parent.relations.get(name)
    if relation is None:
        raise ValueError(f"Unknown relation '{name}' on {parent.name}")

    child = Operation(
        kind=OperationKind.FIND_MANY,
        entity=relation.entity,
        where={relation.foreign_key: Ref(code=f"{binding}.id"), **extra},
        returning=False,
    )
    rendered = render_sql(child, catalog)
    return SqlCall(
        operation=child,
        binding=None,
        result_var=f"{name}Result",
        sql=rendered.sql,
        args=rendered.args,
        attach_to=name,
    )
