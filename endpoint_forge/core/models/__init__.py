"""
Domain models for the endpoint generator.

Re-exported here for convenient access:

    from endpoint_forge.core.models import GenerationRequest, Operation, Pattern
"""

from endpoint_forge.core.models.entity import EntityCatalog, EntitySchema, Relation
from endpoint_forge.core.models.operation import Include, Operation, OperationKind, Ref
from endpoint_forge.core.models.pattern import Pattern, PatternKind, QueryDialect
from endpoint_forge.core.models.request import Area, GenerationOptions, GenerationRequest
from endpoint_forge.core.models.template import GeneratedFile

__all__ = [
    # request.py
    "Area",
    # entity.py
    "EntityCatalog",
    "EntitySchema",
    # template.py
    "GeneratedFile",
    "GenerationOptions",
    "GenerationRequest",
    # operation.py
    "Include",
    "Operation",
    "OperationKind",
    # pattern.py
    "Pattern",
    "PatternKind",
    "QueryDialect",
    "Ref",
    "Relation",
]
