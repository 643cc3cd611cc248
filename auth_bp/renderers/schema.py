"""Prisma model renderer."""

from __future__ import annotations

from typing import Any

from ..errors import MalformedDefinition
from ..models import (
    ArtifactDefinition,
    ArtifactKind,
    FieldDescriptor,
    Relation,
    RuleKind,
    SchemaMetadata,
)
from .base import ArtifactRenderer
from .vocabulary import PRISMA_DEFAULTS, PRISMA_TYPES

# Native column types derived from validation rules.
_NATIVE_TYPES = {
    RuleKind.UUID: lambda rule: "@db.Uuid",
    RuleKind.MAX_LENGTH: lambda rule: f"@db.VarChar({rule.argument})",
}


class SchemaRenderer(ArtifactRenderer):
    kind = ArtifactKind.SCHEMA_MODEL
    template = "model.prisma.j2"
    metadata_type = SchemaMetadata

    def check(self, definition: ArtifactDefinition) -> None:
        super().check(definition)
        metadata: SchemaMetadata = definition.metadata
        names = set(definition.field_names)
        referenced = [
            *metadata.primary_key,
            *metadata.unique_together,
            *(name for relation in metadata.relations for name in relation.fields),
        ]
        for name in referenced:
            if name not in names:
                raise MalformedDefinition(
                    definition.name, f"key or relation references unknown field {name!r}"
                )
        for relation in metadata.relations:
            if relation.name in names:
                raise MalformedDefinition(
                    definition.name, f"relation {relation.name!r} shadows a field"
                )
            if len(relation.fields) != len(relation.references):
                raise MalformedDefinition(
                    definition.name,
                    f"relation {relation.name!r} has mismatched fields and references",
                )

    def prepare(self, definition: ArtifactDefinition) -> dict[str, Any]:
        metadata: SchemaMetadata = definition.metadata
        rows = [_column(field) for field in definition.fields]
        rows += [_relation(relation) for relation in metadata.relations]

        block = []
        if metadata.primary_key:
            block.append(f"@@id([{', '.join(metadata.primary_key)}])")
        if metadata.unique_together:
            block.append(f"@@unique([{', '.join(metadata.unique_together)}])")
        block.append(f'@@map("{metadata.table_name}")')

        return {
            "datasource": metadata.datasource,
            "model_name": metadata.model_name,
            "description": definition.description,
            "columns": _align(rows),
            "block_attributes": block,
        }


def _column(field: FieldDescriptor) -> tuple[str, str, str]:
    prisma_type = PRISMA_TYPES[field.semantic_type]
    if field.optional and field.column_default is None:
        prisma_type += "?"

    attributes = []
    if field.column_default is not None:
        attributes.append(PRISMA_DEFAULTS[field.column_default])
    if field.unique:
        attributes.append("@unique")
    for rule in field.validation_rules:
        native = _NATIVE_TYPES.get(rule.kind)
        if native is not None:
            attributes.append(native(rule))
    return field.name, prisma_type, " ".join(attributes)


def _relation(relation: Relation) -> tuple[str, str, str]:
    if relation.many:
        return relation.name, f"{relation.target}[]", ""

    target = relation.target + ("?" if relation.optional else "")
    args = [
        f"fields: [{', '.join(relation.fields)}]",
        f"references: [{', '.join(relation.references)}]",
    ]
    if relation.on_delete:
        args.append(f"onDelete: {relation.on_delete}")
    return relation.name, target, f"@relation({', '.join(args)})"


def _align(rows: list[tuple[str, str, str]]) -> list[str]:
    """Lay out ``(name, type, attributes)`` rows in aligned columns."""
    if not rows:
        return []
    name_width = max(len(name) for name, _, _ in rows)
    type_width = max(len(kind) for _, kind, _ in rows)
    return [
        f"{name:<{name_width}} {kind:<{type_width}} {attributes}".rstrip()
        for name, kind, attributes in rows
    ]
