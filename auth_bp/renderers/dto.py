"""TypeScript DTO renderer (class-validator decorated classes)."""

from __future__ import annotations

import re
from typing import Any

from ..errors import MalformedDefinition
from ..models import ArtifactDefinition, ArtifactKind, ClassMetadata, FieldDescriptor
from .base import ArtifactRenderer
from .vocabulary import (
    DECORATOR_MODULES,
    TYPESCRIPT_TYPES,
    decorator_call,
    decorator_module,
    decorator_name,
)

_CLASS_NAME = re.compile(r"^[A-Z][A-Za-z0-9]*$")


class DtoRenderer(ArtifactRenderer):
    kind = ArtifactKind.DTO
    template = "dto.ts.j2"
    metadata_type = ClassMetadata

    def check(self, definition: ArtifactDefinition) -> None:
        super().check(definition)
        class_name = definition.metadata.class_name
        if not _CLASS_NAME.match(class_name):
            raise MalformedDefinition(
                definition.name, f"invalid class name {class_name!r}"
            )

    def prepare(self, definition: ArtifactDefinition) -> dict[str, Any]:
        metadata: ClassMetadata = definition.metadata
        return {
            "imports": _imports(definition.fields),
            "class_name": metadata.class_name,
            "implements": metadata.implements,
            "description": definition.description,
            "fields": [_field_block(field) for field in definition.fields],
        }


def _imports(fields: tuple[FieldDescriptor, ...]) -> list[dict[str, Any]]:
    """Import lines for exactly the decorators referenced by *fields*."""
    used: dict[str, set[str]] = {}
    for field in fields:
        for rule in field.validation_rules:
            used.setdefault(decorator_module(rule), set()).add(decorator_name(rule))
    return [
        {"source": module, "names": sorted(used[module])}
        for module in DECORATOR_MODULES
        if module in used
    ]


def _field_block(field: FieldDescriptor) -> dict[str, Any]:
    return {
        "name": field.name,
        "type": TYPESCRIPT_TYPES[field.semantic_type],
        "optional": field.optional,
        "documentation": field.documentation,
        "decorators": [decorator_call(rule) for rule in field.validation_rules],
    }
