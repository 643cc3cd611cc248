"""Environment template renderer (``KEY=value`` lines under comment headers)."""

from __future__ import annotations

from typing import Any

from ..errors import MalformedDefinition
from ..models import (
    ArtifactDefinition,
    ArtifactKind,
    EnvironmentMetadata,
    FieldDescriptor,
    RuleKind,
)
from .base import ArtifactRenderer


class EnvironmentRenderer(ArtifactRenderer):
    kind = ArtifactKind.ENVIRONMENT
    template = "env.j2"
    metadata_type = EnvironmentMetadata

    def check(self, definition: ArtifactDefinition) -> None:
        super().check(definition)
        grouped = [key for group in definition.metadata.groups for key in group.keys]
        if sorted(grouped) != sorted(definition.field_names):
            raise MalformedDefinition(
                definition.name, "every key must belong to exactly one group"
            )

    def prepare(self, definition: ArtifactDefinition) -> dict[str, Any]:
        metadata: EnvironmentMetadata = definition.metadata
        by_name = {field.name: field for field in definition.fields}
        return {
            "description": definition.description,
            "groups": [
                {
                    "title": group.title,
                    "entries": [_entry(by_name[key]) for key in group.keys],
                }
                for group in metadata.groups
            ],
        }


def _entry(field: FieldDescriptor) -> dict[str, str]:
    comment = field.documentation
    for rule in field.validation_rules:
        if rule.kind is RuleKind.ONE_OF:
            comment += f" (one of: {', '.join(rule.argument)})"
    return {"key": field.name, "value": field.example or "", "comment": comment}
