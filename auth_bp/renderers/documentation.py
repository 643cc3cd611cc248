"""Markdown renderer for the ``.context.md`` pages."""

from __future__ import annotations

from typing import Any

from ..errors import MalformedDefinition
from ..models import (
    ArtifactDefinition,
    ArtifactKind,
    DefinitionSummary,
    DocSection,
    DocumentMetadata,
    FieldDescriptor,
)
from .base import ArtifactRenderer
from .vocabulary import rule_label


def describe_field(field: FieldDescriptor) -> str:
    """One-line Markdown description of a field.

    Example::

        `email` (email): User email address (unique) [IsEmail, IsDefined] e.g. `user@example.com`
    """
    qualifiers = field.semantic_type.value + (", optional" if field.optional else "")
    labels = ", ".join(rule_label(rule) for rule in field.validation_rules)
    line = f"`{field.name}` ({qualifiers}): {field.documentation} [{labels}]"
    if field.example:
        line += f" e.g. `{field.example}`"
    return line


class DocumentationRenderer(ArtifactRenderer):
    kind = ArtifactKind.DOCUMENTATION
    template = "context.md.j2"
    metadata_type = DocumentMetadata

    def check(self, definition: ArtifactDefinition) -> None:
        super().check(definition)
        for section in definition.metadata.sections:
            if section.include_fields and not definition.fields:
                raise MalformedDefinition(
                    definition.name,
                    f"section {section.title!r} lists fields but the page has none",
                )
        for summary in self._references(definition.metadata):
            for field in summary.fields:
                self.check_field(summary.name, field)

    def prepare(self, definition: ArtifactDefinition) -> dict[str, Any]:
        metadata: DocumentMetadata = definition.metadata
        return {
            "title": metadata.title,
            "generated_at": metadata.generated_at,
            "contents": [s.title for s in metadata.sections if s.level == 2],
            "sections": [_section(section) for section in metadata.sections],
            "fields": [describe_field(field) for field in definition.fields],
        }

    @staticmethod
    def _references(metadata: DocumentMetadata) -> list[DefinitionSummary]:
        return [ref for section in metadata.sections for ref in section.references]


def _section(section: DocSection) -> dict[str, Any]:
    return {
        "title": section.title,
        "level": section.level,
        "paragraphs": section.paragraphs,
        "bullets": section.bullets,
        "numbered": section.numbered,
        "code": section.code,
        "include_fields": section.include_fields,
        "references": [
            {
                "name": ref.name,
                "description": ref.description,
                "fields": [describe_field(field) for field in ref.fields],
            }
            for ref in section.references
        ],
    }
