"""Common machinery of the artifact renderers.

Every renderer applies the same three sub-steps to a definition: collect the
auxiliary declarations its fields reference, emit a structural header, then
emit one block per field with its rules in descriptor order.  Subclasses
express those steps as the context handed to their Jinja2 template.
"""

from __future__ import annotations

from typing import Any

from ..errors import MalformedDefinition
from ..models import ArtifactDefinition, ArtifactKind, FieldDescriptor, RuleKind
from .templates import TemplateRenderer
from .vocabulary import check_argument


class ArtifactRenderer:
    """Base class: validates a definition, prepares a context, renders a template.

    Renderers are pure functions of the definition; the same definition
    always renders to the same text.
    """

    kind: ArtifactKind
    template: str
    metadata_type: type

    def __init__(self, templates: TemplateRenderer | None = None) -> None:
        self.templates = templates or TemplateRenderer()

    def render(self, definition: ArtifactDefinition) -> str:
        """Render *definition* to text.

        Raises:
            MalformedDefinition: If the definition does not match this
                renderer's kind or is internally inconsistent.
        """
        self.check(definition)
        return self.templates.render(self.template, self.prepare(definition))

    def check(self, definition: ArtifactDefinition) -> None:
        name = definition.name
        if definition.kind is not self.kind:
            raise MalformedDefinition(
                name, f"expected a {self.kind.value} definition, got {definition.kind.value}"
            )
        if not isinstance(definition.metadata, self.metadata_type):
            raise MalformedDefinition(
                name, f"metadata must be {self.metadata_type.__name__}"
            )
        seen: set[str] = set()
        for field in definition.fields:
            if field.name in seen:
                raise MalformedDefinition(name, f"duplicate field {field.name!r}")
            seen.add(field.name)
            self.check_field(name, field)

    def check_field(self, artifact: str, field: FieldDescriptor) -> None:
        kinds = field.rule_kinds
        expected = RuleKind.OPTIONAL if field.optional else RuleKind.DEFINED
        if not kinds or kinds[-1] is not expected:
            raise MalformedDefinition(
                artifact,
                f"field {field.name!r} must end with the {expected.value!r} rule",
            )
        for rule in field.validation_rules:
            check_argument(artifact, rule)

    def prepare(self, definition: ArtifactDefinition) -> dict[str, Any]:
        raise NotImplementedError
