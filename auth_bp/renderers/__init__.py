"""Renderers turning artifact definitions into target-language text."""

from __future__ import annotations

from ..errors import MalformedDefinition
from ..models import ArtifactDefinition, ArtifactKind
from .base import ArtifactRenderer
from .documentation import DocumentationRenderer, describe_field
from .dto import DtoRenderer
from .environment import EnvironmentRenderer
from .schema import SchemaRenderer
from .templates import TemplateRenderer


class RendererRegistry:
    """Maps each artifact kind to exactly one renderer."""

    def __init__(self, templates: TemplateRenderer | None = None) -> None:
        templates = templates or TemplateRenderer()
        self._renderers: dict[ArtifactKind, ArtifactRenderer] = {}
        for renderer_cls in (
            DtoRenderer, SchemaRenderer, EnvironmentRenderer, DocumentationRenderer,
        ):
            self.register(renderer_cls(templates))

    def register(self, renderer: ArtifactRenderer) -> None:
        self._renderers[renderer.kind] = renderer

    def renderer_for(self, kind: ArtifactKind) -> ArtifactRenderer:
        try:
            return self._renderers[kind]
        except KeyError:
            raise MalformedDefinition(kind.value, "no renderer for this kind") from None

    def render(self, definition: ArtifactDefinition) -> str:
        return self.renderer_for(definition.kind).render(definition)


__all__ = [
    "ArtifactRenderer",
    "DocumentationRenderer",
    "DtoRenderer",
    "EnvironmentRenderer",
    "RendererRegistry",
    "SchemaRenderer",
    "TemplateRenderer",
    "describe_field",
]
