"""Pydantic v2 models for the composition engine.

Defines the value objects shared by the catalog, the builders, the renderers
and the orchestrator: field descriptors and their validation rules, artifact
definitions with their kind-specific metadata, and the generation plan.  All
models are frozen so that no stage can corrupt data owned by another.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class SemanticType(str, Enum):
    """Semantic type of a field, independent of any target language."""
    SHORT_TEXT = "short-text"
    EMAIL = "email"
    PASSWORD = "password"
    IDENTIFIER = "identifier"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    ENUMERATED = "enumerated-string"
    IDENTIFIER_ARRAY = "array-of-identifiers"


class RuleKind(str, Enum):
    """Named validation constraints."""
    STRING = "string"
    EMAIL = "email"
    STRONG_PASSWORD = "strong-password"
    MIN_LENGTH = "min-length"
    MAX_LENGTH = "max-length"
    MATCHES = "matches"
    UUID = "uuid"
    UUID_EACH = "uuid-each"
    ARRAY = "array"
    BOOLEAN = "boolean"
    ONE_OF = "one-of"
    TO_BOOLEAN = "to-boolean"
    DEFINED = "defined"
    OPTIONAL = "optional"


PRESENCE_RULES = frozenset({RuleKind.DEFINED, RuleKind.OPTIONAL})


class ColumnDefault(str, Enum):
    """Storage-level default applied by the relational schema."""
    GENERATED_ID = "generated-id"
    NOW = "now"
    UPDATED_AT = "updated-at"
    FALSE = "false"


class ArtifactKind(str, Enum):
    """Kinds of generated artifacts, one renderer per kind."""
    DTO = "dto"
    SCHEMA_MODEL = "schema-model"
    ENVIRONMENT = "environment"
    DOCUMENTATION = "documentation"


class RelationGroup(str, Enum):
    """Schema grouping of relational models."""
    CORE = "core"
    RBAC = "rbac"
    TENANT = "tenant"


class Family(str, Enum):
    """Artifact families, in the order the orchestrator builds them."""
    AUTHENTICATION = "authentication"
    SCHEMA = "schema"
    RBAC = "rbac"
    TENANT = "tenant"
    ENVIRONMENT = "environment"
    DOCUMENTATION = "documentation"


FAMILY_ORDER: tuple[Family, ...] = tuple(Family)


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------

class ValidationRule(BaseModel):
    """One named constraint, optionally parameterised."""
    model_config = ConfigDict(frozen=True)

    kind: RuleKind
    argument: Optional[Union[int, str, tuple[str, ...]]] = None


class FieldDescriptor(BaseModel):
    """A piece of data carried by one or more artifacts."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Field name as it appears in every artifact")
    semantic_type: SemanticType
    optional: bool = Field(default=False)
    validation_rules: tuple[ValidationRule, ...] = Field(default=())
    documentation: str = Field(default="")
    unique: bool = Field(default=False, description="Unique across stored records")
    column_default: Optional[ColumnDefault] = None
    example: Optional[str] = Field(
        default=None, description="Placeholder value for templates and docs"
    )

    @property
    def rule_kinds(self) -> tuple[RuleKind, ...]:
        return tuple(rule.kind for rule in self.validation_rules)


# ---------------------------------------------------------------------------
# Kind-specific metadata
# ---------------------------------------------------------------------------

class ClassMetadata(BaseModel):
    """Metadata of a class-style artifact (a DTO)."""
    model_config = ConfigDict(frozen=True)

    class_name: str
    implements: tuple[str, ...] = ()


class Relation(BaseModel):
    """A relation field of a schema model."""
    model_config = ConfigDict(frozen=True)

    name: str
    target: str
    many: bool = False
    optional: bool = False
    fields: tuple[str, ...] = ()
    references: tuple[str, ...] = ()
    on_delete: Optional[str] = None


class Datasource(BaseModel):
    """Client generator and datasource preamble of the schema."""
    model_config = ConfigDict(frozen=True)

    backend: str
    provider: str = "postgresql"
    url_env: str = "DATABASE_URL"


class SchemaMetadata(BaseModel):
    """Metadata of a relational model block."""
    model_config = ConfigDict(frozen=True)

    model_name: str
    table_name: str
    group: RelationGroup
    relations: tuple[Relation, ...] = ()
    primary_key: tuple[str, ...] = Field(
        default=(), description="Composite primary key; empty for a single id field"
    )
    unique_together: tuple[str, ...] = ()
    datasource: Optional[Datasource] = None


class EnvironmentGroup(BaseModel):
    """Comment-headed group of environment keys."""
    model_config = ConfigDict(frozen=True)

    title: str
    keys: tuple[str, ...]


class EnvironmentMetadata(BaseModel):
    """Metadata of an environment template."""
    model_config = ConfigDict(frozen=True)

    groups: tuple[EnvironmentGroup, ...]


class DefinitionSummary(BaseModel):
    """A structural definition as referenced from documentation."""
    model_config = ConfigDict(frozen=True)

    name: str
    kind: ArtifactKind
    description: str = ""
    fields: tuple[FieldDescriptor, ...] = ()


class DocSection(BaseModel):
    """One titled section of a documentation page."""
    model_config = ConfigDict(frozen=True)

    title: str
    level: int = Field(default=2, ge=2, le=4)
    paragraphs: tuple[str, ...] = ()
    bullets: tuple[str, ...] = ()
    numbered: bool = False
    code: tuple[str, ...] = ()
    references: tuple[DefinitionSummary, ...] = ()
    include_fields: bool = Field(
        default=False, description="Render the page's own fields in this section"
    )


class DocumentMetadata(BaseModel):
    """Metadata of a documentation page."""
    model_config = ConfigDict(frozen=True)

    title: str
    generated_at: Optional[str] = None
    sections: tuple[DocSection, ...] = ()


ArtifactMetadata = Union[
    ClassMetadata, SchemaMetadata, EnvironmentMetadata, DocumentMetadata
]


# ---------------------------------------------------------------------------
# Definitions, plan and output
# ---------------------------------------------------------------------------

class ArtifactDefinition(BaseModel):
    """Abstract shape of one generated unit."""
    model_config = ConfigDict(frozen=True)

    name: str
    kind: ArtifactKind
    slug: str = Field(..., description="File stem of the artifact")
    description: str = ""
    fields: tuple[FieldDescriptor, ...] = ()
    metadata: ArtifactMetadata

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def has_field(self, name: str) -> bool:
        return name in self.field_names

    def summary(self) -> DefinitionSummary:
        return DefinitionSummary(
            name=self.name,
            kind=self.kind,
            description=self.description,
            fields=self.fields,
        )


class PlanEntry(BaseModel):
    """One ``(path, kind, definition)`` triple of the generation plan."""
    model_config = ConfigDict(frozen=True)

    path: str
    kind: ArtifactKind
    family: Family
    definition: ArtifactDefinition


class GenerationPlan(BaseModel):
    """Ordered, configuration-determined list of artifacts to produce."""
    model_config = ConfigDict(frozen=True)

    entries: tuple[PlanEntry, ...] = ()

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(entry.path for entry in self.entries)

    def for_family(self, family: Family) -> tuple[PlanEntry, ...]:
        return tuple(e for e in self.entries if e.family is family)

    def find(self, name: str) -> Optional[ArtifactDefinition]:
        """Return the definition called *name*, or ``None``."""
        for entry in self.entries:
            if entry.definition.name == name:
                return entry.definition
        return None


class RenderedArtifact(BaseModel):
    """Rendered text bound to its relative path."""
    model_config = ConfigDict(frozen=True)

    path: str
    content: str
    kind: ArtifactKind
    family: Family
