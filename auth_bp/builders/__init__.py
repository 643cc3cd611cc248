"""Artifact definition builders, one or more per artifact family."""

from .base import (
    ALWAYS,
    BRANDED,
    CLOUD_SQL,
    MULTITENANT,
    RBAC,
    SUPABASE,
    TENANT_SCOPED,
    WHITELABEL,
    ArtifactBuilder,
    FieldTable,
    Predicate,
)
from .documentation import DocumentationBuilder
from .dto import AuthDtoBuilder, RbacDtoBuilder, TenantDtoBuilder
from .environment import EnvironmentBuilder
from .schema import CoreSchemaBuilder, RbacSchemaBuilder, TenantSchemaBuilder

__all__ = [
    "ALWAYS",
    "BRANDED",
    "CLOUD_SQL",
    "MULTITENANT",
    "RBAC",
    "SUPABASE",
    "TENANT_SCOPED",
    "WHITELABEL",
    "ArtifactBuilder",
    "AuthDtoBuilder",
    "CoreSchemaBuilder",
    "DocumentationBuilder",
    "EnvironmentBuilder",
    "FieldTable",
    "Predicate",
    "RbacDtoBuilder",
    "RbacSchemaBuilder",
    "TenantDtoBuilder",
    "TenantSchemaBuilder",
]
