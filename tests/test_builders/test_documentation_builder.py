"""Tests for the documentation page builder (auth_bp.builders.documentation)."""

from __future__ import annotations

import pytest

from auth_bp.builders import (
    AuthDtoBuilder,
    CoreSchemaBuilder,
    DocumentationBuilder,
    RbacDtoBuilder,
    RbacSchemaBuilder,
    TenantDtoBuilder,
    TenantSchemaBuilder,
)
from auth_bp.models import ArtifactKind, DocumentMetadata


pytestmark = pytest.mark.unit


def _prior(catalog, config):
    definitions = []
    for builder_cls in (
        AuthDtoBuilder, CoreSchemaBuilder, RbacDtoBuilder, RbacSchemaBuilder,
        TenantDtoBuilder, TenantSchemaBuilder,
    ):
        definitions.extend(builder_cls(catalog).build(config))
    return definitions


def _pages(catalog, config, generated_at=None):
    builder = DocumentationBuilder(catalog, generated_at=generated_at)
    return {page.slug: page for page in builder.build(config, _prior(catalog, config))}


def _section(page, title):
    return next(s for s in page.metadata.sections if s.title == title)


class TestPages:
    def test_minimal_pages(self, catalog, minimal_config):
        pages = _pages(catalog, minimal_config)
        assert list(pages) == ["root", "auth"]
        assert all(p.kind is ArtifactKind.DOCUMENTATION for p in pages.values())
        assert all(isinstance(p.metadata, DocumentMetadata) for p in pages.values())

    def test_module_pages_follow_flags(self, catalog, full_config):
        assert list(_pages(catalog, full_config)) == ["root", "auth", "rbac", "tenant"]

    def test_paths(self, catalog, full_config):
        builder = DocumentationBuilder(catalog)
        paths = [builder.path_for(p) for p in builder.build(full_config, [])]
        assert paths == [
            "src/.context.md",
            "src/auth/.context.md",
            "src/rbac/.context.md",
            "src/tenant/.context.md",
        ]

    def test_generated_at_is_injected(self, catalog, minimal_config, fixed_timestamp):
        pages = _pages(catalog, minimal_config, generated_at=fixed_timestamp)
        assert pages["root"].metadata.generated_at == fixed_timestamp

    def test_no_timestamp_by_default(self, catalog, minimal_config):
        assert _pages(catalog, minimal_config)["root"].metadata.generated_at is None


class TestTokenClaims:
    def test_minimal_claims(self, catalog, minimal_config):
        root = _pages(catalog, minimal_config)["root"]
        assert root.field_names == ("sub", "email", "iat", "exp")

    def test_claims_follow_flags(self, catalog, full_config):
        root = _pages(catalog, full_config)["root"]
        assert root.field_names == ("sub", "email", "iat", "exp", "roles", "tenantId")

    def test_rbac_page_lists_claims(self, catalog, rbac_config):
        rbac = _pages(catalog, rbac_config)["rbac"]
        assert "roles" in rbac.field_names
        assert _section(rbac, "JWT Payload Integration").include_fields is True


class TestReferences:
    def test_auth_page_references_auth_dtos(self, catalog, multitenant_config):
        auth = _pages(catalog, multitenant_config)["auth"]
        refs = _section(auth, "Data Transfer Objects (DTOs)").references
        assert [r.name for r in refs] == ["LoginDto", "RegisterDto", "RefreshTokenDto"]
        login = refs[0]
        assert [f.name for f in login.fields] == ["email", "password", "tenantId"]

    def test_root_references_only_built_models(self, catalog, rbac_config):
        root = _pages(catalog, rbac_config)["root"]
        refs = _section(root, "Schema Models").references
        assert [r.name for r in refs] == [
            "User", "Session", "Role", "Permission", "UserRole", "RolePermission",
        ]

    def test_without_prior_references_are_empty(self, catalog, minimal_config):
        [root, auth] = DocumentationBuilder(catalog).build(minimal_config, [])
        assert _section(auth, "Data Transfer Objects (DTOs)").references == ()


class TestConditionalProse:
    def test_single_tenant_architecture(self, catalog, minimal_config):
        auth = _pages(catalog, minimal_config)["auth"]
        titles = [s.title for s in auth.metadata.sections]
        assert "Single-Tenant Authentication" in titles
        assert "Simple Access Control" in titles

    def test_multitenant_architecture(self, catalog, full_config):
        auth = _pages(catalog, full_config)["auth"]
        titles = [s.title for s in auth.metadata.sections]
        assert "Multitenant-Aware Authentication" in titles
        assert "Role-Based Access Control Integration" in titles

    def test_subdomain_routing_needs_whitelabel(self, catalog, multitenant_config, full_config):
        plain = _section(_pages(catalog, multitenant_config)["root"], "Tenant Identification")
        branded = _section(_pages(catalog, full_config)["root"], "Tenant Identification")
        assert len(plain.bullets) == 2
        assert len(branded.bullets) == 3

    def test_configuration_applied(self, catalog, rbac_config):
        auth = _pages(catalog, rbac_config)["auth"]
        assert _section(auth, "Configuration Applied").bullets == (
            "Database: Supabase PostgreSQL",
            "Whitelabel: Disabled",
            "RBAC: Enabled",
            "Multitenant: Disabled",
        )
