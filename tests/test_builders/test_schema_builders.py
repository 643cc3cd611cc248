"""Tests for the schema model builders (auth_bp.builders.schema)."""

from __future__ import annotations

import pytest

from auth_bp.builders import CoreSchemaBuilder, RbacSchemaBuilder, TenantSchemaBuilder
from auth_bp.config import Configuration, DatabaseVariant
from auth_bp.models import ArtifactKind, RelationGroup, SchemaMetadata


pytestmark = pytest.mark.unit


def _by_name(definitions):
    return {definition.name: definition for definition in definitions}


def _relations(definition):
    return {relation.name: relation for relation in definition.metadata.relations}


class TestCoreSchemaBuilder:
    def test_user_and_session(self, catalog, minimal_config):
        models = _by_name(CoreSchemaBuilder(catalog).build(minimal_config))
        assert list(models) == ["User", "Session"]
        assert all(m.kind is ArtifactKind.SCHEMA_MODEL for m in models.values())
        assert all(isinstance(m.metadata, SchemaMetadata) for m in models.values())

    def test_user_fields_minimal(self, catalog, minimal_config):
        user = _by_name(CoreSchemaBuilder(catalog).build(minimal_config))["User"]
        assert user.field_names == (
            "id", "email", "passwordHash", "firstName", "lastName", "createdAt", "updatedAt",
        )
        assert user.metadata.table_name == "users"
        assert user.metadata.group is RelationGroup.CORE

    def test_user_carries_datasource(self, catalog):
        config = Configuration(database=DatabaseVariant.CLOUD_SQL)
        models = _by_name(CoreSchemaBuilder(catalog).build(config))
        assert models["User"].metadata.datasource.backend == "Google Cloud SQL PostgreSQL"
        assert models["Session"].metadata.datasource is None

    def test_multitenant_user(self, catalog, multitenant_config):
        user = _by_name(CoreSchemaBuilder(catalog).build(multitenant_config))["User"]
        assert user.field_names[-1] == "tenantId"
        tenant = _relations(user)["tenant"]
        assert tenant.target == "Tenant"
        assert tenant.optional is True
        assert tenant.fields == ("tenantId",)
        assert tenant.references == ("id",)

    def test_no_tenant_relation_without_multitenant(self, catalog, minimal_config):
        user = _by_name(CoreSchemaBuilder(catalog).build(minimal_config))["User"]
        assert "tenant" not in _relations(user)
        assert not user.has_field("tenantId")

    def test_rbac_adds_role_relation(self, catalog, rbac_config):
        user = _by_name(CoreSchemaBuilder(catalog).build(rbac_config))["User"]
        roles = _relations(user)["roles"]
        assert roles.many is True
        assert roles.target == "UserRole"

    def test_session_cascades(self, catalog, minimal_config):
        session = _by_name(CoreSchemaBuilder(catalog).build(minimal_config))["Session"]
        user = _relations(session)["user"]
        assert user.optional is False
        assert user.fields == ("userId",)
        assert user.on_delete == "Cascade"

    def test_paths(self, catalog, minimal_config):
        builder = CoreSchemaBuilder(catalog)
        paths = [builder.path_for(d) for d in builder.build(minimal_config)]
        assert paths == ["src/database/schema/user.prisma", "src/database/schema/session.prisma"]


class TestRbacSchemaBuilder:
    def test_empty_when_disabled(self, catalog, minimal_config):
        assert RbacSchemaBuilder(catalog).build(minimal_config) == []

    def test_four_models(self, catalog, rbac_config):
        models = _by_name(RbacSchemaBuilder(catalog).build(rbac_config))
        assert list(models) == ["Role", "Permission", "UserRole", "RolePermission"]
        assert all(m.metadata.group is RelationGroup.RBAC for m in models.values())

    def test_join_tables_use_composite_keys(self, catalog, rbac_config):
        models = _by_name(RbacSchemaBuilder(catalog).build(rbac_config))
        assert models["UserRole"].metadata.primary_key == ("userId", "roleId")
        assert models["RolePermission"].metadata.primary_key == ("roleId", "permissionId")

    def test_role_name_unique_per_tenant(self, catalog, rbac_config):
        single = _by_name(RbacSchemaBuilder(catalog).build(rbac_config))["Role"]
        assert single.metadata.unique_together == ("name",)

        scoped_config = Configuration(rbac=True, multitenant=True)
        scoped = _by_name(RbacSchemaBuilder(catalog).build(scoped_config))["Role"]
        assert scoped.metadata.unique_together == ("name", "tenantId")
        assert scoped.has_field("tenantId")
        assert "tenant" in _relations(scoped)

    def test_tenant_flag_leaves_join_tables_alone(self, catalog, rbac_config):
        plain = _by_name(RbacSchemaBuilder(catalog).build(rbac_config))
        scoped = _by_name(
            RbacSchemaBuilder(catalog).build(Configuration(rbac=True, multitenant=True))
        )
        for name in ("Permission", "UserRole", "RolePermission"):
            assert plain[name] == scoped[name]


class TestTenantSchemaBuilder:
    def test_empty_when_disabled(self, catalog, rbac_config):
        assert TenantSchemaBuilder(catalog).build(rbac_config) == []

    def test_tenant_model(self, catalog, multitenant_config):
        [tenant] = TenantSchemaBuilder(catalog).build(multitenant_config)
        assert tenant.name == "Tenant"
        assert tenant.field_names == ("id", "name", "slug", "domain", "createdAt")
        assert [r.name for r in tenant.metadata.relations] == ["users"]

    def test_tenant_with_rbac_and_whitelabel(self, catalog, full_config):
        [tenant] = TenantSchemaBuilder(catalog).build(full_config)
        assert tenant.has_field("isWhitelabel")
        assert [r.name for r in tenant.metadata.relations] == ["users", "roles"]
