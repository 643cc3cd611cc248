"""Builders for relational schema model definitions.

Each model is one ``ModelSpec``: a field table plus relation, key and
uniqueness rules.  Relations and composite keys name catalog keys, not
column names, and are resolved through the catalog so the schema cannot
drift from the DTOs.  Models are written one per file under
``src/database/schema/``; the ``User`` model carries the datasource
preamble.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..config import Configuration
from ..models import (
    ArtifactDefinition,
    ArtifactKind,
    Datasource,
    Family,
    Relation,
    RelationGroup,
    SchemaMetadata,
)
from .base import (
    ALWAYS,
    BRANDED,
    MULTITENANT,
    RBAC,
    TENANT_SCOPED,
    WHITELABEL,
    ArtifactBuilder,
    ConditionalKey,
    FieldTable,
    Predicate,
)

SCHEMA_DIRECTORY = "src/database/schema"


@dataclass(frozen=True)
class RelationRule:
    """A relation included iff *when* holds.

    *field_keys* name the local foreign-key fields by catalog key; the
    referenced side is always the target's ``record-id``.  A to-one relation
    is optional iff any of its foreign-key fields is optional.
    """

    name: str
    target: str
    when: Predicate = ALWAYS
    many: bool = False
    field_keys: tuple[str, ...] = ()
    on_delete: str | None = None


@dataclass(frozen=True)
class ModelSpec:
    model_name: str
    slug: str
    table_name: str
    group: RelationGroup
    description: str
    table: FieldTable
    relations: tuple[RelationRule, ...] = ()
    primary_key: tuple[str, ...] = ()
    unique_together: tuple[ConditionalKey, ...] = ()
    datasource: bool = False


USER_MODEL = ModelSpec(
    model_name="User",
    slug="user",
    table_name="users",
    group=RelationGroup.CORE,
    description="Registered user account",
    table=FieldTable(
        always=(
            "record-id", "user-email", "user-password-hash", "user-first-name",
            "user-last-name", "record-created-at", "record-updated-at",
        ),
        conditional=BRANDED + TENANT_SCOPED,
    ),
    relations=(
        RelationRule("sessions", "Session", many=True),
        RelationRule("roles", "UserRole", when=RBAC, many=True),
        RelationRule(
            "tenant", "Tenant", when=MULTITENANT, field_keys=("tenant-identifier",),
        ),
    ),
    datasource=True,
)

SESSION_MODEL = ModelSpec(
    model_name="Session",
    slug="session",
    table_name="sessions",
    group=RelationGroup.CORE,
    description="Refresh token session issued at login",
    table=FieldTable(
        always=(
            "record-id", "user-identifier", "refresh-token", "session-expires-at",
            "record-created-at",
        ),
    ),
    relations=(
        RelationRule(
            "user", "User", field_keys=("user-identifier",), on_delete="Cascade",
        ),
    ),
)

ROLE_MODEL = ModelSpec(
    model_name="Role",
    slug="role",
    table_name="roles",
    group=RelationGroup.RBAC,
    description="Named collection of permissions",
    table=FieldTable(
        always=("record-id", "role-name", "role-description", "record-created-at"),
        conditional=TENANT_SCOPED,
    ),
    relations=(
        RelationRule("permissions", "RolePermission", many=True),
        RelationRule("users", "UserRole", many=True),
        RelationRule(
            "tenant", "Tenant", when=MULTITENANT, field_keys=("tenant-identifier",),
        ),
    ),
    unique_together=((ALWAYS, "role-name"),) + TENANT_SCOPED,
)

PERMISSION_MODEL = ModelSpec(
    model_name="Permission",
    slug="permission",
    table_name="permissions",
    group=RelationGroup.RBAC,
    description="Fine-grained action, e.g. create:post",
    table=FieldTable(
        always=(
            "record-id", "permission-name", "permission-description",
            "record-created-at",
        ),
    ),
    relations=(RelationRule("roles", "RolePermission", many=True),),
)

USER_ROLE_MODEL = ModelSpec(
    model_name="UserRole",
    slug="user-role",
    table_name="user_roles",
    group=RelationGroup.RBAC,
    description="Assignment of a role to a user",
    table=FieldTable(always=("user-identifier", "role-identifier")),
    relations=(
        RelationRule(
            "user", "User", field_keys=("user-identifier",), on_delete="Cascade",
        ),
        RelationRule(
            "role", "Role", field_keys=("role-identifier",), on_delete="Cascade",
        ),
    ),
    primary_key=("user-identifier", "role-identifier"),
)

ROLE_PERMISSION_MODEL = ModelSpec(
    model_name="RolePermission",
    slug="role-permission",
    table_name="role_permissions",
    group=RelationGroup.RBAC,
    description="Grant of a permission to a role",
    table=FieldTable(always=("role-identifier", "permission-identifier")),
    relations=(
        RelationRule(
            "role", "Role", field_keys=("role-identifier",), on_delete="Cascade",
        ),
        RelationRule(
            "permission", "Permission", field_keys=("permission-identifier",),
            on_delete="Cascade",
        ),
    ),
    primary_key=("role-identifier", "permission-identifier"),
)

TENANT_MODEL = ModelSpec(
    model_name="Tenant",
    slug="tenant",
    table_name="tenants",
    group=RelationGroup.TENANT,
    description="Isolated customer organisation",
    table=FieldTable(
        always=(
            "record-id", "tenant-name", "tenant-slug", "tenant-domain",
            "record-created-at",
        ),
        conditional=((WHITELABEL, "tenant-whitelabel"),),
    ),
    relations=(
        RelationRule("users", "User", many=True),
        RelationRule("roles", "Role", when=RBAC, many=True),
    ),
)


class SchemaBuilder(ArtifactBuilder):
    """Builds one schema-model definition per ``ModelSpec`` of the family."""

    specs: tuple[ModelSpec, ...] = ()

    def build(
        self,
        config: Configuration,
        prior: Sequence[ArtifactDefinition] = (),
    ) -> list[ArtifactDefinition]:
        if not self.is_active(config):
            return []
        return [self._definition(spec, config) for spec in self.specs]

    def _definition(self, spec: ModelSpec, config: Configuration) -> ArtifactDefinition:
        datasource = None
        if spec.datasource:
            datasource = Datasource(backend=config.database.display_name)

        metadata = SchemaMetadata(
            model_name=spec.model_name,
            table_name=spec.table_name,
            group=spec.group,
            relations=tuple(
                self._relation(rule) for rule in spec.relations if rule.when(config)
            ),
            primary_key=self._names(spec.primary_key),
            unique_together=self._names(
                key for predicate, key in spec.unique_together if predicate(config)
            ),
            datasource=datasource,
        )
        return ArtifactDefinition(
            name=spec.model_name,
            kind=ArtifactKind.SCHEMA_MODEL,
            slug=spec.slug,
            description=spec.description,
            fields=spec.table.select(self.catalog, config),
            metadata=metadata,
        )

    def _relation(self, rule: RelationRule) -> Relation:
        if rule.many:
            return Relation(name=rule.name, target=rule.target, many=True)
        local = [self.catalog.resolve(key) for key in rule.field_keys]
        return Relation(
            name=rule.name,
            target=rule.target,
            optional=any(field.optional for field in local),
            fields=tuple(field.name for field in local),
            references=self._names(["record-id"] * len(local)),
            on_delete=rule.on_delete,
        )

    def _names(self, keys) -> tuple[str, ...]:
        return tuple(self.catalog.resolve(key).name for key in keys)

    def path_for(self, definition: ArtifactDefinition) -> str:
        return f"{SCHEMA_DIRECTORY}/{definition.slug}.prisma"


class CoreSchemaBuilder(SchemaBuilder):
    family = Family.SCHEMA
    specs = (USER_MODEL, SESSION_MODEL)


class RbacSchemaBuilder(SchemaBuilder):
    family = Family.RBAC
    specs = (ROLE_MODEL, PERMISSION_MODEL, USER_ROLE_MODEL, ROLE_PERMISSION_MODEL)

    def is_active(self, config: Configuration) -> bool:
        return RBAC(config)


class TenantSchemaBuilder(SchemaBuilder):
    family = Family.TENANT
    specs = (TENANT_MODEL,)

    def is_active(self, config: Configuration) -> bool:
        return MULTITENANT(config)
