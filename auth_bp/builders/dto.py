"""Builders for data-transfer-object definitions.

Three families of DTOs exist: authentication (always), RBAC (iff ``rbac``)
and tenant (iff ``multitenant``).  Each DTO is described once by a
``DtoSpec`` whose field table references catalog keys only.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..config import Configuration
from ..models import ArtifactDefinition, ArtifactKind, ClassMetadata, Family
from .base import (
    BRANDED,
    MULTITENANT,
    RBAC,
    TENANT_SCOPED,
    WHITELABEL,
    ArtifactBuilder,
    FieldTable,
)


@dataclass(frozen=True)
class DtoSpec:
    """Declarative description of one DTO class."""

    class_name: str
    slug: str
    description: str
    table: FieldTable
    implements: tuple[str, ...] = ()


LOGIN_DTO = DtoSpec(
    class_name="LoginDto",
    slug="login",
    description="Login credentials for user authentication",
    table=FieldTable(
        always=("user-email", "user-password"),
        conditional=TENANT_SCOPED,
    ),
)

REGISTER_DTO = DtoSpec(
    class_name="RegisterDto",
    slug="register",
    description="User registration data with validation",
    table=FieldTable(
        always=("user-email", "user-new-password", "user-first-name", "user-last-name"),
        conditional=BRANDED + TENANT_SCOPED,
    ),
)

REFRESH_TOKEN_DTO = DtoSpec(
    class_name="RefreshTokenDto",
    slug="refresh-token",
    description="Request for token refresh",
    table=FieldTable(always=("refresh-token",)),
)

CREATE_ROLE_DTO = DtoSpec(
    class_name="CreateRoleDto",
    slug="create-role",
    description="Create a new role for RBAC",
    table=FieldTable(
        always=("role-name", "role-description", "permission-identifiers"),
        conditional=TENANT_SCOPED,
    ),
)

ASSIGN_ROLE_DTO = DtoSpec(
    class_name="AssignRoleDto",
    slug="assign-role",
    description="Assign a role to a user",
    table=FieldTable(always=("user-identifier", "role-identifier")),
)

CREATE_TENANT_DTO = DtoSpec(
    class_name="CreateTenantDto",
    slug="create-tenant",
    description="Create a new tenant",
    table=FieldTable(
        always=("tenant-name", "tenant-slug", "tenant-domain"),
        conditional=((WHITELABEL, "tenant-whitelabel"),),
    ),
)


class DtoBuilder(ArtifactBuilder):
    """Builds one definition per ``DtoSpec`` of the family."""

    directory: str
    specs: tuple[DtoSpec, ...] = ()

    def build(
        self,
        config: Configuration,
        prior: Sequence[ArtifactDefinition] = (),
    ) -> list[ArtifactDefinition]:
        if not self.is_active(config):
            return []
        return [self._definition(spec, config) for spec in self.specs]

    def _definition(self, spec: DtoSpec, config: Configuration) -> ArtifactDefinition:
        return ArtifactDefinition(
            name=spec.class_name,
            kind=ArtifactKind.DTO,
            slug=spec.slug,
            description=spec.description,
            fields=spec.table.select(self.catalog, config),
            metadata=ClassMetadata(class_name=spec.class_name, implements=spec.implements),
        )

    def path_for(self, definition: ArtifactDefinition) -> str:
        return f"{self.directory}/{definition.slug}.dto.ts"


class AuthDtoBuilder(DtoBuilder):
    family = Family.AUTHENTICATION
    directory = "src/auth/dto"
    specs = (LOGIN_DTO, REGISTER_DTO, REFRESH_TOKEN_DTO)


class RbacDtoBuilder(DtoBuilder):
    family = Family.RBAC
    directory = "src/rbac/dto"
    specs = (CREATE_ROLE_DTO, ASSIGN_ROLE_DTO)

    def is_active(self, config: Configuration) -> bool:
        return RBAC(config)


class TenantDtoBuilder(DtoBuilder):
    family = Family.TENANT
    directory = "src/tenant/dto"
    specs = (CREATE_TENANT_DTO,)

    def is_active(self, config: Configuration) -> bool:
        return MULTITENANT(config)
