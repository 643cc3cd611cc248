"""Builder for the ``.context.md`` pages.

The pages document the generated code for developers and coding assistants.
They describe structural definitions built earlier in the run (passed in as
*prior*) instead of restating their fields, so a DTO and its documentation
cannot disagree.  Conditional prose uses the same predicates as the fields.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..config import Configuration
from ..models import (
    ArtifactDefinition,
    ArtifactKind,
    DefinitionSummary,
    DocSection,
    DocumentMetadata,
    Family,
)
from .base import (
    ALWAYS,
    MULTITENANT,
    RBAC,
    TENANT_SCOPED,
    WHITELABEL,
    ArtifactBuilder,
    FieldTable,
    pick,
)

ROOT_PAGE = "root"

# Claims carried by the access token.
TOKEN_CLAIMS = FieldTable(
    always=("claim-subject", "user-email", "claim-issued-at", "claim-expires-at"),
    conditional=((RBAC, "claim-roles"),) + TENANT_SCOPED,
)

AUTH_DTOS = ("LoginDto", "RegisterDto", "RefreshTokenDto")
CORE_MODELS = ("User", "Session")
RBAC_DTOS = ("CreateRoleDto", "AssignRoleDto")
RBAC_MODELS = ("Role", "Permission", "UserRole", "RolePermission")
TENANT_DTOS = ("CreateTenantDto",)
TENANT_MODELS = ("Tenant",)


def _summaries(
    prior: Sequence[ArtifactDefinition], names: Sequence[str]
) -> tuple[DefinitionSummary, ...]:
    """Summaries of the prior definitions called *names*, in *names* order."""
    by_name = {definition.name: definition for definition in prior}
    return tuple(by_name[name].summary() for name in names if name in by_name)


def _configuration_applied(config: Configuration) -> DocSection:
    return DocSection(
        title="Configuration Applied",
        bullets=tuple(f"{key}: {value}" for key, value in config.summary().items()),
    )


class DocumentationBuilder(ArtifactBuilder):
    """Builds the root page and one page per enabled module.

    Args:
        catalog: Field catalog used for the token claims.
        generated_at: ISO timestamp stamped into every page, or ``None`` to
            leave pages unstamped.  Supplied by the caller so that building
            stays free of clock reads.
    """

    family = Family.DOCUMENTATION

    def __init__(self, catalog, generated_at: str | None = None) -> None:
        super().__init__(catalog)
        self.generated_at = generated_at

    def build(
        self,
        config: Configuration,
        prior: Sequence[ArtifactDefinition] = (),
    ) -> list[ArtifactDefinition]:
        claims = TOKEN_CLAIMS.select(self.catalog, config)
        pages = [
            self._page(
                ROOT_PAGE,
                "Authentication Boilerplate - NestJS Backend",
                "Project-wide context for the generated authentication backend",
                self._root_sections(config, prior),
                claims,
            ),
            self._page(
                "auth",
                "Auth Module Context",
                "Authentication module: registration, login and token handling",
                self._auth_sections(config, prior),
            ),
        ]
        if RBAC(config):
            pages.append(self._page(
                "rbac",
                "RBAC (Role-Based Access Control) Module Context",
                "Roles, permissions and route protection",
                self._rbac_sections(config, prior),
                claims,
            ))
        if MULTITENANT(config):
            pages.append(self._page(
                "tenant",
                "Tenant Module Context (Multitenant Architecture)",
                "Tenant isolation and management",
                self._tenant_sections(config, prior),
            ))
        return pages

    def path_for(self, definition: ArtifactDefinition) -> str:
        if definition.slug == ROOT_PAGE:
            return "src/.context.md"
        return f"src/{definition.slug}/.context.md"

    def _page(self, slug, title, description, sections, fields=()) -> ArtifactDefinition:
        return ArtifactDefinition(
            name=f"{slug.capitalize()}Context",
            kind=ArtifactKind.DOCUMENTATION,
            slug=slug,
            description=description,
            fields=tuple(fields),
            metadata=DocumentMetadata(
                title=title,
                generated_at=self.generated_at,
                sections=tuple(sections),
            ),
        )

    # ------------------------------------------------------------------
    # Root page
    # ------------------------------------------------------------------

    def _root_sections(self, config, prior) -> list[DocSection]:
        sections = [
            DocSection(
                title="Project Overview",
                paragraphs=(
                    "This is a production-ready authentication system "
                    "scaffolded by the auth-bp generator.",
                ),
            ),
            DocSection(
                title="Configuration Summary",
                bullets=tuple(f"{k}: {v}" for k, v in config.summary().items()),
            ),
            DocSection(
                title="Module Structure",
                bullets=pick(config, (
                    (ALWAYS, "src/auth/ - Authentication logic (JWT, guards, controllers)"),
                    (ALWAYS, "src/database/ - Database setup, schema models and migrations"),
                    (RBAC, "src/rbac/ - Role-based access control"),
                    (MULTITENANT, "src/tenant/ - Multitenant management"),
                )),
            ),
            DocSection(
                title="Getting Started",
                numbered=True,
                bullets=(
                    "npm install",
                    "cp .env.example .env.local",
                    "Configure .env.local with database credentials",
                    "npx prisma migrate dev",
                    "npm run dev",
                ),
            ),
            DocSection(title="Key Concepts"),
            DocSection(
                title="JWT Token Structure",
                level=3,
                paragraphs=("Access tokens carry the following claims:",),
                include_fields=True,
            ),
            DocSection(
                title="Request Authentication",
                level=3,
                paragraphs=("All protected endpoints require a Bearer token:",),
                code=("Authorization: Bearer <access-token>",),
            ),
        ]
        if MULTITENANT(config):
            sections.append(DocSection(
                title="Tenant Identification",
                level=3,
                paragraphs=("Specify the tenant via:",),
                numbered=True,
                bullets=pick(config, (
                    (ALWAYS, "JWT claim (preferred) - automatically from login"),
                    (ALWAYS, "Header - X-Tenant-ID: <tenant-id>"),
                    (WHITELABEL, 'Subdomain - acme.example.com routes to tenant with slug "acme"'),
                )),
            ))
        sections += [
            DocSection(
                title="Data Validation",
                paragraphs=(
                    "All request bodies are validated using DTOs with class-validator.",
                    "Invalid requests return 400 with error details.",
                ),
            ),
            DocSection(
                title="Schema Models",
                paragraphs=(
                    "Prisma models live in src/database/schema/, one file per model.",
                ),
                references=_summaries(
                    prior, CORE_MODELS + RBAC_MODELS + TENANT_MODELS
                ),
            ),
            DocSection(
                title="Security Features",
                bullets=pick(config, (
                    (ALWAYS, "Password hashing with bcrypt (salt rounds >= 10)"),
                    (ALWAYS, "JWT signing with secret key"),
                    (ALWAYS, "Short-lived access tokens + refresh token rotation"),
                    (ALWAYS, "Strict DTO validation (SQL injection prevention)"),
                    (RBAC, "Role-based route protection"),
                    (MULTITENANT, "Tenant-scoped database queries"),
                    (MULTITENANT, "Cross-tenant access prevention"),
                )),
            ),
            DocSection(
                title="See Also",
                bullets=pick(config, (
                    (ALWAYS, "src/auth/.context.md - Authentication module details"),
                    (RBAC, "src/rbac/.context.md - RBAC implementation"),
                    (MULTITENANT, "src/tenant/.context.md - Multitenancy patterns"),
                )),
            ),
        ]
        return sections

    # ------------------------------------------------------------------
    # Module pages
    # ------------------------------------------------------------------

    def _auth_sections(self, config, prior) -> list[DocSection]:
        if MULTITENANT(config):
            tenancy = DocSection(
                title="Multitenant-Aware Authentication",
                level=3,
                bullets=(
                    "All login requests are validated against the current tenant context",
                    "User-tenant association is enforced at the database level",
                    "JWT tokens include the tenant identifier for request routing",
                ),
            )
        else:
            tenancy = DocSection(
                title="Single-Tenant Authentication",
                level=3,
                bullets=(
                    "Standard JWT-based authentication flow",
                    "No tenant isolation in this deployment",
                ),
            )
        if RBAC(config):
            access = DocSection(
                title="Role-Based Access Control Integration",
                level=3,
                bullets=(
                    "User roles are included in the JWT payload",
                    "Guards check role-based permissions on protected routes",
                    "Roles are tenant-scoped if multitenant is enabled",
                ),
            )
        else:
            access = DocSection(
                title="Simple Access Control",
                level=3,
                bullets=(
                    "Basic authenticated vs. unauthenticated access",
                    "No role-based permission system",
                ),
            )

        return [
            DocSection(
                title="Module Purpose",
                paragraphs=("This module handles all authentication logic including:",),
                bullets=(
                    "User registration and login",
                    "JWT token generation and validation",
                    "Refresh token management",
                    "Password hashing and verification",
                ),
            ),
            DocSection(title="Architecture Overview"),
            tenancy,
            access,
            DocSection(
                title="Data Transfer Objects (DTOs)",
                paragraphs=(
                    "All DTOs use class-validator for strict validation. "
                    "The ValidationPipe is configured globally.",
                ),
                references=_summaries(prior, AUTH_DTOS),
            ),
            DocSection(
                title="Password Validation",
                bullets=(
                    "Minimum 8 characters",
                    "Must contain uppercase and lowercase letters, numbers and "
                    "special characters",
                    "Enforced by the @IsStrongPassword() decorator on registration",
                    "Always hash before storing (bcryptjs)",
                ),
            ),
            DocSection(
                title="Dependencies",
                bullets=(
                    "@nestjs/jwt - JWT token generation",
                    "@nestjs/passport - Strategy-based authentication",
                    "passport-jwt - JWT passport strategy",
                    "class-validator - DTO validation",
                    "class-transformer - DTO transformation",
                    "bcryptjs - Password hashing",
                ),
            ),
            DocSection(
                title="Exports",
                bullets=pick(config, (
                    (ALWAYS, "AuthService - Core authentication logic"),
                    (ALWAYS, "JwtStrategy - JWT passport strategy"),
                    (ALWAYS, "AuthGuard - JWT authentication guard"),
                    (RBAC, "RbacGuard - Role-based access guard"),
                    (RBAC, "Roles decorator - Mark routes with required roles"),
                )),
            ),
            DocSection(
                title="Security Considerations",
                bullets=(
                    "Never return the password hash in responses",
                    "Use bcryptjs with salt rounds >= 10",
                    "Implement the password reset flow separately",
                    "Store refresh tokens in the database for revocation",
                    "Validate token expiration on every request",
                ),
            ),
            _configuration_applied(config),
        ]

    def _rbac_sections(self, config, prior) -> list[DocSection]:
        return [
            DocSection(
                title="Module Purpose",
                paragraphs=(
                    "Implements fine-grained access control through roles and permissions:",
                ),
                bullets=(
                    "Define roles (Admin, User, Moderator, etc.)",
                    "Assign permissions to roles (create:post, read:post, delete:post, etc.)",
                    "Assign roles to users",
                    "Enforce permissions on protected routes",
                ),
            ),
            DocSection(
                title="Three-Tier Permission Model",
                numbered=True,
                bullets=(
                    "A user can have multiple roles",
                    "A role can have multiple permissions",
                    "A permission defines what can be done (create, read, update, delete)",
                ),
            ),
            DocSection(
                title="Data Transfer Objects (DTOs)",
                references=_summaries(prior, RBAC_DTOS),
            ),
            DocSection(
                title="Schema Models",
                references=_summaries(prior, RBAC_MODELS),
            ),
            DocSection(
                title="Decorators",
                paragraphs=("Use on controller methods to restrict access by role:",),
                code=(
                    "@Roles('admin')",
                    "@UseGuards(AuthGuard, RbacGuard)",
                ),
            ),
            DocSection(
                title="JWT Payload Integration",
                paragraphs=("When RBAC is enabled, access tokens include the user's roles:",),
                include_fields=True,
            ),
            DocSection(
                title="Security Best Practices",
                numbered=True,
                bullets=(
                    "Always validate roles on protected routes",
                    "Assign minimum required roles (Principle of Least Privilege)",
                    "Log role assignments and changes (Audit Logging)",
                    "Separate operational and administrative roles",
                    "Default deny - deny access unless explicitly allowed",
                ),
            ),
            _configuration_applied(config),
        ]

    def _tenant_sections(self, config, prior) -> list[DocSection]:
        return [
            DocSection(
                title="Module Purpose",
                paragraphs=("Manages tenant isolation and multitenancy:",),
                bullets=pick(config, (
                    (ALWAYS, "Create and manage separate tenants (customers/organizations)"),
                    (ALWAYS, "Isolate user data per tenant"),
                    (WHITELABEL, "Support whitelabel branding per tenant"),
                    (ALWAYS, "Handle tenant-specific database queries"),
                )),
            ),
            DocSection(
                title="Database-Level Isolation",
                paragraphs=("Tenant-owned tables carry a tenantId column:",),
                bullets=pick(config, (
                    (ALWAYS, "Users are scoped to tenants"),
                    (RBAC, "Roles are scoped to tenants"),
                    (ALWAYS, "All queries are filtered by WHERE tenantId = ?"),
                )),
            ),
            DocSection(
                title="Request-Level Isolation",
                paragraphs=("The tenant ID is extracted from:",),
                numbered=True,
                bullets=pick(config, (
                    (ALWAYS, "JWT token (tenantId claim)"),
                    (ALWAYS, "Request header (X-Tenant-ID)"),
                    (WHITELABEL, "Request subdomain (whitelabel domain routing)"),
                )),
            ),
            DocSection(
                title="Data Transfer Objects (DTOs)",
                references=_summaries(prior, TENANT_DTOS),
            ),
            DocSection(
                title="Schema Models",
                references=_summaries(prior, TENANT_MODELS),
            ),
            DocSection(
                title="CRITICAL: Data Isolation Rules",
                paragraphs=(
                    "WRONG - this queries all users and violates tenant isolation:",
                ),
                code=(
                    "const users = await db.user.findMany();",
                    "",
                    "// CORRECT - always filter by tenantId:",
                    "const users = await db.user.findMany({",
                    "  where: { tenantId: currentTenantId },",
                    "});",
                ),
            ),
            DocSection(
                title="Security Best Practices",
                numbered=True,
                bullets=pick(config, (
                    (ALWAYS, "ALWAYS include tenantId in WHERE clauses"),
                    (ALWAYS, "NEVER query data without tenant filtering"),
                    (ALWAYS, "Validate tenant ownership before operations"),
                    (ALWAYS, "Keep the JWT tenantId in sync with actual associations"),
                    (ALWAYS, "Test that cross-tenant access is properly blocked"),
                    (WHITELABEL, "Verify domain-to-tenant mapping for whitelabel"),
                )),
            ),
            _configuration_applied(config),
        ]
