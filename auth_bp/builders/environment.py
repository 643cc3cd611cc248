"""Builder for the ``.env.example`` template."""

from __future__ import annotations

from collections.abc import Sequence

from ..config import Configuration
from ..models import (
    ArtifactDefinition,
    ArtifactKind,
    EnvironmentGroup,
    EnvironmentMetadata,
    Family,
)
from .base import CLOUD_SQL, SUPABASE, ArtifactBuilder, FieldTable

ENVIRONMENT_PATH = ".env.example"

# (group title, field table), in output order.
ENVIRONMENT_GROUPS: tuple[tuple[str, FieldTable], ...] = (
    ("Database Configuration", FieldTable(
        conditional=(
            (SUPABASE, "env-database-url-supabase"),
            (CLOUD_SQL, "env-database-url-cloud-sql"),
        ),
    )),
    ("JWT Configuration", FieldTable(
        always=("env-jwt-secret", "env-jwt-expiration"),
    )),
    ("Application", FieldTable(always=("env-node-env", "env-port"))),
)


class EnvironmentBuilder(ArtifactBuilder):
    """Builds the environment template: placeholder values only, never secrets."""

    family = Family.ENVIRONMENT

    def build(
        self,
        config: Configuration,
        prior: Sequence[ArtifactDefinition] = (),
    ) -> list[ArtifactDefinition]:
        fields = []
        groups = []
        for title, table in ENVIRONMENT_GROUPS:
            selected = table.select(self.catalog, config)
            fields.extend(selected)
            groups.append(
                EnvironmentGroup(title=title, keys=tuple(f.name for f in selected))
            )

        definition = ArtifactDefinition(
            name="EnvironmentTemplate",
            kind=ArtifactKind.ENVIRONMENT,
            slug=".env",
            description=(
                f"Environment variables for the {config.database.display_name} backend"
            ),
            fields=tuple(fields),
            metadata=EnvironmentMetadata(groups=tuple(groups)),
        )
        return [definition]

    def path_for(self, definition: ArtifactDefinition) -> str:
        return ENVIRONMENT_PATH
