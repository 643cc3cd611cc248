"""Composition orchestrator.

Sequences the artifact families for one configuration, calls their builders
and renderers, and owns the run state machine::

    IDLE -> PLANNING -> BUILDING -> RENDERING -> DONE
                 \\          \\           \\
                  +----------+-----------+--> FAILED

A run is all-or-nothing: any failure aborts it with a ``CompositionError``
chained to the original exception, and no partial artifact list escapes.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import NoReturn

from .builders import (
    ALWAYS,
    MULTITENANT,
    RBAC,
    ArtifactBuilder,
    AuthDtoBuilder,
    CoreSchemaBuilder,
    DocumentationBuilder,
    EnvironmentBuilder,
    Predicate,
    RbacDtoBuilder,
    RbacSchemaBuilder,
    TenantDtoBuilder,
    TenantSchemaBuilder,
)
from .catalog import FieldCatalog, default_catalog
from .config import Configuration
from .errors import CompositionError
from .models import (
    ArtifactDefinition,
    Family,
    GenerationPlan,
    PlanEntry,
    RenderedArtifact,
)
from .renderers import RendererRegistry


class RunState(str, Enum):
    IDLE = "idle"
    PLANNING = "planning"
    BUILDING = "building"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class FamilyStep:
    """A family, the predicate that activates it, and its builders."""

    family: Family
    when: Predicate
    builders: tuple[ArtifactBuilder, ...]


class CompositionOrchestrator:
    """Turns one configuration into an ordered list of rendered artifacts.

    Args:
        config: Feature flags for the run.
        generated_at: Timestamp stamped into documentation pages.  Pass the
            manifest timestamp to reproduce an earlier run byte for byte.
        catalog: Field catalog; defaults to :func:`default_catalog`.
        renderers: Renderer registry; defaults to the built-in renderers.
    """

    def __init__(
        self,
        config: Configuration,
        generated_at: str | None = None,
        catalog: FieldCatalog | None = None,
        renderers: RendererRegistry | None = None,
    ) -> None:
        self.config = config
        self.generated_at = generated_at
        self.catalog = catalog or default_catalog()
        self.renderers = renderers or RendererRegistry()
        self.state = RunState.IDLE
        self.history: list[RunState] = [RunState.IDLE]

    def steps(self) -> tuple[FamilyStep, ...]:
        """Every family in build order, active or not."""
        catalog = self.catalog
        return (
            FamilyStep(Family.AUTHENTICATION, ALWAYS, (AuthDtoBuilder(catalog),)),
            FamilyStep(Family.SCHEMA, ALWAYS, (CoreSchemaBuilder(catalog),)),
            FamilyStep(
                Family.RBAC, RBAC, (RbacDtoBuilder(catalog), RbacSchemaBuilder(catalog))
            ),
            FamilyStep(
                Family.TENANT,
                MULTITENANT,
                (TenantDtoBuilder(catalog), TenantSchemaBuilder(catalog)),
            ),
            FamilyStep(Family.ENVIRONMENT, ALWAYS, (EnvironmentBuilder(catalog),)),
            FamilyStep(
                Family.DOCUMENTATION,
                ALWAYS,
                (DocumentationBuilder(catalog, generated_at=self.generated_at),),
            ),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def plan(self) -> GenerationPlan:
        """Select the active families and build their definitions.

        Raises:
            CompositionError: If a builder fails or two entries share a path.
        """
        self.history = [RunState.IDLE]
        self._enter(RunState.PLANNING)
        try:
            active = [step for step in self.steps() if step.when(self.config)]
        except Exception as exc:
            self._fail(None, exc)

        self._enter(RunState.BUILDING)
        entries: list[PlanEntry] = []
        for step in active:
            entries.extend(self._build_family(step, entries))

        seen: set[str] = set()
        for entry in entries:
            if entry.path in seen:
                self._fail(
                    entry.family, ValueError(f"duplicate artifact path {entry.path!r}")
                )
            seen.add(entry.path)
        return GenerationPlan(entries=tuple(entries))

    def run(self) -> list[RenderedArtifact]:
        """Plan, then render every entry in plan order.

        Raises:
            CompositionError: On any builder or renderer failure.
        """
        plan = self.plan()
        self._enter(RunState.RENDERING)
        rendered: list[RenderedArtifact] = []
        for entry in plan.entries:
            try:
                content = self.renderers.render(entry.definition)
            except Exception as exc:
                self._fail(entry.family, exc)
            rendered.append(
                RenderedArtifact(
                    path=entry.path,
                    content=content,
                    kind=entry.kind,
                    family=entry.family,
                )
            )
        self._enter(RunState.DONE)
        return rendered

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build_family(
        self, step: FamilyStep, prior_entries: Sequence[PlanEntry]
    ) -> list[PlanEntry]:
        prior: list[ArtifactDefinition] = [e.definition for e in prior_entries]
        entries: list[PlanEntry] = []
        for builder in step.builders:
            try:
                definitions = builder.build(self.config, prior)
                for definition in definitions:
                    entries.append(
                        PlanEntry(
                            path=builder.path_for(definition),
                            kind=definition.kind,
                            family=step.family,
                            definition=definition,
                        )
                    )
            except Exception as exc:
                self._fail(step.family, exc)
        return entries

    def _enter(self, state: RunState) -> None:
        self.state = state
        self.history.append(state)

    def _fail(self, family: Family | None, exc: Exception) -> NoReturn:
        stage = self.state
        self._enter(RunState.FAILED)
        raise CompositionError(
            stage.value, family.value if family else None, str(exc)
        ) from exc


def compose(
    config: Configuration, generated_at: str | None = None
) -> list[RenderedArtifact]:
    """Render every artifact for *config* with the default catalog."""
    return CompositionOrchestrator(config, generated_at=generated_at).run()
