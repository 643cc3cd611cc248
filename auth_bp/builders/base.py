"""Table-driven field selection shared by every builder.

A field is included in an artifact iff its predicate holds on the
configuration.  The predicates and the shared conditional tables below are
the only place where a flag is tied to a field, so every artifact family that
uses e.g. ``TENANT_SCOPED`` changes in lockstep when ``multitenant`` flips.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..catalog import FieldCatalog
from ..config import Configuration, DatabaseVariant
from ..models import ArtifactDefinition, FieldDescriptor, Family


@dataclass(frozen=True)
class Predicate:
    """A named boolean test over the configuration."""

    name: str
    test: Callable[[Configuration], bool]

    def __call__(self, config: Configuration) -> bool:
        return self.test(config)

    def __repr__(self) -> str:
        return f"Predicate({self.name})"


ALWAYS = Predicate("always", lambda config: True)
WHITELABEL = Predicate("whitelabel", lambda config: config.whitelabel)
RBAC = Predicate("rbac", lambda config: config.rbac)
MULTITENANT = Predicate("multitenant", lambda config: config.multitenant)
SUPABASE = Predicate(
    "supabase", lambda config: config.database is DatabaseVariant.SUPABASE
)
CLOUD_SQL = Predicate(
    "gcloud-sql", lambda config: config.database is DatabaseVariant.CLOUD_SQL
)

ConditionalKey = tuple[Predicate, str]

# Shared conditional tables.  Builders splice these in verbatim.
TENANT_SCOPED: tuple[ConditionalKey, ...] = ((MULTITENANT, "tenant-identifier"),)
BRANDED: tuple[ConditionalKey, ...] = (
    (WHITELABEL, "brand-identifier"),
    (WHITELABEL, "theme-preference"),
)


@dataclass(frozen=True)
class FieldTable:
    """Fixed ``always`` keys followed by ``(predicate, key)`` pairs."""

    always: tuple[str, ...] = ()
    conditional: tuple[ConditionalKey, ...] = ()

    def keys(self, config: Configuration) -> list[str]:
        """Catalog keys that apply under *config*, in table order."""
        return [*self.always, *(key for predicate, key in self.conditional if predicate(config))]

    def select(
        self, catalog: FieldCatalog, config: Configuration
    ) -> tuple[FieldDescriptor, ...]:
        return tuple(catalog.resolve(key) for key in self.keys(config))


def pick(config: Configuration, items: Sequence[tuple[Predicate, str]]) -> tuple[str, ...]:
    """Keep the items whose predicate holds, preserving order."""
    return tuple(value for predicate, value in items if predicate(config))


class ArtifactBuilder:
    """Base class for artifact definition builders.

    Subclasses set ``family`` and implement :meth:`build` and
    :meth:`path_for`.  Builders are pure: they read nothing but the
    configuration, the catalog and the definitions passed in as *prior*.
    """

    family: Family

    def __init__(self, catalog: FieldCatalog) -> None:
        self.catalog = catalog

    def is_active(self, config: Configuration) -> bool:
        return True

    def build(
        self,
        config: Configuration,
        prior: Sequence[ArtifactDefinition] = (),
    ) -> list[ArtifactDefinition]:
        raise NotImplementedError

    def path_for(self, definition: ArtifactDefinition) -> str:
        raise NotImplementedError
