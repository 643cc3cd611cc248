"""auth-bp configuration.

The ``Configuration`` model is the closed set of feature flags that drives a
generation run.  It is immutable once constructed and is passed explicitly to
every builder.  The ``Manifest`` is the persisted record of the configuration
used for a run, and ``RunSettings`` holds the knobs of the surrounding
pipeline (output directory, Nest CLI usage) that never influence artifact
content.
"""

from __future__ import annotations

import os
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError

from .errors import ConfigurationError
from .utils import load_json, save_json

MANIFEST_FILENAME = ".auth-bp-config.json"
MANIFEST_VERSION = "1.0.0"


class DatabaseVariant(str, Enum):
    """Supported database backends."""

    SUPABASE = "supabase"
    CLOUD_SQL = "gcloud-sql"

    @property
    def display_name(self) -> str:
        if self is DatabaseVariant.SUPABASE:
            return "Supabase PostgreSQL"
        return "Google Cloud SQL PostgreSQL"


# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class Configuration(BaseModel):
    """Feature flags for one generation run.

    Flags are strict booleans: ``"yes"`` or ``1`` are rejected rather than
    coerced, so an unsupported value can never be defaulted silently.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    database: DatabaseVariant = Field(
        default=DatabaseVariant.SUPABASE, description="Database backend"
    )
    whitelabel: StrictBool = Field(default=False, description="Whitelabel branding support")
    rbac: StrictBool = Field(default=False, description="Role-based access control")
    multitenant: StrictBool = Field(default=False, description="Multitenant isolation")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "Configuration":
        """Validate a raw mapping into a ``Configuration``.

        Raises:
            ConfigurationError: naming the first offending field.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "configuration"
            raise ConfigurationError(field, first["msg"]) from exc

    def summary(self) -> dict[str, str]:
        """Human-readable flag summary used by the CLI."""

        def _flag(value: bool) -> str:
            return "Enabled" if value else "Disabled"

        return {
            "Database": self.database.display_name,
            "Whitelabel": _flag(self.whitelabel),
            "RBAC": _flag(self.rbac),
            "Multitenant": _flag(self.multitenant),
        }


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


class BackendSection(BaseModel):
    """The ``backend`` block of the manifest."""

    framework: Literal["nestjs"] = "nestjs"
    database: DatabaseVariant
    whitelabel: StrictBool
    rbac: StrictBool
    multitenant: StrictBool


class Manifest(BaseModel):
    """Persisted record of the configuration used for a run."""

    version: str = Field(default=MANIFEST_VERSION)
    timestamp: str = Field(..., description="ISO-8601 time of the run")
    backend: BackendSection

    @classmethod
    def from_configuration(
        cls, config: Configuration, timestamp: datetime | str
    ) -> "Manifest":
        stamp = timestamp.isoformat() if isinstance(timestamp, datetime) else timestamp
        return cls(
            timestamp=stamp,
            backend=BackendSection(
                database=config.database,
                whitelabel=config.whitelabel,
                rbac=config.rbac,
                multitenant=config.multitenant,
            ),
        )

    def configuration(self) -> Configuration:
        """Recover the exact ``Configuration`` recorded in this manifest."""
        return Configuration(
            database=self.backend.database,
            whitelabel=self.backend.whitelabel,
            rbac=self.backend.rbac,
            multitenant=self.backend.multitenant,
        )


async def save_manifest(project_root: str | Path, manifest: Manifest) -> Path:
    """Write *manifest* to ``<project_root>/.auth-bp-config.json``."""
    target = Path(project_root) / MANIFEST_FILENAME
    await save_json(manifest.model_dump(mode="json"), target)
    return target


def load_manifest(project_root: str | Path) -> Manifest | None:
    """Load the manifest of a previous run.

    Returns:
        The manifest, or ``None`` when no manifest exists.

    Raises:
        ConfigurationError: If the file exists but is not a valid manifest.
    """
    path = Path(project_root) / MANIFEST_FILENAME
    if not path.exists():
        return None
    try:
        data = load_json(path)
    except ValueError as exc:
        raise ConfigurationError("manifest", f"{path} is not valid UTF-8 JSON") from exc
    try:
        return Manifest.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ConfigurationError(f"manifest.{field}", first["msg"]) from exc


# ---------------------------------------------------------------------------
# Pipeline settings
# ---------------------------------------------------------------------------


class RunSettings(BaseModel):
    """Settings of the surrounding pipeline.

    None of these influence artifact content; they only control where and how
    the artifacts are materialized.
    """

    output_dir: Path = Field(default=Path("."))
    scaffold: bool = Field(
        default=False, description="Invoke the Nest CLI for module boilerplate"
    )
    nest_timeout: int = Field(default=120, ge=10, description="Per-command timeout in seconds")

    @property
    def manifest_path(self) -> Path:
        return self.output_dir / MANIFEST_FILENAME

    @classmethod
    def from_env(cls) -> "RunSettings":
        """Build ``RunSettings`` from environment variables.

        Recognised variables (all optional):
            AUTH_BP_OUTPUT_DIR, AUTH_BP_SCAFFOLD, AUTH_BP_NEST_TIMEOUT.

        Raises:
            ConfigurationError: If AUTH_BP_NEST_TIMEOUT is not a whole number
                of seconds or is below the minimum.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("AUTH_BP_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["AUTH_BP_OUTPUT_DIR"])
        if os.environ.get("AUTH_BP_SCAFFOLD"):
            kwargs["scaffold"] = os.environ["AUTH_BP_SCAFFOLD"].strip().lower() in (
                "1",
                "true",
                "yes",
            )
        if os.environ.get("AUTH_BP_NEST_TIMEOUT"):
            raw = os.environ["AUTH_BP_NEST_TIMEOUT"]
            try:
                kwargs["nest_timeout"] = int(raw)
            except ValueError as exc:
                raise ConfigurationError(
                    "AUTH_BP_NEST_TIMEOUT", f"expected whole seconds, got {raw!r}"
                ) from exc
        try:
            return cls(**kwargs)
        except ValidationError as exc:
            # Only the timeout carries a constraint.
            raise ConfigurationError(
                "AUTH_BP_NEST_TIMEOUT", exc.errors()[0]["msg"]
            ) from exc
