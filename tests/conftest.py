"""Shared pytest fixtures for the auth-bp test suite.

Provides reusable fixtures for:
- Configurations covering every feature flag
- The default field catalog
- A fixed generation timestamp
- Mock subprocess helpers for the Nest CLI wrapper
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from auth_bp.catalog import FieldCatalog, default_catalog
from auth_bp.config import Configuration, DatabaseVariant
from auth_bp.orchestrator import CompositionOrchestrator


FIXED_TIMESTAMP = "2026-01-15T10:30:00+00:00"


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary directory for generated projects (auto-cleanup)."""
    project_dir = tmp_path / "test-project"
    project_dir.mkdir()
    yield project_dir


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------

@pytest.fixture
def minimal_config() -> Configuration:
    """Every flag off, Supabase backend."""
    return Configuration()


@pytest.fixture
def rbac_config() -> Configuration:
    """RBAC only, Supabase backend."""
    return Configuration(database=DatabaseVariant.SUPABASE, rbac=True)


@pytest.fixture
def multitenant_config() -> Configuration:
    return Configuration(multitenant=True)


@pytest.fixture
def full_config() -> Configuration:
    """Every flag on, Cloud SQL backend."""
    return Configuration(
        database=DatabaseVariant.CLOUD_SQL,
        whitelabel=True,
        rbac=True,
        multitenant=True,
    )


@pytest.fixture
def catalog() -> FieldCatalog:
    return default_catalog()


@pytest.fixture
def fixed_timestamp() -> str:
    return FIXED_TIMESTAMP


@pytest.fixture
def render_all():
    """Factory: render every artifact for a configuration as ``{path: content}``."""

    def factory(config: Configuration, generated_at: str = FIXED_TIMESTAMP) -> dict[str, str]:
        artifacts = CompositionOrchestrator(config, generated_at=generated_at).run()
        return {artifact.path: artifact.content for artifact in artifacts}

    return factory


# ---------------------------------------------------------------------------
# Subprocess mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
