"""Unit tests for the configuration models (auth_bp.config).

Tests cover:
- Configuration defaults, immutability, strict flag validation
- Configuration.from_mapping error reporting
- Manifest construction, save/load round-trip, corrupt manifests
- RunSettings defaults and from_env
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from auth_bp.config import (
    MANIFEST_FILENAME,
    MANIFEST_VERSION,
    Configuration,
    DatabaseVariant,
    Manifest,
    RunSettings,
    load_manifest,
    save_manifest,
)
from auth_bp.errors import ConfigurationError


pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestConfiguration:
    def test_defaults(self):
        config = Configuration()
        assert config.database is DatabaseVariant.SUPABASE
        assert config.whitelabel is False
        assert config.rbac is False
        assert config.multitenant is False

    def test_is_frozen(self):
        config = Configuration()
        with pytest.raises(ValidationError):
            config.rbac = True

    def test_database_from_string(self):
        config = Configuration(database="gcloud-sql")
        assert config.database is DatabaseVariant.CLOUD_SQL

    def test_unknown_database_rejected(self):
        with pytest.raises(ValidationError):
            Configuration(database="mysql")

    def test_non_boolean_flag_rejected(self):
        with pytest.raises(ValidationError):
            Configuration(rbac="yes")

    def test_unknown_flag_rejected(self):
        with pytest.raises(ValidationError):
            Configuration(sso=True)

    def test_summary(self):
        config = Configuration(database=DatabaseVariant.CLOUD_SQL, rbac=True)
        assert config.summary() == {
            "Database": "Google Cloud SQL PostgreSQL",
            "Whitelabel": "Disabled",
            "RBAC": "Enabled",
            "Multitenant": "Disabled",
        }

    def test_display_names(self):
        assert DatabaseVariant.SUPABASE.display_name == "Supabase PostgreSQL"
        assert DatabaseVariant.CLOUD_SQL.display_name == "Google Cloud SQL PostgreSQL"


class TestFromMapping:
    def test_valid_mapping(self):
        config = Configuration.from_mapping(
            {"database": "supabase", "whitelabel": True, "rbac": False, "multitenant": True}
        )
        assert config.whitelabel is True
        assert config.multitenant is True

    def test_missing_keys_use_defaults(self):
        assert Configuration.from_mapping({}) == Configuration()

    def test_bad_database_names_field(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Configuration.from_mapping({"database": "oracle"})
        assert exc_info.value.field == "database"
        assert "database" in str(exc_info.value)

    def test_bad_flag_names_field(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Configuration.from_mapping({"multitenant": "maybe"})
        assert exc_info.value.field == "multitenant"

    def test_chained_to_validation_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Configuration.from_mapping({"rbac": 1})
        assert isinstance(exc_info.value.__cause__, ValidationError)


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


class TestManifest:
    def test_from_configuration(self, full_config):
        manifest = Manifest.from_configuration(full_config, "2026-01-15T10:30:00+00:00")
        assert manifest.version == MANIFEST_VERSION
        assert manifest.timestamp == "2026-01-15T10:30:00+00:00"
        assert manifest.backend.framework == "nestjs"
        assert manifest.backend.database is DatabaseVariant.CLOUD_SQL
        assert manifest.backend.rbac is True

    def test_datetime_timestamp_is_iso(self, minimal_config):
        stamp = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
        manifest = Manifest.from_configuration(minimal_config, stamp)
        assert manifest.timestamp == "2026-03-01T12:00:00+00:00"

    def test_configuration_roundtrip(self, full_config):
        manifest = Manifest.from_configuration(full_config, "t")
        assert manifest.configuration() == full_config


class TestManifestPersistence:
    async def test_save_writes_json(self, tmp_path: Path, rbac_config):
        manifest = Manifest.from_configuration(rbac_config, "2026-01-15T10:30:00+00:00")
        path = await save_manifest(tmp_path, manifest)

        assert path == tmp_path / MANIFEST_FILENAME
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {
            "version": "1.0.0",
            "timestamp": "2026-01-15T10:30:00+00:00",
            "backend": {
                "framework": "nestjs",
                "database": "supabase",
                "whitelabel": False,
                "rbac": True,
                "multitenant": False,
            },
        }

    async def test_load_roundtrip(self, tmp_path: Path, full_config):
        original = Manifest.from_configuration(full_config, "2026-01-15T10:30:00+00:00")
        await save_manifest(tmp_path, original)

        loaded = load_manifest(tmp_path)
        assert loaded == original
        assert loaded.configuration() == full_config

    def test_missing_manifest_returns_none(self, tmp_path: Path):
        assert load_manifest(tmp_path) is None

    def test_invalid_json_raises(self, tmp_path: Path):
        (tmp_path / MANIFEST_FILENAME).write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            load_manifest(tmp_path)
        assert exc_info.value.field == "manifest"

    def test_non_utf8_raises(self, tmp_path: Path):
        (tmp_path / MANIFEST_FILENAME).write_bytes(b'{"version": "\xff\xfe"}')
        with pytest.raises(ConfigurationError) as exc_info:
            load_manifest(tmp_path)
        assert exc_info.value.field == "manifest"

    def test_invalid_flag_raises(self, tmp_path: Path):
        payload = {
            "version": "1.0.0",
            "timestamp": "t",
            "backend": {
                "framework": "nestjs",
                "database": "supabase",
                "whitelabel": "no",
                "rbac": False,
                "multitenant": False,
            },
        }
        (tmp_path / MANIFEST_FILENAME).write_text(json.dumps(payload), encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            load_manifest(tmp_path)
        assert exc_info.value.field == "manifest.backend.whitelabel"

    def test_wrong_framework_raises(self, tmp_path: Path):
        payload = {
            "timestamp": "t",
            "backend": {
                "framework": "express",
                "database": "supabase",
                "whitelabel": False,
                "rbac": False,
                "multitenant": False,
            },
        }
        (tmp_path / MANIFEST_FILENAME).write_text(json.dumps(payload), encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_manifest(tmp_path)


# ---------------------------------------------------------------------------
# RunSettings
# ---------------------------------------------------------------------------


class TestRunSettings:
    def test_defaults(self):
        settings = RunSettings()
        assert settings.output_dir == Path(".")
        assert settings.scaffold is False
        assert settings.nest_timeout == 120

    def test_manifest_path(self, tmp_path: Path):
        settings = RunSettings(output_dir=tmp_path)
        assert settings.manifest_path == tmp_path / MANIFEST_FILENAME

    def test_timeout_floor(self):
        with pytest.raises(ValidationError):
            RunSettings(nest_timeout=5)


class TestRunSettingsFromEnv:
    def test_defaults_when_no_env(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = RunSettings.from_env()
        assert settings == RunSettings()

    def test_output_dir_from_env(self):
        with patch.dict(os.environ, {"AUTH_BP_OUTPUT_DIR": "/srv/api"}, clear=True):
            settings = RunSettings.from_env()
        assert settings.output_dir == Path("/srv/api")

    @pytest.mark.parametrize("value", ["1", "true", "YES"])
    def test_scaffold_truthy(self, value):
        with patch.dict(os.environ, {"AUTH_BP_SCAFFOLD": value}, clear=True):
            settings = RunSettings.from_env()
        assert settings.scaffold is True

    def test_scaffold_falsy(self):
        with patch.dict(os.environ, {"AUTH_BP_SCAFFOLD": "off"}, clear=True):
            settings = RunSettings.from_env()
        assert settings.scaffold is False

    def test_timeout_from_env(self):
        with patch.dict(os.environ, {"AUTH_BP_NEST_TIMEOUT": "300"}, clear=True):
            settings = RunSettings.from_env()
        assert settings.nest_timeout == 300

    @pytest.mark.parametrize("value", ["abc", "1.5", "5"])
    def test_bad_timeout_names_variable(self, value):
        with patch.dict(os.environ, {"AUTH_BP_NEST_TIMEOUT": value}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                RunSettings.from_env()
        assert exc_info.value.field == "AUTH_BP_NEST_TIMEOUT"
