"""Unit tests for configuration loading and validation."""

import sys
from pathlib import Path

import pytest

from shadowgit.config import (
    AuditConfig,
    CheckpointConfig,
    GatewayConfig,
    LoggingConfig,
    SessionApiConfig,
    ShadowGitConfig,
    load_config,
)

ENV_VARS = (
    "SHADOWGIT_TIMEOUT",
    "SHADOWGIT_MAX_BUFFER",
    "SHADOWGIT_SESSION_API",
    "SHADOWGIT_LOG_LEVEL",
    "SHADOWGIT_HINTS",
    "SHADOWGIT_STORAGE_DIR",
    "SHADOWGIT_AUDIT_PATH",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    # Keep the default config lookup away from the real user data dir.
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    return monkeypatch


class TestGatewayConfig:
    """Tests for GatewayConfig."""

    def test_default_config(self):
        """Test default gateway limits."""
        config = GatewayConfig()
        assert config.timeout_ms == 10_000
        assert config.max_buffer_bytes == 10 * 1024 * 1024
        assert config.max_command_length == 1000
        assert config.git_binary == "git"

    @pytest.mark.parametrize("field", ["timeout_ms", "max_buffer_bytes", "max_command_length"])
    def test_limits_must_be_positive(self, field):
        with pytest.raises(ValueError):
            GatewayConfig(**{field: 0})


class TestSessionApiConfig:
    def test_default_url(self):
        assert SessionApiConfig().base_url == "http://localhost:45289/api"

    def test_trailing_slash_stripped(self):
        config = SessionApiConfig(base_url="http://127.0.0.1:1234/api/")
        assert config.base_url == "http://127.0.0.1:1234/api"


class TestLoggingConfig:
    """Tests for LoggingConfig."""

    @pytest.mark.parametrize("level", ["debug", "info", "warning", "error"])
    def test_valid_levels(self, level):
        assert LoggingConfig(level=level).level == level

    def test_warn_alias(self):
        assert LoggingConfig(level="WARN").level == "warning"

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            LoggingConfig(level="verbose")


class TestShadowGitConfig:
    """Tests for the complete configuration."""

    def test_default_sections(self):
        config = ShadowGitConfig()
        assert isinstance(config.gateway, GatewayConfig)
        assert isinstance(config.checkpoint, CheckpointConfig)
        assert isinstance(config.audit, AuditConfig)
        assert config.hints is True
        assert config.audit.enabled is False

    def test_storage_dir_drives_derived_paths(self, tmp_path):
        config = ShadowGitConfig(storage_dir=str(tmp_path))
        assert config.storage_path == tmp_path
        assert config.repos_file == tmp_path / "repos.json"
        assert config.audit_path == tmp_path / "mcp-audit.jsonl"

    def test_explicit_audit_path(self, tmp_path):
        config = ShadowGitConfig(audit=AuditConfig(enabled=True, log_path=str(tmp_path / "a.jsonl")))
        assert config.audit_path == tmp_path / "a.jsonl"

    def test_load_from_file(self, tmp_path):
        """Test loading configuration from YAML file."""
        config_file = tmp_path / "mcp.yml"
        config_file.write_text(
            "gateway:\n"
            "  timeout_ms: 2500\n"
            "session_api:\n"
            "  base_url: http://127.0.0.1:9999/api/\n"
            "checkpoint:\n"
            "  default_author: Bot\n"
            "hints: false\n"
        )

        config = ShadowGitConfig.load_from_file(config_file)

        assert config.gateway.timeout_ms == 2500
        assert config.gateway.max_buffer_bytes == 10 * 1024 * 1024
        assert config.session_api.base_url == "http://127.0.0.1:9999/api"
        assert config.checkpoint.default_author == "Bot"
        assert config.hints is False

    def test_empty_file_gives_defaults(self, tmp_path):
        config_file = tmp_path / "mcp.yml"
        config_file.write_text("")
        assert ShadowGitConfig.load_from_file(config_file).gateway.timeout_ms == 10_000

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            ShadowGitConfig.load_from_file(tmp_path / "nope.yml")

    def test_env_overrides(self, clean_env, tmp_path):
        """Test SHADOWGIT_* variables override file values."""
        clean_env.setenv("SHADOWGIT_TIMEOUT", "1500")
        clean_env.setenv("SHADOWGIT_MAX_BUFFER", "4096")
        clean_env.setenv("SHADOWGIT_SESSION_API", "http://10.0.0.1:1/api/")
        clean_env.setenv("SHADOWGIT_LOG_LEVEL", "debug")
        clean_env.setenv("SHADOWGIT_HINTS", "0")
        clean_env.setenv("SHADOWGIT_STORAGE_DIR", str(tmp_path / "store"))
        clean_env.setenv("SHADOWGIT_AUDIT_PATH", str(tmp_path / "audit.jsonl"))

        config = ShadowGitConfig()
        config.apply_env_overrides()

        assert config.gateway.timeout_ms == 1500
        assert config.gateway.max_buffer_bytes == 4096
        assert config.session_api.base_url == "http://10.0.0.1:1/api"
        assert config.logging.level == "debug"
        assert config.hints is False
        assert config.storage_path == tmp_path / "store"
        assert config.audit.enabled is True
        assert config.audit_path == tmp_path / "audit.jsonl"

    def test_invalid_env_log_level(self, clean_env):
        clean_env.setenv("SHADOWGIT_LOG_LEVEL", "loud")
        with pytest.raises(ValueError):
            ShadowGitConfig().apply_env_overrides()

    @pytest.mark.parametrize("var, value", [("SHADOWGIT_TIMEOUT", "-5"), ("SHADOWGIT_MAX_BUFFER", "0")])
    def test_env_limits_validated(self, clean_env, var, value):
        """Test env overrides go through the same bounds as the file."""
        clean_env.setenv(var, value)
        with pytest.raises(ValueError):
            ShadowGitConfig().apply_env_overrides()


class TestLoadConfig:
    def test_defaults_without_file(self, clean_env):
        config = load_config()
        assert config.gateway.timeout_ms == 10_000

    @pytest.mark.skipif(not sys.platform.startswith("linux"), reason="XDG layout")
    def test_default_location_used(self, clean_env, tmp_path):
        """Test mcp.yml in the storage directory is picked up."""
        storage = Path(tmp_path / "xdg" / "shadowgit")
        storage.mkdir(parents=True)
        (storage / "mcp.yml").write_text("gateway:\n  max_command_length: 200\n")

        config = load_config()

        assert config.gateway.max_command_length == 200

    def test_storage_dir_env_locates_file(self, clean_env, tmp_path):
        store = tmp_path / "store"
        store.mkdir()
        (store / "mcp.yml").write_text("gateway:\n  timeout_ms: 1234\n")
        clean_env.setenv("SHADOWGIT_STORAGE_DIR", str(store))

        config = load_config()

        assert config.gateway.timeout_ms == 1234
        assert config.repos_file == store / "repos.json"

    def test_explicit_path_then_env(self, clean_env, tmp_path):
        config_file = tmp_path / "custom.yml"
        config_file.write_text("gateway:\n  timeout_ms: 3000\n")
        clean_env.setenv("SHADOWGIT_TIMEOUT", "4000")

        assert load_config(config_file).gateway.timeout_ms == 4000
