"""Configuration schema for the ShadowGit MCP server.

Configuration is loaded from ``mcp.yml`` in the ShadowGit storage directory
(when present) and then overridden from ``SHADOWGIT_*`` environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .repositories import storage_location

CONFIG_FILENAME = "mcp.yml"


class GatewayConfig(BaseModel):
    """Limits applied to every git invocation."""

    model_config = ConfigDict(validate_assignment=True)

    timeout_ms: int = Field(default=10_000, gt=0)
    max_buffer_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    max_command_length: int = Field(default=1000, gt=0)
    git_binary: str = "git"


class SessionApiConfig(BaseModel):
    """ShadowGit desktop app session API."""

    base_url: str = "http://localhost:45289/api"
    timeout_seconds: float = 3.0
    health_timeout_seconds: float = 1.0

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class CheckpointConfig(BaseModel):
    """Checkpoint commit settings."""

    max_title_length: int = 50
    max_message_length: int = 1000
    default_author: str = "AI Assistant"
    committer_name: str = "ShadowGit MCP"
    committer_email: str = "shadowgit-mcp@shadowgit.local"


class LoggingConfig(BaseModel):
    """Process logging (always written to stderr)."""

    level: str = "info"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.strip().lower()
        valid_levels = {"debug", "info", "warn", "warning", "error"}
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return "warning" if v == "warn" else v


class AuditConfig(BaseModel):
    """JSONL audit trail of gateway decisions."""

    enabled: bool = False
    log_path: str | None = None


class ShadowGitConfig(BaseModel):
    """Complete server configuration."""

    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    session_api: SessionApiConfig = Field(default_factory=SessionApiConfig)
    checkpoint: CheckpointConfig = Field(default_factory=CheckpointConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    hints: bool = True
    storage_dir: str | None = None

    @property
    def storage_path(self) -> Path:
        if self.storage_dir:
            return Path(self.storage_dir).expanduser()
        return storage_location()

    @property
    def repos_file(self) -> Path:
        return self.storage_path / "repos.json"

    @property
    def audit_path(self) -> Path:
        if self.audit.log_path:
            return Path(self.audit.log_path).expanduser()
        return self.storage_path / "mcp-audit.jsonl"

    @classmethod
    def load_from_file(cls, config_path: Path | str) -> ShadowGitConfig:
        """Load configuration from YAML file."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    def apply_env_overrides(self) -> None:
        """Apply environment variable overrides to configuration."""
        if timeout := os.getenv("SHADOWGIT_TIMEOUT"):
            self.gateway.timeout_ms = int(timeout)
        if max_buffer := os.getenv("SHADOWGIT_MAX_BUFFER"):
            self.gateway.max_buffer_bytes = int(max_buffer)

        if url := os.getenv("SHADOWGIT_SESSION_API"):
            self.session_api.base_url = url.rstrip("/")

        if level := os.getenv("SHADOWGIT_LOG_LEVEL"):
            self.logging = LoggingConfig(level=level)

        if os.getenv("SHADOWGIT_HINTS") == "0":
            self.hints = False

        if storage := os.getenv("SHADOWGIT_STORAGE_DIR"):
            self.storage_dir = storage

        if audit_path := os.getenv("SHADOWGIT_AUDIT_PATH"):
            self.audit.enabled = True
            self.audit.log_path = audit_path


def load_config(config_path: Path | str | None = None) -> ShadowGitConfig:
    """
    Load server configuration.

    Args:
        config_path: Explicit YAML file; defaults to ``<storage>/mcp.yml`` if it exists

    Returns:
        Loaded and validated configuration
    """
    if config_path is not None:
        config = ShadowGitConfig.load_from_file(config_path)
    else:
        storage = os.getenv("SHADOWGIT_STORAGE_DIR")
        storage_dir = Path(storage).expanduser() if storage else storage_location()
        default_path = storage_dir / CONFIG_FILENAME
        config = ShadowGitConfig.load_from_file(default_path) if default_path.exists() else ShadowGitConfig()

    config.apply_env_overrides()
    return config
