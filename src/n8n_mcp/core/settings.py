"""Settings management for n8n-mcp with environment variable override support."""

import json
import logging
import os
import stat
import tempfile
import threading
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_VERSION_TAG = "n8n@2.0.3"


class PluginPackage(BaseModel):
    """A plugin package to scan: its published name and its directory below a search path."""

    name: str
    path: str


CORE_PACKAGES: list[PluginPackage] = [
    PluginPackage(name="n8n-nodes-base", path="n8n-nodes-base"),
    PluginPackage(name="@n8n/n8n-nodes-langchain", path="@n8n/n8n-nodes-langchain"),
]


def _default_search_paths() -> list[Path]:
    return [Path.cwd() / "node_modules"]


def _default_db_path() -> Path:
    return Path.cwd() / "data" / "nodes.db"


class CatalogSettings(BaseModel):
    """Node catalog build and query configuration."""

    db_path: Path = Field(default_factory=_default_db_path)
    version_tag: str = Field(
        default=DEFAULT_VERSION_TAG,
        description="Upstream release tag the catalog is built for, e.g. n8n@2.0.3",
    )
    search_paths: list[Path] = Field(default_factory=_default_search_paths)
    packages: list[PluginPackage] = Field(default_factory=lambda: [p.model_copy() for p in CORE_PACKAGES])
    fetch_timeout: Optional[float] = Field(
        default=None,
        description="Timeout in seconds for upstream fetches. None keeps the transport default.",
    )


class ApiSettings(BaseModel):
    """Connection to a running n8n instance."""

    api_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout: float = 30.0

    @property
    def configured(self) -> bool:
        return bool(self.api_url and self.api_key)


def normalize_log_level(value: str) -> str:
    """Map a level name to a logging level name (case-insensitive, "warn" accepted)."""
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
    level = value.upper()
    if level == "WARN":
        level = "WARNING"
    if level not in valid_levels:
        raise ValueError(f"Invalid log_level: {value}. Must be one of: {', '.join(valid_levels)}")
    return level


class N8nMcpSettings(BaseModel):
    """Main settings configuration."""

    version: str = Field(default="1.0.0")
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    log_level: str = Field(default="WARNING")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log_level is a standard logging level name."""
        return normalize_log_level(v)


class SettingsManager:
    """Manages n8n-mcp settings with environment variable override support."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = settings_path or Path.home() / ".n8n-mcp" / "settings.json"
        self._settings: Optional[N8nMcpSettings] = None
        # Lock for thread-safe load-modify-save operations
        self._lock = threading.Lock()

    def load(self) -> N8nMcpSettings:
        """Load settings with environment variable overrides."""
        if self._settings is None:
            self._settings = self._load_from_file()
            self._validate_permissions(self._settings)
        settings = self._settings
        self._apply_env_overrides(settings)
        return settings

    def reload(self) -> N8nMcpSettings:
        """Force reload settings from file."""
        self._settings = None
        return self.load()

    def _load_from_file(self) -> N8nMcpSettings:
        """Load settings from file or return defaults."""
        if self.settings_path.exists():
            try:
                with open(self.settings_path) as f:
                    data = json.load(f)
                return N8nMcpSettings(**data)
            except Exception as e:
                # If file is corrupted, use defaults
                logger.warning(f"Failed to load settings from {self.settings_path} ({e}); using defaults")
                return N8nMcpSettings()
        return N8nMcpSettings()

    def _apply_env_overrides(self, settings: N8nMcpSettings) -> None:
        """Apply environment variable overrides."""
        api_url = os.getenv("N8N_API_URL")
        if api_url:
            settings.api.api_url = api_url

        api_key = os.getenv("N8N_API_KEY")
        if api_key:
            settings.api.api_key = api_key

        db_path = os.getenv("N8N_MCP_DB_PATH")
        if db_path:
            settings.catalog.db_path = Path(db_path).expanduser()

        version_tag = os.getenv("N8N_VERSION")
        if version_tag:
            settings.catalog.version_tag = version_tag

        node_paths = os.getenv("N8N_NODE_PATHS")
        if node_paths:
            settings.catalog.search_paths = [Path(p).expanduser() for p in node_paths.split(os.pathsep) if p]

        env_level = os.getenv("LOG_LEVEL")
        if env_level is not None:
            try:
                settings.log_level = normalize_log_level(env_level)
            except ValueError:
                logger.warning(f"Invalid LOG_LEVEL: {env_level}. Using default: {settings.log_level}")

    def save(self, settings: Optional[N8nMcpSettings] = None) -> None:
        """Save settings to file with atomic operations and secure permissions."""
        if settings is None:
            settings = self.load()

        self.settings_path.parent.mkdir(parents=True, exist_ok=True)

        # Atomic write pattern: write to temp file, then replace
        temp_fd, temp_path = tempfile.mkstemp(dir=self.settings_path.parent, prefix=".settings.", suffix=".tmp")

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                json.dump(settings.model_dump(mode="json"), f, indent=2)

            os.replace(temp_path, self.settings_path)

            # Owner read/write only: the file may hold the API key
            os.chmod(self.settings_path, stat.S_IRUSR | stat.S_IWUSR)

            self._settings = None

        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise

    def set_api_credentials(self, api_url: str, api_key: str) -> None:
        """Persist the n8n API URL and key."""
        with self._lock:
            settings = self.load()
            settings.api.api_url = api_url
            settings.api.api_key = api_key
            self.save(settings)

    def _validate_permissions(self, settings: N8nMcpSettings) -> None:
        """Warn when a settings file holding an API key is readable by group or others."""
        if not self.settings_path.exists() or not settings.api.api_key:
            return

        try:
            mode = stat.S_IMODE(os.stat(self.settings_path).st_mode)
        except OSError as e:
            logger.debug(f"Permission validation failed: {e}")
            return

        if mode & (stat.S_IROTH | stat.S_IRGRP):
            logger.warning(
                f"Settings file {self.settings_path} contains an API key "
                f"but has insecure permissions {oct(mode)}. "
                f"Run: chmod 600 {self.settings_path}"
            )
