"""Core infrastructure shared by the catalog, workflow client and MCP server."""

from .exceptions import (
    CatalogError,
    ConfigurationError,
    ExtractionError,
    FetchError,
    ModuleLoadError,
    N8nApiError,
    N8nMcpError,
    WorkflowNotFoundError,
)
from .settings import N8nMcpSettings, SettingsManager

__all__ = [
    "CatalogError",
    "ConfigurationError",
    "ExtractionError",
    "FetchError",
    "ModuleLoadError",
    "N8nApiError",
    "N8nMcpError",
    "N8nMcpSettings",
    "SettingsManager",
    "WorkflowNotFoundError",
]
