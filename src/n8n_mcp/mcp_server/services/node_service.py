"""Node catalog service for MCP server.

Provides node search, lookup, categories and version introspection.
All operations are stateless with a fresh read-only catalog per call.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from n8n_mcp.catalog import CatalogStore, NodeQueryService, fetch_release_manifest

from .base_service import BaseService, ensure_stateless, error_json, json_errors, to_json

logger = logging.getLogger(__name__)


class NodeService(BaseService):
    """Service for node catalog operations."""

    @classmethod
    @contextmanager
    def _query_service(cls) -> Iterator[NodeQueryService]:
        settings = cls.load_settings()
        store = CatalogStore(settings.catalog.db_path, read_only=True)  # Fresh instance
        try:
            yield NodeQueryService(store)
        finally:
            store.close()

    @classmethod
    @ensure_stateless
    @json_errors
    def search_nodes(cls, keyword: str, limit: int = 10) -> str:
        """Reduced node listing for a keyword; use get_node_info for details."""
        with cls._query_service() as service:
            return to_json(service.search(keyword, limit))

    @classmethod
    @ensure_stateless
    @json_errors
    def get_node_info(cls, node_type: str) -> str:
        with cls._query_service() as service:
            details = service.get_by_type(node_type)
        if details is None:
            return error_json(f"Node not found: {node_type}")
        return to_json(details)

    @classmethod
    @ensure_stateless
    @json_errors
    def list_categories(cls) -> str:
        with cls._query_service() as service:
            return to_json(service.list_categories())

    @classmethod
    @ensure_stateless
    @json_errors
    def get_nodes_by_category(cls, category: str) -> str:
        with cls._query_service() as service:
            return to_json(service.list_by_category(category))

    @classmethod
    @ensure_stateless
    @json_errors
    def get_ai_nodes(cls) -> str:
        with cls._query_service() as service:
            return to_json(service.list_ai_capable())

    @classmethod
    @ensure_stateless
    @json_errors
    def get_database_version(cls) -> str:
        """Catalog build version, so callers can spot a mismatch with their instance."""
        settings = cls.load_settings()
        with cls._query_service() as service:
            version = service.get_build_version()
            metadata = service.get_build_metadata()

        if version:
            note = f"Database contains nodes for n8n {version}"
        else:
            note = "No version metadata found in database. Rebuild the catalog with 'n8n-mcp rebuild'."

        return to_json({
            "databaseVersion": version,
            "databasePath": str(settings.catalog.db_path),
            "builtAt": metadata.built_at.isoformat() if metadata else None,
            "source": metadata.provenance.value if metadata else None,
            "note": note,
        })

    @classmethod
    @ensure_stateless
    @json_errors
    def fetch_node_catalog(cls, version: str = "master") -> str:
        """Release manifest for an upstream tag, returned as-is for manual comparison."""
        settings = cls.load_settings()
        manifest = fetch_release_manifest(version, timeout=settings.catalog.fetch_timeout)
        return to_json({
            "version": manifest.platform_version,
            "fetchedFrom": manifest.fetched_from,
            "nodesBase": manifest.base_node_files,
            "langchain": manifest.extension_node_files,
            "timestamp": manifest.timestamp.isoformat(),
            "warnings": manifest.warnings,
        })
