"""Read-only query service over the node catalog.

Adds lookup-name normalization and deserialization of the stored JSON
columns on top of ``CatalogStore``. Unparseable payloads are logged and the
derived field is left out; lookups that match nothing return None.
"""

import json
import logging
from typing import Any, Optional

from .models import BuildMetadata, NodeDescriptor, NodeDetails, NodeSummary, Number
from .store import CatalogStore

logger = logging.getLogger(__name__)

# Fully prefixed package names accepted on lookup, mapped to the stored prefix
LEGACY_PREFIXES = {
    "n8n-nodes-base.": "nodes-base.",
    "@n8n/n8n-nodes-langchain.": "nodes-langchain.",
    "n8n-nodes-langchain.": "nodes-langchain.",
}


def normalize_lookup_type(node_type: str) -> str:
    """``n8n-nodes-base.slack`` -> ``nodes-base.slack``; stored forms pass through."""
    for legacy, stored in LEGACY_PREFIXES.items():
        if node_type.startswith(legacy):
            return stored + node_type[len(legacy) :]
    return node_type


def safe_json_loads(payload: Optional[str], field: str, node_type: str, log: logging.Logger) -> Optional[Any]:
    """Parse a stored JSON column, logging and returning None when it is not valid JSON."""
    if not payload:
        return None
    try:
        return json.loads(payload)
    except (TypeError, ValueError):
        log.warning(f"Failed to parse {field} for {node_type}")
        return None


def _to_number(value: Any) -> Number:
    number = float(value)
    return int(number) if number.is_integer() else number


def parse_versions(version: Optional[str], node_type: str, log: logging.Logger) -> Optional[list[Number]]:
    """Versions newest first: a JSON list as stored, or a single scalar version."""
    if not version:
        return None
    try:
        parsed = json.loads(version)
    except ValueError:
        parsed = version

    try:
        if isinstance(parsed, list):
            return [_to_number(v) for v in parsed]
        return [_to_number(parsed)]
    except (TypeError, ValueError):
        log.warning(f"Failed to parse version for {node_type}: {version!r}")
        return None


class NodeQueryService:
    """Search and lookup API over a read-only catalog."""

    def __init__(self, store: CatalogStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def _details(self, descriptor: NodeDescriptor) -> NodeDetails:
        node_type = descriptor.node_type
        log = self.logger
        versions = parse_versions(descriptor.version, node_type, log)

        def as_list(value: Any) -> Optional[list[Any]]:
            if value is None:
                return None
            return value if isinstance(value, list) else [value]

        return NodeDetails(
            **descriptor.model_dump(),
            properties=as_list(safe_json_loads(descriptor.properties_schema, "properties_schema", node_type, log)),
            operations_list=as_list(safe_json_loads(descriptor.operations, "operations", node_type, log)),
            credentials=as_list(
                safe_json_loads(descriptor.credentials_required, "credentials_required", node_type, log)
            ),
            versions=versions,
            latest_version=versions[0] if versions else None,
        )

    def search(self, keyword: str, limit: int = 10) -> list[NodeSummary]:
        results = self.store.search(keyword, limit)
        self.logger.info(
            f'Found {len(results)} nodes matching "{keyword}" (minimal info, use get_node_info for full details)'
        )
        return results

    def get_by_type(self, node_type: str) -> Optional[NodeDetails]:
        """Full descriptor for a node type, or None when the catalog has no such node."""
        descriptor = self.store.get(normalize_lookup_type(node_type))
        if descriptor is None:
            self.logger.warning(f"Node not found: {node_type}")
            return None
        return self._details(descriptor)

    def list_categories(self) -> list[str]:
        return self.store.list_categories()

    def list_by_category(self, category: str) -> list[NodeDetails]:
        return [self._details(d) for d in self.store.list_by_category(category)]

    def list_ai_capable(self) -> list[NodeDetails]:
        return [self._details(d) for d in self.store.list_ai_capable()]

    def get_build_version(self) -> Optional[str]:
        return self.store.get_build_version()

    def get_build_metadata(self) -> Optional[BuildMetadata]:
        return self.store.get_build_metadata()

    def statistics(self) -> dict[str, Any]:
        return self.store.statistics()
