"""Node catalog: discovery, extraction, persistence and queries."""

from .builder import rebuild_catalog
from .extractor import NodeDescriptorExtractor
from .models import BuildMetadata, BuildReport, NodeDescriptor, NodeDetails, NodeSummary, Provenance, ReleaseManifest
from .node_types import SimpleNode, VersionedNode
from .query import NodeQueryService
from .release import fetch_release_manifest
from .scanner import scan_packages
from .store import CatalogStore

__all__ = [
    "BuildMetadata",
    "BuildReport",
    "CatalogStore",
    "NodeDescriptor",
    "NodeDescriptorExtractor",
    "NodeDetails",
    "NodeQueryService",
    "NodeSummary",
    "Provenance",
    "ReleaseManifest",
    "SimpleNode",
    "VersionedNode",
    "fetch_release_manifest",
    "rebuild_catalog",
    "scan_packages",
]
