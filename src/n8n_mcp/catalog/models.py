"""Data model for the node catalog.

Descriptors keep the heterogeneous parameter, operation and credential schemas
as JSON text, exactly as they are persisted. ``NodeDetails`` adds the
deserialized views produced by the query service.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field

Number = Union[int, float]


class Provenance(str, Enum):
    """Where the documentation in a catalog build came from."""

    LOCAL_ONLY = "local-only"
    LOCAL_AND_REMOTE_DOCS = "local+github"


class NodeSummary(BaseModel):
    """Reduced projection returned by keyword search."""

    node_type: str
    package_name: str
    display_name: str
    description: str = ""
    category: Optional[str] = None
    is_ai_tool: bool = False
    is_trigger: bool = False
    is_webhook: bool = False


class NodeDescriptor(NodeSummary):
    """Normalized, versioned description of one node type (one catalog row)."""

    documentation: Optional[str] = None
    properties_schema: Optional[str] = None
    operations: Optional[str] = None
    credentials_required: Optional[str] = None
    development_style: Literal["declarative", "programmatic"] = "programmatic"
    is_versioned: bool = False
    version: str = "1"


class NodeDetails(NodeDescriptor):
    """A descriptor with its JSON columns parsed.

    A derived field stays None when the stored payload is absent or unparseable.
    """

    properties: Optional[list[Any]] = None
    operations_list: Optional[list[Any]] = None
    credentials: Optional[list[Any]] = None
    versions: Optional[list[Number]] = None
    latest_version: Optional[Number] = None


class BuildMetadata(BaseModel):
    """Singleton describing the build that produced the catalog."""

    source_version_tag: str
    built_at: datetime
    provenance: Provenance = Provenance.LOCAL_AND_REMOTE_DOCS
    docs_extracted: int = 0


class ReleaseManifest(BaseModel):
    """Node module listing of one upstream release tag. Never persisted."""

    platform_version: str
    fetched_from: str
    base_node_files: list[str] = Field(default_factory=list)
    extension_node_files: list[str] = Field(default_factory=list)
    timestamp: datetime
    warnings: list[str] = Field(default_factory=list)


@dataclass
class LoadedNode:
    """A node module that loaded cleanly, with the class it exposes."""

    package_name: str
    node_name: str
    node_class: Any
    module_path: str = ""


@dataclass
class BuildReport:
    """Aggregate outcome of one catalog rebuild."""

    version: str
    db_path: str
    scanned: int = 0
    extracted: int = 0
    docs_extracted: int = 0
    load_failures: list[tuple[str, str]] = field(default_factory=list)
    extraction_failures: list[tuple[str, str]] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.load_failures) + len(self.extraction_failures)
