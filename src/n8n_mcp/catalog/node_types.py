"""Node definition variants exposed by plugin modules.

A plugin module defines one node class. It is either a ``SimpleNode`` carrying a
single ``description`` or a ``VersionedNode`` bundling several version-specific
``SimpleNode`` definitions under one type name. Descriptions use the platform's
own camelCase vocabulary (``displayName``, ``group``, ``properties``, ...).
"""

from enum import Enum
from typing import Any, ClassVar, Optional, Union

Number = Union[int, float]


class NodeVariant(str, Enum):
    SIMPLE = "simple"
    VERSIONED = "versioned"


class SimpleNode:
    """A node with a single description."""

    description: ClassVar[dict[str, Any]] = {}


class VersionedNode:
    """A node type whose schema differs across version numbers.

    Subclasses set ``base_description`` and ``node_versions``, or override
    ``__init__`` to build them.
    """

    base_description: ClassVar[dict[str, Any]] = {}
    node_versions: ClassVar[dict[Number, type[SimpleNode]]] = {}

    @property
    def current_version(self) -> Optional[Number]:
        default = self.base_description.get("defaultVersion")
        if default is not None:
            return default  # type: ignore[no-any-return]
        if not self.node_versions:
            return None
        return max(self.node_versions, key=float)

    @property
    def description(self) -> dict[str, Any]:
        """Description of the current version merged over the base description."""
        node = self.get_node_type()
        merged = dict(self.base_description)
        if node is not None:
            merged.update(node.description)
        return merged

    def get_node_type(self, version: Optional[Number] = None) -> Optional[SimpleNode]:
        """Resolve the definition for ``version`` (default: the current version)."""
        if version is None:
            version = self.current_version
        if version is None:
            return None
        for key, node_class in self.node_versions.items():
            if float(key) == float(version):
                return node_class()
        return None


def has_versioned_capability(obj: Any) -> bool:
    """True when ``obj`` exposes a per-version map or a version resolver."""
    if bool(getattr(obj, "node_versions", None)):
        return True
    return callable(getattr(obj, "get_node_type", None))


def classify_node(node_class: Any) -> NodeVariant:
    """Classify a loaded node definition.

    Subclasses of the two bases are dispatched directly. Classes that do not
    inherit from them are classified by the capabilities they expose.
    """
    if isinstance(node_class, type):
        if issubclass(node_class, VersionedNode):
            return NodeVariant.VERSIONED
        if issubclass(node_class, SimpleNode):
            return NodeVariant.SIMPLE
    if has_versioned_capability(node_class):
        return NodeVariant.VERSIONED
    return NodeVariant.SIMPLE
