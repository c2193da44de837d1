"""
Node descriptor extractor.

Turns a loaded node definition into a normalized ``NodeDescriptor``: identity,
category, versioning, parameter/operation/credential schemas and the derived
trigger, webhook and AI flags. Both node variants (simple and versioned) are
read through the same description interface.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from n8n_mcp.core.exceptions import ExtractionError

from .documentation import build_documentation
from .models import LoadedNode, NodeDescriptor, Number
from .node_types import NodeVariant, classify_node, has_versioned_capability

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1"
DEFAULT_CATEGORY = "misc"


def _instantiate(node_class: Any) -> Any:
    return node_class() if callable(node_class) else node_class


def _read_description(obj: Any, attributes: tuple[str, ...]) -> dict[str, Any]:
    for attribute in attributes:
        try:
            value = getattr(obj, attribute, None)
        except Exception:
            continue
        if isinstance(value, Mapping) and value:
            return dict(value)
    return {}


def get_node_description(node_class: Any) -> dict[str, Any]:
    """Read the description of a node definition, preferring the instance interface.

    Falls back to the class-level description when the definition cannot be
    instantiated, and to an empty dict when there is none.
    """
    if classify_node(node_class) is NodeVariant.VERSIONED:
        attributes: tuple[str, ...] = ("description", "base_description")
    else:
        attributes = ("description",)

    try:
        instance = _instantiate(node_class)
    except Exception as e:
        logger.debug(f"Could not instantiate {node_class!r}: {e}")
        return _read_description(node_class, attributes)

    return _read_description(instance, attributes) or _read_description(node_class, attributes)


def package_prefix(package_name: str) -> str:
    """``@n8n/n8n-nodes-langchain`` -> ``nodes-langchain``, ``n8n-nodes-base`` -> ``nodes-base``."""
    return package_name.replace("@n8n/", "", 1).replace("n8n-", "", 1)


def normalize_node_type(name: Optional[str], package_name: str) -> str:
    """Build the catalog key for a declared node name.

    Names already containing a namespace separator are used verbatim.
    """
    if not name:
        raise ExtractionError(package_name, "node description declares no name")
    if "." in name:
        return name
    return f"{package_prefix(package_name)}.{name}"


def is_versioned_node(node_class: Any) -> bool:
    """A node is versioned when the class or an instance exposes a version map or resolver."""
    if has_versioned_capability(node_class):
        return True
    try:
        return has_versioned_capability(_instantiate(node_class))
    except Exception:
        return False


def _as_number(value: Any) -> Number:
    number = float(value)
    return int(number) if number.is_integer() else number


def sort_versions(values: Iterable[Any]) -> list[Number]:
    """Distinct numeric versions, newest first."""
    return sorted({_as_number(v) for v in values}, reverse=True)


def format_version(value: Any) -> str:
    try:
        return str(_as_number(value))
    except (TypeError, ValueError):
        return str(value)


def extract_version(node_class: Any) -> str:
    """Serialize the version(s) of a node.

    A per-version map or a version list becomes a JSON list sorted newest
    first; a single version becomes its string. Falls back to ``"1"`` when no
    version is declared or the node cannot be instantiated.
    """
    try:
        instance = _instantiate(node_class)

        node_versions = getattr(instance, "node_versions", None)
        if node_versions:
            return json.dumps(sort_versions(node_versions.keys()))

        description = getattr(instance, "description", None) or getattr(instance, "base_description", None) or {}
        version = description.get("version")
        if isinstance(version, (list, tuple)):
            return json.dumps(sort_versions(version))
        if version is None:
            return DEFAULT_VERSION
        return format_version(version)
    except Exception:
        return DEFAULT_VERSION


def extract_operations(description: Mapping[str, Any]) -> Optional[str]:
    """Serialize the option set of the ``operation`` or ``resource`` parameter."""
    properties = description.get("properties")
    if not isinstance(properties, list):
        return None

    operation_field = next(
        (p for p in properties if isinstance(p, dict) and p.get("name") in ("operation", "resource")),
        None,
    )
    if not operation_field or not operation_field.get("options"):
        return None
    return json.dumps(operation_field["options"])


def detect_style(description: Mapping[str, Any]) -> str:
    """Declarative nodes route requests through configuration instead of code."""
    if description.get("routing") or description.get("requestDefaults"):
        return "declarative"
    return "programmatic"


def detect_trigger(description: Mapping[str, Any], category: Optional[str]) -> bool:
    return bool(description.get("polling") or description.get("trigger") or category == "trigger")


def detect_webhook(description: Mapping[str, Any], node_type: str) -> bool:
    """Declared webhook capability, or ``webhook`` in the type name.

    The name check is a heuristic: it also flags unrelated nodes whose type
    happens to contain the substring.
    """
    return bool(description.get("webhooks") or description.get("webhook") or "webhook" in node_type)


def detect_ai_tool(description: Mapping[str, Any]) -> bool:
    if description.get("usableAsTool"):
        return True
    codex = description.get("codex") or {}
    categories = codex.get("categories") if isinstance(codex, dict) else None
    return isinstance(categories, list) and "AI" in categories


def _first_group(description: Mapping[str, Any]) -> str:
    group = description.get("group")
    if isinstance(group, (list, tuple)) and group:
        return str(group[0])
    if isinstance(group, str) and group:
        return group
    return DEFAULT_CATEGORY


def _dump_optional(value: Any) -> Optional[str]:
    return json.dumps(value) if value else None


class NodeDescriptorExtractor:
    """Extract catalog descriptors from loaded node definitions."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def extract(self, loaded: LoadedNode, docs_map: Optional[Mapping[str, str]] = None) -> NodeDescriptor:
        """
        Build the descriptor for one loaded node.

        Args:
            loaded: Scanner output for the node
            docs_map: Optional upstream documentation keyed by node type

        Returns:
            The normalized descriptor

        Raises:
            ExtractionError: If no descriptor can be built for the node
        """
        try:
            description = get_node_description(loaded.node_class)
            node_type = normalize_node_type(description.get("name"), loaded.package_name)
            category = _first_group(description)

            descriptor = NodeDescriptor(
                node_type=node_type,
                package_name=loaded.package_name,
                display_name=description.get("displayName") or description.get("name") or loaded.node_name,
                description=description.get("description") or "",
                category=category,
                documentation=build_documentation(description, node_type, docs_map),
                properties_schema=_dump_optional(description.get("properties")),
                operations=extract_operations(description),
                credentials_required=_dump_optional(description.get("credentials")),
                development_style=detect_style(description),
                is_versioned=is_versioned_node(loaded.node_class),
                version=extract_version(loaded.node_class),
                is_ai_tool=detect_ai_tool(description),
                is_trigger=detect_trigger(description, category),
                is_webhook=detect_webhook(description, node_type),
            )
        except ExtractionError as e:
            raise ExtractionError(loaded.node_name, e.reason) from e
        except Exception as e:
            raise ExtractionError(loaded.node_name, "descriptor construction failed", e) from e

        self.logger.debug(f"Extracted {descriptor.node_type} (version {descriptor.version})")
        return descriptor

    def extract_all(
        self,
        loaded_nodes: Iterable[LoadedNode],
        docs_map: Optional[Mapping[str, str]] = None,
    ) -> tuple[list[NodeDescriptor], list[ExtractionError]]:
        """Extract every node, isolating per-node failures.

        Returns:
            (descriptors in input order, failures)
        """
        descriptors: list[NodeDescriptor] = []
        failures: list[ExtractionError] = []

        for loaded in loaded_nodes:
            try:
                descriptors.append(self.extract(loaded, docs_map))
            except ExtractionError as e:
                self.logger.error(f"Failed to parse {loaded.node_name}: {e.reason}")
                failures.append(e)
                continue

            if len(descriptors) % 100 == 0:
                self.logger.info(f"Processed {len(descriptors)} nodes...")

        return descriptors, failures
