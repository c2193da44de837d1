"""Root-level test configuration and fixtures.

Builds throwaway plugin packages on disk so the scanner, extractor and store
run against real module files.
"""

import json
import textwrap
from datetime import datetime, timezone
from pathlib import Path

import pytest

from n8n_mcp.catalog.models import BuildMetadata, NodeDescriptor, Provenance
from n8n_mcp.core.settings import CatalogSettings

SLACK_MODULE = """
from n8n_mcp.catalog.node_types import SimpleNode


class Slack(SimpleNode):
    description = {
        "name": "slack",
        "displayName": "Slack",
        "group": ["output"],
        "version": [1, 2, 2.6],
        "description": "Consume Slack API",
        "credentials": [{"name": "slackApi", "required": True}],
        "properties": [
            {
                "displayName": "Resource",
                "name": "resource",
                "type": "options",
                "description": "The resource to operate on",
                "options": [
                    {"name": "Message", "value": "message"},
                    {"name": "Channel", "value": "channel"},
                ],
            }
        ],
        "codex": {"categories": ["Communication"]},
    }
"""

BROKEN_MODULE = """
raise RuntimeError("plugin exploded on import")
"""

WEBHOOK_MODULE = """
from n8n_mcp.catalog.node_types import SimpleNode


class Webhook(SimpleNode):
    description = {
        "name": "webhook",
        "displayName": "Webhook",
        "group": ["trigger"],
        "version": 2,
        "description": "Starts the workflow when a webhook is called",
        "webhooks": [{"name": "default", "httpMethod": "GET"}],
        "properties": [],
    }
"""

HTTP_REQUEST_MODULE = """
from n8n_mcp.catalog.node_types import SimpleNode, VersionedNode


class HttpRequestV1(SimpleNode):
    description = {"version": 1, "properties": [{"name": "url", "description": "The URL to call"}]}


class HttpRequestV3(SimpleNode):
    description = {
        "version": 3,
        "requestDefaults": {"baseURL": "={{$parameter.url}}"},
        "properties": [{"name": "url", "displayName": "URL", "description": "The URL to make the request to"}],
    }


class HttpRequest(VersionedNode):
    base_description = {
        "name": "httpRequest",
        "displayName": "HTTP Request",
        "group": ["output"],
        "description": "Makes an HTTP request and returns the response data",
        "defaultVersion": 3,
    }
    node_versions = {1: HttpRequestV1, 3: HttpRequestV3}
"""

AGENT_MODULE = """
from n8n_mcp.catalog.node_types import SimpleNode


class Agent(SimpleNode):
    description = {
        "name": "agent",
        "displayName": "AI Agent",
        "group": ["transform"],
        "version": [1, 1.5],
        "description": "Generates an action plan and executes it",
        "codex": {"categories": ["AI"], "alias": ["LangChain"]},
    }
"""


def write_plugin_package(root: Path, package_path: str, modules: dict[str, str]) -> Path:
    """Write ``<root>/<package_path>`` with a manifest listing ``modules`` in order.

    ``modules`` maps node names to module source.
    """
    package_dir = root / package_path
    package_dir.mkdir(parents=True, exist_ok=True)
    node_paths = []
    for node_name, source in modules.items():
        module_path = f"dist/nodes/{node_name}/{node_name}.node.py"
        file_path = package_dir / module_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(textwrap.dedent(source))
        node_paths.append(module_path)

    manifest = {"name": package_path, "version": "1.0.0", "n8n": {"nodes": node_paths}}
    (package_dir / "package.json").write_text(json.dumps(manifest))
    return package_dir


@pytest.fixture
def plugin_root(tmp_path):
    """A node_modules directory holding a base and a langchain package.

    The base package lists four modules; ``Broken`` fails on import.
    """
    root = tmp_path / "node_modules"
    write_plugin_package(
        root,
        "n8n-nodes-base",
        {
            "Slack": SLACK_MODULE,
            "Broken": BROKEN_MODULE,
            "Webhook": WEBHOOK_MODULE,
            "HttpRequest": HTTP_REQUEST_MODULE,
        },
    )
    write_plugin_package(root, "@n8n/n8n-nodes-langchain", {"Agent": AGENT_MODULE})
    return root


@pytest.fixture
def catalog_settings(tmp_path, plugin_root):
    """Catalog settings pointing at the fixture packages and a temp database."""
    return CatalogSettings(
        db_path=tmp_path / "data" / "nodes.db",
        version_tag="n8n@2.0.3",
        search_paths=[plugin_root],
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep settings overrides from the developer's shell out of tests."""
    for name in ["N8N_API_URL", "N8N_API_KEY", "N8N_MCP_DB_PATH", "N8N_VERSION", "N8N_NODE_PATHS", "LOG_LEVEL"]:
        monkeypatch.delenv(name, raising=False)


def make_descriptor(node_type: str = "nodes-base.slack", **overrides) -> NodeDescriptor:
    data = {
        "node_type": node_type,
        "package_name": "n8n-nodes-base",
        "display_name": "Slack",
        "description": "Consume Slack API",
        "category": "output",
        "documentation": "# Slack\n\nSend messages to channels",
        "properties_schema": json.dumps([{"name": "resource"}]),
        "operations": json.dumps([{"name": "Message", "value": "message"}]),
        "credentials_required": json.dumps([{"name": "slackApi"}]),
        "version": "[2.6, 2, 1]",
        "is_versioned": False,
    }
    data.update(overrides)
    return NodeDescriptor(**data)


def make_metadata(tag: str = "n8n@2.0.3", provenance: Provenance = Provenance.LOCAL_ONLY) -> BuildMetadata:
    return BuildMetadata(
        source_version_tag=tag,
        built_at=datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc),
        provenance=provenance,
        docs_extracted=1,
    )


@pytest.fixture
def descriptor_factory():
    return make_descriptor


@pytest.fixture
def metadata_factory():
    return make_metadata
