"""Documentation for catalog nodes.

Upstream README files win when they exist for a node; otherwise the text is
synthesized from the node description itself.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

GITHUB_RAW_URL = "https://raw.githubusercontent.com/n8n-io/n8n"

# (directory under packages/nodes-base/nodes, catalog node type)
POPULAR_NODES: list[tuple[str, str]] = [
    ("HttpRequest", "nodes-base.httpRequest"),
    ("Webhook", "nodes-base.webhook"),
    ("Code", "nodes-base.code"),
    ("If", "nodes-base.if"),
    ("Switch", "nodes-base.switch"),
    ("Merge", "nodes-base.merge"),
    ("Set", "nodes-base.set"),
    ("Gmail", "nodes-base.gmail"),
    ("Slack", "nodes-base.slack"),
    ("GoogleSheets", "nodes-base.googleSheets"),
    ("Postgres", "nodes-base.postgres"),
    ("MySQL", "nodes-base.mySql"),
    ("MongoDB", "nodes-base.mongoDb"),
]

AGENT_NODE_TYPE = "nodes-langchain.agent"


def _join(values: Any) -> str:
    if isinstance(values, (list, tuple)):
        return ", ".join(str(v) for v in values)
    return str(values)


def _resource_lines(resources: Any) -> list[str]:
    """Render codex resources, given as a list of links or a mapping of link lists."""
    if isinstance(resources, list):
        return [f"- [{r.get('label') or r.get('url')}]({r.get('url')})" for r in resources if isinstance(r, dict)]
    if isinstance(resources, dict):
        lines = []
        for kind, links in resources.items():
            for link in links if isinstance(links, list) else []:
                if isinstance(link, dict) and link.get("url"):
                    lines.append(f"- [{link.get('label') or kind}]({link['url']})")
        return lines
    return []


def build_codex_documentation(codex: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Render codex metadata (categories, use cases, resources, aliases) as markdown."""
    if not codex:
        return None

    parts: list[str] = []

    if codex.get("categories"):
        parts.append(f"\n## Categories\n\n{_join(codex['categories'])}")

    subcategories = codex.get("subcategories")
    if isinstance(subcategories, dict) and subcategories:
        lines = "\n".join(f"- {key}: {_join(value)}" for key, value in subcategories.items())
        parts.append(f"\n## Use Cases\n\n{lines}")

    resource_lines = _resource_lines(codex.get("resources"))
    if resource_lines:
        parts.append("\n## Resources\n\n" + "\n".join(resource_lines))

    if codex.get("alias"):
        parts.append(f"\n## Also known as\n\n{_join(codex['alias'])}")

    return "\n".join(parts) if parts else None


def _render_hints(hints: Any) -> str:
    if isinstance(hints, list):
        lines = []
        for hint in hints:
            message = hint.get("message") if isinstance(hint, dict) else hint
            if message:
                lines.append(f"- {message}")
        return "\n".join(lines)
    return str(hints)


def build_documentation(
    description: Mapping[str, Any],
    node_type: str,
    docs_map: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Return documentation for a node, or None when there is nothing to say.

    Priority (first match wins):
    1. ``docs_map[node_type]`` verbatim
    2. markdown synthesized from the description fields
    3. None - never an empty string
    """
    if docs_map and docs_map.get(node_type):
        return docs_map[node_type]

    doc_parts: list[str] = []

    if description.get("description"):
        title = description.get("displayName") or description.get("name") or node_type
        doc_parts.append(f"# {title}\n\n{description['description']}\n")

    if description.get("subtitle"):
        doc_parts.append(f"## {description['subtitle']}\n")

    properties = description.get("properties")
    if isinstance(properties, list):
        property_docs = "\n".join(
            f"**{p.get('displayName') or p.get('name')}**: {p['description']}"
            for p in properties
            if isinstance(p, dict) and p.get("description")
        )
        if property_docs:
            doc_parts.append(f"\n## Parameters\n\n{property_docs}\n")

    codex_doc = build_codex_documentation(description.get("codex"))
    if codex_doc:
        doc_parts.append(codex_doc)

    if description.get("hints"):
        hints = _render_hints(description["hints"])
        if hints:
            doc_parts.append(f"\n## Hints\n\n{hints}\n")

    return "\n".join(doc_parts) if doc_parts else None


def _get_text(session: requests.Session, url: str, timeout: Optional[float]) -> Optional[str]:
    response = session.get(url, timeout=timeout)
    if response.ok and response.text.strip():
        return response.text
    return None


def fetch_remote_documentation(
    version_tag: str,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    log: Optional[logging.Logger] = None,
) -> dict[str, str]:
    """Fetch README documentation for a handful of well-known nodes at a release tag.

    Best effort and not exhaustive: nodes whose README is missing or whose
    request fails are skipped.

    Args:
        version_tag: Upstream tag or branch, e.g. ``n8n@2.0.3`` or ``master``
        session: requests session to use (a new one is created otherwise)
        timeout: Per-request timeout in seconds
        log: Logger (defaults to the module logger)

    Returns:
        Mapping of catalog node type to markdown
    """
    log = log or logger
    http = session or requests.Session()
    base_url = f"{GITHUB_RAW_URL}/{version_tag}"
    docs_map: dict[str, str] = {}

    for directory, node_type in POPULAR_NODES:
        url = f"{base_url}/packages/nodes-base/nodes/{directory}/README.md"
        try:
            content = _get_text(http, url, timeout)
        except requests.RequestException as e:
            log.debug(f"No documentation for {node_type}: {e}")
            continue
        if content is not None:
            docs_map[node_type] = content
            log.info(f"Fetched documentation for {node_type}")

    langchain_base = f"{base_url}/packages/@n8n/n8n-nodes-langchain"
    try:
        content = _get_text(http, f"{langchain_base}/nodes/agent/Agent/README.md", timeout)
        if content is not None:
            docs_map[AGENT_NODE_TYPE] = content
        else:
            package_readme = _get_text(http, f"{langchain_base}/README.md", timeout)
            if package_readme is not None:
                docs_map[AGENT_NODE_TYPE] = f"# AI Agent\n\n{package_readme}"
    except requests.RequestException as e:
        log.warning(f"Could not fetch AI Agent documentation: {e}")

    log.info(f"Fetched documentation for {len(docs_map)} nodes from {version_tag}")
    return docs_map
