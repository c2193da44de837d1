"""Release manifests fetched from the upstream n8n repository.

A manifest lists the node modules the platform ships at a tag so a caller can
compare it with the catalog build version and with a running instance. The
comparison is left to the caller; nothing here enforces compatibility.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import requests

from n8n_mcp.core.exceptions import FetchError

from .documentation import GITHUB_RAW_URL
from .models import ReleaseManifest

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "master"

PLATFORM_MANIFEST = "packages/cli/package.json"
BASE_PACKAGE_MANIFEST = "packages/nodes-base/package.json"
EXTENSION_PACKAGE_MANIFEST = "packages/@n8n/n8n-nodes-langchain/package.json"


def _fetch_json(session: requests.Session, url: str, timeout: Optional[float]) -> dict[str, Any]:
    response = session.get(url, timeout=timeout)
    response.raise_for_status()
    data = response.json()
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object from {url}")
    return data


def _node_files(package_data: dict[str, Any]) -> list[str]:
    section = package_data.get("n8n") or {}
    if not isinstance(section, dict):
        raise ValueError("package.json \"n8n\" section is not an object")
    nodes = section.get("nodes") or []
    return [str(n) for n in nodes] if isinstance(nodes, list) else []


def fetch_release_manifest(
    tag: str = DEFAULT_BRANCH,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    log: Optional[logging.Logger] = None,
) -> ReleaseManifest:
    """
    Fetch the platform version and node module lists for a release tag or branch.

    Args:
        tag: Release tag (``n8n@2.0.3``) or branch name
        session: requests session to use (a new one is created otherwise)
        timeout: Per-request timeout in seconds; None keeps the transport default
        log: Logger (defaults to the module logger)

    Returns:
        The release manifest

    Raises:
        FetchError: If the platform version or the base package manifest cannot be fetched
    """
    log = log or logger
    http = session or requests.Session()
    base_url = f"{GITHUB_RAW_URL}/{tag}"
    log.info(f"Fetching node catalog from n8n GitHub ({tag})...")

    try:
        platform_data = _fetch_json(http, f"{base_url}/{PLATFORM_MANIFEST}", timeout)
    except (requests.RequestException, ValueError) as e:
        log.error(f"Failed to fetch n8n version from {tag}: {e}")
        raise FetchError(tag, "n8n version", e) from e

    platform_version = platform_data.get("version")
    if not platform_version:
        raise FetchError(tag, "n8n version (package.json has no version field)")
    log.info(f"n8n version: {platform_version}")

    try:
        base_files = _node_files(_fetch_json(http, f"{base_url}/{BASE_PACKAGE_MANIFEST}", timeout))
    except (requests.RequestException, ValueError) as e:
        log.error(f"Failed to fetch nodes-base package from {tag}: {e}")
        raise FetchError(tag, "nodes-base package", e) from e
    log.info(f"Found {len(base_files)} nodes in nodes-base")

    warnings: list[str] = []
    try:
        extension_files = _node_files(_fetch_json(http, f"{base_url}/{EXTENSION_PACKAGE_MANIFEST}", timeout))
        log.info(f"Found {len(extension_files)} langchain nodes")
    except (requests.RequestException, ValueError) as e:
        extension_files = []
        message = f"Could not fetch langchain nodes from {tag}: {e}"
        warnings.append(message)
        log.warning(message)

    return ReleaseManifest(
        platform_version=str(platform_version),
        fetched_from=tag,
        base_node_files=base_files,
        extension_node_files=extension_files,
        timestamp=datetime.now(timezone.utc),
        warnings=warnings,
    )
