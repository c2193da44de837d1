"""Node catalog tools for the MCP server.

These tools search and describe the local node catalog and fetch upstream
release manifests for version checks.
"""

import asyncio
import logging
from typing import Annotated

from pydantic import Field

from ..server import mcp
from ..services.node_service import NodeService

logger = logging.getLogger(__name__)


@mcp.tool()
async def search_n8n_nodes(
    keyword: Annotated[str, Field(description='Search keyword (e.g., "slack", "database", "webhook")')],
    limit: Annotated[int, Field(description="Maximum number of results to return (default: 10)")] = 10,
) -> str:
    """Search for n8n nodes by keyword.

    Searches across node types, names, descriptions and documentation
    (case-insensitive substring match). Returns minimal info per node to keep
    responses small; use `get_node_info` for parameters, operations,
    credentials and documentation.
    """
    logger.debug(f"search_n8n_nodes called with keyword={keyword!r} limit={limit}")
    return await asyncio.to_thread(NodeService.search_nodes, keyword, limit)


@mcp.tool()
async def get_node_info(
    nodeType: Annotated[  # noqa: N803
        str, Field(description='The node type (e.g., "nodes-base.slack", "nodes-base.postgres")')
    ],
) -> str:
    """Get detailed information about a specific n8n node.

    Includes all parameters, operations, credentials, documentation and the
    available versions (newest first). Accepts both "nodes-base.slack" and
    "n8n-nodes-base.slack".
    """
    return await asyncio.to_thread(NodeService.get_node_info, nodeType)


@mcp.tool()
async def list_node_categories() -> str:
    """List all available node categories in n8n (e.g., input, output, transform, trigger)."""
    return await asyncio.to_thread(NodeService.list_categories)


@mcp.tool()
async def get_nodes_by_category(
    category: Annotated[str, Field(description='Category name (e.g., "transform", "trigger", "AI")')],
) -> str:
    """Get all nodes in a specific category."""
    return await asyncio.to_thread(NodeService.get_nodes_by_category, category)


@mcp.tool()
async def get_ai_nodes() -> str:
    """List all AI-capable nodes and AI tool variants available in n8n."""
    return await asyncio.to_thread(NodeService.get_ai_nodes)


@mcp.tool()
async def fetch_node_catalog_from_github(
    version: Annotated[
        str,
        Field(
            description='The n8n version tag or branch to fetch from (e.g., "n8n@2.0.3", "n8n@2.2.0", or "master")'
        ),
    ] = "master",
) -> str:
    """Fetch the node catalog directly from the n8n GitHub repository.

    Returns the n8n version and the node module lists of the nodes-base and
    langchain packages at that tag. Use it to verify node availability for
    the version your instance runs.
    """
    logger.info(f"Fetching node catalog from GitHub ({version})")
    return await asyncio.to_thread(NodeService.fetch_node_catalog, version)


@mcp.tool()
async def get_database_version() -> str:
    """Get the n8n version that the current node database was built for.

    Helps identify version mismatches between your n8n instance and the node
    documentation database.
    """
    return await asyncio.to_thread(NodeService.get_database_version)
