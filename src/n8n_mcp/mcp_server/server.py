"""FastMCP server instance for n8n-mcp.

All tools register with this single instance via decorators.
"""

from mcp.server.fastmcp import FastMCP

mcp = FastMCP(
    "n8n-unified-mcp",
    instructions="""Tools for building n8n workflows.

NODE CATALOG (local, read-only):
• search_n8n_nodes → find candidate nodes (minimal info)
• get_node_info → full parameters, operations, credentials, documentation for one node
• get_database_version → n8n version the catalog was built for

VERSION CHECK: the catalog may lag behind your instance. Compare get_database_version
with fetch_node_catalog_from_github for your instance's tag (e.g. "n8n@2.0.3") before
relying on a node's parameters.

WORKFLOWS (live instance): list_workflows, get_workflow, create_workflow, update_workflow,
toggle_workflow, execute_workflow, get_executions, delete_workflow.""",
)


def register_tools() -> None:
    """Import all tool modules to register them with the server.

    Called during server startup so every tool is registered before
    the server starts handling requests.
    """
    from .tools import node_tools, workflow_tools

    # Imported for their decorator side effects
    _ = (node_tools, workflow_tools)


__all__ = ["mcp", "register_tools"]
