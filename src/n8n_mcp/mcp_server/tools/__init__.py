"""MCP tools for n8n-mcp.

Importing this package registers every tool with the FastMCP server
instance via decorators.
"""

from . import node_tools, workflow_tools

__all__ = ["node_tools", "workflow_tools"]
