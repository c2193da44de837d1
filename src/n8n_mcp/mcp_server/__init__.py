"""n8n-mcp MCP server.

Exposes the node catalog and the n8n workflow API as MCP tools.
"""

from .main import run_server

__all__ = ["run_server"]
