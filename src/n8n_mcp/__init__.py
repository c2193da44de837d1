"""n8n node catalog and workflow management over MCP."""

__version__ = "0.1.0"
