"""Command-line interface for n8n-mcp."""

from .main import cli

__all__ = ["cli"]
