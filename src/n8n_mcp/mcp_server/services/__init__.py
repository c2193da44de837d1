"""Service layer for MCP server.

This module provides stateless service wrappers that enforce
the fresh instance pattern for thread safety.
"""

from .base_service import BaseService
from .node_service import NodeService
from .workflow_service import WorkflowService

__all__ = [
    "BaseService",
    "NodeService",
    "WorkflowService",
]
