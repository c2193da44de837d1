"""Workflow management against a running n8n instance."""

from .client import N8nWorkflowClient

__all__ = ["N8nWorkflowClient"]
