"""Workflow service for MCP server.

Forwards workflow and execution operations to the configured n8n instance.
All operations are stateless with a fresh API client per call.
"""

import logging
from typing import Any, Optional

from n8n_mcp.core.exceptions import ConfigurationError
from n8n_mcp.workflows import N8nWorkflowClient

from .base_service import BaseService, ensure_stateless, json_errors, to_json

logger = logging.getLogger(__name__)


def _workflow_payload(
    name: str,
    nodes: list[dict[str, Any]],
    connections: dict[str, Any],
    settings: Optional[dict[str, Any]],
) -> dict[str, Any]:
    payload: dict[str, Any] = {"name": name, "nodes": nodes, "connections": connections}
    if settings is not None:
        payload["settings"] = settings
    return payload


class WorkflowService(BaseService):
    """Service for workflow management operations."""

    @classmethod
    def _client(cls) -> N8nWorkflowClient:
        api = cls.load_settings().api
        if not api.configured:
            raise ConfigurationError("Missing required environment variables: N8N_API_URL, N8N_API_KEY")
        return N8nWorkflowClient(api.api_url or "", api.api_key or "", timeout=api.timeout)  # Fresh instance

    @classmethod
    @ensure_stateless
    @json_errors
    def get_instance_info(cls) -> str:
        return to_json(cls._client().get_instance_info())

    @classmethod
    @ensure_stateless
    @json_errors
    def list_workflows(cls) -> str:
        return to_json(cls._client().list_workflows())

    @classmethod
    @ensure_stateless
    @json_errors
    def get_workflow(cls, workflow_id: str) -> str:
        return to_json(cls._client().get_workflow(workflow_id))

    @classmethod
    @ensure_stateless
    @json_errors
    def get_workflow_by_name(cls, workflow_name: str) -> str:
        return to_json(cls._client().get_workflow_by_name(workflow_name))

    @classmethod
    @ensure_stateless
    @json_errors
    def toggle_workflow(cls, workflow_id: str, active: bool) -> str:
        return to_json(cls._client().toggle_workflow(workflow_id, active))

    @classmethod
    @ensure_stateless
    @json_errors
    def execute_workflow(cls, workflow_id: str) -> str:
        return to_json(cls._client().execute_workflow(workflow_id))

    @classmethod
    @ensure_stateless
    @json_errors
    def get_executions(cls, workflow_id: Optional[str] = None, limit: int = 10) -> str:
        return to_json(cls._client().get_executions(workflow_id, limit))

    @classmethod
    @ensure_stateless
    @json_errors
    def get_execution_details(cls, execution_id: str) -> str:
        return to_json(cls._client().get_execution_details(execution_id))

    @classmethod
    @ensure_stateless
    @json_errors
    def create_workflow(
        cls,
        name: str,
        nodes: list[dict[str, Any]],
        connections: dict[str, Any],
        settings: Optional[dict[str, Any]] = None,
    ) -> str:
        payload = _workflow_payload(name, nodes, connections, settings)
        return to_json(cls._client().create_workflow(payload))

    @classmethod
    @ensure_stateless
    @json_errors
    def update_workflow(
        cls,
        workflow_id: str,
        name: str,
        nodes: list[dict[str, Any]],
        connections: dict[str, Any],
        settings: Optional[dict[str, Any]] = None,
    ) -> str:
        payload = _workflow_payload(name, nodes, connections, settings)
        return to_json(cls._client().update_workflow(workflow_id, payload))

    @classmethod
    @ensure_stateless
    @json_errors
    def delete_workflow(cls, workflow_id: str) -> str:
        return to_json(cls._client().delete_workflow(workflow_id))
