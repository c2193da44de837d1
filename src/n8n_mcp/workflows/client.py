"""Client for the n8n public REST API (workflows and executions)."""

import logging
from typing import Any, Optional

import requests

from n8n_mcp.core.exceptions import N8nApiError, WorkflowNotFoundError

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

WORKFLOW_SUMMARY_FIELDS = (
    "id",
    "name",
    "active",
    "createdAt",
    "updatedAt",
    "versionId",
    "tags",
    "triggerCount",
    "isArchived",
)


class N8nWorkflowClient:
    """Forwards workflow operations to a running n8n instance."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the client.

        Args:
            api_url: Base URL of the public API, e.g. https://n8n.example.com/api/v1
            api_key: API key sent as X-N8N-API-KEY
            session: requests session to use (a new one is created otherwise)
            timeout: Request timeout in seconds
            logger: Logger (defaults to the module logger)
        """
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.api_url}/{endpoint}"
        headers = {"X-N8N-API-KEY": self.api_key, "Content-Type": "application/json"}

        self.logger.info(f"{method} {url}")
        try:
            response = self.session.request(
                method, url, headers=headers, json=data, params=params, timeout=self.timeout
            )
        except requests.RequestException:
            self.logger.exception(f"API request failed: {method} {url}")
            raise

        if not response.ok:
            self.logger.error(f"API request failed: HTTP {response.status_code} {method} {url}")
            raise N8nApiError(response.status_code, response.text, url)

        if not response.content:
            return {}
        return response.json()

    def get_instance_info(self) -> dict[str, Any]:
        """Describe the instance's API.

        n8n does not expose its exact version over the public API, so only the
        API generation is inferred from the response shape.
        """
        try:
            health = self._request("GET", "healthz")
            if isinstance(health, dict) and health.get("status") == "ok":
                self.logger.info("Instance is healthy")
        except (N8nApiError, requests.RequestException) as e:
            self.logger.debug(f"healthz not available: {e}")

        workflows = self._request("GET", "workflows", params={"limit": 1})
        is_paginated = isinstance(workflows, dict) and isinstance(workflows.get("data"), list)

        return {
            "apiVersion": ">=1.0" if is_paginated else "<1.0",
            "isPaginated": is_paginated,
            "apiUrl": self.api_url,
            "note": "n8n does not expose exact version via API. Use workflow nodes to determine version.",
            "suggestion": "Create a workflow with AI Agent node to check available typeVersion",
        }

    def list_workflows(self) -> dict[str, Any]:
        """All workflows, following pagination, reduced to their summary fields."""
        all_workflows: list[dict[str, Any]] = []
        cursor: Optional[str] = None

        while True:
            params: dict[str, Any] = {"limit": PAGE_SIZE}
            if cursor:
                params["cursor"] = cursor
            response = self._request("GET", "workflows", params=params)

            # Older instances return a bare list without pagination
            if isinstance(response, list):
                all_workflows = response
                break
            if isinstance(response, dict) and isinstance(response.get("data"), list):
                all_workflows.extend(response["data"])
                cursor = response.get("nextCursor")
                if not cursor:
                    break
            else:
                break

        self.logger.info(f"Fetched {len(all_workflows)} workflows total")
        return {
            "data": [{key: wf.get(key) for key in WORKFLOW_SUMMARY_FIELDS} for wf in all_workflows],
            "nextCursor": None,
        }

    def get_workflow(self, workflow_id: str) -> Any:
        return self._request("GET", f"workflows/{workflow_id}")

    def get_workflow_by_name(self, workflow_name: str) -> Any:
        workflows = self.list_workflows()["data"]
        match = next((w for w in workflows if w.get("name") == workflow_name), None)
        if match is None:
            raise WorkflowNotFoundError(f"Workflow not found: {workflow_name}")
        return self.get_workflow(match["id"])

    def create_workflow(self, workflow: dict[str, Any]) -> Any:
        return self._request("POST", "workflows", workflow)

    def update_workflow(self, workflow_id: str, workflow: dict[str, Any]) -> Any:
        return self._request("PUT", f"workflows/{workflow_id}", workflow)

    def delete_workflow(self, workflow_id: str) -> Any:
        return self._request("DELETE", f"workflows/{workflow_id}")

    def toggle_workflow(self, workflow_id: str, active: bool) -> Any:
        return self._request("PATCH", f"workflows/{workflow_id}", {"active": active})

    def execute_workflow(self, workflow_id: str) -> Any:
        return self._request("POST", f"workflows/{workflow_id}/execute")

    def get_executions(self, workflow_id: Optional[str] = None, limit: int = 10) -> Any:
        params: dict[str, Any] = {"limit": limit}
        if workflow_id:
            params["workflowId"] = workflow_id
        return self._request("GET", "executions", params=params)

    def get_execution_details(self, execution_id: str) -> Any:
        return self._request("GET", f"executions/{execution_id}")
