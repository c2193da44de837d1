"""Workflow management tools for the MCP server.

These tools forward to the n8n REST API of the configured instance.
Credentials come from N8N_API_URL and N8N_API_KEY (or the settings file).
"""

import asyncio
import logging
from typing import Annotated, Any, Optional

from pydantic import Field

from ..server import mcp
from ..services.workflow_service import WorkflowService

logger = logging.getLogger(__name__)


@mcp.tool()
async def get_n8n_instance_info() -> str:
    """Get information about the connected n8n instance.

    Useful to learn which n8n version the instance runs before comparing it
    with `get_database_version`.
    """
    return await asyncio.to_thread(WorkflowService.get_instance_info)


@mcp.tool()
async def list_workflows() -> str:
    """List all workflows on the n8n instance (id, name, active flag, timestamps)."""
    return await asyncio.to_thread(WorkflowService.list_workflows)


@mcp.tool()
async def get_workflow(
    workflowId: Annotated[str, Field(description="The ID of the workflow")],  # noqa: N803
) -> str:
    """Get a workflow including its nodes and connections."""
    return await asyncio.to_thread(WorkflowService.get_workflow, workflowId)


@mcp.tool()
async def get_workflow_by_name(
    workflowName: Annotated[str, Field(description="The exact name of the workflow")],  # noqa: N803
) -> str:
    """Get a workflow by its exact name."""
    return await asyncio.to_thread(WorkflowService.get_workflow_by_name, workflowName)


@mcp.tool()
async def toggle_workflow(
    workflowId: Annotated[str, Field(description="The ID of the workflow")],  # noqa: N803
    active: Annotated[bool, Field(description="True to activate, False to deactivate")],
) -> str:
    """Activate or deactivate a workflow."""
    logger.info(f"Setting workflow {workflowId} active={active}")
    return await asyncio.to_thread(WorkflowService.toggle_workflow, workflowId, active)


@mcp.tool()
async def execute_workflow(
    workflowId: Annotated[str, Field(description="The ID of the workflow to execute")],  # noqa: N803
) -> str:
    """Execute a workflow manually."""
    logger.info(f"Executing workflow {workflowId}")
    return await asyncio.to_thread(WorkflowService.execute_workflow, workflowId)


@mcp.tool()
async def get_executions(
    workflowId: Annotated[  # noqa: N803
        Optional[str], Field(description="Only return executions of this workflow")
    ] = None,
    limit: Annotated[int, Field(description="Maximum number of executions to return (default: 10)")] = 10,
) -> str:
    """Get recent workflow executions."""
    return await asyncio.to_thread(WorkflowService.get_executions, workflowId, limit)


@mcp.tool()
async def get_execution_details(
    executionId: Annotated[str, Field(description="The ID of the execution")],  # noqa: N803
) -> str:
    """Get detailed information about a specific execution, including node outputs and errors."""
    return await asyncio.to_thread(WorkflowService.get_execution_details, executionId)


@mcp.tool()
async def create_workflow(
    name: Annotated[str, Field(description="Name of the workflow")],
    nodes: Annotated[list[dict[str, Any]], Field(description="Array of workflow nodes")],
    connections: Annotated[dict[str, Any], Field(description="Node connections keyed by source node name")],
    settings: Annotated[
        Optional[dict[str, Any]], Field(description="Workflow settings (e.g. executionOrder)")
    ] = None,
) -> str:
    """Create a new workflow.

    Check node parameters with `get_node_info` first; the instance rejects
    unknown node types and malformed parameters.
    """
    logger.info(f"Creating workflow '{name}' with {len(nodes)} nodes")
    return await asyncio.to_thread(WorkflowService.create_workflow, name, nodes, connections, settings)


@mcp.tool()
async def update_workflow(
    workflowId: Annotated[str, Field(description="The ID of the workflow to update")],  # noqa: N803
    name: Annotated[str, Field(description="Name of the workflow")],
    nodes: Annotated[list[dict[str, Any]], Field(description="Complete array of workflow nodes")],
    connections: Annotated[dict[str, Any], Field(description="Complete node connections")],
    settings: Annotated[Optional[dict[str, Any]], Field(description="Workflow settings")] = None,
) -> str:
    """Replace an existing workflow's definition."""
    logger.info(f"Updating workflow {workflowId}")
    return await asyncio.to_thread(
        WorkflowService.update_workflow, workflowId, name, nodes, connections, settings
    )


@mcp.tool()
async def delete_workflow(
    workflowId: Annotated[str, Field(description="The ID of the workflow to delete")],  # noqa: N803
) -> str:
    """Delete a workflow. This cannot be undone."""
    logger.info(f"Deleting workflow {workflowId}")
    return await asyncio.to_thread(WorkflowService.delete_workflow, workflowId)
