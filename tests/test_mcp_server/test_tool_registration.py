"""Fast tests for MCP tool registration.

These catch a register_tools() that lost an import, which would expose zero
tools to agents while every service-layer test still passes.
"""

import asyncio

from n8n_mcp.mcp_server.server import mcp, register_tools

NODE_TOOLS = {
    "search_n8n_nodes",
    "get_node_info",
    "list_node_categories",
    "get_nodes_by_category",
    "get_ai_nodes",
    "fetch_node_catalog_from_github",
    "get_database_version",
}

WORKFLOW_TOOLS = {
    "get_n8n_instance_info",
    "list_workflows",
    "get_workflow",
    "get_workflow_by_name",
    "toggle_workflow",
    "execute_workflow",
    "get_executions",
    "get_execution_details",
    "create_workflow",
    "update_workflow",
    "delete_workflow",
}


class TestToolRegistration:
    """Verify the tool set exposed by the server."""

    def test_all_tools_registered(self):
        register_tools()

        tools = asyncio.run(mcp.list_tools())

        assert {t.name for t in tools} == NODE_TOOLS | WORKFLOW_TOOLS

    def test_tools_have_descriptions(self):
        register_tools()

        for tool in asyncio.run(mcp.list_tools()):
            assert tool.description, f"{tool.name} has no description"

    def test_parameter_schema(self):
        register_tools()
        tools = {t.name: t for t in asyncio.run(mcp.list_tools())}

        search = tools["search_n8n_nodes"].inputSchema
        assert search["required"] == ["keyword"]
        assert "limit" in search["properties"]

        toggle = tools["toggle_workflow"].inputSchema
        assert set(toggle["required"]) == {"workflowId", "active"}
