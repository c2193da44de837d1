"""Tests for the exception hierarchy."""

from n8n_mcp.core.exceptions import (
    CatalogError,
    ExtractionError,
    FetchError,
    ModuleLoadError,
    N8nApiError,
    N8nMcpError,
)


class TestExceptions:
    """Test messages and attributes of structured errors."""

    def test_all_derive_from_base(self):
        for error in (
            CatalogError("x"),
            ModuleLoadError("pkg", "a.py"),
            ExtractionError("Slack", "bad"),
            FetchError("master", "n8n version"),
            N8nApiError(404, "not found"),
        ):
            assert isinstance(error, N8nMcpError)

    def test_module_load_error_includes_cause(self):
        error = ModuleLoadError("n8n-nodes-base", "dist/nodes/X/X.node.py", ImportError("no module y"))

        assert str(error) == "Failed to load dist/nodes/X/X.node.py from n8n-nodes-base: no module y"
        assert isinstance(error.original_error, ImportError)

    def test_extraction_error(self):
        error = ExtractionError("Slack", "node description declares no name")

        assert error.node_name == "Slack"
        assert str(error) == "Failed to extract Slack: node description declares no name"

    def test_fetch_error_names_tag(self):
        assert str(FetchError("n8n@9.9.9", "n8n version")) == "Failed to fetch n8n version from n8n@9.9.9"

    def test_api_error(self):
        error = N8nApiError(401, '{"message": "unauthorized"}', "https://n8n.example.com/api/v1/workflows")

        assert error.status_code == 401
        assert str(error) == 'HTTP 401: {"message": "unauthorized"}'
