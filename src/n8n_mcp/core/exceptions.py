"""Custom exceptions for n8n-mcp."""

from typing import Optional


class N8nMcpError(Exception):
    """Base exception for all n8n-mcp errors."""

    pass


class ConfigurationError(N8nMcpError):
    """Raised when required configuration (API URL, API key) is missing."""

    pass


class CatalogError(N8nMcpError):
    """Raised when the catalog database cannot be opened or written."""

    pass


class ModuleLoadError(N8nMcpError):
    """A single plugin node module failed to load.

    The scanner records these per module and keeps scanning.
    """

    def __init__(self, package_name: str, module_path: str, original_error: Optional[BaseException] = None):
        self.package_name = package_name
        self.module_path = module_path
        self.original_error = original_error

        message = f"Failed to load {module_path} from {package_name}"
        if original_error:
            message = f"{message}: {original_error!s}"

        super().__init__(message)


class ExtractionError(N8nMcpError):
    """Descriptor construction failed for one node."""

    def __init__(self, node_name: str, reason: str, original_error: Optional[Exception] = None):
        self.node_name = node_name
        self.reason = reason
        self.original_error = original_error

        message = f"Failed to extract {node_name}: {reason}"
        if original_error:
            message = f"{message}\nOriginal error: {original_error!s}"

        super().__init__(message)


class FetchError(N8nMcpError):
    """The release manifest could not be retrieved for a tag."""

    def __init__(self, tag: str, reason: str, original_error: Optional[Exception] = None):
        self.tag = tag
        self.reason = reason
        self.original_error = original_error

        message = f"Failed to fetch {reason} from {tag}"
        if original_error:
            message = f"{message}: {original_error!s}"

        super().__init__(message)


class N8nApiError(N8nMcpError):
    """The n8n REST API answered with a non-success status."""

    def __init__(self, status_code: int, body: str, url: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        self.url = url

        super().__init__(f"HTTP {status_code}: {body}")


class WorkflowNotFoundError(N8nMcpError):
    """Raised when a workflow cannot be found by name."""

    pass
