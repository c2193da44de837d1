"""Base service layer for enforcing stateless pattern.

Every service call opens fresh instances (catalog connection, API client)
so concurrent tool calls never share state.
"""

import json
import logging
from functools import wraps
from typing import Any, Callable, TypeVar

from pydantic import BaseModel

from n8n_mcp.core.settings import N8nMcpSettings, SettingsManager

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def to_json(data: Any) -> str:
    """Pretty JSON text for tool responses; pydantic models drop unset derived fields."""
    return json.dumps(_jsonable(data), indent=2, default=str)


def error_json(message: str) -> str:
    return json.dumps({"error": message})


class BaseService:
    """Base class for all MCP services.

    Service methods are class methods that create fresh instances internally.
    """

    @classmethod
    def load_settings(cls) -> N8nMcpSettings:
        return SettingsManager().load()


def ensure_stateless(func: Callable[..., T]) -> Callable[..., T]:
    """Decorator logging the fresh-instance call boundary of a service method."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        logger.debug(f"Executing {func.__name__} with fresh instances")
        result = func(*args, **kwargs)
        logger.debug(f"Completed {func.__name__}")
        return result

    return wrapper


def json_errors(func: Callable[..., str]) -> Callable[..., str]:
    """Turn any failure of a tool-facing service method into an ``{"error": ...}`` response."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> str:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Error executing {func.__name__}: {e}")
            return error_json(str(e) or e.__class__.__name__)

    return wrapper
