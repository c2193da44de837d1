"""Main entry point for the n8n-mcp MCP server.

Starts the server on stdio. Logging goes to stderr because stdout carries
the protocol messages.
"""

import logging
import signal
import sys
from types import FrameType

from .server import mcp, register_tools

logger = logging.getLogger(__name__)


def run_server() -> None:
    """Run the MCP server with stdio transport.

    Registers all tools, installs signal handlers for a clean shutdown and
    blocks in FastMCP's own event loop until the client disconnects.
    """
    register_tools()

    def handle_shutdown(signum: int, frame: FrameType | None) -> None:
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        sys.exit(0)

    signal.signal(signal.SIGTERM, handle_shutdown)
    signal.signal(signal.SIGINT, handle_shutdown)

    logger.info("Starting n8n-mcp server with stdio transport...")

    try:
        mcp.run("stdio")
    except KeyboardInterrupt:
        logger.info("Server interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"MCP server error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        logger.info("MCP server shutdown complete")


def configure_logging(debug: bool = False) -> None:
    """Send all logs to stderr so stdout stays clean for protocol messages."""
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if not debug:
        logging.getLogger("asyncio").setLevel(logging.WARNING)
        logging.getLogger("mcp").setLevel(logging.INFO)
        logging.getLogger("urllib3").setLevel(logging.WARNING)


__all__ = ["configure_logging", "run_server"]
