"""
Tool Handlers

Plain async functions behind the MCP tools. Every handler returns the same
envelope:

    {"success": True, "data": ..., "metadata": ...}
    {"success": False, "error": {"code", "message", "status", "details"}}

`execute_tool` turns raised RawsErrors into error envelopes and any other
exception into INTERNAL_ERROR, so nothing escapes to the MCP layer.
"""

from typing import Any, Awaitable, Callable, Optional

from fastmcp.utilities.logging import get_logger

from raws_server.errors import RawsError

logger = get_logger(__name__)


def success_response(data: Any, metadata: Optional[dict] = None) -> dict:
    return {"success": True, "data": data, "metadata": metadata or {}}


def error_response(error: RawsError) -> dict:
    return {"success": False, "error": error.to_dict()}


async def execute_tool(
    name: str, handler: Callable[..., Awaitable[dict]], *args, **kwargs
) -> dict:
    """
    Run a tool handler and always return an envelope.

    Args:
        name: Tool name (for logs and error details)
        handler: Handler coroutine function
        *args, **kwargs: Passed through to the handler

    Returns:
        dict: Success envelope from the handler, or an error envelope
    """
    try:
        return await handler(*args, **kwargs)
    except RawsError as e:
        log = logger.warning if e.status < 500 else logger.error
        log(f"Tool {name} failed: [{e.code}] {e.message}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Unexpected error in tool {name}: {e}")
        return error_response(
            RawsError(
                f"Tool {name} failed unexpectedly: {e}",
                code="INTERNAL_ERROR",
                status=500,
                details={"tool": name},
            )
        )
