# =============================================================================
# relate_mcp/mcp_server.py  —  FastMCP server exposing get-related-address
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes ONE tool, `get-related-address(platform, identity)`, which
#   returns the cross-platform identity graph for an account.
#
# HOW A CALL FLOWS:
#   1. An MCP client calls "get-related-address" with platform + identity
#   2. FastMCP checks the arguments against the input schema
#   3. get_related_address() hands them to LookupService.lookup()
#   4. Success → the text is returned as the tool's content
#      Failure → raised as ToolError, which FastMCP turns into a result
#                with isError=true and the same text
#
# TRANSPORTS:
#   stdio (default)     : the ADK agent launches this module as a subprocess
#   streamable-http     : served at http://<RELATE_HOST>:<PORT>/mcp, with a
#                         GET /health endpoint next to it
#
# RUNNING THIS SERVER:
#   python -m relate_mcp.mcp_server
#   RELATE_TRANSPORT=streamable-http PORT=3000 python -m relate_mcp.mcp_server
# =============================================================================

import logging
import sys
from contextlib import asynccontextmanager
from typing import Annotated

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field
from starlette.requests import Request
from starlette.responses import JSONResponse

from relate.config import Settings
from relate.lookup import LookupService, build_service
from relate_mcp.contract import (
    IDENTITY_DESCRIPTION,
    PLATFORM_DESCRIPTION,
    TOOL_DESCRIPTION,
    TOOL_NAME,
)

# .env must be loaded before Settings reads the environment.
load_dotenv()

settings = Settings.from_env()

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: under the stdio transport, STDOUT *is* the MCP message
# stream, and a stray log line there would corrupt it.
#
# Colors:
#   CYAN   → incoming tool calls
#   GREEN  → responses
#   YELLOW → status / errors
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

# Responses can be a full identity graph; log only the head of them.
_MAX_LOGGED_RESPONSE = 500

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> str:
    """Log the (truncated) tool response in GREEN, then return it."""
    shown = text if len(text) <= _MAX_LOGGED_RESPONSE else text[:_MAX_LOGGED_RESPONSE] + "…"
    logging.info(f"{_GREEN}  ← {tool_name} response: {shown}{_RESET}")
    return text


# =============================================================================
# Lookup service + server lifecycle
# =============================================================================
# One LookupService (and so one cache) per process.  The lifespan starts the
# background cache sweeper when the server starts, and on shutdown stops it
# and closes the upstream HTTP client.
# =============================================================================
service: LookupService = build_service(settings)


@asynccontextmanager
async def lifespan(app):
    await service.start()
    try:
        yield
    finally:
        await service.close()


mcp = FastMCP("relate-account", lifespan=lifespan)


# =============================================================================
# TOOL: get-related-address
# =============================================================================
# The name and description (relate_mcp/contract.py) are what an LLM reads
# to decide WHEN to call the tool; the parameter descriptions tell it WHAT
# to pass.  Both parameters are required strings.  Emptiness and length are
# checked by normalize() inside lookup(), so a bad value comes back as an
# "Invalid platform" / "Invalid identity" tool error.
# =============================================================================
@mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION)
async def get_related_address(
    platform: Annotated[str, Field(description=PLATFORM_DESCRIPTION)],
    identity: Annotated[str, Field(description=IDENTITY_DESCRIPTION)],
) -> str:
    _log_request(TOOL_NAME, platform=platform, identity=identity)

    result = await service.lookup(platform, identity)
    if result.is_error:
        _log_status(result.text)
        raise ToolError(result.text)
    return _log_response(TOOL_NAME, result.text)


# =============================================================================
# GET /health  (HTTP transports only)
# =============================================================================
@mcp.custom_route("/health", methods=["GET"])
async def health(request: Request) -> JSONResponse:
    return JSONResponse({
        "status": "ok",
        "transport": settings.transport,
        "tools": [TOOL_NAME],
    })


# =============================================================================
# Server entry point
# =============================================================================
def main() -> None:
    if settings.transport == "stdio":
        mcp.run()
        return

    _log_status(f"Relate Account MCP server on http://{settings.host}:{settings.port}/mcp")
    _log_status(f"Health check available at http://{settings.host}:{settings.port}/health")
    mcp.run(transport=settings.transport, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
