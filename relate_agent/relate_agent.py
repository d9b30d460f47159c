# =============================================================================
# relate_agent/relate_agent.py  —  Google ADK agent configuration
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds the ADK Agent: a LiteLlm model, the system prompt from
#   prompt.py, and an MCPToolset wired to relate_mcp.mcp_server.
#
#   ┌─────────────────────┐   stdio   ┌───────────────────────┐   HTTPS   ┌────────────────┐
#   │ ADK Agent (LiteLlm) │ ────────▶ │ relate_mcp.mcp_server │ ────────▶ │ identity graph │
#   └─────────────────────┘           │   + relate/ (cache)   │           │   GraphQL API  │
#                                     └───────────────────────┘           └────────────────┘
#
# MCP CONNECTION:
#   ADK launches the server as a subprocess (same interpreter, so the
#   same virtualenv) and talks to it over stdin/stdout.  The server's
#   cache lives as long as that subprocess, i.e. one agent session.
#
# MODEL:
#   RELATE_AGENT_MODEL selects the LiteLlm model string; the default goes
#   through OpenRouter (reads OPENROUTER_API_KEY from the environment).
# =============================================================================

import os
import sys

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from relate_agent.prompt import RELATE_ADVISOR_PROMPT


DEFAULT_MODEL = "openrouter/openai/gpt-4.1"

# Settings the server subprocess needs; everything else stays behind.
_FORWARDED_ENV = (
    "DATA_API_URL",
    "ACCESS_TOKEN",
    "RELATE_REQUEST_TIMEOUT",
    "RELATE_CACHE_TTL",
    "RELATE_SWEEP_INTERVAL",
    "RELATE_CACHE_MAX_ENTRIES",
    "RELATE_COALESCE",
    "LOG_LEVEL",
    "PATH",
)


def _server_env() -> dict[str, str]:
    env = {name: os.environ[name] for name in _FORWARDED_ENV if name in os.environ}
    # The agent always talks to the server over stdio.
    env["RELATE_TRANSPORT"] = "stdio"
    return env


def create_agent(model: str | None = None) -> Agent:
    """Create the identity research agent.

    Args:
        model: LiteLlm model string.  Defaults to $RELATE_AGENT_MODEL, then
            DEFAULT_MODEL.

    Returns:
        A configured Google ADK Agent with the get-related-address tool.
    """
    mcp_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command=sys.executable,
            args=["-m", "relate_mcp.mcp_server"],
            env=_server_env(),
        ),
    )

    return Agent(
        name="relate_account_agent",
        model=LiteLlm(model=model or os.environ.get("RELATE_AGENT_MODEL", DEFAULT_MODEL)),
        instruction=RELATE_ADVISOR_PROMPT,
        tools=[mcp_tools],
    )
