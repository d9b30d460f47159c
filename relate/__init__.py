# =============================================================================
# relate/__init__.py
# =============================================================================
# The identity lookup pipeline: normalize -> cache -> upstream -> format.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP, Google ADK, or any agent
#   framework.  The only third-party import is httpx (in upstream.py), so
#   the whole pipeline can be driven from a plain asyncio test.
#
#   relate_mcp/ exposes LookupService.lookup() as an MCP tool.
#   relate_agent/ is an LLM agent that calls that tool.
# =============================================================================
