# =============================================================================
# relate_mcp/__init__.py
# =============================================================================
# The FastMCP tool layer.
#
# ARCHITECTURAL ROLE:
#   relate_mcp/ is the translation layer between MCP clients (the ADK agent,
#   Claude Desktop, any MCP host) and the lookup pipeline in relate/.  It:
#     1. Declares the `get-related-address` tool contract (name, description,
#        typed + described parameters)
#     2. Forwards each call to LookupService.lookup()
#     3. Maps the resulting ToolResult onto the MCP result (text or isError)
#     4. Owns the server lifecycle (sweeper start/stop, HTTP client close)
#
# WHAT IT DOES NOT DO:
#   - No validation, caching or upstream logic; that is all in relate/.
# =============================================================================
