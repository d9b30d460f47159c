# =============================================================================
# relate_agent/__init__.py
# =============================================================================
# The Google ADK agent that answers questions about on-chain / social
# identities by calling the `get-related-address` MCP tool.
#
# ARCHITECTURAL ROLE:
#   - relate/      does the lookup (validation, cache, upstream)
#   - relate_mcp/  exposes it as an MCP tool
#   - relate_agent/ decides WHEN to call the tool and turns the raw identity
#     graph into a readable answer
#
# The agent only post-processes tool output.  It never talks to the
# identity-graph API directly.
# =============================================================================
