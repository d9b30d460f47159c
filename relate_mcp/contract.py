# =============================================================================
# relate_mcp/contract.py  —  The get-related-address tool contract
# =============================================================================
# Name, description and parameter descriptions, shared by the server that
# registers the tool and the agent prompt that teaches an LLM to call it.
# =============================================================================

from relate.normalizer import MAX_IDENTITY_LENGTH


TOOL_NAME = "get-related-address"

TOOL_DESCRIPTION = (
    "Retrieves all related identities associated with a specific platform identity. "
    "This tool helps discover cross-platform connections for the same person or entity. "
    "Use cases include: 1) Finding all accounts (Lens, Farcaster, ENS, etc.) belonging to "
    "the same person, 2) Resolving domain names to their underlying addresses (ENS domains, "
    "Lens handles, etc.)"
)

PLATFORM_DESCRIPTION = "The platform of a specific identity, e.g.: Ethereum, Farcaster, lens, ens"

IDENTITY_DESCRIPTION = f"User's identity (1-{MAX_IDENTITY_LENGTH} characters)"
