# =============================================================================
# relate/models.py  —  Data Models for the lookup pipeline
# =============================================================================
#
# Four shapes flow through a lookup:
#
#   raw (platform, identity)  ──normalize──▶  NormalizedKey
#   NormalizedKey + payload   ──cache.put──▶  CacheEntry
#   payload | error           ──format────▶  ToolResult
#
# The upstream payload itself (the identity-graph document) is NOT modelled
# here.  The pipeline never looks inside it; it is cached and serialized
# exactly as the upstream returned it, so it travels as a plain dict.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any


# An opaque identity-graph document: the GraphQL `data` object, untouched.
IdentityGraphDocument = dict[str, Any]


# -----------------------------------------------------------------------------
# NormalizedKey — the canonical (platform, identity) pair
# -----------------------------------------------------------------------------
# Frozen so it is hashable: the cache is keyed by it directly, and the same
# instance is used for both the cache read and the cache write of one lookup.
#
# `query_identity` is the trimmed identity with its case intact; that is what
# the upstream receives (base58 addresses are case-sensitive).  It takes no
# part in equality or hashing, so case variants still share one cache entry.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class NormalizedKey:
    """A lower-cased, trimmed (platform, identity) pair."""

    platform: str
    identity: str
    query_identity: str | None = field(default=None, compare=False, repr=False)

    @property
    def upstream_identity(self) -> str:
        """The identity to send upstream: case-preserved when known."""
        return self.query_identity or self.identity

    def __str__(self) -> str:
        return f"{self.platform}:{self.identity}"


@dataclass(frozen=True)
class CacheEntry:
    """One cached payload and the (monotonic) time it was stored."""

    key: NormalizedKey
    payload: IdentityGraphDocument
    stored_at: float


# -----------------------------------------------------------------------------
# ToolResult — the terminal output of every lookup
# -----------------------------------------------------------------------------
# Mirrors the MCP CallToolResult shape:
#   {"content": [{"type": "text", "text": "..."}], "isError": false}
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ToolResult:
    """A complete tool-call result, either the success or the error variant."""

    content: list[dict[str, str]] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def text_result(cls, text: str, is_error: bool = False) -> "ToolResult":
        return cls(content=[{"type": "text", "text": text}], is_error=is_error)

    @property
    def text(self) -> str:
        """All text content parts joined together."""
        return "".join(part.get("text", "") for part in self.content)
