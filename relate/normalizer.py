# =============================================================================
# relate/normalizer.py  —  Input validation & canonicalization
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns the raw, untrusted (platform, identity) arguments of a tool call
#   into a NormalizedKey, or rejects them with a ValidationError.
#
# RULES:
#   - platform: required, non-empty after trimming.  Free-form: a value
#     outside KNOWN_PLATFORMS is still accepted, because the upstream API
#     decides what a valid platform is.  The enumeration is only a hint.
#   - identity: required, 1..MAX_IDENTITY_LENGTH characters after trimming.
#   - Both are trimmed and lower-cased for the key.  Nothing else is
#     touched: embedded punctuation ("vitalik.eth", "@handle", "0x...") is
#     kept as-is.
#   - The trimmed identity with its original case rides along on the key
#     (query_identity) and is what the upstream is queried with.
#
# normalize() is pure: no I/O, no logging, no state.  Feeding a key's own
# fields back into it returns an equal key.
# =============================================================================

from typing import Any

from relate.errors import InvalidIdentity, InvalidPlatform
from relate.models import NormalizedKey


MAX_IDENTITY_LENGTH = 256


# -----------------------------------------------------------------------------
# Platforms the upstream identity graph is known to index.
# -----------------------------------------------------------------------------
KNOWN_PLATFORMS: frozenset[str] = frozenset({
    # Chains & name services
    "ethereum", "solana", "ens", "sns", "farcaster", "lens", "clusters",
    "basenames", "unstoppabledomains", "space_id", "dotbit", "ckb", "box",
    "linea", "justaname", "zeta", "mode", "arbitrum", "taiko", "mint",
    "zkfair", "manta", "lightlink", "genome", "merlin", "alienx", "tomo",
    "ailayer", "gravity", "bitcoin", "litecoin", "dogecoin", "aptos",
    "stacks", "tron", "ton", "xrpc", "cosmos", "arweave", "algorand",
    # Wallet / account providers
    "firefly", "particle", "privy",
    # Social & web2
    "twitter", "bluesky", "github", "discord", "telegram", "dentity",
    "email", "linkedin", "reddit", "nextid", "keybase", "facebook", "dns",
    "nftd", "gallery", "paragraph", "mirror", "instagram", "crowdsourcing",
    "nostr", "gmgn", "talentprotocol", "foundation", "rarible", "soundxyz",
    "warpcast", "opensea", "icebreaker", "tally",
})


def _trim(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip()


def normalize(raw_platform: Any, raw_identity: Any) -> NormalizedKey:
    """Validate and canonicalize a (platform, identity) pair.

    Args:
        raw_platform: The platform argument exactly as the caller sent it.
        raw_identity: The identity argument exactly as the caller sent it.

    Returns:
        A NormalizedKey with both fields trimmed and lower-cased, carrying
        the trimmed, case-preserved identity as query_identity.

    Raises:
        InvalidPlatform: platform is missing, not a string, or blank.
        InvalidIdentity: identity is missing, not a string, blank, or longer
            than MAX_IDENTITY_LENGTH characters.
    """
    platform = _trim(raw_platform)
    if not platform:
        raise InvalidPlatform()

    identity = _trim(raw_identity)
    if not identity:
        raise InvalidIdentity()
    if len(identity) > MAX_IDENTITY_LENGTH:
        raise InvalidIdentity(
            f"identity must be at most {MAX_IDENTITY_LENGTH} characters "
            f"(got {len(identity)})"
        )

    return NormalizedKey(
        platform=platform.lower(),
        identity=identity.lower(),
        query_identity=identity,
    )


def is_known_platform(platform: str) -> bool:
    """True if `platform` (in any case/spacing) is in KNOWN_PLATFORMS."""
    return platform.strip().lower() in KNOWN_PLATFORMS
