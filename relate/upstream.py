# =============================================================================
# relate/upstream.py  —  Identity-graph GraphQL client
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Sends ONE GraphQL query (IDENTITY_QUERY) to the identity-graph API and
#   returns its `data` object, or raises an UpstreamError.
#
#   POST <endpoint>
#     Content-Type: application/json
#     User-Agent:   relate-account-mcp/3.0.0
#     Authorization: Bearer <token>        (only if an access token is set)
#   {"query": IDENTITY_QUERY, "variables": {"platform": ..., "identity": ...}}
#
#   The identity is sent with its original case (key.upstream_identity);
#   only the platform is lower-cased.
#
# FAILURE MAPPING:
#   deadline exceeded              → UpstreamTimeoutError
#   connect/read/protocol failure  → UpstreamConnectionError
#   non-2xx status                 → HttpStatusError(status)
#   body is not a JSON object      → UpstreamResponseError
#   body has an `errors` list      → UpstreamApplicationError(messages)
#
# TIMEOUT:
#   The whole request (connect + send + read) runs under asyncio.wait_for.
#   When the deadline passes, wait_for cancels the request task, and httpx
#   closes the connection it was using.  The client is also built with an
#   httpx timeout of the same length as a second line.
#
# Each call is a single attempt.  Retrying is left to the caller.
# =============================================================================

import asyncio
import logging
from typing import Any

import httpx

from relate.errors import (
    HttpStatusError,
    UpstreamApplicationError,
    UpstreamConnectionError,
    UpstreamResponseError,
    UpstreamTimeoutError,
)
from relate.models import IdentityGraphDocument, NormalizedKey

logger = logging.getLogger(__name__)


DEFAULT_ENDPOINT = "https://graph.web3.bio/graphql"
DEFAULT_TIMEOUT_SECONDS = 10.0
USER_AGENT = "relate-account-mcp/3.0.0"


# -----------------------------------------------------------------------------
# The query: the root identity, its profile and addresses, and every vertex
# of its identity graph (each vertex is itself a full identity record).
# -----------------------------------------------------------------------------
IDENTITY_QUERY = """
  query QUERY_PROFILE($platform: Platform!, $identity: String!) {
    identity(platform: $platform, identity: $identity) {
      id
      status
      aliases
      identity
      platform
      network
      isPrimary
      primaryName
      resolvedAddress {
        address
        network
      }
      ownerAddress {
        address
        network
      }
      managerAddress {
        address
        network
      }
      updatedAt
      profile {
        identity
        platform
        network
        address
        displayName
        avatar
        description
        addresses {
          address
          network
        }
      }
      identityGraph {
        graphId
        vertices {
          identity
          platform
          network
          isPrimary
          primaryName
          registeredAt
          managerAddress {
            address
            network
          }
          ownerAddress {
            address
            network
          }
          resolvedAddress {
            address
            network
          }
          updatedAt
          expiredAt
          profile {
            uid
            identity
            platform
            network
            address
            displayName
            avatar
            description
            texts
            addresses {
              address
              network
            }
          }
        }
      }
    }
  }
"""


def authorization_header(access_token: str | None) -> str | None:
    """Build the Authorization value for a configured token.

    A bare token becomes "Bearer <token>".  A value that already names a
    scheme ("Bearer abc", "Basic xyz") is sent verbatim.
    """
    if not access_token or not access_token.strip():
        return None
    token = access_token.strip()
    if " " in token:
        return token
    return f"Bearer {token}"


def _error_messages(errors: Any) -> list[str]:
    if not isinstance(errors, list):
        return [str(errors)]
    messages = []
    for error in errors:
        if isinstance(error, dict) and "message" in error:
            messages.append(str(error["message"]))
        else:
            messages.append(str(error))
    return messages


class IdentityGraphClient:
    """Executes IDENTITY_QUERY against the identity-graph endpoint.

    Args:
        endpoint: GraphQL endpoint URL.
        timeout: Hard deadline for one request, in seconds.
        access_token: Optional token for the Authorization header.
        client: Optional shared httpx.AsyncClient.  When omitted, one is
            created on first use and closed by aclose().
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        access_token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout!r}")
        self.endpoint = endpoint
        self.timeout = timeout
        self._authorization = authorization_header(access_token)
        self._client = client
        self._owns_client = client is None

    @property
    def headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        if self._authorization:
            headers["Authorization"] = self._authorization
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def execute(self, key: NormalizedKey) -> IdentityGraphDocument:
        """Fetch the identity graph for `key`.

        Returns:
            The GraphQL `data` object, unmodified.

        Raises:
            UpstreamTimeoutError, UpstreamConnectionError, HttpStatusError,
            UpstreamResponseError, UpstreamApplicationError.
        """
        body = {
            "query": IDENTITY_QUERY,
            "variables": {"platform": key.platform, "identity": key.upstream_identity},
        }
        client = self._get_client()

        try:
            response = await asyncio.wait_for(
                client.post(self.endpoint, json=body, headers=self.headers),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("Upstream timed out after %ss for %s", self.timeout, key)
            raise UpstreamTimeoutError(self.timeout) from exc
        except httpx.HTTPError as exc:
            logger.warning("Upstream request failed for %s: %s", key, exc)
            raise UpstreamConnectionError(str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            logger.warning("Upstream returned HTTP %s for %s", response.status_code, key)
            raise HttpStatusError(response.status_code, response.reason_phrase)

        try:
            document = response.json()
        except ValueError as exc:
            raise UpstreamResponseError("body is not valid JSON") from exc
        if not isinstance(document, dict):
            raise UpstreamResponseError("body is not a JSON object")

        if document.get("errors"):
            messages = _error_messages(document["errors"])
            logger.warning("Upstream reported GraphQL errors for %s: %s", key, messages)
            raise UpstreamApplicationError(messages)

        return document.get("data")

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
