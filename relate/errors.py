# =============================================================================
# relate/errors.py  —  Error taxonomy for a lookup
# =============================================================================
#
#   RelateError
#   ├── ValidationError            (local, never reaches the upstream)
#   │   ├── InvalidPlatform
#   │   └── InvalidIdentity
#   └── UpstreamError              (raised by IdentityGraphClient.execute)
#       ├── UpstreamTimeoutError
#       ├── HttpStatusError
#       ├── UpstreamApplicationError
#       ├── UpstreamConnectionError
#       └── UpstreamResponseError
#
# Every error carries a stable `code` so callers (and tests) can branch on
# the kind of failure without parsing the message.  None of these escape
# LookupService.lookup(): the formatter turns each one into an error
# ToolResult.
# =============================================================================


class RelateError(Exception):
    """Base class for every lookup failure."""

    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# --- Validation -------------------------------------------------------------

class ValidationError(RelateError):
    code = "invalid_input"


class InvalidPlatform(ValidationError):
    code = "invalid_platform"

    def __init__(self, reason: str = "platform must be a non-empty string"):
        super().__init__(f"Invalid platform: {reason}")


class InvalidIdentity(ValidationError):
    code = "invalid_identity"

    def __init__(self, reason: str = "identity must be a non-empty string"):
        super().__init__(f"Invalid identity: {reason}")


# --- Upstream ---------------------------------------------------------------

class UpstreamError(RelateError):
    code = "upstream_error"


class UpstreamTimeoutError(UpstreamError):
    """The upstream call did not complete within the deadline."""

    code = "timeout"

    def __init__(self, timeout: float):
        super().__init__(f"Request timed out after {timeout:g}s")
        self.timeout = timeout


class HttpStatusError(UpstreamError):
    """The upstream answered with a non-2xx status."""

    code = "http_error"

    def __init__(self, status: int, reason: str = ""):
        text = f"HTTP {status}: {reason}" if reason else f"HTTP {status}"
        super().__init__(text)
        self.status = status
        self.reason = reason


class UpstreamApplicationError(UpstreamError):
    """The upstream answered 2xx but its body carried a GraphQL `errors` list."""

    code = "upstream_application_error"

    def __init__(self, messages: list[str]):
        super().__init__(f"GraphQL errors: {', '.join(messages)}")
        self.messages = list(messages)


class UpstreamConnectionError(UpstreamError):
    code = "connection_error"

    def __init__(self, reason: str):
        super().__init__(f"Upstream request failed: {reason}")


class UpstreamResponseError(UpstreamError):
    code = "invalid_response"

    def __init__(self, reason: str):
        super().__init__(f"Invalid upstream response: {reason}")
