# =============================================================================
# relate/formatter.py  —  Shape payloads and errors into a ToolResult
# =============================================================================
# The last step of every lookup.  Neither function raises.
# =============================================================================

import json

from relate.errors import RelateError
from relate.models import IdentityGraphDocument, ToolResult


SUCCESS_PREFIX = "The related information is: "
ERROR_PREFIX = "Error fetching data: "


def serialize_payload(payload: IdentityGraphDocument) -> str:
    """Deterministic JSON: sorted keys, compact separators."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def format_success(payload: IdentityGraphDocument) -> ToolResult:
    return ToolResult.text_result(SUCCESS_PREFIX + serialize_payload(payload))


def format_error(error: BaseException) -> ToolResult:
    """Build the error variant.  RelateErrors use their own message."""
    if isinstance(error, RelateError):
        message = error.message
    else:
        message = str(error) or type(error).__name__
    return ToolResult.text_result(ERROR_PREFIX + message, is_error=True)
