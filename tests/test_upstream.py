import asyncio
import json
import time

import httpx
import pytest
import pytest_asyncio
import respx

from relate.errors import (
    HttpStatusError,
    UpstreamApplicationError,
    UpstreamConnectionError,
    UpstreamResponseError,
    UpstreamTimeoutError,
)
from relate.models import NormalizedKey
from relate.upstream import (
    DEFAULT_ENDPOINT,
    IDENTITY_QUERY,
    USER_AGENT,
    IdentityGraphClient,
    authorization_header,
)
from tests.conftest import VITALIK_DOCUMENT

ENDPOINT = "https://graph.example.test/graphql"
KEY = NormalizedKey("ens", "vitalik.eth")


@pytest_asyncio.fixture
async def client():
    graph = IdentityGraphClient(endpoint=ENDPOINT, timeout=2)
    yield graph
    await graph.aclose()


@pytest.mark.asyncio
async def test_execute_posts_query_and_returns_data(client):
    with respx.mock(assert_all_called=True) as router:
        route = router.post(ENDPOINT).respond(json={"data": VITALIK_DOCUMENT})

        data = await client.execute(KEY)

    assert data == VITALIK_DOCUMENT
    request = route.calls.last.request
    body = json.loads(request.content)
    assert body["query"] == IDENTITY_QUERY
    assert body["variables"] == {"platform": "ens", "identity": "vitalik.eth"}
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["User-Agent"] == USER_AGENT
    assert "Authorization" not in request.headers


@pytest.mark.asyncio
async def test_execute_sends_authorization_when_token_configured():
    graph = IdentityGraphClient(endpoint=ENDPOINT, access_token="secret-token")
    try:
        with respx.mock(assert_all_called=True) as router:
            route = router.post(ENDPOINT).respond(json={"data": {}})
            await graph.execute(KEY)
    finally:
        await graph.aclose()

    assert route.calls.last.request.headers["Authorization"] == "Bearer secret-token"


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        (None, None),
        ("", None),
        ("   ", None),
        ("abc123", "Bearer abc123"),
        (" abc123 ", "Bearer abc123"),
        ("Bearer abc123", "Bearer abc123"),
        ("Basic dXNlcjpwYXNz", "Basic dXNlcjpwYXNz"),
    ],
)
def test_authorization_header(token, expected):
    assert authorization_header(token) == expected


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "expected"),
    [(500, "HTTP 500: Internal Server Error"), (404, "HTTP 404: Not Found"), (429, "HTTP 429: Too Many Requests")],
)
async def test_non_success_status_raises_http_error(client, status, expected):
    with respx.mock:
        respx.post(ENDPOINT).respond(status_code=status, json={"data": None})

        with pytest.raises(HttpStatusError) as exc_info:
            await client.execute(KEY)

    assert exc_info.value.status == status
    assert exc_info.value.message == expected


@pytest.mark.asyncio
async def test_graphql_errors_are_joined(client):
    errors = [{"message": "Platform not supported"}, {"message": "Identity malformed"}]
    with respx.mock:
        respx.post(ENDPOINT).respond(json={"data": None, "errors": errors})

        with pytest.raises(UpstreamApplicationError) as exc_info:
            await client.execute(KEY)

    assert exc_info.value.messages == ["Platform not supported", "Identity malformed"]
    assert exc_info.value.message == "GraphQL errors: Platform not supported, Identity malformed"


@pytest.mark.asyncio
async def test_graphql_errors_are_not_retried(client):
    with respx.mock:
        route = respx.post(ENDPOINT).respond(json={"errors": [{"message": "boom"}]})

        with pytest.raises(UpstreamApplicationError):
            await client.execute(KEY)

    assert route.call_count == 1


@pytest.mark.asyncio
async def test_empty_errors_list_is_success(client):
    with respx.mock:
        respx.post(ENDPOINT).respond(json={"data": VITALIK_DOCUMENT, "errors": []})
        assert await client.execute(KEY) == VITALIK_DOCUMENT


@pytest.mark.asyncio
async def test_invalid_json_body(client):
    with respx.mock:
        respx.post(ENDPOINT).respond(text="<html>gateway</html>")

        with pytest.raises(UpstreamResponseError):
            await client.execute(KEY)


@pytest.mark.asyncio
async def test_non_object_json_body(client):
    with respx.mock:
        respx.post(ENDPOINT).respond(json=["not", "an", "object"])

        with pytest.raises(UpstreamResponseError, match="not a JSON object"):
            await client.execute(KEY)


@pytest.mark.asyncio
async def test_connection_failure(client):
    with respx.mock:
        respx.post(ENDPOINT).mock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(UpstreamConnectionError, match="connection refused"):
            await client.execute(KEY)


@pytest.mark.asyncio
async def test_httpx_timeout_maps_to_timeout_error(client):
    with respx.mock:
        respx.post(ENDPOINT).mock(side_effect=httpx.ReadTimeout("read timed out"))

        with pytest.raises(UpstreamTimeoutError) as exc_info:
            await client.execute(KEY)

    assert exc_info.value.code == "timeout"


@pytest.mark.asyncio
async def test_hanging_upstream_is_cancelled_at_deadline():
    cancelled = asyncio.Event()

    async def hang(request):
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            cancelled.set()
            raise
        return httpx.Response(200, json={"data": {}})

    transport_client = httpx.AsyncClient(transport=httpx.MockTransport(hang))
    graph = IdentityGraphClient(endpoint=ENDPOINT, timeout=0.1, client=transport_client)

    started = time.monotonic()
    try:
        with pytest.raises(UpstreamTimeoutError, match="timed out after 0.1s"):
            await graph.execute(KEY)
    finally:
        await transport_client.aclose()
    elapsed = time.monotonic() - started

    assert elapsed < 0.1 + 1.0
    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_shared_client_is_not_closed_by_aclose():
    shared = httpx.AsyncClient()
    graph = IdentityGraphClient(client=shared)
    await graph.aclose()
    assert not shared.is_closed
    await shared.aclose()


@pytest.mark.asyncio
async def test_owned_client_is_recreated_after_aclose():
    graph = IdentityGraphClient(endpoint=ENDPOINT)
    with respx.mock:
        respx.post(ENDPOINT).respond(json={"data": {"n": 1}})
        assert await graph.execute(KEY) == {"n": 1}
        await graph.aclose()
        assert await graph.execute(KEY) == {"n": 1}
    await graph.aclose()


def test_defaults():
    graph = IdentityGraphClient()
    assert graph.endpoint == DEFAULT_ENDPOINT == "https://graph.web3.bio/graphql"
    assert graph.timeout == 10.0


def test_rejects_non_positive_timeout():
    with pytest.raises(ValueError):
        IdentityGraphClient(timeout=0)


@pytest.mark.asyncio
async def test_execute_sends_case_preserved_identity(client):
    key = NormalizedKey("solana", "7ecdhsygxxyscszyep35khn8vvw3svaulktzxwcfltv",
                        query_identity="7EcDhSYGxXyscszYEp35KHN8vvw3svAuLKTzXwCFLtV")
    with respx.mock(assert_all_called=True) as router:
        route = router.post(ENDPOINT).respond(json={"data": {}})
        await client.execute(key)

    body = json.loads(route.calls.last.request.content)
    assert body["variables"] == {
        "platform": "solana",
        "identity": "7EcDhSYGxXyscszYEp35KHN8vvw3svAuLKTzXwCFLtV",
    }
