import asyncio

import pytest

from relate.cache import IdentityCache
from relate.lookup import LookupService


# A trimmed-down but structurally faithful identity-graph `data` object.
VITALIK_DOCUMENT = {
    "identity": {
        "id": "ens,vitalik.eth",
        "identity": "vitalik.eth",
        "platform": "ens",
        "network": "ethereum",
        "isPrimary": True,
        "primaryName": "vitalik.eth",
        "resolvedAddress": [{"address": "0xd8da6bf26964af9d7eed9e03e53415d37aa96045", "network": "ethereum"}],
        "ownerAddress": [{"address": "0xd8da6bf26964af9d7eed9e03e53415d37aa96045", "network": "ethereum"}],
        "managerAddress": [{"address": "0xd8da6bf26964af9d7eed9e03e53415d37aa96045", "network": "ethereum"}],
        "profile": {
            "identity": "vitalik.eth",
            "platform": "ens",
            "displayName": "vitalik.eth",
            "description": "mi pinxe lo crino tcati",
            "addresses": [{"address": "0xd8da6bf26964af9d7eed9e03e53415d37aa96045", "network": "ethereum"}],
        },
        "identityGraph": {
            "graphId": "b7a9bbbd-8bd5-4d2e-a1d4-0cc5b8b0a1a3",
            "vertices": [
                {"identity": "vitalik.eth", "platform": "ens", "isPrimary": True},
                {"identity": "vitalik", "platform": "farcaster", "isPrimary": False},
                {"identity": "vitalik.lens", "platform": "lens", "isPrimary": False},
            ],
        },
    }
}


class FakeClock:
    """A manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeExecutor:
    """Records every execute() call; returns `payload` or raises `error`."""

    def __init__(self, payload=None, error=None, delay: float = 0.0):
        self.payload = payload
        self.error = error
        self.delay = delay
        self.calls = []
        self.closed = False

    async def execute(self, key):
        self.calls.append(key)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.payload

    async def aclose(self):
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return IdentityCache(ttl=300, clock=clock)


@pytest.fixture
def executor():
    return FakeExecutor(payload=VITALIK_DOCUMENT)


@pytest.fixture
def service(executor, cache):
    return LookupService(executor=executor, cache=cache)
