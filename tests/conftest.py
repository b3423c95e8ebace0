"""
Pytest fixtures for MERC Analytics tests.

Upstream providers are replaced by an ``httpx.MockTransport`` that routes
requests by host and path fragment, so assemblers and routes run end to end
without network access.
"""

import json
from collections.abc import Callable
from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio

from merc_analytics.api import ProviderSet
from merc_analytics.config import ApiConfig, ApiKeys, Config

NOW = datetime(2025, 12, 1, tzinfo=timezone.utc)

DEX_POOL_ETH = "0x99543a3dcf169c8e442cc5ba1cb978ff1df2a8be"
DEX_POOL_BASE = "0x52cee6aa2d53882ac1f3497c563f0439fc178744"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

WALLET_A = "0xAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAa"
WALLET_B = "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
WALLET_C = "0xcccccccccccccccccccccccccccccccccccccccc"

ALCHEMY_ETH_HOST = "eth-mainnet.g.alchemy.com"
ALCHEMY_BASE_HOST = "base-mainnet.g.alchemy.com"

Responder = Callable[[httpx.Request], httpx.Response]


def iso(ts: int) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def alchemy_transfer(from_address: str, to_address: str, value: float, ts: int, tx_hash: str = "0xhash") -> dict:
    """One entry of an ``alchemy_getAssetTransfers`` result."""
    return {
        "from": from_address,
        "to": to_address,
        "value": value,
        "hash": tx_hash,
        "metadata": {"blockTimestamp": iso(ts)},
        "rawContract": {"value": hex(int(value * 10**18)), "decimal": "0x12"},
    }


def alchemy_body(transfers: list[dict]) -> dict:
    return {"jsonrpc": "2.0", "id": 1, "result": {"transfers": transfers}}


class Upstream:
    """Routes mocked requests to canned responses by host and path fragment."""

    def __init__(self):
        self.routes: list[tuple[str, str, Responder | dict | int]] = []
        self.requests: list[httpx.Request] = []

    def add(self, host: str, fragment: str, response: Responder | dict | int):
        """Register a JSON body, a status code, or a callable for matching requests."""
        self.routes.insert(0, (host, fragment, response))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for host, fragment, response in self.routes:
            if request.url.host == host and fragment in str(request.url):
                if callable(response):
                    return response(request)
                if isinstance(response, int):
                    return httpx.Response(response)
                return httpx.Response(200, json=response)
        return httpx.Response(503)


def rpc_params(request: httpx.Request) -> dict:
    return json.loads(request.content)["params"][0]


@pytest.fixture
def config() -> Config:
    return Config(
        api=ApiConfig(cache_enabled=False),
        keys=ApiKeys(alchemy="test-alchemy", moralis="test-moralis", dune="test-dune"),
    )


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest_asyncio.fixture
async def providers(config, upstream):
    provider_set = ProviderSet.from_config(config, transport=httpx.MockTransport(upstream))
    yield provider_set
    await provider_set.close()


@pytest.fixture
def client(config, upstream):
    """FastAPI TestClient backed by the mocked upstreams."""
    from fastapi.testclient import TestClient

    from merc_analytics.server import create_app

    provider_set = ProviderSet.from_config(config, transport=httpx.MockTransport(upstream))
    with TestClient(create_app(config, providers=provider_set)) as test_client:
        yield test_client
