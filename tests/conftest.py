"""
Shared fixtures for morpho-mcp tests.

Upstream HTTP is simulated with ``httpx.MockTransport``; no test touches the network.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from morpho_mcp.config import Settings
from morpho_mcp.morpho.gql_client import MorphoGraphQLClient

TEST_URL = "https://morpho.test/graphql"


def make_asset(symbol: str = "USDC", decimals: int = 6) -> Dict[str, Any]:
    return {"address": f"0x{symbol.lower()}", "symbol": symbol, "decimals": decimals}


def make_market(**overrides: Any) -> Dict[str, Any]:
    """A market item the way the API returns it (big amounts as strings)."""
    market: Dict[str, Any] = {
        "uniqueKey": "0xmarket",
        "lltv": "860000000000000000",
        "oracleAddress": "0xoracle",
        "irmAddress": "0xirm",
        "loanAsset": make_asset("WETH", 18),
        "collateralAsset": make_asset("wstETH", 18),
        "state": {
            "borrowApy": 0.05,
            "borrowAssets": "1000000000000000000",
            "borrowAssetsUsd": 3500.5,
            "supplyApy": 0.04,
            "supplyAssets": "2000000000000000000",
            "supplyAssetsUsd": 7001.0,
            "fee": 0,
            "utilization": 0.5,
        },
    }
    market.update(overrides)
    return market


def make_vault(**overrides: Any) -> Dict[str, Any]:
    vault: Dict[str, Any] = {
        "address": "0xvault",
        "symbol": "steakUSDC",
        "name": "Steakhouse USDC",
        "creationBlockNumber": 18000000,
        "creationTimestamp": "1700000000",
        "creatorAddress": "0xcreator",
        "whitelisted": True,
        "asset": make_asset("USDC", 6),
        "chain": {"id": 1, "network": "ethereum"},
        "state": {
            "apy": 0.061,
            "netApy": 0.055,
            "totalAssets": "2500000000",
            "totalAssetsUsd": 2500.0,
            "fee": 0.1,
            "timelock": "86400",
        },
        "warnings": [],
    }
    vault.update(overrides)
    return vault


def page(items: List[Dict[str, Any]], count_total: int | None = None) -> Dict[str, Any]:
    return {"pageInfo": {"count": len(items), "countTotal": count_total or len(items)}, "items": items}


class RecordingTransport:
    """Mock transport that records request payloads and replies with a fixed response."""

    def __init__(self, responder: Callable[[Dict[str, Any]], httpx.Response]) -> None:
        self.requests: List[Dict[str, Any]] = []
        self._responder = responder

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        return self._responder(payload)

    @property
    def last_query(self) -> str:
        return self.requests[-1]["query"]

    @property
    def last_variables(self) -> Dict[str, Any]:
        return self.requests[-1].get("variables", {})


@pytest.fixture
def settings() -> Settings:
    return Settings(morpho_graphql_url=TEST_URL)


@pytest.fixture
def respond_with():
    """Build a client whose transport answers every POST with ``{"data": data}``."""

    def _build(data: Any, status_code: int = 200):
        transport = RecordingTransport(lambda payload: httpx.Response(status_code, json={"data": data}))
        client = MorphoGraphQLClient(TEST_URL, transport=httpx.MockTransport(transport))
        return client, transport

    return _build


@pytest.fixture
def failing_client():
    """A client whose transport answers every POST with HTTP 500."""
    transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"message": "boom"}))
    return MorphoGraphQLClient(TEST_URL, transport=transport)
