"""Tests for the Morpho GraphQL client."""

import httpx
import pytest

from conftest import TEST_URL
from morpho_mcp.morpho.gql_client import MorphoAPIError, MorphoGraphQLClient


def _client(handler) -> MorphoGraphQLClient:
    return MorphoGraphQLClient(TEST_URL, timeout_seconds=5.0, transport=httpx.MockTransport(handler))


class TestExecute:
    @pytest.mark.asyncio
    async def test_posts_query_and_variables(self, respond_with):
        client, transport = respond_with({"markets": {"items": []}})

        data = await client.execute("query { markets { items { uniqueKey } } }", {"chainId": 1})

        assert data == {"markets": {"items": []}}
        assert transport.last_query == "query { markets { items { uniqueKey } } }"
        assert transport.last_variables == {"chainId": 1}

    @pytest.mark.asyncio
    async def test_no_variables_key_when_none_given(self, respond_with):
        client, transport = respond_with({"markets": {"items": []}})
        await client.execute("query { markets { items { uniqueKey } } }")
        assert "variables" not in transport.requests[-1]

    @pytest.mark.asyncio
    async def test_http_error_status(self, failing_client):
        with pytest.raises(MorphoAPIError, match="status code 500"):
            await failing_client.execute("query { markets { items { uniqueKey } } }")

    @pytest.mark.asyncio
    async def test_graphql_errors(self):
        client = _client(
            lambda request: httpx.Response(
                200, json={"errors": [{"message": "No results matching given parameters"}], "data": None}
            )
        )
        with pytest.raises(MorphoAPIError, match="No results matching given parameters"):
            await client.execute("query { marketByUniqueKey(uniqueKey: \"0x0\") { uniqueKey } }")

    @pytest.mark.asyncio
    async def test_missing_data(self):
        client = _client(lambda request: httpx.Response(200, json={"unexpected": True}))
        with pytest.raises(MorphoAPIError, match="Unexpected GraphQL response"):
            await client.execute("query { markets { items { uniqueKey } } }")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client = _client(lambda request: httpx.Response(200, content=b"<html>bad gateway</html>"))
        with pytest.raises(MorphoAPIError, match="Invalid JSON"):
            await client.execute("query { markets { items { uniqueKey } } }")

    @pytest.mark.asyncio
    async def test_timeout_is_a_network_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(MorphoAPIError, match="timed out after 5.0s"):
            await _client(handler).execute("query { markets { items { uniqueKey } } }")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(MorphoAPIError, match="connection refused"):
            await _client(handler).execute("query { markets { items { uniqueKey } } }")
