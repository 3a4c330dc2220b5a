"""Tests for the tool catalog and dispatcher."""

import json

import pytest

from conftest import make_market, page
from morpho_mcp.tools.registry import TOOLS, UnknownToolError, call_tool, get_tool, list_tools

EXPECTED_TOOLS = [
    "get_markets",
    "get_whitelisted_markets",
    "get_asset_price",
    "get_market_positions",
    "get_historical_apy",
    "get_oracle_details",
    "get_account_overview",
    "get_liquidations",
    "get_vaults",
    "get_vault_positions",
    "get_vault_transactions",
    "get_vault_allocation",
    "get_vault_reallocates",
    "get_vault_apy_history",
]


class TestCatalog:
    def test_catalog_names(self):
        assert [spec.name for spec in list_tools()] == EXPECTED_TOOLS

    def test_every_listed_tool_dispatches(self):
        names = [spec.name for spec in list_tools()]
        assert len(names) == len(set(names))
        assert set(names) == set(TOOLS)
        for name in names:
            assert get_tool(name).name == name

    def test_input_schemas_are_objects(self):
        for spec in list_tools():
            schema = spec.input_schema()
            assert schema["type"] == "object"
            assert "properties" in schema

    def test_required_arguments(self):
        required = {spec.name: set(spec.input_schema().get("required", [])) for spec in list_tools()}
        assert required["get_markets"] == set()
        assert required["get_whitelisted_markets"] == set()
        assert required["get_asset_price"] == {"symbol"}
        assert required["get_market_positions"] == {"marketUniqueKey"}
        assert required["get_historical_apy"] == {"marketUniqueKey", "startTimestamp", "endTimestamp", "interval"}
        assert required["get_oracle_details"] == {"marketUniqueKey"}
        assert required["get_account_overview"] == {"address"}
        assert required["get_vault_positions"] == {"vaultAddress"}
        assert required["get_vault_allocation"] == {"address"}
        assert required["get_vault_reallocates"] == {"vaultAddress"}
        assert required["get_vault_apy_history"] == {"address", "options"}

    def test_order_by_enum_advertised(self):
        schema = get_tool("get_markets").input_schema()
        order_by = schema["properties"]["orderBy"]
        enum_values = next(option["enum"] for option in order_by["anyOf"] if "enum" in option)
        assert "BorrowApy" in enum_values
        assert "Utilization" in enum_values


class TestCallTool:
    @pytest.mark.asyncio
    async def test_unknown_tool(self, respond_with, settings):
        client, transport = respond_with({})
        with pytest.raises(UnknownToolError, match="Tool not found: get_everything"):
            await call_tool("get_everything", {}, client, settings)
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_success_is_pretty_json(self, respond_with, settings):
        client, _ = respond_with({"markets": page([make_market()])})

        result = await call_tool("get_markets", {"first": 1}, client, settings)

        assert result.is_error is False
        assert result.text.startswith("{\n  ")
        body = json.loads(result.text)
        assert body["pageInfo"] == {"count": 1, "countTotal": 1}
        assert body["items"][0]["state"]["borrowAssets"] == 1000000000000000000

    @pytest.mark.asyncio
    async def test_http_failure_becomes_tool_error(self, failing_client, settings):
        result = await call_tool("get_markets", {}, failing_client, settings)

        assert result.is_error is True
        assert result.text.startswith("Error retrieving markets: ")
        assert "500" in result.text

    @pytest.mark.asyncio
    async def test_resource_name_in_error(self, failing_client, settings):
        result = await call_tool("get_vault_apy_history", {"address": "0xv", "options": {}}, failing_client, settings)
        assert result.text.startswith("Error retrieving vault APY history: ")

    @pytest.mark.asyncio
    async def test_non_finite_number_becomes_tool_error(self, respond_with, settings):
        raw = make_market()
        raw["state"]["fee"] = "NaN"
        client, _ = respond_with({"markets": page([raw])})

        result = await call_tool("get_markets", {}, client, settings)

        assert result.is_error is True
        assert result.text.startswith("Error retrieving markets: ")

    @pytest.mark.asyncio
    async def test_bad_response_shape_becomes_tool_error(self, respond_with, settings):
        bad_market = make_market()
        del bad_market["state"]
        client, _ = respond_with({"markets": page([bad_market])})

        result = await call_tool("get_markets", {}, client, settings)

        assert result.is_error is True
        assert result.text.startswith("Error retrieving markets: ")

    @pytest.mark.asyncio
    async def test_missing_root_field_becomes_tool_error(self, respond_with, settings):
        client, _ = respond_with({})
        result = await call_tool("get_vaults", {}, client, settings)
        assert result.is_error is True
        assert result.text.startswith("Error retrieving vaults: ")

    @pytest.mark.asyncio
    async def test_invalid_arguments_become_tool_error(self, respond_with, settings):
        client, transport = respond_with({})

        result = await call_tool("get_markets", {"orderBy": "Popularity"}, client, settings)

        assert result.is_error is True
        assert result.text.startswith("Error retrieving markets: ")
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, respond_with, settings):
        client, _ = respond_with({})
        result = await call_tool("get_asset_price", {}, client, settings)
        assert result.is_error is True
        assert "symbol" in result.text

    @pytest.mark.asyncio
    async def test_oracle_with_unknown_type_is_tool_error(self, respond_with, settings):
        client, _ = respond_with(
            {
                "marketByUniqueKey": {
                    "oracle": {
                        "address": "0xoracle",
                        "type": "CustomOracle",
                        "data": {"__typename": "CustomOracleData"},
                    }
                }
            }
        )

        result = await call_tool("get_oracle_details", {"marketUniqueKey": "0xm"}, client, settings)

        assert result.is_error is True
        assert result.text.startswith("Error retrieving oracle details: ")
