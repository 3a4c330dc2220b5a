"""Tool handlers: build the query, call the Morpho API, validate the response.

Every handler returns JSON-ready data; errors propagate to the dispatcher.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from morpho_mcp.config import Settings
from morpho_mcp.morpho.gql_client import MorphoGraphQLClient
from morpho_mcp.morpho.models import (
    AccountOverview,
    AssetPage,
    MarketHistoricalApy,
    MarketList,
    MarketOracle,
    MarketPage,
    MarketPositionPage,
    TransactionPage,
    VaultAllocation,
    VaultHistoricalApy,
    VaultPage,
    VaultPositionPage,
    VaultReallocatePage,
    market_in_display_units,
    vault_in_display_units,
)
from morpho_mcp.morpho.queries import (
    ASSETS_SELECTION,
    MARKET_APYS_QUERY,
    MARKET_ORACLE_QUERY,
    MARKET_POSITIONS_SELECTION,
    MARKETS_SELECTION,
    TRANSACTIONS_LIQUIDATION_SELECTION,
    TRANSACTIONS_VAULT_SELECTION,
    USER_OVERVIEW_QUERY,
    VAULT_ALLOCATION_QUERY,
    VAULT_APY_HISTORY_QUERY,
    VAULT_POSITIONS_SELECTION,
    VAULT_REALLOCATES_SELECTION,
    VAULTS_SELECTION,
    WHITELISTED_MARKETS_FILTER,
    WHITELISTED_MARKETS_SELECTION,
    GraphQLEnum,
    build_query,
    render_arguments,
)
from morpho_mcp.tools.params import (
    VAULT_TRANSACTION_TYPES,
    AccountOverviewParams,
    AssetPriceParams,
    HistoricalApyParams,
    LiquidationsParams,
    MarketPositionsParams,
    MarketsParams,
    NoParams,
    OracleDetailsParams,
    ToolParams,
    VaultAllocationParams,
    VaultApyHistoryParams,
    VaultPositionsParams,
    VaultReallocatesParams,
    VaultsParams,
    VaultTransactionsParams,
)


def dump(model: BaseModel) -> Any:
    """Serialize a validated model with upstream field names, leaving out fields upstream omitted."""
    return model.model_dump(mode="json", by_alias=True, exclude_unset=True)


def _chain_id(settings: Settings, chain_id: Optional[int]) -> int:
    return settings.chain_id if chain_id is None else chain_id


def _list_query(root_field: str, selection: str, params: ToolParams, where: Optional[Dict[str, Any]] = None) -> str:
    return build_query(root_field, selection, render_arguments(where=where, **params.clause_fields()))


async def get_markets(client: MorphoGraphQLClient, settings: Settings, params: MarketsParams) -> Any:
    where = params.where.model_dump(exclude_none=True) if params.where else None
    data = await client.execute(_list_query("markets", MARKETS_SELECTION, params, where))
    page = MarketPage.model_validate(data.get("markets"))
    if settings.display_units:
        page = page.model_copy(update={"items": [market_in_display_units(m) for m in page.items]})
    return dump(page)


async def get_whitelisted_markets(client: MorphoGraphQLClient, settings: Settings, params: NoParams) -> Any:
    query = build_query("markets", WHITELISTED_MARKETS_SELECTION, render_arguments(where=WHITELISTED_MARKETS_FILTER))
    data = await client.execute(query)
    markets = MarketList.model_validate(data.get("markets")).items
    if settings.display_units:
        markets = [market_in_display_units(m) for m in markets]
    return [dump(m) for m in markets]


async def get_asset_price(client: MorphoGraphQLClient, settings: Settings, params: AssetPriceParams) -> Any:
    where = {"symbol_in": [params.symbol], "chainId_in": [_chain_id(settings, params.chainId)]}
    data = await client.execute(_list_query("assets", ASSETS_SELECTION, params, where))
    return dump(AssetPage.model_validate(data.get("assets")))


async def get_market_positions(
    client: MorphoGraphQLClient, settings: Settings, params: MarketPositionsParams
) -> Any:
    where = {"marketUniqueKey_in": [params.marketUniqueKey]}
    data = await client.execute(_list_query("marketPositions", MARKET_POSITIONS_SELECTION, params, where))
    return dump(MarketPositionPage.model_validate(data.get("marketPositions")))


async def get_historical_apy(client: MorphoGraphQLClient, settings: Settings, params: HistoricalApyParams) -> Any:
    variables = {
        "uniqueKey": params.marketUniqueKey,
        "chainId": _chain_id(settings, params.chainId),
        "options": {
            "startTimestamp": params.startTimestamp,
            "endTimestamp": params.endTimestamp,
            "interval": params.interval,
        },
    }
    data = await client.execute(MARKET_APYS_QUERY, variables)
    return dump(MarketHistoricalApy.model_validate(data.get("marketByUniqueKey")))


async def get_oracle_details(client: MorphoGraphQLClient, settings: Settings, params: OracleDetailsParams) -> Any:
    variables = {"uniqueKey": params.marketUniqueKey, "chainId": _chain_id(settings, params.chainId)}
    data = await client.execute(MARKET_ORACLE_QUERY, variables)
    return dump(MarketOracle.model_validate(data.get("marketByUniqueKey")))


async def get_account_overview(
    client: MorphoGraphQLClient, settings: Settings, params: AccountOverviewParams
) -> Any:
    variables = {"address": params.address, "chainId": _chain_id(settings, params.chainId)}
    data = await client.execute(USER_OVERVIEW_QUERY, variables)
    return dump(AccountOverview.model_validate(data.get("userByAddress")))


async def get_liquidations(client: MorphoGraphQLClient, settings: Settings, params: LiquidationsParams) -> Any:
    where: Dict[str, Any] = {"type_in": [GraphQLEnum("MarketLiquidation")]}
    if params.marketUniqueKeys is not None:
        where["marketUniqueKey_in"] = params.marketUniqueKeys
    if params.startTimestamp is not None:
        where["timestamp_gte"] = params.startTimestamp
    if params.endTimestamp is not None:
        where["timestamp_lte"] = params.endTimestamp
    data = await client.execute(_list_query("transactions", TRANSACTIONS_LIQUIDATION_SELECTION, params, where))
    return dump(TransactionPage.model_validate(data.get("transactions")))


async def get_vaults(client: MorphoGraphQLClient, settings: Settings, params: VaultsParams) -> Any:
    data = await client.execute(_list_query("vaults", VAULTS_SELECTION, params))
    page = VaultPage.model_validate(data.get("vaults"))
    if settings.display_units:
        page = page.model_copy(update={"items": [vault_in_display_units(v) for v in page.items]})
    return dump(page)


async def get_vault_positions(client: MorphoGraphQLClient, settings: Settings, params: VaultPositionsParams) -> Any:
    where = {"vaultAddress_in": [params.vaultAddress]}
    data = await client.execute(_list_query("vaultPositions", VAULT_POSITIONS_SELECTION, params, where))
    return dump(VaultPositionPage.model_validate(data.get("vaultPositions")))


async def get_vault_transactions(
    client: MorphoGraphQLClient, settings: Settings, params: VaultTransactionsParams
) -> Any:
    types: List[str] = params.type_in or VAULT_TRANSACTION_TYPES
    where = {"type_in": [GraphQLEnum(t) for t in types]}
    data = await client.execute(_list_query("transactions", TRANSACTIONS_VAULT_SELECTION, params, where))
    return dump(TransactionPage.model_validate(data.get("transactions")))


async def get_vault_allocation(
    client: MorphoGraphQLClient, settings: Settings, params: VaultAllocationParams
) -> Any:
    variables = {"address": params.address, "chainId": _chain_id(settings, params.chainId)}
    data = await client.execute(VAULT_ALLOCATION_QUERY, variables)
    return dump(VaultAllocation.model_validate(data.get("vaultByAddress")))


async def get_vault_reallocates(
    client: MorphoGraphQLClient, settings: Settings, params: VaultReallocatesParams
) -> Any:
    where = {"vaultAddress_in": [params.vaultAddress]}
    data = await client.execute(_list_query("vaultReallocates", VAULT_REALLOCATES_SELECTION, params, where))
    return dump(VaultReallocatePage.model_validate(data.get("vaultReallocates")))


async def get_vault_apy_history(
    client: MorphoGraphQLClient, settings: Settings, params: VaultApyHistoryParams
) -> Any:
    variables = {
        "address": params.address,
        "chainId": _chain_id(settings, params.chainId),
        "options": params.options.model_dump(exclude_none=True),
    }
    data = await client.execute(VAULT_APY_HISTORY_QUERY, variables)
    return dump(VaultHistoricalApy.model_validate(data.get("vaultByAddress")))
