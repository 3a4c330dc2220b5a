"""Tool catalog and dispatcher.

The catalog is a fixed tuple of :class:`ToolSpec`; it is indexed once into
:data:`TOOLS`, which ``call_tool`` uses to route an invocation by name.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import ValidationError

from morpho_mcp.config import Settings
from morpho_mcp.morpho.gql_client import MorphoAPIError, MorphoGraphQLClient
from morpho_mcp.tools import handlers
from morpho_mcp.tools.params import (
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

logger = logging.getLogger(__name__)

Handler = Callable[[MorphoGraphQLClient, Settings, Any], Awaitable[Any]]


class UnknownToolError(LookupError):
    """Raised when a call names a tool that is not in the catalog."""


@dataclass(frozen=True)
class ToolSpec:
    """One catalog entry: how the tool is advertised and which handler serves it."""

    name: str
    description: str
    resource: str
    params_model: Type[ToolParams]
    handler: Handler

    def input_schema(self) -> Dict[str, Any]:
        """JSON schema of the tool's arguments object."""
        schema = self.params_model.model_json_schema()
        schema.pop("title", None)
        schema.pop("description", None)
        schema.setdefault("properties", {})
        return schema


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool call: the text payload and whether it is an error."""

    text: str
    is_error: bool = False


TOOL_SPECS: Tuple[ToolSpec, ...] = (
    ToolSpec(
        name="get_markets",
        description="Retrieves markets from Morpho with pagination, ordering, and filtering support.",
        resource="markets",
        params_model=MarketsParams,
        handler=handlers.get_markets,
    ),
    ToolSpec(
        name="get_whitelisted_markets",
        description="Retrieves only whitelisted markets from Morpho.",
        resource="whitelisted markets",
        params_model=NoParams,
        handler=handlers.get_whitelisted_markets,
    ),
    ToolSpec(
        name="get_asset_price",
        description="Get current price and yield information for specific assets.",
        resource="asset price",
        params_model=AssetPriceParams,
        handler=handlers.get_asset_price,
    ),
    ToolSpec(
        name="get_market_positions",
        description="Get positions overview for specific markets with pagination and ordering.",
        resource="market positions",
        params_model=MarketPositionsParams,
        handler=handlers.get_market_positions,
    ),
    ToolSpec(
        name="get_historical_apy",
        description="Get historical APY data for a specific market.",
        resource="historical APY",
        params_model=HistoricalApyParams,
        handler=handlers.get_historical_apy,
    ),
    ToolSpec(
        name="get_oracle_details",
        description="Get oracle details for a specific market.",
        resource="oracle details",
        params_model=OracleDetailsParams,
        handler=handlers.get_oracle_details,
    ),
    ToolSpec(
        name="get_account_overview",
        description="Get account overview including positions and transactions.",
        resource="account overview",
        params_model=AccountOverviewParams,
        handler=handlers.get_account_overview,
    ),
    ToolSpec(
        name="get_liquidations",
        description="Get liquidation events with filtering and pagination.",
        resource="liquidations",
        params_model=LiquidationsParams,
        handler=handlers.get_liquidations,
    ),
    ToolSpec(
        name="get_vaults",
        description="Retrieves vaults from Morpho with pagination and ordering, including APY and total assets.",
        resource="vaults",
        params_model=VaultsParams,
        handler=handlers.get_vaults,
    ),
    ToolSpec(
        name="get_vault_positions",
        description="Get depositor positions of a specific vault with pagination and ordering.",
        resource="vault positions",
        params_model=VaultPositionsParams,
        handler=handlers.get_vault_positions,
    ),
    ToolSpec(
        name="get_vault_transactions",
        description="Get vault deposit, withdraw, fee and transfer transactions with pagination.",
        resource="vault transactions",
        params_model=VaultTransactionsParams,
        handler=handlers.get_vault_transactions,
    ),
    ToolSpec(
        name="get_vault_allocation",
        description="Get the market allocation of a vault, its allocators and pending supply caps.",
        resource="vault allocation",
        params_model=VaultAllocationParams,
        handler=handlers.get_vault_allocation,
    ),
    ToolSpec(
        name="get_vault_reallocates",
        description="Get reallocation events of a specific vault with pagination.",
        resource="vault reallocates",
        params_model=VaultReallocatesParams,
        handler=handlers.get_vault_reallocates,
    ),
    ToolSpec(
        name="get_vault_apy_history",
        description="Get historical APY and net APY data for a specific vault.",
        resource="vault APY history",
        params_model=VaultApyHistoryParams,
        handler=handlers.get_vault_apy_history,
    ),
)

TOOLS: Dict[str, ToolSpec] = {spec.name: spec for spec in TOOL_SPECS}


def list_tools() -> List[ToolSpec]:
    """Return the catalog in declaration order."""
    return list(TOOL_SPECS)


def get_tool(name: str) -> ToolSpec:
    """Look up a tool by name, raising :class:`UnknownToolError` when absent."""
    try:
        return TOOLS[name]
    except KeyError:
        raise UnknownToolError(f"Tool not found: {name}") from None


async def call_tool(
    name: str,
    arguments: Optional[Mapping[str, Any]],
    client: MorphoGraphQLClient,
    settings: Settings,
) -> ToolResult:
    """Run one tool and return its pretty-printed JSON result.

    API failures and validation failures (of the arguments or of the response)
    become an error result naming the resource; an unknown tool name raises.
    """
    spec = get_tool(name)
    logger.info("%s called with: %s", name, dict(arguments or {}))
    try:
        params = spec.params_model.model_validate(dict(arguments or {}))
        result = await spec.handler(client, settings, params)
    except (MorphoAPIError, ValidationError) as exc:
        logger.error("Error calling Morpho API for %s: %s", name, exc)
        return ToolResult(text=f"Error retrieving {spec.resource}: {exc}", is_error=True)

    return ToolResult(text=json.dumps(result, indent=2))
