"""Input shapes of the MCP tools.

Each tool validates its ``arguments`` object against one of these models; the
model's JSON schema is what ``list_tools`` advertises to the host.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, get_args

from pydantic import BaseModel, Field

OrderDirection = Literal["Asc", "Desc"]
Interval = Literal["HOUR", "DAY", "WEEK", "MONTH"]

MarketOrderBy = Literal[
    "Lltv",
    "BorrowApy",
    "SupplyApy",
    "BorrowAssets",
    "SupplyAssets",
    "BorrowAssetsUsd",
    "SupplyAssetsUsd",
    "Fee",
    "Utilization",
]
MarketPositionOrderBy = Literal["SupplyShares", "BorrowShares", "SupplyAssets", "BorrowAssets"]
LiquidationOrderBy = Literal["Timestamp", "SeizedAssetsUsd", "RepaidAssetsUsd"]
VaultOrderBy = Literal["TotalAssetsUsd", "Apy", "NetApy"]
VaultPositionOrderBy = Literal["Shares", "Assets", "AssetsUsd"]
VaultTransactionType = Literal["MetaMorphoDeposit", "MetaMorphoWithdraw", "MetaMorphoFee", "MetaMorphoTransfer"]

VAULT_TRANSACTION_TYPES: List[str] = list(get_args(VaultTransactionType))


class ToolParams(BaseModel):
    """Base for tool inputs."""

    def clause_fields(self) -> Dict[str, Any]:
        """Pagination/order arguments in the keyword form ``render_arguments`` takes."""
        return {
            "first": getattr(self, "first", None),
            "skip": getattr(self, "skip", None),
            "order_by": getattr(self, "orderBy", None),
            "order_direction": getattr(self, "orderDirection", None),
        }


class PaginationParams(ToolParams):
    first: Optional[int] = Field(default=None, ge=0, description="Number of items to return")
    skip: Optional[int] = Field(default=None, ge=0, description="Number of items to skip")


class NoParams(ToolParams):
    pass


class MarketFilter(BaseModel):
    whitelisted: Optional[bool] = None
    collateralAssetAddress: Optional[str] = None
    loanAssetAddress: Optional[str] = None
    uniqueKey_in: Optional[List[str]] = None


class MarketsParams(PaginationParams):
    orderBy: Optional[MarketOrderBy] = Field(default=None, description="Field to order by")
    orderDirection: Optional[OrderDirection] = Field(default=None, description="Order direction")
    where: Optional[MarketFilter] = Field(default=None, description="Market filters")


class AssetPriceParams(PaginationParams):
    symbol: str = Field(description='Asset symbol (e.g. "sDAI")')
    chainId: Optional[int] = Field(default=None, description="Chain ID (default: 1 for Ethereum)")


class MarketPositionsParams(PaginationParams):
    marketUniqueKey: str = Field(description="Unique key of the market")
    orderBy: Optional[MarketPositionOrderBy] = Field(default=None, description="Field to order by")
    orderDirection: Optional[OrderDirection] = Field(default=None, description="Order direction")


class HistoricalApyParams(ToolParams):
    marketUniqueKey: str = Field(description="Unique key of the market")
    chainId: Optional[int] = Field(default=None, description="Chain ID (default: 1 for Ethereum)")
    startTimestamp: int = Field(description="Start of the range, unix seconds")
    endTimestamp: int = Field(description="End of the range, unix seconds")
    interval: Interval = Field(description="Sampling interval")


class OracleDetailsParams(ToolParams):
    marketUniqueKey: str = Field(description="Unique key of the market")
    chainId: Optional[int] = Field(default=None, description="Chain ID (default: 1 for Ethereum)")


class AccountOverviewParams(ToolParams):
    address: str = Field(description="Account address")
    chainId: Optional[int] = Field(default=None, description="Chain ID (default: 1 for Ethereum)")


class LiquidationsParams(PaginationParams):
    marketUniqueKeys: Optional[List[str]] = Field(default=None, description="Restrict to these markets")
    startTimestamp: Optional[int] = Field(default=None, description="Earliest liquidation, unix seconds")
    endTimestamp: Optional[int] = Field(default=None, description="Latest liquidation, unix seconds")
    orderBy: Optional[LiquidationOrderBy] = Field(default=None, description="Field to order by")
    orderDirection: Optional[OrderDirection] = Field(default=None, description="Order direction")


class VaultsParams(PaginationParams):
    orderBy: Optional[VaultOrderBy] = Field(default=None, description="Field to order by")
    orderDirection: Optional[OrderDirection] = Field(default=None, description="Order direction")


class VaultPositionsParams(PaginationParams):
    vaultAddress: str = Field(description="Vault address")
    orderBy: Optional[VaultPositionOrderBy] = Field(default=None, description="Field to order by")
    orderDirection: Optional[OrderDirection] = Field(default=None, description="Order direction")


class VaultTransactionsParams(PaginationParams):
    orderBy: Optional[Literal["Timestamp"]] = Field(default=None, description="Field to order by")
    orderDirection: Optional[OrderDirection] = Field(default=None, description="Order direction")
    type_in: Optional[List[VaultTransactionType]] = Field(
        default=None, description="Transaction types to include (default: all vault types)"
    )


class VaultAllocationParams(ToolParams):
    address: str = Field(description="Vault address")
    chainId: Optional[int] = Field(default=None, description="Chain ID (default: 1 for Ethereum)")


class VaultReallocatesParams(PaginationParams):
    vaultAddress: str = Field(description="Vault address")
    orderBy: Optional[Literal["Timestamp"]] = Field(default=None, description="Field to order by")
    orderDirection: Optional[OrderDirection] = Field(default=None, description="Order direction")


class TimeseriesOptions(BaseModel):
    startTimestamp: Optional[int] = None
    endTimestamp: Optional[int] = None
    interval: Optional[Interval] = None


class VaultApyHistoryParams(ToolParams):
    address: str = Field(description="Vault address")
    options: TimeseriesOptions = Field(description="Time range and sampling interval")
    chainId: Optional[int] = Field(default=None, description="Chain ID (default: 1 for Ethereum)")
