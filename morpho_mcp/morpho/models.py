from __future__ import annotations

import math
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


def to_number(value: Any) -> Any:
    """Coerce a numeric string to ``int``/``float``; ``None`` becomes ``0``.

    Integer strings stay ``int`` so 18-decimal base units keep full precision.
    NaN and infinities are rejected, they have no JSON encoding.
    """
    if value is None:
        return 0
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            raise ValueError(f"not a numeric value: {value!r}") from None
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"not a finite number: {value!r}")
    return value


Numeric = Annotated[Union[int, float], BeforeValidator(to_number)]
# Optional in the payload, but an explicit null still becomes 0.
OptionalNumeric = Annotated[Optional[Union[int, float]], BeforeValidator(to_number)]

ZERO_ASSET: Dict[str, Any] = {"address": "", "symbol": "", "decimals": 0}


def _default_asset(value: Any) -> Any:
    return dict(ZERO_ASSET) if value is None else value


class MorphoModel(BaseModel):
    """Base for upstream shapes: field names follow the API's camelCase."""

    model_config = ConfigDict(populate_by_name=True)


class PageInfo(MorphoModel):
    """Pagination counters of a list response."""

    count: int
    countTotal: int


class Asset(MorphoModel):
    """Token metadata; a null upstream asset becomes the zero-value asset."""

    address: str
    symbol: str
    decimals: int


NullableAsset = Annotated[Asset, BeforeValidator(_default_asset)]


class ChainInfo(MorphoModel):
    """Chain metadata."""

    id: int
    network: str


class AssetChain(ChainInfo):
    """Chain metadata of a priced asset."""

    currency: str


class UserRef(MorphoModel):
    """Reference to an account by address."""

    address: str


class MarketRef(MorphoModel):
    """Reference to a market by unique key."""

    uniqueKey: str


class VaultRef(MorphoModel):
    """Reference to a vault by address."""

    address: str
    name: Optional[str] = None


# --- Markets -----------------------------------------------------------------


class MarketState(MorphoModel):
    """Current market state snapshot returned by Morpho API."""

    borrowApy: Numeric
    borrowAssets: Numeric
    borrowAssetsUsd: Numeric
    supplyApy: Numeric
    supplyAssets: Numeric
    supplyAssetsUsd: Numeric
    fee: Numeric
    utilization: Numeric


class Market(MorphoModel):
    """Market parameters + state."""

    uniqueKey: str
    lltv: Numeric
    oracleAddress: str
    irmAddress: str
    whitelisted: Optional[bool] = None
    loanAsset: NullableAsset
    collateralAsset: NullableAsset
    state: MarketState


class MarketPage(MorphoModel):
    """One page of markets."""

    pageInfo: PageInfo
    items: List[Market]


class MarketList(MorphoModel):
    """Unpaged list of markets."""

    items: List[Market]


# --- Assets ------------------------------------------------------------------


class AssetYield(MorphoModel):
    """Yield of a yield-bearing asset."""

    apr: Optional[float] = None


class AssetPrice(MorphoModel):
    """Current USD price and yield of an asset on one chain."""

    symbol: str
    address: str
    priceUsd: Optional[float] = None
    chain: AssetChain
    yield_: Optional[AssetYield] = Field(default=None, alias="yield")


class AssetPage(MorphoModel):
    """One page of asset prices."""

    pageInfo: PageInfo
    items: List[AssetPrice]


# --- Positions ---------------------------------------------------------------


class PositionMarket(MorphoModel):
    """Market of a position with its assets."""

    uniqueKey: str
    loanAsset: NullableAsset
    collateralAsset: NullableAsset


class MarketPosition(MorphoModel):
    """A user's supply/borrow/collateral stake in one market."""

    supplyShares: OptionalNumeric = None
    supplyAssets: Numeric
    supplyAssetsUsd: Numeric
    borrowShares: OptionalNumeric = None
    borrowAssets: Numeric
    borrowAssetsUsd: Numeric
    collateral: OptionalNumeric = None
    collateralUsd: OptionalNumeric = None
    market: PositionMarket
    user: UserRef


class MarketPositionPage(MorphoModel):
    """One page of market positions."""

    pageInfo: PageInfo
    items: List[MarketPosition]


class VaultPosition(MorphoModel):
    """A user's deposit in one vault."""

    vault: VaultRef
    assets: Numeric
    assetsUsd: Numeric
    shares: Numeric
    user: Optional[UserRef] = None


class VaultPositionPage(MorphoModel):
    """One page of vault positions."""

    pageInfo: PageInfo
    items: List[VaultPosition]


# --- Historical series -------------------------------------------------------


class TimeseriesPoint(MorphoModel):
    """One ``{x, y}`` sample; ``y`` stays null when the API has no value."""

    x: Numeric
    y: Optional[float] = None


class MarketApySeries(MorphoModel):
    """Supply and borrow APY series of a market."""

    supplyApy: List[TimeseriesPoint]
    borrowApy: List[TimeseriesPoint]


class MarketHistoricalApy(MorphoModel):
    """Historical APY of a market."""

    uniqueKey: str
    historicalState: MarketApySeries


class VaultApySeries(MorphoModel):
    """APY and net APY series of a vault."""

    apy: List[TimeseriesPoint]
    netApy: List[TimeseriesPoint]


class VaultHistoricalApy(MorphoModel):
    """Historical APY of a vault."""

    address: str
    historicalState: VaultApySeries


# --- Oracles -----------------------------------------------------------------


class OracleFeed(MorphoModel):
    """Price feed read by an oracle."""

    address: str
    description: str
    vendor: str
    pair: str


class ChainlinkOracleData(MorphoModel):
    """Chainlink oracle payload."""

    type: Literal["MorphoChainlinkOracle"]
    baseFeedOne: OracleFeed
    vault: str


class ChainlinkOracleV2Data(MorphoModel):
    """Chainlink V2 oracle payload."""

    type: Literal["MorphoChainlinkOracleV2"]
    baseFeedOne: OracleFeed


OracleData = Annotated[Union[ChainlinkOracleData, ChainlinkOracleV2Data], Field(discriminator="type")]


class Oracle(MorphoModel):
    """Price-feed contract of a market; ``data`` is tagged by ``data.type``."""

    address: str
    type: str
    data: OracleData

    @model_validator(mode="before")
    @classmethod
    def _tag_data(cls, values: Any) -> Any:
        """Derive ``data.type`` from ``data.__typename`` (``XxxData`` -> ``Xxx``) when absent."""
        if not isinstance(values, dict):
            return values
        data = values.get("data")
        if isinstance(data, dict) and "type" not in data:
            data = dict(data)
            typename = str(data.pop("__typename", ""))
            data["type"] = typename[: -len("Data")] if typename.endswith("Data") else typename
            values = {**values, "data": data}
        return values


class MarketOracle(MorphoModel):
    """Oracle of a market."""

    oracle: Oracle


# --- Transactions ------------------------------------------------------------


class TransactionData(MorphoModel):
    """Type-dependent payload: liquidation fields or vault deposit/withdraw fields."""

    seizedAssets: OptionalNumeric = None
    repaidAssets: OptionalNumeric = None
    seizedAssetsUsd: OptionalNumeric = None
    repaidAssetsUsd: OptionalNumeric = None
    badDebtAssetsUsd: OptionalNumeric = None
    liquidator: Optional[str] = None
    market: Optional[MarketRef] = None
    shares: OptionalNumeric = None
    assets: OptionalNumeric = None
    vault: Optional[VaultRef] = None


class Transaction(MorphoModel):
    """On-chain transaction with its type-dependent payload."""

    blockNumber: Numeric
    hash: str
    type: str
    timestamp: Numeric
    user: UserRef
    data: Optional[TransactionData] = None


class TransactionPage(MorphoModel):
    """One page of transactions."""

    pageInfo: PageInfo
    items: List[Transaction]


# --- Accounts ----------------------------------------------------------------


class AccountMarketPosition(MorphoModel):
    """Market position summary in an account overview."""

    market: MarketRef
    borrowAssets: Numeric
    borrowAssetsUsd: Numeric
    supplyAssets: Numeric
    supplyAssetsUsd: Numeric


class AccountTransaction(MorphoModel):
    """Transaction summary in an account overview."""

    hash: str
    timestamp: Numeric
    type: str


class AccountOverview(MorphoModel):
    """Positions and transactions of one account."""

    address: str
    marketPositions: List[AccountMarketPosition]
    vaultPositions: List[VaultPosition]
    transactions: List[AccountTransaction]


# --- Vaults ------------------------------------------------------------------


class VaultState(MorphoModel):
    """Current vault state snapshot returned by Morpho API."""

    apy: Numeric
    netApy: Numeric
    totalAssets: Numeric
    totalAssetsUsd: Numeric
    fee: Numeric
    timelock: Numeric


class VaultWarning(MorphoModel):
    """Risk warning attached to a vault."""

    type: str
    level: str


class Vault(MorphoModel):
    """Vault metadata + state."""

    address: str
    symbol: str
    name: str
    creationBlockNumber: Numeric
    creationTimestamp: Numeric
    creatorAddress: Optional[str] = None
    whitelisted: Optional[bool] = None
    asset: NullableAsset
    chain: ChainInfo
    state: VaultState
    warnings: List[VaultWarning] = Field(default_factory=list)


class VaultPage(MorphoModel):
    """One page of vaults."""

    pageInfo: PageInfo
    items: List[Vault]


class AllocationMarket(MorphoModel):
    """Market a vault allocates to."""

    uniqueKey: str
    lltv: Numeric
    loanAsset: NullableAsset
    collateralAsset: NullableAsset


class MarketAllocation(MorphoModel):
    """Vault supply and cap in one market."""

    market: AllocationMarket
    supplyCap: Numeric
    supplyAssets: Numeric
    supplyAssetsUsd: Numeric


class VaultAllocationState(MorphoModel):
    """Vault totals and per-market allocation."""

    totalAssets: Numeric
    totalAssetsUsd: Numeric
    allocation: List[MarketAllocation]


class PendingCap(MorphoModel):
    """Supply cap change waiting for the timelock."""

    validAt: Numeric
    supplyCap: Numeric
    market: MarketRef


class VaultAllocation(MorphoModel):
    """Vault allocation, allocators and pending caps."""

    address: str
    name: str
    symbol: str
    asset: NullableAsset
    state: VaultAllocationState
    allocators: List[UserRef] = Field(default_factory=list)
    pendingCaps: List[PendingCap] = Field(default_factory=list)


class VaultReallocate(MorphoModel):
    """One reallocation of vault liquidity between markets."""

    hash: str
    timestamp: Numeric
    blockNumber: Numeric
    caller: str
    shares: Numeric
    assets: Numeric
    type: str
    vault: VaultRef
    market: MarketRef


class VaultReallocatePage(MorphoModel):
    """One page of vault reallocations."""

    pageInfo: PageInfo
    items: List[VaultReallocate]


# --- Display units -----------------------------------------------------------

_WAD_PERCENT = Decimal(10) ** 16


def _from_decimal(value: Decimal) -> Union[int, float]:
    """Integral results come back as ``int``, the rest as ``float``."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def as_percent(ratio: Union[int, float]) -> Union[int, float]:
    """Convert a 0-1 ratio to a percentage (0.05 -> 5)."""
    return _from_decimal(Decimal(str(ratio)) * 100)


def to_token_units(amount: Union[int, float], decimals: int) -> Union[int, float]:
    """Convert a base-unit amount to token units by dividing by 10**decimals."""
    return _from_decimal(Decimal(str(amount)) / (Decimal(10) ** decimals))


def market_in_display_units(market: Market) -> Market:
    """Return a copy of ``market`` with ratios as percentages and loan amounts in token units.

    ``lltv`` arrives as a WAD (1e18 == 100%), so it is scaled to a percentage
    directly. USD amounts are left unchanged.
    """
    decimals = market.loanAsset.decimals
    state = market.state.model_copy(
        update={
            "borrowApy": as_percent(market.state.borrowApy),
            "supplyApy": as_percent(market.state.supplyApy),
            "fee": as_percent(market.state.fee),
            "utilization": as_percent(market.state.utilization),
            "borrowAssets": to_token_units(market.state.borrowAssets, decimals),
            "supplyAssets": to_token_units(market.state.supplyAssets, decimals),
        }
    )
    lltv = _from_decimal(Decimal(str(market.lltv)) / _WAD_PERCENT)
    return market.model_copy(update={"lltv": lltv, "state": state})


def vault_in_display_units(vault: Vault) -> Vault:
    """Return a copy of ``vault`` with APYs and fee as percentages and total assets in token units."""
    state = vault.state.model_copy(
        update={
            "apy": as_percent(vault.state.apy),
            "netApy": as_percent(vault.state.netApy),
            "fee": as_percent(vault.state.fee),
            "totalAssets": to_token_units(vault.state.totalAssets, vault.asset.decimals),
        }
    )
    return vault.model_copy(update={"state": state})
