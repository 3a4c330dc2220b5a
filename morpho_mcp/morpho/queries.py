from __future__ import annotations

import json
import re
from typing import Any, Mapping, Optional

_NAME_RE = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")


class GraphQLEnum(str):
    """A string rendered as a bare GraphQL enum literal instead of a quoted string."""


def render_value(value: Any) -> str:
    """Render a Python value as a GraphQL input literal."""
    if value is None:
        return "null"
    if isinstance(value, GraphQLEnum):
        if not _NAME_RE.match(value):
            raise ValueError(f"Invalid GraphQL enum value: {value!r}")
        return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, str):
        # JSON string escapes are a subset of GraphQL's.
        return json.dumps(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(render_value(item) for item in value) + "]"
    if isinstance(value, Mapping):
        return render_object(value)
    raise TypeError(f"Cannot render {type(value).__name__} as a GraphQL literal")


def render_object(values: Mapping[str, Any]) -> str:
    """Render a mapping as an unquoted-key object literal, skipping ``None`` values."""
    parts = []
    for key, value in values.items():
        if value is None:
            continue
        if not _NAME_RE.match(key):
            raise ValueError(f"Invalid GraphQL field name: {key!r}")
        parts.append(f"{key}: {render_value(value)}")
    return "{" + ", ".join(parts) + "}"


def render_arguments(
    first: Optional[int] = None,
    skip: Optional[int] = None,
    order_by: Optional[str] = None,
    order_direction: Optional[str] = None,
    where: Optional[Mapping[str, Any]] = None,
) -> str:
    """Render the ``(first: .., skip: .., orderBy: .., orderDirection: .., where: {..})`` clause.

    Only arguments that are set appear, always in that order. Returns an empty
    string when nothing is set.
    """
    parts = []
    if first is not None:
        parts.append(f"first: {render_value(first)}")
    if skip is not None:
        parts.append(f"skip: {render_value(skip)}")
    if order_by:
        parts.append(f"orderBy: {render_value(GraphQLEnum(order_by))}")
    if order_direction:
        parts.append(f"orderDirection: {render_value(GraphQLEnum(order_direction))}")
    if where:
        filters = {key: value for key, value in where.items() if value is not None}
        if filters:
            parts.append(f"where: {render_object(filters)}")
    return f"({', '.join(parts)})" if parts else ""


def build_query(root_field: str, selection: str, arguments: str = "") -> str:
    """Assemble a query document from a root field, its argument clause and a selection set."""
    return f"query {{\n  {root_field}{arguments} {selection.strip()}\n}}\n"


PAGE_INFO_FIELDS: str = "pageInfo { count countTotal }"

MARKET_FIELDS: str = """
      uniqueKey
      lltv
      oracleAddress
      irmAddress
      loanAsset { address symbol decimals }
      collateralAsset { address symbol decimals }
      state {
        borrowApy
        borrowAssets
        borrowAssetsUsd
        supplyApy
        supplyAssets
        supplyAssetsUsd
        fee
        utilization
      }
"""

MARKETS_SELECTION: str = f"""{{
    {PAGE_INFO_FIELDS}
    items {{{MARKET_FIELDS}    }}
  }}"""

WHITELISTED_MARKETS_SELECTION: str = f"""{{
    items {{
      whitelisted{MARKET_FIELDS}    }}
  }}"""

WHITELISTED_MARKETS_FILTER = {"whitelisted": True}

ASSETS_SELECTION: str = f"""{{
    {PAGE_INFO_FIELDS}
    items {{
      symbol
      address
      priceUsd
      chain {{ id network currency }}
      yield {{ apr }}
    }}
  }}"""

MARKET_POSITIONS_SELECTION: str = f"""{{
    {PAGE_INFO_FIELDS}
    items {{
      supplyShares
      supplyAssets
      supplyAssetsUsd
      borrowShares
      borrowAssets
      borrowAssetsUsd
      collateral
      collateralUsd
      market {{
        uniqueKey
        loanAsset {{ address symbol decimals }}
        collateralAsset {{ address symbol decimals }}
      }}
      user {{ address }}
    }}
  }}"""

TRANSACTIONS_LIQUIDATION_SELECTION: str = f"""{{
    {PAGE_INFO_FIELDS}
    items {{
      blockNumber
      hash
      type
      timestamp
      user {{ address }}
      data {{
        ... on MarketLiquidationTransactionData {{
          seizedAssets
          repaidAssets
          seizedAssetsUsd
          repaidAssetsUsd
          badDebtAssetsUsd
          liquidator
          market {{ uniqueKey }}
        }}
      }}
    }}
  }}"""

TRANSACTIONS_VAULT_SELECTION: str = f"""{{
    {PAGE_INFO_FIELDS}
    items {{
      blockNumber
      hash
      type
      timestamp
      user {{ address }}
      data {{
        ... on VaultTransactionData {{
          shares
          assets
          vault {{ address }}
        }}
      }}
    }}
  }}"""

VAULTS_SELECTION: str = f"""{{
    {PAGE_INFO_FIELDS}
    items {{
      address
      symbol
      name
      creationBlockNumber
      creationTimestamp
      creatorAddress
      whitelisted
      asset {{ address symbol decimals }}
      chain {{ id network }}
      state {{
        apy
        netApy
        totalAssets
        totalAssetsUsd
        fee
        timelock
      }}
      warnings {{ type level }}
    }}
  }}"""

VAULT_POSITIONS_SELECTION: str = f"""{{
    {PAGE_INFO_FIELDS}
    items {{
      shares
      assets
      assetsUsd
      user {{ address }}
      vault {{ address name }}
    }}
  }}"""

VAULT_REALLOCATES_SELECTION: str = f"""{{
    {PAGE_INFO_FIELDS}
    items {{
      hash
      timestamp
      blockNumber
      caller
      shares
      assets
      type
      vault {{ address }}
      market {{ uniqueKey }}
    }}
  }}"""

MARKET_APYS_QUERY: str = """
query MarketApys($uniqueKey: String!, $chainId: Int!, $options: TimeseriesOptions) {
  marketByUniqueKey(uniqueKey: $uniqueKey, chainId: $chainId) {
    uniqueKey
    historicalState {
      supplyApy(options: $options) { x y }
      borrowApy(options: $options) { x y }
    }
  }
}
"""

MARKET_ORACLE_QUERY: str = """
query MarketOracle($uniqueKey: String!, $chainId: Int!) {
  marketByUniqueKey(uniqueKey: $uniqueKey, chainId: $chainId) {
    oracle {
      address
      type
      data {
        __typename
        ... on MorphoChainlinkOracleData {
          baseFeedOne { address description vendor pair }
          vault
        }
        ... on MorphoChainlinkOracleV2Data {
          baseFeedOne { address description vendor pair }
        }
      }
    }
  }
}
"""

USER_OVERVIEW_QUERY: str = """
query UserOverview($address: String!, $chainId: Int!) {
  userByAddress(address: $address, chainId: $chainId) {
    address
    marketPositions {
      market { uniqueKey }
      borrowAssets
      borrowAssetsUsd
      supplyAssets
      supplyAssetsUsd
    }
    vaultPositions {
      vault { address name }
      assets
      assetsUsd
      shares
    }
    transactions {
      hash
      timestamp
      type
    }
  }
}
"""

VAULT_ALLOCATION_QUERY: str = """
query VaultAllocation($address: String!, $chainId: Int!) {
  vaultByAddress(address: $address, chainId: $chainId) {
    address
    name
    symbol
    asset { address symbol decimals }
    state {
      totalAssets
      totalAssetsUsd
      allocation {
        market {
          uniqueKey
          lltv
          loanAsset { address symbol decimals }
          collateralAsset { address symbol decimals }
        }
        supplyCap
        supplyAssets
        supplyAssetsUsd
      }
    }
    allocators { address }
    pendingCaps {
      validAt
      supplyCap
      market { uniqueKey }
    }
  }
}
"""

VAULT_APY_HISTORY_QUERY: str = """
query VaultApyHistory($address: String!, $chainId: Int!, $options: TimeseriesOptions) {
  vaultByAddress(address: $address, chainId: $chainId) {
    address
    historicalState {
      apy(options: $options) { x y }
      netApy(options: $options) { x y }
    }
  }
}
"""
