"""Liquidity-pool snapshots, aggregate totals and price history."""

import logging
from datetime import datetime

from ..analysis.aggregation import (
    available_pools,
    combine_ohlcv,
    empty_price_history,
    mean_spot_price,
    pool_totals,
    price_history,
)
from ..analysis.formatting import format_fixed
from ..api import ProviderSet, fan_out, unavailable_sources, with_fallback
from ..config import Config, PoolConfig
from ..models import PoolSnapshot

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Failed to fetch market data"


def failure_payload() -> dict:
    return {
        "success": False,
        "error": ERROR_MESSAGE,
        "aggregate": None,
        "base": {"pools": [], "tvl": "0.00", "volume24h": "0.00"},
        "ethereum": {"pools": [], "tvl": "0.00", "volume24h": "0.00"},
        "priceHistory": empty_price_history(),
    }


def unavailable_snapshot(pool: PoolConfig) -> PoolSnapshot:
    """Zeroed snapshot for a pool whose every source failed."""
    return PoolSnapshot(
        pool_key=pool.key,
        pool_address=pool.address,
        chain=pool.chain,
        chain_id=pool.chain_id,
        dex=pool.dex,
        token0=pool.token0,
        token1=pool.token1,
        price_usd=0.0,
        tvl_usd=0.0,
        volume_24h_usd=0.0,
        buys_24h=0,
        sells_24h=0,
        fee_tier="1.00%" if "Uniswap" in pool.dex else "0.20%",
        unavailable=True,
        explorer_url=pool.explorer_url,
        dex_url=pool.dex_url,
    )


def pool_entry(snapshot: PoolSnapshot) -> dict:
    return {
        "key": snapshot.pool_key,
        "address": snapshot.pool_address,
        "addressNormalized": snapshot.pool_address.lower(),
        "chain": snapshot.chain,
        "chainId": snapshot.chain_id,
        "dex": snapshot.dex,
        "token0": snapshot.token0,
        "token1": snapshot.token1,
        "price": snapshot.price_usd,
        "tvl": format_fixed(snapshot.tvl_usd),
        "volume24h": format_fixed(snapshot.volume_24h_usd),
        "transactions": snapshot.transactions_24h,
        "buys": snapshot.buys_24h,
        "sells": snapshot.sells_24h,
        "feeTier": snapshot.fee_tier,
        "priceChange24h": snapshot.price_change_24h,
        "source": snapshot.source,
        "unavailable": snapshot.unavailable,
        "explorerUrl": snapshot.explorer_url,
        "dexUrl": snapshot.dex_url,
    }


async def fetch_pool(providers: ProviderSet, pool: PoolConfig) -> PoolSnapshot:
    """DexScreener first, GeckoTerminal when DexScreener fails."""
    return await with_fallback(
        f"pool {pool.key}",
        lambda: providers.dexscreener.get_pool(pool),
        lambda: providers.geckoterminal.get_pool(pool),
    )


def _chain_section(snapshots: list[PoolSnapshot], chain: str) -> dict:
    pools = [s for s in snapshots if s.chain == chain]
    totals = pool_totals(pools)
    return {
        "pools": [pool_entry(s) for s in pools],
        "tvl": format_fixed(totals["tvl"]),
        "volume24h": format_fixed(totals["volume_24h"]),
    }


async def assemble_market_data(providers: ProviderSet, config: Config, now: datetime | None = None) -> dict:
    pools = config.pools

    results = await fan_out(
        {
            **{f"pool:{pool.key}": fetch_pool(providers, pool) for pool in pools},
            **{f"ohlcv:{pool.key}": providers.geckoterminal.get_daily_ohlcv(pool) for pool in pools},
        },
        timeout=config.api.branch_timeout_seconds,
    )

    snapshots = [results[f"pool:{pool.key}"].value_or(unavailable_snapshot(pool)) for pool in pools]
    live = available_pools(snapshots)
    if len(live) < len(snapshots):
        logger.warning(f"{len(snapshots) - len(live)} of {len(snapshots)} pools unavailable")

    totals = pool_totals(snapshots)
    candles = combine_ohlcv(results[f"ohlcv:{pool.key}"].value_or([]) for pool in pools)

    return {
        "success": True,
        "aggregate": {
            "totalTVL": format_fixed(totals["tvl"]),
            "totalVolume24h": format_fixed(totals["volume_24h"]),
            "totalTransactions": totals["transactions"],
            "totalBuys": totals["buys"],
            "totalSells": totals["sells"],
            "poolCount": len(snapshots),
            "availablePoolCount": len(live),
            "vwap": mean_spot_price(snapshots),
        },
        "base": _chain_section(snapshots, "base"),
        "ethereum": _chain_section(snapshots, "ethereum"),
        "priceHistory": price_history(candles),
        "unavailableSources": unavailable_sources(results),
    }
