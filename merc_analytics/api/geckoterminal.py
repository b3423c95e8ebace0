"""Client for the GeckoTerminal API - pool fallback and daily OHLCV."""

from typing import Any

from ..config import PoolConfig
from ..models import Candle, PoolSnapshot
from .base import ProviderClient
from .errors import MalformedResponse

PROVIDER = "geckoterminal"


def _attributes(data: Any) -> dict:
    resource = data.get("data") if isinstance(data, dict) else None
    attrs = resource.get("attributes") if isinstance(resource, dict) else None
    if not isinstance(attrs, dict):
        raise MalformedResponse(PROVIDER, "missing 'data.attributes'")
    return attrs


def parse_pool(data: Any, pool: PoolConfig) -> PoolSnapshot:
    attrs = _attributes(data)
    try:
        txns = (attrs.get("transactions") or {}).get("h24") or {}
        return PoolSnapshot(
            pool_key=pool.key,
            pool_address=pool.address,
            chain=pool.chain,
            chain_id=pool.chain_id,
            dex=pool.dex,
            token0=pool.token0,
            token1=pool.token1,
            price_usd=float(attrs.get("base_token_price_usd") or 0),
            tvl_usd=float(attrs.get("reserve_in_usd") or 0),
            volume_24h_usd=float((attrs.get("volume_usd") or {}).get("h24") or 0),
            buys_24h=int(txns.get("buys") or 0),
            sells_24h=int(txns.get("sells") or 0),
            fee_tier="1.00%",
            price_change_24h=float((attrs.get("price_change_percentage") or {}).get("h24") or 0),
            source=PROVIDER,
            explorer_url=pool.explorer_url,
            dex_url=pool.dex_url,
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise MalformedResponse(PROVIDER, f"bad pool attributes: {e}") from e


def parse_ohlcv(data: Any) -> list[Candle]:
    """Map an ``ohlcv/day`` body to candles (``[ts, o, h, l, c, v]`` rows)."""
    rows = _attributes(data).get("ohlcv_list")
    if not isinstance(rows, list):
        raise MalformedResponse(PROVIDER, "missing 'ohlcv_list'")

    candles = []
    for row in rows:
        if not isinstance(row, list):
            raise MalformedResponse(PROVIDER, f"bad candle row: {row!r}")
        try:
            ts, o, h, low, c, v = row[:6]
            candles.append(
                Candle(
                    timestamp=int(ts),
                    open=float(o),
                    high=float(h),
                    low=float(low),
                    close=float(c),
                    volume=float(v),
                )
            )
        except (TypeError, ValueError) as e:
            raise MalformedResponse(PROVIDER, f"bad candle row: {row!r}") from e
    return candles


class GeckoTerminalClient(ProviderClient):
    PROVIDER = PROVIDER

    NETWORKS = {"ethereum": "eth", "base": "base"}

    def __init__(self, base_url: str = "https://api.geckoterminal.com/api/v2", ohlcv_cache_ttl: float = 0, **kwargs):
        super().__init__(base_url, **kwargs)
        self.ohlcv_cache_ttl = ohlcv_cache_ttl

    def _pool_url(self, pool: PoolConfig) -> str:
        network = self.NETWORKS.get(pool.chain, pool.chain)
        return f"{self.base_url}/networks/{network}/pools/{pool.address}"

    async def get_pool(self, pool: PoolConfig) -> PoolSnapshot:
        data = await self._get_json(self._pool_url(pool), cache_ttl=self.cache_ttl)
        return parse_pool(data, pool)

    async def get_daily_ohlcv(self, pool: PoolConfig, limit: int = 365) -> list[Candle]:
        data = await self._get_json(
            f"{self._pool_url(pool)}/ohlcv/day",
            params={"aggregate": 1, "limit": limit},
            cache_ttl=self.ohlcv_cache_ttl,
        )
        return parse_ohlcv(data)
