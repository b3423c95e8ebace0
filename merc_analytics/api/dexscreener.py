"""Client for the DexScreener pairs API - primary pool price source."""

from typing import Any

from ..config import PoolConfig
from ..models import PoolSnapshot
from .base import ProviderClient
from .errors import MalformedResponse

PROVIDER = "dexscreener"


def _float(value: Any) -> float:
    return float(value) if value not in (None, "") else 0.0


def parse_pair(data: Any, pool: PoolConfig) -> PoolSnapshot:
    """Map a ``latest/dex/pairs/{chain}/{pool}`` body to a snapshot."""
    pairs = data.get("pairs") if isinstance(data, dict) else None
    if not isinstance(pairs, list) or not pairs:
        raise MalformedResponse(PROVIDER, f"no pairs for {pool.address}")

    pair = pairs[0]
    if not isinstance(pair, dict):
        raise MalformedResponse(PROVIDER, "pair entry is not an object")
    try:
        txns = (pair.get("txns") or {}).get("h24") or {}
        labels = pair.get("labels") or []
        return PoolSnapshot(
            pool_key=pool.key,
            pool_address=pool.address,
            chain=pool.chain,
            chain_id=pool.chain_id,
            dex=pool.dex,
            token0=pool.token0,
            token1=pool.token1,
            price_usd=_float(pair.get("priceUsd")),
            tvl_usd=_float((pair.get("liquidity") or {}).get("usd")),
            volume_24h_usd=_float((pair.get("volume") or {}).get("h24")),
            buys_24h=int(txns.get("buys") or 0),
            sells_24h=int(txns.get("sells") or 0),
            fee_tier="1.00%" if "v3" in labels else "0.20%",
            price_change_24h=_float((pair.get("priceChange") or {}).get("h24")),
            source=PROVIDER,
            explorer_url=pool.explorer_url,
            dex_url=pool.dex_url,
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise MalformedResponse(PROVIDER, f"bad pair fields: {e}") from e


class DexScreenerClient(ProviderClient):
    PROVIDER = PROVIDER

    CHAIN_SLUGS = {"ethereum": "ethereum", "base": "base"}

    def __init__(self, base_url: str = "https://api.dexscreener.com/latest/dex", **kwargs):
        super().__init__(base_url, **kwargs)

    async def get_pool(self, pool: PoolConfig) -> PoolSnapshot:
        chain = self.CHAIN_SLUGS.get(pool.chain, pool.chain)
        data = await self._get_json(
            f"{self.base_url}/pairs/{chain}/{pool.address}",
            cache_ttl=self.cache_ttl,
        )
        return parse_pair(data, pool)
