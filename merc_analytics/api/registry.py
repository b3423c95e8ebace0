"""Builds every provider client from configuration."""

import logging
from dataclasses import dataclass

import httpx

from ..config import Config
from ..models import CHAIN_BASE, CHAIN_ETH
from .alchemy import AlchemyClient
from .base import ResponseCache
from .basescan import BasescanClient
from .dexscreener import DexScreenerClient
from .dune import DuneClient
from .ethplorer import EthplorerClient
from .geckoterminal import GeckoTerminalClient
from .moralis import MoralisClient

logger = logging.getLogger(__name__)


@dataclass
class ProviderSet:
    """All upstream clients, sharing one HTTP connection pool."""

    ethplorer: EthplorerClient
    moralis: MoralisClient
    basescan: BasescanClient
    alchemy_eth: AlchemyClient
    alchemy_base: AlchemyClient
    dexscreener: DexScreenerClient
    geckoterminal: GeckoTerminalClient
    dune: DuneClient
    http_client: httpx.AsyncClient
    cache: ResponseCache

    @classmethod
    def from_config(
        cls,
        config: Config,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ProviderSet":
        """
        Create the clients.

        Args:
            config: Application configuration (URLs, contracts, keys)
            transport: Optional httpx transport, used by tests to stub upstreams
        """
        http_client = httpx.AsyncClient(timeout=config.api.timeout_seconds, transport=transport)
        cache = ResponseCache(enabled=config.api.cache_enabled, maxsize=config.api.cache_maxsize)
        shared = {"http_client": http_client, "cache": cache}
        api, token, keys = config.api, config.token, config.keys
        alchemy_ttls = {"cache_ttl": api.transfers_cache_ttl, "history_cache_ttl": api.holder_history_cache_ttl}

        providers = cls(
            ethplorer=EthplorerClient(
                token.eth_contract,
                api_key=keys.ethplorer,
                base_url=api.ethplorer_base,
                cache_ttl=api.holders_cache_ttl,
                **shared,
            ),
            moralis=MoralisClient(
                token.base_contract,
                api_key=keys.moralis,
                base_url=api.moralis_base,
                max_pages=api.max_holder_pages,
                cache_ttl=api.holders_cache_ttl,
                **shared,
            ),
            basescan=BasescanClient(
                token.base_contract, base_url=api.basescan_base, cache_ttl=api.holders_cache_ttl, **shared
            ),
            alchemy_eth=AlchemyClient(
                api.alchemy_eth_url, keys.alchemy, token.eth_contract, CHAIN_ETH, token.decimals, **alchemy_ttls, **shared
            ),
            alchemy_base=AlchemyClient(
                api.alchemy_base_url, keys.alchemy, token.base_contract, CHAIN_BASE, token.decimals, **alchemy_ttls, **shared
            ),
            dexscreener=DexScreenerClient(base_url=api.dexscreener_base, cache_ttl=api.pool_cache_ttl, **shared),
            geckoterminal=GeckoTerminalClient(
                base_url=api.geckoterminal_base,
                cache_ttl=api.pool_cache_ttl,
                ohlcv_cache_ttl=api.ohlcv_cache_ttl,
                **shared,
            ),
            dune=DuneClient(keys.dune, base_url=api.dune_base, cache_ttl=api.dune_cache_ttl, **shared),
            http_client=http_client,
            cache=cache,
        )

        missing = [name for name, key in (("alchemy", keys.alchemy), ("moralis", keys.moralis), ("dune", keys.dune)) if not key]
        if missing:
            logger.warning(f"No API key for: {', '.join(missing)}; those sources will report unavailable")

        return providers

    def alchemy(self, chain: str) -> AlchemyClient:
        return self.alchemy_eth if chain == CHAIN_ETH else self.alchemy_base

    async def close(self):
        """Close the shared HTTP client."""
        await self.http_client.aclose()
