"""Upstream provider clients."""

from .alchemy import AlchemyClient
from .basescan import BasescanClient
from .dexscreener import DexScreenerClient
from .dune import DuneClient
from .errors import MalformedResponse, ProviderError, UpstreamUnavailable
from .ethplorer import EthplorerClient
from .fanout import BranchResult, fan_out, unavailable_sources, with_fallback
from .geckoterminal import GeckoTerminalClient
from .moralis import MoralisClient
from .registry import ProviderSet

__all__ = [
    "AlchemyClient",
    "BasescanClient",
    "DexScreenerClient",
    "DuneClient",
    "EthplorerClient",
    "GeckoTerminalClient",
    "MoralisClient",
    "ProviderSet",
    "ProviderError",
    "UpstreamUnavailable",
    "MalformedResponse",
    "BranchResult",
    "fan_out",
    "with_fallback",
    "unavailable_sources",
]
