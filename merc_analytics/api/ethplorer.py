"""Client for the Ethplorer API - Ethereum holder lists and token info."""

from typing import Any

from ..models import CHAIN_ETH, HolderBalance, TokenInfo
from .base import ProviderClient
from .errors import MalformedResponse

PROVIDER = "ethplorer"


def parse_top_holders(data: Any) -> list[HolderBalance]:
    """Map a ``getTopTokenHolders`` body to holder balances.

    ``rawBalance`` is the integer balance in base units; a holder without it
    counts as zero.
    """
    if not isinstance(data, dict) or not isinstance(data.get("holders"), list):
        raise MalformedResponse(PROVIDER, "missing 'holders' list")

    holders = []
    for item in data["holders"]:
        if not isinstance(item, dict) or not item.get("address"):
            raise MalformedResponse(PROVIDER, "holder entry without address")
        try:
            raw_balance = int(item.get("rawBalance") or 0)
        except (TypeError, ValueError) as e:
            raise MalformedResponse(PROVIDER, f"bad rawBalance: {item.get('rawBalance')!r}") from e
        holders.append(
            HolderBalance(address=item["address"], raw_balance=raw_balance, chain=CHAIN_ETH)
        )
    return holders


def parse_token_info(data: Any) -> TokenInfo:
    if not isinstance(data, dict) or "holdersCount" not in data:
        raise MalformedResponse(PROVIDER, "missing 'holdersCount'")
    try:
        return TokenInfo(
            holders_count=int(data.get("holdersCount") or 0),
            transfers_count=int(data.get("transfersCount") or 0),
        )
    except (TypeError, ValueError) as e:
        raise MalformedResponse(PROVIDER, "non-numeric token counters") from e


class EthplorerClient(ProviderClient):
    """Client for Ethplorer (free key supported)."""

    PROVIDER = PROVIDER

    def __init__(self, contract: str, api_key: str = "freekey", base_url: str = "https://api.ethplorer.io", **kwargs):
        super().__init__(base_url, **kwargs)
        self.contract = contract
        self.api_key = api_key

    async def get_top_holders(self, limit: int = 20) -> list[HolderBalance]:
        """
        Fetch the largest holders of the Ethereum contract.

        Args:
            limit: Number of holders to request (Ethplorer caps at 1000)

        Returns:
            Holder balances, largest first
        """
        data = await self._get_json(
            f"{self.base_url}/getTopTokenHolders/{self.contract}",
            params={"apiKey": self.api_key, "limit": limit},
            cache_ttl=self.cache_ttl,
        )
        return parse_top_holders(data)

    async def get_token_info(self) -> TokenInfo:
        data = await self._get_json(
            f"{self.base_url}/getTokenInfo/{self.contract}",
            params={"apiKey": self.api_key},
            cache_ttl=self.cache_ttl,
        )
        return parse_token_info(data)
