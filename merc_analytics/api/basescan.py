"""Client for the Basescan API - Base holder list fallback and token info."""

from typing import Any

from ..models import CHAIN_BASE, HolderBalance, TokenInfo
from .base import ProviderClient
from .errors import MalformedResponse

PROVIDER = "basescan"


def _check_status(data: Any) -> Any:
    # Etherscan-family APIs report errors with HTTP 200 and status "0"
    if not isinstance(data, dict):
        raise MalformedResponse(PROVIDER, "body is not an object")
    if data.get("status") != "1" or not data.get("result"):
        raise MalformedResponse(PROVIDER, f"status {data.get('status')!r}: {data.get('message')}")
    return data["result"]


def parse_holder_list(data: Any) -> list[HolderBalance]:
    result = _check_status(data)
    if not isinstance(result, list):
        raise MalformedResponse(PROVIDER, "'result' is not a list")

    holders = []
    for item in result:
        try:
            holders.append(
                HolderBalance(
                    address=item["TokenHolderAddress"],
                    raw_balance=int(item["TokenHolderQuantity"]),
                    chain=CHAIN_BASE,
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponse(PROVIDER, f"bad holder entry: {item!r}") from e
    return holders


def parse_token_info(data: Any) -> TokenInfo:
    result = _check_status(data)
    entry = result[0] if isinstance(result, list) else result
    try:
        holders = int(entry.get("holdersCount") or 0)
    except (AttributeError, TypeError, ValueError) as e:
        raise MalformedResponse(PROVIDER, "bad holdersCount") from e
    if holders <= 0:
        raise MalformedResponse(PROVIDER, "tokeninfo has no holder count")
    return TokenInfo(holders_count=holders)


class BasescanClient(ProviderClient):
    """Client for Basescan's module=token endpoints."""

    PROVIDER = PROVIDER

    def __init__(self, contract: str, base_url: str = "https://api.basescan.org/api", **kwargs):
        super().__init__(base_url, **kwargs)
        self.contract = contract

    async def get_top_holders(self, limit: int = 20) -> list[HolderBalance]:
        data = await self._get_json(
            self.base_url,
            params={
                "module": "token",
                "action": "tokenholderlist",
                "contractaddress": self.contract,
                "page": 1,
                "offset": limit,
            },
            cache_ttl=self.cache_ttl,
        )
        return parse_holder_list(data)

    async def get_token_info(self) -> TokenInfo:
        data = await self._get_json(
            self.base_url,
            params={
                "module": "token",
                "action": "tokeninfo",
                "contractaddress": self.contract,
            },
            cache_ttl=self.cache_ttl,
        )
        return parse_token_info(data)
