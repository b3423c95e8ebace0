"""Client for the Moralis Deep Index API - Base holder lists."""

import logging
from typing import Any

from ..models import CHAIN_BASE, HolderBalance
from .base import ProviderClient
from .errors import MalformedResponse, ProviderError, UpstreamUnavailable

logger = logging.getLogger(__name__)

PROVIDER = "moralis"


def parse_owners_page(data: Any) -> tuple[list[HolderBalance], str | None]:
    """Map one ``erc20/{contract}/owners`` page to (holders, next cursor)."""
    if not isinstance(data, dict) or not isinstance(data.get("result"), list):
        raise MalformedResponse(PROVIDER, "missing 'result' list")

    holders = []
    for item in data["result"]:
        address = item.get("owner_address") if isinstance(item, dict) else None
        if not address:
            raise MalformedResponse(PROVIDER, "owner entry without owner_address")
        try:
            raw_balance = int(item.get("balance") or 0)
        except (TypeError, ValueError) as e:
            raise MalformedResponse(PROVIDER, f"bad balance: {item.get('balance')!r}") from e
        holders.append(HolderBalance(address=address, raw_balance=raw_balance, chain=CHAIN_BASE))

    cursor = data.get("cursor") or None
    return holders, cursor


class MoralisClient(ProviderClient):
    """Client for Moralis; every call requires an API key."""

    PROVIDER = PROVIDER

    def __init__(
        self,
        contract: str,
        api_key: str | None,
        chain: str = "base",
        base_url: str = "https://deep-index.moralis.io/api/v2.2",
        max_pages: int = 20,
        **kwargs,
    ):
        super().__init__(base_url, **kwargs)
        self.contract = contract
        self.api_key = api_key
        self.chain = chain
        self.max_pages = max_pages

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _owners_page(self, limit: int, cursor: str | None = None, order: str | None = None):
        if not self.api_key:
            raise UpstreamUnavailable(PROVIDER, "MORALIS_API_KEY not configured")

        params: dict[str, Any] = {"chain": self.chain, "limit": limit}
        if order:
            params["order"] = order
        if cursor:
            params["cursor"] = cursor

        data = await self._get_json(
            f"{self.base_url}/erc20/{self.contract}/owners",
            params=params,
            headers={"X-API-Key": self.api_key},
            cache_ttl=self.cache_ttl,
        )
        return parse_owners_page(data)

    async def get_top_holders(self, limit: int = 20) -> list[HolderBalance]:
        holders, _ = await self._owners_page(limit, order="DESC")
        return holders

    async def count_holders(self, page_size: int = 100) -> int:
        """
        Count holders by walking the owners cursor.

        Stops after ``max_pages`` pages, so the count is a lower bound for
        tokens with more than ``max_pages * page_size`` holders. A failing
        page after the first keeps the partial count.
        """
        total = 0
        cursor: str | None = None

        for page in range(self.max_pages):
            try:
                holders, cursor = await self._owners_page(page_size, cursor=cursor)
            except ProviderError:
                if page == 0:
                    raise
                logger.warning(f"Moralis holder count stopped at page {page + 1}, keeping {total}")
                break

            total += len(holders)
            if not cursor:
                break
        else:
            logger.info(f"Moralis holder count capped at {self.max_pages} pages ({total} holders)")

        return total
