"""Client for Alchemy's ``alchemy_getAssetTransfers`` JSON-RPC method."""

import logging
from datetime import datetime
from typing import Any

from ..models import TransferRecord
from .base import ProviderClient
from .errors import MalformedResponse, UpstreamUnavailable

logger = logging.getLogger(__name__)

PROVIDER = "alchemy"

MAX_COUNT = 1000  # Alchemy's per-call ceiling


def _parse_timestamp(value: str | None) -> int:
    if not value:
        return 0
    return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())


def _parse_amount(item: dict, decimals: int) -> float:
    # rawContract.value is the exact integer amount; "value" is Alchemy's float
    raw = (item.get("rawContract") or {}).get("value")
    if raw:
        return int(raw, 16) / 10**decimals
    return float(item.get("value") or 0)


def parse_transfers(data: Any, chain: str, decimals: int = 18) -> list[TransferRecord]:
    """Map a ``getAssetTransfers`` JSON-RPC body to transfer records."""
    if not isinstance(data, dict):
        raise MalformedResponse(PROVIDER, "body is not an object")
    if data.get("error"):
        raise MalformedResponse(PROVIDER, f"RPC error: {data['error']}")

    result = data.get("result")
    transfers = result.get("transfers") if isinstance(result, dict) else None
    if not isinstance(transfers, list):
        raise MalformedResponse(PROVIDER, "missing 'result.transfers' list")

    records = []
    for item in transfers:
        try:
            records.append(
                TransferRecord(
                    from_address=item["from"],
                    to_address=item.get("to") or "",
                    amount=_parse_amount(item, decimals),
                    timestamp=_parse_timestamp((item.get("metadata") or {}).get("blockTimestamp")),
                    chain=chain,
                    transaction_hash=item.get("hash", ""),
                )
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedResponse(PROVIDER, f"bad transfer entry: {e}") from e

    return records


class AlchemyClient(ProviderClient):
    """Transfer history for one ERC-20 contract on one chain."""

    PROVIDER = PROVIDER

    def __init__(
        self,
        rpc_base_url: str,
        api_key: str | None,
        contract: str,
        chain: str,
        decimals: int = 18,
        history_cache_ttl: float = 0,
        **kwargs,
    ):
        super().__init__(rpc_base_url, **kwargs)
        self.history_cache_ttl = history_cache_ttl
        self.api_key = api_key
        self.contract = contract
        self.chain = chain
        self.decimals = decimals

    async def get_asset_transfers(
        self,
        max_count: int = 50,
        order: str = "desc",
        from_address: str | None = None,
        to_address: str | None = None,
        cache_ttl: float | None = None,
    ) -> list[TransferRecord]:
        """
        Fetch ERC-20 transfers of the configured contract.

        Args:
            max_count: Number of transfers to request (capped at 1000)
            order: "desc" for newest first, "asc" for oldest first
            from_address: Only transfers sent by this address
            to_address: Only transfers received by this address
            cache_ttl: Seconds the response may be reused, defaulting to the
                client's ``cache_ttl``

        Returns:
            Transfer records in the requested order
        """
        if not self.api_key:
            raise UpstreamUnavailable(PROVIDER, "ALCHEMY_API_KEY not configured")

        params: dict[str, Any] = {
            "fromBlock": "0x0",
            "toBlock": "latest",
            "contractAddresses": [self.contract],
            "category": ["erc20"],
            "order": order,
            "maxCount": hex(min(max_count, MAX_COUNT)),
            "withMetadata": True,
        }
        if from_address:
            params["fromAddress"] = from_address
        if to_address:
            params["toAddress"] = to_address

        data = await self._post_json(
            f"{self.base_url}/{self.api_key}",
            body={
                "jsonrpc": "2.0",
                "id": 1,
                "method": "alchemy_getAssetTransfers",
                "params": [params],
            },
            cache_ttl=self.cache_ttl if cache_ttl is None else cache_ttl,
        )
        records = parse_transfers(data, self.chain, self.decimals)
        logger.debug(f"Alchemy {self.chain} returned {len(records)} transfers")
        return records

    async def get_holder_transfers(self, holder: str, max_count: int = 100) -> list[TransferRecord]:
        """All inbound and outbound transfers of one holder, oldest first."""
        incoming = await self.get_asset_transfers(
            max_count=max_count, order="asc", to_address=holder, cache_ttl=self.history_cache_ttl
        )
        outgoing = await self.get_asset_transfers(
            max_count=max_count, order="asc", from_address=holder, cache_ttl=self.history_cache_ttl
        )
        return sorted(incoming + outgoing, key=lambda t: t.timestamp)
