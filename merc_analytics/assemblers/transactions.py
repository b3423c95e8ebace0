"""Most recent transfers on both chains, typed Buy/Sell/Transfer."""

from datetime import datetime

from ..analysis.classification import KnownAddressSet, classify_direction
from ..analysis.formatting import format_fixed, short_address, time_ago
from ..api import ProviderSet, fan_out, unavailable_sources
from ..config import Config
from ..models import TransferRecord, explorer_url
from .common import CHAINS, known_addresses, utc_now

ERROR_MESSAGE = "Failed to fetch transactions"


def failure_payload() -> dict:
    return {"success": False, "error": ERROR_MESSAGE, "transactions": [], "count": 0}


def transaction_entry(transfer: TransferRecord, known: KnownAddressSet, now_ts: int) -> dict:
    return {
        "hash": transfer.transaction_hash,
        "shortHash": short_address(transfer.transaction_hash),
        "from": transfer.from_address,
        "fromNormalized": transfer.from_address.lower(),
        "shortFrom": short_address(transfer.from_address),
        "to": transfer.to_address,
        "toNormalized": transfer.to_address.lower(),
        "shortTo": short_address(transfer.to_address),
        "value": format_fixed(transfer.amount),
        "timestamp": transfer.timestamp,
        "timeAgo": time_ago(transfer.timestamp, now_ts),
        "type": classify_direction(transfer.from_address, transfer.to_address, known).value,
        "chain": transfer.chain,
        "chainId": transfer.chain_id,
        "explorerUrl": explorer_url(transfer.chain),
    }


async def assemble_transactions(providers: ProviderSet, config: Config, now: datetime | None = None) -> dict:
    now_ts = int(utc_now(now).timestamp())
    limits = config.limits
    known = known_addresses(config)

    results = await fan_out(
        {
            f"alchemy:{chain}": providers.alchemy(chain).get_asset_transfers(
                max_count=limits.transactions_per_chain
            )
            for chain in CHAINS
        },
        timeout=config.api.branch_timeout_seconds,
    )

    transfers = []
    for result in results.values():
        transfers.extend(result.value_or([])[: limits.transactions_per_chain])
    transfers.sort(key=lambda t: t.timestamp, reverse=True)

    entries = [transaction_entry(t, known, now_ts) for t in transfers[: limits.transactions_total]]
    return {
        "success": True,
        "transactions": entries,
        "count": len(entries),
        "unavailableSources": unavailable_sources(results),
    }
