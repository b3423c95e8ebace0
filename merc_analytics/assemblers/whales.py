"""Recent large transfers with buy/sell flow and sentiment."""

import logging
from datetime import datetime

from ..analysis.aggregation import filter_whale_transfers
from ..analysis.classification import Direction, KnownAddressSet, classify_direction, whale_severity
from ..analysis.formatting import format_compact, short_address, time_ago
from ..api import ProviderSet, fan_out, unavailable_sources
from ..config import Config, ThresholdsConfig
from ..models import TransferRecord, explorer_url
from .common import CHAINS, known_addresses, utc_now

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Failed to fetch whale activity"


def failure_payload() -> dict:
    return {
        "success": False,
        "error": ERROR_MESSAGE,
        "activity": [],
        "summary": _summary([]),
    }


def _whale_wallet(transfer: TransferRecord, direction: Direction) -> str:
    # The wallet is the non-DEX side of a swap
    if direction is Direction.BUY:
        return transfer.to_address
    return transfer.from_address


def whale_entry(
    transfer: TransferRecord,
    known: KnownAddressSet,
    thresholds: ThresholdsConfig,
    now_ts: int,
) -> dict:
    direction = classify_direction(transfer.from_address, transfer.to_address, known)
    wallet = _whale_wallet(transfer, direction)
    return {
        "id": transfer.transaction_hash,
        "wallet": wallet,
        "walletNormalized": wallet.lower(),
        "shortWallet": short_address(wallet),
        "type": direction.value.upper(),
        "amount": format_compact(transfer.amount),
        "rawAmount": transfer.amount,
        "timeAgo": time_ago(transfer.timestamp, now_ts, compact=True),
        "timestamp": transfer.timestamp,
        "chain": transfer.chain,
        "explorerUrl": f"{explorer_url(transfer.chain)}/tx/{transfer.transaction_hash}",
        "severity": whale_severity(
            transfer.amount, high=thresholds.whale_high, critical=thresholds.whale_critical
        ),
    }


def _summary(activity: list[dict]) -> dict:
    buy_volume = sum(a["rawAmount"] for a in activity if a["type"] == "BUY")
    sell_volume = sum(a["rawAmount"] for a in activity if a["type"] == "SELL")
    return {
        "totalAlerts": len(activity),
        "buyVolume": format_compact(buy_volume),
        "sellVolume": format_compact(sell_volume),
        "netFlow": format_compact(buy_volume - sell_volume),
        "sentiment": "bullish" if buy_volume > sell_volume else "bearish",
    }


async def assemble_whale_activity(providers: ProviderSet, config: Config, now: datetime | None = None) -> dict:
    now_ts = int(utc_now(now).timestamp())
    limits, thresholds = config.limits, config.thresholds
    known = known_addresses(config)

    results = await fan_out(
        {
            f"alchemy:{chain}": providers.alchemy(chain).get_asset_transfers(
                max_count=limits.whale_scan_transfers, cache_ttl=config.api.whale_scan_cache_ttl
            )
            for chain in CHAINS
        },
        timeout=config.api.branch_timeout_seconds,
    )

    whales = []
    for result in results.values():
        large = filter_whale_transfers(result.value_or([]), thresholds.whale_amount)
        whales.extend(large[: limits.whales_per_chain])
    whales.sort(key=lambda t: t.timestamp, reverse=True)

    activity = [whale_entry(t, known, thresholds, now_ts) for t in whales[: limits.whales_total]]
    logger.debug(f"{len(activity)} whale transfers at or above {thresholds.whale_amount:,.0f}")

    return {
        "success": True,
        "activity": activity,
        "summary": _summary(activity),
        "unavailableSources": unavailable_sources(results),
    }
