"""Behavioral classification of the largest holders."""

import logging
from collections import Counter
from datetime import datetime
from statistics import mean

from ..analysis.aggregation import SECONDS_PER_DAY, first_acquisition, fold_holder_transfers
from ..analysis.classification import (
    DURATION_BUCKETS,
    AcquisitionMethod,
    Behavior,
    KnownAddressSet,
    acquisition_method,
    classify_behavior,
    format_duration,
    holding_duration_bucket,
)
from ..analysis.formatting import date_label, format_tokens, iso_now, short_address, short_date_label
from ..api import ProviderSet, fan_out, unavailable_sources
from ..config import Config
from ..models import HolderBalance, TransferRecord, explorer_url
from .common import known_addresses, merged_top_holders, utc_now

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Failed to analyze holder behavior"

BEHAVIOR_KEYS = {
    Behavior.DIAMOND_HANDS: "diamondHands",
    Behavior.ACCUMULATOR: "accumulators",
    Behavior.ACTIVE_TRADER: "activeTraders",
    Behavior.PARTIAL_SELLER: "partialSellers",
    Behavior.IMMEDIATE_LIQUIDATOR: "immediateLiquidators",
    Behavior.NEW_HOLDER: "newHolders",
}

RECENT_TRANSACTIONS = 5


def failure_payload() -> dict:
    return {
        "success": False,
        "error": ERROR_MESSAGE,
        "holders": [],
        "summary": summarize([]),
        "analyzedCount": 0,
    }


def analyze_holder(
    holder: HolderBalance,
    transfers: list[TransferRecord],
    known: KnownAddressSet,
    now_ts: int,
    decimals: int = 18,
) -> dict | None:
    """
    Classify one holder from its own transfer history.

    Args:
        holder: Holder-list entry (authoritative current balance)
        transfers: The holder's inbound and outbound transfers
        known: DEX pools/routers
        now_ts: Current unix time

    Returns:
        Holder record, or None when the holder has no transfers
    """
    if not transfers:
        return None

    totals, tagged = fold_holder_transfers(transfers, holder.address, known)
    acquired_at = first_acquisition(transfers, holder.address)
    holding_days = max(0, (now_ts - acquired_at) // SECONDS_PER_DAY)
    balance = holder.balance(decimals)

    behavior, description = classify_behavior(
        holding_days, totals.bought, totals.received, totals.sold, totals.sent, balance
    )
    recent = sorted(tagged, key=lambda item: item[0].timestamp)[-RECENT_TRANSACTIONS:][::-1]

    return {
        "address": holder.address,
        "addressNormalized": holder.address_lower,
        "shortAddress": short_address(holder.address),
        "chain": holder.chain,
        "currentBalance": round(balance),
        "balanceFormatted": format_tokens(balance),
        "firstAcquisitionDate": date_label(acquired_at),
        "firstAcquisitionTimestamp": acquired_at,
        "holdingDurationDays": holding_days,
        "holdingDurationLabel": format_duration(holding_days),
        "acquisitionMethod": acquisition_method(totals.bought, totals.received).value,
        "totalBought": round(totals.bought),
        "totalReceived": round(totals.received),
        "totalSold": round(totals.sold),
        "totalSent": round(totals.sent),
        "netPosition": round(totals.net_position),
        "behaviorType": behavior.value,
        "behaviorDescription": description,
        "recentTransactions": [
            {
                "date": short_date_label(transfer.timestamp),
                "type": direction.value,
                "amount": format_tokens(transfer.amount),
                "hash": transfer.transaction_hash,
            }
            for transfer, direction in recent
        ],
        "explorerUrl": explorer_url(holder.chain),
    }


def summarize(records: list[dict]) -> dict:
    behaviors = Counter(r["behaviorType"] for r in records)
    buckets = Counter(holding_duration_bucket(r["holdingDurationDays"]) for r in records)
    methods = Counter(r["acquisitionMethod"] for r in records)

    holding_duration = {name: buckets[name] for name, _, _ in DURATION_BUCKETS}
    holding_duration["averageDays"] = (
        round(mean(r["holdingDurationDays"] for r in records)) if records else 0
    )

    return {
        "behavior": {key: behaviors[behavior.value] for behavior, key in BEHAVIOR_KEYS.items()},
        "holdingDuration": holding_duration,
        "acquisition": {
            "bought": methods[AcquisitionMethod.BOUGHT.value],
            "received": methods[AcquisitionMethod.RECEIVED.value],
            "mixed": methods[AcquisitionMethod.MIXED.value],
        },
    }


async def assemble_holder_behavior(providers: ProviderSet, config: Config, now: datetime | None = None) -> dict:
    now = utc_now(now)
    now_ts = int(now.timestamp())
    known = known_addresses(config)

    holders, holder_results = await merged_top_holders(
        providers, config.limits.top_holders, timeout=config.api.branch_timeout_seconds
    )
    holders = holders[: config.limits.behavior_holders]

    history_results = await fan_out(
        {
            f"alchemy:{h.chain}:{h.address_lower}": providers.alchemy(h.chain).get_holder_transfers(h.address)
            for h in holders
        },
        timeout=config.api.branch_timeout_seconds,
    )

    records = []
    for holder in holders:
        result = history_results[f"alchemy:{holder.chain}:{holder.address_lower}"]
        record = analyze_holder(holder, result.value_or([]), known, now_ts, config.token.decimals)
        if record is not None:
            records.append(record)
    logger.info(f"Classified {len(records)} of {len(holders)} top holders")

    failed_histories = sorted({name.rsplit(":", 1)[0] for name in unavailable_sources(history_results)})
    return {
        "success": True,
        "holders": records,
        "summary": summarize(records),
        "analyzedCount": len(records),
        "lastUpdated": iso_now(now),
        "unavailableSources": unavailable_sources(holder_results) + failed_histories,
    }
