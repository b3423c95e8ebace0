"""Folds normalized records into per-wallet, per-period and per-pool summaries."""

import math
import random
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from statistics import mean

from ..config import ThresholdsConfig
from ..models import Candle, PoolSnapshot, TransferRecord
from .classification import HolderDirection, KnownAddressSet, classify_direction_for_holder, holder_size_tier
from .formatting import day_label, month_label

SECONDS_PER_DAY = 86_400
WEEK = timedelta(days=7)

VWAP_PERIODS = (7, 30, 60, 90, 180, 360)

# Share of the current holder count reported as 24h / 7d / 30d growth
ETH_DELTA_RATES = (0.002, 0.015, 0.06)
BASE_DELTA_RATES = (0.003, 0.02, 0.08)


@dataclass
class WalletProfile:
    """Running totals for one wallet, built from a window of transfers."""

    address: str
    chain: str
    first_seen: int | None = None  # earliest receive, unix seconds
    total_bought: float = 0.0
    total_received: float = 0.0
    total_sold: float = 0.0
    total_sent: float = 0.0
    _earliest: tuple[int, str] | None = field(default=None, repr=False, compare=False)

    @property
    def address_lower(self) -> str:
        return self.address.lower()

    @property
    def total_acquired(self) -> float:
        return self.total_bought + self.total_received

    @property
    def estimated_balance(self) -> float:
        return max(0.0, self.total_acquired - self.total_sold - self.total_sent)

    def _touch(self, transfer: TransferRecord):
        key = (transfer.timestamp, transfer.chain)
        if self._earliest is None or key < self._earliest:
            self._earliest = key
            self.chain = transfer.chain


def build_wallet_profiles(
    transfers: Iterable[TransferRecord],
    known: KnownAddressSet,
) -> dict[str, WalletProfile]:
    """
    Fold transfers into one profile per non-DEX address.

    The result does not depend on the order of ``transfers``: sends are
    credited even when they precede the wallet's first receive, and only
    receives set ``first_seen``.

    Args:
        transfers: Transfers from any mix of chains
        known: DEX pools/routers (plus any excluded addresses)

    Returns:
        Profiles keyed by lowercase address
    """
    profiles: dict[str, WalletProfile] = {}

    def profile_for(address: str, transfer: TransferRecord) -> WalletProfile:
        key = address.lower()
        if key not in profiles:
            profiles[key] = WalletProfile(address=address, chain=transfer.chain)
        profile = profiles[key]
        profile._touch(transfer)
        return profile

    for transfer in transfers:
        from_known = transfer.from_address in known
        to_known = transfer.to_address in known

        if transfer.to_address and not to_known:
            receiver = profile_for(transfer.to_address, transfer)
            if receiver.first_seen is None or transfer.timestamp < receiver.first_seen:
                receiver.first_seen = transfer.timestamp
            if from_known:
                receiver.total_bought += transfer.amount
            else:
                receiver.total_received += transfer.amount

        if transfer.from_address and not from_known:
            sender = profile_for(transfer.from_address, transfer)
            if to_known:
                sender.total_sold += transfer.amount
            else:
                sender.total_sent += transfer.amount

    return profiles


def resolve_balance(profile: WalletProfile, authoritative: Mapping[tuple[str, str], float]) -> float:
    """Holder-list balance for ``(chain, address)`` if known, else the estimate."""
    key = (profile.chain, profile.address_lower)
    if key in authoritative:
        return authoritative[key]
    return profile.estimated_balance


def percent_of(part: float, whole: float) -> int:
    return round(part / whole * 100) if whole > 0 else 0


def weekly_cohorts(
    entries: Iterable[tuple[int, float]],
    start: datetime,
    now: datetime,
) -> list[dict]:
    """
    Bucket ``(first_seen, acquired)`` pairs into 7-day windows from ``start``.

    Windows are half-open and the last one may be partial. Timestamps outside
    the covered range are clamped into the first or last window so that the
    per-week counts always sum to the number of entries.
    """
    entries = list(entries)
    span = (now - start).total_seconds()
    week_count = math.ceil(span / WEEK.total_seconds()) if span > 0 else 0
    if entries and week_count == 0:
        week_count = 1

    start_ts = int(start.timestamp())
    counts = [0] * week_count
    totals = [0.0] * week_count

    for first_seen, acquired in entries:
        index = (first_seen - start_ts) // int(WEEK.total_seconds())
        index = min(max(index, 0), week_count - 1)
        counts[index] += 1
        totals[index] += acquired

    weeks = []
    for i in range(week_count):
        week_start = start + i * WEEK
        weeks.append(
            {
                "weekStart": day_label(week_start),
                "weekEnd": day_label(week_start + timedelta(days=6)),
                "newWallets": counts[i],
                "totalAcquired": round(totals[i]),
                "avgAcquired": round(totals[i] / counts[i]) if counts[i] else 0,
            }
        )
    return weeks


def acquisition_stats(amounts: Iterable[float]) -> tuple[int, float]:
    """Mean (rounded) and upper median of the positive amounts."""
    positive = sorted(a for a in amounts if a > 0)
    if not positive:
        return 0, 0
    return round(mean(positive)), positive[len(positive) // 2]


def growth_snapshot(
    baseline: tuple[int, int],
    current: tuple[int, int],
    days_elapsed: int,
) -> dict:
    """Holder-count growth between a baseline snapshot and now, per chain and total."""
    baseline_total = sum(baseline)
    current_total = sum(current)
    absolute = current_total - baseline_total

    return {
        "baseline": {"eth": baseline[0], "base": baseline[1], "total": baseline_total},
        "current": {"eth": current[0], "base": current[1], "total": current_total},
        "growth": {
            "absolute": absolute,
            "percentage": round(absolute / baseline_total * 100, 1) if baseline_total > 0 else 0,
            "dailyRate": round(absolute / days_elapsed, 1) if days_elapsed > 0 else 0,
        },
    }


@dataclass
class HolderTotals:
    bought: float = 0.0
    received: float = 0.0
    sold: float = 0.0
    sent: float = 0.0

    @property
    def net_position(self) -> float:
        return self.bought + self.received - self.sold - self.sent


def fold_holder_transfers(
    transfers: Iterable[TransferRecord],
    holder: str,
    known: KnownAddressSet,
) -> tuple[HolderTotals, list[tuple[TransferRecord, HolderDirection]]]:
    """Classify a holder's transfers relative to the holder and sum each leg."""
    totals = HolderTotals()
    tagged = []
    for transfer in transfers:
        direction = classify_direction_for_holder(
            transfer.from_address, transfer.to_address, holder, known
        )
        if direction is HolderDirection.BUY:
            totals.bought += transfer.amount
        elif direction is HolderDirection.TRANSFER_IN:
            totals.received += transfer.amount
        elif direction is HolderDirection.SELL:
            totals.sold += transfer.amount
        else:
            totals.sent += transfer.amount
        tagged.append((transfer, direction))
    return totals, tagged


def first_acquisition(transfers: list[TransferRecord], holder: str) -> int | None:
    """Earliest inbound timestamp for ``holder``, or earliest transfer if none are inbound."""
    holder = holder.lower()
    inbound = [t.timestamp for t in transfers if t.to_address.lower() == holder]
    if inbound:
        return min(inbound)
    return min((t.timestamp for t in transfers), default=None)


def filter_whale_transfers(transfers: Iterable[TransferRecord], threshold: float) -> list[TransferRecord]:
    return [t for t in transfers if t.amount >= threshold]


def holder_distribution(balances: Iterable[float], thresholds: ThresholdsConfig | None = None) -> dict:
    thresholds = thresholds or ThresholdsConfig()
    distribution = {"whales": 0, "large": 0, "medium": 0, "small": 0, "micro": 0}
    for balance in balances:
        tier = holder_size_tier(
            balance,
            whale=thresholds.tier_whale,
            large=thresholds.tier_large,
            medium=thresholds.tier_medium,
            small=thresholds.tier_small,
        )
        distribution[tier] += 1
    return distribution


def synthesized_deltas(holders: int, rates: tuple[float, float, float]) -> dict:
    """Estimated 24h/7d/30d holder changes as fixed shares of the current count."""
    change_24h, change_7d, change_30d = (round(holders * rate) for rate in rates)
    return {
        "holdersChange24h": change_24h,
        "holdersChange7d": change_7d,
        "holdersChange30d": change_30d,
    }


def _months_back(now: datetime, months: int) -> datetime:
    year, month = divmod(now.year * 12 + now.month - 1 - months, 12)
    return datetime(year, month + 1, 1, tzinfo=now.tzinfo)


def synthesize_holder_trend(
    eth_holders: int,
    base_holders: int,
    now: datetime,
    rng: random.Random | None = None,
) -> dict:
    """
    Illustrative 12-month holder curve ending at the current counts.

    This is a smooth growth model with random jitter, not historical data.
    Pass a seeded ``rng`` for reproducible output.
    """
    rng = rng or random.Random()
    labels, ethereum, base, combined = [], [], [], []

    for i in range(11, -1, -1):
        labels.append(month_label(_months_back(now, i)))

        growth = ((12 - i) / 12) ** 0.7
        eth_point = max(100, round(eth_holders * growth * (0.9 + rng.random() * 0.2)))
        base_point = max(50, round(base_holders * growth * (0.85 + rng.random() * 0.3)))

        ethereum.append(eth_point)
        base.append(base_point)
        combined.append(eth_point + base_point)

    ethereum[-1] = eth_holders
    base[-1] = base_holders
    combined[-1] = eth_holders + base_holders

    return {"labels": labels, "ethereum": ethereum, "base": base, "combined": combined}


def available_pools(pools: Iterable[PoolSnapshot]) -> list[PoolSnapshot]:
    return [p for p in pools if not p.unavailable]


def mean_spot_price(pools: Iterable[PoolSnapshot]) -> float:
    """Simple mean of non-zero spot prices across available pools."""
    prices = [p.price_usd for p in available_pools(pools) if p.price_usd > 0]
    return mean(prices) if prices else 0.0


def pool_totals(pools: Iterable[PoolSnapshot]) -> dict:
    """Sum TVL, volume and 24h counts over available pools only."""
    live = available_pools(pools)
    return {
        "tvl": sum(p.tvl_usd for p in live),
        "volume_24h": sum(p.volume_24h_usd for p in live),
        "transactions": sum(p.transactions_24h for p in live),
        "buys": sum(p.buys_24h for p in live),
        "sells": sum(p.sells_24h for p in live),
    }


def combine_ohlcv(candle_sets: Iterable[list[Candle]]) -> list[Candle]:
    """
    Merge candles from several pools into one series.

    Candles sharing a timestamp become one candle whose open/close is the
    volume-weighted typical price, high/low the extremes, volume the sum.
    """
    buckets: dict[int, dict] = defaultdict(
        lambda: {"price_volume": 0.0, "volume": 0.0, "high": -math.inf, "low": math.inf}
    )

    for candles in candle_sets:
        for candle in candles:
            bucket = buckets[candle.timestamp]
            bucket["price_volume"] += candle.typical_price * candle.volume
            bucket["volume"] += candle.volume
            bucket["high"] = max(bucket["high"], candle.high)
            bucket["low"] = min(bucket["low"], candle.low)

    combined = []
    for timestamp, b in sorted(buckets.items()):
        price = b["price_volume"] / b["volume"] if b["volume"] > 0 else 0.0
        combined.append(Candle(timestamp, price, b["high"], b["low"], price, b["volume"]))
    return combined


def candle_vwap(candles: Iterable[Candle]) -> float:
    """Sum(typical price x volume) / Sum(volume); 0 when there is no volume."""
    price_volume = 0.0
    volume = 0.0
    for candle in candles:
        price_volume += candle.typical_price * candle.volume
        volume += candle.volume
    return price_volume / volume if volume > 0 else 0.0


def empty_price_history() -> dict:
    return {
        "chartLabels": [],
        "chartPrices": [],
        "allTimeHigh": 0,
        "allTimeLow": 0,
        "currentPrice": 0,
        "vwap": {f"vwap{days}d": 0 for days in VWAP_PERIODS},
    }


def price_history(candles: list[Candle]) -> dict:
    """
    Chart series and VWAP periods from a combined daily candle series.

    Args:
        candles: Combined candles, any order

    Returns:
        Payload section with monthly averages for the last 365 days,
        all-time high/low, current price and VWAP per period
    """
    if not candles:
        return empty_price_history()

    ascending = sorted(candles, key=lambda c: c.timestamp)
    newest_first = ascending[::-1]

    vwap = {f"vwap{days}d": candle_vwap(newest_first[:days]) for days in VWAP_PERIODS}

    all_time_high = max(0, *(c.high for c in ascending))
    positive_lows = [c.low for c in ascending if c.low > 0]
    all_time_low = min(positive_lows) if positive_lows else 0

    monthly: dict[str, list[float]] = defaultdict(list)
    for candle in ascending[-365:]:
        dt = datetime.fromtimestamp(candle.timestamp, tz=timezone.utc)
        monthly[f"{dt:%Y-%m}"].append(candle.close)

    chart_labels, chart_prices = [], []
    for month in sorted(monthly):
        chart_labels.append(datetime.strptime(month, "%Y-%m").strftime("%b"))
        chart_prices.append(mean(monthly[month]))

    return {
        "chartLabels": chart_labels,
        "chartPrices": chart_prices,
        "allTimeHigh": all_time_high,
        "allTimeLow": all_time_low,
        "currentPrice": ascending[-1].close,
        "vwap": vwap,
    }
