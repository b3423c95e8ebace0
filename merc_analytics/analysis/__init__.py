"""Classification and aggregation over normalized on-chain records."""

from .aggregation import (
    WalletProfile,
    build_wallet_profiles,
    candle_vwap,
    combine_ohlcv,
    filter_whale_transfers,
    mean_spot_price,
    resolve_balance,
    synthesize_holder_trend,
    weekly_cohorts,
)
from .classification import (
    Behavior,
    Direction,
    HolderDirection,
    KnownAddressSet,
    clamp_percent,
    classify_behavior,
    classify_direction,
    classify_direction_for_holder,
)

__all__ = [
    "Behavior",
    "Direction",
    "HolderDirection",
    "KnownAddressSet",
    "WalletProfile",
    "build_wallet_profiles",
    "candle_vwap",
    "clamp_percent",
    "classify_behavior",
    "classify_direction",
    "classify_direction_for_holder",
    "combine_ohlcv",
    "filter_whale_transfers",
    "mean_spot_price",
    "resolve_balance",
    "synthesize_holder_trend",
    "weekly_cohorts",
]
