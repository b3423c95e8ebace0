"""Tests for wallet folding, cohorts, pool and candle aggregation."""

import random
from datetime import datetime, timedelta, timezone

import pytest

from merc_analytics.analysis import formatting
from merc_analytics.analysis.aggregation import (
    build_wallet_profiles,
    candle_vwap,
    combine_ohlcv,
    filter_whale_transfers,
    first_acquisition,
    fold_holder_transfers,
    growth_snapshot,
    holder_distribution,
    mean_spot_price,
    pool_totals,
    price_history,
    resolve_balance,
    synthesize_holder_trend,
    weekly_cohorts,
)
from merc_analytics.analysis.classification import KnownAddressSet
from merc_analytics.models import CHAIN_BASE, CHAIN_ETH, Candle, PoolSnapshot, TransferRecord

POOL = "0x99543a3dcf169c8e442cc5ba1cb978ff1df2a8be"
ALICE = "0xA11cE00000000000000000000000000000000000"
BOB = "0xb0b0000000000000000000000000000000000000"

KNOWN = KnownAddressSet([POOL])
NOW = datetime(2025, 12, 1, tzinfo=timezone.utc)


def transfer(from_address, to_address, amount, ts, chain=CHAIN_ETH):
    return TransferRecord(from_address, to_address, amount, ts, chain, f"0x{ts:x}")


def pool(key, price=1.0, tvl=100.0, volume=10.0, buys=1, sells=1, unavailable=False):
    return PoolSnapshot(
        pool_key=key,
        pool_address=POOL,
        chain="ethereum",
        chain_id=1,
        dex="Uniswap V3",
        token0="MERC",
        token1="WETH",
        price_usd=price,
        tvl_usd=tvl,
        volume_24h_usd=volume,
        buys_24h=buys,
        sells_24h=sells,
        fee_tier="1%",
        unavailable=unavailable,
    )


class TestWalletProfiles:
    def test_buy_receive_sell_send(self):
        profiles = build_wallet_profiles(
            [
                transfer(POOL, ALICE, 1000, 100),
                transfer(BOB, ALICE, 500, 200),
                transfer(ALICE, POOL, 300, 300),
                transfer(ALICE, BOB, 100, 400),
            ],
            KNOWN,
        )

        alice = profiles[ALICE.lower()]
        assert alice.total_bought == 1000
        assert alice.total_received == 500
        assert alice.total_sold == 300
        assert alice.total_sent == 100
        assert alice.total_acquired == 1500
        assert alice.estimated_balance == 1100
        assert alice.first_seen == 100
        assert POOL not in profiles

    def test_order_independent(self):
        transfers = [
            transfer(POOL, ALICE, 1000, 500, CHAIN_BASE),
            transfer(ALICE, BOB, 200, 300, CHAIN_ETH),
            transfer(BOB, ALICE, 50, 700, CHAIN_ETH),
            transfer(BOB, POOL, 10, 900, CHAIN_BASE),
        ]
        expected = build_wallet_profiles(transfers, KNOWN)

        shuffled = list(transfers)
        for seed in range(5):
            random.Random(seed).shuffle(shuffled)
            assert build_wallet_profiles(shuffled, KNOWN) == expected

    def test_first_seen_only_from_receives(self):
        profiles = build_wallet_profiles(
            [transfer(ALICE, BOB, 10, 100, CHAIN_BASE), transfer(POOL, ALICE, 50, 200)],
            KNOWN,
        )

        alice = profiles[ALICE.lower()]
        assert alice.first_seen == 200
        assert alice.total_sent == 10
        # Chain follows the earliest transfer of any kind
        assert alice.chain == CHAIN_BASE

    def test_sender_only_profile_has_no_first_seen(self):
        profiles = build_wallet_profiles([transfer(ALICE, POOL, 10, 100)], KNOWN)
        assert profiles[ALICE.lower()].first_seen is None

    def test_case_variants_share_profile(self):
        profiles = build_wallet_profiles(
            [transfer(POOL, ALICE, 10, 100), transfer(POOL.upper(), ALICE.lower(), 5, 200)],
            KNOWN,
        )
        assert len(profiles) == 1
        assert profiles[ALICE.lower()].total_bought == 15

    def test_estimated_balance_floors_at_zero(self):
        profiles = build_wallet_profiles([transfer(ALICE, POOL, 10, 100)], KNOWN)
        assert profiles[ALICE.lower()].estimated_balance == 0


class TestResolveBalance:
    def test_authoritative_balance_wins(self):
        profile = build_wallet_profiles([transfer(POOL, ALICE, 1000, 100)], KNOWN)[ALICE.lower()]
        assert resolve_balance(profile, {(CHAIN_ETH, ALICE.lower()): 42.0}) == 42.0

    def test_authoritative_zero_is_respected(self):
        profile = build_wallet_profiles([transfer(POOL, ALICE, 1000, 100)], KNOWN)[ALICE.lower()]
        assert resolve_balance(profile, {(CHAIN_ETH, ALICE.lower()): 0.0}) == 0.0

    def test_other_chain_falls_back_to_estimate(self):
        profile = build_wallet_profiles([transfer(POOL, ALICE, 1000, 100)], KNOWN)[ALICE.lower()]
        assert resolve_balance(profile, {(CHAIN_BASE, ALICE.lower()): 1.0}) == 1000


class TestWeeklyCohorts:
    def test_counts_sum_to_entries(self):
        start = datetime(2025, 11, 1, tzinfo=timezone.utc)
        start_ts = int(start.timestamp())
        entries = [
            (start_ts - 3600, 10.0),  # before the window
            (start_ts, 20.0),
            (start_ts + 8 * 86_400, 30.0),
            (int(NOW.timestamp()) + 3600, 40.0),  # after now
        ]

        weeks = weekly_cohorts(entries, start, NOW)

        assert len(weeks) == 5
        assert sum(w["newWallets"] for w in weeks) == len(entries)
        assert weeks[0]["newWallets"] == 2
        assert weeks[0]["totalAcquired"] == 30
        assert weeks[0]["avgAcquired"] == 15
        assert weeks[1]["newWallets"] == 1
        assert weeks[-1]["newWallets"] == 1

    def test_labels(self):
        start = datetime(2025, 11, 1, tzinfo=timezone.utc)
        weeks = weekly_cohorts([], start, NOW)

        assert weeks[0]["weekStart"] == "Nov 1"
        assert weeks[0]["weekEnd"] == "Nov 7"
        assert weeks[1]["weekStart"] == "Nov 8"
        assert all(w["avgAcquired"] == 0 for w in weeks)

    def test_start_in_future_with_entries(self):
        start = NOW + timedelta(days=3)
        weeks = weekly_cohorts([(int(NOW.timestamp()), 5.0)], start, NOW)

        assert len(weeks) == 1
        assert weeks[0]["newWallets"] == 1


def test_growth_snapshot():
    snapshot = growth_snapshot((1000, 500), (1100, 650), 10)

    assert snapshot["baseline"]["total"] == 1500
    assert snapshot["current"] == {"eth": 1100, "base": 650, "total": 1750}
    assert snapshot["growth"] == {"absolute": 250, "percentage": 16.7, "dailyRate": 25.0}


def test_growth_snapshot_zero_baseline():
    snapshot = growth_snapshot((0, 0), (10, 5), 0)
    assert snapshot["growth"]["percentage"] == 0
    assert snapshot["growth"]["dailyRate"] == 0


class TestHolderTransfers:
    def test_fold_relative_to_holder(self):
        totals, tagged = fold_holder_transfers(
            [
                transfer(POOL, ALICE, 1000, 100),
                transfer(BOB, ALICE, 200, 200),
                transfer(ALICE, POOL, 300, 300),
                transfer(ALICE, BOB, 50, 400),
            ],
            ALICE.lower(),
            KNOWN,
        )

        assert (totals.bought, totals.received, totals.sold, totals.sent) == (1000, 200, 300, 50)
        assert totals.net_position == 850
        assert [d.value for _, d in tagged] == ["Buy", "Transfer In", "Sell", "Transfer Out"]

    def test_first_acquisition_prefers_inbound(self):
        transfers = [transfer(ALICE, BOB, 10, 50), transfer(POOL, ALICE, 20, 150)]
        assert first_acquisition(transfers, ALICE) == 150

    def test_first_acquisition_without_inbound(self):
        transfers = [transfer(ALICE, BOB, 10, 80), transfer(ALICE, POOL, 5, 60)]
        assert first_acquisition(transfers, ALICE) == 60
        assert first_acquisition([], ALICE) is None


def test_whale_threshold_is_inclusive():
    transfers = [
        transfer(POOL, ALICE, 10_000, 1),
        transfer(POOL, ALICE, 9_999.999999, 2),
        transfer(ALICE, POOL, 250_000, 3),
    ]

    whales = filter_whale_transfers(transfers, 10_000)

    assert [t.timestamp for t in whales] == [1, 3]


def test_holder_distribution_tiers():
    distribution = holder_distribution([20_000_000, 5_000_000, 500_000, 50_000, 10_000, 1])
    assert distribution == {"whales": 1, "large": 1, "medium": 1, "small": 1, "micro": 2}


class TestHolderTrend:
    def test_seeded_output_is_reproducible(self):
        first = synthesize_holder_trend(5000, 2000, NOW, random.Random(7))
        second = synthesize_holder_trend(5000, 2000, NOW, random.Random(7))
        assert first == second

    def test_ends_at_current_counts(self):
        trend = synthesize_holder_trend(5000, 2000, NOW, random.Random(1))

        assert len(trend["labels"]) == 12
        assert trend["labels"][0] == "Jan 25"
        assert trend["labels"][-1] == "Dec 25"
        assert trend["ethereum"][-1] == 5000
        assert trend["base"][-1] == 2000
        assert trend["combined"][-1] == 7000
        assert all(e + b == c for e, b, c in zip(trend["ethereum"], trend["base"], trend["combined"]))

    def test_floors_apply_before_last_point(self):
        trend = synthesize_holder_trend(0, 0, NOW, random.Random(3))

        assert all(v >= 100 for v in trend["ethereum"][:-1])
        assert all(v >= 50 for v in trend["base"][:-1])
        assert trend["combined"][-1] == 0


class TestPools:
    def test_unavailable_pools_are_excluded(self):
        pools = [
            pool("a", price=2.0, tvl=100, volume=10, buys=3, sells=2),
            pool("b", price=4.0, tvl=300, volume=30, buys=1, sells=1),
            pool("c", price=0, tvl=0, volume=0, buys=0, sells=0, unavailable=True),
        ]

        assert pool_totals(pools) == {
            "tvl": 400,
            "volume_24h": 40,
            "transactions": 7,
            "buys": 4,
            "sells": 3,
        }
        assert mean_spot_price(pools) == pytest.approx(3.0)

    def test_mean_spot_price_ignores_zero_prices(self):
        assert mean_spot_price([pool("a", price=0.0), pool("b", price=1.5)]) == pytest.approx(1.5)
        assert mean_spot_price([pool("a", unavailable=True)]) == 0.0


class TestCandles:
    def test_candle_vwap(self):
        candles = [Candle(1, 2, 3, 1, 2, 10), Candle(2, 3, 6, 3, 3, 30)]
        assert candle_vwap(candles) == pytest.approx(3.5)

    def test_candle_vwap_without_volume(self):
        assert candle_vwap([Candle(1, 1, 1, 1, 1, 0)]) == 0.0
        assert candle_vwap([]) == 0.0

    def test_combine_merges_shared_timestamps(self):
        eth = [Candle(200, 1, 3, 1, 2, 10), Candle(100, 1, 2, 1, 1, 5)]
        base = [Candle(200, 1, 6, 0.5, 3, 30)]

        combined = combine_ohlcv([eth, base])

        assert [c.timestamp for c in combined] == [100, 200]
        merged = combined[1]
        assert merged.high == 6
        assert merged.low == 0.5
        assert merged.volume == 40
        # (2 * 10 + 3.1666... * 30) / 40
        assert merged.close == pytest.approx((2 * 10 + (6 + 0.5 + 3) / 3 * 30) / 40)

    def test_price_history(self):
        day = 86_400
        base_ts = int(datetime(2025, 10, 1, tzinfo=timezone.utc).timestamp())
        candles = [
            Candle(base_ts + i * day, 1, 1 + i, 0 if i == 0 else 0.5, 1 + i * 0.1, 100)
            for i in range(40)
        ]

        history = price_history(list(reversed(candles)))

        assert history["chartLabels"] == ["Oct", "Nov"]
        assert history["allTimeHigh"] == 40
        assert history["allTimeLow"] == 0.5
        assert history["currentPrice"] == pytest.approx(1 + 39 * 0.1)
        assert history["vwap"]["vwap7d"] == pytest.approx(candle_vwap(candles[-7:]))
        assert history["vwap"]["vwap360d"] == pytest.approx(candle_vwap(candles))

    def test_empty_price_history(self):
        history = price_history([])
        assert history["chartLabels"] == []
        assert history["vwap"]["vwap30d"] == 0


class TestFormatting:
    def test_short_address(self):
        assert formatting.short_address("0x1234567890abcdef") == "0x1234...cdef"
        assert formatting.short_address("") == ""

    def test_format_compact(self):
        assert formatting.format_compact(1_500_000) == "1.50M"
        assert formatting.format_compact(12_345) == "12.3K"
        assert formatting.format_compact(-2_000) == "-2.0K"
        assert formatting.format_compact(999) == "999"

    @pytest.mark.parametrize(
        "age,long,short",
        [
            (30, "30 seconds ago", "30s ago"),
            (300, "5 minutes ago", "5m ago"),
            (7200, "2 hours ago", "2h ago"),
            (3 * 86_400, "3 days ago", "3d ago"),
        ],
    )
    def test_time_ago(self, age, long, short):
        assert formatting.time_ago(1000, 1000 + age) == long
        assert formatting.time_ago(1000, 1000 + age, compact=True) == short

    def test_date_labels(self):
        ts = int(datetime(2025, 10, 20, 12, tzinfo=timezone.utc).timestamp())
        assert formatting.date_label(ts) == "Oct 20, 2025"
        assert formatting.short_date_label(ts) == "Oct 20, 25"
        assert formatting.long_date_label(NOW) == "December 1, 2025"

    def test_iso_now(self):
        assert formatting.iso_now(NOW) == "2025-12-01T00:00:00.000Z"
