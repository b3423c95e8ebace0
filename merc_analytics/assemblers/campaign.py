"""Campaign metrics: wallets that first acquired the token after the campaign start."""

import logging
from dataclasses import dataclass
from datetime import datetime

from ..analysis.aggregation import (
    SECONDS_PER_DAY,
    WalletProfile,
    acquisition_stats,
    build_wallet_profiles,
    growth_snapshot,
    percent_of,
    resolve_balance,
    weekly_cohorts,
)
from ..analysis.classification import (
    AcquisitionMethod,
    ExitStatus,
    acquisition_method,
    clamp_percent,
    exit_status,
)
from ..analysis.formatting import date_label, iso_now, long_date_label, short_address
from ..api import ProviderSet, fan_out, unavailable_sources
from ..config import Config
from ..models import CHAIN_BASE, CHAIN_ETH, explorer_url
from .common import CHAINS, known_addresses, parse_iso, utc_now

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Failed to fetch campaign metrics"


def failure_payload() -> dict:
    return {"success": False, "error": ERROR_MESSAGE, "metrics": None}


@dataclass
class CampaignWallet:
    """A wallet whose first acquisition falls inside the campaign window."""

    address: str
    chain: str
    first_seen: int
    days_since: int
    method: AcquisitionMethod
    total_acquired: float
    current_balance: float
    total_sold: float
    retention_rate: float  # raw, may exceed 100
    status: ExitStatus
    held_over_threshold: bool

    @classmethod
    def from_profile(
        cls,
        profile: WalletProfile,
        balance: float,
        now_ts: int,
        held_days_threshold: int,
    ) -> "CampaignWallet":
        acquired = profile.total_acquired
        retention = balance / acquired * 100 if acquired > 0 else 0.0
        status = exit_status(balance, retention)
        days_since = (now_ts - profile.first_seen) // SECONDS_PER_DAY

        return cls(
            address=profile.address,
            chain=profile.chain,
            first_seen=profile.first_seen,
            days_since=days_since,
            method=acquisition_method(profile.total_bought, profile.total_received),
            total_acquired=acquired,
            current_balance=balance,
            total_sold=profile.total_sold,
            retention_rate=retention,
            status=status,
            held_over_threshold=days_since >= held_days_threshold and status is not ExitStatus.FULL_EXIT,
        )

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "addressNormalized": self.address.lower(),
            "shortAddress": short_address(self.address),
            "chain": self.chain,
            "firstAcquisitionDate": date_label(self.first_seen),
            "firstAcquisitionTimestamp": self.first_seen,
            "daysSinceAcquisition": self.days_since,
            "acquisitionMethod": self.method.value,
            "totalAcquired": round(self.total_acquired),
            "currentBalance": round(self.current_balance),
            "totalSold": round(self.total_sold),
            "retentionRate": round(clamp_percent(self.retention_rate)),
            "status": self.status.value,
            "heldOver20Days": self.held_over_threshold,
            "explorerUrl": explorer_url(self.chain),
        }


def summarize_wallets(wallets: list[CampaignWallet], start: datetime, now: datetime) -> dict:
    """Roll campaign wallets up into the ``metrics`` section (minus the holder snapshot)."""
    total = len(wallets)
    avg_acquisition, median_acquisition = acquisition_stats(round(w.total_acquired) for w in wallets)

    held = sum(1 for w in wallets if w.held_over_threshold)
    holding = sum(1 for w in wallets if w.status is ExitStatus.HOLDING)
    full_exit = sum(1 for w in wallets if w.status is ExitStatus.FULL_EXIT)

    total_acquired = sum(round(w.total_acquired) for w in wallets)
    total_retained = sum(round(w.current_balance) for w in wallets)

    top_holders = sorted(
        (w for w in wallets if w.current_balance > 0),
        key=lambda w: w.current_balance,
        reverse=True,
    )[:10]
    recent = sorted(wallets, key=lambda w: w.first_seen, reverse=True)[:10]

    return {
        "campaignStart": long_date_label(start),
        "daysSinceCampaign": max(0, (now - start).days),
        "totalNewWallets": total,
        "totalNewWalletsETH": sum(1 for w in wallets if w.chain == CHAIN_ETH),
        "totalNewWalletsBASE": sum(1 for w in wallets if w.chain == CHAIN_BASE),
        "avgAcquisitionAmount": avg_acquisition,
        "medianAcquisitionAmount": median_acquisition,
        "walletsHeldOver20Days": held,
        "walletsHeldOver20DaysPercent": percent_of(held, total),
        "walletsStillHolding": holding,
        "walletsStillHoldingPercent": percent_of(holding, total),
        "walletsFullExit": full_exit,
        "walletsFullExitPercent": percent_of(full_exit, total),
        "totalTokensAcquired": total_acquired,
        "totalTokensRetained": total_retained,
        "overallRetentionRate": round(clamp_percent(percent_of(total_retained, total_acquired))),
        "acquisitionByMethod": {
            "bought": sum(1 for w in wallets if w.method is AcquisitionMethod.BOUGHT),
            "received": sum(1 for w in wallets if w.method is AcquisitionMethod.RECEIVED),
            "mixed": sum(1 for w in wallets if w.method is AcquisitionMethod.MIXED),
        },
        "weeklyBreakdown": weekly_cohorts(
            ((w.first_seen, round(w.total_acquired)) for w in wallets), start, now
        ),
        "topNewHolders": [w.to_dict() for w in top_holders],
        "recentNewWallets": [w.to_dict() for w in recent],
    }


async def assemble_campaign_metrics(providers: ProviderSet, config: Config, now: datetime | None = None) -> dict:
    """
    Build the campaign metrics payload.

    Transfers from both chains since the campaign start are folded into
    wallet profiles; the zero address is treated like a DEX address so mints
    and burns never create profiles. ETH top-holder balances override the
    transfer-based balance estimate where available.
    """
    now = utc_now(now)
    now_ts = int(now.timestamp())
    campaign, limits, token = config.campaign, config.limits, config.token
    start = parse_iso(campaign.start)
    start_ts = int(start.timestamp())

    results = await fan_out(
        {
            **{
                f"alchemy:{chain}": providers.alchemy(chain).get_asset_transfers(
                    max_count=limits.campaign_transfers
                )
                for chain in CHAINS
            },
            "ethplorer:holders": providers.ethplorer.get_top_holders(limits.campaign_balance_holders),
            "dune:ETH": providers.dune.get_holder_count(campaign.dune_eth_query_id),
            "dune:BASE": providers.dune.get_holder_count(campaign.dune_base_query_id),
            "ethplorer:info": providers.ethplorer.get_token_info(),
            "moralis:count": providers.moralis.count_holders(),
        },
        timeout=config.api.branch_timeout_seconds,
    )

    transfers = [
        t
        for chain in CHAINS
        for t in results[f"alchemy:{chain}"].value_or([])
        if t.timestamp >= start_ts
    ]
    logger.info(f"{len(transfers)} transfers since campaign start {campaign.start}")

    known = known_addresses(config).union(campaign.excluded_addresses)
    authoritative = {
        (CHAIN_ETH, h.address_lower): h.balance(token.decimals)
        for h in results["ethplorer:holders"].value_or([])
    }

    wallets = [
        CampaignWallet.from_profile(
            profile,
            resolve_balance(profile, authoritative),
            now_ts,
            campaign.held_days_threshold,
        )
        for profile in build_wallet_profiles(transfers, known).values()
        if profile.first_seen is not None
    ]
    logger.info(f"Analyzed {len(wallets)} new wallets")

    eth_info = results["ethplorer:info"].value_or(None)
    metrics = summarize_wallets(wallets, start, now)
    metrics["holderSnapshot"] = growth_snapshot(
        baseline=(results["dune:ETH"].value_or(0), results["dune:BASE"].value_or(0)),
        current=(eth_info.holders_count if eth_info else 0, results["moralis:count"].value_or(0)),
        days_elapsed=metrics["daysSinceCampaign"],
    )

    return {
        "success": True,
        "metrics": metrics,
        "lastUpdated": iso_now(now),
        "unavailableSources": unavailable_sources(results),
    }
