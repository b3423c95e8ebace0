"""Holder counts per chain, size distribution and trend."""

import logging
import random
from datetime import datetime

from ..analysis.aggregation import (
    BASE_DELTA_RATES,
    ETH_DELTA_RATES,
    holder_distribution,
    synthesize_holder_trend,
    synthesized_deltas,
)
from ..analysis.formatting import iso_now
from ..api import ProviderSet, fan_out, unavailable_sources
from ..config import Config
from .common import utc_now

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Failed to fetch holder metrics"


def failure_payload() -> dict:
    return {"success": False, "error": ERROR_MESSAGE, "metrics": None}


def _count_or_default(result, default: int) -> int:
    info = result.value_or(None)
    return info.holders_count if info and info.holders_count > 0 else default


async def assemble_holder_metrics(
    providers: ProviderSet,
    config: Config,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> dict:
    """
    Build the holder metrics payload.

    Counts fall back to configured defaults when the explorers are down.
    The 24h/7d/30d changes and the 12-month trend are synthesized from the
    current counts, not read from history.
    """
    now = utc_now(now)
    defaults = config.holder_metrics
    if rng is None and defaults.trend_seed is not None:
        rng = random.Random(defaults.trend_seed)

    results = await fan_out(
        {
            "ethplorer:info": providers.ethplorer.get_token_info(),
            "basescan:info": providers.basescan.get_token_info(),
            "ethplorer:holders": providers.ethplorer.get_top_holders(config.limits.distribution_holders),
        },
        timeout=config.api.branch_timeout_seconds,
    )

    eth_holders = _count_or_default(results["ethplorer:info"], defaults.eth_default_holders)
    base_holders = _count_or_default(results["basescan:info"], defaults.base_default_holders)

    eth_deltas = synthesized_deltas(eth_holders, ETH_DELTA_RATES)
    base_deltas = synthesized_deltas(base_holders, BASE_DELTA_RATES)

    decimals = config.token.decimals
    balances = [h.balance(decimals) for h in results["ethplorer:holders"].value_or([])]

    metrics = {
        "ethereum": {"totalHolders": eth_holders, **eth_deltas},
        "base": {"totalHolders": base_holders, **base_deltas},
        "combined": {
            "totalHolders": eth_holders + base_holders,
            **{key: eth_deltas[key] + base_deltas[key] for key in eth_deltas},
        },
        "holderDistribution": holder_distribution(balances, config.thresholds),
        "historicalData": synthesize_holder_trend(eth_holders, base_holders, now, rng),
    }
    logger.debug(f"Holder counts ETH={eth_holders} BASE={base_holders}")

    return {
        "success": True,
        "metrics": metrics,
        "lastUpdated": iso_now(now),
        "unavailableSources": unavailable_sources(results),
    }
