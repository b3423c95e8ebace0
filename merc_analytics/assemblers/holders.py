"""Top holders across both chains, ranked by balance."""

import logging
from datetime import datetime

from ..analysis.formatting import format_tokens, short_address
from ..api import ProviderSet, unavailable_sources
from ..config import Config
from ..models import HolderBalance, explorer_url
from .common import merged_top_holders

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Failed to fetch holders"


def failure_payload() -> dict:
    return {"success": False, "error": ERROR_MESSAGE, "holders": [], "count": 0}


def _holder_entry(rank: int, holder: HolderBalance, total_supply_raw: int, decimals: int) -> dict:
    return {
        "rank": rank,
        "address": holder.address,
        "addressNormalized": holder.address_lower,
        "shortAddress": short_address(holder.address),
        "balance": str(holder.raw_balance),
        "balanceFormatted": format_tokens(holder.balance(decimals)),
        "percentage": f"{holder.raw_balance / total_supply_raw * 100:.2f}",
        "chain": holder.chain,
        "explorerUrl": explorer_url(holder.chain),
    }


async def assemble_holders(providers: ProviderSet, config: Config, now: datetime | None = None) -> dict:
    token = config.token
    holders, results = await merged_top_holders(
        providers, config.limits.top_holders, timeout=config.api.branch_timeout_seconds
    )
    total_supply_raw = token.total_supply * 10**token.decimals

    entries = [
        _holder_entry(rank, holder, total_supply_raw, token.decimals)
        for rank, holder in enumerate(holders, start=1)
    ]
    logger.debug(f"Ranked {len(entries)} holders")

    return {
        "success": True,
        "holders": entries,
        "count": len(entries),
        "unavailableSources": unavailable_sources(results),
    }
