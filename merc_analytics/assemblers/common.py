"""Helpers shared by the endpoint assemblers."""

from datetime import datetime, timezone

from ..analysis.classification import KnownAddressSet
from ..api import BranchResult, ProviderSet, fan_out, with_fallback
from ..config import Config
from ..models import CHAIN_BASE, CHAIN_ETH, HolderBalance

CHAINS = (CHAIN_ETH, CHAIN_BASE)


def utc_now(now: datetime | None = None) -> datetime:
    return now or datetime.now(timezone.utc)


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 string, accepting a trailing ``Z``."""
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def known_addresses(config: Config) -> KnownAddressSet:
    return KnownAddressSet(config.dex.known_addresses)


async def base_top_holders(providers: ProviderSet, limit: int) -> list[HolderBalance]:
    """Base holders from Moralis, falling back to Basescan."""
    return await with_fallback(
        "base holders",
        lambda: providers.moralis.get_top_holders(limit),
        lambda: providers.basescan.get_top_holders(limit),
    )


async def merged_top_holders(
    providers: ProviderSet,
    limit: int,
    timeout: float | None = None,
) -> tuple[list[HolderBalance], dict[str, BranchResult]]:
    """
    Top holders of both chains merged and ranked by raw balance.

    Returns:
        (at most ``limit`` holders, per-branch results)
    """
    results = await fan_out(
        {
            "ethplorer": providers.ethplorer.get_top_holders(limit),
            "moralis/basescan": base_top_holders(providers, limit),
        },
        timeout=timeout,
    )
    holders = [*results["ethplorer"].value_or([]), *results["moralis/basescan"].value_or([])]
    holders.sort(key=lambda h: h.raw_balance, reverse=True)
    return holders[:limit], results
