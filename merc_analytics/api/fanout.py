"""Concurrent dispatch of independent provider calls.

``fan_out`` awaits every branch and returns one ``BranchResult`` per branch,
so a failing provider degrades to a default value instead of aborting the
whole response. Only provider errors are captured; anything else is a bug and
is re-raised once all branches have finished.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .errors import ProviderError, UpstreamUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class BranchResult(Generic[T]):
    """Outcome of one fan-out branch."""

    name: str
    value: T | None = None
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: T) -> T:
        return self.value if self.ok else default


async def _run_branch(name: str, awaitable: Awaitable[T], timeout: float | None) -> BranchResult[T]:
    try:
        if timeout:
            value = await asyncio.wait_for(awaitable, timeout)
        else:
            value = await awaitable
        return BranchResult(name=name, value=value)
    except asyncio.TimeoutError:
        error = UpstreamUnavailable(name, f"timed out after {timeout}s")
    except ProviderError as e:
        error = e

    logger.warning(f"Branch '{name}' failed: {error}")
    return BranchResult(name=name, error=error)


async def fan_out(
    branches: dict[str, Awaitable[Any]],
    timeout: float | None = None,
) -> dict[str, BranchResult]:
    """
    Run branches concurrently and collect a result per branch.

    Args:
        branches: Mapping of branch name to awaitable
        timeout: Optional per-branch timeout in seconds

    Returns:
        Mapping of branch name to BranchResult, in input order
    """
    names = list(branches)
    outcomes = await asyncio.gather(
        *(_run_branch(name, branches[name], timeout) for name in names),
        return_exceptions=True,
    )

    results: dict[str, BranchResult] = {}
    for name, outcome in zip(names, outcomes):
        if isinstance(outcome, BaseException):
            raise outcome
        results[name] = outcome
    return results


async def with_fallback(label: str, *attempts: Callable[[], Awaitable[T]]) -> T:
    """
    Try each attempt in order and return the first successful value.

    Raises the last provider error when every attempt fails.
    """
    last_error: ProviderError | None = None
    for attempt in attempts:
        try:
            return await attempt()
        except ProviderError as e:
            logger.info(f"{label}: {e}; trying next source")
            last_error = e

    raise last_error or UpstreamUnavailable(label, "no sources configured")


def unavailable_sources(results: dict[str, BranchResult]) -> list[str]:
    """Names of branches that failed, for the response payload."""
    return [name for name, result in results.items() if not result.ok]
