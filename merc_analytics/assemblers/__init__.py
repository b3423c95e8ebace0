"""One assembler per endpoint: fan out to providers, classify, aggregate, shape JSON."""

from collections.abc import Awaitable, Callable
from typing import NamedTuple

from . import campaign, holder_behavior, holder_metrics, holders, market, transactions, whales
from .campaign import assemble_campaign_metrics
from .holder_behavior import assemble_holder_behavior
from .holder_metrics import assemble_holder_metrics
from .holders import assemble_holders
from .market import assemble_market_data
from .transactions import assemble_transactions
from .whales import assemble_whale_activity


class Endpoint(NamedTuple):
    assemble: Callable[..., Awaitable[dict]]
    failure_payload: Callable[[], dict]


ENDPOINTS = {
    "/api/blockchain-holders": Endpoint(assemble_holders, holders.failure_payload),
    "/api/blockchain-transactions": Endpoint(assemble_transactions, transactions.failure_payload),
    "/api/campaign-metrics": Endpoint(assemble_campaign_metrics, campaign.failure_payload),
    "/api/holder-behavior": Endpoint(assemble_holder_behavior, holder_behavior.failure_payload),
    "/api/holder-metrics": Endpoint(assemble_holder_metrics, holder_metrics.failure_payload),
    "/api/market-data": Endpoint(assemble_market_data, market.failure_payload),
    "/api/whale-activity": Endpoint(assemble_whale_activity, whales.failure_payload),
}

__all__ = [
    "ENDPOINTS",
    "Endpoint",
    "assemble_campaign_metrics",
    "assemble_holder_behavior",
    "assemble_holder_metrics",
    "assemble_holders",
    "assemble_market_data",
    "assemble_transactions",
    "assemble_whale_activity",
]
