"""Normalized records shared by the provider clients and the analysis layer."""

from dataclasses import dataclass

CHAIN_ETH = "ETH"
CHAIN_BASE = "BASE"

CHAIN_IDS = {CHAIN_ETH: 1, CHAIN_BASE: 8453}

EXPLORERS = {
    CHAIN_ETH: "https://etherscan.io",
    CHAIN_BASE: "https://basescan.org",
}


def explorer_url(chain: str) -> str:
    return EXPLORERS.get(chain, EXPLORERS[CHAIN_ETH])


@dataclass(frozen=True)
class TransferRecord:
    """A single ERC-20 transfer, amount already in token units."""

    from_address: str
    to_address: str
    amount: float
    timestamp: int  # Unix seconds
    chain: str
    transaction_hash: str

    @property
    def chain_id(self) -> int:
        return CHAIN_IDS.get(self.chain, 0)


@dataclass(frozen=True)
class HolderBalance:
    """A holder-list entry with its raw on-chain balance."""

    address: str
    raw_balance: int
    chain: str

    @property
    def address_lower(self) -> str:
        return self.address.lower()

    def balance(self, decimals: int = 18) -> float:
        return self.raw_balance / 10**decimals


@dataclass(frozen=True)
class TokenInfo:
    """Token-level counters reported by an explorer."""

    holders_count: int
    transfers_count: int = 0


@dataclass(frozen=True)
class PoolSnapshot:
    """Point-in-time state of a liquidity pool.

    ``unavailable`` marks a snapshot built after every source failed; all
    numeric fields are zero in that case.
    """

    pool_key: str
    pool_address: str
    chain: str
    chain_id: int
    dex: str
    token0: str
    token1: str
    price_usd: float
    tvl_usd: float
    volume_24h_usd: float
    buys_24h: int
    sells_24h: int
    fee_tier: str
    price_change_24h: float = 0.0
    source: str | None = None
    unavailable: bool = False
    explorer_url: str = ""
    dex_url: str = ""

    @property
    def transactions_24h(self) -> int:
        return self.buys_24h + self.sells_24h


@dataclass(frozen=True)
class Candle:
    """Daily OHLCV candle."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3
