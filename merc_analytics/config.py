"""Configuration loader for MERC Analytics."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class TokenConfig:
    symbol: str = "MERC"
    eth_contract: str = "0x6EE2f71049DDE9a93B7c0EE1091b72aCf9b46810"
    base_contract: str = "0x8923947EAfaf4aD68F1f0C9eb5463eC876D79058"
    decimals: int = 18
    total_supply: int = 6_000_000_000  # whole tokens


@dataclass
class CampaignConfig:
    start: str = "2025-10-20T00:00:00Z"
    # Added to the DEX set when folding campaign transfers (mints/burns)
    excluded_addresses: list[str] = field(
        default_factory=lambda: ["0x0000000000000000000000000000000000000000"]
    )
    dune_eth_query_id: str = "6513390"
    dune_base_query_id: str = "6513410"
    held_days_threshold: int = 20


@dataclass
class DexConfig:
    known_addresses: list[str] = field(
        default_factory=lambda: [
            "0x52cee6aa2d53882ac1f3497c563f0439fc178744",  # Uniswap V3 MERC/USDC (Base)
            "0x99543a3dcf169c8e442cc5ba1cb978ff1df2a8be",  # Uniswap V3 MERC/USDT (Ethereum)
            "0x9c80da2f970df28d833f5349aeb68301cdf3ecf9",  # Aerodrome MERC/USDC (Base)
            "0xe592427a0aece92de3edee1f18e0157c05861564",  # Uniswap V3 router
            "0x2626664c2603336e57b271c5c0b26f421741e481",  # Uniswap V3 router (Base)
            "0xcf77a3ba9a5ca399b7c97c74d54e5b1beb874e43",  # Aerodrome router
        ]
    )


@dataclass
class PoolConfig:
    key: str
    address: str
    chain: str  # "ethereum" or "base"
    chain_id: int
    dex: str
    token0: str
    token1: str
    explorer_url: str = ""
    dex_url: str = ""


def _default_pools() -> list[PoolConfig]:
    return [
        PoolConfig(
            key="uniswapBase",
            address="0x52cee6aa2d53882ac1f3497c563f0439fc178744",
            chain="base",
            chain_id=8453,
            dex="Uniswap V3",
            token0="MERC",
            token1="USDC",
            explorer_url="https://basescan.org/address/0x52cee6aa2d53882ac1f3497c563f0439fc178744",
            dex_url="https://app.uniswap.org/explore/pools/base/0x52cee6aa2d53882ac1f3497c563f0439fc178744",
        ),
        PoolConfig(
            key="uniswapEth",
            address="0x99543A3DcF169C8E442cC5ba1CB978FF1dF2a8Be",
            chain="ethereum",
            chain_id=1,
            dex="Uniswap V3",
            token0="MERC",
            token1="USDT",
            explorer_url="https://etherscan.io/address/0x99543A3DcF169C8E442cC5ba1CB978FF1dF2a8Be",
            dex_url="https://app.uniswap.org/explore/pools/ethereum/0x99543A3DcF169C8E442cC5ba1CB978FF1dF2a8Be",
        ),
        PoolConfig(
            key="aerodromeBase",
            address="0x9C80da2f970df28d833f5349aEB68301cdF3eCF9",
            chain="base",
            chain_id=8453,
            dex="Aerodrome",
            token0="MERC",
            token1="USDC",
            explorer_url="https://basescan.org/address/0x9C80da2f970df28d833f5349aEB68301cdF3eCF9",
            dex_url="https://aerodrome.finance/deposit?token0=0x833589fcd6edb6e08f4c7c32d4f71b54bda02913&token1=0x8923947eafaf4ad68f1f0c9eb5463ec876d79058&type=2000",
        ),
    ]


@dataclass
class ThresholdsConfig:
    whale_amount: float = 10_000
    whale_high: float = 50_000
    whale_critical: float = 100_000
    # Holder size tiers (whole tokens, strictly greater than)
    tier_whale: float = 10_000_000
    tier_large: float = 1_000_000
    tier_medium: float = 100_000
    tier_small: float = 10_000


@dataclass
class LimitsConfig:
    top_holders: int = 20
    transactions_per_chain: int = 25
    transactions_total: int = 50
    whales_per_chain: int = 10
    whales_total: int = 15
    whale_scan_transfers: int = 100
    behavior_holders: int = 10
    campaign_transfers: int = 1000
    campaign_balance_holders: int = 100
    distribution_holders: int = 100


@dataclass
class HolderMetricsConfig:
    eth_default_holders: int = 2520
    base_default_holders: int = 850
    trend_seed: int | None = None


@dataclass
class ApiConfig:
    ethplorer_base: str = "https://api.ethplorer.io"
    moralis_base: str = "https://deep-index.moralis.io/api/v2.2"
    basescan_base: str = "https://api.basescan.org/api"
    alchemy_eth_url: str = "https://eth-mainnet.g.alchemy.com/v2"
    alchemy_base_url: str = "https://base-mainnet.g.alchemy.com/v2"
    dexscreener_base: str = "https://api.dexscreener.com/latest/dex"
    geckoterminal_base: str = "https://api.geckoterminal.com/api/v2"
    dune_base: str = "https://api.dune.com/api/v1"
    timeout_seconds: float = 30.0
    # Upper bound for one fan-out branch, which may span several requests
    branch_timeout_seconds: float = 90.0
    cache_enabled: bool = True
    cache_maxsize: int = 2048
    # Seconds an upstream body may be reused, per kind of request
    holders_cache_ttl: float = 300
    transfers_cache_ttl: float = 60
    holder_history_cache_ttl: float = 300
    whale_scan_cache_ttl: float = 30
    pool_cache_ttl: float = 60
    ohlcv_cache_ttl: float = 3600
    dune_cache_ttl: float = 3600
    max_holder_pages: int = 20


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: str | None = None
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class ApiKeys:
    alchemy: str | None = None
    moralis: str | None = None
    dune: str | None = None
    ethplorer: str = "freekey"

    @classmethod
    def from_env(cls) -> "ApiKeys":
        return cls(
            alchemy=os.getenv("ALCHEMY_API_KEY") or None,
            moralis=os.getenv("MORALIS_API_KEY") or None,
            dune=os.getenv("DUNE_API_KEY") or None,
            ethplorer=os.getenv("ETHPLORER_API_KEY") or "freekey",
        )


@dataclass
class Config:
    token: TokenConfig = field(default_factory=TokenConfig)
    campaign: CampaignConfig = field(default_factory=CampaignConfig)
    dex: DexConfig = field(default_factory=DexConfig)
    pools: list[PoolConfig] = field(default_factory=_default_pools)
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    holder_metrics: HolderMetricsConfig = field(default_factory=HolderMetricsConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    keys: ApiKeys = field(default_factory=ApiKeys)


def default_config() -> Config:
    """Built-in configuration with API keys read from the environment."""
    return Config(keys=ApiKeys.from_env())


def load_config(config_path: str | Path = "config.yaml") -> Config:
    """Load configuration from YAML file.

    Sections missing from the file keep their built-in defaults. API keys are
    never read from the file, only from the environment.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    pools = raw.get("pools")

    return Config(
        token=TokenConfig(**raw.get("token", {})),
        campaign=CampaignConfig(**raw.get("campaign", {})),
        dex=DexConfig(**raw.get("dex", {})),
        pools=[PoolConfig(**p) for p in pools] if pools else _default_pools(),
        thresholds=ThresholdsConfig(**raw.get("thresholds", {})),
        limits=LimitsConfig(**raw.get("limits", {})),
        holder_metrics=HolderMetricsConfig(**raw.get("holder_metrics", {})),
        api=ApiConfig(**raw.get("api", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        server=ServerConfig(**raw.get("server", {})),
        keys=ApiKeys.from_env(),
    )
