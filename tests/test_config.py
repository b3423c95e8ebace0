"""Tests for configuration loading and the command line."""

from pathlib import Path

import pytest

from merc_analytics.api import ProviderSet
from merc_analytics.config import default_config, load_config
from merc_analytics.main import parse_args

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config.yaml"


def test_load_partial_file_keeps_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("ALCHEMY_API_KEY", "from-env")
    path = tmp_path / "config.yaml"
    path.write_text(
        "limits:\n"
        "  top_holders: 5\n"
        "holder_metrics:\n"
        "  trend_seed: 9\n"
        "pools:\n"
        "  - key: onlyPool\n"
        "    address: '0xpool'\n"
        "    chain: base\n"
        "    chain_id: 8453\n"
        "    dex: Aerodrome\n"
        "    token0: MERC\n"
        "    token1: USDC\n"
    )

    config = load_config(path)

    assert config.limits.top_holders == 5
    assert config.limits.whales_total == 15
    assert config.holder_metrics.trend_seed == 9
    assert [p.key for p in config.pools] == ["onlyPool"]
    assert config.token.symbol == "MERC"
    assert config.keys.alchemy == "from-env"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_repository_config_loads():
    config = load_config(REPO_CONFIG)

    assert config.campaign.start == "2025-10-20T00:00:00Z"
    assert len(config.pools) == 3


def test_default_config_reads_keys(monkeypatch):
    monkeypatch.delenv("MORALIS_API_KEY", raising=False)
    monkeypatch.delenv("ETHPLORER_API_KEY", raising=False)
    monkeypatch.setenv("DUNE_API_KEY", "dune-key")

    keys = default_config().keys

    assert keys.moralis is None
    assert keys.dune == "dune-key"
    assert keys.ethplorer == "freekey"


def test_parse_args():
    args = parse_args(["-c", "other.yaml", "--debug", "--port", "9000"])

    assert args.config == "other.yaml"
    assert args.debug is True
    assert args.port == 9000
    assert args.host is None


@pytest.mark.asyncio
async def test_cache_settings_reach_clients(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("api:\n  cache_maxsize: 16\n  holders_cache_ttl: 120\n  ohlcv_cache_ttl: 600\n")
    config = load_config(path)

    providers = ProviderSet.from_config(config)
    try:
        assert providers.ethplorer.cache_ttl == 120
        assert providers.moralis.cache_ttl == 120
        assert providers.dexscreener.cache_ttl == config.api.pool_cache_ttl == 60
        assert providers.geckoterminal.ohlcv_cache_ttl == 600
        assert providers.alchemy_eth.cache_ttl == 60
        assert providers.alchemy_eth.history_cache_ttl == 300
        assert providers.dune.cache_ttl == 3600
        assert providers.cache.maxsize == 16
    finally:
        await providers.close()
