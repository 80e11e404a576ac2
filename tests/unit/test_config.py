"""Configuration loading: defaults, environment, YAML and the config hash."""

from __future__ import annotations

import pytest

from blockcred.config import (
    BlockCredConfig,
    ContentBackend,
    ContentStoreConfig,
    LedgerVariant,
    get_config,
)


def test_defaults():
    config = BlockCredConfig()
    assert config.ledger.variant == LedgerVariant.MOCK
    assert config.ledger.block_period_seconds == 5.0
    assert config.ledger.receipt_max_attempts == 12
    assert config.ledger.gas_limit == 200_000
    assert config.content.cid_version == 1
    assert config.content.gateway_url == "https://gateway.pinata.cloud/ipfs/"
    assert not config.has_contract


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("BLOCKCRED_LEDGER__VARIANT", "poa")
    monkeypatch.setenv("BLOCKCRED_LEDGER__CONTRACT_ADDRESS", "0x" + "c0" * 20)
    monkeypatch.setenv("BLOCKCRED_CONTENT__BACKEND", "pinata")
    config = BlockCredConfig()
    assert config.ledger.variant == LedgerVariant.POA
    assert config.has_contract
    assert config.content.backend == ContentBackend.PINATA


def test_yaml_overrides(tmp_path):
    path = tmp_path / "besu.yaml"
    path.write_text(
        "institution: Test University\n"
        "ledger:\n"
        "  variant: generic\n"
        "  rpc_url: http://node:8545\n"
        "issuance:\n"
        "  stamp_verified_at: false\n"
    )
    config = get_config(str(path))
    assert config.institution == "Test University"
    assert config.ledger.variant == LedgerVariant.GENERIC
    assert config.ledger.rpc_url == "http://node:8545"
    assert config.issuance.stamp_verified_at is False


def test_invalid_poll_settings_rejected():
    with pytest.raises(ValueError):
        BlockCredConfig(ledger={"receipt_max_attempts": 0})
    with pytest.raises(ValueError):
        BlockCredConfig(ledger={"block_period_seconds": 0})


def test_config_hash_ignores_secrets():
    plain = BlockCredConfig(content=ContentStoreConfig(api_key="a", api_secret="b"))
    other = BlockCredConfig(content=ContentStoreConfig(api_key="c", api_secret="d"))
    assert plain.config_hash() == other.config_hash()
    assert len(plain.config_hash()) == 16


def test_config_hash_tracks_settings():
    assert BlockCredConfig().config_hash() != BlockCredConfig(ledger={"rpc_url": "http://x"}).config_hash()
