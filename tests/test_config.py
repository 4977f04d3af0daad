"""Tests for network profiles, environment loading and deployer keys."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from dgtx_deploy.config import (
    DEFAULT_PRICE,
    DEFAULT_TOKEN,
    PROFILES,
    get_profile,
    load_env,
)
from dgtx_deploy.errors import ConfigError
from dgtx_deploy.keys import get_account, load_account, load_private_key

# Standard BIP-39 test mnemonic
MNEMONIC = "test test test test test test test test test test test junk"
MNEMONIC_ADDRESSES = {
    0: "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
    1: "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
}


class TestProfiles:
    def test_known_profiles(self) -> None:
        assert set(PROFILES) == {"development", "coverage", "ropsten", "mainnet"}

    def test_development_defaults(self) -> None:
        profile = get_profile("development")
        assert profile.resolve_rpc_url() == "http://localhost:8545"
        assert profile.node_signer
        assert profile.chain_id is None

    def test_coverage_gas(self) -> None:
        profile = get_profile("coverage")
        assert profile.gas == 0xFFFFFFFFFFF
        assert profile.gas_price == 1

    def test_ropsten_uses_second_hd_address(self) -> None:
        assert get_profile("ropsten").address_index == 1
        assert get_profile("ropsten").chain_id == 3

    def test_unknown_profile(self) -> None:
        with pytest.raises(ConfigError, match="Known networks"):
            get_profile("kovan")

    def test_missing_endpoint(self) -> None:
        with pytest.raises(ConfigError, match="MAINNET_RPC_URL"):
            get_profile("mainnet").resolve_rpc_url()

    def test_endpoint_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("ROPSTEN_RPC_URL", "https://ropsten.example/v3/key")
        assert get_profile("ropsten").resolve_rpc_url() == "https://ropsten.example/v3/key"

    def test_env_overrides_development_endpoint(self, monkeypatch) -> None:
        monkeypatch.setenv("DEVELOPMENT_RPC_URL", "http://127.0.0.1:7545")
        assert get_profile("development").resolve_rpc_url() == "http://127.0.0.1:7545"


class TestEnvironment:
    def test_load_env_file(self, tmp_path: Path) -> None:
        env_path = tmp_path / ".env"
        env_path.write_text("SALE_PRICE=750\nDGTX_TOKEN=0x" + "55" * 20 + "\n", encoding="utf-8")

        assert load_env(env_path) == env_path
        assert os.environ["SALE_PRICE"] == "750"
        assert os.environ["DGTX_TOKEN"] == "0x" + "55" * 20

    def test_existing_env_wins(self, tmp_path: Path, monkeypatch) -> None:
        env_path = tmp_path / ".env"
        env_path.write_text("SALE_PRICE=750\n", encoding="utf-8")
        monkeypatch.setenv("SALE_PRICE", "900")
        load_env(env_path)
        assert os.environ["SALE_PRICE"] == "900"

    def test_missing_env_file(self, tmp_path: Path) -> None:
        assert load_env(tmp_path / "absent.env") is None

    def test_defaults(self) -> None:
        assert DEFAULT_PRICE == 1000
        assert DEFAULT_TOKEN.lower() == "0x1c83501478f1320977047008496dacbd60bb15ef"


class TestKeys:
    def test_load_private_key_adds_prefix(self, monkeypatch) -> None:
        monkeypatch.setenv("PRIVATE_KEY", "11" * 32)
        assert load_private_key() == "0x" + "11" * 32

    def test_load_private_key_missing(self) -> None:
        with pytest.raises(ValueError):
            load_private_key()

    @pytest.mark.parametrize("index", [0, 1])
    def test_mnemonic_index(self, index: int) -> None:
        assert get_account(mnemonic=MNEMONIC, index=index).address == MNEMONIC_ADDRESSES[index]

    def test_private_key_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("PRIVATE_KEY", "11" * 32)
        assert get_account().address == get_account("0x" + "11" * 32).address

    def test_nothing_configured(self) -> None:
        assert load_account() is None

    def test_mnemonic_default_index(self, monkeypatch) -> None:
        monkeypatch.setenv("MNEMONIC", MNEMONIC)
        assert load_account().address == MNEMONIC_ADDRESSES[0]
        assert load_account(default_index=1).address == MNEMONIC_ADDRESSES[1]

    def test_address_index_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("MNEMONIC", MNEMONIC)
        monkeypatch.setenv("ADDRESS_INDEX", "0")
        assert load_account(default_index=1).address == MNEMONIC_ADDRESSES[0]

    def test_bad_address_index(self, monkeypatch) -> None:
        monkeypatch.setenv("MNEMONIC", MNEMONIC)
        monkeypatch.setenv("ADDRESS_INDEX", "first")
        with pytest.raises(ValueError, match="ADDRESS_INDEX"):
            load_account()

    def test_private_key_wins_over_mnemonic(self, monkeypatch) -> None:
        monkeypatch.setenv("PRIVATE_KEY", "11" * 32)
        monkeypatch.setenv("MNEMONIC", MNEMONIC)
        assert load_account().address == get_account("0x" + "11" * 32).address
