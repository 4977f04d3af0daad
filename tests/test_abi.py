"""Tests for artifact loading and ABI encoding."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from eth_abi import encode
from eth_utils import to_checksum_address

from dgtx_deploy.chain.abi import (
    decode_event_logs,
    decode_function_result,
    deployment_data,
    encode_function_call,
    find_artifacts_dir,
    function_selector,
    load_artifact,
    normalize_output,
)
from dgtx_deploy.config import DEFAULT_TOKEN

from fake_chain import BYTECODES, SALE_ABI, TREASURY_ABI, event_log

TOKEN = DEFAULT_TOKEN
SALE = "0x" + "ab" * 20


class TestSelectors:
    def test_erc20_transfer(self) -> None:
        assert function_selector("transfer(address,uint256)").hex() == "a9059cbb"

    def test_erc20_balance_of(self) -> None:
        assert function_selector("balanceOf(address)").hex() == "70a08231"

    def test_no_arg_call_is_selector_only(self) -> None:
        calldata = encode_function_call(TREASURY_ABI, "sale")
        assert calldata == "0x" + function_selector("sale()").hex()

    def test_overload_resolved_by_arg_count(self) -> None:
        no_arg = encode_function_call(SALE_ABI, "withdraw")
        one_arg = encode_function_call(SALE_ABI, "withdraw", [TOKEN])
        assert no_arg == "0x" + function_selector("withdraw()").hex()
        assert one_arg.startswith("0x" + function_selector("withdraw(address)").hex())
        assert len(one_arg) == 2 + 8 + 64

    def test_unknown_function(self) -> None:
        with pytest.raises(ValueError, match="not found"):
            encode_function_call(SALE_ABI, "nope")

    def test_wrong_arg_count(self) -> None:
        with pytest.raises(ValueError):
            encode_function_call(TREASURY_ABI, "phases", [1, 2])


class TestDecoding:
    def test_decode_address(self) -> None:
        data = "0x" + encode(["address"], [TOKEN]).hex()
        assert decode_function_result(TREASURY_ABI, "token", data) == TOKEN

    def test_decode_address_is_checksummed(self) -> None:
        data = "0x" + encode(["address"], [TOKEN.lower()]).hex()
        decoded = decode_function_result(TREASURY_ABI, "token", data)
        assert decoded == TOKEN
        assert decoded != TOKEN.lower()

    def test_normalize_address_array(self) -> None:
        assert normalize_output("address[]", [TOKEN.lower(), SALE]) == (
            TOKEN,
            to_checksum_address(SALE),
        )
        assert normalize_output("uint256", 7) == 7

    def test_decode_uint_with_args(self) -> None:
        data = "0x" + encode(["uint256"], [1551448800]).hex()
        assert decode_function_result(TREASURY_ABI, "phases", data, 1) == 1551448800

    def test_no_outputs(self) -> None:
        assert decode_function_result(TREASURY_ABI, "startNewPhase", "0x") is None

    def test_event_logs(self) -> None:
        receipt = {
            "logs": [
                event_log(SALE, TREASURY_ABI, "PhaseStarted", [1]),
                {"address": SALE, "topics": ["0x" + "00" * 32], "data": "0x"},
                event_log(SALE, TREASURY_ABI, "PhaseStarted", [2]),
            ]
        }
        events = decode_event_logs(TREASURY_ABI, receipt, "PhaseStarted")
        assert events == [{"newPhaseNum": 1}, {"newPhaseNum": 2}]

    def test_unknown_event(self) -> None:
        with pytest.raises(ValueError):
            decode_event_logs(TREASURY_ABI, {"logs": []}, "Missing")


class TestArtifacts:
    def test_load_truffle_artifact(self, artifacts_dir: Path) -> None:
        artifact = load_artifact("Treasury", artifacts_dir)
        assert artifact.name == "Treasury"
        assert artifact.bytecode == BYTECODES["Treasury"]
        assert artifact.constructor["inputs"][1]["name"] == "_sale"

    def test_load_foundry_style_bytecode(self, tmp_path: Path) -> None:
        payload = {"abi": [], "bytecode": {"object": "6001"}}
        (tmp_path / "Plain.json").write_text(json.dumps(payload), encoding="utf-8")
        artifact = load_artifact("Plain", tmp_path)
        assert artifact.bytecode == "0x6001"
        assert artifact.constructor is None

    def test_missing_artifact(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_artifact("Sale", tmp_path)

    def test_empty_bytecode(self, tmp_path: Path) -> None:
        (tmp_path / "Iface.json").write_text(json.dumps({"abi": [], "bytecode": "0x"}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_artifact("Iface", tmp_path)

    def test_find_dir_walks_upward(self, artifacts_dir: Path) -> None:
        nested = artifacts_dir.parent.parent / "scripts" / "deep"
        nested.mkdir(parents=True)
        assert find_artifacts_dir(nested) == artifacts_dir.resolve()

    def test_find_dir_env_override(self, artifacts_dir: Path, tmp_path: Path) -> None:
        with patch.dict(os.environ, {"DGTX_ARTIFACTS_DIR": str(artifacts_dir)}):
            assert find_artifacts_dir(tmp_path / "elsewhere") == artifacts_dir

    def test_deployment_data_appends_constructor_args(self, artifacts_dir: Path) -> None:
        artifact = load_artifact("Treasury", artifacts_dir)
        data = deployment_data(artifact, [TOKEN, SALE])
        assert data.startswith(BYTECODES["Treasury"])
        assert data[len(BYTECODES["Treasury"]):] == encode(["address", "address"], [TOKEN, SALE]).hex()

    def test_constructor_args_without_constructor(self, tmp_path: Path) -> None:
        (tmp_path / "Plain.json").write_text(
            json.dumps({"abi": [], "bytecode": "0x6001"}), encoding="utf-8"
        )
        with pytest.raises(ValueError, match="Constructor not found"):
            deployment_data(load_artifact("Plain", tmp_path), [1])
