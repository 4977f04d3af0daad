"""
ABI Loader - Loads contract artifacts from Truffle build output.

Single source of truth: build/contracts/*.json (Truffle compilation
artifacts).  Python loads ABI and creation bytecode at runtime from these
JSON files and encodes calls with eth-abi.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Sequence

from eth_abi import decode, encode
from eth_utils import keccak, to_checksum_address

ARTIFACTS_ENV = "DGTX_ARTIFACTS_DIR"


@dataclass(frozen=True)
class Artifact:
    name: str
    abi: tuple[dict[str, Any], ...]
    bytecode: str

    @property
    def constructor(self) -> Optional[dict[str, Any]]:
        for entry in self.abi:
            if entry.get("type") == "constructor":
                return entry
        return None


def find_artifacts_dir(start: Optional[Path] = None) -> Path:
    """
    Locate the build/contracts/ directory.

    ``DGTX_ARTIFACTS_DIR`` wins; otherwise searches from ``start`` (default:
    the working directory) upward.
    """
    override = os.environ.get(ARTIFACTS_ENV)
    if override:
        path = Path(override).expanduser()
        if not path.is_dir():
            raise FileNotFoundError(f"{ARTIFACTS_ENV} is not a directory: {path}")
        return path

    current = (start or Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        candidate = parent / "build" / "contracts"
        if candidate.is_dir():
            return candidate
    raise FileNotFoundError(
        "Cannot find build/contracts/. Run 'truffle compile' or set "
        f"{ARTIFACTS_ENV}."
    )


@lru_cache(maxsize=16)
def _read_artifact(path: Path) -> Artifact:
    with path.open("r", encoding="utf-8") as f:
        payload = json.load(f)

    bytecode = payload.get("bytecode", "")
    # Foundry-style artifacts nest the hex under "object"
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object", "")
    if not bytecode or bytecode == "0x":
        raise ValueError(f"No bytecode in artifact {path}")
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    name = payload.get("contractName") or path.stem
    return Artifact(name=name, abi=tuple(payload["abi"]), bytecode=bytecode)


def load_artifact(contract_name: str, artifacts_dir: Optional[Path] = None) -> Artifact:
    """
    Load ABI and creation bytecode for a contract.

    Args:
        contract_name: Contract name (e.g., "Sale", "Treasury")
        artifacts_dir: Directory holding ``<Name>.json`` files

    Raises:
        FileNotFoundError: If the artifact file is missing
        ValueError: If the artifact carries no bytecode
    """
    out_dir = artifacts_dir or find_artifacts_dir()
    path = Path(out_dir) / f"{contract_name}.json"
    if not path.exists():
        raise FileNotFoundError(
            f"Artifact not found: {path}. Run 'truffle compile' first."
        )
    return _read_artifact(path.resolve())


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def canonical_type(param: dict[str, Any]) -> str:
    """Canonical ABI type string, expanding tuple components."""
    typ = param["type"]
    if typ.startswith("tuple"):
        inner = ",".join(canonical_type(c) for c in param.get("components", []))
        return f"({inner}){typ[len('tuple'):]}"
    return typ


def function_signature(entry: dict[str, Any]) -> str:
    types = ",".join(canonical_type(p) for p in entry.get("inputs", []))
    return f"{entry['name']}({types})"


def function_selector(signature: str) -> bytes:
    """First 4 bytes of keccak256 of the canonical signature."""
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(text=signature)[:4]


def find_function(
    abi: Sequence[dict[str, Any]],
    function_name: str,
    arg_count: Optional[int] = None,
) -> dict[str, Any]:
    """Find a function entry, resolving overloads by argument count."""
    candidates = [
        entry
        for entry in abi
        if entry.get("type") == "function" and entry.get("name") == function_name
    ]
    if arg_count is not None and len(candidates) > 1:
        candidates = [c for c in candidates if len(c.get("inputs", [])) == arg_count]

    if not candidates:
        raise ValueError(f"Function {function_name} not found in ABI")
    if len(candidates) > 1:
        raise ValueError(f"Function {function_name} is ambiguous; pass its arguments")
    return candidates[0]


def encode_function_call(
    abi: Sequence[dict[str, Any]],
    function_name: str,
    args: Sequence[Any] = (),
) -> str:
    """
    ABI-encode a function call.

    Returns:
        0x-prefixed hex encoded calldata
    """
    func = find_function(abi, function_name, len(args))
    input_types = [canonical_type(p) for p in func.get("inputs", [])]
    if len(input_types) != len(args):
        raise ValueError(
            f"{function_name} expects {len(input_types)} arguments, got {len(args)}"
        )

    selector = function_selector(function_signature(func))
    encoded_args = encode(input_types, list(args)) if args else b""
    return "0x" + selector.hex() + encoded_args.hex()


def normalize_output(abi_type: str, value: Any) -> Any:
    """Checksum decoded ``address`` values, including address arrays."""
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type.startswith("address[") and abi_type.endswith("]"):
        inner = abi_type[: abi_type.rindex("[")]
        return tuple(normalize_output(inner, item) for item in value)
    return value


def decode_function_result(
    abi: Sequence[dict[str, Any]],
    function_name: str,
    data: str,
    arg_count: Optional[int] = None,
) -> Any:
    """
    ABI-decode a function call result.

    Returns:
        Decoded result (single value or tuple)
    """
    func = find_function(abi, function_name, arg_count)
    output_types = [canonical_type(p) for p in func.get("outputs", [])]
    if not output_types:
        return None

    raw = bytes.fromhex(data[2:] if data.startswith("0x") else data)
    decoded = [normalize_output(t, v) for t, v in zip(output_types, decode(output_types, raw))]

    if len(decoded) == 1:
        return decoded[0]
    return tuple(decoded)


def encode_constructor_args(artifact: Artifact, args: Sequence[Any]) -> bytes:
    constructor = artifact.constructor
    if constructor is None:
        if args:
            raise ValueError(
                f"Constructor not found in ABI for {artifact.name}, "
                f"but constructor_args were provided."
            )
        return b""

    input_types = [canonical_type(p) for p in constructor.get("inputs", [])]
    if len(input_types) != len(args):
        raise ValueError(
            f"{artifact.name} constructor expects {len(input_types)} arguments, got {len(args)}"
        )
    return encode(input_types, list(args)) if args else b""


def deployment_data(artifact: Artifact, args: Sequence[Any] = ()) -> str:
    """Creation bytecode with ABI-encoded constructor args appended."""
    return artifact.bytecode + encode_constructor_args(artifact, args).hex()


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def event_topic(entry: dict[str, Any]) -> str:
    return "0x" + keccak(text=function_signature(entry)).hex()


def decode_event_logs(
    abi: Sequence[dict[str, Any]],
    receipt: dict[str, Any],
    event_name: str,
) -> list[dict[str, Any]]:
    """
    Decode all logs in a receipt that match a named event.

    Returns:
        One dict per matching log mapping input names to values
    """
    entry = next(
        (e for e in abi if e.get("type") == "event" and e.get("name") == event_name),
        None,
    )
    if entry is None:
        raise ValueError(f"Event {event_name} not found in ABI")

    topic0 = event_topic(entry).lower()
    inputs = entry.get("inputs", [])
    indexed = [p for p in inputs if p.get("indexed")]
    plain = [p for p in inputs if not p.get("indexed")]

    events = []
    for log in receipt.get("logs", []):
        topics = log.get("topics", [])
        if not topics or topics[0].lower() != topic0:
            continue

        values: dict[str, Any] = {}
        for param, topic in zip(indexed, topics[1:]):
            abi_type = canonical_type(param)
            value = decode([abi_type], bytes.fromhex(topic[2:]))[0]
            values[param["name"]] = normalize_output(abi_type, value)

        data = log.get("data", "0x")
        if plain:
            types = [canonical_type(p) for p in plain]
            decoded = decode(types, bytes.fromhex(data[2:]))
            for param, abi_type, value in zip(plain, types, decoded):
                values[param["name"]] = normalize_output(abi_type, value)
        events.append(values)

    return events
