"""
ECDSA / secp256k1 key management for the deployer account.

A deployer key is either a raw private key (``PRIVATE_KEY``) or a BIP-39
mnemonic (``MNEMONIC``) plus an address index, as used by Truffle's
HD wallet provider.  Both are read from the environment after the dotenv
file has been loaded by ``config``.

Dependencies: eth-account (no full web3.py needed)
"""

from __future__ import annotations

import os
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

# Truffle's HDWalletProvider derivation path
HD_PATH_TEMPLATE = "m/44'/60'/0'/0/{index}"

Account.enable_unaudited_hdwallet_features()


def load_private_key() -> str:
    """
    Load the private key from the environment.

    Returns:
        0x-prefixed hex private key

    Raises:
        ValueError: If PRIVATE_KEY is not set
    """
    private_key = os.environ.get("PRIVATE_KEY")
    if not private_key:
        raise ValueError("PRIVATE_KEY not found in environment or .env file")

    if not private_key.startswith("0x"):
        private_key = "0x" + private_key

    return private_key


def get_account(
    private_key: Optional[str] = None,
    mnemonic: Optional[str] = None,
    index: int = 0,
) -> LocalAccount:
    """
    Get an eth-account LocalAccount.

    Args:
        private_key: 0x-prefixed hex private key
        mnemonic: BIP-39 mnemonic, used when no private key is given
        index: HD address index for the mnemonic

    Falls back to ``PRIVATE_KEY`` from the environment.
    """
    if private_key:
        return Account.from_key(private_key)
    if mnemonic:
        return Account.from_mnemonic(mnemonic, account_path=HD_PATH_TEMPLATE.format(index=index))
    return Account.from_key(load_private_key())


def load_account(default_index: int = 0) -> Optional[LocalAccount]:
    """
    Load the deployer account configured in the environment.

    ``PRIVATE_KEY`` wins over ``MNEMONIC``.  The mnemonic address index is
    ``ADDRESS_INDEX`` when set, else ``default_index``.

    Returns:
        The account, or None when neither variable is set

    Raises:
        ValueError: If the private key or ADDRESS_INDEX is malformed
    """
    if os.environ.get("PRIVATE_KEY"):
        return get_account(load_private_key())

    mnemonic = os.environ.get("MNEMONIC")
    if not mnemonic:
        return None
    raw_index = os.environ.get("ADDRESS_INDEX")
    try:
        index = int(raw_index) if raw_index else default_index
    except ValueError:
        raise ValueError(f"ADDRESS_INDEX must be an integer, got {raw_index!r}") from None
    return get_account(mnemonic=mnemonic, index=index)
