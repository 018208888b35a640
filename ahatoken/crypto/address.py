"""
Account and Contract Address Generation

Ethereum-compatible addresses for the in-memory ledger: deterministic
externally-owned accounts, CREATE-style contract addresses, and transaction
hashes.
"""

from typing import Any, List, Sequence

import rlp
from eth_utils import encode_hex, keccak, to_canonical_address, to_checksum_address


def generate_accounts(seed: str, count: int) -> List[str]:
    """
    Derive ``count`` checksum addresses from a seed string.

    Address i = keccak256(seed ":" i)[-20:]
    """
    return [
        to_checksum_address(keccak(text=f"{seed}:{i}")[-20:])
        for i in range(count)
    ]


def generate_contract_address(sender: str, nonce: int) -> str:
    """
    Generate contract address using CREATE opcode logic.

    Address = keccak256(rlp([sender, nonce]))[-20:]

    Args:
        sender: Deployer address (hex)
        nonce: Deployer nonce

    Returns:
        Contract address (checksum format)
    """
    rlp_encoded = rlp.encode([to_canonical_address(sender), nonce])
    return to_checksum_address(keccak(rlp_encoded)[-20:])


def transaction_hash(
    sender: str,
    nonce: int,
    contract: str,
    method: str,
    args: Sequence[Any],
) -> str:
    """Deterministic hash identifying one call on the ledger."""
    payload = rlp.encode([
        to_canonical_address(sender),
        nonce,
        to_canonical_address(contract),
        method.encode(),
        [repr(a).encode() for a in args],
    ])
    return encode_hex(keccak(payload))
