"""
Order commitments and nullifiers.

    commitment = H(serialize_order(order) || wallet)
    nullifier  = H(commitment || secret || NULLIFIER_DOMAIN)

The commitment is public and deterministic. The nullifier additionally
needs the trader's 32-byte secret, so nullifiers of one trader cannot be
linked without it. The commitment carries no blinding factor: a small
space of plausible orders can be brute-forced offline against it.
"""

from __future__ import annotations

from darkpool.protocol.codec import ADDRESS_LENGTH, SECRET_LENGTH, require_bytes

from .hashing import serialize_order, sha256
from .types import OrderCommitment, OrderRecord

NULLIFIER_DOMAIN = b"NULLIFIER_SALT"


def create_commitment(order: OrderRecord, wallet: bytes) -> bytes:
    require_bytes(wallet, ADDRESS_LENGTH, "wallet")
    return sha256(serialize_order(order), wallet)


def create_nullifier(order: OrderRecord, wallet: bytes, secret: bytes) -> bytes:
    require_bytes(secret, SECRET_LENGTH, "secret")
    return sha256(create_commitment(order, wallet), secret, NULLIFIER_DOMAIN)


def derive_commitment(order: OrderRecord, wallet: bytes, secret: bytes) -> OrderCommitment:
    """Commitment hash and nullifier in one value."""
    return OrderCommitment(
        commitment_hash=create_commitment(order, wallet),
        nullifier=create_nullifier(order, wallet, secret),
    )
