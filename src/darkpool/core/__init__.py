"""
Pure order validation core.

Nothing in this package performs I/O, reads clocks, uses randomness or
keeps state between calls.
"""

from darkpool.core.types import (
    PRICE_SCALE,
    ZERO_DIGEST,
    OrderRecord,
    MarketConditions,
    BalanceLeaf,
    MerkleProof,
    OrderCommitment,
)

from darkpool.core.hashing import (
    ORDER_LAYOUT_VERSION,
    sha256,
    serialize_order,
    hash_order,
)

from darkpool.core.merkle import (
    MerkleAccumulator,
    balance_leaf,
    hash_pair,
    build_tree,
    compute_merkle_root,
    verify_merkle_proof,
    verify_balance_proof,
)

from darkpool.core.validator import validate_order

from darkpool.core.commitment import (
    NULLIFIER_DOMAIN,
    create_commitment,
    create_nullifier,
    derive_commitment,
)

__all__ = [
    # Types
    "PRICE_SCALE",
    "ZERO_DIGEST",
    "OrderRecord",
    "MarketConditions",
    "BalanceLeaf",
    "MerkleProof",
    "OrderCommitment",
    # Hashing
    "ORDER_LAYOUT_VERSION",
    "sha256",
    "serialize_order",
    "hash_order",
    # Merkle
    "MerkleAccumulator",
    "balance_leaf",
    "hash_pair",
    "build_tree",
    "compute_merkle_root",
    "verify_merkle_proof",
    "verify_balance_proof",
    # Validation
    "validate_order",
    # Commitments
    "NULLIFIER_DOMAIN",
    "create_commitment",
    "create_nullifier",
    "derive_commitment",
]
