from .core import (
    OrderRecord,
    MarketConditions,
    BalanceLeaf,
    MerkleProof,
    OrderCommitment,
    MerkleAccumulator,
    hash_order,
    validate_order,
    verify_merkle_proof,
    create_commitment,
    create_nullifier,
)
from .protocol import OrderSide, DarkPoolError, ValidationError

__all__ = [
    "OrderRecord",
    "MarketConditions",
    "BalanceLeaf",
    "MerkleProof",
    "OrderCommitment",
    "MerkleAccumulator",
    "hash_order",
    "validate_order",
    "verify_merkle_proof",
    "create_commitment",
    "create_nullifier",
    "OrderSide",
    "DarkPoolError",
    "ValidationError",
]

__version__ = "0.1.0"
