"""
Request/response shapes for the proof service.

Requests arrive as plain JSON objects and are decoded here into program
inputs; decoding errors surface as ValidationError (HTTP 400) and never
mention order validity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from darkpool.core.commitment import create_commitment, create_nullifier
from darkpool.core.hashing import hash_order
from darkpool.core.types import MarketConditions, MerkleProof, OrderRecord
from darkpool.program.order_program import (
    PrivateInputs,
    ProgramInputs,
    PublicInputs,
)
from darkpool.protocol.codec import hex_to_bytes20, hex_to_bytes32, require_u64
from darkpool.protocol.errors import ValidationError


@dataclass(frozen=True)
class ProofGenerationRequest:
    """
    Body of POST /proof/generate.

    {
        "order": {...},
        "user_secret": "0x<64 hex>",
        "balance": 1000,
        "market_conditions": {"current_price": ..., "block_timestamp": ...},
        "merkle_proof": {"root": "0x..", "siblings": [...], "indices": [...]},
        "balance_token": "0x<40 hex>",         (optional)
        "expected_hash": "0x<64 hex>"          (optional)
    }

    expected_hash is the order hash the caller publishes. When it is
    omitted the service derives it from the order; when it is given and
    does not match, the program commits is_valid=False.
    """
    order: OrderRecord
    user_secret: bytes
    balance: int
    market_conditions: MarketConditions
    merkle_proof: MerkleProof
    balance_token: Optional[bytes] = None
    expected_hash: Optional[bytes] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProofGenerationRequest":
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        try:
            token = data.get("balance_token")
            expected_hash = data.get("expected_hash")
            return cls(
                order=OrderRecord.from_dict(data["order"]),
                user_secret=hex_to_bytes32(data["user_secret"], "user_secret"),
                balance=require_u64(data["balance"], "balance"),
                market_conditions=MarketConditions.from_dict(data["market_conditions"]),
                merkle_proof=MerkleProof.from_dict(data["merkle_proof"]),
                balance_token=hex_to_bytes20(token, "balance_token") if token is not None else None,
                expected_hash=(
                    hex_to_bytes32(expected_hash, "expected_hash") if expected_hash is not None else None
                ),
            )
        except KeyError as e:
            raise ValidationError(f"Missing field: {e.args[0]}") from None

    def to_program_inputs(self) -> ProgramInputs:
        """Derive the public expectations and assemble program inputs."""
        order = self.order
        private = PrivateInputs(
            order=order,
            secret=self.user_secret,
            balance=self.balance,
            siblings=self.merkle_proof.siblings,
            indices=self.merkle_proof.indices,
            balance_token=self.balance_token,
        )
        public = PublicInputs(
            market=self.market_conditions,
            merkle_root=self.merkle_proof.root,
            expected_hash=self.expected_hash if self.expected_hash is not None else hash_order(order),
            expected_commitment=create_commitment(order, order.wallet),
            expected_nullifier=create_nullifier(order, order.wallet, self.user_secret),
        )
        return ProgramInputs(private=private, public=public)


@dataclass
class ProofResponse:
    proof_id: str
    success: bool
    generation_time_ms: int
    proof_data: Optional[str] = None
    public_values: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    cycles: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proof_id": self.proof_id,
            "success": self.success,
            "proof_data": self.proof_data,
            "public_values": self.public_values,
            "error": self.error,
            "error_code": self.error_code,
            "generation_time_ms": self.generation_time_ms,
            "cycles": self.cycles,
        }


@dataclass
class ProofVerificationResponse:
    valid: bool
    public_values: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "public_values": self.public_values,
            "error": self.error,
            "error_code": self.error_code,
        }
