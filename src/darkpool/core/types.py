"""
Core value types for private order proofs.

- OrderRecord: a trade intent, one canonical versioned schema
- MarketConditions: market state supplied by the verifying context
- BalanceLeaf: pre-image of a Merkle balance leaf
- MerkleProof: inclusion proof (root, siblings, direction bits)
- OrderCommitment: public commitment hash plus nullifier

All types are frozen. Construction never raises so that the validator
can fail closed on malformed values; `check()` and `from_dict()` are
the strict entry points used by clients and the service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from darkpool.protocol.codec import (
    ADDRESS_LENGTH,
    DIGEST_LENGTH,
    bytes_to_hex,
    hex_list_to_bytes32,
    hex_to_bytes20,
    hex_to_bytes32,
    require_bytes,
    require_u64,
)
from darkpool.protocol.enums import OrderSide
from darkpool.protocol.errors import ValidationError

# Prices are integers scaled by this factor (1e6, USDC-style).
PRICE_SCALE = 10**6


# ===========================================================================
# Order
# ===========================================================================


@dataclass(frozen=True)
class OrderRecord:
    """
    A trade intent.

    Attributes:
        wallet: 20-byte trader address
        token_in: 20-byte address of the token paid
        token_out: 20-byte address of the token received
        amount_in: Amount of token_in offered (u64, > 0)
        min_amount_out: Minimum acceptable token_out (u64, > 0)
        target_price: Limit price scaled by PRICE_SCALE (u64)
        deadline: Expiry as unix seconds (u64)
        nonce: Optional replay-protection counter (u64)
        secondary_deadline: Optional permit-style expiry (u64)
        side: Price rule selector, SELL unless stated otherwise
    """
    wallet: bytes
    token_in: bytes
    token_out: bytes
    amount_in: int
    min_amount_out: int
    target_price: int
    deadline: int
    nonce: Optional[int] = None
    secondary_deadline: Optional[int] = None
    side: OrderSide = OrderSide.SELL

    def check(self) -> None:
        """
        Raise ValidationError if any field is out of shape or range.

        Covers identifier widths, u64 ranges, positive amounts and
        distinct tokens.
        """
        require_bytes(self.wallet, ADDRESS_LENGTH, "wallet")
        require_bytes(self.token_in, ADDRESS_LENGTH, "token_in")
        require_bytes(self.token_out, ADDRESS_LENGTH, "token_out")
        for name in ("amount_in", "min_amount_out", "target_price", "deadline"):
            require_u64(getattr(self, name), name)
        if self.nonce is not None:
            require_u64(self.nonce, "nonce")
        if self.secondary_deadline is not None:
            require_u64(self.secondary_deadline, "secondary_deadline")
        if not isinstance(self.side, OrderSide):
            raise ValidationError("side must be an OrderSide")
        if self.amount_in == 0:
            raise ValidationError("amount_in must be positive")
        if self.min_amount_out == 0:
            raise ValidationError("min_amount_out must be positive")
        if self.token_in == self.token_out:
            raise ValidationError("token_in and token_out must differ")

    def is_well_formed(self) -> bool:
        try:
            self.check()
        except ValidationError:
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "wallet_address": bytes_to_hex(self.wallet),
            "token_in": bytes_to_hex(self.token_in),
            "token_out": bytes_to_hex(self.token_out),
            "amount_in": self.amount_in,
            "min_amount_out": self.min_amount_out,
            "target_price": self.target_price,
            "deadline": self.deadline,
            "side": self.side.value,
        }
        if self.nonce is not None:
            data["nonce"] = self.nonce
        if self.secondary_deadline is not None:
            data["secondary_deadline"] = self.secondary_deadline
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderRecord":
        if not isinstance(data, dict):
            raise ValidationError("order must be an object")
        try:
            side = OrderSide(data.get("side", OrderSide.SELL.value))
        except ValueError:
            raise ValidationError(f"Unknown order side: {data.get('side')!r}") from None
        try:
            order = cls(
                wallet=hex_to_bytes20(data["wallet_address"], "wallet_address"),
                token_in=hex_to_bytes20(data["token_in"], "token_in"),
                token_out=hex_to_bytes20(data["token_out"], "token_out"),
                amount_in=data["amount_in"],
                min_amount_out=data["min_amount_out"],
                target_price=data["target_price"],
                deadline=data["deadline"],
                nonce=data.get("nonce"),
                secondary_deadline=data.get("secondary_deadline"),
                side=side,
            )
        except KeyError as e:
            raise ValidationError(f"Missing order field: {e.args[0]}") from None
        order.check()
        return order


# ===========================================================================
# Market
# ===========================================================================


@dataclass(frozen=True)
class MarketConditions:
    """Market state at verification time. Public, not trusted."""
    current_price: int
    block_timestamp: int

    def is_well_formed(self) -> bool:
        try:
            require_u64(self.current_price, "current_price")
            require_u64(self.block_timestamp, "block_timestamp")
        except ValidationError:
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_price": self.current_price,
            "block_timestamp": self.block_timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarketConditions":
        if not isinstance(data, dict):
            raise ValidationError("market_conditions must be an object")
        try:
            return cls(
                current_price=require_u64(data["current_price"], "current_price"),
                block_timestamp=require_u64(data["block_timestamp"], "block_timestamp"),
            )
        except KeyError as e:
            raise ValidationError(f"Missing market field: {e.args[0]}") from None


# ===========================================================================
# Balances and proofs
# ===========================================================================


@dataclass(frozen=True)
class BalanceLeaf:
    """
    Pre-image of a Merkle balance leaf.

    When token is None the leaf commits to (wallet, balance) only;
    otherwise it is scoped to a single token.
    """
    wallet: bytes
    balance: int
    token: Optional[bytes] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wallet": bytes_to_hex(self.wallet),
            "balance": self.balance,
            "token": bytes_to_hex(self.token) if self.token is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BalanceLeaf":
        if not isinstance(data, dict):
            raise ValidationError("balance leaf must be an object")
        try:
            token = data.get("token")
            return cls(
                wallet=hex_to_bytes20(data["wallet"], "wallet"),
                balance=require_u64(data["balance"], "balance"),
                token=hex_to_bytes20(token, "token") if token is not None else None,
            )
        except KeyError as e:
            raise ValidationError(f"Missing balance field: {e.args[0]}") from None


@dataclass(frozen=True)
class MerkleProof:
    """
    Inclusion proof for one leaf.

    Attributes:
        root: Root the proof was generated against
        siblings: Sibling digests, leaf-adjacent first
        indices: Direction bits, 0 when the current node is the left
            child at that level and 1 when it is the right child
    """
    root: bytes
    siblings: List[bytes]
    indices: List[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": bytes_to_hex(self.root),
            "siblings": [bytes_to_hex(s) for s in self.siblings],
            "indices": list(self.indices),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MerkleProof":
        if not isinstance(data, dict):
            raise ValidationError("merkle_proof must be an object")
        try:
            indices = data["indices"]
            if not isinstance(indices, list) or any(i not in (0, 1) or isinstance(i, bool) for i in indices):
                raise ValidationError("indices must be a list of 0/1 values")
            return cls(
                root=hex_to_bytes32(data["root"], "merkle root"),
                siblings=hex_list_to_bytes32(data["siblings"], "sibling"),
                indices=list(indices),
            )
        except KeyError as e:
            raise ValidationError(f"Missing merkle_proof field: {e.args[0]}") from None


@dataclass(frozen=True)
class OrderCommitment:
    commitment_hash: bytes
    nullifier: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commitment_hash": bytes_to_hex(self.commitment_hash),
            "nullifier": bytes_to_hex(self.nullifier),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderCommitment":
        try:
            return cls(
                commitment_hash=hex_to_bytes32(data["commitment_hash"], "commitment_hash"),
                nullifier=hex_to_bytes32(data["nullifier"], "nullifier"),
            )
        except KeyError as e:
            raise ValidationError(f"Missing commitment field: {e.args[0]}") from None


ZERO_DIGEST = bytes(DIGEST_LENGTH)
