"""
Order Program

The deterministic computation an attested execution environment runs for
one proof request:

    order_valid        = validate_order(order, market, expected_hash)
    merkle_valid       = verify_balance_proof(wallet, balance, siblings, indices, root)
    balance_sufficient = balance >= order.amount_in
    is_valid           = order_valid and merkle_valid and balance_sufficient
                         [and commitment/nullifier match, when expected values are given]

CRITICAL INVARIANTS:
1. Same inputs commit bit-identical public values
2. No I/O, clocks, randomness or dict iteration on the evaluation path
3. Attacker-controlled input never raises; it yields is_valid=False
4. Public values are positional: valid, then nullifier, wallet,
   amount_in, min_amount_out (extended variant only)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from darkpool.core.commitment import NULLIFIER_DOMAIN, create_commitment, create_nullifier
from darkpool.core.hashing import (
    ORDER_LAYOUT_VERSION,
    digests_equal,
    hash_order,
    serialize_order,
    sha256,
)
from darkpool.core.merkle import MerkleAccumulator, verify_balance_proof
from darkpool.core.types import (
    ZERO_DIGEST,
    BalanceLeaf,
    MarketConditions,
    MerkleProof,
    OrderRecord,
)
from darkpool.core.validator import validate_order
from darkpool.protocol.codec import (
    ADDRESS_LENGTH,
    DIGEST_LENGTH,
    SECRET_LENGTH,
    bytes_to_hex,
    hex_to_bytes20,
    hex_to_bytes32,
    require_u64,
    u64_le,
)
from darkpool.protocol.errors import DarkPoolError, ValidationError

PROGRAM_NAME = b"darkpool-order-program"
PROGRAM_VERSION = 1

# Binds artifacts to this exact program and order layout.
PROGRAM_ID = sha256(PROGRAM_NAME, bytes([PROGRAM_VERSION, ORDER_LAYOUT_VERSION]))

BASIC_OUTPUT_LENGTH = 1
EXTENDED_OUTPUT_LENGTH = 1 + DIGEST_LENGTH + ADDRESS_LENGTH + 8 + 8


# ===========================================================================
# Inputs
# ===========================================================================


@dataclass(frozen=True)
class PrivateInputs:
    """
    Inputs that never leave the execution environment.

    Attributes:
        order: The hidden order
        secret: 32-byte nullifier secret
        balance: Raw balance committed in the Merkle leaf
        siblings: Merkle sibling digests, leaf-adjacent first
        indices: Merkle direction bits
        balance_token: Token of a token-scoped leaf; must equal order.token_in
    """
    order: OrderRecord
    secret: bytes
    balance: int
    siblings: List[bytes]
    indices: List[int]
    balance_token: Optional[bytes] = None


@dataclass(frozen=True)
class PublicInputs:
    """
    Inputs the verifier sees.

    expected_commitment and expected_nullifier are optional; when set,
    the program also requires them to match.
    """
    market: MarketConditions
    merkle_root: bytes
    expected_hash: bytes
    expected_commitment: Optional[bytes] = None
    expected_nullifier: Optional[bytes] = None


@dataclass(frozen=True)
class ProgramInputs:
    private: PrivateInputs
    public: PublicInputs

    def to_dict(self) -> Dict[str, Any]:
        priv, pub = self.private, self.public
        return {
            "order": priv.order.to_dict(),
            "secret": bytes_to_hex(priv.secret),
            "balance": priv.balance,
            "balance_token": bytes_to_hex(priv.balance_token) if priv.balance_token else None,
            "merkle_proof": MerkleProof(
                root=pub.merkle_root,
                siblings=priv.siblings,
                indices=priv.indices,
            ).to_dict(),
            "market_conditions": pub.market.to_dict(),
            "expected_hash": bytes_to_hex(pub.expected_hash),
            "expected_commitment": _optional_hex(pub.expected_commitment),
            "expected_nullifier": _optional_hex(pub.expected_nullifier),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProgramInputs":
        """
        Decode the JSON wire form.

        A missing expected_hash is derived from the order.

        Raises:
            ValidationError: On missing fields or bad encodings
        """
        if not isinstance(data, dict):
            raise ValidationError("program inputs must be an object")
        try:
            order = OrderRecord.from_dict(data["order"])
            proof = MerkleProof.from_dict(data["merkle_proof"])
            market = MarketConditions.from_dict(data["market_conditions"])
            secret = hex_to_bytes32(data["secret"], "secret")
            balance = require_u64(data["balance"], "balance")
        except KeyError as e:
            raise ValidationError(f"Missing field: {e.args[0]}") from None

        token = data.get("balance_token")
        expected_hash = data.get("expected_hash")
        private = PrivateInputs(
            order=order,
            secret=secret,
            balance=balance,
            siblings=proof.siblings,
            indices=proof.indices,
            balance_token=hex_to_bytes20(token, "balance_token") if token else None,
        )
        public = PublicInputs(
            market=market,
            merkle_root=proof.root,
            expected_hash=(
                hex_to_bytes32(expected_hash, "expected_hash")
                if expected_hash is not None
                else hash_order(order)
            ),
            expected_commitment=_optional_bytes32(data.get("expected_commitment"), "expected_commitment"),
            expected_nullifier=_optional_bytes32(data.get("expected_nullifier"), "expected_nullifier"),
        )
        return cls(private=private, public=public)


def build_program_inputs(
    order: OrderRecord,
    secret: bytes,
    balances: Sequence[BalanceLeaf],
    market: MarketConditions,
    balance: Optional[int] = None,
    token_scoped: bool = False,
) -> ProgramInputs:
    """
    Client-side preparation of one proof request.

    Builds the accumulator over all balances, extracts the proof for the
    trader's own leaf and derives the expected hash, commitment and
    nullifier.

    Args:
        order: The order to prove
        secret: 32-byte nullifier secret
        balances: Full ordered balance snapshot
        market: Market conditions to check against
        balance: Trader balance; looked up in balances when omitted
        token_scoped: Use token-scoped leaves keyed by order.token_in

    Raises:
        ValidationError: On malformed order or secret
        LeafNotFoundError: If the trader's leaf is not in the snapshot
    """
    token = order.token_in if token_scoped else None
    if balance is None:
        balance = _lookup_balance(balances, order.wallet, token)

    acc = MerkleAccumulator.from_balances(balances)
    proof = acc.generate_proof(order.wallet, balance, token)

    private = PrivateInputs(
        order=order,
        secret=secret,
        balance=balance,
        siblings=proof.siblings,
        indices=proof.indices,
        balance_token=token,
    )
    public = PublicInputs(
        market=market,
        merkle_root=proof.root,
        expected_hash=hash_order(order),
        expected_commitment=create_commitment(order, order.wallet),
        expected_nullifier=create_nullifier(order, order.wallet, secret),
    )
    return ProgramInputs(private=private, public=public)


def _lookup_balance(balances: Sequence[BalanceLeaf], wallet: bytes, token: Optional[bytes]) -> int:
    for entry in balances:
        if entry.wallet == wallet and entry.token == token:
            return entry.balance
    raise ValidationError("No balance entry for wallet")


def _optional_hex(value: Optional[bytes]) -> Optional[str]:
    return bytes_to_hex(value) if value is not None else None


def _optional_bytes32(value: Any, what: str) -> Optional[bytes]:
    return hex_to_bytes32(value, what) if value is not None else None


# ===========================================================================
# Outputs
# ===========================================================================


@dataclass(frozen=True)
class PublicOutputs:
    """
    Values committed by the program, in commit order.

    The basic variant carries only is_valid. The extended variant adds
    nullifier, wallet, amount_in and min_amount_out; these are zeroed
    when is_valid is False.
    """
    is_valid: bool
    nullifier: Optional[bytes] = None
    wallet: Optional[bytes] = None
    amount_in: Optional[int] = None
    min_amount_out: Optional[int] = None

    @property
    def extended(self) -> bool:
        return self.nullifier is not None

    def encode(self) -> bytes:
        data = bytearray([1 if self.is_valid else 0])
        if self.extended:
            data += self.nullifier
            data += self.wallet or bytes(ADDRESS_LENGTH)
            data += u64_le(self.amount_in or 0)
            data += u64_le(self.min_amount_out or 0)
        return bytes(data)

    @classmethod
    def decode(cls, data: bytes) -> "PublicOutputs":
        """
        Positional decoding of committed public values.

        Raises:
            ValidationError: On unknown length or a flag byte other than 0/1
        """
        if len(data) not in (BASIC_OUTPUT_LENGTH, EXTENDED_OUTPUT_LENGTH):
            raise ValidationError(f"Unexpected public values length: {len(data)}")
        if data[0] not in (0, 1):
            raise ValidationError("Invalid validity flag")
        is_valid = data[0] == 1
        if len(data) == BASIC_OUTPUT_LENGTH:
            return cls(is_valid=is_valid)

        offset = 1
        nullifier = data[offset:offset + DIGEST_LENGTH]
        offset += DIGEST_LENGTH
        wallet = data[offset:offset + ADDRESS_LENGTH]
        offset += ADDRESS_LENGTH
        amount_in = int.from_bytes(data[offset:offset + 8], "little")
        offset += 8
        min_amount_out = int.from_bytes(data[offset:offset + 8], "little")
        return cls(
            is_valid=is_valid,
            nullifier=bytes(nullifier),
            wallet=bytes(wallet),
            amount_in=amount_in,
            min_amount_out=min_amount_out,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"is_valid": self.is_valid}
        if self.extended:
            data.update({
                "nullifier_hash": bytes_to_hex(self.nullifier),
                "wallet_address": bytes_to_hex(self.wallet or bytes(ADDRESS_LENGTH)),
                "amount_in": self.amount_in,
                "min_amount_out": self.min_amount_out,
            })
        return data


# ===========================================================================
# Program
# ===========================================================================


def run_order_program(
    private: PrivateInputs,
    public: PublicInputs,
    extended: bool = False,
) -> PublicOutputs:
    """
    Evaluate one proof request.

    Never raises on malformed input; any structural problem is
    indistinguishable from any other failure.
    """
    try:
        is_valid = _evaluate(private, public)
    except (DarkPoolError, TypeError, ValueError, AttributeError):
        is_valid = False

    if not extended:
        return PublicOutputs(is_valid=is_valid)

    if not is_valid:
        return PublicOutputs(
            is_valid=False,
            nullifier=ZERO_DIGEST,
            wallet=bytes(ADDRESS_LENGTH),
            amount_in=0,
            min_amount_out=0,
        )

    order = private.order
    return PublicOutputs(
        is_valid=True,
        nullifier=create_nullifier(order, order.wallet, private.secret),
        wallet=order.wallet,
        amount_in=order.amount_in,
        min_amount_out=order.min_amount_out,
    )


def _evaluate(private: PrivateInputs, public: PublicInputs) -> bool:
    order = private.order

    if not isinstance(private.secret, (bytes, bytearray)) or len(private.secret) != SECRET_LENGTH:
        return False
    if private.balance_token is not None and private.balance_token != getattr(order, "token_in", None):
        return False

    order_valid = validate_order(order, public.market, public.expected_hash)
    merkle_valid = verify_balance_proof(
        order.wallet,
        private.balance,
        private.siblings,
        private.indices,
        public.merkle_root,
        private.balance_token,
    )
    balance_sufficient = private.balance >= order.amount_in

    if not (order_valid and merkle_valid and balance_sufficient):
        return False

    if public.expected_commitment is not None:
        commitment = create_commitment(order, order.wallet)
        if not digests_equal(commitment, bytes(public.expected_commitment)):
            return False

    if public.expected_nullifier is not None:
        nullifier = create_nullifier(order, order.wallet, private.secret)
        if not digests_equal(nullifier, bytes(public.expected_nullifier)):
            return False

    return True


def estimate_cycles(private: PrivateInputs, extended: bool = False) -> int:
    """
    SHA-256 compression count along the full program path.

    Stands in for a zkVM instruction count in execution reports.
    """
    def blocks(length: int) -> int:
        return (length + 9 + 63) // 64

    try:
        order_len = len(serialize_order(private.order))
    except (DarkPoolError, TypeError, ValueError, AttributeError):
        return 0
    leaf_len = ADDRESS_LENGTH + 8 + (ADDRESS_LENGTH if private.balance_token is not None else 0)

    total = blocks(order_len)
    total += blocks(leaf_len)
    total += len(private.siblings) * blocks(2 * DIGEST_LENGTH)
    # commitment + nullifier
    total += blocks(order_len + ADDRESS_LENGTH)
    total += blocks(2 * DIGEST_LENGTH + len(NULLIFIER_DOMAIN))
    if extended:
        total += blocks(order_len + ADDRESS_LENGTH) + blocks(2 * DIGEST_LENGTH + len(NULLIFIER_DOMAIN))
    return total
