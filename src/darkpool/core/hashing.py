"""
Canonical order hashing.

The byte layout is part of the public contract: clients, the order
program and any on-chain verifier must agree on it exactly. Changing the
field order or widths requires bumping ORDER_LAYOUT_VERSION.

Layout v1:

    wallet(20) token_in(20) token_out(20)
    amount_in(u64le) min_amount_out(u64le) target_price(u64le) deadline(u64le)
    [ flags(u8) [secondary_deadline(u64le)] [nonce(u64le)] ]

The extension block is only present when an optional field is set or
the order is a BUY, so plain orders hash to the 92-byte base layout.
"""

from __future__ import annotations

import hashlib
import hmac

from darkpool.protocol.codec import u64_le
from darkpool.protocol.enums import OrderSide

from .types import OrderRecord

ORDER_LAYOUT_VERSION = 1
BASE_ORDER_LENGTH = 92

FLAG_SECONDARY_DEADLINE = 0x01
FLAG_NONCE = 0x02
FLAG_BUY_SIDE = 0x04


def sha256(*parts: bytes) -> bytes:
    """SHA-256 over the concatenation of parts."""
    hasher = hashlib.sha256()
    for part in parts:
        hasher.update(part)
    return hasher.digest()


def digests_equal(a: bytes, b: bytes) -> bool:
    """Constant-time digest comparison."""
    return hmac.compare_digest(a, b)


def serialize_order(order: OrderRecord) -> bytes:
    """
    Serialize an order into its canonical byte layout.

    Raises:
        ValidationError: If any field is out of shape or range
    """
    order.check()

    data = bytearray()
    data += order.wallet
    data += order.token_in
    data += order.token_out
    data += u64_le(order.amount_in)
    data += u64_le(order.min_amount_out)
    data += u64_le(order.target_price)
    data += u64_le(order.deadline)

    flags = 0
    if order.secondary_deadline is not None:
        flags |= FLAG_SECONDARY_DEADLINE
    if order.nonce is not None:
        flags |= FLAG_NONCE
    if order.side is OrderSide.BUY:
        flags |= FLAG_BUY_SIDE

    if flags:
        data.append(flags)
        if order.secondary_deadline is not None:
            data += u64_le(order.secondary_deadline)
        if order.nonce is not None:
            data += u64_le(order.nonce)

    return bytes(data)


def hash_order(order: OrderRecord) -> bytes:
    """Canonical 32-byte digest of an order."""
    return sha256(serialize_order(order))
