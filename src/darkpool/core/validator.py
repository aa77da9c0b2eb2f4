"""
Order validity predicate.

validate_order() answers a single yes/no question and never says which
check failed: distinguishable failure reasons would leak information
about the hidden order. It never raises; malformed input is just False.
"""

from __future__ import annotations

from darkpool.protocol.enums import OrderSide
from darkpool.protocol.errors import ValidationError

from .hashing import digests_equal, hash_order
from .types import MarketConditions, OrderRecord


def not_expired(order: OrderRecord, market: MarketConditions) -> bool:
    if market.block_timestamp > order.deadline:
        return False
    if order.secondary_deadline is not None and market.block_timestamp > order.secondary_deadline:
        return False
    return True


def price_acceptable(order: OrderRecord, market: MarketConditions) -> bool:
    if order.side is OrderSide.BUY:
        return market.current_price <= order.target_price
    return market.current_price >= order.target_price


def validate_order(
    order: OrderRecord,
    market: MarketConditions,
    expected_hash: bytes,
) -> bool:
    if not isinstance(order, OrderRecord) or not isinstance(market, MarketConditions):
        return False
    if not order.is_well_formed() or not market.is_well_formed():
        return False
    if not isinstance(expected_hash, (bytes, bytearray)):
        return False

    if not not_expired(order, market):
        return False

    if not price_acceptable(order, market):
        return False

    try:
        computed_hash = hash_order(order)
    except ValidationError:
        return False
    return digests_equal(computed_hash, bytes(expected_hash))
