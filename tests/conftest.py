"""
Shared fixtures: the alice/ETH/USDC example order and a balance snapshot
in which alice can afford it.
"""

import pytest

from darkpool.core.hashing import sha256
from darkpool.core.types import BalanceLeaf, MarketConditions, OrderRecord

ALICE = bytes([1]) * 20
BOB = bytes([4]) * 20
CAROL = bytes([5]) * 20
ETH = bytes([2]) * 20
USDC = bytes([3]) * 20

ONE_ETH = 1_000_000_000_000_000_000


@pytest.fixture
def order():
    return OrderRecord(
        wallet=ALICE,
        token_in=ETH,
        token_out=USDC,
        amount_in=5 * ONE_ETH,
        min_amount_out=10_000_000_000,
        target_price=2_000_000_000,
        deadline=1_735_689_600,
    )


@pytest.fixture
def market():
    return MarketConditions(current_price=2_050_000_000, block_timestamp=1_735_600_000)


@pytest.fixture
def secret():
    return sha256(b"test-secret")


@pytest.fixture
def balances():
    return [
        BalanceLeaf(wallet=BOB, balance=3 * ONE_ETH),
        BalanceLeaf(wallet=ALICE, balance=10 * ONE_ETH),
        BalanceLeaf(wallet=CAROL, balance=7 * ONE_ETH),
    ]


@pytest.fixture
def valid_inputs(order, secret, balances, market):
    from darkpool.program.order_program import build_program_inputs

    return build_program_inputs(order=order, secret=secret, balances=balances, market=market)
