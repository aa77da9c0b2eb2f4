"""
Merkle Balance Accumulator

Binary SHA-256 tree over an ordered list of balance leaves.

Key features:
- leaf = H(wallet || balance_le), or H(wallet || token || balance_le)
  for token-scoped balances
- parent = H(left || right), no domain prefixes
- An odd level pairs its last node with itself
- Inclusion proofs as parallel (siblings, indices) lists, leaf-adjacent first
- Verification fails closed and never raises

Duplication policy: pairing a lone node with itself means a tree of n
leaves and the tree with the last leaf repeated share a root. The policy
is kept for compatibility with deployed roots and must be considered by
anyone relying on leaf counts.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from darkpool.protocol.codec import (
    ADDRESS_LENGTH,
    DIGEST_LENGTH,
    require_bytes,
    require_u64,
    u64_le,
)
from darkpool.protocol.errors import LeafNotFoundError, ValidationError

from .hashing import digests_equal, sha256
from .types import ZERO_DIGEST, BalanceLeaf, MerkleProof


# ===========================================================================
# Hash Functions
# ===========================================================================


def balance_leaf(wallet: bytes, balance: int, token: Optional[bytes] = None) -> bytes:
    """
    Hash a balance as a Merkle leaf.

    Raises:
        ValidationError: If wallet/token are not 20 bytes or balance is not u64
    """
    require_bytes(wallet, ADDRESS_LENGTH, "wallet")
    require_u64(balance, "balance")
    if token is None:
        return sha256(wallet, u64_le(balance))
    require_bytes(token, ADDRESS_LENGTH, "token")
    return sha256(wallet, token, u64_le(balance))


def hash_pair(left: bytes, right: bytes) -> bytes:
    """Hash an internal node."""
    return sha256(left, right)


# ===========================================================================
# Tree construction
# ===========================================================================


def build_tree(leaves: Sequence[bytes]) -> Tuple[bytes, List[List[bytes]]]:
    """
    Build every level of the tree.

    Returns:
        (root, levels) where levels[0] are the leaves and levels[-1] is
        [root]. An empty input gives the all-zero root and no levels.
    """
    if len(leaves) == 0:
        return ZERO_DIGEST, []

    current_level = list(leaves)
    levels = [current_level]

    while len(current_level) > 1:
        next_level: List[bytes] = []

        for i in range(0, len(current_level), 2):
            left = current_level[i]

            # If odd number of nodes, duplicate the last one
            if i + 1 >= len(current_level):
                right = left
            else:
                right = current_level[i + 1]

            next_level.append(hash_pair(left, right))

        levels.append(next_level)
        current_level = next_level

    return current_level[0], levels


def compute_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """Root of the tree over leaves, without keeping the levels."""
    root, _ = build_tree(leaves)
    return root


# ===========================================================================
# Accumulator
# ===========================================================================


class MerkleAccumulator:
    """
    Balance accumulator with inclusion proofs.

    Leaves keep insertion order. Once built, no more leaves can be added.

    Usage:
        acc = MerkleAccumulator()
        acc.add_balance(wallet, balance)
        proof = acc.generate_proof(wallet, balance)
    """

    def __init__(self, leaves: Optional[Sequence[bytes]] = None):
        self._leaves: List[bytes] = []
        self._levels: Optional[List[List[bytes]]] = None
        self._root: Optional[bytes] = None
        for leaf in leaves or ():
            self.add_leaf(leaf)

    @classmethod
    def from_balances(cls, balances: Sequence[BalanceLeaf]) -> "MerkleAccumulator":
        acc = cls()
        for entry in balances:
            acc.add_balance(entry.wallet, entry.balance, entry.token)
        return acc

    @property
    def leaf_count(self) -> int:
        return len(self._leaves)

    @property
    def leaves(self) -> List[bytes]:
        return list(self._leaves)

    @property
    def root(self) -> bytes:
        return self.build()[0]

    def add_leaf(self, leaf: bytes) -> int:
        """
        Add an already-hashed leaf.

        Returns the index of the added leaf.
        """
        if self._levels is not None:
            raise RuntimeError("Cannot add leaves after tree is built")
        require_bytes(leaf, DIGEST_LENGTH, "leaf")
        self._leaves.append(bytes(leaf))
        return len(self._leaves) - 1

    def add_balance(self, wallet: bytes, balance: int, token: Optional[bytes] = None) -> int:
        return self.add_leaf(balance_leaf(wallet, balance, token))

    def build(self) -> Tuple[bytes, List[List[bytes]]]:
        """Build the tree (once) and return (root, levels)."""
        if self._levels is None:
            self._root, self._levels = build_tree(self._leaves)
        return self._root, [list(level) for level in self._levels]

    def index_of(self, leaf: bytes) -> int:
        """Position of the first occurrence of leaf."""
        for i, candidate in enumerate(self._leaves):
            if candidate == leaf:
                return i
        raise LeafNotFoundError("Leaf not found in tree")

    def proof_for_index(self, index: int) -> MerkleProof:
        """
        Inclusion proof for the leaf at index.

        Raises:
            LeafNotFoundError: If index is outside the leaf range
        """
        if index < 0 or index >= len(self._leaves):
            raise LeafNotFoundError(f"Invalid leaf index: {index}")

        root, levels = self.build()
        siblings: List[bytes] = []
        indices: List[int] = []
        current_index = index

        for level in levels[:-1]:
            if current_index % 2 == 0:
                sibling_index = current_index + 1
            else:
                sibling_index = current_index - 1

            if sibling_index < len(level):
                siblings.append(level[sibling_index])
            else:
                # Duplicate for odd case
                siblings.append(level[current_index])

            indices.append(current_index % 2)
            current_index //= 2

        return MerkleProof(root=root, siblings=siblings, indices=indices)

    def proof_for_leaf(self, leaf: bytes) -> MerkleProof:
        return self.proof_for_index(self.index_of(leaf))

    def generate_proof(
        self,
        wallet: bytes,
        balance: int,
        token: Optional[bytes] = None,
    ) -> MerkleProof:
        """Inclusion proof for a (wallet, balance[, token]) leaf."""
        return self.proof_for_leaf(balance_leaf(wallet, balance, token))


# ===========================================================================
# Verification Functions
# ===========================================================================


def verify_merkle_proof(
    leaf: bytes,
    siblings: Sequence[bytes],
    indices: Sequence[int],
    expected_root: bytes,
) -> bool:
    """
    Verify an inclusion proof.

    indices[i] == 0 means the current node is the left child, so the
    parent is H(current || sibling); 1 means H(sibling || current).

    Returns False on any shape problem (length mismatch, non 0/1 index,
    wrong digest width) instead of raising.
    """
    try:
        if len(siblings) != len(indices):
            return False
        if not _is_digest(leaf) or not _is_digest(expected_root):
            return False

        current = bytes(leaf)
        for sibling, direction in zip(siblings, indices):
            if not _is_digest(sibling):
                return False
            if isinstance(direction, bool) or direction not in (0, 1):
                return False
            if direction == 0:
                current = hash_pair(current, bytes(sibling))
            else:
                current = hash_pair(bytes(sibling), current)

        return digests_equal(current, bytes(expected_root))
    except TypeError:
        return False


def verify_balance_proof(
    wallet: bytes,
    balance: int,
    siblings: Sequence[bytes],
    indices: Sequence[int],
    expected_root: bytes,
    token: Optional[bytes] = None,
) -> bool:
    """Recompute the balance leaf and verify its inclusion proof."""
    try:
        leaf = balance_leaf(wallet, balance, token)
    except ValidationError:
        return False
    return verify_merkle_proof(leaf, siblings, indices, expected_root)


def _is_digest(value: object) -> bool:
    return isinstance(value, (bytes, bytearray)) and len(value) == DIGEST_LENGTH
