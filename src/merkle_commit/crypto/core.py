"""
Merkle Commit - Merkle Tree Engine

Builds and queries a Merkle tree stored as a flat array:

- The root is at position 0
- The children of position i are at 2i + 1 and 2i + 2
- Leaf k (in input order) is at position len(tree) - 1 - k

A tree over n leaves always has 2n - 1 nodes. There is no per-level
duplication or promotion of odd nodes: when n is not a power of two some
leaves simply sit one level higher than others, and construction, proofs
and multiproofs all share the same index arithmetic.

All functions here are pure; they take hashes and return hashes.
"""

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from merkle_commit.crypto.bytes import to_hex
from merkle_commit.crypto.errors import (
    IndexOutOfBounds,
    InvalidInputError,
    InvalidMultiProofError,
)
from merkle_commit.crypto.hashing import (
    Hasher,
    check_valid_node,
    hash_pair,
    is_valid_node,
    keccak256,
)

T = TypeVar("T")
L = TypeVar("L")


@dataclass(frozen=True)
class MultiProof(Generic[T, L]):
    """
    Proof for several leaves at once.

    Attributes:
        leaves: Leaves being proven, in descending tree position
        proof: Sibling hashes that cannot be derived from the leaves
        proof_flags: Per combination step, True to take the partner from
            the queue of leaves and combined hashes, False to take the next
            proof entry
    """

    leaves: list[L]
    proof: list[T]
    proof_flags: list[bool] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the multiproof wire form."""
        return {
            "leaves": list(self.leaves),
            "proof": list(self.proof),
            "proofFlags": list(self.proof_flags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MultiProof":
        """Deserialize from the multiproof wire form."""
        return cls(
            leaves=list(data["leaves"]),
            proof=list(data["proof"]),
            proof_flags=[bool(f) for f in data["proofFlags"]],
        )


def left_child_index(i: int) -> int:
    return 2 * i + 1


def right_child_index(i: int) -> int:
    return 2 * i + 2


def parent_index(i: int) -> int:
    if i <= 0:
        raise InvalidInputError("Root has no parent")
    return (i - 1) // 2


def sibling_index(i: int) -> int:
    if i <= 0:
        raise InvalidInputError("Root has no siblings")
    return i + 1 if i % 2 == 1 else i - 1


def is_tree_node(tree: Sequence[bytes], i: int) -> bool:
    return 0 <= i < len(tree)


def is_internal_node(tree: Sequence[bytes], i: int) -> bool:
    return is_tree_node(tree, left_child_index(i))


def is_leaf_node(tree: Sequence[bytes], i: int) -> bool:
    return is_tree_node(tree, i) and not is_internal_node(tree, i)


def check_leaf_node(tree: Sequence[bytes], i: int) -> None:
    """Raise IndexOutOfBounds unless i is the position of a leaf."""
    if isinstance(i, bool) or not isinstance(i, int) or not is_leaf_node(tree, i):
        raise IndexOutOfBounds(f"Index {i!r} is not a leaf")


def make_merkle_tree(
    leaves: Sequence[bytes],
    hasher: Hasher = keccak256,
) -> list[bytes]:
    """
    Build the flat tree array from leaf hashes.

    Leaves are used in the order given; sorting is the caller's choice.

    Args:
        leaves: 32-byte leaf hashes
        hasher: Hash primitive for internal nodes

    Returns:
        List of 2 * len(leaves) - 1 hashes, root first

    Raises:
        InvalidInputError: If leaves is empty or a leaf is not 32 bytes
    """
    if len(leaves) == 0:
        raise InvalidInputError("Expected non-zero number of leaves")
    for leaf in leaves:
        check_valid_node(leaf)

    tree: list[bytes] = [b""] * (2 * len(leaves) - 1)

    for i, leaf in enumerate(leaves):
        tree[len(tree) - 1 - i] = leaf

    # Internal nodes, deepest first
    for i in range(len(tree) - 1 - len(leaves), -1, -1):
        tree[i] = hash_pair(
            tree[left_child_index(i)],
            tree[right_child_index(i)],
            hasher,
        )

    return tree


def get_proof(tree: Sequence[bytes], index: int) -> list[bytes]:
    """
    Collect the sibling hashes from a leaf up to the root.

    Args:
        tree: Flat tree array
        index: Tree position of the leaf

    Raises:
        IndexOutOfBounds: If index is not a leaf position
    """
    check_leaf_node(tree, index)

    proof = []
    while index > 0:
        proof.append(tree[sibling_index(index)])
        index = parent_index(index)
    return proof


def process_proof(
    leaf: bytes,
    proof: Sequence[bytes],
    hasher: Hasher = keccak256,
) -> bytes:
    """Fold a proof onto a leaf and return the implied root."""
    check_valid_node(leaf)
    for node in proof:
        check_valid_node(node)

    result = leaf
    for node in proof:
        result = hash_pair(result, node, hasher)
    return result


def get_multi_proof(tree: Sequence[bytes], indices: Sequence[int]) -> MultiProof[bytes, bytes]:
    """
    Compute the minimal proof for several leaves.

    Positions are walked from the deepest up. When a node's sibling is the
    next known position both combine internally (flag True); otherwise the
    sibling hash becomes a proof entry (flag False).

    Raises:
        InvalidInputError: If indices is empty or contains duplicates
        IndexOutOfBounds: If an index is not a leaf position
    """
    if len(indices) == 0:
        raise InvalidInputError("Expected at least one index")
    for i in indices:
        check_leaf_node(tree, i)

    ordered = sorted(indices, reverse=True)
    if any(a == b for a, b in zip(ordered, ordered[1:])):
        raise InvalidInputError("Cannot prove duplicated index")

    queue = deque(ordered)
    proof: list[bytes] = []
    proof_flags: list[bool] = []

    while queue and queue[0] > 0:
        j = queue.popleft()
        s = sibling_index(j)
        p = parent_index(j)

        if queue and s == queue[0]:
            proof_flags.append(True)
            queue.popleft()
        else:
            proof_flags.append(False)
            proof.append(tree[s])
        queue.append(p)

    return MultiProof(
        leaves=[tree[i] for i in ordered],
        proof=proof,
        proof_flags=proof_flags,
    )


def process_multi_proof(
    multiproof: MultiProof[bytes, bytes],
    hasher: Hasher = keccak256,
) -> bytes:
    """
    Replay a multiproof and return the implied root.

    Raises:
        InvalidInputError: If a leaf or proof entry is not 32 bytes
        InvalidMultiProofError: If flags, leaves and proof do not fit together
    """
    for node in multiproof.leaves:
        check_valid_node(node)
    for node in multiproof.proof:
        check_valid_node(node)

    flags = multiproof.proof_flags
    if len(multiproof.proof) < sum(1 for f in flags if not f):
        raise InvalidMultiProofError("Invalid multiproof format")
    if len(multiproof.leaves) + len(multiproof.proof) != len(flags) + 1:
        raise InvalidMultiProofError("Provided leaves and multiproof are not compatible")

    queue = deque(multiproof.leaves)
    proof = deque(multiproof.proof)

    for flag in flags:
        if not queue:
            raise InvalidMultiProofError("Multiproof consumed more hashes than supplied")
        a = queue.popleft()
        if flag:
            if not queue:
                raise InvalidMultiProofError("Multiproof consumed more hashes than supplied")
            b = queue.popleft()
        else:
            b = proof.popleft()
        queue.append(hash_pair(a, b, hasher))

    if queue:
        return queue.pop()
    return proof.popleft()


def is_valid_merkle_tree(tree: Sequence[bytes], hasher: Hasher = keccak256) -> bool:
    """
    Re-derive every internal node and compare with the stored hash.

    Never raises; any structural problem yields False.
    """
    if len(tree) == 0:
        return False

    for i, node in enumerate(tree):
        if not is_valid_node(node):
            return False

        left = left_child_index(i)
        right = right_child_index(i)

        if right >= len(tree):
            if left < len(tree):
                return False
        elif node != hash_pair(tree[left], tree[right], hasher):
            return False

    return True


def render_merkle_tree(tree: Sequence[bytes], hex_chars: int | None = None) -> str:
    """
    Draw the tree as indented text, one "<position>) <hash>" per line.

    Args:
        tree: Flat tree array
        hex_chars: If set, show only this many hex digits per hash
    """
    if len(tree) == 0:
        raise InvalidInputError("Expected non-zero number of nodes")

    def label(node: bytes) -> str:
        text = to_hex(node)
        if hex_chars is not None and len(text) - 2 > hex_chars:
            return text[: 2 + hex_chars] + "..."
        return text

    # (position, path) where path holds 1 for "more siblings below", 0 for last
    stack: list[tuple[int, list[int]]] = [(0, [])]
    lines = []

    while stack:
        i, path = stack.pop()
        prefix = "".join("│  " if p else "   " for p in path[:-1])
        if path:
            prefix += "├─ " if path[-1] else "└─ "
        lines.append(f"{prefix}{i}) {label(tree[i])}")

        if right_child_index(i) < len(tree):
            stack.append((right_child_index(i), path + [0]))
            stack.append((left_child_index(i), path + [1]))

    return "\n".join(lines)
