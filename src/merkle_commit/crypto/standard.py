"""
Merkle Commit - Standard Merkle Tree

Typed facade over the tree engine. Values are tuples of Solidity-typed
fields, hashed as keccak256(keccak256(abi.encode(types, value))), which is
the "standard-v1" layout understood by on-chain verifiers.

Example:
    >>> tree = StandardMerkleTree.of([[1, 100], [2, 200]], ["uint256", "uint256"])
    >>> proof = tree.get_proof([1, 100])
    >>> tree.verify([1, 100], proof)
    True
"""

from collections.abc import Iterator, Sequence
from functools import cmp_to_key
from typing import Any

import structlog

from merkle_commit.crypto.bounds import check_bounds
from merkle_commit.crypto.bytes import compare_bytes, from_hex, to_hex
from merkle_commit.crypto.core import (
    MultiProof,
    get_multi_proof,
    get_proof,
    is_leaf_node,
    is_valid_merkle_tree,
    make_merkle_tree,
    process_multi_proof,
    process_proof,
    render_merkle_tree,
)
from merkle_commit.crypto.errors import (
    CorruptTreeError,
    IndexOutOfBounds,
    InvalidInputError,
    NotFoundError,
)
from merkle_commit.crypto.hashing import standard_leaf_hash

logger = structlog.get_logger(__name__)

STANDARD_FORMAT = "standard-v1"

# A value may be referenced by its index in the value list or by itself
LeafRef = int | Sequence[Any]


class StandardMerkleTree:
    """
    Merkle tree over typed values.

    The tree array, the value list and the hash lookup are built together
    and never change afterwards. Use of() or load() to construct.
    """

    def __init__(
        self,
        tree: list[bytes],
        values: list[dict[str, Any]],
        leaf_encoding: list[str],
    ) -> None:
        """
        Initialize tree (internal use).

        Raises:
            InvalidInputError: If two values hash to the same leaf
        """
        self._tree = tree
        self._values = values
        self._leaf_encoding = leaf_encoding
        self._hash_lookup: dict[bytes, int] = {}

        for i, entry in enumerate(values):
            leaf = standard_leaf_hash(leaf_encoding, entry["value"])
            if leaf in self._hash_lookup:
                raise InvalidInputError(
                    f"Duplicate value at index {i} (first seen at {self._hash_lookup[leaf]})"
                )
            self._hash_lookup[leaf] = i

    @classmethod
    def of(
        cls,
        values: Sequence[Sequence[Any]],
        leaf_encoding: Sequence[str],
        sort_leaves: bool = True,
    ) -> "StandardMerkleTree":
        """
        Build a tree from values.

        Args:
            values: Records, each with one field per encoding entry
            leaf_encoding: Solidity type names, e.g. ["address", "uint256"]
            sort_leaves: Order leaves by hash so the root does not depend on
                the order of values

        Raises:
            InvalidInputError: If values is empty, a value does not match the
                encoding or two values are equal
        """
        if len(values) == 0:
            raise InvalidInputError("Expected at least one value")

        leaf_encoding = list(leaf_encoding)
        hashed = [
            (standard_leaf_hash(leaf_encoding, value), value_index)
            for value_index, value in enumerate(values)
        ]
        if sort_leaves:
            hashed.sort(key=cmp_to_key(lambda x, y: compare_bytes(x[0], y[0])))

        tree = make_merkle_tree([leaf for leaf, _ in hashed])

        indexed_values: list[dict[str, Any]] = [
            {"value": list(value), "treeIndex": 0} for value in values
        ]
        for leaf_index, (_, value_index) in enumerate(hashed):
            indexed_values[value_index]["treeIndex"] = len(tree) - 1 - leaf_index

        instance = cls(tree, indexed_values, leaf_encoding)
        logger.debug(
            "Built Merkle tree",
            leaf_count=len(values),
            root=instance.root,
            sorted=sort_leaves,
        )
        return instance

    @classmethod
    def load(cls, data: dict[str, Any]) -> "StandardMerkleTree":
        """
        Restore a tree from a dump() document.

        The document is untrusted: every node and every value is checked.

        Raises:
            CorruptTreeError: If the document is malformed or inconsistent
            FormatError: If a tree entry is not a hex string
        """
        if not isinstance(data, dict):
            raise CorruptTreeError("Tree document must be an object")
        if data.get("format") != STANDARD_FORMAT:
            raise CorruptTreeError(f"Unknown format {data.get('format')!r}")
        for key in ("tree", "values", "leafEncoding"):
            if not isinstance(data.get(key), list):
                raise CorruptTreeError(f"Tree document is missing {key!r}")

        values = []
        for entry in data["values"]:
            if not isinstance(entry, dict) or "value" not in entry or "treeIndex" not in entry:
                raise CorruptTreeError("Tree document has a malformed value entry")
            values.append({"value": entry["value"], "treeIndex": entry["treeIndex"]})
        if not values:
            raise CorruptTreeError("Tree document has no values")

        tree = [from_hex(node) for node in data["tree"]]

        try:
            instance = cls(tree, values, list(data["leafEncoding"]))
        except InvalidInputError as e:
            raise CorruptTreeError(str(e)) from e

        instance.validate()
        logger.debug("Loaded Merkle tree", leaf_count=len(values), root=instance.root)
        return instance

    def dump(self) -> dict[str, Any]:
        """Serialize to a document accepted by load()."""
        return {
            "format": STANDARD_FORMAT,
            "tree": [to_hex(node) for node in self._tree],
            "values": [
                {"value": list(entry["value"]), "treeIndex": entry["treeIndex"]}
                for entry in self._values
            ],
            "leafEncoding": list(self._leaf_encoding),
        }

    def render(self, hex_chars: int | None = None) -> str:
        """Human-readable drawing of the tree."""
        return render_merkle_tree(self._tree, hex_chars)

    @property
    def root(self) -> str:
        """Get the root hash (hex)."""
        return to_hex(self._tree[0])

    @property
    def leaf_encoding(self) -> list[str]:
        return list(self._leaf_encoding)

    def __len__(self) -> int:
        return len(self._values)

    def entries(self) -> Iterator[tuple[int, list[Any]]]:
        """Yield (value index, value) pairs in insertion order."""
        for i, entry in enumerate(self._values):
            yield i, entry["value"]

    def validate(self) -> None:
        """
        Check the whole tree and every value against it.

        Raises:
            CorruptTreeError: On the first inconsistency found
        """
        if len(self._tree) != 2 * len(self._values) - 1:
            raise CorruptTreeError(
                f"Tree has {len(self._tree)} nodes for {len(self._values)} values"
            )
        for i in range(len(self._values)):
            try:
                self._validate_value(i)
            except (IndexOutOfBounds, InvalidInputError) as e:
                raise CorruptTreeError(f"Value {i} is invalid: {e}") from e
        if not is_valid_merkle_tree(self._tree):
            raise CorruptTreeError("Merkle tree is invalid")

    def leaf_hash(self, leaf: Sequence[Any]) -> str:
        """Get the hex leaf hash of a value."""
        return to_hex(standard_leaf_hash(self._leaf_encoding, leaf))

    def leaf_lookup(self, leaf: Sequence[Any]) -> int:
        """
        Find the value index of a value.

        Raises:
            NotFoundError: If the value is not in the tree
        """
        value_index = self._hash_lookup.get(standard_leaf_hash(self._leaf_encoding, leaf))
        if value_index is None:
            raise NotFoundError("Leaf is not in tree")
        return value_index

    def get_proof(self, leaf: LeafRef) -> list[str]:
        """
        Generate an inclusion proof.

        Args:
            leaf: Value index or value

        Returns:
            Hex sibling hashes from the leaf up to the root

        Raises:
            IndexOutOfBounds: If a value index is out of range
            NotFoundError: If a value is not in the tree
        """
        value_index = self._resolve(leaf)
        self._validate_value(value_index)

        tree_index = self._values[value_index]["treeIndex"]
        proof = get_proof(self._tree, tree_index)

        if process_proof(self._tree[tree_index], proof) != self._tree[0]:
            raise CorruptTreeError("Unable to prove value")

        return [to_hex(node) for node in proof]

    def get_multi_proof(self, leaves: Sequence[LeafRef]) -> MultiProof[str, list[Any]]:
        """
        Generate one proof covering several values.

        Returns:
            MultiProof whose leaves are the values, in the order the proof
            must be replayed

        Raises:
            InvalidInputError: If leaves is empty or repeats a value
            IndexOutOfBounds: If a value index is out of range
            NotFoundError: If a value is not in the tree
        """
        if len(leaves) == 0:
            raise InvalidInputError("Expected at least one leaf")

        value_indices = [self._resolve(leaf) for leaf in leaves]
        for value_index in value_indices:
            self._validate_value(value_index)

        indices = [self._values[i]["treeIndex"] for i in value_indices]
        proof = get_multi_proof(self._tree, indices)

        if process_multi_proof(proof) != self._tree[0]:
            raise CorruptTreeError("Unable to prove values")

        return MultiProof(
            leaves=[self._values[self._hash_lookup[leaf]]["value"] for leaf in proof.leaves],
            proof=[to_hex(node) for node in proof.proof],
            proof_flags=list(proof.proof_flags),
        )

    def verify(self, leaf: LeafRef, proof: Sequence[str]) -> bool:
        """Check a proof for a value index or value against this root."""
        implied = process_proof(self._get_leaf_hash(leaf), [from_hex(p) for p in proof])
        return implied == self._tree[0]

    def verify_multi_proof(self, multiproof: MultiProof) -> bool:
        """Check a multiproof whose leaves are value indices or values."""
        implied = process_multi_proof(
            MultiProof(
                leaves=[self._get_leaf_hash(leaf) for leaf in multiproof.leaves],
                proof=[from_hex(p) for p in multiproof.proof],
                proof_flags=list(multiproof.proof_flags),
            )
        )
        return implied == self._tree[0]

    @staticmethod
    def verify_root(
        root: str,
        leaf_encoding: Sequence[str],
        leaf: Sequence[Any],
        proof: Sequence[str],
    ) -> bool:
        """Check a proof when only the root is known."""
        leaf_hash = standard_leaf_hash(list(leaf_encoding), leaf)
        implied = process_proof(leaf_hash, [from_hex(p) for p in proof])
        return implied == from_hex(root)

    def _resolve(self, leaf: LeafRef) -> int:
        if isinstance(leaf, int) and not isinstance(leaf, bool):
            return leaf
        return self.leaf_lookup(leaf)

    def _get_leaf_hash(self, leaf: LeafRef) -> bytes:
        if isinstance(leaf, int) and not isinstance(leaf, bool):
            return self._validate_value(leaf)
        return standard_leaf_hash(self._leaf_encoding, leaf)

    def _validate_value(self, value_index: int) -> bytes:
        check_bounds(self._values, value_index)
        entry = self._values[value_index]
        tree_index = entry["treeIndex"]
        check_bounds(self._tree, tree_index)
        if not is_leaf_node(self._tree, tree_index):
            raise CorruptTreeError(f"Tree index {tree_index} is not a leaf")

        leaf = standard_leaf_hash(self._leaf_encoding, entry["value"])
        if leaf != self._tree[tree_index]:
            raise CorruptTreeError("Merkle tree does not contain the expected value")
        return leaf
