"""
Merkle Commit - Tree Service

Holds one immutable StandardMerkleTree and answers proof queries against
it. Enforces input size limits and records metrics and logs around the
pure tree operations. Used by both the HTTP API and the CLI.
"""

import json
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog

from merkle_commit.core.config import settings
from merkle_commit.crypto.core import MultiProof
from merkle_commit.crypto.errors import CorruptTreeError, InvalidInputError, MerkleTreeError
from merkle_commit.crypto.standard import LeafRef, StandardMerkleTree
from merkle_commit.metrics import get_tree_metrics

logger = structlog.get_logger(__name__)


class TreeServiceError(Exception):
    """Tree source could not be read."""

    pass


class TreeService:
    """
    Read-only proof service over a single tree.

    The tree is built once; all methods are safe to call concurrently.
    """

    def __init__(self, tree: StandardMerkleTree) -> None:
        self._tree = tree
        self._metrics = get_tree_metrics()
        self._metrics.set_tree_info(tree.root, len(tree), tree.leaf_encoding)

    @classmethod
    def from_values(
        cls,
        values: Sequence[Sequence[Any]],
        leaf_encoding: Sequence[str],
        sort_leaves: bool = True,
    ) -> "TreeService":
        """
        Build a tree from values.

        Raises:
            InvalidInputError: If there are more values than MAX_LEAVES or
                the values are rejected by the tree
        """
        metrics = get_tree_metrics()

        if len(values) > settings.MAX_LEAVES:
            metrics.record_rejected("too_many_leaves")
            raise InvalidInputError(
                f"Tree has {len(values)} values, limit is {settings.MAX_LEAVES}"
            )

        start = time.perf_counter()
        try:
            tree = StandardMerkleTree.of(values, leaf_encoding, sort_leaves=sort_leaves)
        except MerkleTreeError:
            metrics.record_rejected("invalid_values")
            raise
        duration = time.perf_counter() - start

        metrics.record_build(duration, len(tree), source="values")
        logger.info(
            "Built Merkle tree",
            leaf_count=len(tree),
            root=tree.root,
            duration_seconds=round(duration, 6),
        )
        return cls(tree)

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "TreeService":
        """
        Restore a tree from an untrusted document.

        Raises:
            CorruptTreeError: If the document fails validation
        """
        metrics = get_tree_metrics()

        values = data.get("values") if isinstance(data, dict) else None
        if isinstance(values, list) and len(values) > settings.MAX_LEAVES:
            metrics.record_rejected("too_many_leaves")
            raise CorruptTreeError(
                f"Document has {len(values)} values, limit is {settings.MAX_LEAVES}"
            )

        start = time.perf_counter()
        try:
            tree = StandardMerkleTree.load(data)
        except MerkleTreeError as e:
            metrics.record_rejected("corrupt_document")
            logger.warning("Rejected tree document", error=str(e))
            raise
        duration = time.perf_counter() - start

        metrics.record_build(duration, len(tree), source="document")
        logger.info(
            "Loaded Merkle tree",
            leaf_count=len(tree),
            root=tree.root,
            duration_seconds=round(duration, 6),
        )
        return cls(tree)

    @classmethod
    def from_document_file(cls, path: str | Path) -> "TreeService":
        """Read a dumped tree document from disk and load it."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise TreeServiceError(f"Failed to read tree document {path}: {e}") from e
        return cls.from_document(data)

    @property
    def tree(self) -> StandardMerkleTree:
        return self._tree

    @property
    def root(self) -> str:
        return self._tree.root

    def summary(self) -> dict[str, Any]:
        """Describe the loaded tree."""
        return {
            "root": self._tree.root,
            "leaf_count": len(self._tree),
            "leaf_encoding": self._tree.leaf_encoding,
        }

    def get_proof(self, leaf: LeafRef) -> list[str]:
        """Generate a proof for a value index or value."""
        start = time.perf_counter()
        proof = self._tree.get_proof(leaf)
        self._metrics.record_proof("single", time.perf_counter() - start)
        return proof

    def get_multi_proof(self, leaves: Sequence[LeafRef]) -> MultiProof:
        """
        Generate a multiproof for several value indices or values.

        Raises:
            InvalidInputError: If more than MAX_MULTIPROOF_LEAVES are requested
        """
        if len(leaves) > settings.MAX_MULTIPROOF_LEAVES:
            raise InvalidInputError(
                f"Requested {len(leaves)} leaves, limit is {settings.MAX_MULTIPROOF_LEAVES}"
            )
        start = time.perf_counter()
        multiproof = self._tree.get_multi_proof(leaves)
        self._metrics.record_proof("multi", time.perf_counter() - start)
        return multiproof

    def verify(self, leaf: LeafRef, proof: Sequence[str]) -> bool:
        """Verify a proof against the loaded root."""
        valid = self._tree.verify(leaf, proof)
        self._metrics.record_verification("single", valid)
        return valid

    def verify_multi_proof(self, multiproof: MultiProof) -> bool:
        """Verify a multiproof against the loaded root."""
        if len(multiproof.leaves) > settings.MAX_MULTIPROOF_LEAVES:
            raise InvalidInputError(
                f"Multiproof has {len(multiproof.leaves)} leaves, "
                f"limit is {settings.MAX_MULTIPROOF_LEAVES}"
            )
        valid = self._tree.verify_multi_proof(multiproof)
        self._metrics.record_verification("multi", valid)
        return valid
