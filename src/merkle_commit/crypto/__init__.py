"""
Merkle Commit - Cryptographic Utilities

Provides Merkle tree construction, proof and multiproof generation, and
verification.
"""

from merkle_commit.crypto.core import (
    MultiProof,
    get_multi_proof,
    get_proof,
    is_valid_merkle_tree,
    make_merkle_tree,
    process_multi_proof,
    process_proof,
    render_merkle_tree,
)
from merkle_commit.crypto.errors import (
    CorruptTreeError,
    FormatError,
    IndexOutOfBounds,
    InvalidInputError,
    InvalidMultiProofError,
    MerkleTreeError,
    NotFoundError,
)
from merkle_commit.crypto.hashing import hash_pair, keccak256, standard_leaf_hash
from merkle_commit.crypto.standard import STANDARD_FORMAT, StandardMerkleTree

__all__ = [
    "MultiProof",
    "StandardMerkleTree",
    "STANDARD_FORMAT",
    "make_merkle_tree",
    "get_proof",
    "process_proof",
    "get_multi_proof",
    "process_multi_proof",
    "is_valid_merkle_tree",
    "render_merkle_tree",
    "hash_pair",
    "keccak256",
    "standard_leaf_hash",
    "MerkleTreeError",
    "InvalidInputError",
    "IndexOutOfBounds",
    "InvalidMultiProofError",
    "CorruptTreeError",
    "NotFoundError",
    "FormatError",
]
