"""
Merkle Commit - Merkle Tree Errors

All errors raised by the tree engine derive from MerkleTreeError. Where a
builtin exception carries the same meaning it is used as a second base so
callers catching ValueError/IndexError keep working.
"""


class MerkleTreeError(Exception):
    """Base exception for Merkle tree errors."""

    pass


class InvalidInputError(MerkleTreeError, ValueError):
    """Empty or malformed construction input."""

    pass


class IndexOutOfBounds(MerkleTreeError, IndexError):
    """Index does not address a valid value or leaf position."""

    pass


class InvalidMultiProofError(MerkleTreeError, ValueError):
    """Multiproof flags, proof and leaves are inconsistent."""

    pass


class CorruptTreeError(MerkleTreeError):
    """Tree or tree document failed structural validation."""

    pass


class NotFoundError(MerkleTreeError, LookupError):
    """Value is not committed in the tree."""

    pass


class FormatError(MerkleTreeError, ValueError):
    """Malformed hex string."""

    pass
