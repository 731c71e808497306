"""
Merkle Commit - Hashing Entry Points

Two hash constructions are used and neither calls the other:

- Leaves: keccak256(keccak256(abi.encode(types, value)))
- Internal nodes: keccak256(sorted(a, b)) over exactly 64 bytes

The outer leaf hash only ever receives a 32-byte digest, so a 64-byte
pair preimage can never be passed off as a leaf (and vice versa). This
prevents second preimage attacks against proofs.
"""

from collections.abc import Callable, Sequence
from typing import Any

from eth_abi import encode, is_encodable, is_encodable_type
from eth_utils import keccak

from merkle_commit.crypto.bytes import compare_bytes
from merkle_commit.crypto.errors import InvalidInputError

HASH_LENGTH = 32

Hasher = Callable[[bytes], bytes]


def keccak256(data: bytes) -> bytes:
    """Default 32-byte hash primitive."""
    return keccak(data)


def is_valid_node(node: Any) -> bool:
    """Check that a node is a 32-byte hash."""
    return isinstance(node, bytes) and len(node) == HASH_LENGTH


def check_valid_node(node: Any) -> None:
    """Raise InvalidInputError unless node is a 32-byte hash."""
    if not is_valid_node(node):
        raise InvalidInputError("Merkle tree nodes must be bytes of length 32")


def hash_pair(a: bytes, b: bytes, hasher: Hasher = keccak256) -> bytes:
    """
    Compute the hash of an internal node.

    Children are ordered by byte value before hashing, so proofs need
    no left/right direction markers.
    """
    if compare_bytes(a, b) <= 0:
        return hasher(a + b)
    return hasher(b + a)


def _coerce_field(abi_type: str, value: Any) -> Any:
    """Accept decimal or 0x strings for integer fields."""
    if not isinstance(value, str) or not (
        abi_type.startswith("uint") or abi_type.startswith("int")
    ):
        return value
    if abi_type.endswith("]"):
        return value
    try:
        if value.lower().startswith("0x"):
            return int(value, 16)
        return int(value, 10)
    except ValueError as e:
        raise InvalidInputError(f"Value {value!r} is not a valid {abi_type}") from e


def encode_leaf(types: Sequence[str], value: Sequence[Any]) -> bytes:
    """
    ABI-encode one record.

    Args:
        types: Solidity type names, one per field
        value: Field values, in the same order

    Returns:
        Canonical encoded bytes

    Raises:
        InvalidInputError: If the value does not match the encoding
    """
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise InvalidInputError(f"Leaf value must be a sequence, got {type(value).__name__}")
    if len(types) != len(value):
        raise InvalidInputError(
            f"Leaf value has {len(value)} fields, encoding expects {len(types)}"
        )

    fields = []
    for abi_type, field in zip(types, value):
        if not is_encodable_type(abi_type):
            raise InvalidInputError(f"Unknown leaf encoding type {abi_type!r}")
        field = _coerce_field(abi_type, field)
        if not is_encodable(abi_type, field):
            raise InvalidInputError(f"Value {field!r} is not encodable as {abi_type}")
        fields.append(field)

    return encode(list(types), fields)


def standard_leaf_hash(
    types: Sequence[str],
    value: Sequence[Any],
    hasher: Hasher = keccak256,
) -> bytes:
    """Compute the double-hashed leaf of an encoded record."""
    return hasher(hasher(encode_leaf(types, value)))
