"""
Merkle Commit - Token Weights

Commits a token reward-weight table as (tokenId, weight) uint256 leaves.

The table is a JSON array of [tokenId, weight] pairs with weights in
ether; they are converted to wei before hashing so on-chain contracts can
check proofs for (tokenId, weightInWei).
"""

import json
from decimal import Decimal, InvalidOperation, localcontext
from pathlib import Path
from typing import Any

import structlog
from eth_abi import encode

from merkle_commit.crypto.bytes import from_hex, to_hex
from merkle_commit.crypto.errors import InvalidInputError
from merkle_commit.services.tree_service import TreeService, TreeServiceError

logger = structlog.get_logger(__name__)

TOKEN_WEIGHT_ENCODING = ["uint256", "uint256"]
WEI_PER_ETHER = 10**18


def parse_ether(amount: Any) -> int:
    """
    Convert an ether amount to wei.

    Raises:
        InvalidInputError: If the amount is not a finite decimal or has more
            than 18 fractional digits
    """
    if isinstance(amount, bool):
        raise InvalidInputError(f"Invalid ether amount: {amount!r}")

    with localcontext() as ctx:
        ctx.prec = 100
        try:
            value = Decimal(str(amount).strip())
        except InvalidOperation as e:
            raise InvalidInputError(f"Invalid ether amount: {amount!r}") from e
        if not value.is_finite():
            raise InvalidInputError(f"Invalid ether amount: {amount!r}")

        wei = value * WEI_PER_ETHER
        if wei != wei.to_integral_value():
            raise InvalidInputError(f"Ether amount {amount!r} has too many decimals")
        return int(wei)


def to_token_weight_values(rows: Any) -> list[list[str]]:
    """
    Turn [[tokenId, weightInEther], ...] into leaf values.

    Values are kept as decimal strings, which is how they appear in dumped
    tree documents.
    """
    if not isinstance(rows, list):
        raise InvalidInputError("Token weights must be a JSON array")

    values = []
    for i, row in enumerate(rows):
        if not isinstance(row, list) or len(row) != 2:
            raise InvalidInputError(f"Row {i} is not a [tokenId, weight] pair")
        token_id, weight = row
        values.append([str(token_id), str(parse_ether(weight))])
    return values


def read_token_weights(path: str | Path) -> list[list[str]]:
    """
    Read a token weights file.

    Raises:
        TreeServiceError: If the file cannot be read or parsed
        InvalidInputError: If a row is malformed
    """
    try:
        rows = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise TreeServiceError(f"Failed to read token weights {path}: {e}") from e

    values = to_token_weight_values(rows)
    logger.info("Read token weights", path=str(path), count=len(values))
    return values


def build_token_weights_service(path: str | Path) -> TreeService:
    """Build a tree service over a token weights file."""
    return TreeService.from_values(read_token_weights(path), TOKEN_WEIGHT_ENCODING)


def generate_merkle_root(path: str | Path) -> str:
    """Compute the root committing a token weights file."""
    return build_token_weights_service(path).root


def generate_merkle_proof(path: str | Path, token_id: str, token_weight: str) -> list[str]:
    """
    Generate the proof for one (tokenId, weightInWei) entry.

    Raises:
        NotFoundError: If the entry is not in the table
    """
    service = build_token_weights_service(path)
    return service.get_proof([token_id, token_weight])


def encode_proof(proof: list[str]) -> str:
    """ABI-encode a proof as bytes32[] for contract calls."""
    return to_hex(encode(["bytes32[]"], [[from_hex(node) for node in proof]]))
