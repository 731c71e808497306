"""
Pytest configuration and shared fixtures for Merkle Commit tests.
"""

import json
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from merkle_commit.crypto.hashing import keccak256
from merkle_commit.crypto.standard import StandardMerkleTree
from merkle_commit.main import create_application
from merkle_commit.services.tree_service import TreeService

UINT_PAIR = ["uint256", "uint256"]


def make_leaves(count: int) -> list[bytes]:
    """Distinct 32-byte leaf hashes."""
    return [keccak256(f"leaf{i}".encode()) for i in range(count)]


@pytest.fixture
def leaves() -> list[bytes]:
    """Seven leaf hashes, an odd non power-of-two count."""
    return make_leaves(7)


@pytest.fixture
def pair_values() -> list[list[int]]:
    """Three (id, amount) records."""
    return [[1, 100], [2, 200], [3, 300]]


@pytest.fixture
def pair_tree(pair_values: list[list[int]]) -> StandardMerkleTree:
    """Standard tree over the three (uint, uint) records."""
    return StandardMerkleTree.of(pair_values, UINT_PAIR)


@pytest.fixture
def address_tree() -> StandardMerkleTree:
    """Allow-list style tree of (address, uint256) records."""
    values = [
        ["0x1111111111111111111111111111111111111111", 5000000000000000000],
        ["0x2222222222222222222222222222222222222222", 2500000000000000000],
        ["0x3333333333333333333333333333333333333333", 1000000000000000000],
        ["0x4444444444444444444444444444444444444444", 7000000000000000000],
        ["0x5555555555555555555555555555555555555555", 1],
    ]
    return StandardMerkleTree.of(values, ["address", "uint256"])


@pytest.fixture
def weights_file(tmp_path: Path) -> Path:
    """Token weights table with weights in ether."""
    path = tmp_path / "token-weights.json"
    path.write_text(json.dumps([[1, 1.5], [2, "2"], [3, 0.25], [4, 10]]), encoding="utf-8")
    return path


@pytest.fixture
def tree_service(pair_values: list[list[int]]) -> TreeService:
    """Tree service over the three (uint, uint) records."""
    return TreeService.from_values(pair_values, UINT_PAIR)


@pytest.fixture
def client(tree_service: TreeService) -> Generator[TestClient, None, None]:
    """API client with a tree already loaded."""
    app = create_application()
    app.state.tree_service = tree_service
    with TestClient(app) as test_client:
        yield test_client
