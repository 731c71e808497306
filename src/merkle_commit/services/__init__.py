"""
Merkle Commit - Services Package

Provides the tree proof service and the token weights commitment.

Use direct imports from submodules:
    from merkle_commit.services.tree_service import TreeService
    from merkle_commit.services.token_weights import generate_merkle_root
"""

__all__ = [
    "TreeService",
    "TreeServiceError",
    "TOKEN_WEIGHT_ENCODING",
    "build_token_weights_service",
    "encode_proof",
    "generate_merkle_proof",
    "generate_merkle_root",
    "parse_ether",
    "read_token_weights",
]
