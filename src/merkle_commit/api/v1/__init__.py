"""
Merkle Commit API v1

Endpoints:
- GET /tree - Loaded tree summary
- POST /tree/proof - Inclusion proof
- POST /tree/multiproof - Multiproof
- POST /tree/verify - Verify inclusion proof
- POST /tree/verify-multiproof - Verify multiproof
"""

from fastapi import APIRouter

from merkle_commit.api.v1.endpoints import tree

router = APIRouter()
router.include_router(tree.router, prefix="/tree", tags=["Tree"])
