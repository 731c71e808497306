"""
Merkle Commit API - Tree Endpoints

Read-only queries against the tree loaded at startup:
- GET /tree: Root and size of the loaded tree
- POST /tree/proof: Inclusion proof for one value
- POST /tree/multiproof: Combined proof for several values
- POST /tree/verify: Verify an inclusion proof
- POST /tree/verify-multiproof: Verify a multiproof
"""

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel, Field, model_validator

from merkle_commit.crypto.core import MultiProof
from merkle_commit.crypto.errors import MerkleTreeError, NotFoundError
from merkle_commit.services.tree_service import TreeService

logger = structlog.get_logger(__name__)
router = APIRouter()

LeafField = int | list[Any]


# Request/Response Models
class TreeResponse(BaseModel):
    """Loaded tree summary."""

    root: str
    leaf_count: int
    leaf_encoding: list[str]


class ProofRequest(BaseModel):
    """Request a proof by value or by value index."""

    value: list[Any] | None = Field(default=None, description="Committed value")
    index: int | None = Field(default=None, ge=0, description="Value index")

    @model_validator(mode="after")
    def check_one_of(self) -> "ProofRequest":
        if (self.value is None) == (self.index is None):
            raise ValueError("Exactly one of 'value' or 'index' is required")
        return self

    @property
    def leaf(self) -> LeafField:
        return self.index if self.index is not None else self.value


class ProofResponse(BaseModel):
    """Inclusion proof."""

    root: str
    leaf: LeafField
    proof: list[str]


class MultiProofRequest(BaseModel):
    """Request a multiproof for several values or value indices."""

    leaves: list[LeafField] = Field(..., min_length=1)


class MultiProofBody(BaseModel):
    """Multiproof wire form."""

    leaves: list[LeafField]
    proof: list[str]
    proofFlags: list[bool]


class MultiProofResponse(MultiProofBody):
    """Multiproof with the root it proves against."""

    root: str


class VerifyRequest(BaseModel):
    """Verify a single proof."""

    leaf: LeafField
    proof: list[str]


class VerifyResponse(BaseModel):
    """Verification result."""

    verified: bool
    root: str


def _get_service(req: Request) -> TreeService:
    service = getattr(req.app.state, "tree_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No Merkle tree loaded",
        )
    return service


def _to_http_error(e: MerkleTreeError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


# Endpoints
@router.get("", response_model=TreeResponse, summary="Get loaded tree")
async def get_tree(req: Request) -> TreeResponse:
    """Return the root and size of the loaded tree."""
    return TreeResponse(**_get_service(req).summary())


@router.post("/proof", response_model=ProofResponse, summary="Get inclusion proof")
async def get_proof(request: ProofRequest, req: Request) -> ProofResponse:
    """Generate the inclusion proof for one value."""
    service = _get_service(req)
    try:
        proof = service.get_proof(request.leaf)
    except MerkleTreeError as e:
        logger.info("Proof request rejected", error=str(e))
        raise _to_http_error(e) from e
    return ProofResponse(root=service.root, leaf=request.leaf, proof=proof)


@router.post("/multiproof", response_model=MultiProofResponse, summary="Get multiproof")
async def get_multi_proof(request: MultiProofRequest, req: Request) -> MultiProofResponse:
    """Generate one proof covering several values."""
    service = _get_service(req)
    try:
        multiproof = service.get_multi_proof(request.leaves)
    except MerkleTreeError as e:
        logger.info("Multiproof request rejected", error=str(e))
        raise _to_http_error(e) from e
    return MultiProofResponse(root=service.root, **multiproof.to_dict())


@router.post("/verify", response_model=VerifyResponse, summary="Verify inclusion proof")
async def verify(request: VerifyRequest, req: Request) -> VerifyResponse:
    """Check an inclusion proof against the loaded root."""
    service = _get_service(req)
    try:
        verified = service.verify(request.leaf, request.proof)
    except MerkleTreeError as e:
        raise _to_http_error(e) from e
    return VerifyResponse(verified=verified, root=service.root)


@router.post(
    "/verify-multiproof",
    response_model=VerifyResponse,
    summary="Verify multiproof",
)
async def verify_multi_proof(request: MultiProofBody, req: Request) -> VerifyResponse:
    """Check a multiproof against the loaded root."""
    service = _get_service(req)
    try:
        verified = service.verify_multi_proof(MultiProof.from_dict(request.model_dump()))
    except MerkleTreeError as e:
        raise _to_http_error(e) from e
    return VerifyResponse(verified=verified, root=service.root)
