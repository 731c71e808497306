"""
Merkle Commit - Main Entry Point

Serves roots, proofs and multiproofs for a Merkle tree built once at
startup from a dumped tree document or a token weights table.
"""

import signal
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from prometheus_client import make_asgi_app
from starlette.responses import Response

from merkle_commit.api.v1 import router as api_v1_router
from merkle_commit.core.config import settings
from merkle_commit.core.logging import setup_logging
from merkle_commit.crypto.errors import MerkleTreeError
from merkle_commit.metrics import get_tree_metrics
from merkle_commit.services.token_weights import build_token_weights_service
from merkle_commit.services.tree_service import TreeService, TreeServiceError

setup_logging()
logger = structlog.get_logger(__name__)


def load_tree_service() -> TreeService | None:
    """Build the tree service from the configured source, if any."""
    if settings.TREE_DOCUMENT_PATH:
        return TreeService.from_document_file(settings.TREE_DOCUMENT_PATH)
    if settings.TOKEN_WEIGHTS_PATH:
        return build_token_weights_service(settings.TOKEN_WEIGHTS_PATH)
    return None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info(
        "Starting Merkle Commit service",
        version=settings.VERSION,
        environment=settings.ENV,
        tree_document=settings.TREE_DOCUMENT_PATH,
        token_weights=settings.TOKEN_WEIGHTS_PATH,
    )

    if settings.METRICS_ENABLED:
        get_tree_metrics().set_service_info(
            version=settings.VERSION,
            environment=settings.ENV,
        )

    # A service already placed on app.state (e.g. by tests) is kept
    if getattr(app.state, "tree_service", None) is None:
        try:
            app.state.tree_service = load_tree_service()
        except (TreeServiceError, MerkleTreeError) as e:
            logger.error("Failed to load Merkle tree", error=str(e))
            app.state.tree_service = None

    if app.state.tree_service is None:
        logger.warning("No Merkle tree loaded - proof endpoints will return 503")
    else:
        logger.info("Merkle tree ready", root=app.state.tree_service.root)

    yield

    logger.info("Merkle Commit service shutdown complete")


def create_application() -> FastAPI:
    """Create FastAPI application."""
    app = FastAPI(
        title="Merkle Commit API",
        description="Proof service for a committed Merkle tree",
        version=settings.VERSION,
        docs_url="/docs" if settings.ENV != "production" else None,
        redoc_url="/redoc" if settings.ENV != "production" else None,
        lifespan=lifespan,
    )
    app.state.tree_service = None

    # Include routers
    app.include_router(api_v1_router, prefix="/api/v1")

    # Metrics endpoint
    if settings.METRICS_ENABLED:
        app.mount("/metrics", make_asgi_app())

    # Health endpoints
    @app.get("/health")
    async def health() -> dict:
        """Overall service health check."""
        service = app.state.tree_service
        return {
            "status": "healthy",
            "service": "merkle-commit",
            "version": settings.VERSION,
            "tree_loaded": service is not None,
            "root": service.root if service else None,
        }

    @app.get("/ready")
    async def ready() -> Response:
        """Readiness probe; ready once a tree is loaded."""
        if app.state.tree_service is None:
            return Response(status_code=503, content="not ready - no tree loaded")
        return Response(status_code=200, content="ready")

    @app.get("/live")
    async def live() -> Response:
        """Liveness probe for Kubernetes."""
        return Response(status_code=200, content="alive")

    return app


app = create_application()


def handle_signal(signum: int, frame: object) -> None:
    """Handle shutdown signals."""
    logger.info(f"Received signal {signum}, initiating shutdown")
    sys.exit(0)


def main() -> None:
    """Run the service."""
    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    logger.info(
        "Starting Merkle Commit service",
        host=settings.HOST,
        port=settings.PORT,
    )

    uvicorn.run(
        "merkle_commit.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=settings.WORKERS,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
