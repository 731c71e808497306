"""
Merkle Commit - Tree Metrics

Prometheus metrics for tree construction and proof serving.

Metrics Categories:
- Tree building and loading
- Proof and multiproof generation
- Verification results
"""

from prometheus_client import Counter, Histogram, Info

import structlog

logger = structlog.get_logger(__name__)


class TreeMetrics:
    """
    Centralized metrics for Merkle tree operations.

    Provides visibility into:
    - Tree build times and sizes
    - Proof generation volume and latency
    - Verification outcomes
    """

    def __init__(self) -> None:
        """Initialize all tree metrics."""
        self._init_build_metrics()
        self._init_proof_metrics()
        self._init_info_metrics()

    def _init_build_metrics(self) -> None:
        """Initialize tree build metrics."""
        self.build_duration = Histogram(
            "merkle_commit_tree_build_duration_seconds",
            "Merkle tree build or load time",
            ["source"],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
        )

        self.tree_size = Histogram(
            "merkle_commit_tree_size",
            "Number of leaves in Merkle tree",
            buckets=[10, 50, 100, 500, 1000, 5000, 10000, 50000, 100000],
        )

        self.trees_rejected = Counter(
            "merkle_commit_trees_rejected_total",
            "Tree documents or inputs rejected",
            ["reason"],
        )

    def _init_proof_metrics(self) -> None:
        """Initialize proof metrics."""
        self.proofs_generated = Counter(
            "merkle_commit_proofs_generated_total",
            "Proofs generated",
            ["kind"],
        )

        self.proof_duration = Histogram(
            "merkle_commit_proof_duration_seconds",
            "Proof generation time",
            ["kind"],
            buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05],
        )

        self.verifications = Counter(
            "merkle_commit_verifications_total",
            "Proof verifications",
            ["kind", "result"],
        )

    def _init_info_metrics(self) -> None:
        """Initialize info metrics."""
        self.service_info = Info(
            "merkle_commit_service",
            "Merkle Commit service information",
        )

        self.tree_info = Info(
            "merkle_commit_tree",
            "Currently loaded Merkle tree",
        )

    # Convenience methods

    def record_build(self, duration: float, leaf_count: int, source: str = "values") -> None:
        """Record a tree build or load."""
        self.build_duration.labels(source=source).observe(duration)
        self.tree_size.observe(leaf_count)

    def record_rejected(self, reason: str) -> None:
        """Record a rejected tree input."""
        self.trees_rejected.labels(reason=reason).inc()

    def record_proof(self, kind: str, duration: float) -> None:
        """Record proof generation."""
        self.proofs_generated.labels(kind=kind).inc()
        self.proof_duration.labels(kind=kind).observe(duration)

    def record_verification(self, kind: str, valid: bool) -> None:
        """Record proof verification."""
        result = "valid" if valid else "invalid"
        self.verifications.labels(kind=kind, result=result).inc()

    def set_service_info(self, version: str, environment: str) -> None:
        """Set service info labels."""
        self.service_info.info({
            "version": version,
            "environment": environment,
        })

    def set_tree_info(self, root: str, leaf_count: int, leaf_encoding: list[str]) -> None:
        """Set loaded tree labels."""
        self.tree_info.info({
            "root": root,
            "leaf_count": str(leaf_count),
            "leaf_encoding": ",".join(leaf_encoding),
        })


# Singleton instance
_tree_metrics: TreeMetrics | None = None


def get_tree_metrics() -> TreeMetrics:
    """Get global tree metrics instance."""
    global _tree_metrics
    if _tree_metrics is None:
        _tree_metrics = TreeMetrics()
    return _tree_metrics
