"""
Merkle Commit - Metrics Module

Prometheus metrics for tree building and proof serving.

Exports:
- Tree build times and sizes
- Proof generation counters
- Verification results
"""

from merkle_commit.metrics.tree_metrics import (
    TreeMetrics,
    get_tree_metrics,
)

__all__ = [
    "TreeMetrics",
    "get_tree_metrics",
]
