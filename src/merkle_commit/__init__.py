"""
Merkle Commit

Commits ordered records to a Merkle root and serves inclusion proofs.
"""

__version__ = "1.0.0"
