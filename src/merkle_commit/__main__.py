"""
Module execution entry point.

Allows running with: python -m merkle_commit
"""

import sys

from merkle_commit.cli import main

if __name__ == "__main__":
    sys.exit(main())
