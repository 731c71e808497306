"""
Merkle Commit - CLI

Usage:
    merkle-commit root WEIGHTS
    merkle-commit proof WEIGHTS TOKEN_ID WEIGHT_WEI
    merkle-commit dump WEIGHTS [--out PATH]
    merkle-commit render DOCUMENT [--hex-chars N]

WEIGHTS is a JSON array of [tokenId, weightInEther] pairs. Results go to
stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

import structlog

from merkle_commit import __version__
from merkle_commit.core.config import settings
from merkle_commit.core.logging import setup_logging
from merkle_commit.crypto.errors import MerkleTreeError
from merkle_commit.services.token_weights import (
    build_token_weights_service,
    encode_proof,
)
from merkle_commit.services.tree_service import TreeService, TreeServiceError

logger = structlog.get_logger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_INVALID_TREE = 2


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="merkle-commit",
        description="Commit token weights to a Merkle root and generate proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides LOG_LEVEL)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    root_parser = subparsers.add_parser("root", help="Print the Merkle root of a weights file")
    root_parser.add_argument("weights", type=Path, help="Token weights JSON file")

    proof_parser = subparsers.add_parser(
        "proof",
        help="Print the ABI-encoded bytes32[] proof for one entry",
    )
    proof_parser.add_argument("weights", type=Path, help="Token weights JSON file")
    proof_parser.add_argument("token_id", type=str, help="Token id")
    proof_parser.add_argument("weight", type=str, help="Token weight in wei")

    dump_parser = subparsers.add_parser("dump", help="Write the tree document")
    dump_parser.add_argument("weights", type=Path, help="Token weights JSON file")
    dump_parser.add_argument(
        "--out", "-o",
        type=Path,
        default=None,
        help="Output path (default: stdout)",
    )

    render_parser = subparsers.add_parser("render", help="Draw a dumped tree document")
    render_parser.add_argument("document", type=Path, help="Tree document JSON file")
    render_parser.add_argument(
        "--hex-chars",
        type=int,
        default=None,
        help="Truncate hashes to this many hex digits (default: RENDER_HEX_CHARS)",
    )

    return parser


def cmd_root(args: argparse.Namespace) -> int:
    service = build_token_weights_service(args.weights)
    sys.stdout.write(service.root)
    return EXIT_SUCCESS


def cmd_proof(args: argparse.Namespace) -> int:
    service = build_token_weights_service(args.weights)
    proof = service.get_proof([args.token_id, args.weight])
    sys.stdout.write(encode_proof(proof))
    return EXIT_SUCCESS


def cmd_dump(args: argparse.Namespace) -> int:
    service = build_token_weights_service(args.weights)
    document = json.dumps(service.tree.dump(), indent=2)
    if args.out is None:
        sys.stdout.write(document)
    else:
        args.out.write_text(document, encoding="utf-8")
        logger.info("Wrote tree document", path=str(args.out), root=service.root)
    return EXIT_SUCCESS


def cmd_render(args: argparse.Namespace) -> int:
    service = TreeService.from_document_file(args.document)
    hex_chars = args.hex_chars if args.hex_chars is not None else settings.RENDER_HEX_CHARS
    sys.stdout.write(service.tree.render(hex_chars or None) + "\n")
    return EXIT_SUCCESS


COMMANDS = {
    "root": cmd_root,
    "proof": cmd_proof,
    "dump": cmd_dump,
    "render": cmd_render,
}


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    args = create_parser().parse_args(argv)
    setup_logging(args.log_level, stream=sys.stderr)

    try:
        return COMMANDS[args.command](args)
    except MerkleTreeError as e:
        logger.error("Merkle tree error", command=args.command, error=str(e))
        return EXIT_INVALID_TREE
    except (TreeServiceError, OSError) as e:
        logger.error("Command failed", command=args.command, error=str(e))
        return EXIT_RUNTIME_ERROR
