"""
Tests for the command line interface.
"""

import json
from pathlib import Path

import pytest
from eth_abi import decode

from merkle_commit.cli import EXIT_INVALID_TREE, EXIT_RUNTIME_ERROR, EXIT_SUCCESS, main
from merkle_commit.crypto.bytes import from_hex
from merkle_commit.crypto.standard import StandardMerkleTree
from merkle_commit.services.token_weights import (
    TOKEN_WEIGHT_ENCODING,
    generate_merkle_proof,
    generate_merkle_root,
)


class TestCommands:
    """Tests for CLI subcommands."""

    def test_root(self, weights_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["root", str(weights_file)]) == EXIT_SUCCESS
        assert capsys.readouterr().out == generate_merkle_root(weights_file)

    def test_proof(self, weights_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(["proof", str(weights_file), "2", "2000000000000000000"])
        out = capsys.readouterr().out

        assert code == EXIT_SUCCESS
        (decoded,) = decode(["bytes32[]"], from_hex(out))
        expected = generate_merkle_proof(weights_file, "2", "2000000000000000000")
        assert [from_hex(node) for node in expected] == list(decoded)

    def test_proof_unknown_entry(self, weights_file: Path) -> None:
        assert main(["proof", str(weights_file), "2", "1"]) == EXIT_INVALID_TREE

    def test_missing_file(self, tmp_path: Path) -> None:
        assert main(["root", str(tmp_path / "missing.json")]) == EXIT_RUNTIME_ERROR

    def test_dump_to_file_and_render(
        self,
        weights_file: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        out = tmp_path / "tree.json"
        assert main(["dump", str(weights_file), "--out", str(out)]) == EXIT_SUCCESS

        document = json.loads(out.read_text(encoding="utf-8"))
        tree = StandardMerkleTree.load(document)
        assert tree.root == generate_merkle_root(weights_file)
        assert tree.leaf_encoding == TOKEN_WEIGHT_ENCODING

        capsys.readouterr()
        assert main(["render", str(out), "--hex-chars", "8"]) == EXIT_SUCCESS
        lines = capsys.readouterr().out.strip().split("\n")
        assert len(lines) == 7
        assert lines[0] == f"0) {tree.root[:10]}..."

    def test_dump_to_stdout(self, weights_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["dump", str(weights_file)]) == EXIT_SUCCESS
        document = json.loads(capsys.readouterr().out)
        assert document["format"] == "standard-v1"

    def test_render_corrupt_document(self, weights_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "tree.json"
        main(["dump", str(weights_file), "--out", str(out)])
        document = json.loads(out.read_text(encoding="utf-8"))
        document["values"][0]["value"] = ["1", "1"]
        out.write_text(json.dumps(document), encoding="utf-8")

        assert main(["render", str(out)]) == EXIT_INVALID_TREE

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            main([])
