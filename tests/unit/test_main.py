"""Unit tests for the console entry point's argument parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from simpledb.__main__ import build_parser


@pytest.mark.unit
class TestArgumentParser:
    """Tests for build_parser."""

    def test_defaults(self) -> None:
        args = build_parser().parse_args([])

        assert args.snapshot_path is None
        assert args.wal_path is None
        assert args.recover is None

    def test_overrides(self) -> None:
        args = build_parser().parse_args(
            ["--snapshot-path", "a.snap", "--wal-path", "a.log", "--recover"]
        )

        assert args.snapshot_path == Path("a.snap")
        assert args.wal_path == Path("a.log")
        assert args.recover is True

    def test_no_recover(self) -> None:
        assert build_parser().parse_args(["--no-recover"]).recover is False
