"""Console entry point: `simpledb` / `python -m simpledb`."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from simpledb import __version__
from simpledb.adapters.inbound import CommandShell
from simpledb.application import Database
from simpledb.domain.errors import SimpleDBError
from simpledb.infrastructure import (
    get_config,
    get_logger,
    setup_logging,
    setup_metrics,
    setup_tracing,
    shutdown_tracing,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simpledb",
        description="Interactive shell for the SimpleDB table store",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--snapshot-path", type=Path, help="Encrypted snapshot file")
    parser.add_argument("--wal-path", type=Path, help="Write-ahead log file")
    parser.add_argument(
        "--recover",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Replay the WAL on top of the snapshot at startup",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    config = get_config()
    overrides = {
        key: value
        for key, value in (
            ("snapshot_path", args.snapshot_path),
            ("wal_path", args.wal_path),
            ("recover_on_start", args.recover),
        )
        if value is not None
    }
    storage = config.storage.model_copy(update=overrides)

    obs = config.observability
    setup_logging(obs.log_level, obs.log_format)
    if obs.metrics_port is not None:
        setup_metrics(obs.metrics_port)
    if obs.otel_endpoint:
        setup_tracing(obs.otel_service_name, obs.otel_endpoint)

    logger = get_logger(__name__)
    try:
        db = Database.open(storage, config.wal)
    except (SimpleDBError, OSError) as e:
        logger.error("startup_failed", error=str(e), error_type=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        CommandShell(db).run()
    finally:
        shutdown_tracing()
    return 0


if __name__ == "__main__":
    sys.exit(main())
