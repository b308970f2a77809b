"""Encrypted snapshot store.

This adapter implements the SnapshotStore protocol. The full name -> Table
mapping is encoded as canonical JSON, encrypted with AES-256-GCM and
written atomically (temporary file, fsync, rename).

File Format:
    magic(8) = b"SDBSNAP1"
    nonce(12)
    ciphertext + GCM tag(16)

Plaintext:
    {"tables": {"<name>": {"columns": [...], "records": [{...}, ...]}},
     "version": 1}

Key Handling:
    The AES key is derived from the configured secret string with
    HKDF-SHA256, so any non-empty string is accepted. When no secret is
    configured the literal "default" is used; that fallback offers no
    confidentiality and a warning is logged whenever it is in effect.
"""

from __future__ import annotations

import json
import os
import tempfile
import time
from collections.abc import Mapping
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from simpledb.domain.entities import Table
from simpledb.domain.errors import SnapshotCorruptError
from simpledb.infrastructure.config import INSECURE_DEFAULT_KEY
from simpledb.infrastructure.logging import get_logger
from simpledb.infrastructure.metrics import MetricsRegistry, get_metrics
from simpledb.infrastructure.tracing import trace_span

logger = get_logger(__name__)

SNAPSHOT_MAGIC = b"SDBSNAP1"
SNAPSHOT_VERSION = 1
NONCE_SIZE = 12  # GCM standard: 96-bit nonce
SNAPSHOT_AAD = b"simpledb-snapshot-v1"
KDF_INFO = b"simpledb-snapshot-key"


def derive_key(secret: str) -> bytes:
    """Derive a 32-byte AES key from a secret string."""
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=32,
        salt=None,
        info=KDF_INFO,
    )
    return hkdf.derive(secret.encode("utf-8"))


def encode_tables(tables: Mapping[str, Table]) -> bytes:
    """Encode tables as canonical JSON bytes.

    The caller must hold each table's lock (see Table.to_dict).
    """
    payload = {
        "version": SNAPSHOT_VERSION,
        "tables": {name: table.to_dict() for name, table in tables.items()},
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode(
        "utf-8"
    )


def decode_tables(data: bytes) -> dict[str, Table]:
    """Decode bytes produced by encode_tables().

    Raises:
        ValueError: If the data is not a valid encoding.
    """
    payload = json.loads(data.decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("snapshot payload must be an object")
    if payload.get("version") != SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {payload.get('version')!r}")

    raw_tables = payload.get("tables")
    if not isinstance(raw_tables, dict):
        raise ValueError("snapshot 'tables' must be an object")

    tables: dict[str, Table] = {}
    for name, raw in raw_tables.items():
        if not isinstance(raw, dict):
            raise ValueError(f"table '{name}' must be an object")
        tables[name] = Table.from_dict(raw)
    return tables


class EncryptedSnapshotStore:
    """AES-GCM encrypted snapshot file.

    Attributes:
        path: Location of the snapshot file.
    """

    def __init__(
        self,
        path: str | Path,
        secret: str = INSECURE_DEFAULT_KEY,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            path: Snapshot file path.
            secret: Secret the encryption key is derived from.
            metrics: Metrics registry (defaults to the global one).

        Raises:
            ValueError: If the secret is empty.
        """
        if not secret:
            raise ValueError("snapshot secret must not be empty")

        self._path = Path(path)
        self._aesgcm = AESGCM(derive_key(secret))
        self._metrics = metrics or get_metrics()

        if secret == INSECURE_DEFAULT_KEY:
            logger.warning(
                "insecure_default_encryption_key",
                path=str(self._path),
                hint="set SIMPLEDB_STORAGE__ENCRYPTION_KEY",
            )

    @property
    def path(self) -> Path:
        """Return the snapshot file path."""
        return self._path

    def exists(self) -> bool:
        """Return whether a snapshot has been written."""
        return self._path.exists()

    # --- Encrypt -----------------------------------------------------

    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypt plaintext into the snapshot file format."""
        nonce = os.urandom(NONCE_SIZE)
        return SNAPSHOT_MAGIC + nonce + self._aesgcm.encrypt(nonce, plaintext, SNAPSHOT_AAD)

    def save(self, tables: Mapping[str, Table]) -> None:
        """Encrypt and atomically write the tables.

        The caller must hold each table's lock while this runs.

        Raises:
            OSError: If the snapshot cannot be written. The previous
                snapshot, if any, is left untouched.
        """
        with trace_span("snapshot.save", {"tables": len(tables)}):
            start = time.perf_counter()
            blob = self.encrypt(encode_tables(tables))

            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            tmp_path = Path(tmp_name)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(blob)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self._path)
            except BaseException:
                tmp_path.unlink(missing_ok=True)
                raise

            elapsed = time.perf_counter() - start
            self._metrics.snapshot_save_seconds.observe(elapsed)
            logger.info(
                "snapshot_saved",
                path=str(self._path),
                tables=len(tables),
                size_bytes=len(blob),
                duration_ms=round(elapsed * 1000, 3),
            )

    # --- Decrypt -----------------------------------------------------

    def decrypt(self, blob: bytes) -> bytes:
        """Decrypt data in the snapshot file format.

        Raises:
            SnapshotCorruptError: If the header is wrong or authentication fails.
        """
        header_size = len(SNAPSHOT_MAGIC) + NONCE_SIZE
        if len(blob) < header_size or not blob.startswith(SNAPSHOT_MAGIC):
            raise SnapshotCorruptError(f"{self._path} is not a SimpleDB snapshot")

        nonce = blob[len(SNAPSHOT_MAGIC):header_size]
        try:
            return self._aesgcm.decrypt(nonce, blob[header_size:], SNAPSHOT_AAD)
        except InvalidTag as e:
            raise SnapshotCorruptError(
                f"cannot decrypt {self._path}: wrong key or corrupted file"
            ) from e

    def load(self) -> dict[str, Table]:
        """Read, decrypt and decode the snapshot.

        Returns:
            The stored tables, or an empty mapping if no snapshot exists.

        Raises:
            SnapshotCorruptError: If the snapshot cannot be decrypted or decoded.
        """
        with trace_span("snapshot.load", {"path": str(self._path)}):
            start = time.perf_counter()
            try:
                blob = self._path.read_bytes()
            except FileNotFoundError:
                logger.info("snapshot_absent", path=str(self._path))
                return {}

            plaintext = self.decrypt(blob)
            try:
                tables = decode_tables(plaintext)
            except ValueError as e:
                raise SnapshotCorruptError(f"cannot decode {self._path}: {e}") from e

            elapsed = time.perf_counter() - start
            self._metrics.snapshot_load_seconds.observe(elapsed)
            logger.info(
                "snapshot_loaded",
                path=str(self._path),
                tables=len(tables),
                duration_ms=round(elapsed * 1000, 3),
            )
            return tables
