"""Pytest configuration and fixtures for SimpleDB tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from simpledb.application import Database
from simpledb.infrastructure.config import Config, StorageConfig, WALConfig
from simpledb.infrastructure.metrics import MetricsRegistry

TEST_KEY = "test-secret-key"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with temporary paths."""
    return Config(
        storage=StorageConfig(
            snapshot_path=temp_dir / "data" / "database.snapshot",
            wal_path=temp_dir / "data" / "wal.log",
            encryption_key=TEST_KEY,
        ),
        wal=WALConfig(
            sync_mode="none",  # Faster for tests
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def database(test_config: Config, metrics_registry: MetricsRegistry) -> Generator[Database, None, None]:
    """Provide an opened database backed by temporary files."""
    db = Database.open(test_config.storage, test_config.wal, metrics=metrics_registry)
    yield db
    db.close()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "chaos: Fault injection tests")
    config.addinivalue_line("markers", "security: Security tests")
    config.addinivalue_line("markers", "slow: Slow tests")
