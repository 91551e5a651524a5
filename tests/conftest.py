"""
Shared pytest fixtures for the taios test suite.

Provides fixtures for:
- Isolated TAIOS_HOME storage
- A fresh admin event bus per test
- Sample stream messages and domain events
"""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

# Importing taiosd.main loads the daemon config, so point storage somewhere
# disposable before test modules are collected
os.environ.setdefault("TAIOS_HOME", tempfile.mkdtemp(prefix="taios-test-"))

from taios_library.models.events import StreamMessage  # noqa: E402
from taiosd.services.event_bus import AdminEventBus  # noqa: E402

TIMESTAMP = "2024-05-01T12:00:00.000Z"


@pytest.fixture
def temp_storage_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test storage.

    Yields:
        Path to temporary directory (cleaned up after test)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_storage_env(temp_storage_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point TAIOS_HOME at a temporary directory.

    Args:
        temp_storage_dir: Temporary directory fixture
        monkeypatch: pytest monkeypatch fixture

    Returns:
        Path to temporary storage directory
    """
    monkeypatch.setenv("TAIOS_HOME", str(temp_storage_dir))
    monkeypatch.delenv("TAIOS_CONFIG_DIR", raising=False)
    monkeypatch.delenv("TAIOS_LOG_DIR", raising=False)
    return temp_storage_dir


@pytest.fixture(autouse=True)
def reset_event_bus() -> Generator[None, None, None]:
    """Give every test its own admin event bus."""
    AdminEventBus.reset()
    yield
    AdminEventBus.reset()


@pytest.fixture
def user_created_message() -> StreamMessage:
    """Sample user_created stream message."""
    return StreamMessage(
        type="user_created",
        timestamp=TIMESTAMP,
        payload={"userId": "u-42", "email": "ada@example.com"},
    )
