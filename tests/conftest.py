"""Shared pytest fixtures for sophy tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from sophy.core.filesystem import Sophy, make_local, make_memory
from sophy.core.io import LocalAdapter, MemoryAdapter

# ============================================================================
# Path Fixtures
# ============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    """Provide an empty directory used as adapter root."""
    root = tmp_path / "storage"
    root.mkdir()
    return root


# ============================================================================
# Adapter Fixtures
# ============================================================================


@pytest.fixture
def local_adapter(storage_root: Path) -> LocalAdapter:
    """Provide a LocalAdapter rooted at a fresh directory."""
    return LocalAdapter(storage_root)


@pytest.fixture
def memory_adapter() -> MemoryAdapter:
    """Provide fresh MemoryAdapter instance."""
    return MemoryAdapter()


# ============================================================================
# Facade Fixtures
# ============================================================================


@pytest.fixture
def local_fs(storage_root: Path) -> Sophy:
    """Provide a Sophy instance over a LocalAdapter."""
    return make_local(storage_root)


@pytest.fixture(params=["local", "memory"])
def any_fs(request: pytest.FixtureRequest, storage_root: Path) -> Sophy:
    """Provide a Sophy instance over each adapter implementation."""
    if request.param == "local":
        return make_local(storage_root)
    return make_memory()
