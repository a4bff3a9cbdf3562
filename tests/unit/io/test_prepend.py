"""Tests for LocalAdapter.prepend() staging through a temporary file."""

from pathlib import Path

import aiofiles.os
import pytest

from sophy.core.io import LocalAdapter, NodeMeta, NotFoundError, StorageIOError


def _leftovers(directory: Path) -> list[str]:
    return sorted(p.name for p in directory.iterdir() if p.name.endswith(".prepend"))


class TestAtomicPrepend:
    """Tests for the default, rename-committed prepend."""

    async def test_prepend_to_existing_file(self, local_adapter: LocalAdapter):
        """Test "hello " before "world" yields "hello world"."""
        await local_adapter.write("/a.txt", "world")
        meta = await local_adapter.prepend("/a.txt", "hello ")

        assert meta == NodeMeta.file("/a.txt")
        assert await local_adapter.read("/a.txt") == "hello world"

    async def test_stacked_prepends_and_appends(self, local_adapter: LocalAdapter):
        """Test prepend P2 then P1 and append A1 then A2 order correctly."""
        await local_adapter.write("s.txt", "X")
        await local_adapter.prepend("s.txt", "P2")
        await local_adapter.prepend("s.txt", "P1")
        await local_adapter.append("s.txt", "A1")
        await local_adapter.append("s.txt", "A2")

        assert await local_adapter.read("s.txt") == "P1P2XA1A2"

    async def test_prepend_to_empty_file(self, local_adapter: LocalAdapter):
        """Test prepending to an empty file leaves just the new content."""
        await local_adapter.write("e.txt", "")
        await local_adapter.prepend("e.txt", "only")
        assert await local_adapter.read("e.txt") == "only"

    async def test_prepend_empty_contents_is_noop(self, local_adapter: LocalAdapter):
        """Test prepending nothing keeps the file unchanged."""
        await local_adapter.write("n.txt", "same")
        await local_adapter.prepend("n.txt", "")
        assert await local_adapter.read("n.txt") == "same"

    async def test_prepend_larger_than_chunk_size(self, storage_root: Path):
        """Test multi-chunk originals are preserved byte for byte."""
        adapter = LocalAdapter(storage_root, chunk_size=7)
        original = bytes(range(256)) * 5
        await adapter.write("big.bin", original)

        await adapter.prepend("big.bin", b"HEAD")

        assert (storage_root / "big.bin").read_bytes() == b"HEAD" + original

    async def test_prepend_preserves_permissions(
        self, local_adapter: LocalAdapter, storage_root: Path
    ):
        """Test the committed file keeps the original mode bits."""
        await local_adapter.write("x.sh", "echo hi\n")
        (storage_root / "x.sh").chmod(0o750)

        await local_adapter.prepend("x.sh", "#!/bin/sh\n")

        assert (storage_root / "x.sh").stat().st_mode & 0o777 == 0o750

    async def test_no_temporary_files_left_behind(
        self, local_adapter: LocalAdapter, storage_root: Path
    ):
        """Test the staging file is gone after success."""
        await local_adapter.write("a.txt", "world")
        await local_adapter.prepend("a.txt", "hello ")
        assert _leftovers(storage_root) == []

    async def test_failed_commit_keeps_original(
        self,
        local_adapter: LocalAdapter,
        storage_root: Path,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """Test a failing rename leaves the original intact and cleans up."""
        await local_adapter.write("a.txt", "world")

        async def failing_replace(*args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(aiofiles.os, "replace", failing_replace)

        with pytest.raises(StorageIOError) as exc_info:
            await local_adapter.prepend("a.txt", "hello ")

        assert exc_info.value.operation == "prepend"
        assert await local_adapter.read("a.txt") == "world"
        assert _leftovers(storage_root) == []

    async def test_missing_target_raises_not_found(
        self, local_adapter: LocalAdapter, storage_root: Path
    ):
        """Test prepend requires an existing file and creates nothing."""
        with pytest.raises(NotFoundError):
            await local_adapter.prepend("missing.txt", "data")

        assert not await local_adapter.has("missing.txt")
        assert _leftovers(storage_root) == []

    async def test_missing_parent_raises_not_found(self, local_adapter: LocalAdapter):
        """Test prepend does not create parent directories."""
        with pytest.raises(NotFoundError):
            await local_adapter.prepend("no/such/dir.txt", "data")
        assert not await local_adapter.has("no")


class TestStreamingPrepend:
    """Tests for prepend with atomic_prepend disabled."""

    @pytest.fixture
    def staging(self, tmp_path: Path) -> Path:
        """Provide a dedicated staging directory."""
        staging = tmp_path / "staging"
        staging.mkdir()
        return staging

    @pytest.fixture
    def adapter(self, storage_root: Path, staging: Path) -> LocalAdapter:
        """Provide an adapter that streams the commit through a staging dir."""
        return LocalAdapter(storage_root, atomic_prepend=False, temp_dir=staging, chunk_size=3)

    async def test_prepend_to_existing_file(self, adapter: LocalAdapter, staging: Path):
        """Test the result matches the atomic mode and staging is cleaned."""
        await adapter.write("a.txt", "world")
        await adapter.prepend("a.txt", "hello ")

        assert await adapter.read("a.txt") == "hello world"
        assert _leftovers(staging) == []

    async def test_missing_target_leaves_staging_clean(
        self, adapter: LocalAdapter, staging: Path
    ):
        """Test failure before commit removes the staging file."""
        with pytest.raises(NotFoundError):
            await adapter.prepend("missing.txt", "data")
        assert _leftovers(staging) == []

    async def test_system_temp_used_without_temp_dir(self, storage_root: Path):
        """Test non-atomic mode works without an explicit staging directory."""
        adapter = LocalAdapter(storage_root, atomic_prepend=False)
        await adapter.write("a.txt", "b")
        await adapter.prepend("a.txt", "a")
        assert await adapter.read("a.txt") == "ab"
