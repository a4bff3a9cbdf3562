"""Local filesystem adapter using aiofiles for async I/O.

Every virtual path is resolved under a fixed root directory. Blocking
primitives with no aiofiles counterpart (tree copy/removal, directory
scanning) run in the default executor.
"""

import asyncio
import errno
import os
import shutil
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from functools import partial
from pathlib import Path
from stat import S_ISDIR, S_ISREG
from typing import TYPE_CHECKING, Literal

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]

from sophy.core.utils.logging import get_logger

from .errors import StorageIOError, translate_os_errors
from .mime import SAMPLE_SIZE, detect_mime
from .models import NodeMeta, NodeType
from .protocols import ByteSink
from .tmp import temporary_file
from .utils import join_path, normalize_path, resolve_under

if TYPE_CHECKING:
    from sophy.core.config.models import LocalAdapterConfig

DEFAULT_CHUNK_SIZE = 64 * 1024


def _type_from_mode(mode: int) -> NodeType:
    if S_ISREG(mode):
        return NodeType.FILE
    if S_ISDIR(mode):
        return NodeType.DIRECTORY
    return NodeType.UNKNOWN


def _scan_directory(path: Path) -> list[tuple[str, NodeType]]:
    """Enumerate direct children with their kinds (blocking)."""
    entries: list[tuple[str, NodeType]] = []
    with os.scandir(path) as it:
        for entry in it:
            if entry.is_file():
                kind = NodeType.FILE
            elif entry.is_dir():
                kind = NodeType.DIRECTORY
            else:
                kind = NodeType.UNKNOWN  # Broken symlink, socket, fifo, ...
            entries.append((entry.name, kind))
    return entries


def _remove_entry(path: Path) -> None:
    """Remove a file, symlink or whole directory tree (blocking)."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _clear_directory(path: Path) -> None:
    """Remove every entry below path, keeping path itself (blocking)."""
    with os.scandir(path) as it:
        entries = [Path(entry.path) for entry in it]
    for entry in entries:
        _remove_entry(entry)


def _is_same_or_inside(virtual: str, new_virtual: str) -> bool:
    return new_virtual == virtual or new_virtual.startswith(virtual.rstrip("/") + "/")


class LocalAdapter:
    """
    Adapter over a real directory tree.

    Writes create missing parent directories. prepend() stages the new
    content through a temporary file so memory use stays bounded by
    chunk_size regardless of the file size.
    """

    def __init__(
        self,
        root: str | Path,
        *,
        encoding: str = "utf-8",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        atomic_prepend: bool = True,
        temp_dir: str | Path | None = None,
        create_root: bool = True,
    ) -> None:
        """
        Initialize local adapter.

        Args:
            root: Directory all virtual paths are resolved under
            encoding: Text encoding for str contents and read()
            chunk_size: Bytes moved per step by streaming operations
            atomic_prepend: Commit prepend() with an atomic rename (all-or-nothing)
                instead of streaming over the target
            temp_dir: Staging directory for non-atomic prepend (system temp when None)
            create_root: Create root if it does not exist
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.root = Path(root).expanduser().resolve()
        self.encoding = encoding
        self.chunk_size = chunk_size
        self.atomic_prepend = atomic_prepend
        self.temp_dir = Path(temp_dir) if temp_dir is not None else None
        self._logger = get_logger(__name__, root=str(self.root))

        if create_root:
            self.root.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_config(cls, config: "LocalAdapterConfig") -> "LocalAdapter":
        """Build an adapter from validated configuration."""
        return cls(
            config.root,
            encoding=config.encoding,
            chunk_size=config.chunk_size,
            atomic_prepend=config.atomic_prepend,
            temp_dir=config.temp_dir,
            create_root=config.create_root,
        )

    def __repr__(self) -> str:
        return f"LocalAdapter(root={str(self.root)!r})"

    def _resolve(self, path: str) -> tuple[str, Path]:
        """Return (virtual path, real path) for a client path.

        Raises:
            ValueError: If the path, or a symlink along it, leads outside the root
        """
        virtual = normalize_path(path)
        real = resolve_under(self.root, virtual)

        # Security: symlinks inside the root must not lead out of it
        try:
            real.resolve().relative_to(self.root)
        except ValueError as e:
            raise ValueError(f"Path traversal detected: {path} escapes {self.root}") from e

        return virtual, real

    async def _make_parents(self, real: Path) -> None:
        """Create the parent directories of real; a file in the way is ENOTDIR."""
        try:
            await aiofiles.os.makedirs(real.parent, exist_ok=True)
        except FileExistsError as e:
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", str(real.parent)) from e

    async def _check_target(
        self, virtual: str, new_virtual: str, new_real: Path, source_is_dir: bool
    ) -> None:
        """Reject move/copy destinations the source cannot take the place of."""
        if _is_same_or_inside(virtual, new_virtual):
            raise OSError(errno.EINVAL, "Cannot place an entry inside itself", new_virtual)
        try:
            target = await aiofiles.os.stat(new_real)
        except FileNotFoundError:
            return
        target_is_dir = S_ISDIR(target.st_mode)
        if target_is_dir and not source_is_dir:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", new_virtual)
        if source_is_dir and not target_is_dir:
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", new_virtual)

    def _encode(self, contents: str | bytes) -> bytes:
        if isinstance(contents, bytes):
            return contents
        return contents.encode(self.encoding)

    async def _pipe(self, source: Path, target: Path, mode: str) -> int:
        """Stream source onto target chunk by chunk, returning bytes copied."""
        copied = 0
        async with aiofiles.open(source, "rb") as reader, aiofiles.open(target, mode) as writer:
            while True:
                chunk = await reader.read(self.chunk_size)
                if not chunk:
                    break
                await writer.write(chunk)
                copied += len(chunk)
        return copied

    # Existence and metadata

    async def has(self, path: str) -> bool:
        """Check existence; any access error or invalid path yields False."""
        try:
            _, real = self._resolve(path)
        except ValueError:
            return False
        return bool(await aiofiles.os.path.exists(real))

    async def stat(self, path: str) -> NodeMeta:
        """Classify an existing entry."""
        virtual, real = self._resolve(path)
        with translate_os_errors("stat", virtual):
            st = await aiofiles.os.stat(real)
        return NodeMeta(path=virtual, type=_type_from_mode(st.st_mode))

    async def get_size(self, path: str) -> int:
        """Get entry size in bytes."""
        virtual, real = self._resolve(path)
        with translate_os_errors("get_size", virtual):
            st = await aiofiles.os.stat(real)
        return int(st.st_size)

    async def get_mime(self, path: str) -> str | Literal[False]:
        """Detect media type from the file head; False when undetectable."""
        virtual, real = self._resolve(path)
        with translate_os_errors("get_mime", virtual):
            async with aiofiles.open(real, "rb") as f:
                sample = await f.read(SAMPLE_SIZE)
        return detect_mime(real.name, sample)

    # Reading

    async def read(self, path: str) -> str:
        """Read a whole file as text."""
        virtual, real = self._resolve(path)
        with translate_os_errors("read", virtual):
            async with aiofiles.open(real, "rb") as f:
                data: bytes = await f.read()
        try:
            return data.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise StorageIOError(
                message=f"Content is not valid {self.encoding}",
                operation="read",
                path=virtual,
                cause=e,
            ) from e

    async def read_stream(self, path: str) -> AsyncIterator[bytes]:
        """Yield file content in chunk_size pieces (lazy, not restartable)."""
        virtual, real = self._resolve(path)
        with translate_os_errors("read_stream", virtual):
            f = await aiofiles.open(real, "rb")
        try:
            while True:
                with translate_os_errors("read_stream", virtual):
                    chunk = await f.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            await f.close()

    async def list_children(self, path: str) -> list[NodeMeta]:
        """List direct children in enumeration order (not sorted)."""
        virtual, real = self._resolve(path)
        loop = asyncio.get_event_loop()
        with translate_os_errors("list_children", virtual):
            entries = await loop.run_in_executor(None, _scan_directory, real)
        return [NodeMeta(path=join_path(virtual, name), type=kind) for name, kind in entries]

    # Writing

    async def _write_contents(
        self, operation: str, path: str, contents: str | bytes, mode: str = "wb"
    ) -> NodeMeta:
        virtual, real = self._resolve(path)
        data = self._encode(contents)
        with translate_os_errors(operation, virtual):
            await self._make_parents(real)
            async with aiofiles.open(real, mode) as f:
                await f.write(data)
        self._logger.debug("%s: %d bytes to %s", operation, len(data), virtual)
        return NodeMeta.file(virtual)

    async def write(self, path: str, contents: str | bytes) -> NodeMeta:
        return await self._write_contents("write", path, contents)

    async def update(self, path: str, contents: str | bytes) -> NodeMeta:
        return await self._write_contents("update", path, contents)

    async def put(self, path: str, contents: str | bytes) -> NodeMeta:
        return await self._write_contents("put", path, contents)

    async def append(self, path: str, contents: str | bytes) -> NodeMeta:
        return await self._write_contents("append", path, contents, mode="ab")

    @asynccontextmanager
    async def _open_sink(self, operation: str, path: str) -> AsyncIterator[ByteSink]:
        virtual, real = self._resolve(path)
        with translate_os_errors(operation, virtual):
            await self._make_parents(real)
            f = await aiofiles.open(real, "wb")
        try:
            yield f
        finally:
            await f.close()

    def write_stream(self, path: str) -> AbstractAsyncContextManager[ByteSink]:
        return self._open_sink("write_stream", path)

    def update_stream(self, path: str) -> AbstractAsyncContextManager[ByteSink]:
        return self._open_sink("update_stream", path)

    def put_stream(self, path: str) -> AbstractAsyncContextManager[ByteSink]:
        return self._open_sink("put_stream", path)

    async def prepend(self, path: str, contents: str | bytes) -> NodeMeta:
        """
        Insert contents before the existing bytes of a file.

        Three stages through a scoped temporary file:
            A. write contents to the temp file
            B. stream the original file onto the end of the temp file
            C. commit the temp file onto the target

        With atomic_prepend the temp file sits next to the target and stage C
        is an atomic rename, so any failure leaves the original untouched.
        Otherwise stage C streams over the target and a failure there can
        leave it partially written.

        Raises:
            NotFoundError: If the target does not exist (nothing is modified)
        """
        virtual, real = self._resolve(path)
        data = self._encode(contents)
        staging_dir = real.parent if self.atomic_prepend else self.temp_dir

        with translate_os_errors("prepend", virtual):
            async with temporary_file(
                dir=staging_dir, prefix=f".{real.name}.", suffix=".prepend"
            ) as staged:
                async with aiofiles.open(staged.path, "wb") as f:
                    await f.write(data)

                original_size = await self._pipe(real, staged.path, "ab")

                if self.atomic_prepend:
                    loop = asyncio.get_event_loop()
                    await loop.run_in_executor(None, shutil.copymode, real, staged.path)
                    await aiofiles.os.replace(staged.path, real)
                else:
                    await self._pipe(staged.path, real, "wb")

        self._logger.debug(
            "prepend: %d bytes before %d existing bytes of %s", len(data), original_size, virtual
        )
        return NodeMeta.file(virtual)

    # Tree operations

    async def move(self, path: str, new_path: str) -> NodeMeta:
        """
        Rename a file or directory; the result is not reclassified.

        A file replaces an existing file; a directory replaces only an empty
        directory.
        """
        virtual, real = self._resolve(path)
        new_virtual, new_real = self._resolve(new_path)
        with translate_os_errors("move", virtual):
            st = await aiofiles.os.stat(real)
            await self._check_target(virtual, new_virtual, new_real, S_ISDIR(st.st_mode))
            await self._make_parents(new_real)
            await aiofiles.os.rename(real, new_real)
        self._logger.debug("move: %s -> %s", virtual, new_virtual)
        return NodeMeta.unknown(new_virtual)

    async def copy(self, path: str, new_path: str) -> NodeMeta:
        """
        Copy a file, or a whole directory subtree; the result is not reclassified.

        A directory copied onto an existing directory is merged into it.
        """
        virtual, real = self._resolve(path)
        new_virtual, new_real = self._resolve(new_path)
        loop = asyncio.get_event_loop()
        with translate_os_errors("copy", virtual):
            st = await aiofiles.os.stat(real)
            await self._check_target(virtual, new_virtual, new_real, S_ISDIR(st.st_mode))
            await self._make_parents(new_real)
            if S_ISDIR(st.st_mode):
                await loop.run_in_executor(
                    None, partial(shutil.copytree, real, new_real, dirs_exist_ok=True)
                )
            else:
                await loop.run_in_executor(None, shutil.copy2, real, new_real)
        self._logger.debug("copy: %s -> %s", virtual, new_virtual)
        return NodeMeta.unknown(new_virtual)

    async def delete(self, path: str) -> None:
        """Delete a file, or a directory recursively. Deleting "/" empties the root."""
        virtual, real = self._resolve(path)
        remove = _clear_directory if real == self.root else _remove_entry
        loop = asyncio.get_event_loop()
        with translate_os_errors("delete", virtual):
            await loop.run_in_executor(None, remove, real)
        self._logger.debug("delete: %s", virtual)

    async def make_directory(self, path: str) -> NodeMeta:
        """Create a directory with intermediate segments; existing directories are fine."""
        virtual, real = self._resolve(path)
        with translate_os_errors("make_directory", virtual):
            try:
                await aiofiles.os.makedirs(real, exist_ok=True)
            except FileExistsError as e:
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", str(real)) from e
        return NodeMeta.directory(virtual)
