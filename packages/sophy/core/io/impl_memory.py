"""In-memory adapter for fast, isolated testing.

Simulates storage without disk I/O.
Async operations complete immediately but maintain async interface.
"""

import errno
import posixpath
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Literal

from .errors import StorageIOError, translate_os_errors
from .mime import SAMPLE_SIZE, detect_mime
from .models import NodeMeta, NodeType
from .protocols import ByteSink
from .utils import ROOT, normalize_path


class _MemorySink:
    """Buffers written chunks; the owning adapter commits them on close."""

    def __init__(self) -> None:
        self.chunks: list[bytes] = []

    async def write(self, data: bytes) -> int:
        self.chunks.append(bytes(data))
        return len(data)


class MemoryAdapter:
    """
    In-memory async adapter for testing.

    Files are byte strings keyed by virtual path; directories are a set of
    virtual paths with the root always present. Children are listed in
    insertion order. Not thread-safe (use per-test instance).
    """

    def __init__(self, encoding: str = "utf-8", chunk_size: int = 64 * 1024) -> None:
        self.root = ROOT
        self.encoding = encoding
        self.chunk_size = chunk_size
        self._files: dict[str, bytes] = {}
        self._dirs: dict[str, None] = {ROOT: None}  # Ordered set

    def __repr__(self) -> str:
        return f"MemoryAdapter(files={len(self._files)}, dirs={len(self._dirs)})"

    def _encode(self, contents: str | bytes) -> bytes:
        if isinstance(contents, bytes):
            return contents
        return contents.encode(self.encoding)

    def _ensure_parents(self, path: str) -> None:
        """Create every ancestor directory of path (sync helper)."""
        parent = posixpath.dirname(path)
        missing: list[str] = []
        while parent not in self._dirs:
            if parent in self._files:
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", parent)
            missing.append(parent)
            parent = posixpath.dirname(parent)
        for directory in reversed(missing):
            self._dirs[directory] = None

    def _require_file(self, path: str) -> bytes:
        if path in self._dirs:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", path)
        if path not in self._files:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        return self._files[path]

    def _require_exists(self, path: str) -> None:
        if path not in self._files and path not in self._dirs:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)

    def _subtree(self, path: str) -> tuple[list[str], list[str]]:
        """Return (files, dirs) at or below path."""
        prefix = path.rstrip("/") + "/"
        files = [p for p in self._files if p == path or p.startswith(prefix)]
        dirs = [p for p in self._dirs if p == path or p.startswith(prefix)]
        return files, dirs

    def _store(self, operation: str, path: str, data: bytes) -> NodeMeta:
        virtual = normalize_path(path)
        with translate_os_errors(operation, virtual):
            if virtual in self._dirs:
                raise IsADirectoryError(errno.EISDIR, "Is a directory", virtual)
            self._ensure_parents(virtual)
            self._files[virtual] = data
        return NodeMeta.file(virtual)

    # Existence and metadata

    async def has(self, path: str) -> bool:
        try:
            virtual = normalize_path(path)
        except ValueError:
            return False
        return virtual in self._files or virtual in self._dirs

    async def stat(self, path: str) -> NodeMeta:
        virtual = normalize_path(path)
        with translate_os_errors("stat", virtual):
            self._require_exists(virtual)
        kind = NodeType.DIRECTORY if virtual in self._dirs else NodeType.FILE
        return NodeMeta(path=virtual, type=kind)

    async def get_size(self, path: str) -> int:
        virtual = normalize_path(path)
        with translate_os_errors("get_size", virtual):
            self._require_exists(virtual)
        return len(self._files.get(virtual, b""))

    async def get_mime(self, path: str) -> str | Literal[False]:
        virtual = normalize_path(path)
        with translate_os_errors("get_mime", virtual):
            data = self._require_file(virtual)
        return detect_mime(posixpath.basename(virtual), data[:SAMPLE_SIZE])

    # Reading

    async def read(self, path: str) -> str:
        virtual = normalize_path(path)
        with translate_os_errors("read", virtual):
            data = self._require_file(virtual)
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
        virtual = normalize_path(path)
        with translate_os_errors("read_stream", virtual):
            data = self._require_file(virtual)
        for offset in range(0, len(data), self.chunk_size):
            yield data[offset : offset + self.chunk_size]

    async def list_children(self, path: str) -> list[NodeMeta]:
        virtual = normalize_path(path)
        with translate_os_errors("list_children", virtual):
            if virtual in self._files:
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", virtual)
            self._require_exists(virtual)

        children: list[NodeMeta] = []
        for dir_path in self._dirs:
            if dir_path != ROOT and posixpath.dirname(dir_path) == virtual:
                children.append(NodeMeta.directory(dir_path))
        for file_path in self._files:
            if posixpath.dirname(file_path) == virtual:
                children.append(NodeMeta.file(file_path))
        return children

    # Writing

    async def write(self, path: str, contents: str | bytes) -> NodeMeta:
        return self._store("write", path, self._encode(contents))

    async def update(self, path: str, contents: str | bytes) -> NodeMeta:
        return self._store("update", path, self._encode(contents))

    async def put(self, path: str, contents: str | bytes) -> NodeMeta:
        return self._store("put", path, self._encode(contents))

    async def append(self, path: str, contents: str | bytes) -> NodeMeta:
        virtual = normalize_path(path)
        existing = self._files.get(virtual, b"")
        return self._store("append", virtual, existing + self._encode(contents))

    async def prepend(self, path: str, contents: str | bytes) -> NodeMeta:
        virtual = normalize_path(path)
        with translate_os_errors("prepend", virtual):
            existing = self._require_file(virtual)
        return self._store("prepend", virtual, self._encode(contents) + existing)

    @asynccontextmanager
    async def _open_sink(self, operation: str, path: str) -> AsyncIterator[ByteSink]:
        virtual = normalize_path(path)
        self._store(operation, virtual, b"")
        sink = _MemorySink()
        try:
            yield sink
        finally:
            self._files[virtual] = b"".join(sink.chunks)

    def write_stream(self, path: str) -> AbstractAsyncContextManager[ByteSink]:
        return self._open_sink("write_stream", path)

    def update_stream(self, path: str) -> AbstractAsyncContextManager[ByteSink]:
        return self._open_sink("update_stream", path)

    def put_stream(self, path: str) -> AbstractAsyncContextManager[ByteSink]:
        return self._open_sink("put_stream", path)

    # Tree operations

    def _transfer(self, operation: str, path: str, new_path: str, remove_source: bool) -> NodeMeta:
        virtual = normalize_path(path)
        new_virtual = normalize_path(new_path)
        with translate_os_errors(operation, virtual):
            self._require_exists(virtual)
            if new_virtual == virtual or new_virtual.startswith(virtual.rstrip("/") + "/"):
                raise OSError(errno.EINVAL, "Cannot place an entry inside itself", new_virtual)
            if virtual in self._files:
                if new_virtual in self._dirs:
                    raise IsADirectoryError(errno.EISDIR, "Is a directory", new_virtual)
            else:
                if new_virtual in self._files:
                    raise NotADirectoryError(errno.ENOTDIR, "Not a directory", new_virtual)
                # Like rename(2): a directory only replaces an empty directory
                target_files, target_dirs = self._subtree(new_virtual)
                if remove_source and (target_files or len(target_dirs) > 1):
                    raise OSError(errno.ENOTEMPTY, "Directory not empty", new_virtual)
            self._ensure_parents(new_virtual)

            files, dirs = self._subtree(virtual)
            moved_files = {f: new_virtual + f[len(virtual) :] for f in files}
            moved_dirs = [new_virtual + d[len(virtual) :] for d in dirs]
            for source, target in moved_files.items():
                self._files[target] = self._files[source]
            for target in moved_dirs:
                self._dirs[target] = None
            if remove_source:
                for source in files:
                    del self._files[source]
                for source in dirs:
                    del self._dirs[source]
        return NodeMeta.unknown(new_virtual)

    async def move(self, path: str, new_path: str) -> NodeMeta:
        return self._transfer("move", path, new_path, remove_source=True)

    async def copy(self, path: str, new_path: str) -> NodeMeta:
        return self._transfer("copy", path, new_path, remove_source=False)

    async def delete(self, path: str) -> None:
        virtual = normalize_path(path)
        with translate_os_errors("delete", virtual):
            self._require_exists(virtual)
        files, dirs = self._subtree(virtual)
        for file_path in files:
            del self._files[file_path]
        for dir_path in dirs:
            if dir_path != ROOT:
                del self._dirs[dir_path]

    async def make_directory(self, path: str) -> NodeMeta:
        virtual = normalize_path(path)
        with translate_os_errors("make_directory", virtual):
            if virtual in self._files:
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", virtual)
            self._ensure_parents(virtual)
            self._dirs[virtual] = None
        return NodeMeta.directory(virtual)
