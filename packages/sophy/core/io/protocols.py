"""Protocols for storage adapters.

Defines the async-first Adapter contract every backend implements and the
ByteSink protocol returned by the streaming write operations.
"""

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from typing import Literal, Protocol

from .models import NodeMeta


class ByteSink(Protocol):
    """Writable byte stream handed out by the *_stream write operations."""

    async def write(self, data: bytes) -> int:
        """Write a chunk, returning the number of bytes accepted."""
        ...


class Adapter(Protocol):
    """
    Protocol for storage adapters (async-first).

    All paths are virtual paths relative to the adapter root. Implementations
    join them to the root before touching storage and reject paths that escape
    it with ValueError.

    Every returned NodeMeta carries a normalized virtual path.
    """

    root: object

    # Existence and metadata
    async def has(self, path: str) -> bool:
        """Check whether a file or directory exists. Never raises."""
        ...

    async def stat(self, path: str) -> NodeMeta:
        """
        Classify an existing entry.

        Raises:
            NotFoundError: If path does not exist
        """
        ...

    async def get_size(self, path: str) -> int:
        """
        Get size of a file or directory entry in bytes.

        Raises:
            NotFoundError: If path does not exist
        """
        ...

    async def get_mime(self, path: str) -> str | Literal[False]:
        """
        Detect the media type of a file.

        Returns:
            Media type string, or False when undetectable

        Raises:
            FilesystemError: Only for I/O failures, never for detection failure
        """
        ...

    # Reading
    async def read(self, path: str) -> str:
        """
        Read a whole file as text.

        Raises:
            NotFoundError: If file doesn't exist
            NotFileError: If path is a directory
            StorageIOError: On read failure
        """
        ...

    def read_stream(self, path: str) -> AsyncIterator[bytes]:
        """
        Read a file as a lazy sequence of byte chunks.

        The iterator is finite and not restartable. Errors surface on the
        first iteration, not at call time.
        """
        ...

    async def list_children(self, path: str) -> list[NodeMeta]:
        """
        List direct children of a directory, in backend enumeration order.

        Raises:
            NotFoundError: If directory doesn't exist
            NotDirectoryError: If path is not a directory
        """
        ...

    # Writing (create-or-replace; write/update/put are equivalent)
    async def write(self, path: str, contents: str | bytes) -> NodeMeta:
        """Write a file, returning FILE metadata."""
        ...

    async def update(self, path: str, contents: str | bytes) -> NodeMeta:
        """Update a file, returning FILE metadata."""
        ...

    async def put(self, path: str, contents: str | bytes) -> NodeMeta:
        """Create or update a file, returning FILE metadata."""
        ...

    def write_stream(self, path: str) -> AbstractAsyncContextManager[ByteSink]:
        """Open a sink writing a new file."""
        ...

    def update_stream(self, path: str) -> AbstractAsyncContextManager[ByteSink]:
        """Open a sink replacing a file."""
        ...

    def put_stream(self, path: str) -> AbstractAsyncContextManager[ByteSink]:
        """Open a sink creating or replacing a file."""
        ...

    async def append(self, path: str, contents: str | bytes) -> NodeMeta:
        """Append contents to a file (created if missing)."""
        ...

    async def prepend(self, path: str, contents: str | bytes) -> NodeMeta:
        """
        Insert contents before the existing content of a file.

        Raises:
            NotFoundError: If file doesn't exist
        """
        ...

    # Tree operations
    async def move(self, path: str, new_path: str) -> NodeMeta:
        """
        Move a file or directory. Result type is UNKNOWN.

        Raises:
            NotFoundError: If source doesn't exist
        """
        ...

    async def copy(self, path: str, new_path: str) -> NodeMeta:
        """
        Copy a file or a whole directory subtree. Result type is UNKNOWN.

        Raises:
            NotFoundError: If source doesn't exist
        """
        ...

    async def delete(self, path: str) -> None:
        """
        Delete a file, or a directory recursively.

        Raises:
            NotFoundError: If path doesn't exist
        """
        ...

    async def make_directory(self, path: str) -> NodeMeta:
        """Create a directory and its parents. Idempotent."""
        ...
