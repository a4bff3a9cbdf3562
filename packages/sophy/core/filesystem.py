"""Sophy facade: the client-facing entry point of the virtual filesystem.

Forwards every operation to a storage adapter and turns the NodeMeta the
adapter returns into File and Directory handles bound to this instance.

Example:
    >>> from sophy.core.filesystem import make_local
    >>> fs = make_local("/tmp/sophy")
    >>> greeting = await fs.write("/a.txt", "world")
    >>> await greeting.prepend("hello ")
    >>> await greeting.read()
    'hello world'
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, overload

from sophy.core.io import (
    Adapter,
    ByteSink,
    LocalAdapter,
    MemoryAdapter,
    NodeMeta,
    NodeType,
    UnknownNodeTypeError,
)
from sophy.core.nodes import AnyNode, Directory, File

if TYPE_CHECKING:
    from sophy.core.config.models import SophyConfig

logger = logging.getLogger(__name__)


class Sophy:
    """
    Virtual filesystem facade over a single adapter.

    Metadata is resolved into handles strictly: FILE becomes File, DIRECTORY
    becomes Directory, and UNKNOWN raises UnknownNodeTypeError. move() and
    copy() get UNKNOWN back from adapters; pass kind= when the caller knows
    what it is moving (handles do), or re-stat the destination with get().
    """

    def __init__(self, adapter: Adapter) -> None:
        self.adapter = adapter

    @classmethod
    def from_config(cls, config: SophyConfig) -> Sophy:
        """
        Build a facade over a LocalAdapter described by config.

        Raises:
            ValueError: If the config has no adapter section
        """
        if config.adapter is None:
            raise ValueError("SophyConfig.adapter is required to build a local filesystem")
        return cls(LocalAdapter.from_config(config.adapter))

    def __repr__(self) -> str:
        return f"Sophy(adapter={self.adapter!r})"

    @overload
    def node_from_meta(self, meta: NodeMeta, kind: Literal[NodeType.FILE]) -> File: ...

    @overload
    def node_from_meta(self, meta: NodeMeta, kind: Literal[NodeType.DIRECTORY]) -> Directory: ...

    @overload
    def node_from_meta(self, meta: NodeMeta, kind: NodeType | None = None) -> AnyNode: ...

    def node_from_meta(self, meta: NodeMeta, kind: NodeType | None = None) -> AnyNode:
        """
        Wrap adapter metadata into a handle.

        Args:
            meta: Metadata returned by the adapter
            kind: Caller-known kind used only when meta.type is UNKNOWN

        Returns:
            File or Directory handle bound to this instance

        Raises:
            UnknownNodeTypeError: If the kind cannot be determined
        """
        node_type = meta.type
        if node_type is NodeType.UNKNOWN and kind is not None:
            node_type = kind

        match node_type:
            case NodeType.FILE:
                return File(self, meta.path)
            case NodeType.DIRECTORY:
                return Directory(self, meta.path)
            case _:
                raise UnknownNodeTypeError(
                    message="Unknown node type, re-stat the path to classify it",
                    operation="resolve",
                    path=meta.path,
                )

    # Existence and metadata

    async def has(self, path: str) -> bool:
        return await self.adapter.has(path)

    async def get(self, path: str) -> AnyNode:
        """Re-stat a path and return a handle of its current kind."""
        return self.node_from_meta(await self.adapter.stat(path))

    async def get_size(self, path: str) -> int:
        return await self.adapter.get_size(path)

    async def get_mime(self, path: str) -> str | Literal[False]:
        return await self.adapter.get_mime(path)

    # Reading

    async def read(self, path: str) -> str:
        return await self.adapter.read(path)

    def read_stream(self, path: str) -> AsyncIterator[bytes]:
        return self.adapter.read_stream(path)

    async def list_children(self, path: str) -> list[AnyNode]:
        metas = await self.adapter.list_children(path)
        return [self.node_from_meta(meta) for meta in metas]

    # Writing

    async def write(self, path: str, contents: str | bytes) -> File:
        return self.node_from_meta(await self.adapter.write(path, contents), NodeType.FILE)

    async def update(self, path: str, contents: str | bytes) -> File:
        return self.node_from_meta(await self.adapter.update(path, contents), NodeType.FILE)

    async def put(self, path: str, contents: str | bytes) -> File:
        return self.node_from_meta(await self.adapter.put(path, contents), NodeType.FILE)

    def write_stream(self, path: str) -> AbstractAsyncContextManager[ByteSink]:
        return self.adapter.write_stream(path)

    def update_stream(self, path: str) -> AbstractAsyncContextManager[ByteSink]:
        return self.adapter.update_stream(path)

    def put_stream(self, path: str) -> AbstractAsyncContextManager[ByteSink]:
        return self.adapter.put_stream(path)

    async def append(self, path: str, contents: str | bytes) -> File:
        return self.node_from_meta(await self.adapter.append(path, contents), NodeType.FILE)

    async def prepend(self, path: str, contents: str | bytes) -> File:
        return self.node_from_meta(await self.adapter.prepend(path, contents), NodeType.FILE)

    # Tree operations

    async def move(self, path: str, new_path: str, *, kind: NodeType | None = None) -> AnyNode:
        """
        Move a file or directory.

        Raises:
            NotFoundError: If the source does not exist
            UnknownNodeTypeError: If kind is not given (the adapter does not classify)
        """
        meta = await self.adapter.move(path, new_path)
        logger.debug("Moved %s -> %s", path, meta.path)
        return self.node_from_meta(meta, kind)

    async def copy(self, path: str, new_path: str, *, kind: NodeType | None = None) -> AnyNode:
        """
        Copy a file or directory subtree.

        Raises:
            NotFoundError: If the source does not exist
            UnknownNodeTypeError: If kind is not given (the adapter does not classify)
        """
        meta = await self.adapter.copy(path, new_path)
        logger.debug("Copied %s -> %s", path, meta.path)
        return self.node_from_meta(meta, kind)

    async def delete(self, path: str) -> None:
        await self.adapter.delete(path)

    async def make_directory(self, path: str) -> Directory:
        return self.node_from_meta(await self.adapter.make_directory(path), NodeType.DIRECTORY)


def make_local(root: str | Path, **options: Any) -> Sophy:
    """
    Create a Sophy instance backed by a LocalAdapter.

    Args:
        root: Root directory of the filesystem
        **options: Extra LocalAdapter keyword arguments (encoding, chunk_size,
            atomic_prepend, temp_dir, create_root)
    """
    return Sophy(LocalAdapter(root, **options))


def make_memory(**options: Any) -> Sophy:
    """Create a Sophy instance backed by a fresh MemoryAdapter."""
    return Sophy(MemoryAdapter(**options))
