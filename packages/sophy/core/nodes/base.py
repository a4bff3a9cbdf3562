"""Base class for filesystem handles."""

from __future__ import annotations

import posixpath
from abc import ABC
from typing import TYPE_CHECKING, ClassVar, Self

from sophy.core.io.models import NodeType

if TYPE_CHECKING:
    from sophy.core.filesystem import Sophy
    from sophy.core.nodes import AnyNode


class Node(ABC):
    """
    Lightweight reference to a file or directory of a Sophy instance.

    A handle is an intent object bound to a path, not a content cache: the
    entry may change underneath it, so check is_exists() before trusting it
    for anything safety-critical. The filesystem reference is shared, the
    facade does not track the handles it hands out.
    """

    type: ClassVar[NodeType]
    __match_args__ = ("path",)

    def __init__(self, filesystem: Sophy, path: str) -> None:
        self.filesystem = filesystem
        self.path = path

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path!r})"

    @property
    def name(self) -> str:
        """Last path segment ("" for the root)."""
        return posixpath.basename(self.path)

    @property
    def parent_path(self) -> str:
        """Virtual path of the containing directory ("/" at the root)."""
        return posixpath.dirname(self.path) or "/"

    def is_file(self) -> bool:
        return self.type is NodeType.FILE

    def is_directory(self) -> bool:
        return self.type is NodeType.DIRECTORY

    def set_path(self, path: str) -> None:
        self.path = path

    async def get_size(self) -> int:
        return await self.filesystem.get_size(self.path)

    async def is_exists(self) -> bool:
        return await self.filesystem.has(self.path)

    async def move(self, new_path: str) -> Self:
        """Move the entry and retarget this handle to the new path."""
        moved = await self.filesystem.move(self.path, new_path, kind=self.type)
        self.set_path(moved.path)
        return self

    async def copy(self, new_path: str) -> AnyNode:
        """Copy the entry, returning a new handle for the copy."""
        return await self.filesystem.copy(self.path, new_path, kind=self.type)

    async def delete(self) -> None:
        """Delete the entry. The handle is stale afterwards."""
        await self.filesystem.delete(self.path)
