from __future__ import annotations

from typing import TYPE_CHECKING

from sophy.core.io.models import NodeType
from sophy.core.io.utils import join_path
from sophy.core.nodes.base import Node

if TYPE_CHECKING:
    from sophy.core.nodes import AnyNode
    from sophy.core.nodes.file import File


class Directory(Node):
    """Handle to a directory."""

    type = NodeType.DIRECTORY

    async def children(self) -> list[AnyNode]:
        """List direct children as handles, in backend enumeration order."""
        return await self.filesystem.list_children(self.path)

    async def make_directory(self, name: str) -> Directory:
        """Create a subdirectory (or nested subdirectories) below this one."""
        return await self.filesystem.make_directory(join_path(self.path, name))

    async def write_file(self, name: str, contents: str | bytes) -> File:
        """Create or replace a file below this directory."""
        return await self.filesystem.write(join_path(self.path, name), contents)
