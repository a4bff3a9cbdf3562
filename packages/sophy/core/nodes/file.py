from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from typing import Literal, Self

from sophy.core.io.models import NodeType
from sophy.core.io.protocols import ByteSink
from sophy.core.nodes.base import Node


class File(Node):
    """Handle to a file."""

    type = NodeType.FILE

    async def read(self) -> str:
        return await self.filesystem.read(self.path)

    def read_stream(self) -> AsyncIterator[bytes]:
        return self.filesystem.read_stream(self.path)

    async def get_mime(self) -> str | Literal[False]:
        return await self.filesystem.get_mime(self.path)

    async def write(self, contents: str | bytes) -> Self:
        await self.filesystem.write(self.path, contents)
        return self

    def write_stream(self) -> AbstractAsyncContextManager[ByteSink]:
        return self.filesystem.write_stream(self.path)

    async def append(self, contents: str | bytes) -> Self:
        await self.filesystem.append(self.path, contents)
        return self

    async def prepend(self, contents: str | bytes) -> Self:
        await self.filesystem.prepend(self.path, contents)
        return self
