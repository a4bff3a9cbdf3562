"""Scoped temporary files for staged writes.

A TemporaryFile is created on disk up front and removed when the owning
``async with`` block exits, on success and on failure alike.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from tempfile import NamedTemporaryFile

import aiofiles.os  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)


class TemporaryFile:
    """
    A temporary file path plus its release action.

    release() is idempotent and tolerates the file having been consumed
    (renamed or removed) by the caller.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    async def release(self) -> None:
        """Remove the file if it still exists."""
        if self._released:
            return
        self._released = True
        try:
            await aiofiles.os.remove(self.path)
        except FileNotFoundError:
            pass  # Already consumed
        except OSError as e:
            logger.warning("Failed to remove temporary file %s: %s", self.path, e)

    def __repr__(self) -> str:
        return f"TemporaryFile(path={str(self.path)!r}, released={self._released})"


@asynccontextmanager
async def temporary_file(
    dir: Path | None = None, prefix: str = ".sophy-", suffix: str = ".tmp"
) -> AsyncIterator[TemporaryFile]:
    """
    Provision an empty temporary file, released when the block exits.

    Args:
        dir: Directory to create the file in (system temp dir when None)
        prefix: File name prefix
        suffix: File name suffix

    Yields:
        TemporaryFile whose path exists and is empty
    """
    loop = asyncio.get_event_loop()

    def create_temp_file() -> str:
        tmp = NamedTemporaryFile(mode="wb", dir=dir, prefix=prefix, suffix=suffix, delete=False)
        tmp_path = tmp.name
        tmp.close()
        return tmp_path

    tmp_file = TemporaryFile(Path(await loop.run_in_executor(None, create_temp_file)))
    logger.debug("Acquired temporary file %s", tmp_file.path)
    try:
        yield tmp_file
    finally:
        await tmp_file.release()
