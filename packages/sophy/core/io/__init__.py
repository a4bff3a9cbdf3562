"""Storage adapter layer for Sophy.

Provides the async-first Adapter contract, the metadata exchanged with the
facade, and the local and in-memory adapter implementations.

Example:
    >>> from sophy.core.io import LocalAdapter
    >>> adapter = LocalAdapter("/tmp/sophy")
    >>> meta = await adapter.write("notes/today.txt", "world")
    >>> await adapter.prepend(meta.path, "hello ")
    >>> await adapter.read("notes/today.txt")
    'hello world'
"""

from .errors import (
    FilesystemError,
    FilesystemErrorData,
    NotDirectoryError,
    NotFileError,
    NotFoundError,
    StorageIOError,
    UnknownNodeTypeError,
    translate_os_errors,
)
from .impl_local import LocalAdapter
from .impl_memory import MemoryAdapter
from .mime import detect_mime
from .models import NodeMeta, NodeType
from .protocols import Adapter, ByteSink
from .tmp import TemporaryFile, temporary_file
from .utils import join_path, normalize_path

__all__ = [
    # Models
    "NodeMeta",
    "NodeType",
    # Protocols
    "Adapter",
    "ByteSink",
    # Implementations
    "LocalAdapter",
    "MemoryAdapter",
    # Errors
    "FilesystemError",
    "FilesystemErrorData",
    "NotDirectoryError",
    "NotFileError",
    "NotFoundError",
    "StorageIOError",
    "UnknownNodeTypeError",
    "translate_os_errors",
    # Utilities
    "TemporaryFile",
    "temporary_file",
    "detect_mime",
    "join_path",
    "normalize_path",
]
