"""Models for the filesystem abstraction layer.

Provides the node type enumeration and the metadata transfer object that
adapters hand to the facade.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class NodeType(str, Enum):
    """Kind of a filesystem entry."""

    FILE = "file"
    DIRECTORY = "directory"
    UNKNOWN = "unknown"  # Transient: backend could not classify cheaply


class NodeMeta(BaseModel):
    """Minimal description of a filesystem entry produced by an adapter.

    Attributes:
        path: Normalized virtual path (leading "/", relative to the adapter root)
        type: Kind of the entry
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Normalized virtual path relative to the adapter root")
    type: NodeType = Field(description="Kind of the entry")

    @classmethod
    def file(cls, path: str) -> "NodeMeta":
        return cls(path=path, type=NodeType.FILE)

    @classmethod
    def directory(cls, path: str) -> "NodeMeta":
        return cls(path=path, type=NodeType.DIRECTORY)

    @classmethod
    def unknown(cls, path: str) -> "NodeMeta":
        return cls(path=path, type=NodeType.UNKNOWN)
