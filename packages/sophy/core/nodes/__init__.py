"""Typed handles returned by the Sophy facade.

A handle is either a File or a Directory; match on the variant:

    >>> match node:
    ...     case File(path):
    ...         text = await node.read()
    ...     case Directory(path):
    ...         children = await node.children()
"""

from sophy.core.nodes.base import Node
from sophy.core.nodes.directory import Directory
from sophy.core.nodes.file import File

AnyNode = File | Directory

__all__ = [
    "AnyNode",
    "Directory",
    "File",
    "Node",
]
