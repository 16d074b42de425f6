"""
Memory repository implementations for projectideas.

In-memory document store used by the tests and for local runs. It keeps
the same async interface as the production stores while avoiding any
external dependency.
"""

from .store import MemoryDocumentStore

__all__ = [
    "MemoryDocumentStore",
]
