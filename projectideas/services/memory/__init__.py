"""
In-memory collaborator services for tests and local runs.
"""

from .notifications import MemoryEmailService, MemoryNotificationService
from .search_index import MemorySearchIndex

__all__ = [
    "MemoryEmailService",
    "MemoryNotificationService",
    "MemorySearchIndex",
]
