"""
Collaborator services consumed by the use cases.

Search index, notifications and email are owned outside this package and
declared here as ``@runtime_checkable`` Protocols; the ``memory``
subpackage has in-process implementations.
"""

from .notifications import EmailService, NotificationService
from .search_index import SearchIndex

__all__ = [
    "EmailService",
    "NotificationService",
    "SearchIndex",
]
