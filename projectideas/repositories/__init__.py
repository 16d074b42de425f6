"""
Repository layer for projectideas.

The ``DocumentGateway`` is the only component that talks to a
``DocumentStore``; use cases depend on the gateway. Two store
implementations live in the ``memory`` and ``minio`` subpackages.
"""

from .errors import (
    DocumentNotFoundError,
    DocumentStoreError,
    EmptyPointReadError,
    EmptySingleDocumentQueryError,
    ItemConflictError,
    ItemNotFoundError,
)
from .gateway import ITEMS_PER_PAGE, DocumentGateway
from .procedures import UPDATE_USERNAME, update_username
from .query import (
    Query,
    Restriction,
    any_of,
    array_contains,
    eq,
    in_,
    query_by_id,
    query_by_id_and_partition_key,
    query_by_partition_key,
    query_by_partition_key_list,
    query_by_type,
)
from .store import DocumentStore

__all__ = [
    "DocumentGateway",
    "DocumentNotFoundError",
    "DocumentStore",
    "DocumentStoreError",
    "EmptyPointReadError",
    "EmptySingleDocumentQueryError",
    "ITEMS_PER_PAGE",
    "ItemConflictError",
    "ItemNotFoundError",
    "Query",
    "Restriction",
    "UPDATE_USERNAME",
    "any_of",
    "array_contains",
    "eq",
    "in_",
    "query_by_id",
    "query_by_id_and_partition_key",
    "query_by_partition_key",
    "query_by_partition_key_list",
    "query_by_type",
    "update_username",
]
