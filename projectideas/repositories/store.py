"""
DocumentStore protocol: the abstract partitioned document store.

The store holds JSON documents in named containers. Each container has one
partition key field (see ``projectideas.domain.containers``); an item is
identified by its ``id`` together with its partition key value, and that
pair is unique. Only the gateway talks to a store.

Implementations signal absence with ``ItemNotFoundError`` and duplicate
creates with ``ItemConflictError`` (both from ``errors``). Any other
failure surfaces as a ``DocumentStoreError`` and is not retried here.
"""

from typing import Any, Dict, List, Protocol, runtime_checkable

from projectideas.domain.containers import Container
from .query import Query


@runtime_checkable
class DocumentStore(Protocol):
    """Point reads, queries, writes and partition-scoped procedures."""

    async def read_item(
        self, container: Container, item_id: str, partition_key: str
    ) -> Dict[str, Any]:
        """Point read of a single item.

        Raises:
            ItemNotFoundError: If no such item exists
        """
        ...

    async def create_item(
        self, container: Container, item: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Create an item; the partition key is read from the item.

        Implementation Notes:
        - Must be atomic on (id, partition key): of two concurrent creates
          of the same key exactly one succeeds

        Raises:
            ItemConflictError: If the (id, partition key) already exists
        """
        ...

    async def replace_item(
        self,
        container: Container,
        item_id: str,
        partition_key: str,
        item: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Overwrite an existing item (last writer wins).

        Raises:
            ItemNotFoundError: If the item does not exist
        """
        ...

    async def delete_item(
        self, container: Container, item_id: str, partition_key: str
    ) -> None:
        """Delete an item.

        Raises:
            ItemNotFoundError: If the item does not exist
        """
        ...

    async def query_items(
        self, container: Container, query: Query
    ) -> List[Any]:
        """Run a query; returns documents, or values for projections."""
        ...

    async def count_items(self, container: Container, query: Query) -> int:
        """Count documents matching the query, ignoring offset/limit."""
        ...

    async def execute_procedure(
        self,
        container: Container,
        name: str,
        partition_key: str,
        params: List[Any],
    ) -> Any:
        """Run a registered stored procedure scoped to one partition."""
        ...
