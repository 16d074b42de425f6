"""
Memory implementation of DocumentStore.

This module provides an in-memory partitioned document store. Containers
are dictionaries of partitions, partitions are dictionaries of items keyed
by id. Items are deep-copied on the way in and out so callers can never
mutate stored state behind the store's back, which is how a remote store
behaves.

There are no awaits between the check and the write of a create, so under
asyncio each item operation is atomic, matching the guarantees the
protocol asks for. Stored procedures run against one partition without
yielding and are atomic as well.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

from projectideas.domain.containers import Container, partition_key_field
from projectideas.repositories.errors import (
    ItemConflictError,
    ItemNotFoundError,
)
from projectideas.repositories.procedures import (
    DEFAULT_PROCEDURES,
    StoredProcedure,
)
from projectideas.repositories.query import Query
from projectideas.repositories.store import DocumentStore

logger = logging.getLogger(__name__)

Item = Dict[str, Any]
Partition = Dict[str, Item]


class MemoryDocumentStore(DocumentStore):
    """
    Memory implementation of DocumentStore using Python dictionaries.

    Every stored procedure invocation is recorded in ``procedure_calls`` as
    ``(container, name, partition_key, params)`` so callers can observe
    fan-out behaviour.
    """

    def __init__(
        self,
        collection_prefix: str = "memory",
        procedures: Optional[Dict[str, StoredProcedure]] = None,
    ) -> None:
        """Initialize store with empty containers."""
        logger.debug(
            "Initializing MemoryDocumentStore",
            extra={"collection_prefix": collection_prefix},
        )
        self.collection_prefix = collection_prefix
        self.procedures: Dict[str, StoredProcedure] = dict(
            DEFAULT_PROCEDURES if procedures is None else procedures
        )
        self._containers: Dict[Container, Dict[str, Partition]] = {
            container: {} for container in Container
        }
        self.procedure_calls: List[
            Tuple[Container, str, str, List[Any]]
        ] = []

    def container_name(self, container: Container) -> str:
        return f"{self.collection_prefix}_{container.value}"

    def _partition_key_of(self, container: Container, item: Item) -> str:
        field_name = partition_key_field(container)
        value = item.get(field_name)
        if value is None:
            raise ValueError(
                f"Item {item.get('id')} has no partition key field "
                f"'{field_name}'"
            )
        return str(value)

    def _existing(
        self, container: Container, item_id: str, partition_key: str
    ) -> Item:
        partition = self._containers[container].get(partition_key, {})
        item = partition.get(item_id)
        if item is None:
            raise ItemNotFoundError(
                self.container_name(container), item_id, partition_key
            )
        return item

    async def read_item(
        self, container: Container, item_id: str, partition_key: str
    ) -> Item:
        return copy.deepcopy(self._existing(container, item_id, partition_key))

    async def create_item(self, container: Container, item: Item) -> Item:
        item_id = item["id"]
        partition_key = self._partition_key_of(container, item)
        partition = self._containers[container].setdefault(partition_key, {})
        if item_id in partition:
            logger.debug(
                "MemoryDocumentStore: Conflict on create",
                extra={
                    "container": self.container_name(container),
                    "item_id": item_id,
                    "partition_key": partition_key,
                },
            )
            raise ItemConflictError(
                self.container_name(container), item_id, partition_key
            )
        partition[item_id] = copy.deepcopy(item)
        return copy.deepcopy(item)

    async def replace_item(
        self,
        container: Container,
        item_id: str,
        partition_key: str,
        item: Item,
    ) -> Item:
        if item.get("id") != item_id or (
            self._partition_key_of(container, item) != partition_key
        ):
            raise ValueError(
                "Replacement item must keep its id and partition key"
            )
        self._existing(container, item_id, partition_key)
        self._containers[container][partition_key][item_id] = copy.deepcopy(
            item
        )
        return copy.deepcopy(item)

    async def delete_item(
        self, container: Container, item_id: str, partition_key: str
    ) -> None:
        self._existing(container, item_id, partition_key)
        partitions = self._containers[container]
        del partitions[partition_key][item_id]
        if not partitions[partition_key]:
            del partitions[partition_key]

    def _candidates(self, container: Container, query: Query) -> List[Item]:
        partitions = self._containers[container]
        keys = query.partition_key_values(partition_key_field(container))
        if keys is None:
            logger.debug(
                "MemoryDocumentStore: Cross-partition query",
                extra={
                    "container": self.container_name(container),
                    "query": query.describe(),
                },
            )
            selected = list(partitions.values())
        else:
            selected = [
                partitions[str(k)] for k in keys if str(k) in partitions
            ]
        return [item for partition in selected for item in partition.values()]

    async def query_items(
        self, container: Container, query: Query
    ) -> List[Any]:
        return copy.deepcopy(query.apply(self._candidates(container, query)))

    async def count_items(self, container: Container, query: Query) -> int:
        return len(query.unpaged().apply(self._candidates(container, query)))

    async def execute_procedure(
        self,
        container: Container,
        name: str,
        partition_key: str,
        params: List[Any],
    ) -> Any:
        procedure = self.procedures.get(name)
        if procedure is None:
            raise ValueError(f"No stored procedure named '{name}'")
        self.procedure_calls.append(
            (container, name, partition_key, list(params))
        )

        partition = self._containers[container].get(partition_key, {})
        changed, result = procedure(
            copy.deepcopy(list(partition.values())), list(params)
        )
        for item in changed:
            partition[item["id"]] = copy.deepcopy(item)

        logger.debug(
            "MemoryDocumentStore: Stored procedure executed",
            extra={
                "container": self.container_name(container),
                "procedure": name,
                "partition_key": partition_key,
                "changed_items": len(changed),
            },
        )
        return result
