"""
Minio implementation of DocumentStore.

Each container is a bucket named ``<prefix>-<container>``; each item is a
JSON object stored under ``<partition key>/<id>.json`` (both segments URL
quoted). Point reads are single ``get_object`` calls. Queries list the
objects of the partitions the query is restricted to (or of the whole
bucket) and evaluate the query client side with ``Query.apply``.

The client is synchronous and no operation awaits between its check and
its write, so within one event loop a create (``stat_object`` then
``put_object``) and a stored procedure are atomic, as for the memory
store. The client cannot send a conditional put, so writers in other
processes can interleave with them; ``build_store`` refuses this store
when settings declare the buckets shared between processes.
"""

import io
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from minio.error import S3Error

from projectideas.domain.containers import Container, partition_key_field
from projectideas.repositories.errors import (
    DocumentStoreError,
    ItemConflictError,
    ItemNotFoundError,
)
from projectideas.repositories.procedures import (
    DEFAULT_PROCEDURES,
    StoredProcedure,
)
from projectideas.repositories.query import Query
from projectideas.repositories.store import DocumentStore
from .client import MinioClient

logger = logging.getLogger(__name__)

Item = Dict[str, Any]


def _is_no_such_key(error: S3Error) -> bool:
    return getattr(error, "code", None) == "NoSuchKey"


class MinioDocumentStore(DocumentStore):
    """
    Minio implementation of DocumentStore using one bucket per container.
    """

    def __init__(
        self,
        client: MinioClient,
        collection_prefix: str = "dev",
        procedures: Optional[Dict[str, StoredProcedure]] = None,
    ) -> None:
        """Initialize store with Minio client.

        Args:
            client: MinioClient protocol implementation (real or fake)
            collection_prefix: Prefix of the bucket names
            procedures: Stored procedures by name (defaults to the built-in
                procedures)
        """
        self.client = client
        self.collection_prefix = collection_prefix.lower()
        self.procedures: Dict[str, StoredProcedure] = dict(
            DEFAULT_PROCEDURES if procedures is None else procedures
        )
        logger.debug(
            "Initializing MinioDocumentStore",
            extra={"collection_prefix": self.collection_prefix},
        )
        self._ensure_buckets_exist()

    def bucket_name(self, container: Container) -> str:
        return f"{self.collection_prefix}-{container.value}"

    def _ensure_buckets_exist(self) -> None:
        for container in Container:
            bucket_name = self.bucket_name(container)
            try:
                if not self.client.bucket_exists(bucket_name):
                    logger.info(
                        "Creating container bucket",
                        extra={"bucket_name": bucket_name},
                    )
                    self.client.make_bucket(bucket_name)
                else:
                    logger.debug(
                        "Container bucket already exists",
                        extra={"bucket_name": bucket_name},
                    )
            except S3Error as e:
                logger.error(
                    "Failed to create container bucket",
                    extra={"bucket_name": bucket_name, "error": str(e)},
                )
                raise

    @staticmethod
    def _partition_prefix(partition_key: str) -> str:
        return f"{quote(partition_key, safe='')}/"

    def _object_name(self, item_id: str, partition_key: str) -> str:
        return (
            f"{self._partition_prefix(partition_key)}"
            f"{quote(item_id, safe='')}.json"
        )

    def _partition_key_of(self, container: Container, item: Item) -> str:
        field_name = partition_key_field(container)
        value = item.get(field_name)
        if value is None:
            raise ValueError(
                f"Item {item.get('id')} has no partition key field "
                f"'{field_name}'"
            )
        return str(value)

    def _get_json(self, bucket_name: str, object_name: str) -> Item:
        response = self.client.get_object(
            bucket_name=bucket_name, object_name=object_name
        )
        try:
            data = response.read()
        finally:
            response.close()
            response.release_conn()
        return json.loads(data.decode("utf-8"))

    def _put_json(
        self, bucket_name: str, object_name: str, item: Item
    ) -> None:
        payload = json.dumps(item).encode("utf-8")
        self.client.put_object(
            bucket_name=bucket_name,
            object_name=object_name,
            data=io.BytesIO(payload),
            length=len(payload),
            content_type="application/json",
        )

    def _exists(self, bucket_name: str, object_name: str) -> bool:
        try:
            self.client.stat_object(
                bucket_name=bucket_name, object_name=object_name
            )
        except S3Error as e:
            if _is_no_such_key(e):
                return False
            raise DocumentStoreError(str(e)) from e
        return True

    async def read_item(
        self, container: Container, item_id: str, partition_key: str
    ) -> Item:
        bucket_name = self.bucket_name(container)
        try:
            return self._get_json(
                bucket_name, self._object_name(item_id, partition_key)
            )
        except S3Error as e:
            if _is_no_such_key(e):
                raise ItemNotFoundError(
                    bucket_name, item_id, partition_key
                ) from None
            logger.error(
                "MinioDocumentStore: Error reading item",
                extra={
                    "bucket_name": bucket_name,
                    "item_id": item_id,
                    "partition_key": partition_key,
                    "error": str(e),
                },
                exc_info=True,
            )
            raise DocumentStoreError(str(e)) from e

    async def create_item(self, container: Container, item: Item) -> Item:
        bucket_name = self.bucket_name(container)
        item_id = item["id"]
        partition_key = self._partition_key_of(container, item)
        object_name = self._object_name(item_id, partition_key)
        if self._exists(bucket_name, object_name):
            raise ItemConflictError(bucket_name, item_id, partition_key)
        try:
            self._put_json(bucket_name, object_name, item)
        except S3Error as e:
            raise DocumentStoreError(str(e)) from e
        logger.debug(
            "MinioDocumentStore: Item created",
            extra={"bucket_name": bucket_name, "object_name": object_name},
        )
        return item

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
        bucket_name = self.bucket_name(container)
        object_name = self._object_name(item_id, partition_key)
        if not self._exists(bucket_name, object_name):
            raise ItemNotFoundError(bucket_name, item_id, partition_key)
        try:
            self._put_json(bucket_name, object_name, item)
        except S3Error as e:
            raise DocumentStoreError(str(e)) from e
        return item

    async def delete_item(
        self, container: Container, item_id: str, partition_key: str
    ) -> None:
        bucket_name = self.bucket_name(container)
        object_name = self._object_name(item_id, partition_key)
        if not self._exists(bucket_name, object_name):
            raise ItemNotFoundError(bucket_name, item_id, partition_key)
        try:
            self.client.remove_object(
                bucket_name=bucket_name, object_name=object_name
            )
        except S3Error as e:
            raise DocumentStoreError(str(e)) from e

    def _load_partitions(
        self, container: Container, partition_keys: Optional[List[Any]]
    ) -> List[Item]:
        bucket_name = self.bucket_name(container)
        if partition_keys is None:
            prefixes: List[Optional[str]] = [None]
        else:
            prefixes = [
                self._partition_prefix(str(k)) for k in partition_keys
            ]

        items: List[Item] = []
        try:
            for prefix in prefixes:
                for obj in self.client.list_objects(
                    bucket_name=bucket_name, prefix=prefix, recursive=True
                ):
                    if obj.object_name is None:
                        continue
                    items.append(
                        self._get_json(bucket_name, obj.object_name)
                    )
        except S3Error as e:
            logger.error(
                "MinioDocumentStore: Error listing container",
                extra={"bucket_name": bucket_name, "error": str(e)},
                exc_info=True,
            )
            raise DocumentStoreError(str(e)) from e
        return items

    def _candidates(self, container: Container, query: Query) -> List[Item]:
        keys = query.partition_key_values(partition_key_field(container))
        return self._load_partitions(container, keys)

    async def query_items(
        self, container: Container, query: Query
    ) -> List[Any]:
        return query.apply(self._candidates(container, query))

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

        bucket_name = self.bucket_name(container)
        documents = self._load_partitions(container, [partition_key])
        changed, result = procedure(documents, list(params))
        try:
            for item in changed:
                self._put_json(
                    bucket_name,
                    self._object_name(item["id"], partition_key),
                    item,
                )
        except S3Error as e:
            raise DocumentStoreError(str(e)) from e

        logger.debug(
            "MinioDocumentStore: Stored procedure executed",
            extra={
                "bucket_name": bucket_name,
                "procedure": name,
                "partition_key": partition_key,
                "changed_items": len(changed),
            },
        )
        return result
