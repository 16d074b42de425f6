"""
Errors raised by document stores and the gateway.

Store implementations raise the ``DocumentStoreError`` family. The gateway
translates store level absence into typed, expected errors:
``EmptyPointReadError`` for point reads and ``EmptySingleDocumentQueryError``
for single document queries. ``ItemConflictError`` is passed through
unchanged because it is the uniqueness mechanism callers rely on.
"""


class DocumentStoreError(Exception):
    """Failure reported by a document store."""


class ItemNotFoundError(DocumentStoreError):
    """No item with the given id exists in the given partition."""

    def __init__(self, container: str, item_id: str, partition_key: str):
        self.container = container
        self.item_id = item_id
        self.partition_key = partition_key
        super().__init__(
            f"Item {item_id} with partition key {partition_key} not found "
            f"in container {container}"
        )


class ItemConflictError(DocumentStoreError):
    """An item with the same id already exists in the partition."""

    def __init__(self, container: str, item_id: str, partition_key: str):
        self.container = container
        self.item_id = item_id
        self.partition_key = partition_key
        super().__init__(
            f"Item {item_id} with partition key {partition_key} already "
            f"exists in container {container}"
        )


class DocumentNotFoundError(Exception):
    """Expected absence of a requested document."""


class EmptyPointReadError(DocumentNotFoundError):
    def __init__(self, kind_name: str, item_id: str, partition_key: str):
        self.kind_name = kind_name
        self.item_id = item_id
        self.partition_key = partition_key
        super().__init__(
            f"Point read of {kind_name} with id {item_id} and partition key "
            f"{partition_key} returned no document"
        )


class EmptySingleDocumentQueryError(DocumentNotFoundError):
    def __init__(self, kind_name: str, query: str):
        self.kind_name = kind_name
        self.query = query
        super().__init__(
            f"Single document query for {kind_name} returned no document: "
            f"{query}"
        )
