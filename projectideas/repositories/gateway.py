"""
Document store gateway.

``DocumentGateway`` is the single facade over a ``DocumentStore``. It turns
stored dicts into typed documents (using the ``type`` discriminant), maps
store level absence to the expected ``EmptyPointReadError`` /
``EmptySingleDocumentQueryError`` and implements pagination on top of plain
offset/limit queries.
"""

import logging
from typing import Any, Dict, List, Type, TypeVar

from projectideas.domain import (
    Container,
    DocumentPage,
    RootDocument,
    UnknownDocumentTypeError,
    container_of,
    kind_for_type_name,
)
from projectideas.validation import ensure_protocol
from .errors import (
    EmptyPointReadError,
    EmptySingleDocumentQueryError,
    ItemNotFoundError,
)
from .query import Query, query_by_partition_key_list
from .store import DocumentStore

logger = logging.getLogger(__name__)

ITEMS_PER_PAGE = 10

D = TypeVar("D", bound=RootDocument)


class DocumentGateway:
    """Typed access to the partitioned document store.

    Every other component reads and writes documents through this class.
    Point reads are used whenever both id and partition key are known;
    queries otherwise.
    """

    def __init__(
        self, store: DocumentStore, items_per_page: int = ITEMS_PER_PAGE
    ) -> None:
        if items_per_page < 1:
            raise ValueError("items_per_page must be positive")
        self.store = ensure_protocol(store, DocumentStore)
        self.items_per_page = items_per_page

    def to_document(self, data: Dict[str, Any], kind: Type[D]) -> D:
        """Validate stored data as the concrete kind named by its type."""
        concrete = kind_for_type_name(data.get("type", ""))
        if not issubclass(concrete, kind):
            raise UnknownDocumentTypeError(
                f"Document of type {concrete.__name__} is not a "
                f"{kind.__name__}"
            )
        return concrete.model_validate(data)  # type: ignore[return-value]

    # Reads

    async def read_document(
        self, item_id: str, partition_key: str, kind: Type[D]
    ) -> D:
        """Point read.

        Raises:
            EmptyPointReadError: If the document does not exist
        """
        container = container_of(kind)
        logger.debug(
            "readDocument",
            extra={
                "item_id": item_id,
                "partition_key": partition_key,
                "container": container.value,
            },
        )
        try:
            data = await self.store.read_item(
                container, item_id, partition_key
            )
        except ItemNotFoundError:
            raise EmptyPointReadError(
                kind.__name__, item_id, partition_key
            ) from None
        return self.to_document(data, kind)

    async def document_exists(
        self, item_id: str, partition_key: str, kind: Type[RootDocument]
    ) -> bool:
        container = container_of(kind)
        logger.debug(
            "documentExists",
            extra={
                "item_id": item_id,
                "partition_key": partition_key,
                "container": container.value,
            },
        )
        try:
            await self.store.read_item(container, item_id, partition_key)
        except ItemNotFoundError:
            return False
        return True

    async def single_document_query(self, query: Query, kind: Type[D]) -> D:
        """Return any one document matching the query.

        Raises:
            EmptySingleDocumentQueryError: If the query returns no rows
        """
        container = container_of(kind)
        logger.debug(
            "singleDocumentQuery",
            extra={"query": query.describe(), "container": container.value},
        )
        rows = await self.store.query_items(container, query)
        if not rows:
            raise EmptySingleDocumentQueryError(
                kind.__name__, query.describe()
            )
        return self.to_document(rows[0], kind)

    async def multiple_document_query(
        self, query: Query, kind: Type[D]
    ) -> List[D]:
        container = container_of(kind)
        logger.debug(
            "multipleDocumentQuery",
            extra={"query": query.describe(), "container": container.value},
        )
        rows = await self.store.query_items(container, query)
        return [self.to_document(row, kind) for row in rows]

    async def value_query(
        self, query: Query, container: Container
    ) -> List[Any]:
        """Run a projection query (``Query.value_of``) and return values."""
        if query.value_field is None:
            raise ValueError("value_query requires a projected query")
        logger.debug(
            "valueQuery",
            extra={"query": query.describe(), "container": container.value},
        )
        return await self.store.query_items(container, query)

    async def count_query(self, query: Query, container: Container) -> int:
        logger.debug(
            "countQuery",
            extra={"query": query.describe(), "container": container.value},
        )
        return await self.store.count_items(container, query.unpaged())

    # Pagination

    async def _page_rows(
        self, query: Query, container: Container, page_number: int
    ) -> DocumentPage[Any]:
        if page_number < 1:
            return DocumentPage(documents=[], last_page=False)

        # Ask for one extra row: if it comes back there is a next page
        rows = await self.store.query_items(
            container,
            query.offset_and_limit(
                (page_number - 1) * self.items_per_page,
                self.items_per_page + 1,
            ),
        )
        last_page = len(rows) <= self.items_per_page
        return DocumentPage(
            documents=rows[: self.items_per_page], last_page=last_page
        )

    async def page_query(
        self, query: Query, page_number: int, kind: Type[D]
    ) -> DocumentPage[D]:
        container = container_of(kind)
        logger.debug(
            "pageQuery",
            extra={
                "query": query.describe(),
                "container": container.value,
                "page_number": page_number,
            },
        )
        page = await self._page_rows(query, container, page_number)
        return DocumentPage(
            documents=[self.to_document(row, kind) for row in page.documents],
            last_page=page.last_page,
        )

    async def value_page_query(
        self, query: Query, container: Container, page_number: int
    ) -> DocumentPage[Any]:
        """Page through a projection query, e.g. a page of partition keys."""
        if query.value_field is None:
            raise ValueError("value_page_query requires a projected query")
        logger.debug(
            "valuePageQuery",
            extra={
                "query": query.describe(),
                "container": container.value,
                "page_number": page_number,
            },
        )
        return await self._page_rows(query, container, page_number)

    async def document_page_from_partition_key_page(
        self, partition_keys: DocumentPage[str], kind: Type[D]
    ) -> DocumentPage[D]:
        """Hydrate a page of partition keys into full documents.

        Results keep the order of ``partition_keys`` (list membership
        queries guarantee no order). Keys whose document no longer exists
        are dropped with a warning; they are dangling weak references left
        behind by earlier partial failures.
        """
        keys = list(partition_keys.documents)
        if not keys:
            return DocumentPage(
                documents=[], last_page=partition_keys.last_page
            )

        documents = await self.multiple_document_query(
            query_by_partition_key_list(keys, kind), kind
        )
        by_partition_key: Dict[str, D] = {}
        for document in documents:
            by_partition_key.setdefault(document.partition_key, document)

        ordered: List[D] = []
        for key in keys:
            document = by_partition_key.get(key)
            if document is None:
                logger.warning(
                    "Page of partition keys references a document that does "
                    "not exist",
                    extra={"kind": kind.__name__, "partition_key": key},
                )
                continue
            ordered.append(document)

        return DocumentPage(
            documents=ordered, last_page=partition_keys.last_page
        )

    # Writes

    async def create_document(self, document: RootDocument) -> None:
        """Create a document.

        Raises:
            ItemConflictError: If a document with the same id and partition
                key already exists
        """
        container = container_of(type(document))
        logger.debug(
            "createDocument",
            extra={
                "item_id": document.id,
                "partition_key": document.partition_key,
                "container": container.value,
                "document_type": document.type,
            },
        )
        await self.store.create_item(container, document.to_document())

    async def replace_document(self, document: RootDocument) -> None:
        """Overwrite a document; no concurrency token is checked.

        Raises:
            EmptyPointReadError: If the document does not exist
        """
        container = container_of(type(document))
        logger.debug(
            "replaceDocument",
            extra={
                "item_id": document.id,
                "partition_key": document.partition_key,
                "container": container.value,
                "document_type": document.type,
            },
        )
        try:
            await self.store.replace_item(
                container,
                document.id,
                document.partition_key,
                document.to_document(),
            )
        except ItemNotFoundError:
            raise EmptyPointReadError(
                type(document).__name__, document.id, document.partition_key
            ) from None

    async def delete_document(
        self, item_id: str, partition_key: str, kind: Type[RootDocument]
    ) -> None:
        """Delete a document.

        Raises:
            EmptyPointReadError: If the document does not exist
        """
        container = container_of(kind)
        logger.debug(
            "deleteDocument",
            extra={
                "item_id": item_id,
                "partition_key": partition_key,
                "container": container.value,
            },
        )
        try:
            await self.store.delete_item(container, item_id, partition_key)
        except ItemNotFoundError:
            raise EmptyPointReadError(
                kind.__name__, item_id, partition_key
            ) from None

    async def execute_procedure(
        self,
        container: Container,
        name: str,
        partition_key: str,
        params: List[Any],
    ) -> Any:
        logger.debug(
            "executeProcedure",
            extra={
                "procedure": name,
                "partition_key": partition_key,
                "container": container.value,
            },
        )
        return await self.store.execute_procedure(
            container, name, partition_key, params
        )
