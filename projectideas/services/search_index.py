"""
SearchIndex protocol.

The search index is an external full-text capability. The platform keeps
one index per searchable kind (ideas, public projects, tags) and mirrors
document writes into it on a best-effort basis; see
``projectideas.use_cases.search_sync``.
"""

from typing import Protocol, runtime_checkable

from projectideas.domain import DocumentPage, RootDocument


@runtime_checkable
class SearchIndex(Protocol):
    """
    Full-text index over one kind of document.

    Every method may fail for reasons outside this application; callers
    treat failures as non-fatal.
    """

    async def index(self, document: RootDocument) -> None:
        """Add a document to the index."""
        ...

    async def update(self, document: RootDocument) -> None:
        """Replace the indexed copy of a document."""
        ...

    async def delete(self, document_id: str) -> None:
        """Remove a document from the index; unknown ids are ignored."""
        ...

    async def search(
        self, query: str, page_number: int, page_size: int
    ) -> DocumentPage[str]:
        """Return a page of matching document ids, best match first.

        Pages are numbered from 1. A page number below 1 yields an empty
        page that is not the last page.
        """
        ...
