"""
Full-text search over ideas and public projects.

The index answers with a page of ids in relevance order; the documents are
then read from the store keeping that order. Ids whose document is gone
are dropped.
"""

from projectideas.domain import DocumentPage, Idea, Project
from projectideas.repositories import DocumentGateway
from projectideas.services import SearchIndex
from projectideas.validation import ensure_protocol


class SearchUseCase:
    def __init__(
        self,
        gateway: DocumentGateway,
        idea_index: SearchIndex,
        project_index: SearchIndex,
    ) -> None:
        self.gateway = gateway
        self.idea_index = ensure_protocol(idea_index, SearchIndex)
        self.project_index = ensure_protocol(project_index, SearchIndex)

    async def search_ideas_by_page(
        self, query: str, page_number: int
    ) -> DocumentPage[Idea]:
        ids = await self.idea_index.search(
            query, page_number, self.gateway.items_per_page
        )
        return await self.gateway.document_page_from_partition_key_page(
            ids, Idea
        )

    async def search_projects_by_page(
        self, query: str, page_number: int
    ) -> DocumentPage[Project]:
        ids = await self.project_index.search(
            query, page_number, self.gateway.items_per_page
        )
        return await self.gateway.document_page_from_partition_key_page(
            ids, Project
        )
