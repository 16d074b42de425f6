"""
Best-effort mirroring of document writes into the search indexes.

The search indexes are external collaborators. A failure to index must
never fail the document write that triggered it, so every call here is
wrapped in a log-and-continue block. The calls are still awaited in line
so ordering stays deterministic.
"""

import logging
from typing import Awaitable, Callable

from projectideas.domain import Idea, Project, Tag
from projectideas.services import SearchIndex
from projectideas.validation import ensure_protocol

logger = logging.getLogger(__name__)


class SearchIndexSync:
    """Keeps the idea, project and tag indexes in step with the store."""

    def __init__(
        self,
        idea_index: SearchIndex,
        project_index: SearchIndex,
        tag_index: SearchIndex,
    ) -> None:
        self.idea_index = ensure_protocol(idea_index, SearchIndex)
        self.project_index = ensure_protocol(project_index, SearchIndex)
        self.tag_index = ensure_protocol(tag_index, SearchIndex)

    async def _try(
        self,
        operation: str,
        document_id: str,
        action: Callable[[], Awaitable[None]],
    ) -> None:
        try:
            await action()
        except Exception as e:
            logger.error(
                "Search index operation failed",
                extra={
                    "operation": operation,
                    "document_id": document_id,
                    "error": str(e),
                },
                exc_info=True,
            )

    # Ideas

    async def try_index_idea(self, idea: Idea) -> None:
        await self._try(
            "index_idea", idea.id, lambda: self.idea_index.index(idea)
        )

    async def try_update_idea(self, idea: Idea) -> None:
        await self._try(
            "update_idea", idea.id, lambda: self.idea_index.update(idea)
        )

    async def try_delete_idea(self, idea_id: str) -> None:
        await self._try(
            "delete_idea", idea_id, lambda: self.idea_index.delete(idea_id)
        )

    # Projects; only public projects are searchable

    async def try_index_project(self, project: Project) -> None:
        await self._try(
            "index_project",
            project.id,
            lambda: self.project_index.index(project),
        )

    async def try_update_project(self, project: Project) -> None:
        await self._try(
            "update_project",
            project.id,
            lambda: self.project_index.update(project),
        )

    async def try_delete_project(self, project_id: str) -> None:
        await self._try(
            "delete_project",
            project_id,
            lambda: self.project_index.delete(project_id),
        )

    # Tags

    async def try_index_tag(self, tag: Tag) -> None:
        await self._try(
            "index_tag", tag.id, lambda: self.tag_index.index(tag)
        )

    async def try_update_tag(self, tag: Tag) -> None:
        await self._try(
            "update_tag", tag.id, lambda: self.tag_index.update(tag)
        )

    async def try_delete_tag(self, tag_id: str) -> None:
        await self._try(
            "delete_tag", tag_id, lambda: self.tag_index.delete(tag_id)
        )
