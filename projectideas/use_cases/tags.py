"""
Tag documents and their usage counters.

Callers pass the tags they added and removed explicitly; the previous
state of the tagged entity is never re-read to diff tag lists. A tag that
does not exist yet is created with zero usages and then goes through the
same single increment as an existing tag.

Usage counters are read-modify-write: two concurrent increments of the
same tag can lose one update.
"""

import logging
from typing import Iterable, List, Optional, Type, TypeVar

from projectideas.domain import (
    IdeaTag,
    ProjectTag,
    Tag,
    encode_tag_name,
    type_name,
)
from projectideas.repositories import (
    DocumentGateway,
    EmptyPointReadError,
    ItemConflictError,
    query_by_type,
)
from .search_sync import SearchIndexSync

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Tag)


class TagUseCase:
    def __init__(
        self, gateway: DocumentGateway, search_sync: SearchIndexSync
    ) -> None:
        self.gateway = gateway
        self.search_sync = search_sync

    async def create_tag(self, tag: Tag) -> None:
        await self.gateway.create_document(tag)
        await self.search_sync.try_index_tag(tag)

    async def tag_exists(self, name: str, kind: Type[Tag]) -> bool:
        # The tag container is partitioned by tag type
        return await self.gateway.document_exists(
            encode_tag_name(name), type_name(kind), kind
        )

    async def get_tag(self, name: str, kind: Type[T]) -> T:
        """Point read of a tag by its (unencoded) name.

        Raises:
            EmptyPointReadError: If no such tag exists
        """
        return await self.gateway.read_document(
            encode_tag_name(name), type_name(kind), kind
        )

    async def get_idea_tags(self) -> List[IdeaTag]:
        return await self.gateway.multiple_document_query(
            query_by_type(IdeaTag), IdeaTag
        )

    async def get_project_tags(self) -> List[ProjectTag]:
        return await self.gateway.multiple_document_query(
            query_by_type(ProjectTag), ProjectTag
        )

    async def get_all_tags(self) -> List[Tag]:
        return await self.gateway.multiple_document_query(
            query_by_type(Tag), Tag
        )

    async def increment_tag_usages(self, name: str, kind: Type[Tag]) -> None:
        tag = await self.get_tag(name, kind)
        tag.usages += 1
        await self.gateway.replace_document(tag)
        await self.search_sync.try_update_tag(tag)

    async def decrement_tag_usages(self, name: str, kind: Type[Tag]) -> None:
        tag = await self.get_tag(name, kind)
        tag.usages -= 1
        await self.gateway.replace_document(tag)
        await self.search_sync.try_update_tag(tag)

    async def update_added_and_removed_tags(
        self,
        added_tags: Optional[Iterable[str]],
        removed_tags: Optional[Iterable[str]],
        kind: Type[Tag],
    ) -> None:
        """Apply tag usage changes of one entity write.

        A removed tag that no longer exists is logged and skipped; a tag
        deleted concurrently leaves nothing to decrement.
        """
        for name in added_tags or []:
            if not await self.tag_exists(name, kind):
                try:
                    await self.create_tag(kind.new(name))
                except ItemConflictError:
                    logger.debug(
                        "Tag created concurrently",
                        extra={"tag": name, "kind": kind.__name__},
                    )
            try:
                await self.increment_tag_usages(name, kind)
            except EmptyPointReadError as e:
                logger.warning(
                    "Tag disappeared before it could be incremented",
                    extra={
                        "tag": name,
                        "kind": kind.__name__,
                        "error": str(e),
                    },
                )

        for name in removed_tags or []:
            try:
                await self.decrement_tag_usages(name, kind)
            except EmptyPointReadError as e:
                logger.warning(
                    "Removed tag does not exist",
                    extra={
                        "tag": name,
                        "kind": kind.__name__,
                        "error": str(e),
                    },
                )

    async def delete_tag(self, tag: Tag) -> None:
        await self.gateway.delete_document(
            tag.id, tag.partition_key, type(tag)
        )
        await self.search_sync.try_delete_tag(tag.id)
