"""
Ideas and the comments posted on them.

Ideas are soft deleted: the document stays in its partition with
``deleted`` set so the comments, upvotes and projects that point at it
remain valid. Listing queries skip deleted ideas.
"""

import logging
from typing import Iterable, List, Optional

from projectideas.domain import (
    Comment,
    DocumentPage,
    Idea,
    IdeaTag,
    now_epoch,
)
from projectideas.repositories import (
    DocumentGateway,
    ItemConflictError,
    Query,
    query_by_partition_key,
    query_by_type,
)
from .search_sync import SearchIndexSync
from .tags import TagUseCase
from .users import UserUseCase
from .votes import VoteUseCase

logger = logging.getLogger(__name__)


class IdeaUseCase:
    """Use case for ideas, keeping tags, votes and references in step."""

    def __init__(
        self,
        gateway: DocumentGateway,
        tags: TagUseCase,
        votes: VoteUseCase,
        users: UserUseCase,
        search_sync: SearchIndexSync,
    ) -> None:
        self.gateway = gateway
        self.tags = tags
        self.votes = votes
        self.users = users
        self.search_sync = search_sync

    def _live_ideas(self) -> Query:
        return query_by_type(Idea).where_eq("deleted", False)

    async def create_idea(self, idea: Idea) -> None:
        """Create an idea with its tags, index entry, author upvote and
        posted reference.

        Raises:
            ItemConflictError: If an idea with the same id exists
        """
        await self.gateway.create_document(idea)
        await self.tags.update_added_and_removed_tags(
            idea.tags, None, IdeaTag
        )
        await self.search_sync.try_index_idea(idea)
        await self.votes.upvote_idea(idea.idea_id, idea.author_id)
        try:
            await self.users.add_posted_idea_for_user(
                idea.author_id, idea.idea_id
            )
        except ItemConflictError:
            logger.warning(
                "Posted idea reference already exists",
                extra={"idea_id": idea.idea_id, "user_id": idea.author_id},
            )
        logger.info(
            "Idea created",
            extra={"idea_id": idea.idea_id, "tags": len(idea.tags)},
        )

    async def get_idea(self, idea_id: str) -> Idea:
        """
        Raises:
            EmptyPointReadError: If the idea does not exist
        """
        return await self.gateway.read_document(idea_id, idea_id, Idea)

    async def get_all_ideas(self) -> List[Idea]:
        return await self.gateway.multiple_document_query(
            self._live_ideas().order_by("timeCreated", descending=True),
            Idea,
        )

    async def get_ideas_by_page(self, page_number: int) -> DocumentPage[Idea]:
        return await self.gateway.page_query(
            self._live_ideas().order_by("timeCreated", descending=True),
            page_number,
            Idea,
        )

    async def get_ideas_by_tag_and_page(
        self, tag: str, page_number: int
    ) -> DocumentPage[Idea]:
        return await self.gateway.page_query(
            self._live_ideas()
            .where_array_contains("tags", tag)
            .order_by("timeCreated", descending=True),
            page_number,
            Idea,
        )

    async def get_ideas_in_list(self, idea_ids: Iterable[str]) -> List[Idea]:
        return await self.gateway.multiple_document_query(
            self._live_ideas()
            .where_in("ideaId", idea_ids)
            .order_by("timeCreated", descending=True),
            Idea,
        )

    async def get_idea_page_from_ids(
        self, idea_ids: DocumentPage[str]
    ) -> DocumentPage[Idea]:
        return await self.gateway.document_page_from_partition_key_page(
            idea_ids, Idea
        )

    async def update_idea(
        self,
        idea: Idea,
        added_tags: Optional[Iterable[str]] = None,
        removed_tags: Optional[Iterable[str]] = None,
    ) -> None:
        """Replace an edited idea.

        ``added_tags`` and ``removed_tags`` are the tag changes the caller
        made; ``idea.tags`` already reflects them.
        """
        idea.time_last_edited = now_epoch()
        await self.search_sync.try_update_idea(idea)
        await self.tags.update_added_and_removed_tags(
            added_tags, removed_tags, IdeaTag
        )
        await self.gateway.replace_document(idea)

    async def delete_idea(self, idea: Idea) -> None:
        """Soft delete an idea.

        Comments, upvotes and projects based on the idea are left alone.
        Tag usages are released so counters match the live ideas.
        Deleting an idea that is already deleted changes nothing.
        """
        if (await self.get_idea(idea.idea_id)).deleted:
            logger.info(
                "Idea already deleted", extra={"idea_id": idea.idea_id}
            )
            return
        await self.search_sync.try_delete_idea(idea.idea_id)
        await self.users.remove_posted_idea_for_user(
            idea.author_id, idea.idea_id
        )
        await self.tags.update_added_and_removed_tags(
            None, idea.tags, IdeaTag
        )
        idea.delete()
        await self.gateway.replace_document(idea)
        logger.info("Idea deleted", extra={"idea_id": idea.idea_id})

    # Comments

    async def create_comment(self, comment: Comment) -> None:
        await self.gateway.create_document(comment)

    async def get_all_comments_on_idea(self, idea_id: str) -> List[Comment]:
        return await self.gateway.multiple_document_query(
            query_by_partition_key(idea_id, Comment).order_by(
                "timeCreated", descending=True
            ),
            Comment,
        )

    async def get_comment_on_idea(
        self, idea_id: str, comment_id: str
    ) -> Comment:
        """
        Raises:
            EmptyPointReadError: If the comment does not exist
        """
        return await self.gateway.read_document(comment_id, idea_id, Comment)

    async def update_comment(self, comment: Comment) -> None:
        comment.time_last_edited = now_epoch()
        await self.gateway.replace_document(comment)

    async def delete_comment(self, comment_id: str, idea_id: str) -> None:
        await self.gateway.delete_document(comment_id, idea_id, Comment)
