"""
At-most-once upvotes on ideas and projects.

An upvote is a join document whose id is the voting user's id and whose
partition key is the target's id. Creating it is the only check for a
repeated vote: the store rejects a second create of the same key with
``ItemConflictError``, so two concurrent upvotes by one user can never both
count.

The target's ``upvoteCount`` is then updated with a point read followed by
a replace. Concurrent upvotes by *different* users on the same target can
lose one of the increments; the counter is not reconciled afterwards.
"""

import logging
from typing import Optional, Type, Union

from projectideas.domain import (
    Idea,
    IdeaUpvote,
    Project,
    ProjectUpvote,
    User,
)
from projectideas.repositories import DocumentGateway, ItemConflictError
from .search_sync import SearchIndexSync
from .users import is_invalid_user_id

logger = logging.getLogger(__name__)

Votable = Union[Idea, Project]


class VoteUseCase:
    def __init__(
        self, gateway: DocumentGateway, search_sync: SearchIndexSync
    ) -> None:
        self.gateway = gateway
        self.search_sync = search_sync

    async def _sync_index(self, target: Votable) -> None:
        if isinstance(target, Idea):
            await self.search_sync.try_update_idea(target)
        elif target.public_project:
            await self.search_sync.try_update_project(target)

    async def _upvote(
        self,
        upvote: Union[IdeaUpvote, ProjectUpvote],
        target_kind: Type[Votable],
    ) -> None:
        if not await self.gateway.document_exists(
            upvote.user_id, upvote.user_id, User
        ):
            logger.debug(
                "Dropping upvote by unknown user",
                extra={"user_id": upvote.user_id},
            )
            return

        try:
            await self.gateway.create_document(upvote)
        except ItemConflictError:
            logger.debug(
                "User has already upvoted",
                extra={
                    "user_id": upvote.user_id,
                    "target_id": upvote.target_id,
                },
            )
            return

        target = await self.gateway.read_document(
            upvote.target_id, upvote.target_id, target_kind
        )
        target.add_upvote()
        await self._sync_index(target)
        await self.gateway.replace_document(target)

    async def _unupvote(
        self,
        target_id: str,
        user_id: str,
        upvote_kind: Type[Union[IdeaUpvote, ProjectUpvote]],
        target_kind: Type[Votable],
    ) -> None:
        # Raises EmptyPointReadError if the user never upvoted the target
        upvote = await self.gateway.read_document(
            user_id, target_id, upvote_kind
        )
        await self.gateway.delete_document(
            upvote.id, upvote.partition_key, upvote_kind
        )

        target = await self.gateway.read_document(
            upvote.target_id, upvote.target_id, target_kind
        )
        target.remove_upvote()
        await self._sync_index(target)
        await self.gateway.replace_document(target)

    async def _has_upvoted(
        self,
        target_id: str,
        user_id: Optional[str],
        upvote_kind: Type[Union[IdeaUpvote, ProjectUpvote]],
    ) -> bool:
        if is_invalid_user_id(user_id):
            return False
        assert user_id is not None
        return await self.gateway.document_exists(
            user_id, target_id, upvote_kind
        )

    async def upvote_idea(self, idea_id: str, user_id: str) -> None:
        await self._upvote(IdeaUpvote.new(idea_id, user_id), Idea)

    async def unupvote_idea(self, idea_id: str, user_id: str) -> None:
        await self._unupvote(idea_id, user_id, IdeaUpvote, Idea)

    async def user_has_upvoted_idea(
        self, idea_id: str, user_id: Optional[str]
    ) -> bool:
        return await self._has_upvoted(idea_id, user_id, IdeaUpvote)

    async def upvote_project(self, project_id: str, user_id: str) -> None:
        await self._upvote(ProjectUpvote.new(project_id, user_id), Project)

    async def unupvote_project(self, project_id: str, user_id: str) -> None:
        await self._unupvote(project_id, user_id, ProjectUpvote, Project)

    async def user_has_upvoted_project(
        self, project_id: str, user_id: Optional[str]
    ) -> bool:
        return await self._has_upvoted(project_id, user_id, ProjectUpvote)
