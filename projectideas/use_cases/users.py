"""
User accounts and the per-user back-reference documents.

Saved, posted and joined documents in a user's partition are weak
references to ideas and projects in other containers. Reading them
tolerates references whose target is gone, and removing one that is
already gone is logged and treated as done.
"""

import logging
from typing import List, Optional, Tuple, Type, TypeVar, Union

from projectideas.domain import (
    Container,
    DocumentPage,
    Idea,
    NotificationPreference,
    Post,
    Project,
    RootDocument,
    User,
    UserJoinedProject,
    UserPostedIdea,
    UserSavedIdea,
)
from projectideas.repositories import (
    UPDATE_USERNAME,
    DocumentGateway,
    DocumentNotFoundError,
    Query,
    array_contains,
    query_by_partition_key,
    query_by_type,
)
from projectideas.services import EmailService
from projectideas.validation import ensure_protocol

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=RootDocument)
Reference = Union[UserSavedIdea, UserPostedIdea, UserJoinedProject]


def is_invalid_user_id(user_id: Optional[str]) -> bool:
    """Anonymous callers arrive with no id, an empty one or ``"null"``."""
    return not user_id or user_id == "null"


class UserUseCase:
    """
    Use case for users and their saved, posted and joined references.

    Renaming a user rewrites the username copies denormalized into ideas,
    comments and projects. That rewrite runs one partition-scoped stored
    procedure per distinct partition, each committing on its own; a
    failure in one partition is logged and the remaining partitions are
    still renamed.
    """

    def __init__(
        self, gateway: DocumentGateway, email_service: EmailService
    ) -> None:
        self.gateway = gateway
        self.email_service = ensure_protocol(email_service, EmailService)

    async def create_user(self, user: User) -> User:
        await self.email_service.send_welcome_email(user)
        await self.gateway.create_document(user)
        logger.info("User created", extra={"user_id": user.user_id})
        return user

    async def user_exists(self, user_id: str) -> bool:
        return await self.gateway.document_exists(user_id, user_id, User)

    async def get_user(self, user_id: str) -> User:
        """
        Raises:
            EmptyPointReadError: If the user does not exist
        """
        return await self.gateway.read_document(user_id, user_id, User)

    async def get_user_by_email(self, email: str) -> User:
        """
        Raises:
            EmptySingleDocumentQueryError: If no user has this email
        """
        return await self.gateway.single_document_query(
            query_by_type(User).where_eq("email", email), User
        )

    async def get_user_by_username(self, username: str) -> User:
        """
        Raises:
            EmptySingleDocumentQueryError: If no user has this username
        """
        return await self.gateway.single_document_query(
            query_by_type(User).where_eq("username", username), User
        )

    async def user_with_username_exists(self, username: str) -> bool:
        count = await self.gateway.count_query(
            query_by_type(User).where_eq("username", username),
            Container.USERS,
        )
        return count > 0

    async def update_user(self, user_id: str, user: User) -> None:
        """Replace a user, propagating a username change first.

        Raises:
            EmptyPointReadError: If the user does not exist
        """
        if user.user_id != user_id:
            raise ValueError("A user's id cannot be changed")
        old_user = await self.get_user(user_id)
        if user.username != old_user.username:
            await self._propagate_username(user_id, user.username)
        await self.gateway.replace_document(user)

    async def _username_partitions(
        self, user_id: str
    ) -> List[Tuple[Container, str]]:
        post_keys = await self.gateway.value_query(
            query_by_type(Post)
            .where_eq("authorId", user_id)
            .value_of("ideaId"),
            Container.POSTS,
        )
        project_keys = await self.gateway.value_query(
            query_by_type(Project)
            .where_any(
                array_contains("teamMembers", {"userId": user_id}, True),
                array_contains(
                    "usersRequestingToJoin", {"userId": user_id}, True
                ),
            )
            .value_of("projectId"),
            Container.PROJECTS,
        )
        # dict.fromkeys keeps the first occurrence of each key, in order
        return [
            (Container.POSTS, key) for key in dict.fromkeys(post_keys)
        ] + [
            (Container.PROJECTS, key) for key in dict.fromkeys(project_keys)
        ]

    async def _propagate_username(
        self, user_id: str, new_username: str
    ) -> None:
        partitions = await self._username_partitions(user_id)
        logger.info(
            "Propagating username change",
            extra={"user_id": user_id, "partitions": len(partitions)},
        )
        for container, partition_key in partitions:
            try:
                await self.gateway.execute_procedure(
                    container,
                    UPDATE_USERNAME,
                    partition_key,
                    [user_id, new_username],
                )
            except Exception as e:
                logger.error(
                    "Username rewrite failed for partition",
                    extra={
                        "user_id": user_id,
                        "container": container.value,
                        "partition_key": partition_key,
                        "error": str(e),
                    },
                    exc_info=True,
                )

    async def is_user_admin(self, user_id: str) -> bool:
        return (await self.get_user(user_id)).admin

    async def update_email_notification_preference(
        self,
        email_subscription_id: str,
        notification_preference: NotificationPreference,
    ) -> None:
        """
        Raises:
            EmptySingleDocumentQueryError: If no user has this subscription
        """
        user = await self.gateway.single_document_query(
            query_by_type(User).where_eq(
                "emailSubscriptionId", email_subscription_id
            ),
            User,
        )
        user.notification_preference = notification_preference
        await self.gateway.replace_document(user)

    async def delete_user(self, user_id: str) -> None:
        await self.gateway.delete_document(user_id, user_id, User)

    # Saved ideas

    async def save_idea_for_user(self, idea_id: str, user_id: str) -> None:
        if await self.user_has_saved_idea(idea_id, user_id):
            return
        await self.gateway.create_document(
            UserSavedIdea.new(user_id, idea_id)
        )

    async def unsave_idea_for_user(self, idea_id: str, user_id: str) -> None:
        await self._remove_reference(
            user_id, UserSavedIdea, "ideaId", idea_id
        )

    async def user_has_saved_idea(self, idea_id: str, user_id: str) -> bool:
        if is_invalid_user_id(user_id):
            return False
        count = await self.gateway.count_query(
            query_by_partition_key(user_id, UserSavedIdea).where_eq(
                "ideaId", idea_id
            ),
            Container.USERS,
        )
        return count > 0

    async def get_saved_ideas_for_user(
        self, user_id: str, page_number: int
    ) -> DocumentPage[Idea]:
        return await self._referenced_page(
            query_by_partition_key(user_id, UserSavedIdea)
            .value_of("ideaId")
            .order_by("timeSaved", descending=True),
            page_number,
            Idea,
        )

    # Posted ideas

    async def add_posted_idea_for_user(
        self, user_id: str, idea_id: str
    ) -> None:
        await self.gateway.create_document(
            UserPostedIdea.new(user_id, idea_id)
        )

    async def remove_posted_idea_for_user(
        self, user_id: str, idea_id: str
    ) -> None:
        await self._remove_reference(
            user_id, UserPostedIdea, "ideaId", idea_id
        )

    async def get_posted_ideas_for_user(
        self, user_id: str, page_number: int
    ) -> DocumentPage[Idea]:
        return await self._referenced_page(
            query_by_partition_key(user_id, UserPostedIdea)
            .value_of("ideaId")
            .order_by("timeCreated", descending=True),
            page_number,
            Idea,
        )

    # Joined projects

    async def join_project_for_user(
        self, user_id: str, project_id: str
    ) -> None:
        await self.gateway.create_document(
            UserJoinedProject.new(user_id, project_id)
        )

    async def leave_project_for_user(
        self, user_id: str, project_id: str
    ) -> None:
        await self._remove_reference(
            user_id, UserJoinedProject, "projectId", project_id
        )

    async def get_joined_projects_for_user(
        self, user_id: str, page_number: int
    ) -> DocumentPage[Project]:
        return await self._referenced_page(
            query_by_partition_key(user_id, UserJoinedProject)
            .value_of("projectId")
            .order_by("timeJoined", descending=True),
            page_number,
            Project,
        )

    async def _referenced_page(
        self, key_query: Query, page_number: int, kind: Type[D]
    ) -> DocumentPage[D]:
        keys = await self.gateway.value_page_query(
            key_query, Container.USERS, page_number
        )
        return await self.gateway.document_page_from_partition_key_page(
            keys, kind
        )

    async def _remove_reference(
        self,
        user_id: str,
        kind: Type[Reference],
        field_name: str,
        target_id: str,
    ) -> None:
        # Already removed and never created look the same here
        try:
            reference = await self.gateway.single_document_query(
                query_by_partition_key(user_id, kind).where_eq(
                    field_name, target_id
                ),
                kind,
            )
            await self.gateway.delete_document(
                reference.id, reference.partition_key, kind
            )
        except DocumentNotFoundError as e:
            logger.warning(
                "Back-reference to remove does not exist",
                extra={
                    "user_id": user_id,
                    "document_type": kind.__name__,
                    "target_id": target_id,
                    "error": str(e),
                },
            )
