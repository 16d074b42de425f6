"""
Projects, their visibility in search and their team membership.

Only public projects are searchable. Projects are hard deleted, which
happens explicitly or when the last team member leaves.
"""

import logging
from typing import Iterable, List, Optional

from projectideas.domain import (
    DocumentPage,
    Project,
    ProjectJoinRequest,
    ProjectTag,
    UsernameIdPair,
    now_epoch,
)
from projectideas.repositories import (
    DocumentGateway,
    ItemConflictError,
    Query,
    query_by_type,
)
from .messaging import MessagingUseCase
from .search_sync import SearchIndexSync
from .tags import TagUseCase
from .users import UserUseCase
from .votes import VoteUseCase

logger = logging.getLogger(__name__)


class ProjectMembershipError(ValueError):
    """A membership change that the project's current state forbids."""


class ProjectUseCase:
    def __init__(
        self,
        gateway: DocumentGateway,
        tags: TagUseCase,
        votes: VoteUseCase,
        users: UserUseCase,
        messaging: MessagingUseCase,
        search_sync: SearchIndexSync,
    ) -> None:
        self.gateway = gateway
        self.tags = tags
        self.votes = votes
        self.users = users
        self.messaging = messaging
        self.search_sync = search_sync

    def _public_projects(self) -> Query:
        return query_by_type(Project).where_eq("publicProject", True)

    async def create_project(
        self, project: Project, project_creator_id: str
    ) -> None:
        """
        Raises:
            ItemConflictError: If a project with the same id exists
        """
        await self.gateway.create_document(project)
        await self.tags.update_added_and_removed_tags(
            project.tags, None, ProjectTag
        )
        if project.public_project:
            await self.search_sync.try_index_project(project)
        await self.votes.upvote_project(project.project_id, project_creator_id)
        try:
            await self.users.join_project_for_user(
                project_creator_id, project.project_id
            )
        except ItemConflictError:
            logger.warning(
                "Joined project reference already exists",
                extra={
                    "project_id": project.project_id,
                    "user_id": project_creator_id,
                },
            )
        logger.info(
            "Project created",
            extra={
                "project_id": project.project_id,
                "public": project.public_project,
            },
        )

    async def update_project(
        self,
        project: Project,
        to_public: bool = False,
        to_private: bool = False,
        added_tags: Optional[Iterable[str]] = None,
        removed_tags: Optional[Iterable[str]] = None,
    ) -> None:
        """Replace a project without touching its edit time.

        ``to_public`` and ``to_private`` tell whether this write changes
        the project's visibility, which decides how the search index is
        updated. Use ``update_project_with_edit_time`` for content edits.
        """
        project.check_visibility()
        if to_public:
            await self.search_sync.try_index_project(project)
        elif to_private:
            await self.search_sync.try_delete_project(project.project_id)
        elif project.public_project:
            await self.search_sync.try_update_project(project)

        await self.tags.update_added_and_removed_tags(
            added_tags, removed_tags, ProjectTag
        )
        await self.gateway.replace_document(project)

    async def update_project_with_edit_time(
        self,
        project: Project,
        to_public: bool = False,
        to_private: bool = False,
        added_tags: Optional[Iterable[str]] = None,
        removed_tags: Optional[Iterable[str]] = None,
    ) -> None:
        project.time_last_edited = now_epoch()
        await self.update_project(
            project, to_public, to_private, added_tags, removed_tags
        )

    async def delete_project(self, project_id: str) -> None:
        """Hard delete a project and release its tag usages.

        Raises:
            EmptyPointReadError: If the project does not exist
        """
        project = await self.get_project(project_id)
        await self.gateway.delete_document(project_id, project_id, Project)
        await self.tags.update_added_and_removed_tags(
            None, project.tags, ProjectTag
        )
        await self.search_sync.try_delete_project(project_id)
        logger.info("Project deleted", extra={"project_id": project_id})

    async def get_project(self, project_id: str) -> Project:
        """
        Raises:
            EmptyPointReadError: If the project does not exist
        """
        return await self.gateway.read_document(
            project_id, project_id, Project
        )

    async def get_project_by_invite_id(self, invite_id: str) -> Project:
        """
        Raises:
            EmptySingleDocumentQueryError: If no project has this invite id
        """
        return await self.gateway.single_document_query(
            query_by_type(Project).where_eq("inviteId", invite_id), Project
        )

    async def get_projects_based_on_idea(self, idea_id: str) -> List[Project]:
        return await self.gateway.multiple_document_query(
            query_by_type(Project)
            .where_eq("ideaId", idea_id)
            .order_by("timeCreated", descending=True),
            Project,
        )

    async def get_public_projects_looking_for_members_based_on_idea(
        self, idea_id: str
    ) -> List[Project]:
        return await self.gateway.multiple_document_query(
            self._public_projects()
            .where_eq("ideaId", idea_id)
            .where_eq("lookingForMembers", True)
            .order_by("timeCreated", descending=True),
            Project,
        )

    async def get_public_projects_by_page(
        self, page_number: int
    ) -> DocumentPage[Project]:
        return await self.gateway.page_query(
            self._public_projects().order_by("timeCreated", descending=True),
            page_number,
            Project,
        )

    async def get_public_projects_by_tag_and_page(
        self, tag: str, page_number: int
    ) -> DocumentPage[Project]:
        return await self.gateway.page_query(
            self._public_projects()
            .where_array_contains("tags", tag)
            .order_by("timeCreated", descending=True),
            page_number,
            Project,
        )

    async def get_all_public_projects(self) -> List[Project]:
        return await self.gateway.multiple_document_query(
            self._public_projects().order_by("timeCreated", descending=True),
            Project,
        )

    async def get_projects_in_list(
        self, project_ids: Iterable[str]
    ) -> List[Project]:
        return await self.gateway.multiple_document_query(
            query_by_type(Project)
            .where_in("projectId", project_ids)
            .order_by("timeCreated", descending=True),
            Project,
        )

    async def get_project_page_from_ids(
        self, project_ids: DocumentPage[str]
    ) -> DocumentPage[Project]:
        return await self.gateway.document_page_from_partition_key_page(
            project_ids, Project
        )

    # Membership

    async def request_to_join(
        self, project_id: str, user_id: str, request_message: str = ""
    ) -> None:
        """Record a join request and tell the team about it.

        Raises:
            EmptyPointReadError: If the project or the user does not exist
            ProjectMembershipError: If the project is not looking for
                members, the user is already a member or has already asked
        """
        project = await self.get_project(project_id)
        if not project.looking_for_members:
            raise ProjectMembershipError(
                "This project is not looking for new members."
            )
        user = await self.users.get_user(user_id)
        if project.user_is_team_member(user_id):
            raise ProjectMembershipError(
                f"User {user.username} is already a member of this project"
            )
        if project.user_has_requested_to_join(user_id):
            raise ProjectMembershipError(
                f"User {user.username} has already requested to join this "
                "project"
            )

        project.users_requesting_to_join.append(
            ProjectJoinRequest.of_request(user, request_message)
        )
        await self.update_project(project)
        await self.messaging.send_group_admin_message(
            project_id,
            f"{user.username} has requested to join your {project.name} "
            "project. Visit your project page to accept or decline this "
            "request.",
        )

    async def respond_to_join_request(
        self,
        project_id: str,
        responder_id: str,
        new_member_username: str,
        accept: bool,
    ) -> None:
        """Accept or reject a pending join request.

        Raises:
            EmptySingleDocumentQueryError: If no user has the username
            EmptyPointReadError: If the project does not exist
            ProjectMembershipError: If the responder is not a team member
                or the requester already is one
        """
        new_member = await self.users.get_user_by_username(
            new_member_username
        )
        project = await self.get_project(project_id)
        if not project.user_is_team_member(responder_id):
            raise ProjectMembershipError(
                "Only team members can respond to join requests"
            )
        if new_member_username in project.team_member_usernames:
            raise ProjectMembershipError(
                f"User {new_member_username} is already a team member"
            )

        project.users_requesting_to_join = [
            request
            for request in project.users_requesting_to_join
            if request.user_id != new_member.user_id
        ]

        if accept:
            project.team_members.append(UsernameIdPair.of(new_member))
            await self.users.join_project_for_user(
                new_member.user_id, project_id
            )
            outcome = "accepted"
        else:
            outcome = "rejected"
        await self.messaging.send_individual_admin_message(
            new_member.user_id,
            f"Your request to join {project.name} has been {outcome}.",
        )

        await self.update_project(project)

    async def leave_project(self, project_id: str, user_id: str) -> None:
        """Remove a member; the last member leaving deletes the project.

        Raises:
            EmptyPointReadError: If the project does not exist
            ProjectMembershipError: If the user is not a team member
        """
        project = await self.get_project(project_id)
        if not project.user_is_team_member(user_id):
            raise ProjectMembershipError(
                "Only team members can leave a project"
            )

        project.team_members = [
            member
            for member in project.team_members
            if member.user_id != user_id
        ]
        if not project.team_members:
            await self.delete_project(project_id)
        else:
            await self.update_project(project)

        await self.users.leave_project_for_user(user_id, project_id)
