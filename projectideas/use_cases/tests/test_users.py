"""
Tests for UserUseCase.

Design decisions documented:
- A username change runs the rewrite procedure once per distinct
  partition holding the user's posts or project memberships
- A failing partition is logged and the other partitions are still
  renamed
- Back-references are weak: pages drop ids whose document is gone and
  removing an absent reference only logs a warning
"""

import logging
from typing import Any, List

import pytest

from projectideas.domain import (
    Comment,
    Container,
    Idea,
    NotificationPreference,
    Project,
    ProjectJoinRequest,
    UsernameIdPair,
)
from projectideas.domain.tests.factories import (
    CommentFactory,
    IdeaFactory,
    ProjectFactory,
)
from projectideas.repositories import (
    UPDATE_USERNAME,
    DocumentGateway,
    EmptyPointReadError,
    EmptySingleDocumentQueryError,
    query_by_partition_key,
    update_username,
)
from projectideas.repositories.memory import MemoryDocumentStore
from projectideas.services.memory import MemoryEmailService
from projectideas.use_cases import UserUseCase, is_invalid_user_id
from .support import PAGE_SIZE, create_user


class TestAccounts:
    @pytest.mark.asyncio
    async def test_create_user_sends_welcome_email(
        self, users: UserUseCase, email_service: MemoryEmailService
    ) -> None:
        user = await create_user(users)

        assert await users.user_exists(user.user_id)
        assert [u.user_id for u in email_service.welcomed] == [user.user_id]

    @pytest.mark.asyncio
    async def test_lookups(self, users: UserUseCase) -> None:
        user = await create_user(users, username="ada")

        assert (await users.get_user(user.user_id)).username == "ada"
        assert (await users.get_user_by_username("ada")).id == user.id
        assert (await users.get_user_by_email(user.email)).id == user.id
        assert await users.user_with_username_exists("ada")
        assert not await users.user_with_username_exists("grace")

    @pytest.mark.asyncio
    async def test_absent_users_raise_typed_errors(
        self, users: UserUseCase
    ) -> None:
        assert not await users.user_exists("missing")
        with pytest.raises(EmptyPointReadError):
            await users.get_user("missing")
        with pytest.raises(EmptySingleDocumentQueryError):
            await users.get_user_by_username("missing")

    @pytest.mark.asyncio
    async def test_is_user_admin(self, users: UserUseCase) -> None:
        admin = await create_user(users, admin=True)
        member = await create_user(users)

        assert await users.is_user_admin(admin.user_id)
        assert not await users.is_user_admin(member.user_id)

    @pytest.mark.asyncio
    async def test_notification_preference_by_subscription_id(
        self, users: UserUseCase
    ) -> None:
        user = await create_user(users)

        await users.update_email_notification_preference(
            user.email_subscription_id, NotificationPreference.UNSUBSCRIBED
        )

        stored = await users.get_user(user.user_id)
        assert (
            stored.notification_preference
            == NotificationPreference.UNSUBSCRIBED
        )

    @pytest.mark.asyncio
    async def test_update_user_cannot_change_id(
        self, users: UserUseCase
    ) -> None:
        user = await create_user(users)

        with pytest.raises(ValueError):
            await users.update_user("someone-else", user)

    @pytest.mark.asyncio
    async def test_delete_user(self, users: UserUseCase) -> None:
        user = await create_user(users)

        await users.delete_user(user.user_id)

        assert not await users.user_exists(user.user_id)

    @pytest.mark.parametrize(
        "user_id,invalid",
        [(None, True), ("", True), ("null", True), ("abc", False)],
    )
    def test_is_invalid_user_id(self, user_id: Any, invalid: bool) -> None:
        assert is_invalid_user_id(user_id) is invalid


class TestUsernameChange:
    async def _seed(self, gateway: DocumentGateway, user_id: str):
        """Two ideas and two projects touched by the user."""
        author = {"author_id": user_id, "author_username": "old"}
        first_idea = IdeaFactory.build(**author)
        second_idea = IdeaFactory.build()
        comments = [
            CommentFactory.build(idea_id=first_idea.idea_id, **author),
            CommentFactory.build(idea_id=first_idea.idea_id, **author),
            CommentFactory.build(idea_id=second_idea.idea_id, **author),
        ]
        pair = UsernameIdPair(username="old", user_id=user_id)
        member_of = ProjectFactory.build(team_members=[pair])
        requested = ProjectFactory.build(
            looking_for_members=True,
            users_requesting_to_join=[
                ProjectJoinRequest(username="old", user_id=user_id)
            ],
        )
        unrelated = ProjectFactory.build()
        for document in [
            first_idea,
            second_idea,
            *comments,
            member_of,
            requested,
            unrelated,
        ]:
            await gateway.create_document(document)
        return first_idea, second_idea, member_of, requested

    @pytest.mark.asyncio
    async def test_one_rewrite_per_distinct_partition(
        self,
        gateway: DocumentGateway,
        store: MemoryDocumentStore,
        users: UserUseCase,
    ) -> None:
        user = await create_user(users, username="old")
        first_idea, second_idea, member_of, requested = await self._seed(
            gateway, user.user_id
        )
        user.username = "new"

        await users.update_user(user.user_id, user)

        calls = [(c, pk) for c, _, pk, _ in store.procedure_calls]
        assert sorted(calls) == sorted(
            [
                (Container.POSTS, first_idea.idea_id),
                (Container.POSTS, second_idea.idea_id),
                (Container.PROJECTS, member_of.project_id),
                (Container.PROJECTS, requested.project_id),
            ]
        )
        assert all(
            name == UPDATE_USERNAME and params == [user.user_id, "new"]
            for _, name, _, params in store.procedure_calls
        )

        idea = await gateway.read_document(
            first_idea.id, first_idea.idea_id, Idea
        )
        assert idea.author_username == "new"
        project = await gateway.read_document(
            member_of.id, member_of.project_id, Project
        )
        assert project.team_member_usernames == ["new"]
        assert (await users.get_user_by_username("new")).id == user.id

    @pytest.mark.asyncio
    async def test_unchanged_username_runs_no_rewrite(
        self,
        gateway: DocumentGateway,
        store: MemoryDocumentStore,
        users: UserUseCase,
    ) -> None:
        user = await create_user(users, username="old")
        await self._seed(gateway, user.user_id)
        user.admin = True

        await users.update_user(user.user_id, user)

        assert store.procedure_calls == []
        assert await users.is_user_admin(user.user_id)

    @pytest.mark.asyncio
    async def test_failing_partition_does_not_stop_others(
        self,
        email_service: MemoryEmailService,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        broken_partitions: List[str] = []

        def flaky_update_username(documents, params):
            if any(d.get("ideaId") in broken_partitions for d in documents):
                raise RuntimeError("partition unavailable")
            return update_username(documents, params)

        store = MemoryDocumentStore(
            procedures={UPDATE_USERNAME: flaky_update_username}
        )
        gateway = DocumentGateway(store, items_per_page=PAGE_SIZE)
        users = UserUseCase(gateway, email_service)
        user = await create_user(users, username="old")
        first_idea, second_idea, _, _ = await self._seed(
            gateway, user.user_id
        )
        broken_partitions.append(first_idea.idea_id)
        user.username = "new"

        await users.update_user(user.user_id, user)

        assert len(store.procedure_calls) == 4
        assert "Username rewrite failed for partition" in caplog.text
        stale = await gateway.read_document(
            first_idea.id, first_idea.idea_id, Idea
        )
        assert stale.author_username == "old"
        renamed = await gateway.multiple_document_query(
            query_by_partition_key(second_idea.idea_id, Comment), Comment
        )
        assert [c.author_username for c in renamed] == ["new"]
        assert (await users.get_user(user.user_id)).username == "new"


class TestSavedIdeas:
    @pytest.mark.asyncio
    async def test_save_is_idempotent(
        self, gateway: DocumentGateway, users: UserUseCase
    ) -> None:
        user = await create_user(users)
        idea = IdeaFactory.build()
        await gateway.create_document(idea)

        await users.save_idea_for_user(idea.idea_id, user.user_id)
        await users.save_idea_for_user(idea.idea_id, user.user_id)

        page = await users.get_saved_ideas_for_user(user.user_id, 1)
        assert [i.id for i in page.documents] == [idea.id]
        assert page.last_page
        assert await users.user_has_saved_idea(idea.idea_id, user.user_id)

    @pytest.mark.asyncio
    async def test_unsave(
        self, gateway: DocumentGateway, users: UserUseCase
    ) -> None:
        user = await create_user(users)
        idea = IdeaFactory.build()
        await gateway.create_document(idea)
        await users.save_idea_for_user(idea.idea_id, user.user_id)

        await users.unsave_idea_for_user(idea.idea_id, user.user_id)

        assert not await users.user_has_saved_idea(
            idea.idea_id, user.user_id
        )

    @pytest.mark.asyncio
    async def test_unsave_never_saved_logs_warning(
        self, users: UserUseCase, caplog: pytest.LogCaptureFixture
    ) -> None:
        user = await create_user(users)

        with caplog.at_level(logging.WARNING):
            await users.unsave_idea_for_user("no-such-idea", user.user_id)

        assert "Back-reference to remove does not exist" in caplog.text

    @pytest.mark.asyncio
    async def test_anonymous_user_has_saved_nothing(
        self, users: UserUseCase
    ) -> None:
        assert not await users.user_has_saved_idea("idea", "null")


class TestBackReferencePages:
    @pytest.mark.asyncio
    async def test_posted_ideas_page_drops_dangling_reference(
        self,
        gateway: DocumentGateway,
        users: UserUseCase,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        user = await create_user(users)
        idea = IdeaFactory.build(author_id=user.user_id)
        await gateway.create_document(idea)
        await users.add_posted_idea_for_user(user.user_id, idea.idea_id)
        await users.add_posted_idea_for_user(user.user_id, "vanished")

        with caplog.at_level(logging.WARNING):
            page = await users.get_posted_ideas_for_user(user.user_id, 1)

        assert [i.id for i in page.documents] == [idea.id]
        assert "does not exist" in caplog.text

    @pytest.mark.asyncio
    async def test_joined_projects_pages(
        self, gateway: DocumentGateway, users: UserUseCase
    ) -> None:
        user = await create_user(users)
        projects = [ProjectFactory.build() for _ in range(PAGE_SIZE + 1)]
        for project in projects:
            await gateway.create_document(project)
            await users.join_project_for_user(
                user.user_id, project.project_id
            )

        first = await users.get_joined_projects_for_user(user.user_id, 1)
        second = await users.get_joined_projects_for_user(user.user_id, 2)

        assert len(first.documents) == PAGE_SIZE
        assert not first.last_page
        assert len(second.documents) == 1
        assert second.last_page
        seen = {p.id for p in first.documents + second.documents}
        assert seen == {p.id for p in projects}

    @pytest.mark.asyncio
    async def test_leave_project_for_user(
        self, gateway: DocumentGateway, users: UserUseCase
    ) -> None:
        user = await create_user(users)
        project = ProjectFactory.build()
        await gateway.create_document(project)
        await users.join_project_for_user(user.user_id, project.project_id)

        await users.leave_project_for_user(user.user_id, project.project_id)

        page = await users.get_joined_projects_for_user(user.user_id, 1)
        assert page.documents == []
        assert page.last_page
