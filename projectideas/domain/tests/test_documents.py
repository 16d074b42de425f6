"""
Tests for the stored document models.

Design decisions documented:
- Stored field names are camelCase, the discriminant is the class name
- Timestamps are integer epoch seconds
- Root entities use their own id as partition key; tags are partitioned
  by type; upvotes are keyed (voting user, target)
- Tag ids are the form-encoded tag name
- A project looking for members must be public, names are capped at 175
"""

from urllib.parse import unquote_plus

import pytest
from hypothesis import given, strategies as st
from pydantic import ValidationError

from projectideas.domain import (
    Comment,
    Idea,
    IdeaTag,
    IdeaUpvote,
    Project,
    ProjectTag,
    ProjectUpvote,
    ReceivedGroupMessage,
    ReceivedIndividualMessage,
    SentGroupMessage,
    User,
    UserSavedIdea,
    encode_tag_name,
)
from projectideas.domain.documents import MAX_PROJECT_NAME_LENGTH
from .factories import IdeaFactory, ProjectFactory, UserFactory


class TestSerialization:
    def test_user_is_stored_with_camel_case_fields(self) -> None:
        user = User.new("alice", "alice@example.com")

        data = user.to_document()

        assert data["type"] == "User"
        assert data["id"] == data["userId"] == user.user_id
        assert data["unreadMessages"] == 0
        assert data["notificationPreference"] == "AllNewMessages"
        assert isinstance(data["timeCreated"], int)
        assert data["emailSubscriptionId"]

    def test_project_embeds_username_pairs(self) -> None:
        creator = UserFactory.build()
        project = Project.new("idea-1", creator, "Robots", "Build robots")

        data = project.to_document()

        assert data["teamMembers"] == [
            {"username": creator.username, "userId": creator.user_id}
        ]
        assert data["usersRequestingToJoin"] == []
        assert data["projectId"] == project.id

    def test_stored_form_validates_back(self) -> None:
        idea = IdeaFactory.build(tags=["python", "c#"])

        assert Idea.model_validate(idea.to_document()) == idea

    def test_messages_carry_their_variant_fields(self) -> None:
        received = ReceivedGroupMessage.new(
            "recipient", "bob", "hello", "project-1", "Robots"
        )
        sent = SentGroupMessage.new("bob", "project-1", "Robots", "hello")

        assert received.to_document()["recipientProjectName"] == "Robots"
        assert received.unread is True
        assert sent.to_document()["type"] == "SentGroupMessage"
        assert sent.partition_key == "bob"


class TestPartitionKeys:
    def test_root_entities_are_their_own_partition(self) -> None:
        user = UserFactory.build()
        idea = IdeaFactory.build()
        project = ProjectFactory.build()

        assert user.partition_key == user.id
        assert idea.partition_key == idea.id
        assert project.partition_key == project.id

    def test_dependents_live_in_the_owner_partition(self) -> None:
        author = UserFactory.build()
        comment = Comment.new("idea-1", author, "nice")
        saved = UserSavedIdea.new(author.user_id, "idea-1")
        message = ReceivedIndividualMessage.new(author.user_id, "bob", "hi")

        assert comment.partition_key == "idea-1"
        assert saved.partition_key == author.user_id
        assert message.partition_key == author.user_id

    def test_tags_are_partitioned_by_type(self) -> None:
        assert IdeaTag.new("python").partition_key == "IdeaTag"
        assert ProjectTag.new("python").partition_key == "ProjectTag"

    def test_upvotes_are_keyed_by_user_and_target(self) -> None:
        idea_upvote = IdeaUpvote.new("idea-1", "user-1")
        project_upvote = ProjectUpvote.new("project-1", "user-1")

        assert (idea_upvote.id, idea_upvote.partition_key) == (
            "user-1",
            "idea-1",
        )
        assert idea_upvote.user_id == "user-1"
        assert project_upvote.target_id == "project-1"


class TestTags:
    @pytest.mark.parametrize(
        "name,expected_id",
        [
            ("python", "python"),
            ("c#", "c%23"),
            ("machine learning", "machine+learning"),
            ("c/c++", "c%2Fc%2B%2B"),
        ],
    )
    def test_tag_id_is_encoded_name(self, name: str, expected_id: str) -> None:
        tag = IdeaTag.new(name)

        assert tag.id == expected_id
        assert tag.name == name
        assert tag.usages == 0

    @given(st.text(min_size=1))
    def test_encoded_tag_name_round_trips(self, name: str) -> None:
        assert unquote_plus(encode_tag_name(name)) == name


class TestIdea:
    def test_new_idea_is_authored(self) -> None:
        author = UserFactory.build()

        idea = Idea.new(author, "  Robots  ", "content", ["a"])

        assert idea.idea_id == idea.id
        assert idea.author_id == author.user_id
        assert idea.author_username == author.username
        assert idea.title == "Robots"
        assert idea.upvote_count == 0
        assert not idea.deleted

    def test_empty_title_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            IdeaFactory.build(title="   ")

    def test_upvote_counter(self) -> None:
        idea = IdeaFactory.build()

        idea.add_upvote()
        idea.add_upvote()
        idea.remove_upvote()

        assert idea.upvote_count == 1

    def test_delete_is_a_flag(self) -> None:
        idea = IdeaFactory.build()

        idea.delete()

        assert idea.deleted


class TestProject:
    @pytest.mark.parametrize(
        "public_project,looking_for_members,valid",
        [
            (True, True, True),
            (True, False, True),
            (False, False, True),
            (False, True, False),
        ],
    )
    def test_looking_for_members_requires_public(
        self, public_project: bool, looking_for_members: bool, valid: bool
    ) -> None:
        if valid:
            project = ProjectFactory.build(
                public_project=public_project,
                looking_for_members=looking_for_members,
            )
            assert project.looking_for_members == looking_for_members
        else:
            with pytest.raises(ValidationError):
                ProjectFactory.build(
                    public_project=public_project,
                    looking_for_members=looking_for_members,
                )

    @pytest.mark.parametrize(
        "length,valid",
        [
            (1, True),
            (MAX_PROJECT_NAME_LENGTH, True),
            (MAX_PROJECT_NAME_LENGTH + 1, False),
        ],
    )
    def test_name_length(self, length: int, valid: bool) -> None:
        if valid:
            assert len(ProjectFactory.build(name="x" * length).name) == length
        else:
            with pytest.raises(ValidationError):
                ProjectFactory.build(name="x" * length)

    def test_check_visibility_after_mutation(self) -> None:
        project = ProjectFactory.build(public_project=True)
        project.looking_for_members = True
        project.public_project = False

        with pytest.raises(ValueError):
            project.check_visibility()

    def test_membership_helpers(self) -> None:
        creator = UserFactory.build()
        other = UserFactory.build()
        project = Project.new("idea-1", creator, "Robots", "Build robots")

        assert project.user_is_team_member(creator.user_id)
        assert not project.user_is_team_member(other.user_id)
        assert not project.user_is_team_member(None)
        assert project.team_member_usernames == [creator.username]
        assert not project.user_has_requested_to_join(other.user_id)
