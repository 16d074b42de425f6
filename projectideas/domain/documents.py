"""
Document models for the project ideas platform.

Every persisted entity is a document living in one of the four containers
(see ``containers.py``). Documents are Pydantic models serialized with
camelCase aliases, which are the field names actually stored. The ``type``
field is the discriminant: it always holds the concrete class name, and
abstract families (``Message``, ``Post``, ``Tag``, ``Upvote``...) are
resolved to their concrete variants by the registry in ``kinds.py``.

Back-reference documents (``UserSavedIdea``, ``UserPostedIdea``,
``UserJoinedProject``) are weak references: they only carry the id of a
document in another container and say nothing authoritative about its
existence.
"""

import time
import uuid
from enum import Enum
from typing import Any, ClassVar, Dict, List, Literal, Optional
from urllib.parse import quote_plus

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .containers import Container, partition_key_field

MAX_PROJECT_NAME_LENGTH = 175
ADMIN_SENDER_USERNAME = "projectideas"


def now_epoch() -> int:
    """Current time as integer epoch seconds."""
    return int(time.time())


def new_id() -> str:
    return str(uuid.uuid4())


def encode_tag_name(name: str) -> str:
    """Tag ids are the form-encoded tag name so names like ``c#`` are safe."""
    return quote_plus(name)


class DocumentModel(BaseModel):
    """Base configuration shared by documents and embedded values."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RootDocument(DocumentModel):
    """Base of every stored document.

    Subclasses declare the container they live in; the partition key value
    is read from the container's partition key field.
    """

    container: ClassVar[Optional[Container]] = None

    id: str
    type: str

    @property
    def partition_key(self) -> str:
        if self.container is None:
            raise TypeError(
                f"{type(self).__name__} is not stored in a single container"
            )
        alias = partition_key_field(self.container)
        for name, info in type(self).model_fields.items():
            if (info.alias or name) == alias:
                return str(getattr(self, name))
        raise TypeError(
            f"{type(self).__name__} has no partition key field '{alias}'"
        )

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the stored (JSON compatible, camelCase) form."""
        return self.model_dump(mode="json", by_alias=True)


# Users container


class NotificationPreference(str, Enum):
    ALL_NEW_MESSAGES = "AllNewMessages"
    UNSUBSCRIBED = "Unsubscribed"


class User(RootDocument):
    container: ClassVar[Optional[Container]] = Container.USERS

    type: Literal["User"] = "User"
    user_id: str
    username: str
    email: str
    time_created: int = Field(default_factory=now_epoch)
    admin: bool = False
    unread_messages: int = 0
    notification_preference: NotificationPreference = (
        NotificationPreference.ALL_NEW_MESSAGES
    )
    email_subscription_id: str = Field(default_factory=new_id)

    @field_validator("username", "email")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Username and email cannot be empty")
        return v.strip()

    @classmethod
    def new(cls, username: str, email: str) -> "User":
        user_id = new_id()
        return cls(id=user_id, user_id=user_id, username=username, email=email)


class UsernameIdPair(DocumentModel):
    """Denormalized (username, user id) pair embedded in other documents."""

    username: str
    user_id: str

    @classmethod
    def of(cls, user: User) -> "UsernameIdPair":
        return cls(username=user.username, user_id=user.user_id)


class UserSavedIdea(RootDocument):
    container: ClassVar[Optional[Container]] = Container.USERS

    type: Literal["UserSavedIdea"] = "UserSavedIdea"
    user_id: str
    idea_id: str
    time_saved: int = Field(default_factory=now_epoch)

    @classmethod
    def new(cls, user_id: str, idea_id: str) -> "UserSavedIdea":
        return cls(id=new_id(), user_id=user_id, idea_id=idea_id)


class UserPostedIdea(RootDocument):
    container: ClassVar[Optional[Container]] = Container.USERS

    type: Literal["UserPostedIdea"] = "UserPostedIdea"
    user_id: str
    idea_id: str
    time_created: int = Field(default_factory=now_epoch)

    @classmethod
    def new(cls, user_id: str, idea_id: str) -> "UserPostedIdea":
        return cls(id=new_id(), user_id=user_id, idea_id=idea_id)


class UserJoinedProject(RootDocument):
    container: ClassVar[Optional[Container]] = Container.USERS

    type: Literal["UserJoinedProject"] = "UserJoinedProject"
    user_id: str
    project_id: str
    time_joined: int = Field(default_factory=now_epoch)

    @classmethod
    def new(cls, user_id: str, project_id: str) -> "UserJoinedProject":
        return cls(id=new_id(), user_id=user_id, project_id=project_id)


class Message(RootDocument):
    """A message copy owned by one user (the sender or a recipient)."""

    container: ClassVar[Optional[Container]] = Container.USERS

    user_id: str
    content: str
    time_sent: int = Field(default_factory=now_epoch)


class ReceivedMessage(Message):
    sender_username: str
    unread: bool = True


class ReceivedIndividualMessage(ReceivedMessage):
    type: Literal["ReceivedIndividualMessage"] = "ReceivedIndividualMessage"

    @classmethod
    def new(
        cls, recipient_id: str, sender_username: str, content: str
    ) -> "ReceivedIndividualMessage":
        return cls(
            id=new_id(),
            user_id=recipient_id,
            sender_username=sender_username,
            content=content,
        )


class ReceivedGroupMessage(ReceivedMessage):
    type: Literal["ReceivedGroupMessage"] = "ReceivedGroupMessage"
    recipient_project_id: str
    recipient_project_name: str

    @classmethod
    def new(
        cls,
        recipient_id: str,
        sender_username: str,
        content: str,
        project_id: str,
        project_name: str,
    ) -> "ReceivedGroupMessage":
        return cls(
            id=new_id(),
            user_id=recipient_id,
            sender_username=sender_username,
            content=content,
            recipient_project_id=project_id,
            recipient_project_name=project_name,
        )


class SentMessage(Message):
    pass


class SentIndividualMessage(SentMessage):
    type: Literal["SentIndividualMessage"] = "SentIndividualMessage"
    recipient_username: str

    @classmethod
    def new(
        cls, sender_id: str, recipient_username: str, content: str
    ) -> "SentIndividualMessage":
        return cls(
            id=new_id(),
            user_id=sender_id,
            recipient_username=recipient_username,
            content=content,
        )


class SentGroupMessage(SentMessage):
    type: Literal["SentGroupMessage"] = "SentGroupMessage"
    recipient_project_id: str
    recipient_project_name: str

    @classmethod
    def new(
        cls,
        sender_id: str,
        project_id: str,
        project_name: str,
        content: str,
    ) -> "SentGroupMessage":
        return cls(
            id=new_id(),
            user_id=sender_id,
            recipient_project_id=project_id,
            recipient_project_name=project_name,
            content=content,
        )


# Posts container


class Post(RootDocument):
    """Content authored by a user inside an idea's partition."""

    container: ClassVar[Optional[Container]] = Container.POSTS

    idea_id: str
    author_id: str
    author_username: str
    content: str
    time_created: int = Field(default_factory=now_epoch)
    time_last_edited: int = Field(default_factory=now_epoch)


class Idea(Post):
    type: Literal["Idea"] = "Idea"
    title: str
    tags: List[str] = Field(default_factory=list)
    upvote_count: int = 0
    deleted: bool = False

    @field_validator("title")
    @classmethod
    def title_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Idea title cannot be empty")
        return v.strip()

    @classmethod
    def new(
        cls,
        author: User,
        title: str,
        content: str,
        tags: Optional[List[str]] = None,
    ) -> "Idea":
        idea_id = new_id()
        return cls(
            id=idea_id,
            idea_id=idea_id,
            author_id=author.user_id,
            author_username=author.username,
            title=title,
            content=content,
            tags=list(tags or []),
        )

    def add_upvote(self) -> None:
        self.upvote_count += 1

    def remove_upvote(self) -> None:
        self.upvote_count -= 1

    def delete(self) -> None:
        self.deleted = True


class Comment(Post):
    type: Literal["Comment"] = "Comment"

    @classmethod
    def new(cls, idea_id: str, author: User, content: str) -> "Comment":
        return cls(
            id=new_id(),
            idea_id=idea_id,
            author_id=author.user_id,
            author_username=author.username,
            content=content,
        )


class Upvote(RootDocument):
    """Join document whose existence is the "user has upvoted" fact.

    The document id is the voting user's id and the partition key is the
    target's id, so the store's (id, partition key) uniqueness allows at
    most one upvote per user per target.
    """

    @property
    def user_id(self) -> str:
        return self.id

    @property
    def target_id(self) -> str:
        return self.partition_key


class IdeaUpvote(Upvote):
    container: ClassVar[Optional[Container]] = Container.POSTS

    type: Literal["IdeaUpvote"] = "IdeaUpvote"
    idea_id: str

    @classmethod
    def new(cls, idea_id: str, user_id: str) -> "IdeaUpvote":
        return cls(id=user_id, idea_id=idea_id)


# Tags container


class Tag(RootDocument):
    """Tag with a usage counter; partitioned by its own type name."""

    container: ClassVar[Optional[Container]] = Container.TAGS

    name: str
    usages: int = 0

    @classmethod
    def new(cls, name: str) -> "Tag":
        return cls(id=encode_tag_name(name), name=name)


class IdeaTag(Tag):
    type: Literal["IdeaTag"] = "IdeaTag"


class ProjectTag(Tag):
    type: Literal["ProjectTag"] = "ProjectTag"


# Projects container


class ProjectJoinRequest(UsernameIdPair):
    request_message: str = ""

    @classmethod
    def of_request(cls, user: User, message: str) -> "ProjectJoinRequest":
        return cls(
            username=user.username,
            user_id=user.user_id,
            request_message=message,
        )


class Project(RootDocument):
    container: ClassVar[Optional[Container]] = Container.PROJECTS

    type: Literal["Project"] = "Project"
    project_id: str
    idea_id: str
    name: str
    description: str
    time_created: int = Field(default_factory=now_epoch)
    time_last_edited: int = Field(default_factory=now_epoch)
    team_members: List[UsernameIdPair] = Field(default_factory=list)
    users_requesting_to_join: List[ProjectJoinRequest] = Field(
        default_factory=list
    )
    public_project: bool = False
    looking_for_members: bool = False
    upvote_count: int = 0
    tags: List[str] = Field(default_factory=list)
    invite_id: str = Field(default_factory=new_id)

    @field_validator("name")
    @classmethod
    def name_must_fit(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Project name cannot be empty")
        if len(v) > MAX_PROJECT_NAME_LENGTH:
            raise ValueError(
                f"Project name {v} is too long. Project names cannot be "
                f"longer than {MAX_PROJECT_NAME_LENGTH} characters."
            )
        return v

    @model_validator(mode="after")
    def looking_for_members_requires_public(self) -> "Project":
        self.check_visibility()
        return self

    @classmethod
    def new(
        cls,
        idea_id: str,
        creator: User,
        name: str,
        description: str,
        public_project: bool = False,
        looking_for_members: bool = False,
        tags: Optional[List[str]] = None,
    ) -> "Project":
        project_id = new_id()
        return cls(
            id=project_id,
            project_id=project_id,
            idea_id=idea_id,
            name=name,
            description=description,
            team_members=[UsernameIdPair.of(creator)],
            public_project=public_project,
            looking_for_members=looking_for_members,
            tags=list(tags or []),
        )

    def check_visibility(self) -> None:
        """A project looking for members must be public."""
        if self.looking_for_members and not self.public_project:
            raise ValueError(
                "A project cannot be looking for members while private."
            )

    def user_is_team_member(self, user_id: Optional[str]) -> bool:
        return any(m.user_id == user_id for m in self.team_members)

    def user_has_requested_to_join(self, user_id: Optional[str]) -> bool:
        return any(r.user_id == user_id for r in self.users_requesting_to_join)

    @property
    def team_member_usernames(self) -> List[str]:
        return [m.username for m in self.team_members]

    def add_upvote(self) -> None:
        self.upvote_count += 1

    def remove_upvote(self) -> None:
        self.upvote_count -= 1


class ProjectUpvote(Upvote):
    container: ClassVar[Optional[Container]] = Container.PROJECTS

    type: Literal["ProjectUpvote"] = "ProjectUpvote"
    project_id: str

    @classmethod
    def new(cls, project_id: str, user_id: str) -> "ProjectUpvote":
        return cls(id=user_id, project_id=project_id)
