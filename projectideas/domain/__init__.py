"""
Domain layer for projectideas.

Documents stored in the partitioned document store, the containers they
live in and the registry that maps abstract document families to their
concrete variants.
"""

from .containers import Container, partition_key_field
from .documents import (
    ADMIN_SENDER_USERNAME,
    Comment,
    Idea,
    IdeaTag,
    IdeaUpvote,
    Message,
    NotificationPreference,
    Post,
    Project,
    ProjectJoinRequest,
    ProjectTag,
    ProjectUpvote,
    ReceivedGroupMessage,
    ReceivedIndividualMessage,
    ReceivedMessage,
    RootDocument,
    SentGroupMessage,
    SentIndividualMessage,
    SentMessage,
    Tag,
    Upvote,
    User,
    UserJoinedProject,
    UsernameIdPair,
    UserPostedIdea,
    UserSavedIdea,
    encode_tag_name,
    now_epoch,
)
from .kinds import (
    DocumentKind,
    UnknownDocumentTypeError,
    concrete_kinds,
    container_of,
    kind_for_type_name,
    partition_key_field_of,
    type_name,
    type_names,
)
from .page import DocumentPage

__all__ = [
    "ADMIN_SENDER_USERNAME",
    "Comment",
    "Container",
    "DocumentKind",
    "DocumentPage",
    "Idea",
    "IdeaTag",
    "IdeaUpvote",
    "Message",
    "NotificationPreference",
    "Post",
    "Project",
    "ProjectJoinRequest",
    "ProjectTag",
    "ProjectUpvote",
    "ReceivedGroupMessage",
    "ReceivedIndividualMessage",
    "ReceivedMessage",
    "RootDocument",
    "SentGroupMessage",
    "SentIndividualMessage",
    "SentMessage",
    "Tag",
    "UnknownDocumentTypeError",
    "Upvote",
    "User",
    "UserJoinedProject",
    "UsernameIdPair",
    "UserPostedIdea",
    "UserSavedIdea",
    "concrete_kinds",
    "container_of",
    "encode_tag_name",
    "kind_for_type_name",
    "now_epoch",
    "partition_key_field",
    "partition_key_field_of",
    "type_name",
    "type_names",
]
