"""
Registry of document kinds.

A *kind* is a document class. Concrete kinds are enumerated explicitly in
``CONCRETE_KINDS``; an abstract family (``Message``, ``Tag``...) expands to
the registered concrete kinds that subclass it. Adding a new document
variant means adding it here, after which every typed query picks it up.

The stored ``type`` discriminant of a concrete kind is the default of its
``type`` field, so the registry and the stored data can never disagree.
"""

from functools import lru_cache
from typing import Dict, Tuple, Type

from .containers import Container, partition_key_field
from .documents import (
    Comment,
    Idea,
    IdeaTag,
    IdeaUpvote,
    Project,
    ProjectTag,
    ProjectUpvote,
    ReceivedGroupMessage,
    ReceivedIndividualMessage,
    RootDocument,
    SentGroupMessage,
    SentIndividualMessage,
    User,
    UserJoinedProject,
    UserPostedIdea,
    UserSavedIdea,
)

DocumentKind = Type[RootDocument]

CONCRETE_KINDS: Tuple[DocumentKind, ...] = (
    # users
    User,
    UserSavedIdea,
    UserPostedIdea,
    UserJoinedProject,
    ReceivedIndividualMessage,
    ReceivedGroupMessage,
    SentIndividualMessage,
    SentGroupMessage,
    # posts
    Idea,
    Comment,
    IdeaUpvote,
    # tags
    IdeaTag,
    ProjectTag,
    # projects
    Project,
    ProjectUpvote,
)


class UnknownDocumentTypeError(ValueError):
    """Raised when a stored ``type`` value has no registered kind."""


def type_name(kind: DocumentKind) -> str:
    """Return the stored discriminant of a concrete kind."""
    default = kind.model_fields["type"].default
    if not isinstance(default, str):
        raise ValueError(f"{kind.__name__} is not a concrete document kind")
    return default


_KINDS_BY_TYPE_NAME: Dict[str, DocumentKind] = {
    type_name(kind): kind for kind in CONCRETE_KINDS
}


@lru_cache(maxsize=None)
def concrete_kinds(kind: DocumentKind) -> Tuple[DocumentKind, ...]:
    """Expand a kind to the registered concrete kinds it covers."""
    kinds = tuple(k for k in CONCRETE_KINDS if issubclass(k, kind))
    if not kinds:
        raise ValueError(
            f"The class {kind.__name__} has no registered concrete kinds."
        )
    return kinds


@lru_cache(maxsize=None)
def type_names(kind: DocumentKind) -> Tuple[str, ...]:
    return tuple(type_name(k) for k in concrete_kinds(kind))


def kind_for_type_name(name: str) -> DocumentKind:
    try:
        return _KINDS_BY_TYPE_NAME[name]
    except KeyError:
        raise UnknownDocumentTypeError(
            f"No document kind registered for type '{name}'"
        ) from None


@lru_cache(maxsize=None)
def container_of(kind: DocumentKind) -> Container:
    """Return the single container holding every variant of ``kind``.

    Raises:
        ValueError: If the kind spans several containers (``RootDocument``,
            ``Upvote``) and therefore has no associated partition key.
    """
    containers = {k.container for k in concrete_kinds(kind)}
    if len(containers) != 1 or None in containers:
        raise ValueError(
            f"The class {kind.__name__} does not have an associated "
            "partition key."
        )
    (container,) = containers
    assert container is not None
    return container


def partition_key_field_of(kind: DocumentKind) -> str:
    return partition_key_field(container_of(kind))
