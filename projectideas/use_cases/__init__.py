"""
Use cases of the project ideas platform.

Each use case owns one area of the platform and keeps the denormalized
state around it consistent: usage counters, upvote counters, weak
back-references in user partitions, copied usernames and search index
entries. They only talk to the store through ``DocumentGateway``.
"""

from .ideas import IdeaUseCase
from .messaging import MessagingUseCase
from .projects import ProjectMembershipError, ProjectUseCase
from .search import SearchUseCase
from .search_sync import SearchIndexSync
from .tags import TagUseCase
from .users import UserUseCase, is_invalid_user_id
from .votes import VoteUseCase

__all__ = [
    "IdeaUseCase",
    "MessagingUseCase",
    "ProjectMembershipError",
    "ProjectUseCase",
    "SearchIndexSync",
    "SearchUseCase",
    "TagUseCase",
    "UserUseCase",
    "VoteUseCase",
    "is_invalid_user_id",
]
