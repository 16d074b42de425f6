"""
Physical containers of the document store.

Each container multiplexes several document kinds and has exactly one
partition key field. Documents with the same partition key value are
co-located, which makes point reads and partition-scoped procedures cheap.
"""

from enum import Enum
from typing import Dict


class Container(str, Enum):
    """Logical containers holding the platform's documents."""

    USERS = "users"
    POSTS = "posts"
    TAGS = "tags"
    PROJECTS = "projects"


PARTITION_KEY_FIELDS: Dict[Container, str] = {
    Container.USERS: "userId",
    Container.POSTS: "ideaId",
    # Tags are partitioned by their own type (IdeaTag / ProjectTag)
    Container.TAGS: "type",
    Container.PROJECTS: "projectId",
}


def partition_key_field(container: Container) -> str:
    """Return the stored field name holding the container's partition key."""
    return PARTITION_KEY_FIELDS[container]
