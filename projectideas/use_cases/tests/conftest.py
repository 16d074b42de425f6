"""
Fixtures wiring every use case over one memory store.

Search indexes, notifications and email are the in-memory services, so
tests can inspect what the use cases pushed to them.
"""

import pytest

from projectideas.repositories import DocumentGateway
from projectideas.repositories.memory import MemoryDocumentStore
from projectideas.services.memory import (
    MemoryEmailService,
    MemoryNotificationService,
    MemorySearchIndex,
)
from projectideas.use_cases import (
    IdeaUseCase,
    MessagingUseCase,
    ProjectUseCase,
    SearchIndexSync,
    SearchUseCase,
    TagUseCase,
    UserUseCase,
    VoteUseCase,
)

from .support import PAGE_SIZE


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def gateway(store: MemoryDocumentStore) -> DocumentGateway:
    return DocumentGateway(store, items_per_page=PAGE_SIZE)


@pytest.fixture
def idea_index() -> MemorySearchIndex:
    return MemorySearchIndex("ideas")


@pytest.fixture
def project_index() -> MemorySearchIndex:
    return MemorySearchIndex("projects")


@pytest.fixture
def tag_index() -> MemorySearchIndex:
    return MemorySearchIndex("tags")


@pytest.fixture
def search_sync(
    idea_index: MemorySearchIndex,
    project_index: MemorySearchIndex,
    tag_index: MemorySearchIndex,
) -> SearchIndexSync:
    return SearchIndexSync(idea_index, project_index, tag_index)


@pytest.fixture
def email_service() -> MemoryEmailService:
    return MemoryEmailService()


@pytest.fixture
def notification_service() -> MemoryNotificationService:
    return MemoryNotificationService()


@pytest.fixture
def users(
    gateway: DocumentGateway, email_service: MemoryEmailService
) -> UserUseCase:
    return UserUseCase(gateway, email_service)


@pytest.fixture
def tags(gateway: DocumentGateway, search_sync: SearchIndexSync) -> TagUseCase:
    return TagUseCase(gateway, search_sync)


@pytest.fixture
def votes(
    gateway: DocumentGateway, search_sync: SearchIndexSync
) -> VoteUseCase:
    return VoteUseCase(gateway, search_sync)


@pytest.fixture
def messaging(
    gateway: DocumentGateway,
    users: UserUseCase,
    notification_service: MemoryNotificationService,
) -> MessagingUseCase:
    return MessagingUseCase(gateway, users, notification_service)


@pytest.fixture
def ideas(
    gateway: DocumentGateway,
    tags: TagUseCase,
    votes: VoteUseCase,
    users: UserUseCase,
    search_sync: SearchIndexSync,
) -> IdeaUseCase:
    return IdeaUseCase(gateway, tags, votes, users, search_sync)


@pytest.fixture
def projects(
    gateway: DocumentGateway,
    tags: TagUseCase,
    votes: VoteUseCase,
    users: UserUseCase,
    messaging: MessagingUseCase,
    search_sync: SearchIndexSync,
) -> ProjectUseCase:
    return ProjectUseCase(gateway, tags, votes, users, messaging, search_sync)


@pytest.fixture
def search(
    gateway: DocumentGateway,
    idea_index: MemorySearchIndex,
    project_index: MemorySearchIndex,
) -> SearchUseCase:
    return SearchUseCase(gateway, idea_index, project_index)

