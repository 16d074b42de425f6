"""
Wiring of the store, gateway, collaborators and use cases.

``build_container`` is the one place where concrete implementations are
chosen. Collaborators default to the in-memory services; deployments that
have a real search engine, push service or mailer pass their own.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from minio import Minio

from projectideas.config import Settings
from projectideas.repositories import DocumentGateway, DocumentStore
from projectideas.repositories.memory import MemoryDocumentStore
from projectideas.repositories.minio import MinioDocumentStore
from projectideas.services import (
    EmailService,
    NotificationService,
    SearchIndex,
)
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

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Everything a request handler needs, built once per process."""

    settings: Settings
    gateway: DocumentGateway
    users: UserUseCase
    tags: TagUseCase
    votes: VoteUseCase
    messaging: MessagingUseCase
    ideas: IdeaUseCase
    projects: ProjectUseCase
    search: SearchUseCase


def build_store(settings: Settings) -> DocumentStore:
    """
    Raises:
        ValueError: If the MinIO store is asked to serve a shared store
    """
    if settings.store == "minio":
        if settings.shared_store:
            raise ValueError(
                "The MinIO store cannot make creates atomic across "
                "processes; it cannot back a shared store"
            )
        logger.info(
            "Using MinIO document store",
            extra={
                "minio_endpoint": settings.minio_endpoint,
                "collection_prefix": settings.collection_prefix,
            },
        )
        client = Minio(
            settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_secure,
        )
        return MinioDocumentStore(client, settings.collection_prefix)

    logger.info(
        "Using memory document store",
        extra={"collection_prefix": settings.collection_prefix},
    )
    return MemoryDocumentStore(settings.collection_prefix)


def build_container(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
    idea_index: Optional[SearchIndex] = None,
    project_index: Optional[SearchIndex] = None,
    tag_index: Optional[SearchIndex] = None,
    notification_service: Optional[NotificationService] = None,
    email_service: Optional[EmailService] = None,
) -> AppContainer:
    if settings is None:
        settings = Settings.from_env()
    if store is None:
        store = build_store(settings)
    gateway = DocumentGateway(store, items_per_page=settings.items_per_page)

    # Explicit None checks: an empty index is falsy
    if idea_index is None:
        idea_index = MemorySearchIndex("ideas")
    if project_index is None:
        project_index = MemorySearchIndex("projects")
    if tag_index is None:
        tag_index = MemorySearchIndex("tags")
    if notification_service is None:
        notification_service = MemoryNotificationService()
    if email_service is None:
        email_service = MemoryEmailService()
    search_sync = SearchIndexSync(idea_index, project_index, tag_index)

    users = UserUseCase(gateway, email_service)
    tags = TagUseCase(gateway, search_sync)
    votes = VoteUseCase(gateway, search_sync)
    messaging = MessagingUseCase(gateway, users, notification_service)
    ideas = IdeaUseCase(gateway, tags, votes, users, search_sync)
    projects = ProjectUseCase(
        gateway, tags, votes, users, messaging, search_sync
    )
    search = SearchUseCase(gateway, idea_index, project_index)

    return AppContainer(
        settings=settings,
        gateway=gateway,
        users=users,
        tags=tags,
        votes=votes,
        messaging=messaging,
        ideas=ideas,
        projects=projects,
        search=search,
    )
