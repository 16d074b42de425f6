"""
Individual and group messaging.

Every delivery is an independent unit: the received copy is created in the
recipient's partition, the recipient's unread counter is bumped with a
read-modify-write and the notification service is told. A failed delivery
is logged and the remaining recipients are still served. The sender's
single sent copy is recorded once per operation and is never rolled back.
"""

import logging
from projectideas.domain import (
    ADMIN_SENDER_USERNAME,
    Container,
    DocumentPage,
    Project,
    ReceivedGroupMessage,
    ReceivedIndividualMessage,
    ReceivedMessage,
    SentGroupMessage,
    SentIndividualMessage,
    SentMessage,
    User,
)
from projectideas.repositories import (
    DocumentGateway,
    EmptyPointReadError,
    query_by_partition_key,
)
from projectideas.services import NotificationService
from projectideas.validation import ensure_protocol
from .users import UserUseCase

logger = logging.getLogger(__name__)


class MessagingUseCase:
    def __init__(
        self,
        gateway: DocumentGateway,
        users: UserUseCase,
        notification_service: NotificationService,
    ) -> None:
        self.gateway = gateway
        self.users = users
        self.notification_service = ensure_protocol(
            notification_service, NotificationService
        )

    async def _deliver(self, recipient: User, message: ReceivedMessage):
        await self.gateway.create_document(message)

        # Not atomic: concurrent deliveries to one user can lose a count
        recipient.unread_messages += 1
        await self.gateway.replace_document(recipient)

        try:
            await self.notification_service.notify_user_of_unread_messages(
                recipient
            )
        except Exception as e:
            logger.error(
                "Failed to notify user of unread messages",
                extra={"user_id": recipient.user_id, "error": str(e)},
                exc_info=True,
            )

    async def _try_deliver(
        self, recipient_id: str, message: ReceivedMessage
    ) -> bool:
        """Deliver to one recipient, logging instead of raising."""
        try:
            recipient = await self.users.get_user(recipient_id)
            await self._deliver(recipient, message)
        except Exception as e:
            logger.error(
                "Message delivery failed",
                extra={
                    "recipient_id": recipient_id,
                    "message_type": message.type,
                    "error": str(e),
                },
                exc_info=True,
            )
            return False
        return True

    async def send_individual_message(
        self, sender_id: str, recipient_username: str, content: str
    ) -> None:
        """
        Raises:
            EmptyPointReadError: If the sender does not exist
            EmptySingleDocumentQueryError: If no user has the recipient's
                username
        """
        sender = await self.users.get_user(sender_id)
        recipient = await self.users.get_user_by_username(
            recipient_username
        )
        await self._try_deliver(
            recipient.user_id,
            ReceivedIndividualMessage.new(
                recipient.user_id, sender.username, content
            ),
        )
        await self.gateway.create_document(
            SentIndividualMessage.new(sender_id, recipient_username, content)
        )

    async def send_individual_admin_message(
        self, recipient_id: str, content: str
    ) -> None:
        """
        Raises:
            EmptyPointReadError: If the recipient does not exist
        """
        recipient = await self.users.get_user(recipient_id)
        await self._try_deliver(
            recipient.user_id,
            ReceivedIndividualMessage.new(
                recipient.user_id, ADMIN_SENDER_USERNAME, content
            ),
        )

    async def send_group_message(
        self, sender_id: str, project_id: str, content: str
    ) -> int:
        """Message every team member except the sender.

        Returns:
            Number of successful deliveries

        Raises:
            EmptyPointReadError: If the sender or the project does not exist
        """
        sender = await self.users.get_user(sender_id)
        project = await self.gateway.read_document(
            project_id, project_id, Project
        )

        delivered = 0
        for member in project.team_members:
            if member.user_id == sender_id:
                continue
            message = ReceivedGroupMessage.new(
                member.user_id,
                sender.username,
                content,
                project.project_id,
                project.name,
            )
            if await self._try_deliver(member.user_id, message):
                delivered += 1

        await self.gateway.create_document(
            SentGroupMessage.new(
                sender_id, project.project_id, project.name, content
            )
        )
        logger.info(
            "Group message sent",
            extra={
                "sender_id": sender_id,
                "project_id": project_id,
                "delivered": delivered,
            },
        )
        return delivered

    async def send_group_admin_message(
        self, project_id: str, content: str
    ) -> int:
        """Message every team member from the platform itself.

        Raises:
            EmptyPointReadError: If the project does not exist
        """
        project = await self.gateway.read_document(
            project_id, project_id, Project
        )
        delivered = 0
        for member in project.team_members:
            message = ReceivedGroupMessage.new(
                member.user_id,
                ADMIN_SENDER_USERNAME,
                content,
                project.project_id,
                project.name,
            )
            if await self._try_deliver(member.user_id, message):
                delivered += 1
        return delivered

    async def get_received_message(
        self, recipient_id: str, message_id: str
    ) -> ReceivedMessage:
        return await self.gateway.read_document(
            message_id, recipient_id, ReceivedMessage
        )

    async def get_received_messages_by_page(
        self, recipient_id: str, page_number: int
    ) -> DocumentPage[ReceivedMessage]:
        return await self.gateway.page_query(
            query_by_partition_key(recipient_id, ReceivedMessage).order_by(
                "timeSent", descending=True
            ),
            page_number,
            ReceivedMessage,
        )

    async def get_sent_messages_by_page(
        self, sender_id: str, page_number: int
    ) -> DocumentPage[SentMessage]:
        return await self.gateway.page_query(
            query_by_partition_key(sender_id, SentMessage).order_by(
                "timeSent", descending=True
            ),
            page_number,
            SentMessage,
        )

    async def get_number_of_unread_messages(self, recipient_id: str) -> int:
        return (await self.users.get_user(recipient_id)).unread_messages

    async def mark_all_received_messages_as_read(
        self, recipient_id: str
    ) -> None:
        recipient = await self.users.get_user(recipient_id)
        recipient.unread_messages = 0
        await self.gateway.replace_document(recipient)

        message_ids = await self.gateway.value_query(
            query_by_partition_key(recipient_id, ReceivedMessage)
            .where_eq("unread", True)
            .value_of("id"),
            Container.USERS,
        )
        for message_id in message_ids:
            try:
                message = await self.get_received_message(
                    recipient_id, message_id
                )
            except EmptyPointReadError:
                # Deleted since the id query ran
                continue
            message.unread = False
            await self.update_received_message(message)

    async def update_received_message(self, message: ReceivedMessage):
        await self.gateway.replace_document(message)

    async def delete_received_message(
        self, message_id: str, recipient_id: str
    ) -> None:
        await self.gateway.delete_document(
            message_id, recipient_id, ReceivedMessage
        )

    async def delete_sent_message(
        self, message_id: str, sender_id: str
    ) -> None:
        await self.gateway.delete_document(
            message_id, sender_id, SentMessage
        )
