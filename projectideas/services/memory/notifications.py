"""
In-memory notification and email services.

Both record every call so tests can assert on what would have been sent.
"""

import logging
from typing import List

from projectideas.domain import User

logger = logging.getLogger(__name__)


class MemoryNotificationService:
    def __init__(self) -> None:
        self.notified: List[User] = []

    async def notify_user_of_unread_messages(self, user: User) -> None:
        logger.debug(
            "MemoryNotificationService: Notifying user",
            extra={
                "user_id": user.user_id,
                "unread_messages": user.unread_messages,
            },
        )
        self.notified.append(user)


class MemoryEmailService:
    def __init__(self) -> None:
        self.welcomed: List[User] = []

    async def send_welcome_email(self, user: User) -> None:
        logger.debug(
            "MemoryEmailService: Sending welcome email",
            extra={"user_id": user.user_id, "email": user.email},
        )
        self.welcomed.append(user)
