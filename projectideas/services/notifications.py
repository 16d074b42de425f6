"""
Notification and email service protocols.

Both are side-effect collaborators owned outside this package. Message
delivery calls ``notify_user_of_unread_messages`` after each delivered
message and swallows its failures; user creation calls
``send_welcome_email`` once.
"""

from typing import Protocol, runtime_checkable

from projectideas.domain import User


@runtime_checkable
class NotificationService(Protocol):
    async def notify_user_of_unread_messages(self, user: User) -> None:
        """Tell a user they have unread messages (e.g. push or email)."""
        ...


@runtime_checkable
class EmailService(Protocol):
    async def send_welcome_email(self, user: User) -> None:
        """Send the welcome email to a newly registered user."""
        ...
