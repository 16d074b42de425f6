"""Helpers shared by the use case tests."""

from projectideas.domain import User
from projectideas.domain.tests.factories import UserFactory
from projectideas.use_cases import UserUseCase

PAGE_SIZE = 3


async def create_user(users: UserUseCase, **kwargs) -> User:
    user = UserFactory.build(**kwargs)
    await users.create_user(user)
    return user
