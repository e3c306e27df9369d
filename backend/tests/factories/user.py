"""Factory Boy definition for :class:`blogapi.models.user.User`."""

from __future__ import annotations

import functools

import factory

from blogapi.core.security import default_hasher
from blogapi.models.user import User, UserRole, UserStatus
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"


@functools.lru_cache(maxsize=None)
def _hash(password: str) -> str:
    # scrypt is deliberately slow; one hash per distinct password is enough
    return default_hasher.hash(password)


class UserFactory(BaseFactory):
    """
    Build persisted, active :class:`blogapi.models.user.User` instances.

    Pass ``password=...`` to choose the plaintext; it is hashed with the
    application's hasher.
    """

    class Meta:
        model = User

    class Params:
        password = DEFAULT_PASSWORD

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    password_hash = factory.LazyAttribute(lambda o: _hash(o.password))
    role = UserRole.USER
    status = UserStatus.ACTIVE


class AdminFactory(UserFactory):
    role = UserRole.ADMIN
