"""One-way password hashing backed by :mod:`werkzeug.security`."""

from __future__ import annotations

import logging

from werkzeug.security import check_password_hash, generate_password_hash

log = logging.getLogger(__name__)

DEFAULT_METHOD = "scrypt"


class PasswordHasher:
    """
    Hash and verify passwords with a slow, salted algorithm.

    Werkzeug embeds the method, parameters and a per-call random salt in the
    returned string, so two hashes of the same password never match and
    verification needs nothing but the stored value.

    :param method: Werkzeug hashing method (``"scrypt"`` or ``"pbkdf2:sha256"``).
    :param salt_length: Length of the random salt.
    """

    def __init__(self, method: str = DEFAULT_METHOD, salt_length: int = 16) -> None:
        self.method = method
        self.salt_length = salt_length
        self._dummy_hash: str | None = None

    def hash(self, plaintext: str) -> str:
        """Return a salted hash of ``plaintext``.

        :raises ValueError: If ``plaintext`` is empty or not a string.
        """
        if not isinstance(plaintext, str) or not plaintext:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(plaintext, method=self.method, salt_length=self.salt_length)

    def verify(self, plaintext: str, hashed: str | None) -> bool:
        """Check ``plaintext`` against ``hashed``.

        Fails closed: a missing or malformed hash, a non-string candidate or a
        mismatch all return ``False``.
        """
        if not hashed or not isinstance(plaintext, str):
            return False
        try:
            return bool(check_password_hash(hashed, plaintext))
        except (ValueError, TypeError):
            log.warning("password.verify_failed: unreadable hash")
            return False

    def burn(self, plaintext: str) -> None:
        """Spend the same work as :meth:`verify` against a throwaway hash.

        Used on unknown-email logins so both failure paths cost roughly the
        same time.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("timing-equalizer")
        self.verify(plaintext, self._dummy_hash)


default_hasher = PasswordHasher()
