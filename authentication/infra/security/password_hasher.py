from abc import ABC, abstractmethod
from typing import Optional

from django.contrib.auth.hashers import check_password, is_password_usable, make_password


class PasswordHasher(ABC):
    """Abstract password hashing capability."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Return a salted credential for ``password``."""
        pass

    @abstractmethod
    def verify(self, password: str, credential: str) -> bool:
        """Return True when ``password`` matches the stored ``credential``."""
        pass


class DjangoPasswordHasher(PasswordHasher):
    """
    Password hashing through ``django.contrib.auth.hashers``.

    Uses the first entry of settings.PASSWORD_HASHERS unless an explicit
    hasher name (e.g. "pbkdf2_sha256") is given.
    """

    def __init__(self, hasher: Optional[str] = None):
        self.hasher = hasher or "default"

    def hash(self, password: str) -> str:
        return make_password(password, hasher=self.hasher)

    def verify(self, password: str, credential: str) -> bool:
        if not credential or not is_password_usable(credential):
            return False
        return check_password(password, credential)
