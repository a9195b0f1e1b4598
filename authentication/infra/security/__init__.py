from .password_hasher import DjangoPasswordHasher, PasswordHasher


__all__ = ["PasswordHasher", "DjangoPasswordHasher"]
