from .session import build_session, session_expired
from .user import build_user, find_user, find_user_by_email, public_user


__all__ = [
    "build_user",
    "find_user",
    "find_user_by_email",
    "public_user",
    "build_session",
    "session_expired",
]
