"""Supabase JWT validation."""

from dataclasses import dataclass
from typing import Optional

from supabase import Client

from screenclip.errors import Unauthenticated


@dataclass
class AuthUser:
    id: str
    email: Optional[str] = None


class SupabaseAuthenticator:
    def __init__(self, client: Client):
        self._client = client

    def authenticate(self, authorization: Optional[str]) -> AuthUser:
        """Validate a ``Bearer <jwt>`` header and return the user it belongs to."""
        if not authorization or not authorization.startswith("Bearer "):
            raise Unauthenticated("Missing or invalid token")

        token = authorization.replace("Bearer ", "", 1)
        try:
            user_response = self._client.auth.get_user(token)
        except Exception:
            raise Unauthenticated("Invalid token")

        user = user_response.user if user_response else None
        if user is None:
            raise Unauthenticated("Invalid token")
        return AuthUser(id=str(user.id), email=user.email)


class LocalAuthenticator:
    """Development-only: ``Bearer <user-id>`` is trusted as that user.

    Wired only with ``STORAGE_BACKEND=local``; never use it against real data.
    """

    def __init__(self, email_domain: str = "localhost"):
        self._email_domain = email_domain

    def authenticate(self, authorization: Optional[str]) -> AuthUser:
        if not authorization or not authorization.startswith("Bearer "):
            raise Unauthenticated("Missing or invalid token")
        user_id = authorization.replace("Bearer ", "", 1).strip()
        if not user_id:
            raise Unauthenticated("Invalid token")
        return AuthUser(id=user_id, email=f"{user_id}@{self._email_domain}")
