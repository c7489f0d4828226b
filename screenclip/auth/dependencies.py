"""FastAPI dependency for the authenticated clip owner."""

from fastapi import Depends, Header

from screenclip.auth.supabase_auth import AuthUser
from screenclip.errors import Unauthenticated
from screenclip.services import Services, get_services


def get_current_user(
    authorization: str = Header(None),
    services: Services = Depends(get_services),
) -> AuthUser:
    if services.auth is None:
        raise Unauthenticated("Authentication is not configured")
    return services.auth.authenticate(authorization)
