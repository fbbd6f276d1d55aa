import logging
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from .config import get_settings
from .supabase import fetch_one
from ..schemas.user import UserSession

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(
    auto_error=False,
    description="Supabase access token (without the 'Bearer' prefix)",
    scheme_name="bearerAuth",
)


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> str:
    """Verify a Supabase-issued JWT and return the user id in its `sub` claim."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise _credentials_exception(f"Invalid authentication token: {e}")

    user_id = payload.get("sub")
    if not user_id:
        raise _credentials_exception()
    return user_id


async def session_for_token(token: str) -> UserSession:
    """Build the acting user's session from their access token and profile."""
    user_id = decode_access_token(token)
    profile = await fetch_one("profiles", {"id": user_id})
    if not profile:
        logger.warning(f"Token for {user_id} has no matching profile")
        raise _credentials_exception()

    return UserSession(
        user_id=profile["id"],
        name=profile.get("name") or "",
        is_admin=bool(profile.get("is_admin")),
        is_banned=bool(profile.get("is_banned")),
    )


async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> UserSession:
    if credentials is None:
        raise _credentials_exception("Not authenticated")

    session = await session_for_token(credentials.credentials)
    if session.is_banned:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been suspended",
        )
    return session


async def require_admin(session: UserSession = Depends(get_current_session)) -> UserSession:
    if not session.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return session
