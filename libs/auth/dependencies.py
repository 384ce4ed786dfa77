from typing import Annotated, Any, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> AuthUser:
    """Verify a bearer token and return its claims.

    Raises ``JWTError`` / ``ValidationError`` on a bad signature, expiry, or
    malformed payload.
    """
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"verify_aud": False},
    )
    return AuthUser(**payload)


def unverified_claims(token: str) -> Optional[dict[str, Any]]:
    """Read token claims without checking the signature.

    For client-side UI gating only, never for authorization.
    """
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return None


async def get_current_user(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthUser:
    """
    Validate the bearer token and return the authenticated customer.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if token is None:
        raise credentials_exception

    try:
        return decode_token(token.credentials)
    except (JWTError, ValidationError):
        logger.info("Rejected bearer token")
        raise credentials_exception


async def require_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
) -> AuthUser:
    """
    Ensure the token carries the ``is_admin`` claim.

    Routers that change state additionally confirm the flag on the stored
    customer record (see ``services.shop_service.routers._helpers``).
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user
