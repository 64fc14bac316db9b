"""
Bearer token authentication.

Tokens are issued by the external identity provider; this service only
verifies them and reads the principal from the claims.
"""

import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from marketplace.api.dependencies import get_app_settings
from marketplace.config.settings import Settings
from marketplace.core.domain import AuthenticationRequiredException
from marketplace.domains.commerce.application.ports import CustomerProfile

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def decode_principal(token: str, settings: Settings) -> CustomerProfile:
    """
    Verify a bearer token and build the principal from its claims.

    Raises:
        AuthenticationRequiredException: Invalid, expired or subject-less token
    """
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except JWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise AuthenticationRequiredException("Invalid or expired token") from e

    uid = claims.get("sub") or claims.get("uid")
    if not uid:
        raise AuthenticationRequiredException("Token has no subject")

    return CustomerProfile(
        uid=str(uid),
        name=claims.get("name"),
        email=claims.get("email"),
        phone=claims.get("phone_number"),
    )


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    settings: Settings = Depends(get_app_settings),  # noqa: B008
) -> CustomerProfile:
    """Authenticated principal for the current request (401 otherwise)."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationRequiredException()
    return decode_principal(credentials.credentials, settings)


__all__ = ["bearer_scheme", "decode_principal", "get_current_principal"]
