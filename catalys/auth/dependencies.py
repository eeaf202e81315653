from dataclasses import dataclass
import logging
from typing import Any, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from catalys.auth.clerk import verify_clerk_token


bearer_scheme = HTTPBearer(auto_error=False)
logger = logging.getLogger("auth.deps")


@dataclass
class AuthContext:
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    # Active Clerk organization, when the session has one.
    org_id: Optional[str] = None


def _claim(claims: dict[str, Any], *names: str) -> Optional[str]:
    for name in names:
        value = claims.get(name)
        if isinstance(value, str) and value:
            return value
    return None


def auth_context_from_claims(claims: dict[str, Any]) -> AuthContext:
    user_id = claims.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token claims")
    context = AuthContext(
        user_id=user_id,
        email=_claim(claims, "email", "primary_email_address", "email_address"),
        name=_claim(claims, "name", "full_name", "first_name"),
        org_id=_claim(claims, "org_id", "organization_id"),
    )
    logger.debug("AuthContext built", extra={"sub": user_id, "org_id": context.org_id})
    return context


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> AuthContext:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    return auth_context_from_claims(verify_clerk_token(credentials.credentials))


def get_optional_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> Optional[AuthContext]:
    """Like ``get_current_user`` but yields None for anonymous callers or rejected tokens."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return auth_context_from_claims(verify_clerk_token(credentials.credentials))
    except HTTPException as exc:
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            return None
        raise
