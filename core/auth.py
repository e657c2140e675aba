"""
Authentication and authorization dependencies.

Provides FastAPI dependencies for:
- Verifying the bearer token and exposing its claims
- Getting the current authenticated user
- Owner guards: verify token, resolve the stored owner, compare
"""
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Any, Callable, Optional
import logging

from core.database import get_db
from core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from core.security import TokenClaims, verify_access_token
from models import User, parse_id

logger = logging.getLogger(__name__)

# Use auto_error=False to handle missing credentials manually and return 401 (not 403)
security = HTTPBearer(auto_error=False)

# (db, path id) -> id of the user that owns the resource.
# Raises NotFoundError when the resource does not exist.
OwnerResolver = Callable[[Session, str], Any]


def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenClaims:
    """
    Verify the bearer token and return its claims.

    Missing header, wrong scheme, bad signature and expiry all raise 401.
    """
    if not credentials:
        raise UnauthorizedError("Not authenticated")

    claims = verify_access_token(credentials.credentials)
    if claims is None:
        raise UnauthorizedError("Invalid authentication credentials")
    return claims


def get_current_user(
    claims: TokenClaims = Depends(get_token_claims),
    db: Session = Depends(get_db)
) -> User:
    """
    Get the current authenticated user from JWT token.

    Raises 401 if the token's subject no longer exists.
    """
    user_id = parse_id(claims.subject)
    user = db.get(User, user_id) if user_id else None
    if not user:
        raise UnauthorizedError("User not found")
    return user


def ensure_owner(claims: TokenClaims, owner_id: Any, detail: str) -> None:
    """Raise 403 unless the stored owner is the token subject."""
    if str(owner_id) != claims.subject:
        logger.warning(
            "Ownership check rejected",
            extra={"extra_fields": {"subject": claims.subject, "owner_id": str(owner_id)}},
        )
        raise ForbiddenError(detail)


def require_owner(
    resolve_owner_id: OwnerResolver,
    *,
    invalid_detail: str,
    mismatch_detail: str,
    collapse_not_found: bool = True,
):
    """
    Dependency factory for owner-guarded routes.

    The route must declare an ``id`` path parameter. The chain is:

    1. no bearer token -> 401, nothing else runs
    2. token fails verification -> 403 ``invalid_detail``
    3. ``resolve_owner_id(db, id)`` loads the stored owner; a NotFoundError is
       reported as 403 ``invalid_detail`` when ``collapse_not_found`` is set,
       otherwise it propagates as 404
    4. owner != token subject -> 403 ``mismatch_detail``

    On success the verified claims are returned to the handler.

    Usage:
        require_exercise_owner = require_owner(
            exercise_service.get_owner_id,
            invalid_detail="Invalid token or exercise not found",
            mismatch_detail="You can only access your own exercises",
        )
    """
    def owner_checker(
        id: str,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        db: Session = Depends(get_db),
    ) -> TokenClaims:
        if not credentials:
            raise UnauthorizedError("Not authenticated")

        claims = verify_access_token(credentials.credentials)
        if claims is None:
            raise ForbiddenError(invalid_detail)

        try:
            owner_id = resolve_owner_id(db, id)
        except NotFoundError:
            if collapse_not_found:
                raise ForbiddenError(invalid_detail) from None
            raise

        ensure_owner(claims, owner_id, mismatch_detail)
        return claims

    return owner_checker
