"""
JWT bearer authentication and role checks for SwiftBite API endpoints.

Tokens carry the user id (``sub``) and role. The role claim is informational;
authorization always uses the role stored on the user row.
"""

from datetime import datetime, timedelta
from typing import Optional
import logging

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .error_handling import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    """Token payload data."""

    user_id: Optional[int] = None
    role: Optional[str] = None


def create_access_token(
    user_id: int,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT access token for a user."""
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.jwt_access_token_expire_minutes
        )

    to_encode = {
        "sub": str(user_id),
        "role": role,
        "type": "access",
        "exp": expire,
        "iat": datetime.utcnow(),
    }
    return jwt.encode(
        to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
    )


def verify_token(token: str) -> Optional[TokenData]:
    """
    Verify and decode a JWT access token.

    Returns:
        TokenData if valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as e:
        logger.info(f"Rejected access token: {str(e)}")
        return None

    if payload.get("type") != "access":
        return None

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        return None

    return TokenData(user_id=user_id, role=payload.get("role"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
):
    """Resolve the authenticated user row for the request."""
    # Local import to prevent circular dependency with the models package
    from modules.auth.models.user_models import User

    if credentials is None:
        raise AuthenticationError("Not authenticated")

    token_data = verify_token(credentials.credentials)
    if token_data is None:
        raise AuthenticationError()

    user = db.query(User).filter(User.id == token_data.user_id).first()
    if user is None:
        logger.warning(f"Token references unknown user {token_data.user_id}")
        raise AuthenticationError()

    return user


def require_roles(*roles):
    """Dependency factory enforcing that the current user holds one of ``roles``."""

    allowed = {getattr(role, "value", role) for role in roles}

    async def check_roles(current_user=Depends(get_current_user)):
        if current_user.role not in allowed:
            raise AuthorizationError(
                f"Operation requires one of these roles: {sorted(allowed)}",
                details={"role": current_user.role},
            )
        return current_user

    return check_roles
