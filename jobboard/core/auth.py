"""
Authentication Utility - JWT handling and role checks.

Tokens are issued by the job board's login flow; this service only
verifies them and resolves the caller's role.

Provides:
- JWT token creation/verification
- FastAPI dependencies for role-gated routes
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import text

from jobboard.core.config import get_settings
from jobboard.db.postgres import get_db_session
from jobboard.schemas.schemas import UserRole

settings = get_settings()
logger = logging.getLogger(__name__)

# Bearer token extractor; a missing header is answered with 401 below
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        def route(user: dict = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise credentials_exception

    # Verify user exists
    with get_db_session() as db:
        result = db.execute(
            text("SELECT id, email, role, is_active FROM users WHERE id = :id"),
            {"id": user_id}
        )
        user = result.fetchone()

    if not user:
        raise credentials_exception

    if not user[3]:  # is_active
        raise HTTPException(status_code=403, detail="Account deactivated")

    return {"user_id": user[0], "email": user[1], "role": user[2]}


def _require_role(user: dict, role: UserRole, detail: str) -> dict:
    if user["role"] != role.value:
        logger.info("User %s with role %s denied %s-only endpoint", user["user_id"], user["role"], role.value)
        raise HTTPException(status_code=403, detail=detail)
    return user


def get_current_job_seeker(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require job seeker role."""
    return _require_role(user, UserRole.job_seeker, "Unauthorized - job seekers only")


def get_current_employer(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require employer role."""
    return _require_role(user, UserRole.employer, "Unauthorized - employers only")


def get_current_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require admin role."""
    return _require_role(user, UserRole.admin, "Admins only")
