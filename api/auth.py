"""JWT principal utilities and dependencies.

Tokens are issued by the external identity provider and signed with the
shared secret from settings. Claims: ``sub`` (employee id), ``email``,
``role`` (ADMIN | EMPLOYEE), ``type`` = "access".
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import settings
from records import Role
from storage import Storage, get_store

# HTTP Bearer security
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as seen by the lifecycle and report endpoints."""

    employee_id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def create_access_token(
    employee_id: str,
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create JWT access token (provider integration and local tooling)."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    payload = {
        "sub": employee_id,
        "email": email,
        "role": Role(role).value,
        "type": "access",
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict:
    """Verify JWT token and return payload."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired"
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type (expected access)"
        )
    return payload


def principal_from_claims(payload: dict) -> Principal:
    try:
        return Principal(
            employee_id=str(payload["sub"]),
            email=str(payload.get("email", "")).lower(),
            role=Role(payload["role"]),
        )
    except (KeyError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is missing required claims"
        )


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: Storage = Depends(get_store),
) -> Principal:
    """Resolve the bearer token into a Principal.

    Deactivated employees are refused even while their token is still valid.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )
    principal = principal_from_claims(verify_token(credentials.credentials))

    employee = store.employees.get(principal.employee_id)
    if employee is not None and not employee.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account disabled"
        )
    return principal


def require_role(*allowed_roles: Role):
    """Dependency factory for role-based access control."""
    async def role_checker(principal: Principal = Depends(get_current_principal)):
        if principal.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions (required: {', '.join(r.value for r in allowed_roles)})"
            )
        return principal

    return role_checker


# Convenience dependencies
require_admin = require_role(Role.ADMIN)
require_any_role = require_role(Role.ADMIN, Role.EMPLOYEE)
