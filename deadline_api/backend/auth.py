"""Auth gate: resolves the caller from request headers and checks roles.

Identity is asserted by the upstream gateway in ``X-User-Id`` and
``X-User-Role``. When ``API_KEY`` is set, requests must also present it in
``X-API-Key``.
"""
import os
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

log = structlog.get_logger()

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = {ROLE_USER, ROLE_ADMIN}

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)
USER_ID_HEADER = APIKeyHeader(name="X-User-Id", auto_error=False)
USER_ROLE_HEADER = APIKeyHeader(name="X-User-Role", auto_error=False)


@dataclass(frozen=True)
class Caller:
    id: str
    role: str


def require_api_key(api_key: Optional[str] = Depends(API_KEY_HEADER)):
    expected = os.getenv("API_KEY")
    if expected and api_key != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
    return True


def get_caller(
    _: bool = Depends(require_api_key),
    user_id: Optional[str] = Depends(USER_ID_HEADER),
    role: Optional[str] = Depends(USER_ROLE_HEADER),
) -> Caller:
    if not user_id or not user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, no user identity")
    role = (role or ROLE_USER).strip().lower()
    if role not in ROLES:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Unknown role '{role}'")
    return Caller(id=user_id.strip(), role=role)


def role_allowed(role: str, allowed: Iterable[str]) -> bool:
    return role in set(allowed)


def require_roles(*allowed: str) -> Callable[..., Caller]:
    """Dependency factory: the resolved caller, if their role is in ``allowed``."""

    def dependency(caller: Caller = Depends(get_caller)) -> Caller:
        if not role_allowed(caller.role, allowed):
            log.warning("role_denied", user_id=caller.id, role=caller.role, allowed=list(allowed))
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {caller.role} is not authorized to access this route",
            )
        return caller

    return dependency
