from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from stockdrop.core.database import get_db
from stockdrop.schemas.auth import AuthUser
from stockdrop.services.auth_service import auth_service

bearer_scheme = HTTPBearer(auto_error=False)

__all__ = ["bearer_scheme", "get_current_user", "get_db"]


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthUser:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return await auth_service.get_user(credentials.credentials)
