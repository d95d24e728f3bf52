from __future__ import annotations

from fastapi import APIRouter, Depends

from stockdrop.api.v1.deps import get_current_user
from stockdrop.schemas.auth import AuthUser, CredentialsRequest, PasswordResetRequest, SessionResponse
from stockdrop.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=SessionResponse)
async def register(payload: CredentialsRequest):
    return await auth_service.sign_up(payload.email, payload.password)


@router.post("/login", response_model=SessionResponse)
async def login(payload: CredentialsRequest):
    return await auth_service.sign_in(payload.email, payload.password)


@router.post("/reset-password")
async def reset_password(payload: PasswordResetRequest):
    await auth_service.reset_password(payload.email)
    return {"ok": True, "message": "If the account exists, a reset link has been sent."}


@router.get("/me", response_model=AuthUser)
async def me(user: AuthUser = Depends(get_current_user)):
    return user
