from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field


class CredentialsRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class PasswordResetRequest(BaseModel):
    email: EmailStr


class SessionResponse(BaseModel):
    access_token: str | None = None
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None
    user_id: str | None = None
    email: str | None = None
    confirmation_required: bool = False


class AuthUser(BaseModel):
    id: str
    email: str | None = None
