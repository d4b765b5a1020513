from __future__ import annotations

from pydantic import BaseModel, EmailStr

from app.schemas.member import MemberRead


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str | None = None
    member: MemberRead | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str
