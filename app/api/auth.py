from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.core.security import (
    create_access_token,
    generate_refresh_token,
    get_current_member,
    hash_token,
    refresh_token_expiry,
)
from app.models.member import Member
from app.models.session import Session
from app.schemas.auth import LoginRequest, RefreshTokenRequest, TokenResponse
from app.schemas.common import APIResponse
from app.schemas.member import MemberProfileUpdate, MemberRead, MemberRegister
from app.services.member import MemberService
from app.utils.misc import get_utc_now

router = APIRouter(prefix="/auth", tags=["auth"])


async def _open_session(db: AsyncSession, member: Member) -> TokenResponse:
    """Store a new refresh session for the member and return both tokens."""
    refresh_token = generate_refresh_token()
    session = Session(
        member_id=member.id,
        token_hash=hash_token(refresh_token),
        revoked=False,
        expires_at=refresh_token_expiry(),
    )
    db.add(session)
    await db.commit()
    await db.refresh(session)

    return TokenResponse(
        access_token=create_access_token(member, session_id=session.id),
        refresh_token=refresh_token,
        member=MemberRead.model_validate(member),
    )


async def _find_session(db: AsyncSession, refresh_token: str) -> Session | None:
    result = await db.exec(select(Session).where(Session.token_hash == hash_token(refresh_token)))
    return result.first()


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: MemberRegister,
    service: Annotated[MemberService, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> APIResponse[TokenResponse]:
    member = await service.register_member(body)
    return APIResponse(data=await _open_session(db, member), message="Registered successfully")


@router.post("/login")
async def login(
    body: LoginRequest,
    service: Annotated[MemberService, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> APIResponse[TokenResponse]:
    member = await service.authenticate(body.email, body.password)
    if not member:
        logger.warning(f"Failed login for {body.email}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return APIResponse(data=await _open_session(db, member))


@router.post("/refresh")
async def refresh(
    body: RefreshTokenRequest, db: Annotated[AsyncSession, Depends(get_db)]
) -> APIResponse[TokenResponse]:
    """Exchange a refresh token for a new access token; the refresh token is rotated."""
    session = await _find_session(db, body.refresh_token)
    if not session or not session.is_active(get_utc_now()):
        raise HTTPException(status_code=401, detail="Invalid or expired refresh token")

    result = await db.exec(select(Member).where(col(Member.id) == session.member_id))
    member = result.first()
    if not member:
        raise HTTPException(status_code=401, detail="Member no longer exists")

    new_refresh = generate_refresh_token()
    session.token_hash = hash_token(new_refresh)
    session.expires_at = refresh_token_expiry()
    db.add(session)
    await db.commit()

    return APIResponse(
        data=TokenResponse(
            access_token=create_access_token(member, session_id=session.id),
            refresh_token=new_refresh,
        )
    )


@router.post("/logout")
async def logout(
    body: RefreshTokenRequest, db: Annotated[AsyncSession, Depends(get_db)]
) -> APIResponse[None]:
    session = await _find_session(db, body.refresh_token)
    if session and not session.revoked:
        session.revoked = True
        db.add(session)
        await db.commit()
        logger.info(f"Member #{session.member_id} logged out")

    return APIResponse(message="Logged out")


@router.get("/me")
async def get_me(member: Annotated[Member, Depends(get_current_member)]) -> APIResponse[MemberRead]:
    return APIResponse(data=MemberRead.model_validate(member))


@router.put("/me")
async def update_me(
    body: MemberProfileUpdate,
    member: Annotated[Member, Depends(get_current_member)],
    service: Annotated[MemberService, Depends()],
) -> APIResponse[MemberRead]:
    updated = await service.update_profile(member, body)
    return APIResponse(data=MemberRead.model_validate(updated), message="Profile updated successfully")
