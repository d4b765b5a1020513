from collections.abc import Sequence
from typing import Annotated
from urllib.parse import urlencode

from fastapi import Depends, HTTPException
from loguru import logger
from sqlalchemy import delete, or_
from sqlmodel import col, desc, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.core.enums import Gender, MatchStatus
from app.core.security import hash_password, verify_password
from app.models.challenge import Challenge
from app.models.match import Match
from app.models.member import Member
from app.models.session import Session
from app.schemas.common import PaginationData
from app.schemas.member import (
    MemberProfileUpdate,
    MemberRegister,
    MemberStats,
    MemberUpdate,
    WinRatePoint,
)
from app.utils.misc import as_utc

DEFAULT_OPPONENT_WINDOW = 1.5
DEFAULT_OPPONENT_LIMIT = 5


def build_avatar_url(username: str) -> str:
    return f"{settings.avatar_base_url}?{urlencode({'seed': username})}"


def rank_opponents(
    member: Member,
    candidates: Sequence[Member],
    *,
    window: float = DEFAULT_OPPONENT_WINDOW,
    limit: int = DEFAULT_OPPONENT_LIMIT,
) -> list[Member]:
    """Rank candidates by UTR proximity to ``member``.

    Admins and the member themselves are skipped. Candidates further than
    ``window`` away are dropped; the rest are ordered by absolute UTR
    difference, then by id.
    """
    eligible = [
        candidate
        for candidate in candidates
        if candidate.id != member.id
        and not candidate.is_admin
        and abs(candidate.utr - member.utr) <= window
    ]
    eligible.sort(key=lambda candidate: (abs(candidate.utr - member.utr), candidate.id))
    return eligible[:limit]


class MemberService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_members(  # noqa: PLR0913
        self,
        *,
        page: int,
        page_size: int,
        search: str | None = None,
        gender: Gender | None = None,
        min_age: int | None = None,
        max_age: int | None = None,
        min_utr: float | None = None,
        max_utr: float | None = None,
        exclude_admins: bool = False,
    ) -> tuple[Sequence[Member], PaginationData]:
        offset = (page - 1) * page_size

        filters = []
        if exclude_admins:
            filters.append(col(Member.is_admin).is_(False))
        if search:
            filters.append(col(Member.username).ilike(f"%{search}%"))
        if gender is not None:
            filters.append(col(Member.gender) == gender)
        if min_age is not None:
            filters.append(col(Member.age) >= min_age)
        if max_age is not None:
            filters.append(col(Member.age) <= max_age)
        if min_utr is not None:
            filters.append(col(Member.utr) >= min_utr)
        if max_utr is not None:
            filters.append(col(Member.utr) <= max_utr)

        total_items_result = await self.db.exec(
            select(func.count()).select_from(Member).where(*filters)
        )
        total_items = total_items_result.one()

        total_pages = (total_items + page_size - 1) // page_size

        result = await self.db.exec(
            select(Member)
            .where(*filters)
            .order_by(desc(col(Member.utr)), col(Member.id))
            .offset(offset)
            .limit(page_size)
        )
        members = result.all()

        pagination = PaginationData(
            page=page, page_size=page_size, total_items=total_items, total_pages=total_pages
        )

        return members, pagination

    async def get_member(self, member_id: int) -> Member | None:
        result = await self.db.exec(select(Member).where(Member.id == member_id))
        return result.first()

    async def get_member_by_email(self, email: str) -> Member | None:
        result = await self.db.exec(select(Member).where(Member.email == email))
        return result.first()

    async def get_member_by_username(self, username: str) -> Member | None:
        result = await self.db.exec(select(Member).where(Member.username == username))
        return result.first()

    async def _ensure_unique(
        self, *, email: str | None = None, username: str | None = None, member_id: int | None = None
    ) -> None:
        if email is not None:
            existing = await self.get_member_by_email(email)
            if existing and existing.id != member_id:
                raise HTTPException(status_code=409, detail="Email already registered")
        if username is not None:
            existing = await self.get_member_by_username(username)
            if existing and existing.id != member_id:
                raise HTTPException(status_code=409, detail="Username already taken")

    async def register_member(self, data: MemberRegister) -> Member:
        await self._ensure_unique(email=data.email, username=data.username)

        member = Member(
            first_name=data.first_name,
            last_name=data.last_name,
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
            phone=data.phone,
            age=data.age,
            gender=data.gender,
            utr=data.utr,
            signature=data.signature,
            avatar_url=build_avatar_url(data.username),
            is_admin=False,
        )
        self.db.add(member)
        await self.db.commit()
        await self.db.refresh(member)
        logger.info(f"Registered member {member}")
        return member

    async def authenticate(self, email: str, password: str) -> Member | None:
        member = await self.get_member_by_email(email)
        if not member or not verify_password(password, member.password_hash):
            return None
        return member

    async def _apply_update(
        self, member: Member, data: MemberProfileUpdate | MemberUpdate
    ) -> Member:
        member_data = data.model_dump(exclude_unset=True, exclude_none=True)
        await self._ensure_unique(
            email=member_data.get("email"), username=member_data.get("username"), member_id=member.id
        )

        member.sqlmodel_update(member_data)
        self.db.add(member)
        await self.db.commit()
        await self.db.refresh(member)
        return member

    async def update_profile(self, member: Member, data: MemberProfileUpdate) -> Member:
        """Self-service profile update for the acting member."""
        return await self._apply_update(member, data)

    async def update_member(self, member_id: int, actor: Member, data: MemberUpdate) -> Member:
        """Update a member's profile as that member or as an admin."""
        member = await self.get_member(member_id)
        if not member:
            raise HTTPException(status_code=404, detail="Member not found")

        if actor.id != member.id and not actor.is_admin:
            raise HTTPException(status_code=403, detail="Not authorized to update this profile")

        return await self._apply_update(member, data)

    async def delete_member(self, member_id: int) -> None:
        """Delete a non-admin member and everything that references them.

        Matches go first, then challenges and sessions, then the member itself,
        all in one transaction.
        """
        member = await self.get_member(member_id)
        if not member:
            raise HTTPException(status_code=404, detail="Member not found")

        if member.is_admin:
            raise HTTPException(status_code=403, detail="Cannot delete admin users")

        await self.db.exec(
            delete(Match).where(
                or_(col(Match.player1_id) == member_id, col(Match.player2_id) == member_id)
            )
        )
        await self.db.exec(
            delete(Challenge).where(
                or_(
                    col(Challenge.challenger_id) == member_id,
                    col(Challenge.challenged_id) == member_id,
                )
            )
        )
        await self.db.exec(delete(Session).where(col(Session.member_id) == member_id))
        await self.db.delete(member)
        await self.db.commit()
        logger.info(f"Deleted member #{member_id} with their matches and challenges")

    async def get_member_stats(self, member_id: int) -> MemberStats:
        """Wins, losses and cumulative win rate over the member's graded matches."""
        member = await self.get_member(member_id)
        if not member:
            raise HTTPException(status_code=404, detail="Member not found")

        result = await self.db.exec(
            select(Match)
            .where(
                col(Match.status) == MatchStatus.GRADED,
                or_(col(Match.winner_id) == member_id, col(Match.loser_id) == member_id),
            )
            .order_by(col(Match.match_time), col(Match.id))
        )
        matches = result.all()

        wins = 0
        history: list[WinRatePoint] = []
        for played, match in enumerate(matches, start=1):
            if match.winner_id == member_id:
                wins += 1
            history.append(
                WinRatePoint(
                    match_time=as_utc(match.match_time), win_rate=round(wins / played * 100, 2)
                )
            )

        total = len(matches)
        return MemberStats(
            wins=wins,
            losses=total - wins,
            total_matches=total,
            win_rate=round(wins / total * 100, 2) if total else 0.0,
            history=history,
        )

    async def get_top_members(self, limit: int) -> Sequence[Member]:
        """Non-admin members with the highest UTR."""
        result = await self.db.exec(
            select(Member)
            .where(col(Member.is_admin).is_(False))
            .order_by(desc(col(Member.utr)), col(Member.id))
            .limit(limit)
        )
        return result.all()

    async def get_recommended_opponents(
        self,
        member_id: int,
        *,
        window: float = DEFAULT_OPPONENT_WINDOW,
        limit: int = DEFAULT_OPPONENT_LIMIT,
    ) -> list[Member]:
        member = await self.get_member(member_id)
        if not member:
            raise HTTPException(status_code=404, detail="Member not found")

        result = await self.db.exec(
            select(Member).where(
                col(Member.is_admin).is_(False),
                col(Member.id) != member_id,
                col(Member.utr) >= member.utr - window,
                col(Member.utr) <= member.utr + window,
            )
        )
        return rank_opponents(member, result.all(), window=window, limit=limit)
