import math
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from typing import Annotated

from fastapi import Depends
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.core.enums import Gender, MatchStatus, StatsPeriod
from app.models.match import Match
from app.models.member import Member
from app.schemas.analytics import (
    AgeGroups,
    DailyMatchCount,
    MatchStats,
    MemberAnalytics,
    UtrLevels,
)
from app.schemas.member import ActiveMember, MemberRead
from app.utils.misc import as_utc, get_club_tz, get_utc_now

# Lower bounds, ascending; each bucket runs up to the next bound
UTR_LEVELS = (("low", 0.0), ("mid", 5.0), ("high", 9.0))
AGE_GROUPS = (("child", 0), ("teen", 13), ("adult", 19), ("elder", 51))


def bucket_for(value: float, bounds: Sequence[tuple[str, float]]) -> str:
    """Name of the last bucket whose lower bound is <= value; values below all bounds land in the first."""
    name = bounds[0][0]
    for bucket_name, lower in bounds:
        if value >= lower:
            name = bucket_name
    return name


def daily_match_counts(
    match_times: Iterable[datetime], *, now: datetime, days: int
) -> list[DailyMatchCount]:
    """Zero-filled per-day counts for the ``days`` club-local days ending today, oldest first."""
    tz = get_club_tz()
    today = as_utc(now).astimezone(tz).date()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]

    counts = Counter(as_utc(match_time).astimezone(tz).date() for match_time in match_times)
    return [DailyMatchCount(date=f"{day.month}/{day.day}", matches=counts[day]) for day in window]


class AnalyticsService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_member_analytics(self) -> MemberAnalytics:
        """Member counts, gender split, UTR levels, age groups and averages over all members."""
        result = await self.db.exec(select(Member.is_admin, Member.gender, Member.utr, Member.age))
        rows = result.all()

        total = len(rows)
        admins = sum(1 for is_admin, *_ in rows if is_admin)

        gender: dict[Gender, int] = dict.fromkeys(Gender, 0)
        utr_levels: Counter[str] = Counter()
        age_groups: Counter[str] = Counter()
        for _, member_gender, utr, age in rows:
            gender[Gender(member_gender)] += 1
            utr_levels[bucket_for(utr, UTR_LEVELS)] += 1
            age_groups[bucket_for(age, AGE_GROUPS)] += 1

        avg_utr = round(sum(utr for *_, utr, _ in rows) / total, 2) if total else 0.0
        avg_age = math.trunc(sum(age for *_, age in rows) / total) if total else 0

        return MemberAnalytics(
            total_members=total,
            admin_members=admins,
            regular_members=total - admins,
            gender=gender,
            utr_level=UtrLevels(**{name: utr_levels[name] for name, _ in UTR_LEVELS}),
            age=AgeGroups(**{name: age_groups[name] for name, _ in AGE_GROUPS}),
            avg_utr=avg_utr,
            avg_age=avg_age,
        )

    async def get_match_stats(self, period: StatsPeriod) -> MatchStats:
        """Match counts by status and per day, for matches scheduled in the last ``period``."""
        now = get_utc_now()
        start = now - timedelta(days=period.days)

        result = await self.db.exec(
            select(Match.status, Match.match_time).where(
                col(Match.match_time) >= start, col(Match.match_time) <= now
            )
        )
        rows = result.all()

        by_status = Counter(MatchStatus(status) for status, _ in rows)
        return MatchStats(
            period=period,
            total=len(rows),
            pending=by_status[MatchStatus.PENDING],
            finished=by_status[MatchStatus.FINISHED],
            graded=by_status[MatchStatus.GRADED],
            daily=daily_match_counts(
                (match_time for _, match_time in rows), now=now, days=period.days
            ),
        )

    async def get_most_active(self, limit: int, window_days: int = 30) -> list[ActiveMember]:
        """Members with the most graded matches in the window; ties go to the lower id."""
        since = get_utc_now() - timedelta(days=window_days)

        result = await self.db.exec(
            select(Match.player1_id, Match.player2_id).where(
                col(Match.status) == MatchStatus.GRADED, col(Match.match_time) >= since
            )
        )
        counts: Counter[int] = Counter()
        for player1_id, player2_id in result.all():
            counts[player1_id] += 1
            counts[player2_id] += 1

        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]
        if not ranked:
            return []

        members_result = await self.db.exec(
            select(Member).where(col(Member.id).in_([member_id for member_id, _ in ranked]))
        )
        members = {member.id: member for member in members_result.all()}

        return [
            ActiveMember(
                **MemberRead.model_validate(members[member_id]).model_dump(), match_count=count
            )
            for member_id, count in ranked
            if member_id in members
        ]
