from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Annotated, Any

from fastapi import Depends, HTTPException
from loguru import logger
from sqlalchemy import delete, or_, update
from sqlmodel import col, desc, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.core.enums import MatchHistoryStatus, MatchResult, MatchStatus, StatsPeriod
from app.models.match import Match
from app.schemas.common import PaginationData
from app.schemas.match import MatchScores
from app.utils.misc import get_utc_now
from app.utils.scoring import decide_winner


def build_graded_values(match: Match, scores: MatchScores) -> dict[str, Any]:
    """Column values for a graded match: all six scores plus winner and loser."""
    if decide_winner(scores.sets) == 1:
        winner_id, loser_id = match.player1_id, match.player2_id
    else:
        winner_id, loser_id = match.player2_id, match.player1_id

    return {
        **scores.model_dump(),
        "winner_id": winner_id,
        "loser_id": loser_id,
        "status": MatchStatus.GRADED,
    }


class MatchService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_matches(
        self, *, page: int, page_size: int
    ) -> tuple[Sequence[Match], PaginationData]:
        offset = (page - 1) * page_size

        total_items_result = await self.db.exec(select(func.count()).select_from(Match))
        total_items = total_items_result.one()

        total_pages = (total_items + page_size - 1) // page_size

        result = await self.db.exec(
            select(Match)
            .order_by(desc(col(Match.match_time)), desc(col(Match.id)))
            .offset(offset)
            .limit(page_size)
        )
        matches = result.all()

        pagination = PaginationData(
            page=page, page_size=page_size, total_items=total_items, total_pages=total_pages
        )

        return matches, pagination

    async def get_match(self, match_id: int) -> Match | None:
        result = await self.db.exec(
            select(Match).where(Match.id == match_id).execution_options(populate_existing=True)
        )
        return result.first()

    async def get_finished_matches(self) -> Sequence[Match]:
        """Matches whose time has passed and that still await a score."""
        result = await self.db.exec(
            select(Match)
            .where(col(Match.status) == MatchStatus.FINISHED)
            .order_by(desc(col(Match.match_time)))
        )
        return result.all()

    async def get_member_matches(
        self,
        member_id: int,
        *,
        status: MatchHistoryStatus | None = None,
        period: StatsPeriod | None = None,
        result: MatchResult | None = None,
    ) -> Sequence[Match]:
        query = select(Match).where(
            or_(col(Match.player1_id) == member_id, col(Match.player2_id) == member_id)
        )

        if status == MatchHistoryStatus.HISTORY:
            query = query.where(col(Match.status) == MatchStatus.GRADED)
        elif status == MatchHistoryStatus.UPCOMING:
            query = query.where(col(Match.status) == MatchStatus.PENDING)

        if period is not None:
            start = get_utc_now() - timedelta(days=period.days)
            query = query.where(col(Match.match_time) >= start)

        if result == MatchResult.WIN:
            query = query.where(col(Match.winner_id) == member_id)
        elif result == MatchResult.LOSS:
            query = query.where(col(Match.loser_id) == member_id)

        rows = await self.db.exec(query.order_by(desc(col(Match.match_time))))
        return rows.all()

    async def _reload(self, match_id: int) -> Match:
        match = await self.get_match(match_id)
        if not match:
            raise HTTPException(status_code=404, detail="Match not found")
        return match

    async def grade_match(self, match_id: int, scores: MatchScores) -> Match:
        """Enter scores for a Finished match and record its winner and loser."""
        match = await self._reload(match_id)

        if match.status != MatchStatus.FINISHED:
            raise HTTPException(status_code=409, detail="Can only grade finished matches")

        result = await self.db.exec(
            update(Match)
            .where(col(Match.id) == match_id, col(Match.status) == MatchStatus.FINISHED)
            .values(**build_graded_values(match, scores), updated_at=get_utc_now())
        )
        if result.rowcount != 1:
            await self.db.rollback()
            raise HTTPException(status_code=409, detail="Can only grade finished matches")

        await self.db.commit()
        graded = await self._reload(match_id)
        logger.info(f"Match #{match_id} graded, winner #{graded.winner_id}")
        return graded

    async def update_match_scores(self, match_id: int, scores: MatchScores) -> Match:
        """Admin correction: rewrite scores and re-derive winner and loser.

        Graded matches may be corrected freely; a Finished match becomes Graded.
        """
        match = await self._reload(match_id)

        if match.status == MatchStatus.PENDING:
            raise HTTPException(
                status_code=409, detail="Cannot score a match that has not been played yet"
            )

        result = await self.db.exec(
            update(Match)
            .where(col(Match.id) == match_id, col(Match.status) != MatchStatus.PENDING)
            .values(**build_graded_values(match, scores), updated_at=get_utc_now())
        )
        if result.rowcount != 1:
            await self.db.rollback()
            raise HTTPException(status_code=409, detail="Match status changed, try again")

        await self.db.commit()
        logger.info(f"Match #{match_id} scores corrected")
        return await self._reload(match_id)

    async def update_match_statuses(self, now: datetime | None = None) -> int:
        """Move every Pending match whose time has passed to Finished.

        Safe to run repeatedly; returns the number of matches moved.
        """
        now = now or get_utc_now()
        result = await self.db.exec(
            update(Match)
            .where(col(Match.status) == MatchStatus.PENDING, col(Match.match_time) < now)
            .values(status=MatchStatus.FINISHED, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        updated = result.rowcount
        logger.info(f"Updated {updated} matches to finished status")
        return updated

    async def delete_match(self, match_id: int) -> bool:
        result = await self.db.exec(delete(Match).where(col(Match.id) == match_id))
        await self.db.commit()
        return result.rowcount > 0
