from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends, HTTPException
from loguru import logger
from sqlalchemy import and_, or_, update
from sqlmodel import col, desc, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.core.enums import ChallengeState, MatchStatus
from app.models.challenge import Challenge
from app.models.match import Match
from app.schemas.challenge import ChallengeCreate, MemberChallenges
from app.services.match import MatchService
from app.services.member import MemberService
from app.utils.misc import club_day_bounds, get_utc_now

# States that still hold a pair's slot for the day
ACTIVE_STATES = (ChallengeState.WAITING, ChallengeState.ACCEPTED)


class ChallengeService:
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db)],
        member_service: Annotated[MemberService, Depends()],
        match_service: Annotated[MatchService, Depends()],
    ) -> None:
        self.db = db
        self.member_service = member_service
        self.match_service = match_service

    async def get_challenges(self, *, state: ChallengeState | None = None) -> Sequence[Challenge]:
        query = select(Challenge)
        if state is not None:
            query = query.where(col(Challenge.state) == state)

        result = await self.db.exec(query.order_by(desc(col(Challenge.created_at))))
        return result.all()

    async def get_challenge(self, challenge_id: int) -> Challenge | None:
        result = await self.db.exec(
            select(Challenge)
            .where(Challenge.id == challenge_id)
            .execution_options(populate_existing=True)
        )
        return result.first()

    async def get_member_challenges(self, member_id: int) -> MemberChallenges:
        """Waiting challenges received by the member and every challenge they sent."""
        received_result = await self.db.exec(
            select(Challenge)
            .where(
                col(Challenge.challenged_id) == member_id,
                col(Challenge.state) == ChallengeState.WAITING,
            )
            .order_by(desc(col(Challenge.created_at)), desc(col(Challenge.id)))
        )
        sent_result = await self.db.exec(
            select(Challenge)
            .where(col(Challenge.challenger_id) == member_id)
            .order_by(desc(col(Challenge.created_at)), desc(col(Challenge.id)))
        )
        return MemberChallenges.model_validate(
            {"received": received_result.all(), "sent": sent_result.all()}, from_attributes=True
        )

    async def _has_active_challenge_on_day(self, challenge_data: ChallengeCreate, challenger_id: int) -> bool:
        day_start, day_end = club_day_bounds(challenge_data.match_time)
        challenged_id = challenge_data.challenged_id

        result = await self.db.exec(
            select(Challenge.id).where(
                or_(
                    and_(
                        col(Challenge.challenger_id) == challenger_id,
                        col(Challenge.challenged_id) == challenged_id,
                    ),
                    and_(
                        col(Challenge.challenger_id) == challenged_id,
                        col(Challenge.challenged_id) == challenger_id,
                    ),
                ),
                col(Challenge.state).in_(ACTIVE_STATES),
                col(Challenge.match_time) >= day_start,
                col(Challenge.match_time) < day_end,
            )
        )
        return result.first() is not None

    async def create_challenge(self, challenger_id: int, challenge_data: ChallengeCreate) -> Challenge:
        """Issue a challenge in the Waiting state."""
        if challenger_id == challenge_data.challenged_id:
            raise HTTPException(status_code=400, detail="Cannot challenge yourself")

        if challenge_data.match_time <= get_utc_now():
            raise HTTPException(status_code=400, detail="Match date must be in the future")

        challenged = await self.member_service.get_member(challenge_data.challenged_id)
        if not challenged:
            raise HTTPException(status_code=404, detail="Member not found")

        if await self._has_active_challenge_on_day(challenge_data, challenger_id):
            raise HTTPException(
                status_code=409, detail="You already have a challenge with this member on this date"
            )

        challenge = Challenge(
            challenger_id=challenger_id,
            challenged_id=challenge_data.challenged_id,
            match_time=challenge_data.match_time,
            note=challenge_data.note,
            state=ChallengeState.WAITING,
        )
        self.db.add(challenge)
        await self.db.commit()
        logger.info(
            f"Member #{challenger_id} challenged #{challenge.challenged_id} (challenge #{challenge.id})"
        )

        created = await self.get_challenge(challenge.id)
        if not created:
            raise HTTPException(status_code=500, detail="Challenge vanished after creation")
        return created

    async def _get_pending_decision(self, challenge_id: int, member_id: int) -> Challenge:
        challenge = await self.get_challenge(challenge_id)
        if not challenge:
            raise HTTPException(status_code=404, detail="Challenge not found")

        if challenge.challenged_id != member_id:
            logger.warning(f"Member #{member_id} tried to respond to challenge #{challenge_id}")
            raise HTTPException(status_code=403, detail="Not authorized to respond to this challenge")

        if challenge.state != ChallengeState.WAITING:
            raise HTTPException(status_code=409, detail="Challenge has already been responded to")

        return challenge

    async def _transition(self, challenge_id: int, new_state: ChallengeState) -> None:
        """Move a Waiting challenge to ``new_state``; 409 if someone got there first."""
        result = await self.db.exec(
            update(Challenge)
            .where(
                col(Challenge.id) == challenge_id, col(Challenge.state) == ChallengeState.WAITING
            )
            .values(state=new_state, updated_at=get_utc_now())
        )
        if result.rowcount != 1:
            await self.db.rollback()
            raise HTTPException(status_code=409, detail="Challenge has already been responded to")

    async def accept_challenge(self, challenge_id: int, member_id: int) -> tuple[Challenge, Match]:
        """Accept a Waiting challenge and schedule its Pending match in one transaction."""
        challenge = await self._get_pending_decision(challenge_id, member_id)

        await self._transition(challenge_id, ChallengeState.ACCEPTED)
        match = Match(
            challenge_id=challenge.id,
            match_time=challenge.match_time,
            status=MatchStatus.PENDING,
            player1_id=challenge.challenger_id,
            player2_id=challenge.challenged_id,
        )
        self.db.add(match)
        await self.db.commit()
        logger.info(f"Challenge #{challenge_id} accepted, match #{match.id} scheduled")

        accepted = await self.get_challenge(challenge_id)
        scheduled = await self.match_service.get_match(match.id)
        if not accepted or not scheduled:
            raise HTTPException(status_code=500, detail="Accepted challenge could not be reloaded")
        return accepted, scheduled

    async def reject_challenge(self, challenge_id: int, member_id: int) -> Challenge:
        await self._get_pending_decision(challenge_id, member_id)

        await self._transition(challenge_id, ChallengeState.REJECTED)
        await self.db.commit()
        logger.info(f"Challenge #{challenge_id} rejected")

        rejected = await self.get_challenge(challenge_id)
        if not rejected:
            raise HTTPException(status_code=500, detail="Rejected challenge could not be reloaded")
        return rejected
