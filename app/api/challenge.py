from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.core.enums import ChallengeState
from app.core.security import get_current_member, require_admin
from app.models.member import Member
from app.schemas.challenge import ChallengeCreate, ChallengeDecision, ChallengeRead, MemberChallenges
from app.schemas.common import APIResponse
from app.schemas.match import MatchRead
from app.services.challenge import ChallengeService

router = APIRouter(prefix="/challenges", tags=["challenges"])


@router.get("/", dependencies=[Depends(require_admin)])
async def get_challenges(
    service: Annotated[ChallengeService, Depends()],
) -> APIResponse[Sequence[ChallengeRead]]:
    challenges = await service.get_challenges()
    return APIResponse(data=[ChallengeRead.model_validate(c) for c in challenges])


@router.get("/me")
async def get_my_challenges(
    service: Annotated[ChallengeService, Depends()],
    member: Annotated[Member, Depends(get_current_member)],
) -> APIResponse[MemberChallenges]:
    challenges = await service.get_member_challenges(member.id)
    return APIResponse(data=challenges)


@router.get("/accepted", dependencies=[Depends(require_admin)])
async def get_accepted_challenges(
    service: Annotated[ChallengeService, Depends()],
) -> APIResponse[Sequence[ChallengeRead]]:
    challenges = await service.get_challenges(state=ChallengeState.ACCEPTED)
    return APIResponse(data=[ChallengeRead.model_validate(c) for c in challenges])


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_challenge(
    body: ChallengeCreate,
    service: Annotated[ChallengeService, Depends()],
    member: Annotated[Member, Depends(get_current_member)],
) -> APIResponse[ChallengeRead]:
    challenge = await service.create_challenge(member.id, body)
    return APIResponse(data=ChallengeRead.model_validate(challenge), message="Challenge sent")


@router.put("/{challenge_id}/accept")
async def accept_challenge(
    challenge_id: int,
    service: Annotated[ChallengeService, Depends()],
    member: Annotated[Member, Depends(get_current_member)],
) -> APIResponse[ChallengeDecision]:
    challenge, match = await service.accept_challenge(challenge_id, member.id)
    decision = ChallengeDecision(
        challenge=ChallengeRead.model_validate(challenge), match=MatchRead.model_validate(match)
    )
    return APIResponse(data=decision, message="Challenge accepted, match scheduled")


@router.put("/{challenge_id}/reject")
async def reject_challenge(
    challenge_id: int,
    service: Annotated[ChallengeService, Depends()],
    member: Annotated[Member, Depends(get_current_member)],
) -> APIResponse[ChallengeDecision]:
    challenge = await service.reject_challenge(challenge_id, member.id)
    return APIResponse(
        data=ChallengeDecision(challenge=ChallengeRead.model_validate(challenge)),
        message="Challenge rejected",
    )
