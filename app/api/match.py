from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.enums import MatchHistoryStatus, MatchResult, StatsPeriod
from app.core.security import get_current_member, require_admin
from app.models.member import Member
from app.schemas.analytics import MatchStats
from app.schemas.common import APIResponse, PaginatedResponse
from app.schemas.match import MatchDetail, MatchRead, MatchScores, SetSummary, StatusSweepResult
from app.services.analytics import AnalyticsService
from app.services.match import MatchService

router = APIRouter(prefix="/matches", tags=["matches"], dependencies=[Depends(get_current_member)])


@router.get("/")
async def get_matches(
    service: Annotated[MatchService, Depends()],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse[Sequence[MatchRead]]:
    matches, pagination = await service.get_matches(page=page, page_size=page_size)
    return PaginatedResponse(
        data=[MatchRead.model_validate(match) for match in matches], pagination=pagination
    )


@router.get("/stats", dependencies=[Depends(require_admin)])
async def get_match_stats(
    service: Annotated[AnalyticsService, Depends()],
    period: StatsPeriod = StatsPeriod.MONTH,
) -> APIResponse[MatchStats]:
    """
    Match statistics for the admin dashboard.

    Requires admin authentication. Counts matches scheduled in the last
    week (7 days), month (30 days) or quarter (90 days) by status, plus a
    zero-filled per-day series.
    """
    stats = await service.get_match_stats(period)
    return APIResponse(data=stats)


@router.get("/finished", dependencies=[Depends(require_admin)])
async def get_finished_matches(
    service: Annotated[MatchService, Depends()],
) -> APIResponse[Sequence[MatchRead]]:
    matches = await service.get_finished_matches()
    return APIResponse(data=[MatchRead.model_validate(match) for match in matches])


@router.get("/member/{member_id}")
async def get_member_matches(
    member_id: int,
    service: Annotated[MatchService, Depends()],
    status: Annotated[
        MatchHistoryStatus | None, Query(description="history = graded, upcoming = pending")
    ] = None,
    period: StatsPeriod | None = None,
    result: MatchResult | None = None,
) -> APIResponse[Sequence[MatchRead]]:
    matches = await service.get_member_matches(
        member_id, status=status, period=period, result=result
    )
    return APIResponse(data=[MatchRead.model_validate(match) for match in matches])


@router.put("/update-status")
async def update_match_statuses(
    service: Annotated[MatchService, Depends()],
    _admin: Annotated[Member, Depends(require_admin)],
) -> APIResponse[StatusSweepResult]:
    updated = await service.update_match_statuses()
    return APIResponse(
        data=StatusSweepResult(updated=updated),
        message=f"Updated {updated} matches to finished status",
    )


@router.get("/{match_id}")
async def get_match(
    match_id: int, service: Annotated[MatchService, Depends()]
) -> APIResponse[MatchDetail]:
    match = await service.get_match(match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    detail = MatchDetail(
        match=MatchRead.model_validate(match), summary=SetSummary.from_sets(match.set_scores)
    )
    return APIResponse(data=detail)


@router.put("/{match_id}/grade")
async def grade_match(
    match_id: int,
    scores: MatchScores,
    service: Annotated[MatchService, Depends()],
    _admin: Annotated[Member, Depends(require_admin)],
) -> APIResponse[MatchRead]:
    match = await service.grade_match(match_id, scores)
    return APIResponse(data=MatchRead.model_validate(match), message="Match graded")


@router.put("/{match_id}")
async def update_match(
    match_id: int,
    scores: MatchScores,
    service: Annotated[MatchService, Depends()],
    _admin: Annotated[Member, Depends(require_admin)],
) -> APIResponse[MatchRead]:
    match = await service.update_match_scores(match_id, scores)
    return APIResponse(data=MatchRead.model_validate(match), message="Match updated successfully")


@router.delete("/{match_id}")
async def delete_match(
    match_id: int,
    service: Annotated[MatchService, Depends()],
    _admin: Annotated[Member, Depends(require_admin)],
) -> APIResponse[None]:
    deleted = await service.delete_match(match_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Match not found")
    return APIResponse(message="Match deleted successfully")
