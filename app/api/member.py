from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from app.core.enums import Gender
from app.core.security import get_current_member, require_admin
from app.models.member import Member
from app.schemas.analytics import MemberAnalytics
from app.schemas.common import APIResponse, PaginatedResponse
from app.schemas.member import ActiveMember, MemberRead, MemberStats, MemberUpdate
from app.services.analytics import AnalyticsService
from app.services.member import DEFAULT_OPPONENT_LIMIT, DEFAULT_OPPONENT_WINDOW, MemberService

router = APIRouter(prefix="/members", tags=["members"], dependencies=[Depends(get_current_member)])


@router.get("/")
async def get_members(  # noqa: PLR0913, PLR0917
    service: Annotated[MemberService, Depends()],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 20,
    search: Annotated[str | None, Query(description="Case-insensitive username match")] = None,
    gender: Gender | None = None,
    min_age: Annotated[int | None, Query(ge=0)] = None,
    max_age: Annotated[int | None, Query(ge=0)] = None,
    min_utr: Annotated[float | None, Query(ge=0, le=16)] = None,
    max_utr: Annotated[float | None, Query(ge=0, le=16)] = None,
    exclude_admins: bool = False,
) -> PaginatedResponse[Sequence[MemberRead]]:
    members, pagination = await service.get_members(
        page=page,
        page_size=page_size,
        search=search,
        gender=gender,
        min_age=min_age,
        max_age=max_age,
        min_utr=min_utr,
        max_utr=max_utr,
        exclude_admins=exclude_admins,
    )
    return PaginatedResponse(
        data=[MemberRead.model_validate(member) for member in members], pagination=pagination
    )


@router.get("/analytics/stats", dependencies=[Depends(require_admin)])
async def get_member_analytics(
    service: Annotated[AnalyticsService, Depends()],
) -> APIResponse[MemberAnalytics]:
    """
    Member analytics for the admin dashboard.

    Requires admin authentication. Covers every member, admins included:
    - Total, admin and regular member counts
    - Gender distribution
    - UTR levels (low < 5, mid < 9, high)
    - Age groups (child < 13, teen < 19, adult < 51, elder)
    - Average UTR and average age
    """
    analytics = await service.get_member_analytics()
    return APIResponse(data=analytics)


@router.get("/top/{limit}")
async def get_top_members(
    limit: Annotated[int, Path(ge=1, le=100)], service: Annotated[MemberService, Depends()]
) -> APIResponse[Sequence[MemberRead]]:
    """Non-admin members ranked by UTR."""
    members = await service.get_top_members(limit)
    return APIResponse(data=[MemberRead.model_validate(member) for member in members])


@router.get("/active/{limit}")
async def get_most_active_members(
    limit: Annotated[int, Path(ge=1, le=100)],
    service: Annotated[AnalyticsService, Depends()],
    window_days: Annotated[int, Query(ge=1, le=365)] = 30,
) -> APIResponse[Sequence[ActiveMember]]:
    """Members with the most graded matches over the last ``window_days``."""
    members = await service.get_most_active(limit, window_days=window_days)
    return APIResponse(data=members)


@router.get("/{member_id}")
async def get_member(
    member_id: int, service: Annotated[MemberService, Depends()]
) -> APIResponse[MemberRead]:
    member = await service.get_member(member_id)
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    return APIResponse(data=MemberRead.model_validate(member))


@router.get("/{member_id}/stats")
async def get_member_stats(
    member_id: int, service: Annotated[MemberService, Depends()]
) -> APIResponse[MemberStats]:
    stats = await service.get_member_stats(member_id)
    return APIResponse(data=stats)


@router.get("/{member_id}/challengers")
async def get_recommended_opponents(
    member_id: int,
    service: Annotated[MemberService, Depends()],
    window: Annotated[float, Query(gt=0, le=16)] = DEFAULT_OPPONENT_WINDOW,
    limit: Annotated[int, Query(ge=1, le=50)] = DEFAULT_OPPONENT_LIMIT,
) -> APIResponse[Sequence[MemberRead]]:
    """Non-admin members whose UTR is within ``window`` of this member, closest first."""
    opponents = await service.get_recommended_opponents(member_id, window=window, limit=limit)
    return APIResponse(data=[MemberRead.model_validate(member) for member in opponents])


@router.put("/{member_id}")
async def update_member(
    member_id: int,
    body: MemberUpdate,
    service: Annotated[MemberService, Depends()],
    actor: Annotated[Member, Depends(get_current_member)],
) -> APIResponse[MemberRead]:
    member = await service.update_member(member_id, actor, body)
    return APIResponse(data=MemberRead.model_validate(member), message="Profile updated successfully")


@router.delete("/{member_id}")
async def delete_member(
    member_id: int,
    service: Annotated[MemberService, Depends()],
    _admin: Annotated[Member, Depends(require_admin)],
) -> APIResponse[None]:
    await service.delete_member(member_id)
    return APIResponse(message="Member deleted successfully")
