from pydantic import BaseModel, Field

from app.core.enums import Gender, StatsPeriod


class UtrLevels(BaseModel):
    low: int = Field(description="UTR in [0, 5)")
    mid: int = Field(description="UTR in [5, 9)")
    high: int = Field(description="UTR 9 and above")


class AgeGroups(BaseModel):
    child: int = Field(description="Age in [0, 13)")
    teen: int = Field(description="Age in [13, 19)")
    adult: int = Field(description="Age in [19, 51)")
    elder: int = Field(description="Age 51 and above")


class MemberAnalytics(BaseModel):
    total_members: int
    admin_members: int
    regular_members: int
    gender: dict[Gender, int]
    utr_level: UtrLevels
    age: AgeGroups
    avg_utr: float
    avg_age: int


class DailyMatchCount(BaseModel):
    date: str = Field(description="Club-local month/day, e.g. 3/7")
    matches: int


class MatchStats(BaseModel):
    period: StatsPeriod
    total: int
    pending: int
    finished: int
    graded: int
    daily: list[DailyMatchCount]
