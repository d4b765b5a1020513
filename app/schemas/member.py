from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.core.enums import Gender
from app.schemas.common import UTCDatetime


class MemberSummary(BaseModel):
    """Compact member card attached to challenges and matches."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    first_name: str
    last_name: str
    avatar_url: str | None
    utr: float


class MemberRead(BaseModel):
    """Public member profile. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    username: str
    email: str
    phone: str
    age: int
    gender: Gender
    utr: float
    signature: str | None
    avatar_url: str | None
    is_admin: bool
    created_at: UTCDatetime


class MemberRegister(BaseModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    phone: str = Field(min_length=1, max_length=20)
    age: int = Field(gt=0, lt=150)
    gender: Gender
    utr: float = Field(ge=0, le=16)
    signature: str | None = Field(default=None, max_length=100)


class MemberProfileUpdate(BaseModel):
    """Fields a member may change on their own profile."""

    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    username: str | None = Field(
        default=None, min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$"
    )
    phone: str | None = Field(default=None, min_length=1, max_length=20)
    age: int | None = Field(default=None, gt=0, lt=150)
    gender: Gender | None = None
    utr: float | None = Field(default=None, ge=0, le=16)
    signature: str | None = Field(default=None, max_length=100)


class MemberUpdate(BaseModel):
    """Fields editable through /members/{id} by the member or an admin."""

    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, min_length=1, max_length=20)
    age: int | None = Field(default=None, gt=0, lt=150)
    gender: Gender | None = None


class WinRatePoint(BaseModel):
    match_time: UTCDatetime
    win_rate: float


class MemberStats(BaseModel):
    wins: int
    losses: int
    total_matches: int
    win_rate: float = Field(description="Percentage of graded matches won, 2 decimals")
    history: list[WinRatePoint] = Field(description="Cumulative win rate after each match")


class ActiveMember(MemberRead):
    match_count: int
