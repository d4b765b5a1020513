import sqlmodel

from app.core.enums import Gender

from ._base import BaseModel


class Member(BaseModel, table=True):
    __tablename__: str = "members"
    __table_args__ = (
        sqlmodel.CheckConstraint("utr >= 0 AND utr <= 16", name="utr_in_range"),
        sqlmodel.CheckConstraint("age > 0", name="age_positive"),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    first_name: str = sqlmodel.Field(max_length=50)
    last_name: str = sqlmodel.Field(max_length=50)
    username: str = sqlmodel.Field(max_length=50, unique=True, index=True)
    email: str = sqlmodel.Field(max_length=255, unique=True, index=True)
    password_hash: str = sqlmodel.Field(max_length=255)
    """Only ever holds a passlib hash"""
    phone: str = sqlmodel.Field(max_length=20)
    age: int = sqlmodel.Field(gt=0)
    gender: Gender
    utr: float = sqlmodel.Field(ge=0, le=16)
    """Universal Tennis Rating"""
    signature: str | None = sqlmodel.Field(default=None, max_length=100, nullable=True)
    avatar_url: str | None = sqlmodel.Field(default=None, max_length=255, nullable=True)
    is_admin: bool = False

    def __str__(self) -> str:
        return f"{self.username} (#{self.id})"
