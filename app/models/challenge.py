from datetime import datetime
from typing import TYPE_CHECKING

import sqlmodel
from sqlalchemy.orm import Mapped

from app.core.enums import ChallengeState

from ._base import BaseModel

if TYPE_CHECKING:
    from .member import Member


class Challenge(BaseModel, table=True):
    __tablename__: str = "challenges"
    __table_args__ = (
        sqlmodel.CheckConstraint("challenger_id <> challenged_id", name="no_self_challenge"),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    challenger_id: int = sqlmodel.Field(foreign_key="members.id", index=True)
    challenged_id: int = sqlmodel.Field(foreign_key="members.id", index=True)
    match_time: datetime = sqlmodel.Field(index=True, sa_type=sqlmodel.DateTime(timezone=True))
    note: str = sqlmodel.Field(default="", max_length=100)
    state: ChallengeState = ChallengeState.WAITING

    challenger: Mapped["Member"] = sqlmodel.Relationship(
        sa_relationship_kwargs={"lazy": "joined", "foreign_keys": "[Challenge.challenger_id]"}
    )
    challenged: Mapped["Member"] = sqlmodel.Relationship(
        sa_relationship_kwargs={"lazy": "joined", "foreign_keys": "[Challenge.challenged_id]"}
    )
