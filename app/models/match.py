from datetime import datetime
from typing import TYPE_CHECKING, Optional

import sqlmodel
from sqlalchemy.orm import Mapped

from app.core.enums import MatchStatus

from ._base import BaseModel

if TYPE_CHECKING:
    from .member import Member


class Match(BaseModel, table=True):
    __tablename__: str = "matches"
    __table_args__ = (
        sqlmodel.CheckConstraint(
            "(winner_id IS NULL) OR (winner_id IN (player1_id, player2_id))",
            name="winner_is_player",
        ),
        sqlmodel.CheckConstraint(
            "(loser_id IS NULL) OR (loser_id IN (player1_id, player2_id))",
            name="loser_is_player",
        ),
        sqlmodel.CheckConstraint(
            "(winner_id IS NULL) OR (winner_id <> loser_id)", name="winner_not_loser"
        ),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    challenge_id: int = sqlmodel.Field(foreign_key="challenges.id", index=True)
    match_time: datetime = sqlmodel.Field(index=True, sa_type=sqlmodel.DateTime(timezone=True))
    """Scheduled time, copied from the challenge"""
    status: MatchStatus = MatchStatus.PENDING

    player1_id: int = sqlmodel.Field(foreign_key="members.id", index=True)
    """Challenger"""
    player2_id: int = sqlmodel.Field(foreign_key="members.id", index=True)
    """Challenged member"""

    player1_set1: int | None = sqlmodel.Field(default=None, ge=0, le=7)
    player2_set1: int | None = sqlmodel.Field(default=None, ge=0, le=7)
    player1_set2: int | None = sqlmodel.Field(default=None, ge=0, le=7)
    player2_set2: int | None = sqlmodel.Field(default=None, ge=0, le=7)
    player1_set3: int | None = sqlmodel.Field(default=None, ge=0, le=7)
    player2_set3: int | None = sqlmodel.Field(default=None, ge=0, le=7)

    winner_id: int | None = sqlmodel.Field(
        foreign_key="members.id", index=True, nullable=True, default=None
    )
    loser_id: int | None = sqlmodel.Field(
        foreign_key="members.id", index=True, nullable=True, default=None
    )

    player1: Mapped["Member"] = sqlmodel.Relationship(
        sa_relationship_kwargs={"lazy": "joined", "foreign_keys": "[Match.player1_id]"}
    )
    player2: Mapped["Member"] = sqlmodel.Relationship(
        sa_relationship_kwargs={"lazy": "joined", "foreign_keys": "[Match.player2_id]"}
    )
    winner: Mapped[Optional["Member"]] = sqlmodel.Relationship(
        sa_relationship_kwargs={"lazy": "joined", "foreign_keys": "[Match.winner_id]"}
    )
    loser: Mapped[Optional["Member"]] = sqlmodel.Relationship(
        sa_relationship_kwargs={"lazy": "joined", "foreign_keys": "[Match.loser_id]"}
    )

    @property
    def set_scores(self) -> list[tuple[int, int]]:
        """Completed (player1, player2) set pairs in order."""
        pairs = [
            (self.player1_set1, self.player2_set1),
            (self.player1_set2, self.player2_set2),
            (self.player1_set3, self.player2_set3),
        ]
        return [(p1, p2) for p1, p2 in pairs if p1 is not None and p2 is not None]
