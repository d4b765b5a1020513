from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.enums import MatchStatus
from app.schemas.common import UTCDatetime
from app.schemas.member import MemberSummary
from app.utils.scoring import count_set_points, decide_winner


class MatchScores(BaseModel):
    """Set scores for (player1, player2). Set 1 is required; sets 2 and 3 come in pairs."""

    player1_set1: int = Field(ge=0, le=7)
    player2_set1: int = Field(ge=0, le=7)
    player1_set2: int | None = Field(default=None, ge=0, le=7)
    player2_set2: int | None = Field(default=None, ge=0, le=7)
    player1_set3: int | None = Field(default=None, ge=0, le=7)
    player2_set3: int | None = Field(default=None, ge=0, le=7)

    @model_validator(mode="after")
    def validate_sets(self) -> "MatchScores":
        for number, (p1, p2) in enumerate(
            [(self.player1_set2, self.player2_set2), (self.player1_set3, self.player2_set3)],
            start=2,
        ):
            if (p1 is None) != (p2 is None):
                msg = f"Set {number} needs a score for both players"
                raise ValueError(msg)

        if self.player1_set3 is not None and self.player1_set2 is None:
            msg = "Set 3 cannot be entered without set 2"
            raise ValueError(msg)

        # Raises on tied sets and on level set counts
        decide_winner(self.sets)
        return self

    @property
    def sets(self) -> list[tuple[int, int]]:
        pairs = [
            (self.player1_set1, self.player2_set1),
            (self.player1_set2, self.player2_set2),
            (self.player1_set3, self.player2_set3),
        ]
        return [(p1, p2) for p1, p2 in pairs if p1 is not None and p2 is not None]


class MatchRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    challenge_id: int
    match_time: UTCDatetime
    status: MatchStatus

    player1_id: int
    player2_id: int
    player1_set1: int | None
    player2_set1: int | None
    player1_set2: int | None
    player2_set2: int | None
    player1_set3: int | None
    player2_set3: int | None
    winner_id: int | None
    loser_id: int | None

    player1: MemberSummary
    player2: MemberSummary
    winner: MemberSummary | None = None
    loser: MemberSummary | None = None


class SetSummary(BaseModel):
    player1_sets: int
    player2_sets: int

    @classmethod
    def from_sets(cls, sets: list[tuple[int, int]]) -> "SetSummary":
        player1_sets, player2_sets = count_set_points(sets)
        return cls(player1_sets=player1_sets, player2_sets=player2_sets)


class MatchDetail(BaseModel):
    match: MatchRead
    summary: SetSummary


class StatusSweepResult(BaseModel):
    updated: int
