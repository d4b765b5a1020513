from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import ChallengeState
from app.schemas.common import UTCDatetime
from app.schemas.match import MatchRead
from app.schemas.member import MemberSummary


class ChallengeCreate(BaseModel):
    challenged_id: int
    match_time: UTCDatetime
    note: str = Field(default="", max_length=100)


class ChallengeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    challenger_id: int
    challenged_id: int
    match_time: UTCDatetime
    note: str
    state: ChallengeState
    created_at: UTCDatetime

    challenger: MemberSummary
    challenged: MemberSummary


class MemberChallenges(BaseModel):
    received: list[ChallengeRead] = Field(description="Waiting challenges sent to the member")
    sent: list[ChallengeRead] = Field(description="Challenges the member issued, any state")


class ChallengeDecision(BaseModel):
    challenge: ChallengeRead
    match: MatchRead | None = None
