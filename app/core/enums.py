from enum import StrEnum


class Gender(StrEnum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class ChallengeState(StrEnum):
    WAITING = "Waiting"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class MatchStatus(StrEnum):
    PENDING = "Pending"
    FINISHED = "Finished"
    GRADED = "Graded"


class StatsPeriod(StrEnum):
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"

    @property
    def days(self) -> int:
        return {StatsPeriod.WEEK: 7, StatsPeriod.MONTH: 30, StatsPeriod.QUARTER: 90}[self]


class MatchHistoryStatus(StrEnum):
    HISTORY = "history"
    UPCOMING = "upcoming"


class MatchResult(StrEnum):
    WIN = "win"
    LOSS = "loss"
