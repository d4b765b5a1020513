from .challenge import Challenge
from .match import Match
from .member import Member
from .session import Session

__all__ = ("Challenge", "Match", "Member", "Session")
