from __future__ import annotations

from datetime import datetime

import sqlmodel

from app.utils.misc import as_utc

from ._base import BaseModel


class Session(BaseModel, table=True):
    """A member's refresh-token login; the token itself is never stored."""

    __tablename__: str = "sessions"

    id: int | None = sqlmodel.Field(default=None, primary_key=True)
    member_id: int = sqlmodel.Field(index=True, foreign_key="members.id")
    token_hash: str = sqlmodel.Field(max_length=64, unique=True, index=True)
    """SHA-256 hex digest of the current refresh token"""
    revoked: bool = False
    expires_at: datetime = sqlmodel.Field(sa_type=sqlmodel.DateTime(timezone=True))

    def is_active(self, now: datetime) -> bool:
        return not self.revoked and as_utc(self.expires_at) > now
