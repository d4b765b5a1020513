# pyright: reportAttributeAccessIssue=false, reportUndefinedVariable=false
"""initial_schema

Revision ID: 3f1c2a7b9d10
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel.sql.sqltypes

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a7b9d10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "members",
        *_timestamps(),
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("first_name", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("last_name", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("username", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("password_hash", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("phone", sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("gender", sa.Enum("MALE", "FEMALE", "OTHER", name="gender"), nullable=False),
        sa.Column("utr", sa.Float(), nullable=False),
        sa.Column("signature", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=True),
        sa.Column("avatar_url", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False),
        sa.CheckConstraint("utr >= 0 AND utr <= 16", name="utr_in_range"),
        sa.CheckConstraint("age > 0", name="age_positive"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_members_id"), "members", ["id"], unique=False)
    op.create_index(op.f("ix_members_username"), "members", ["username"], unique=True)
    op.create_index(op.f("ix_members_email"), "members", ["email"], unique=True)

    op.create_table(
        "challenges",
        *_timestamps(),
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("challenger_id", sa.Integer(), nullable=False),
        sa.Column("challenged_id", sa.Integer(), nullable=False),
        sa.Column("match_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("note", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column(
            "state",
            sa.Enum("WAITING", "ACCEPTED", "REJECTED", name="challengestate"),
            nullable=False,
        ),
        sa.CheckConstraint("challenger_id <> challenged_id", name="no_self_challenge"),
        sa.ForeignKeyConstraint(["challenger_id"], ["members.id"]),
        sa.ForeignKeyConstraint(["challenged_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_challenges_id"), "challenges", ["id"], unique=False)
    op.create_index(op.f("ix_challenges_challenger_id"), "challenges", ["challenger_id"])
    op.create_index(op.f("ix_challenges_challenged_id"), "challenges", ["challenged_id"])
    op.create_index(op.f("ix_challenges_match_time"), "challenges", ["match_time"])

    op.create_table(
        "matches",
        *_timestamps(),
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("challenge_id", sa.Integer(), nullable=False),
        sa.Column("match_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "status", sa.Enum("PENDING", "FINISHED", "GRADED", name="matchstatus"), nullable=False
        ),
        sa.Column("player1_id", sa.Integer(), nullable=False),
        sa.Column("player2_id", sa.Integer(), nullable=False),
        *[
            sa.Column(f"player{player}_set{number}", sa.Integer(), nullable=True)
            for number in (1, 2, 3)
            for player in (1, 2)
        ],
        sa.Column("winner_id", sa.Integer(), nullable=True),
        sa.Column("loser_id", sa.Integer(), nullable=True),
        sa.CheckConstraint(
            "(winner_id IS NULL) OR (winner_id IN (player1_id, player2_id))",
            name="winner_is_player",
        ),
        sa.CheckConstraint(
            "(loser_id IS NULL) OR (loser_id IN (player1_id, player2_id))", name="loser_is_player"
        ),
        sa.CheckConstraint(
            "(winner_id IS NULL) OR (winner_id <> loser_id)", name="winner_not_loser"
        ),
        sa.ForeignKeyConstraint(["challenge_id"], ["challenges.id"]),
        sa.ForeignKeyConstraint(["player1_id"], ["members.id"]),
        sa.ForeignKeyConstraint(["player2_id"], ["members.id"]),
        sa.ForeignKeyConstraint(["winner_id"], ["members.id"]),
        sa.ForeignKeyConstraint(["loser_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_matches_id"), "matches", ["id"], unique=False)
    op.create_index(op.f("ix_matches_challenge_id"), "matches", ["challenge_id"])
    op.create_index(op.f("ix_matches_match_time"), "matches", ["match_time"])
    for column in ("player1_id", "player2_id", "winner_id", "loser_id"):
        op.create_index(op.f(f"ix_matches_{column}"), "matches", [column])

    op.create_table(
        "sessions",
        *_timestamps(),
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("token_hash", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("revoked", sa.Boolean(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sessions_member_id"), "sessions", ["member_id"])
    op.create_index(op.f("ix_sessions_token_hash"), "sessions", ["token_hash"], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("sessions")
    op.drop_table("matches")
    op.drop_table("challenges")
    op.drop_table("members")

    sa.Enum(name="matchstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="challengestate").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="gender").drop(op.get_bind(), checkfirst=True)
