"""
Relational Schema Module

SQLAlchemy ORM tables for teams, users, pull requests and reviewer slots.

Reviewers live in their own table with an explicit position so that
replacing one reviewer keeps its slot in the ordered list.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from app.models import PRStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class TeamRow(Base):
    __tablename__ = "teams"

    team_name: Mapped[str] = mapped_column(String(255), primary_key=True)

    members: Mapped[List["UserRow"]] = relationship(
        back_populates="team", order_by="UserRow.user_id"
    )


class UserRow(Base):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    team_name: Mapped[str] = mapped_column(
        String(255), ForeignKey("teams.team_name", ondelete="RESTRICT"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    team: Mapped[TeamRow] = relationship(back_populates="members")

    __table_args__ = (
        # Candidate lookups filter by team and activity
        Index("idx_users_team_active", "team_name", "is_active"),
    )


class PullRequestRow(Base):
    __tablename__ = "pull_requests"

    pull_request_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    pull_request_name: Mapped[str] = mapped_column(String(255), nullable=False)
    author_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False
    )
    status: Mapped[PRStatus] = mapped_column(
        Enum(PRStatus, name="pr_status"), nullable=False, default=PRStatus.OPEN
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    merged_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    reviewers: Mapped[List["ReviewerSlotRow"]] = relationship(
        back_populates="pull_request",
        order_by="ReviewerSlotRow.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_pull_requests_created_at", "created_at"),
    )


class ReviewerSlotRow(Base):
    __tablename__ = "pull_request_reviewers"

    pull_request_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("pull_requests.pull_request_id", ondelete="CASCADE"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False
    )

    pull_request: Mapped[PullRequestRow] = relationship(back_populates="reviewers")

    __table_args__ = (
        UniqueConstraint("pull_request_id", "user_id", name="uq_reviewer_per_pr"),
        Index("idx_reviewers_user", "user_id"),
    )
