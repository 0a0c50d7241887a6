"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBUser(Base):
    __tablename__ = "users"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    username: Mapped[str] = mapped_column(String(30), unique=True, index=True)
    password_hash: Mapped[str]
    elo: Mapped[int]
    level: Mapped[str]
    subscription_type: Mapped[str]
    avatar: Mapped[Optional[str]]
    is_active: Mapped[bool] = mapped_column(default=True)
    email_verified: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    last_login_at: Mapped[Optional[datetime]]


class DBGame(Base):
    __tablename__ = "games"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    position_id: Mapped[str] = mapped_column(String(14))
    current_player: Mapped[str]
    registered_players: Mapped[dict[str, str]] = mapped_column(JSON)
    # denormalised player columns, so games can be listed per player
    white_player: Mapped[Optional[str]] = mapped_column(index=True)
    black_player: Mapped[Optional[str]] = mapped_column(index=True)
    status: Mapped[str] = mapped_column(index=True)
    mode: Mapped[str]
    is_ranked: Mapped[bool]
    difficulty: Mapped[Optional[str]]
    dice: Mapped[list[int]] = mapped_column(JSON, default=list)
    dice_left: Mapped[list[int]] = mapped_column(JSON, default=list)
    moves: Mapped[list[str]] = mapped_column(JSON, default=list)
    winner: Mapped[Optional[str]]
    white_score: Mapped[int] = mapped_column(default=0)
    black_score: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)


class DBAnalysis(Base):
    __tablename__ = "analyses"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), index=True)
    position_id: Mapped[str] = mapped_column(String(14))
    dice: Mapped[list[int]] = mapped_column(JSON)
    move: Mapped[str]
    best_move: Mapped[str]
    equity: Mapped[float]
    pr: Mapped[float]
    explanation: Mapped[str]
    alternatives: Mapped[list[str]] = mapped_column(JSON, default=list)
    analysis_type: Mapped[str]
    created_at: Mapped[datetime] = mapped_column(default=utc_now, index=True)


class DBCoachUsage(Base):
    __tablename__ = "coach_usage"
    __table_args__ = (UniqueConstraint("user_id", "month"),)
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), index=True)
    month: Mapped[str] = mapped_column(String(7))
    requests: Mapped[int] = mapped_column(default=0)
