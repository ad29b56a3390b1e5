"""SQLAlchemy adapter – ORM tables for flags and overrides."""
from __future__ import annotations

import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from mp_flags.application.feature_flags.validation import MAX_DESCRIPTION_LENGTH, MAX_ID_LENGTH


class Base(DeclarativeBase):
    pass


class FlagRecord(Base):
    __tablename__ = "flags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(MAX_ID_LENGTH), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(MAX_DESCRIPTION_LENGTH), nullable=True)
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class UserOverrideRecord(Base):
    __tablename__ = "user_overrides"
    __table_args__ = (UniqueConstraint("flag_id", "user_id", name="uq_user_overrides_flag_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    flag_id: Mapped[int] = mapped_column(ForeignKey("flags.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(MAX_ID_LENGTH), nullable=False)
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class GroupOverrideRecord(Base):
    __tablename__ = "group_overrides"
    __table_args__ = (UniqueConstraint("flag_id", "group_id", name="uq_group_overrides_flag_group"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    flag_id: Mapped[int] = mapped_column(ForeignKey("flags.id", ondelete="CASCADE"), nullable=False, index=True)
    group_id: Mapped[str] = mapped_column(String(MAX_ID_LENGTH), nullable=False)
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)


__all__ = ["Base", "FlagRecord", "GroupOverrideRecord", "UserOverrideRecord"]
