# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""SQLAlchemy models for the tables the auth layer reads and writes.

Table and column names follow the site's existing MySQL schema
(`User`, `Session`, camelCase columns).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kcc.auth.roles import Role


class Base(DeclarativeBase):
    pass


_ROLE_VALUES = ", ".join(f"'{r.value}'" for r in Role)


class User(Base):
    __tablename__ = "User"
    __table_args__ = (
        CheckConstraint(f"role IN ({_ROLE_VALUES})", name="user_role_ck"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column("fullName", String(191), nullable=False)
    email: Mapped[str] = mapped_column(String(191), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column("passwordHash", String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=Role.AUTHOR.value)
    club_id: Mapped[Optional[int]] = mapped_column("clubId", Integer, nullable=True)


class Session(Base):
    """Server-side login record. Valid while expires_at is in the future."""

    __tablename__ = "Session"
    __table_args__ = (
        Index("session_user_idx", "userId"),
        Index("session_expires_idx", "expiresAt"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        "userId", Integer, ForeignKey("User.id", ondelete="CASCADE"), nullable=False
    )
    # naive UTC
    expires_at: Mapped[datetime] = mapped_column("expiresAt", DateTime, nullable=False)
