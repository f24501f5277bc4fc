from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Index, String, false, true
from sqlalchemy.orm import Mapped, mapped_column

from app.core.device_info import IP_ADDRESS_MAX_LENGTH, USER_AGENT_MAX_LENGTH
from app.db.base import Base, UTCDateTime


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    access_token_jti: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    last_used_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    is_revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    revoked_reason: Mapped[str | None] = mapped_column(String(64), nullable=True)
    replaced_by_token: Mapped[str | None] = mapped_column(String(128), nullable=True)
    # Display hint only; the current session is derived from the access token jti.
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    device_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    platform: Mapped[str | None] = mapped_column(String(100), nullable=True)
    browser: Mapped[str | None] = mapped_column(String(100), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(USER_AGENT_MAX_LENGTH), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(IP_ADDRESS_MAX_LENGTH), nullable=True)

    __table_args__ = (
        Index("ix_refresh_tokens_user_revoked_expires", "user_id", "is_revoked", "expires_at"),
    )
