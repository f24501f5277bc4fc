from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.core.clock import Clock, utc_now
from app.core.device_info import UNKNOWN
from app.db.refresh_token_store import RefreshTokenStore


@dataclass(frozen=True)
class DeviceSession:
    token: str
    device_name: str
    platform: str
    browser: str
    ip_address: str
    last_used_at: datetime
    created_at: datetime
    is_current: bool


class SessionRegistry:
    def __init__(self, store: RefreshTokenStore, *, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock

    def list_sessions(self, user_id: str, current_jti: str | None = None) -> list[DeviceSession]:
        rows = self.store.list_active(user_id, now=self.clock())
        return [
            DeviceSession(
                token=row.token,
                device_name=row.device_name or UNKNOWN,
                platform=row.platform or UNKNOWN,
                browser=row.browser or UNKNOWN,
                ip_address=row.ip_address or UNKNOWN,
                last_used_at=row.last_used_at,
                created_at=row.created_at,
                # The stored is_current flag is not trusted.
                is_current=bool(current_jti) and row.access_token_jti == current_jti,
            )
            for row in rows
        ]
