from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    access_token: str
    expires_at: datetime
    token_type: str = "Bearer"


class DeviceSessionResponse(BaseModel):
    token: str
    device_name: str
    platform: str
    browser: str
    ip_address: str
    last_used_at: datetime
    created_at: datetime
    is_current: bool


class DeviceSessionListResponse(BaseModel):
    devices: list[DeviceSessionResponse]


class RevokeDeviceRequest(BaseModel):
    refresh_token: str = Field(default="")


class RevokedCountResponse(BaseModel):
    message: str
    revoked: int
