from __future__ import annotations

from fastapi import Depends, Header, Request

from app.core.config import get_settings
from app.core.device_info import DeviceInfo, client_ip, parse_device_info


def get_client_ip(
    request: Request,
    x_forwarded_for: str | None = Header(default=None),
    x_real_ip: str | None = Header(default=None),
) -> str:
    peer = request.client.host if request.client else None
    # Forwarding headers are client-controlled unless a proxy in front rewrites them.
    if not get_settings().trust_proxy_headers:
        return client_ip(None, None, peer)
    return client_ip(x_forwarded_for, x_real_ip, peer)


def get_device_info(
    ip: str = Depends(get_client_ip),
    user_agent: str | None = Header(default=None),
    x_browser_info: str | None = Header(default=None),
) -> DeviceInfo:
    return parse_device_info(user_agent, ip, browser_hint=x_browser_info)
