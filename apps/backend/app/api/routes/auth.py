from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from app.api.deps.auth import CurrentUser, get_current_user
from app.api.deps.device import get_client_ip, get_device_info
from app.api.deps.services import get_revocation_service, get_rotation_service, get_session_registry
from app.api.errors.handlers import token_error_response
from app.core.config import get_settings
from app.core.device_info import DeviceInfo
from app.core.errors import TokenError
from app.core.rate_limit import enforce_rate_limit
from app.db.session import get_db
from app.schemas.auth import (
    DeviceSessionListResponse,
    DeviceSessionResponse,
    RevokedCountResponse,
    RevokeDeviceRequest,
    TokenResponse,
)
from app.schemas.common import MessageResponse
from app.services.revocation_service import RevocationService
from app.services.rotation_service import RotationService
from app.services.session_registry import SessionRegistry

router = APIRouter()


def set_refresh_cookie(response: Response, token: str, *, remember_me: bool = False) -> None:
    settings = get_settings()
    max_age = settings.remember_me_token_expire_days * 24 * 60 * 60 if remember_me else None
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=token,
        httponly=True,
        samesite=settings.cookie_samesite,
        secure=settings.cookie_secure,
        max_age=max_age,
        path="/",
    )


def clear_refresh_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        settings.refresh_cookie_name,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite=settings.cookie_samesite,
    )


@router.post("/refresh-token", response_model=TokenResponse)
def refresh_token(
    request: Request,
    response: Response,
    device: DeviceInfo = Depends(get_device_info),
    ip: str = Depends(get_client_ip),
    service: RotationService = Depends(get_rotation_service),
    db: Session = Depends(get_db),
):
    enforce_rate_limit("refresh", ip)
    presented = request.cookies.get(get_settings().refresh_cookie_name)
    if not presented:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Refresh token not found")
    try:
        pair = service.rotate(presented, device)
    except TokenError as exc:
        db.rollback()
        error = token_error_response(exc)
        clear_refresh_cookie(error)
        return error
    db.commit()
    set_refresh_cookie(response, pair.refresh_token)
    return TokenResponse(access_token=pair.access_token, expires_at=pair.expires_at, token_type=pair.token_type)


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    _current: CurrentUser = Depends(get_current_user),
    service: RevocationService = Depends(get_revocation_service),
    db: Session = Depends(get_db),
) -> MessageResponse:
    service.revoke_one(request.cookies.get(get_settings().refresh_cookie_name))
    db.commit()
    clear_refresh_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.post("/revoke-all", response_model=RevokedCountResponse)
def revoke_all(
    current: CurrentUser = Depends(get_current_user),
    service: RevocationService = Depends(get_revocation_service),
    db: Session = Depends(get_db),
) -> RevokedCountResponse:
    revoked = service.revoke_all(current.user_id)
    db.commit()
    return RevokedCountResponse(message="All tokens revoked successfully", revoked=revoked)


@router.post("/revoke-others", response_model=RevokedCountResponse)
def revoke_others(
    current: CurrentUser = Depends(get_current_user),
    service: RevocationService = Depends(get_revocation_service),
    db: Session = Depends(get_db),
) -> RevokedCountResponse:
    revoked = service.revoke_others(current.user_id, current.jti)
    db.commit()
    return RevokedCountResponse(message="All other sessions revoked successfully", revoked=revoked)


@router.get("/devices", response_model=DeviceSessionListResponse)
def list_devices(
    current: CurrentUser = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
) -> DeviceSessionListResponse:
    sessions = registry.list_sessions(current.user_id, current.jti)
    return DeviceSessionListResponse(
        devices=[
            DeviceSessionResponse(
                token=s.token,
                device_name=s.device_name,
                platform=s.platform,
                browser=s.browser,
                ip_address=s.ip_address,
                last_used_at=s.last_used_at,
                created_at=s.created_at,
                is_current=s.is_current,
            )
            for s in sessions
        ]
    )


@router.post("/devices/revoke", response_model=MessageResponse)
def revoke_device(
    payload: RevokeDeviceRequest,
    current: CurrentUser = Depends(get_current_user),
    service: RevocationService = Depends(get_revocation_service),
    db: Session = Depends(get_db),
) -> MessageResponse:
    if not payload.refresh_token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="RefreshToken is required.")
    if not service.revoke_device(payload.refresh_token, current.user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Device session not found or already revoked.",
        )
    db.commit()
    return MessageResponse(message="Device session revoked successfully.")
