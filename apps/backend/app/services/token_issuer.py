from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from app.core.clock import Clock, utc_now
from app.core.config import Settings, get_settings
from app.core.device_info import DeviceInfo
from app.core.jwt import create_access_token
from app.core.logging import get_logger
from app.core.security import generate_jti, generate_opaque_token
from app.db.models import RefreshToken
from app.db.refresh_token_store import RefreshTokenStore
from app.services.principal_resolver import Principal
from app.telemetry.metrics import tokens_issued_total


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_at: datetime
    token_type: str = "Bearer"


@dataclass(frozen=True)
class SignedAccessToken:
    token: str
    jti: str
    issued_at: datetime
    expires_at: datetime


class TokenIssuer:
    def __init__(
        self,
        store: RefreshTokenStore,
        *,
        settings: Settings | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.store = store
        self.settings = settings or get_settings()
        self.clock = clock
        self.logger = get_logger(__name__)

    def refresh_ttl(self, *, remember_me: bool = False) -> timedelta:
        if remember_me:
            return timedelta(days=self.settings.remember_me_token_expire_days)
        return timedelta(days=self.settings.refresh_token_expire_days)

    def issue_tokens(
        self,
        principal: Principal,
        device: DeviceInfo | None = None,
        *,
        remember_me: bool = False,
        refresh_token: str | None = None,
        origin: str = "login",
        signed: SignedAccessToken | None = None,
    ) -> TokenPair:
        """Persist a refresh row for ``principal`` and return the pair.

        Rotation signs up front through ``sign_access_token`` and passes the
        result as ``signed``, so that a signing failure happens before the
        predecessor is touched.
        """
        signed = signed or self.sign_access_token(principal)
        device = device or DeviceInfo()
        now = signed.issued_at
        jti = signed.jti
        refresh_value = refresh_token or generate_opaque_token()
        self.store.add(
            RefreshToken(
                token=refresh_value,
                user_id=principal.user_id,
                access_token_jti=jti,
                created_at=now,
                last_used_at=now,
                expires_at=now + self.refresh_ttl(remember_me=remember_me),
                is_revoked=False,
                is_current=True,
                device_name=device.device_name,
                platform=device.platform,
                browser=device.browser,
                user_agent=device.user_agent,
                ip_address=device.ip_address,
            )
        )
        tokens_issued_total.labels(origin=origin).inc()
        self.logger.info(
            "Refresh token issued",
            extra={"event": "token.issued", "user_id": principal.user_id, "outcome": origin},
        )
        return TokenPair(access_token=signed.token, refresh_token=refresh_value, expires_at=signed.expires_at)

    def sign_access_token(self, principal: Principal) -> SignedAccessToken:
        if principal is None or not principal.user_id:
            raise ValueError("An authenticated principal is required to issue tokens")
        now = self.clock()
        jti = generate_jti()
        token, expires_at = create_access_token(
            subject=principal.user_id,
            jti=jti,
            claims=principal.claims(),
            now=now,
        )
        return SignedAccessToken(token=token, jti=jti, issued_at=now, expires_at=expires_at)
