from __future__ import annotations

from app.core.errors import MissingCurrentSession
from app.core.logging import get_logger
from app.db.refresh_token_store import RefreshTokenStore
from app.telemetry.metrics import tokens_revoked_total

REASON_LOGOUT = "logout"
REASON_REVOKE_ALL = "revoke-all"
REASON_REVOKE_OTHERS = "revoke-others"
REASON_DEVICE_REVOKED = "device-revoked"


class RevocationService:
    def __init__(self, store: RefreshTokenStore) -> None:
        self.store = store
        self.logger = get_logger(__name__)

    def revoke_one(self, token: str | None) -> None:
        # Logging out with a stale or unknown token is not an error.
        if not token:
            return
        if self.store.mark_revoked(token, reason=REASON_LOGOUT):
            tokens_revoked_total.labels(reason=REASON_LOGOUT).inc()

    def revoke_all(self, user_id: str) -> int:
        revoked = self.store.revoke_for_user(user_id, reason=REASON_REVOKE_ALL)
        self._record(REASON_REVOKE_ALL, user_id, revoked)
        return revoked

    def revoke_others(self, user_id: str, current_jti: str | None) -> int:
        if not current_jti:
            raise MissingCurrentSession()
        revoked = self.store.revoke_for_user(user_id, reason=REASON_REVOKE_OTHERS, keep_jti=current_jti)
        self._record(REASON_REVOKE_OTHERS, user_id, revoked)
        return revoked

    def revoke_device(self, token: str | None, user_id: str) -> bool:
        if not token:
            return False
        revoked = self.store.mark_revoked(token, reason=REASON_DEVICE_REVOKED, user_id=user_id)
        if revoked:
            self._record(REASON_DEVICE_REVOKED, user_id, 1)
        return revoked

    def _record(self, reason: str, user_id: str, revoked: int) -> None:
        if revoked:
            tokens_revoked_total.labels(reason=reason).inc(revoked)
        self.logger.info(
            "Refresh tokens revoked",
            extra={"event": "token.revoked", "user_id": user_id, "reason": reason, "revoked": revoked},
        )
