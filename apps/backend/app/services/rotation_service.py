from __future__ import annotations

from app.core.clock import Clock, as_utc, utc_now
from app.core.device_info import DeviceInfo
from app.core.errors import InvalidToken, TokenExpired, TokenReused
from app.core.logging import get_logger
from app.core.security import generate_opaque_token, mask_secret
from app.db.models import RefreshToken
from app.db.refresh_token_store import RefreshTokenStore
from app.services.principal_resolver import PrincipalResolver
from app.services.token_issuer import TokenIssuer, TokenPair
from app.telemetry.metrics import token_rotations_total, tokens_revoked_total

REASON_ROTATED = "rotated"
REASON_EXPIRED = "expired"
REASON_REUSE = "reuse-detected"
REASON_PRINCIPAL_MISSING = "principal-missing"


class RotationService:
    """Single-use exchange of a refresh token for a new token pair.

    The old row is retired by a conditional UPDATE; only the caller that flips
    ``is_revoked`` gets a successor. Anyone presenting a retired token, whether
    a replay or the loser of a concurrent rotation, triggers revocation of all
    of the owner's sessions.
    """

    def __init__(
        self,
        store: RefreshTokenStore,
        issuer: TokenIssuer,
        principals: PrincipalResolver,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self.store = store
        self.issuer = issuer
        self.principals = principals
        self.clock = clock
        self.logger = get_logger(__name__)

    def rotate(self, old_token: str, device: DeviceInfo | None = None, *, remember_me: bool = False) -> TokenPair:
        row = self.store.get(old_token)
        if row is None:
            token_rotations_total.labels(outcome="invalid").inc()
            raise InvalidToken()

        user_id = row.user_id
        if row.is_revoked:
            self._revoke_after_reuse(user_id, old_token)

        now = self.clock()
        if now > as_utc(row.expires_at):
            if self.store.mark_revoked(old_token, reason=REASON_EXPIRED):
                tokens_revoked_total.labels(reason=REASON_EXPIRED).inc()
            self.store.commit()
            token_rotations_total.labels(outcome="expired").inc()
            self.logger.info(
                "Expired refresh token presented",
                extra={"event": "token.expired", "user_id": user_id, "token": mask_secret(old_token)},
            )
            raise TokenExpired()

        principal = self.principals.resolve(user_id)
        if principal is None:
            if self.store.mark_revoked(old_token, reason=REASON_PRINCIPAL_MISSING):
                tokens_revoked_total.labels(reason=REASON_PRINCIPAL_MISSING).inc()
            self.store.commit()
            token_rotations_total.labels(outcome="invalid").inc()
            raise InvalidToken("User not found")

        previous_device = _device_snapshot(row)
        # Sign before retiring the old row so a signing failure leaves it usable.
        signed = self.issuer.sign_access_token(principal)
        successor = generate_opaque_token()
        claimed = self.store.mark_revoked(
            old_token,
            reason=REASON_ROTATED,
            replaced_by=successor,
            last_used_at=now,
        )
        if not claimed:
            # Revoked between our read and our write: a concurrent rotation won.
            self._revoke_after_reuse(user_id, old_token)

        merged = (device or DeviceInfo()).merged_with(previous_device)
        pair = self.issuer.issue_tokens(
            principal,
            merged,
            remember_me=remember_me,
            refresh_token=successor,
            origin="rotation",
            signed=signed,
        )
        tokens_revoked_total.labels(reason=REASON_ROTATED).inc()
        token_rotations_total.labels(outcome="rotated").inc()
        return pair

    def _revoke_after_reuse(self, user_id: str, token: str) -> None:
        revoked = self.store.revoke_for_user(user_id, reason=REASON_REUSE)
        self.store.commit()
        if revoked:
            tokens_revoked_total.labels(reason=REASON_REUSE).inc(revoked)
        token_rotations_total.labels(outcome="reused").inc()
        self.logger.warning(
            "Refresh token reuse detected; revoking all sessions",
            extra={
                "event": "token.reuse_detected",
                "user_id": user_id,
                "revoked": revoked,
                "token": mask_secret(token),
            },
        )
        raise TokenReused()


def _device_snapshot(row: RefreshToken) -> DeviceInfo:
    return DeviceInfo(
        user_agent=row.user_agent,
        ip_address=row.ip_address,
        device_name=row.device_name,
        platform=row.platform,
        browser=row.browser,
    )
