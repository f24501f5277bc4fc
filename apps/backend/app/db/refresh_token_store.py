from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import false, or_, select, update
from sqlalchemy.orm import Session

from app.db.models import RefreshToken


class RefreshTokenStore:
    """Keyed access to refresh-token rows.

    Every mutation is a conditional UPDATE guarded by ``is_revoked = false`` so
    that a row leaves the active state exactly once, whichever writer gets
    there first. Callers own the transaction: the store flushes, the request
    (or a terminal error path) commits.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, token: str) -> RefreshToken | None:
        if not token:
            return None
        return self.db.get(RefreshToken, token)

    def add(self, row: RefreshToken) -> RefreshToken:
        self.db.add(row)
        self.db.flush()
        return row

    def mark_revoked(
        self,
        token: str,
        *,
        reason: str,
        replaced_by: str | None = None,
        last_used_at: datetime | None = None,
        user_id: str | None = None,
    ) -> bool:
        """Revoke one active row; returns False when nothing matched."""
        values: dict[str, Any] = {
            "is_revoked": True,
            "is_current": False,
            "revoked_reason": reason,
        }
        if replaced_by is not None:
            values["replaced_by_token"] = replaced_by
        if last_used_at is not None:
            values["last_used_at"] = last_used_at
        stmt = update(RefreshToken).where(
            RefreshToken.token == token,
            RefreshToken.is_revoked == false(),
        )
        if user_id is not None:
            stmt = stmt.where(RefreshToken.user_id == user_id)
        return self._execute(stmt.values(**values)) == 1

    def revoke_for_user(self, user_id: str, *, reason: str, keep_jti: str | None = None) -> int:
        stmt = update(RefreshToken).where(
            RefreshToken.user_id == user_id,
            RefreshToken.is_revoked == false(),
        )
        if keep_jti is not None:
            stmt = stmt.where(
                or_(
                    RefreshToken.access_token_jti.is_(None),
                    RefreshToken.access_token_jti != keep_jti,
                )
            )
        return self._execute(stmt.values(is_revoked=True, is_current=False, revoked_reason=reason))

    def list_active(self, user_id: str, *, now: datetime) -> list[RefreshToken]:
        return list(
            self.db.scalars(
                select(RefreshToken)
                .where(
                    RefreshToken.user_id == user_id,
                    RefreshToken.is_revoked == false(),
                    RefreshToken.expires_at > now,
                )
                .order_by(RefreshToken.last_used_at.desc(), RefreshToken.created_at.desc())
            ).all()
        )

    def commit(self) -> None:
        self.db.commit()

    def _execute(self, stmt) -> int:  # noqa: ANN001
        result = self.db.execute(stmt.execution_options(synchronize_session=False))
        # Rows already loaded in this session must not keep their stale state.
        self.db.expire_all()
        return int(result.rowcount or 0)
