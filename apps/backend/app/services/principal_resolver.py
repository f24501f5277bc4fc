from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class Principal:
    """An identity already verified by the login/2FA flows upstream."""

    user_id: str
    app_user_id: str | None = None
    email: str | None = None
    username: str | None = None
    roles: tuple[str, ...] = field(default_factory=tuple)
    permissions: tuple[str, ...] = field(default_factory=tuple)

    def claims(self) -> dict[str, Any]:
        claims: dict[str, Any] = {
            "app_user_id": self.app_user_id or self.user_id,
            "roles": list(self.roles),
            "permissions": list(self.permissions),
        }
        if self.email:
            claims["email"] = self.email
        if self.username:
            claims["unique_name"] = self.username
        return claims


class PrincipalResolver(Protocol):
    def resolve(self, user_id: str) -> Principal | None: ...


class SubjectPrincipalResolver:
    """Rebuilds a principal from the token owner alone.

    Deployments with a user directory override the ``get_principal_resolver``
    dependency to reload roles and permissions on every rotation.
    """

    def resolve(self, user_id: str) -> Principal | None:
        if not user_id:
            return None
        return Principal(user_id=user_id, app_user_id=user_id)
