from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.refresh_token_store import RefreshTokenStore
from app.db.session import get_db
from app.services.principal_resolver import PrincipalResolver, SubjectPrincipalResolver
from app.services.revocation_service import RevocationService
from app.services.rotation_service import RotationService
from app.services.session_registry import SessionRegistry
from app.services.token_issuer import TokenIssuer


def get_principal_resolver() -> PrincipalResolver:
    return SubjectPrincipalResolver()


def get_token_store(db: Session = Depends(get_db)) -> RefreshTokenStore:
    return RefreshTokenStore(db)


def get_token_issuer(store: RefreshTokenStore = Depends(get_token_store)) -> TokenIssuer:
    return TokenIssuer(store)


def get_rotation_service(
    store: RefreshTokenStore = Depends(get_token_store),
    issuer: TokenIssuer = Depends(get_token_issuer),
    principals: PrincipalResolver = Depends(get_principal_resolver),
) -> RotationService:
    return RotationService(store, issuer, principals)


def get_revocation_service(store: RefreshTokenStore = Depends(get_token_store)) -> RevocationService:
    return RevocationService(store)


def get_session_registry(store: RefreshTokenStore = Depends(get_token_store)) -> SessionRegistry:
    return SessionRegistry(store)
