import os
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_JWT_SECRET", "unit-test-secret-with-enough-length-for-hs256")
os.environ.setdefault("APP_COOKIE_SECURE", "false")

from app.core import config as config_module  # noqa: E402
from app.core.device_info import parse_device_info  # noqa: E402
from app.core.rate_limit import reset_rate_limits  # noqa: E402
from app.db import models  # noqa: E402,F401
from app.db.base import Base  # noqa: E402
from app.db.refresh_token_store import RefreshTokenStore  # noqa: E402
from app.services.principal_resolver import Principal, SubjectPrincipalResolver  # noqa: E402
from app.services.revocation_service import RevocationService  # noqa: E402
from app.services.rotation_service import RotationService  # noqa: E402
from app.services.session_registry import SessionRegistry  # noqa: E402
from app.services.token_issuer import TokenIssuer  # noqa: E402

WINDOWS_CHROME = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MAC_SAFARI = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Safari/605.1.15"
)
UBUNTU_FIREFOX = "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:120.0) Gecko/20100101 Firefox/120.0"


class FrozenClock:
    def __init__(self, now: datetime | None = None) -> None:
        self.now = (now or datetime.now(UTC)).replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def _fresh_settings():
    config_module.get_settings.cache_clear()
    reset_rate_limits()
    yield
    config_module.get_settings.cache_clear()


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock():
    return FrozenClock()


@pytest.fixture()
def store(db):
    return RefreshTokenStore(db)


@pytest.fixture()
def issuer(store, clock):
    return TokenIssuer(store, clock=clock)


@pytest.fixture()
def rotation(store, issuer, clock):
    return RotationService(store, issuer, SubjectPrincipalResolver(), clock=clock)


@pytest.fixture()
def revocation(store):
    return RevocationService(store)


@pytest.fixture()
def registry(store, clock):
    return SessionRegistry(store, clock=clock)


@pytest.fixture()
def principal():
    return Principal(
        user_id="user-1",
        app_user_id="app-user-1",
        email="user1@example.test",
        username="user1",
        roles=("Admin",),
        permissions=("users.read",),
    )


@pytest.fixture()
def windows_chrome():
    return parse_device_info(WINDOWS_CHROME, "10.0.0.1")


@pytest.fixture()
def mac_safari():
    return parse_device_info(MAC_SAFARI, "10.0.0.2")


@pytest.fixture()
def ubuntu_firefox():
    return parse_device_info(UBUNTU_FIREFOX, "10.0.0.3")
