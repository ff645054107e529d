"""
Pytest Configuration and Fixtures.

Tüm testlerde kullanılan ortak fixture'lar burada tanımlanır.
Her test kendi in-memory SQLite veritabanını ve upload klasörünü alır.
"""
import os

# Test environment - src import edilmeden önce ayarlanmalı
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["RUN_DB_INIT"] = "false"
os.environ["SENTRY_DSN"] = ""

import pytest
from httpx import ASGITransport, AsyncClient

from src.core.database import build_engine, build_session_maker, get_db, init_db
from src.core.security import create_access_token, get_password_hash
from src.core.storage import LocalStorage, get_storage
from src.main import app
from src.modules.auth.models import RoleType, User

PASSWORD = "gizli-sifre-123"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
async def engine():
    """Fresh in-memory database with all tables."""
    engine = build_engine("sqlite+aiosqlite://")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return build_session_maker(engine)


@pytest.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(tmp_path / "uploads")


@pytest.fixture
def app_overrides(session_maker, storage):
    """Point the app at the test database and upload directory."""
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app_overrides):
    transport = ASGITransport(app=app_overrides)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


async def _create_user(session_maker, email: str, role: RoleType, is_active: bool = True) -> User:
    async with session_maker() as session:
        user = User(
            email=email,
            hashed_password=PASSWORD_HASH,
            full_name=email.split("@")[0].title(),
            role=role.value,
            is_active=is_active,
        )
        session.add(user)
        await session.commit()
        return user


def _headers(user: User) -> dict[str, str]:
    token = create_access_token(subject=str(user.id), extra_claims={"role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def user(session_maker) -> User:
    return await _create_user(session_maker, "muhendis@firma.com.tr", RoleType.USER)


@pytest.fixture
async def manager(session_maker) -> User:
    return await _create_user(session_maker, "mudur@firma.com.tr", RoleType.MANAGER)


@pytest.fixture
async def admin(session_maker) -> User:
    return await _create_user(session_maker, "admin@firma.com.tr", RoleType.ADMIN)


@pytest.fixture
async def inactive_user(session_maker) -> User:
    return await _create_user(session_maker, "eski@firma.com.tr", RoleType.USER, is_active=False)


@pytest.fixture
def auth_headers(user) -> dict[str, str]:
    return _headers(user)


@pytest.fixture
def manager_headers(manager) -> dict[str, str]:
    return _headers(manager)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return _headers(admin)


@pytest.fixture
def bedas_payload() -> dict:
    return {
        "ref_no": "BD-1001",
        "company": "BEDAŞ",
        "application_type": "Yeni Bağlantı",
        "customer_name": "Yılmaz İnşaat A.Ş.",
        "city": "İstanbul",
        "district": "Kadıköy",
    }


@pytest.fixture
def ayedas_payload() -> dict:
    return {
        "ref_no": "AY-2001",
        "company": "AYEDAŞ",
        "application_type": "Kapasite Artışı",
        "customer_name": "Demir Yapı Ltd.",
    }


@pytest.fixture
def password() -> str:
    """Plain password of every fixture user."""
    return PASSWORD
