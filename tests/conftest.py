"""
테스트 공통 fixture

[구성]
- DB: aiosqlite 인메모리 SQLite (StaticPool로 하나의 연결 공유)
- Redis: 프로세스 내 dict 기반 RedisClient (관리자 세션 저장소)
- API: httpx.AsyncClient + ASGITransport (lifespan 미실행)
"""
import os

# app 모듈 import 전에 설정 (전역 엔진이 PostgreSQL 드라이버를 요구하지 않도록)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import random
from typing import Dict, Optional

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.application.services.auth_service import ensure_admin_user
from app.application.services.registration_service import RegistrationService
from app.core.config import Settings
from app.infrastructure.cache.redis_client import RedisClient, get_redis
from app.infrastructure.persistence.models import admin_users, registrants  # noqa: F401
from app.infrastructure.persistence.session import Base, get_db


class InMemoryRedis(RedisClient):
    """dict 기반 Redis (TTL은 저장만 하고 만료는 하지 않음)"""

    def __init__(self):
        super().__init__()
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> Optional[str]:
        return self.store.get(key)

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> bool:
        self.store[key] = value
        if ttl_seconds:
            self.ttls[key] = ttl_seconds
        return True

    async def delete(self, key: str) -> int:
        self.ttls.pop(key, None)
        return 1 if self.store.pop(key, None) is not None else 0


def make_settings(**overrides) -> Settings:
    """테스트용 설정"""
    values = {
        "ADMIN_USERNAME": "john",
        "ADMIN_PASSWORD": "batata123",
        "MAX_PARTICIPANTS": 100,
        "BIB_MAX_ATTEMPTS": 50,
    }
    values.update(overrides)
    return Settings(**values)


@pytest_asyncio.fixture
async def engine():
    """테스트마다 새 인메모리 DB"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def service(db, settings):
    """RegistrationService (결정적 난수)"""
    return RegistrationService(db, config=settings, rng=random.Random(1234))


@pytest.fixture
def fake_redis():
    return InMemoryRedis()


@pytest_asyncio.fixture
async def client(session_factory, fake_redis):
    """API 테스트 클라이언트 (DB/Redis 의존성 교체, 관리자 계정 seed)"""
    from app.main import app

    async with session_factory() as session:
        await ensure_admin_user(session, make_settings())
        await session.commit()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        return fake_redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_client(client):
    """관리자로 로그인된 클라이언트"""
    response = await client.post(
        "/api/auth/login",
        json={"username": "john", "password": "batata123"},
    )
    assert response.status_code == 200
    return client
