"""
환경 설정 모듈
PostgreSQL, Redis, 관리자 계정, 참가 신청 정책 등의 설정을 관리합니다.
"""
from functools import lru_cache
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 환경 설정"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # 알 수 없는 환경 변수는 무시
    )

    # 앱 기본 설정
    APP_NAME: str = "Race Registration API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # FastAPI 설정
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    # PostgreSQL 설정
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "race_registration"

    # 지정하면 POSTGRES_* 설정보다 우선 (예: sqlite+aiosqlite:///./race.db)
    DATABASE_URL: Optional[str] = None

    @property
    def POSTGRES_URL(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # DB 연결 재시도 (startup 시 관리자 계정 seed)
    DB_CONNECT_MAX_RETRIES: int = 5
    DB_CONNECT_INITIAL_DELAY: float = 1.0  # 초기 대기 시간 (초)
    DB_CONNECT_MAX_DELAY: float = 30.0  # 최대 대기 시간 (초)

    # Redis 설정 (관리자 세션 저장소)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    REDIS_DB: int = 0

    @property
    def REDIS_URL(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # 관리자 계정 (단일 고정 계정, startup 시 해시로 저장)
    ADMIN_USERNAME: str = "john"
    ADMIN_PASSWORD: str = "batata123"

    # 관리자 세션 쿠키
    SESSION_COOKIE_NAME: str = "race_admin_session"
    SESSION_COOKIE_SECURE: bool = False  # HTTPS 환경에서는 True
    SESSION_TTL_SECONDS: int = 86400  # 24시간

    # 참가 신청 정책
    MAX_PARTICIPANTS: int = 100  # 0이면 인원 제한 없음 (배번 공간만 제한)
    # registrants 테이블 CHECK 제약(1~999) 밖으로 설정할 수 없음
    BIB_MIN: int = Field(1, ge=1, le=999)
    BIB_MAX: int = Field(999, ge=1, le=999)
    BIB_MAX_ATTEMPTS: int = 50  # 배번 충돌 시 최대 재추첨 횟수
    ALLOW_PAYMENT_STATUS_REVERT: bool = False  # confirmed → pending 허용 여부

    # CSV 내보내기 시각 표시용 타임존
    DISPLAY_TIMEZONE: str = "America/Sao_Paulo"


@lru_cache()
def get_settings() -> Settings:
    """싱글톤 설정 객체 반환"""
    return Settings()


settings = get_settings()
