"""
API 공통 의존성
- 서비스 생성
- 관리자 세션 확인
- 도메인 예외 → HTTPException 변환
"""
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.auth_service import AuthService
from app.application.services.registration_service import RegistrationService
from app.core.config import settings
from app.domain.registration.errors import RegistrationError, Unauthorized
from app.infrastructure.cache.redis_client import RedisClient, get_redis
from app.infrastructure.persistence.session import get_db
from app.infrastructure.repositories.auth_session_repository import AuthSessionRepository


def to_http_exception(error: RegistrationError) -> HTTPException:
    """도메인 예외를 HTTPException으로 변환"""
    return HTTPException(status_code=error.status_code, detail=error.to_detail())


def internal_error(message: str) -> HTTPException:
    """예상하지 못한 서버 에러 (DB 장애 등)"""
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": True,
            "error_code": "INTERNAL_ERROR",
            "error_message": message,
        }
    )


async def get_registration_service(db: AsyncSession = Depends(get_db)) -> RegistrationService:
    """RegistrationService 의존성 주입"""
    return RegistrationService(db)


async def get_auth_session_repository(
    redis: RedisClient = Depends(get_redis)
) -> AuthSessionRepository:
    """AuthSessionRepository 의존성 주입"""
    return AuthSessionRepository(redis)


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    sessions: AuthSessionRepository = Depends(get_auth_session_repository),
) -> AuthService:
    """AuthService 의존성 주입"""
    return AuthService(db, sessions)


async def get_session_token(
    token: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    """쿠키에서 관리자 세션 토큰 추출"""
    return token


async def require_admin(
    token: Optional[str] = Depends(get_session_token),
    sessions: AuthSessionRepository = Depends(get_auth_session_repository),
) -> dict:
    """
    관리자 세션 확인

    [동작]
    - 쿠키의 토큰으로 Redis 세션 조회
    - 세션이 없으면 401 (저장소 접근 전에 거부)

    Returns:
        세션 데이터 {"admin_id", "username", "created_at"}
    """
    session_data = await sessions.get_session(token)
    if session_data is None:
        raise to_http_exception(Unauthorized("관리자 로그인이 필요합니다."))
    return session_data
