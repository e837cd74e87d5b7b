"""
헬스 체크 API 라우터
"""
from fastapi import APIRouter

from app.presentation.schemas.common import HealthResponse
from app.core.config import settings
from app.infrastructure.cache.redis_client import redis_client
from app.infrastructure.persistence.session import ping_db


router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="헬스 체크",
    description="서버 및 의존 서비스 상태를 확인합니다."
)
async def health_check() -> HealthResponse:
    """헬스 체크"""
    components = {}

    # Redis 상태 확인 (관리자 세션 저장소)
    try:
        await redis_client.ping()
        components["redis"] = True
    except Exception:
        components["redis"] = False

    # PostgreSQL 상태 확인
    try:
        components["postgres"] = await ping_db()
    except Exception:
        components["postgres"] = False

    overall_status = "ok" if all(components.values()) else "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.APP_VERSION,
        components=components,
    )


@router.get(
    "/info",
    summary="API 정보",
    description="API 정보를 반환합니다."
)
async def api_info():
    """API 정보 엔드포인트"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
    }
