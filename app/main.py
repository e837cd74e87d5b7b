"""
FastAPI 메인 애플리케이션
Race Registration API

[목적]
- 대회 참가 신청 서비스의 진입점
- 공개 신청 폼, 실시간 랭킹, 관리자 대시보드가 사용하는 API 제공

[주요 역할]
1. 애플리케이션 초기화 (lifespan 이벤트)
   - Redis 연결 (관리자 세션 저장소)
   - PostgreSQL 연결 및 테이블 생성
   - 관리자 계정 seed (재시도 포함)

2. API 라우터 등록
   - /api/registrants: 참가 신청, 목록/검색, 결제 상태, CSV, 전체 삭제
   - /api/auth: 관리자 로그인/로그아웃/세션 확인
   - /api/stats, /api/ranking: 통계 및 신청 순위
   - /health: 헬스 체크

3. CORS 설정 및 미들웨어 구성

[실행 방법]
1. 직접 실행: python app/main.py
2. uvicorn: uvicorn app.main:app --reload
3. 스크립트: python scripts/run_dev.py
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.application.services.auth_service import init_storage_with_retry
from app.core.config import settings
from app.infrastructure.cache.redis_client import redis_client
from app.infrastructure.persistence.session import close_db
from app.presentation.api.routes import (
    auth_router,
    health_router,
    registrants_router,
    stats_router,
)


# 로깅 설정
# DEBUG 모드에서는 상세 로그, 프로덕션에서는 INFO 레벨로 설정
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션 라이프사이클 관리

    [Startup 단계]
    1. Redis 연결 초기화 (관리자 세션)
    2. 테이블 생성 + 관리자 계정 seed (DB 연결 실패 시 지수 백오프로 재시도)

    [Shutdown 단계]
    - 모든 연결 정리

    [에러 처리]
    - Redis 연결 실패 시: 애플리케이션 시작 중단 (관리자 세션 필수)
    - PostgreSQL 재시도 소진 시: StorageUnavailable로 시작 중단
    """
    # ===== Startup =====
    logger.info("Starting Race Registration API...")

    try:
        await redis_client.connect()
        logger.info("Redis 연결 성공")
    except Exception as e:
        logger.error(f"Redis 연결 실패: {str(e)}")
        raise

    await init_storage_with_retry()
    logger.info("PostgreSQL 테이블 및 관리자 계정 확인 완료")

    logger.info(f"서버 시작 완료: http://{settings.API_HOST}:{settings.API_PORT}")

    yield  # 애플리케이션 실행

    # ===== Shutdown =====
    logger.info("Shutting down...")

    await redis_client.close()
    await close_db()

    logger.info("서버 종료 완료")


# ===== FastAPI 앱 생성 =====
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
## Race Registration API

대회 참가 신청 및 관리 API

### 기능
- 🏃 참가 신청 (무작위 배번 1~999 자동 할당)
- 📋 참가자 목록/검색 (이름, 배번)
- 💳 결제 상태 관리 (pending → confirmed)
- 📊 통계 및 실시간 신청 순위
- 📁 CSV 내보내기 (관리자)
""",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ===== CORS 설정 =====
# 관리자 세션 쿠키를 사용하므로 allow_credentials=True
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===== 라우터 등록 =====
app.include_router(health_router)  # /health, /info
app.include_router(registrants_router, prefix="/api")  # /api/registrants/*
app.include_router(auth_router, prefix="/api")  # /api/auth/*
app.include_router(stats_router, prefix="/api")  # /api/stats, /api/ranking


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
