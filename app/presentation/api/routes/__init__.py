"""
API 라우터 모듈
"""
from app.presentation.api.routes.registrants import router as registrants_router
from app.presentation.api.routes.auth import router as auth_router
from app.presentation.api.routes.stats import router as stats_router
from app.presentation.api.routes.health import router as health_router

__all__ = ["registrants_router", "auth_router", "stats_router", "health_router"]
