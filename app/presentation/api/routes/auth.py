"""
관리자 인증 API 라우터
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.exc import SQLAlchemyError

from app.application.services.auth_service import AuthService
from app.core.config import settings
from app.domain.registration.errors import RegistrationError
from app.presentation.api.dependencies import (
    get_auth_service,
    get_session_token,
    internal_error,
    to_http_exception,
)
from app.presentation.schemas.auth import (
    AdminInfo,
    AuthCheckResponse,
    LoginRequest,
    LoginResponse,
)
from app.presentation.schemas.common import ErrorResponse, MessageResponse


router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger(__name__)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "인증 실패"}
    },
    summary="관리자 로그인",
    description="성공 시 세션 토큰을 HttpOnly 쿠키로 설정합니다."
)
async def login(
    request: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """관리자 로그인"""
    try:
        token, admin = await auth_service.login(request.username, request.password)
    except RegistrationError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"[Login] 관리자 조회 실패: {str(e)}", exc_info=True)
        raise internal_error("로그인 처리 중 오류가 발생했습니다.")

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return LoginResponse(message="로그인 성공", admin=AdminInfo.model_validate(admin))


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="관리자 로그아웃"
)
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    """관리자 로그아웃"""
    await auth_service.logout(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MessageResponse(message="로그아웃 되었습니다.")


@router.get(
    "/check",
    response_model=AuthCheckResponse,
    summary="관리자 세션 확인"
)
async def check(
    token: Optional[str] = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthCheckResponse:
    """관리자 세션 확인"""
    return AuthCheckResponse(authenticated=await auth_service.is_authenticated(token))
