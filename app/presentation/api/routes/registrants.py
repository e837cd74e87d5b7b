"""
참가자 API 라우터

[공개]
- POST   /registrants                        참가 신청
- GET    /registrants?search=                목록/검색
- GET    /registrants/{registrant_id}        단건 조회

[관리자 전용]
- GET    /registrants/export                 CSV 다운로드
- PATCH  /registrants/{id}/payment-status    결제 상태 변경
- DELETE /registrants                        전체 삭제
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError

from app.application.services.export_service import (
    CSV_FILENAME,
    CSV_MEDIA_TYPE,
    render_registrants_csv,
)
from app.application.services.registration_service import RegistrationService
from app.core.config import settings
from app.domain.registration.errors import RegistrationError, RegistrantNotFound
from app.presentation.api.dependencies import (
    get_registration_service,
    internal_error,
    require_admin,
    to_http_exception,
)
from app.presentation.schemas.common import ErrorResponse
from app.presentation.schemas.registrant import (
    ClearRegistrantsResponse,
    PaymentStatusUpdate,
    RegistrantCreate,
    RegistrantResponse,
)


router = APIRouter(prefix="/registrants", tags=["Registrants"])
logger = logging.getLogger(__name__)


@router.post(
    "",
    response_model=RegistrantResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "입력값 오류"},
        409: {"model": ErrorResponse, "description": "최대 인원 도달 또는 배번 할당 실패"},
        500: {"model": ErrorResponse, "description": "서버 에러"}
    },
    summary="참가 신청",
    description="""
    참가자를 등록하고 무작위 배번을 할당합니다.

    **처리 과정:**
    1. 이름/이메일 검증
    2. 최대 참가 인원 확인 (MAX_PARTICIPANTS)
    3. 배번 추첨 (1~999, 충돌 시 재추첨)
    4. 결제 상태 pending으로 저장
    """
)
async def create_registrant(
    request: RegistrantCreate,
    service: RegistrationService = Depends(get_registration_service)
) -> RegistrantResponse:
    """참가 신청"""
    try:
        registrant = await service.create(request.name, request.email)
    except RegistrationError as e:
        logger.info(f"[CreateRegistrant] 신청 거부 - {e.error_code}: {e.message}")
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"[CreateRegistrant] 저장 실패: {str(e)}", exc_info=True)
        raise internal_error("참가 신청 처리 중 오류가 발생했습니다.")

    return RegistrantResponse.model_validate(registrant)


@router.get(
    "",
    response_model=List[RegistrantResponse],
    summary="참가자 목록/검색",
    description="최근 신청 순으로 반환합니다. search가 있으면 이름(대소문자 무시) 또는 배번으로 검색합니다."
)
async def list_registrants(
    search: Optional[str] = Query(None, description="이름 또는 배번 검색어"),
    service: RegistrationService = Depends(get_registration_service)
) -> List[RegistrantResponse]:
    """참가자 목록/검색"""
    try:
        registrants = await service.list_registrants(search)
    except SQLAlchemyError as e:
        logger.error(f"[ListRegistrants] 조회 실패: {str(e)}", exc_info=True)
        raise internal_error("참가자 목록을 불러오지 못했습니다.")

    return [RegistrantResponse.model_validate(r) for r in registrants]


@router.get(
    "/export",
    responses={
        200: {"content": {"text/csv": {}}, "description": "CSV 파일"},
        401: {"model": ErrorResponse, "description": "관리자 로그인 필요"}
    },
    summary="CSV 다운로드 (관리자)",
    description="전체 참가자를 CSV 파일로 내려받습니다. (bib, name, created_at, payment_status)"
)
async def export_registrants(
    admin: dict = Depends(require_admin),
    service: RegistrationService = Depends(get_registration_service)
) -> Response:
    """CSV 다운로드"""
    try:
        registrants = await service.list_registrants()
    except SQLAlchemyError as e:
        logger.error(f"[ExportRegistrants] 조회 실패: {str(e)}", exc_info=True)
        raise internal_error("CSV 내보내기에 실패했습니다.")

    content = render_registrants_csv(registrants, settings.DISPLAY_TIMEZONE)
    logger.info(f"[ExportRegistrants] CSV 내보내기 - rows: {len(registrants)}, admin: {admin.get('username')}")

    return Response(
        content=content,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )


@router.get(
    "/{registrant_id}",
    response_model=RegistrantResponse,
    responses={
        404: {"model": ErrorResponse, "description": "참가자를 찾을 수 없음"}
    },
    summary="참가자 조회"
)
async def get_registrant(
    registrant_id: str,
    service: RegistrationService = Depends(get_registration_service)
) -> RegistrantResponse:
    """참가자 단건 조회"""
    registrant = await service.find_by_id(registrant_id)
    if registrant is None:
        raise to_http_exception(
            RegistrantNotFound(
                "참가자를 찾을 수 없습니다.",
                details={"registrant_id": registrant_id},
            )
        )
    return RegistrantResponse.model_validate(registrant)


@router.patch(
    "/{registrant_id}/payment-status",
    response_model=RegistrantResponse,
    responses={
        401: {"model": ErrorResponse, "description": "관리자 로그인 필요"},
        404: {"model": ErrorResponse, "description": "참가자를 찾을 수 없음"},
        409: {"model": ErrorResponse, "description": "허용되지 않은 상태 변경"}
    },
    summary="결제 상태 변경 (관리자)",
    description="""
    결제 상태를 변경합니다.

    **상태 전이:**
    - pending → confirmed: 허용
    - confirmed → pending: ALLOW_PAYMENT_STATUS_REVERT=true 인 경우만 허용
    """
)
async def update_payment_status(
    registrant_id: str,
    request: PaymentStatusUpdate,
    admin: dict = Depends(require_admin),
    service: RegistrationService = Depends(get_registration_service)
) -> RegistrantResponse:
    """결제 상태 변경"""
    try:
        registrant = await service.update_status(registrant_id, request.payment_status)
    except RegistrationError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"[UpdatePaymentStatus] 변경 실패: {str(e)}", exc_info=True)
        raise internal_error("결제 상태 변경 중 오류가 발생했습니다.")

    if registrant is None:
        raise to_http_exception(
            RegistrantNotFound(
                "참가자를 찾을 수 없습니다.",
                details={"registrant_id": registrant_id},
            )
        )

    return RegistrantResponse.model_validate(registrant)


@router.delete(
    "",
    response_model=ClearRegistrantsResponse,
    responses={
        401: {"model": ErrorResponse, "description": "관리자 로그인 필요"}
    },
    summary="전체 참가자 삭제 (관리자)",
    description="모든 참가자를 삭제합니다. 되돌릴 수 없습니다."
)
async def clear_registrants(
    admin: dict = Depends(require_admin),
    service: RegistrationService = Depends(get_registration_service)
) -> ClearRegistrantsResponse:
    """전체 참가자 삭제"""
    try:
        deleted = await service.clear_all()
    except SQLAlchemyError as e:
        logger.error(f"[ClearRegistrants] 삭제 실패: {str(e)}", exc_info=True)
        raise internal_error("참가자 삭제 중 오류가 발생했습니다.")

    logger.warning(f"[ClearRegistrants] 전체 삭제 - admin: {admin.get('username')}, deleted: {deleted}")
    return ClearRegistrantsResponse(message="전체 참가자가 삭제되었습니다.", deleted=deleted)
