"""
통계/랭킹 API 라우터
공개 화면(실시간 랭킹, 남은 자리)에서 주기적으로 조회
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from app.application.services.registration_service import RegistrationService
from app.presentation.api.dependencies import get_registration_service, internal_error
from app.presentation.schemas.registrant import RankingEntry, StatsResponse


router = APIRouter(tags=["Stats"])
logger = logging.getLogger(__name__)


@router.get(
    "/stats",
    response_model=StatsResponse,
    summary="참가 통계",
    description="전체/결제 확정/결제 대기 인원과 남은 자리를 반환합니다."
)
async def get_stats(
    service: RegistrationService = Depends(get_registration_service)
) -> StatsResponse:
    """참가 통계"""
    try:
        return StatsResponse(**await service.stats())
    except SQLAlchemyError as e:
        logger.error(f"[Stats] 조회 실패: {str(e)}", exc_info=True)
        raise internal_error("통계를 불러오지 못했습니다.")


@router.get(
    "/ranking",
    response_model=List[RankingEntry],
    summary="신청 순위",
    description="먼저 신청한 순서대로 배번과 이름을 반환합니다."
)
async def get_ranking(
    service: RegistrationService = Depends(get_registration_service)
) -> List[RankingEntry]:
    """신청 순위"""
    try:
        entries = await service.ranking()
    except SQLAlchemyError as e:
        logger.error(f"[Ranking] 조회 실패: {str(e)}", exc_info=True)
        raise internal_error("순위를 불러오지 못했습니다.")
    return [RankingEntry(**entry) for entry in entries]
