"""
참가 신청 서비스
참가자 저장소(Registrant Store) 연산과 배번 할당을 조합

[목적]
- 공개 참가 신청: 입력 검증 → 인원 제한 확인 → 배번 할당 및 저장
- 관리자 작업: 결제 상태 변경, 전체 삭제
- 조회: 목록/검색, 통계, 랭킹

[에러 처리]
- 입력 검증 및 인원 제한은 저장 시도 전에 확인 (실패 시 아무것도 저장되지 않음)
- 배번 충돌은 BibAllocator 내부에서만 재시도, 그 외 실패는 그대로 전파
"""
import logging
import random
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, settings as default_settings
from app.domain.registration.bib_allocator import allocate_bib
from app.domain.registration.errors import CapacityExceeded
from app.domain.registration.rules import check_status_transition, validate_registrant_input
from app.infrastructure.persistence.models.enums import PaymentStatusEnum
from app.infrastructure.persistence.models.registrants import Registrant
from app.infrastructure.repositories.registrant_repository import RegistrantRepository

logger = logging.getLogger(__name__)


class RegistrationService:
    """참가 신청 서비스"""

    def __init__(
        self,
        db: AsyncSession,
        config: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            db: PostgreSQL 세션
            config: 설정 (기본: 전역 settings)
            rng: 배번 추첨용 난수 생성기 (테스트에서 주입)
        """
        self.db = db
        self.config = config or default_settings
        self.rng = rng
        self.repo = RegistrantRepository(db)

    # ===== 참가 신청 =====

    async def create(self, name: str, email: Optional[str] = None) -> Registrant:
        """
        참가 신청

        [처리 흐름]
        1. 이름/이메일 검증 (ValidationError)
        2. 최대 참가 인원 확인 (CapacityExceeded)
        3. 배번 추첨 및 저장 (AllocationExhausted)

        Returns:
            저장된 Registrant (payment_status = pending)
        """
        clean_name, clean_email = validate_registrant_input(name, email)

        await self._check_capacity()

        async def try_commit(bib: int) -> Optional[Registrant]:
            return await self.repo.insert_with_bib(clean_name, clean_email, bib)

        allocation = await allocate_bib(
            self.repo.bib_exists,
            try_commit,
            max_attempts=self.config.BIB_MAX_ATTEMPTS,
            bib_min=self.config.BIB_MIN,
            bib_max=self.config.BIB_MAX,
            rng=self.rng,
        )

        registrant = allocation.record
        logger.info(
            f"[Registration] 참가 신청 완료 - "
            f"id: {registrant.id}, bib: {registrant.bib}, attempts: {allocation.attempts}"
        )
        return registrant

    async def _check_capacity(self) -> None:
        """최대 참가 인원 확인 (MAX_PARTICIPANTS=0이면 제한 없음)"""
        max_participants = self.config.MAX_PARTICIPANTS
        if max_participants <= 0:
            return

        total = await self.repo.count_all()
        if total >= max_participants:
            logger.warning(
                f"[Registration] 최대 참가 인원 도달 - total: {total}, max: {max_participants}"
            )
            raise CapacityExceeded(
                f"최대 참가 인원({max_participants}명)에 도달하여 더 이상 신청할 수 없습니다.",
                details={"total": total, "capacity": max_participants},
            )

    # ===== 조회 =====

    async def list_registrants(self, search: Optional[str] = None) -> List[Registrant]:
        """참가자 목록 (검색어가 있으면 이름/배번 검색)"""
        if search and search.strip():
            return await self.repo.search(search.strip())
        return await self.repo.list_all()

    async def search(self, query_text: str) -> List[Registrant]:
        """이름/배번 검색"""
        return await self.list_registrants(query_text)

    async def find_by_id(self, registrant_id: str) -> Optional[Registrant]:
        """참가자 조회"""
        return await self.repo.get_by_id(registrant_id)

    async def stats(self) -> Dict[str, Optional[int]]:
        """
        참가 통계

        Returns:
            {"total", "confirmed", "pending", "capacity", "remaining"}
            (인원 제한이 없으면 capacity/remaining은 None)
        """
        counts = await self.repo.count_by_status()
        confirmed = counts[PaymentStatusEnum.CONFIRMED]
        pending = counts[PaymentStatusEnum.PENDING]
        total = confirmed + pending

        capacity = self.config.MAX_PARTICIPANTS if self.config.MAX_PARTICIPANTS > 0 else None
        remaining = max(capacity - total, 0) if capacity is not None else None

        return {
            "total": total,
            "confirmed": confirmed,
            "pending": pending,
            "capacity": capacity,
            "remaining": remaining,
        }

    async def ranking(self) -> List[Dict[str, Any]]:
        """
        랭킹 화면용 목록 (먼저 신청한 순, position은 1부터)
        """
        registrants = await self.repo.list_in_registration_order()
        return [
            {
                "position": position,
                "bib": registrant.bib,
                "name": registrant.name,
                "registration_time": registrant.created_at,
            }
            for position, registrant in enumerate(registrants, start=1)
        ]

    # ===== 관리자 작업 =====

    async def update_status(
        self,
        registrant_id: str,
        status: PaymentStatusEnum
    ) -> Optional[Registrant]:
        """
        결제 상태 변경

        Returns:
            변경된 Registrant, 존재하지 않으면 None (레코드를 생성하지 않음)

        Raises:
            InvalidStatusTransition: confirmed → pending (ALLOW_PAYMENT_STATUS_REVERT=False)
        """
        registrant = await self.repo.get_by_id(registrant_id)
        if registrant is None:
            return None

        current = PaymentStatusEnum(registrant.payment_status)
        check_status_transition(
            current,
            status,
            allow_revert=self.config.ALLOW_PAYMENT_STATUS_REVERT,
        )

        if current != status:
            await self.repo.update_status(registrant, status)
            await self.db.commit()
            logger.info(
                f"[Registration] 결제 상태 변경 - "
                f"id: {registrant_id}, {current.value} → {status.value}"
            )
        return registrant

    async def clear_all(self) -> int:
        """
        전체 참가자 삭제 (되돌릴 수 없음, 배번 공간 전체 해제)

        Returns:
            삭제된 참가자 수
        """
        deleted = await self.repo.delete_all()
        await self.db.commit()
        logger.warning(f"[Registration] 전체 참가자 삭제 - deleted: {deleted}")
        return deleted
