"""
참가자 Repository
PostgreSQL registrants 테이블 CRUD

[배번 UNIQUE 제약]
- bib 컬럼의 UNIQUE 제약이 중복 방지의 최종 근거
- insert_with_bib()는 단일 행 commit을 시도하고, 충돌 시 rollback 후 None 반환
- 재추첨 판단은 BibAllocator가 담당
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import String, cast, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.enums import PaymentStatusEnum
from app.infrastructure.persistence.models.registrants import Registrant

logger = logging.getLogger(__name__)


class RegistrantRepository:
    """
    참가자 데이터 접근 계층

    [사용처]
    - RegistrationService (참가 신청, 관리자 작업)
    """

    def __init__(self, db: AsyncSession):
        """
        Args:
            db: SQLAlchemy 비동기 세션 (FastAPI Depends에서 주입)
        """
        self.db = db

    async def list_all(self) -> List[Registrant]:
        """전체 참가자 조회 (최근 등록 순)"""
        query = select(Registrant).order_by(Registrant.created_at.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_in_registration_order(self) -> List[Registrant]:
        """전체 참가자 조회 (먼저 등록한 순, 랭킹 화면용)"""
        query = select(Registrant).order_by(Registrant.created_at.asc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, registrant_id: str) -> Optional[Registrant]:
        """참가자 ID로 조회"""
        query = select(Registrant).where(Registrant.id == registrant_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def bib_exists(self, bib: int) -> bool:
        """배번 사용 여부 확인"""
        query = select(Registrant.id).where(Registrant.bib == bib).limit(1)
        result = await self.db.execute(query)
        return result.scalar_one_or_none() is not None

    async def insert_with_bib(
        self,
        name: str,
        email: Optional[str],
        bib: int
    ) -> Optional[Registrant]:
        """
        배번을 지정해 참가자 저장 (단일 행 commit)

        Returns:
            저장된 Registrant, 배번 UNIQUE 충돌 시 None
        """
        registrant = Registrant(
            name=name,
            email=email,
            bib=bib,
            payment_status=PaymentStatusEnum.PENDING,
        )
        self.db.add(registrant)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.debug(f"[RegistrantRepository] 배번 UNIQUE 충돌 - bib: {bib}")
            return None
        await self.db.refresh(registrant)
        return registrant

    async def update_status(
        self,
        registrant: Registrant,
        status: PaymentStatusEnum
    ) -> Registrant:
        """결제 상태 변경 (commit은 호출 측에서)"""
        registrant.payment_status = status
        await self.db.flush()
        return registrant

    async def delete_all(self) -> int:
        """
        전체 참가자 삭제 (되돌릴 수 없음)

        Returns:
            삭제된 행 수
        """
        result = await self.db.execute(delete(Registrant))
        return result.rowcount or 0

    async def search(self, query_text: str) -> List[Registrant]:
        """
        이름(대소문자 무시) 또는 배번 문자열 부분 일치 검색

        [정렬]
        - list_all()과 동일 (최근 등록 순)
        """
        query = (
            select(Registrant)
            .where(
                or_(
                    Registrant.name.icontains(query_text, autoescape=True),
                    cast(Registrant.bib, String).contains(query_text, autoescape=True),
                )
            )
            .order_by(Registrant.created_at.desc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_all(self) -> int:
        """전체 참가자 수"""
        result = await self.db.execute(select(func.count(Registrant.id)))
        return result.scalar_one()

    async def count_by_status(self) -> Dict[PaymentStatusEnum, int]:
        """결제 상태별 참가자 수"""
        query = (
            select(Registrant.payment_status, func.count(Registrant.id))
            .group_by(Registrant.payment_status)
        )
        result = await self.db.execute(query)
        counts = {status: 0 for status in PaymentStatusEnum}
        for status, count in result.all():
            counts[PaymentStatusEnum(status)] = count
        return counts
