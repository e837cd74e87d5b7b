"""
RegistrationService 테스트 (인메모리 SQLite)
"""
import asyncio
import random

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.application.services.registration_service import RegistrationService
from app.domain.registration.errors import (
    AllocationExhausted,
    CapacityExceeded,
    InvalidStatusTransition,
    ValidationError,
)
from app.infrastructure.persistence.models.enums import PaymentStatusEnum
from app.infrastructure.persistence.session import Base
from tests.conftest import make_settings
from tests.test_bib_allocator import ScriptedRandom


class TestCreate:
    """참가 신청 테스트"""

    @pytest.mark.asyncio
    async def test_create_assigns_bib_and_pending_status(self, service):
        """배번 할당 및 pending 상태로 저장"""
        registrant = await service.create("  Maria Silva  ", "maria@example.com")

        assert registrant.id
        assert registrant.name == "Maria Silva"
        assert registrant.email == "maria@example.com"
        assert 1 <= registrant.bib <= 999
        assert registrant.payment_status == PaymentStatusEnum.PENDING
        assert registrant.created_at is not None

    @pytest.mark.asyncio
    async def test_email_is_optional(self, service):
        """이메일 미입력 (빈 문자열 포함)"""
        first = await service.create("João Pedro")
        second = await service.create("Ana Costa", "   ")

        assert first.email is None
        assert second.email is None

    @pytest.mark.asyncio
    async def test_bibs_are_unique(self, service):
        """여러 명 신청 시 배번 중복 없음"""
        registrants = [await service.create(f"Runner {i:02d}") for i in range(60)]
        bibs = [r.bib for r in registrants]

        assert len(set(bibs)) == 60
        assert all(1 <= bib <= 999 for bib in bibs)

    @pytest.mark.parametrize("name", ["", "   ", "A", " B "])
    @pytest.mark.asyncio
    async def test_short_name_rejected(self, service, name):
        """이름은 공백 제외 2자 이상"""
        with pytest.raises(ValidationError):
            await service.create(name)

        assert await service.list_registrants() == []

    @pytest.mark.asyncio
    async def test_invalid_email_rejected(self, service):
        """잘못된 이메일 형식"""
        with pytest.raises(ValidationError) as exc_info:
            await service.create("Maria Silva", "not-an-email")

        assert exc_info.value.details["field"] == "email"
        assert await service.list_registrants() == []

    @pytest.mark.asyncio
    async def test_capacity_limit(self, db):
        """최대 참가 인원 도달 시 신청 거부"""
        service = RegistrationService(db, config=make_settings(MAX_PARTICIPANTS=2), rng=random.Random(7))
        await service.create("Runner One")
        await service.create("Runner Two")

        with pytest.raises(CapacityExceeded) as exc_info:
            await service.create("Runner Three")

        assert isinstance(exc_info.value, AllocationExhausted)
        assert exc_info.value.error_code == "CAPACITY_EXCEEDED"
        assert len(await service.list_registrants()) == 2

    @pytest.mark.asyncio
    async def test_capacity_disabled(self, db):
        """MAX_PARTICIPANTS=0 이면 인원 제한 없음"""
        service = RegistrationService(db, config=make_settings(MAX_PARTICIPANTS=0), rng=random.Random(7))
        for i in range(5):
            await service.create(f"Runner {i}")

        stats = await service.stats()
        assert stats["total"] == 5
        assert stats["capacity"] is None
        assert stats["remaining"] is None

    @pytest.mark.asyncio
    async def test_collision_with_existing_bib_is_redrawn(self, db):
        """이미 사용 중인 배번을 뽑으면 다른 번호로 저장"""
        config = make_settings()
        first = await RegistrationService(db, config=config, rng=ScriptedRandom([42])).create("Runner One")
        second = await RegistrationService(db, config=config, rng=ScriptedRandom([42, 43])).create("Runner Two")

        assert first.bib == 42
        assert second.bib == 43

    @pytest.mark.asyncio
    async def test_unique_constraint_conflict_is_retried(self, db, monkeypatch):
        """존재 확인을 통과해도 UNIQUE 충돌이면 재추첨"""
        config = make_settings()
        await RegistrationService(db, config=config, rng=ScriptedRandom([42])).create("Runner One")

        service = RegistrationService(db, config=config, rng=ScriptedRandom([42, 99]))

        async def stale_exists(bib: int) -> bool:
            return False

        monkeypatch.setattr(service.repo, "bib_exists", stale_exists)
        registrant = await service.create("Runner Two")

        assert registrant.bib == 99
        bibs = sorted(r.bib for r in await service.list_registrants())
        assert bibs == [42, 99]

    @pytest.mark.asyncio
    async def test_allocation_exhausted(self, db):
        """재추첨 한도 초과 시 AllocationExhausted, 저장 안 됨"""
        config = make_settings(BIB_MAX_ATTEMPTS=3)
        await RegistrationService(db, config=config, rng=ScriptedRandom([10])).create("Runner One")

        service = RegistrationService(db, config=config, rng=ScriptedRandom([10, 10, 10]))
        with pytest.raises(AllocationExhausted):
            await service.create("Runner Two")

        assert len(await service.list_registrants()) == 1


class TestConcurrentCreate:
    """동시 신청 테스트 (파일 SQLite, 요청마다 별도 연결)"""

    @pytest.mark.asyncio
    async def test_parallel_creates_never_share_a_bib(self, tmp_path):
        """동시 신청에서도 배번 중복 없음"""
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'race.db'}",
            poolclass=NullPool,
        )
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
        # 좁은 배번 범위로 충돌 유도
        config = make_settings(BIB_MAX=25, BIB_MAX_ATTEMPTS=500)

        async def register(i: int):
            async with factory() as session:
                service = RegistrationService(session, config=config, rng=random.Random(i % 2))
                registrant = await service.create(f"Runner {i:02d}")
                return registrant.bib

        try:
            bibs = await asyncio.gather(*(register(i) for i in range(10)))
        finally:
            await engine.dispose()

        assert len(set(bibs)) == 10
        assert all(1 <= bib <= 25 for bib in bibs)


class TestQueries:
    """조회 테스트"""

    @pytest.mark.asyncio
    async def test_list_most_recent_first(self, service):
        """목록은 최근 신청 순"""
        maria = await service.create("Maria Silva")
        joao = await service.create("João Pedro")

        registrants = await service.list_registrants()

        assert [r.id for r in registrants] == [joao.id, maria.id]

    @pytest.mark.asyncio
    async def test_find_by_id(self, service):
        """ID 조회"""
        maria = await service.create("Maria Silva")

        found = await service.find_by_id(maria.id)
        assert found is not None
        assert found.bib == maria.bib
        assert await service.find_by_id("missing-id") is None

    @pytest.mark.asyncio
    async def test_search_by_name_case_insensitive(self, service):
        """이름 검색 (대소문자 무시)"""
        await service.create("Ana Souza")
        await service.create("Mariana Lima")
        await service.create("Carlos Alberto")

        names = {r.name for r in await service.search("ANA")}

        assert names == {"Ana Souza", "Mariana Lima"}

    @pytest.mark.asyncio
    async def test_search_by_bib(self, db):
        """배번 문자열 부분 일치 검색"""
        config = make_settings()
        for bib, name in [(42, "Runner One"), (142, "Runner Two"), (7, "Runner Three")]:
            await RegistrationService(db, config=config, rng=ScriptedRandom([bib])).create(name)

        service = RegistrationService(db, config=config)
        bibs = sorted(r.bib for r in await service.search("42"))

        assert bibs == [42, 142]

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, service):
        """LIKE 와일드카드는 문자 그대로 검색"""
        await service.create("Maria Silva")

        assert await service.search("%") == []
        assert await service.search("_") == []

    @pytest.mark.asyncio
    async def test_blank_search_lists_all(self, service):
        """빈 검색어는 전체 목록"""
        await service.create("Maria Silva")
        await service.create("João Pedro")

        assert len(await service.list_registrants("   ")) == 2

    @pytest.mark.asyncio
    async def test_ranking_in_registration_order(self, service):
        """랭킹은 먼저 신청한 순"""
        maria = await service.create("Maria Silva")
        joao = await service.create("João Pedro")

        ranking = await service.ranking()

        assert [entry["position"] for entry in ranking] == [1, 2]
        assert [entry["bib"] for entry in ranking] == [maria.bib, joao.bib]
        assert ranking[0]["name"] == "Maria Silva"


class TestPaymentStatus:
    """결제 상태 변경 테스트"""

    @pytest.mark.asyncio
    async def test_confirm_payment(self, service):
        """pending → confirmed 후 조회 시 confirmed"""
        registrant = await service.create("Maria Silva")

        updated = await service.update_status(registrant.id, PaymentStatusEnum.CONFIRMED)
        assert updated.payment_status == PaymentStatusEnum.CONFIRMED

        found = await service.find_by_id(registrant.id)
        assert found.payment_status == PaymentStatusEnum.CONFIRMED

    @pytest.mark.asyncio
    async def test_unknown_id_returns_none(self, service):
        """존재하지 않는 ID는 None, 레코드 생성 안 됨"""
        result = await service.update_status("missing-id", PaymentStatusEnum.CONFIRMED)

        assert result is None
        assert await service.list_registrants() == []

    @pytest.mark.asyncio
    async def test_revert_forbidden_by_default(self, service):
        """confirmed → pending 기본 금지"""
        registrant = await service.create("Maria Silva")
        await service.update_status(registrant.id, PaymentStatusEnum.CONFIRMED)

        with pytest.raises(InvalidStatusTransition):
            await service.update_status(registrant.id, PaymentStatusEnum.PENDING)

        found = await service.find_by_id(registrant.id)
        assert found.payment_status == PaymentStatusEnum.CONFIRMED

    @pytest.mark.asyncio
    async def test_revert_allowed_when_configured(self, db):
        """ALLOW_PAYMENT_STATUS_REVERT=True 이면 되돌리기 허용"""
        service = RegistrationService(db, config=make_settings(ALLOW_PAYMENT_STATUS_REVERT=True))
        registrant = await service.create("Maria Silva")
        await service.update_status(registrant.id, PaymentStatusEnum.CONFIRMED)

        reverted = await service.update_status(registrant.id, PaymentStatusEnum.PENDING)

        assert reverted.payment_status == PaymentStatusEnum.PENDING

    @pytest.mark.asyncio
    async def test_same_status_is_noop(self, service):
        """동일 상태로 변경은 허용 (변경 없음)"""
        registrant = await service.create("Maria Silva")

        result = await service.update_status(registrant.id, PaymentStatusEnum.PENDING)

        assert result.payment_status == PaymentStatusEnum.PENDING


class TestClearAll:
    """전체 삭제 테스트"""

    @pytest.mark.asyncio
    async def test_clear_all_empties_store(self, service):
        """삭제 후 목록 비어 있음"""
        await service.create("Maria Silva")
        await service.create("João Pedro")

        deleted = await service.clear_all()

        assert deleted == 2
        assert await service.list_registrants() == []

    @pytest.mark.asyncio
    async def test_bib_can_be_reused_after_clear(self, db):
        """삭제 후에는 이전 배번 재사용 가능"""
        config = make_settings()
        first = await RegistrationService(db, config=config, rng=ScriptedRandom([77])).create("Maria Silva")
        first_bib = first.bib
        await RegistrationService(db, config=config).clear_all()

        second = await RegistrationService(db, config=config, rng=ScriptedRandom([77])).create("João Pedro")

        assert first_bib == second.bib == 77


class TestScenario:
    """Maria / João 시나리오"""

    @pytest.mark.asyncio
    async def test_registration_scenario(self, service):
        maria = await service.create("Maria Silva")
        joao = await service.create("João Pedro")

        registrants = await service.list_registrants()
        assert [r.name for r in registrants] == ["João Pedro", "Maria Silva"]

        found = await service.search("maria")
        assert [r.id for r in found] == [maria.id]

        stats = await service.stats()
        assert (stats["total"], stats["pending"], stats["confirmed"]) == (2, 2, 0)
        assert stats["capacity"] == 100
        assert stats["remaining"] == 98

        await service.update_status(maria.id, PaymentStatusEnum.CONFIRMED)

        stats = await service.stats()
        assert (stats["total"], stats["pending"], stats["confirmed"]) == (2, 1, 1)
        assert joao.payment_status == PaymentStatusEnum.PENDING
