"""
배번(bib) 할당기

[목적]
- 새 참가자에게 [BIB_MIN, BIB_MAX] 범위의 중복 없는 무작위 배번을 할당
- 배번은 의도적으로 비순차적 (등록 순서/규모 노출 방지)

[동시성 전략]
- 전역 락 대신 낙관적 재시도 (draw → 존재 확인 → commit)
- 최종 중복 방지는 DB UNIQUE 제약이 담당
- 동시 요청이 같은 번호를 먼저 commit 하면 commit 실패 → 새 번호로 재추첨
- 재추첨 횟수는 max_attempts로 제한 (배번 공간이 거의 찼을 때 무한 루프 방지)

[테스트]
- rng, bib_exists, try_commit을 주입받으므로 충돌을 강제로 재현할 수 있음
"""
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from app.domain.registration.errors import AllocationExhausted

logger = logging.getLogger(__name__)

T = TypeVar("T")

BibExistsFn = Callable[[int], Awaitable[bool]]
# 성공 시 저장된 레코드, UNIQUE 충돌 시 None 반환
TryCommitFn = Callable[[int], Awaitable[Optional[T]]]

_system_rng = random.SystemRandom()


@dataclass
class BibAllocation(Generic[T]):
    """배번 할당 결과"""
    bib: int
    attempts: int
    record: T


async def allocate_bib(
    bib_exists: BibExistsFn,
    try_commit: TryCommitFn,
    *,
    max_attempts: int,
    bib_min: int = 1,
    bib_max: int = 999,
    rng: Optional[random.Random] = None,
) -> BibAllocation:
    """
    중복 없는 배번을 추첨하고 레코드를 commit

    Args:
        bib_exists: 해당 배번이 이미 사용 중인지 확인
        try_commit: 해당 배번으로 레코드 저장 시도 (UNIQUE 충돌 시 None)
        max_attempts: 최대 추첨 횟수
        bib_min: 배번 최솟값 (포함)
        bib_max: 배번 최댓값 (포함)
        rng: 난수 생성기 (기본: SystemRandom)

    Returns:
        BibAllocation (배번, 시도 횟수, 저장된 레코드)

    Raises:
        AllocationExhausted: max_attempts 안에 빈 배번을 찾지 못한 경우
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    if bib_min > bib_max:
        raise ValueError("bib_min must not exceed bib_max")

    rng = rng or _system_rng

    for attempt in range(1, max_attempts + 1):
        bib = rng.randint(bib_min, bib_max)

        if await bib_exists(bib):
            logger.debug(f"[BibAllocator] 사용 중인 배번 추첨 - bib: {bib}, attempt: {attempt}")
            continue

        record = await try_commit(bib)
        if record is None:
            # 존재 확인 이후 다른 요청이 같은 번호를 먼저 저장함
            logger.warning(f"[BibAllocator] 배번 commit 충돌 - bib: {bib}, attempt: {attempt}")
            continue

        logger.debug(f"[BibAllocator] 배번 할당 완료 - bib: {bib}, attempts: {attempt}")
        return BibAllocation(bib=bib, attempts=attempt, record=record)

    logger.error(f"[BibAllocator] 배번 할당 실패 - {max_attempts}회 시도 모두 충돌")
    raise AllocationExhausted(
        "사용 가능한 배번을 찾지 못했습니다. 잠시 후 다시 시도해주세요.",
        details={"max_attempts": max_attempts, "bib_range": [bib_min, bib_max]},
    )
