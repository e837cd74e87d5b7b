"""
참가 신청 비즈니스 규칙
- 이름/이메일 검증
- 결제 상태 전이
"""
from typing import Optional, Tuple

from email_validator import EmailNotValidError, validate_email

from app.domain.registration.errors import InvalidStatusTransition, ValidationError
from app.infrastructure.persistence.models.enums import PaymentStatusEnum

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100


def normalize_name(name: Optional[str]) -> str:
    """이름 앞뒤 공백 제거 후 길이 검증"""
    cleaned = (name or "").strip()
    if len(cleaned) < NAME_MIN_LENGTH:
        raise ValidationError(
            f"이름은 최소 {NAME_MIN_LENGTH}자 이상이어야 합니다.",
            details={"field": "name"},
        )
    if len(cleaned) > NAME_MAX_LENGTH:
        raise ValidationError(
            f"이름은 {NAME_MAX_LENGTH}자를 초과할 수 없습니다.",
            details={"field": "name"},
        )
    return cleaned


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    이메일 형식 검증 (도달 가능 여부는 확인하지 않음)
    빈 문자열은 미입력으로 간주
    """
    if email is None or not email.strip():
        return None
    try:
        result = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(
            "올바른 이메일 형식이 아닙니다.",
            details={"field": "email", "reason": str(e)},
        ) from e
    return result.normalized


def validate_registrant_input(name: Optional[str], email: Optional[str]) -> Tuple[str, Optional[str]]:
    """참가 신청 입력 검증 (저장 전에 호출)"""
    return normalize_name(name), normalize_email(email)


def check_status_transition(
    current: PaymentStatusEnum,
    target: PaymentStatusEnum,
    allow_revert: bool = False,
) -> None:
    """
    결제 상태 전이 검증

    - pending → confirmed: 항상 허용
    - 동일 상태: 허용 (변경 없음)
    - confirmed → pending: allow_revert=True 일 때만 허용
    """
    if current == target:
        return
    if current == PaymentStatusEnum.PENDING and target == PaymentStatusEnum.CONFIRMED:
        return
    if allow_revert:
        return
    raise InvalidStatusTransition(
        "확정된 결제 상태는 되돌릴 수 없습니다.",
        details={"from": current.value, "to": target.value},
    )
