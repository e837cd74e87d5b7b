"""
참가자 관련 스키마
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.infrastructure.persistence.models.enums import PaymentStatusEnum


class RegistrantCreate(BaseModel):
    """참가 신청 요청"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Maria Silva",
                "email": "maria@example.com"
            }
        }
    )

    # 길이/형식 검증은 도메인 규칙(rules.py)에서 수행 (400 VALIDATION_ERROR)
    name: str = Field(..., description="참가자 이름 (공백 제외 2~100자)")
    email: Optional[str] = Field(None, description="이메일 (선택, 빈 문자열은 미입력)")


class RegistrantResponse(BaseModel):
    """참가자 정보"""
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "4f1c2d9e-8a7b-4c3d-9e2f-1a2b3c4d5e6f",
                "name": "Maria Silva",
                "email": "maria@example.com",
                "bib": 427,
                "created_at": "2025-03-01T12:34:56+00:00",
                "payment_status": "pending"
            }
        }
    )

    id: str = Field(..., description="참가자 ID")
    name: str = Field(..., description="이름")
    email: Optional[str] = Field(None, description="이메일")
    bib: int = Field(..., description="배번", ge=1, le=999)
    created_at: datetime = Field(..., description="신청 시각")
    payment_status: PaymentStatusEnum = Field(..., description="결제 상태")


class PaymentStatusUpdate(BaseModel):
    """결제 상태 변경 요청"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "payment_status": "confirmed"
            }
        }
    )

    payment_status: PaymentStatusEnum = Field(..., description="변경할 결제 상태")


class ClearRegistrantsResponse(BaseModel):
    """전체 삭제 응답"""
    message: str = Field(..., description="메시지")
    deleted: int = Field(..., description="삭제된 참가자 수", ge=0)


class StatsResponse(BaseModel):
    """참가 통계"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total": 2,
                "confirmed": 1,
                "pending": 1,
                "capacity": 100,
                "remaining": 98
            }
        }
    )

    total: int = Field(..., description="전체 참가자 수", ge=0)
    confirmed: int = Field(..., description="결제 확정 수", ge=0)
    pending: int = Field(..., description="결제 대기 수", ge=0)
    capacity: Optional[int] = Field(None, description="최대 참가 인원 (제한 없으면 null)")
    remaining: Optional[int] = Field(None, description="남은 자리 (제한 없으면 null)")


class RankingEntry(BaseModel):
    """랭킹 화면 항목 (먼저 신청한 순)"""
    position: int = Field(..., description="신청 순위", ge=1)
    bib: int = Field(..., description="배번")
    name: str = Field(..., description="이름")
    registration_time: datetime = Field(..., description="신청 시각")
