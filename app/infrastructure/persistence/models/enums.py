"""
데이터베이스 Enum 타입 정의
"""
import enum


class PaymentStatusEnum(str, enum.Enum):
    """결제 상태"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
