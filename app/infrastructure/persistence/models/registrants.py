"""
참가자 테이블 모델
"""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.models.enums import PaymentStatusEnum
from app.infrastructure.persistence.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Registrant(Base):
    """참가자 테이블"""
    __tablename__ = "registrants"
    __table_args__ = (
        # 배번 범위 (UNIQUE 제약은 컬럼에 선언)
        CheckConstraint("bib >= 1 AND bib <= 999", name="ck_registrants_bib_range"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    bib: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        index=True
    )
    payment_status: Mapped[PaymentStatusEnum] = mapped_column(
        Enum(
            PaymentStatusEnum,
            name="payment_status_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=PaymentStatusEnum.PENDING
    )

    def __repr__(self) -> str:
        return f"<Registrant(id={self.id}, bib={self.bib}, name={self.name!r}, status={self.payment_status})>"
