"""
관리자 계정 테이블 모델
단일 고정 계정만 사용 (startup 시 seed)
"""
import uuid

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.session import Base


class AdminUser(Base):
    """관리자 계정 테이블"""
    __tablename__ = "admin_users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
