"""
관리자 계정 Repository
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.admin_users import AdminUser


class AdminUserRepository:
    """관리자 계정 데이터 접근 계층"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_username(self, username: str) -> Optional[AdminUser]:
        """사용자명으로 조회"""
        query = select(AdminUser).where(AdminUser.username == username)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def create(self, username: str, password_hash: str) -> AdminUser:
        """관리자 계정 생성"""
        admin = AdminUser(username=username, password_hash=password_hash)
        self.db.add(admin)
        await self.db.flush()  # ID 생성을 위해 flush
        return admin
