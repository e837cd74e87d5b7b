"""
관리자 세션 Repository
Redis를 이용한 서버 측 세션 저장소

[구조]
- 키: admin_session:{token}
- 값: {"admin_id", "username", "created_at"}
- TTL: SESSION_TTL_SECONDS (기본 24시간)
- token은 추측 불가능한 불투명 문자열이며 쿠키로만 전달됨
"""
import secrets
from datetime import datetime, timezone
from typing import Optional

from app.infrastructure.cache.redis_client import RedisClient


class AuthSessionRepository:
    """관리자 세션 데이터 접근 계층"""

    def __init__(self, redis: RedisClient):
        self.redis = redis

    async def create_session(
        self,
        admin_id: str,
        username: str,
        ttl_seconds: Optional[int] = None
    ) -> str:
        """
        새 관리자 세션 생성

        Returns:
            세션 토큰
        """
        token = secrets.token_urlsafe(32)
        await self.redis.save_admin_session(
            token,
            {
                "admin_id": admin_id,
                "username": username,
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
            ttl_seconds,
        )
        return token

    async def get_session(self, token: Optional[str]) -> Optional[dict]:
        """세션 조회 (토큰이 없거나 만료되면 None)"""
        if not token:
            return None
        return await self.redis.get_admin_session(token)

    async def delete_session(self, token: Optional[str]) -> bool:
        """세션 삭제"""
        if not token:
            return False
        return await self.redis.delete_admin_session(token) > 0
