"""
관리자 인증 서비스

[구성]
- 관리자 계정: 설정(ADMIN_USERNAME/ADMIN_PASSWORD)의 단일 고정 계정
  * startup 시 비밀번호 해시로 admin_users 테이블에 seed
- 세션: Redis에 저장되는 불투명 토큰 (쿠키로 전달)

[참고]
- 일반적인 사용자/권한 모델은 제공하지 않음
"""
import asyncio
import logging
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from app.core.config import Settings, settings as default_settings
from app.domain.registration.errors import StorageUnavailable, Unauthorized
from app.infrastructure.persistence.models.admin_users import AdminUser
from app.infrastructure.persistence.session import get_db_context, init_db
from app.infrastructure.repositories.admin_user_repository import AdminUserRepository
from app.infrastructure.repositories.auth_session_repository import AuthSessionRepository

logger = logging.getLogger(__name__)


class AuthService:
    """관리자 인증 서비스"""

    def __init__(self, db: AsyncSession, sessions: AuthSessionRepository):
        """
        Args:
            db: PostgreSQL 세션
            sessions: Redis 세션 저장소
        """
        self.db = db
        self.admin_repo = AdminUserRepository(db)
        self.sessions = sessions

    async def login(self, username: str, password: str) -> Tuple[str, AdminUser]:
        """
        관리자 로그인

        Returns:
            (세션 토큰, AdminUser)

        Raises:
            Unauthorized: 계정이 없거나 비밀번호 불일치
        """
        if not username or not password:
            raise Unauthorized("아이디와 비밀번호를 입력해주세요.")

        admin = await self.admin_repo.get_by_username(username)
        if admin is None or not check_password_hash(admin.password_hash, password):
            logger.warning(f"[Auth] 로그인 실패 - username: {username}")
            raise Unauthorized("아이디 또는 비밀번호가 올바르지 않습니다.")

        token = await self.sessions.create_session(admin.id, admin.username)
        logger.info(f"[Auth] 로그인 성공 - username: {admin.username}")
        return token, admin

    async def logout(self, token: Optional[str]) -> None:
        """관리자 로그아웃 (세션 삭제)"""
        if await self.sessions.delete_session(token):
            logger.info("[Auth] 로그아웃 - 세션 삭제")

    async def is_authenticated(self, token: Optional[str]) -> bool:
        """세션 유효 여부"""
        return await self.sessions.get_session(token) is not None


async def ensure_admin_user(db: AsyncSession, config: Optional[Settings] = None) -> AdminUser:
    """
    관리자 계정 seed (이미 있으면 그대로 반환)
    """
    config = config or default_settings
    repo = AdminUserRepository(db)

    admin = await repo.get_by_username(config.ADMIN_USERNAME)
    if admin is not None:
        return admin

    admin = await repo.create(
        username=config.ADMIN_USERNAME,
        password_hash=generate_password_hash(config.ADMIN_PASSWORD),
    )
    logger.info(f"[Auth] 관리자 계정 생성 - username: {admin.username}")
    return admin


async def init_storage_with_retry(config: Optional[Settings] = None) -> None:
    """
    startup 시 테이블 생성 + 관리자 계정 seed (지수 백오프 재시도)

    [처리 흐름]
    1. init_db: 테이블 생성 (이미 있으면 건너뜀)
    2. ensure_admin_user: 관리자 계정 seed
    - 둘 중 하나라도 실패하면 처음부터 다시 시도 (DB가 늦게 뜨는 경우)

    [재시도]
    - DB_CONNECT_MAX_RETRIES 회까지 재시도
    - 대기 시간: DB_CONNECT_INITIAL_DELAY부터 2배씩, 최대 DB_CONNECT_MAX_DELAY

    Raises:
        StorageUnavailable: 재시도 후에도 DB에 연결할 수 없는 경우
    """
    config = config or default_settings
    delay = config.DB_CONNECT_INITIAL_DELAY

    for attempt in range(1, config.DB_CONNECT_MAX_RETRIES + 1):
        try:
            await init_db()
            async with get_db_context() as db:
                await ensure_admin_user(db, config)
            return
        except (SQLAlchemyError, OSError) as e:
            logger.warning(
                f"[Storage] DB 초기화 실패 - "
                f"attempt: {attempt}/{config.DB_CONNECT_MAX_RETRIES}, error: {str(e)}"
            )
            if attempt == config.DB_CONNECT_MAX_RETRIES:
                raise StorageUnavailable(
                    "데이터베이스에 연결할 수 없습니다.",
                    details={"attempts": attempt},
                ) from e
            await asyncio.sleep(delay)
            delay = min(delay * 2, config.DB_CONNECT_MAX_DELAY)
