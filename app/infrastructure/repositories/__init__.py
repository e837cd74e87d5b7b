"""
리포지토리 모듈
"""
from app.infrastructure.repositories.admin_user_repository import AdminUserRepository
from app.infrastructure.repositories.auth_session_repository import AuthSessionRepository
from app.infrastructure.repositories.registrant_repository import RegistrantRepository

__all__ = [
    "AdminUserRepository",
    "AuthSessionRepository",
    "RegistrantRepository",
]
