"""
참가 신청 도메인 예외

[구조]
RegistrationError
├── ValidationError            (400) 이름/이메일 형식 오류
├── AllocationExhausted        (409) 배번 재추첨 한도 초과
│   └── CapacityExceeded       (409) 최대 참가 인원 도달
├── RegistrantNotFound         (404) 존재하지 않는 참가자
├── InvalidStatusTransition    (409) 허용되지 않은 결제 상태 변경
├── Unauthorized               (401) 관리자 세션 없음
└── StorageUnavailable         (503) DB 연결 불가
"""
from typing import Any, Dict, Optional


class RegistrationError(Exception):
    """참가 신청 도메인 예외 베이스"""

    error_code = "REGISTRATION_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_detail(self) -> Dict[str, Any]:
        """HTTPException detail 형식으로 변환"""
        return {
            "error": True,
            "error_code": self.error_code,
            "error_message": self.message,
            "details": self.details,
        }


class ValidationError(RegistrationError):
    error_code = "VALIDATION_ERROR"
    status_code = 400


class AllocationExhausted(RegistrationError):
    """배번을 할당할 수 없음 (재추첨 한도 초과)"""
    error_code = "BIB_ALLOCATION_EXHAUSTED"
    status_code = 409


class CapacityExceeded(AllocationExhausted):
    """최대 참가 인원 도달"""
    error_code = "CAPACITY_EXCEEDED"
    status_code = 409


class RegistrantNotFound(RegistrationError):
    error_code = "REGISTRANT_NOT_FOUND"
    status_code = 404


class InvalidStatusTransition(RegistrationError):
    error_code = "INVALID_STATUS_TRANSITION"
    status_code = 409


class Unauthorized(RegistrationError):
    error_code = "UNAUTHORIZED"
    status_code = 401


class StorageUnavailable(RegistrationError):
    error_code = "STORAGE_UNAVAILABLE"
    status_code = 503
