"""
관리자 인증 관련 스키마
"""
from pydantic import BaseModel, Field, ConfigDict


class LoginRequest(BaseModel):
    """관리자 로그인 요청"""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "john",
                "password": "********"
            }
        }
    )

    username: str = Field("", description="아이디")
    password: str = Field("", description="비밀번호")


class AdminInfo(BaseModel):
    """관리자 정보"""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="관리자 ID")
    username: str = Field(..., description="아이디")


class LoginResponse(BaseModel):
    """로그인 응답 (세션 토큰은 쿠키로만 전달)"""
    message: str = Field(..., description="메시지")
    admin: AdminInfo = Field(..., description="관리자 정보")


class AuthCheckResponse(BaseModel):
    """세션 확인 응답"""
    authenticated: bool = Field(..., description="인증 여부")
