# app/schemas/user.py
from pydantic import BaseModel, Field

class UserCreate(BaseModel):
    """회원가입 요청"""
    username: str = Field(..., min_length=2, max_length=50)
    password: str = Field(..., min_length=4, max_length=100)

class UserLogin(BaseModel):
    """로그인 요청 (누락 여부는 서비스에서 검사)"""
    username: str | None = None
    password: str | None = None

class SignupResponse(BaseModel):
    """회원가입 응답"""
    message: str
    user_id: str

class UserSummary(BaseModel):
    """작성자 표시용"""
    id: str
    username: str

    class Config:
        from_attributes = True

class Token(BaseModel):
    """JWT 토큰 응답"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int

class MessageResponse(BaseModel):
    message: str
