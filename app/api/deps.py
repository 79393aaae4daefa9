# app/api/deps.py
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.core.exceptions import Unauthorized
from app.core.security import decode_access_token

# JWT Bearer 토큰 스킴 (토큰이 없어도 여기서는 막지 않음)
security = HTTPBearer(auto_error=False)

def _user_id_from_token(token: str) -> str:
    """토큰 디코드 → 유저 ID"""
    payload = decode_access_token(token)
    if payload is None:
        raise Unauthorized("유효하지 않은 토큰입니다")

    user_id = payload.get("sub")
    if user_id is None:
        raise Unauthorized("유효하지 않은 토큰입니다")

    return user_id

def get_current_user(
    token: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """JWT 토큰으로 현재 유저 가져오기 (필수)"""
    if token is None:
        raise Unauthorized("토큰이 필요합니다")

    user_id = _user_id_from_token(token.credentials)

    # 탈퇴한 유저의 토큰은 거부
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise Unauthorized()

    return user

def get_optional_user_id(
    token: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """토큰이 없으면 익명(None), 있는데 잘못됐으면 401"""
    if token is None:
        return None
    return _user_id_from_token(token.credentials)
