# app/api/routes/auth.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from datetime import timedelta

from app.database import get_db
from app.models.user import User
from app.schemas.user import UserCreate, UserLogin, SignupResponse, Token, MessageResponse
from app.api.deps import get_current_user
from app.core.security import create_access_token
from app.services import user_service
from app.services.storage_service import AttachmentStore, get_attachment_store
from app.config import settings

router = APIRouter(prefix="/auth", tags=["인증"])

@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(user_data: UserCreate, db: Session = Depends(get_db)):
    """회원가입"""
    user = user_service.signup(db, user_data.username, user_data.password)
    return SignupResponse(message="회원가입 성공", user_id=user.id)

@router.post("/login", response_model=Token)
def login(user_data: UserLogin, db: Session = Depends(get_db)):
    """로그인 및 토큰 발급"""
    user = user_service.authenticate(db, user_data.username, user_data.password)

    access_token_expires = timedelta(minutes=settings.access_token_expire_minutes)
    access_token = create_access_token(
        data={"sub": user.id, "username": user.username},
        expires_delta=access_token_expires
    )

    return Token(
        access_token=access_token,
        expires_in=settings.access_token_expire_minutes * 60
    )

@router.delete("/delete", response_model=MessageResponse)
def delete_account(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store)
):
    """회원 탈퇴 (일기와 이미지 모두 삭제)"""
    user_service.delete_account(db, store, current_user.id)
    return MessageResponse(message="회원 탈퇴가 완료되었습니다")
