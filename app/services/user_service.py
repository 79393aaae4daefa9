# app/services/user_service.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationFailed, NotFound, Unauthorized, Conflict
from app.core.logger import logger
from app.core.security import hash_password, verify_password
from app.models.user import User
from app.models.diary import Diary, DiaryComment, DiaryLike
from app.services import attachment_service
from app.services.storage_service import AttachmentStore


def signup(db: Session, username: str, password: str) -> User:
    """회원가입 (유저명 중복 불가)"""
    existing_user = db.query(User).filter(User.username == username).first()
    if existing_user:
        raise Conflict("이미 존재하는 유저명입니다")

    user = User(username=username, hashed_password=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # 동시 가입 요청이 같은 유저명을 먼저 등록함
        db.rollback()
        raise Conflict("이미 존재하는 유저명입니다")
    db.refresh(user)

    logger.info(f"회원가입: {user.username} ({user.id})")
    return user


def authenticate(db: Session, username: str | None, password: str | None) -> User:
    """로그인 정보 확인"""
    if not username or not password:
        raise ValidationFailed("유저명과 비밀번호를 입력하세요")

    user = db.query(User).filter(User.username == username).first()
    if not user:
        logger.info(f"로그인 실패 (없는 유저): {username}")
        raise NotFound("유저를 찾을 수 없습니다")

    if not verify_password(password, user.hashed_password):
        logger.info(f"로그인 실패 (비밀번호 불일치): {username}")
        raise Unauthorized("비밀번호가 틀렸습니다")

    logger.info(f"로그인 성공: {username}")
    return user


def delete_account(db: Session, store: AttachmentStore, user_id: str) -> int:
    """회원 탈퇴

    1. 본인 일기의 이미지를 모두 저장소에서 삭제 (실패 시 여기서 중단)
    2. 이 유저가 남긴 댓글/좋아요 삭제
    3. 일기 삭제
    4. 유저 삭제
    2~4는 한 번에 커밋한다. 삭제한 일기 수를 반환.
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("유저를 찾을 수 없습니다")

    diaries = db.query(Diary).filter(Diary.user_id == user_id).all()

    handles = [image.storage_handle for diary in diaries for image in diary.images]
    released = attachment_service.release_all(store, handles)

    db.query(DiaryComment).filter(DiaryComment.user_id == user_id).delete()
    db.query(DiaryLike).filter(DiaryLike.user_id == user_id).delete()

    for diary in diaries:
        db.delete(diary)

    db.delete(user)
    db.commit()

    logger.info(f"회원 탈퇴: {user_id} (일기 {len(diaries)}개, 이미지 {released}장 삭제)")
    return len(diaries)
