# app/services/visibility_service.py
from sqlalchemy.orm import Session, Query, selectinload

from app.config import settings
from app.core.exceptions import NotFound
from app.models.diary import Diary, DiaryComment
from app.models.user import User
from app.services.diary_service import get_diary_or_404

# 지역 필터를 적용하지 않는 값
ALL_REGIONS = "전체"

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _listing(db: Session) -> Query:
    return db.query(Diary).options(
        selectinload(Diary.user),
        selectinload(Diary.images),
        selectinload(Diary.likes),
        selectinload(Diary.comments),
    )


def _page(query: Query, skip: int, limit: int) -> list[Diary]:
    """최신순 정렬 후 skip/limit 적용 (같은 시각이면 id 순)"""
    return query\
        .order_by(Diary.created_at.desc(), Diary.id.desc())\
        .offset(skip)\
        .limit(limit)\
        .all()


def my_diaries(db: Session, owner_id: str, skip: int = 0, limit: int = DEFAULT_LIMIT) -> list[Diary]:
    """내 일기 (공개 여부 무관)"""
    query = _listing(db).filter(Diary.user_id == owner_id)
    return _page(query, skip, limit)


def public_diaries(
    db: Session,
    caller_id: str | None,
    state: str | None = None,
    skip: int = 0,
    limit: int = DEFAULT_LIMIT,
) -> list[Diary]:
    """공개 일기 피드

    로그인한 경우 본인 일기는 제외, 지역이 "전체"가 아니면 해당 지역만.
    """
    query = _listing(db).filter(Diary.is_public.is_(True))

    if caller_id:
        query = query.filter(Diary.user_id != caller_id)

    if state and state != ALL_REGIONS:
        query = query.filter(Diary.state == state)

    return _page(query, skip, limit)


def diaries_by_username(db: Session, username: str, skip: int = 0, limit: int = DEFAULT_LIMIT) -> list[Diary]:
    """특정 유저의 공개 일기만"""
    user = db.query(User).filter(User.username == username).first()
    if not user:
        raise NotFound("사용자를 찾을 수 없습니다")

    query = _listing(db).filter(Diary.user_id == user.id, Diary.is_public.is_(True))
    return _page(query, skip, limit)


def _check_readable(diary: Diary, caller_id: str | None) -> None:
    # 설정이 켜져 있으면 비공개 일기는 작성자만 조회 가능 (존재 여부도 숨김)
    if settings.private_diary_owner_only and not diary.is_public and diary.user_id != caller_id:
        raise NotFound("일기를 찾을 수 없습니다")


def get_diary(db: Session, diary_id: str, caller_id: str | None = None) -> Diary:
    """일기 단건 조회"""
    diary = get_diary_or_404(db, diary_id)
    _check_readable(diary, caller_id)
    return diary


def comments_of(db: Session, diary_id: str, caller_id: str | None = None) -> list[DiaryComment]:
    """댓글 목록 (작성 순, 작성자 포함)"""
    diary = get_diary(db, diary_id, caller_id)

    return db.query(DiaryComment)\
        .options(selectinload(DiaryComment.user))\
        .filter(DiaryComment.diary_id == diary.id)\
        .order_by(DiaryComment.created_at, DiaryComment.id)\
        .all()
