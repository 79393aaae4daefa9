# app/services/diary_service.py
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.exceptions import ValidationFailed, NotFound, Forbidden
from app.core.file_security import AttachmentBlob, validate_uploaded_file
from app.core.logger import logger
from app.models.diary import Diary, DiaryComment, DiaryLike
from app.schemas.diary import DiaryForm
from app.services import attachment_service
from app.services.storage_service import AttachmentStore


def parse_diary_form(raw: dict) -> DiaryForm:
    """폼 값 검증 (업로드/변경 전에 실행)"""
    try:
        return DiaryForm(**raw)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ValidationFailed(f"필수 항목이 누락되었거나 올바르지 않습니다: {', '.join(fields)}")


def validate_blobs(blobs: list[AttachmentBlob], required: bool) -> None:
    if required and not blobs:
        raise ValidationFailed("이미지를 한 장 이상 첨부해야 합니다")

    if len(blobs) > settings.max_images_per_diary:
        raise ValidationFailed(f"이미지는 최대 {settings.max_images_per_diary}장까지 첨부할 수 있습니다")

    for blob in blobs:
        validate_uploaded_file(blob)


def get_diary_or_404(db: Session, diary_id: str) -> Diary:
    diary = db.query(Diary).filter(Diary.id == diary_id).first()
    if not diary:
        raise NotFound("일기를 찾을 수 없습니다")
    return diary


def get_owned_diary(db: Session, diary_id: str, caller_id: str, action: str) -> Diary:
    """본인 일기만 통과"""
    diary = get_diary_or_404(db, diary_id)
    if diary.user_id != caller_id:
        raise Forbidden(f"본인 일기만 {action}할 수 있습니다")
    return diary


def apply_form(diary: Diary, form: DiaryForm) -> None:
    """스칼라 필드 전체 덮어쓰기"""
    diary.title = form.title
    diary.content = form.content
    diary.mood = form.mood
    diary.weather = form.weather
    diary.diary_date = form.diary_date
    diary.is_public = form.is_public
    diary.state = form.state
    diary.latitude = form.latitude
    diary.longitude = form.longitude


# ===== 일기 =====

def create_diary(
    db: Session,
    store: AttachmentStore,
    owner_id: str,
    raw_form: dict,
    blobs: list[AttachmentBlob],
) -> Diary:
    """일기 작성 (이미지 1장 이상 필수, 첫 이미지가 썸네일)"""
    form = parse_diary_form(raw_form)
    validate_blobs(blobs, required=True)

    stored = attachment_service.upload_all(store, blobs)

    diary = Diary(user_id=owner_id)
    apply_form(diary, form)
    diary.images = attachment_service.to_diary_images(stored)
    diary.thumbnail_url = stored[0].url

    db.add(diary)
    try:
        db.commit()
    except Exception:
        db.rollback()
        attachment_service.discard(store, [image.handle for image in stored])
        raise
    db.refresh(diary)

    logger.info(f"일기 작성: {diary.id} by {owner_id} (이미지 {len(stored)}장)")
    return diary


def update_diary(
    db: Session,
    store: AttachmentStore,
    diary_id: str,
    caller_id: str,
    raw_form: dict,
    blobs: list[AttachmentBlob],
) -> Diary:
    """일기 수정 (새 이미지가 있으면 전체 교체, 없으면 유지)"""
    diary = get_owned_diary(db, diary_id, caller_id, "수정")
    form = parse_diary_form(raw_form)
    validate_blobs(blobs, required=False)

    new_handles: list[str] = []
    if blobs:
        stored = attachment_service.replace_images(store, diary, blobs)
        new_handles = [image.handle for image in stored]

    apply_form(diary, form)
    try:
        db.commit()
    except Exception:
        db.rollback()
        attachment_service.discard(store, new_handles)
        raise
    db.refresh(diary)

    logger.info(f"일기 수정: {diary.id}")
    return diary


def delete_diary(db: Session, store: AttachmentStore, diary_id: str, caller_id: str) -> None:
    """일기 삭제 (이미지를 모두 지운 뒤에만 레코드 삭제)"""
    diary = get_owned_diary(db, diary_id, caller_id, "삭제")

    released = attachment_service.release_all(store, [image.storage_handle for image in diary.images])

    db.delete(diary)
    db.commit()

    logger.info(f"일기 삭제: {diary_id} (이미지 {released}장 삭제)")


# ===== 좋아요 =====

def toggle_like(db: Session, diary_id: str, caller_id: str) -> int:
    """좋아요 토글, 변경 후 좋아요 수 반환"""
    diary = get_diary_or_404(db, diary_id)

    if diary.user_id == caller_id:
        raise Forbidden("본인 일기에는 좋아요를 할 수 없습니다")

    removed = db.query(DiaryLike)\
        .filter(DiaryLike.diary_id == diary_id, DiaryLike.user_id == caller_id)\
        .delete()

    if not removed:
        db.add(DiaryLike(diary_id=diary_id, user_id=caller_id))

    try:
        db.commit()
    except IntegrityError:
        # 같은 유저의 동시 요청이 먼저 추가함
        db.rollback()

    db.expire(diary)
    return db.query(DiaryLike).filter(DiaryLike.diary_id == diary_id).count()


# ===== 댓글 =====

def _require_content(content: str | None) -> str:
    if content is None or not content.strip():
        raise ValidationFailed("댓글 내용을 입력하세요")
    return content.strip()


def get_comment_or_404(db: Session, diary_id: str, comment_id: str) -> DiaryComment:
    """댓글은 해당 일기 안에서만 찾음"""
    get_diary_or_404(db, diary_id)

    comment = db.query(DiaryComment)\
        .filter(DiaryComment.diary_id == diary_id, DiaryComment.id == comment_id)\
        .first()
    if not comment:
        raise NotFound("댓글을 찾을 수 없습니다")
    return comment


def add_comment(db: Session, diary_id: str, author_id: str, content: str | None) -> DiaryComment:
    """댓글 작성 (누구나 가능)"""
    get_diary_or_404(db, diary_id)
    text = _require_content(content)

    comment = DiaryComment(diary_id=diary_id, user_id=author_id, content=text)
    db.add(comment)
    db.commit()
    db.refresh(comment)

    logger.info(f"댓글 작성: {comment.id} on {diary_id}")
    return comment


def update_comment(
    db: Session,
    diary_id: str,
    comment_id: str,
    caller_id: str,
    content: str | None,
) -> DiaryComment:
    comment = get_comment_or_404(db, diary_id, comment_id)

    if comment.user_id != caller_id:
        raise Forbidden("본인 댓글만 수정할 수 있습니다")

    comment.content = _require_content(content)
    db.commit()
    db.refresh(comment)
    return comment


def delete_comment(db: Session, diary_id: str, comment_id: str, caller_id: str) -> None:
    comment = get_comment_or_404(db, diary_id, comment_id)

    if comment.user_id != caller_id:
        raise Forbidden("본인 댓글만 삭제할 수 있습니다")

    db.delete(comment)
    db.commit()

    logger.info(f"댓글 삭제: {comment_id} on {diary_id}")
