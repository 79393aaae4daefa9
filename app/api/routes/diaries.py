# app/api/routes/diaries.py
from fastapi import APIRouter, Depends, UploadFile, File, Form, status, Query
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.diary import (
    DiaryResponse,
    CommentCreate,
    CommentResponse,
    CommentUpdateResponse,
    LikeResponse,
    diary_to_response,
    comment_to_response,
)
from app.schemas.user import MessageResponse
from app.api.deps import get_current_user, get_optional_user_id
from app.core.file_security import AttachmentBlob
from app.services import diary_service, visibility_service
from app.services.storage_service import AttachmentStore, get_attachment_store

router = APIRouter(prefix="/diaries", tags=["일기"])


async def read_blobs(files: list[UploadFile] | None) -> list[AttachmentBlob]:
    """업로드 파일 → 저장소에 넘길 원본"""
    return [
        AttachmentBlob(filename=file.filename or "", content_type=file.content_type, data=await file.read())
        for file in files or []
    ]


def diary_form(
    title: str | None = Form(None),
    content: str | None = Form(None),
    mood: str | None = Form(None),
    weather: str | None = Form(None),
    diary_date: str | None = Form(None),
    is_public: str | None = Form(None),
    state: str | None = Form(None),
    latitude: str | None = Form(None),
    longitude: str | None = Form(None),
) -> dict:
    """multipart 폼 값 (검증은 서비스에서)"""
    return {
        "title": title,
        "content": content,
        "mood": mood,
        "weather": weather,
        "diary_date": diary_date,
        "is_public": is_public,
        "state": state,
        "latitude": latitude,
        "longitude": longitude,
    }


# ===== 일기 작성/수정/삭제 =====

@router.post("", response_model=DiaryResponse, status_code=status.HTTP_201_CREATED)
async def create_diary(
    form: dict = Depends(diary_form),
    images: list[UploadFile] | None = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store)
):
    """일기 작성 (이미지 1~10장)"""
    blobs = await read_blobs(images)
    # 업로드/DB 작업은 동기 코드라 워커 스레드에서 실행
    diary = await run_in_threadpool(diary_service.create_diary, db, store, current_user.id, form, blobs)
    return await run_in_threadpool(diary_to_response, diary)


@router.put("/{diary_id}", response_model=DiaryResponse)
async def update_diary(
    diary_id: str,
    form: dict = Depends(diary_form),
    images: list[UploadFile] | None = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store)
):
    """일기 수정 (이미지를 보내면 전체 교체)"""
    blobs = await read_blobs(images)
    diary = await run_in_threadpool(diary_service.update_diary, db, store, diary_id, current_user.id, form, blobs)
    return await run_in_threadpool(diary_to_response, diary)


@router.delete("/{diary_id}", response_model=MessageResponse)
def delete_diary(
    diary_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store)
):
    """일기 삭제"""
    diary_service.delete_diary(db, store, diary_id, current_user.id)
    return MessageResponse(message="일기가 삭제되었습니다")


# ===== 목록 조회 =====

@router.get("/my-diaries", response_model=list[DiaryResponse])
def get_my_diaries(
    skip: int = Query(0, ge=0, description="시작 위치"),
    limit: int = Query(visibility_service.DEFAULT_LIMIT, ge=1, le=visibility_service.MAX_LIMIT, description="조회 개수"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """내 일기 목록 (최신순)"""
    diaries = visibility_service.my_diaries(db, current_user.id, skip, limit)
    return [diary_to_response(diary) for diary in diaries]


@router.get("/public-diaries", response_model=list[DiaryResponse])
def get_public_diaries(
    state: str | None = Query(None, description="시/도 (전체면 필터 없음)"),
    skip: int = Query(0, ge=0),
    limit: int = Query(visibility_service.DEFAULT_LIMIT, ge=1, le=visibility_service.MAX_LIMIT),
    caller_id: str | None = Depends(get_optional_user_id),
    db: Session = Depends(get_db)
):
    """공개 일기 목록 (로그인 시 본인 일기 제외)"""
    diaries = visibility_service.public_diaries(db, caller_id, state, skip, limit)
    return [diary_to_response(diary) for diary in diaries]


@router.get("/public-diaries/{username}", response_model=list[DiaryResponse])
def get_public_diaries_by_username(
    username: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(visibility_service.DEFAULT_LIMIT, ge=1, le=visibility_service.MAX_LIMIT),
    db: Session = Depends(get_db)
):
    """특정 유저의 공개 일기 목록"""
    diaries = visibility_service.diaries_by_username(db, username, skip, limit)
    return [diary_to_response(diary) for diary in diaries]


# ===== 좋아요 =====

@router.post("/like/{diary_id}", response_model=LikeResponse)
def toggle_like(
    diary_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """좋아요 / 좋아요 취소"""
    likes = diary_service.toggle_like(db, diary_id, current_user.id)
    return LikeResponse(message="좋아요 상태가 변경되었습니다", likes=likes)


# ===== 댓글 =====

@router.get("/{diary_id}/comments", response_model=list[CommentResponse])
def get_comments(
    diary_id: str,
    caller_id: str | None = Depends(get_optional_user_id),
    db: Session = Depends(get_db)
):
    """댓글 목록"""
    comments = visibility_service.comments_of(db, diary_id, caller_id)
    return [comment_to_response(comment) for comment in comments]


@router.post("/{diary_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def add_comment(
    diary_id: str,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """댓글 작성"""
    comment = diary_service.add_comment(db, diary_id, current_user.id, data.content)
    return comment_to_response(comment)


@router.put("/{diary_id}/comments/{comment_id}", response_model=CommentUpdateResponse)
def update_comment(
    diary_id: str,
    comment_id: str,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """댓글 수정 (작성자만)"""
    comment = diary_service.update_comment(db, diary_id, comment_id, current_user.id, data.content)
    return CommentUpdateResponse(message="댓글이 수정되었습니다", comment=comment_to_response(comment))


@router.delete("/{diary_id}/comments/{comment_id}", response_model=MessageResponse)
def delete_comment(
    diary_id: str,
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """댓글 삭제 (작성자만)"""
    diary_service.delete_comment(db, diary_id, comment_id, current_user.id)
    return MessageResponse(message="댓글이 삭제되었습니다")


# ===== 단건 조회 (경로 매칭상 마지막) =====

@router.get("/{diary_id}", response_model=DiaryResponse)
def get_diary(
    diary_id: str,
    caller_id: str | None = Depends(get_optional_user_id),
    db: Session = Depends(get_db)
):
    """일기 단건 조회"""
    diary = visibility_service.get_diary(db, diary_id, caller_id)
    return diary_to_response(diary)
