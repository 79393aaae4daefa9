# app/schemas/diary.py
from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
import math

from app.schemas.user import UserSummary

REQUIRED_TEXT_FIELDS = ("title", "content", "mood", "weather", "state")


class DiaryForm(BaseModel):
    """일기 작성/수정 폼 (multipart 문자열을 정리해서 받음)"""
    title: str
    content: str
    mood: str
    weather: str
    diary_date: date
    state: str  # 시/도
    is_public: bool = False
    latitude: float = 0.0
    longitude: float = 0.0

    @field_validator(*REQUIRED_TEXT_FIELDS, mode="before")
    def require_text(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("필수 항목입니다")
        return str(v).strip()

    @field_validator("diary_date", mode="before")
    def parse_diary_date(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("필수 항목입니다")
        if isinstance(v, str) and "T" in v:
            # "2024-10-01T09:00:00.000Z" 같은 값은 날짜 부분만 사용
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        return v

    @field_validator("is_public", mode="before")
    def parse_is_public(cls, v):
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() == "true" if v is not None else False

    @field_validator("latitude", "longitude", mode="before")
    def parse_coordinate(cls, v):
        # 숫자로 읽을 수 없으면 0.0
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.0
        return value if math.isfinite(value) else 0.0


class ImageResponse(BaseModel):
    url: str

    class Config:
        from_attributes = True


class Coordinates(BaseModel):
    latitude: float
    longitude: float


class LocationResponse(BaseModel):
    state: str
    coordinates: Coordinates


class DiaryResponse(BaseModel):
    """일기 응답"""
    id: str
    user: UserSummary
    title: str
    content: str
    images: list[ImageResponse]
    thumbnail_url: str | None
    location: LocationResponse
    mood: str
    weather: str
    diary_date: date
    is_public: bool
    likes: list[str]
    like_count: int
    comment_count: int
    created_at: datetime


class CommentCreate(BaseModel):
    """댓글 작성/수정 요청"""
    content: str | None = None


class CommentResponse(BaseModel):
    """댓글 응답 (작성자 이름 포함)"""
    id: str
    user: UserSummary
    content: str
    created_at: datetime


class CommentUpdateResponse(BaseModel):
    message: str
    comment: CommentResponse


class LikeResponse(BaseModel):
    message: str
    likes: int = Field(..., ge=0)


def diary_to_response(diary) -> DiaryResponse:
    """ORM Diary → 응답 모델"""
    return DiaryResponse(
        id=diary.id,
        user=UserSummary(id=diary.user.id, username=diary.user.username),
        title=diary.title,
        content=diary.content,
        images=[ImageResponse(url=image.url) for image in diary.images],
        thumbnail_url=diary.thumbnail_url,
        location=LocationResponse(
            state=diary.state,
            coordinates=Coordinates(latitude=diary.latitude, longitude=diary.longitude),
        ),
        mood=diary.mood,
        weather=diary.weather,
        diary_date=diary.diary_date,
        is_public=diary.is_public,
        likes=diary.like_user_ids,
        like_count=len(diary.likes),
        comment_count=len(diary.comments),
        created_at=diary.created_at,
    )


def comment_to_response(comment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        user=UserSummary(id=comment.user.id, username=comment.user.username),
        content=comment.content,
        created_at=comment.created_at,
    )
