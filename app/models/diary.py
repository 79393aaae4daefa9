# app/models/diary.py
from sqlalchemy import Column, String, Text, Integer, Float, Boolean, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
from datetime import datetime, timezone
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Diary(Base):
    """일기 모델

    이미지, 댓글, 좋아요는 모두 이 일기에 속하며 일기와 함께 삭제된다.
    """
    __tablename__ = "diaries"

    # 기본 필드
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # 본문
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    mood = Column(String, nullable=False)
    weather = Column(String, nullable=False)
    diary_date = Column(Date, nullable=False)  # 작성일(created_at)과 별개인 일기 날짜

    # 위치
    state = Column(String, nullable=False, index=True)  # 시/도
    latitude = Column(Float, nullable=False, default=0.0)
    longitude = Column(Float, nullable=False, default=0.0)

    # 이미지
    thumbnail_url = Column(String)

    # 공개 여부
    is_public = Column(Boolean, nullable=False, default=False, index=True)

    # 타임스탬프 (정렬 기준이라 마이크로초까지 앱에서 지정)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    # 관계
    user = relationship("User")
    images = relationship(
        "DiaryImage",
        back_populates="diary",
        order_by="DiaryImage.position",
        cascade="all, delete-orphan",
    )
    comments = relationship(
        "DiaryComment",
        back_populates="diary",
        order_by="DiaryComment.created_at",
        cascade="all, delete-orphan",
    )
    likes = relationship("DiaryLike", back_populates="diary", cascade="all, delete-orphan")

    @property
    def like_user_ids(self) -> list[str]:
        return [like.user_id for like in self.likes]

    def __repr__(self):
        return f"<Diary {self.title} ({self.id})>"


class DiaryImage(Base):
    """일기 첨부 이미지 (저장소 URL + 삭제 핸들)"""
    __tablename__ = "diary_images"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    diary_id = Column(String, ForeignKey("diaries.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)  # 0번이 썸네일
    url = Column(String, nullable=False)
    storage_handle = Column(String, nullable=False)

    diary = relationship("Diary", back_populates="images")

    def __repr__(self):
        return f"<DiaryImage {self.position} of {self.diary_id}>"


class DiaryComment(Base):
    """댓글 (일기 안에서만 의미가 있음)"""
    __tablename__ = "diary_comments"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    diary_id = Column(String, ForeignKey("diaries.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    diary = relationship("Diary", back_populates="comments")
    user = relationship("User")

    def __repr__(self):
        return f"<DiaryComment {self.id} on {self.diary_id}>"


class DiaryLike(Base):
    """좋아요 (diary_id, user_id) 복합키 = 한 유저당 한 번"""
    __tablename__ = "diary_likes"

    diary_id = Column(String, ForeignKey("diaries.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    diary = relationship("Diary", back_populates="likes")

    def __repr__(self):
        return f"<DiaryLike {self.user_id} -> {self.diary_id}>"
