# app/core/file_security.py
import os
from dataclasses import dataclass

from app.core.exceptions import ValidationFailed

# 설정
MAX_FILE_SIZE = 20 * 1024 * 1024  # 20MB
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
}


@dataclass
class AttachmentBlob:
    """업로드 요청으로 들어온 이미지 원본"""
    filename: str
    content_type: str | None
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def validate_file_extension(filename: str) -> None:
    """파일 확장자 검증"""
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationFailed(
            f"허용되지 않은 파일 형식입니다. 허용: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )

def validate_file_size(blob: AttachmentBlob) -> None:
    """파일 크기 검증"""
    if blob.size == 0:
        raise ValidationFailed("빈 파일은 업로드할 수 없습니다")

    if blob.size > MAX_FILE_SIZE:
        raise ValidationFailed(
            f"파일 크기가 너무 큽니다. 최대: {MAX_FILE_SIZE // 1024 // 1024}MB",
            status_code=413,
        )

def validate_mime_type(blob: AttachmentBlob) -> None:
    """MIME 타입 검증 (content_type 헤더 기준)"""
    if blob.content_type not in ALLOWED_MIME_TYPES:
        raise ValidationFailed(
            f"허용되지 않은 파일 형식입니다. 업로드한 타입: {blob.content_type}"
        )

def sanitize_filename(filename: str) -> str:
    """파일명 안전하게 변환"""
    filename = os.path.basename(filename or "")  # 경로 제거
    filename = filename.replace(" ", "_")

    name, ext = os.path.splitext(filename)

    # 알파벳, 숫자, 언더스코어, 하이픈만 허용
    safe_name = "".join(c for c in name if c.isalnum() or c in "_-")[:50]

    return f"{safe_name}{ext.lower()}"

def validate_uploaded_file(blob: AttachmentBlob) -> None:
    """전체 파일 검증"""
    validate_file_extension(blob.filename)
    validate_file_size(blob)
    validate_mime_type(blob)
