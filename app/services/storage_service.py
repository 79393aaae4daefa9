# app/services/storage_service.py
from dataclasses import dataclass
from typing import Protocol
import os
import uuid

from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from app.config import Settings, settings
from app.core.file_security import AttachmentBlob, sanitize_filename
from app.core.logger import logger


class StorageError(Exception):
    """첨부 저장소 업로드/삭제 실패"""


@dataclass(frozen=True)
class StoredImage:
    """저장소에 올라간 이미지 (url + 삭제용 핸들)"""
    url: str
    handle: str


class AttachmentStore(Protocol):
    """이미지 저장소 인터페이스

    release는 이미 삭제된 핸들에 대해 다시 호출해도 성공해야 한다.
    """

    def upload(self, blob: AttachmentBlob) -> StoredImage: ...

    def release(self, handle: str) -> None: ...


# 일시적인 디스크 오류만 재시도
_io_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
    retry=retry_if_exception_type(OSError),
    reraise=True,
)


class LocalAttachmentStore:
    """로컬 디스크 저장소 (/uploads 정적 경로로 서빙)"""

    SUBDIR = "diaries"

    def __init__(self, config: Settings):
        self.root = os.path.join(config.upload_dir, self.SUBDIR)
        self.url_prefix = f"{config.upload_url_prefix.rstrip('/')}/{self.SUBDIR}"
        os.makedirs(self.root, exist_ok=True)

    def _path(self, handle: str) -> str:
        # 핸들은 파일명만 허용 (경로 이탈 방지)
        return os.path.join(self.root, os.path.basename(handle))

    @_io_retry
    def _write(self, path: str, data: bytes) -> None:
        with open(path, "wb") as buffer:
            buffer.write(data)

    @_io_retry
    def _remove(self, path: str) -> None:
        if os.path.exists(path):
            os.remove(path)

    def upload(self, blob: AttachmentBlob) -> StoredImage:
        # 고유 파일명 생성 (UUID + 원본 확장자)
        _, ext = os.path.splitext(sanitize_filename(blob.filename))
        handle = f"{uuid.uuid4()}{ext}"

        try:
            self._write(self._path(handle), blob.data)
        except OSError as e:
            raise StorageError(f"이미지 업로드 실패: {e}") from e

        logger.debug(f"이미지 저장: {handle} ({blob.size} bytes)")
        return StoredImage(url=f"{self.url_prefix}/{handle}", handle=handle)

    def release(self, handle: str) -> None:
        try:
            self._remove(self._path(handle))
        except OSError as e:
            raise StorageError(f"이미지 삭제 실패: {handle}: {e}") from e

        logger.debug(f"이미지 삭제: {handle}")


_store: AttachmentStore | None = None

def get_attachment_store() -> AttachmentStore:
    """저장소 의존성 (프로세스당 하나)"""
    global _store
    if _store is None:
        _store = LocalAttachmentStore(settings)
    return _store
