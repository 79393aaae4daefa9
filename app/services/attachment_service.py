# app/services/attachment_service.py
"""일기 이미지와 첨부 저장소의 동기화

- 추가: 먼저 업로드하고, 성공한 {url, handle}만 일기에 저장
- 제거: 일기에서 빼기 전에 저장소에서 먼저 삭제
"""
from typing import Iterable

from app.core.exceptions import DependencyFailure
from app.core.file_security import AttachmentBlob
from app.core.logger import logger
from app.models.diary import Diary, DiaryImage
from app.services.storage_service import AttachmentStore, StorageError, StoredImage


def upload_all(store: AttachmentStore, blobs: list[AttachmentBlob]) -> list[StoredImage]:
    """순서대로 업로드, 중간에 실패하면 이번에 올린 것까지 정리하고 실패"""
    uploaded: list[StoredImage] = []

    for blob in blobs:
        try:
            uploaded.append(store.upload(blob))
        except StorageError as e:
            logger.error(f"업로드 실패, 이번 요청에서 올린 {len(uploaded)}개 정리: {e}")
            discard(store, [image.handle for image in uploaded])
            raise DependencyFailure("이미지 업로드에 실패했습니다") from e

    return uploaded


def release_all(store: AttachmentStore, handles: Iterable[str]) -> int:
    """순서대로 삭제, 첫 실패에서 중단 (호출 측은 커밋하지 않음)"""
    released = 0
    for handle in handles:
        try:
            store.release(handle)
        except StorageError as e:
            logger.error(f"이미지 삭제 실패 ({released}개 삭제 후 중단): {e}")
            raise DependencyFailure("이미지 삭제에 실패했습니다") from e
        released += 1
    return released


def discard(store: AttachmentStore, handles: list[str]) -> None:
    """보상 삭제 (실패해도 원래 오류를 우선함)"""
    for handle in handles:
        try:
            store.release(handle)
        except StorageError as e:
            logger.warning(f"보상 삭제 실패, 고아 이미지 남음: {handle}: {e}")


def to_diary_images(stored: list[StoredImage]) -> list[DiaryImage]:
    return [
        DiaryImage(position=index, url=image.url, storage_handle=image.handle)
        for index, image in enumerate(stored)
    ]


def replace_images(store: AttachmentStore, diary: Diary, blobs: list[AttachmentBlob]) -> list[StoredImage]:
    """기존 이미지 전체를 새 이미지로 교체

    새 이미지 업로드 → 기존 이미지 삭제 → 일기에 반영 순서.
    기존 이미지 삭제가 실패하면 새로 올린 것을 정리하고 실패한다.
    커밋 실패 시 정리할 수 있도록 새로 올린 이미지를 반환.
    """
    stored = upload_all(store, blobs)
    old_handles = [image.storage_handle for image in diary.images]

    try:
        release_all(store, old_handles)
    except DependencyFailure:
        discard(store, [image.handle for image in stored])
        raise

    diary.images = to_diary_images(stored)
    diary.thumbnail_url = stored[0].url
    logger.info(f"일기 {diary.id} 이미지 교체: {len(old_handles)}개 삭제, {len(stored)}개 추가")
    return stored
