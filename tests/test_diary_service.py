# tests/test_diary_service.py
import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import ValidationFailed, NotFound, Forbidden, DependencyFailure
from app.core.file_security import AttachmentBlob
from app.models.diary import Diary, DiaryImage, DiaryLike
from app.services import diary_service
from tests.helpers import diary_form, blobs


@pytest.fixture
def owner(make_user):
    return make_user("owner")


@pytest.fixture
def other(make_user):
    return make_user("other")


def _create(db, store, user, images=1, **form):
    return diary_service.create_diary(db, store, user.id, diary_form(**form), blobs(images))


# ===== 작성 =====

@pytest.mark.parametrize("count", [1, 3, 10])
def test_create_sets_thumbnail_to_first_image(db, store, owner, count):
    diary = _create(db, store, owner, images=count)

    assert len(diary.images) == count
    assert diary.thumbnail_url == diary.images[0].url
    assert [image.storage_handle for image in diary.images] == store.uploads
    assert diary.user_id == owner.id


def test_create_parses_form_values(db, store, owner):
    diary = _create(db, store, owner, is_public="false", diary_date="2024-10-01T09:30:00.000Z")

    assert diary.is_public is False
    assert diary.diary_date.isoformat() == "2024-10-01"
    assert diary.latitude == pytest.approx(37.57)
    assert diary.state == "서울"


@pytest.mark.parametrize("latitude, longitude", [("abc", ""), (None, "nan"), ("inf", None)])
def test_create_falls_back_to_zero_coordinates(db, store, owner, latitude, longitude):
    diary = _create(db, store, owner, latitude=latitude, longitude=longitude)

    assert (diary.latitude, diary.longitude) == (0.0, 0.0)


@pytest.mark.parametrize("missing", ["title", "content", "mood", "weather", "diary_date", "state"])
def test_create_rejects_missing_field_before_upload(db, store, owner, missing):
    with pytest.raises(ValidationFailed) as exc:
        _create(db, store, owner, **{missing: ""})

    assert missing in exc.value.detail
    assert store.uploads == []
    assert db.query(Diary).count() == 0


def test_create_requires_an_image(db, store, owner):
    with pytest.raises(ValidationFailed):
        _create(db, store, owner, images=0)

    assert db.query(Diary).count() == 0


def test_create_rejects_more_than_ten_images(db, store, owner):
    with pytest.raises(ValidationFailed):
        _create(db, store, owner, images=11)

    assert store.uploads == []


def test_create_rejects_non_image_file(db, store, owner):
    bad = [AttachmentBlob(filename="notes.txt", content_type="text/plain", data=b"hello")]

    with pytest.raises(ValidationFailed):
        diary_service.create_diary(db, store, owner.id, diary_form(), bad)

    assert store.uploads == []


def test_create_upload_failure_leaves_no_record_and_no_orphans(db, store, owner):
    store.fail_upload_after = 2

    with pytest.raises(DependencyFailure):
        _create(db, store, owner, images=3)

    assert db.query(Diary).count() == 0
    assert store.live == {}
    assert sorted(store.releases) == sorted(store.uploads)


# ===== 수정 =====

def test_update_replaces_all_images(db, store, owner):
    diary = _create(db, store, owner, images=3)
    old_handles = list(store.uploads)
    store.reset_calls()

    updated = diary_service.update_diary(db, store, diary.id, owner.id, diary_form(title="수정됨"), blobs(2))

    assert store.releases == old_handles
    assert len(store.uploads) == 2
    assert len(updated.images) == 2
    assert updated.thumbnail_url == updated.images[0].url
    assert updated.title == "수정됨"
    assert db.query(DiaryImage).count() == 2


def test_update_without_images_keeps_images(db, store, owner):
    diary = _create(db, store, owner, images=2)
    thumbnail = diary.thumbnail_url
    store.reset_calls()

    updated = diary_service.update_diary(
        db, store, diary.id, owner.id, diary_form(is_public="false", latitude="x"), []
    )

    assert store.uploads == [] and store.releases == []
    assert updated.thumbnail_url == thumbnail
    assert len(updated.images) == 2
    assert updated.is_public is False
    assert updated.latitude == 0.0


def test_update_by_non_owner_is_forbidden_and_unchanged(db, store, owner, other):
    diary = _create(db, store, owner, images=1)
    store.reset_calls()

    with pytest.raises(Forbidden):
        diary_service.update_diary(db, store, diary.id, other.id, diary_form(title="hijack"), blobs(1))

    db.expire_all()
    assert db.get(Diary, diary.id).title == "Seoul trip"
    assert store.uploads == [] and store.releases == []


def test_update_missing_diary(db, store, owner):
    with pytest.raises(NotFound):
        diary_service.update_diary(db, store, "nope", owner.id, diary_form(), [])


def test_update_release_failure_discards_new_uploads(db, store, owner):
    diary = _create(db, store, owner, images=2)
    store.fail_release_handles = {store.uploads[1]}
    store.reset_calls()

    with pytest.raises(DependencyFailure):
        diary_service.update_diary(db, store, diary.id, owner.id, diary_form(title="x"), blobs(2))

    # 새로 올린 두 장은 정리됨
    assert all(handle in store.releases for handle in store.uploads)
    db.rollback()
    db.expire_all()
    kept = db.get(Diary, diary.id)
    assert kept.title == "Seoul trip"
    assert len(kept.images) == 2


# ===== 삭제 =====

def test_delete_releases_every_image(db, store, owner):
    diary = _create(db, store, owner, images=3)
    handles = list(store.uploads)

    diary_service.delete_diary(db, store, diary.id, owner.id)

    assert store.releases == handles
    assert db.query(Diary).count() == 0
    assert db.query(DiaryImage).count() == 0


def test_delete_by_non_owner_is_forbidden(db, store, owner, other):
    diary = _create(db, store, owner)

    with pytest.raises(Forbidden):
        diary_service.delete_diary(db, store, diary.id, other.id)

    assert store.releases == []
    assert db.query(Diary).count() == 1


def test_delete_aborts_when_release_fails(db, store, owner):
    diary = _create(db, store, owner, images=2)
    store.fail_release_handles = {store.uploads[0]}

    with pytest.raises(DependencyFailure):
        diary_service.delete_diary(db, store, diary.id, owner.id)

    db.rollback()
    assert db.query(Diary).count() == 1


# ===== 좋아요 =====

def test_like_toggle_scenario(db, store, owner, other):
    diary = _create(db, store, owner, title="Seoul trip")

    assert diary_service.toggle_like(db, diary.id, other.id) == 1
    assert diary_service.toggle_like(db, diary.id, other.id) == 0

    with pytest.raises(Forbidden):
        diary_service.toggle_like(db, diary.id, owner.id)

    db.expire_all()
    assert db.get(Diary, diary.id).like_user_ids == []


def test_likes_are_a_set_per_user(db, store, owner, other, make_user):
    third = make_user("third")
    diary = _create(db, store, owner)

    diary_service.toggle_like(db, diary.id, other.id)
    assert diary_service.toggle_like(db, diary.id, third.id) == 2

    db.expire_all()
    assert sorted(db.get(Diary, diary.id).like_user_ids) == sorted([other.id, third.id])


def test_like_missing_diary(db, other):
    with pytest.raises(NotFound):
        diary_service.toggle_like(db, "missing", other.id)


# ===== 댓글 =====

def test_anyone_can_comment_even_on_private_diary(db, store, owner, other):
    diary = _create(db, store, owner, is_public="false")

    comment = diary_service.add_comment(db, diary.id, other.id, "  멋지다  ")

    assert comment.content == "멋지다"
    assert comment.user_id == other.id
    assert comment.created_at is not None


def test_comment_requires_content(db, store, owner):
    diary = _create(db, store, owner)

    with pytest.raises(ValidationFailed):
        diary_service.add_comment(db, diary.id, owner.id, "   ")


def test_comment_on_missing_diary(db, other):
    with pytest.raises(NotFound):
        diary_service.add_comment(db, "missing", other.id, "hi")


def test_only_author_can_edit_or_delete_comment(db, store, owner, other):
    diary = _create(db, store, owner)
    comment = diary_service.add_comment(db, diary.id, other.id, "first")

    # 일기 주인이라도 남의 댓글은 수정/삭제 불가
    with pytest.raises(Forbidden):
        diary_service.update_comment(db, diary.id, comment.id, owner.id, "changed")
    with pytest.raises(Forbidden):
        diary_service.delete_comment(db, diary.id, comment.id, owner.id)

    updated = diary_service.update_comment(db, diary.id, comment.id, other.id, "edited")
    assert updated.content == "edited"

    diary_service.delete_comment(db, diary.id, comment.id, other.id)
    db.expire_all()
    assert db.get(Diary, diary.id).comments == []


def test_comment_id_is_scoped_to_its_diary(db, store, owner, other):
    first = _create(db, store, owner, title="one")
    second = _create(db, store, owner, title="two")
    comment = diary_service.add_comment(db, first.id, other.id, "on first")

    with pytest.raises(NotFound):
        diary_service.update_comment(db, second.id, comment.id, other.id, "moved?")
    with pytest.raises(NotFound):
        diary_service.delete_comment(db, second.id, comment.id, other.id)


def test_update_commit_failure_discards_new_uploads(db, store, owner, monkeypatch):
    diary = _create(db, store, owner, images=2)
    store.reset_calls()

    def failing_commit():
        raise OperationalError("UPDATE diaries", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(OperationalError):
        diary_service.update_diary(db, store, diary.id, owner.id, diary_form(title="x"), blobs(2))

    # 새로 올린 두 장도 정리되어 살아있는 이미지가 없음
    assert len(store.uploads) == 2
    assert all(handle in store.releases for handle in store.uploads)
    assert store.live == {}


def test_like_toggle_tolerates_concurrent_duplicate(db, session_factory, store, owner, other, monkeypatch):
    diary = _create(db, store, owner)
    real_commit = db.commit

    def commit_after_concurrent_like():
        with session_factory() as concurrent:
            concurrent.add(DiaryLike(diary_id=diary.id, user_id=other.id))
            concurrent.commit()
        real_commit()

    monkeypatch.setattr(db, "commit", commit_after_concurrent_like)

    assert diary_service.toggle_like(db, diary.id, other.id) == 1

    monkeypatch.undo()
    db.expire_all()
    assert db.get(Diary, diary.id).like_user_ids == [other.id]
