# tests/test_user_service.py
import pytest

from app.core.exceptions import Conflict, ValidationFailed, NotFound, Unauthorized, DependencyFailure
from app.models.diary import Diary, DiaryImage, DiaryComment, DiaryLike
from app.models.user import User
from app.services import diary_service, user_service
from tests.helpers import diary_form, blobs


def test_signup_hashes_password(db):
    user = user_service.signup(db, "minji", "pass1234")

    assert user.id
    assert user.hashed_password != "pass1234"


def test_signup_duplicate_username(db):
    user_service.signup(db, "minji", "pass1234")

    with pytest.raises(Conflict):
        user_service.signup(db, "minji", "other")

    assert db.query(User).count() == 1


def test_authenticate(db):
    user_service.signup(db, "minji", "pass1234")

    assert user_service.authenticate(db, "minji", "pass1234").username == "minji"

    with pytest.raises(ValidationFailed):
        user_service.authenticate(db, "minji", "")
    with pytest.raises(NotFound):
        user_service.authenticate(db, "nobody", "pass1234")
    with pytest.raises(Unauthorized):
        user_service.authenticate(db, "minji", "wrong")


def test_delete_account_cascades(db, store, make_user):
    owner = make_user("owner")
    friend = make_user("friend")

    # 3개 일기 x 2장
    owned = [
        diary_service.create_diary(db, store, owner.id, diary_form(title=f"d{i}"), blobs(2))
        for i in range(3)
    ]
    friends_diary = diary_service.create_diary(db, store, friend.id, diary_form(), blobs(1))
    diary_service.toggle_like(db, friends_diary.id, owner.id)
    diary_service.add_comment(db, friends_diary.id, owner.id, "hi")
    diary_service.add_comment(db, owned[0].id, friend.id, "nice")
    owner_handles = [image.storage_handle for diary in owned for image in diary.images]
    store.reset_calls()

    deleted = user_service.delete_account(db, store, owner.id)

    assert deleted == 3
    assert sorted(store.releases) == sorted(owner_handles)
    assert len(store.releases) == 6
    db.expire_all()
    assert db.query(Diary).filter(Diary.user_id == owner.id).count() == 0
    assert db.query(DiaryImage).count() == 1
    assert db.query(DiaryLike).count() == 0
    assert db.query(DiaryComment).count() == 0
    assert db.get(User, owner.id) is None
    assert db.get(User, friend.id) is not None


def test_delete_account_keeps_user_when_release_fails(db, store, make_user):
    owner = make_user("owner")
    diary = diary_service.create_diary(db, store, owner.id, diary_form(), blobs(2))
    store.fail_release_handles = {diary.images[1].storage_handle}

    with pytest.raises(DependencyFailure):
        user_service.delete_account(db, store, owner.id)

    db.rollback()
    assert db.get(User, owner.id) is not None
    assert db.query(Diary).count() == 1


def test_signup_concurrent_duplicate_is_conflict(db, session_factory, monkeypatch):
    real_hash = user_service.hash_password

    def hash_while_other_signs_up(password):
        # 중복 확인 직후 다른 요청이 같은 유저명으로 가입
        with session_factory() as concurrent:
            concurrent.add(User(username="minji", hashed_password="x"))
            concurrent.commit()
        return real_hash(password)

    monkeypatch.setattr(user_service, "hash_password", hash_while_other_signs_up)

    with pytest.raises(Conflict):
        user_service.signup(db, "minji", "pass1234")

    assert db.query(User).count() == 1
