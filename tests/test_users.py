# =============================================================================
# tests/test_users.py - Registration and Profile Tests
# =============================================================================
# This module contains tests for:
# - Registration validation and the duplicate-username race
# - Partial profile updates
# =============================================================================

import pytest

from notesphere.models import User
from notesphere.models.user import GENDER_FEMALE, GENDER_UNSET
from notesphere.services import user_service
from notesphere.utils.errors import NotFoundError, ValidationError


# =============================================================================
# Registration
# =============================================================================

class TestRegisterUser:

    def test_register_hashes_password(self, app):
        user = user_service.register_user("  dave ", "secret123")

        assert user.username == "dave"
        assert user.nickname == "dave"
        assert user.gender == GENDER_UNSET
        assert user.check_password("secret123")

    def test_duplicate_username(self, alice):
        with pytest.raises(ValidationError):
            user_service.register_user("alice", "secret123")

    def test_concurrent_duplicate_is_validation_error(self, monkeypatch, alice):
        # the pre-check misses a row that another request has just committed
        monkeypatch.setattr(user_service, "find_user_by_username", lambda username: None)

        with pytest.raises(ValidationError) as exc_info:
            user_service.register_user("alice", "secret123")

        assert exc_info.value.message == "用户名已经存在。"
        assert User.query.count() == 1

    @pytest.mark.parametrize("username, password", [
        ("a", "secret123"),
        ("dave", "short"),
        (None, "secret123"),
    ])
    def test_invalid_credentials(self, app, username, password):
        with pytest.raises(ValidationError):
            user_service.register_user(username, password)


# =============================================================================
# Profile updates
# =============================================================================

class TestUpdateProfile:

    def test_partial_update(self, alice, fresh):
        user_service.update_profile(alice.id, signature="旧签名")
        user_service.update_profile(alice.id, location="杭州")

        user = fresh(User, alice.id)
        assert user.location == "杭州"
        assert user.signature == "旧签名"
        assert user.nickname == "alice"

    def test_updates_every_field(self, alice, fresh):
        user_service.update_profile(
            alice.id,
            nickname=" 小爱 ",
            signature="记录生活",
            location="上海",
            gender=GENDER_FEMALE,
            avatar="https://img.example.com/a.png",
        )

        user = fresh(User, alice.id)
        assert user.nickname == "小爱"
        assert user.signature == "记录生活"
        assert user.location == "上海"
        assert user.gender == GENDER_FEMALE
        assert user.avatar == "https://img.example.com/a.png"

    def test_empty_update_rejected(self, alice):
        with pytest.raises(ValidationError) as exc_info:
            user_service.update_profile(alice.id)

        assert exc_info.value.message == "没有提供任何需要更新的信息"

    def test_all_none_is_empty(self, alice):
        with pytest.raises(ValidationError):
            user_service.update_profile(alice.id, nickname=None, gender=None)

    @pytest.mark.parametrize("fields", [
        {"gender": 3},
        {"gender": True},
        {"gender": "1"},
        {"nickname": "   "},
        {"nickname": "x" * 51},
        {"location": "x" * 101},
        {"signature": 123},
        {"username": "mallory"},
    ])
    def test_invalid_fields_rejected(self, alice, fresh, fields):
        with pytest.raises(ValidationError):
            user_service.update_profile(alice.id, **fields)

        user = fresh(User, alice.id)
        assert user.username == "alice"
        assert user.gender == GENDER_UNSET

    def test_missing_user(self, app):
        with pytest.raises(NotFoundError):
            user_service.update_profile(999, location="杭州")
