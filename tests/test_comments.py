# =============================================================================
# tests/test_comments.py - Comment Threading and Moderation Tests
# =============================================================================
# This module contains tests for:
# - Thread position resolution (level / root comment)
# - Comment creation validation
# - Status changes and permissions
# - Hard deletion and listing of published comments
# =============================================================================

import pytest

from notesphere.models import Comment, Like, CommentTarget
from notesphere.models.comment import (
    COMMENT_LEVEL_REPLY, COMMENT_LEVEL_ROOT,
    COMMENT_STATUS_DELETED, COMMENT_STATUS_PENDING, COMMENT_STATUS_PUBLISHED,
)
from notesphere.services import comment_service, interaction_service
from notesphere.services.comment_thread import ThreadPosition, position_for_reply, resolve_thread
from notesphere.utils.errors import NotFoundError, PermissionDeniedError, ValidationError


# =============================================================================
# Thread resolution
# =============================================================================

class TestThreadResolution:

    def test_top_level_comment(self, note, bob, make_comment):
        comment = make_comment(bob, note)

        assert comment.level == COMMENT_LEVEL_ROOT
        assert comment.reply_to_id is None
        assert comment.root_comment_id is None

    def test_reply_to_root(self, note, alice, bob, make_comment):
        root = make_comment(alice, note)
        reply = make_comment(bob, note, reply_to=root)

        assert reply.level == COMMENT_LEVEL_REPLY
        assert reply.reply_to_id == root.id
        assert reply.root_comment_id == root.id

    def test_reply_to_reply_is_flattened(self, note, alice, bob, carol, make_comment):
        root = make_comment(alice, note)
        reply = make_comment(bob, note, reply_to=root)
        nested = make_comment(carol, note, reply_to=reply)

        assert nested.level == COMMENT_LEVEL_REPLY
        assert nested.reply_to_id == reply.id
        assert nested.root_comment_id == root.id

    def test_position_for_reply_without_target(self):
        assert position_for_reply(None) == ThreadPosition(COMMENT_LEVEL_ROOT, None)

    def test_missing_reply_target(self, note):
        with pytest.raises(NotFoundError):
            resolve_thread(note.id, 999)

    def test_reply_target_on_other_note(self, alice, bob, make_note, make_comment):
        first = make_note(alice, title="第一篇笔记")
        second = make_note(alice, title="第二篇笔记")
        comment = make_comment(bob, first)

        with pytest.raises(ValidationError):
            resolve_thread(second.id, comment.id)

    def test_reply_survives_root_deletion(self, note, alice, bob, make_comment, fresh):
        root = make_comment(alice, note)
        reply = make_comment(bob, note, reply_to=root)
        root_id = root.id

        comment_service.destroy_comment(alice.id, root_id)

        kept = fresh(Comment, reply.id)
        assert kept.root_comment_id == root_id
        assert kept.reply_to_id == root_id


# =============================================================================
# Creation
# =============================================================================

class TestCreateComment:

    def test_content_is_trimmed(self, note, bob):
        comment = comment_service.create_comment(bob.id, note.id, "  很喜欢这篇  ")

        assert comment.content == "很喜欢这篇"
        assert comment.status == COMMENT_STATUS_PUBLISHED

    def test_blank_content_rejected(self, note, bob):
        with pytest.raises(ValidationError):
            comment_service.create_comment(bob.id, note.id, "   ")

    def test_too_long_content_rejected(self, app, note, bob):
        app.config["COMMENT_MAX_LENGTH"] = 10

        with pytest.raises(ValidationError):
            comment_service.create_comment(bob.id, note.id, "x" * 11)

    def test_missing_note(self, bob):
        with pytest.raises(NotFoundError):
            comment_service.create_comment(bob.id, 999, "评论")


# =============================================================================
# Status changes
# =============================================================================

class TestChangeStatus:

    def test_author_can_delete_own_comment(self, note, bob, make_comment):
        comment = make_comment(bob, note)

        updated = comment_service.change_comment_status(bob.id, comment.id, COMMENT_STATUS_DELETED)

        assert updated.status == COMMENT_STATUS_DELETED

    def test_author_cannot_republish(self, app, note, bob, make_comment):
        app.config["COMMENT_REQUIRE_REVIEW"] = True
        comment = make_comment(bob, note)

        with pytest.raises(PermissionDeniedError):
            comment_service.change_comment_status(bob.id, comment.id, COMMENT_STATUS_PUBLISHED)

    def test_stranger_cannot_moderate(self, note, bob, carol, make_comment):
        comment = make_comment(bob, note)

        with pytest.raises(PermissionDeniedError):
            comment_service.change_comment_status(carol.id, comment.id, COMMENT_STATUS_DELETED)

    def test_admin_can_moderate(self, note, bob, make_user, make_comment):
        admin = make_user("admin", is_admin=True)
        comment = make_comment(bob, note)

        updated = comment_service.change_comment_status(admin.id, comment.id, COMMENT_STATUS_PENDING)

        assert updated.status == COMMENT_STATUS_PENDING

    def test_invalid_status(self, note, alice, bob, make_comment):
        comment = make_comment(bob, note)

        with pytest.raises(ValidationError):
            comment_service.change_comment_status(alice.id, comment.id, 7)


# =============================================================================
# Deletion and listing
# =============================================================================

class TestDestroyAndList:

    def test_destroy_removes_comment_likes(self, note, alice, bob, make_comment):
        comment = make_comment(bob, note)
        interaction_service.toggle_like(alice.id, CommentTarget(comment.id))

        assert comment_service.destroy_comment(bob.id, comment.id) is True

        assert Comment.query.count() == 0
        assert Like.query.count() == 0

    def test_stranger_cannot_destroy(self, note, bob, carol, make_comment):
        comment = make_comment(bob, note)

        with pytest.raises(PermissionDeniedError):
            comment_service.destroy_comment(carol.id, comment.id)

    def test_list_only_published_with_reply_summary(self, app, note, alice, bob, make_comment):
        root = make_comment(alice, note, content="一级评论")
        make_comment(bob, note, content="回复", reply_to=root)
        app.config["COMMENT_REQUIRE_REVIEW"] = True
        make_comment(bob, note, content="待审核")

        comments, pagination = comment_service.list_published_comments(note.id, page=1, page_size=10)

        assert pagination["total"] == 2
        assert [c["content"] for c in comments] == ["回复", "一级评论"]
        assert comments[0]["replyTo"]["id"] == root.id
        assert comments[0]["replyTo"]["author"]["nickname"] == "alice"
        assert comments[1]["replyTo"] is None
