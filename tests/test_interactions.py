# =============================================================================
# tests/test_interactions.py - Like / Collect / Follow Toggle Tests
# =============================================================================
# This module contains tests for:
# - Toggle semantics and validation for likes, collections and follows
# - Interaction status lookups
# - Lost insert races resolved by the unique constraints
# =============================================================================

import pytest
from sqlalchemy.exc import IntegrityError

from notesphere import db
from notesphere.models import Collection, Comment, Follow, Like, Note, User, NoteTarget, CommentTarget
from notesphere.models.comment import COMMENT_LEVEL_REPLY, COMMENT_LEVEL_ROOT
from notesphere.models.like import TARGET_TYPE_COMMENT, TARGET_TYPE_NOTE
from notesphere.models.user import FOLLOW_STATUS_ACTIVE, FOLLOW_STATUS_CANCELLED
from notesphere.services import interaction_service
from notesphere.utils.errors import ConflictError, NotFoundError, ValidationError


# =============================================================================
# Likes
# =============================================================================

class TestToggleLike:

    def test_first_toggle_likes(self, note, bob):
        result = interaction_service.toggle_like(bob.id, NoteTarget(note.id))

        assert result == interaction_service.ToggleResult(True, True)
        like = Like.query.one()
        assert like.target_type == TARGET_TYPE_NOTE
        assert like.note_id == note.id
        assert like.comment_id is None

    def test_second_toggle_unlikes(self, note, bob):
        interaction_service.toggle_like(bob.id, NoteTarget(note.id))
        result = interaction_service.toggle_like(bob.id, NoteTarget(note.id))

        assert result == interaction_service.ToggleResult(False, True)
        assert Like.query.count() == 0

    def test_repeated_toggles_track_net_effect(self, note, bob, fresh):
        for expected_active in [True, False, True, False, True]:
            result = interaction_service.toggle_like(bob.id, NoteTarget(note.id))
            assert result.active is expected_active
            assert Like.query.count() == (1 if expected_active else 0)

        assert fresh(Note, note.id).like_count == 1

    def test_comment_like_is_separate_from_note_like(self, note, alice, bob, make_comment):
        comment = make_comment(alice, note)

        interaction_service.toggle_like(bob.id, NoteTarget(note.id))
        interaction_service.toggle_like(bob.id, CommentTarget(comment.id))

        assert Like.query.count() == 2
        comment_like = Like.query.filter_by(comment_id=comment.id).one()
        assert comment_like.target_type == TARGET_TYPE_COMMENT
        assert comment_like.target == CommentTarget(comment.id)

    def test_missing_note(self, bob):
        with pytest.raises(NotFoundError):
            interaction_service.toggle_like(bob.id, NoteTarget(999))

    def test_missing_comment(self, bob):
        with pytest.raises(NotFoundError):
            interaction_service.toggle_like(bob.id, CommentTarget(999))

    def test_invalid_target_id(self, bob):
        with pytest.raises(ValidationError):
            interaction_service.toggle_like(bob.id, NoteTarget(0))

    def test_unknown_target_type(self, bob):
        with pytest.raises(ValidationError):
            interaction_service.toggle_like(bob.id, object())


# =============================================================================
# Collections
# =============================================================================

class TestToggleCollection:

    def test_collect_then_uncollect(self, note, bob):
        assert interaction_service.toggle_collection(bob.id, note.id).active is True
        assert Collection.query.count() == 1

        assert interaction_service.toggle_collection(bob.id, note.id).active is False
        assert Collection.query.count() == 0

    def test_missing_note(self, bob):
        with pytest.raises(NotFoundError):
            interaction_service.toggle_collection(bob.id, 999)

    def test_non_integer_note_id(self, bob):
        with pytest.raises(ValidationError):
            interaction_service.toggle_collection(bob.id, "1")


class TestInteractionStatus:

    def test_reports_like_and_collect(self, note, bob):
        interaction_service.toggle_like(bob.id, NoteTarget(note.id))

        assert interaction_service.interaction_status(bob.id, note.id) == {
            "isLiked": True,
            "isCollected": False,
        }

    def test_missing_note(self, bob):
        with pytest.raises(NotFoundError):
            interaction_service.interaction_status(bob.id, 999)


# =============================================================================
# Follows
# =============================================================================

class TestToggleFollow:

    def test_follow_cancel_refollow_keeps_one_row(self, alice, bob):
        assert interaction_service.toggle_follow(alice.id, bob.id).active is True
        assert interaction_service.toggle_follow(alice.id, bob.id).active is False

        follow = Follow.query.one()
        assert follow.status == FOLLOW_STATUS_CANCELLED

        assert interaction_service.toggle_follow(alice.id, bob.id).active is True
        assert Follow.query.one().status == FOLLOW_STATUS_ACTIVE

    def test_is_following(self, alice, bob):
        assert interaction_service.is_following(alice.id, bob.id) is False
        interaction_service.toggle_follow(alice.id, bob.id)

        assert interaction_service.is_following(alice.id, bob.id) is True
        assert interaction_service.is_following(bob.id, alice.id) is False

    def test_cannot_follow_self(self, alice, fresh):
        with pytest.raises(ValidationError):
            interaction_service.toggle_follow(alice.id, alice.id)

        assert Follow.query.count() == 0
        assert fresh(User, alice.id).follow_count == 0

    def test_missing_user(self, alice):
        with pytest.raises(NotFoundError):
            interaction_service.toggle_follow(alice.id, 999)


# =============================================================================
# Concurrent inserts
# =============================================================================

def _stale_finder(real_finder):
    """Finder that misses the existing row once, as a concurrent request would."""
    calls = {"count": 0}

    def finder(*args):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return real_finder(*args)

    return finder


class TestInsertRaces:
    """A request that loses the insert race becomes a no-op reported as active."""

    def test_like_race_counts_once(self, monkeypatch, note, bob, fresh):
        interaction_service.toggle_like(bob.id, NoteTarget(note.id))
        monkeypatch.setattr(interaction_service, "find_like", _stale_finder(interaction_service.find_like))

        result = interaction_service.toggle_like(bob.id, NoteTarget(note.id))

        assert result == interaction_service.ToggleResult(True, False)
        assert Like.query.count() == 1
        assert fresh(Note, note.id).like_count == 1

    def test_collection_race_counts_once(self, monkeypatch, note, bob, fresh):
        interaction_service.toggle_collection(bob.id, note.id)
        monkeypatch.setattr(
            interaction_service, "find_collection", _stale_finder(interaction_service.find_collection)
        )

        result = interaction_service.toggle_collection(bob.id, note.id)

        assert result == interaction_service.ToggleResult(True, False)
        assert Collection.query.count() == 1
        assert fresh(Note, note.id).collect_count == 1

    def test_follow_race_counts_once(self, monkeypatch, alice, bob, fresh):
        interaction_service.toggle_follow(alice.id, bob.id)
        monkeypatch.setattr(interaction_service, "find_follow", _stale_finder(interaction_service.find_follow))

        result = interaction_service.toggle_follow(alice.id, bob.id)

        assert result == interaction_service.ToggleResult(True, False)
        assert Follow.query.count() == 1
        assert fresh(User, bob.id).fans_count == 1

    def test_vanished_winner_is_retryable_conflict(self, monkeypatch, note, bob, fresh):
        interaction_service.toggle_like(bob.id, NoteTarget(note.id))
        monkeypatch.setattr(interaction_service, "find_like", lambda user_id, target: None)

        with pytest.raises(ConflictError) as exc_info:
            interaction_service.toggle_like(bob.id, NoteTarget(note.id))

        assert exc_info.value.retryable is True
        assert fresh(Note, note.id).like_count == 1


# =============================================================================
# Schema guards
# =============================================================================

class TestLikeTargetConstraint:
    """A like row must name exactly one target matching its target_type."""

    @pytest.mark.parametrize("fields", [
        {"target_type": TARGET_TYPE_NOTE},
        {"target_type": TARGET_TYPE_NOTE, "note_id": "note", "comment_id": "comment"},
        {"target_type": TARGET_TYPE_NOTE, "comment_id": "comment"},
        {"target_type": TARGET_TYPE_COMMENT, "note_id": "note"},
    ])
    def test_malformed_like_rejected(self, fields, note, alice, bob, make_comment, fresh):
        comment = make_comment(alice, note)
        ids = {"note": note.id, "comment": comment.id}
        row = {key: ids.get(value, value) for key, value in fields.items()}

        db.session.add(Like(user_id=bob.id, **row))
        with pytest.raises(IntegrityError):
            db.session.flush()
        db.session.rollback()

        assert Like.query.count() == 0
        assert fresh(Note, note.id).like_count == 0
        assert fresh(Comment, comment.id).like_count == 0
        assert fresh(User, alice.id).like_collect_count == 0


class TestCommentThreadConstraint:

    def test_reply_without_root_rejected(self, note, alice, bob, make_comment, fresh):
        root = make_comment(alice, note)

        db.session.add(Comment(
            note_id=note.id, author_id=bob.id, content="回复",
            level=COMMENT_LEVEL_REPLY, reply_to_id=root.id, root_comment_id=None,
        ))
        with pytest.raises(IntegrityError):
            db.session.flush()
        db.session.rollback()

        assert Comment.query.count() == 1
        assert fresh(Note, note.id).comment_count == 1

    def test_top_level_with_reply_target_rejected(self, note, alice, bob, make_comment):
        root = make_comment(alice, note)

        db.session.add(Comment(
            note_id=note.id, author_id=bob.id, content="回复",
            level=COMMENT_LEVEL_ROOT, reply_to_id=root.id, root_comment_id=root.id,
        ))
        with pytest.raises(IntegrityError):
            db.session.flush()
        db.session.rollback()

        assert Comment.query.count() == 1
