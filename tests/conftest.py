# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before notesphere.config is imported
# - Builds a fresh app on an in-memory SQLite database for every test
# - Provides user / note / comment factories and JWT auth headers
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# notesphere.config reads the environment at import time

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-with-enough-length-0123456789")
os.environ.setdefault("RATELIMIT_ENABLED", "false")
os.environ.setdefault("LOG_DIR", "")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from flask_jwt_extended import create_access_token

from notesphere import create_app, db
from notesphere.models import User
from notesphere.services import note_service, comment_service
from notesphere.utils.error_handler import ErrorHandler


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app():
    """App bound to a private in-memory database, with an active app context."""
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "RATELIMIT_ENABLED": False,
        "COUNTER_STRICT_MODE": False,
        "COMMENT_REQUIRE_REVIEW": False,
        "LOG_DIR": "",
    })
    with app.app_context():
        db.create_all()
        ErrorHandler.reset_stats()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


# =============================================================================
# Data Factories
# =============================================================================

@pytest.fixture
def make_user(app):
    """Factory creating committed users: make_user("alice", is_admin=True)."""
    def _make_user(username, password="secret123", is_admin=False):
        user = User(username=username, nickname=username, is_admin=is_admin)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def make_note(app):
    def _make_note(author, title="测试笔记"):
        return note_service.create_note(author.id, title, content="笔记正文")

    return _make_note


@pytest.fixture
def make_comment(app):
    def _make_comment(author, note, content="评论内容", reply_to=None):
        return comment_service.create_comment(
            author.id, note.id, content, reply_to_id=reply_to.id if reply_to else None
        )

    return _make_comment


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def note(make_note, alice):
    """A public note written by alice."""
    return make_note(alice)


@pytest.fixture
def auth_headers(app):
    """Factory building Authorization headers for a user."""
    def _auth_headers(user):
        token = create_access_token(
            identity=str(user.id),
            additional_claims={"is_admin": user.is_admin},
        )
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def fresh(app):
    """Fetch a row again from the database: fresh(Note, note.id)."""
    def _fresh(model, row_id):
        db.session.expire_all()
        return db.session.get(model, row_id)

    return _fresh
