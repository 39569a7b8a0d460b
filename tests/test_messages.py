# =============================================================================
# tests/test_messages.py - Conversation Key and Private Message Tests
# =============================================================================

import pytest

from notesphere.models import Message
from notesphere.models.message import MESSAGE_STATUS_NORMAL
from notesphere.services import message_service
from notesphere.services.conversation import conversation_key, parse_conversation_key
from notesphere.utils.errors import NotFoundError, PermissionDeniedError, ValidationError


# =============================================================================
# Conversation key
# =============================================================================

class TestConversationKey:

    def test_order_independent(self):
        assert conversation_key(9, 5) == "5_9"
        assert conversation_key(5, 9) == "5_9"

    def test_numeric_not_lexical_order(self):
        assert conversation_key(10, 9) == "9_10"

    def test_self_conversation_rejected(self):
        with pytest.raises(ValidationError):
            conversation_key(3, 3)

    def test_missing_participant_rejected(self):
        with pytest.raises(ValidationError):
            conversation_key(None, 3)

    def test_parse(self):
        assert parse_conversation_key("5_9") == (5, 9)

    @pytest.mark.parametrize("key", ["9_5", "5-9", "5_9_1", "a_b", "5_5", ""])
    def test_parse_rejects_malformed(self, key):
        with pytest.raises(ValidationError):
            parse_conversation_key(key)


# =============================================================================
# Sending
# =============================================================================

class TestSendMessage:

    def test_derives_conversation_id(self, alice, bob):
        message = message_service.send_message(bob.id, alice.id, "你好")

        assert message.conversation_id == conversation_key(alice.id, bob.id)
        assert message.is_read is False
        assert message.status == MESSAGE_STATUS_NORMAL

    def test_matching_conversation_id_accepted(self, alice, bob):
        key = conversation_key(alice.id, bob.id)

        message = message_service.send_message(alice.id, bob.id, "你好", conversation_id=key)

        assert message.conversation_id == key

    def test_mismatched_conversation_id_rejected(self, alice, bob, carol):
        with pytest.raises(ValidationError):
            message_service.send_message(
                alice.id, bob.id, "你好", conversation_id=conversation_key(alice.id, carol.id)
            )
        assert Message.query.count() == 0

    def test_cannot_message_self(self, alice):
        with pytest.raises(ValidationError):
            message_service.send_message(alice.id, alice.id, "你好")

    def test_missing_receiver(self, alice):
        with pytest.raises(NotFoundError):
            message_service.send_message(alice.id, 999, "你好")

    def test_blank_content(self, alice, bob):
        with pytest.raises(ValidationError):
            message_service.send_message(alice.id, bob.id, "  ")

    def test_media_message_requires_url(self, alice, bob):
        with pytest.raises(ValidationError):
            message_service.send_message(alice.id, bob.id, "[图片]", content_type=1)

        message = message_service.send_message(
            alice.id, bob.id, "[图片]", content_type=1, media_url="https://img.example.com/a.png"
        )
        assert message.media_url == "https://img.example.com/a.png"

    def test_unknown_content_type(self, alice, bob):
        with pytest.raises(ValidationError):
            message_service.send_message(alice.id, bob.id, "你好", content_type=9)


# =============================================================================
# Reading
# =============================================================================

class TestConversations:

    def test_list_shows_latest_and_unread(self, alice, bob, carol):
        message_service.send_message(bob.id, alice.id, "第一条")
        message_service.send_message(bob.id, alice.id, "第二条")
        message_service.send_message(alice.id, carol.id, "在吗")

        conversations = message_service.list_conversations(alice.id)

        assert [c["conversationId"] for c in conversations] == [
            conversation_key(alice.id, carol.id),
            conversation_key(alice.id, bob.id),
        ]
        with_bob = conversations[1]
        assert with_bob["lastMessage"]["content"] == "第二条"
        assert with_bob["unreadCount"] == 2
        assert with_bob["peer"]["id"] == bob.id
        assert conversations[0]["unreadCount"] == 0

    def test_reading_marks_incoming_as_read(self, alice, bob):
        message_service.send_message(bob.id, alice.id, "收到请回复")
        message_service.send_message(alice.id, bob.id, "收到")
        key = conversation_key(alice.id, bob.id)

        messages, pagination = message_service.get_conversation_messages(alice.id, key)

        assert pagination["total"] == 2
        assert messages[0]["content"] == "收到"
        assert Message.query.filter_by(receiver_id=alice.id, is_read=False).count() == 0
        # bob has not opened the conversation yet
        assert Message.query.filter_by(receiver_id=bob.id, is_read=False).count() == 1

    def test_outsider_cannot_read(self, alice, bob, carol):
        message_service.send_message(alice.id, bob.id, "悄悄话")

        with pytest.raises(PermissionDeniedError):
            message_service.get_conversation_messages(carol.id, conversation_key(alice.id, bob.id))
