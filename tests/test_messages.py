import pytest
from fastapi import HTTPException

from taskapp.modules.messages.schemas import MessageCreate
from taskapp.modules.messages.service import MessageService


@pytest.fixture()
def messages(db, notifications):
    return MessageService(db, notifications=notifications)


class TestSend:
    def test_stores_message_and_notifies_receiver(self, messages, db):
        sent = messages.send("alice", "Alice", MessageCreate(receiver_id="bob", content="hi!"))

        assert sent.sender_id == "alice"
        assert sent.is_read is False
        note = db.row("notifications", user_id="bob")
        assert note["message"] == "New message received from Alice"
        assert note["sender_id"] == "alice"

    def test_blank_content_is_rejected(self):
        with pytest.raises(ValueError):
            MessageCreate(receiver_id="bob", content="   ")

    def test_cannot_message_yourself(self, messages):
        with pytest.raises(HTTPException) as exc:
            messages.send("alice", "Alice", MessageCreate(receiver_id="alice", content="hi"))
        assert exc.value.status_code == 400

    def test_unknown_receiver(self, messages):
        with pytest.raises(HTTPException) as exc:
            messages.send("alice", "Alice", MessageCreate(receiver_id="ghost", content="hi"))
        assert exc.value.status_code == 404

    def test_message_survives_notification_failure(self, messages, db):
        db.fail("notifications", "insert")
        messages.send("alice", "Alice", MessageCreate(receiver_id="bob", content="hi"))
        assert len(db.rows("messages")) == 1


class TestConversation:
    def test_both_directions_oldest_first(self, messages, clock):
        first = messages.send("alice", "Alice", MessageCreate(receiver_id="bob", content="one"))
        clock.advance(minutes=1)
        second = messages.send("bob", "Bob", MessageCreate(receiver_id="alice", content="two"))
        clock.advance(minutes=1)
        messages.send("carol", "carol", MessageCreate(receiver_id="alice", content="elsewhere"))

        conversation = messages.conversation("alice", "bob")

        assert [m.id for m in conversation.messages] == [first.id, second.id]
        assert conversation.next_cursor == second.id

    def test_since_skips_seen_messages(self, messages, clock):
        first = messages.send("alice", "Alice", MessageCreate(receiver_id="bob", content="one"))
        clock.advance(minutes=1)
        second = messages.send("bob", "Bob", MessageCreate(receiver_id="alice", content="two"))

        conversation = messages.conversation("alice", "bob", since=first.id)

        assert [m.id for m in conversation.messages] == [second.id]

    def test_mark_conversation_read(self, messages, db):
        messages.send("bob", "Bob", MessageCreate(receiver_id="alice", content="one"))
        messages.send("alice", "Alice", MessageCreate(receiver_id="bob", content="two"))

        assert messages.mark_conversation_read("alice", "bob") == 1
        assert db.row("messages", sender_id="alice")["is_read"] is False
