from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from barter_service.app.models.errors import ErrorCode
from barter_service.app.models.message import Message, conversation_id_for
from barter_service.tests.fakes import build_engine, build_user


BASE = datetime(2024, 1, 23, 10, 0, tzinfo=timezone.utc)


def _engine():
    return build_engine(
        users=[
            build_user("u1", name="Sarah"),
            build_user("u2", name="Mike"),
            build_user("u3", name="Ana"),
        ]
    )


def _message(
    message_id: str,
    sender_id: str,
    receiver_id: str,
    minutes: int,
    *,
    is_read: bool = False,
    related_proposal_id: str | None = None,
) -> Message:
    return Message(
        message_id=message_id,
        conversation_id=conversation_id_for(sender_id, receiver_id),
        sender_id=sender_id,
        sender_name=f"User {sender_id}",
        receiver_id=receiver_id,
        receiver_name=f"User {receiver_id}",
        content=f"message {message_id}",
        sent_at=BASE + timedelta(minutes=minutes),
        is_read=is_read,
        related_proposal_id=related_proposal_id,
    )


def test_conversation_id_is_the_same_for_both_directions() -> None:
    assert conversation_id_for("2", "1") == conversation_id_for("1", "2") == "conv_1_2"


def test_send_message_copies_profiles_and_trims_content() -> None:
    engine = _engine()

    result = engine.messages.send_message(
        "u1", "u2", "  Plumbing for pasta?  ", related_proposal_id="p1"
    )

    assert result.success
    sent = result.sent
    assert sent.conversation_id == "conv_u1_u2"
    assert (sent.sender_name, sent.receiver_name) == ("Sarah", "Mike")
    assert sent.content == "Plumbing for pasta?"
    assert sent.is_read is False
    assert sent.related_proposal_id == "p1"
    assert engine.message_repo.messages == [sent]


@pytest.mark.parametrize(
    ("sender", "receiver", "content", "error"),
    [
        ("u1", "u2", "   ", ErrorCode.VALIDATION_ERROR),
        ("u1", "u1", "hello me", ErrorCode.VALIDATION_ERROR),
        ("u1", "ghost", "hello?", ErrorCode.NOT_FOUND),
        ("ghost", "u1", "hello?", ErrorCode.NOT_FOUND),
    ],
)
def test_send_message_rejections_store_nothing(
    sender: str, receiver: str, content: str, error: ErrorCode
) -> None:
    engine = _engine()

    result = engine.messages.send_message(sender, receiver, content)

    assert not result.success
    assert result.error == error
    assert engine.message_repo.messages == []


def test_conversations_are_grouped_and_sorted_by_last_activity() -> None:
    engine = _engine()
    repo = engine.message_repo
    repo.insert(_message("1", "u2", "u1", 0, is_read=True, related_proposal_id="p1"))
    repo.insert(_message("2", "u1", "u2", 10, is_read=True))
    repo.insert(_message("3", "u2", "u1", 20))
    repo.insert(_message("4", "u3", "u1", 5))
    repo.insert(_message("5", "u3", "u1", 6))
    repo.insert(_message("6", "u2", "u3", 30))

    conversations = engine.messages.conversations_for("u1")

    assert [c.conversation_id for c in conversations] == ["conv_u1_u2", "conv_u1_u3"]
    with_mike, with_ana = conversations
    assert with_mike.last_message.message_id == "3"
    assert with_mike.last_activity == BASE + timedelta(minutes=20)
    assert with_mike.unread_count == 1
    assert with_mike.related_proposal_id == "p1"
    assert [p.id for p in with_mike.participants] == ["u1", "u2"]
    assert with_mike.participants[0].name == "Sarah"
    assert with_ana.unread_count == 2


def test_unread_count_ignores_sent_messages() -> None:
    engine = _engine()
    engine.messages.send_message("u1", "u2", "hi Mike")
    engine.messages.send_message("u3", "u2", "hi Mike, it's Ana")
    engine.messages.send_message("u2", "u1", "hi Sarah")

    assert engine.messages.unread_count("u2") == 2
    assert engine.messages.unread_count("u1") == 1
    assert engine.messages.conversations_for("u1")[0].unread_count == 1


def test_mark_as_read_only_touches_messages_received_in_that_conversation() -> None:
    engine = _engine()
    repo = engine.message_repo
    repo.insert(_message("1", "u2", "u1", 0))
    repo.insert(_message("2", "u1", "u2", 1))
    repo.insert(_message("3", "u3", "u1", 2))

    marked = engine.messages.mark_as_read("conv_u1_u2", "u1")

    assert marked == 1
    assert engine.messages.unread_count("u1") == 1
    assert engine.messages.unread_count("u2") == 1
    assert engine.messages.mark_as_read("conv_u1_u2", "u1") == 0


def test_messages_for_conversation_are_in_sent_order() -> None:
    engine = _engine()
    repo = engine.message_repo
    repo.insert(_message("late", "u1", "u2", 30))
    repo.insert(_message("early", "u2", "u1", 0))
    repo.insert(_message("other", "u3", "u1", 10))

    thread = engine.messages.messages_for_conversation("conv_u1_u2")

    assert [m.message_id for m in thread] == ["early", "late"]
