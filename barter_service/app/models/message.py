"""유저 간 메시지 도메인 모델.

대화(Conversation)는 저장하지 않는다. 같은 conversation_id 를 가진 메시지를 모아
읽을 때마다 만든다. 두 유저 사이의 conversation_id 는 누가 먼저 보냈는지와 무관하게 같다.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from common.types.datetime import UtcDateTime

from .errors import ErrorCode


def conversation_id_for(user_a: str, user_b: str) -> str:
    """두 유저 id 를 정렬해 대화 id 를 만든다. 예: conv_1_2"""
    return "conv_" + "_".join(sorted((user_a, user_b)))


class Message(BaseModel):
    message_id: str
    conversation_id: str
    sender_id: str
    sender_name: str
    sender_avatar: str | None = None
    receiver_id: str
    receiver_name: str
    receiver_avatar: str | None = None
    content: str
    sent_at: UtcDateTime
    is_read: bool = False
    related_proposal_id: str | None = None


class ConversationParticipant(BaseModel):
    id: str
    name: str
    avatar: str | None = None


class Conversation(BaseModel):
    """조회하는 유저 기준의 대화 요약. participants[0] 이 조회하는 유저다."""

    conversation_id: str
    participants: list[ConversationParticipant] = Field(default_factory=list)
    last_message: Message | None = None
    last_activity: UtcDateTime
    unread_count: int = 0
    related_proposal_id: str | None = None


class MessageResult(BaseModel):
    """send_message 결과. message 는 실패 사유, sent 는 저장된 메시지다."""

    success: bool
    error: ErrorCode | None = None
    message: str | None = None
    sent: Message | None = None

    @classmethod
    def ok(cls, sent: Message) -> "MessageResult":
        return cls(success=True, sent=sent)

    @classmethod
    def fail(cls, error: ErrorCode, message: str) -> "MessageResult":
        return cls(success=False, error=error, message=message)
