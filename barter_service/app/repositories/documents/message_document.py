from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    MongoDateTime,
    build_document_data_from_domain,
)

from ...models.message import Message


class MessageDocument(BaseDocument):
    """MongoDB messages 컬렉션 도큐먼트 모델."""

    message_id: str
    conversation_id: str
    sender_id: str
    sender_name: str
    sender_avatar: str | None = None
    receiver_id: str
    receiver_name: str
    receiver_avatar: str | None = None
    content: str
    sent_at: MongoDateTime
    is_read: bool = False
    related_proposal_id: str | None = None

    @classmethod
    def from_domain(cls, message: Message) -> "MessageDocument":
        return cls.model_validate(build_document_data_from_domain(message))

    def to_domain(self) -> Message:
        return Message.model_validate(self.to_domain_data())
