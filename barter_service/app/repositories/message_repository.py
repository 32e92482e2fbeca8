from __future__ import annotations

from pymongo.database import Database

from common.mongo.client import MESSAGES_COLLECTION

from .documents.message_document import MessageDocument
from .interfaces import MessageRepositoryInterface
from ..models.message import Message


# 보낸 순. sent_at 이 같으면 삽입 순(_id)으로 정렬한다.
_SENT_ORDER = [("sent_at", 1), ("_id", 1)]


class MessageRepository(MessageRepositoryInterface):
    """messages 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database[MESSAGES_COLLECTION]

    @staticmethod
    def _from_document(doc: dict) -> Message:
        return MessageDocument.model_validate(doc).to_domain()

    def insert(self, message: Message) -> Message:
        payload = MessageDocument.from_domain(message).to_mongo_record()
        self._col.insert_one(payload)
        return self._from_document(payload)

    def list_all(self) -> list[Message]:
        return [self._from_document(doc) for doc in self._col.find({}, sort=_SENT_ORDER)]

    def list_for_user(self, user_id: str) -> list[Message]:
        cursor = self._col.find(
            {"$or": [{"sender_id": user_id}, {"receiver_id": user_id}]},
            sort=_SENT_ORDER,
        )
        return [self._from_document(doc) for doc in cursor]

    def list_by_conversation(self, conversation_id: str) -> list[Message]:
        cursor = self._col.find({"conversation_id": conversation_id}, sort=_SENT_ORDER)
        return [self._from_document(doc) for doc in cursor]

    def mark_read(self, conversation_id: str, receiver_id: str) -> int:
        result = self._col.update_many(
            {
                "conversation_id": conversation_id,
                "receiver_id": receiver_id,
                "is_read": False,
            },
            {"$set": {"is_read": True}},
        )
        return result.modified_count

    def count_unread(self, receiver_id: str) -> int:
        return self._col.count_documents({"receiver_id": receiver_id, "is_read": False})
