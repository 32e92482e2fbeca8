from __future__ import annotations

from pymongo.database import Database

from common.models.user import User
from common.mongo.client import USERS_COLLECTION

from .documents.user_document import UserDocument
from .interfaces import UserRepositoryInterface


class UserRepository(UserRepositoryInterface):
    """users 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database[USERS_COLLECTION]

    @staticmethod
    def _from_document(doc: dict) -> User:
        return UserDocument.model_validate(doc).to_domain()

    def find_by_id(self, user_id: str) -> User | None:
        doc = self._col.find_one({"user_id": user_id})
        if not doc:
            return None
        return self._from_document(doc)

    def find_by_email(self, email: str) -> User | None:
        doc = self._col.find_one({"email": email})
        if not doc:
            return None
        return self._from_document(doc)

    def list_all(self) -> list[User]:
        cursor = self._col.find({}, sort=[("joined_at", 1), ("_id", 1)])
        return [self._from_document(doc) for doc in cursor]

    def upsert(self, user: User) -> User:
        payload = UserDocument.from_domain(user).to_mongo_record()
        self._col.replace_one({"user_id": user.user_id}, payload, upsert=True)
        return self._from_document(payload)
