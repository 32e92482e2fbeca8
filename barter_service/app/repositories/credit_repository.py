"""크레딧 트랜잭션 레포지토리 구현체.

트랜잭션은 append-only 로그다. 이 레포지토리에는 수정/삭제 연산이 없다.
"""

from __future__ import annotations

from pymongo.database import Database

from common.mongo.client import CREDIT_TRANSACTIONS_COLLECTION

from .documents.credit_document import CreditTransactionDocument
from .interfaces import CreditTransactionRepositoryInterface
from ..models.credit import CreditTransaction


# 최신순. 같은 시각이면 나중에 삽입된 것이 먼저 온다.
_NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


class CreditTransactionRepository(CreditTransactionRepositoryInterface):
    """credit_transactions 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database[CREDIT_TRANSACTIONS_COLLECTION]

    def create(self, tx: CreditTransaction) -> CreditTransaction:
        """트랜잭션 로그 생성."""
        payload = CreditTransactionDocument.from_domain(tx).to_mongo_record()
        self._col.insert_one(payload)
        return CreditTransactionDocument.model_validate(payload).to_domain()

    def list_all(self) -> list[CreditTransaction]:
        cursor = self._col.find({}, sort=_NEWEST_FIRST)
        return [CreditTransactionDocument.model_validate(raw).to_domain() for raw in cursor]

    def list_by_user(self, user_id: str) -> list[CreditTransaction]:
        """유저가 보내거나 받은 트랜잭션 이력 조회."""
        cursor = self._col.find(
            {"$or": [{"from_user_id": user_id}, {"to_user_id": user_id}]},
            sort=_NEWEST_FIRST,
        )
        return [CreditTransactionDocument.model_validate(raw).to_domain() for raw in cursor]
