"""크레딧 트랜잭션 MongoDB 도큐먼트."""

from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    MongoDateTime,
    build_document_data_from_domain,
)

from ...models.credit import CreditTransaction


class CreditTransactionDocument(BaseDocument):
    """MongoDB credit_transactions 컬렉션 도큐먼트 모델.

    도메인의 id 는 transaction_id 로 저장해 Mongo 의 _id 와 구분한다.
    """

    transaction_id: str
    from_user_id: str
    to_user_id: str
    amount: int
    type: str
    description: str
    related_trade_id: str | None = None
    related_proposal_id: str | None = None
    created_at: MongoDateTime

    @classmethod
    def from_domain(cls, tx: CreditTransaction) -> "CreditTransactionDocument":
        data = build_document_data_from_domain(tx)
        data["transaction_id"] = data.pop("id")
        return cls.model_validate(data)

    def to_domain(self) -> CreditTransaction:
        data = self.to_domain_data()
        data["id"] = data.pop("transaction_id")
        return CreditTransaction.model_validate(data)
