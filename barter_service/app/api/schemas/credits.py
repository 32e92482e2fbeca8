from __future__ import annotations

from pydantic import BaseModel

from common.types.datetime import UtcDateTime

from ...models.credit import CreditTransaction, CreditTransactionType


class TransferRequest(BaseModel):
    """유저 간 크레딧 이체 요청. amount 검증은 원장이 한다."""

    from_user_id: str
    to_user_id: str
    amount: int
    description: str = "Credit transfer"
    related_trade_id: str | None = None
    related_proposal_id: str | None = None


class GrantRequest(BaseModel):
    """시스템 보너스 지급 요청."""

    amount: int
    description: str = "Bonus credits"


class RefundRequest(BaseModel):
    """시스템 환불 요청."""

    amount: int
    description: str = "Refund"
    related_trade_id: str | None = None
    related_proposal_id: str | None = None


class BalanceResponse(BaseModel):
    user_id: str
    balance: int


class CreditTransactionResponse(BaseModel):
    id: str
    from_user_id: str
    to_user_id: str
    amount: int
    type: CreditTransactionType
    description: str
    related_trade_id: str | None
    related_proposal_id: str | None
    created_at: UtcDateTime

    @classmethod
    def from_domain(cls, tx: CreditTransaction) -> "CreditTransactionResponse":
        return cls(**tx.model_dump())
