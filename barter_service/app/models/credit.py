"""크레딧 도메인 모델.

유저 잔액은 User.credits 에 보관하고, 모든 이동은 append-only 로그인
CreditTransaction 으로 남긴다. 보너스/환불의 출처는 실제 유저가 아닌 "system" 이다.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from common.types.datetime import UtcDateTime

from .errors import ErrorCode


# 보너스/환불 트랜잭션의 from_user_id. 실제 유저가 아니며 차감되지 않는다.
SYSTEM_USER_ID = "system"


class CreditTransactionType(StrEnum):
    TRANSFER = "transfer"
    TRADE_COMPLETION = "trade_completion"
    BONUS = "bonus"
    REFUND = "refund"


class CreditTransaction(BaseModel):
    """크레딧 트랜잭션 로그 도메인 모델. 생성 후 수정/삭제하지 않는다."""

    model_config = ConfigDict(frozen=True)

    id: str
    from_user_id: str
    to_user_id: str
    amount: int = Field(gt=0)
    type: CreditTransactionType
    description: str
    related_trade_id: str | None = None
    related_proposal_id: str | None = None
    created_at: UtcDateTime


class CreditResult(BaseModel):
    """transfer / award_bonus / refund 결과."""

    success: bool
    error: ErrorCode | None = None
    message: str | None = None
    transaction: CreditTransaction | None = None

    @classmethod
    def ok(cls, transaction: CreditTransaction) -> "CreditResult":
        return cls(success=True, transaction=transaction)

    @classmethod
    def fail(cls, error: ErrorCode, message: str) -> "CreditResult":
        return cls(success=False, error=error, message=message)
