"""크레딧 원장 API 라우터."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..errors import unwrap_transaction
from ..schemas.common import PaginatedResponse
from ..schemas.credits import (
    BalanceResponse,
    CreditTransactionResponse,
    GrantRequest,
    RefundRequest,
    TransferRequest,
)
from ...services.credit_service import CreditService, get_credit_service
from ...services.user_directory import UserDirectory, get_user_directory


router = APIRouter(prefix="/credits", tags=["credits"])


@router.get("/{user_id}/balance")
def get_balance(
    user_id: str,
    credit_service: Annotated[CreditService, Depends(get_credit_service)],
    directory: Annotated[UserDirectory, Depends(get_user_directory)],
) -> BalanceResponse:
    """유저 잔액 조회. 없는 유저는 404."""
    if directory.get(user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return BalanceResponse(user_id=user_id, balance=credit_service.balance_of(user_id))


@router.get("/{user_id}/history")
def get_credit_history(
    user_id: str,
    credit_service: Annotated[CreditService, Depends(get_credit_service)],
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> PaginatedResponse[CreditTransactionResponse]:
    """유저가 보내거나 받은 트랜잭션 이력 (최신순)."""
    items, total = credit_service.get_history(user_id, page, page_size)
    return PaginatedResponse(
        items=[CreditTransactionResponse.from_domain(tx) for tx in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("/transfer", status_code=status.HTTP_201_CREATED)
def transfer_credits(
    req: TransferRequest,
    credit_service: Annotated[CreditService, Depends(get_credit_service)],
) -> CreditTransactionResponse:
    """유저 간 이체. 잔액 부족 시 402."""
    result = credit_service.transfer(
        req.from_user_id,
        req.to_user_id,
        req.amount,
        req.description,
        related_trade_id=req.related_trade_id,
        related_proposal_id=req.related_proposal_id,
    )
    return CreditTransactionResponse.from_domain(unwrap_transaction(result))


@router.post("/{user_id}/bonus", status_code=status.HTTP_201_CREATED)
def award_bonus(
    user_id: str,
    req: GrantRequest,
    credit_service: Annotated[CreditService, Depends(get_credit_service)],
) -> CreditTransactionResponse:
    """시스템 보너스 지급."""
    result = credit_service.award_bonus(user_id, req.amount, req.description)
    return CreditTransactionResponse.from_domain(unwrap_transaction(result))


@router.post("/{user_id}/refund", status_code=status.HTTP_201_CREATED)
def refund_credits(
    user_id: str,
    req: RefundRequest,
    credit_service: Annotated[CreditService, Depends(get_credit_service)],
) -> CreditTransactionResponse:
    """시스템 환불."""
    result = credit_service.refund(
        user_id,
        req.amount,
        req.description,
        related_trade_id=req.related_trade_id,
        related_proposal_id=req.related_proposal_id,
    )
    return CreditTransactionResponse.from_domain(unwrap_transaction(result))
