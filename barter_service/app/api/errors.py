"""엔진 결과 객체의 ErrorCode 를 HTTP 오류로 바꾼다."""

from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException, status

from ..models.credit import CreditResult, CreditTransaction
from ..models.errors import ErrorCode
from ..models.message import Message, MessageResult
from ..models.proposal import BarterProposal, ProposalResult


STATUS_BY_ERROR_CODE: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.INSUFFICIENT_CREDITS: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorCode.CREDIT_TRANSFER_FAILED: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorCode.INVALID_AMOUNT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.NOT_PARTICIPANT: status.HTTP_403_FORBIDDEN,
}


def raise_error(
    error: ErrorCode, message: str | None, *, cause: ErrorCode | None = None
) -> NoReturn:
    detail: dict[str, str] = {"code": str(error), "message": message or str(error)}
    if cause is not None:
        detail["cause"] = str(cause)
    raise HTTPException(
        status_code=STATUS_BY_ERROR_CODE.get(error, status.HTTP_400_BAD_REQUEST),
        detail=detail,
    )


def unwrap_proposal(result: ProposalResult) -> BarterProposal:
    if result.error is not None or result.proposal is None:
        raise_error(
            result.error or ErrorCode.NOT_FOUND, result.message, cause=result.cause
        )
    return result.proposal


def unwrap_transaction(result: CreditResult) -> CreditTransaction:
    if not result.success or result.transaction is None:
        raise_error(result.error or ErrorCode.NOT_FOUND, result.message)
    return result.transaction


def unwrap_message(result: MessageResult) -> Message:
    if not result.success or result.sent is None:
        raise_error(result.error or ErrorCode.NOT_FOUND, result.message)
    return result.sent
