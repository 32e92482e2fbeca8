"""엔진이 값으로 돌려주는 비즈니스 실패 코드.

잔액 부족, 대상 없음, 잘못된 상태 전이 같은 예상 가능한 실패는 예외로 던지지 않고
결과 객체(CreditResult, ProposalResult)의 error 필드로 보고한다.
저장소 장애 같은 예상하지 못한 실패만 예외로 전파된다.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
    INSUFFICIENT_CREDITS = "insufficient_credits"
    INVALID_AMOUNT = "invalid_amount"
    VALIDATION_ERROR = "validation_error"
    CREDIT_TRANSFER_FAILED = "credit_transfer_failed"
    NOT_PARTICIPANT = "not_participant"
