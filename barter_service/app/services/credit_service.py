"""크레딧 서비스 (원장).

유저 간 이체, 시스템 보너스/환불, 잔액 및 트랜잭션 이력 조회를 처리한다.
모든 변경은 "잔액 조회 -> 검증 -> 잔액 기록 -> 트랜잭션 기록" 순서로 원장 락 안에서
수행되며, 검증에 실패하면 아무 것도 쓰지 않고 실패 결과를 반환한다.
"""

from __future__ import annotations

import logging
import threading
import uuid

from fastapi import Depends
from pymongo.database import Database

from common.models.user import User
from common.mongo.client import get_database
from common.types.datetime import utc_now

from ..models.credit import (
    SYSTEM_USER_ID,
    CreditResult,
    CreditTransaction,
    CreditTransactionType,
)
from ..models.errors import ErrorCode
from ..repositories.credit_repository import CreditTransactionRepository
from ..repositories.interfaces import CreditTransactionRepositoryInterface
from .ledger_lock import get_ledger_lock
from .user_directory import UserDirectory, get_user_directory


logger = logging.getLogger(__name__)


class CreditService:
    """크레딧 관련 비즈니스 로직."""

    def __init__(
        self,
        directory: UserDirectory,
        transaction_repo: CreditTransactionRepositoryInterface,
        lock: threading.RLock | None = None,
    ) -> None:
        self._directory = directory
        self._transaction_repo = transaction_repo
        self._lock = lock or get_ledger_lock()

    def transfer(
        self,
        from_user_id: str,
        to_user_id: str,
        amount: int,
        description: str,
        related_trade_id: str | None = None,
        related_proposal_id: str | None = None,
    ) -> CreditResult:
        """from -> to 로 amount 만큼 이체한다.

        related_trade_id 가 있으면 trade_completion, 없으면 transfer 트랜잭션으로 남긴다.
        """
        with self._lock:
            from_user = self._directory.get(from_user_id)
            to_user = self._directory.get(to_user_id)
            if from_user is None or to_user is None:
                return self._reject(ErrorCode.NOT_FOUND, "User not found", from_user_id)
            if amount <= 0:
                return self._reject(ErrorCode.INVALID_AMOUNT, "Invalid amount", from_user_id)
            if from_user_id == to_user_id:
                return self._reject(
                    ErrorCode.INVALID_AMOUNT,
                    "Cannot transfer credits to the same user",
                    from_user_id,
                )
            if from_user.credits < amount:
                return self._reject(
                    ErrorCode.INSUFFICIENT_CREDITS, "Insufficient credits", from_user_id
                )

            now = utc_now()
            self._directory.upsert(
                from_user.model_copy(
                    update={"credits": from_user.credits - amount, "updated_at": now}
                )
            )
            self._directory.upsert(
                to_user.model_copy(
                    update={"credits": to_user.credits + amount, "updated_at": now}
                )
            )

            tx = self._transaction_repo.create(
                CreditTransaction(
                    id=str(uuid.uuid4()),
                    from_user_id=from_user_id,
                    to_user_id=to_user_id,
                    amount=amount,
                    type=(
                        CreditTransactionType.TRADE_COMPLETION
                        if related_trade_id
                        else CreditTransactionType.TRANSFER
                    ),
                    description=description,
                    related_trade_id=related_trade_id,
                    related_proposal_id=related_proposal_id,
                    created_at=now,
                )
            )

        logger.info(
            "credits transferred (from=%s, to=%s, amount=%d)",
            from_user_id,
            to_user_id,
            amount,
            extra={"transaction_id": tx.id, "amount": amount},
        )
        return CreditResult.ok(tx)

    def award_bonus(self, user_id: str, amount: int, description: str) -> CreditResult:
        """시스템 보너스 지급. system 쪽 잔액은 확인하지 않는다."""
        return self._credit_from_system(
            user_id, amount, description, CreditTransactionType.BONUS
        )

    def refund(
        self,
        user_id: str,
        amount: int,
        description: str,
        related_trade_id: str | None = None,
        related_proposal_id: str | None = None,
    ) -> CreditResult:
        """시스템 환불. 보너스와 같지만 refund 트랜잭션으로 남긴다."""
        return self._credit_from_system(
            user_id,
            amount,
            description,
            CreditTransactionType.REFUND,
            related_trade_id=related_trade_id,
            related_proposal_id=related_proposal_id,
        )

    def balance_of(self, user_id: str) -> int:
        user = self._directory.get(user_id)
        return user.credits if user is not None else 0

    def transactions_for(self, user_id: str) -> list[CreditTransaction]:
        """유저가 보내거나 받은 트랜잭션 (최신순)."""
        return self._transaction_repo.list_by_user(user_id)

    def all_transactions(self) -> list[CreditTransaction]:
        """전체 트랜잭션 로그 (최신순)."""
        return self._transaction_repo.list_all()

    def get_history(
        self, user_id: str, page: int, page_size: int
    ) -> tuple[list[CreditTransaction], int]:
        """transactions_for 를 페이지 단위로 자른다. page 는 1부터 시작."""
        items = self.transactions_for(user_id)
        start = (page - 1) * page_size
        return items[start : start + page_size], len(items)

    def _credit_from_system(
        self,
        user_id: str,
        amount: int,
        description: str,
        kind: CreditTransactionType,
        related_trade_id: str | None = None,
        related_proposal_id: str | None = None,
    ) -> CreditResult:
        with self._lock:
            user: User | None = self._directory.get(user_id)
            if user is None:
                return self._reject(ErrorCode.NOT_FOUND, "User not found", user_id)
            if amount <= 0:
                return self._reject(ErrorCode.INVALID_AMOUNT, "Invalid amount", user_id)

            now = utc_now()
            self._directory.upsert(
                user.model_copy(update={"credits": user.credits + amount, "updated_at": now})
            )
            tx = self._transaction_repo.create(
                CreditTransaction(
                    id=str(uuid.uuid4()),
                    from_user_id=SYSTEM_USER_ID,
                    to_user_id=user_id,
                    amount=amount,
                    type=kind,
                    description=description,
                    related_trade_id=related_trade_id,
                    related_proposal_id=related_proposal_id,
                    created_at=now,
                )
            )

        logger.info(
            "system credits granted (kind=%s, user_id=%s, amount=%d)",
            kind,
            user_id,
            amount,
            extra={"transaction_id": tx.id, "amount": amount},
        )
        return CreditResult.ok(tx)

    @staticmethod
    def _reject(error: ErrorCode, message: str, user_id: str) -> CreditResult:
        logger.warning(
            "credit operation rejected: %s (user_id=%s)",
            message,
            user_id,
            extra={"error_code": str(error)},
        )
        return CreditResult.fail(error, message)


def get_credit_transaction_repository(
    db: Database = Depends(get_database),
) -> CreditTransactionRepositoryInterface:
    """FastAPI DI용 CreditTransactionRepository 팩토리."""

    return CreditTransactionRepository(db)


def get_credit_service(
    directory: UserDirectory = Depends(get_user_directory),
    transaction_repo: CreditTransactionRepositoryInterface = Depends(
        get_credit_transaction_repository
    ),
) -> CreditService:
    """FastAPI DI용 CreditService 팩토리."""

    return CreditService(directory=directory, transaction_repo=transaction_repo)
